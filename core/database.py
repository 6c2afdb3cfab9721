"""
core/database.py -- Schema and engine lifecycle for the credential store.

Pattern: one explicitly constructed Database handle per process. The app
lifespan opens it at startup, stores it on app.state, and closes it on
shutdown. Repositories (auth/store.py, tasks/store.py) receive its engine;
nothing reaches a module-level connection.

Security:
  All queries use bound parameters. No f-strings in SQL.

Concurrency:
  SQLAlchemy pools connections; each repository call checks one out for the
  duration of a single statement (or a short transaction). Row-level
  serialization and the unique-email constraint are the database's job.

Timeouts:
  db_timeout_seconds bounds pool checkout, and for SQLite also the busy
  timeout, so a wedged store cannot hold a request forever.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    event,
    text,
)
from sqlalchemy.engine import Engine

logger = logging.getLogger("taskscompleted.database")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("password", String(255), nullable=False),  # bcrypt hash, never plaintext
    Column("name", String(255), nullable=False),
    Column("role", String(16), nullable=False, server_default="USER"),
    Column("created_at", String(32), nullable=False),
)

tasks = Table(
    "tasks",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(255), nullable=False),
    Column("completed", Boolean, nullable=False, server_default="0"),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False, index=True),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# SQLite pragmas
# ---------------------------------------------------------------------------


def _set_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    """Enable WAL and foreign key enforcement.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool. foreign_keys is off by default in SQLite, which
    would let a task reference a user id that does not exist.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Handle
# ---------------------------------------------------------------------------


class Database:
    """Owns the SQLAlchemy engine for the lifetime of the application.

    Usage:
        db = Database("sqlite:///./taskscompleted.db")
        db.ping()
        db.close()
    """

    def __init__(self, db_url: str, timeout: float = 10.0) -> None:
        is_sqlite = db_url.startswith("sqlite")
        connect_args: dict = {}
        engine_kwargs: dict = {}
        if is_sqlite:
            connect_args["check_same_thread"] = False
            connect_args["timeout"] = timeout
        else:
            engine_kwargs["pool_pre_ping"] = True
            engine_kwargs["pool_timeout"] = timeout
        self.url = db_url
        self.engine: Engine = create_engine(db_url, connect_args=connect_args, **engine_kwargs)
        if is_sqlite:
            event.listen(self.engine, "connect", _set_sqlite_pragmas)
        metadata.create_all(self.engine)
        logger.info("Database ready (%s)", self.engine.url.render_as_string(hide_password=True))

    def ping(self) -> None:
        """Run a trivial query. Raises on any connectivity failure."""
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def close(self) -> None:
        self.engine.dispose()
