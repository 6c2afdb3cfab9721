"""
auth/store.py -- SQLAlchemy Core persistence layer for users.

Pattern: Repository + Data Mapper (same as tasks/store.py).
UserStore is the repository; _row_to_user is the mapper.
Route and service code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  Email uniqueness is a UNIQUE constraint in the schema. create_user() lets
  sqlalchemy.exc.IntegrityError propagate so callers can map a concurrent
  duplicate insert to 409 the same way as a pre-checked duplicate.

Layer rule: no imports from api/ or tasks/.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.engine import Engine

from auth.models import User
from core.database import now_iso, users


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore(database.engine)
        store.create_user(User(email="a@b.c", name="A", hashed_password=hash_password("secret")))
        user = store.get_by_email("a@b.c")
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def create_user(self, user: User) -> int:
        """Insert a new user and return its assigned database ID.

        Raises sqlalchemy.exc.IntegrityError if the email already exists.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                users.insert().values(
                    email=user.email,
                    password=user.hashed_password,
                    name=user.name,
                    role=user.role.value,
                    created_at=user.created_at or now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by exact email (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(users.select().where(users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: int) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(users.select().where(users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def email_exists(self, email: str) -> bool:
        with self.engine.connect() as conn:
            row = conn.execute(select(users.c.id).where(users.c.email == email)).fetchone()
        return row is not None

    def list_users(self) -> list[User]:
        """Return all users in creation order."""
        with self.engine.connect() as conn:
            rows = conn.execute(users.select().order_by(users.c.id)).fetchall()
        return [_row_to_user(r) for r in rows]


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        name=row.name,
        hashed_password=row.password,
        role=row.role,
        created_at=row.created_at,
    )
