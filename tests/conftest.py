"""
tests/conftest.py -- Shared test fixtures for TasksCompleted.

This module provides:
  - make_settings(): explicit Settings for tests (fast bcrypt, no rate limit)
  - database: a temp-file SQLite Database, closed after the test
  - user_store / task_store: repositories on that database
  - client: TestClient around create_app(settings, database)
  - register(): helper that registers a user through the API

Design: a real SQLite file under tmp_path rather than ':memory:' because
TestClient runs sync route handlers in a thread pool. A file DB gives every
pooled connection the same schema and data. Each test gets a fresh file, so
no test depends on another's rows.

Settings are built explicitly instead of read from the environment, so a
developer's .env or SECRET_KEY never leaks into the suite.
"""

from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from auth.store import UserStore
from core.config import Settings
from core.database import Database
from tasks.store import TaskStore

TEST_SECRET = "test-signing-secret-0123456789abcdef"
DEFAULT_PASSWORD = "correct horse battery"


def make_settings(**overrides) -> Settings:
    values = {
        "secret_key": TEST_SECRET,
        "database_url": "sqlite://",
        "bcrypt_rounds": 4,  # bcrypt minimum -- keeps the suite fast
        "rate_limit_enabled": False,
        "cors_origins": "http://localhost:3000",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def database(tmp_path) -> Generator[Database, None, None]:
    db = Database(f"sqlite:///{tmp_path / 'test.db'}")
    yield db
    db.close()


@pytest.fixture
def user_store(database: Database) -> UserStore:
    return UserStore(database.engine)


@pytest.fixture
def task_store(database: Database) -> TaskStore:
    return TaskStore(database.engine)


@pytest.fixture
def client(settings: Settings, database: Database) -> Generator[TestClient, None, None]:
    """TestClient over the real app with an injected test database."""
    app = create_app(settings, database=database)
    with TestClient(app) as c:
        yield c


def register(
    client: TestClient,
    email: str,
    password: str = DEFAULT_PASSWORD,
    name: str = "Test User",
) -> tuple[str, dict]:
    """Register through POST /auth/register and return (token, user json)."""
    resp = client.post("/auth/register", json={"email": email, "password": password, "name": name})
    assert resp.status_code == 201, f"register failed: {resp.status_code} {resp.text}"
    data = resp.json()
    return data["token"], data["user"]


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
