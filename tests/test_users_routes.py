"""
tests/test_users_routes.py -- GET /users and the dev-only POST /users.

Covers:
  - GET /users lists public fields only, no password hashes
  - POST /users is absent unless ENABLE_DEV_ENDPOINTS is on
  - With the flag on: 201, hashed password, 400 missing fields, 409 duplicate
  - store failure on GET /users: opaque 500
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from api.main import create_app
from auth.store import UserStore
from conftest import DEFAULT_PASSWORD, make_settings, register


@pytest.fixture
def dev_client(database):
    app = create_app(make_settings(enable_dev_endpoints=True), database=database)
    with TestClient(app) as c:
        yield c


def test_list_users_public_fields_only(client) -> None:
    register(client, "ana@x.test", name="Ana")
    register(client, "ben@x.test", name="Ben")
    resp = client.get("/users")
    assert resp.status_code == 200
    users = resp.json()
    assert [u["email"] for u in users] == ["ana@x.test", "ben@x.test"]
    for u in users:
        assert set(u) == {"id", "email", "name", "role", "createdAt"}
    assert "$2" not in resp.text


def test_dev_create_disabled_by_default(client) -> None:
    resp = client.post("/users", json={"email": "a@x.test", "password": "pw", "name": "A"})
    assert resp.status_code in (404, 405)


def test_dev_create_user(dev_client, user_store) -> None:
    resp = dev_client.post("/users", json={"email": "dev@x.test", "password": DEFAULT_PASSWORD, "name": "Dev"})
    assert resp.status_code == 201, resp.text
    data = resp.json()
    assert set(data) == {"id", "email", "name", "role", "createdAt"}
    assert "token" not in data
    stored = user_store.get_by_email("dev@x.test")
    assert stored.hashed_password != DEFAULT_PASSWORD


def test_dev_create_missing_fields_is_400(dev_client) -> None:
    resp = dev_client.post("/users", json={"email": "dev@x.test", "name": "Dev"})
    assert resp.status_code == 400


def test_dev_create_duplicate_is_409(dev_client) -> None:
    body = {"email": "dev@x.test", "password": DEFAULT_PASSWORD, "name": "Dev"}
    assert dev_client.post("/users", json=body).status_code == 201
    assert dev_client.post("/users", json=body).status_code == 409


def test_dev_created_user_can_log_in(dev_client) -> None:
    dev_client.post("/users", json={"email": "dev@x.test", "password": DEFAULT_PASSWORD, "name": "Dev"})
    resp = dev_client.post("/auth/login", json={"email": "dev@x.test", "password": DEFAULT_PASSWORD})
    assert resp.status_code == 200


def test_list_users_store_error_is_opaque_500(client, monkeypatch) -> None:
    def _down(*args, **kwargs):
        raise OperationalError("SELECT users", {}, Exception("secret-dsn down"))

    monkeypatch.setattr(UserStore, "list_users", _down)
    resp = client.get("/users")
    assert resp.status_code == 500
    assert resp.json()["error"]["code"] == "internal_error"
    assert "secret-dsn" not in resp.text
