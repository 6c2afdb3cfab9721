"""
tests/test_end_to_end.py -- Full user journey through the real ASGI stack.

register -> login -> create "buy milk" -> list (completed=false) ->
patch completed=true -> get (completed=true) -> delete -> 404 everywhere.
"""

from __future__ import annotations

from conftest import DEFAULT_PASSWORD, bearer


def test_task_lifecycle(client) -> None:
    resp = client.post("/auth/register", json={"email": "a@x.test", "password": DEFAULT_PASSWORD, "name": "A"})
    assert resp.status_code == 201

    resp = client.post("/auth/login", json={"email": "a@x.test", "password": DEFAULT_PASSWORD})
    assert resp.status_code == 200
    headers = bearer(resp.json()["token"])

    resp = client.post("/tasks", json={"title": "buy milk"}, headers=headers)
    assert resp.status_code == 201
    task_id = resp.json()["id"]

    tasks = client.get("/tasks", headers=headers).json()
    assert [(t["id"], t["title"], t["completed"]) for t in tasks] == [(task_id, "buy milk", False)]

    resp = client.patch(f"/tasks/{task_id}", json={"completed": True}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["completed"] is True

    resp = client.get(f"/tasks/{task_id}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["completed"] is True

    resp = client.delete(f"/tasks/{task_id}", headers=headers)
    assert resp.status_code == 204
    assert resp.content == b""

    assert client.get(f"/tasks/{task_id}", headers=headers).status_code == 404
    assert client.patch(f"/tasks/{task_id}", json={"completed": False}, headers=headers).status_code == 404
    assert client.delete(f"/tasks/{task_id}", headers=headers).status_code == 404
    assert client.get("/tasks", headers=headers).json() == []
