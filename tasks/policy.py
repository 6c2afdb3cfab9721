"""
tasks/policy.py -- Resource access policy for tasks.

Every operation takes the caller's Identity and scopes the store call to
identity.subject_id:

  - create: owner is always the caller; there is no owner parameter.
  - get / update / delete: allowed iff the (id, owner) lookup matches.
    Otherwise NotFoundError -- never a "forbidden" -- so a caller cannot
    learn that someone else's task id exists.
  - update: title and/or completed; neither is a client error. Titles are
    trimmed and must be non-empty.
"""

from __future__ import annotations

from typing import Optional

from auth.models import Identity
from core.errors import InputValidationError, InternalError, NotFoundError
from tasks.models import Task
from tasks.store import TaskStore

MAX_TITLE_LENGTH = 255

_NOT_FOUND = "Task not found."


def clean_title(title: str) -> str:
    """Strip surrounding whitespace; reject empty or overlong titles."""
    cleaned = (title or "").strip()
    if not cleaned:
        raise InputValidationError("title is required and must not be blank.")
    if len(cleaned) > MAX_TITLE_LENGTH:
        raise InputValidationError(f"title must be at most {MAX_TITLE_LENGTH} characters.")
    return cleaned


def list_tasks(store: TaskStore, identity: Identity) -> list[Task]:
    return store.list_tasks(owner_id=identity.subject_id)


def create_task(store: TaskStore, identity: Identity, title: str) -> Task:
    task = Task(title=clean_title(title), owner_id=identity.subject_id)
    task_id = store.create_task(task)
    created = store.get_task(task_id, owner_id=identity.subject_id)
    if created is None:
        raise InternalError("Task not found after write.")
    return created


def get_task(store: TaskStore, identity: Identity, task_id: int) -> Task:
    task = store.get_task(task_id, owner_id=identity.subject_id)
    if task is None:
        raise NotFoundError(_NOT_FOUND)
    return task


def update_task(
    store: TaskStore,
    identity: Identity,
    task_id: int,
    title: Optional[str] = None,
    completed: Optional[bool] = None,
) -> Task:
    """Apply a partial update to an owned task and return the new state."""
    updates: dict = {}
    if title is not None:
        updates["title"] = clean_title(title)
    if completed is not None:
        updates["completed"] = bool(completed)
    if not updates:
        raise InputValidationError("Provide title and/or completed.")

    if not store.update_task(task_id, owner_id=identity.subject_id, **updates):
        raise NotFoundError(_NOT_FOUND)
    return get_task(store, identity, task_id)


def delete_task(store: TaskStore, identity: Identity, task_id: int) -> None:
    if not store.delete_task(task_id, owner_id=identity.subject_id):
        raise NotFoundError(_NOT_FOUND)
