"""
api/routes/tasks.py -- Task CRUD for the authenticated caller.

Routes:
  GET    /tasks           -- caller's tasks, newest first
  POST   /tasks           -- create a task owned by the caller
  GET    /tasks/{task_id} -- one owned task
  PATCH  /tasks/{task_id} -- update title and/or completed
  DELETE /tasks/{task_id} -- delete an owned task (204)

Every route takes the caller's Identity from get_current_identity and hands
it to tasks/policy.py, which scopes each store call to that owner. A task
that exists but belongs to someone else is a 404, same as a missing one.

A non-integer or out-of-range task_id fails FastAPI path validation, which
api/main.py maps to 400.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request, Response

from api.models import TaskCreate, TaskPatch, TaskResponse
from auth.dependencies import get_current_identity
from auth.models import Identity
from tasks import policy
from tasks.store import TaskStore

router = APIRouter()

# Upper bound is the SQLite INTEGER range; larger ids cannot be bound.
TaskId = Annotated[int, Path(ge=1, le=2**63 - 1)]


def _store(request: Request) -> TaskStore:
    return request.app.state.task_store


@router.get("/tasks", response_model=list[TaskResponse])
def list_tasks(request: Request, identity: Identity = Depends(get_current_identity)) -> list[TaskResponse]:
    return [TaskResponse.from_task(t) for t in policy.list_tasks(_store(request), identity)]


@router.post("/tasks", response_model=TaskResponse, status_code=201)
def create_task(
    request: Request,
    body: TaskCreate,
    identity: Identity = Depends(get_current_identity),
) -> TaskResponse:
    """Create a task. The owner is always the caller."""
    task = policy.create_task(_store(request), identity, body.title)
    return TaskResponse.from_task(task)


@router.get("/tasks/{task_id}", response_model=TaskResponse)
def get_task(request: Request, task_id: TaskId, identity: Identity = Depends(get_current_identity)) -> TaskResponse:
    return TaskResponse.from_task(policy.get_task(_store(request), identity, task_id))


@router.patch("/tasks/{task_id}", response_model=TaskResponse)
def update_task(
    request: Request,
    task_id: TaskId,
    body: TaskPatch,
    identity: Identity = Depends(get_current_identity),
) -> TaskResponse:
    """Partially update a task. A body with neither title nor completed is a 400."""
    task = policy.update_task(_store(request), identity, task_id, title=body.title, completed=body.completed)
    return TaskResponse.from_task(task)


@router.delete("/tasks/{task_id}", status_code=204)
def delete_task(request: Request, task_id: TaskId, identity: Identity = Depends(get_current_identity)) -> Response:
    policy.delete_task(_store(request), identity, task_id)
    return Response(status_code=204)
