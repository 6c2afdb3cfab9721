"""
API request and response models for the TasksCompleted REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
tasks/models.py, which own the internal domain representation. Route
handlers map between the two.

Response models serialize with camelCase aliases (createdAt, userId) to match
what the web client expects; request models use plain field names.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from auth.models import Role, User
from tasks.models import Task

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /auth/register and POST /users.

    Empty strings pass shape validation here; auth/service.py rejects them
    with a 400 so the dev endpoint and register share one rule.
    """

    email: str = Field(max_length=255)
    password: str = Field(max_length=255)
    name: str = Field(max_length=255)


class LoginRequest(BaseModel):
    email: str = Field(max_length=255)
    password: str = Field(max_length=255)


class TaskCreate(BaseModel):
    """Request body for POST /tasks.

    Any owner/userId field in the body is ignored (extra="ignore"): the owner
    is always the authenticated caller.
    """

    model_config = ConfigDict(extra="ignore")

    title: str


class TaskPatch(BaseModel):
    """Request body for PATCH /tasks/{id}. Both fields optional; tasks/policy.py
    rejects a body that sets neither."""

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    completed: Optional[bool] = None


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class _CamelModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class UserResponse(_CamelModel):
    """Public view of a user. There is no password field to leak."""

    id: int
    email: str
    name: str
    role: Role
    created_at: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            role=user.role,
            created_at=user.created_at or "",
        )


class AuthResponse(_CamelModel):
    """Response for register and login."""

    user: UserResponse
    token: str


class TaskResponse(_CamelModel):
    id: int
    title: str
    completed: bool
    user_id: int
    created_at: str
    updated_at: str

    @classmethod
    def from_task(cls, task: Task) -> "TaskResponse":
        return cls(
            id=task.id,
            title=task.title,
            completed=task.completed,
            user_id=task.owner_id,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    ok: bool
    db: bool
    error: Optional[str] = None
