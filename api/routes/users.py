"""
api/routes/users.py -- User listing and the dev-only create endpoint.

Routes:
  GET  /users  -- list users (public, never includes password hashes)
  POST /users  -- create a user without issuing a token; dev_router only

dev_router is mounted by create_app() only when ENABLE_DEV_ENDPOINTS=true.
With the flag off the route does not exist and POST /users is a 404/405.
"""

from __future__ import annotations

from fastapi import APIRouter, Request

from api.models import RegisterRequest, UserResponse
from auth.service import create_user
from auth.store import UserStore

router = APIRouter()
dev_router = APIRouter()


@router.get("/users", response_model=list[UserResponse])
def list_users(request: Request) -> list[UserResponse]:
    """Return every user with id, email, name, role and createdAt."""
    user_store: UserStore = request.app.state.user_store
    return [UserResponse.from_user(u) for u in user_store.list_users()]


@dev_router.post("/users", response_model=UserResponse, status_code=201)
def create_user_dev(request: Request, body: RegisterRequest) -> UserResponse:
    """Create a USER account directly. Development only.

    The password is hashed exactly as in registration; only the token is
    skipped.
    """
    user_store: UserStore = request.app.state.user_store
    user = create_user(user_store, request.app.state.settings, body.email, body.password, body.name)
    return UserResponse.from_user(user)
