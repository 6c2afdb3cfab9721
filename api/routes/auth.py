"""
api/routes/auth.py -- Registration, login and current-user endpoints.

Routes:
  POST /auth/register  -- create a USER account; returns {user, token}
  POST /auth/login     -- password login; returns {user, token}
  GET  /me             -- current user (requires bearer token)

Security:
  Login and register are rate-limited per client address (LOGIN_RATE_LIMIT).
  authenticate_user() (via login_user) provides timing equalization -- use
  it, never inline get_by_email() + verify_password().
  Cache-Control: no-store on responses that carry a token.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter, login_rate_limit
from api.models import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from auth.dependencies import get_current_identity
from auth.models import Identity
from auth.service import login_user, register_user
from auth.store import UserStore
from core.config import Settings
from core.errors import AuthenticationError

# Auth policy:
# - POST /auth/register: public
# - POST /auth/login:    public
# - GET  /me:            requires bearer token (get_current_identity)
router = APIRouter()


def _token_response(status_code: int, body: AuthResponse) -> JSONResponse:
    resp = JSONResponse(status_code=status_code, content=body.model_dump(mode="json", by_alias=True))
    resp.headers["Cache-Control"] = "no-store"
    return resp


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@limiter.limit(login_rate_limit)  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth/register", response_model=AuthResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> JSONResponse:
    """Create an account and log it in.

    400 if any field is missing or blank, 409 if the email is taken. The
    response never includes the password hash.
    """
    user_store: UserStore = request.app.state.user_store
    settings: Settings = request.app.state.settings
    user, token = register_user(user_store, settings, body.email, body.password, body.name)
    return _token_response(201, AuthResponse(user=UserResponse.from_user(user), token=token))


@limiter.limit(login_rate_limit)
@router.post("/auth/login", response_model=AuthResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password.

    Returns the same 401 body for an unknown email and a wrong password.
    """
    user_store: UserStore = request.app.state.user_store
    settings: Settings = request.app.state.settings
    user, token = login_user(user_store, settings, body.email, body.password)
    return _token_response(200, AuthResponse(user=UserResponse.from_user(user), token=token))


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/me", response_model=UserResponse)
def me(request: Request, identity: Identity = Depends(get_current_identity)) -> UserResponse:
    """Return the user the bearer token was issued to.

    A token whose subject no longer exists is treated like any other invalid
    token (401).
    """
    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_id(identity.subject_id)
    if user is None:
        raise AuthenticationError("Invalid or expired token.")
    return UserResponse.from_user(user)
