"""
auth/dependencies.py -- The auth guard.

resolve_identity() is the guard itself: a pure function from the raw
Authorization header value to an Identity, raising AuthenticationError on
any failure. It touches no request object and no store.

get_current_identity() adapts it to FastAPI's Depends() system by reading the
header and the app's Settings from the request. Protected routes list it
explicitly:

    @router.get("/tasks")
    def route(identity: Identity = Depends(get_current_identity)): ...

Layer rule: no imports from api/ or tasks/. This module may import fastapi
(Request) because it is part of the dependency injection seam.
"""

from __future__ import annotations

import logging

from fastapi import Request

from auth.models import Identity
from auth.tokens import TokenRejected, verify_access_token
from core.config import Settings
from core.errors import AuthenticationError

logger = logging.getLogger("taskscompleted.auth")

_SCHEME = "Bearer"


def resolve_identity(authorization: str | None, settings: Settings) -> Identity:
    """Turn an Authorization header value into an Identity.

    Rejects when the header is missing, the scheme is not exactly "Bearer",
    the token is blank, or the token fails verification. Verification
    failures all surface with the same message; the reason is logged.
    """
    scheme, _, token = (authorization or "").partition(" ")
    token = token.strip()
    if scheme != _SCHEME or not token:
        raise AuthenticationError("Bearer token required.")
    try:
        return verify_access_token(token, settings)
    except TokenRejected as exc:
        logger.info("Rejected bearer token (reason=%s)", exc.reason)
        raise


def get_current_identity(request: Request) -> Identity:
    """Require a valid bearer token. Raises AuthenticationError (401) otherwise."""
    settings: Settings = request.app.state.settings
    return resolve_identity(request.headers.get("Authorization"), settings)
