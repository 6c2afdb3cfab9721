"""
auth/service.py -- Account flows composed from the hasher, token issuer and store.

  register_user()   -- validate, reject duplicates, hash, persist, issue token
  login_user()      -- authenticate with timing equalization, issue token
  create_user()     -- persist without issuing a token (dev endpoint, seeding)

Errors are raised from core.errors so the HTTP layer maps them uniformly:
InputValidationError (400), ConflictError (409), AuthenticationError (401).

Layer rule: no imports from api/ or tasks/.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from auth.models import Role, User
from auth.store import UserStore
from auth.tokens import MAX_PASSWORD_BYTES, authenticate_user, create_access_token, hash_password
from core.config import Settings
from core.errors import AuthenticationError, ConflictError, InputValidationError, InternalError

logger = logging.getLogger("taskscompleted.auth")


class BadCredentials(AuthenticationError):
    code = "bad_credentials"
    message = "Invalid email or password."


def _require(**fields: str | None) -> None:
    missing = [name for name, value in fields.items() if not value]
    if missing:
        raise InputValidationError(f"{', '.join(fields)} are required.", detail=f"missing: {', '.join(missing)}")


def _check_password_length(password: str) -> None:
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise InputValidationError(f"password must be at most {MAX_PASSWORD_BYTES} bytes.")


def create_user(
    store: UserStore,
    settings: Settings,
    email: str,
    password: str,
    name: str,
    role: Role = Role.USER,
) -> User:
    """Hash the password and persist a new user. Returns the stored record.

    Raises ConflictError if the email is taken, including when a concurrent
    request wins the race between the existence check and the insert.
    """
    email = (email or "").strip()
    name = (name or "").strip()
    _require(email=email, password=password, name=name)
    _check_password_length(password)

    if store.email_exists(email):
        raise ConflictError("A user with that email already exists.")

    user = User(email=email, name=name, hashed_password=hash_password(password, settings.bcrypt_rounds), role=role)
    try:
        user_id = store.create_user(user)
    except IntegrityError as exc:
        raise ConflictError("A user with that email already exists.") from exc

    created = store.get_by_id(user_id)
    if created is None:
        raise InternalError("User not found after write.")
    logger.info("Created user id=%s role=%s", user_id, role.value)
    return created


def register_user(store: UserStore, settings: Settings, email: str, password: str, name: str) -> tuple[User, str]:
    """Create a USER account and return it together with a fresh session token."""
    user = create_user(store, settings, email, password, name)
    token = create_access_token(user.id, user.role, settings)
    return user, token


def login_user(store: UserStore, settings: Settings, email: str, password: str) -> tuple[User, str]:
    """Authenticate and return (user, token).

    Unknown email and wrong password raise the same AuthenticationError so
    the response cannot be used to enumerate accounts.
    """
    email = (email or "").strip()
    _require(email=email, password=password)
    user = authenticate_user(store, email, password, rounds=settings.bcrypt_rounds)
    if user is None:
        logger.info("Failed login attempt")
        raise BadCredentials()
    token = create_access_token(user.id, user.role, settings)
    return user, token
