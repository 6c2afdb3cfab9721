"""
core/errors.py -- Domain error taxonomy.

Services and policies raise these; api/main.py registers one exception
handler that turns any AppError into the shared ErrorResponse envelope.
Nothing below api/ knows about HTTP beyond the status_code attribute.
"""

from __future__ import annotations


class AppError(Exception):
    """Base class for errors that map onto a client-visible response."""

    status_code: int = 500
    code: str = "internal_error"
    message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None, detail: str | None = None) -> None:
        self.message = message or self.message
        self.detail = detail
        super().__init__(self.message)


class InputValidationError(AppError):
    """Missing or malformed client input."""

    status_code = 400
    code = "validation_error"
    message = "Request validation failed."


class AuthenticationError(AppError):
    """Bad credentials or an unusable bearer token.

    The message is deliberately uniform; diagnostics go to the log only.
    """

    status_code = 401
    code = "unauthorized"
    message = "Authentication required."


class NotFoundError(AppError):
    """Resource does not exist or is not owned by the caller."""

    status_code = 404
    code = "not_found"
    message = "Resource not found."


class ConflictError(AppError):
    """A unique field (email) is already taken."""

    status_code = 409
    code = "conflict"
    message = "Resource already exists."


class InternalError(AppError):
    """Store, hashing, or token infrastructure failure."""
