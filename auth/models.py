"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container). Stores and services do the work;
the only logic here is role validation, which happens at construction so an
unknown role string can never travel further into the system.

Layer rule: no imports from api/ or tasks/.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    ADMIN = "ADMIN"
    USER = "USER"


@dataclass
class User:
    """A registered account.

    hashed_password is a bcrypt hash. It is never serialized outward; the API
    layer maps User onto UserResponse, which has no password field.
    """

    email: str
    name: str
    hashed_password: str
    role: Role = Role.USER
    id: int | None = None
    created_at: str | None = None

    def __post_init__(self) -> None:
        # Raises ValueError for anything outside the enum.
        self.role = Role(self.role)


@dataclass(frozen=True)
class Identity:
    """The authenticated caller: subject id and the role copied into the token.

    role is a point-in-time copy from issuance; it does not follow later
    changes to the stored user.
    """

    subject_id: int
    role: Role

    def __post_init__(self) -> None:
        object.__setattr__(self, "role", Role(self.role))
