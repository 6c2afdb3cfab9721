"""
auth/tokens.py -- JWT issuance/verification and password hashing.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       sub (user id as a string, per RFC 7519), role, iat and exp.
       verify_access_token() raises TokenRejected with a diagnostic reason
       (malformed / bad_signature / expired). The reason is for logs only;
       the HTTP layer answers every rejection with the same 401 body so the
       response cannot be used as an oracle.

  Passwords: bcrypt directly (no passlib wrapper). Cost factor comes from
       Settings.bcrypt_rounds. bcrypt only looks at the first 72 bytes, so
       longer passwords are refused at the account boundary
       (auth/service.py) rather than silently truncated.

  Timing equalization: authenticate_user() always runs bcrypt, against a
       dummy hash when the email is unknown, so response time does not reveal
       whether an account exists.

Layer rule: no imports from api/ or tasks/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import TYPE_CHECKING

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from auth.models import Identity, Role
from core.config import Settings
from core.errors import AuthenticationError

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore

logger = logging.getLogger("taskscompleted.auth")

_ALGORITHM = "HS256"

MAX_PASSWORD_BYTES = 72


class TokenRejected(AuthenticationError):
    """A bearer token failed verification.

    reason is one of "malformed", "bad_signature", "expired".
    """

    message = "Invalid or expired token."

    def __init__(self, reason: str) -> None:
        super().__init__()
        self.reason = reason


# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def hash_password(plain: str, rounds: int = 12) -> str:
    """Return a salted bcrypt hash of the given plaintext password."""
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A stored value that is not a valid bcrypt hash, or a password bcrypt
    refuses, counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


@lru_cache
def _dummy_hash(rounds: int) -> str:
    # Same cost as real hashes so the unknown-email path takes as long.
    return hash_password("taskscompleted_timing_dummy", rounds=rounds)


def authenticate_user(store: UserStore, email: str, password: str, rounds: int = 12) -> User | None:
    """Check an email/password pair with timing equalization.

    Returns the User on success, None on any failure. Callers must not
    distinguish "unknown email" from "wrong password" in their response.
    """
    user = store.get_by_email(email)
    if user is None:
        # Do NOT return before running bcrypt.
        verify_password(password, _dummy_hash(rounds))
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(subject_id: int, role: Role | str, settings: Settings, ttl: int | None = None) -> str:
    """Encode a signed JWT for the given subject.

    Args:
        subject_id: User id; stored as the string sub claim.
        role:       Role at issuance time.
        settings:   Supplies the signing key and default lifetime.
        ttl:        Lifetime in seconds. None uses settings.token_expires_in.
                    Zero or negative produces a token that is already expired.
    """
    duration = settings.token_expires_in if ttl is None else ttl
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(subject_id),
        "role": Role(role).value,
        "iat": now,
        "exp": now + timedelta(seconds=duration),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=_ALGORITHM)


def verify_access_token(token: str, settings: Settings) -> Identity:
    """Verify a JWT and return the Identity it asserts.

    Raises TokenRejected on any failure. The structural check runs first
    (unverified parse) so a garbled token is reported as malformed rather
    than as a signature problem.
    """
    try:
        jwt.get_unverified_claims(token)
    except JWTError as exc:
        raise TokenRejected("malformed") from exc

    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[_ALGORITHM])
    except ExpiredSignatureError as exc:
        raise TokenRejected("expired") from exc
    except JWTError as exc:
        # Signature mismatch, wrong algorithm, or an ill-typed registered claim.
        raise TokenRejected("bad_signature") from exc

    exp = payload.get("exp")
    if not isinstance(exp, (int, float)):
        raise TokenRejected("malformed")
    # jose accepts exp == now; a token issued with ttl=0 must not verify.
    if exp <= datetime.now(timezone.utc).timestamp():
        raise TokenRejected("expired")

    try:
        return Identity(subject_id=int(payload["sub"]), role=Role(payload["role"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise TokenRejected("malformed") from exc
