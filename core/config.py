"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for TasksCompleted happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() or
receive a Settings instance instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. The app
      factory and the CLI call it; tests build Settings(...) explicitly.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. secret_key -> SECRET_KEY). Type coercion and validation are built in.

Security notes:
  SECRET_KEY is required. There is no dev-mode fallback: a missing key raises
  at construction time, so the service refuses to start instead of signing
  tokens with an empty or guessable key. Keys shorter than 32 chars are
  rejected for the same reason.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
or tasks/.
"""

import logging
import re
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(value: str | int) -> int:
    """Convert a duration like "7d", "12h", "30m", "45s" or "3600" to seconds.

    Plain integers are taken as seconds. Raises ValueError on anything else.
    """
    if isinstance(value, int):
        if value < 0:
            raise ValueError("Duration must not be negative.")
        return value
    match = _DURATION_RE.match(value)
    if match is None:
        raise ValueError(f"Invalid duration {value!r}. Expected <int>[s|m|h|d], e.g. '7d'.")
    amount, unit = match.groups()
    return int(amount) * _DURATION_UNITS[unit]


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    Every field except secret_key has a default. Tests construct
    Settings(secret_key=..., database_url=...) directly.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Server
    # ------------------------------------------------------------------

    host: str = "127.0.0.1"
    port: int = Field(default=3000, ge=1, le=65535)
    log_level: str = "INFO"

    # ------------------------------------------------------------------
    # Database
    # ------------------------------------------------------------------

    database_url: str = "sqlite:///./taskscompleted.db"
    db_timeout_seconds: float = Field(default=10.0, gt=0)

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    # Empty string is the "not configured" sentinel; validate_default makes
    # the validator below run on it so a missing key always raises.
    secret_key: str = Field(default="", validate_default=True)
    # Stored as seconds after validation; accepts "7d" style strings.
    token_expires_in: int = 7 * 86400
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    # ------------------------------------------------------------------
    # HTTP surface
    # ------------------------------------------------------------------

    # Comma-separated list. "*" allows every origin.
    cors_origins: str = "http://localhost:3000,http://localhost:5173"
    # Registers POST /users, which creates accounts without issuing a token.
    enable_dev_endpoints: bool = False
    login_rate_limit: str = "10/minute"
    rate_limit_enabled: bool = True

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, value: str) -> str:
        if not value:
            raise ValueError(
                "SECRET_KEY is required. Set SECRET_KEY in your environment or .env file. "
                "The service will not start without a signing key."
            )
        if len(value) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return value

    @field_validator("token_expires_in", mode="before")
    @classmethod
    def validate_token_expires_in(cls, value: str | int) -> int:
        seconds = parse_duration(value)
        if seconds == 0:
            raise ValueError("TOKEN_EXPIRES_IN must be greater than zero.")
        return seconds

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown LOG_LEVEL {value!r}.")
        return level

    @property
    def allowed_origins(self) -> list[str]:
        """CORS_ORIGINS split on commas, blanks dropped."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    Raises pydantic.ValidationError on misconfiguration (e.g. missing
    SECRET_KEY). Call get_settings.cache_clear() in tests that need to
    re-read the environment.
    """
    return Settings()
