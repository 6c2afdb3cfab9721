"""
api/limiter.py -- Shared slowapi rate limiter instance.

Import this in both api/main.py (to mount as middleware) and
api/routes/auth.py (to apply per-route limits with @limiter.limit()).

Using a single shared instance ensures all routes share the same in-memory
counter store. If this were instantiated in each module separately, each
module would get its own isolated counter and rate limits would never trigger.

configure_limiter() is called by create_app() so the on/off switch and the
login limit come from Settings rather than being fixed at import time.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import Settings

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")

_login_limit = "10/minute"


def configure_limiter(settings: Settings) -> None:
    global _login_limit
    limiter.enabled = settings.rate_limit_enabled
    _login_limit = settings.login_rate_limit


def login_rate_limit() -> str:
    """Limit string for login/register, evaluated by slowapi per request."""
    return _login_limit
