"""
api/main.py -- FastAPI application factory for TasksCompleted.

Run with:      python main.py serve
               uvicorn asgi:app --reload

create_app(settings, database) builds a fresh app. Nothing here is a
module-level singleton except the slowapi limiter: the Database handle is
opened in the lifespan (or injected by tests) and closed on shutdown.

Middleware stack (outermost to innermost):
  1. log_requests      -- method, path, status, latency per request
  2. CORSMiddleware    -- adds CORS headers for CORS_ORIGINS
  3. SlowAPIMiddleware -- enforces per-route rate limits from api.limiter

Lifespan handles startup (open Database, build stores) and shutdown (dispose
the engine) symmetrically.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.limiter import configure_limiter, limiter
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.auth import router as auth_router
from api.routes.tasks import router as tasks_router
from api.routes.users import dev_router as users_dev_router
from api.routes.users import router as users_router
from auth.store import UserStore
from core.config import Settings, get_settings
from core.database import Database
from core.errors import AppError
from tasks.store import TaskStore

logger = logging.getLogger("taskscompleted.api")

APP_NAME = "TasksCompleted API"
APP_VERSION = "1.0.0"


def _error_response(status_code: int, code: str, message: str, detail: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail)).model_dump(
            exclude_none=True
        ),
    )


# ---------------------------------------------------------------------------
# Lifespan -- startup / shutdown
# ---------------------------------------------------------------------------


def _make_lifespan(database: Optional[Database]):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Open the store handle on startup, dispose it on shutdown.

        An injected database (tests) is used as-is and left open for the
        caller to close.
        """
        settings: Settings = app.state.settings
        logger.info("TasksCompleted API starting up")
        owned = database is None
        db = Database(settings.database_url, timeout=settings.db_timeout_seconds) if owned else database
        app.state.database = db
        app.state.user_store = UserStore(db.engine)
        app.state.task_store = TaskStore(db.engine)
        logger.info("Stores initialized (dev_endpoints=%s)", settings.enable_dev_endpoints)

        yield

        if owned:
            db.close()
        logger.info("TasksCompleted API shutdown complete")

    return lifespan


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Map domain errors (core.errors) onto their status code."""
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
        return _error_response(exc.status_code, exc.code, "An unexpected error occurred.")
    return _error_response(exc.status_code, exc.code, exc.message, exc.detail)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 when the body, a path param, or JSON decoding fails validation."""
    return _error_response(400, "validation_error", "Request validation failed.", str(exc.errors()))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Structured body for routing-level errors (unknown path, wrong method)."""
    response = _error_response(exc.status_code, f"http_{exc.status_code}", str(exc.detail))
    for name, value in (getattr(exc, "headers", None) or {}).items():
        response.headers[name] = value
    return response


def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with a structured error when a rate limit is exceeded.

    Plain def: SlowAPIMiddleware calls this handler synchronously.
    """
    retry_after = int(getattr(exc, "retry_after", 60))
    response = _error_response(429, "rate_limited", "Too many requests.", str(exc.detail))
    response.headers["Retry-After"] = str(retry_after)
    return response


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Store failures become 500. The driver message goes to the log only."""
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return _error_response(500, "internal_error", "An unexpected error occurred.")


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception is written to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(500, "internal_error", "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# Health and root
# ---------------------------------------------------------------------------


def health(request: Request) -> JSONResponse:
    """Report liveness and database reachability. 500 if the ping fails."""
    db: Database = request.app.state.database
    try:
        db.ping()
    except SQLAlchemyError as exc:
        logger.warning("Health check failed: %s", exc)
        body = HealthResponse(ok=False, db=False, error=str(getattr(exc, "orig", None) or exc))
        return JSONResponse(status_code=500, content=body.model_dump())
    return JSONResponse(status_code=200, content=HealthResponse(ok=True, db=True).model_dump(exclude_none=True))


async def root() -> dict:
    return {"name": APP_NAME, "status": "running"}


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """Build the ASGI application.

    settings defaults to get_settings(), which raises when SECRET_KEY is
    missing -- the process fails here, before accepting any connection.
    """
    settings = settings or get_settings()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    app = FastAPI(
        title=APP_NAME,
        description="Task tracking with per-user ownership and bearer-token auth.",
        version=APP_VERSION,
        lifespan=_make_lifespan(database),
    )
    app.state.settings = settings

    # Starlette wraps each new middleware around the previous ones, so the
    # last one registered is the outermost.
    configure_limiter(settings)
    app.add_middleware(SlowAPIMiddleware)
    # SlowAPI looks for app.state.limiter by convention.
    app.state.limiter = limiter

    origins = settings.allowed_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers reject credentialed responses with a wildcard origin.
        allow_credentials="*" not in origins,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=3600,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        ms = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s %d %.1fms %s",
            request.method,
            request.url.path,
            response.status_code,
            ms,
            request.client.host if request.client else "unknown",
        )
        return response

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # Health is defined here, not in a router, so it is always reachable.
    # No rate limit -- load balancer probes must not be throttled.
    app.add_api_route("/", root, methods=["GET"], include_in_schema=False)
    app.add_api_route("/health", health, methods=["GET"], tags=["Health"])

    app.include_router(auth_router, tags=["Auth"])
    app.include_router(users_router, tags=["Users"])
    if settings.enable_dev_endpoints:
        logger.warning("ENABLE_DEV_ENDPOINTS is on: POST /users creates accounts without registration")
        app.include_router(users_dev_router, tags=["Users (dev)"])
    app.include_router(tasks_router, tags=["Tasks"])

    return app
