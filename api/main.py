"""
api/main.py -- FastAPI application entry point for Taskboard.

Run with:  uvicorn api.main:app --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware     -- adds CORS headers for allowed browser origins
  2. SlowAPIMiddleware  -- enforces per-route rate limits from api.limiter
  3. log_requests       -- one log line per request with latency

Lifespan builds the Database handle, the stores and the services on startup and
disposes the handle on shutdown. Route handlers reach them via request.app.state.
"""

from __future__ import annotations

import logging
import time
import traceback
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.auth import router as auth_router
from api.routes.tasks import router as tasks_router
from api.routes.users import router as users_router
from auth.service import AuthService, UserService
from auth.store import UserStore
from core.config import get_settings
from core.database import Database
from core.errors import AppError
from tasks.service import TaskService
from tasks.store import TaskStore

API_VERSION = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("taskboard.api")

_settings = get_settings()


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


def init_state(app: FastAPI, db: Database) -> None:
    """Attach the data-store handle, stores and services to app.state.

    Shared by the real lifespan and the test lifespan so both wire the same
    object graph; only the Database they pass in differs.
    """
    settings = get_settings()
    app.state.db = db
    app.state.user_store = UserStore(db)
    app.state.task_store = TaskStore(db)
    app.state.auth_service = AuthService(app.state.user_store, password_min_length=settings.password_min_length)
    app.state.user_service = UserService(
        app.state.user_store,
        app.state.task_store,
        password_min_length=settings.password_min_length,
    )
    app.state.task_service = TaskService(app.state.task_store)
    app.state.started_at = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Own the Database handle for the full server lifetime.

    Everything before yield runs on startup; everything after yield runs on
    shutdown, so the connection pool is always disposed.
    """
    logger.info("Taskboard API starting up (environment=%s)", _settings.environment)
    db = Database(_settings.database_url)
    init_state(app, db)
    logger.info("Database initialized")

    yield

    db.close()
    logger.info("Taskboard API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Taskboard API",
    description="Task management with JWT authentication and per-user task ownership.",
    version=API_VERSION,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


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


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(users_router, prefix="/api", tags=["Users"])
app.include_router(tasks_router, prefix="/api", tags=["Tasks"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


def _error_body(request: Request, code: str, message: str, detail: str | None = None) -> dict:
    return ErrorResponse(
        error=ErrorDetail(code=code, message=message, detail=detail),
        timestamp=datetime.now(timezone.utc).isoformat(),
        path=request.url.path,
    ).model_dump(exclude_none=True)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render a domain error raised by the auth core or a service.

    401s get WWW-Authenticate and Cache-Control: no-store so failed logins and
    rejected tokens are never cached by intermediaries.
    """
    response = JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc.code, exc.message),
    )
    if exc.status_code == 401:
        response.headers["WWW-Authenticate"] = "Bearer"
        response.headers["Cache-Control"] = "no-store"
    return response


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with a structured error when a rate limit is exceeded."""
    retry_after = int(getattr(exc, "retry_after", 60))
    response = JSONResponse(
        status_code=429,
        content=_error_body(request, "rate_limited", "Too many requests.", str(exc.detail)),
    )
    response.headers["Retry-After"] = str(retry_after)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 when the request body or path params fail validation."""
    errors = exc.errors()
    message = "Request validation failed."
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg', 'invalid value')}" if field else first.get("msg", message)
    return JSONResponse(
        status_code=400,
        content=_error_body(request, "validation_error", message, str(errors)),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Structured error for Starlette/FastAPI HTTP exceptions (e.g. unknown routes)."""
    message = "Route not found" if exc.status_code == 404 else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, f"http_{exc.status_code}", message),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The traceback is always logged. It is included in the response body only
    outside production; production clients receive a generic message.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    detail = None if get_settings().is_production else "".join(traceback.format_exception(exc))
    return JSONResponse(
        status_code=500,
        content=_error_body(request, "internal_error", "An unexpected error occurred.", detail),
    )


# ---------------------------------------------------------------------------
# Health and index
#
# Defined directly in main.py (not in a router) so they are always reachable.
# No rate limit: load balancers and monitors must not be throttled.
# ---------------------------------------------------------------------------


@app.get("/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return liveness, uptime, environment and database reachability."""
    db: Database | None = getattr(request.app.state, "db", None)
    started_at = getattr(request.app.state, "started_at", time.monotonic())
    return HealthResponse(
        timestamp=datetime.now(timezone.utc).isoformat(),
        uptime=round(time.monotonic() - started_at, 3),
        environment=get_settings().environment,
        database="connected" if db is not None and db.ping() else "error",
    )


@app.get("/", tags=["Health"])
def index() -> dict:
    return {
        "message": "Welcome to the Taskboard API",
        "version": API_VERSION,
        "endpoints": {
            "health": "/health",
            "auth": "/api/auth",
            "users": "/api/users",
            "tasks": "/api/tasks",
        },
    }
