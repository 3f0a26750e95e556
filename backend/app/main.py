"""
CareNotes Backend: FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance
       bound to one Database handle.
Who:   Called by uvicorn (uvicorn app.main:app) or the `carenotes-api` script.
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │                                                          │
    │  Middleware Chain:                                       │
    │  Req ID → CORS → Logging → Rate Limit → API Key → GZip   │
    │                                                          │
    │  Routes:                                                 │
    │  /api/patients   /api/voice-notes   /api/summaries       │
    │  /health                                                 │
    │                                                          │
    │  Exception Handlers:                                     │
    │  Validation→400  NotFound/Reference→404                  │
    │  AlreadyExists/Conflict→409  Database/unexpected→500     │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Check security-sensitive configuration (warn, don't exit)
    3. Create any missing tables
    Shutdown:
    1. Dispose database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import __version__
from app.config import Settings, settings as default_settings
from app.database import Database
from app.exceptions import (
    AlreadyExistsError,
    CareNotesError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    ReferenceNotFoundError,
    ValidationError,
)
from app.middleware.auth import APIKeyMiddleware
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.rate_limit import RateLimitMiddleware
from app.middleware.request_id import (
    REQUEST_ID_HEADER,
    RequestIDMiddleware,
    current_request_id,
)
from app.routes import health, patients, summaries, voice_notes
from app.services.validation import format_errors

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] app.services.pipeline: [rid] patient created: ...
    Called once during app startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries that log every operation
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Manage application lifecycle: startup and shutdown procedures.

    Code before `yield` runs on startup, code after it on shutdown.
    """
    app_settings: Settings = app.state.settings
    database: Database = app.state.database

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(app_settings.log_level)
    logger.info("=" * 60)
    logger.info("CareNotes Backend starting up...")

    try:
        app_settings.validate_required_for_production()
    except ValueError as e:
        logger.warning("Configuration warning: %s", str(e))

    await database.create_schema()
    logger.info("Database schema ready")

    logger.info("Server ready at http://%s:%d", app_settings.host, app_settings.port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("CareNotes Backend shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and response bodies.

    Handler hierarchy:
        ValidationError / RequestValidationError → 400
        ReferenceNotFoundError / NotFoundError   → 404
        AlreadyExistsError / ConflictError       → 409
        DatabaseError                            → 500 (generic message)
        CareNotesError (base)                    → 500
        HTTPException (unmatched route etc.)     → its own status
        Exception (fallback)                     → 500 (generic message)

    Internal details (driver messages, stack traces) are logged server-side
    only, never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = current_request_id(request)
        logger.warning("[%s] Validation error: %s %s", rid, exc.message, exc.errors)
        content = {
            "error": "validation_error",
            "message": exc.message,
            "request_id": rid,
        }
        if exc.errors:
            content["details"] = exc.errors
        return JSONResponse(status_code=400, content=content)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """FastAPI's own parsing failures (bad JSON, bad query types) as 400."""
        rid = current_request_id(request)
        errors = format_errors(exc.errors(), skip_prefix=("body", "query", "path", "header"))
        logger.warning("[%s] Request validation error: %s", rid, errors)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": "Validation failed",
                "details": errors,
                "request_id": rid,
            },
        )

    @app.exception_handler(ReferenceNotFoundError)
    async def handle_reference_not_found(request: Request, exc: ReferenceNotFoundError):
        rid = current_request_id(request)
        logger.info("[%s] Reference not found: %s", rid, exc.context)
        return JSONResponse(
            status_code=404,
            content={
                "error": "reference_not_found",
                "message": exc.message,
                "details": {"field": exc.field, "resource": exc.resource},
                "request_id": rid,
            },
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = current_request_id(request)
        return JSONResponse(
            status_code=404,
            content={
                "error": "not_found",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(AlreadyExistsError)
    async def handle_already_exists(request: Request, exc: AlreadyExistsError):
        rid = current_request_id(request)
        logger.info("[%s] Already exists: %s", rid, exc.message)
        return JSONResponse(
            status_code=409,
            content={
                "error": "already_exists",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        rid = current_request_id(request)
        logger.info("[%s] Conflict: %s", rid, exc.message)
        return JSONResponse(
            status_code=409,
            content={
                "error": "conflict",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        """Database error: generic message to the caller, details logged."""
        rid = current_request_id(request)
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "Internal server error",
                "request_id": rid,
            },
        )

    @app.exception_handler(CareNotesError)
    async def handle_app_error(request: Request, exc: CareNotesError):
        rid = current_request_id(request)
        logger.error("[%s] Unhandled application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "Internal server error",
                "request_id": rid,
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        """Unmatched routes and wrong methods raised by the router itself."""
        rid = current_request_id(request)
        message = "Not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": message, "request_id": rid},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """
        Catch-all for truly unexpected errors.

        Runs outside the middleware stack, so the request id header is
        attached here explicitly.
        """
        rid = current_request_id(request)
        logger.error(
            "[%s] Unexpected error: %s",
            rid,
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "Internal server error",
                "request_id": rid,
            },
            headers={REQUEST_ID_HEADER: rid} if rid else None,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    app_settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to use (defaults to the module-level singleton)
        database:     Store handle (defaults to one built from app_settings.database_url)

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app_settings = app_settings or default_settings

    app = FastAPI(
        title="CareNotes API",
        description=(
            "Record-keeping service for patients, their recorded clinical voice notes, "
            "and text summaries of those notes."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = app_settings
    app.state.database = database or Database(app_settings.database_url, app_settings)

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition (last added = outermost):
    # RequestID → CORS → Logging → RateLimit → APIKey → GZip → routes
    app.add_middleware(GZipMiddleware, minimum_size=500)

    app.add_middleware(APIKeyMiddleware, api_key=app_settings.api_key)

    app.add_middleware(
        RateLimitMiddleware,
        max_requests=app_settings.rate_limit_requests,
        window_seconds=app_settings.rate_limit_window,
    )

    app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[
            REQUEST_ID_HEADER,
            "Retry-After",
            "RateLimit-Limit",
            "RateLimit-Remaining",
            "RateLimit-Reset",
        ],
    )

    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(patients.router)
    app.include_router(voice_notes.router)
    app.include_router(summaries.router)
    app.include_router(health.router)

    return app


def run() -> None:
    """Console entry point: serve the app on HOST:PORT with uvicorn."""
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=default_settings.host,
        port=default_settings.port,
        log_level=default_settings.log_level.lower(),
    )


# uvicorn expects `app.main:app` to be importable
app = create_app()
