"""
LinkUp Backend: FastAPI Application Factory
=============================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes app configuration, middleware registration, route mounting,
       and lifecycle management in one place.
How:   Factory pattern: create_app(settings) returns a configured FastAPI
       instance with its own AppContext on `app.state.context`.
Who:   Called by uvicorn as a factory and by the test fixtures:
           uvicorn --factory linkup.main:create_app
       Importing this module builds nothing; there is no module-level app,
       engine or settings object.

Application Architecture:
    ┌─────────────────────────────────────────────────────────┐
    │                      FastAPI App                        │
    │                                                         │
    │  Middleware Chain:                                      │
    │  ┌────────────┐ ┌──────────┐ ┌─────────┐ ┌───────────┐  │
    │  │ Rate Limit │→│ Req ID   │→│ Logging │→│ GZip/CORS │  │
    │  └────────────┘ └──────────┘ └─────────┘ └───────────┘  │
    │                                                         │
    │  Routes (API_PREFIX = /api/auth):                       │
    │  ┌──────────────────┐ ┌──────────────┐ ┌─────────────┐  │
    │  │ register / login │ │ search / byId│ │ link/unlink │  │
    │  └──────────────────┘ └──────────────┘ └─────────────┘  │
    │  ┌──────────────────┐ ┌──────────────────────────────┐  │
    │  │ POST /upload     │ │ GET /public/uploads/{file}   │  │
    │  └──────────────────┘ └──────────────────────────────┘  │
    │                                                         │
    │  Exception Handlers:                                    │
    │  ┌───────────────────────────────────────────────────┐  │
    │  │ Validation/Conflict/Credentials→400 │ Auth→401    │  │
    │  │ Permission→403 │ NotFound→404 │ Upload→400 │ DB→500│ │
    │  └───────────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (refuse to start without JWT_SECRET)
    3. Create the upload directory

    Shutdown:
    1. Dispose the database engine (close all pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from linkup import __version__
from linkup.config import Settings, get_settings
from linkup.context import AppContext
from linkup.exceptions import (
    AuthenticationError,
    ConflictError,
    DatabaseError,
    InvalidCredentialsError,
    NotFoundError,
    PermissionDeniedError,
    UploadError,
    ValidationError,
)
from linkup.middleware.logging import RequestLoggingMiddleware
from linkup.middleware.rate_limit import RateLimitMiddleware
from linkup.middleware.request_id import RequestIDMiddleware, request_id_var
from linkup.routes import auth, health, links, upload, users

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s

    Called once per app start. Never logs passwords, hashes or tokens;
    the services log identifiers only.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Third-party loggers are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: logging, configuration check, upload directory.
    Shutdown: dispose the engine held by this app's context.

    A missing JWT_SECRET aborts startup. Every token-issuing endpoint would
    otherwise fail at request time.
    """
    context: AppContext = app.state.context
    settings = context.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings)
    logger.info("=" * 60)
    logger.info("LinkUp Backend %s starting up...", __version__)

    try:
        settings.validate_required()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        raise

    context.file_service.ensure_upload_dir()
    logger.info("Upload directory: %s", context.file_service.upload_dir)
    logger.info("Routes mounted under %s", settings.api_prefix)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("LinkUp Backend shutting down...")
    await context.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details: Optional[dict] = None) -> dict:
    body = {
        "error": error,
        "message": message,
        "request_id": request_id_var.get(""),
    }
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        ValidationError / RequestValidationError → 400 Bad Request
        InvalidCredentialsError                  → 400 Bad Request
        ConflictError                            → 400 Bad Request
        AuthenticationError                      → 401 Unauthorized
        PermissionDeniedError                    → 403 Forbidden
        NotFoundError                            → 404 Not Found
        UploadError (incl. FileStorageError)     → 400 {success: false, ...}
        DatabaseError                            → 500 Internal Server Error
        Exception (fallback)                     → 500 Internal Server Error

    Security: responses never include stack traces, SQL or exception
    context; those are logged server-side.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Malformed body or query: FastAPI's 422 becomes the same 400 shape."""
        logger.warning("[%s] Request validation failed: %d error(s)", request_id_var.get(""), len(exc.errors()))
        return JSONResponse(
            status_code=400,
            content=_error_body(
                "validation_error",
                "Request validation failed",
                {"errors": jsonable_encoder(exc.errors())},
            ),
        )

    @app.exception_handler(InvalidCredentialsError)
    async def handle_invalid_credentials(request: Request, exc: InvalidCredentialsError):
        # No details: the body must not differ between unknown email and bad password
        return JSONResponse(
            status_code=400,
            content=_error_body("invalid_credentials", exc.message),
        )

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        logger.info("[%s] Conflict: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body("conflict", exc.message),
        )

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return JSONResponse(
            status_code=401,
            content=_error_body("unauthorized", exc.message),
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(PermissionDeniedError)
    async def handle_permission_denied(request: Request, exc: PermissionDeniedError):
        logger.warning("[%s] Permission denied: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(
            status_code=403,
            content=_error_body("forbidden", exc.message),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=_error_body("not_found", exc.message),
        )

    @app.exception_handler(UploadError)
    async def handle_upload_error(request: Request, exc: UploadError):
        """Upload failures keep the upload endpoint's own {success: false} shape."""
        logger.warning(
            "[%s] Upload rejected: %s (%s) | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.error,
            exc.context,
        )
        content = {"success": False, "message": exc.message}
        if exc.error is not None:
            content["error"] = exc.error
        return JSONResponse(status_code=400, content=content)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        """Database error: generic message to the user, details logged server-side."""
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", "An internal error occurred. Please try again later."),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """
        Catch-all for truly unexpected errors.

        Returns a generic 500 with the request ID; the stack trace is logged
        server-side only.
        """
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration for this app. Defaults to `get_settings()`
                  (the process environment); tests pass their own.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="LinkUp API",
        description=(
            "Account registration, login with location capture, user directory, "
            "user-to-user links and profile image uploads."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.context = AppContext.from_settings(settings)

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # RateLimit → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    if settings.rate_limit_enabled:
        app.add_middleware(
            RateLimitMiddleware,
            max_requests=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window,
        )

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router, prefix=settings.api_prefix)
    app.include_router(users.router, prefix=settings.api_prefix)
    app.include_router(links.router, prefix=settings.api_prefix)
    app.include_router(upload.router, prefix=settings.api_prefix)
    app.include_router(upload.files_router, prefix=settings.static_url_path)
    app.include_router(health.router)

    return app
