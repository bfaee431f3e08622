"""
SchoolMap Backend - FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers and routers;
       uvicorn serves the module-level `app` (uvicorn app.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │                                                          │
    │  Middleware:  Request ID → Access log → GZip → CORS      │
    │                                                          │
    │  Routers:     /api/schools  /api/departments  /api/users │
    │               /api/keywords /api/maps  /api/comments     │
    │               /health       /{path} (static, last)       │
    │                                                          │
    │  Exception handlers → failure envelope                   │
    │     Validation 400 │ Auth 401 │ NotFound 404 │           │
    │     Conflict 409   │ Directory 500 │ Database 500        │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check, static root report
    Shutdown: dispose the database engine (closes pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import settings
from app.database import dispose_engine
from app.exceptions import (
    AuthenticationError,
    ConflictError,
    DatabaseError,
    DirectoryServiceError,
    NotFoundError,
    SchoolMapError,
    ValidationError,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import departments, health, keywords, maps, schools, static, users

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once, at startup.

    Format: 2024-03-02T09:00:00 [INFO] app.services.user_service: User registered: id=3
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("SchoolMap Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: local endpoints work without the directory key
        logger.error("Configuration error: %s", str(e))

    static_root = Path(settings.static_root)
    if static_root.is_dir():
        logger.info("Static root: %s", static_root.resolve())
    else:
        logger.warning("Static root %s does not exist; only the API is served", static_root)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("SchoolMap Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    """Failure envelope; see app.schemas.common.ErrorResponse."""
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": error,
            "message": message,
            "details": details or None,
            "request_id": request_id_var.get(""),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to status codes and the failure envelope.

    Handler table:
        ValidationError, RequestValidationError → 400 validation_error
        AuthenticationError                     → 401 authentication_failed
        NotFoundError                           → 404 not_found
        ConflictError                           → 409 conflict
        DirectoryServiceError                   → 500 upstream_error
        DatabaseError                           → 500 server_error
        SchoolMapError (base)                   → 500 server_error
        Exception (fallback)                    → 500 internal_server_error

    Server-side failures never put driver messages, SQL or stack traces in
    the body; those go to the log with the request id.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Schema-level failures (missing field, wrong type, unknown field)."""
        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
                "message": err.get("msg", ""),
            }
            for err in exc.errors()
        ]
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), errors)
        message = errors[0]["message"] if len(errors) == 1 else "Request validation failed"
        return _error_response(400, "validation_error", message, {"errors": errors})

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        # Body must not differ between unknown handle and wrong password
        return _error_response(401, "authentication_failed", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        return _error_response(409, "conflict", exc.message, exc.context)

    @app.exception_handler(DirectoryServiceError)
    async def handle_directory_error(request: Request, exc: DirectoryServiceError):
        logger.error(
            "[%s] Directory service error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(500, "upstream_error", exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(SchoolMapError)
    async def handle_application_error(request: Request, exc: SchoolMapError):
        logger.error("[%s] Application error: %s", request_id_var.get(""), exc.message)
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again later.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="SchoolMap API",
        description=(
            "School community backend: registration and login, school lookup "
            "backed by the NEIS open API, maps with comments and user keywords."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Middleware ────────────────────────────────────────────────────────
    # Executes in reverse order of addition: RequestID runs first
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Exception Handlers ────────────────────────────────────────────────
    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(schools.router)
    app.include_router(departments.router)
    app.include_router(users.router)
    app.include_router(keywords.router)
    app.include_router(maps.router)
    # Catch-all path: must stay last
    app.include_router(static.router)

    return app


app = create_app()
