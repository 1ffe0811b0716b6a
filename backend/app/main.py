"""
NoteMap Backend: FastAPI Application Factory
=============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers.
Who:   uvicorn (uvicorn app.main:app) and the test-suite (ASGITransport).

Application Architecture:
    ┌──────────────────────────────────────────────────────────────┐
    │                        FastAPI App                           │
    │                                                              │
    │  Middleware: CORS → GZip → Request ID → Logging → Identity   │
    │                                                              │
    │  Routes:                                                     │
    │    /api/me  /api/analyze  /api/entries                       │
    │    /api/distance  /api/geocode  /health                      │
    │                                                              │
    │  Exception Handlers:                                         │
    │    Validation→400  NotFound→404  NoResult→422                │
    │    RequestDenied/Provider→502  Transient→503                 │
    │    Configuration/Repository/Transcription/File→500           │
    └──────────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check (logged, not fatal), upload dir
    Shutdown: dispose the database engine
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
    ConfigurationError,
    FileStorageError,
    NoResult,
    NoteMapError,
    NotFoundError,
    ProviderError,
    RepositoryError,
    RequestDenied,
    TranscriptionError,
    TransientServiceError,
    ValidationError,
)
from app.middleware.identity import IdentityMiddleware
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import analyze, distance, entries, geocode, health, me

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configures the root logger once, at startup.

    Format: 2024-01-15T12:00:00 [INFO] app.services.facility_matcher: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that log every operation at INFO/DEBUG
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("NoteMap Backend %s starting up (%s)", __version__, settings.environment)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Not fatal: the affected endpoints answer with configuration_error
        logger.error("Configuration error: %s", str(e))

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Upload directory: %s", upload_dir.resolve())
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("NoteMap Backend shutting down...")
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
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    content: Dict[str, Any] = {
        "error": error,
        "message": message,
        "request_id": request_id_var.get(""),
    }
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        msg = str(err.get("msg", "Invalid value"))
        # Custom validators raise ValueError with a full sentence; pydantic prefixes it
        msg = msg.removeprefix("Value error, ")
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query"))
        # pydantic's built-in messages ("Field required") need the field name
        parts.append(msg if msg.endswith(".") or not loc else f"{loc}: {msg}")
    return "; ".join(parts) or "Validation failed"


def register_exception_handlers(app: FastAPI) -> None:
    """
    Maps exception types to HTTP responses.

    Handler hierarchy (most specific class wins):
        ValidationError / RequestValidationError → 400 validation_error
        NotFoundError            → 404 not_found
        NoResult                 → 422 no_result
        RequestDenied            → 502 request_denied
        ProviderError            → 502 provider_error
        TransientServiceError    → 503 service_unavailable + Retry-After
        ConfigurationError       → 500 configuration_error
        RepositoryError          → 500 repository_error
        TranscriptionError       → 500 transcription_error
        FileStorageError         → 500 server_error
        NoteMapError (base)      → 500 server_error
        Exception (fallback)     → 500 internal_server_error
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        message = _describe_validation_errors(exc)
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), message)
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
            for err in exc.errors()
        ]
        return _error_response(400, "validation_error", message, {"errors": errors})

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(NoResult)
    async def handle_no_result(request: Request, exc: NoResult):
        return _error_response(422, "no_result", exc.message, exc.context)

    @app.exception_handler(RequestDenied)
    async def handle_request_denied(request: Request, exc: RequestDenied):
        logger.error("[%s] Maps request denied: %s", request_id_var.get(""), exc.reason)
        return _error_response(502, "request_denied", exc.message)

    @app.exception_handler(ProviderError)
    async def handle_provider_error(request: Request, exc: ProviderError):
        logger.error("[%s] Maps provider error: %s", request_id_var.get(""), exc.status)
        return _error_response(502, "provider_error", exc.message, {"status": exc.status})

    @app.exception_handler(TransientServiceError)
    async def handle_transient(request: Request, exc: TransientServiceError):
        logger.error("[%s] Maps service unavailable: %s", request_id_var.get(""), exc.message)
        return _error_response(
            503,
            "service_unavailable",
            exc.message,
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(ConfigurationError)
    async def handle_configuration_error(request: Request, exc: ConfigurationError):
        logger.error("[%s] Configuration error: %s", request_id_var.get(""), exc.message)
        return _error_response(500, "configuration_error", exc.message)

    @app.exception_handler(RepositoryError)
    async def handle_repository_error(request: Request, exc: RepositoryError):
        logger.error(
            "[%s] Repository error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(500, "repository_error", exc.message)

    @app.exception_handler(TranscriptionError)
    async def handle_transcription_error(request: Request, exc: TranscriptionError):
        logger.error(
            "[%s] Transcription error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(500, "transcription_error", exc.message)

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        logger.error(
            "[%s] File storage error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(NoteMapError)
    async def handle_app_error(request: Request, exc: NoteMapError):
        logger.error("[%s] Unhandled application error: %s", request_id_var.get(""), exc.message)
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Stack trace goes to the log only, never into the response."""
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="NoteMap API",
        description=(
            "Anonymous-identity backend for transcribing handwritten notes and "
            "finding nearby facilities by address."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: CORS → GZip → RequestID → Logging → Identity
    app.add_middleware(IdentityMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        # The identity cookie must travel with cross-origin requests
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Identity-Degraded", "Retry-After"],
    )

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(me.router)
    app.include_router(analyze.router)
    app.include_router(entries.router)
    app.include_router(distance.router)
    app.include_router(geocode.router)
    app.include_router(health.router)

    return app


app = create_app()
