"""
NoteWise Backend - FastAPI Application Factory
==============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers and routers;
       uvicorn serves `notewise.main:app`.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware: Request ID → Logging → GZip → CORS     │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌──────────────┐ ┌─────────────┐  │
    │  │ /api/notes.. │ │ /api/ai/..   │ │ /health     │  │
    │  └──────────────┘ └──────────────┘ └─────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  Auth→401 │ NotFound→404 │ DB→500                   │
    │  GeminiError→429/502/503/504 by kind │ Config→503   │
    └─────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Tuple

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from notewise import __version__
from notewise.config import settings
from notewise.database import dispose_engine
from notewise.exceptions import (
    AuthenticationError,
    ConfigurationError,
    DatabaseError,
    GeminiError,
    GeminiErrorKind,
    NotewiseError,
    NotFoundError,
)
from notewise.middleware.logging import RequestLoggingMiddleware
from notewise.middleware.request_id import RequestIDMiddleware, request_id_var
from notewise.routes import ai, health, notes

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure root logging once at startup.

    Format: 2024-01-15T12:00:00 [INFO] notewise.services.gemini_service: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries that log every request at INFO.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("google_genai").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("NoteWise Backend %s starting up...", __version__)

    # A missing Gemini key is reported but not fatal: note CRUD still works
    # and AI endpoints answer 503 until the key is configured.
    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("NoteWise Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

# kind → (HTTP status, error code, user-facing message). Provider messages
# are never shown to users; they are logged instead.
GEMINI_ERROR_RESPONSES: Dict[GeminiErrorKind, Tuple[int, str, str]] = {
    GeminiErrorKind.RATE_LIMITED: (
        429,
        "ai_rate_limited",
        "The AI service is busy right now. Please try again shortly.",
    ),
    GeminiErrorKind.TIMED_OUT: (
        504,
        "ai_timeout",
        "The AI request took too long. Please try again.",
    ),
    GeminiErrorKind.INVALID_API_KEY: (
        503,
        "ai_unavailable",
        "The AI service could not complete the request. Please try again later.",
    ),
    GeminiErrorKind.UNKNOWN: (
        502,
        "ai_error",
        "The AI service could not complete the request. Please try again later.",
    ),
}

# Seconds a client should wait before retrying a rate-limited AI request.
RATE_LIMIT_RETRY_AFTER = 30


def gemini_error_response(exc: GeminiError) -> Tuple[int, str, str]:
    return GEMINI_ERROR_RESPONSES[exc.kind]


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and JSON bodies.

        AuthenticationError → 401
        NotFoundError       → 404
        GeminiError         → by kind (see GEMINI_ERROR_RESPONSES)
        ConfigurationError  → 503
        DatabaseError       → 500
        NotewiseError       → 500
        Exception           → 500

    Bodies never include stack traces, SQL or provider messages.
    """

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=401,
            content={
                "error": "unauthorized",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=404,
            content={
                "error": "not_found",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(GeminiError)
    async def handle_gemini_error(request: Request, exc: GeminiError):
        rid = request_id_var.get("")
        status, code, message = gemini_error_response(exc)
        logger.error("[%s] Gemini error (%s): %s", rid, exc.kind.value, exc.message)
        headers = {}
        if exc.kind is GeminiErrorKind.RATE_LIMITED:
            headers["Retry-After"] = str(RATE_LIMIT_RETRY_AFTER)
        return JSONResponse(
            status_code=status,
            content={
                "error": code,
                "message": message,
                "request_id": rid,
            },
            headers=headers,
        )

    @app.exception_handler(ConfigurationError)
    async def handle_configuration_error(request: Request, exc: ConfigurationError):
        rid = request_id_var.get("")
        logger.error("[%s] Configuration error: %s", rid, exc.message)
        return JSONResponse(
            status_code=503,
            content={
                "error": "ai_not_configured",
                "message": "AI features are not configured on this server.",
                "request_id": rid,
            },
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "An internal error occurred. Please try again later.",
                "request_id": rid,
            },
        )

    @app.exception_handler(NotewiseError)
    async def handle_app_error(request: Request, exc: NotewiseError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="NoteWise API",
        description=(
            "Personal notes with AI-generated bullet summaries and tags "
            "powered by Google Gemini."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware runs in reverse order of addition: RequestID executes first.
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

    register_exception_handlers(app)

    app.include_router(notes.router)
    app.include_router(ai.router)
    app.include_router(health.router)

    return app


app = create_app()
