"""
BugLab Backend — FastAPI Application Factory
=============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds the services around one engine/session factory,
       registers middleware, exception handlers and routers.
Who:   uvicorn (`uvicorn buglab.main:app`) and the HTTP tests.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware: CORS → Request ID → Logging → Security      │
    │              Headers → GZip → Timeout                    │
    │                                                          │
    │  Routes:     /auth/*   /scientists/*   /bugs/*  /health  │
    │                                                          │
    │  app.state:  settings, engine, session_factory,          │
    │              profile/bug/assignment services,            │
    │              session authenticator                       │
    │                                                          │
    │  Errors:     BugLabError → its status_code               │
    │              request body schema errors → 400            │
    │              anything else → 500                         │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, production config check, optional create_all
    Shutdown: dispose the engine (close pooled connections)
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
from sqlalchemy.ext.asyncio import AsyncEngine
from starlette.exceptions import HTTPException as StarletteHTTPException

from buglab import __version__
from buglab.config import Settings, settings as default_settings
from buglab.database import create_session_factory, engine as default_engine, init_models
from buglab.exceptions import AuthenticationRequiredError, BugLabError
from buglab.middleware.logging import RequestLoggingMiddleware
from buglab.middleware.request_id import RequestIDMiddleware, request_id_var
from buglab.middleware.security_headers import SecurityHeadersMiddleware
from buglab.middleware.timeout import RequestTimeoutMiddleware
from buglab.routes import auth, bugs, health, scientists
from buglab.services.assignment_service import AssignmentService
from buglab.services.bug_service import BugService
from buglab.services.credential_service import PasswordHasher
from buglab.services.profile_service import ProfileService
from buglab.services.session_service import SessionAuthenticator

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once per process.

    Format: 2024-01-15T12:00:00 [INFO] buglab.services.bug_service: Bug 3 created
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    app_settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(app_settings.log_level)
    logger.info("=" * 60)
    logger.info("BugLab Backend %s starting up (%s)", __version__, app_settings.environment)

    try:
        app_settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        raise

    if app_settings.auto_create_tables:
        await init_models(app.state.engine)
        logger.info("Database tables created (AUTO_CREATE_TABLES=true)")

    logger.info("Server ready at http://%s:%d", app_settings.backend_host, app_settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("BugLab Backend shutting down...")
    await app.state.engine.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    request: Request,
    status_code: int,
    message: str,
    details: Optional[str] = None,
) -> JSONResponse:
    """Build the `{error, details?}` body; details never leave production."""
    content = {"error": message}
    if details and not request.app.state.settings.is_production:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Handler hierarchy:
        AuthenticationRequiredError → 401, also clears the session cookie
        BugLabError subclasses      → exc.status_code (400/401/404/409/500)
        RequestValidationError      → 400 (body not the expected shape)
        StarletteHTTPException      → its own status (404 route, 405 method)
        Exception (fallback)        → 500, stack trace logged server-side only
    """

    @app.exception_handler(AuthenticationRequiredError)
    async def handle_authentication_required(request: Request, exc: AuthenticationRequiredError):
        response = _error_response(request, exc.status_code, exc.message)
        response.delete_cookie(request.app.state.settings.session_cookie_name)
        return response

    @app.exception_handler(BugLabError)
    async def handle_buglab_error(request: Request, exc: BugLabError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.info("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        return _error_response(request, exc.status_code, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        details = "; ".join(
            f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}"
            for err in errors
        )
        return _error_response(request, 400, "Invalid request", details)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        response = _error_response(request, exc.status_code, str(exc.detail))
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return _error_response(request, 500, "An unexpected error occurred", str(exc))


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    app_settings: Optional[Settings] = None,
    engine: Optional[AsyncEngine] = None,
) -> FastAPI:
    """
    Assemble the application.

    Args:
        app_settings: Defaults to the process-wide `settings`.
        engine: Defaults to the process-wide engine. Tests pass an engine
            bound to a throwaway SQLite file.
    """
    app_settings = app_settings or default_settings
    engine = engine or default_engine

    app = FastAPI(
        title="BugLab API",
        description="Scientists, the bugs they hunt, and who is assigned to what.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Services ──────────────────────────────────────────────────────────
    session_factory = create_session_factory(engine)
    hasher = PasswordHasher(rounds=app_settings.bcrypt_rounds)

    app.state.settings = app_settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.profile_service = ProfileService(
        session_factory, hasher, password_min_length=app_settings.password_min_length
    )
    app.state.bug_service = BugService(session_factory)
    app.state.assignment_service = AssignmentService(session_factory)
    app.state.session_authenticator = SessionAuthenticator(
        session_factory, hasher, max_age=app_settings.session_max_age
    )

    # ── Middleware (last added runs first) ────────────────────────────────
    app.add_middleware(RequestTimeoutMiddleware, timeout_seconds=app_settings.request_timeout_seconds)
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(SecurityHeadersMiddleware, hsts=app_settings.session_cookie_is_secure)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(scientists.router)
    app.include_router(bugs.router)
    app.include_router(health.router)

    return app


app = create_app()
