"""Warehouse Productivity API - FastAPI Application Factory."""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from productivity.api import api_router
from productivity.api.auth import router as auth_router
from productivity.api.error_handling import register_exception_handlers
from productivity.api.health import router as health_router
from productivity.core import async_session_maker, engine, settings, setup_logging
from productivity.core.config import Settings
from productivity.core.database import build_engine, build_session_maker
from productivity.core.logging import get_logger
from productivity.middleware import RequestGate, SecurityHeadersMiddleware

# Import all models to ensure they're registered with Base for Alembic
from productivity.models import (  # noqa: F401
    ActivityLog,
    DailyLog,
    ReportRequest,
    Role,
    Target,
    TokenBlacklist,
    User,
)
from productivity.services.revocation import (
    DatabaseRevocationRegistry,
    InMemoryRevocationRegistry,
    RevocationRegistry,
)
from productivity.services.tokens import TokenCodec

logger = get_logger("main")


def task_done_callback(task: asyncio.Task[None]) -> None:
    """Log unhandled exceptions from background tasks."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(f"Background task {task.get_name()} failed: {exc}")


def build_revocation_registry(
    app_settings: Settings,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> RevocationRegistry:
    """Pick the registry backend named by ``revocation_backend``.

    The database backend uses ``session_factory`` when given, otherwise a
    factory bound to ``app_settings.database_url``.
    """
    if app_settings.revocation_backend != "database":
        return InMemoryRevocationRegistry()
    if session_factory is None:
        if app_settings.database_url == settings.database_url:
            session_factory = async_session_maker
        else:
            session_factory = build_session_maker(build_engine(app_settings))
    return DatabaseRevocationRegistry(session_factory)


async def _revocation_cleanup_loop(registry: RevocationRegistry, interval: int) -> None:
    """Periodically drop revocation entries for tokens that have expired."""
    while True:
        await asyncio.sleep(interval)
        try:
            removed = await registry.purge_expired()
            if removed > 0:
                logger.info(f"Cleaned up {removed} expired revocation entries")
        except Exception:
            logger.exception("Error cleaning up revocation entries")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    app_settings: Settings = app.state.settings
    setup_logging(level=app_settings.log_level, format_type=app_settings.log_format)
    logger.info(f"Starting {app_settings.app_name} v{app_settings.app_version}")

    # Check security configuration
    for warning in app_settings.check_security_configuration():
        logger.warning(f"SECURITY: {warning}")

    cleanup_task = asyncio.create_task(
        _revocation_cleanup_loop(
            app.state.revocation_registry,
            app_settings.revocation_cleanup_interval_seconds,
        ),
        name="revocation-cleanup",
    )
    cleanup_task.add_done_callback(task_done_callback)

    yield

    # Shutdown
    logger.info("Shutting down...")
    cleanup_task.cancel()
    try:
        await cleanup_task
    except asyncio.CancelledError:
        pass
    await engine.dispose()


def create_app(
    app_settings: Settings | None = None,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``session_factory`` overrides the sessions used by the database
    revocation backend.
    """
    app_settings = app_settings or settings
    app = FastAPI(
        title=app_settings.app_name,
        description="Role-based API for warehouse operator productivity",
        version=app_settings.app_version,
        lifespan=lifespan,
        # API schema is only published for local development
        docs_url="/docs" if app_settings.debug else None,
        redoc_url="/redoc" if app_settings.debug else None,
        openapi_url="/openapi.json" if app_settings.debug else None,
    )

    codec = TokenCodec.from_settings(app_settings)
    registry = build_revocation_registry(app_settings, session_factory)
    app.state.settings = app_settings
    app.state.token_codec = codec
    app.state.revocation_registry = registry
    app.state.request_gate = RequestGate(codec, registry)

    register_exception_handlers(app, app_settings)

    # Security headers middleware
    app.add_middleware(SecurityHeadersMiddleware)

    # CORS middleware - MUST be outermost (added last in Starlette LIFO order)
    # so that CORS headers are present on ALL responses, including 401s.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept"],
    )

    # Include routers
    app.include_router(health_router)  # Health at root level
    app.include_router(auth_router)  # Auth at root level (/auth)
    app.include_router(api_router)  # API at /api

    return app


# Application instance
app = create_app()
