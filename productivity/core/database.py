"""Database configuration - async SQLAlchemy."""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from productivity.core.config import Settings, settings


class Base(DeclarativeBase):
    """Declarative base shared by all models."""


def build_engine(app_settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured database URL."""
    kwargs: dict[str, Any] = {
        # Only echo SQL when debug is explicitly enabled
        "echo": app_settings.debug and app_settings.log_level == "DEBUG",
    }
    # SQLite uses a single-connection pool that rejects sizing arguments
    if not app_settings.is_sqlite:
        kwargs.update(
            pool_size=app_settings.db_pool_size,
            max_overflow=app_settings.db_max_overflow,
            pool_timeout=app_settings.db_pool_timeout,
            pool_recycle=app_settings.db_pool_recycle,
            pool_pre_ping=True,
        )
    return create_async_engine(app_settings.database_url, **kwargs)


def build_session_maker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(settings)

async_session_maker = build_session_maker(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get a request-scoped database session."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except BaseException:
            # BaseException so that cancellation also rolls back
            await session.rollback()
            raise
        finally:
            await session.close()


async def check_db_connection() -> bool:
    """Check if the database is reachable."""
    try:
        async with async_session_maker() as session:
            await session.execute(text("SELECT 1"))
            return True
    except (OSError, ConnectionError) as e:
        from productivity.core.logging import get_logger

        get_logger("database").debug(f"Database connection check failed: {e}")
        return False
    except Exception as e:
        from productivity.core.logging import get_logger

        get_logger("database").warning(f"Unexpected error checking database connection: {e}")
        return False
