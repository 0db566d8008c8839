"""Pytest configuration and fixtures for API tests.

Tests run against an in-memory SQLite database (aiosqlite) with one shared
connection, so every session in a test sees the same data.
"""

import os
from collections.abc import AsyncGenerator
from datetime import date

import pytest
import pytest_asyncio
from argon2 import PasswordHasher
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_ACCESS_SECRET_KEY"] = "test-access-secret-" + "a" * 32
os.environ["JWT_REFRESH_SECRET_KEY"] = "test-refresh-secret-" + "b" * 32
os.environ["REVOCATION_BACKEND"] = "memory"
os.environ["LOG_LEVEL"] = "WARNING"

TEST_PASSWORD = "password123"


# --- Password hashing ---


@pytest.fixture(autouse=True)
def fast_password_hasher(monkeypatch):
    """Use cheap Argon2 parameters so hashing does not dominate test time."""
    from productivity.services import session

    monkeypatch.setattr(
        session,
        "ph",
        PasswordHasher(time_cost=1, memory_cost=8, parallelism=1, hash_len=16, salt_len=16),
    )


# --- Database Fixtures ---


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create an in-memory SQLite engine with all tables."""
    from productivity.core.database import Base
    from productivity.models import (  # noqa: F401
        ActivityLog,
        DailyLog,
        ReportRequest,
        Role,
        Target,
        TokenBlacklist,
        User,
    )

    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for testing."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def roles(db_session):
    """Seed the four fixed roles; returns them keyed by name."""
    from productivity.seed import seed_roles

    seeded = await seed_roles(db_session)
    await db_session.commit()
    return {role.name: role for role in seeded}


# --- Application Fixtures ---


@pytest.fixture
def test_settings():
    from productivity.core.config import Settings

    return Settings()


@pytest.fixture
def app(test_settings):
    """A fresh application so revocation state never leaks between tests."""
    from productivity.api.auth import reset_login_attempts
    from productivity.main import create_app

    reset_login_attempts()
    application = create_app(test_settings)
    yield application
    application.dependency_overrides.clear()
    reset_login_attempts()


@pytest_asyncio.fixture(scope="function")
async def async_client(app, db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with database override."""
    from productivity.core.database import get_db

    # No rollback on errors: it would expire the fixtures' ORM objects
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session
        await db_session.commit()

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def token_codec(app):
    return app.state.token_codec


@pytest.fixture
def revocation_registry(app):
    return app.state.revocation_registry


# --- Test Factories ---


@pytest.fixture
def user_factory(db_session, roles):
    """Factory for creating users with a given role name."""
    from productivity.models import User
    from productivity.services.session import hash_password

    async def _create_user(
        username: str = "operator1",
        role: str = "operator",
        password: str = TEST_PASSWORD,
        email: str | None = None,
        full_name: str | None = None,
    ) -> User:
        user = User(
            username=username,
            email=email or f"{username}@example.com",
            password_hash=hash_password(password),
            full_name=full_name or username.title(),
            role_id=roles[role].id,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _create_user


@pytest.fixture
def daily_log_factory(db_session):
    """Factory for creating daily logs directly in the database."""
    from productivity.models import DailyLog

    async def _create_log(
        user_id: int,
        log_date: date,
        binning_count: int = 0,
        picking_count: int = 0,
        is_present: bool = True,
    ) -> DailyLog:
        log = DailyLog(
            user_id=user_id,
            log_date=log_date,
            is_present=is_present,
            binning_count=binning_count,
            picking_count=picking_count,
            total_items=binning_count + picking_count,
        )
        db_session.add(log)
        await db_session.commit()
        await db_session.refresh(log)
        return log

    return _create_log


@pytest.fixture
def auth_headers(token_codec):
    """Build Authorization headers carrying an access token for a user."""
    from productivity.services.tokens import TokenKind, TokenSubject

    def _headers(user) -> dict[str, str]:
        token = token_codec.issue(
            TokenSubject(id=user.id, username=user.username, role=user.role.name),
            TokenKind.ACCESS,
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers
