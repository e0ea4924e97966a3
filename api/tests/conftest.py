"""Pytest configuration and shared fixtures.

This module provides:
- An in-memory SQLite database per test (aiosqlite, foreign keys on)
- Async session fixture for repository/service tests
- FastAPI test client for route tests
- ``login_as`` to act as a given user without going through Google
"""

# Set environment variables BEFORE any imports that trigger Settings validation
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("REQUIRE_HTTPS", "false")
os.environ.setdefault("SESSION_SECRET_KEY", "test_session_secret_key_for_testing")

from collections.abc import AsyncGenerator, Callable, Generator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

import models  # noqa: F401  registers every table on Base.metadata
from core.auth import Membership, SessionContext, get_session_context
from core.config import Settings, clear_settings_cache
from core.csrf import HEADER_NAME as CSRF_HEADER
from core.database import Base

# =============================================================================
# Test Settings
# =============================================================================

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Settings for tests that construct them explicitly."""
    return Settings(
        database_url=TEST_DATABASE_URL,
        google_client_id="test_google_client_id",
        google_client_secret="test_google_client_secret",
        session_secret_key="test_session_secret_key_for_testing",
        cors_allowed_origins="",
    )


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def test_engine() -> AsyncGenerator[AsyncEngine]:
    """Fresh in-memory database with every table created.

    StaticPool keeps one connection so the schema outlives each checkout.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _fk_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(
    test_engine: AsyncEngine,
) -> AsyncGenerator[AsyncSession]:
    """Session for seeding and for repository/service tests.

    Route tests must ``commit()`` seeded rows before calling the client.
    """
    session_maker = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_maker() as session:
        yield session


# =============================================================================
# FastAPI Test Client Fixtures
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def app(test_engine: AsyncEngine) -> AsyncGenerator[FastAPI]:
    """FastAPI app bound to the test database."""
    # Import here so the env vars above are in place first
    from main import app as fastapi_app

    fastapi_app.state.engine = test_engine
    fastapi_app.state.session_maker = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    fastapi_app.state.init_done = True
    fastapi_app.state.init_error = None

    yield fastapi_app

    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for testing routes.

    Like the browser client, it fetches a CSRF token first and sends it on
    every request.
    """
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        status = await ac.get("/api/auth/status")
        ac.headers[CSRF_HEADER] = status.json()["csrfToken"]
        yield ac


# =============================================================================
# Auth Fixtures
# =============================================================================


@pytest.fixture
def login_as(app: FastAPI) -> Callable[..., SessionContext]:
    """Act as a user for the rest of the test.

    Usage:
        login_as(user.id, is_admin=True)
        login_as(user.id, moderates=[league.id])
    """

    def _login(
        user_id: int,
        *,
        is_admin: bool = False,
        member_of: tuple[int, ...] | list[int] = (),
        moderates: tuple[int, ...] | list[int] = (),
    ) -> SessionContext:
        memberships = [Membership(league_id, False) for league_id in member_of]
        memberships += [Membership(league_id, True) for league_id in moderates]
        context = SessionContext(
            user_id=user_id,
            is_admin=is_admin,
            memberships=tuple(memberships),
        )
        app.dependency_overrides[get_session_context] = lambda: context
        return context

    return _login


# =============================================================================
# Utility Fixtures
# =============================================================================


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio backend for anyio (required by httpx)."""
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None]:
    """Reset settings cache before each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
