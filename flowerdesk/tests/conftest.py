"""
Test fixtures for flowerdesk backend tests.

Provides:
- In-memory SQLite database for isolated testing
- ``storage`` fixture running service tests against both storage implementations
- Async test client with proper session management
- Small factories for warehouse stock and orders
"""
# IMPORTANT: Set environment variables BEFORE any other imports
import os

# DB settings required by Settings validation (tests use SQLite in-memory, these are not actually used)
os.environ.setdefault("DB_USER", "test")
os.environ.setdefault("DB_PASSWORD", "test")
os.environ.setdefault("DB_NAME", "test")
# Development mode for tests (disables ALLOWED_ORIGINS requirement)
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("STRICT_STOCK_CHECK", "false")
os.environ.setdefault("SEED_ON_STARTUP", "false")

from datetime import datetime
from types import SimpleNamespace
from typing import AsyncGenerator

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
)
from sqlalchemy.pool import StaticPool

from flowerdesk.app.core.base import Base
import flowerdesk.app.models  # noqa: F401 - register all tables with Base.metadata
from flowerdesk.app.storage import DatabaseStorage, MemoryStorage, Storage


# Test database URL - SQLite in-memory
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database per test, created on the test's own event loop."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
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


@pytest.fixture
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture(params=["memory", "database"])
async def storage(request, test_session: AsyncSession) -> AsyncGenerator[Storage, None]:
    """
    Every service test runs twice: against MemoryStorage and against
    DatabaseStorage over SQLite.
    """
    if request.param == "memory":
        yield MemoryStorage()
        return
    yield DatabaseStorage(test_session)


@pytest.fixture
async def client(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client for testing API endpoints.

    Every API call gets a fresh session, like production requests do, so
    nothing leaks between requests except what was committed.
    """
    from flowerdesk.app.main import app
    from flowerdesk.app.api.deps import get_session

    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# --- Test Data Factories ---

async def stock(storage: Storage, **flowers: int) -> None:
    """Put flowers into the warehouse and commit: ``await stock(storage, Rose=10)``."""
    for name, quantity in flowers.items():
        await storage.insert_flower(name, quantity)
    await storage.commit()


async def amounts(storage: Storage) -> dict:
    """Current warehouse as ``{name: quantity}``."""
    return {f.name: f.quantity for f in await storage.list_flowers()}


def delivery_header(**overrides) -> dict:
    header = {
        "sender": "Анна",
        "recipient": "Мария",
        "address": "ул. Ленина, 1",
        "scheduled_at": datetime(2026, 3, 8, 10, 0),
        "time_from": "10:00",
        "time_to": "12:00",
        "notes": None,
        "is_pickup": False,
        "is_showcase": False,
    }
    header.update(overrides)
    return header


@pytest.fixture
def helpers():
    """Factories exposed as a fixture so test modules do not import conftest."""
    return SimpleNamespace(stock=stock, amounts=amounts, delivery_header=delivery_header)
