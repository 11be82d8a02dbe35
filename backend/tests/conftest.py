"""Pytest fixtures for testing."""
import os
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

# Must be set before any app imports that trigger Settings validation
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SEED_DEFAULT_CATEGORIES"] = "false"

from models.base import Base, utcnow  # noqa: E402
from models.bookmark import Bookmark  # noqa: E402


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """
    Create a fresh in-memory database per test.

    StaticPool keeps a single connection alive so every session sees the same
    in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Create an async session on the per-test database."""
    session_factory = async_sessionmaker(
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(
    db_session: AsyncSession,
) -> AsyncGenerator[AsyncClient]:
    """Create a test client with database session override."""
    from core.config import get_settings

    get_settings.cache_clear()

    from api.main import app
    from db.session import get_async_session

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_async_session] = override_get_async_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def make_bookmark(db_session: AsyncSession):  # noqa: ANN201
    """
    Factory inserting a bookmark directly through the ORM.

    Each call gets a created_at one second later than the previous call so
    ordering by creation time is deterministic.
    """
    base_time = utcnow().replace(microsecond=0) - timedelta(hours=1)
    counter = {"n": 0}

    async def _make(**overrides: object) -> Bookmark:
        counter["n"] += 1
        created_at: datetime = base_time + timedelta(seconds=counter["n"])
        values = {
            "url": f"https://example.com/{counter['n']}",
            "title": f"Bookmark {counter['n']}",
            "created_at": created_at,
            "updated_at": created_at,
        }
        values.update(overrides)
        bookmark = Bookmark(**values)
        db_session.add(bookmark)
        await db_session.flush()
        await db_session.refresh(bookmark)
        return bookmark

    return _make
