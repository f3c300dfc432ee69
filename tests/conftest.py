"""Shared pytest fixtures for all test suites."""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import date
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from backend.trips.db.engine import create_async_engine_for_url
from backend.trips.db.models import Base
from tests.seed import SeededItinerary, create_schema, seed_itinerary


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    """File-backed SQLite URL so every connection sees the same database."""
    return f"sqlite+aiosqlite:///{tmp_path / 'trips.db'}"


@pytest_asyncio.fixture
async def sqlite_engine(sqlite_url: str) -> AsyncGenerator[AsyncEngine, None]:
    """SQLite engine with foreign keys enforced and the schema created."""
    engine = create_async_engine_for_url(sqlite_url, poolclass=NullPool)
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(sqlite_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(bind=sqlite_engine, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
def itinerary_factory(session: AsyncSession) -> Callable[..., Awaitable[SeededItinerary]]:
    """Seed an itinerary in the test session.

    Usage:
        seeded = await itinerary_factory(date(2025, 6, 1), date(2025, 6, 5))
    """

    async def _factory(start: date, end: date, **kwargs: Any) -> SeededItinerary:
        return await seed_itinerary(session, start, end, **kwargs)

    return _factory


@pytest_asyncio.fixture
async def postgres_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create async engine for PostgreSQL integration tests.

    Requires DATABASE_URL to be set to a real PostgreSQL connection string.
    Tests using this fixture should be marked with @pytest.mark.postgres.
    """
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        pytest.skip("DATABASE_URL not set - skipping postgres test")

    if not database_url.startswith(("postgresql://", "postgresql+asyncpg://")):
        pytest.skip(f"DATABASE_URL is not PostgreSQL: {database_url}")

    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)

    engine = create_async_engine_for_url(database_url, poolclass=NullPool)
    await create_schema(engine)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def postgres_session(postgres_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSession(postgres_engine, expire_on_commit=False) as session:
        yield session
        await session.rollback()
