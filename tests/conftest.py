"""Pytest configuration and fixtures.

This module provides common fixtures used across all tests.
"""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from intake.core.database import Base, create_session_factory
from intake.core.logging import setup_logging

# Setup logging for tests
setup_logging()


@pytest_asyncio.fixture
async def sqlite_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an in-memory SQLite engine with all tables.

    Yields:
        Async engine; disposed after the test
    """
    import intake.models  # noqa: F401

    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine: AsyncEngine) -> async_sessionmaker:
    """Create a session factory bound to the SQLite engine."""
    return create_session_factory(sqlite_engine)
