"""Fixtures for tests against a real (SQLite) database."""

import pytest_asyncio
from sqlalchemy import func, select

from chainsync.config.database import create_engine, create_session_maker
from chainsync.config.settings import Settings
from chainsync.models import Base
from chainsync.services.block_store import SqlBlockStore


@pytest_asyncio.fixture
async def engine():
    """In-memory database with all tables created."""
    settings = Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        rpc_url="http://localhost:8545",
        environment="test",
    )
    engine = create_engine(settings)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(engine):
    return create_session_maker(engine)


@pytest_asyncio.fixture
async def sql_store(session_maker):
    return SqlBlockStore(session_maker)


@pytest_asyncio.fixture
async def count_rows(session_maker):
    """Return a helper counting rows of a model."""
    async def count(model) -> int:
        async with session_maker() as session:
            result = await session.execute(select(func.count()).select_from(model))
            return result.scalar_one()
    return count
