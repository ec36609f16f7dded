"""Service test fixtures — async SQLite store + FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - Services on app.state are replaced with ones built on the test store
    - The clock is fixed; tests advance it explicitly

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for store and
      route tests
"""

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from httpx import ASGITransport, AsyncClient

import somni.models  # noqa: F401
from somni.api.dependencies import Services
from somni.db.base import Base
from somni.infrastructure.database import DatabaseSessionManager
from somni.infrastructure.sleep_store import SqlSleepStore
from somni.main import app
from somni.services.session_manager import SleepSessionManager
from somni.services.sleep_calculator import SleepCalculator

from tests.fakes import CountingIdGenerator, FixedClock, RecordingScheduler


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def scheduler():
    return RecordingScheduler()


@pytest.fixture
def store(test_engine, clock):
    return SqlSleepStore(DatabaseSessionManager.from_engine(test_engine), clock)


@pytest.fixture
async def client(store, clock, scheduler):
    """FastAPI test client wired to the test store."""
    app.state.services = Services(
        store=store,
        session_manager=SleepSessionManager(store, clock, CountingIdGenerator()),
        sleep_calculator=SleepCalculator(store, scheduler, clock, profile_repository=store),
    )
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    del app.state.services
