"""Pytest configuration and fixtures for bracket tests."""
import os

# Set test env BEFORE any imports that use config
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.pop("ELIM_SHUFFLE_SEED", None)
os.environ.pop("ELIM_MATCH_SPACING_SEC", None)

import random
from datetime import datetime

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from arena.models.base import init_db, make_session_factory
from arena.services.elimination import EliminationScheduler
from arena.services.match_store import MatchStore
from arena.services.seeding import SeedSource

START = datetime(2026, 10, 18, 13, 0)


def alliance_teams(alliance_id: int) -> list[int]:
    """Team ids used for a test alliance: alliance 3 is teams 301, 302, 303."""
    return [alliance_id * 100 + pick for pick in (1, 2, 3)]


@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine):
    factory = make_session_factory(engine)
    async with factory() as session:
        yield session


@pytest.fixture
def seeds(session):
    return SeedSource(session)


@pytest.fixture
def store(session):
    return MatchStore(session)


@pytest.fixture
def scheduler(seeds, store):
    """Scheduler with a fixed shuffle seed so slot assignments repeat between runs."""
    return EliminationScheduler(seeds, store, rng=random.Random(254))


@pytest.fixture
def seed_alliances(seeds):
    """Load the given number of alliances from alliance selection."""
    async def _seed(count: int):
        return await seeds.replace_alliances([alliance_teams(a) for a in range(1, count + 1)])
    return _seed
