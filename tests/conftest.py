"""Shared test fixtures for the revocation engine."""

import fakeredis.aioredis
import pytest
import pytest_asyncio

from jwt_revocation.config import Settings
from jwt_revocation.engine import RevocationEngine
from jwt_revocation.stores import MemoryStore
from tests.helpers.clock import FakeClock

# Wall-clock time seen by the engine when it writes purge watermarks
NOW = 2000.0


@pytest.fixture()
def settings() -> Settings:
    """Default settings, isolated from the environment's store choice."""
    return Settings(store_type="memory")


@pytest.fixture()
def store_clock() -> FakeClock:
    """Monotonic clock driving memory store expiry."""
    return FakeClock()


@pytest.fixture()
def memory_store(store_clock) -> MemoryStore:
    return MemoryStore(clock=store_clock)


@pytest.fixture()
def wall_clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture()
def engine(settings, memory_store, wall_clock) -> RevocationEngine:
    """Engine over a memory store with a frozen wall clock."""
    return RevocationEngine(settings, memory_store, clock=wall_clock)


# ---------------------------------------------------------------------------
# Fake Redis (drop-in async replacement)
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture()
async def redis_client():
    """Provide a fake Redis client."""
    client = fakeredis.aioredis.FakeRedis(decode_responses=True)
    yield client
    await client.aclose()
