"""
Integration test configuration and fixtures.

These tests talk to a real Redis server. They are skipped unless
TEST_REDIS_URL points at one, e.g. ``redis://localhost:6379/15``.
"""
import logging
import os
import uuid
from dataclasses import dataclass, field

import pytest
import pytest_asyncio
from redis.asyncio import Redis

from redis_session_store.session.redis_store import RedisStore

logger = logging.getLogger(__name__)


@dataclass
class TestRedisConfig:
    """
    Configuration for the test Redis instance.

    Environment Variables:
    - TEST_REDIS_URL: Redis URL for integration tests (unset skips them)
    """
    url: str = field(default_factory=lambda: os.getenv("TEST_REDIS_URL", ""))

    @property
    def is_configured(self) -> bool:
        return bool(self.url)


@pytest.fixture(scope="session")
def test_redis_config() -> TestRedisConfig:
    return TestRedisConfig()


@pytest_asyncio.fixture
async def redis_client(test_redis_config: TestRedisConfig):
    """A real async Redis client, skipped when no server is configured or reachable."""
    if not test_redis_config.is_configured:
        pytest.skip("Real Redis not configured. Set TEST_REDIS_URL to run integration tests.")

    client = Redis.from_url(test_redis_config.url)
    try:
        await client.ping()
    except Exception as e:
        await client.aclose()
        pytest.skip(f"Failed to connect to Redis: {e}")

    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def redis_store(redis_client):
    """A store under a prefix unique to the test; its keys are cleared afterwards."""
    prefix = f"test:{uuid.uuid4().hex}:"
    store = RedisStore(client=redis_client, prefix=prefix, scan_count=5)
    yield store
    await store.clear()
    logger.info(f"Cleaned up test prefix: {prefix}")
