"""
Main pytest configuration for all tests.

Fixtures for unit tests run the cache against an in-memory Redis double;
integration tests talk to a live server at REDIS_URL.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from typed_redis_cache import RedisCache, RedisCacheConfig
from tests.fakes import FakeRedis

FACTORY_MODULE = "typed_redis_cache.infrastructure.redis.connection_factory"


@pytest.fixture
def fake_redis():
    """In-memory Redis double shared by the pool patch and the test."""
    return FakeRedis()


@pytest.fixture
def mock_pool():
    """Connection pool mock returned by ConnectionPool.from_url()."""
    pool = MagicMock()
    pool.max_connections = 10
    pool.disconnect = AsyncMock()
    return pool


@pytest.fixture
def patched_redis(fake_redis, mock_pool):
    """Route the connection factory to the in-memory double."""
    with patch(f"{FACTORY_MODULE}.ConnectionPool") as pool_cls, patch(
        f"{FACTORY_MODULE}.Redis", return_value=fake_redis
    ) as redis_cls:
        pool_cls.from_url.return_value = mock_pool
        yield pool_cls, redis_cls


@pytest.fixture
def cache_config():
    """Configuration matching the reference scenarios."""
    return RedisCacheConfig(
        url="redis://localhost:56379/2", group_key_prefix="tests", ttl=5
    )


@pytest.fixture
def redis_cache(cache_config, patched_redis):
    """Cache client backed by the in-memory double."""
    return RedisCache(cache_config)


# Test markers and configuration
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "redis: marks tests as Redis-related")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")


def pytest_collection_modifyitems(config, items):
    """Add markers based on test file location."""
    for item in items:
        if "integration" in item.nodeid:
            item.add_marker(pytest.mark.integration)
            item.add_marker(pytest.mark.redis)
