"""
Configuration and fixtures for live Redis integration tests.

Tests run against REDIS_URL (default redis://localhost:56379/2) and are
skipped when the server is not reachable.
"""

import os

import pytest_asyncio
import pytest
import structlog

from typed_redis_cache import CacheConnectionException, RedisCache, RedisCacheConfig

# Configure logging for tests
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

INTEGRATION_TEST_CONFIG = {
    "redis_url": os.environ.get("REDIS_URL", "redis://localhost:56379/2"),
    "group_key_prefix": "tests",
    "ttl": 5,
}


async def _purge(cache: RedisCache) -> None:
    keys = await cache.keys(f"{INTEGRATION_TEST_CONFIG['group_key_prefix']}:*")
    if keys:
        await cache._connection.client.delete(*keys)


@pytest_asyncio.fixture
async def live_cache():
    """Cache client on the live server with an empty test namespace."""
    cache = RedisCache(
        RedisCacheConfig(
            url=INTEGRATION_TEST_CONFIG["redis_url"],
            group_key_prefix=INTEGRATION_TEST_CONFIG["group_key_prefix"],
            ttl=INTEGRATION_TEST_CONFIG["ttl"],
        )
    )
    try:
        await cache.connect()
    except CacheConnectionException as e:
        pytest.skip(f"Redis not reachable: {e.message}")

    await _purge(cache)
    try:
        yield cache
    finally:
        await _purge(cache)
        await cache.terminate()
