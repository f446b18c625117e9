"""
Redis Connection Factory

Owns the redis-py connection pool behind a cache client: lazy opening with a
verifying PING, transactional pipelines on isolated pool connections, and
shutdown of every connection the pool created.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional
from urllib.parse import urlparse

from redis.asyncio import ConnectionPool, Redis
from redis.asyncio.client import Pipeline
from redis.exceptions import (
    AuthenticationError as RedisAuthError,
    RedisError,
)

from .exceptions import (
    CacheAuthenticationException,
    CacheConnectionException,
)

logger = logging.getLogger(__name__)


class RedisConnectionFactory:
    """
    Factory for the connection pool of a single cache client.

    The pool is created on ``initialize()`` and verified with PING; a failed
    verification discards the pool so the factory stays closed.
    """

    def __init__(self, url: str, connection_kwargs: Optional[Dict[str, Any]] = None):
        self._url = url
        self._connection_kwargs = dict(connection_kwargs or {})
        self._pool: Optional[ConnectionPool] = None
        self._client: Optional[Redis] = None
        self._lock = asyncio.Lock()

        parsed_url = urlparse(url)
        self._host = parsed_url.hostname
        self._port = parsed_url.port
        self._username = parsed_url.username

    @property
    def is_open(self) -> bool:
        """True while a verified pool is held."""
        return self._client is not None

    @property
    def client(self) -> Redis:
        """Redis client bound to the open pool.

        Raises:
            CacheConnectionException: If the factory is not initialized
        """
        if self._client is None:
            raise CacheConnectionException(
                message="Redis connection is not open", host=self._host, port=self._port
            )
        return self._client

    async def initialize(self) -> bool:
        """Create the pool and verify it.

        Returns:
            True if this call opened the pool, False if it was already open
        """
        if self.is_open:
            return False

        async with self._lock:
            if self.is_open:
                return False

            pool = ConnectionPool.from_url(self._url, **self._connection_kwargs)
            client = Redis(connection_pool=pool)
            try:
                await self._test_connection(client)
            except Exception:
                await pool.disconnect()
                raise

            self._pool = pool
            self._client = client
            logger.info(
                "Redis connection pool opened",
                extra={
                    "host": self._host,
                    "port": self._port,
                    "max_connections": pool.max_connections,
                },
            )
            return True

    async def _test_connection(self, client: Redis) -> None:
        """Test connection pool with a PING."""
        try:
            await client.ping()
            logger.debug("Redis connection test successful")
        except RedisAuthError as e:
            raise CacheAuthenticationException(
                message="Redis authentication failed",
                username=self._username,
                original_error=e,
            )
        except (RedisError, OSError) as e:
            logger.error(f"Redis connection test failed: {e}")
            raise CacheConnectionException(
                message=f"Redis connection failed: {str(e)}",
                host=self._host,
                port=self._port,
                original_error=e,
            )

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Pipeline]:
        """
        Yield a MULTI/EXEC pipeline.

        Commands are buffered locally and sent on ``execute()`` over a single
        connection checked out of the pool for the duration of the transaction.
        """
        async with self.client.pipeline(transaction=True) as pipe:
            yield pipe

    async def health_check(self) -> Dict[str, Any]:
        """
        Ping the server and report pool state.

        Returns:
            Health check results; never raises
        """
        health_status: Dict[str, Any] = {
            "status": "unhealthy",
            "timestamp": time.time(),
            "pool": None,
        }

        if not self.is_open:
            health_status["error"] = "Redis connection is not open"
            return health_status

        try:
            start_time = time.time()
            await self.client.ping()
            response_time = time.time() - start_time

            health_status["status"] = "healthy"
            health_status["response_time_ms"] = round(response_time * 1000, 2)
            health_status["pool"] = self.get_metrics()
        except (RedisError, OSError) as e:
            health_status["error"] = str(e)
            logger.error(f"Redis health check failed: {e}")

        return health_status

    async def close(self) -> bool:
        """Close the pool and every connection it created.

        Connections still checked out are dropped as well; the pool is
        discarded and nothing would close them once released.

        Returns:
            True if this call closed the pool, False if it was already closed
        """
        async with self._lock:
            if self._client is None:
                return False

            client, pool = self._client, self._pool
            self._client = None
            self._pool = None

            await client.aclose()
            if pool is not None:
                await pool.disconnect(inuse_connections=True)

            logger.info("Redis connection pool closed")
            return True

    def get_metrics(self) -> Dict[str, Any]:
        """Get connection pool metrics."""
        if self._pool is None:
            return {"open": False}
        return {
            "open": True,
            "max_connections": self._pool.max_connections,
            "created_connections": getattr(self._pool, "_created_connections", 0),
            "available_connections": len(
                getattr(self._pool, "_available_connections", [])
            ),
        }
