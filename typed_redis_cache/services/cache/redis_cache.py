"""
Redis Cache Service

Typed key-value cache on top of Redis. Composes namespaced keys, encodes
values with their type tag, applies expiry policy and runs bulk writes and
deletes as single MULTI/EXEC transactions.
"""

import asyncio
from functools import wraps
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, TypeVar

import structlog
from opentelemetry import trace

from ...constants import DEFAULT_KEYS_PATTERN
from ...core.config import RedisCacheConfig
from ...domain.cache.codec import ValueCodec
from ...domain.cache.value_objects import CacheKeyComposer, CacheSetOptions, CacheValue
from ...infrastructure.redis.connection_factory import RedisConnectionFactory
from ...infrastructure.redis.exceptions import CacheCapacityExceededException

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)

T = TypeVar("T")


def ensure_connection(
    func: Callable[..., Awaitable[T]],
) -> Callable[..., Awaitable[T]]:
    """
    Decorator opening the client's connection before the wrapped operation runs.

    The operation is counted as running until it returns or raises, so that
    ``terminate()`` can wait for it.
    """

    @wraps(func)
    async def wrapper(self: "RedisCache", *args: Any, **kwargs: Any) -> T:
        self._operation_started()
        try:
            await self.connect()
            return await func(self, *args, **kwargs)
        finally:
            self._operation_finished()

    return wrapper


class RedisCache:
    """
    Typed Redis cache client.

    Configuration is fixed at construction. The connection pool opens lazily
    on the first operation; call ``connect()`` to pre-warm it and
    ``disconnect()`` or ``terminate()`` to release it. ``terminate()`` lets
    running operations finish first; ``disconnect()`` does not.

    Example:
        async with RedisCache(RedisCacheConfig(url=url, ttl=5)) as cache:
            await cache.set("key1", "test1")
            assert await cache.get("key1") == "test1"
    """

    def __init__(self, config: RedisCacheConfig) -> None:
        """Initialize the cache client.

        Args:
            config: Immutable client configuration

        Raises:
            CacheConfigurationException: If the connection target is missing or duplicated
        """
        self.config = config
        self._keys = CacheKeyComposer(group_key_prefix=config.group_key_prefix)
        self._codec = ValueCodec()
        self._connection = RedisConnectionFactory(
            config.resolve_url(), config.connection_kwargs()
        )

        self._running_operations = 0
        self._idle = asyncio.Event()
        self._idle.set()

    def _operation_started(self) -> None:
        self._running_operations += 1
        self._idle.clear()

    def _operation_finished(self) -> None:
        self._running_operations -= 1
        if self._running_operations == 0:
            self._idle.set()

    # Connection lifecycle

    @property
    def is_open(self) -> bool:
        """True while the connection pool is open."""
        return self._connection.is_open

    async def connect(self) -> None:
        """Open the connection if it is not open yet.

        Raises:
            CacheConnectionException: If the server cannot be reached
            CacheAuthenticationException: If the credentials are rejected
        """
        if self.is_open:
            return
        if await self._connection.initialize():
            logger.info(
                "cache_connected", group_key_prefix=self.config.group_key_prefix
            )

    async def disconnect(self) -> None:
        """Close the connection immediately; operations still running fail."""
        if not self.is_open:
            return
        if await self._connection.close():
            logger.info(
                "cache_disconnected", running_operations=self._running_operations
            )

    async def terminate(self) -> None:
        """Wait for running operations to finish, then close the connection."""
        if not self.is_open:
            return
        if self._running_operations:
            logger.debug(
                "cache_terminate_waiting", running_operations=self._running_operations
            )
        await self._idle.wait()
        if await self._connection.close():
            logger.info("cache_terminated")

    quit = terminate

    async def health_check(self) -> Dict[str, Any]:
        """Report connection health without raising."""
        health_status = await self._connection.health_check()
        health_status.update(
            {
                "service": "redis_cache",
                "is_open": self.is_open,
                "group_key_prefix": self.config.group_key_prefix,
            }
        )
        return health_status

    # Reads

    @ensure_connection
    async def keys(self, pattern: str = DEFAULT_KEYS_PATTERN) -> List[str]:
        """Return composed keys matching a glob-style pattern (unordered)."""
        with tracer.start_as_current_span("redis_cache.keys") as span:
            span.set_attribute("cache.pattern", pattern)
            return list(await self._connection.client.keys(pattern))

    @ensure_connection
    async def get(
        self, key: str, sub_group_prefix: Optional[str] = None
    ) -> Optional[CacheValue]:
        """
        Get a single value.

        Args:
            key: Logical key
            sub_group_prefix: Optional second key segment

        Returns:
            The decoded value, or None if the key is absent or expired

        Raises:
            CacheDecodeException: If the stored value cannot be decoded
        """
        with tracer.start_as_current_span("redis_cache.get") as span:
            full_key = self._keys.compose(key, sub_group_prefix)
            span.set_attribute("cache.key", full_key)

            client = self._connection.client
            default_ttl = self.config.default_ttl
            if self.config.extend_expiry_on_touch and default_ttl:
                raw = await client.getex(full_key, ex=default_ttl)
            else:
                raw = await client.get(full_key)

            if raw is None:
                logger.debug("cache_miss", key=full_key)
                return None

            logger.debug("cache_hit", key=full_key)
            return self._codec.decode(raw)

    @ensure_connection
    async def get_many(
        self, keys: Sequence[str], sub_group_prefix: Optional[str] = None
    ) -> Dict[str, Optional[CacheValue]]:
        """
        Get several values with one MGET.

        Every requested key is present in the result; keys that were not
        found map to None.
        """
        with tracer.start_as_current_span("redis_cache.get_many") as span:
            span.set_attribute("cache.key_count", len(keys))
            if not keys:
                return {}

            full_keys = self._keys.compose_many(keys, sub_group_prefix)
            results = await self._connection.client.mget(full_keys)

            associated = {
                key: self._codec.decode(raw) for key, raw in zip(keys, results)
            }
            logger.debug(
                "cache_get_many",
                requested=len(keys),
                found=sum(raw is not None for raw in results),
            )
            return associated

    # Writes

    @ensure_connection
    async def set(
        self,
        key: str,
        value: CacheValue,
        options: Optional[CacheSetOptions] = None,
    ) -> None:
        """
        Store a single value.

        Expiry is ``options.expiry_in_seconds`` if given, else the default TTL
        if positive, else none.

        Raises:
            CacheEncodeException: If the value cannot be encoded
        """
        options = options or CacheSetOptions()
        with tracer.start_as_current_span("redis_cache.set") as span:
            full_key = self._keys.compose(key, options.sub_group_prefix)
            expiry = options.resolve_expiry(self.config.default_ttl)
            span.set_attribute("cache.key", full_key)

            await self._connection.client.set(
                full_key, self._codec.encode(value), ex=expiry
            )
            logger.debug("cache_set", key=full_key, expiry=expiry)

    async def set_many(
        self,
        key_values: Mapping[str, CacheValue],
        options: Optional[CacheSetOptions] = None,
    ) -> None:
        """
        Store several values in one transaction.

        The capacity bound is checked before any command is sent, including
        the connection check. All values are encoded before the transaction
        starts, and the same expiry applies to every entry.

        Raises:
            CacheCapacityExceededException: If the batch exceeds ``max_bulk_size``
            CacheEncodeException: If any value cannot be encoded
        """
        max_bulk_size = self.config.max_bulk_size
        if max_bulk_size is not None and len(key_values) > max_bulk_size:
            logger.warning(
                "cache_set_many_rejected",
                entry_count=len(key_values),
                max_bulk_size=max_bulk_size,
            )
            raise CacheCapacityExceededException(len(key_values), max_bulk_size)

        await self._set_many(key_values, options or CacheSetOptions())

    @ensure_connection
    async def _set_many(
        self, key_values: Mapping[str, CacheValue], options: CacheSetOptions
    ) -> None:
        with tracer.start_as_current_span("redis_cache.set_many") as span:
            span.set_attribute("cache.key_count", len(key_values))
            if not key_values:
                return

            expiry = options.resolve_expiry(self.config.default_ttl)
            encoded = {
                self._keys.compose(key, options.sub_group_prefix): self._codec.encode(value)
                for key, value in key_values.items()
            }

            async with self._connection.transaction() as pipe:
                for full_key, raw in encoded.items():
                    pipe.set(full_key, raw, ex=expiry)
                await pipe.execute()

            logger.debug("cache_set_many", entry_count=len(encoded), expiry=expiry)

    # Deletes

    @ensure_connection
    async def delete(self, key: str, sub_group_prefix: Optional[str] = None) -> None:
        """Delete a single key; deleting a missing key is not an error."""
        with tracer.start_as_current_span("redis_cache.delete") as span:
            full_key = self._keys.compose(key, sub_group_prefix)
            span.set_attribute("cache.key", full_key)

            await self._connection.client.delete(full_key)
            logger.debug("cache_delete", key=full_key)

    @ensure_connection
    async def delete_many(
        self, keys: Sequence[str], sub_group_prefix: Optional[str] = None
    ) -> None:
        """Delete several keys in one transaction."""
        with tracer.start_as_current_span("redis_cache.delete_many") as span:
            span.set_attribute("cache.key_count", len(keys))
            if not keys:
                return

            async with self._connection.transaction() as pipe:
                for full_key in self._keys.compose_many(keys, sub_group_prefix):
                    pipe.delete(full_key)
                await pipe.execute()

            logger.debug("cache_delete_many", key_count=len(keys))

    # Bulk naming aliases
    get_bulk = get_many
    set_bulk = set_many
    delete_bulk = delete_many

    async def __aenter__(self) -> "RedisCache":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.terminate()
