"""
Typed Redis Cache

Typed key-value caching client for Redis with namespaced keys,
type-preserving serialization, TTL policy and atomic bulk operations.
"""

from .constants import LIB_VERSION
from .core.config import RedisCacheConfig, RedisCacheSettings, get_settings
from .domain.cache import (
    CacheKeyComposer,
    CacheSetOptions,
    CacheValue,
    DataType,
    TaggedValue,
    ValueCodec,
)
from .infrastructure.redis.exceptions import (
    CacheAuthenticationException,
    CacheCapacityExceededException,
    CacheConfigurationException,
    CacheConnectionException,
    CacheDecodeException,
    CacheEncodeException,
    CacheException,
)
from .services.cache import RedisCache

__version__ = LIB_VERSION

__all__ = [
    # Client
    "RedisCache",
    # Configuration
    "RedisCacheConfig",
    "RedisCacheSettings",
    "get_settings",
    # Domain
    "CacheKeyComposer",
    "CacheSetOptions",
    "CacheValue",
    "DataType",
    "TaggedValue",
    "ValueCodec",
    # Exceptions
    "CacheException",
    "CacheConfigurationException",
    "CacheConnectionException",
    "CacheAuthenticationException",
    "CacheCapacityExceededException",
    "CacheEncodeException",
    "CacheDecodeException",
]
