"""
Redis Infrastructure Module

Connection pool management and exception hierarchy for the typed cache.

This module provides:
- RedisConnectionFactory: Pool lifecycle, PING verification, transactions
- Cache exceptions with error codes and preserved causes
"""

from .exceptions import (
    CacheException,
    CacheConfigurationException,
    CacheConnectionException,
    CacheAuthenticationException,
    CacheCapacityExceededException,
    CacheEncodeException,
    CacheDecodeException,
)
from .connection_factory import RedisConnectionFactory

__all__ = [
    # Connection management
    "RedisConnectionFactory",
    # Exceptions
    "CacheException",
    "CacheConfigurationException",
    "CacheConnectionException",
    "CacheAuthenticationException",
    "CacheCapacityExceededException",
    "CacheEncodeException",
    "CacheDecodeException",
]
