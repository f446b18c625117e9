"""
Cache Service Module

Public typed Redis cache client.
"""

from .redis_cache import RedisCache, ensure_connection

__all__ = ["RedisCache", "ensure_connection"]
