"""
Cache Domain Module

Key composition and typed value encoding for the Redis cache.
"""

from .codec import ValueCodec
from .value_objects import (
    CacheKeyComposer,
    CacheSetOptions,
    CacheValue,
    DataType,
    TaggedValue,
)

__all__ = [
    "ValueCodec",
    "CacheKeyComposer",
    "CacheSetOptions",
    "CacheValue",
    "DataType",
    "TaggedValue",
]
