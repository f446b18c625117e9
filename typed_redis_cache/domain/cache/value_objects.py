"""
Cache Value Objects

Immutable value objects for the cache domain: key composition, value type
tags, tagged values and per-call write options.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ...constants import CACHE_KEY_SEP, VALUE_TAG_SEP
from ...infrastructure.redis.exceptions import CacheEncodeException

Scalar = Union[str, int, float, bool]
Record = Dict[str, Any]
CacheValue = Union[Scalar, Record, List[Scalar], List[Record]]


class DataType(str, Enum):
    """Type tags recorded in front of every stored payload."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    STRING_ARRAY = "string[]"
    NUMBER_ARRAY = "number[]"
    BOOLEAN_ARRAY = "boolean[]"
    OBJECT_ARRAY = "object[]"
    EMPTY_ARRAY = "empty[]"

    @property
    def is_structured(self) -> bool:
        """True when the payload is a JSON document."""
        return self is DataType.OBJECT or self.value.endswith("[]")

    @classmethod
    def of(cls, value: Any) -> "DataType":
        """Derive the tag from the runtime kind of ``value``.

        A sequence takes the tag of its first element; an empty sequence
        gets EMPTY_ARRAY.

        Raises:
            CacheEncodeException: If the value kind is not supported
        """
        if isinstance(value, (list, tuple)):
            if not value:
                return cls.EMPTY_ARRAY
            element_type = cls._scalar_of(value[0])
            return cls(f"{element_type.value}[]")
        return cls._scalar_of(value)

    @classmethod
    def _scalar_of(cls, value: Any) -> "DataType":
        # bool is a subclass of int
        if isinstance(value, bool):
            return cls.BOOLEAN
        if isinstance(value, (int, float)):
            if isinstance(value, float) and not math.isfinite(value):
                raise CacheEncodeException(
                    f"Non-finite number cannot be cached: {value!r}",
                    value_type=type(value).__name__,
                )
            return cls.NUMBER
        if isinstance(value, str):
            return cls.STRING
        if isinstance(value, Mapping):
            return cls.OBJECT
        raise CacheEncodeException(
            f"Unsupported cache value type: {type(value).__name__}",
            value_type=type(value).__name__,
        )


@dataclass(frozen=True)
class TaggedValue:
    """A payload string together with the tag needed to decode it."""

    data_type: DataType
    payload: str

    def serialize(self) -> str:
        """Render the wire form ``<tag>::<payload>``."""
        return f"{self.data_type.value}{VALUE_TAG_SEP}{self.payload}"


@dataclass(frozen=True)
class CacheKeyComposer:
    """
    Builds fully-qualified store keys: ``group:subgroup:key``.

    Unset prefixes are omitted. Logical keys and prefixes are not escaped, so
    they must not contain the separator.
    """

    group_key_prefix: Optional[str] = None

    def compose(self, key: str, sub_group_prefix: Optional[str] = None) -> str:
        """Return the composed key for ``key`` under the configured prefixes."""
        segments = [
            segment
            for segment in (self.group_key_prefix, sub_group_prefix)
            if segment
        ]
        segments.append(key)
        return CACHE_KEY_SEP.join(segments)

    def compose_many(
        self, keys: Sequence[str], sub_group_prefix: Optional[str] = None
    ) -> List[str]:
        """Compose every key in order."""
        return [self.compose(key, sub_group_prefix) for key in keys]


@dataclass(frozen=True)
class CacheSetOptions:
    """Per-call write options."""

    expiry_in_seconds: Optional[int] = None
    sub_group_prefix: Optional[str] = None

    def resolve_expiry(self, default_ttl: Optional[int]) -> Optional[int]:
        """Per-call expiry wins over the default TTL; None means no expiry."""
        if self.expiry_in_seconds is not None and self.expiry_in_seconds > 0:
            return self.expiry_in_seconds
        if default_ttl is not None and default_ttl > 0:
            return default_ttl
        return None
