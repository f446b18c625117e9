"""
Value Codec

Converts typed cache values to tagged strings and back. Scalars are stored
in their canonical string form, records and sequences as JSON.
"""

import json
from typing import Optional

from ...constants import VALUE_TAG_SEP
from ...infrastructure.redis.exceptions import (
    CacheDecodeException,
    CacheEncodeException,
)
from .value_objects import CacheValue, DataType, TaggedValue


class ValueCodec:
    """Stateless encoder/decoder for the ``<tag>::<payload>`` wire form."""

    @staticmethod
    def wrap(value: CacheValue) -> TaggedValue:
        """Tag ``value`` and render its payload.

        Raises:
            CacheEncodeException: If the value kind is not supported
        """
        data_type = DataType.of(value)

        if data_type.is_structured:
            try:
                payload = json.dumps(
                    value, separators=(",", ":"), ensure_ascii=False, allow_nan=False
                )
            except (TypeError, ValueError) as e:
                raise CacheEncodeException(
                    f"{data_type.value} value is not JSON serializable: {e}",
                    value_type=type(value).__name__,
                ) from e
        elif data_type is DataType.BOOLEAN:
            payload = "true" if value else "false"
        elif data_type is DataType.NUMBER and isinstance(value, float):
            payload = repr(value)
        else:
            payload = str(value)

        return TaggedValue(data_type=data_type, payload=payload)

    @classmethod
    def encode(cls, value: CacheValue) -> str:
        """Encode ``value`` into its stored string."""
        return cls.wrap(value).serialize()

    @classmethod
    def decode(cls, raw: Optional[str]) -> Optional[CacheValue]:
        """Decode a stored string; ``None`` (missing key) passes through.

        Raises:
            CacheDecodeException: If the tag is unknown or the payload is malformed
        """
        if raw is None:
            return None
        return cls.unwrap(cls.parse(raw))

    @staticmethod
    def parse(raw: str) -> TaggedValue:
        """Split a stored string on the first separator."""
        tag, sep, payload = raw.partition(VALUE_TAG_SEP)
        if not sep:
            raise CacheDecodeException(
                f"Stored value has no type tag separator {VALUE_TAG_SEP!r}"
            )
        try:
            data_type = DataType(tag)
        except ValueError as e:
            raise CacheDecodeException(
                f"Unknown type tag: {tag!r}", data_type=tag, original_error=e
            )
        return TaggedValue(data_type=data_type, payload=payload)

    @staticmethod
    def unwrap(tagged: TaggedValue) -> CacheValue:
        """Rebuild the original value from a tagged payload."""
        data_type, payload = tagged.data_type, tagged.payload

        if data_type.is_structured:
            try:
                return json.loads(payload)
            except json.JSONDecodeError as e:
                raise CacheDecodeException(
                    f"Malformed {data_type.value} payload",
                    data_type=data_type.value,
                    original_error=e,
                )
        if data_type is DataType.NUMBER:
            try:
                return int(payload)
            except ValueError:
                pass
            try:
                return float(payload)
            except ValueError as e:
                raise CacheDecodeException(
                    f"Malformed number payload: {payload!r}",
                    data_type=data_type.value,
                    original_error=e,
                )
        if data_type is DataType.BOOLEAN:
            return payload == "true"
        return payload
