"""
Typed Redis Cache Exceptions

Domain-specific exceptions for cache configuration, connection, capacity
and value codec failures. Errors are surfaced to the caller, never replaced
with a default result.
"""

from typing import Optional, Any, Dict


class CacheException(Exception):
    """Base exception for cache-related errors.

    All cache failures raised by this library are this class or a subclass.
    Store errors from redis-py during data commands are not wrapped.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class CacheConfigurationException(CacheException):
    """Raised when the cache client configuration is invalid."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        original_error: Optional[Exception] = None,
    ):
        details = {}
        if config_key:
            details["config_key"] = config_key
        if config_value is not None:
            details["config_value"] = str(config_value)
        if original_error:
            details["original_error"] = str(original_error)
            details["original_error_type"] = type(original_error).__name__

        super().__init__(
            message=message, error_code="CACHE_CONFIGURATION_ERROR", details=details
        )
        if original_error:
            self.__cause__ = original_error


class CacheConnectionException(CacheException):
    """Raised when the Redis connection cannot be opened."""

    def __init__(
        self,
        message: str = "Redis connection failed",
        host: Optional[str] = None,
        port: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        details = {}
        if host:
            details["host"] = host
        if port:
            details["port"] = port
        if original_error:
            details["original_error"] = str(original_error)
            details["original_error_type"] = type(original_error).__name__

        super().__init__(
            message=message, error_code="CACHE_CONNECTION_ERROR", details=details
        )
        # Preserve exception context for debugging (exception chaining)
        if original_error:
            self.__cause__ = original_error


class CacheAuthenticationException(CacheConnectionException):
    """Raised when Redis rejects the configured credentials."""

    def __init__(
        self,
        message: str = "Redis authentication failed",
        username: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message=message, original_error=original_error)
        self.error_code = "CACHE_AUTH_ERROR"
        if username:
            self.details["username"] = username


class CacheCapacityExceededException(CacheException):
    """Raised when a bulk write holds more entries than the capacity bound."""

    def __init__(self, entry_count: int, max_bulk_size: int):
        details = {"entry_count": entry_count, "max_bulk_size": max_bulk_size}

        super().__init__(
            message=f"Bulk write of {entry_count} entries exceeds capacity of {max_bulk_size}",
            error_code="CACHE_CAPACITY_EXCEEDED",
            details=details,
        )


class CacheEncodeException(CacheException):
    """Raised when a value cannot be converted to its tagged string form."""

    def __init__(self, message: str, value_type: Optional[str] = None):
        details = {}
        if value_type:
            details["value_type"] = value_type

        super().__init__(
            message=message, error_code="CACHE_ENCODE_ERROR", details=details
        )


class CacheDecodeException(CacheException):
    """Raised when a stored tagged value cannot be parsed according to its tag."""

    def __init__(
        self,
        message: str,
        data_type: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        details = {}
        if data_type:
            details["data_type"] = data_type
        if original_error:
            details["original_error"] = str(original_error)
            details["original_error_type"] = type(original_error).__name__

        super().__init__(
            message=message, error_code="CACHE_DECODE_ERROR", details=details
        )
        if original_error:
            self.__cause__ = original_error
