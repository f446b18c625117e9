"""
Typed Redis Cache Configuration

Two layers:
- RedisCacheConfig: explicit, immutable struct handed to the cache client.
- RedisCacheSettings: environment-driven settings (pydantic-settings) that
  consumers may load and convert with RedisCacheConfig.from_settings().

The cache client never reads the environment itself.
"""

from functools import lru_cache
from typing import Any, Dict, Optional
from urllib.parse import quote_plus

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..constants import (
    DEFAULT_REDIS_PORT,
    DEFAULT_REDIS_SCHEME,
    SUPPORTED_REDIS_SCHEMES,
)
from ..infrastructure.redis.exceptions import CacheConfigurationException


class RedisCacheConfig(BaseModel):
    """Immutable configuration for a RedisCache instance.

    Exactly one connection target must be given: an explicit ``url`` or a
    structured ``host`` (with optional port, credentials and db index).
    The check runs in ``resolve_url()``, called by the client constructor.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Connection target
    url: Optional[str] = Field(default=None, description="Explicit Redis URL")
    host: Optional[str] = Field(default=None, description="Redis host")
    port: int = Field(default=DEFAULT_REDIS_PORT, ge=1, le=65535)
    username: Optional[str] = Field(default=None)
    password: Optional[str] = Field(default=None, repr=False)
    db: Optional[int] = Field(default=None, ge=0, description="Redis db index")
    scheme: str = Field(default=DEFAULT_REDIS_SCHEME)

    # Cache policy
    ttl: Optional[int] = Field(
        default=None, description="Default TTL in seconds; <= 0 means no expiry"
    )
    group_key_prefix: Optional[str] = Field(
        default=None, description="Fixed first segment of every composed key"
    )
    max_bulk_size: Optional[int] = Field(
        default=None, ge=1, description="Maximum entries per bulk write"
    )
    extend_expiry_on_touch: bool = Field(
        default=False, description="Renew the default TTL when a key is read"
    )

    # Pool tuning, passed through to redis.asyncio.ConnectionPool
    max_connections: int = Field(default=10, ge=1)
    socket_connect_timeout: float = Field(default=10.0, gt=0)
    socket_timeout: float = Field(default=10.0, gt=0)
    health_check_interval: int = Field(default=30, ge=0)
    pool_options: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("scheme")
    @classmethod
    def validate_scheme(cls, v: str) -> str:
        """Validate URL scheme for structured targets."""
        if v not in SUPPORTED_REDIS_SCHEMES:
            raise ValueError(f"scheme must be one of: {list(SUPPORTED_REDIS_SCHEMES)}")
        return v

    @property
    def default_ttl(self) -> Optional[int]:
        """Default expiry in seconds, or None when writes should not expire."""
        if self.ttl is not None and self.ttl > 0:
            return self.ttl
        return None

    def resolve_url(self) -> str:
        """Return the connection URL.

        Structured targets are rendered as
        ``scheme://[username][:password@]host:port[/db]``.

        Raises:
            CacheConfigurationException: If neither or both of url/host are set
        """
        if self.url and self.host:
            raise CacheConfigurationException(
                "Provide either an explicit url or a structured host, not both",
                config_key="url",
                config_value=self.url,
            )
        if not self.url and not self.host:
            raise CacheConfigurationException(
                "No Redis connection target configured: set url or host",
                config_key="host",
            )
        if self.url:
            return self.url

        credentials = ""
        if self.username or self.password:
            credentials = quote_plus(self.username or "")
            if self.password:
                credentials += f":{quote_plus(self.password)}"
            credentials += "@"

        url = f"{self.scheme}://{credentials}{self.host}:{self.port}"
        if self.db is not None:
            url += f"/{self.db}"
        return url

    def connection_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ConnectionPool.from_url()."""
        return {
            "encoding": "utf-8",
            "decode_responses": True,
            "socket_connect_timeout": self.socket_connect_timeout,
            "socket_timeout": self.socket_timeout,
            "health_check_interval": self.health_check_interval,
            "max_connections": self.max_connections,
            **self.pool_options,
        }

    @classmethod
    def from_settings(cls, settings: "RedisCacheSettings") -> "RedisCacheConfig":
        """Build an explicit config from environment settings."""
        return cls(
            url=settings.REDIS_URL,
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            username=settings.REDIS_USERNAME,
            password=settings.REDIS_PASSWORD,
            db=settings.REDIS_DB,
            ttl=settings.REDIS_CACHE_TTL,
            group_key_prefix=settings.REDIS_CACHE_GROUP_KEY_PREFIX,
            max_bulk_size=settings.REDIS_CACHE_MAX_BULK_SIZE,
            extend_expiry_on_touch=settings.REDIS_CACHE_EXTEND_EXPIRY_ON_TOUCH,
            max_connections=settings.REDIS_MAX_CONNECTIONS,
            socket_connect_timeout=settings.REDIS_CONNECTION_TIMEOUT,
            socket_timeout=settings.REDIS_OPERATION_TIMEOUT,
            health_check_interval=settings.REDIS_HEALTH_CHECK_INTERVAL,
        )


class RedisCacheSettings(BaseSettings):
    """Environment settings for consumer processes (.env supported)."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    # Redis connection
    REDIS_URL: Optional[str] = Field(default=None, description="Redis connection URL")
    REDIS_HOST: Optional[str] = Field(default=None, description="Redis host")
    REDIS_PORT: int = Field(default=DEFAULT_REDIS_PORT, ge=1, le=65535)
    REDIS_USERNAME: Optional[str] = Field(default=None)
    REDIS_PASSWORD: Optional[str] = Field(default=None, repr=False)
    REDIS_DB: Optional[int] = Field(default=None, ge=0)

    # Cache policy
    REDIS_CACHE_TTL: Optional[int] = Field(
        default=None, description="Default TTL in seconds"
    )
    REDIS_CACHE_GROUP_KEY_PREFIX: Optional[str] = Field(default=None)
    REDIS_CACHE_MAX_BULK_SIZE: Optional[int] = Field(default=None, ge=1)
    REDIS_CACHE_EXTEND_EXPIRY_ON_TOUCH: bool = Field(default=False)

    # Pool tuning
    REDIS_MAX_CONNECTIONS: int = Field(
        default=10, ge=1, le=50, description="Redis connection pool size"
    )
    REDIS_CONNECTION_TIMEOUT: float = Field(default=10.0, gt=0)
    REDIS_OPERATION_TIMEOUT: float = Field(default=10.0, gt=0)
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(default=30, ge=0)


@lru_cache()
def get_settings() -> RedisCacheSettings:
    """Get cached settings instance."""
    return RedisCacheSettings()
