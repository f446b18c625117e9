"""
Typed Redis Cache Global Constants

Centralized location for wire-format and connection constants.
"""

# Key composition
CACHE_KEY_SEP = ":"

# Tagged value wire format: "<tag>::<payload>"
VALUE_TAG_SEP = "::"

# Connection defaults
DEFAULT_REDIS_SCHEME = "redis"
SUPPORTED_REDIS_SCHEMES = ("redis", "rediss")
DEFAULT_REDIS_PORT = 6379
DEFAULT_KEYS_PATTERN = "*"

# Library Constants
LIB_VERSION = "1.0.0"
