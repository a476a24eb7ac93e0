# Core module - configuration and Redis connection
from newswatch.core.config import Settings, get_settings
from newswatch.core.redis import RedisClient

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Redis
    "RedisClient",
]
