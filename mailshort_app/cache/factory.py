"""
Factory for creating cache instances.
Simple factory with singleton caching.
"""

from enum import Enum
from typing import Optional

from mailshort_app.config import Settings, settings as default_settings
from mailshort_app.logging_config import get_logger
from .strategies import CacheStrategy, RedisCache, InMemoryCache, NullCache

log = get_logger(__name__)


class CacheBackend(Enum):
    """Available cache backends"""
    REDIS = "redis"
    MEMORY = "memory"
    NULL = "null"


class CacheFactory:
    """
    Creates the process-wide cache instance.

    Falls back to the in-memory cache when Redis cannot be reached.
    """

    _instance: Optional[CacheStrategy] = None

    @classmethod
    def create(cls, backend: CacheBackend, settings: Optional[Settings] = None) -> CacheStrategy:
        """Create or return the cached cache instance"""
        if cls._instance is not None:
            return cls._instance

        settings = settings or default_settings

        if backend == CacheBackend.REDIS:
            import redis

            try:
                redis_client = redis.from_url(
                    settings.redis_url,
                    decode_responses=False,
                    socket_connect_timeout=2,
                    socket_timeout=2,
                )
                redis_client.ping()
                cls._instance = RedisCache(redis_client)
                log.info("cache_initialized", backend=backend.value)

            except Exception as e:
                log.warning("redis_unavailable_cache_fallback", error=str(e))
                cls._instance = InMemoryCache()

        elif backend == CacheBackend.MEMORY:
            cls._instance = InMemoryCache()
            log.info("cache_initialized", backend=backend.value)

        elif backend == CacheBackend.NULL:
            cls._instance = NullCache()
            log.info("cache_initialized", backend=backend.value)

        else:
            raise ValueError(f"Unknown cache backend: {backend}")

        return cls._instance

    @classmethod
    def clear_instance(cls):
        """Clear cached instance (for testing)"""
        cls._instance = None
