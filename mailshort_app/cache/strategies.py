"""
Cache strategies using Strategy Pattern.
Allows switching between different cache backends (Redis, In-Memory, Null)
for code -> original URL lookups on the redirect path.
"""

from abc import ABC, abstractmethod
from typing import Optional, Dict

from mailshort_app.logging_config import get_logger

log = get_logger(__name__)


class CacheStrategy(ABC):
    """
    Abstract base class for cache strategies.

    Links are immutable once created, so a cached mapping never goes stale;
    the TTL only bounds memory use.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the cached value or None on a miss"""
        pass

    @abstractmethod
    async def set(self, key: str, value: str, ttl: int = 3600) -> bool:
        """Store *value* under *key* for *ttl* seconds"""
        pass


class RedisCache(CacheStrategy):
    """
    Redis-backed cache shared by every app process.

    Errors are logged and treated as misses so a Redis outage only costs a
    database query.
    """

    def __init__(self, redis_client):
        self.redis = redis_client

    async def get(self, key: str) -> Optional[str]:
        try:
            value = self.redis.get(key)
            return value.decode('utf-8') if value else None
        except Exception as e:
            log.warning("redis_cache_get_failed", key=key, error=str(e))
            return None

    async def set(self, key: str, value: str, ttl: int = 3600) -> bool:
        try:
            return bool(self.redis.setex(key, ttl, value))
        except Exception as e:
            log.warning("redis_cache_set_failed", key=key, error=str(e))
            return False


class InMemoryCache(CacheStrategy):
    """
    Per-process dict cache for development and tests.

    TTL is ignored.
    """

    def __init__(self):
        self._cache: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        return self._cache.get(key)

    async def set(self, key: str, value: str, ttl: int = 3600) -> bool:
        self._cache[key] = value
        return True


class NullCache(CacheStrategy):
    """
    Null Object Pattern - cache that does nothing.

    Every lookup is a miss, so the redirect path always reads the database.
    """

    async def get(self, key: str) -> Optional[str]:
        return None

    async def set(self, key: str, value: str, ttl: int = 3600) -> bool:
        return True
