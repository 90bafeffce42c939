"""
Factory for creating queue instances.
Simple factory with singleton caching.
"""

from enum import Enum
from typing import Optional

from mailshort_app.config import Settings, settings as default_settings
from mailshort_app.logging_config import get_logger
from .strategies import QueueStrategy, RedisStreamQueue, InMemoryQueue

log = get_logger(__name__)


class QueueBackend(Enum):
    """Available queue backends"""
    REDIS_STREAMS = "redis_streams"
    MEMORY = "memory"


class QueueFactory:
    """
    Creates the process-wide queue instance.

    Redis is optional: when it cannot be reached the factory falls back to
    the in-memory queue.
    """

    _instance: Optional[QueueStrategy] = None

    @classmethod
    def create(cls, backend: QueueBackend, settings: Optional[Settings] = None) -> QueueStrategy:
        """Create or return the cached queue instance"""
        if cls._instance is not None:
            return cls._instance

        settings = settings or default_settings

        if backend == QueueBackend.REDIS_STREAMS:
            import redis

            try:
                redis_client = redis.from_url(
                    settings.redis_url,
                    decode_responses=False,
                    socket_connect_timeout=2,
                    socket_timeout=2,
                )
                redis_client.ping()
                cls._instance = RedisStreamQueue(redis_client, settings.queue_consumer_group)
                log.info("queue_initialized", backend=backend.value)

            except Exception as e:
                log.warning("redis_unavailable_queue_fallback", error=str(e))
                cls._instance = InMemoryQueue()

        elif backend == QueueBackend.MEMORY:
            cls._instance = InMemoryQueue()
            log.info("queue_initialized", backend=backend.value)

        else:
            raise ValueError(f"Unknown queue backend: {backend}")

        return cls._instance

    @classmethod
    def clear_instance(cls):
        """Clear cached instance (for testing)"""
        cls._instance = None
