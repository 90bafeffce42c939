"""
Queue strategies using Strategy Pattern.
Allows switching between different queue backends (Redis Streams, In-Memory)
for click messages.
"""

from abc import ABC, abstractmethod
from typing import List, Dict
from collections import deque
import socket

from mailshort_app.logging_config import get_logger
from .models import ClickMessage

log = get_logger(__name__)


class QueueStrategy(ABC):
    """
    Abstract base class for queue strategies.

    The redirect path publishes click messages; the click worker consumes
    them in batches and acknowledges them once they are stored.
    """

    @abstractmethod
    async def publish(self, queue_name: str, message: ClickMessage) -> bool:
        """
        Publish a message to the queue.

        Returns:
            True if successful, False otherwise
        """
        pass

    @abstractmethod
    async def consume(
        self,
        queue_name: str,
        batch_size: int = 1,
        block_time: int = 1000
    ) -> List[ClickMessage]:
        """
        Consume messages from the queue.

        Args:
            queue_name: Name of the queue
            batch_size: Maximum number of messages to retrieve
            block_time: Time to wait for messages (milliseconds)
        """
        pass

    @abstractmethod
    async def ack(self, queue_name: str, message_ids: List[str]) -> bool:
        """Acknowledge messages (mark as processed)"""
        pass

    @abstractmethod
    async def get_queue_length(self, queue_name: str) -> int:
        """Get the number of pending messages in queue"""
        pass


class RedisStreamQueue(QueueStrategy):
    """
    Redis Streams implementation.

    1. Producer appends with XADD
    2. Worker reads with XREADGROUP (one consumer group for all workers)
    3. Worker acknowledges with XACK after the batch is committed

    Unacknowledged messages stay pending and can be reclaimed.
    """

    def __init__(self, redis_client, consumer_group: str = "click_workers"):
        self.redis = redis_client
        self.consumer_group = consumer_group
        self.consumer_name = f"worker-{socket.gethostname()}-{id(self)}"
        self._initialized_streams = set()

    def _ensure_stream_exists(self, queue_name: str):
        """Create the stream and consumer group on first use"""
        if queue_name in self._initialized_streams:
            return

        try:
            self.redis.xgroup_create(
                name=queue_name,
                groupname=self.consumer_group,
                id='0',
                mkstream=True
            )
            log.info("redis_stream_created", stream=queue_name, group=self.consumer_group)
        except Exception as e:
            # BUSYGROUP: group already exists
            if "BUSYGROUP" not in str(e):
                log.warning("redis_stream_create_failed", stream=queue_name, error=str(e))

        self._initialized_streams.add(queue_name)

    async def publish(self, queue_name: str, message: ClickMessage) -> bool:
        try:
            self._ensure_stream_exists(queue_name)
            self.redis.xadd(queue_name, {'data': message.model_dump_json()})
            return True
        except Exception as e:
            log.error("redis_publish_failed", stream=queue_name, error=str(e))
            return False

    async def consume(
        self,
        queue_name: str,
        batch_size: int = 1,
        block_time: int = 1000
    ) -> List[ClickMessage]:
        try:
            self._ensure_stream_exists(queue_name)

            # '>' means "messages never delivered to other consumers"
            streams = self.redis.xreadgroup(
                groupname=self.consumer_group,
                consumername=self.consumer_name,
                streams={queue_name: '>'},
                count=batch_size,
                block=block_time
            )
        except Exception as e:
            log.error("redis_consume_failed", stream=queue_name, error=str(e))
            return []

        messages = []
        for _stream_name, entries in streams or []:
            for message_id, fields in entries:
                message_id = message_id.decode('utf-8')
                try:
                    message = ClickMessage.model_validate_json(fields[b'data'])
                except Exception as e:
                    log.warning("click_message_unparseable", message_id=message_id, error=str(e))
                    # Never deliverable; drop it from the pending list
                    self.redis.xack(queue_name, self.consumer_group, message_id)
                    continue
                message.message_id = message_id
                messages.append(message)

        return messages

    async def ack(self, queue_name: str, message_ids: List[str]) -> bool:
        if not message_ids:
            return True
        try:
            self.redis.xack(queue_name, self.consumer_group, *message_ids)
            return True
        except Exception as e:
            log.error("redis_ack_failed", stream=queue_name, error=str(e))
            return False

    async def get_queue_length(self, queue_name: str) -> int:
        try:
            return self.redis.xinfo_stream(queue_name)['length']
        except Exception:
            return 0


class InMemoryQueue(QueueStrategy):
    """
    In-memory queue using collections.deque.

    Not persistent and not shared between processes: only useful when the
    worker runs in the same process (development, tests). Messages are
    removed on consume, so ack is a no-op.
    """

    def __init__(self):
        self._queues: Dict[str, deque] = {}

    def _get_queue(self, queue_name: str) -> deque:
        if queue_name not in self._queues:
            self._queues[queue_name] = deque()
        return self._queues[queue_name]

    async def publish(self, queue_name: str, message: ClickMessage) -> bool:
        self._get_queue(queue_name).append(message)
        return True

    async def consume(
        self,
        queue_name: str,
        batch_size: int = 1,
        block_time: int = 1000
    ) -> List[ClickMessage]:
        """block_time is ignored: returns immediately with what is queued"""
        queue = self._get_queue(queue_name)
        return [queue.popleft() for _ in range(min(batch_size, len(queue)))]

    async def ack(self, queue_name: str, message_ids: List[str]) -> bool:
        return True

    async def get_queue_length(self, queue_name: str) -> int:
        return len(self._get_queue(queue_name))
