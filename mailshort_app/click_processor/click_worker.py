"""
Click Worker

Consumes click messages published by the redirect route (click_sink =
"queue") and stores them as click_events rows in batches.

Messages are acknowledged only after their batch has been committed; a
failed batch stays pending in Redis and is delivered again.

Usage:
    python -m mailshort_app.click_processor.click_worker
"""

import asyncio
import signal
import sys
from typing import Callable, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mailshort_app.config import Settings, settings as default_settings
from mailshort_app.database.connection import SessionLocal
from mailshort_app.logging_config import get_logger, setup_logging
from mailshort_app.queue.models import ClickMessage
from mailshort_app.queue.strategies import QueueStrategy
from mailshort_app.services.click_recorder import save_click_messages

log = get_logger(__name__)


class ClickWorker:
    """
    Batch consumer for click messages.

    One database session per batch; one commit per batch.
    """

    def __init__(
        self,
        queue: QueueStrategy,
        db_session_factory: Callable[[], Session] = SessionLocal,
        queue_name: str = default_settings.queue_name,
        batch_size: int = default_settings.queue_batch_size,
    ):
        self.queue = queue
        self.db_session_factory = db_session_factory
        self.queue_name = queue_name
        self.batch_size = batch_size
        self.running = False
        self.processed_count = 0

    async def start(self):
        """Run until stop() is called or a termination signal arrives"""
        self.running = True
        log.info("click_worker_started", queue=self.queue_name, batch_size=self.batch_size)

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        while self.running:
            try:
                stored = await self.process_once(block_time=1000)
                if stored == 0:
                    # In-memory queue does not block; avoid a busy loop
                    await asyncio.sleep(0.1)
            except asyncio.CancelledError:
                log.info("click_worker_cancelled")
                break
            except Exception as e:
                log.error("click_worker_loop_error", error=str(e))
                await asyncio.sleep(1)

        log.info("click_worker_stopped", processed=self.processed_count)

    async def process_once(self, block_time: int = 0) -> int:
        """
        Consume and store one batch.

        Returns:
            Number of click events stored (0 when the queue was empty or the
            batch failed and was left unacknowledged)
        """
        messages = await self.queue.consume(
            queue_name=self.queue_name,
            batch_size=self.batch_size,
            block_time=block_time,
        )
        if not messages:
            return 0

        if not self._store_batch(messages):
            return 0

        message_ids = [m.message_id for m in messages if m.message_id]
        if message_ids:
            await self.queue.ack(self.queue_name, message_ids)

        self.processed_count += len(messages)
        log.info("click_batch_stored", count=len(messages), total=self.processed_count)
        return len(messages)

    def _store_batch(self, messages: List[ClickMessage]) -> bool:
        db = self.db_session_factory()
        try:
            save_click_messages(db, messages)
            return True
        except SQLAlchemyError as e:
            log.error("click_batch_failed", count=len(messages), error=str(e))
            return False
        finally:
            db.close()

    def _signal_handler(self, signum, frame):
        log.info("click_worker_signal", signum=signum)
        self.stop()

    def stop(self):
        """Stop the worker after the current batch"""
        self.running = False


async def main(settings: Settings = default_settings):
    setup_logging(settings)

    from mailshort_app.queue.factory import QueueFactory, QueueBackend
    queue = QueueFactory.create(QueueBackend(settings.queue_backend), settings)

    worker = ClickWorker(
        queue=queue,
        queue_name=settings.queue_name,
        batch_size=settings.queue_batch_size,
    )

    try:
        await worker.start()
    except Exception as e:
        log.critical("click_worker_fatal", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
