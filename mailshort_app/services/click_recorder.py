"""
Click recorders: where a redirect's click message ends up.

Recording is fire-and-forget. The redirect route schedules record() as a
background task that runs after the 302 has been sent, so nothing here can
delay or fail a redirect. Failures are logged and dropped; there is no
retry.
"""

from abc import ABC, abstractmethod
from typing import Callable, Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from mailshort_app.logging_config import get_logger
from mailshort_app.models.click import ClickEvent
from mailshort_app.queue.models import ClickMessage
from mailshort_app.queue.strategies import QueueStrategy

log = get_logger(__name__)


def save_click_messages(db: Session, messages: Iterable[ClickMessage]) -> int:
    """
    Insert one ClickEvent per message and commit.

    Raises SQLAlchemyError on failure (after rolling back); callers decide
    whether to swallow it.
    """
    rows = [
        ClickEvent(
            link_code=m.link_code,
            ts=m.ts,
            referer=m.referer,
            user_agent=m.user_agent,
            ip_hash=m.ip_hash,
        )
        for m in messages
    ]
    try:
        db.add_all(rows)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    return len(rows)


class ClickRecorder(ABC):
    """Destination for click messages produced by the redirect route"""

    @abstractmethod
    async def record(self, message: ClickMessage) -> None:
        """Best-effort write; must never raise"""
        pass


class DirectClickRecorder(ClickRecorder):
    """Writes the click straight into the main database with its own session"""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def _write(self, message: ClickMessage) -> None:
        db = self.session_factory()
        try:
            save_click_messages(db, [message])
        except SQLAlchemyError as e:
            log.warning("click_record_failed", code=message.link_code, error=str(e))
        finally:
            db.close()

    async def record(self, message: ClickMessage) -> None:
        # Session work is blocking; keep it off the event loop
        await run_in_threadpool(self._write, message)


class QueueClickRecorder(ClickRecorder):
    """Publishes the click for the click worker to store in batches"""

    def __init__(self, queue: QueueStrategy, queue_name: str):
        self.queue = queue
        self.queue_name = queue_name

    async def record(self, message: ClickMessage) -> None:
        published = await self.queue.publish(self.queue_name, message)
        if not published:
            log.warning("click_publish_failed", code=message.link_code, queue=self.queue_name)
