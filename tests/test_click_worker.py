"""
Tests for the click worker.
"""
import asyncio

from mailshort_app.click_processor.click_worker import ClickWorker
from mailshort_app.models.click import ClickEvent
from mailshort_app.models.link import Link
from mailshort_app.queue.models import ClickMessage
from mailshort_app.queue.strategies import InMemoryQueue

QUEUE = "test_clicks"


def publish(queue, count, code="abcdEFGH"):
    for i in range(count):
        asyncio.run(queue.publish(QUEUE, ClickMessage(link_code=code, user_agent=f"ua-{i}")))


class TestClickWorker:
    def test_stores_batches(self, db_session, session_factory):
        db_session.add(Link(code="abcdEFGH", original_url="https://example.com/"))
        db_session.commit()

        queue = InMemoryQueue()
        publish(queue, 3)
        worker = ClickWorker(queue, db_session_factory=session_factory, queue_name=QUEUE, batch_size=2)

        assert asyncio.run(worker.process_once()) == 2
        assert asyncio.run(worker.process_once()) == 1
        assert asyncio.run(worker.process_once()) == 0

        assert worker.processed_count == 3
        assert db_session.query(ClickEvent).count() == 3

    def test_empty_queue(self, session_factory):
        worker = ClickWorker(InMemoryQueue(), db_session_factory=session_factory, queue_name=QUEUE)

        assert asyncio.run(worker.process_once()) == 0
        assert worker.processed_count == 0

    def test_failed_batch_is_not_counted(self, session_factory):
        from sqlalchemy import create_engine
        from sqlalchemy.orm import sessionmaker

        queue = InMemoryQueue()
        publish(queue, 2)
        broken = sessionmaker(bind=create_engine("sqlite://"))
        worker = ClickWorker(queue, db_session_factory=broken, queue_name=QUEUE, batch_size=10)

        assert asyncio.run(worker.process_once()) == 0
        assert worker.processed_count == 0

    def test_stop(self, session_factory):
        worker = ClickWorker(InMemoryQueue(), db_session_factory=session_factory, queue_name=QUEUE)
        worker.running = True

        worker.stop()

        assert worker.running is False
