"""
Tests for the redirect resolver and click recording.
"""
import asyncio

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from mailshort_app.cache.strategies import InMemoryCache
from mailshort_app.models.click import ClickEvent
from mailshort_app.models.link import Link
from mailshort_app.queue.models import ClickMessage
from mailshort_app.queue.strategies import InMemoryQueue
from mailshort_app.services.click_recorder import DirectClickRecorder, QueueClickRecorder
from mailshort_app.services.redirect_service import (
    RedirectService,
    build_click_message,
    client_address,
    hash_client_address,
)


def add_link(db_session, code="abcdEFGH", url="https://www.github.com/"):
    db_session.add(Link(code=code, original_url=url))
    db_session.commit()


def count_clicks(session_factory, code="abcdEFGH"):
    db = session_factory()
    try:
        return db.query(ClickEvent).filter(ClickEvent.link_code == code).count()
    finally:
        db.close()


class TestRedirectRoute:
    """Test GET /r/{code}"""

    def test_redirects_with_302(self, client: TestClient, db_session):
        add_link(db_session)

        response = client.get("/r/abcdEFGH", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "https://www.github.com/"

    def test_unknown_code_is_404(self, client: TestClient, session_factory):
        response = client.get("/r/nonexist", follow_redirects=False)

        assert response.status_code == 404
        assert count_clicks(session_factory, "nonexist") == 0

    def test_records_exactly_one_click(self, client: TestClient, db_session, session_factory):
        add_link(db_session)

        client.get(
            "/r/abcdEFGH",
            headers={"referer": "https://mail.example/", "user-agent": "pytest-agent"},
            follow_redirects=False,
        )

        db = session_factory()
        try:
            clicks = db.query(ClickEvent).all()
        finally:
            db.close()
        assert len(clicks) == 1
        assert clicks[0].link_code == "abcdEFGH"
        assert clicks[0].referer == "https://mail.example/"
        assert clicks[0].user_agent == "pytest-agent"
        assert clicks[0].ts is not None

    def test_client_address_is_hashed(self, client: TestClient, db_session, session_factory):
        add_link(db_session)

        client.get("/r/abcdEFGH", headers={"x-forwarded-for": "203.0.113.7, 10.0.0.1"}, follow_redirects=False)

        db = session_factory()
        try:
            click = db.query(ClickEvent).one()
        finally:
            db.close()
        assert click.ip_hash == hash_client_address("203.0.113.7", "test-salt")
        assert "203.0.113.7" not in click.ip_hash

    def test_repeated_redirects_served_from_cache(self, client: TestClient, db_session, session_factory):
        add_link(db_session)

        for _ in range(3):
            response = client.get("/r/abcdEFGH", follow_redirects=False)
            assert response.status_code == 302

        assert count_clicks(session_factory) == 3


class TestRedirectService:
    """Test cache-aside resolution directly"""

    def test_resolve_populates_cache(self, db_session):
        add_link(db_session, url="https://example.com/landing")
        cache = InMemoryCache()
        service = RedirectService(db_session, cache=cache)

        assert asyncio.run(service.resolve("abcdEFGH")) == "https://example.com/landing"
        assert asyncio.run(cache.get("link:abcdEFGH")) == "https://example.com/landing"

    def test_resolve_unknown_code(self, db_session):
        service = RedirectService(db_session, cache=InMemoryCache())
        assert asyncio.run(service.resolve("missing1")) is None

    def test_resolve_without_cache(self, db_session):
        add_link(db_session)
        service = RedirectService(db_session)
        assert asyncio.run(service.resolve("abcdEFGH")) == "https://www.github.com/"


class TestClickMetadata:
    def test_hash_is_fixed_length_and_salted(self):
        first = hash_client_address("198.51.100.1", "salt-a")

        assert len(first) == 32
        assert first == hash_client_address("198.51.100.1", "salt-a")
        assert first != hash_client_address("198.51.100.1", "salt-b")

    def test_no_address_no_hash(self):
        assert hash_client_address(None, "salt") is None
        assert hash_client_address("", "salt") is None

    def test_client_address_prefers_forwarded_for(self):
        assert client_address({"x-forwarded-for": "1.1.1.1, 2.2.2.2"}, "9.9.9.9") == "1.1.1.1"
        assert client_address({}, "9.9.9.9") == "9.9.9.9"
        assert client_address({}, None) is None

    def test_build_click_message(self):
        message = build_click_message("abcdEFGH", {"user-agent": "ua"}, "9.9.9.9", "salt")

        assert message.link_code == "abcdEFGH"
        assert message.user_agent == "ua"
        assert message.referer is None
        assert message.ip_hash == hash_client_address("9.9.9.9", "salt")


class TestClickRecorders:
    def test_direct_recorder_swallows_store_errors(self):
        # Fresh in-memory database without tables: every insert fails
        broken_engine = create_engine("sqlite://")
        recorder = DirectClickRecorder(sessionmaker(bind=broken_engine))

        asyncio.run(recorder.record(ClickMessage(link_code="abcdEFGH")))

    def test_direct_recorder_writes_click(self, session_factory):
        recorder = DirectClickRecorder(session_factory)

        asyncio.run(recorder.record(ClickMessage(link_code="abcdEFGH", referer="r")))

        assert count_clicks(session_factory) == 1

    def test_queue_recorder_publishes(self):
        queue = InMemoryQueue()
        recorder = QueueClickRecorder(queue, "link_clicks")

        asyncio.run(recorder.record(ClickMessage(link_code="abcdEFGH")))

        assert asyncio.run(queue.get_queue_length("link_clicks")) == 1
