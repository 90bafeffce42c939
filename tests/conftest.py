"""
Test configuration and fixtures for the email link shortener.
This centralizes all test setup, making individual tests clean.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from main import app
from mailshort_app.cache.strategies import InMemoryCache
from mailshort_app.config import Settings
from mailshort_app.database.connection import Base, get_db
from mailshort_app.dependencies import get_cache, get_session_factory, get_settings

# Test database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

SHORT_DOMAIN = "https://s.example"


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    This ensures tests are isolated and don't affect each other.
    """
    # Create tables
    Base.metadata.create_all(bind=engine)

    # Create session
    db = TestingSessionLocal()

    try:
        yield db
    finally:
        # Cleanup
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def test_settings():
    """Settings with a fixed short domain and direct click writes"""
    return Settings(short_domain=SHORT_DOMAIN, click_sink="direct", ip_hash_salt="test-salt")


@pytest.fixture(scope="function")
def client(db_session, test_settings):
    """
    Create a test client with database, cache and settings overridden.
    This is the main fixture that tests will use.
    """
    def override_get_db():
        yield db_session

    cache = InMemoryCache()

    # Override the dependencies
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: TestingSessionLocal
    app.dependency_overrides[get_cache] = lambda: cache
    app.dependency_overrides[get_settings] = lambda: test_settings

    # Create test client
    with TestClient(app) as test_client:
        yield test_client

    # Clean up overrides
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def session_factory(db_session):
    """Factory for independent sessions on the test database (tables exist)"""
    return TestingSessionLocal
