"""
Database engine, session factory and declarative base.

The main database holds jobs, links, job/link associations and click events.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from mailshort_app.config import settings


connect_args = {}
if settings.database_url.startswith("sqlite"):
    # FastAPI serves sync routes from a threadpool
    connect_args = {"check_same_thread": False}

engine = create_engine(settings.database_url, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """
    Yield a database session for one request and close it afterwards.

    Used as a FastAPI dependency (overridden in tests).
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
