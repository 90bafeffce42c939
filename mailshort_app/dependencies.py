"""
FastAPI dependencies for dependency injection.

This module provides singleton instances of cache, queue and click recorder,
and builds the request-scoped services that routes depend on.

Pattern: Dependency Injection
- Routes depend on services, services depend on infrastructure
- Tests override get_db, get_session_factory or get_cache
- Backends are swapped via config
"""

from functools import lru_cache
from typing import Callable

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from mailshort_app.cache.factory import CacheFactory, CacheBackend
from mailshort_app.cache.strategies import CacheStrategy
from mailshort_app.config import Settings, settings
from mailshort_app.database.connection import SessionLocal, get_db
from mailshort_app.queue.factory import QueueFactory, QueueBackend
from mailshort_app.queue.strategies import QueueStrategy
from mailshort_app.services.allocator import LinkAllocator
from mailshort_app.services.classifier import normalize_short_domain
from mailshort_app.services.click_recorder import (
    ClickRecorder,
    DirectClickRecorder,
    QueueClickRecorder,
)
from mailshort_app.services.short_code_strategies import RandomShortCodeStrategy


def get_settings() -> Settings:
    return settings


@lru_cache()
def get_cache() -> CacheStrategy:
    """
    Get cache instance (singleton).

    @lru_cache ensures this is called only once.
    """
    backend = CacheBackend(settings.cache_backend)
    return CacheFactory.create(backend, settings)


@lru_cache()
def get_queue() -> QueueStrategy:
    """
    Get queue instance (singleton).

    Only used when click_sink is "queue".
    """
    backend = QueueBackend(settings.queue_backend)
    return QueueFactory.create(backend, settings)


def get_session_factory() -> Callable[[], Session]:
    """Session factory for work that outlives the request (click writes)"""
    return SessionLocal


def get_click_recorder(
    session_factory: Callable[[], Session] = Depends(get_session_factory),
    app_settings: Settings = Depends(get_settings),
) -> ClickRecorder:
    if app_settings.click_sink == "queue":
        return QueueClickRecorder(get_queue(), app_settings.queue_name)
    return DirectClickRecorder(session_factory)


def get_short_domain(request: Request, app_settings: Settings = Depends(get_settings)) -> str:
    """
    Configured short domain, or the origin the request arrived on.

    Either way the result is normalized (scheme present, no trailing slash).
    """
    return normalize_short_domain(app_settings.short_domain or str(request.base_url))


def get_allocator(
    db: Session = Depends(get_db),
    app_settings: Settings = Depends(get_settings),
) -> LinkAllocator:
    strategy = RandomShortCodeStrategy(length=app_settings.short_code_length)
    return LinkAllocator(db, strategy, max_attempts=app_settings.max_allocation_attempts)


def get_rewrite_service(
    db: Session = Depends(get_db),
    allocator: LinkAllocator = Depends(get_allocator),
    app_settings: Settings = Depends(get_settings),
):
    from mailshort_app.services.rewrite_service import RewriteService
    return RewriteService(db=db, allocator=allocator, settings=app_settings)


def get_redirect_service(
    db: Session = Depends(get_db),
    cache: CacheStrategy = Depends(get_cache),
    app_settings: Settings = Depends(get_settings),
):
    from mailshort_app.services.redirect_service import RedirectService
    return RedirectService(db=db, cache=cache, cache_ttl=app_settings.cache_ttl)


def get_link_service(db: Session = Depends(get_db)):
    from mailshort_app.services.link_service import LinkService
    return LinkService(db=db)
