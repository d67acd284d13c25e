"""
FastAPI dependencies for dependency injection.

Provides the singleton cache, the session factory used by fire-and-forget
tasks, the caller identity, and fully wired services.

Tests override ``get_db``, ``get_cache`` and ``get_session_factory``.
"""

from functools import lru_cache
from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from linkpage_app.cache.factory import CacheBackend, CacheFactory
from linkpage_app.cache.strategies import CacheStrategy
from linkpage_app.config import settings
from linkpage_app.database.connection import SessionLocal, get_db
from linkpage_app.repositories.analytics_repository import SQLAlchemyAnalyticsRepository
from linkpage_app.repositories.page_repository import SQLAlchemyPageRepository
from linkpage_app.schemas.user import CurrentUser


@lru_cache()
def get_cache() -> CacheStrategy:
    """
    Get cache instance (singleton).

    Factory gets config from settings internally.
    """
    backend = CacheBackend(settings.cache_backend)
    return CacheFactory.create(backend)


def get_session_factory() -> Callable[[], Session]:
    """Session factory for work that outlives the request (background tasks)"""
    return SessionLocal


def get_current_user(
    x_user_id: Optional[str] = Header(None),
    x_user_plan: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> CurrentUser:
    """
    Caller identity from the headers set by the upstream auth gateway.

    Raises:
        HTTPException 401: no user id header
    """
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No authenticated user"
        )
    return CurrentUser(
        user_id=x_user_id,
        plan=x_user_plan or settings.default_plan,
        role=x_user_role or "tenant",
    )


def get_page_service(
    db: Session = Depends(get_db),
    cache: CacheStrategy = Depends(get_cache)
):
    """
    Get PageService with its repository and cache injected.

    Controller depends on service; service depends on infrastructure.
    """
    from linkpage_app.services.page_service import PageService
    return PageService(repository=SQLAlchemyPageRepository(db), cache=cache)


def get_analytics_service(db: Session = Depends(get_db)):
    from linkpage_app.services.analytics_service import AnalyticsService
    return AnalyticsService(repository=SQLAlchemyAnalyticsRepository(db))


def get_shortlink_service(
    db: Session = Depends(get_db),
    cache: CacheStrategy = Depends(get_cache)
):
    from linkpage_app.services.shortlink_service import ShortlinkService
    return ShortlinkService(db=db, cache=cache)
