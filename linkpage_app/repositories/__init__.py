"""
Repository interfaces for pages and analytics.

Services receive a repository instead of reaching for a global session, so
tests can hand them any implementation.
"""

from .page_repository import PageRepository, SQLAlchemyPageRepository
from .analytics_repository import AnalyticsRepository, SQLAlchemyAnalyticsRepository

__all__ = [
    "PageRepository",
    "SQLAlchemyPageRepository",
    "AnalyticsRepository",
    "SQLAlchemyAnalyticsRepository",
]
