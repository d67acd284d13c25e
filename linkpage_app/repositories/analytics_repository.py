"""
Analytics events and shortlinks persistence.

Events are append-only: this repository can insert and read them, never
update or delete.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from linkpage_app.exceptions import StorageError
from linkpage_app.models.analytics import AnalyticsEvent, Shortlink
from linkpage_app.models.page import Page
from linkpage_app.schemas.analytics import EventRecord

logger = logging.getLogger(__name__)


class AnalyticsRepository(ABC):
    """Storage interface for the analytics sink."""

    @abstractmethod
    def add_event(self, record: EventRecord) -> AnalyticsEvent:
        """
        Insert a single event.

        Raises:
            StorageError: if the insert fails
        """
        pass

    @abstractmethod
    def events_for_page(self, page_id: int, since: datetime) -> List[AnalyticsEvent]:
        pass

    @abstractmethod
    def events_for_owner(self, owner_id: str, since: datetime) -> List[AnalyticsEvent]:
        """Events of every page ``owner_id`` owns"""
        pass

    @abstractmethod
    def increment_shortlink_clicks(self, shortlink_id: int) -> None:
        pass


class SQLAlchemyAnalyticsRepository(AnalyticsRepository):
    def __init__(self, db: Session):
        self.db = db

    def add_event(self, record: EventRecord) -> AnalyticsEvent:
        event = AnalyticsEvent(
            page_id=record.page_id,
            block_id=record.block_id,
            shortlink_id=record.shortlink_id,
            event_type=record.event_type,
            user_agent=record.user_agent,
            ip_address=record.ip_address,
            referrer=record.referrer,
            event_metadata=record.metadata,
        )
        try:
            self.db.add(event)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Analytics insert failed: {e}")
            raise StorageError("Failed to record event") from e
        self.db.refresh(event)
        return event

    def events_for_page(self, page_id: int, since: datetime) -> List[AnalyticsEvent]:
        return (
            self.db.query(AnalyticsEvent)
            .filter(
                AnalyticsEvent.page_id == page_id,
                AnalyticsEvent.created_at >= since
            )
            .order_by(AnalyticsEvent.created_at)
            .all()
        )

    def events_for_owner(self, owner_id: str, since: datetime) -> List[AnalyticsEvent]:
        return (
            self.db.query(AnalyticsEvent)
            .join(Page, Page.id == AnalyticsEvent.page_id)
            .filter(
                Page.owner_id == owner_id,
                AnalyticsEvent.created_at >= since
            )
            .order_by(AnalyticsEvent.created_at)
            .all()
        )

    def increment_shortlink_clicks(self, shortlink_id: int) -> None:
        # Increment in SQL, not in Python
        try:
            self.db.execute(
                update(Shortlink)
                .where(Shortlink.id == shortlink_id)
                .values(clicks=Shortlink.clicks + 1)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError("Failed to count shortlink click") from e
