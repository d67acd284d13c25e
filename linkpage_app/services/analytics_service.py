"""
Analytics Sink: event ingestion, page summaries and fire-and-forget tracking.

Ingestion is one validated insert per call. There is no deduplication,
batching or retry; tracking must never get in the way of serving a page.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from sqlalchemy.orm import Session

from linkpage_app.exceptions import ValidationFailed
from linkpage_app.models.analytics import AnalyticsEvent
from linkpage_app.repositories.analytics_repository import (
    AnalyticsRepository,
    SQLAlchemyAnalyticsRepository,
)
from linkpage_app.schemas.analytics import (
    AnalyticsSummary,
    ClientInfo,
    DailyEvents,
    EventCreate,
    EventRecord,
    UserAnalyticsSummary,
)

logger = logging.getLogger(__name__)

VALID_EVENT_TYPES = ("view", "click", "purchase", "submit", "download")


def extract_client_info(headers: Mapping[str, str], peer_host: Optional[str] = None) -> ClientInfo:
    """
    Build request provenance from headers.

    IP preference: ``client-ip``, then the first ``x-forwarded-for`` hop,
    then the socket peer.
    """
    ip_address = headers.get("client-ip")
    if not ip_address:
        forwarded = headers.get("x-forwarded-for")
        if forwarded:
            ip_address = forwarded.split(",")[0].strip()
    if not ip_address:
        ip_address = peer_host

    return ClientInfo(
        user_agent=headers.get("user-agent"),
        ip_address=ip_address,
        referrer=headers.get("referer") or headers.get("referrer"),
    )


def validate_event(payload: EventCreate) -> None:
    """
    Raises:
        ValidationFailed: missing event type / target ids, or unknown event type
    """
    has_target = any(
        target is not None
        for target in (payload.page_id, payload.block_id, payload.shortlink_id)
    )
    if not payload.event_type or not has_target:
        raise ValidationFailed(
            "Event type and at least one ID (pageId, blockId, shortlinkId) are required"
        )
    if payload.event_type not in VALID_EVENT_TYPES:
        raise ValidationFailed("Invalid event type")


class AnalyticsService:
    def __init__(self, repository: AnalyticsRepository):
        self.repository = repository

    async def ingest(self, payload: EventCreate, client: ClientInfo) -> AnalyticsEvent:
        """
        Validate and store one event.

        Provenance comes only from ``client``; the body cannot set it.

        Raises:
            ValidationFailed: see ``validate_event``
            StorageError: the insert failed
        """
        validate_event(payload)
        record = EventRecord(
            event_type=payload.event_type,
            page_id=payload.page_id,
            block_id=payload.block_id,
            shortlink_id=payload.shortlink_id,
            metadata=payload.metadata,
            **client.model_dump(),
        )
        return self.repository.add_event(record)

    async def page_summary(self, page_id: int, days: int = 7) -> AnalyticsSummary:
        """
        Views, clicks, conversion rate and per-day counts for the last ``days`` days.
        """
        events = self.repository.events_for_page(page_id, _since(days))
        return AnalyticsSummary(page_id=page_id, days=days, **summarize_events(events))

    async def user_summary(self, owner_id: str, days: int = 7) -> UserAnalyticsSummary:
        """The same totals across every page ``owner_id`` owns"""
        events = self.repository.events_for_owner(owner_id, _since(days))
        return UserAnalyticsSummary(owner_id=owner_id, days=days, **summarize_events(events))


def _since(days: int) -> datetime:
    # created_at is stored as naive UTC
    return datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(days=days)


def summarize_events(events: Iterable[AnalyticsEvent]) -> Dict[str, Any]:
    """
    Count views and clicks, overall and per day.

    Conversion rate is clicks per hundred views, rounded to 2 decimals, and
    0 when there are no views. Other event types are not counted.
    """
    per_day: Dict[str, DailyEvents] = {}
    views = clicks = 0
    for event in events:
        day = event.created_at.date().isoformat()
        bucket = per_day.setdefault(day, DailyEvents(date=day))
        if event.event_type == "view":
            views += 1
            bucket.views += 1
        elif event.event_type == "click":
            clicks += 1
            bucket.clicks += 1

    return {
        "total_views": views,
        "total_clicks": clicks,
        "conversion_rate": round(clicks / views * 100, 2) if views else 0.0,
        "events_over_time": [per_day[d] for d in sorted(per_day)],
    }


def track_event_safely(session_factory: Callable[[], Session], record: EventRecord) -> bool:
    """
    Fire-and-forget insert used after a response has been sent.

    Opens its own session. Any failure is logged and dropped; nothing is
    retried and nothing is raised to the caller.

    Returns:
        True if the event was stored
    """
    db = None
    try:
        db = session_factory()
        SQLAlchemyAnalyticsRepository(db).add_event(record)
        return True
    except Exception as e:
        logger.warning(f"Failed to track {record.event_type} event: {e}", exc_info=True)
        return False
    finally:
        if db is not None:
            db.close()


def track_shortlink_click(
    session_factory: Callable[[], Session],
    record: EventRecord
) -> bool:
    """Count a shortlink click and record the matching click event, fire-and-forget."""
    db = None
    try:
        db = session_factory()
        repository = SQLAlchemyAnalyticsRepository(db)
        repository.increment_shortlink_clicks(record.shortlink_id)
        repository.add_event(record)
        return True
    except Exception as e:
        logger.warning(f"Failed to track shortlink click: {e}", exc_info=True)
        return False
    finally:
        if db is not None:
            db.close()
