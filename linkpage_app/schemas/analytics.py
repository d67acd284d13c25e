from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class EventCreate(BaseModel):
    """
    Body of POST /api/v1/events.

    Accepts camelCase (pageId, eventType) as sent by the page frontend, or
    snake_case. Provenance fields (user agent, IP, referrer) are NOT read
    from the body; unknown keys are dropped.
    """
    page_id: Optional[int] = Field(None, validation_alias=AliasChoices("pageId", "page_id"))
    block_id: Optional[int] = Field(None, validation_alias=AliasChoices("blockId", "block_id"))
    shortlink_id: Optional[int] = Field(
        None, validation_alias=AliasChoices("shortlinkId", "shortlink_id")
    )
    event_type: Optional[str] = Field(
        None, validation_alias=AliasChoices("eventType", "event_type")
    )
    metadata: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="ignore")


class ClientInfo(BaseModel):
    """Request provenance, always taken from headers"""
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None
    referrer: Optional[str] = None


class EventRecord(BaseModel):
    """
    A validated event ready to be written.

    Used both by the ingestion endpoint and by the fire-and-forget trackers
    (page views, shortlink clicks).
    """
    event_type: str
    page_id: Optional[int] = None
    block_id: Optional[int] = None
    shortlink_id: Optional[int] = None
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None
    referrer: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "event_type": "view",
                "page_id": 12,
                "user_agent": "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X)",
                "ip_address": "203.0.113.7",
                "referrer": "https://instagram.com",
            }
        }
    )


class EventAck(BaseModel):
    success: bool = True


class DailyEvents(BaseModel):
    date: str
    views: int = 0
    clicks: int = 0


class AnalyticsTotals(BaseModel):
    """Views, clicks and per-day counts over a trailing window of ``days``"""
    days: int
    total_views: int
    total_clicks: int
    conversion_rate: float
    events_over_time: List[DailyEvents]


class AnalyticsSummary(AnalyticsTotals):
    page_id: int


class UserAnalyticsSummary(AnalyticsTotals):
    """Totals across every page the owner has"""
    owner_id: str
