from fastapi import APIRouter, Depends, Request, status

from linkpage_app.dependencies import get_analytics_service
from linkpage_app.schemas.analytics import EventAck, EventCreate
from linkpage_app.services.analytics_service import AnalyticsService, extract_client_info

router = APIRouter(prefix="/events", tags=["analytics"])


@router.post("/", response_model=EventAck, status_code=status.HTTP_201_CREATED)
async def track_event(
    event: EventCreate,
    request: Request,
    analytics_service: AnalyticsService = Depends(get_analytics_service)
):
    """
    Record one analytics event.

    Public endpoint. User agent, IP and referrer come from the request
    headers; values in the body are ignored. 400 on a missing/invalid event
    type or when no target id is given, 500 if the insert fails.
    """
    client = extract_client_info(
        request.headers,
        request.client.host if request.client else None
    )
    await analytics_service.ingest(event, client)
    return EventAck()
