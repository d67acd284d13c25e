from fastapi import APIRouter, Depends, Query

from linkpage_app.config import settings
from linkpage_app.dependencies import get_analytics_service, get_current_user
from linkpage_app.schemas.analytics import UserAnalyticsSummary
from linkpage_app.schemas.user import CurrentUser
from linkpage_app.services.analytics_service import AnalyticsService

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/", response_model=UserAnalyticsSummary)
async def my_analytics(
    days: int = Query(7, ge=1, le=settings.analytics_summary_max_days),
    user: CurrentUser = Depends(get_current_user),
    analytics_service: AnalyticsService = Depends(get_analytics_service)
):
    """Views, clicks and conversion rate across all of the caller's pages"""
    return await analytics_service.user_summary(user.user_id, days)
