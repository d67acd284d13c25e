from typing import List

from fastapi import APIRouter, Depends, Query, status

from linkpage_app.config import settings
from linkpage_app.dependencies import (
    get_analytics_service,
    get_current_user,
    get_page_service,
)
from linkpage_app.render.renderer import RenderedPage, RenderMode, render_blocks
from linkpage_app.schemas.analytics import AnalyticsSummary
from linkpage_app.schemas.page import PageCreate, PageDetail, PageResponse, PageUpdate
from linkpage_app.schemas.user import CurrentUser
from linkpage_app.services.analytics_service import AnalyticsService
from linkpage_app.services.page_service import PageService

router = APIRouter(prefix="/pages", tags=["pages"])


@router.get("/", response_model=List[PageResponse])
async def list_pages(
    user: CurrentUser = Depends(get_current_user),
    page_service: PageService = Depends(get_page_service)
):
    """List the caller's pages"""
    return await page_service.list_pages(user)


@router.post("/", response_model=PageResponse, status_code=status.HTTP_201_CREATED)
async def create_page(
    page_data: PageCreate,
    user: CurrentUser = Depends(get_current_user),
    page_service: PageService = Depends(get_page_service)
):
    """Create a page (starts unpublished)"""
    return await page_service.create_page(user, page_data)


@router.get("/{page_id}", response_model=PageDetail)
async def get_page(
    page_id: int,
    user: CurrentUser = Depends(get_current_user),
    page_service: PageService = Depends(get_page_service)
):
    """Page with all blocks in editor order"""
    return await page_service.get_page(page_id, user)


@router.patch("/{page_id}", response_model=PageResponse)
async def update_page(
    page_id: int,
    changes: PageUpdate,
    user: CurrentUser = Depends(get_current_user),
    page_service: PageService = Depends(get_page_service)
):
    """Partial update, including publish/unpublish"""
    return await page_service.update_page(page_id, user, changes)


@router.delete("/{page_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_page(
    page_id: int,
    user: CurrentUser = Depends(get_current_user),
    page_service: PageService = Depends(get_page_service)
):
    await page_service.delete_page(page_id, user)


@router.get("/{page_id}/preview", response_model=RenderedPage)
async def preview_page(
    page_id: int,
    user: CurrentUser = Depends(get_current_user),
    page_service: PageService = Depends(get_page_service)
):
    """Owner preview: every block, hidden ones included, whether or not published"""
    blocks = await page_service.list_blocks(page_id, user)
    return render_blocks(blocks, RenderMode.EDITOR)


@router.get("/{page_id}/analytics", response_model=AnalyticsSummary)
async def page_analytics(
    page_id: int,
    days: int = Query(7, ge=1, le=settings.analytics_summary_max_days),
    user: CurrentUser = Depends(get_current_user),
    page_service: PageService = Depends(get_page_service),
    analytics_service: AnalyticsService = Depends(get_analytics_service)
):
    """Views, clicks and conversion rate over the last ``days`` days"""
    await page_service.get_page(page_id, user)
    return await analytics_service.page_summary(page_id, days)
