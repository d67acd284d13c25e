from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from linkpage_app.dependencies import (
    get_page_service,
    get_session_factory,
    get_shortlink_service,
)
from linkpage_app.exceptions import PageUnavailable
from linkpage_app.render.renderer import (
    PublicPageState,
    RenderedBlock,
    RenderMode,
    ViewTracker,
    evaluate_public_page,
    render_blocks,
)
from linkpage_app.schemas.analytics import EventRecord
from linkpage_app.services.analytics_service import (
    extract_client_info,
    track_event_safely,
    track_shortlink_click,
)
from linkpage_app.services.page_service import PageService
from linkpage_app.services.shortlink_service import ShortlinkService

router = APIRouter(tags=["public"])


class PublicPageResponse(BaseModel):
    id: int
    title: str
    slug: str
    description: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    blocks: List[RenderedBlock]


@router.get("/p/{slug}", response_model=PublicPageResponse)
async def view_public_page(
    slug: str,
    request: Request,
    background_tasks: BackgroundTasks,
    page_service: PageService = Depends(get_page_service),
    session_factory=Depends(get_session_factory)
):
    """
    Public page.

    404 for an unknown slug, 403 (code ``page_unavailable``) for an
    unpublished page. A published page renders its visible blocks and
    records one view after the response is sent.
    """
    page = await page_service.get_public_page(slug)
    state = evaluate_public_page(page)

    if state == PublicPageState.NOT_FOUND:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Page not found"
        )
    if state == PublicPageState.UNAVAILABLE:
        raise PageUnavailable()

    client = extract_client_info(
        request.headers,
        request.client.host if request.client else None
    )
    view = EventRecord(event_type="view", page_id=page.id, **client.model_dump())
    ViewTracker().track_once(
        state,
        lambda: background_tasks.add_task(track_event_safely, session_factory, view)
    )

    rendered = render_blocks(page.blocks, RenderMode.PUBLIC)
    return PublicPageResponse(
        id=page.id,
        title=page.title,
        slug=page.slug,
        description=page.description,
        meta_title=page.meta_title,
        meta_description=page.meta_description,
        blocks=rendered.blocks,
    )


@router.get("/s/{code}")
async def follow_shortlink(
    code: str,
    request: Request,
    background_tasks: BackgroundTasks,
    shortlink_service: ShortlinkService = Depends(get_shortlink_service),
    session_factory=Depends(get_session_factory)
):
    """
    Redirect to the shortlink target.

    The click counter and click event are written after the redirect is
    sent, so tracking never delays or breaks it.
    """
    shortlink = await shortlink_service.resolve_for_redirect(code)
    if not shortlink:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Shortlink not found or inactive"
        )

    client = extract_client_info(
        request.headers,
        request.client.host if request.client else None
    )
    click = EventRecord(
        event_type="click",
        shortlink_id=shortlink.id,
        page_id=shortlink.page_id,
        block_id=shortlink.block_id,
        metadata={"code": shortlink.code, "target_url": shortlink.target_url},
        **client.model_dump(),
    )
    background_tasks.add_task(track_shortlink_click, session_factory, click)

    return RedirectResponse(
        url=shortlink.target_url,
        status_code=status.HTTP_302_FOUND,
        headers={"Cache-Control": "no-cache"},
    )
