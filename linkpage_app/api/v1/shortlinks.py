from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from linkpage_app.dependencies import get_current_user, get_shortlink_service
from linkpage_app.schemas.shortlink import ShortlinkCreate, ShortlinkResponse
from linkpage_app.schemas.user import CurrentUser
from linkpage_app.services.shortlink_service import ShortlinkService

router = APIRouter(prefix="/shortlinks", tags=["shortlinks"])


@router.post("/", response_model=ShortlinkResponse, status_code=status.HTTP_201_CREATED)
async def create_shortlink(
    shortlink_data: ShortlinkCreate,
    user: CurrentUser = Depends(get_current_user),
    shortlink_service: ShortlinkService = Depends(get_shortlink_service)
):
    return await shortlink_service.create_shortlink(user, shortlink_data)


@router.get("/", response_model=List[ShortlinkResponse])
async def list_shortlinks(
    page_id: Optional[int] = None,
    user: CurrentUser = Depends(get_current_user),
    shortlink_service: ShortlinkService = Depends(get_shortlink_service)
):
    return await shortlink_service.list_shortlinks(user, page_id)


@router.delete("/{code}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_shortlink(
    code: str,
    user: CurrentUser = Depends(get_current_user),
    shortlink_service: ShortlinkService = Depends(get_shortlink_service)
):
    """Deactivate a shortlink (soft delete)"""
    success = await shortlink_service.delete_shortlink(user, code)
    if not success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Shortlink not found"
        )
