from typing import List

from fastapi import APIRouter, Depends, status

from linkpage_app.dependencies import get_current_user, get_page_service
from linkpage_app.schemas.block import BlockCreate, BlockReorder, BlockResponse, BlockUpdate
from linkpage_app.schemas.user import CurrentUser
from linkpage_app.services.page_service import PageService

router = APIRouter(prefix="/pages/{page_id}/blocks", tags=["blocks"])


@router.get("/", response_model=List[BlockResponse])
async def list_blocks(
    page_id: int,
    user: CurrentUser = Depends(get_current_user),
    page_service: PageService = Depends(get_page_service)
):
    return await page_service.list_blocks(page_id, user)


@router.post("/", response_model=BlockResponse, status_code=status.HTTP_201_CREATED)
async def create_block(
    page_id: int,
    block_data: BlockCreate,
    user: CurrentUser = Depends(get_current_user),
    page_service: PageService = Depends(get_page_service)
):
    """
    Add a block.

    403 with code ``upgrade_required`` when the type needs a paid plan.
    """
    return await page_service.create_block(page_id, user, block_data)


@router.put("/order", response_model=List[BlockResponse])
async def reorder_blocks(
    page_id: int,
    order: BlockReorder,
    user: CurrentUser = Depends(get_current_user),
    page_service: PageService = Depends(get_page_service)
):
    """Renumber positions 1..n following ``block_ids``"""
    return await page_service.reorder_blocks(page_id, user, order.block_ids)


@router.patch("/{block_id}", response_model=BlockResponse)
async def update_block(
    page_id: int,
    block_id: int,
    changes: BlockUpdate,
    user: CurrentUser = Depends(get_current_user),
    page_service: PageService = Depends(get_page_service)
):
    return await page_service.update_block(page_id, block_id, user, changes)


@router.delete("/{block_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_block(
    page_id: int,
    block_id: int,
    user: CurrentUser = Depends(get_current_user),
    page_service: PageService = Depends(get_page_service)
):
    await page_service.delete_block(page_id, block_id, user)
