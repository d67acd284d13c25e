from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from linkpage_app.blocks.types import BlockType


class BlockCreate(BaseModel):
    """
    New block request.

    position defaults to "after the last block" and config to the type's
    default config when omitted.
    """
    type: BlockType
    position: Optional[int] = Field(None, ge=0)
    config: Optional[Dict[str, Any]] = None
    is_visible: bool = True


class BlockUpdate(BaseModel):
    position: Optional[int] = Field(None, ge=0)
    config: Optional[Dict[str, Any]] = None
    is_visible: Optional[bool] = None


class BlockReorder(BaseModel):
    block_ids: List[int] = Field(..., description="Every block id of the page, in display order")


class BlockResponse(BaseModel):
    id: int
    page_id: int
    type: str
    position: int
    config: Dict[str, Any]
    is_visible: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
