from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from linkpage_app.blocks.ordering import editor_view
from linkpage_app.config import settings
from linkpage_app.schemas.block import BlockResponse


SLUG_PATTERN = r"^[a-z0-9](?:[a-z0-9-]*[a-z0-9])?$"


class PageCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1, max_length=100, pattern=SLUG_PATTERN)
    description: Optional[str] = None
    meta_title: Optional[str] = Field(None, max_length=200)
    meta_description: Optional[str] = None


class PageUpdate(BaseModel):
    """Partial update: only the fields that are sent get written"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    slug: Optional[str] = Field(None, min_length=1, max_length=100, pattern=SLUG_PATTERN)
    description: Optional[str] = None
    meta_title: Optional[str] = Field(None, max_length=200)
    meta_description: Optional[str] = None
    is_published: Optional[bool] = None


class PageResponse(BaseModel):
    id: int
    owner_id: str
    title: str
    slug: str
    description: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    is_published: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field
    @property
    def public_url(self) -> str:
        return f"{settings.base_url}/p/{self.slug}"

    model_config = ConfigDict(from_attributes=True)


class PageDetail(PageResponse):
    """Page plus every block, in editor order"""
    blocks: List[BlockResponse] = []

    @field_validator("blocks")
    @classmethod
    def _editor_order(cls, blocks: List[BlockResponse]) -> List[BlockResponse]:
        return editor_view(blocks)


class PublicPageData(BaseModel):
    """
    What the public renderer needs for one slug.

    Holds ALL blocks (hidden ones too) and the publish flag; gating and
    filtering happen in the renderer. This is the payload cached per slug.
    """
    id: int
    title: str
    slug: str
    description: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    is_published: bool
    blocks: List[BlockResponse] = []

    model_config = ConfigDict(from_attributes=True)
