from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, computed_field

from linkpage_app.config import settings


class ShortlinkCreate(BaseModel):
    target_url: HttpUrl = Field(..., description="Where the shortlink redirects to")
    code: Optional[str] = Field(
        None,
        pattern=r"^[A-Za-z0-9_-]{3,20}$",
        description="Custom code; generated when omitted",
    )
    page_id: Optional[int] = None
    block_id: Optional[int] = None
    expires_at: Optional[datetime] = None


class ShortlinkResponse(BaseModel):
    id: int
    code: str
    target_url: str
    page_id: Optional[int] = None
    block_id: Optional[int] = None
    clicks: int
    is_active: bool
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @computed_field
    @property
    def short_url(self) -> str:
        return f"{settings.base_url}/s/{self.code}"

    model_config = ConfigDict(from_attributes=True)


class ResolvedShortlink(BaseModel):
    """Redirect lookup result; this is what gets cached per code"""
    id: int
    code: str
    target_url: str
    page_id: Optional[int] = None
    block_id: Optional[int] = None
    expires_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
