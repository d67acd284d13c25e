"""
Block types and their configuration records.

Every block type is one variant of a discriminated union keyed by ``type``.
Each variant carries its own config model whose field defaults ARE the
default configuration a freshly added block starts with.

Paid-plan types (product cards, video, countdown, dynamic feeds) keep a
free-form config that starts out empty.
"""

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError


class BlockType(str, Enum):
    """Block types a page may contain"""
    LINK = "link"
    BUTTON = "button"
    IMAGE = "image"
    TEXT = "text"
    SOCIAL_BLOCK = "social_block"
    LINKS_BLOCK = "links_block"
    CONTACT_BLOCK = "contact_block"
    # Pro plan
    PRODUCT_CARD = "product_card"
    VIDEO = "video"
    COUNTDOWN = "countdown"
    DYNAMIC_FEED = "dynamic_feed"


PAID_PLAN_BLOCK_TYPES = frozenset({
    BlockType.PRODUCT_CARD,
    BlockType.VIDEO,
    BlockType.COUNTDOWN,
    BlockType.DYNAMIC_FEED,
})


# ---------------------------------------------------------------------------
# Config records
# ---------------------------------------------------------------------------

class BlockConfig(BaseModel):
    """
    Base for config records.

    Optional fields are omitted from the stored config until set. Keys the
    record does not declare are kept as given.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class LinkConfig(BlockConfig):
    label: str = "New Link"
    url: str = "https://example.com"
    description: Optional[str] = None


class ButtonConfig(BlockConfig):
    label: str = "Click Me"
    url: str = "https://example.com"
    style: str = "primary"
    icon: Optional[Union[bool, str]] = None


class ImageConfig(BlockConfig):
    src: str = ""
    alt: str = "Image"
    width: str = "100%"
    caption: Optional[str] = None
    click_url: Optional[str] = Field(None, alias="clickUrl")
    max_height: Optional[str] = Field(None, alias="maxHeight")


class TextConfig(BlockConfig):
    content: str = "Your text here"
    align: str = "center"


class SocialLink(BlockConfig):
    provider: str
    url: str = ""


class SocialBlockConfig(BlockConfig):
    socials: List[SocialLink] = Field(
        default_factory=lambda: [SocialLink(provider="instagram", url="")]
    )


class LinkItem(BlockConfig):
    label: str
    url: str = ""


class LinksBlockConfig(BlockConfig):
    links: List[LinkItem] = Field(
        default_factory=lambda: [LinkItem(label="New Link", url="")]
    )


class ContactBlockConfig(BlockConfig):
    phone: str = ""
    whatsapp_prefilled: str = ""


class FreeformConfig(BlockConfig):
    """Config without a fixed shape."""


# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------

class LinkBlock(BaseModel):
    type: Literal["link"] = "link"
    config: LinkConfig = Field(default_factory=LinkConfig)


class ButtonBlock(BaseModel):
    type: Literal["button"] = "button"
    config: ButtonConfig = Field(default_factory=ButtonConfig)


class ImageBlock(BaseModel):
    type: Literal["image"] = "image"
    config: ImageConfig = Field(default_factory=ImageConfig)


class TextBlock(BaseModel):
    type: Literal["text"] = "text"
    config: TextConfig = Field(default_factory=TextConfig)


class SocialBlock(BaseModel):
    type: Literal["social_block"] = "social_block"
    config: SocialBlockConfig = Field(default_factory=SocialBlockConfig)


class LinksBlock(BaseModel):
    type: Literal["links_block"] = "links_block"
    config: LinksBlockConfig = Field(default_factory=LinksBlockConfig)


class ContactBlock(BaseModel):
    type: Literal["contact_block"] = "contact_block"
    config: ContactBlockConfig = Field(default_factory=ContactBlockConfig)


class ProductCardBlock(BaseModel):
    type: Literal["product_card"] = "product_card"
    config: FreeformConfig = Field(default_factory=FreeformConfig)


class VideoBlock(BaseModel):
    type: Literal["video"] = "video"
    config: FreeformConfig = Field(default_factory=FreeformConfig)


class CountdownBlock(BaseModel):
    type: Literal["countdown"] = "countdown"
    config: FreeformConfig = Field(default_factory=FreeformConfig)


class DynamicFeedBlock(BaseModel):
    type: Literal["dynamic_feed"] = "dynamic_feed"
    config: FreeformConfig = Field(default_factory=FreeformConfig)


BlockPayload = Annotated[
    Union[
        LinkBlock,
        ButtonBlock,
        ImageBlock,
        TextBlock,
        SocialBlock,
        LinksBlock,
        ContactBlock,
        ProductCardBlock,
        VideoBlock,
        CountdownBlock,
        DynamicFeedBlock,
    ],
    Field(discriminator="type"),
]

_payload_adapter = TypeAdapter(BlockPayload)


def parse_block(block_type: str, config: Optional[Dict[str, Any]] = None) -> BaseModel:
    """
    Build the typed variant for ``block_type``.

    Missing config fields take the variant's defaults.

    Raises:
        ValidationError: unknown type or a config that doesn't fit the variant
    """
    payload: Dict[str, Any] = {"type": block_type}
    if config is not None:
        payload["config"] = config
    return _payload_adapter.validate_python(payload)


def _dump(config: BaseModel) -> Dict[str, Any]:
    return config.model_dump(by_alias=True, exclude_none=True)


def default_config(block_type: str) -> Dict[str, Any]:
    """Default config for a new block; unrecognized types get an empty config."""
    try:
        return _dump(parse_block(block_type).config)
    except ValidationError:
        return {}


def build_config(block_type: str, config: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Validate a caller-supplied config against its block type and normalize it."""
    return _dump(parse_block(block_type, config).config)


def requires_paid_plan(block_type: str) -> bool:
    return block_type in {t.value for t in PAID_PLAN_BLOCK_TYPES}
