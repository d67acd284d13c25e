import logging
from typing import List, Optional

from pydantic import ValidationError

from linkpage_app.blocks.ordering import editor_view, next_position
from linkpage_app.blocks.types import build_config, default_config, requires_paid_plan
from linkpage_app.cache.strategies import CacheStrategy
from linkpage_app.config import settings
from linkpage_app.exceptions import (
    AccessDenied,
    Conflict,
    NotFound,
    UpgradeRequired,
    ValidationFailed,
)
from linkpage_app.models.page import Block, Page
from linkpage_app.repositories.page_repository import PageRepository
from linkpage_app.schemas.block import BlockCreate, BlockUpdate
from linkpage_app.schemas.page import PageCreate, PageUpdate, PublicPageData
from linkpage_app.schemas.user import CurrentUser

logger = logging.getLogger(__name__)


# Blocks a free-plan page starts with, in position order
STARTER_BLOCKS = [
    (
        "links_block",
        {
            "links": [
                {"label": "Blog", "url": "https://example.com/blog"},
                {"label": "Shop", "url": "https://example.com/shop"},
                {"label": "Portfolio", "url": "https://example.com/portfolio"},
            ]
        },
    ),
    (
        "social_block",
        {
            "socials": [
                {"provider": "instagram", "url": "https://instagram.com/username"},
                {"provider": "twitter", "url": "https://twitter.com/username"},
            ]
        },
    ),
    (
        "contact_block",
        {
            "phone": "+1234567890",
            "whatsapp_prefilled": "Hello! I found you on your link page.",
        },
    ),
]


def starter_blocks() -> List[Block]:
    return [
        Block(type=block_type, position=position, config=build_config(block_type, config))
        for position, (block_type, config) in enumerate(STARTER_BLOCKS, start=1)
    ]


def public_cache_key(slug: str) -> str:
    return f"page:{slug}"


class PageService:
    """
    Page Store operations: pages, their blocks, and the public read path.

    The repository and cache are injected. Every mutation that can change
    what a visitor sees ends with an explicit invalidation of the page's
    public cache entry.

    Methods are async for the cache I/O; database calls are sync.
    """

    def __init__(
        self,
        repository: PageRepository,
        cache: Optional[CacheStrategy] = None
    ):
        self.repository = repository
        self.cache = cache

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    async def list_pages(self, user: CurrentUser) -> List[Page]:
        return self.repository.list_by_owner(user.user_id)

    async def create_page(self, user: CurrentUser, data: PageCreate) -> Page:
        """
        Create a page for the caller.

        Free-plan callers are limited to ``settings.free_plan_page_limit``
        pages and their page comes with ``STARTER_BLOCKS``, saved in the same
        commit. Paid-plan pages start empty. New pages are unpublished.
        """
        if not user.has_paid_plan:
            owned = self.repository.count_by_owner(user.user_id)
            if owned >= settings.free_plan_page_limit:
                raise UpgradeRequired("Creating more pages requires a Pro plan subscription")

        if self.repository.get_by_slug(data.slug):
            raise Conflict("Slug already exists")

        page = Page(owner_id=user.user_id, is_published=False, **data.model_dump())
        if not user.has_paid_plan:
            page.blocks = starter_blocks()
        page = self.repository.save(page)
        logger.info(f"Created page {page.id} ({page.slug}) for {user.user_id}")
        return page

    async def get_page(self, page_id: int, user: CurrentUser) -> Page:
        """
        Load a page the caller may edit.

        Raises:
            NotFound: no such page
            AccessDenied: the page belongs to someone else and caller is not admin
        """
        page = self.repository.get(page_id)
        if not page:
            raise NotFound("Page not found")
        if page.owner_id != user.user_id and not user.is_admin:
            raise AccessDenied()
        return page

    async def update_page(self, page_id: int, user: CurrentUser, changes: PageUpdate) -> Page:
        """Partial update; only fields present in the request are written"""
        page = await self.get_page(page_id, user)
        fields = changes.model_dump(exclude_unset=True)

        for name in ("title", "slug", "is_published"):
            if name in fields and fields[name] is None:
                raise ValidationFailed(f"{name} cannot be null")

        old_slug = page.slug
        new_slug = fields.get("slug")
        if new_slug and new_slug != old_slug:
            existing = self.repository.get_by_slug(new_slug)
            if existing and existing.id != page.id:
                raise Conflict("Slug already exists")

        for name, value in fields.items():
            setattr(page, name, value)
        page = self.repository.save(page)

        await self.invalidate_public_page(old_slug)
        if page.slug != old_slug:
            await self.invalidate_public_page(page.slug)
        return page

    async def delete_page(self, page_id: int, user: CurrentUser) -> None:
        """Delete a page and its blocks. Analytics events are kept."""
        page = await self.get_page(page_id, user)
        slug = page.slug
        self.repository.delete(page)
        await self.invalidate_public_page(slug)
        logger.info(f"Deleted page {page_id} ({slug})")

    # ------------------------------------------------------------------
    # Public read path
    # ------------------------------------------------------------------

    async def get_public_page(self, slug: str) -> Optional[PublicPageData]:
        """
        Get the public payload for a slug using Cache-Aside.

        Returns the page with ALL its blocks plus the publish flag, or None.
        Publish gating and visibility filtering are the renderer's job.
        """
        cache_key = public_cache_key(slug)

        if self.cache:
            cached = await self.cache.get(cache_key)
            if cached:
                return PublicPageData.model_validate_json(cached)

        page = self.repository.get_by_slug(slug)
        if not page:
            return None

        data = PublicPageData.model_validate(page)

        if self.cache:
            await self.cache.set(cache_key, data.model_dump_json(), ttl=settings.cache_ttl)
        return data

    async def invalidate_public_page(self, slug: str) -> None:
        if self.cache:
            await self.cache.delete(public_cache_key(slug))

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    async def list_blocks(self, page_id: int, user: CurrentUser) -> List[Block]:
        """All blocks of the page in editor order"""
        await self.get_page(page_id, user)
        return editor_view(self.repository.list_blocks(page_id))

    async def create_block(self, page_id: int, user: CurrentUser, data: BlockCreate) -> Block:
        """
        Add a block to a page.

        Raises:
            UpgradeRequired: the block type needs a paid plan
            ValidationFailed: the config doesn't fit the block type
        """
        page = await self.get_page(page_id, user)
        block_type = data.type.value

        if requires_paid_plan(block_type) and not user.has_paid_plan:
            raise UpgradeRequired("This block requires a Pro plan subscription")

        if data.config is None:
            config = default_config(block_type)
        else:
            config = self._validated_config(block_type, data.config)

        position = data.position
        if position is None:
            position = next_position(self.repository.list_blocks(page.id))

        block = Block(
            page_id=page.id,
            type=block_type,
            position=position,
            config=config,
            is_visible=data.is_visible,
        )
        block = self.repository.save_block(block)
        await self.invalidate_public_page(page.slug)
        return block

    async def update_block(
        self,
        page_id: int,
        block_id: int,
        user: CurrentUser,
        changes: BlockUpdate
    ) -> Block:
        page = await self.get_page(page_id, user)
        block = self._get_block(page.id, block_id)
        fields = changes.model_dump(exclude_unset=True)

        if fields.get("config") is not None:
            block.config = self._validated_config(block.type, fields["config"])
        if fields.get("position") is not None:
            block.position = fields["position"]
        if fields.get("is_visible") is not None:
            block.is_visible = fields["is_visible"]

        block = self.repository.save_block(block)
        await self.invalidate_public_page(page.slug)
        return block

    async def delete_block(self, page_id: int, block_id: int, user: CurrentUser) -> None:
        page = await self.get_page(page_id, user)
        block = self._get_block(page.id, block_id)
        self.repository.delete_block(block)
        await self.invalidate_public_page(page.slug)

    async def reorder_blocks(
        self,
        page_id: int,
        user: CurrentUser,
        block_ids: List[int]
    ) -> List[Block]:
        """
        Give the page's blocks positions 1..n in the order of ``block_ids``.

        ``block_ids`` must list every block of the page exactly once.
        """
        page = await self.get_page(page_id, user)
        current_ids = {b.id for b in self.repository.list_blocks(page.id)}

        if len(block_ids) != len(set(block_ids)) or set(block_ids) != current_ids:
            raise ValidationFailed("block_ids must list every block of the page exactly once")

        positions = {block_id: index for index, block_id in enumerate(block_ids, start=1)}
        blocks = self.repository.set_positions(page.id, positions)
        await self.invalidate_public_page(page.slug)
        return editor_view(blocks)

    def _get_block(self, page_id: int, block_id: int) -> Block:
        block = self.repository.get_block(page_id, block_id)
        if not block:
            raise NotFound("Block not found")
        return block

    @staticmethod
    def _validated_config(block_type: str, config: dict) -> dict:
        try:
            return build_config(block_type, config)
        except ValidationError as e:
            raise ValidationFailed(f"Invalid config for {block_type} block: {e.errors()[0]['msg']}")
