"""
Tests for PageService business logic, called directly.
"""
import asyncio

import pytest

from linkpage_app.exceptions import (
    AccessDenied,
    Conflict,
    NotFound,
    UpgradeRequired,
    ValidationFailed,
)
from linkpage_app.repositories.page_repository import SQLAlchemyPageRepository
from linkpage_app.schemas.block import BlockCreate, BlockUpdate
from linkpage_app.schemas.page import PageCreate, PageUpdate
from linkpage_app.schemas.user import CurrentUser
from linkpage_app.services.page_service import PageService, public_cache_key


@pytest.fixture
def service(db_session, cache):
    return PageService(repository=SQLAlchemyPageRepository(db_session), cache=cache)


def make_page(service, user, slug="my-page", title="My Page"):
    return asyncio.run(service.create_page(user, PageCreate(title=title, slug=slug)))


class TestPages:
    def test_new_page_is_unpublished(self, service, alice):
        page = make_page(service, alice)

        assert page.id is not None
        assert page.owner_id == "alice"
        assert page.is_published is False

    def test_free_page_gets_starter_blocks(self, service, alice):
        page = make_page(service, alice)

        blocks = asyncio.run(service.list_blocks(page.id, alice))

        assert [(b.type, b.position) for b in blocks] == [
            ("links_block", 1),
            ("social_block", 2),
            ("contact_block", 3),
        ]
        assert all(b.is_visible for b in blocks)
        assert [link["label"] for link in blocks[0].config["links"]] == ["Blog", "Shop", "Portfolio"]
        assert [s["provider"] for s in blocks[1].config["socials"]] == ["instagram", "twitter"]
        assert blocks[2].config["whatsapp_prefilled"] == "Hello! I found you on your link page."

    def test_pro_page_starts_empty(self, service, pro_user):
        page = make_page(service, pro_user)

        assert asyncio.run(service.list_blocks(page.id, pro_user)) == []

    def test_new_block_goes_after_starter_blocks(self, service, alice):
        page = make_page(service, alice)

        block = asyncio.run(service.create_block(page.id, alice, BlockCreate(type="link")))

        assert block.position == 4

    def test_duplicate_slug_conflicts(self, service, alice, pro_user):
        make_page(service, alice, slug="taken")

        with pytest.raises(Conflict):
            make_page(service, pro_user, slug="taken")

    def test_free_plan_page_limit(self, service, alice):
        make_page(service, alice, slug="first")

        with pytest.raises(UpgradeRequired):
            make_page(service, alice, slug="second")

    def test_pro_plan_has_no_page_limit(self, service, pro_user):
        make_page(service, pro_user, slug="one")
        make_page(service, pro_user, slug="two")

        pages = asyncio.run(service.list_pages(pro_user))
        assert [p.slug for p in pages] == ["one", "two"]

    def test_get_missing_page(self, service, alice):
        with pytest.raises(NotFound):
            asyncio.run(service.get_page(999, alice))

    def test_other_owner_is_denied(self, service, alice):
        page = make_page(service, alice)
        mallory = CurrentUser(user_id="mallory")

        with pytest.raises(AccessDenied):
            asyncio.run(service.get_page(page.id, mallory))

    def test_admin_can_read_any_page(self, service, alice):
        page = make_page(service, alice)
        admin = CurrentUser(user_id="root", plan="admin", role="admin")

        assert asyncio.run(service.get_page(page.id, admin)).id == page.id

    def test_partial_update(self, service, alice):
        page = make_page(service, alice)

        updated = asyncio.run(service.update_page(
            page.id, alice, PageUpdate(description="Hello", is_published=True)
        ))

        assert updated.description == "Hello"
        assert updated.is_published is True
        assert updated.title == "My Page"

    def test_null_title_is_rejected(self, service, alice):
        page = make_page(service, alice)

        with pytest.raises(ValidationFailed):
            asyncio.run(service.update_page(page.id, alice, PageUpdate(title=None)))

    def test_slug_change_rechecks_uniqueness(self, service, alice, pro_user):
        make_page(service, alice, slug="alices")
        page = make_page(service, pro_user, slug="paulas")

        with pytest.raises(Conflict):
            asyncio.run(service.update_page(page.id, pro_user, PageUpdate(slug="alices")))

    def test_delete_page_removes_blocks(self, service, alice):
        page_id = make_page(service, alice).id
        asyncio.run(service.create_block(page_id, alice, BlockCreate(type="link")))

        asyncio.run(service.delete_page(page_id, alice))

        with pytest.raises(NotFound):
            asyncio.run(service.get_page(page_id, alice))
        assert service.repository.list_blocks(page_id) == []


class TestPublicCache:
    def test_public_page_is_cached(self, service, alice, cache):
        page = make_page(service, alice)

        data = asyncio.run(service.get_public_page(page.slug))

        assert data.slug == page.slug
        assert asyncio.run(cache.get(public_cache_key(page.slug))) is not None

    def test_unknown_slug(self, service):
        assert asyncio.run(service.get_public_page("nope")) is None

    def test_block_mutation_invalidates_cache(self, service, pro_user, cache):
        page = make_page(service, pro_user)
        asyncio.run(service.get_public_page(page.slug))

        asyncio.run(service.create_block(page.id, pro_user, BlockCreate(type="text")))

        assert asyncio.run(cache.get(public_cache_key(page.slug))) is None
        data = asyncio.run(service.get_public_page(page.slug))
        assert [b.type for b in data.blocks] == ["text"]

    def test_slug_change_invalidates_old_and_new_keys(self, service, alice, cache):
        page = make_page(service, alice, slug="old-slug")
        asyncio.run(service.get_public_page("old-slug"))
        asyncio.run(cache.set(public_cache_key("new-slug"), "stale"))

        asyncio.run(service.update_page(page.id, alice, PageUpdate(slug="new-slug")))

        assert asyncio.run(cache.get(public_cache_key("old-slug"))) is None
        assert asyncio.run(cache.get(public_cache_key("new-slug"))) is None

    def test_publish_invalidates_cache(self, service, alice):
        page = make_page(service, alice)
        assert asyncio.run(service.get_public_page(page.slug)).is_published is False

        asyncio.run(service.update_page(page.id, alice, PageUpdate(is_published=True)))

        assert asyncio.run(service.get_public_page(page.slug)).is_published is True


class TestBlocks:
    def test_block_gets_default_config_and_next_position(self, service, pro_user):
        page = make_page(service, pro_user)

        first = asyncio.run(service.create_block(page.id, pro_user, BlockCreate(type="link")))
        second = asyncio.run(service.create_block(page.id, pro_user, BlockCreate(type="button")))

        assert first.position == 1
        assert second.position == 2
        assert first.config == {"label": "New Link", "url": "https://example.com"}
        assert first.is_visible is True

    def test_explicit_position_and_config(self, service, alice):
        page = make_page(service, alice)

        block = asyncio.run(service.create_block(
            page.id, alice,
            BlockCreate(type="text", position=10, config={"content": "Bio"})
        ))

        assert block.position == 10
        assert block.config == {"content": "Bio", "align": "center"}

    def test_invalid_config_is_rejected(self, service, alice):
        page = make_page(service, alice)

        with pytest.raises(ValidationFailed):
            asyncio.run(service.create_block(
                page.id, alice, BlockCreate(type="social_block", config={"socials": 5})
            ))

    def test_paid_block_on_free_plan(self, service, alice):
        page = make_page(service, alice)

        with pytest.raises(UpgradeRequired):
            asyncio.run(service.create_block(page.id, alice, BlockCreate(type="video")))

        assert "video" not in [b.type for b in service.repository.list_blocks(page.id)]

    def test_paid_block_on_pro_plan(self, service, pro_user):
        page = make_page(service, pro_user)

        block = asyncio.run(service.create_block(page.id, pro_user, BlockCreate(type="video")))

        assert block.type == "video"
        assert block.config == {}

    def test_cannot_add_block_to_someone_elses_page(self, service, alice, pro_user):
        page = make_page(service, alice)

        with pytest.raises(AccessDenied):
            asyncio.run(service.create_block(page.id, pro_user, BlockCreate(type="link")))

    def test_update_block(self, service, alice):
        page = make_page(service, alice)
        block = asyncio.run(service.create_block(page.id, alice, BlockCreate(type="link")))

        updated = asyncio.run(service.update_block(
            page.id, block.id, alice,
            BlockUpdate(is_visible=False, config={"label": "Blog"})
        ))

        assert updated.is_visible is False
        assert updated.config == {"label": "Blog", "url": "https://example.com"}

    def test_update_missing_block(self, service, alice):
        page = make_page(service, alice)

        with pytest.raises(NotFound):
            asyncio.run(service.update_block(page.id, 999, alice, BlockUpdate(is_visible=False)))

    def test_delete_block(self, service, pro_user):
        page = make_page(service, pro_user)
        block = asyncio.run(service.create_block(page.id, pro_user, BlockCreate(type="link")))

        asyncio.run(service.delete_block(page.id, block.id, pro_user))

        assert asyncio.run(service.list_blocks(page.id, pro_user)) == []

    def test_list_blocks_in_editor_order(self, service, pro_user):
        page = make_page(service, pro_user)
        for position in (3, 1, 2):
            asyncio.run(service.create_block(
                page.id, pro_user, BlockCreate(type="text", position=position)
            ))

        blocks = asyncio.run(service.list_blocks(page.id, pro_user))

        assert [b.position for b in blocks] == [1, 2, 3]

    def test_reorder_blocks(self, service, pro_user):
        page = make_page(service, pro_user)
        a, b, c = (
            asyncio.run(service.create_block(page.id, pro_user, BlockCreate(type="link")))
            for _ in range(3)
        )

        blocks = asyncio.run(service.reorder_blocks(page.id, pro_user, [c.id, a.id, b.id]))

        assert [blk.id for blk in blocks] == [c.id, a.id, b.id]
        assert [blk.position for blk in blocks] == [1, 2, 3]

    def test_reorder_requires_every_block(self, service, pro_user):
        page = make_page(service, pro_user)
        a = asyncio.run(service.create_block(page.id, pro_user, BlockCreate(type="link")))
        asyncio.run(service.create_block(page.id, pro_user, BlockCreate(type="link")))

        with pytest.raises(ValidationFailed):
            asyncio.run(service.reorder_blocks(page.id, pro_user, [a.id]))

        with pytest.raises(ValidationFailed):
            asyncio.run(service.reorder_blocks(page.id, pro_user, [a.id, a.id]))
