import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from linkpage_app.cache.strategies import CacheStrategy
from linkpage_app.config import settings
from linkpage_app.exceptions import AccessDenied, Conflict, NotFound
from linkpage_app.models.analytics import Shortlink
from linkpage_app.models.page import Page
from linkpage_app.schemas.shortlink import ResolvedShortlink, ShortlinkCreate
from linkpage_app.schemas.user import CurrentUser
from linkpage_app.services.short_code_factory import ShortCodeFactory

logger = logging.getLogger(__name__)


def shortlink_cache_key(code: str) -> str:
    return f"shortlink:{code}"


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ShortlinkService:
    """
    Shortlinks that redirect to a target URL and attribute clicks to a page
    and/or block.

    Cache and code strategy are injected/created once; redirects use the
    Cache-Aside pattern and click counting happens after the response.
    """

    def __init__(
        self,
        db: Session,
        cache: Optional[CacheStrategy] = None
    ):
        self.db = db
        self.cache = cache
        self.short_code_strategy = ShortCodeFactory.create_strategy()

    async def create_shortlink(self, user: CurrentUser, data: ShortlinkCreate) -> Shortlink:
        """
        Create a shortlink with a custom or generated code.

        Process:
        1. Insert with the custom code, or no code, to get the auto-increment ID
        2. Generate the code from the ID when none was given
        3. Commit and cache the redirect target

        Raises:
            Conflict: the code is taken
            NotFound / AccessDenied: page_id is not one of the caller's pages
        """
        if data.page_id is not None:
            page = self.db.query(Page).filter(Page.id == data.page_id).first()
            if not page:
                raise NotFound("Page not found")
            if page.owner_id != user.user_id and not user.is_admin:
                raise AccessDenied()

        if data.code and self._find(data.code):
            raise Conflict("Shortlink code already exists")

        shortlink = Shortlink(
            owner_id=user.user_id,
            code=data.code,
            target_url=str(data.target_url),
            page_id=data.page_id,
            block_id=data.block_id,
            expires_at=_as_utc(data.expires_at) if data.expires_at else None,
            clicks=0,
            is_active=True,
        )
        try:
            self.db.add(shortlink)
            self.db.flush()

            if not shortlink.code:
                code = self.short_code_strategy.generate(shortlink.id, self.db)
                if self._find(code):
                    raise Conflict("Shortlink code already exists")
                shortlink.code = code

            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise Conflict("Shortlink code already exists") from e
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(shortlink)
        logger.info(f"Created shortlink {shortlink.code} -> {shortlink.target_url}")

        if self.cache:
            resolved = ResolvedShortlink.model_validate(shortlink)
            await self.cache.set(
                shortlink_cache_key(shortlink.code),
                resolved.model_dump_json(),
                ttl=settings.cache_ttl
            )

        return shortlink

    async def list_shortlinks(
        self,
        user: CurrentUser,
        page_id: Optional[int] = None
    ) -> List[Shortlink]:
        query = self.db.query(Shortlink).filter(
            Shortlink.owner_id == user.user_id,
            Shortlink.is_active == True
        )
        if page_id is not None:
            query = query.filter(Shortlink.page_id == page_id)
        return query.order_by(Shortlink.id).all()

    async def resolve_for_redirect(self, code: str) -> Optional[ResolvedShortlink]:
        """
        Look up an active, unexpired shortlink using Cache-Aside.

        Only reads; the click is counted separately after the redirect.
        """
        cache_key = shortlink_cache_key(code)
        resolved = None

        if self.cache:
            cached = await self.cache.get(cache_key)
            if cached:
                resolved = ResolvedShortlink.model_validate_json(cached)

        if resolved is None:
            shortlink = self.db.query(Shortlink).filter(
                Shortlink.code == code,
                Shortlink.is_active == True
            ).first()
            if not shortlink:
                return None

            resolved = ResolvedShortlink.model_validate(shortlink)
            if self.cache:
                await self.cache.set(cache_key, resolved.model_dump_json(), ttl=settings.cache_ttl)

        if resolved.expires_at and _as_utc(resolved.expires_at) <= datetime.now(timezone.utc):
            return None

        return resolved

    async def delete_shortlink(self, user: CurrentUser, code: str) -> bool:
        """Soft delete. Also invalidates the cached redirect target."""
        shortlink = self._find(code)
        if not shortlink or not shortlink.is_active:
            return False
        if shortlink.owner_id != user.user_id and not user.is_admin:
            raise AccessDenied()

        shortlink.is_active = False
        self.db.commit()

        if self.cache:
            await self.cache.delete(shortlink_cache_key(code))

        return True

    def _find(self, code: str) -> Optional[Shortlink]:
        return self.db.query(Shortlink).filter(Shortlink.code == code).first()
