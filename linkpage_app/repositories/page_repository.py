"""
Page Store persistence.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from linkpage_app.exceptions import StorageError
from linkpage_app.models.page import Block, Page

logger = logging.getLogger(__name__)


class PageRepository(ABC):
    """Storage interface for pages and the blocks they own."""

    @abstractmethod
    def get(self, page_id: int) -> Optional[Page]:
        pass

    @abstractmethod
    def get_by_slug(self, slug: str) -> Optional[Page]:
        pass

    @abstractmethod
    def list_by_owner(self, owner_id: str) -> List[Page]:
        pass

    @abstractmethod
    def count_by_owner(self, owner_id: str) -> int:
        pass

    @abstractmethod
    def save(self, page: Page) -> Page:
        """Insert or update a page and return the refreshed row"""
        pass

    @abstractmethod
    def delete(self, page: Page) -> None:
        """Delete a page together with its blocks"""
        pass

    @abstractmethod
    def list_blocks(self, page_id: int) -> List[Block]:
        pass

    @abstractmethod
    def get_block(self, page_id: int, block_id: int) -> Optional[Block]:
        pass

    @abstractmethod
    def save_block(self, block: Block) -> Block:
        pass

    @abstractmethod
    def delete_block(self, block: Block) -> None:
        pass

    @abstractmethod
    def set_positions(self, page_id: int, positions: Dict[int, int]) -> List[Block]:
        """
        Apply ``{block_id: position}`` in one transaction.

        Returns the page's blocks after the update.
        """
        pass


class SQLAlchemyPageRepository(PageRepository):
    """Page repository on top of a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, page_id: int) -> Optional[Page]:
        return self.db.query(Page).filter(Page.id == page_id).first()

    def get_by_slug(self, slug: str) -> Optional[Page]:
        return self.db.query(Page).filter(Page.slug == slug).first()

    def list_by_owner(self, owner_id: str) -> List[Page]:
        return (
            self.db.query(Page)
            .filter(Page.owner_id == owner_id)
            .order_by(Page.id)
            .all()
        )

    def count_by_owner(self, owner_id: str) -> int:
        return self.db.query(Page).filter(Page.owner_id == owner_id).count()

    def save(self, page: Page) -> Page:
        self.db.add(page)
        self._commit("save page")
        self.db.refresh(page)
        return page

    def delete(self, page: Page) -> None:
        self.db.delete(page)
        self._commit("delete page")

    def list_blocks(self, page_id: int) -> List[Block]:
        return self.db.query(Block).filter(Block.page_id == page_id).all()

    def get_block(self, page_id: int, block_id: int) -> Optional[Block]:
        return self.db.query(Block).filter(
            Block.id == block_id,
            Block.page_id == page_id
        ).first()

    def save_block(self, block: Block) -> Block:
        self.db.add(block)
        self._commit("save block")
        self.db.refresh(block)
        return block

    def delete_block(self, block: Block) -> None:
        self.db.delete(block)
        self._commit("delete block")

    def set_positions(self, page_id: int, positions: Dict[int, int]) -> List[Block]:
        blocks = self.list_blocks(page_id)
        for block in blocks:
            if block.id in positions:
                block.position = positions[block.id]
        self._commit("reorder blocks")
        return self.list_blocks(page_id)

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Database error during {action}: {e}")
            raise StorageError(f"Could not {action}") from e
