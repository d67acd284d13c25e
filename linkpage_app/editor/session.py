"""
Headless editor session for one page.

Tracks the selected block and whether page fields have unsaved edits, and
drives every change through an injected ``EditorBackend``:

    clean --edit--> dirty --save--> saving --ok--> clean
                                           --error--> dirty (edits kept)

Publishing is a separate path: ``toggle_published`` saves that one field
right away and leaves staged edits and the state alone.

Nothing is retried. A failed action records a user-facing message in
``last_error`` and the user resubmits.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional

from linkpage_app.blocks.ordering import editor_view, next_position
from linkpage_app.blocks.types import default_config
from linkpage_app.exceptions import LinkPageError, NotFound, UpgradeRequired, ValidationFailed
from linkpage_app.schemas.block import BlockCreate, BlockResponse, BlockUpdate
from linkpage_app.schemas.page import PageDetail, PageResponse, PageUpdate
from linkpage_app.schemas.user import CurrentUser

logger = logging.getLogger(__name__)

UPGRADE_REQUIRED_MESSAGE = "This block requires a Pro plan subscription."
GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."


class EditorState(str, Enum):
    CLEAN = "clean"
    DIRTY = "dirty"
    SAVING = "saving"


class EditorStateError(Exception):
    """Raised for actions that make no sense in the current state"""


class EditorBackend(ABC):
    """Where the editor sends its reads and mutations."""

    @abstractmethod
    async def fetch_page(self, page_id: int) -> PageDetail:
        pass

    @abstractmethod
    async def update_page(self, page_id: int, changes: Dict[str, Any]) -> PageResponse:
        pass

    @abstractmethod
    async def fetch_blocks(self, page_id: int) -> List[BlockResponse]:
        pass

    @abstractmethod
    async def create_block(
        self,
        page_id: int,
        block_type: str,
        position: int,
        config: Dict[str, Any]
    ) -> BlockResponse:
        pass

    @abstractmethod
    async def update_block(
        self,
        page_id: int,
        block_id: int,
        changes: Dict[str, Any]
    ) -> BlockResponse:
        pass

    @abstractmethod
    async def delete_block(self, page_id: int, block_id: int) -> None:
        pass


class PageServiceBackend(EditorBackend):
    """EditorBackend that calls a PageService in-process on behalf of ``user``."""

    def __init__(self, service, user: CurrentUser):
        self.service = service
        self.user = user

    async def fetch_page(self, page_id: int) -> PageDetail:
        page = await self.service.get_page(page_id, self.user)
        return PageDetail.model_validate(page)

    async def update_page(self, page_id: int, changes: Dict[str, Any]) -> PageResponse:
        page = await self.service.update_page(page_id, self.user, PageUpdate(**changes))
        return PageResponse.model_validate(page)

    async def fetch_blocks(self, page_id: int) -> List[BlockResponse]:
        blocks = await self.service.list_blocks(page_id, self.user)
        return [BlockResponse.model_validate(b) for b in blocks]

    async def create_block(self, page_id, block_type, position, config) -> BlockResponse:
        data = BlockCreate(type=block_type, position=position, config=config)
        block = await self.service.create_block(page_id, self.user, data)
        return BlockResponse.model_validate(block)

    async def update_block(self, page_id, block_id, changes) -> BlockResponse:
        block = await self.service.update_block(page_id, block_id, self.user, BlockUpdate(**changes))
        return BlockResponse.model_validate(block)

    async def delete_block(self, page_id: int, block_id: int) -> None:
        await self.service.delete_block(page_id, block_id, self.user)


def error_message(error: Exception) -> str:
    """User-facing message for a failed editor action"""
    if isinstance(error, UpgradeRequired):
        return UPGRADE_REQUIRED_MESSAGE
    if isinstance(error, (ValidationFailed, NotFound)):
        return error.message
    return GENERIC_ERROR_MESSAGE


class EditorSession:
    def __init__(self, page_id: int, backend: EditorBackend):
        self.page_id = page_id
        self.backend = backend
        self.state = EditorState.CLEAN
        self.page: Optional[PageResponse] = None
        self.blocks: List[BlockResponse] = []
        self.selected_block_id: Optional[int] = None
        self.pending: Dict[str, Any] = {}
        self.last_error: Optional[str] = None

    @property
    def can_save(self) -> bool:
        return self.state == EditorState.DIRTY

    async def load(self) -> None:
        detail = await self.backend.fetch_page(self.page_id)
        self.page = PageResponse.model_validate(detail.model_dump(exclude={"blocks"}))
        self.blocks = editor_view(detail.blocks)

    # ------------------------------------------------------------------
    # Selection and page fields
    # ------------------------------------------------------------------

    def select_block(self, block_id: Optional[int]) -> None:
        """Change the selection; never touches dirty/clean."""
        self.selected_block_id = block_id

    @property
    def selected_block(self) -> Optional[BlockResponse]:
        for block in self.blocks:
            if block.id == self.selected_block_id:
                return block
        return None

    def edit(self, **fields: Any) -> None:
        """
        Stage page field changes (title, slug, description, ...).

        Raises:
            EditorStateError: a save is in flight
            ValueError: a name that is not an editable page field
        """
        if self.state == EditorState.SAVING:
            raise EditorStateError("Cannot edit while a save is in flight")
        unknown = sorted(set(fields) - set(PageUpdate.model_fields))
        if unknown:
            raise ValueError(f"Unknown page fields: {', '.join(unknown)}")
        self.pending.update(fields)
        self.state = EditorState.DIRTY

    async def save(self) -> bool:
        """
        Send staged page edits.

        Returns:
            True on success. On failure the edits stay staged and the
            session returns to ``dirty``.
        """
        if self.state != EditorState.DIRTY:
            return False

        self.state = EditorState.SAVING
        try:
            self.page = await self.backend.update_page(self.page_id, dict(self.pending))
        except Exception as e:
            self._fail("save page", e)
            self.state = EditorState.DIRTY
            return False

        self.pending.clear()
        self.last_error = None
        self.state = EditorState.CLEAN
        return True

    async def toggle_published(self) -> bool:
        """Flip and immediately save ``is_published`` only."""
        if self.page is None:
            raise EditorStateError("Load the page before publishing")
        try:
            self.page = await self.backend.update_page(
                self.page_id, {"is_published": not self.page.is_published}
            )
        except Exception as e:
            self._fail("toggle publish", e)
            return False
        self.last_error = None
        return True

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    async def add_block(self, block_type: str) -> Optional[BlockResponse]:
        """
        Append a block with its type's default config.

        Returns:
            The new block, or None if the backend refused it (see last_error)
        """
        position = next_position(self.blocks)
        try:
            block = await self.backend.create_block(
                self.page_id, block_type, position, default_config(block_type)
            )
        except Exception as e:
            self._fail("add block", e)
            return None

        self.last_error = None
        await self.refresh_blocks()
        self.selected_block_id = block.id
        return block

    async def update_block(self, block_id: int, **changes: Any) -> Optional[BlockResponse]:
        try:
            block = await self.backend.update_block(self.page_id, block_id, changes)
        except Exception as e:
            self._fail("update block", e)
            return None

        self.last_error = None
        await self.refresh_blocks()
        return block

    async def remove_block(self, block_id: int) -> bool:
        try:
            await self.backend.delete_block(self.page_id, block_id)
        except Exception as e:
            self._fail("remove block", e)
            return False

        self.last_error = None
        if self.selected_block_id == block_id:
            self.selected_block_id = None
        await self.refresh_blocks()
        return True

    async def refresh_blocks(self) -> None:
        """Reload the block list after a mutation."""
        self.blocks = editor_view(await self.backend.fetch_blocks(self.page_id))

    def _fail(self, action: str, error: Exception) -> None:
        self.last_error = error_message(error)
        if isinstance(error, LinkPageError):
            logger.info(f"Editor could not {action}: {error.message}")
        else:
            logger.exception(f"Editor could not {action}")
