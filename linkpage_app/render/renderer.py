"""
Page renderer shared by the owner's preview and the public page.

``render_blocks`` is pure: it orders (and for the public view filters)
blocks and returns a presentation-ready structure. Styling is left to the
frontend.

The public page additionally passes three gates before anything is
rendered, in this order:

1. data not loaded yet     -> ``loading``
2. fetch failed / no page  -> ``not_found``
3. page not published      -> ``unavailable``

Only ``ready`` pages render blocks and record a view.
"""

from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from pydantic import BaseModel

from linkpage_app.blocks.ordering import order_blocks

ADD_FIRST_BLOCK_HINT = "Add your first block to get started"


class RenderMode(str, Enum):
    EDITOR = "editor"  # owner preview: every block
    PUBLIC = "public"  # visitors: visible blocks only


class PublicPageState(str, Enum):
    LOADING = "loading"
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"
    READY = "ready"


class RenderedBlock(BaseModel):
    id: int
    type: str
    position: int
    is_visible: bool
    config: Dict[str, Any]


class RenderedPage(BaseModel):
    mode: RenderMode
    blocks: List[RenderedBlock]
    empty_hint: Optional[str] = None


def render_blocks(blocks: Iterable, mode: RenderMode = RenderMode.PUBLIC) -> RenderedPage:
    """Order (and in public mode filter) blocks, then map them to output."""
    ordered = order_blocks(blocks, visible_only=(mode == RenderMode.PUBLIC))
    rendered = [
        RenderedBlock(
            id=block.id,
            type=block.type,
            position=block.position,
            is_visible=block.is_visible,
            config=dict(block.config or {}),
        )
        for block in ordered
    ]

    empty_hint = None
    if not rendered and mode == RenderMode.EDITOR:
        empty_hint = ADD_FIRST_BLOCK_HINT

    return RenderedPage(mode=mode, blocks=rendered, empty_hint=empty_hint)


def evaluate_public_page(page, loaded: bool = True, failed: bool = False) -> PublicPageState:
    """Run the public page gates; ``page`` needs an ``is_published`` attribute."""
    if not loaded:
        return PublicPageState.LOADING
    if failed or page is None:
        return PublicPageState.NOT_FOUND
    if not page.is_published:
        return PublicPageState.UNAVAILABLE
    return PublicPageState.READY


class ViewTracker:
    """
    Emits the page-view event at most once per page load.

    Re-rendering the same load must not produce a second view, and pages
    that never reach ``ready`` produce none.
    """

    def __init__(self):
        self.tracked = False

    def track_once(self, state: PublicPageState, emit: Callable[[], Any]) -> bool:
        """
        Call ``emit`` if the page is ready and no view was emitted yet.

        Returns:
            True if ``emit`` was called by this invocation
        """
        if self.tracked or state != PublicPageState.READY:
            return False
        self.tracked = True
        emit()
        return True
