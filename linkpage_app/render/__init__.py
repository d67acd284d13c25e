from .renderer import (
    ADD_FIRST_BLOCK_HINT,
    PublicPageState,
    RenderedBlock,
    RenderedPage,
    RenderMode,
    ViewTracker,
    evaluate_public_page,
    render_blocks,
)

__all__ = [
    "ADD_FIRST_BLOCK_HINT",
    "PublicPageState",
    "RenderedBlock",
    "RenderedPage",
    "RenderMode",
    "ViewTracker",
    "evaluate_public_page",
    "render_blocks",
]
