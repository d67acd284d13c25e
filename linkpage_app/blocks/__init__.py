"""
Block model: typed block variants, default configs and ordering rules.
"""

from .types import (
    BlockType,
    PAID_PLAN_BLOCK_TYPES,
    build_config,
    default_config,
    parse_block,
    requires_paid_plan,
)
from .ordering import editor_view, next_position, order_blocks, public_view

__all__ = [
    "BlockType",
    "PAID_PLAN_BLOCK_TYPES",
    "build_config",
    "default_config",
    "parse_block",
    "requires_paid_plan",
    "editor_view",
    "next_position",
    "order_blocks",
    "public_view",
]
