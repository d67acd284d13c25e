"""
Block ordering and visibility filtering.

Both the owner's editor view and the public page go through ``order_blocks``;
the only difference is whether hidden blocks are filtered out first.

Equal positions are ordered by block id. Ids are handed out in creation
order, so ties resolve to "oldest block first" on every backend.
"""

from typing import Iterable, List, Sequence


def _sort_key(block):
    return (block.position, block.id if block.id is not None else 0)


def order_blocks(blocks: Iterable, visible_only: bool = False) -> List:
    """
    Return a new list of blocks sorted by position.

    The input is never mutated. Works on anything exposing ``position``,
    ``id`` and ``is_visible`` (ORM rows or response schemas).
    """
    selected = [b for b in blocks if b.is_visible] if visible_only else list(blocks)
    return sorted(selected, key=_sort_key)


def editor_view(blocks: Iterable) -> List:
    """All blocks, as the page owner sees them"""
    return order_blocks(blocks)


def public_view(blocks: Iterable) -> List:
    """Visible blocks only, as visitors see them"""
    return order_blocks(blocks, visible_only=True)


def next_position(blocks: Sequence) -> int:
    """Position for a block appended after every existing one"""
    return max([b.position for b in blocks] + [0]) + 1
