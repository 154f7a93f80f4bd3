"""Contiguous 1-based reordering for authored questions.

``move_item`` is the single source of truth for the order produced by a drag:
remove at ``from_index``, insert at ``to_index`` (interpreted against the
list after removal), then reassign every ``sequence_number`` to its new
1-based position. The full renumbered list is what gets persisted.
"""

from __future__ import annotations

from typing import List, Sequence, TypeVar
import logging

from pydantic import BaseModel

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def renumber(items: Sequence[T]) -> List[T]:
    """Return copies of ``items`` with sequence numbers 1..N by position."""
    return [item.model_copy(update={"sequence_number": idx + 1}) for idx, item in enumerate(items)]


def move_item(items: Sequence[T], from_index: int, to_index: int) -> List[T]:
    """Move one element and renumber; pure function of its arguments.

    Raises ``IndexError`` when either index is not a valid position.
    """
    n = len(items)
    if not (0 <= int(from_index) < n):
        raise IndexError(f"from_index {from_index} out of range for {n} items")
    if not (0 <= int(to_index) < n):
        raise IndexError(f"to_index {to_index} out of range for {n} items")
    working = list(items)
    moved = working.pop(int(from_index))
    working.insert(int(to_index), moved)
    result = renumber(working)
    logger.debug("move_item from=%s to=%s n=%s", from_index, to_index, n)
    return result


__all__ = ["renumber", "move_item"]
