"""Contiguous 1-based reindexing for section and question order.

These helpers are the single source of truth for final ``order`` values:
every structural change (insert, delete, move) goes through ``reindex`` so
stale orders are never read back as authoritative.
"""

from __future__ import annotations

import logging
from typing import Sequence, Tuple, TypeVar

from talentflow.logic.errors import OrderIndexError
from talentflow.models.assessment import Question, Section

logger = logging.getLogger(__name__)

OrderedT = TypeVar("OrderedT", Section, Question)


def reindex(items: Sequence[OrderedT]) -> Tuple[OrderedT, ...]:
    """Return ``items`` with ``order`` set to each item's 1-based position.

    Items whose order already matches are returned as-is so unchanged
    siblings keep their identity.
    """
    return tuple(
        item if item.order == pos else item.model_copy(update={"order": pos})
        for pos, item in enumerate(items, start=1)
    )


def clamp_position(to_index: int, length: int) -> int:
    """Clamp a 0-based target index into ``[0, length - 1]`` (or 0 when empty)."""
    if length <= 0 or to_index <= 0:
        return 0
    return min(to_index, length - 1)


def move(items: Sequence[OrderedT], from_index: int, to_index: int) -> Tuple[OrderedT, ...]:
    """Move one item to a new position and reindex the whole sequence.

    ``from_index`` must address an existing item; ``to_index`` is clamped
    into range, matching drag-and-drop drops past either end.
    """
    if from_index < 0 or from_index >= len(items):
        raise OrderIndexError(from_index, len(items))
    working = list(items)
    moved = working.pop(from_index)
    insert_at = clamp_position(to_index, len(items))
    working.insert(insert_at, moved)
    logger.info(
        "order_move from_index=%s to_index=%s insert_at=%s before_ids=%s after_ids=%s",
        from_index,
        to_index,
        insert_at,
        [i.id for i in items],
        [i.id for i in working],
    )
    return reindex(working)


def is_dense(items: Sequence[OrderedT]) -> bool:
    """Return True when orders are exactly 1..N in sequence position."""
    return [item.order for item in items] == list(range(1, len(items) + 1))


__all__ = ["reindex", "clamp_position", "move", "is_dense"]
