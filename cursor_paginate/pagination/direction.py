"""Sort direction and comparison operator resolution.

Every fetch and boundary probe needs a physical sort direction and the
operator that selects records beyond a cursor. All six combinations of
order and traversal mode live in the tables below.
"""

from enum import Enum
from typing import NamedTuple


ASCENDING = 1
DESCENDING = -1

GREATER_THAN = "$gt"
LESS_THAN = "$lt"


class SortOrder(str, Enum):
    """Caller-facing sort order."""
    
    ASC = "asc"
    DESC = "desc"


class TraversalMode(str, Enum):
    """Whether a call starts, continues forward, or steps back."""
    
    INITIAL = "initial"
    FORWARD = "forward"
    BACKWARD = "backward"


class DirectionPair(NamedTuple):
    """Sort direction plus the operator applied to the cursor boundary."""
    
    direction: int
    operator: str


class DirectionTriple(NamedTuple):
    """Directions for the current fetch and the two boundary probes."""
    
    current: DirectionPair
    next: DirectionPair
    prev: DirectionPair


_DESCENDING_LT = DirectionPair(DESCENDING, LESS_THAN)
_ASCENDING_GT = DirectionPair(ASCENDING, GREATER_THAN)

_CURRENT = {
    (SortOrder.DESC, TraversalMode.INITIAL): _DESCENDING_LT,
    (SortOrder.DESC, TraversalMode.FORWARD): _DESCENDING_LT,
    (SortOrder.DESC, TraversalMode.BACKWARD): _ASCENDING_GT,
    (SortOrder.ASC, TraversalMode.INITIAL): _ASCENDING_GT,
    (SortOrder.ASC, TraversalMode.FORWARD): _ASCENDING_GT,
    (SortOrder.ASC, TraversalMode.BACKWARD): _DESCENDING_LT,
}

# (next, prev) probes, always in the base order
_PROBES = {
    SortOrder.DESC: (_DESCENDING_LT, _ASCENDING_GT),
    SortOrder.ASC: (_ASCENDING_GT, _DESCENDING_LT),
}


def resolve_directions(order: SortOrder, mode: TraversalMode) -> DirectionTriple:
    """Resolve the direction triple for an order and traversal mode."""
    order = SortOrder(order)
    mode = TraversalMode(mode)
    next_pair, prev_pair = _PROBES[order]
    return DirectionTriple(
        current=_CURRENT[(order, mode)],
        next=next_pair,
        prev=prev_pair
    )


def is_reversed(mode: TraversalMode) -> bool:
    """Backward fetches run in the opposite physical order."""
    return TraversalMode(mode) is TraversalMode.BACKWARD
