"""Relationship Expander

Depth-bounded resolution of relationship fields (a single id or a list of
ids) into resolved child objects. The depth budget is the only thing that
stops recursion over a self-referential record graph: every traversal adds
its cost to the current depth and nothing is expanded once the budget would
be reached.
"""

import logging
from typing import Any, Callable, List, Optional, TypeVar

from . import config
from .fields import as_id_list
from .models import Connection

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Credit -> Person and Credit -> Role are two hops from the owning object.
DIRECT_COST = 1
JOIN_ENTITY_COST = 2


def within_budget(current_depth: int, cost: int = DIRECT_COST) -> bool:
    return current_depth + cost < config.MAX_DEPTH


def expand(
    relationship: Any,
    resolve: Callable[[str], Optional[T]],
    current_depth: int,
    cost: int = DIRECT_COST,
) -> Optional[List[T]]:
    """Resolve a relationship value into child objects.

    Args:
        relationship: Raw field value (absent, a single id, or an id list)
        resolve: Maps one id to its resolved object, or None if dangling
        current_depth: Depth of the object that owns the relationship
        cost: Hops this relationship adds to the depth

    Returns:
        None when ``current_depth + cost`` reaches the depth budget (no child
        is resolved at all); otherwise the resolved children in id order with
        dangling references dropped.
    """
    if not within_budget(current_depth, cost):
        logger.debug(
            "Depth budget reached (depth=%d, cost=%d, max=%d); not expanding",
            current_depth,
            cost,
            config.MAX_DEPTH,
        )
        return None

    resolved: List[T] = []
    for rel_id in as_id_list(relationship):
        item = resolve(rel_id)
        if item is None:
            logger.debug("Dropping unresolved relationship id %s", rel_id)
            continue
        resolved.append(item)
    return resolved


def wrap(items: Optional[List[Any]]) -> Optional[Connection]:
    """Connection envelope for an expansion result, keeping None as None."""
    return Connection.of(items) if items is not None else None
