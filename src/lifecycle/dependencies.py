"""
Capability-filtered lookups
---------------------------

Linear scans over an ordered sequence that keep only entries of a given
runtime type (and, optionally, matching a predicate). Used by behaviours to
query their dependency list and by the controller to query its behaviour array.

Order is always the order of the scanned sequence; nothing is indexed by type.
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Optional, Tuple, Type, TypeVar

T = TypeVar("T")

Predicate = Callable[[T], bool]


def _matches(item: object, kind: Type[T], predicate: Optional[Predicate]) -> bool:
    return isinstance(item, kind) and (predicate is None or predicate(item))


def select_all(
    items: Iterable[object],
    kind: Type[T],
    predicate: Optional[Predicate] = None,
) -> List[T]:
    """
    Collect every entry of ``kind`` accepted by ``predicate``.

    Args:
        items: Sequence to scan (left untouched)
        kind: Runtime type an entry must be an instance of
        predicate: Optional extra filter applied to typed entries

    Returns:
        New list of matches, in scan order
    """
    return [item for item in items if _matches(item, kind, predicate)]


def try_select(
    items: Iterable[object],
    kind: Type[T],
    predicate: Optional[Predicate] = None,
) -> Tuple[bool, Optional[T]]:
    """
    Find the first entry of ``kind`` accepted by ``predicate``.

    Returns:
        ``(True, match)`` for the first match, ``(False, None)`` otherwise
    """
    for item in items:
        if _matches(item, kind, predicate):
            return True, item
    return False, None


def select_first(
    items: Iterable[object],
    kind: Type[T],
    predicate: Optional[Predicate] = None,
) -> Optional[T]:
    """Like ``try_select`` but returns only the match (or ``None``)."""
    _, match = try_select(items, kind, predicate)
    return match
