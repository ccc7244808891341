"""
Step-wise ordered traversal of small unordered collections.

Each call returns the item directly after a cursor in the requested order,
scanning the whole collection once. Repeating the call until it returns
``None`` walks the collection in a deterministic order without sorting or
copying it; ties are always broken by position in the collection.
"""

from __future__ import annotations

from typing import Any, Callable, Iterator, Sequence, TypeVar

import numpy as np

T = TypeVar("T")


def next_ranked(
    counts: np.ndarray,
    cursor: tuple[int, int] | None = None,
) -> tuple[int, int] | None:
    """
    Next positive entry of ``counts`` in descending count order.

    Parameters
    ----------
    counts:
        One-dimensional vector of occurrence counts indexed by category id.
    cursor:
        ``(index, count)`` returned by the previous call, or ``None`` to start.

    Returns
    -------
    tuple[int, int] | None
        ``(index, count)`` of the next category; among equal counts the lowest
        index comes first. ``None`` once every positive entry was returned.
    """
    counts = np.asarray(counts)
    eligible = counts > 0
    if cursor is not None:
        last_index, last_count = cursor
        positions = np.arange(counts.shape[0])
        eligible &= (counts < last_count) | ((counts == last_count) & (positions > last_index))
    if not eligible.any():
        return None
    best = counts[eligible].max()
    index = int(np.flatnonzero(eligible & (counts == best))[0])
    return index, int(best)


def iter_ranked(counts: np.ndarray) -> Iterator[tuple[int, int]]:
    """
    Yield ``(index, count)`` for every positive entry, highest count first.
    """
    cursor = next_ranked(counts)
    while cursor is not None:
        yield cursor
        cursor = next_ranked(counts, cursor)


def next_in_order(
    items: Sequence[T],
    cursor: tuple[int, Any] | None,
    key: Callable[[T], Any],
    *,
    reverse: bool = False,
) -> tuple[int, T] | None:
    """
    Next item of ``items`` after ``cursor`` in ascending ``key`` order.

    ``cursor`` is ``(position, key value)`` of the previously returned item.
    With ``reverse`` the order is descending on the key; positions still break
    ties in ascending order.
    """
    best: tuple[int, T] | None = None
    best_key: Any = None
    for position, item in enumerate(items):
        item_key = key(item)
        if cursor is not None:
            last_position, last_key = cursor
            if item_key == last_key:
                if position <= last_position:
                    continue
            elif (item_key < last_key) != reverse:
                continue
        if best is None or (item_key != best_key and (item_key < best_key) != reverse):
            best = (position, item)
            best_key = item_key
    return best


def iter_in_order(
    items: Sequence[T],
    key: Callable[[T], Any],
    *,
    reverse: bool = False,
) -> Iterator[T]:
    """
    Yield every item of ``items`` ordered by ``key`` (see ``next_in_order``).
    """
    step = next_in_order(items, None, key, reverse=reverse)
    while step is not None:
        position, item = step
        yield item
        step = next_in_order(items, (position, key(item)), key, reverse=reverse)


__all__ = ["iter_in_order", "iter_ranked", "next_in_order", "next_ranked"]
