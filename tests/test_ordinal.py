from __future__ import annotations

import numpy as np

from antennes.ordinal import iter_in_order, iter_ranked, next_in_order, next_ranked


def test_ranked_breaks_ties_by_lowest_index() -> None:
    counts = np.array([0, 5, 5, 3, 0])

    assert list(iter_ranked(counts)) == [(1, 5), (2, 5), (3, 3)]


def test_next_ranked_cursor_and_exhaustion() -> None:
    counts = np.array([2, 0, 7])

    assert next_ranked(counts) == (2, 7)
    assert next_ranked(counts, (2, 7)) == (0, 2)
    assert next_ranked(counts, (0, 2)) is None
    assert next_ranked(np.zeros(4, dtype=int)) is None


def test_in_order_ascending_with_ties() -> None:
    items = [("a", 3), ("b", 1), ("c", 3), ("d", 2)]

    ordered = list(iter_in_order(items, key=lambda item: item[1]))

    assert [name for name, _ in ordered] == ["b", "d", "a", "c"]


def test_in_order_reverse_keeps_positional_ties() -> None:
    items = [("a", 3), ("b", 1), ("c", 3), ("d", 2)]

    ordered = list(iter_in_order(items, key=lambda item: item[1], reverse=True))

    assert [name for name, _ in ordered] == ["a", "c", "d", "b"]


def test_next_in_order_on_empty_and_single() -> None:
    assert next_in_order([], None, key=lambda item: item) is None
    assert next_in_order([4], None, key=lambda item: item) == (0, 4)
    assert next_in_order([4], (0, 4), key=lambda item: item) is None
