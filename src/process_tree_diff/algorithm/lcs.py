"""Longest common subsequence over arbitrary sequences.

Used for endpoint string similarity (characters) and for aligning label
paths of two leaves' ancestors (nodes).

Without a custom equality the length is computed bit-parallel: each
element of ``left`` owns one bit of an integer and every element of
``right`` costs a handful of integer operations, so long strings stay
cheap.  A custom equality falls back to a two-row dynamic program.
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Hashable, Sequence
from typing import Any, TypeVar

T = TypeVar("T")
U = TypeVar("U")


def _bit_parallel_length(left: Sequence[Hashable], right: Sequence[Hashable]) -> int:
    masks: dict[Hashable, int] = {}
    for position, item in enumerate(left):
        masks[item] = masks.get(item, 0) | (1 << position)
    full = (1 << len(left)) - 1
    row = full
    for item in right:
        matched = row & masks.get(item, 0)
        row = ((row + matched) | (row - matched)) & full
    # Every cleared bit is one element of the common subsequence
    return len(left) - row.bit_count()


def _two_row_length(
    left: Sequence[T],
    right: Sequence[U],
    equals: Callable[[T, U], bool],
) -> int:
    previous = [0] * (len(right) + 1)
    for item in left:
        current = [0]
        for j, other in enumerate(right):
            if equals(item, other):
                current.append(previous[j] + 1)
            else:
                current.append(max(previous[j + 1], current[j]))
        previous = current
    return previous[-1]


def _table(
    left: Sequence[T],
    right: Sequence[U],
    equals: Callable[[T, U], bool],
) -> list[list[int]]:
    m, n = len(left), len(right)
    table = [[0] * (n + 1) for _ in range(m + 1)]
    for i in range(m - 1, -1, -1):
        row, below = table[i], table[i + 1]
        for j in range(n - 1, -1, -1):
            if equals(left[i], right[j]):
                row[j] = below[j + 1] + 1
            else:
                row[j] = max(below[j], row[j + 1])
    return table


def lcs_length(
    left: Sequence[Any],
    right: Sequence[Any],
    equals: Callable[[Any, Any], bool] | None = None,
) -> int:
    """Length of the longest common subsequence of ``left`` and ``right``.

    Without ``equals`` the elements are compared with ``==`` and must be
    hashable.
    """
    if not left or not right:
        return 0
    if equals is None:
        return _bit_parallel_length(left, right)
    return _two_row_length(left, right, equals)


def lcs_pairs(
    left: Sequence[T],
    right: Sequence[U],
    equals: Callable[[T, U], bool] = operator.eq,
) -> list[tuple[int, int]]:
    """Index pairs ``(i, j)`` of one longest common subsequence, in order.

    Ties prefer advancing in ``left`` first, which keeps the alignment
    deterministic.
    """
    if not left or not right:
        return []
    table = _table(left, right, equals)
    pairs: list[tuple[int, int]] = []
    i = j = 0
    while i < len(left) and j < len(right):
        if equals(left[i], right[j]) and table[i][j] == table[i + 1][j + 1] + 1:
            pairs.append((i, j))
            i += 1
            j += 1
        elif table[i + 1][j] >= table[i][j + 1]:
            i += 1
        else:
            j += 1
    return pairs


def lcs_similarity(left: str, right: str) -> float:
    """Normalized LCS similarity of two strings in [0, 1]; 1 means identical."""
    if left == right:
        return 1.0
    longest = max(len(left), len(right))
    if longest == 0:
        return 1.0
    return lcs_length(left, right) / longest
