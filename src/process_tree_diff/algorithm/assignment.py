"""Minimum-cost one-to-one assignment between old and new node lists.

Both functions take an ``(m, n)`` matrix holding the cost of pairing old
node ``i`` with new node ``j``, in [0, 1].  When the lists differ in length
the surplus nodes stay unassigned and each is charged ``UNASSIGNED_COST``,
the cost of a fully mismatched pair.
"""

from __future__ import annotations

import numpy as np
from scipy.optimize import linear_sum_assignment  # type: ignore[import-untyped]

__all__ = ["UNASSIGNED_COST", "assign", "mean_assignment_cost"]

UNASSIGNED_COST = 1.0


def assign(costs: np.ndarray) -> list[tuple[int, int]]:
    """Return the ``(old index, new index)`` pairs of an optimal assignment.

    Pairs are ordered by old index.  ``min(m, n)`` pairs are returned.
    """
    if costs.size == 0:
        return []
    old_indices, new_indices = linear_sum_assignment(np.asarray(costs, dtype=float))
    return list(zip(old_indices.tolist(), new_indices.tolist(), strict=True))


def mean_assignment_cost(costs: np.ndarray) -> float:
    """Cost of an optimal assignment averaged over the longer node list.

    Unassigned nodes count ``UNASSIGNED_COST`` each.  Two empty lists are
    identical and cost 0.0.
    """
    old_count, new_count = costs.shape
    longest = max(old_count, new_count)
    if longest == 0:
        return 0.0
    pairs = assign(costs)
    total = sum(float(costs[i, j]) for i, j in pairs)
    total += (longest - len(pairs)) * UNASSIGNED_COST
    return total / longest
