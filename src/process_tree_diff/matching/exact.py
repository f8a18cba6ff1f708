"""ExactMatcher: globally optimal one-to-one matching via Hungarian assignment.

Every (old node, new node) pair is scored:

- different labels (other than the two roots): 1
- two childless nodes: the comparator value
- one childless node against one with children: 1
- two nodes with children, recursively::

      (0.7 * mean assignment cost of their descendants + 0.3 * compare) ** 2

  where the descendants' cost matrix is made of the same pair scores and
  each descendant left without a partner costs 1.

The resulting ``(m, n)`` matrix is solved with the Hungarian algorithm,
with a negligible positional drift term so that equal-cost alternatives
resolve to the order-preserving one.  Nodes left over on the larger side
stay unmatched.  Assigned control-flow pairs below ``leaf_threshold`` are
accepted; property nodes follow their matched owners by label.

The cost is superlinear (one assignment problem per pair of inner nodes):
meant for small trees and as a reference oracle.
"""

from __future__ import annotations

import logging
import math

import numpy as np

from process_tree_diff.algorithm.assignment import assign, mean_assignment_cost
from process_tree_diff.algorithm.comparator import StandardComparator
from process_tree_diff.algorithm.config import DiffConfig
from process_tree_diff.matching.common import (
    leaf_cost,
    match_roots,
    propagate_properties,
)
from process_tree_diff.matching.matching import Matching
from process_tree_diff.protocols import Comparator
from process_tree_diff.tree.nodes import Node

__all__ = ["ExactMatcher"]

logger = logging.getLogger(__name__)

ASSIGNMENT_WEIGHT = 0.7
COMPARE_WEIGHT = 0.3
# Scales the positional drift that breaks ties between equal-cost assignments
TIE_BREAK = 1e-6


class ExactMatcher:
    """Optimal assignment matching strategy."""

    def __init__(self, config: DiffConfig | None = None) -> None:
        self._config: DiffConfig = config if config is not None else DiffConfig()

    def match(
        self,
        old_tree: Node,
        new_tree: Node,
        matching: Matching | None = None,
        comparator: Comparator | None = None,
    ) -> Matching:
        matching = matching if matching is not None else Matching()
        comparator = comparator if comparator is not None else StandardComparator()

        match_roots(old_tree, new_tree, matching)
        scorer = _PairScorer(old_tree, new_tree, comparator)
        costs = scorer.matrix()
        ranked = costs + TIE_BREAK * _drift(*costs.shape)

        accepted = 0
        for i, j in assign(ranked):
            if costs[i, j] >= self._config.leaf_threshold:
                continue
            old_node, new_node = scorer.old_nodes[i], scorer.new_nodes[j]
            if old_node.label != new_node.label or new_node.is_property():
                continue
            if matching.has_new(new_node) or matching.has_old(old_node):
                continue
            matching.match_new(new_node, old_node)
            accepted += 1
        propagate_properties(new_tree, matching)

        logger.debug(
            "Exact matching solved a %dx%d assignment, accepted %d pairs",
            costs.shape[0],
            costs.shape[1],
            accepted,
        )
        return matching


class _PairScorer:
    """Memoised recursive pair costs over the pre-order node lists of two trees."""

    def __init__(self, old_tree: Node, new_tree: Node, comparator: Comparator) -> None:
        self.old_nodes = old_tree.pre_order()
        self.new_nodes = new_tree.pre_order()
        self._old_sizes = [node.size() for node in self.old_nodes]
        self._new_sizes = [node.size() for node in self.new_nodes]
        self._comparator = comparator
        self._memo = np.full((len(self.old_nodes), len(self.new_nodes)), np.nan)

    def matrix(self) -> np.ndarray:
        for i in range(len(self.old_nodes)):
            for j in range(len(self.new_nodes)):
                self.cost(i, j)
        return self._memo.copy()

    def cost(self, i: int, j: int) -> float:
        cached = self._memo[i, j]
        if not math.isnan(cached):
            return float(cached)

        old_node, new_node = self.old_nodes[i], self.new_nodes[j]
        if old_node.label != new_node.label and not (i == 0 and j == 0):
            value = 1.0
        elif not old_node.children and not new_node.children:
            value = leaf_cost(self._comparator, old_node, new_node)
        elif not old_node.children or not new_node.children:
            value = 1.0
        else:
            old_count = self._old_sizes[i] - 1
            new_count = self._new_sizes[j] - 1
            sub = np.empty((old_count, new_count), dtype=float)
            for k in range(old_count):
                for m in range(new_count):
                    sub[k, m] = self.cost(i + 1 + k, j + 1 + m)
            assigned = mean_assignment_cost(sub)
            value = (
                ASSIGNMENT_WEIGHT * assigned
                + COMPARE_WEIGHT * self._comparator.compare(old_node, new_node)
            ) ** 2

        self._memo[i, j] = value
        return value


def _drift(rows: int, cols: int) -> np.ndarray:
    """Relative pre-order distance of each (old, new) pair."""
    old_pos = np.arange(rows, dtype=float) / max(rows, 1)
    new_pos = np.arange(cols, dtype=float) / max(cols, 1)
    return np.abs(old_pos[:, None] - new_pos[None, :])
