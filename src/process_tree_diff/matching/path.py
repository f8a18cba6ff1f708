"""PathMatcher: leaf matching followed by LCS alignment of ancestor paths.

Leaves are matched globally: each new leaf proposes every old leaf of the
same label sharing its minimum cost, provided that cost is below
``leaf_threshold``.  Ties are broken by the longest common subsequence of
the two leaves' ancestor label paths.

For every matched leaf pair the ancestor chains (parent up to, but
excluding, the root) are aligned by LCS over labels.  Aligned pairs
become proposals when their comparator value is below
``inner_threshold``.  Ancestors that already have a match are left alone,
so seeded pairs and pairs lying on the candidate old path are never
replaced.  Proposals are then reduced: each new node keeps the still-free
old candidate that holds the largest share of its subtree's matches.
Remaining nodes are matched by sibling context before properties are
propagated.
"""

from __future__ import annotations

import logging

from process_tree_diff.algorithm.comparator import StandardComparator
from process_tree_diff.algorithm.config import DiffConfig
from process_tree_diff.algorithm.lcs import lcs_length, lcs_pairs
from process_tree_diff.matching.common import (
    common_descendants,
    leaf_cost,
    match_by_context,
    match_roots,
    propagate_properties,
)
from process_tree_diff.matching.matching import Matching
from process_tree_diff.protocols import Comparator
from process_tree_diff.tree.nodes import Node

__all__ = ["PathMatcher"]

logger = logging.getLogger(__name__)


def _same_label(node: Node, other: Node) -> bool:
    return node.label == other.label


class PathMatcher:
    """Path-based matching strategy."""

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
        self._match_leaves(old_tree, new_tree, matching, comparator)
        self._match_paths(matching, comparator)
        match_by_context(new_tree, matching)
        propagate_properties(new_tree, matching)

        logger.debug("Path matching produced %d pairs", len(matching))
        return matching

    def _match_leaves(
        self,
        old_tree: Node,
        new_tree: Node,
        matching: Matching,
        comparator: Comparator,
    ) -> None:
        old_leaves = [leaf for leaf in old_tree.leaves() if not matching.has_old(leaf)]
        for new_leaf in new_tree.leaves():
            if matching.has_new(new_leaf):
                continue
            best_cost = self._config.leaf_threshold
            best: list[Node] = []
            for old_leaf in old_leaves:
                if old_leaf.label != new_leaf.label:
                    continue
                cost = leaf_cost(comparator, old_leaf, new_leaf)
                if cost < best_cost:
                    best_cost, best = cost, [old_leaf]
                elif cost == best_cost and best:
                    best.append(old_leaf)
            for old_leaf in best:
                matching.propose(new_leaf, old_leaf)

        matching.reduce_new(
            lambda new_leaf, candidates: _free_or_none(
                sorted(
                    candidates,
                    key=lambda old_leaf: -lcs_length(
                        old_leaf.ancestors(), new_leaf.ancestors(), _same_label
                    ),
                ),
                matching,
            )
        )

    def _match_paths(
        self,
        matching: Matching,
        comparator: Comparator,
    ) -> None:
        leaf_pairs = [
            (new_node, old_node)
            for new_node, old_node in matching.pairs()
            if new_node.is_leaf()
        ]
        for new_leaf, old_leaf in leaf_pairs:
            new_path = new_leaf.ancestors()[:-1]
            old_path = old_leaf.ancestors()[:-1]
            for old_index, new_index in lcs_pairs(old_path, new_path, _same_label):
                new_ancestor = new_path[new_index]
                old_ancestor = old_path[old_index]
                if matching.has_new(new_ancestor) or matching.has_old(old_ancestor):
                    continue
                if comparator.compare(old_ancestor, new_ancestor) < (
                    self._config.inner_threshold
                ):
                    matching.propose(new_ancestor, old_ancestor)

        def resolve(new_node: Node, candidates: list[Node]) -> Node | None:
            size = max(new_node.size() - 1, 1)
            ranked = sorted(
                candidates,
                key=lambda old_node: -common_descendants(old_node, new_node, matching)
                / size,
            )
            return _free_or_none(ranked, matching)

        matching.reduce_new(resolve)


def _free_or_none(candidates: list[Node], matching: Matching) -> Node | None:
    """First candidate not yet matched, or None when all are taken."""
    return next((node for node in candidates if not matching.has_old(node)), None)
