"""Comparator and MatchingAlgorithm Protocols: the two extension points.

Users can plug in their own node comparator or matching strategy without
inheriting from any base class; any conformant object passes
``isinstance`` checks.

Example::

    from process_tree_diff.protocols import Comparator

    class LabelComparator:
        def compare(self, node, other) -> float:
            return 0.0 if node.label == other.label else 1.0

    assert isinstance(LabelComparator(), Comparator)  # structural conformance
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from process_tree_diff.matching.matching import Matching
    from process_tree_diff.tree.nodes import Node


@runtime_checkable
class Comparator(Protocol):
    """Structural protocol for node comparators.

    ``compare`` must return a dissimilarity in [0, 1]: 0 for identical
    nodes, 1 for unrelated ones.  It must not mutate either node.
    """

    def compare(self, node: Node, other: Node) -> float: ...


@runtime_checkable
class MatchingAlgorithm(Protocol):
    """Structural protocol for matching strategies.

    ``match`` extends ``matching`` (or a fresh ``Matching`` when None) with
    correspondences between ``old_tree`` and ``new_tree`` and returns it.
    Pairs already present in a seed matching are kept.
    """

    def match(
        self,
        old_tree: Node,
        new_tree: Node,
        matching: Matching | None = None,
        comparator: Comparator | None = None,
    ) -> Matching: ...
