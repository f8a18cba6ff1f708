"""StandardComparator: type-aware dissimilarity between two process nodes.

``compare(a, b)`` returns a value in [0, 1] where 0 means identical and 1
means unrelated::

    compare = 0.9 * content + 0.1 * structure

``structure`` is 0 when either node lacks a parent or both parents carry
the same label, else 1.  ``content`` depends on the label:

- call:         0.4 * endpoint + 0.4 * modified vars + 0.2 * read vars
- manipulate:   0.7 * modified vars + 0.3 * read vars
- parallel:     0.2 if the ``wait`` attribute differs, else 0
- loop, alternative: read-variable difference ratio
- anything else: 0 for equal labels, 1 otherwise

Variable terms use the symmetric-difference ratio
``(|A - B| + |B - A|) / max(|A|, |B|)`` with a per-kind fallback when
both sets are empty.
"""

from __future__ import annotations

from cachetools import LRUCache

from process_tree_diff.algorithm.extract import FeatureExtractor
from process_tree_diff.algorithm.lcs import lcs_similarity
from process_tree_diff.tree import labels
from process_tree_diff.tree.labels import Keyword
from process_tree_diff.tree.nodes import Node

__all__ = ["StandardComparator", "difference_ratio"]

CONTENT_WEIGHT = 0.9
STRUCTURE_WEIGHT = 0.1

ENDPOINT_WEIGHT = 0.4
CALL_MODIFIED_WEIGHT = 0.4
CALL_READ_WEIGHT = 0.2

MANIPULATE_MODIFIED_WEIGHT = 0.7
MANIPULATE_READ_WEIGHT = 0.3

# Added to the endpoint term when the HTTP methods differ (capped at 1)
METHOD_PENALTY = 0.1
# Multiplies the endpoint term when both display labels are present and equal
LABEL_DISCOUNT = 0.5
WAIT_PENALTY = 0.2


def difference_ratio(
    left: frozenset[str] | set[str],
    right: frozenset[str] | set[str],
    default: float,
) -> float:
    """Symmetric-difference ratio of two sets; ``default`` when both are empty."""
    if not left and not right:
        return default
    return len(left ^ right) / max(len(left), len(right))


class StandardComparator:
    """Comparator for process trees.

    Satisfies the ``Comparator`` protocol.  Each instance owns a
    ``FeatureExtractor`` and an endpoint similarity cache, both living as
    long as the comparator.

    Example::

        comparator = StandardComparator()
        comparator.compare(old_call, new_call)   # 0.0 for identical calls
    """

    def __init__(self, max_cache_size: int = 4096) -> None:
        """Initialise the comparator.

        Args:
            max_cache_size: Maximum number of nodes whose extracted features
                are memoised, and of endpoint pairs whose similarity is.
                This is an infrastructure parameter; it never changes
                comparison results.
        """
        self._extractor = FeatureExtractor(max_cache_size=max_cache_size)
        self._endpoints: LRUCache[tuple[str, str], float] = LRUCache(
            maxsize=max_cache_size
        )

    @property
    def extractor(self) -> FeatureExtractor:
        return self._extractor

    def compare(self, node: Node, other: Node) -> float:
        value = (
            CONTENT_WEIGHT * self.content_similarity(node, other)
            + STRUCTURE_WEIGHT * self.structural_similarity(node, other)
        )
        return min(max(value, 0.0), 1.0)

    def endpoint_similarity(self, endpoint: str, other: str) -> float:
        """Normalized LCS similarity of two endpoints, memoised per pair."""
        key = (endpoint, other) if endpoint <= other else (other, endpoint)
        cached = self._endpoints.get(key)
        if cached is None:
            cached = lcs_similarity(*key)
            self._endpoints[key] = cached
        return cached

    def structural_similarity(self, node: Node, other: Node) -> float:
        parent, other_parent = node.parent, other.parent
        if parent is None or other_parent is None:
            return 0.0
        return 0.0 if parent.label == other_parent.label else 1.0

    def content_similarity(self, node: Node, other: Node) -> float:
        if node.label != other.label:
            return 1.0
        label = node.label
        if label == Keyword.CALL:
            return self._compare_calls(node, other)
        if label == Keyword.MANIPULATE:
            return self._compare_manipulates(node, other)
        if label == Keyword.PARALLEL:
            return self._compare_parallels(node, other)
        if label in (Keyword.LOOP, Keyword.ALTERNATIVE):
            return self._compare_conditions(node, other)
        return 0.0

    # ------------------------------------------------------------------
    # Per-kind content
    # ------------------------------------------------------------------

    def _compare_calls(self, node: Node, other: Node) -> float:
        props = self._extractor.call_properties(node)
        other_props = self._extractor.call_properties(other)

        similarity = self.endpoint_similarity(
            props.endpoint or "", other_props.endpoint or ""
        )
        endpoint = 1.0 - similarity * similarity
        if props.label is not None and props.label == other_props.label:
            endpoint *= LABEL_DISCOUNT
        if props.method != other_props.method:
            endpoint = min(endpoint + METHOD_PENALTY, 1.0)

        variables = self._extractor.variables(node)
        other_variables = self._extractor.variables(other)
        modified = difference_ratio(
            variables.modified, other_variables.modified, default=endpoint
        )
        read = difference_ratio(variables.read, other_variables.read, default=endpoint)

        return (
            ENDPOINT_WEIGHT * endpoint
            + CALL_MODIFIED_WEIGHT * modified
            + CALL_READ_WEIGHT * read
        )

    def _compare_manipulates(self, node: Node, other: Node) -> float:
        variables = self._extractor.variables(node)
        other_variables = self._extractor.variables(other)
        modified = difference_ratio(
            variables.modified, other_variables.modified, default=1.0
        )
        read = difference_ratio(variables.read, other_variables.read, default=modified)
        return MANIPULATE_MODIFIED_WEIGHT * modified + MANIPULATE_READ_WEIGHT * read

    def _compare_parallels(self, node: Node, other: Node) -> float:
        wait = labels.WAIT_ATTRIBUTE
        if node.attributes.get(wait) != other.attributes.get(wait):
            return WAIT_PENALTY
        return 0.0

    def _compare_conditions(self, node: Node, other: Node) -> float:
        return difference_ratio(
            self._extractor.variables(node).read,
            self._extractor.variables(other).read,
            default=0.0,
        )
