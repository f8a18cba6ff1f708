"""Tests for StandardComparator weights and per-label content formulas."""

from __future__ import annotations

import pytest

from process_tree_diff.algorithm.comparator import StandardComparator, difference_ratio
from process_tree_diff.protocols import Comparator
from process_tree_diff.tree.nodes import Node

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _call(endpoint: str, method: str | None = None, label: str | None = None) -> Node:
    parameters = Node("parameters")
    if label is not None:
        parameters.append_child(Node("label", text=label))
    if method is not None:
        parameters.append_child(Node("method", text=method))
    return Node("call", {"endpoint": endpoint}, children=[parameters])


@pytest.fixture
def comparator() -> StandardComparator:
    return StandardComparator()


class TestDifferenceRatio:
    def test_default_when_both_empty(self) -> None:
        assert difference_ratio(set(), set(), default=0.3) == 0.3

    def test_symmetric_difference_over_larger_set(self) -> None:
        assert difference_ratio({"a", "b"}, {"a"}, default=0.0) == pytest.approx(0.5)

    def test_disjoint_sets_can_exceed_one(self) -> None:
        assert difference_ratio({"a"}, {"b"}, default=0.0) == pytest.approx(2.0)


class TestCompare:
    def test_satisfies_protocol(self, comparator: StandardComparator) -> None:
        assert isinstance(comparator, Comparator)

    def test_identical_calls(self, comparator: StandardComparator) -> None:
        # The parents must stay alive for the duration of the comparison
        left_parent = Node("description", children=[_call("http://a")])
        right_parent = Node("description", children=[_call("http://a")])
        assert comparator.compare(
            left_parent.children[0], right_parent.children[0]
        ) == pytest.approx(0.0)

    def test_different_labels(self, comparator: StandardComparator) -> None:
        assert comparator.compare(Node("call"), Node("stop")) == pytest.approx(0.9)

    def test_structure_term(self, comparator: StandardComparator) -> None:
        loop = Node("loop", children=[Node("stop")])
        root = Node("description", children=[Node("stop")])
        assert comparator.compare(
            loop.children[0], root.children[0]
        ) == pytest.approx(0.1)

    def test_root_without_parent(self, comparator: StandardComparator) -> None:
        assert comparator.structural_similarity(
            Node("description"), Node("description")
        ) == 0.0

    def test_value_is_clamped(self, comparator: StandardComparator) -> None:
        loop = Node("loop", {"condition": "data.i < 3"})
        other = Node("loop", {"condition": "data.j < 3"})
        assert comparator.compare(loop, other) == pytest.approx(1.0)


class TestCallContent:
    def test_similar_endpoints(self, comparator: StandardComparator) -> None:
        # LCS similarity 0.9 -> endpoint term 1 - 0.81
        value = comparator.content_similarity(_call("http://a/x"), _call("http://a/y"))
        assert value == pytest.approx(0.19)

    def test_unrelated_endpoints(self, comparator: StandardComparator) -> None:
        value = comparator.content_similarity(_call("X"), _call("Y"))
        assert value == pytest.approx(1.0)

    def test_method_penalty(self, comparator: StandardComparator) -> None:
        value = comparator.content_similarity(
            _call("http://a", method=":get"), _call("http://a", method=":post")
        )
        assert value == pytest.approx(0.1)

    def test_equal_labels_discount(self, comparator: StandardComparator) -> None:
        value = comparator.content_similarity(
            _call("ab", label="Pay"), _call("ac", label="Pay")
        )
        assert value == pytest.approx(0.375)

    def test_variables_weigh_in(self, comparator: StandardComparator) -> None:
        left = _call("http://a")
        right = _call("http://a")
        left.append_child(
            Node("code", children=[Node("finalize", text="data.x = 1")])
        )
        right.append_child(
            Node("code", children=[Node("finalize", text="data.x = 1; data.y = 2")])
        )
        # endpoint 0, modified 0.5, read falls back to endpoint 0
        assert comparator.content_similarity(left, right) == pytest.approx(0.2)


class TestOtherContent:
    def test_manipulate_same_variables(self, comparator: StandardComparator) -> None:
        value = comparator.content_similarity(
            Node("manipulate", text="data.x = 1"), Node("manipulate", text="data.x = 2")
        )
        assert value == pytest.approx(0.0)

    def test_manipulate_partial_overlap(self, comparator: StandardComparator) -> None:
        value = comparator.content_similarity(
            Node("manipulate", text="data.x = 1; data.y = 1"),
            Node("manipulate", text="data.x = 1"),
        )
        assert value == pytest.approx(0.5)

    def test_manipulate_without_code(self, comparator: StandardComparator) -> None:
        value = comparator.content_similarity(Node("manipulate"), Node("manipulate"))
        assert value == pytest.approx(1.0)

    def test_parallel_wait(self, comparator: StandardComparator) -> None:
        value = comparator.content_similarity(
            Node("parallel", {"wait": "-1"}), Node("parallel", {"wait": "1"})
        )
        assert value == pytest.approx(0.2)

    def test_loop_same_condition_variables(
        self, comparator: StandardComparator
    ) -> None:
        value = comparator.content_similarity(
            Node("loop", {"condition": "data.i < 3"}),
            Node("loop", {"condition": "data.i < 5"}),
        )
        assert value == pytest.approx(0.0)

    def test_other_labels_are_equal(self, comparator: StandardComparator) -> None:
        assert comparator.content_similarity(Node("stop"), Node("stop")) == 0.0


class TestEndpointSimilarity:
    def test_matches_lcs_similarity(self, comparator: StandardComparator) -> None:
        assert comparator.endpoint_similarity("abcd", "abxd") == pytest.approx(0.75)

    def test_symmetric_pairs_share_one_entry(
        self, comparator: StandardComparator
    ) -> None:
        first = comparator.endpoint_similarity("http://svc/a", "http://svc/b")
        second = comparator.endpoint_similarity("http://svc/b", "http://svc/a")
        assert first == second
        assert len(comparator._endpoints) == 1

    def test_cache_is_bounded(self) -> None:
        comparator = StandardComparator(max_cache_size=2)
        for endpoint in ("a", "b", "c", "d"):
            comparator.endpoint_similarity(endpoint, "x")
        assert len(comparator._endpoints) == 2
