"""Tests for assign and mean_assignment_cost.

Covers square, rectangular and empty cost matrices and the charge for
nodes left without a partner.
"""

from __future__ import annotations

import numpy as np
import pytest

from process_tree_diff.algorithm.assignment import (
    UNASSIGNED_COST,
    assign,
    mean_assignment_cost,
)


class TestAssign:
    def test_empty_matrix(self) -> None:
        assert assign(np.empty((0, 0), dtype=float)) == []
        assert assign(np.empty((0, 3), dtype=float)) == []

    def test_identity_is_optimal(self) -> None:
        cost = np.array([[0.0, 1.0], [1.0, 0.0]])
        assert assign(cost) == [(0, 0), (1, 1)]

    def test_swapped_assignment(self) -> None:
        cost = np.array([[0.9, 0.1], [0.2, 0.8]])
        assert assign(cost) == [(0, 1), (1, 0)]

    def test_more_new_nodes_than_old(self) -> None:
        assert assign(np.array([[0.5, 0.1, 0.9]])) == [(0, 1)]

    def test_more_old_nodes_than_new(self) -> None:
        cost = np.array([[0.7], [0.2], [0.4]])
        assert assign(cost) == [(1, 0)]

    def test_global_optimum_beats_greedy(self) -> None:
        # Greedy would take (0, 0) at 0.1 and be left with (1, 1) at 1.0
        cost = np.array([[0.1, 0.2], [0.3, 1.0]])
        assert assign(cost) == [(0, 1), (1, 0)]


class TestMeanAssignmentCost:
    def test_both_sides_empty(self) -> None:
        assert mean_assignment_cost(np.empty((0, 0))) == 0.0

    def test_one_side_empty(self) -> None:
        assert mean_assignment_cost(np.empty((0, 3))) == UNASSIGNED_COST

    def test_perfect_assignment(self) -> None:
        cost = np.array([[0.0, 1.0], [1.0, 0.0]])
        assert mean_assignment_cost(cost) == pytest.approx(0.0)

    def test_single_cell(self) -> None:
        assert mean_assignment_cost(np.array([[0.2]])) == pytest.approx(0.2)

    def test_unassigned_node_is_charged(self) -> None:
        # One pair at cost 0 and one new node left over
        assert mean_assignment_cost(np.array([[0.0, 0.5]])) == pytest.approx(0.5)

    def test_averaged_over_longer_side(self) -> None:
        cost = np.array([[0.2], [0.6], [0.9]])
        assert mean_assignment_cost(cost) == pytest.approx((0.2 + 2.0) / 3)
