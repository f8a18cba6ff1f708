"""Performance benchmark suite for process-tree-diff.

Timing targets with the default bucketed matcher:
- ~10-node trees: <10ms
- ~100-node trees: <100ms
- ~500-node trees: <1s

Run with: pytest tests/benchmarks/ --benchmark-only -v
Skip during normal test runs: pytest --benchmark-disable
"""

from __future__ import annotations

from process_tree_diff import DiffConfig, MatchingMode, diff, merge, patch, to_dict


class TestPerformance10Node:
    """Benchmark suite for ~10-node trees. Target: <10ms."""

    def test_10node_edited(self, benchmark, pair_10node_edited):  # type: ignore[no-untyped-def]
        old, new = pair_10node_edited
        result = benchmark(diff, old, new)
        # Verify the result is valid (not just timing)
        assert to_dict(patch(old, result.edit_script)) == to_dict(new)

    def test_10node_exact(self, benchmark, pair_10node_edited):  # type: ignore[no-untyped-def]
        old, new = pair_10node_edited
        config = DiffConfig(matching_mode=MatchingMode.EXACT)
        result = benchmark(diff, old, new, config)
        assert to_dict(patch(old, result.edit_script)) == to_dict(new)


class TestPerformance100Node:
    """Benchmark suite for ~100-node trees. Target: <100ms."""

    def test_100node_edited(self, benchmark, pair_100node_edited):  # type: ignore[no-untyped-def]
        old, new = pair_100node_edited
        result = benchmark(diff, old, new)
        assert to_dict(patch(old, result.edit_script)) == to_dict(new)

    def test_100node_reordered(self, benchmark, pair_100node_reordered):  # type: ignore[no-untyped-def]
        old, new = pair_100node_reordered
        result = benchmark(diff, old, new)
        assert to_dict(patch(old, result.edit_script)) == to_dict(new)
        assert result.edit_script.moves > 0

    def test_100node_merge(  # type: ignore[no-untyped-def]
        self, benchmark, pair_100node_edited, pair_100node_reordered
    ):
        base, tree_a = pair_100node_edited
        _, tree_b = pair_100node_reordered
        result = benchmark(merge, base, tree_a, tree_b)
        assert result.pending.is_empty()


class TestPerformance500Node:
    """Benchmark suite for ~500-node trees. Target: <1s."""

    def test_500node_edited(self, benchmark, pair_500node_edited):  # type: ignore[no-untyped-def]
        old, new = pair_500node_edited
        result = benchmark(diff, old, new)
        assert to_dict(patch(old, result.edit_script)) == to_dict(new)
