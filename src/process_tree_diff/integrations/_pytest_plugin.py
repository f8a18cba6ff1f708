"""pytest plugin for process-tree-diff.

Auto-discovered by pytest via the pytest11 entry point declared in pyproject.toml.
When the package is installed (even in editable mode), pytest discovers this plugin
automatically -- no conftest.py changes are needed.
"""

from __future__ import annotations

from typing import Any

import pytest

from process_tree_diff import DiffConfig, Node, TreeBuilder, diff


def _as_tree(value: Node | dict[str, Any]) -> Node:
    if isinstance(value, Node):
        return value
    return TreeBuilder().build(value)


@pytest.fixture(scope="session")
def assert_trees_equivalent() -> Any:
    """Fixture that returns a callable process tree equivalence asserter.

    Usage in tests::

        def test_unchanged(assert_trees_equivalent):
            assert_trees_equivalent(built_tree, {"label": "description"})

    Returns:
        A callable ``_assert(actual, expected, config=None) -> None`` that
        accepts ``Node`` trees or dict payloads and raises ``AssertionError``
        listing the edit script when the trees differ.
    """

    def _assert(
        actual: Node | dict[str, Any],
        expected: Node | dict[str, Any],
        config: DiffConfig | None = None,
    ) -> None:
        result = diff(_as_tree(expected), _as_tree(actual), config=config)
        if not result.is_identical:
            raise AssertionError(
                f"process trees differ by {len(result.edit_script)} operations:\n"
                f"{result.edit_script}"
            )

    return _assert
