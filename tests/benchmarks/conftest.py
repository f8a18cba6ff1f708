"""Deterministic process tree generators for performance benchmarks.

All generators produce fixed, reproducible trees. No random values.
Three tiers: ~10-node flat, ~100-node nested, ~500-node nested.
Each tier provides an "edited" pair (endpoint changes, removed tasks, an
appended stop) and a "reordered" pair (sections in reverse order).
"""

from __future__ import annotations

from typing import Any

import pytest

from process_tree_diff import TreeBuilder
from process_tree_diff.tree.nodes import Node


def generate_process(
    sections: int, tasks: int, edited: bool = False, reordered: bool = False
) -> dict[str, Any]:
    """Generate a process payload of ``sections`` loops with ``tasks`` calls each."""
    loops: list[dict[str, Any]] = []
    for s in range(sections):
        calls: list[dict[str, Any]] = []
        for t in range(tasks):
            if edited and t == tasks - 1 and tasks > 1:
                continue
            endpoint = f"http://svc/section{s}/task{t}"
            if edited and (s * tasks + t) % 5 == 0:
                endpoint += "/v2"
            calls.append({"label": "call", "attributes": {"endpoint": endpoint}})
        calls.append({"label": "manipulate", "text": f"data.counter{s} += 1"})
        loops.append(
            {
                "label": "loop",
                "attributes": {"condition": f"data.counter{s} < 3"},
                "children": calls,
            }
        )
    if reordered:
        loops.reverse()
    if edited:
        loops.append({"label": "stop"})
    return {"label": "description", "children": loops}


def _pair(sections: int, tasks: int, **variant: bool) -> tuple[Node, Node]:
    builder = TreeBuilder()
    old = builder.build(generate_process(sections, tasks))
    new = builder.build(generate_process(sections, tasks, **variant))
    return old, new


# --- Fixtures for each size tier ---


@pytest.fixture
def pair_10node_edited() -> tuple[Node, Node]:
    """One loop of 8 calls, edited."""
    return _pair(1, 8, edited=True)


@pytest.fixture
def pair_100node_edited() -> tuple[Node, Node]:
    """10 loops x 9 calls, edited."""
    return _pair(10, 9, edited=True)


@pytest.fixture
def pair_100node_reordered() -> tuple[Node, Node]:
    """10 loops x 9 calls, loops in reverse order."""
    return _pair(10, 9, reordered=True)


@pytest.fixture
def pair_500node_edited() -> tuple[Node, Node]:
    """25 loops x 19 calls, edited."""
    return _pair(25, 19, edited=True)
