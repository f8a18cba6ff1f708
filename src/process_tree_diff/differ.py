"""TreeDiffer: orchestrator that wires a matcher, the script generator and the patcher.

This is the wiring layer between the algorithms and the public API:

- ``match()`` runs the configured matching strategy with a comparator.
- ``diff()`` additionally derives the edit script and times both steps.
- ``delta_tree()`` applies the script to a copy of the old tree.

A comparator passed in by the caller is reused across calls; otherwise
every call gets a fresh ``StandardComparator`` so that feature caches
never outlive the trees they were computed for.
"""

from __future__ import annotations

import logging
import time

from process_tree_diff.algorithm.comparator import StandardComparator
from process_tree_diff.algorithm.config import DiffConfig
from process_tree_diff.diff.generator import EditScriptGenerator
from process_tree_diff.matching import Matching, matcher_for
from process_tree_diff.patch.delta_tree import DeltaTreeBuilder
from process_tree_diff.protocols import Comparator, MatchingAlgorithm
from process_tree_diff.result import DiffResult
from process_tree_diff.tree.nodes import DeltaNode, Node

__all__ = ["TreeDiffer"]

logger = logging.getLogger(__name__)


class TreeDiffer:
    """Diffs process trees with one configuration.

    Example::

        from process_tree_diff.differ import TreeDiffer

        differ = TreeDiffer()
        result = differ.diff(old_tree, new_tree)
        print(result.edit_script)
        delta = differ.delta_tree(old_tree, new_tree)
    """

    def __init__(
        self,
        config: DiffConfig | None = None,
        comparator: Comparator | None = None,
        matcher: MatchingAlgorithm | None = None,
    ) -> None:
        """Initialise the differ.

        Args:
            config:     Thresholds and matching mode.  Defaults to ``DiffConfig()``.
            comparator: Node comparator.  Defaults to a fresh
                ``StandardComparator`` per call.
            matcher:    Matching strategy.  Defaults to the strategy selected by
                ``config.matching_mode``.
        """
        self._config: DiffConfig = config if config is not None else DiffConfig()
        self._comparator = comparator
        self._matcher: MatchingAlgorithm = (
            matcher if matcher is not None else matcher_for(self._config)
        )
        self._generator = EditScriptGenerator()
        self._builder = DeltaTreeBuilder()

    @property
    def config(self) -> DiffConfig:
        return self._config

    def match(self, old_tree: Node, new_tree: Node) -> Matching:
        comparator = (
            self._comparator if self._comparator is not None else StandardComparator()
        )
        return self._matcher.match(old_tree, new_tree, Matching(), comparator)

    def diff(self, old_tree: Node, new_tree: Node) -> DiffResult:
        """Match the trees and derive the edit script.

        Neither tree is mutated.
        """
        t0 = time.perf_counter()
        matching = self.match(old_tree, new_tree)
        script = self._generator.generate(old_tree, new_tree, matching)
        elapsed_ms = (time.perf_counter() - t0) * 1000.0
        logger.debug(
            "Diffed %d -> %d nodes (%s matching): %d operations in %.2f ms",
            old_tree.size(),
            new_tree.size(),
            self._config.matching_mode,
            len(script),
            elapsed_ms,
        )
        return DiffResult(
            edit_script=script, matching=matching, computation_time_ms=elapsed_ms
        )

    def delta_tree(
        self, old_tree: Node, new_tree: Node, extended: bool = False
    ) -> DeltaNode:
        """Annotated copy of ``old_tree`` after applying the diff to ``new_tree``."""
        script = self.diff(old_tree, new_tree).edit_script
        if extended:
            return self._builder.extended_delta_tree(old_tree, script)
        return self._builder.delta_tree(old_tree, script)
