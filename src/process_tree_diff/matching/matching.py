"""Matching: a partial one-to-one correspondence between two trees.

Both directions are maintained eagerly.  Every ``match_new`` call enforces
injectivity on the spot: if the new node or the old node already has a
partner, that earlier pair is evicted, so the later insertion wins.

Strategies that first collect several old candidates per new node record
them with ``propose`` and collapse them with ``reduce_new``; proposals are
not visible through the lookup methods until they are reduced.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

from process_tree_diff.tree.nodes import Node

__all__ = ["Matching"]

logger = logging.getLogger(__name__)

Resolver = Callable[[Node, list[Node]], Node | None]


class Matching:
    """Injective node correspondence between an old and a new tree."""

    def __init__(self) -> None:
        self._new_to_old: dict[Node, Node] = {}
        self._old_to_new: dict[Node, Node] = {}
        self._proposals: dict[Node, list[Node]] = {}

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def match_new(self, new_node: Node, old_node: Node) -> None:
        """Match ``new_node`` to ``old_node``, evicting conflicting pairs."""
        previous_old = self._new_to_old.get(new_node)
        if previous_old is old_node:
            return
        if previous_old is not None:
            del self._old_to_new[previous_old]
        previous_new = self._old_to_new.get(old_node)
        if previous_new is not None:
            logger.debug(
                "Evicting match %s -> %s in favour of %s",
                previous_new.label,
                old_node.label,
                new_node.label,
            )
            del self._new_to_old[previous_new]
        self._new_to_old[new_node] = old_node
        self._old_to_new[old_node] = new_node

    def unmatch_new(self, new_node: Node) -> None:
        old_node = self._new_to_old.pop(new_node, None)
        if old_node is not None:
            del self._old_to_new[old_node]

    def unmatch_old(self, old_node: Node) -> None:
        new_node = self._old_to_new.pop(old_node, None)
        if new_node is not None:
            del self._new_to_old[new_node]

    def propose(self, new_node: Node, old_node: Node) -> None:
        """Record ``old_node`` as a candidate partner for ``new_node``."""
        candidates = self._proposals.setdefault(new_node, [])
        if not any(candidate is old_node for candidate in candidates):
            candidates.append(old_node)

    def reduce_new(self, resolver: Resolver) -> None:
        """Collapse every proposal list into at most one match.

        A single candidate is matched directly.  For several candidates
        ``resolver(new_node, candidates)`` picks one, or returns ``None`` to
        leave the new node unmatched.  Proposals are processed in the order
        their new nodes were first proposed and are cleared afterwards.

        Raises:
            ValueError: If the resolver returns a node that was not proposed.
        """
        proposals, self._proposals = self._proposals, {}
        for new_node, candidates in proposals.items():
            if len(candidates) == 1:
                chosen: Node | None = candidates[0]
            else:
                chosen = resolver(new_node, list(candidates))
            if chosen is None:
                continue
            if not any(candidate is chosen for candidate in candidates):
                msg = f"resolver chose a node that was not proposed for {new_node!r}"
                raise ValueError(msg)
            self.match_new(new_node, chosen)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def has_new(self, new_node: Node) -> bool:
        return new_node in self._new_to_old

    def has_old(self, old_node: Node) -> bool:
        return old_node in self._old_to_new

    def has_any(self, node: Node) -> bool:
        return self.has_new(node) or self.has_old(node)

    def get_new(self, new_node: Node) -> Node | None:
        """Old partner of ``new_node``."""
        return self._new_to_old.get(new_node)

    def get_old(self, old_node: Node) -> Node | None:
        """New partner of ``old_node``."""
        return self._old_to_new.get(old_node)

    def get_other(self, node: Node) -> Node | None:
        """Partner of ``node``, whichever side it belongs to."""
        partner = self._new_to_old.get(node)
        if partner is not None:
            return partner
        return self._old_to_new.get(node)

    def are_matched(self, old_node: Node, new_node: Node) -> bool:
        return self._new_to_old.get(new_node) is old_node

    def pairs(self) -> list[tuple[Node, Node]]:
        """Matched ``(new, old)`` pairs in insertion order."""
        return list(self._new_to_old.items())

    def __iter__(self) -> Iterator[tuple[Node, Node]]:
        return iter(self.pairs())

    def __len__(self) -> int:
        return len(self._new_to_old)

    def __contains__(self, node: object) -> bool:
        return node in self._new_to_old or node in self._old_to_new

    def __repr__(self) -> str:
        return f"Matching(pairs={len(self)})"
