"""Semantic feature extraction for control-flow nodes.

``FeatureExtractor`` derives what the comparator looks at beyond labels:

- call properties: endpoint, HTTP method, display label, arguments and the
  concatenated code blocks of a ``call``;
- read and modified variables of any node, found by scanning code and
  conditions for ``data.<name>`` references.

Extraction walks property subtrees and runs regular expressions, so results
are memoised per node in an LRU cache.  The cache is keyed by node identity
and belongs to one extractor; extractors are created per comparator and
never shared across diff calls.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from cachetools import LRUCache

from process_tree_diff.tree import labels
from process_tree_diff.tree.nodes import Node

__all__ = ["CallProperties", "FeatureExtractor", "Variables"]

_PREFIX = re.escape(labels.VARIABLE_PREFIX)
_ASSIGNMENT = re.compile(_PREFIX + r"([a-zA-Z]+\w*)\s*(?:=(?!=)|\+\+|--|-=|\+=|\*=|/=)")
_COMPARISON = re.compile(_PREFIX + r"([a-zA-Z]+\w*)\s*(?:<|>|==|!=)")
_REFERENCE = re.compile(_PREFIX + r"([a-zA-Z]+\w*)")


@dataclass(frozen=True, slots=True)
class CallProperties:
    """Semantic properties of a ``call`` node.

    Attributes:
        endpoint:   The ``endpoint`` attribute, or ``None``.
        method:     Text of ``parameters/method``.
        label:      Text of ``parameters/label``.
        arguments:  ``(name, value)`` per child of ``parameters/arguments``.
        code:       Text of all code blocks, ordered by block label so equal
                    code always yields an equal string.
    """

    endpoint: str | None = None
    method: str | None = None
    label: str | None = None
    arguments: tuple[tuple[str, str | None], ...] = ()
    code: str | None = None


@dataclass(frozen=True, slots=True)
class Variables:
    modified: frozenset[str] = frozenset()
    read: frozenset[str] = frozenset()


def _child(node: Node | None, label: str) -> Node | None:
    if node is None:
        return None
    return next((child for child in node.children if child.label == label), None)


class FeatureExtractor:
    """Memoising extractor for call properties and variable sets.

    Args:
        max_cache_size: Maximum number of nodes whose features are held per
            cache.  Least-recently-used entries are evicted silently.
    """

    def __init__(self, max_cache_size: int = 4096) -> None:
        self._calls: LRUCache[Node, CallProperties] = LRUCache(maxsize=max_cache_size)
        self._variables: LRUCache[Node, Variables] = LRUCache(maxsize=max_cache_size)

    def call_properties(self, call: Node) -> CallProperties:
        """Return the properties of ``call``.

        Raises:
            ValueError: If ``call`` is not a ``call`` node.
        """
        if call.label != labels.Keyword.CALL:
            msg = f"cannot extract call properties from a {call.label!r} node"
            raise ValueError(msg)
        cached = self._calls.get(call)
        if cached is None:
            cached = self._extract_call(call)
            self._calls[call] = cached
        return cached

    def variables(self, node: Node) -> Variables:
        cached = self._variables.get(node)
        if cached is None:
            cached = Variables(
                modified=self._modified_variables(node),
                read=self._read_variables(node),
            )
            self._variables[node] = cached
        return cached

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    def _extract_call(self, call: Node) -> CallProperties:
        parameters = _child(call, labels.PARAMETERS)
        method = _child(parameters, labels.METHOD)
        label = _child(parameters, labels.LABEL)
        arguments = _child(parameters, labels.ARGUMENTS)

        code_node = _child(call, labels.CODE)
        code = None
        if code_node is not None:
            blocks = sorted(code_node.children, key=lambda block: block.label)
            code = "".join(block.text or "" for block in blocks)

        return CallProperties(
            endpoint=call.attributes.get(labels.ENDPOINT),
            method=method.text if method is not None else None,
            label=label.text if label is not None else None,
            arguments=tuple(
                (argument.label, argument.text)
                for argument in (arguments.children if arguments is not None else [])
            ),
            code=code,
        )

    def _code_of(self, node: Node) -> str | None:
        if node.label == labels.Keyword.CALL:
            return self.call_properties(node).code
        if node.label == labels.Keyword.MANIPULATE:
            return node.text
        return None

    def _modified_variables(self, node: Node) -> frozenset[str]:
        code = self._code_of(node)
        if not code:
            return frozenset()
        return frozenset(_ASSIGNMENT.findall(code))

    def _read_variables(self, node: Node) -> frozenset[str]:
        read: set[str] = set()
        condition = node.attributes.get(labels.CONDITION_ATTRIBUTE)
        if condition:
            read.update(_COMPARISON.findall(condition))
        if node.label == labels.Keyword.CALL:
            for _, value in self.call_properties(node).arguments:
                if value and labels.VARIABLE_PREFIX in value:
                    read.update(_REFERENCE.findall(value))
        return frozenset(read)
