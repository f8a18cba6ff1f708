"""TreeBuilder: converts nested dict payloads into ``Node`` trees and back.

The payload format is the portable, JSON-compatible form of a tree::

    {
        "label": "call",
        "attributes": {"id": "a1"},
        "text": None,
        "children": [{"label": "parameters", "children": [...]}],
    }

Only ``label`` is required.  ``to_dict`` is the inverse of ``build`` and
omits empty optional keys.

Building also performs the light preprocessing process documents need
before diffing: attributes on the ignore-list (``id`` and ``description``
by default) are dropped, and text is stripped, with blank text becoming
``None``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from process_tree_diff.tree.nodes import Node

__all__ = ["TreeBuilder", "to_dict"]

DEFAULT_IGNORED_ATTRIBUTES: tuple[str, ...] = ("id", "description")


@dataclass
class TreeBuilder:
    """Converts nested dict payloads into ``Node`` trees.

    Attributes:
        ignored_attributes: Attribute names stripped while building.
        trim:               Strip surrounding whitespace from text payloads
                            and treat blank text as absent.

    Example::

        builder = TreeBuilder()
        tree = builder.build(
            {"label": "description", "children": [{"label": "stop"}]}
        )
        # tree: description -> stop
    """

    ignored_attributes: Iterable[str] = field(
        default_factory=lambda: DEFAULT_IGNORED_ATTRIBUTES
    )
    trim: bool = True

    def build(self, payload: dict[str, Any]) -> Node:
        """Convert a payload dict to a ``Node`` tree.

        Args:
            payload: Mapping with a required ``label`` and optional
                ``attributes``, ``text`` and ``children``.

        Returns:
            The root ``Node`` of the built tree.

        Raises:
            TypeError:  If the payload or one of its fields has the wrong type.
            ValueError: If a label is missing or empty.
        """
        if not isinstance(payload, dict):
            raise TypeError(f"Node payload must be a dict, got {type(payload)!r}")

        label = payload.get("label")
        if not isinstance(label, str) or not label:
            msg = f"Node payload needs a non-empty string label, got {label!r}"
            raise ValueError(msg)

        node = Node(
            label=label,
            attributes=self._build_attributes(payload.get("attributes") or {}),
            text=self._build_text(payload.get("text")),
        )

        children = payload.get("children") or []
        if not isinstance(children, list):
            raise TypeError(f"'children' must be a list, got {type(children)!r}")
        for child in children:
            node.append_child(self.build(child))
        return node

    def _build_attributes(self, attributes: Any) -> dict[str, str]:
        if not isinstance(attributes, dict):
            raise TypeError(f"'attributes' must be a dict, got {type(attributes)!r}")
        ignored = set(self.ignored_attributes)
        return {
            str(name): str(value)
            for name, value in attributes.items()
            if name not in ignored
        }

    def _build_text(self, text: Any) -> str | None:
        if text is None:
            return None
        if not isinstance(text, str):
            raise TypeError(f"'text' must be a string, got {type(text)!r}")
        if self.trim:
            text = text.strip()
            return text or None
        return text


def to_dict(node: Node) -> dict[str, Any]:
    """Serialize a tree to the payload format accepted by ``TreeBuilder.build``."""
    payload: dict[str, Any] = {"label": node.label}
    if node.attributes:
        payload["attributes"] = dict(node.attributes)
    if node.text is not None:
        payload["text"] = node.text
    if node.children:
        payload["children"] = [to_dict(child) for child in node.children]
    return payload
