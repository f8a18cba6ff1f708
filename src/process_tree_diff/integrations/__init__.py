"""Integrations subpackage for process-tree-diff.

Contains the pytest plugin (auto-discovered via the pytest11 entry point).
It is not imported here so that loading the package never requires pytest.
"""

from __future__ import annotations

__all__: list[str] = []
