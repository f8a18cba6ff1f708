"""DiffConfig and MatchingMode for matching and diff configuration.

DiffConfig is a frozen (immutable) dataclass holding the similarity
thresholds and the matching strategy.  It is passed explicitly into every
matcher, differ and API call; there is no process-wide configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum, auto


class MatchingMode(StrEnum):
    """Which matching strategy establishes node correspondences.

    - BUCKETED:  Label-bucketed leaf matching, then inner nodes by size.
    - PATH:      Leaf matching, then ancestors aligned along LCS of label paths.
    - TOP_DOWN:  Descend from matched pairs, matching uniquely labeled children.
    - BOTTOM_UP: Promote leaf matches to parents until a fixpoint.
    - EXACT:     Globally optimal Hungarian assignment (small trees only).
    """

    BUCKETED = auto()
    PATH = auto()
    TOP_DOWN = auto()
    BOTTOM_UP = auto()
    EXACT = auto()


@dataclass(frozen=True, slots=True)
class DiffConfig:
    """Immutable configuration for matching and diffing.

    Attributes:
        leaf_threshold:  Maximum comparator value (exclusive) at which two
            leaf nodes may be matched, in [0, 1].
        inner_threshold: Maximum value (exclusive) at which two inner nodes
            may be matched, in [0, 1].
        matching_mode:   Matching strategy used by ``TreeDiffer``.
    """

    leaf_threshold: float = 0.25
    inner_threshold: float = 0.25
    matching_mode: MatchingMode = MatchingMode.BUCKETED

    def __post_init__(self) -> None:
        if not 0.0 <= self.leaf_threshold <= 1.0:
            msg = f"leaf_threshold must be in [0, 1], got {self.leaf_threshold}"
            raise ValueError(msg)
        if not 0.0 <= self.inner_threshold <= 1.0:
            msg = f"inner_threshold must be in [0, 1], got {self.inner_threshold}"
            raise ValueError(msg)
        if not isinstance(self.matching_mode, MatchingMode):
            try:
                mode = MatchingMode(self.matching_mode)
            except ValueError:
                msg = f"unknown matching_mode {self.matching_mode!r}"
                raise ValueError(msg) from None
            object.__setattr__(self, "matching_mode", mode)
