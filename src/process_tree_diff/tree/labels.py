"""Process-model vocabulary: node labels and their classification.

Every node label either names a *control-flow* construct (a task, a
gateway, a loop) or a *property* carrying literal data underneath a
control-flow node (parameters, arguments, code blocks).  Classification is
purely label based; unknown labels are properties.
"""

from __future__ import annotations

from enum import StrEnum, auto


class Keyword(StrEnum):
    """Labels with process semantics.

    StrEnum values are the lowercased member names (Python 3.11+), which is
    exactly how they appear in process documents, e.g. ``Keyword.CALL ==
    "call"``.  The root of every process tree is ``description``.
    """

    DESCRIPTION = auto()
    CALL = auto()
    MANIPULATE = auto()
    PARALLEL = auto()
    PARALLEL_BRANCH = auto()
    CHOOSE = auto()
    ALTERNATIVE = auto()
    OTHERWISE = auto()
    LOOP = auto()
    CRITICAL = auto()
    STOP = auto()
    ESCAPE = auto()
    TERMINATE = auto()


ROOT_LABEL: str = Keyword.DESCRIPTION

LEAF_LABELS: frozenset[str] = frozenset(
    {
        Keyword.CALL,
        Keyword.MANIPULATE,
        Keyword.STOP,
        Keyword.ESCAPE,
        Keyword.TERMINATE,
    }
)

INNER_LABELS: frozenset[str] = frozenset(
    {
        Keyword.DESCRIPTION,
        Keyword.PARALLEL,
        Keyword.PARALLEL_BRANCH,
        Keyword.CHOOSE,
        Keyword.ALTERNATIVE,
        Keyword.OTHERWISE,
        Keyword.LOOP,
        Keyword.CRITICAL,
    }
)

CONTROL_FLOW_LABELS: frozenset[str] = LEAF_LABELS | INNER_LABELS

# Property labels below a call
ENDPOINT = "endpoint"
PARAMETERS = "parameters"
LABEL = "label"
METHOD = "method"
ARGUMENTS = "arguments"
CODE = "code"

# Attributes read by the comparator
CONDITION_ATTRIBUTE = "condition"
WAIT_ATTRIBUTE = "wait"

VARIABLE_PREFIX = "data."

# Reserved update key for text content changes
TEXT_KEY = "text"


def is_control_flow(label: str) -> bool:
    return label in CONTROL_FLOW_LABELS


def is_leaf_label(label: str) -> bool:
    return label in LEAF_LABELS


def is_inner_label(label: str) -> bool:
    return label in INNER_LABELS


def is_property_label(label: str) -> bool:
    return label not in CONTROL_FLOW_LABELS
