"""Document tree accessor."""

from .lib import (
    DEFAULT_MAX_COUNT,
    DEFAULT_MAX_DEPTH,
    TraversalBudget,
    TreeAccessor,
    build_nodes,
    resolve_insertion,
    walk_bounded,
)

__all__ = [
    "TraversalBudget",
    "TreeAccessor",
    "walk_bounded",
    "resolve_insertion",
    "build_nodes",
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_MAX_COUNT",
]
