"""HTML markup parsing for component creation."""

from .lib import (
    STRIPPED_TAGS,
    VOID_TAGS,
    ComponentSpec,
    MarkupBuilder,
    ParseResult,
    parse_markup,
)

__all__ = [
    "ComponentSpec",
    "ParseResult",
    "MarkupBuilder",
    "parse_markup",
    "STRIPPED_TAGS",
    "VOID_TAGS",
]
