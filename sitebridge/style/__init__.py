"""Style rules and selector management."""

from .css import (
    KNOWN_PROPERTIES,
    StyleContext,
    is_known_property,
    is_valid_value,
    parse_declarations,
    partition_declarations,
)
from .lib import (
    SelectorAccessor,
    StyleAccessor,
    collect_declarations,
    validate_declarations,
)

__all__ = [
    # Accessors
    "StyleAccessor",
    "SelectorAccessor",
    "collect_declarations",
    "validate_declarations",
    # CSS validation
    "KNOWN_PROPERTIES",
    "StyleContext",
    "is_known_property",
    "is_valid_value",
    "parse_declarations",
    "partition_declarations",
]
