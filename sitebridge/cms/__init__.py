"""Content binding (data states) on components."""

from .lib import (
    CONDITION_OPERATORS,
    STATE_TYPES,
    ContentBinding,
    attribute_state_id,
    literal_token,
)

__all__ = [
    "ContentBinding",
    "literal_token",
    "attribute_state_id",
    "CONDITION_OPERATORS",
    "STATE_TYPES",
]
