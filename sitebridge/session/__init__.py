"""Session context for tool calls."""

from .lib import (
    OPEN_WEBSITE,
    SELECT_COMPONENT,
    SELECT_SELECTOR,
    Session,
    available_ids,
    selectors_of,
)

__all__ = [
    "Session",
    "selectors_of",
    "available_ids",
    "SELECT_COMPONENT",
    "SELECT_SELECTOR",
    "OPEN_WEBSITE",
]
