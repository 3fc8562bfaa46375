"""Validation and correction utilities."""

from .lib import (
    SETTINGS_KEYS,
    Outcome,
    Position,
    ValidationIssue,
    check_bem,
    check_page_names,
    normalize_selector,
    parse_position,
    validate_pages,
    validate_settings,
    validate_tree,
)

__all__ = [
    "SETTINGS_KEYS",
    "Position",
    "Outcome",
    "ValidationIssue",
    "parse_position",
    "normalize_selector",
    "check_bem",
    "validate_settings",
    "check_page_names",
    "validate_tree",
    "validate_pages",
]
