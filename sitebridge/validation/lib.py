"""Validation and correction layer.

Input normalization (selectors, settings, positions), naming checks that
produce warnings, and structural checks over the component tree.
Corrections are reported as warnings; malformed input raises
``sitebridge.errors.ValidationError``.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sitebridge.editor import ComponentNode, Page
from sitebridge.errors import ValidationError

# Known site and page settings keys
SETTINGS_KEYS = (
    "lang",
    "title",
    "description",
    "favicon",
    "head",
    "og:title",
    "og:description",
    "og:image",
)

_SELECTOR_NAME = re.compile(r"^-?[_a-zA-Z][_a-zA-Z0-9-]*$")

# block, block__element, block--modifier with lowercase hyphenated words
_BEM = re.compile(
    r"^[a-z][a-z0-9]*(?:-[a-z0-9]+)*"
    r"(?:__[a-z0-9]+(?:-[a-z0-9]+)*)?"
    r"(?:--[a-z0-9]+(?:-[a-z0-9]+)*)?$"
)


class Position(str, Enum):
    """Insertion position relative to the selected component."""

    BEFORE = "before"
    AFTER = "after"
    INSIDE = "inside"


@dataclass
class Outcome:
    """Handler result: response data plus correction warnings."""

    data: dict[str, Any] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)


@dataclass
class ValidationIssue:
    """A structural problem found in a component tree.

    Attributes:
        node_id: ID of the node with the issue.
        message: Human-readable description.
        issue_type: Category of the issue.
    """

    node_id: str
    message: str
    issue_type: str


# =============================================================================
# Input normalization
# =============================================================================


def parse_position(value: str | None) -> Position:
    """Parse an insertion position, defaulting to ``inside``.

    Raises:
        ValidationError: Unknown position.
    """
    if value is None:
        return Position.INSIDE
    try:
        return Position(value.strip().lower())
    except ValueError:
        raise ValidationError(
            f"Invalid position '{value}'",
            valid=[p.value for p in Position],
        ) from None


def normalize_selector(selector: str) -> tuple[str, str | None]:
    """Normalize a selector to class or id form.

    Selectors without a leading ``.`` or ``#`` are corrected to class form.

    Args:
        selector: Raw selector such as "hero", ".hero" or "#main".

    Returns:
        Tuple of (normalized selector, correction warning or None).

    Raises:
        ValidationError: Empty selector or invalid characters.

    Example:
        >>> normalize_selector("hero")
        ('.hero', "Selector 'hero' corrected to '.hero'")
        >>> normalize_selector("#main")
        ('#main', None)
    """
    raw = (selector or "").strip()
    warning = None
    if raw[:1] in (".", "#"):
        normalized = raw
    else:
        normalized = f".{raw}"
        warning = f"Selector '{raw}' corrected to '{normalized}'"
    if not _SELECTOR_NAME.match(normalized[1:]):
        raise ValidationError(
            f"Invalid selector '{selector}'; use a single class (.name) or id (#name)",
            selector=selector,
        )
    return normalized, warning


def check_bem(class_name: str) -> list[str]:
    """Check a class name against BEM conventions.

    Returns:
        Warnings; empty when the name follows the convention.
    """
    if _BEM.match(class_name):
        return []
    return [
        f"Class '{class_name}' does not follow BEM naming "
        "(block, block__element, block--modifier; lowercase, hyphen-separated)"
    ]


def validate_settings(settings: Any) -> dict[str, str | None]:
    """Validate a settings map against the known keys.

    Raises:
        ValidationError: Not a mapping, unknown keys or non-string values.
    """
    if not isinstance(settings, dict) or not settings:
        raise ValidationError(
            "settings must be a non-empty object", valid=list(SETTINGS_KEYS)
        )
    unknown = [key for key in settings if key not in SETTINGS_KEYS]
    if unknown:
        raise ValidationError(
            f"Unknown settings keys: {', '.join(unknown)}",
            invalid=unknown,
            valid=list(SETTINGS_KEYS),
        )
    for key, value in settings.items():
        if value is not None and not isinstance(value, str):
            raise ValidationError(f"Setting '{key}' must be a string")
    return dict(settings)


def check_page_names(pages: Iterable[Page]) -> list[str]:
    """Warn when no page is named ``index`` (the homepage)."""
    if any(page.name == "index" for page in pages):
        return []
    return ["No page is named 'index'; the homepage should be named 'index'"]


# =============================================================================
# Structural checks
# =============================================================================


def validate_tree(node: ComponentNode) -> list[ValidationIssue]:
    """Validate a component tree for structural issues.

    Performs the following checks:
        - Unique ID enforcement (no duplicate IDs)
        - Parent back-references match the containing list
        - Cycle detection (no node is its own ancestor)

    Args:
        node: Root of the tree to validate.

    Returns:
        List of issues (empty if valid).
    """
    issues: list[ValidationIssue] = []

    id_counts: dict[str, int] = {}
    _collect_ids(node, id_counts, set())
    for node_id, count in id_counts.items():
        if count > 1:
            issues.append(
                ValidationIssue(
                    node_id=node_id,
                    message=f"Duplicate ID '{node_id}' appears {count} times",
                    issue_type="duplicate_id",
                )
            )

    issues.extend(_check_parents(node))
    issues.extend(_detect_cycles(node))
    return issues


def validate_pages(pages: Iterable[Page]) -> list[ValidationIssue]:
    """Validate every page tree and id uniqueness across pages."""
    issues: list[ValidationIssue] = []
    seen: dict[str, str] = {}
    for page in pages:
        issues.extend(validate_tree(page.root))
        for node in page.root.walk():
            other = seen.setdefault(node.id, page.id)
            if other != page.id:
                issues.append(
                    ValidationIssue(
                        node_id=node.id,
                        message=f"ID '{node.id}' is used on pages '{other}' and '{page.id}'",
                        issue_type="duplicate_id",
                    )
                )
    return issues


def _collect_ids(
    node: ComponentNode, id_counts: dict[str, int], visited: set[int]
) -> None:
    if id(node) in visited:
        return
    visited.add(id(node))
    id_counts[node.id] = id_counts.get(node.id, 0) + 1
    for child in node.children:
        _collect_ids(child, id_counts, visited)


def _check_parents(node: ComponentNode) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    stack = [node]
    visited: set[int] = set()
    while stack:
        current = stack.pop()
        if id(current) in visited:
            continue
        visited.add(id(current))
        for child in current.children:
            if child.parent is not current:
                issues.append(
                    ValidationIssue(
                        node_id=child.id,
                        message=f"Node '{child.id}' is listed under '{current.id}' "
                        "but its parent reference differs",
                        issue_type="parent_mismatch",
                    )
                )
            stack.append(child)
    return issues


def _detect_cycles(node: ComponentNode) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    visited: set[int] = set()

    def _check(n: ComponentNode, path: set[int]) -> None:
        obj_id = id(n)
        if obj_id in path:
            issues.append(
                ValidationIssue(
                    node_id=n.id,
                    message=f"Cycle detected: node '{n.id}' is its own ancestor",
                    issue_type="cycle",
                )
            )
            return
        if obj_id in visited:
            return
        visited.add(obj_id)
        path.add(obj_id)
        for child in n.children:
            _check(child, path)
        path.remove(obj_id)

    _check(node, set())
    return issues


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
