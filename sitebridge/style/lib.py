"""Style rule accessor and selector management.

Style operations act on the active rule: the session's active selector
inside the selected device's media context. Declarations are validated as
a batch before anything is written; one invalid pair rejects the call.
"""

from __future__ import annotations

from typing import Any

from sitebridge.core import get_logger
from sitebridge.editor import TreeOwner
from sitebridge.errors import (
    BridgeError,
    NotFoundError,
    StyleRejectedError,
    ValidationError,
)
from sitebridge.session import Session, selectors_of
from sitebridge.validation import Outcome, check_bem, normalize_selector

from .css import parse_declarations, partition_declarations

logger = get_logger("style")


def collect_declarations(
    properties: dict[str, Any] | None = None, css: str | None = None
) -> list[tuple[str, Any]]:
    """Merge a property map and a CSS string into (name, value) pairs.

    Raises:
        ValidationError: Neither given, properties is not a mapping, or no
            declaration was found.
    """
    if properties is None and not css:
        raise ValidationError("Provide properties (object) or css (string)")
    pairs: list[tuple[str, Any]] = []
    if properties is not None:
        if not isinstance(properties, dict):
            raise ValidationError("properties must be an object of property -> value")
        pairs.extend((str(name), _coerce(value)) for name, value in properties.items())
    if css:
        pairs.extend(parse_declarations(css))
    if not pairs:
        raise ValidationError("No CSS declarations given")
    return pairs


def _coerce(value: Any) -> Any:
    # Numbers are accepted as their CSS text (z-index: 10)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


def validate_declarations(pairs: list[tuple[str, Any]]) -> dict[str, str]:
    """Return the validated map, or raise when any pair is invalid.

    Raises:
        StyleRejectedError: Carrying the valid/invalid partition.
    """
    valid, invalid = partition_declarations(pairs)
    if invalid:
        raise StyleRejectedError(
            f"Rejected {len(invalid)} CSS declaration(s): {', '.join(invalid)}",
            valid=valid,
            invalid=invalid,
        )
    return valid


class StyleAccessor:
    """Operations for the ``style`` noun."""

    def __init__(self, session: Session):
        self.session = session

    @property
    def owner(self) -> TreeOwner:
        return self.session.owner

    def _describe(self, selector: str, media: str) -> dict[str, Any]:
        rule = self.owner.get_rule(selector, media)
        return {
            "selector": selector,
            "media": media or None,
            "device": self.session.device.name,
            "style": dict(rule.declarations) if rule else {},
        }

    def get(self) -> Outcome:
        selector, media = self.session.active_rule_key()
        return Outcome(data=self._describe(selector, media))

    def set(
        self,
        properties: dict[str, Any] | None = None,
        css: str | None = None,
        selector: str | None = None,
    ) -> Outcome:
        """Merge validated declarations into the active rule."""
        warnings: list[str] = []
        normalized = None
        if selector is not None:
            normalized, correction = normalize_selector(selector)
            if correction:
                warnings.append(correction)
        try:
            active, media = self.session.active_rule_key()
            if normalized is not None and normalized != active:
                raise ValidationError(
                    f"Selector '{normalized}' is not the active selector '{active}'. "
                    f"Call selector(action:'select', selector:'{normalized}') first.",
                    active=active,
                )
            valid = validate_declarations(collect_declarations(properties, css))
        except BridgeError as e:
            e.warnings.extend(warnings)
            raise
        rule = self.owner.add_rule(active, media)
        rule.declarations.update(valid)
        logger.debug(f"Set {len(valid)} declaration(s) on {active} [{media or 'all'}]")
        return Outcome(data=self._describe(active, media), warnings=warnings)

    def set_batch(self, rules: list[dict[str, Any]]) -> Outcome:
        """Apply declarations to several selectors at the current breakpoint.

        Every entry is validated before any rule is written.
        """
        if not isinstance(rules, list) or not rules:
            raise ValidationError(
                "rules must be a non-empty list of {selector, properties|css}"
            )
        media = self.session.device.media_width
        warnings: list[str] = []
        staged: list[tuple[str, dict[str, str]]] = []
        valid_all: dict[str, str] = {}
        invalid_all: dict[str, str] = {}
        try:
            for position, entry in enumerate(rules):
                if not isinstance(entry, dict) or not entry.get("selector"):
                    raise ValidationError(f"rules[{position}] must have a selector")
                selector, correction = normalize_selector(entry["selector"])
                if correction:
                    warnings.append(correction)
                pairs = collect_declarations(entry.get("properties"), entry.get("css"))
                valid, invalid = partition_declarations(pairs)
                valid_all.update({f"{selector} {k}": v for k, v in valid.items()})
                invalid_all.update({f"{selector} {k}": v for k, v in invalid.items()})
                staged.append((selector, valid))

            if invalid_all:
                raise StyleRejectedError(
                    f"Rejected {len(invalid_all)} CSS declaration(s); no rule was changed",
                    valid=valid_all,
                    invalid=invalid_all,
                )
        except BridgeError as e:
            e.warnings.extend(warnings)
            raise

        for selector, declarations in staged:
            self.owner.add_rule(selector, media).declarations.update(declarations)
        return Outcome(
            data={
                "media": media or None,
                "rules": [self._describe(selector, media) for selector, _ in staged],
            },
            warnings=warnings,
        )

    def delete_property(self, name: str) -> Outcome:
        """Remove one declaration; an emptied rule is removed."""
        selector, media = self.session.active_rule_key()
        name = name.strip().lower()
        rule = self.owner.get_rule(selector, media)
        removed = False
        if rule is not None and name in rule.declarations:
            del rule.declarations[name]
            removed = True
            if not rule.declarations:
                self.owner.remove_rule(selector, media)
        data = self._describe(selector, media)
        data["removed"] = removed
        return Outcome(data=data)


class SelectorAccessor:
    """Operations for the ``selector`` noun."""

    def __init__(self, session: Session):
        self.session = session

    @property
    def owner(self) -> TreeOwner:
        return self.session.owner

    def list(self) -> Outcome:
        node = self.session.require_selected()
        return Outcome(
            data={
                "component_id": node.id,
                "selectors": [
                    {
                        "selector": selector,
                        "active": selector == self.session.active_selector,
                        "has_rules": bool(self.owner.get_rules(selector)),
                    }
                    for selector in selectors_of(node)
                ],
            }
        )

    def select(self, selector: str) -> Outcome:
        normalized, correction = normalize_selector(selector)
        node = self.session.require_selected()
        available = selectors_of(node)
        if normalized not in available:
            raise NotFoundError(
                f"Selector '{normalized}' does not match component '{node.id}'",
                available=available,
            )
        self.session.active_selector = normalized
        return Outcome(
            data={"selector": normalized, "media": self.session.device.media_width or None},
            warnings=[correction] if correction else [],
        )

    def create(self, selector: str) -> Outcome:
        """Add a class to the selected component and activate it."""
        normalized, correction = normalize_selector(selector)
        if not normalized.startswith("."):
            raise ValidationError(
                "Only class selectors can be created; id selectors already exist"
            )
        node = self.session.require_selected()
        warnings = [correction] if correction else []
        warnings.extend(check_bem(normalized[1:]))
        added = node.add_class(normalized[1:])
        self.session.active_selector = normalized
        return Outcome(
            data={"selector": normalized, "added": added, "classes": list(node.classes)},
            warnings=warnings,
        )

    def delete(self, selector: str) -> Outcome:
        """Remove a class from the selected component and drop its rules."""
        normalized, correction = normalize_selector(selector)
        node = self.session.require_selected()
        name = normalized[1:]
        if not normalized.startswith(".") or name not in node.classes:
            raise NotFoundError(
                f"Component '{node.id}' has no class selector '{normalized}'",
                available=[f".{cls}" for cls in node.classes],
            )
        warnings = [correction] if correction else []
        node.remove_class(name)
        removed_rules = 0
        for rule in self.owner.get_rules(normalized):
            if self.owner.remove_rule(rule.selector, rule.media):
                removed_rules += 1
        still_used = [
            other.id
            for page in self.owner.get_pages()
            for other in page.root.walk()
            if name in other.classes
        ]
        if still_used and removed_rules:
            warnings.append(
                f"Class '{name}' is still used by {len(still_used)} component(s) "
                "which lost its styles"
            )
        if self.session.active_selector == normalized:
            self.session.active_selector = f".{node.classes[0]}" if node.classes else None
        return Outcome(
            data={
                "selector": normalized,
                "removed_rules": removed_rules,
                "classes": list(node.classes),
            },
            warnings=warnings,
        )


__all__ = [
    "StyleAccessor",
    "SelectorAccessor",
    "collect_declarations",
    "validate_declarations",
]
