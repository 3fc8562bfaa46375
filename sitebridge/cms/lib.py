"""Content binding on components.

Bindings are stored as data states on the selected component. Private
states drive what the component renders (its content, loop, visibility
condition, attributes); public states expose data to descendants. Every
expression is resolved against the owner's data sources before anything is
written.
"""

import re
from dataclasses import dataclass
from typing import Any

from sitebridge.core import get_logger
from sitebridge.editor import ComponentNode, DataState, FieldKind, TreeOwner
from sitebridge.errors import NotFoundError, UnsupportedOperationError, ValidationError
from sitebridge.expression import resolve_expression, tokens_to_state
from sitebridge.session import Session
from sitebridge.validation import Outcome

logger = get_logger("cms")

CONTENT_STATE = "innerHTML"
LOOP_STATE = "__data"
CONDITION_STATE = "condition"
CONDITION_VALUE_STATE = "condition2"

UNARY_OPERATORS = ("truthy", "falsy", "empty", "not_empty")
BINARY_OPERATORS = ("==", "!=", ">", "<", ">=", "<=")
CONDITION_OPERATORS = UNARY_OPERATORS + BINARY_OPERATORS

STATE_TYPES = ("content", "loop", "condition", "attribute", "expose")

PREVIEW_ON = "data-source:preview:activate"
PREVIEW_OFF = "data-source:preview:deactivate"


def literal_token(value: str) -> dict[str, Any]:
    """Token holding a fixed value instead of a resolved field."""
    return {
        "type": "property",
        "field_id": "fixed",
        "label": "Fixed value",
        "kind": FieldKind.SCALAR.value,
        "type_ids": ["String"],
        "options": {"value": value},
    }


def attribute_state_id(component_id: str, name: str) -> str:
    return f"{component_id}-attr-{re.sub(r'[^a-zA-Z0-9]', '_', name)}"


@dataclass
class _Staged:
    state: DataState
    exported: bool = False
    operator: str | None = None


class ContentBinding:
    """Operations for the ``cms`` noun."""

    def __init__(self, session: Session):
        self.session = session

    @property
    def owner(self) -> TreeOwner:
        return self.session.owner

    # =========================================================================
    # Staging
    # =========================================================================

    def _resolve(self, expression: str | None) -> list[dict[str, Any]]:
        if expression is None:
            raise ValidationError("expression is required (dot path like 'source.field')")
        tokens = resolve_expression(expression, self.owner.get_data_sources())
        return tokens_to_state(tokens)

    def _stage_content(self, expression: str | None) -> list[_Staged]:
        tokens = self._resolve(expression)
        return [_Staged(DataState(CONTENT_STATE, "Content", tokens))]

    def _stage_loop(self, expression: str | None) -> list[_Staged]:
        tokens = self._resolve(expression)
        if tokens[-1]["kind"] != FieldKind.LIST.value:
            raise ValidationError(
                f"Loop expression '{expression}' must end on a list field, "
                f"'{tokens[-1]['field_id']}' is {tokens[-1]['kind']}"
            )
        return [_Staged(DataState(LOOP_STATE, "Loop", tokens))]

    def _stage_condition(
        self, expression: str | None, operator: str | None, value: Any
    ) -> list[_Staged]:
        operator = operator or "truthy"
        if operator not in CONDITION_OPERATORS:
            raise ValidationError(
                f"Invalid operator '{operator}'", valid=list(CONDITION_OPERATORS)
            )
        if operator in BINARY_OPERATORS and value is None:
            raise ValidationError(f"Operator '{operator}' needs a value to compare with")
        staged = [
            _Staged(
                DataState(CONDITION_STATE, "Condition", self._resolve(expression)),
                operator=operator,
            )
        ]
        if operator in BINARY_OPERATORS:
            staged.append(
                _Staged(
                    DataState(CONDITION_VALUE_STATE, "Compare to", [literal_token(str(value))])
                )
            )
        return staged

    def _stage_attribute(
        self,
        node: ComponentNode,
        name: str | None,
        value: Any,
        expression: str | None,
    ) -> list[_Staged]:
        if not name:
            raise ValidationError("name is required for attribute bindings")
        if value is not None and expression is not None:
            raise ValidationError("Provide either value or expression, not both")
        if expression is not None:
            tokens = self._resolve(expression)
        else:
            tokens = [literal_token("" if value is None else str(value))]
        return [_Staged(DataState(attribute_state_id(node.id, name), name, tokens))]

    def _stage_expose(
        self, expression: str | None, state_id: str | None, label: str | None
    ) -> list[_Staged]:
        if not state_id:
            raise ValidationError("state_id is required to expose data")
        tokens = self._resolve(expression)
        return [_Staged(DataState(state_id, label or state_id, tokens), exported=True)]

    def _stage_entry(self, node: ComponentNode, entry: dict[str, Any]) -> list[_Staged]:
        kind = entry.get("type")
        if kind == "content":
            return self._stage_content(entry.get("expression"))
        if kind == "loop":
            return self._stage_loop(entry.get("expression"))
        if kind == "condition":
            return self._stage_condition(
                entry.get("expression"), entry.get("operator"), entry.get("value")
            )
        if kind == "attribute":
            return self._stage_attribute(
                node, entry.get("name"), entry.get("value"), entry.get("expression")
            )
        if kind == "expose":
            return self._stage_expose(
                entry.get("expression"), entry.get("state_id"), entry.get("label")
            )
        raise ValidationError(f"Unknown state type '{kind}'", valid=list(STATE_TYPES))

    def _apply(self, node: ComponentNode, staged: list[_Staged]) -> Outcome:
        for item in staged:
            states = node.public_states if item.exported else node.private_states
            states[:] = [s for s in states if s.id != item.state.id]
            states.append(item.state)
            if item.operator is not None:
                node.condition_operator = item.operator
                if item.operator in UNARY_OPERATORS:
                    node.private_states[:] = [
                        s for s in node.private_states if s.id != CONDITION_VALUE_STATE
                    ]
        logger.debug(f"Bound {len(staged)} state(s) on {node.id}")
        return Outcome(
            data={
                "component_id": node.id,
                "states": [
                    {"state_id": item.state.id, "exported": item.exported}
                    for item in staged
                ],
            }
        )

    # =========================================================================
    # Actions
    # =========================================================================

    def list_sources(self) -> Outcome:
        return Outcome(
            data={"sources": [s.summary() for s in self.owner.get_data_sources()]}
        )

    def bind_content(self, expression: str) -> Outcome:
        node = self.session.require_selected()
        return self._apply(node, self._stage_content(expression))

    def set_loop(self, expression: str) -> Outcome:
        node = self.session.require_selected()
        return self._apply(node, self._stage_loop(expression))

    def set_condition(
        self, expression: str, operator: str | None = None, value: Any = None
    ) -> Outcome:
        node = self.session.require_selected()
        return self._apply(node, self._stage_condition(expression, operator, value))

    def set_attribute(
        self, name: str, value: Any = None, expression: str | None = None
    ) -> Outcome:
        node = self.session.require_selected()
        return self._apply(node, self._stage_attribute(node, name, value, expression))

    def expose_data(
        self, expression: str, state_id: str, label: str | None = None
    ) -> Outcome:
        node = self.session.require_selected()
        return self._apply(node, self._stage_expose(expression, state_id, label))

    def set_states(self, states: list[dict[str, Any]]) -> Outcome:
        """Apply several bindings at once.

        Every entry is resolved before any state is written, so one bad
        entry leaves the component unchanged.
        """
        node = self.session.require_selected()
        if not isinstance(states, list) or not states:
            raise ValidationError("states must be a non-empty list of {type, ...}")
        staged: list[_Staged] = []
        for position, entry in enumerate(states):
            if not isinstance(entry, dict):
                raise ValidationError(f"states[{position}] must be an object")
            staged.extend(self._stage_entry(node, entry))
        return self._apply(node, staged)

    def list_states(self) -> Outcome:
        node = self.session.require_selected()
        return Outcome(
            data={
                "component_id": node.id,
                "public_states": [s.to_dict() for s in node.public_states],
                "private_states": [s.to_dict() for s in node.private_states],
                "condition_operator": node.condition_operator,
            }
        )

    def remove_state(self, state_id: str, exported: bool = False) -> Outcome:
        node = self.session.require_selected()
        states = node.public_states if exported else node.private_states
        if not any(s.id == state_id for s in states):
            raise NotFoundError(
                f"Component '{node.id}' has no "
                f"{'public' if exported else 'private'} state '{state_id}'",
                available=[s.id for s in states],
            )
        states[:] = [s for s in states if s.id != state_id]
        if not exported and state_id == CONDITION_STATE:
            node.condition_operator = None
            states[:] = [s for s in states if s.id != CONDITION_VALUE_STATE]
        return Outcome(data={"component_id": node.id, "removed": state_id})

    def refresh_preview(self, enabled: bool = True) -> Outcome:
        command = PREVIEW_ON if enabled else PREVIEW_OFF
        try:
            result = self.owner.run_command(command)
        except KeyError:
            raise UnsupportedOperationError(
                f"The editor does not support '{command}'", capability="data_sources"
            ) from None
        return Outcome(data={"command": command, "result": result})


__all__ = [
    "ContentBinding",
    "literal_token",
    "attribute_state_id",
    "CONDITION_OPERATORS",
    "STATE_TYPES",
]
