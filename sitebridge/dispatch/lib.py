"""Tool dispatcher.

Routes ``{noun, action, params}`` requests to the accessor that implements
them and wraps the result in the response envelope. Request shape,
required parameters, the open-website prerequisite and editor capabilities
are all checked before a handler runs; nothing raised by a handler escapes
``Dispatcher.dispatch``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from sitebridge.blocks import BlockAccessor
from sitebridge.cms import ContentBinding
from sitebridge.config import get_tree_limits
from sitebridge.document import (
    DeviceAccessor,
    EditorAccessor,
    PageAccessor,
    SiteSettingsAccessor,
)
from sitebridge.errors import BridgeError, UnsupportedOperationError, ValidationError
from sitebridge.feedback import DEFAULT_LIST_LIMIT, FeedbackLog
from sitebridge.session import Session
from sitebridge.style import SelectorAccessor, StyleAccessor
from sitebridge.symbols import SymbolAccessor
from sitebridge.tree import TreeAccessor
from sitebridge.validation import Outcome
from sitebridge.website import SiteClient, WebsiteAccessor

from .models import ToolRequest, ToolResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionSpec:
    """Static description of one action.

    Attributes:
        required: Params that must be present (not None).
        optional: Params that may be given.
        mutates: Whether the action changes the document (checkpointed).
        capability: Editor capability the action needs, if any.
        next_step: Hint naming the natural follow-up call.
    """

    required: tuple[str, ...] = ()
    optional: tuple[str, ...] = ()
    mutates: bool = False
    capability: str | None = None
    next_step: str = ""

    @property
    def params(self) -> tuple[str, ...]:
        return self.required + self.optional


_CMS = "data_sources"

ACTIONS: dict[str, dict[str, ActionSpec]] = {
    "website": {
        "list": ActionSpec(
            next_step="website(action:'open', website_id:'...') to open a website"
        ),
        "create": ActionSpec(
            optional=("name",),
            capability="navigation",
            next_step="component(action:'add', html:'<section>...</section>') to add content",
        ),
        "delete": ActionSpec(required=("website_id",), capability="navigation"),
        "rename": ActionSpec(required=("website_id", "name")),
        "duplicate": ActionSpec(
            required=("website_id",),
            next_step="website(action:'open', website_id:'...') to open the copy",
        ),
        "open": ActionSpec(
            required=("website_id",),
            capability="navigation",
            next_step="component(action:'get_tree') to see the content",
        ),
        "dashboard": ActionSpec(
            capability="navigation",
            next_step="website(action:'list') to see websites",
        ),
    },
    "page": {
        "list": ActionSpec(next_step="page(action:'select', page_id:'...') to switch pages"),
        "add": ActionSpec(
            required=("name",),
            optional=("slug",),
            mutates=True,
            next_step="component(action:'add', html:'...') to add content",
        ),
        "select": ActionSpec(
            required=("page_id",),
            next_step="component(action:'get_tree') to see the page content",
        ),
        "remove": ActionSpec(required=("page_id",), mutates=True),
        "rename": ActionSpec(required=("name",), optional=("page_id",), mutates=True),
        "update_settings": ActionSpec(
            required=("settings",), optional=("page_id",), mutates=True
        ),
    },
    "component": {
        "get_tree": ActionSpec(
            optional=("max_depth", "max_count"),
            next_step="component(action:'select', component_id:'...') to select a component",
        ),
        "get": ActionSpec(optional=("component_id",)),
        "add": ActionSpec(
            required=("html",),
            optional=("position",),
            mutates=True,
            next_step="selector(action:'create', selector:'.name') then style(action:'set')",
        ),
        "update": ActionSpec(
            optional=("component_id", "content", "attributes"), mutates=True
        ),
        "move": ActionSpec(
            required=("target_id",), optional=("component_id", "position"), mutates=True
        ),
        "remove": ActionSpec(optional=("component_id",), mutates=True),
        "select": ActionSpec(
            required=("component_id",),
            next_step="selector(action:'list') to see its selectors",
        ),
    },
    "block": {
        "list": ActionSpec(
            next_step="block(action:'insert', block_id:'...') to insert a block"
        ),
        "insert": ActionSpec(
            required=("block_id",),
            optional=("position",),
            mutates=True,
            next_step="selector(action:'create', selector:'.name') then style(action:'set')",
        ),
    },
    "selector": {
        "list": ActionSpec(
            next_step="selector(action:'select', selector:'.name') to activate one"
        ),
        "select": ActionSpec(
            required=("selector",),
            next_step="style(action:'set', properties:{...}) to style it",
        ),
        "create": ActionSpec(
            required=("selector",),
            mutates=True,
            next_step="style(action:'set', properties:{...}) to style it",
        ),
        "delete": ActionSpec(required=("selector",), mutates=True),
    },
    "style": {
        "get": ActionSpec(),
        "set": ActionSpec(optional=("properties", "css", "selector"), mutates=True),
        "set_batch": ActionSpec(required=("rules",), mutates=True),
        "delete_property": ActionSpec(required=("name",), mutates=True),
    },
    "symbol": {
        "list": ActionSpec(),
        "create": ActionSpec(
            required=("label",),
            optional=("component_id", "html", "icon"),
            mutates=True,
            next_step="symbol(action:'place', label:'...') to reuse it",
        ),
        "place": ActionSpec(
            required=("label",), optional=("position", "page_ids"), mutates=True
        ),
        "delete": ActionSpec(required=("label",), mutates=True),
    },
    "device": {
        "list": ActionSpec(),
        "set": ActionSpec(
            required=("name",),
            next_step="style(action:'set') now targets this breakpoint",
        ),
    },
    "site_settings": {
        "get": ActionSpec(),
        "set": ActionSpec(required=("settings",), mutates=True),
    },
    "cms": {
        "list_sources": ActionSpec(
            next_step="cms(action:'bind_content', expression:'source.field') on a selected component"
        ),
        "bind_content": ActionSpec(required=("expression",), mutates=True, capability=_CMS),
        "set_condition": ActionSpec(
            required=("expression",),
            optional=("operator", "value"),
            mutates=True,
            capability=_CMS,
        ),
        "set_loop": ActionSpec(required=("expression",), mutates=True, capability=_CMS),
        "expose_data": ActionSpec(
            required=("expression", "state_id"),
            optional=("label",),
            mutates=True,
            capability=_CMS,
        ),
        "set_attribute": ActionSpec(
            required=("name",),
            optional=("value", "expression"),
            mutates=True,
            capability=_CMS,
        ),
        "set_states": ActionSpec(required=("states",), mutates=True, capability=_CMS),
        "refresh_preview": ActionSpec(optional=("enabled",)),
        "list_states": ActionSpec(capability=_CMS),
        "remove_state": ActionSpec(
            required=("state_id",), optional=("exported",), mutates=True, capability=_CMS
        ),
    },
    "editor": {
        "save": ActionSpec(),
        "undo": ActionSpec(capability="history"),
        "redo": ActionSpec(capability="history"),
    },
    "eval": {
        "run": ActionSpec(
            required=("code",), optional=("output_file",), capability="evaluate"
        ),
    },
    "feedback": {
        "report": ActionSpec(
            required=("description",), optional=("context", "workaround")
        ),
        "list": ActionSpec(optional=("limit",)),
    },
}

# Nouns that do not need an open website
DOCUMENT_FREE_NOUNS = frozenset({"website", "feedback"})


class _FeedbackActions:
    def __init__(self, log: FeedbackLog):
        self.log = log

    def report(
        self,
        description: str,
        context: str | None = None,
        workaround: str | None = None,
    ) -> Outcome:
        entry = self.log.report(description, context, workaround)
        return Outcome(data={"recorded": entry.to_dict(), "path": str(self.log.path)})

    def list(self, limit: int = DEFAULT_LIST_LIMIT) -> Outcome:
        return Outcome(data={"entries": [e.to_dict() for e in self.log.list(limit)]})


class Dispatcher:
    """Routes tool calls to accessors over one session.

    Example:
        >>> dispatcher = Dispatcher(Session(InMemoryEditor(), website_id="site"))
        >>> dispatcher.dispatch({"noun": "component", "action": "add",
        ...                      "params": {"html": "<h1>Hello</h1>"}}).success
        True
    """

    def __init__(
        self,
        session: Session,
        feedback: FeedbackLog | None = None,
        site_client: SiteClient | None = None,
    ):
        self.session = session
        self.feedback = feedback or FeedbackLog()
        self.site_client = site_client
        editor = EditorAccessor(session)
        self._targets: dict[str, Any] = {
            "page": PageAccessor(session),
            "component": TreeAccessor(session),
            "block": BlockAccessor(session),
            "selector": SelectorAccessor(session),
            "style": StyleAccessor(session),
            "symbol": SymbolAccessor(session),
            "device": DeviceAccessor(session),
            "site_settings": SiteSettingsAccessor(session),
            "cms": ContentBinding(session),
            "editor": editor,
            "eval": editor,
            "feedback": _FeedbackActions(self.feedback),
        }
        if site_client is not None:
            self._targets["website"] = WebsiteAccessor(session, site_client)

    # =========================================================================
    # Public interface
    # =========================================================================

    def dispatch(self, request: ToolRequest | dict[str, Any]) -> ToolResponse:
        """Run one tool call and return its envelope. Never raises."""
        try:
            if not isinstance(request, ToolRequest):
                request = ToolRequest.model_validate(request)
        except PydanticValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
            return self._failure(
                ValidationError(
                    "Request must be {noun, action, params}", invalid=fields
                )
            )

        logger.debug(f"Dispatch {request.noun}.{request.action} {sorted(request.params)}")
        try:
            outcome = self._run(request)
        except BridgeError as e:
            logger.warning(f"{request.noun}.{request.action} failed: {e.message}")
            return self._failure(e)
        except Exception as e:
            logger.exception(f"Unexpected error in {request.noun}.{request.action}")
            return ToolResponse(
                success=False,
                error=f"Internal error: {e}",
                extra={"type": type(e).__name__},
            )
        return self._success(request, outcome)

    # =========================================================================
    # Internals
    # =========================================================================

    def _spec(self, request: ToolRequest) -> ActionSpec:
        actions = ACTIONS.get(request.noun)
        if actions is None:
            raise ValidationError(
                f"Unknown noun '{request.noun}'", valid=list(ACTIONS)
            )
        spec = actions.get(request.action)
        if spec is None:
            raise ValidationError(
                f"Unknown action '{request.action}' for {request.noun}",
                valid=list(actions),
            )
        missing = [name for name in spec.required if request.params.get(name) is None]
        if missing:
            raise ValidationError(
                f"{request.noun}.{request.action} requires: {', '.join(missing)}",
                missing=missing,
            )
        return spec

    def _run(self, request: ToolRequest) -> Outcome:
        spec = self._spec(request)
        if request.noun not in DOCUMENT_FREE_NOUNS:
            self.session.require_website()

        capabilities = self.session.owner.capabilities
        if spec.capability and not capabilities.supports(spec.capability):
            raise UnsupportedOperationError(
                f"{request.noun}.{request.action} needs the '{spec.capability}' "
                "capability, which this editor does not provide",
                capability=spec.capability,
            )
        target = self._targets.get(request.noun)
        if target is None:
            raise UnsupportedOperationError(
                "No site API client is configured", capability="site_api"
            )

        kwargs = {
            name: request.params[name]
            for name in spec.params
            if request.params.get(name) is not None
        }
        if request.noun == "component" and request.action == "get_tree":
            depth, count = get_tree_limits()
            kwargs.setdefault("max_depth", depth)
            kwargs.setdefault("max_count", count)

        ignored = sorted(set(request.params) - set(spec.params))
        ignored_warnings = (
            [f"Ignored unknown parameter(s): {', '.join(ignored)}"] if ignored else []
        )

        checkpointed = spec.mutates and capabilities.history
        if checkpointed:
            self.session.owner.checkpoint(f"{request.noun}.{request.action}")

        try:
            outcome = getattr(target, request.action)(**kwargs)
        except Exception as e:
            if checkpointed:
                self.session.owner.discard_checkpoint()
            if isinstance(e, BridgeError):
                e.warnings.extend(ignored_warnings)
            raise
        outcome.warnings.extend(ignored_warnings)
        return outcome

    def _success(self, request: ToolRequest, outcome: Outcome) -> ToolResponse:
        data = dict(outcome.data)
        data["selection"] = self.session.snapshot()
        next_step = ACTIONS[request.noun][request.action].next_step
        if next_step:
            data["next_steps"] = next_step
        return ToolResponse(success=True, data=data, warnings=outcome.warnings or None)

    @staticmethod
    def _failure(error: BridgeError) -> ToolResponse:
        return ToolResponse(
            success=False,
            error=error.message,
            extra=error.to_extra(),
            warnings=error.warnings or None,
        )


__all__ = ["ACTIONS", "ActionSpec", "Dispatcher", "DOCUMENT_FREE_NOUNS"]
