"""Tree owner protocol.

Defines the capability surface the accessors consume from the live editor.
The owner holds state; every algorithm (traversal, insertion resolution,
expression resolution, validation) lives in the accessors.
"""

from collections.abc import Callable
from dataclasses import asdict, dataclass
from typing import Any, Protocol

from .models import Block, ComponentNode, Device, Page, StyleRule, SymbolDefinition
from .schema import DataSource

# Inbound commands the editor host can emit
INBOUND_EVENTS = ("menu-save", "menu-undo", "menu-redo", "close", "change:changesCount")

# Outbound notifications sent to the host
OUTBOUND_EVENTS = ("mark_unsaved", "set_current_project", "clear_current_project")


@dataclass(frozen=True)
class EditorCapabilities:
    """Optional capabilities advertised once by the tree owner.

    Attributes:
        data_sources: Content-binding data sources are configured.
        evaluate: Raw code evaluation is available.
        navigation: The editor can navigate between websites.
        history: Undo/redo checkpoints are supported.
    """

    data_sources: bool = False
    evaluate: bool = False
    navigation: bool = True
    history: bool = True

    def supports(self, capability: str) -> bool:
        return bool(getattr(self, capability, False))

    def to_dict(self) -> dict[str, bool]:
        return asdict(self)


class TreeOwner(Protocol):
    """Protocol defining the editor interface used by the accessors.

    Any editor (an in-process model, a remote editor proxy) must implement
    this interface to be driven by the dispatcher.
    """

    @property
    def document_id(self) -> str:
        """Identifier of the open document, used for per-document locking."""
        ...

    @property
    def capabilities(self) -> EditorCapabilities:
        """Optional capabilities of this owner."""
        ...

    # =========================================================================
    # Selection and identity
    # =========================================================================

    def get_selected(self) -> ComponentNode | None:
        """Get the selected component, or None."""
        ...

    def select(self, node: ComponentNode | None) -> None:
        """Select a component (None clears the selection)."""
        ...

    def get_root(self) -> ComponentNode:
        """Get the root wrapper of the selected page."""
        ...

    def new_id(self, prefix: str = "c") -> str:
        """Mint a component id unique within the document."""
        ...

    def has_id(self, node_id: str) -> bool:
        """Check whether an id is used anywhere in the document."""
        ...

    # =========================================================================
    # Pages
    # =========================================================================

    def get_pages(self) -> list[Page]: ...

    def get_page(self, page_id: str) -> Page | None: ...

    def add_page(self, name: str, slug: str = "") -> Page:
        """Create a page with an empty root wrapper."""
        ...

    def remove_page(self, page_id: str) -> None: ...

    def select_page(self, page_id: str) -> None: ...

    def get_selected_page(self) -> Page: ...

    # =========================================================================
    # Devices
    # =========================================================================

    def get_devices(self) -> list[Device]: ...

    def get_device(self, device_id: str) -> Device | None: ...

    def select_device(self, device_id: str) -> None: ...

    def get_selected_device(self) -> Device: ...

    # =========================================================================
    # CSS rules
    # =========================================================================

    def get_rule(self, selector: str, media: str = "") -> StyleRule | None:
        """Look up the rule for a selector inside a media context."""
        ...

    def add_rule(self, selector: str, media: str = "") -> StyleRule:
        """Create (or return the existing) rule for selector and media."""
        ...

    def remove_rule(self, selector: str, media: str = "") -> bool: ...

    def get_rules(self, selector: str | None = None) -> list[StyleRule]: ...

    # =========================================================================
    # Symbols
    # =========================================================================

    def get_symbols(self) -> list[SymbolDefinition]: ...

    def add_symbol(self, definition: SymbolDefinition) -> None: ...

    def remove_symbol(self, symbol_id: str) -> None:
        """Preferred removal path for a symbol definition."""
        ...

    def symbol_collection(self) -> list[SymbolDefinition]:
        """Mutable collection backing the symbol definitions."""
        ...

    # =========================================================================
    # Blocks
    # =========================================================================

    def get_blocks(self) -> list[Block]:
        """Templates registered in the block panel."""
        ...

    # =========================================================================
    # Data sources and settings
    # =========================================================================

    def get_data_sources(self) -> list[DataSource]: ...

    def get_site_settings(self) -> dict[str, Any]:
        """Mutable site-wide settings map."""
        ...

    # =========================================================================
    # History and commands
    # =========================================================================

    def checkpoint(self, label: str = "") -> None:
        """Record an undo checkpoint before a mutation."""
        ...

    def discard_checkpoint(self) -> None:
        """Drop the last checkpoint after its mutation was rejected.

        Restores the redo stack and change count the checkpoint replaced.
        """
        ...

    def undo(self) -> bool: ...

    def redo(self) -> bool: ...

    def store(self) -> None:
        """Persist the document."""
        ...

    def run_command(self, name: str, **options: Any) -> Any: ...

    def navigate(self, url: str) -> None: ...

    def evaluate(self, code: str) -> Any: ...

    # =========================================================================
    # Events
    # =========================================================================

    def on(self, event: str, callback: Callable[[Any], None]) -> Callable[[], None]:
        """Subscribe to an inbound event; returns an unsubscribe callable."""
        ...

    def notify(self, event: str, payload: Any = None) -> None:
        """Send a one-shot notification to the host."""
        ...


__all__ = ["EditorCapabilities", "TreeOwner", "INBOUND_EVENTS", "OUTBOUND_EVENTS"]
