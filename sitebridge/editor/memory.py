"""In-process tree owner.

InMemoryEditor implements the TreeOwner protocol with plain Python state.
It backs the demo server, the ``call`` CLI command and the test-suite.
"""

from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from sitebridge.core import get_logger

from .models import Block, ComponentNode, Device, Page, StyleRule, SymbolDefinition
from .protocol import EditorCapabilities
from .schema import DataSource

logger = get_logger("editor.memory")

DEFAULT_DEVICES = (
    Device(id="desktop", name="Desktop"),
    Device(id="tablet", name="Tablet", width="770px", media_width="992px"),
    Device(id="mobilePortrait", name="Mobile", width="320px", media_width="480px"),
)

KNOWN_COMMANDS = frozenset(
    {
        "data-source:preview:activate",
        "data-source:preview:deactivate",
    }
)

DEFAULT_BLOCKS = (
    Block(id="text", label="Text", content="<p>Insert your text here</p>"),
    Block(id="image", label="Image", content='<img src="" alt="">'),
    Block(id="link", label="Link", content='<a href="#">Link</a>'),
    Block(
        id="section",
        label="Section",
        category="Layout",
        content="<section><h2>Title</h2><p>Text</p></section>",
    ),
    Block(
        id="columns",
        label="Two columns",
        category="Layout",
        content="<div><div><p>Left</p></div><div><p>Right</p></div></div>",
    ),
)

HISTORY_LIMIT = 100


@dataclass
class _Snapshot:
    """Restorable copy of the document state."""

    pages: list[Page]
    selected_page_id: str
    rules: list[StyleRule]
    symbols: list[SymbolDefinition]
    site_settings: dict[str, Any]
    selected_id: str | None = None


@dataclass
class _EditorState:
    """Bookkeeping that is not part of the undoable document."""

    url: str = "/"
    preview_enabled: bool = False
    changes: int = 0
    saved_at: datetime | None = None
    notifications: list[tuple[str, Any]] = field(default_factory=list)


class InMemoryEditor:
    """Tree owner holding the whole document in memory.

    Example:
        >>> editor = InMemoryEditor()
        >>> editor.get_selected_page().name
        'index'
        >>> editor.get_root().children
        []
    """

    def __init__(
        self,
        document_id: str | None = None,
        data_sources: list[DataSource] | None = None,
        capabilities: EditorCapabilities | None = None,
        devices: tuple[Device, ...] = DEFAULT_DEVICES,
        blocks: tuple[Block, ...] = DEFAULT_BLOCKS,
    ):
        self._document_id = document_id or uuid4().hex[:12]
        self._data_sources = list(data_sources or [])
        self._capabilities = capabilities or EditorCapabilities(
            data_sources=bool(self._data_sources)
        )
        self._devices = list(devices)
        self._blocks = list(blocks)
        self._selected_device_id = self._devices[0].id

        self._pages: list[Page] = []
        self._selected_page_id = ""
        self._rules: list[StyleRule] = []
        self._symbols: list[SymbolDefinition] = []
        self._site_settings: dict[str, Any] = {}
        self._selected: ComponentNode | None = None
        self._counter = 0

        self._undo: deque[_Snapshot] = deque(maxlen=HISTORY_LIMIT)
        self._redo: deque[_Snapshot] = deque(maxlen=HISTORY_LIMIT)
        self._discard: tuple[list[_Snapshot], int] | None = None
        self._listeners: dict[str, list[Callable[[Any], None]]] = {}
        self.state = _EditorState()
        self.notification_sink: Callable[[str, Any], None] | None = None

        self.select_page(self.add_page("index", "index").id)

    # =========================================================================
    # Identity
    # =========================================================================

    @property
    def document_id(self) -> str:
        return self._document_id

    @property
    def capabilities(self) -> EditorCapabilities:
        return self._capabilities

    def new_id(self, prefix: str = "c") -> str:
        while True:
            self._counter += 1
            candidate = f"{prefix}-{self._counter}"
            if not self.has_id(candidate):
                return candidate

    def has_id(self, node_id: str) -> bool:
        for page in self._pages:
            if page.root.find(node_id) is not None:
                return True
        return any(s.master.find(node_id) is not None for s in self._symbols)

    # =========================================================================
    # Selection
    # =========================================================================

    def get_selected(self) -> ComponentNode | None:
        node = self._selected
        if node is None:
            return None
        root = self.get_root()
        if node is root or root.is_ancestor_of(node):
            return node
        # Detached or on another page
        self._selected = None
        return None

    def select(self, node: ComponentNode | None) -> None:
        self._selected = node

    def get_root(self) -> ComponentNode:
        return self.get_selected_page().root

    # =========================================================================
    # Pages
    # =========================================================================

    def get_pages(self) -> list[Page]:
        return list(self._pages)

    def get_page(self, page_id: str) -> Page | None:
        for page in self._pages:
            if page.id == page_id:
                return page
        return None

    def add_page(self, name: str, slug: str = "") -> Page:
        page_id = slug or name
        if self.get_page(page_id) is not None:
            page_id = self.new_id("page")
        root = ComponentNode(id=self.new_id("wrapper"), tag="body")
        page = Page(id=page_id, name=name, slug=slug or page_id, root=root)
        self._pages.append(page)
        logger.debug(f"Added page {page.id}")
        return page

    def remove_page(self, page_id: str) -> None:
        page = self.get_page(page_id)
        if page is None:
            raise KeyError(page_id)
        self._pages.remove(page)
        if self._selected_page_id == page_id and self._pages:
            self.select_page(self._pages[0].id)

    def select_page(self, page_id: str) -> None:
        if self.get_page(page_id) is None:
            raise KeyError(page_id)
        if page_id != self._selected_page_id:
            self._selected = None
        self._selected_page_id = page_id

    def get_selected_page(self) -> Page:
        page = self.get_page(self._selected_page_id)
        if page is None:
            raise RuntimeError("No page selected")
        return page

    # =========================================================================
    # Devices
    # =========================================================================

    def get_devices(self) -> list[Device]:
        return list(self._devices)

    def get_device(self, device_id: str) -> Device | None:
        for device in self._devices:
            if device.id == device_id:
                return device
        return None

    def select_device(self, device_id: str) -> None:
        if self.get_device(device_id) is None:
            raise KeyError(device_id)
        self._selected_device_id = device_id

    def get_selected_device(self) -> Device:
        device = self.get_device(self._selected_device_id)
        assert device is not None
        return device

    # =========================================================================
    # CSS rules
    # =========================================================================

    def get_rule(self, selector: str, media: str = "") -> StyleRule | None:
        for rule in self._rules:
            if rule.key == (selector, media):
                return rule
        return None

    def add_rule(self, selector: str, media: str = "") -> StyleRule:
        rule = self.get_rule(selector, media)
        if rule is None:
            rule = StyleRule(selector=selector, media=media)
            self._rules.append(rule)
        return rule

    def remove_rule(self, selector: str, media: str = "") -> bool:
        rule = self.get_rule(selector, media)
        if rule is None:
            return False
        self._rules.remove(rule)
        return True

    def get_rules(self, selector: str | None = None) -> list[StyleRule]:
        if selector is None:
            return list(self._rules)
        return [r for r in self._rules if r.selector == selector]

    # =========================================================================
    # Symbols
    # =========================================================================

    def get_symbols(self) -> list[SymbolDefinition]:
        return list(self._symbols)

    def add_symbol(self, definition: SymbolDefinition) -> None:
        self._symbols.append(definition)

    def remove_symbol(self, symbol_id: str) -> None:
        self._symbols[:] = [s for s in self._symbols if s.id != symbol_id]

    def symbol_collection(self) -> list[SymbolDefinition]:
        return self._symbols

    # =========================================================================
    # Blocks
    # =========================================================================

    def get_blocks(self) -> list[Block]:
        return list(self._blocks)

    def add_block(self, block: Block) -> None:
        self._blocks = [b for b in self._blocks if b.id != block.id] + [block]

    # =========================================================================
    # Data sources and settings
    # =========================================================================

    def get_data_sources(self) -> list[DataSource]:
        return list(self._data_sources)

    def get_site_settings(self) -> dict[str, Any]:
        return self._site_settings

    # =========================================================================
    # History
    # =========================================================================

    def _snapshot(self) -> _Snapshot:
        selected = self.get_selected()
        return _Snapshot(
            pages=[
                Page(
                    id=p.id,
                    name=p.name,
                    slug=p.slug,
                    settings=dict(p.settings),
                    root=p.root.clone(),
                )
                for p in self._pages
            ],
            selected_page_id=self._selected_page_id,
            rules=[
                StyleRule(r.selector, r.media, dict(r.declarations))
                for r in self._rules
            ],
            symbols=[
                SymbolDefinition(s.id, s.label, s.master.clone(), s.icon)
                for s in self._symbols
            ],
            site_settings=dict(self._site_settings),
            selected_id=selected.id if selected else None,
        )

    def _restore(self, snapshot: _Snapshot) -> None:
        self._pages = snapshot.pages
        self._selected_page_id = snapshot.selected_page_id
        self._rules = snapshot.rules
        self._symbols = snapshot.symbols
        self._site_settings = snapshot.site_settings
        self._selected = (
            self.get_root().find(snapshot.selected_id) if snapshot.selected_id else None
        )

    def checkpoint(self, label: str = "") -> None:
        self._discard = (list(self._redo), self.state.changes)
        self._undo.append(self._snapshot())
        self._redo.clear()
        self.state.changes += 1
        logger.debug(f"Checkpoint {label or '(unnamed)'} ({len(self._undo)} undo steps)")
        self.emit("change:changesCount", self.state.changes)

    def discard_checkpoint(self) -> None:
        if self._discard is None or not self._undo:
            return
        redo, changes = self._discard
        self._discard = None
        self._undo.pop()
        self._redo.extend(redo)
        self.state.changes = changes
        logger.debug(f"Discarded checkpoint ({len(self._undo)} undo steps)")
        self.emit("change:changesCount", self.state.changes)

    def undo(self) -> bool:
        self._discard = None
        if not self._undo:
            return False
        self._redo.append(self._snapshot())
        self._restore(self._undo.pop())
        return True

    def redo(self) -> bool:
        self._discard = None
        if not self._redo:
            return False
        self._undo.append(self._snapshot())
        self._restore(self._redo.pop())
        return True

    def store(self) -> None:
        self.state.saved_at = datetime.now(UTC)
        self.state.changes = 0
        logger.info(f"Stored document {self._document_id}")

    # =========================================================================
    # Commands
    # =========================================================================

    def run_command(self, name: str, **options: Any) -> Any:
        if name not in KNOWN_COMMANDS:
            raise KeyError(f"Unknown command: {name}")
        self.state.preview_enabled = name.endswith(":activate")
        return {"command": name, "preview_enabled": self.state.preview_enabled}

    def navigate(self, url: str) -> None:
        self.state.url = url
        logger.info(f"Navigated to {url}")

    def evaluate(self, code: str) -> Any:
        raise NotImplementedError("InMemoryEditor cannot evaluate code")

    # =========================================================================
    # Events
    # =========================================================================

    def on(self, event: str, callback: Callable[[Any], None]) -> Callable[[], None]:
        self._listeners.setdefault(event, []).append(callback)

        def unsubscribe() -> None:
            listeners = self._listeners.get(event, [])
            if callback in listeners:
                listeners.remove(callback)

        return unsubscribe

    def emit(self, event: str, payload: Any = None) -> None:
        """Deliver an inbound event to subscribers."""
        for callback in list(self._listeners.get(event, [])):
            callback(payload)

    def notify(self, event: str, payload: Any = None) -> None:
        self.state.notifications.append((event, payload))
        if self.notification_sink is not None:
            self.notification_sink(event, payload)


__all__ = ["InMemoryEditor", "DEFAULT_DEVICES", "KNOWN_COMMANDS"]
