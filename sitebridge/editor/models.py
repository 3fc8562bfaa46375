"""Data models for the editor document.

This module defines the component tree, pages, devices, style rules and
symbol definitions that the tree owner holds and the accessors operate on.
"""

from __future__ import annotations

import re
import weakref
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sitebridge.errors import ValidationError

# Tags whose content is edited as rich text rather than as child components
TEXT_TAGS = frozenset(
    {
        "p",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "span",
        "a",
        "li",
        "td",
        "th",
        "label",
        "blockquote",
    }
)

# Typed attribute fields; everything else goes to the extension map
KNOWN_ATTRIBUTES = (
    "href",
    "src",
    "alt",
    "title",
    "target",
    "rel",
    "name",
    "placeholder",
    "value",
    "role",
)

MAX_EXTRA_ATTRIBUTES = 32

_ATTRIBUTE_NAME = re.compile(r"^[a-zA-Z_:][-a-zA-Z0-9_:.]*$")


class NodeType(str, Enum):
    """Declared component type."""

    TEXT = "text"
    DEFAULT = "default"


@dataclass
class NodeAttributes:
    """HTML attributes of a component.

    Known attributes are explicit fields. Custom attributes (data-*, aria-*,
    ...) live in ``extra``, bounded by MAX_EXTRA_ATTRIBUTES.
    """

    href: str | None = None
    src: str | None = None
    alt: str | None = None
    title: str | None = None
    target: str | None = None
    rel: str | None = None
    name: str | None = None
    placeholder: str | None = None
    value: str | None = None
    role: str | None = None
    extra: dict[str, str] = field(default_factory=dict)

    def get(self, name: str) -> str | None:
        if name in KNOWN_ATTRIBUTES:
            return getattr(self, name)
        return self.extra.get(name)

    def set(self, name: str, value: str | None) -> None:
        """Set or delete (value None) an attribute.

        Raises:
            ValidationError: Invalid attribute name or extension map full.
        """
        if not _ATTRIBUTE_NAME.match(name):
            raise ValidationError(f"Invalid attribute name '{name}'")
        if name in KNOWN_ATTRIBUTES:
            setattr(self, name, None if value is None else str(value))
            return
        if value is None:
            self.extra.pop(name, None)
            return
        if name not in self.extra and len(self.extra) >= MAX_EXTRA_ATTRIBUTES:
            raise ValidationError(
                f"Too many custom attributes (max {MAX_EXTRA_ATTRIBUTES})",
                attribute=name,
            )
        self.extra[name] = str(value)

    def to_dict(self) -> dict[str, str]:
        result = {
            key: getattr(self, key)
            for key in KNOWN_ATTRIBUTES
            if getattr(self, key) is not None
        }
        result.update(self.extra)
        return result

    def copy(self) -> NodeAttributes:
        known = {key: getattr(self, key) for key in KNOWN_ATTRIBUTES}
        return NodeAttributes(**known, extra=dict(self.extra))


@dataclass
class SymbolRef:
    """Link from a placed node to the symbol definition it instantiates."""

    id: str
    label: str


@dataclass
class DataState:
    """A content binding stored on a component.

    Attributes:
        id: State identifier (e.g. "innerHTML", "__data", "condition").
        label: Display label.
        tokens: Resolved expression tokens, or a single literal token.
        hidden: Hidden states are not shown in the editor UI.
    """

    id: str
    label: str
    tokens: list[dict[str, Any]] = field(default_factory=list)
    hidden: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "tokens": [dict(t) for t in self.tokens],
            "hidden": self.hidden,
        }


@dataclass(eq=False)
class ComponentNode:
    """A node of the component tree.

    Children are owned by the ``children`` list; ``parent`` is a weak
    back-reference kept in sync by insert/detach.

    Example:
        >>> root = ComponentNode(id="wrapper", tag="body")
        >>> title = ComponentNode(id="title", tag="h1", type=NodeType.TEXT)
        >>> root.insert(0, title)
        >>> title.parent is root
        True
    """

    id: str
    tag: str = "div"
    type: NodeType = NodeType.DEFAULT
    classes: list[str] = field(default_factory=list)
    attributes: NodeAttributes = field(default_factory=NodeAttributes)
    content: str | None = None
    editable: bool = False
    style: dict[str, str] = field(default_factory=dict)
    children: list[ComponentNode] = field(default_factory=list)
    symbol: SymbolRef | None = None
    public_states: list[DataState] = field(default_factory=list)
    private_states: list[DataState] = field(default_factory=list)
    condition_operator: str | None = None
    _parent: weakref.ReferenceType | None = field(
        default=None, repr=False, compare=False
    )

    # -------------------------------------------------------------------------
    # Tree structure
    # -------------------------------------------------------------------------

    @property
    def parent(self) -> ComponentNode | None:
        return self._parent() if self._parent is not None else None

    @property
    def is_text(self) -> bool:
        return self.type == NodeType.TEXT

    def index_in_parent(self) -> int:
        parent = self.parent
        if parent is None:
            return -1
        return parent.children.index(self)

    def is_ancestor_of(self, node: ComponentNode) -> bool:
        current = node.parent
        while current is not None:
            if current is self:
                return True
            current = current.parent
        return False

    def insert(self, index: int, child: ComponentNode) -> None:
        """Insert ``child`` at ``index``, detaching it from any previous parent.

        Raises:
            ValueError: The insertion would create a cycle.
        """
        if child is self or child.is_ancestor_of(self):
            raise ValueError(f"Cannot insert '{child.id}' into its own subtree")
        child.detach()
        index = max(0, min(index, len(self.children)))
        self.children.insert(index, child)
        child._parent = weakref.ref(self)

    def append(self, child: ComponentNode) -> None:
        self.insert(len(self.children), child)

    def detach(self) -> None:
        parent = self.parent
        if parent is not None:
            parent.children.remove(self)
        self._parent = None

    def walk(self) -> Iterator[ComponentNode]:
        """Yield this node and all descendants in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find(self, node_id: str) -> ComponentNode | None:
        for node in self.walk():
            if node.id == node_id:
                return node
        return None

    # -------------------------------------------------------------------------
    # Classes
    # -------------------------------------------------------------------------

    def add_class(self, name: str) -> bool:
        if name in self.classes:
            return False
        self.classes.append(name)
        return True

    def remove_class(self, name: str) -> bool:
        if name not in self.classes:
            return False
        self.classes.remove(name)
        return True

    # -------------------------------------------------------------------------
    # Copying and serialization
    # -------------------------------------------------------------------------

    def clone(self, id_factory: Callable[[ComponentNode], str] | None = None) -> ComponentNode:
        """Deep copy this subtree.

        Args:
            id_factory: Produces the id for each copied node. Ids are kept
                when omitted.
        """
        copy = ComponentNode(
            id=id_factory(self) if id_factory else self.id,
            tag=self.tag,
            type=self.type,
            classes=list(self.classes),
            attributes=self.attributes.copy(),
            content=self.content,
            editable=self.editable,
            style=dict(self.style),
            symbol=SymbolRef(self.symbol.id, self.symbol.label) if self.symbol else None,
            public_states=[_copy_state(s) for s in self.public_states],
            private_states=[_copy_state(s) for s in self.private_states],
            condition_operator=self.condition_operator,
        )
        for child in self.children:
            copy.append(child.clone(id_factory))
        return copy

    def summary(self) -> dict[str, Any]:
        """Compact description used in trees and listings."""
        result: dict[str, Any] = {
            "id": self.id,
            "tag": self.tag,
            "type": self.type.value,
        }
        if self.classes:
            result["classes"] = list(self.classes)
        if self.content:
            result["content"] = self.content[:80]
        if self.symbol:
            result["symbol"] = self.symbol.label
        return result

    def to_dict(self) -> dict[str, Any]:
        """Full description of this node, children listed by id."""
        return {
            "id": self.id,
            "tag": self.tag,
            "type": self.type.value,
            "editable": self.editable,
            "classes": list(self.classes),
            "attributes": self.attributes.to_dict(),
            "content": self.content,
            "style": dict(self.style),
            "children": [child.id for child in self.children],
            "parent_id": self.parent.id if self.parent else None,
            "symbol": {"id": self.symbol.id, "label": self.symbol.label}
            if self.symbol
            else None,
            "public_states": [s.to_dict() for s in self.public_states],
            "private_states": [s.to_dict() for s in self.private_states],
            "condition_operator": self.condition_operator,
        }


def _copy_state(state: DataState) -> DataState:
    return DataState(
        id=state.id,
        label=state.label,
        tokens=[dict(t) for t in state.tokens],
        hidden=state.hidden,
    )


@dataclass(eq=False)
class Page:
    """A page of the website, owning its own root wrapper node."""

    id: str
    name: str
    root: ComponentNode
    slug: str = ""
    settings: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "settings": dict(self.settings),
        }


@dataclass(frozen=True)
class Device:
    """A responsive breakpoint.

    Attributes:
        id: Device identifier.
        name: Display name ("Desktop", "Tablet", ...).
        width: Canvas width.
        media_width: Media query max-width; empty for the default device.
    """

    id: str
    name: str
    width: str = ""
    media_width: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "width": self.width,
            "media_width": self.media_width,
        }


@dataclass
class StyleRule:
    """CSS declarations for a selector, optionally inside a media query."""

    selector: str
    media: str = ""
    declarations: dict[str, str] = field(default_factory=dict)

    @property
    def key(self) -> tuple[str, str]:
        return (self.selector, self.media)

    def to_dict(self) -> dict[str, Any]:
        return {
            "selector": self.selector,
            "media": self.media or None,
            "style": dict(self.declarations),
        }


@dataclass(eq=False)
class SymbolDefinition:
    """A reusable component definition."""

    id: str
    label: str
    master: ComponentNode
    icon: str = "fa fa-diamond"

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "label": self.label, "icon": self.icon}


@dataclass
class Block:
    """A pre-built markup template offered by the editor's block panel."""

    id: str
    label: str
    content: str
    category: str = "Basic"

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "label": self.label, "category": self.category}


__all__ = [
    "TEXT_TAGS",
    "KNOWN_ATTRIBUTES",
    "MAX_EXTRA_ATTRIBUTES",
    "NodeType",
    "NodeAttributes",
    "SymbolRef",
    "DataState",
    "ComponentNode",
    "Page",
    "Device",
    "StyleRule",
    "SymbolDefinition",
    "Block",
]
