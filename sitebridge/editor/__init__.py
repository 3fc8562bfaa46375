"""Editor document model and tree owner capability surface.

Example:
    >>> from sitebridge.editor import InMemoryEditor
    >>> editor = InMemoryEditor()
    >>> [p.id for p in editor.get_pages()]
    ['index']
    >>> editor.get_selected_device().name
    'Desktop'
"""

from .memory import DEFAULT_BLOCKS, DEFAULT_DEVICES, KNOWN_COMMANDS, InMemoryEditor
from .models import (
    Block,
    KNOWN_ATTRIBUTES,
    MAX_EXTRA_ATTRIBUTES,
    TEXT_TAGS,
    ComponentNode,
    DataState,
    Device,
    NodeAttributes,
    NodeType,
    Page,
    StyleRule,
    SymbolDefinition,
    SymbolRef,
)
from .protocol import INBOUND_EVENTS, OUTBOUND_EVENTS, EditorCapabilities, TreeOwner
from .schema import DataSource, FieldKind, SchemaField, SchemaType, Token

__all__ = [
    # Owner
    "TreeOwner",
    "EditorCapabilities",
    "InMemoryEditor",
    "DEFAULT_DEVICES",
    "DEFAULT_BLOCKS",
    "KNOWN_COMMANDS",
    "INBOUND_EVENTS",
    "OUTBOUND_EVENTS",
    # Tree models
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
    # Schema models
    "FieldKind",
    "SchemaField",
    "SchemaType",
    "DataSource",
    "Token",
]
