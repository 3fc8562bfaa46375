"""sitebridge: tool bridge between LLM agents and a visual website editor."""

from sitebridge.bridge import Bridge
from sitebridge.dispatch import Dispatcher, ToolRequest, ToolResponse
from sitebridge.editor import InMemoryEditor, TreeOwner
from sitebridge.errors import BridgeError
from sitebridge.session import Session

__all__ = [
    # Editor
    "TreeOwner",
    "InMemoryEditor",
    "Session",
    # Dispatch
    "Dispatcher",
    "ToolRequest",
    "ToolResponse",
    "Bridge",
    # Errors
    "BridgeError",
]
