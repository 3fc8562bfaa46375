"""Tool call dispatch and the response envelope."""

from .lib import ACTIONS, DOCUMENT_FREE_NOUNS, ActionSpec, Dispatcher
from .models import ToolRequest, ToolResponse

__all__ = [
    "ACTIONS",
    "ActionSpec",
    "Dispatcher",
    "DOCUMENT_FREE_NOUNS",
    "ToolRequest",
    "ToolResponse",
]
