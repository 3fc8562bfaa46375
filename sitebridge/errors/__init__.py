"""Tool-call error taxonomy."""

from .lib import (
    BridgeError,
    NoSelectionError,
    NotFoundError,
    NotReadyError,
    SchemaResolutionError,
    StyleRejectedError,
    UnsupportedOperationError,
    ValidationError,
)

__all__ = [
    "BridgeError",
    "ValidationError",
    "NotFoundError",
    "NoSelectionError",
    "SchemaResolutionError",
    "StyleRejectedError",
    "UnsupportedOperationError",
    "NotReadyError",
]
