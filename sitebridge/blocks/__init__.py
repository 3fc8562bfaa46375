"""Pre-built markup templates from the editor's block panel."""

from .lib import BlockAccessor

__all__ = ["BlockAccessor"]
