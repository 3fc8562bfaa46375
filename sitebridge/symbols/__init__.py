"""Reusable symbol definitions and their placements."""

from .lib import DEFAULT_ICON, SymbolAccessor, SymbolLookup

__all__ = ["SymbolAccessor", "SymbolLookup", "DEFAULT_ICON"]
