"""Content expression resolution against data source schemas."""

from .lib import is_chain_valid, resolve_expression, split_expression, tokens_to_state

__all__ = [
    "split_expression",
    "resolve_expression",
    "is_chain_valid",
    "tokens_to_state",
]
