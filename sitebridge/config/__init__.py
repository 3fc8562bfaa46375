"""Centralized configuration management for sitebridge.

Provides unified access to all configuration via the `get_environment()` function.

Example:
    >>> from sitebridge.config import EnvVar, get_environment
    >>>
    >>> port = get_environment(EnvVar.MCP_PORT)  # Returns int: 6807
    >>> url = get_environment(EnvVar.SITE_API_URL)  # Returns str
    >>>
    >>> # Override at runtime
    >>> port = get_environment(EnvVar.MCP_PORT, override=9000)

Environment Variable Categories:
    site: Site storage API location and connector
    service: MCP server bind address and port
    editor: Readiness timeout and tree traversal limits
    feedback: Feedback log location
    logging: Log verbosity
"""

from .lib import (
    # Core types
    EnvConfig,
    EnvVar,
    # Main interface
    get_environment,
    get_environment_info,
    get_feedback_log_path,
    get_site_url,
    get_tree_limits,
    # Introspection
    list_environment_variables,
)

__all__ = [
    # Core types
    "EnvConfig",
    "EnvVar",
    # Main interface
    "get_environment",
    "get_environment_info",
    # Convenience functions
    "get_site_url",
    "get_feedback_log_path",
    "get_tree_limits",
    # Introspection
    "list_environment_variables",
]
