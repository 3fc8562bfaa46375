"""Centralized environment configuration management for sitebridge.

Provides a unified interface for all environment variables with:
- Single `get_environment()` function for all configuration
- Type-safe enum with metadata (default, type, description)
- Consistent resolution: override > environment > default

Example:
    >>> from sitebridge.config import EnvVar, get_environment
    >>>
    >>> # Get values with automatic type conversion
    >>> port = get_environment(EnvVar.MCP_PORT)  # Returns int
    >>> timeout = get_environment(EnvVar.EDITOR_READY_TIMEOUT)  # Returns float
    >>>
    >>> # Override at runtime
    >>> port = get_environment(EnvVar.MCP_PORT, override=9000)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, overload

# =============================================================================
# Environment Variable Configuration
# =============================================================================


@dataclass(frozen=True)
class EnvConfig:
    """Metadata for an environment variable.

    Attributes:
        name: Environment variable name (e.g., "MCP_PORT").
        default: Default value if not set in environment.
        var_type: Python type for value conversion (str, int, float, bool, Path).
        description: Human-readable description.
        category: Grouping category for documentation.
    """

    name: str
    default: Any
    var_type: type
    description: str = ""
    category: str = "general"


class EnvVar(Enum):
    """All environment variables used by sitebridge.

    Each member contains an EnvConfig with name, default, type, and description.
    Use with `get_environment()` for type-safe access.

    Categories:
        - site: Site storage API (website list/create/open)
        - service: MCP server bind address and port
        - editor: Tree owner readiness and traversal limits
        - feedback: Feedback log persistence
        - logging: Log verbosity
    """

    # -------------------------------------------------------------------------
    # Site Storage API
    # -------------------------------------------------------------------------
    SITE_API_URL = EnvConfig(
        name="SITE_API_URL",
        default="http://localhost:6805",
        var_type=str,
        description="Base URL of the site storage API and editor",
        category="site",
    )
    SITE_CONNECTOR_ID = EnvConfig(
        name="SITE_CONNECTOR_ID",
        default="fs-storage",
        var_type=str,
        description="Storage connector used for website operations",
        category="site",
    )
    SITE_API_TIMEOUT = EnvConfig(
        name="SITE_API_TIMEOUT",
        default=10.0,
        var_type=float,
        description="HTTP timeout in seconds for site API calls",
        category="site",
    )

    # -------------------------------------------------------------------------
    # Service Configuration
    # -------------------------------------------------------------------------
    MCP_HOST = EnvConfig(
        name="MCP_HOST",
        default="127.0.0.1",
        var_type=str,
        description="MCP server bind address",
        category="service",
    )
    MCP_PORT = EnvConfig(
        name="MCP_PORT",
        default=6807,
        var_type=int,
        description="MCP server port",
        category="service",
    )

    # -------------------------------------------------------------------------
    # Editor (tree owner)
    # -------------------------------------------------------------------------
    EDITOR_READY_TIMEOUT = EnvConfig(
        name="EDITOR_READY_TIMEOUT",
        default=10.0,
        var_type=float,
        description="Seconds to wait for the editor to become ready",
        category="editor",
    )
    TREE_DEFAULT_DEPTH = EnvConfig(
        name="TREE_DEFAULT_DEPTH",
        default=2,
        var_type=int,
        description="Default depth limit for component get_tree",
        category="editor",
    )
    TREE_MAX_COMPONENTS = EnvConfig(
        name="TREE_MAX_COMPONENTS",
        default=50,
        var_type=int,
        description="Default component budget for component get_tree",
        category="editor",
    )

    # -------------------------------------------------------------------------
    # Feedback
    # -------------------------------------------------------------------------
    FEEDBACK_LOG_PATH = EnvConfig(
        name="FEEDBACK_LOG_PATH",
        default=None,  # Computed from home directory
        var_type=Path,
        description="JSON-lines file receiving feedback reports",
        category="feedback",
    )

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    SITEBRIDGE_LOG_LEVEL = EnvConfig(
        name="SITEBRIDGE_LOG_LEVEL",
        default="INFO",
        var_type=str,
        description="Log level for the CLI and server (DEBUG, INFO, WARNING)",
        category="logging",
    )


# =============================================================================
# Type Conversion Helpers
# =============================================================================


def _parse_bool(value: str) -> bool | None:
    """Parse string to boolean.

    Recognizes: true/false, 1/0, yes/no (case-insensitive).
    Returns None for unrecognized values.
    """
    normalized = value.lower().strip()
    if normalized in ("true", "1", "yes"):
        return True
    if normalized in ("false", "0", "no"):
        return False
    return None


def _convert_value(value: str | None, var_type: type, default: Any) -> Any:
    """Convert string value to target type.

    Args:
        value: Raw string value from environment (or None).
        var_type: Target Python type.
        default: Default value if conversion fails or value is None.

    Returns:
        Converted value or default.
    """
    if value is None:
        return default

    if var_type is str:
        return value

    if var_type is int:
        try:
            return int(value)
        except ValueError:
            return default

    if var_type is float:
        try:
            return float(value)
        except ValueError:
            return default

    if var_type is bool:
        result = _parse_bool(value)
        return result if result is not None else default

    if var_type is Path:
        return Path(value)

    # Unknown type, return as-is
    return value


# =============================================================================
# Main Interface
# =============================================================================


@overload
def get_environment(env_var: EnvVar, override: int) -> int: ...
@overload
def get_environment(env_var: EnvVar, override: float) -> float: ...
@overload
def get_environment(env_var: EnvVar, override: str) -> str: ...
@overload
def get_environment(env_var: EnvVar, override: bool) -> bool: ...
@overload
def get_environment(env_var: EnvVar, override: Path) -> Path: ...
@overload
def get_environment(env_var: EnvVar, override: None = None) -> Any: ...


def get_environment(env_var: EnvVar, override: Any = None) -> Any:
    """Get environment variable value with type conversion.

    Resolution priority:
        1. Explicit override parameter (highest)
        2. Environment variable value
        3. Default from EnvConfig (lowest)

    Args:
        env_var: Environment variable enum member.
        override: Optional override value (bypasses env lookup).

    Returns:
        Value converted to the appropriate type.

    Example:
        >>> get_environment(EnvVar.MCP_PORT)
        6807
        >>> get_environment(EnvVar.MCP_PORT, override=9000)
        9000
    """
    config: EnvConfig = env_var.value

    if override is not None:
        return override

    raw_value = os.environ.get(config.name)
    return _convert_value(raw_value, config.var_type, config.default)


def get_environment_info(env_var: EnvVar) -> EnvConfig:
    """Get metadata for an environment variable.

    Args:
        env_var: Environment variable enum member.

    Returns:
        EnvConfig with name, default, type, and description.
    """
    return env_var.value


# =============================================================================
# Convenience Functions
# =============================================================================


def get_site_url(override: str | None = None) -> str:
    """Get the site API base URL without a trailing slash."""
    url = override or get_environment(EnvVar.SITE_API_URL)
    return url.rstrip("/")


def get_feedback_log_path(override: Path | str | None = None) -> Path:
    """Get the feedback log file path.

    Resolution: override > FEEDBACK_LOG_PATH > ~/.sitebridge/feedback.jsonl
    """
    if override is not None:
        return Path(override)

    env_path = get_environment(EnvVar.FEEDBACK_LOG_PATH)
    if env_path:
        return env_path

    return Path.home() / ".sitebridge" / "feedback.jsonl"


def get_tree_limits() -> tuple[int, int]:
    """Get the default (depth, max_components) for component trees."""
    return (
        get_environment(EnvVar.TREE_DEFAULT_DEPTH),
        get_environment(EnvVar.TREE_MAX_COMPONENTS),
    )


def list_environment_variables(category: str | None = None) -> list[EnvVar]:
    """List all environment variables, optionally filtered by category.

    Args:
        category: Filter by category (site, service, editor, feedback, logging).
                 None returns all variables.

    Returns:
        List of EnvVar enum members.
    """
    if category is None:
        return list(EnvVar)

    return [var for var in EnvVar if var.value.category == category]


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
