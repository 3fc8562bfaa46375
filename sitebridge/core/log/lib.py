"""Core logging implementation for sitebridge."""

import logging
import sys
from typing import Optional

__all__ = ["get_logger", "setup_logging", "parse_level"]


def parse_level(level: str | int) -> int:
    """Convert a level name such as "debug" to a logging level.

    Unknown names fall back to INFO.
    """
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: int | str = logging.INFO, stream=sys.stderr) -> None:
    """Configure basic logging.

    Logs go to stderr by default so the stdio MCP transport keeps stdout clean.

    Args:
        level: Logging level or level name.
        stream: Output stream.
    """
    logging.basicConfig(
        level=parse_level(level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=stream,
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Name of the logger.

    Returns:
        Logger instance.
    """
    return logging.getLogger(name or "sitebridge")
