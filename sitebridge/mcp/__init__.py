"""MCP (Model Context Protocol) server for sitebridge.

This module provides the MCP server implementation that exposes the
editor bridge to LLM clients.

Example:
    # Start server in STDIO mode
    >>> from sitebridge.mcp import run_server
    >>> run_server()

    # Start server in HTTP mode
    >>> from sitebridge.mcp import run_server, TransportType
    >>> run_server(transport=TransportType.HTTP, port=6807)

    # Create server for testing against a custom bridge
    >>> from sitebridge.mcp import create_bridge, create_server
    >>> server = create_server(create_bridge(website_id="site-1"))

Available Tools:
    - website, page, component, selector, style, symbol, device,
      site_settings, cms, editor, eval_code, feedback: one per noun
    - status: Editor and site API health
    - help: Usage topics
"""

from .lib import (
    ServerConfig,
    TransportType,
    create_bridge,
    get_server_capabilities,
    get_server_version,
)
from .server import configure, create_server, get_bridge, mcp, run_server

__all__ = [
    # Server instance
    "mcp",
    "create_server",
    "run_server",
    "configure",
    "get_bridge",
    # Configuration
    "ServerConfig",
    "TransportType",
    "create_bridge",
    # Utilities
    "get_server_version",
    "get_server_capabilities",
]
