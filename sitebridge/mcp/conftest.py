"""Pytest fixtures for MCP server tests.

This module provides:
- FASTMCP_AVAILABLE check for graceful degradation
- Automatic skipping of MCP tests when fastmcp not installed
- Bridge, server and client fixtures for protocol testing
"""

from __future__ import annotations

from typing import TYPE_CHECKING, AsyncGenerator, Generator

import httpx
import pytest

# Check if fastmcp is available
try:
    from fastmcp import Client

    FASTMCP_AVAILABLE = True
except ImportError:
    FASTMCP_AVAILABLE = False

if TYPE_CHECKING:
    from fastmcp import FastMCP

    from sitebridge.bridge import Bridge
    from sitebridge.editor import InMemoryEditor


SITE_URL = "http://site.test"
WEBSITES = [{"websiteId": "site-1", "name": "First"}, {"websiteId": "site-2"}]


# =============================================================================
# Pytest Hooks
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]):
    """Skip MCP tests if fastmcp not installed.

    Automatically adds skip marker to all tests with @pytest.mark.mcp
    when the fastmcp package is not available.
    """
    if not FASTMCP_AVAILABLE:
        skip_mcp = pytest.mark.skip(reason="fastmcp not installed")
        for item in items:
            # Check for the actual pytest marker, not just keyword
            # (package name 'mcp' is also added to keywords by pytest)
            if item.get_closest_marker("mcp") is not None:
                item.add_marker(skip_mcp)


# =============================================================================
# Bridge Fixtures
# =============================================================================


def _site_api(request: httpx.Request) -> httpx.Response:
    if request.method == "GET" and request.url.path == "/api/website":
        return httpx.Response(200, json=WEBSITES)
    return httpx.Response(200, json={})


@pytest.fixture
def site_bridge(editor: InMemoryEditor, feedback_path) -> Bridge:
    """Create a bridge over the test editor with a mocked site API."""
    from sitebridge.feedback import FeedbackLog
    from sitebridge.website import SiteClient

    from .lib import create_bridge

    return create_bridge(
        owner=editor,
        website_id="site-1",
        site_client=SiteClient(SITE_URL, transport=httpx.MockTransport(_site_api)),
        feedback=FeedbackLog(feedback_path),
    )


# =============================================================================
# Server Fixtures
# =============================================================================


@pytest.fixture
def mcp_server(site_bridge: Bridge) -> Generator[FastMCP, None, None]:
    """Create MCP server instance bound to the test bridge.

    Yields:
        Configured FastMCP server instance.

    Note:
        Skips test if fastmcp is not installed.
    """
    if not FASTMCP_AVAILABLE:
        pytest.skip("fastmcp not installed")

    from .server import configure, create_server

    yield create_server(site_bridge)
    configure(None)


@pytest.fixture
async def mcp_client(mcp_server: FastMCP) -> AsyncGenerator[Client, None]:
    """Create connected MCP client for testing.

    Args:
        mcp_server: The MCP server instance.

    Yields:
        Connected Client instance for testing.
    """
    if not FASTMCP_AVAILABLE:
        pytest.skip("fastmcp not installed")

    from fastmcp import Client

    async with Client(mcp_server) as client:
        yield client
