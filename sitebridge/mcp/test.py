"""Unit tests for MCP server module.

Tests cover:
- Server configuration
- Bridge wiring
- Tool registration
- Tool functionality through the bridge
- MCP protocol round trips
"""

import pytest

from sitebridge.editor import InMemoryEditor

from .lib import (
    DEMO_DOCUMENT_ID,
    ServerConfig,
    TransportType,
    create_bridge,
    get_server_capabilities,
    get_server_version,
)
from .server import (
    _get_actions_help,
    block,
    component,
    eval_code,
    feedback,
    get_bridge,
    help,
    mcp,
    status,
    style,
)

NOUN_TOOLS = {
    "website",
    "page",
    "component",
    "block",
    "selector",
    "style",
    "symbol",
    "device",
    "site_settings",
    "cms",
    "editor",
    "eval_code",
    "feedback",
}

# =============================================================================
# Configuration Tests
# =============================================================================


class TestServerConfig:
    """Tests for ServerConfig dataclass."""

    @pytest.mark.unit
    def test_default_config(self):
        """Default config has expected values."""
        config = ServerConfig()

        assert config.name == "sitebridge"
        assert config.transport == TransportType.STDIO
        assert config.host == "127.0.0.1"
        assert config.port == 6807
        assert config.path == "/mcp"

    @pytest.mark.unit
    def test_from_env_reads_port(self, monkeypatch):
        """from_env takes the port from MCP_PORT."""
        monkeypatch.setenv("MCP_PORT", "7100")

        config = ServerConfig.from_env()

        assert config.port == 7100
        assert config.transport == TransportType.STDIO

    @pytest.mark.unit
    def test_from_env_with_transport(self):
        """from_env respects transport override."""
        config = ServerConfig.from_env(transport=TransportType.HTTP)

        assert config.transport == TransportType.HTTP


class TestTransportType:
    """Tests for TransportType enum."""

    @pytest.mark.unit
    def test_transport_from_string(self):
        """Transport can be created from string."""
        assert TransportType("stdio") == TransportType.STDIO
        assert TransportType("http") == TransportType.HTTP
        assert TransportType("sse") == TransportType.SSE


class TestServerUtilities:
    """Tests for server utility functions."""

    @pytest.mark.unit
    def test_get_server_version(self):
        """Server version is a valid semver string."""
        assert len(get_server_version().split(".")) >= 2

    @pytest.mark.unit
    def test_get_server_capabilities(self):
        caps = get_server_capabilities()

        assert caps["tools"] is True
        assert caps["prompts"] is False


# =============================================================================
# Bridge Wiring Tests
# =============================================================================


class TestCreateBridge:
    """Tests for create_bridge."""

    @pytest.mark.unit
    def test_default_demo_editor(self):
        """Without an owner the bridge drives a fresh demo editor."""
        bridge = create_bridge()

        assert isinstance(bridge.owner, InMemoryEditor)
        assert bridge.owner.document_id == DEMO_DOCUMENT_ID
        assert bridge.dispatcher.session.website_id is None
        assert bridge.dispatcher.site_client is not None

    @pytest.mark.unit
    def test_editor_events_attached(self):
        """Inbound menu-save reaches the editor."""
        editor = InMemoryEditor(document_id="doc-events")
        create_bridge(owner=editor, website_id="site-1")

        editor.emit("menu-save")

        assert editor.state.saved_at is not None


# =============================================================================
# Server Instance Tests
# =============================================================================


class TestServerInstance:
    """Tests for FastMCP server instance."""

    @pytest.mark.unit
    def test_create_server_returns_mcp(self, mcp_server, site_bridge):
        """create_server returns the mcp instance bound to the bridge."""
        assert mcp_server is mcp
        assert get_bridge() is site_bridge

    @pytest.mark.unit
    def test_server_has_name(self):
        assert mcp.name == "sitebridge"


class TestToolRegistration:
    """Tests for MCP tool registration."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_one_tool_per_noun(self):
        """Every noun has a tool, plus status and help."""
        tool_names = set((await mcp.get_tools()).keys())

        assert tool_names == NOUN_TOOLS | {"status", "help"}


# =============================================================================
# Tool Functionality Tests (Unit level - no MCP protocol)
# =============================================================================


class TestNounTools:
    """Tests for noun tools forwarding to the bridge."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_add_component(self, mcp_server, editor):
        """component add creates nodes and reports the selection."""
        result = await component.fn(action="add", html="<h1>Hello</h1>")

        assert result["success"] is True
        created = result["data"]["created"]
        assert result["data"]["selection"]["component_id"] == created[0]
        assert editor.get_root().children[0].id == created[0]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_insert_block(self, mcp_server, editor):
        listed = await block.fn(action="list")
        assert "section" in [b["id"] for b in listed["data"]["blocks"]]

        result = await block.fn(action="insert", block_id="section")

        assert result["success"] is True
        assert editor.get_root().children[0].tag == "section"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_none_params_are_dropped(self, mcp_server):
        """Unset optional parameters do not trigger unknown-param warnings."""
        result = await component.fn(action="get_tree")

        assert result["success"] is True
        assert "warnings" not in result
        assert "error" not in result

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failure_envelope(self, mcp_server):
        """Domain errors come back as envelopes with a type."""
        result = await style.fn(action="set", selector=".missing")

        assert result["success"] is False
        assert result["extra"]["type"] == "NoSelectionError"
        assert "data" not in result

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unknown_action(self, mcp_server):
        result = await component.fn(action="explode")

        assert result["success"] is False
        assert "get_tree" in result["extra"]["valid"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_eval_needs_capability(self, mcp_server):
        """eval_code maps onto eval.run and is gated by the editor."""
        result = await eval_code.fn(code="1 + 1")

        assert result["success"] is False
        assert result["extra"]["capability"] == "evaluate"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_feedback_report(self, mcp_server, feedback_path):
        result = await feedback.fn(action="report", description="Tree too shallow")

        assert result["success"] is True
        assert feedback_path.exists()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_not_ready(self, mcp_server, site_bridge):
        """A call that times out waiting for the editor reports not_ready."""
        site_bridge.ready.clear()
        site_bridge.ready_timeout = 0.01

        result = await component.fn(action="get_tree")

        assert result["success"] is False
        assert result["extra"]["status"] == "not_ready"


class TestStatusTool:
    """Tests for status tool logic."""

    @pytest.mark.unit
    def test_status_healthy(self, mcp_server):
        """Ready editor and reachable site API is healthy."""
        result = status.fn()

        assert result["status"] == "healthy"
        assert set(result["services"]) == {"editor", "site_api", "feedback_log"}
        assert result["capabilities"]["history"] is True
        assert result["selection"]["website_id"] == "site-1"
        assert "action_required" not in result

    @pytest.mark.unit
    def test_status_unhealthy(self, mcp_server, site_bridge):
        site_bridge.ready.clear()

        result = status.fn()

        assert result["status"] == "unhealthy"
        assert result["action_required"]


class TestHelpTool:
    """Tests for help tool."""

    @pytest.mark.unit
    def test_lists_topics(self):
        result = help.fn()

        assert "workflow" in result["available_topics"]
        assert "actions" in result["available_topics"]

    @pytest.mark.unit
    def test_unknown_topic(self):
        result = help.fn(topic="nope")

        assert "error" in result

    @pytest.mark.unit
    def test_actions_reference(self):
        """The action reference is generated from the dispatch table."""
        content = _get_actions_help()

        assert "### eval_code" in content
        assert "`add`(html*, position)" in content
        assert "[needs data_sources]" in content


# =============================================================================
# MCP Protocol Integration Tests (require async)
# =============================================================================


@pytest.mark.mcp
class TestMCPProtocol:
    """Integration tests using MCP client protocol."""

    @pytest.mark.asyncio
    async def test_client_can_list_tools(self, mcp_client):
        tools = await mcp_client.list_tools()

        tool_names = {t.name for t in tools}
        assert NOUN_TOOLS <= tool_names
        assert "status" in tool_names

    @pytest.mark.asyncio
    async def test_client_can_call_status(self, mcp_client):
        result = await mcp_client.call_tool("status", {})

        assert result.structured_content["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_add_then_read_tree(self, mcp_client):
        """A component added through the protocol shows up in the tree."""
        added = await mcp_client.call_tool(
            "component", {"action": "add", "html": "<p class='lead'>Hi</p>"}
        )
        created = added.structured_content["data"]["created"]

        tree = await mcp_client.call_tool("component", {"action": "get_tree"})

        children = tree.structured_content["data"]["tree"]["children"]
        assert [child["id"] for child in children] == created

    @pytest.mark.asyncio
    async def test_website_list(self, mcp_client):
        result = await mcp_client.call_tool("website", {"action": "list"})

        data = result.structured_content["data"]
        assert [w["websiteId"] for w in data["websites"]] == ["site-1", "site-2"]
        assert data["open"] == "site-1"
