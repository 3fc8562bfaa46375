"""Core MCP server logic for sitebridge.

Provides configuration for the MCP server and the factory that wires an
editor session, dispatcher and bridge together.
"""

from dataclasses import dataclass
from enum import Enum

from sitebridge.bridge import Bridge
from sitebridge.config import EnvVar, get_environment
from sitebridge.dispatch import Dispatcher
from sitebridge.editor import InMemoryEditor, TreeOwner
from sitebridge.feedback import FeedbackLog
from sitebridge.session import Session
from sitebridge.website import SiteClient

DEMO_DOCUMENT_ID = "demo"


class TransportType(str, Enum):
    """Supported MCP transport types."""

    STDIO = "stdio"
    HTTP = "http"
    SSE = "sse"


@dataclass
class ServerConfig:
    """Configuration for MCP server.

    Attributes:
        name: Server display name.
        transport: Transport type for communication.
        host: Bind address for HTTP/SSE transports.
        port: Port for HTTP/SSE transports.
        path: URL path for HTTP transport.
    """

    name: str = "sitebridge"
    transport: TransportType = TransportType.STDIO
    host: str = "127.0.0.1"
    port: int = 6807
    path: str = "/mcp"

    @classmethod
    def from_env(
        cls,
        transport: TransportType | None = None,
    ) -> "ServerConfig":
        """Create config from environment variables.

        Args:
            transport: Override transport type (default: STDIO).

        Returns:
            ServerConfig with values from environment.
        """
        return cls(
            transport=transport or TransportType.STDIO,
            host=get_environment(EnvVar.MCP_HOST),
            port=get_environment(EnvVar.MCP_PORT),
        )


def create_bridge(
    owner: TreeOwner | None = None,
    website_id: str | None = None,
    site_client: SiteClient | None = None,
    feedback: FeedbackLog | None = None,
) -> Bridge:
    """Wire a bridge around an editor.

    Without an owner the bridge drives a fresh ``InMemoryEditor``, which is
    what the CLI demo server uses.

    Args:
        owner: Editor to drive.
        website_id: Website considered open at start.
        site_client: Site API client (default: configured from environment).
        feedback: Feedback log (default: configured from environment).

    Returns:
        Bridge with editor events attached.
    """
    owner = owner or InMemoryEditor(document_id=DEMO_DOCUMENT_ID)
    session = Session(owner=owner, website_id=website_id)
    dispatcher = Dispatcher(
        session,
        feedback=feedback,
        site_client=site_client or SiteClient(),
    )
    bridge = Bridge(dispatcher)
    bridge.attach()
    return bridge


def get_server_version() -> str:
    """Get server version string."""
    return "0.1.0"


def get_server_capabilities() -> dict:
    """Get server capabilities for MCP protocol.

    Returns:
        Dictionary of capability flags.
    """
    return {
        "tools": True,
        "resources": False,
        "prompts": False,
        "logging": True,
    }


__all__ = [
    "TransportType",
    "ServerConfig",
    "create_bridge",
    "get_server_version",
    "get_server_capabilities",
    "DEMO_DOCUMENT_ID",
]
