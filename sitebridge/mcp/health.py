"""Health checking for MCP server dependencies.

Provides centralized status checking for all server dependencies:
- Editor readiness, advertised capabilities and document structure
- Site storage API
- Feedback log location
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from sitebridge.bridge import Bridge
from sitebridge.validation import validate_pages

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    """Overall health status."""

    HEALTHY = "healthy"  # All dependencies available
    DEGRADED = "degraded"  # Editor usable, site API missing
    UNHEALTHY = "unhealthy"  # Editor not ready


@dataclass
class ServiceStatus:
    """Status of a single service/dependency."""

    available: bool
    message: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"available": self.available, "message": self.message, **self.details}


@dataclass
class ServerHealth:
    """Complete server health report."""

    status: HealthStatus
    version: str
    checked_at: datetime

    editor: ServiceStatus
    site_api: ServiceStatus
    feedback_log: ServiceStatus

    capabilities: dict[str, bool]
    selection: dict[str, Any]

    @property
    def can_edit(self) -> bool:
        return self.editor.available

    @property
    def can_manage_websites(self) -> bool:
        return self.site_api.available

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "status": self.status.value,
            "version": self.version,
            "checked_at": self.checked_at.isoformat(),
            "services": {
                "editor": self.editor.to_dict(),
                "site_api": self.site_api.to_dict(),
                "feedback_log": self.feedback_log.to_dict(),
            },
            "capabilities": self.capabilities,
            "selection": self.selection,
        }


def check_editor(bridge: Bridge) -> ServiceStatus:
    """Check if the editor accepts tool calls."""
    details = {"document_id": bridge.owner.document_id}
    if bridge.closed:
        return ServiceStatus(False, "Editor window was closed", details)
    if not bridge.ready.is_set():
        return ServiceStatus(
            False,
            f"Editor not ready (calls wait up to {bridge.ready_timeout:g}s)",
            details,
        )
    issues = validate_pages(bridge.owner.get_pages())
    if issues:
        details["issues"] = [issue.message for issue in issues[:10]]
        return ServiceStatus(
            True, f"Editor is ready; {len(issues)} structural issue(s) in the document", details
        )
    return ServiceStatus(True, "Editor is ready", details)


def check_site_api(bridge: Bridge) -> ServiceStatus:
    """Check if the site storage API responds."""
    client = bridge.dispatcher.site_client
    if client is None:
        return ServiceStatus(False, "No site API client configured")
    try:
        if client.is_available():
            return ServiceStatus(
                True, "Site API is reachable", {"url": client.base_url}
            )
        return ServiceStatus(
            False,
            "Site API not responding. Check SITE_API_URL",
            {"url": client.base_url},
        )
    except Exception as e:
        return ServiceStatus(False, f"Site API check failed: {e}")


def check_feedback_log(bridge: Bridge) -> ServiceStatus:
    """Check if feedback entries can be written."""
    path = bridge.dispatcher.feedback.path
    directory = path.parent
    while not directory.exists() and directory != directory.parent:
        directory = directory.parent
    writable = os.access(directory, os.W_OK)
    return ServiceStatus(
        available=writable,
        message="Feedback log is writable" if writable else "Feedback log is not writable",
        details={"path": str(path), "exists": path.exists()},
    )


def get_server_health(bridge: Bridge) -> ServerHealth:
    """Get comprehensive server health status.

    Args:
        bridge: Bridge serving the tool calls.

    Returns:
        ServerHealth with status of all services.
    """
    from .lib import get_server_version

    editor = check_editor(bridge)
    site_api = check_site_api(bridge)
    feedback_log = check_feedback_log(bridge)

    if not editor.available:
        status = HealthStatus.UNHEALTHY
    elif site_api.available and "issues" not in editor.details:
        status = HealthStatus.HEALTHY
    else:
        status = HealthStatus.DEGRADED

    return ServerHealth(
        status=status,
        version=get_server_version(),
        checked_at=datetime.now(UTC),
        editor=editor,
        site_api=site_api,
        feedback_log=feedback_log,
        capabilities=bridge.owner.capabilities.to_dict(),
        selection=bridge.dispatcher.session.snapshot(),
    )


def format_startup_banner(health: ServerHealth) -> str:
    """Format a startup status banner for logging.

    Args:
        health: Server health status.

    Returns:
        Formatted multi-line banner string.
    """
    status_icon = {
        HealthStatus.HEALTHY: "[OK]",
        HealthStatus.DEGRADED: "[!!]",
        HealthStatus.UNHEALTHY: "[XX]",
    }

    def svc_icon(available: bool) -> str:
        return "[OK]" if available else "[--]"

    enabled = [name for name, on in health.capabilities.items() if on]

    lines = [
        "",
        "=" * 60,
        f"  sitebridge MCP Server v{health.version}",
        "=" * 60,
        f"  Status: {status_icon[health.status]} {health.status.value.upper()}",
        "",
        "  Services:",
        f"    {svc_icon(health.editor.available)} Editor:       {health.editor.message}",
        f"    {svc_icon(health.site_api.available)} Site API:     {health.site_api.message}",
        f"    {svc_icon(health.feedback_log.available)} Feedback log: "
        f"{health.feedback_log.message}",
        "",
        f"  Editor capabilities: {', '.join(enabled) or 'none'}",
    ]

    if health.status != HealthStatus.HEALTHY:
        lines.append("")
        lines.append("  Action Required:")
        if not health.can_edit:
            lines.append("    - Open the editor and wait for it to load")
        if not health.can_manage_websites:
            lines.append("    - Start the site API or set SITE_API_URL in .env")

    lines.extend(["", "=" * 60, ""])
    return "\n".join(lines)


def log_startup_status(bridge: Bridge) -> None:
    """Log server health status on startup."""
    health = get_server_health(bridge)

    for line in format_startup_banner(health).split("\n"):
        if line.strip():
            logger.info(line)

    if health.status == HealthStatus.UNHEALTHY:
        logger.error("Server is UNHEALTHY - tool calls will wait for the editor.")
    elif health.status == HealthStatus.DEGRADED:
        logger.warning(
            "Server is DEGRADED - website management unavailable. "
            "Editing the open document works."
        )
    else:
        logger.info("Server is ready - all features available.")


__all__ = [
    "HealthStatus",
    "ServiceStatus",
    "ServerHealth",
    "check_editor",
    "check_site_api",
    "check_feedback_log",
    "get_server_health",
    "format_startup_banner",
    "log_startup_status",
]
