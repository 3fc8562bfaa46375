"""Unit tests for health checking module."""

import httpx
import pytest

from sitebridge.editor import ComponentNode
from sitebridge.website import SiteClient

from .health import (
    HealthStatus,
    ServiceStatus,
    check_editor,
    check_feedback_log,
    check_site_api,
    format_startup_banner,
    get_server_health,
)


def _refuse(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("Connection refused")


class TestHealthStatus:
    """Tests for HealthStatus enum."""

    @pytest.mark.unit
    def test_status_is_string_enum(self):
        """HealthStatus inherits from str for JSON serialization."""
        assert isinstance(HealthStatus.HEALTHY, str)
        assert HealthStatus.DEGRADED == "degraded"


class TestServiceStatus:
    """Tests for ServiceStatus dataclass."""

    @pytest.mark.unit
    def test_to_dict_flattens_details(self):
        status = ServiceStatus(True, "OK", {"url": "http://localhost:6805"})

        assert status.to_dict() == {
            "available": True,
            "message": "OK",
            "url": "http://localhost:6805",
        }


class TestCheckEditor:
    """Tests for check_editor function."""

    @pytest.mark.unit
    def test_ready(self, site_bridge):
        status = check_editor(site_bridge)

        assert status.available is True
        assert status.details["document_id"] == "doc-test"

    @pytest.mark.unit
    def test_not_ready(self, site_bridge):
        site_bridge.ready.clear()

        assert check_editor(site_bridge).available is False

    @pytest.mark.unit
    def test_closed(self, site_bridge, editor):
        """A closed editor window is reported as such."""
        editor.emit("close")

        status = check_editor(site_bridge)

        assert status.available is False
        assert "closed" in status.message

    @pytest.mark.unit
    def test_structural_issues_reported(self, site_bridge, editor):
        """Duplicate ids in the document are listed in the details."""
        root = editor.get_root()
        root.append(ComponentNode(id="twin"))
        root.append(ComponentNode(id="twin"))

        status = check_editor(site_bridge)

        assert status.available is True
        assert status.details["issues"] == ["Duplicate ID 'twin' appears 2 times"]


class TestCheckSiteApi:
    """Tests for check_site_api function."""

    @pytest.mark.unit
    def test_reachable(self, site_bridge):
        status = check_site_api(site_bridge)

        assert status.available is True
        assert status.details["url"] == "http://site.test"

    @pytest.mark.unit
    def test_unreachable(self, site_bridge):
        site_bridge.dispatcher.site_client = SiteClient(
            "http://site.test", transport=httpx.MockTransport(_refuse)
        )

        status = check_site_api(site_bridge)

        assert status.available is False
        assert "SITE_API_URL" in status.message


class TestCheckFeedbackLog:
    """Tests for check_feedback_log function."""

    @pytest.mark.unit
    def test_missing_file_is_writable(self, site_bridge, feedback_path):
        """The log does not need to exist yet."""
        status = check_feedback_log(site_bridge)

        assert status.available is True
        assert status.details == {"path": str(feedback_path), "exists": False}


class TestGetServerHealth:
    """Tests for get_server_health function."""

    @pytest.mark.unit
    def test_healthy(self, site_bridge):
        health = get_server_health(site_bridge)

        assert health.status == HealthStatus.HEALTHY
        assert health.can_edit is True
        assert health.can_manage_websites is True

    @pytest.mark.unit
    def test_degraded_without_site_api(self, site_bridge):
        """Editing still works when the site API is down."""
        site_bridge.dispatcher.site_client = SiteClient(
            "http://site.test", transport=httpx.MockTransport(_refuse)
        )

        health = get_server_health(site_bridge)

        assert health.status == HealthStatus.DEGRADED

    @pytest.mark.unit
    def test_unhealthy_without_editor(self, site_bridge):
        site_bridge.ready.clear()

        assert get_server_health(site_bridge).status == HealthStatus.UNHEALTHY

    @pytest.mark.unit
    def test_degraded_with_structural_issues(self, site_bridge, editor):
        root = editor.get_root()
        root.append(ComponentNode(id="twin"))
        root.append(ComponentNode(id="twin"))

        assert get_server_health(site_bridge).status == HealthStatus.DEGRADED

    @pytest.mark.unit
    def test_to_dict_format(self, site_bridge):
        result = get_server_health(site_bridge).to_dict()

        assert result["status"] == "healthy"
        assert set(result["services"]) == {"editor", "site_api", "feedback_log"}
        assert result["capabilities"]["navigation"] is True
        assert result["selection"]["website_id"] == "site-1"
        assert "T" in result["checked_at"]


class TestFormatStartupBanner:
    """Tests for format_startup_banner function."""

    @pytest.mark.unit
    def test_includes_version_and_status(self, site_bridge):
        health = get_server_health(site_bridge)

        banner = format_startup_banner(health)

        assert f"v{health.version}" in banner
        assert "HEALTHY" in banner
        assert "Action Required" not in banner

    @pytest.mark.unit
    def test_lists_actions_when_degraded(self, site_bridge):
        site_bridge.ready.clear()

        banner = format_startup_banner(get_server_health(site_bridge))

        assert "Action Required" in banner
        assert "Open the editor" in banner
