"""Tests for the site API client and website operations."""

import json

import httpx
import pytest

from sitebridge.errors import NotFoundError, NotReadyError, ValidationError

from .lib import SiteClient, WebsiteAccessor

BASE = "http://sites.test"


class FakeSiteApi:
    """In-memory site storage API served through httpx.MockTransport."""

    def __init__(self):
        self.websites = [{"websiteId": "default", "name": "Default"}]
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        website_id = request.url.params.get("websiteId")
        path = request.url.path
        if request.method == "GET" and path == "/api/website":
            return httpx.Response(200, json=self.websites)
        if request.method == "PUT" and path == "/api/website":
            name = json.loads(request.content or b"{}").get("name", "Untitled")
            created = {"websiteId": f"site-{len(self.websites)}", "name": name}
            self.websites.append(created)
            return httpx.Response(200, json=created)
        known = [w for w in self.websites if w["websiteId"] == website_id]
        if not known:
            return httpx.Response(404, json={"message": "not found"})
        if request.method == "DELETE":
            self.websites.remove(known[0])
            return httpx.Response(200)
        if path == "/api/website/meta":
            known[0]["name"] = json.loads(request.content)["name"]
            return httpx.Response(200)
        if path == "/api/website/duplicate":
            copy = {"websiteId": f"{website_id}-copy", "name": known[0]["name"]}
            self.websites.append(copy)
            return httpx.Response(200, json=copy)
        return httpx.Response(400, text="bad request")


@pytest.fixture
def api():
    return FakeSiteApi()


@pytest.fixture
def client(api):
    client = SiteClient(BASE, connector_id="fs-storage", transport=httpx.MockTransport(api.handler))
    yield client
    client.close()


@pytest.fixture
def websites(editor, client):
    from sitebridge.session import Session

    return WebsiteAccessor(Session(owner=editor), client)


class TestSiteClient:
    """Tests for SiteClient against the fake API."""

    @pytest.mark.unit
    def test_list(self, client):
        assert client.list_websites() == [{"websiteId": "default", "name": "Default"}]

    @pytest.mark.unit
    def test_mutations_carry_connector(self, client, api):
        client.rename("default", "Home")
        request = api.requests[-1]
        assert request.method == "POST"
        assert request.url.params["connectorId"] == "fs-storage"
        assert request.url.params["websiteId"] == "default"
        assert api.websites[0]["name"] == "Home"

    @pytest.mark.unit
    def test_404_lists_available(self, client):
        with pytest.raises(NotFoundError) as exc:
            client.delete("missing")
        assert exc.value.available == ["default"]

    @pytest.mark.unit
    def test_unreachable_is_not_ready(self):
        def refuse(request):
            raise httpx.ConnectError("Connection refused")

        client = SiteClient(BASE, transport=httpx.MockTransport(refuse))
        with pytest.raises(NotReadyError) as exc:
            client.list_websites()
        assert exc.value.to_extra()["status"] == "not_ready"

    @pytest.mark.unit
    def test_server_error_is_not_ready(self):
        client = SiteClient(BASE, transport=httpx.MockTransport(lambda r: httpx.Response(503)))
        with pytest.raises(NotReadyError):
            client.list_websites()

    @pytest.mark.unit
    def test_client_error(self):
        client = SiteClient(BASE, transport=httpx.MockTransport(lambda r: httpx.Response(400, text="nope")))
        with pytest.raises(ValidationError):
            client.create("x")


class TestWebsiteAccessor:
    """Tests for website operations."""

    @pytest.mark.unit
    def test_create_opens(self, websites, editor):
        """create opens the new website and notifies the host."""
        outcome = websites.create("Portfolio")
        assert outcome.data["website_id"] == "site-1"
        assert websites.session.website_id == "site-1"
        assert editor.state.url == f"{BASE}/?id=site-1"
        assert ("set_current_project", {"website_id": "site-1"}) in editor.state.notifications

    @pytest.mark.unit
    def test_dashboard_closes(self, websites, editor):
        websites.open("default")
        websites.dashboard()
        assert websites.session.website_id is None
        assert editor.state.url == f"{BASE}/"
        assert editor.state.notifications[-1] == ("clear_current_project", None)

    @pytest.mark.unit
    def test_delete_open_website(self, websites):
        """Deleting the open website returns to the dashboard."""
        websites.open("default")
        outcome = websites.delete("default")
        assert websites.session.website_id is None
        assert len(outcome.warnings) == 1

    @pytest.mark.unit
    def test_duplicate(self, websites, api):
        outcome = websites.duplicate("default")
        assert outcome.data["website"]["websiteId"] == "default-copy"
        assert len(api.websites) == 2

    @pytest.mark.unit
    def test_rename_empty(self, websites):
        with pytest.raises(ValidationError):
            websites.rename("default", "  ")


class TestAvailability:
    """Tests for SiteClient.is_available."""

    @pytest.mark.unit
    def test_available(self, client):
        assert client.is_available() is True

    @pytest.mark.unit
    def test_unavailable(self):
        def refuse(request):
            raise httpx.ConnectError("Connection refused")

        client = SiteClient(BASE, transport=httpx.MockTransport(refuse))
        assert client.is_available() is False
