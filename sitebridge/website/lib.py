"""Site storage API client and the ``website`` noun.

Websites live in the site storage service, not in the editor document.
``SiteClient`` wraps its HTTP API; ``WebsiteAccessor`` combines those calls
with editor navigation and the session's open-website state.
"""

from __future__ import annotations

from typing import Any

import httpx

from sitebridge.config import EnvVar, get_environment, get_site_url
from sitebridge.core import get_logger
from sitebridge.errors import NotFoundError, NotReadyError, ValidationError
from sitebridge.session import Session
from sitebridge.validation import Outcome

logger = get_logger("website")


def website_id_of(meta: dict[str, Any]) -> str | None:
    """Id of a website metadata record."""
    return meta.get("websiteId") or meta.get("id")


class SiteClient:
    """HTTP client for the site storage API.

    Example:
        >>> client = SiteClient("http://localhost:6805")
        >>> [website_id_of(w) for w in client.list_websites()]
        ['default']

    Attributes:
        base_url: Site API URL without a trailing slash.
        connector_id: Storage connector passed with every mutation.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str | None = None,
        connector_id: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = get_site_url(base_url)
        self.connector_id = get_environment(EnvVar.SITE_CONNECTOR_ID, override=connector_id)
        self.timeout = get_environment(EnvVar.SITE_API_TIMEOUT, override=timeout)
        self._client = httpx.Client(
            base_url=self.base_url, timeout=self.timeout, transport=transport
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "SiteClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def is_available(self) -> bool:
        """Check if the site API is reachable.

        Returns:
            True if the website listing responds with 200, False otherwise.
        """
        try:
            response = self._client.get("/api/website", timeout=5.0)
            return response.status_code == 200
        except (httpx.RequestError, httpx.TimeoutException):
            return False

    def _request(
        self,
        method: str,
        path: str,
        website_id: str | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send a request and map failures onto the error taxonomy.

        Raises:
            NotReadyError: The API is unreachable or failing (5xx).
            NotFoundError: 404, with the known website ids.
            ValidationError: Any other 4xx.
        """
        params: dict[str, str] = {}
        if website_id is not None:
            params["websiteId"] = website_id
        if method != "GET":
            params["connectorId"] = self.connector_id
        try:
            response = self._client.request(method, path, params=params, json=json)
        except httpx.TimeoutException as e:
            raise NotReadyError(f"Site API timed out: {e}", url=self.base_url) from e
        except httpx.RequestError as e:
            raise NotReadyError(f"Site API unreachable: {e}", url=self.base_url) from e

        if response.status_code == 404:
            raise NotFoundError(
                f"Website '{website_id}' not found",
                available=self._available_ids(),
            )
        if response.status_code >= 500:
            raise NotReadyError(
                f"Site API returned {response.status_code}",
                status_code=response.status_code,
            )
        if response.status_code >= 400:
            raise ValidationError(
                f"Site API rejected the request ({response.status_code}): "
                f"{response.text[:500]}",
                status_code=response.status_code,
            )
        return response

    def _available_ids(self) -> list[str]:
        try:
            return [
                website_id
                for website_id in map(website_id_of, self.list_websites())
                if website_id
            ]
        except (NotReadyError, NotFoundError, ValidationError):
            return []

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {"body": response.text[:500]}

    def list_websites(self) -> list[dict[str, Any]]:
        response = self._request("GET", "/api/website")
        data = self._json(response)
        return data if isinstance(data, list) else []

    def create(self, name: str | None = None) -> dict[str, Any]:
        body = {"name": name} if name else {}
        return self._json(self._request("PUT", "/api/website", json=body))

    def delete(self, website_id: str) -> None:
        self._request("DELETE", "/api/website", website_id=website_id)

    def rename(self, website_id: str, name: str) -> None:
        self._request("POST", "/api/website/meta", website_id=website_id, json={"name": name})

    def duplicate(self, website_id: str) -> dict[str, Any]:
        return self._json(
            self._request("POST", "/api/website/duplicate", website_id=website_id)
        )


class WebsiteAccessor:
    """Operations for the ``website`` noun."""

    def __init__(self, session: Session, client: SiteClient):
        self.session = session
        self.client = client

    def _navigate(self, path: str) -> str:
        url = f"{self.client.base_url}{path}"
        self.session.owner.navigate(url)
        return url

    def list(self) -> Outcome:
        websites = self.client.list_websites()
        return Outcome(data={"websites": websites, "open": self.session.website_id})

    def create(self, name: str | None = None) -> Outcome:
        """Create a website and open it."""
        created = self.client.create(name)
        website_id = website_id_of(created)
        if not website_id:
            return Outcome(
                data={"website": created},
                warnings=["The site API did not return a website id; open it manually"],
            )
        opened = self.open(website_id)
        opened.data["website"] = created
        return opened

    def delete(self, website_id: str) -> Outcome:
        self.client.delete(website_id)
        warnings = []
        if self.session.website_id == website_id:
            self.dashboard()
            warnings.append("The open website was deleted; returned to the dashboard")
        return Outcome(data={"deleted": website_id}, warnings=warnings)

    def rename(self, website_id: str, name: str) -> Outcome:
        if not name.strip():
            raise ValidationError("name must not be empty")
        self.client.rename(website_id, name.strip())
        return Outcome(data={"website_id": website_id, "name": name.strip()})

    def duplicate(self, website_id: str) -> Outcome:
        copy = self.client.duplicate(website_id)
        return Outcome(data={"source_id": website_id, "website": copy})

    def open(self, website_id: str) -> Outcome:
        """Open a website in the editor and make it the session's website."""
        if not website_id:
            raise ValidationError("website_id must not be empty")
        url = self._navigate(f"/?id={website_id}")
        self.session.website_id = website_id
        self.session.select(None)
        self.session.owner.notify("set_current_project", {"website_id": website_id})
        logger.info(f"Opened website {website_id}")
        return Outcome(data={"website_id": website_id, "url": url})

    def dashboard(self) -> Outcome:
        url = self._navigate("/")
        self.session.website_id = None
        self.session.active_selector = None
        self.session.owner.notify("clear_current_project", None)
        return Outcome(data={"url": url})


__all__ = ["SiteClient", "WebsiteAccessor", "website_id_of"]
