"""Site storage API client and website operations."""

from .lib import SiteClient, WebsiteAccessor, website_id_of

__all__ = ["SiteClient", "WebsiteAccessor", "website_id_of"]
