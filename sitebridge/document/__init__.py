"""Page, device, site settings and editor operations."""

from .lib import (
    DeviceAccessor,
    EditorAccessor,
    PageAccessor,
    SiteSettingsAccessor,
    merge_settings,
)

__all__ = [
    "PageAccessor",
    "DeviceAccessor",
    "SiteSettingsAccessor",
    "EditorAccessor",
    "merge_settings",
]
