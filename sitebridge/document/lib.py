"""Page, device, site settings and editor operations.

These nouns act on the document's collections rather than on its
component tree: the page list, the responsive breakpoints, the site-wide
settings map and the editor's history, persistence and evaluation hooks.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from sitebridge.core import get_logger
from sitebridge.editor import Page, TreeOwner
from sitebridge.errors import NotFoundError, UnsupportedOperationError, ValidationError
from sitebridge.session import Session
from sitebridge.validation import Outcome, check_page_names, validate_settings

logger = get_logger("document")


def merge_settings(target: dict[str, Any], changes: dict[str, Any]) -> None:
    """Merge validated settings; None values delete keys."""
    for key, value in changes.items():
        if value is None:
            target.pop(key, None)
        else:
            target[key] = value


class PageAccessor:
    """Operations for the ``page`` noun."""

    def __init__(self, session: Session):
        self.session = session

    @property
    def owner(self) -> TreeOwner:
        return self.session.owner

    def _find(self, page_id: str) -> Page:
        """Find a page by id, falling back to its name."""
        page = self.owner.get_page(page_id)
        if page is None:
            page = next((p for p in self.owner.get_pages() if p.name == page_id), None)
        if page is None:
            raise NotFoundError(
                f"Page '{page_id}' not found",
                available=[p.id for p in self.owner.get_pages()],
            )
        return page

    def list(self) -> Outcome:
        pages = self.owner.get_pages()
        selected = self.session.page.id
        return Outcome(
            data={
                "pages": [
                    {**page.to_dict(), "selected": page.id == selected}
                    for page in pages
                ]
            },
            warnings=check_page_names(pages),
        )

    def add(self, name: str, slug: str | None = None) -> Outcome:
        """Add a page and select it."""
        name = (name or "").strip()
        if not name:
            raise ValidationError("name must not be empty")
        page = self.owner.add_page(name, (slug or "").strip())
        self.owner.select_page(page.id)
        self.session.select(None)
        return Outcome(
            data={"page": page.to_dict()},
            warnings=check_page_names(self.owner.get_pages()),
        )

    def select(self, page_id: str) -> Outcome:
        page = self._find(page_id)
        if page.id != self.session.page.id:
            self.owner.select_page(page.id)
            self.session.select(None)
        return Outcome(data={"page": page.to_dict()})

    def remove(self, page_id: str) -> Outcome:
        page = self._find(page_id)
        if len(self.owner.get_pages()) == 1:
            raise ValidationError("Cannot remove the last page")
        self.owner.remove_page(page.id)
        self.session.select(self.owner.get_selected())
        return Outcome(
            data={"removed": page.id, "selected": self.session.page.id},
            warnings=check_page_names(self.owner.get_pages()),
        )

    def rename(self, name: str, page_id: str | None = None) -> Outcome:
        page = self._find(page_id) if page_id else self.session.page
        name = (name or "").strip()
        if not name:
            raise ValidationError("name must not be empty")
        page.name = name
        return Outcome(
            data={"page": page.to_dict()},
            warnings=check_page_names(self.owner.get_pages()),
        )

    def update_settings(
        self, settings: dict[str, Any], page_id: str | None = None
    ) -> Outcome:
        page = self._find(page_id) if page_id else self.session.page
        merge_settings(page.settings, validate_settings(settings))
        return Outcome(data={"page": page.to_dict()})


class DeviceAccessor:
    """Operations for the ``device`` noun."""

    def __init__(self, session: Session):
        self.session = session

    def list(self) -> Outcome:
        selected = self.session.device.id
        return Outcome(
            data={
                "devices": [
                    {**device.to_dict(), "selected": device.id == selected}
                    for device in self.session.owner.get_devices()
                ]
            }
        )

    def set(self, name: str) -> Outcome:
        """Select a device by id or name (case-insensitive)."""
        wanted = (name or "").strip().lower()
        devices = self.session.owner.get_devices()
        device = next(
            (d for d in devices if wanted in (d.id.lower(), d.name.lower())), None
        )
        if device is None:
            raise NotFoundError(
                f"Device '{name}' not found", available=[d.name for d in devices]
            )
        self.session.owner.select_device(device.id)
        return Outcome(data={"device": device.to_dict()})


class SiteSettingsAccessor:
    """Operations for the ``site_settings`` noun."""

    def __init__(self, session: Session):
        self.session = session

    def get(self) -> Outcome:
        return Outcome(data={"settings": dict(self.session.owner.get_site_settings())})

    def set(self, settings: dict[str, Any]) -> Outcome:
        current = self.session.owner.get_site_settings()
        merge_settings(current, validate_settings(settings))
        return Outcome(data={"settings": dict(current)})


class EditorAccessor:
    """Operations for the ``editor`` and ``eval`` nouns."""

    def __init__(self, session: Session):
        self.session = session

    @property
    def owner(self) -> TreeOwner:
        return self.session.owner

    def save(self) -> Outcome:
        self.owner.store()
        return Outcome(data={"saved": True})

    def _resync(self) -> None:
        # History restores may replace the selected node
        self.session.select(self.owner.get_selected())

    def undo(self) -> Outcome:
        done = self.owner.undo()
        self._resync()
        return Outcome(
            data={"undone": done},
            warnings=[] if done else ["Nothing to undo"],
        )

    def redo(self) -> Outcome:
        done = self.owner.redo()
        self._resync()
        return Outcome(
            data={"redone": done},
            warnings=[] if done else ["Nothing to redo"],
        )

    def run(self, code: str, output_file: str | None = None) -> Outcome:
        """Evaluate code in the editor.

        With ``output_file`` the result is written to disk and only its
        location is returned.
        """
        try:
            result = self.owner.evaluate(code)
        except NotImplementedError as e:
            raise UnsupportedOperationError(str(e), capability="evaluate") from None
        if output_file is None:
            return Outcome(data={"result": result})
        text = result if isinstance(result, str) else json.dumps(result, default=str, indent=2)
        path = Path(output_file)
        path.write_text(text, encoding="utf-8")
        logger.info(f"Wrote eval result to {path}")
        return Outcome(data={"output_file": str(path), "bytes": len(text.encode("utf-8"))})


__all__ = [
    "PageAccessor",
    "DeviceAccessor",
    "SiteSettingsAccessor",
    "EditorAccessor",
    "merge_settings",
]
