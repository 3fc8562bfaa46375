"""Explicit session context threaded through every handler.

The session wraps the tree owner and carries the state a tool call depends
on: the open website, the active selector and the current selection. It
replaces implicit global editor state with a value handlers receive as an
argument.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from sitebridge.core import get_logger
from sitebridge.editor import ComponentNode, Device, Page, TreeOwner
from sitebridge.errors import NoSelectionError, NotFoundError

logger = get_logger("session")

# Recovery calls named in NoSelectionError messages
SELECT_COMPONENT = "component(action:'select', component_id:'...')"
SELECT_SELECTOR = "selector(action:'select', selector:'.name')"
OPEN_WEBSITE = "website(action:'open', website_id:'...')"


@dataclass
class Session:
    """Per-connection editing context.

    Attributes:
        owner: Tree owner holding the document.
        website_id: Id of the open website, None on the dashboard.
        active_selector: Selector the style accessor writes to.
    """

    owner: TreeOwner
    website_id: str | None = None
    active_selector: str | None = None

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    @property
    def selected(self) -> ComponentNode | None:
        return self.owner.get_selected()

    def require_selected(self) -> ComponentNode:
        """Get the selected component.

        Raises:
            NoSelectionError: Nothing is selected.
        """
        node = self.owner.get_selected()
        if node is None:
            raise NoSelectionError("No component selected.", SELECT_COMPONENT)
        return node

    def select(self, node: ComponentNode | None) -> None:
        """Select a component and reset the active selector to its first class."""
        self.owner.select(node)
        if node is None:
            self.active_selector = None
        elif self.active_selector not in selectors_of(node):
            self.active_selector = f".{node.classes[0]}" if node.classes else None

    def resolve_component(self, component_id: str | None) -> ComponentNode:
        """Find a component by id on the current page, or fall back to the selection.

        Raises:
            NotFoundError: The id does not exist on the current page.
            NoSelectionError: No id given and nothing selected.
        """
        if component_id is None:
            return self.require_selected()
        root = self.owner.get_root()
        node = root.find(component_id)
        if node is None:
            raise NotFoundError(
                f"Component '{component_id}' not found on page "
                f"'{self.page.id}'",
                available=available_ids(root),
            )
        return node

    # -------------------------------------------------------------------------
    # Pages and devices
    # -------------------------------------------------------------------------

    @property
    def page(self) -> Page:
        return self.owner.get_selected_page()

    @property
    def device(self) -> Device:
        return self.owner.get_selected_device()

    @contextmanager
    def page_scope(self, page_id: str) -> Iterator[Page]:
        """Temporarily switch to another page.

        The previously selected page and component are restored when the
        block exits, including when it raises.

        Example:
            >>> with session.page_scope("about") as page:
            ...     hits = [n for n in page.root.walk() if n.symbol]
        """
        previous_page = self.owner.get_selected_page().id
        previous_node = self.owner.get_selected()
        previous_selector = self.active_selector
        try:
            if page_id != previous_page:
                self.owner.select_page(page_id)
            yield self.owner.get_selected_page()
        finally:
            if self.owner.get_page(previous_page) is not None:
                self.owner.select_page(previous_page)
            self.owner.select(previous_node)
            self.active_selector = previous_selector

    # -------------------------------------------------------------------------
    # Style context
    # -------------------------------------------------------------------------

    def active_rule_key(self) -> tuple[str, str]:
        """Get (selector, media) of the active style rule.

        Raises:
            NoSelectionError: No selector is active.
        """
        if not self.active_selector:
            raise NoSelectionError("No style rule is active.", SELECT_SELECTOR)
        return (self.active_selector, self.device.media_width)

    # -------------------------------------------------------------------------
    # Website
    # -------------------------------------------------------------------------

    def require_website(self) -> str:
        if not self.website_id:
            raise NoSelectionError("No website is open.", OPEN_WEBSITE)
        return self.website_id

    def snapshot(self) -> dict[str, Any]:
        """Describe the current context for responses."""
        node = self.owner.get_selected()
        return {
            "website_id": self.website_id,
            "page_id": self.page.id if self.website_id else None,
            "component_id": node.id if node else None,
            "device": self.device.name,
            "selector": self.active_selector,
        }


def selectors_of(node: ComponentNode) -> list[str]:
    """Selectors that target a component: its classes, then its id."""
    return [f".{name}" for name in node.classes] + [f"#{node.id}"]


def available_ids(root: ComponentNode, limit: int = 20) -> list[str]:
    """Component ids under ``root`` (root excluded), truncated to ``limit``."""
    ids = []
    for node in root.walk():
        if node is root:
            continue
        ids.append(node.id)
        if len(ids) >= limit:
            break
    return ids


__all__ = [
    "Session",
    "selectors_of",
    "available_ids",
    "SELECT_COMPONENT",
    "SELECT_SELECTOR",
    "OPEN_WEBSITE",
]
