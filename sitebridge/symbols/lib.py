"""Symbol registry.

Symbols are reusable component definitions. A definition owns a master
node; placements are clones of the master whose ``symbol`` reference
carries the definition id and label. Deleting a definition leaves its
placements in the tree, where they are reported as orphans.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sitebridge.core import get_logger
from sitebridge.editor import ComponentNode, SymbolDefinition, SymbolRef, TreeOwner
from sitebridge.errors import NotFoundError, ValidationError
from sitebridge.markup import parse_markup
from sitebridge.session import Session
from sitebridge.tree import build_nodes, resolve_insertion
from sitebridge.validation import Outcome, parse_position

logger = get_logger("symbols")

DEFAULT_ICON = "fa fa-diamond"


@dataclass
class SymbolLookup:
    """Result of a label search.

    Attributes:
        label: Label searched for.
        definition: Matching definition, None when only placements exist.
        page_id: Page of the first placement found (placement search only).
        component_id: First placement found (placement search only).
    """

    label: str
    definition: SymbolDefinition | None = None
    page_id: str | None = None
    component_id: str | None = None


class SymbolAccessor:
    """Operations for the ``symbol`` noun."""

    def __init__(self, session: Session):
        self.session = session

    @property
    def owner(self) -> TreeOwner:
        return self.session.owner

    def _labels(self) -> list[str]:
        return [s.label for s in self.owner.get_symbols()]

    def find_by_label(self, label: str) -> SymbolLookup | None:
        """Find a symbol by label.

        Definitions are checked first. Otherwise every page is searched for
        a placement carrying the label; the selected page and selection are
        restored afterwards, including when the search raises.
        """
        for definition in self.owner.get_symbols():
            if definition.label == label:
                return SymbolLookup(label=label, definition=definition)
        for page in self.owner.get_pages():
            with self.session.page_scope(page.id):
                for node in self.owner.get_root().walk():
                    if node.symbol is not None and node.symbol.label == label:
                        return SymbolLookup(
                            label=label, page_id=page.id, component_id=node.id
                        )
        return None

    def list(self) -> Outcome:
        """List definitions with their placements per page, plus orphans."""
        definitions = self.owner.get_symbols()
        known = {d.id for d in definitions}
        placements: dict[str, dict[str, list[str]]] = {d.id: {} for d in definitions}
        orphans: list[dict[str, str]] = []
        for page in self.owner.get_pages():
            for node in page.root.walk():
                if node.symbol is None:
                    continue
                if node.symbol.id in known:
                    placements[node.symbol.id].setdefault(page.id, []).append(node.id)
                else:
                    orphans.append(
                        {
                            "label": node.symbol.label,
                            "symbol_id": node.symbol.id,
                            "page_id": page.id,
                            "component_id": node.id,
                        }
                    )
        return Outcome(
            data={
                "symbols": [
                    {
                        **d.to_dict(),
                        "placements": placements[d.id],
                        "count": sum(len(ids) for ids in placements[d.id].values()),
                    }
                    for d in definitions
                ],
                "orphans": orphans,
            }
        )

    def create(
        self,
        label: str,
        component_id: str | None = None,
        html: str | None = None,
        icon: str | None = None,
    ) -> Outcome:
        """Create a symbol from a component or from markup.

        From a component, that node becomes the first placement. From
        markup (exactly one top-level element) the definition starts with no
        placements.

        Raises:
            ValidationError: Empty or duplicate label, both sources given, or
                markup without exactly one top-level element.
        """
        label = (label or "").strip()
        if not label:
            raise ValidationError("label must not be empty")
        if label in self._labels():
            raise ValidationError(
                f"A symbol labelled '{label}' already exists", existing=self._labels()
            )
        if component_id is not None and html is not None:
            raise ValidationError("Provide either component_id or html, not both")

        warnings: list[str] = []
        placement: ComponentNode | None = None
        if html is not None:
            parsed = parse_markup(html)
            if len(parsed.specs) != 1:
                raise ValidationError(
                    "Symbol markup must have exactly one top-level element, "
                    f"got {len(parsed.specs)}"
                )
            nodes, id_warnings = build_nodes(parsed.specs, self.owner)
            master = nodes[0]
            warnings = parsed.warnings + id_warnings
        else:
            placement = self.session.resolve_component(component_id)
            if placement is self.owner.get_root():
                raise ValidationError("The page root cannot become a symbol")
            master = placement.clone(lambda _: self.owner.new_id())
            master.symbol = None

        definition = SymbolDefinition(
            id=self.owner.new_id("symbol"),
            label=label,
            master=master,
            icon=icon or DEFAULT_ICON,
        )
        self.owner.add_symbol(definition)
        if placement is not None:
            placement.symbol = SymbolRef(definition.id, label)
        logger.debug(f"Created symbol {label} ({definition.id})")
        return Outcome(
            data={
                "symbol": definition.to_dict(),
                "placement_id": placement.id if placement else None,
            },
            warnings=warnings,
        )

    def _master(self, label: str) -> tuple[ComponentNode, SymbolRef]:
        """Master node and symbol reference to place for a label.

        Falls back to an existing placement when the label has no
        definition, so symbols known only through their instances can still
        be placed.
        """
        lookup = self.find_by_label(label)
        if lookup is None:
            raise NotFoundError(f"Symbol '{label}' not found", available=self._labels())
        if lookup.definition is not None:
            return lookup.definition.master, SymbolRef(lookup.definition.id, label)
        page = next(p for p in self.owner.get_pages() if p.id == lookup.page_id)
        placement = page.root.find(lookup.component_id)
        return placement, SymbolRef(placement.symbol.id, label)

    def _instantiate(self, master: ComponentNode, ref: SymbolRef) -> ComponentNode:
        node = master.clone(lambda _: self.owner.new_id())
        node.symbol = SymbolRef(ref.id, ref.label)
        return node

    def place(
        self,
        label: str,
        position: str | None = None,
        page_ids: list[str] | None = None,
    ) -> Outcome:
        """Place a copy of the symbol's master, positioned like ``add``.

        With ``page_ids`` the symbol is placed on each listed page.

        Raises:
            NotFoundError: Unknown label or page id (before any mutation).
        """
        master, ref = self._master(label)
        where = parse_position(position)
        placed: list[dict[str, Any]] = []

        if page_ids is None:
            parent, index = resolve_insertion(self.owner, where)
            node = self._instantiate(master, ref)
            parent.insert(index, node)
            self.session.select(node)
            placed.append(
                {
                    "page_id": self.session.page.id,
                    "component_id": node.id,
                    "parent_id": parent.id,
                    "index": index,
                }
            )
            return Outcome(data={"label": label, "placements": placed})

        if isinstance(page_ids, str):
            page_ids = [page_ids]
        if not page_ids:
            raise ValidationError("page_ids must not be empty")
        available = [page.id for page in self.owner.get_pages()]
        unknown = [page_id for page_id in page_ids if page_id not in available]
        if unknown:
            raise NotFoundError(
                f"Unknown page(s): {', '.join(unknown)}", available=available
            )
        for page_id in page_ids:
            with self.session.page_scope(page_id):
                parent, index = resolve_insertion(self.owner, where)
                node = self._instantiate(master, ref)
                parent.insert(index, node)
            placed.append(
                {
                    "page_id": page_id,
                    "component_id": node.id,
                    "parent_id": parent.id,
                    "index": index,
                }
            )
        return Outcome(data={"label": label, "placements": placed})

    def _placement_count(self, symbol_id: str) -> int:
        return sum(
            1
            for page in self.owner.get_pages()
            for node in page.root.walk()
            if node.symbol is not None and node.symbol.id == symbol_id
        )

    def delete(self, label: str) -> Outcome:
        """Delete a symbol definition; placements stay in place.

        A label known only through placements has no definition left to
        remove; the call succeeds and reports the remaining placements.

        Raises:
            NotFoundError: Unknown label.
            ValidationError: The definition could not be removed.
        """
        lookup = self.find_by_label(label)
        if lookup is None:
            raise NotFoundError(f"Symbol '{label}' not found", available=self._labels())
        if lookup.definition is None:
            page = next(p for p in self.owner.get_pages() if p.id == lookup.page_id)
            symbol_id = page.root.find(lookup.component_id).symbol.id
            kept = self._placement_count(symbol_id)
            return Outcome(
                data={"deleted": label, "symbol_id": symbol_id, "placements_kept": kept},
                warnings=[
                    f"'{label}' has no definition; {kept} placement(s) remain "
                    "as regular components"
                ],
            )

        definition = lookup.definition
        try:
            self.owner.remove_symbol(definition.id)
        except (KeyError, NotImplementedError) as e:
            logger.warning(f"Owner could not remove symbol {definition.id}: {e}")
        collection = self.owner.symbol_collection()
        if any(s.id == definition.id for s in collection):
            collection[:] = [s for s in collection if s.id != definition.id]
        if any(s.id == definition.id for s in self.owner.get_symbols()):
            raise ValidationError(f"Symbol '{label}' could not be deleted")

        kept = self._placement_count(definition.id)
        warnings = []
        if kept:
            warnings.append(
                f"{kept} placement(s) of '{label}' remain as regular components"
            )
        return Outcome(
            data={"deleted": label, "symbol_id": definition.id, "placements_kept": kept},
            warnings=warnings,
        )


__all__ = ["SymbolAccessor", "SymbolLookup", "DEFAULT_ICON"]
