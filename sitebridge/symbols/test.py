"""Tests for the symbol registry."""

from typing import get_type_hints

import pytest

from sitebridge.editor import ComponentNode, SymbolRef
from sitebridge.errors import NoSelectionError, NotFoundError, ValidationError

from .lib import DEFAULT_ICON, SymbolAccessor


@pytest.fixture
def symbols(session):
    return SymbolAccessor(session)


@pytest.fixture
def header(session):
    """A header component with a nested title, on the index page."""
    node = ComponentNode(id="header-1", tag="header", classes=["site-header"])
    node.append(ComponentNode(id="header-title", tag="h1", content="Site"))
    session.owner.get_root().append(node)
    return node


class TestCreate:
    """Tests for symbol creation."""

    @pytest.mark.unit
    def test_from_component(self, symbols, session, header):
        """The component becomes the first placement; the master is a copy."""
        outcome = symbols.create("Header", component_id="header-1")
        definition = session.owner.get_symbols()[0]
        assert outcome.data["placement_id"] == "header-1"
        assert header.symbol.id == definition.id
        assert definition.icon == DEFAULT_ICON
        assert definition.master is not header
        assert definition.master.id != "header-1"
        assert definition.master.children[0].content == "Site"

    @pytest.mark.unit
    def test_from_markup(self, symbols, session):
        """Markup creates a definition with no placement."""
        outcome = symbols.create("Footer", html="<footer><p>Bye</p></footer>", icon="fa fa-star")
        assert outcome.data["placement_id"] is None
        assert outcome.data["symbol"]["icon"] == "fa fa-star"
        assert session.owner.get_root().children == []

    @pytest.mark.unit
    def test_markup_needs_one_element(self, symbols):
        """Two top-level elements are rejected."""
        with pytest.raises(ValidationError):
            symbols.create("Pair", html="<div></div><div></div>")

    @pytest.mark.unit
    def test_duplicate_label(self, symbols):
        """Duplicate labels list the existing ones."""
        symbols.create("Footer", html="<footer></footer>")
        with pytest.raises(ValidationError) as exc:
            symbols.create("Footer", html="<footer></footer>")
        assert exc.value.extra["existing"] == ["Footer"]

    @pytest.mark.unit
    def test_requires_source(self, symbols):
        """Without html or selection there is nothing to convert."""
        with pytest.raises(NoSelectionError):
            symbols.create("Nothing")


class TestPlace:
    """Tests for symbol placement."""

    @pytest.mark.unit
    def test_after_without_selection_goes_first(self, symbols, session):
        """With no selection the placement is the root's first child."""
        session.owner.get_root().append(ComponentNode(id="existing"))
        symbols.create("Header", html="<header><h1>Hi</h1></header>")
        outcome = symbols.place("Header", position="after")
        root = session.owner.get_root()
        placed = outcome.data["placements"][0]
        assert root.children[0].id == placed["component_id"]
        assert placed["index"] == 0
        assert root.children[0].symbol.label == "Header"

    @pytest.mark.unit
    def test_fresh_ids(self, symbols, session, header):
        """Every placement gets ids distinct from the master and each other."""
        symbols.create("Header", component_id="header-1")
        first = symbols.place("Header").data["placements"][0]["component_id"]
        second = symbols.place("Header").data["placements"][0]["component_id"]
        master = session.owner.get_symbols()[0].master
        assert len({first, second, master.id, "header-1"}) == 4

    @pytest.mark.unit
    def test_multiple_pages(self, symbols, session):
        """page_ids places on each page and restores the selected page."""
        session.owner.add_page("about")
        symbols.create("Footer", html="<footer></footer>")
        outcome = symbols.place("Footer", page_ids=["index", "about"])
        assert [p["page_id"] for p in outcome.data["placements"]] == ["index", "about"]
        assert session.page.id == "index"
        about = session.owner.get_page("about")
        assert about.root.children[0].symbol.label == "Footer"

    @pytest.mark.unit
    def test_unknown_page_mutates_nothing(self, symbols, session):
        """Unknown page ids fail before anything is placed."""
        symbols.create("Footer", html="<footer></footer>")
        with pytest.raises(NotFoundError) as exc:
            symbols.place("Footer", page_ids=["index", "missing"])
        assert exc.value.available == ["index"]
        assert session.owner.get_root().children == []

    @pytest.mark.unit
    def test_unknown_label(self, symbols):
        """Unknown labels list the known ones."""
        with pytest.raises(NotFoundError):
            symbols.place("Nope")

    @pytest.mark.unit
    def test_from_placement_without_definition(self, symbols, session):
        """A label known only through a placement on another page is cloned."""
        about = session.owner.add_page("about")
        footer = ComponentNode(id="f-1", tag="footer", symbol=SymbolRef("gone", "Footer"))
        footer.append(ComponentNode(id="f-text", tag="p", content="(c)"))
        about.root.append(footer)

        outcome = symbols.place("Footer")

        placed = session.owner.get_root().children[0]
        assert outcome.data["placements"][0]["page_id"] == "index"
        assert placed.symbol.id == "gone"
        assert placed.id != "f-1"
        assert [c.content for c in placed.children] == ["(c)"]
        assert about.root.children == [footer]

    @pytest.mark.unit
    def test_list_annotations_resolve(self):
        """Methods declared after ``list`` keep their builtin annotations."""
        hints = get_type_hints(SymbolAccessor.place)
        assert hints["page_ids"] == list[str] | None


class TestListAndFind:
    """Tests for listing and the cross-page search."""

    @pytest.mark.unit
    def test_list_groups_by_page(self, symbols, session, header):
        """Placements are grouped per page; orphans reported separately."""
        symbols.create("Header", component_id="header-1")
        orphan = ComponentNode(id="old", symbol=SymbolRef("symbol-x", "Old"))
        session.owner.get_root().append(orphan)
        data = symbols.list().data
        assert data["symbols"][0]["placements"] == {"index": ["header-1"]}
        assert data["symbols"][0]["count"] == 1
        assert data["orphans"][0]["component_id"] == "old"

    @pytest.mark.unit
    def test_find_placement_on_other_page(self, symbols, session, header):
        """The search walks other pages and restores page and selection."""
        about = session.owner.add_page("about")
        about.root.append(ComponentNode(id="f-1", symbol=SymbolRef("gone", "Footer")))
        session.select(header)
        found = symbols.find_by_label("Footer")
        assert found.page_id == "about"
        assert found.component_id == "f-1"
        assert found.definition is None
        assert session.page.id == "index"
        assert session.selected is header

    @pytest.mark.unit
    def test_find_restores_page_on_error(self, symbols, session, monkeypatch):
        """The selected page is restored even when the walk raises."""
        session.owner.add_page("about")
        original = session.owner.get_root

        def failing_root():
            root = original()
            if session.owner.get_selected_page().id == "about":
                raise RuntimeError("walk failed")
            return root

        monkeypatch.setattr(session.owner, "get_root", failing_root)
        with pytest.raises(RuntimeError):
            symbols.find_by_label("Missing")
        assert session.owner.get_selected_page().id == "index"

    @pytest.mark.unit
    def test_find_missing(self, symbols):
        assert symbols.find_by_label("Missing") is None


class TestDelete:
    """Tests for symbol deletion."""

    @pytest.mark.unit
    def test_placements_kept(self, symbols, session, header):
        """Deleting the definition keeps placements with a warning."""
        symbols.create("Header", component_id="header-1")
        outcome = symbols.delete("Header")
        assert session.owner.get_symbols() == []
        assert outcome.data["placements_kept"] == 1
        assert session.owner.get_root().find("header-1") is not None
        assert len(outcome.warnings) == 1

    @pytest.mark.unit
    def test_falls_back_to_collection(self, symbols, session, monkeypatch):
        """When the owner cannot remove, the collection is edited directly."""
        symbols.create("Footer", html="<footer></footer>")

        def refuse(symbol_id):
            raise NotImplementedError

        monkeypatch.setattr(session.owner, "remove_symbol", refuse)
        symbols.delete("Footer")
        assert session.owner.get_symbols() == []

    @pytest.mark.unit
    def test_unknown(self, symbols):
        with pytest.raises(NotFoundError):
            symbols.delete("Nope")

    @pytest.mark.unit
    def test_label_without_definition(self, symbols, session):
        """Only placements exist: nothing to remove, placements reported."""
        session.owner.get_root().append(
            ComponentNode(id="f-1", symbol=SymbolRef("gone", "Footer"))
        )
        outcome = symbols.delete("Footer")
        assert outcome.data["symbol_id"] == "gone"
        assert outcome.data["placements_kept"] == 1
        assert session.owner.get_root().find("f-1") is not None
