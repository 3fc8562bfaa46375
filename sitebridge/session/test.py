"""Tests for the session context."""

import pytest

from sitebridge.editor import ComponentNode
from sitebridge.errors import NoSelectionError, NotFoundError

from .lib import Session, available_ids, selectors_of


class TestSelection:
    """Tests for selection helpers."""

    @pytest.mark.unit
    def test_require_selected_names_recovery(self, session):
        """Missing selection names the select call."""
        with pytest.raises(NoSelectionError) as exc:
            session.require_selected()
        assert "component(action:'select'" in str(exc.value)

    @pytest.mark.unit
    def test_select_sets_first_class_selector(self, session):
        """Selecting a classed component activates its first class."""
        node = ComponentNode(id="hero", classes=["hero", "hero--dark"])
        session.owner.get_root().append(node)
        session.select(node)
        assert session.active_selector == ".hero"

    @pytest.mark.unit
    def test_select_keeps_matching_selector(self, session):
        """An active selector that still matches is kept."""
        node = ComponentNode(id="hero", classes=["hero", "hero--dark"])
        session.owner.get_root().append(node)
        session.select(node)
        session.active_selector = ".hero--dark"
        session.select(node)
        assert session.active_selector == ".hero--dark"

    @pytest.mark.unit
    def test_resolve_component_not_found(self, session):
        """Unknown ids list available ids of the current page."""
        session.owner.get_root().append(ComponentNode(id="a"))
        with pytest.raises(NotFoundError) as exc:
            session.resolve_component("missing")
        assert exc.value.available == ["a"]


class TestPageScope:
    """Tests for scoped page acquisition."""

    @pytest.mark.unit
    def test_restores_page_and_selection(self, session):
        """Page and selection are restored after the block."""
        owner = session.owner
        node = ComponentNode(id="n")
        owner.get_root().append(node)
        session.select(node)
        about = owner.add_page("about")
        with session.page_scope(about.id) as page:
            assert owner.get_selected_page() is page
        assert owner.get_selected_page().id == "index"
        assert owner.get_selected() is node

    @pytest.mark.unit
    def test_restores_on_exception(self, session):
        """Restore happens even when the block raises."""
        owner = session.owner
        about = owner.add_page("about")
        with pytest.raises(RuntimeError):
            with session.page_scope(about.id):
                raise RuntimeError("walk failed")
        assert owner.get_selected_page().id == "index"


class TestStyleContext:
    """Tests for the active rule key."""

    @pytest.mark.unit
    def test_no_active_selector(self, session):
        """Without an active selector the style call is rejected."""
        with pytest.raises(NoSelectionError) as exc:
            session.active_rule_key()
        assert "selector(action:'select'" in exc.value.recovery

    @pytest.mark.unit
    def test_media_follows_device(self, session):
        """The media context is the selected device's width."""
        session.active_selector = ".hero"
        session.owner.select_device("tablet")
        assert session.active_rule_key() == (".hero", "992px")


class TestHelpers:
    """Tests for module helpers."""

    @pytest.mark.unit
    def test_selectors_of(self):
        """Classes come first, then the id selector."""
        node = ComponentNode(id="x", classes=["a", "b"])
        assert selectors_of(node) == [".a", ".b", "#x"]

    @pytest.mark.unit
    def test_available_ids_truncated(self):
        """available_ids excludes the root and is truncated."""
        root = ComponentNode(id="root")
        for i in range(5):
            root.append(ComponentNode(id=f"n{i}"))
        assert available_ids(root, limit=3) == ["n0", "n1", "n2"]

    @pytest.mark.unit
    def test_require_website(self, editor):
        """Closed sessions name the open call."""
        with pytest.raises(NoSelectionError) as exc:
            Session(owner=editor).require_website()
        assert "website(action:'open'" in str(exc.value)

    @pytest.mark.unit
    def test_snapshot(self, session):
        """Snapshot reports the page, device and website."""
        snapshot = session.snapshot()
        assert snapshot["page_id"] == "index"
        assert snapshot["device"] == "Desktop"
        assert snapshot["website_id"] == "site-1"
