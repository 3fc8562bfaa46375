"""Tests for the editor document model and the in-memory tree owner."""

import pytest

from sitebridge.errors import ValidationError

from .memory import InMemoryEditor
from .models import (
    MAX_EXTRA_ATTRIBUTES,
    ComponentNode,
    NodeAttributes,
    NodeType,
)
from .protocol import EditorCapabilities
from .schema import DataSource, FieldKind, SchemaField, SchemaType

# =============================================================================
# ComponentNode
# =============================================================================


class TestComponentNode:
    """Tests for tree structure operations."""

    @pytest.mark.unit
    def test_insert_sets_parent(self):
        """Inserted children point back to their parent."""
        root = ComponentNode(id="root")
        child = ComponentNode(id="a")
        root.insert(0, child)
        assert child.parent is root
        assert child.index_in_parent() == 0

    @pytest.mark.unit
    def test_insert_moves_between_parents(self):
        """A node has exactly one containing sequence."""
        first = ComponentNode(id="first")
        second = ComponentNode(id="second")
        node = ComponentNode(id="n")
        first.append(node)
        second.append(node)
        assert node not in first.children
        assert node.parent is second

    @pytest.mark.unit
    def test_insert_rejects_cycle(self):
        """Inserting an ancestor into its descendant fails."""
        root = ComponentNode(id="root")
        child = ComponentNode(id="child")
        root.append(child)
        with pytest.raises(ValueError):
            child.append(root)
        with pytest.raises(ValueError):
            root.append(root)

    @pytest.mark.unit
    def test_detach(self):
        """Detached nodes have no parent."""
        root = ComponentNode(id="root")
        child = ComponentNode(id="child")
        root.append(child)
        child.detach()
        assert child.parent is None
        assert root.children == []

    @pytest.mark.unit
    def test_walk_is_preorder(self):
        """walk yields parents before children, in document order."""
        root = ComponentNode(id="root")
        a = ComponentNode(id="a")
        b = ComponentNode(id="b")
        a.append(ComponentNode(id="a1"))
        root.append(a)
        root.append(b)
        assert [n.id for n in root.walk()] == ["root", "a", "a1", "b"]

    @pytest.mark.unit
    def test_clone_with_fresh_ids(self):
        """Clones copy structure and get new ids from the factory."""
        root = ComponentNode(id="card", classes=["card"])
        root.append(ComponentNode(id="title", tag="h2", type=NodeType.TEXT))
        counter = iter(range(100))
        copy = root.clone(lambda node: f"copy-{next(counter)}")
        assert copy.id == "copy-0"
        assert copy.children[0].id == "copy-1"
        assert copy.children[0].parent is copy
        assert copy.classes == ["card"]
        assert copy.classes is not root.classes

    @pytest.mark.unit
    def test_add_class_is_unique(self):
        """Classes are an ordered unique set."""
        node = ComponentNode(id="n")
        assert node.add_class("hero") is True
        assert node.add_class("hero") is False
        assert node.classes == ["hero"]


# =============================================================================
# NodeAttributes
# =============================================================================


class TestNodeAttributes:
    """Tests for typed attributes and the extension map."""

    @pytest.mark.unit
    def test_known_attribute_is_typed_field(self):
        """Known names set the typed field."""
        attrs = NodeAttributes()
        attrs.set("href", "/about")
        assert attrs.href == "/about"
        assert attrs.extra == {}

    @pytest.mark.unit
    def test_unknown_attribute_goes_to_extra(self):
        """Custom attributes live in the extension map."""
        attrs = NodeAttributes()
        attrs.set("data-role", "nav")
        assert attrs.extra == {"data-role": "nav"}
        assert attrs.to_dict() == {"data-role": "nav"}

    @pytest.mark.unit
    def test_none_deletes(self):
        """None removes the attribute."""
        attrs = NodeAttributes(alt="logo", extra={"aria-label": "x"})
        attrs.set("alt", None)
        attrs.set("aria-label", None)
        assert attrs.to_dict() == {}

    @pytest.mark.unit
    def test_extension_map_is_bounded(self):
        """Past the bound a ValidationError is raised."""
        attrs = NodeAttributes()
        for i in range(MAX_EXTRA_ATTRIBUTES):
            attrs.set(f"data-x{i}", "1")
        with pytest.raises(ValidationError):
            attrs.set("data-overflow", "1")
        # Replacing an existing key is still allowed
        attrs.set("data-x0", "2")
        assert attrs.extra["data-x0"] == "2"

    @pytest.mark.unit
    def test_invalid_name(self):
        """Attribute names must be valid HTML names."""
        with pytest.raises(ValidationError):
            NodeAttributes().set("bad name", "1")


# =============================================================================
# Schema models
# =============================================================================


class TestSchema:
    """Tests for data source lookups."""

    @pytest.mark.unit
    def test_lookups(self):
        """Queryables and types are found by id."""
        source = DataSource(
            id="shop",
            queryables=[SchemaField(id="products", kind="list", type_ids=["Product"])],
            types=[SchemaType(id="Product", fields=[SchemaField(id="price")])],
        )
        assert source.queryable_ids() == ["products"]
        assert source.get_queryable("products").kind == FieldKind.LIST.value
        assert source.get_type("Product").get_field("price") is not None
        assert source.get_type("Missing") is None

    @pytest.mark.unit
    def test_summary(self):
        """Summary lists queryables and type field ids."""
        source = DataSource(
            id="shop",
            queryables=[SchemaField(id="products", kind="list", type_ids=["Product"])],
            types=[SchemaType(id="Product", fields=[SchemaField(id="price")])],
        )
        summary = source.summary()
        assert summary["label"] == "shop"
        assert summary["types"] == {"Product": ["price"]}


# =============================================================================
# InMemoryEditor
# =============================================================================


class TestInMemoryEditor:
    """Tests for the in-process tree owner."""

    @pytest.mark.unit
    def test_default_page_and_device(self, editor):
        """A fresh editor has an index page and the desktop device."""
        assert editor.get_selected_page().id == "index"
        assert editor.get_selected_device().id == "desktop"
        assert editor.get_root().children == []

    @pytest.mark.unit
    def test_capabilities_follow_data_sources(self, blog_source):
        """data_sources is advertised only when sources are configured."""
        assert InMemoryEditor().capabilities.data_sources is False
        editor = InMemoryEditor(data_sources=[blog_source])
        assert editor.capabilities.data_sources is True
        assert editor.capabilities.supports("data_sources")
        assert not editor.capabilities.supports("evaluate")

    @pytest.mark.unit
    def test_new_id_unique_across_pages(self, editor):
        """Minted ids never collide with existing nodes."""
        editor.get_root().append(ComponentNode(id="c-1"))
        other = editor.add_page("about")
        other.root.append(ComponentNode(id="c-3"))
        # Counter is at 2 after the two page wrappers
        assert editor.new_id() == "c-4"

    @pytest.mark.unit
    def test_each_page_has_own_root(self, editor):
        """Pages do not share root wrappers."""
        about = editor.add_page("about")
        assert about.root is not editor.get_root()
        editor.select_page(about.id)
        assert editor.get_root() is about.root

    @pytest.mark.unit
    def test_selection_cleared_on_page_switch(self, editor):
        """Selection belongs to the selected page."""
        node = ComponentNode(id="n")
        editor.get_root().append(node)
        editor.select(node)
        about = editor.add_page("about")
        editor.select_page(about.id)
        assert editor.get_selected() is None

    @pytest.mark.unit
    def test_selection_dropped_when_detached(self, editor):
        """A removed node is no longer selected."""
        node = ComponentNode(id="n")
        editor.get_root().append(node)
        editor.select(node)
        node.detach()
        assert editor.get_selected() is None

    @pytest.mark.unit
    def test_rules(self, editor):
        """Rules are keyed by selector and media."""
        rule = editor.add_rule(".hero")
        assert editor.add_rule(".hero") is rule
        tablet = editor.add_rule(".hero", "992px")
        assert tablet is not rule
        assert len(editor.get_rules(".hero")) == 2
        assert editor.remove_rule(".hero", "992px") is True
        assert editor.get_rule(".hero", "992px") is None

    @pytest.mark.unit
    def test_undo_redo(self, editor):
        """Checkpoints restore the document tree."""
        editor.checkpoint("add")
        editor.get_root().append(ComponentNode(id="n"))
        assert editor.undo() is True
        assert editor.get_root().children == []
        assert editor.redo() is True
        assert [c.id for c in editor.get_root().children] == ["n"]
        assert editor.get_root().children[0].parent is editor.get_root()

    @pytest.mark.unit
    def test_undo_without_history(self, editor):
        """Nothing to undo returns False."""
        assert editor.undo() is False
        assert editor.redo() is False

    @pytest.mark.unit
    def test_discard_checkpoint(self, editor):
        """Discarding restores the redo stack and the change counter."""
        editor.checkpoint("add")
        editor.get_root().append(ComponentNode(id="n"))
        editor.undo()
        changes = editor.state.changes

        editor.checkpoint("rejected")
        editor.discard_checkpoint()

        assert editor.state.changes == changes
        assert editor.redo() is True
        assert [c.id for c in editor.get_root().children] == ["n"]

    @pytest.mark.unit
    def test_discard_after_undo_is_noop(self, editor):
        editor.checkpoint("add")
        editor.undo()
        editor.discard_checkpoint()
        assert editor.redo() is True

    @pytest.mark.unit
    def test_checkpoint_emits_change(self, editor):
        """Checkpoints notify change subscribers."""
        seen = []
        unsubscribe = editor.on("change:changesCount", seen.append)
        editor.checkpoint()
        unsubscribe()
        editor.checkpoint()
        assert seen == [1]

    @pytest.mark.unit
    def test_store_resets_changes(self, editor):
        """Saving clears the change counter."""
        editor.checkpoint()
        editor.store()
        assert editor.state.changes == 0
        assert editor.state.saved_at is not None

    @pytest.mark.unit
    def test_run_command(self, editor):
        """Preview commands toggle preview state."""
        editor.run_command("data-source:preview:activate")
        assert editor.state.preview_enabled is True
        editor.run_command("data-source:preview:deactivate")
        assert editor.state.preview_enabled is False
        with pytest.raises(KeyError):
            editor.run_command("unknown")

    @pytest.mark.unit
    def test_evaluate_unsupported(self):
        """The in-memory editor advertises and enforces no evaluation."""
        editor = InMemoryEditor(capabilities=EditorCapabilities(evaluate=False))
        with pytest.raises(NotImplementedError):
            editor.evaluate("1 + 1")

    @pytest.mark.unit
    def test_notify_records(self, editor):
        """Outbound notifications are recorded and forwarded."""
        forwarded = []
        editor.notification_sink = lambda event, payload: forwarded.append(event)
        editor.notify("mark_unsaved")
        assert editor.state.notifications == [("mark_unsaved", None)]
        assert forwarded == ["mark_unsaved"]
