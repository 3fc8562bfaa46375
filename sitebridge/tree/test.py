"""Tests for the document tree accessor."""

import pytest

from sitebridge.editor import ComponentNode
from sitebridge.errors import NoSelectionError, NotFoundError, ValidationError
from sitebridge.validation import Position, validate_tree

from .lib import TraversalBudget, TreeAccessor, resolve_insertion, walk_bounded


@pytest.fixture
def tree(session):
    """TreeAccessor on the default session."""
    return TreeAccessor(session)


def _chain(root: ComponentNode, depth: int) -> None:
    current = root
    for i in range(depth):
        child = ComponentNode(id=f"d{i}")
        current.append(child)
        current = child


# =============================================================================
# Traversal
# =============================================================================


class TestWalkBounded:
    """Tests for the bounded walk."""

    @pytest.mark.unit
    def test_depth_limit_reports_children_count(self):
        """Nodes at the depth limit report children_count."""
        root = ComponentNode(id="root")
        _chain(root, 4)
        budget = TraversalBudget(max_depth=2, max_count=50)
        result = walk_bounded(root, budget)
        level2 = result["children"][0]["children"][0]
        assert "children" not in level2
        assert level2["children_count"] == 1
        assert budget.truncated is True

    @pytest.mark.unit
    def test_count_budget(self):
        """The count budget caps the number of reported nodes."""
        root = ComponentNode(id="root")
        for i in range(10):
            root.append(ComponentNode(id=f"n{i}"))
        budget = TraversalBudget(max_depth=5, max_count=3)
        result = walk_bounded(root, budget)
        assert len(result["children"]) == 3
        assert result["children_count"] == 10
        assert budget.visited == 3
        assert budget.truncated is True

    @pytest.mark.unit
    def test_untruncated(self):
        """Small trees are fully reported."""
        root = ComponentNode(id="root")
        root.append(ComponentNode(id="a"))
        budget = TraversalBudget()
        result = walk_bounded(root, budget)
        assert result["children"][0]["id"] == "a"
        assert budget.truncated is False


class TestGetTree:
    """Tests for component get_tree."""

    @pytest.mark.unit
    def test_reports_visited_and_truncated(self, tree, session):
        """Response includes visited and truncated."""
        _chain(session.owner.get_root(), 3)
        data = tree.get_tree().data
        assert data["page_id"] == "index"
        assert data["visited"] == 3
        assert data["truncated"] is True

    @pytest.mark.unit
    def test_invalid_limits(self, tree):
        """Negative depth is rejected."""
        with pytest.raises(ValidationError):
            tree.get_tree(max_depth=-1)


# =============================================================================
# Insertion
# =============================================================================


class TestResolveInsertion:
    """Tests for insertion target resolution."""

    @pytest.mark.unit
    def test_no_selection_goes_to_root_start(self, editor):
        """Without selection the root is the container at index 0."""
        root = editor.get_root()
        root.append(ComponentNode(id="existing"))
        for position in Position:
            assert resolve_insertion(editor, position) == (root, 0)

    @pytest.mark.unit
    def test_inside_appends(self, editor):
        """inside targets the end of the selected node."""
        root = editor.get_root()
        box = ComponentNode(id="box")
        box.append(ComponentNode(id="a"))
        root.append(box)
        editor.select(box)
        assert resolve_insertion(editor, Position.INSIDE) == (box, 1)

    @pytest.mark.unit
    def test_before_and_after(self, editor):
        """before is index S, after is index S+1."""
        root = editor.get_root()
        for node_id in ("a", "b", "c"):
            root.append(ComponentNode(id=node_id))
        editor.select(root.children[1])
        assert resolve_insertion(editor, Position.BEFORE) == (root, 1)
        assert resolve_insertion(editor, Position.AFTER) == (root, 2)


# =============================================================================
# Add
# =============================================================================


class TestAdd:
    """Tests for component add."""

    @pytest.mark.unit
    def test_heading_on_empty_tree(self, tree, session):
        """One editable text node at the root, empty style."""
        outcome = tree.add("<h1>Hello</h1>")
        root = session.owner.get_root()
        assert len(root.children) == 1
        node = root.children[0]
        assert node.type.value == "text"
        assert node.editable is True
        assert node.content == "Hello"
        assert node.style == {}
        assert outcome.data["created"] == [node.id]
        assert session.selected is node

    @pytest.mark.unit
    def test_inline_styles_stripped(self, tree, session):
        """Created nodes have empty styles; one warning per stripped node."""
        outcome = tree.add(
            '<div style="padding:4px"><p style="color:red">a</p><p>b</p></div>'
        )
        assert len(outcome.warnings) == 2
        for node in session.owner.get_root().walk():
            assert node.style == {}

    @pytest.mark.unit
    def test_after_selection(self, tree, session):
        """after inserts right behind the selected node."""
        tree.add("<p>one</p><p>three</p>")
        root = session.owner.get_root()
        session.select(root.children[0])
        tree.add("<p>two</p>", position="after")
        assert [c.content for c in root.children] == ["one", "two", "three"]

    @pytest.mark.unit
    def test_markup_id_kept_when_unique(self, tree, session):
        """Unique markup ids are kept; duplicates get a fresh id."""
        tree.add('<section id="intro"></section>')
        session.select(None)
        outcome = tree.add('<section id="intro"></section>')
        assert outcome.data["created"][0] != "intro"
        assert any("intro" in w for w in outcome.warnings)
        assert validate_tree(session.owner.get_root()) == []

    @pytest.mark.unit
    def test_invalid_position(self, tree, session):
        """Invalid positions are rejected before mutation."""
        with pytest.raises(ValidationError):
            tree.add("<p>x</p>", position="above")
        assert session.owner.get_root().children == []

    @pytest.mark.unit
    def test_empty_markup(self, tree):
        """Empty markup is rejected."""
        with pytest.raises(ValidationError):
            tree.add("   ")
        with pytest.raises(ValidationError):
            tree.add("<script>x()</script>")


# =============================================================================
# Update, move, remove
# =============================================================================


class TestUpdate:
    """Tests for component update."""

    @pytest.mark.unit
    def test_content_and_attributes(self, tree, session):
        """Known attributes are typed; class replaces the set."""
        tree.add('<a class="link">Go</a>')
        outcome = tree.update(
            content="Go now",
            attributes={"href": "/go", "data-track": "cta", "class": "btn btn--primary"},
        )
        node = session.selected
        assert node.content == "Go now"
        assert node.attributes.href == "/go"
        assert node.attributes.extra == {"data-track": "cta"}
        assert node.classes == ["btn", "btn--primary"]
        assert outcome.warnings == []

    @pytest.mark.unit
    def test_id_rejected_without_mutation(self, tree, session):
        """Changing the id fails and nothing is applied."""
        tree.add("<a>Go</a>")
        with pytest.raises(ValidationError):
            tree.update(attributes={"href": "/x", "id": "new"})
        assert session.selected.attributes.href is None

    @pytest.mark.unit
    def test_style_ignored_with_warning(self, tree):
        """style attributes are ignored with a warning."""
        tree.add("<p>x</p>")
        outcome = tree.update(attributes={"style": "color:red"})
        assert len(outcome.warnings) == 1

    @pytest.mark.unit
    def test_content_on_container_with_children(self, tree, session):
        """A container with children cannot take text content."""
        tree.add("<div><p>x</p></div>")
        with pytest.raises(ValidationError):
            tree.update(content="text")

    @pytest.mark.unit
    def test_none_deletes_attribute(self, tree, session):
        """None values delete attributes."""
        tree.add('<img src="a.png" alt="A">')
        tree.update(attributes={"alt": None})
        assert session.selected.attributes.alt is None

    @pytest.mark.unit
    def test_requires_selection(self, tree):
        """Without an id the selection is required."""
        with pytest.raises(NoSelectionError):
            tree.update(content="x")


class TestMove:
    """Tests for component move."""

    @pytest.mark.unit
    def test_move_inside(self, tree, session):
        """inside makes the node the last child of the target."""
        tree.add('<p id="p">x</p><div id="box"><span>a</span></div>')
        tree.move("box", component_id="p", position="inside")
        box = session.owner.get_root().find("box")
        assert box.children[-1].id == "p"

    @pytest.mark.unit
    def test_move_after_recomputes_index(self, tree, session):
        """Sibling moves recompute the index after detaching."""
        tree.add('<p id="a">a</p><p id="b">b</p><p id="c">c</p>')
        tree.move("c", component_id="a", position="after")
        root = session.owner.get_root()
        assert [c.id for c in root.children] == ["b", "c", "a"]

    @pytest.mark.unit
    def test_move_into_own_subtree(self, tree):
        """Moving into the own subtree is rejected."""
        tree.add('<div id="outer"><div id="inner"></div></div>')
        with pytest.raises(ValidationError):
            tree.move("inner", component_id="outer")
        with pytest.raises(ValidationError):
            tree.move("outer", component_id="outer")

    @pytest.mark.unit
    def test_unknown_target(self, tree):
        """Unknown targets list available ids."""
        tree.add('<div id="outer"></div>')
        with pytest.raises(NotFoundError) as exc:
            tree.move("nope", component_id="outer")
        assert "outer" in exc.value.available


class TestRemove:
    """Tests for component remove."""

    @pytest.mark.unit
    def test_remove_clears_selection(self, tree, session):
        """Removing the selected subtree clears the selection."""
        tree.add('<div id="outer"><p id="inner">x</p></div>')
        tree.select("inner")
        outcome = tree.remove("outer")
        assert outcome.data["removed"] == ["outer", "inner"]
        assert session.selected is None
        assert session.owner.get_root().children == []

    @pytest.mark.unit
    def test_root_cannot_be_removed(self, tree, session):
        """The page root is protected."""
        with pytest.raises(ValidationError):
            tree.remove(session.owner.get_root().id)
