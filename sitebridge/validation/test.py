"""Unit tests for validation module."""

import pytest

from sitebridge.editor import ComponentNode, Page
from sitebridge.errors import ValidationError

from .lib import (
    Position,
    check_bem,
    check_page_names,
    normalize_selector,
    parse_position,
    validate_pages,
    validate_settings,
    validate_tree,
)


class TestNormalizeSelector:
    """Tests for selector correction."""

    @pytest.mark.unit
    def test_bare_name_corrected(self):
        """Bare names become class selectors with a warning."""
        selector, warning = normalize_selector("hero")
        assert selector == ".hero"
        assert "corrected" in warning

    @pytest.mark.unit
    def test_bare_and_dotted_resolve_same(self):
        """'hero' and '.hero' resolve to the same selector."""
        assert normalize_selector("hero")[0] == normalize_selector(".hero")[0]

    @pytest.mark.unit
    def test_id_selector_kept(self):
        """Id selectors are accepted as-is."""
        assert normalize_selector("#main") == ("#main", None)

    @pytest.mark.unit
    @pytest.mark.parametrize("bad", ["", ".", ".a .b", "#1abc", ".a>b"])
    def test_invalid(self, bad):
        """Empty and compound selectors are rejected."""
        with pytest.raises(ValidationError):
            normalize_selector(bad)


class TestCheckBem:
    """Tests for BEM naming warnings."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "name", ["card", "card__title", "card--featured", "site-header__nav-link--active"]
    )
    def test_valid_names(self, name):
        """Conforming names produce no warnings."""
        assert check_bem(name) == []

    @pytest.mark.unit
    @pytest.mark.parametrize("name", ["Card", "card_title", "cardTitle", "card___x"])
    def test_invalid_names_warn(self, name):
        """Non-conforming names produce one warning."""
        assert len(check_bem(name)) == 1


class TestParsePosition:
    """Tests for insertion position parsing."""

    @pytest.mark.unit
    def test_default_inside(self):
        """Missing position defaults to inside."""
        assert parse_position(None) is Position.INSIDE

    @pytest.mark.unit
    def test_case_insensitive(self):
        """Positions are case-insensitive."""
        assert parse_position("After") is Position.AFTER

    @pytest.mark.unit
    def test_invalid_lists_valid(self):
        """Unknown positions list the valid ones."""
        with pytest.raises(ValidationError) as exc:
            parse_position("above")
        assert exc.value.extra["valid"] == ["before", "after", "inside"]


class TestSettings:
    """Tests for settings validation."""

    @pytest.mark.unit
    def test_known_keys(self):
        """Known keys pass through."""
        assert validate_settings({"title": "Home", "og:image": None}) == {
            "title": "Home",
            "og:image": None,
        }

    @pytest.mark.unit
    def test_unknown_key(self):
        """Unknown keys are rejected with the valid list."""
        with pytest.raises(ValidationError) as exc:
            validate_settings({"titel": "x"})
        assert exc.value.extra["invalid"] == ["titel"]
        assert "title" in exc.value.extra["valid"]

    @pytest.mark.unit
    def test_non_string_value(self):
        """Values must be strings."""
        with pytest.raises(ValidationError):
            validate_settings({"title": 3})

    @pytest.mark.unit
    def test_page_names(self):
        """A site without an index page gets a warning."""
        home = Page(id="home", name="home", root=ComponentNode(id="w1"))
        index = Page(id="index", name="index", root=ComponentNode(id="w2"))
        assert len(check_page_names([home])) == 1
        assert check_page_names([home, index]) == []


class TestValidateTree:
    """Tests for structural tree checks."""

    @pytest.mark.unit
    def test_valid_tree(self):
        """Well-formed tree passes validation."""
        root = ComponentNode(id="root")
        root.append(ComponentNode(id="a"))
        root.append(ComponentNode(id="b"))
        assert validate_tree(root) == []

    @pytest.mark.unit
    def test_duplicate_ids(self):
        """Duplicate IDs are detected."""
        root = ComponentNode(id="root")
        root.append(ComponentNode(id="dupe"))
        root.append(ComponentNode(id="dupe"))
        issues = validate_tree(root)
        assert len(issues) == 1
        assert issues[0].issue_type == "duplicate_id"

    @pytest.mark.unit
    def test_parent_mismatch(self):
        """Children appended without insert are flagged."""
        root = ComponentNode(id="root")
        root.children.append(ComponentNode(id="orphan"))
        issues = validate_tree(root)
        assert [i.issue_type for i in issues] == ["parent_mismatch"]

    @pytest.mark.unit
    def test_duplicate_across_pages(self):
        """Ids are unique across all pages."""
        first = Page(id="index", name="index", root=ComponentNode(id="w1"))
        second = Page(id="about", name="about", root=ComponentNode(id="w2"))
        first.root.append(ComponentNode(id="shared"))
        second.root.append(ComponentNode(id="shared"))
        issues = validate_pages([first, second])
        assert len(issues) == 1
        assert issues[0].node_id == "shared"
