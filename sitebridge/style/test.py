"""Tests for style rules and selector management."""

import pytest

from sitebridge.editor import ComponentNode
from sitebridge.errors import (
    NoSelectionError,
    NotFoundError,
    StyleRejectedError,
    ValidationError,
)

from .css import StyleContext, is_known_property, is_valid_value, parse_declarations
from .lib import SelectorAccessor, StyleAccessor


@pytest.fixture
def hero(session):
    """A selected component with the 'hero' class."""
    node = ComponentNode(id="hero-1", classes=["hero"])
    session.owner.get_root().append(node)
    session.select(node)
    return node


@pytest.fixture
def style(session):
    return StyleAccessor(session)


@pytest.fixture
def selectors(session):
    return SelectorAccessor(session)


# =============================================================================
# CSS validation
# =============================================================================


class TestCss:
    """Tests for declaration parsing and the style context."""

    @pytest.mark.unit
    def test_parse_declarations(self):
        """Split on ';' then on the first ':'."""
        pairs = parse_declarations("color: red; background: url(http://x/y.png);;")
        assert pairs == [("color", "red"), ("background", "url(http://x/y.png)")]

    @pytest.mark.unit
    def test_missing_colon(self):
        """Entries without a colon have an empty value."""
        assert parse_declarations("bogus") == [("bogus", "")]

    @pytest.mark.unit
    @pytest.mark.parametrize("name", ["color", "-webkit-transform", "--brand-color"])
    def test_known_properties(self, name):
        """Known, vendor-prefixed and custom properties are accepted."""
        assert is_known_property(name)

    @pytest.mark.unit
    @pytest.mark.parametrize("name", ["colour", "font size", "-x-color", "--"])
    def test_unknown_properties(self, name):
        """Misspelled or malformed names are rejected."""
        assert not is_known_property(name)

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "value", ["", "red}", "calc(1px", "expression(alert(1))", "'open"]
    )
    def test_invalid_values(self, value):
        """Empty, unbalanced or script-like values are rejected."""
        assert not is_valid_value(value)

    @pytest.mark.unit
    def test_context_accepts_valid(self):
        """Valid pairs are stored lowercase."""
        ctx = StyleContext()
        assert ctx.set_property("Color", " red ") is True
        assert ctx.declarations == {"color": "red"}


# =============================================================================
# Style accessor
# =============================================================================


class TestStyleSet:
    """Tests for style set/get/delete_property."""

    @pytest.mark.unit
    def test_no_active_rule(self, style):
        """Without an active rule set fails with the select call."""
        with pytest.raises(NoSelectionError) as exc:
            style.set(properties={"color": "red"}, selector=".missing")
        assert "selector(action:'select'" in str(exc.value)

    @pytest.mark.unit
    def test_set_and_get(self, style, session, hero):
        """Declarations land on the active rule."""
        style.set(properties={"color": "red"}, css="margin: 0 auto")
        data = style.get().data
        assert data["selector"] == ".hero"
        assert data["style"] == {"color": "red", "margin": "0 auto"}
        assert session.owner.get_rule(".hero") is not None

    @pytest.mark.unit
    def test_set_is_idempotent(self, style, session, hero):
        """Applying the same batch twice yields the same map."""
        style.set(properties={"color": "red", "padding": "4px"})
        first = dict(session.owner.get_rule(".hero").declarations)
        style.set(properties={"color": "red", "padding": "4px"})
        assert session.owner.get_rule(".hero").declarations == first

    @pytest.mark.unit
    def test_whole_batch_rejected(self, style, session, hero):
        """One invalid pair rejects the call with a partition."""
        with pytest.raises(StyleRejectedError) as exc:
            style.set(properties={"color": "red", "colr": "blue"})
        assert exc.value.valid == {"color": "red"}
        assert exc.value.invalid == {"colr": "blue"}
        assert session.owner.get_rule(".hero") is None

    @pytest.mark.unit
    def test_selector_must_match_active(self, style, hero):
        """A selector param other than the active one is rejected."""
        with pytest.raises(ValidationError):
            style.set(properties={"color": "red"}, selector=".other")

    @pytest.mark.unit
    def test_bare_selector_corrected(self, style, hero):
        """'hero' is corrected to '.hero' with a warning."""
        outcome = style.set(properties={"color": "red"}, selector="hero")
        assert outcome.data["selector"] == ".hero"
        assert len(outcome.warnings) == 1

    @pytest.mark.unit
    def test_correction_kept_on_failure(self, style, hero):
        """The selector correction travels with the error."""
        with pytest.raises(StyleRejectedError) as exc:
            style.set(properties={"colr": "red"}, selector="hero")
        assert exc.value.warnings == ["Selector 'hero' corrected to '.hero'"]

    @pytest.mark.unit
    @pytest.mark.parametrize("params", [{"properties": {}}, {"css": " ; "}])
    def test_empty_declarations_rejected(self, style, session, hero, params):
        """An empty declaration set fails and creates no rule."""
        with pytest.raises(ValidationError):
            style.set(**params)
        assert session.owner.get_rule(".hero") is None

    @pytest.mark.unit
    def test_media_follows_device(self, style, session, hero):
        """Rules are scoped to the selected device's media width."""
        session.owner.select_device("mobilePortrait")
        style.set(properties={"font-size": "14px"})
        assert session.owner.get_rule(".hero", "480px") is not None
        assert session.owner.get_rule(".hero") is None

    @pytest.mark.unit
    def test_numbers_accepted(self, style, session, hero):
        """Numeric values are converted to CSS text."""
        style.set(properties={"z-index": 10})
        assert session.owner.get_rule(".hero").declarations["z-index"] == "10"

    @pytest.mark.unit
    def test_delete_property_removes_empty_rule(self, style, session, hero):
        """Removing the last declaration removes the rule."""
        style.set(properties={"color": "red"})
        assert style.delete_property("color").data["removed"] is True
        assert session.owner.get_rule(".hero") is None
        assert style.delete_property("color").data["removed"] is False


class TestStyleSetBatch:
    """Tests for style set_batch."""

    @pytest.mark.unit
    def test_applies_all(self, style, session):
        """Each entry creates its rule lazily."""
        outcome = style.set_batch(
            [
                {"selector": "card", "properties": {"padding": "8px"}},
                {"selector": ".card__title", "css": "font-weight: 700"},
            ]
        )
        assert session.owner.get_rule(".card").declarations == {"padding": "8px"}
        assert session.owner.get_rule(".card__title") is not None
        assert len(outcome.warnings) == 1

    @pytest.mark.unit
    def test_one_invalid_rejects_all(self, style, session):
        """Nothing is written when any entry is invalid."""
        with pytest.raises(StyleRejectedError) as exc:
            style.set_batch(
                [
                    {"selector": ".a", "properties": {"color": "red"}},
                    {"selector": ".b", "properties": {"colr": "red"}},
                ]
            )
        assert ".b colr" in exc.value.invalid
        assert session.owner.get_rules() == []

    @pytest.mark.unit
    def test_entry_without_selector(self, style):
        """Entries must name a selector."""
        with pytest.raises(ValidationError):
            style.set_batch([{"properties": {"color": "red"}}])

    @pytest.mark.unit
    def test_corrections_kept_on_failure(self, style, session):
        with pytest.raises(ValidationError) as exc:
            style.set_batch([{"selector": "card", "properties": {}}])
        assert exc.value.warnings == ["Selector 'card' corrected to '.card'"]
        assert session.owner.get_rules() == []


# =============================================================================
# Selector accessor
# =============================================================================


class TestSelectors:
    """Tests for selector list/select/create/delete."""

    @pytest.mark.unit
    def test_list(self, selectors, hero):
        """Classes and the id selector are listed; the active one flagged."""
        items = selectors.list().data["selectors"]
        assert [i["selector"] for i in items] == [".hero", "#hero-1"]
        assert items[0]["active"] is True

    @pytest.mark.unit
    def test_select_id_selector(self, selectors, session, hero):
        """The id selector can be activated."""
        selectors.select("#hero-1")
        assert session.active_selector == "#hero-1"

    @pytest.mark.unit
    def test_select_unknown(self, selectors, hero):
        """Non-matching selectors list the available ones."""
        with pytest.raises(NotFoundError) as exc:
            selectors.select(".other")
        assert exc.value.available == [".hero", "#hero-1"]

    @pytest.mark.unit
    def test_create_with_bem_warning(self, selectors, session, hero):
        """Created classes are added and activated; BEM issues warn."""
        outcome = selectors.create("heroTitle")
        assert "heroTitle" in hero.classes
        assert session.active_selector == ".heroTitle"
        assert any("BEM" in w for w in outcome.warnings)

    @pytest.mark.unit
    def test_create_id_rejected(self, selectors, hero):
        """Id selectors cannot be created."""
        with pytest.raises(ValidationError):
            selectors.create("#x")

    @pytest.mark.unit
    def test_delete_drops_rules(self, selectors, style, session, hero):
        """Deleting a class removes it and its rules."""
        style.set(properties={"color": "red"})
        outcome = selectors.delete(".hero")
        assert outcome.data["removed_rules"] == 1
        assert hero.classes == []
        assert session.owner.get_rules(".hero") == []
        assert session.active_selector is None

    @pytest.mark.unit
    def test_requires_selection(self, selectors):
        """Selector operations need a selected component."""
        with pytest.raises(NoSelectionError):
            selectors.list()
