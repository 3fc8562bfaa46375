"""Tests for content binding."""

import pytest

from sitebridge.editor import ComponentNode
from sitebridge.errors import (
    NoSelectionError,
    NotFoundError,
    SchemaResolutionError,
    ValidationError,
)

from .lib import ContentBinding


@pytest.fixture
def cms(cms_session):
    return ContentBinding(cms_session)


@pytest.fixture
def card(cms_session):
    """A selected card component."""
    node = ComponentNode(id="card-1", classes=["card"])
    cms_session.owner.get_root().append(node)
    cms_session.select(node)
    return node


def _state(states, state_id):
    return next(s for s in states if s.id == state_id)


class TestBindings:
    """Tests for single binding actions."""

    @pytest.mark.unit
    def test_list_sources(self, cms):
        sources = cms.list_sources().data["sources"]
        assert sources[0]["id"] == "blog"
        assert sources[0]["types"]["Author"] == ["name", "bio"]

    @pytest.mark.unit
    def test_bind_content(self, cms, card):
        """Content bindings land in the innerHTML private state."""
        cms.bind_content("blog.posts.title")
        state = _state(card.private_states, "innerHTML")
        assert [t["field_id"] for t in state.tokens] == ["posts", "title"]

    @pytest.mark.unit
    def test_rebinding_replaces(self, cms, card):
        cms.bind_content("blog.posts.title")
        cms.bind_content("blog.posts.body")
        assert len(card.private_states) == 1
        assert card.private_states[0].tokens[-1]["field_id"] == "body"

    @pytest.mark.unit
    def test_loop_requires_list(self, cms, card):
        """Loops must end on a list field."""
        cms.set_loop("blog.posts")
        assert _state(card.private_states, "__data").tokens[-1]["kind"] == "list"
        with pytest.raises(ValidationError):
            cms.set_loop("blog.site")

    @pytest.mark.unit
    def test_condition_binary_needs_value(self, cms, card):
        """Comparison operators require a value."""
        with pytest.raises(ValidationError):
            cms.set_condition("blog.posts.title", operator="==")
        cms.set_condition("blog.posts.title", operator="==", value="Hello")
        assert card.condition_operator == "=="
        compare = _state(card.private_states, "condition2")
        assert compare.tokens[0]["options"] == {"value": "Hello"}

    @pytest.mark.unit
    def test_condition_default_truthy(self, cms, card):
        cms.set_condition("blog.site.name")
        assert card.condition_operator == "truthy"

    @pytest.mark.unit
    def test_unknown_operator(self, cms, card):
        with pytest.raises(ValidationError) as exc:
            cms.set_condition("blog.site.name", operator="contains")
        assert "truthy" in exc.value.extra["valid"]

    @pytest.mark.unit
    def test_attribute_literal(self, cms, card):
        """Literal attributes use a fixed-value token."""
        cms.set_attribute("data-id", value="42")
        state = _state(card.private_states, "card-1-attr-data_id")
        assert state.label == "data-id"
        assert state.tokens[0]["field_id"] == "fixed"

    @pytest.mark.unit
    def test_expose(self, cms, card):
        """Exposed data is a public state."""
        cms.expose_data("blog.posts.author", state_id="author", label="Author")
        assert card.public_states[0].id == "author"
        assert card.private_states == []

    @pytest.mark.unit
    def test_resolution_error_propagates(self, cms, card):
        with pytest.raises(SchemaResolutionError):
            cms.bind_content("blog.posts.nope")
        assert card.private_states == []

    @pytest.mark.unit
    def test_requires_selection(self, cms):
        with pytest.raises(NoSelectionError):
            cms.bind_content("blog.posts.title")


class TestSetStates:
    """Tests for batched bindings."""

    @pytest.mark.unit
    def test_applies_all(self, cms, card):
        outcome = cms.set_states(
            [
                {"type": "loop", "expression": "blog.posts"},
                {"type": "content", "expression": "blog.posts.title"},
            ]
        )
        assert [s["state_id"] for s in outcome.data["states"]] == ["__data", "innerHTML"]

    @pytest.mark.unit
    def test_atomic(self, cms, card):
        """One failing entry writes nothing."""
        with pytest.raises(SchemaResolutionError):
            cms.set_states(
                [
                    {"type": "content", "expression": "blog.posts.title"},
                    {"type": "loop", "expression": "blog.nothing"},
                ]
            )
        assert card.private_states == []

    @pytest.mark.unit
    def test_unknown_type(self, cms, card):
        with pytest.raises(ValidationError):
            cms.set_states([{"type": "magic"}])


class TestStates:
    """Tests for listing and removing states, and preview."""

    @pytest.mark.unit
    def test_remove_condition_clears_operator(self, cms, card):
        cms.set_condition("blog.posts.title", operator="!=", value="x")
        cms.remove_state("condition")
        assert card.condition_operator is None
        assert card.private_states == []

    @pytest.mark.unit
    def test_remove_missing(self, cms, card):
        cms.bind_content("blog.posts.title")
        with pytest.raises(NotFoundError) as exc:
            cms.remove_state("nope", exported=False)
        assert exc.value.available == ["innerHTML"]

    @pytest.mark.unit
    def test_list_states(self, cms, card):
        cms.expose_data("blog.site", state_id="site")
        data = cms.list_states().data
        assert data["public_states"][0]["id"] == "site"

    @pytest.mark.unit
    def test_refresh_preview(self, cms, cms_editor):
        cms.refresh_preview()
        assert cms_editor.state.preview_enabled is True
        cms.refresh_preview(enabled=False)
        assert cms_editor.state.preview_enabled is False
