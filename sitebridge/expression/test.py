"""Tests for the expression resolver."""

import pytest

from sitebridge.errors import SchemaResolutionError, ValidationError

from .lib import is_chain_valid, resolve_expression, tokens_to_state


class TestResolveExpression:
    """Tests for dot-path resolution against the blog schema."""

    @pytest.mark.unit
    def test_two_tokens(self, blog_source):
        """blog.posts.title yields one token per segment after the source."""
        tokens = resolve_expression("blog.posts.title", [blog_source])
        assert [t.field_id for t in tokens] == ["posts", "title"]
        assert tokens[0].parent_type_id is None
        assert tokens[1].parent_type_id == "PostConnection"
        assert is_chain_valid(tokens)

    @pytest.mark.unit
    def test_deep_path(self, blog_source):
        """Nested object fields follow their type ids."""
        tokens = resolve_expression("blog.posts.author.name", [blog_source])
        assert len(tokens) == 3
        assert tokens[2].parent_type_id == "Author"
        assert all(t.data_source_id == "blog" for t in tokens)

    @pytest.mark.unit
    def test_unknown_field_names_segment(self, blog_source):
        """blog.posts.nope fails at index 2 listing PostConnection's fields."""
        with pytest.raises(SchemaResolutionError) as exc:
            resolve_expression("blog.posts.nope", [blog_source])
        error = exc.value
        assert error.segment_index == 2
        assert error.segment == "nope"
        assert error.resolved_path == "blog.posts"
        assert error.candidates == ["title", "slug", "body", "author", "tags"]

    @pytest.mark.unit
    def test_unknown_source(self, blog_source):
        """Unknown sources fail at index 0 with all source ids."""
        with pytest.raises(SchemaResolutionError) as exc:
            resolve_expression("shop.items", [blog_source])
        assert exc.value.segment_index == 0
        assert exc.value.candidates == ["blog"]

    @pytest.mark.unit
    def test_unknown_queryable(self, blog_source):
        """Unknown root fields fail at index 1 with the queryables."""
        with pytest.raises(SchemaResolutionError) as exc:
            resolve_expression("blog.articles", [blog_source])
        assert exc.value.segment_index == 1
        assert exc.value.candidates == ["posts", "site"]

    @pytest.mark.unit
    def test_source_only(self, blog_source):
        """A bare source id fails at index 1 with the queryables."""
        with pytest.raises(SchemaResolutionError) as exc:
            resolve_expression("blog", [blog_source])
        assert exc.value.segment_index == 1
        assert exc.value.candidates == ["posts", "site"]

    @pytest.mark.unit
    def test_no_partial_match(self, blog_source):
        """Prefixes never match."""
        with pytest.raises(SchemaResolutionError):
            resolve_expression("blog.post.title", [blog_source])

    @pytest.mark.unit
    def test_scalar_has_no_fields(self, blog_source):
        """Fields below a scalar fail with an empty candidate list."""
        with pytest.raises(SchemaResolutionError) as exc:
            resolve_expression("blog.posts.title.length", [blog_source])
        assert exc.value.segment_index == 3
        assert exc.value.candidates == []

    @pytest.mark.unit
    @pytest.mark.parametrize("expression", ["", "  ", "blog..title", "blog.posts."])
    def test_malformed(self, blog_source, expression):
        """Empty strings and empty segments are validation errors."""
        with pytest.raises(ValidationError):
            resolve_expression(expression, [blog_source])


class TestTokensToState:
    """Tests for token serialization."""

    @pytest.mark.unit
    def test_serialized_fields(self, blog_source):
        """Serialized tokens keep ids, kind and reachable types."""
        state = tokens_to_state(resolve_expression("blog.posts", [blog_source]))
        assert state == [
            {
                "type": "property",
                "data_source_id": "blog",
                "field_id": "posts",
                "label": "Posts",
                "kind": "list",
                "type_ids": ["PostConnection"],
                "parent_type_id": None,
            }
        ]
