"""Tests for markup parsing."""

import pytest

from .lib import parse_markup


class TestParseMarkup:
    """Tests for HTML to ComponentSpec conversion."""

    @pytest.mark.unit
    def test_heading_is_text(self):
        """Text-bearing tags are text specs with their content."""
        result = parse_markup("<h1>Hello</h1>")
        assert len(result.specs) == 1
        spec = result.specs[0]
        assert spec.tag == "h1"
        assert spec.text is True
        assert spec.content == "Hello"
        assert result.warnings == []

    @pytest.mark.unit
    def test_text_keeps_inner_markup(self):
        """Inline markup inside text tags stays as content."""
        result = parse_markup('<p>Read <a href="/more">more</a> now</p>')
        spec = result.specs[0]
        assert spec.content == 'Read <a href="/more">more</a> now'
        assert spec.children == []

    @pytest.mark.unit
    def test_nested_structure(self):
        """Container elements become children."""
        result = parse_markup(
            '<section class="hero"><h2>Title</h2><img src="a.png" alt="A"></section>'
        )
        section = result.specs[0]
        assert section.classes == ["hero"]
        assert [c.tag for c in section.children] == ["h2", "img"]
        assert section.children[1].attributes == {"src": "a.png", "alt": "A"}

    @pytest.mark.unit
    def test_multiple_top_level(self):
        """Several top-level elements are returned in order."""
        result = parse_markup("<p>One</p><p>Two</p>")
        assert [s.content for s in result.specs] == ["One", "Two"]

    @pytest.mark.unit
    def test_inline_style_stripped_per_node(self):
        """Every node with an inline style produces one warning."""
        result = parse_markup(
            '<div style="color:red"><p style="margin:0">x</p><span>y</span></div>'
        )
        assert len(result.warnings) == 2
        assert all("inline style" in w for w in result.warnings)
        assert "style" not in result.specs[0].attributes

    @pytest.mark.unit
    def test_style_removed_inside_text_content(self):
        """Captured inner markup loses inline styles too."""
        result = parse_markup('<p>a <b style="color:red">b</b></p>')
        assert result.specs[0].content == "a <b>b</b>"
        assert result.warnings == [
            "Removed inline style from <b>; use style(action:'set') on a selector instead"
        ]

    @pytest.mark.unit
    def test_script_and_style_removed(self):
        """Script and style elements are dropped with a warning each."""
        result = parse_markup(
            "<div><script>alert(1)</script><style>.a{}</style><p>ok</p></div>"
        )
        div = result.specs[0]
        assert [c.tag for c in div.children] == ["p"]
        assert len(result.warnings) == 2
        assert "alert" not in str(div)

    @pytest.mark.unit
    def test_script_inside_text_removed(self):
        """Scripts are stripped from text content as well."""
        result = parse_markup("<p>hi<script>x()</script></p>")
        assert result.specs[0].content == "hi"
        assert len(result.warnings) == 1

    @pytest.mark.unit
    def test_plain_text_in_container(self):
        """A container with only text carries it as content."""
        result = parse_markup("<div>Just text</div>")
        assert result.specs[0].content == "Just text"
        assert result.specs[0].children == []

    @pytest.mark.unit
    def test_mixed_text_wrapped(self):
        """Text mixed with elements becomes span text specs."""
        result = parse_markup("<div>Intro<hr>Outro</div>")
        children = result.specs[0].children
        assert [c.tag for c in children] == ["span", "hr", "span"]
        assert children[0].text is True

    @pytest.mark.unit
    def test_top_level_text(self):
        """Bare text becomes a span."""
        result = parse_markup("Hello")
        assert result.specs[0].tag == "span"
        assert result.specs[0].content == "Hello"

    @pytest.mark.unit
    def test_document_wrappers_unwrapped(self):
        """html/head/body are transparent; title is skipped."""
        result = parse_markup(
            "<html><head><title>T</title></head><body><main></main></body></html>"
        )
        assert [s.tag for s in result.specs] == ["main"]

    @pytest.mark.unit
    def test_id_and_classes(self):
        """ids and classes are extracted; duplicates dropped."""
        result = parse_markup('<div id="intro" class="a b a"></div>')
        spec = result.specs[0]
        assert spec.html_id == "intro"
        assert spec.classes == ["a", "b"]

    @pytest.mark.unit
    def test_unclosed_elements(self):
        """Unclosed elements are closed at the end of input."""
        result = parse_markup("<div><section>")
        assert result.specs[0].children[0].tag == "section"

    @pytest.mark.unit
    def test_count(self):
        """count includes the component and all descendants."""
        result = parse_markup("<ul><li>a</li><li>b</li></ul>")
        assert result.specs[0].count() == 3
