"""HTML markup to component specs.

Parses the markup passed to ``component.add`` and ``symbol.create`` into
plain ComponentSpec trees. Inline styles, ``<script>`` and ``<style>``
elements are stripped with a warning each; text-bearing tags keep their
inner markup as content instead of becoming child components.
"""

from dataclasses import dataclass, field
from html import escape
from html.parser import HTMLParser

from sitebridge.editor import TEXT_TAGS

# Elements removed together with their content, with a warning
STRIPPED_TAGS = {"script", "style"}

# Non-visual elements dropped silently, with their content
SKIP_TAGS = {"title", "noscript", "template"}

# Document wrappers whose children are lifted to the parent
TRANSPARENT_TAGS = {"html", "head", "body"}

# Self-closing tags
VOID_TAGS = {
    "area",
    "base",
    "br",
    "col",
    "embed",
    "hr",
    "img",
    "input",
    "link",
    "meta",
    "param",
    "source",
    "track",
    "wbr",
}


@dataclass
class ComponentSpec:
    """A parsed element, not yet part of any tree.

    Attributes:
        tag: Lowercase tag name.
        html_id: The ``id`` attribute from the markup, if any.
        classes: Class names in markup order.
        attributes: Remaining attributes (``style`` never included).
        content: Inner markup for text-bearing tags, or plain text.
        text: Whether the tag is text-bearing.
        children: Child element specs.
        had_style: An inline ``style`` attribute was stripped.
    """

    tag: str
    html_id: str | None = None
    classes: list[str] = field(default_factory=list)
    attributes: dict[str, str] = field(default_factory=dict)
    content: str | None = None
    text: bool = False
    children: list["ComponentSpec"] = field(default_factory=list)
    had_style: bool = False

    def count(self) -> int:
        return 1 + sum(child.count() for child in self.children)


@dataclass
class ParseResult:
    """Top-level specs plus the warnings produced while stripping."""

    specs: list[ComponentSpec]
    warnings: list[str] = field(default_factory=list)


class _Frame:
    """Open element on the parser stack; items are specs or text chunks."""

    def __init__(self, spec: ComponentSpec):
        self.spec = spec
        self.items: list[ComponentSpec | str] = []


class MarkupBuilder(HTMLParser):
    """HTML parser that builds ComponentSpec trees."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.root = _Frame(ComponentSpec(tag="#root"))
        self.stack: list[_Frame] = [self.root]
        self.warnings: list[str] = []
        self._skip_tag: str | None = None
        self._skip_depth = 0
        # Text-tag capture: inner markup accumulated verbatim
        self._capture: list[str] | None = None
        self._capture_tag: str | None = None
        self._capture_depth = 0

    # -------------------------------------------------------------------------
    # HTMLParser callbacks
    # -------------------------------------------------------------------------

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if self._skip_tag is not None:
            if tag == self._skip_tag:
                self._skip_depth += 1
            return

        if tag in STRIPPED_TAGS or tag in SKIP_TAGS:
            self._strip(tag)
            self._skip_tag = tag
            self._skip_depth = 1
            return

        if self._capture is not None:
            if any(name == "style" for name, _ in attrs):
                self._warn_inline_style(tag)
            self._capture.append(_render_starttag(tag, attrs))
            if tag == self._capture_tag and tag not in VOID_TAGS:
                self._capture_depth += 1
            return

        if tag in TRANSPARENT_TAGS or tag in ("meta", "link", "base"):
            return

        spec = _spec_from_attrs(tag, attrs)
        if spec.had_style:
            self._warn_inline_style(tag)
        self.stack[-1].items.append(spec)

        if tag in VOID_TAGS:
            return
        if tag in TEXT_TAGS:
            spec.text = True
            self._capture = []
            self._capture_tag = tag
            self._capture_depth = 1
            self.stack.append(_Frame(spec))
            return
        self.stack.append(_Frame(spec))

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if self._skip_tag is not None:
            return
        if tag in STRIPPED_TAGS or tag in SKIP_TAGS:
            self._strip(tag)
            return
        if self._capture is not None:
            if any(name == "style" for name, _ in attrs):
                self._warn_inline_style(tag)
            self._capture.append(_render_starttag(tag, attrs, close=True))
            return
        self.handle_starttag(tag, attrs)
        if tag not in VOID_TAGS:
            self.handle_endtag(tag)

    def handle_endtag(self, tag: str) -> None:
        if self._skip_tag is not None:
            if tag == self._skip_tag:
                self._skip_depth -= 1
                if self._skip_depth == 0:
                    self._skip_tag = None
            return

        if self._capture is not None:
            if tag == self._capture_tag:
                self._capture_depth -= 1
                if self._capture_depth == 0:
                    self._finish_capture()
                    return
            if tag not in VOID_TAGS:
                self._capture.append(f"</{tag}>")
            return

        if tag in VOID_TAGS or tag in TRANSPARENT_TAGS:
            return

        # Pop to the matching open element; stray end tags are ignored
        for depth in range(len(self.stack) - 1, 0, -1):
            if self.stack[depth].spec.tag == tag:
                for frame in self.stack[depth:]:
                    _finalize(frame)
                del self.stack[depth:]
                return

    def handle_data(self, data: str) -> None:
        if self._skip_tag is not None:
            return
        if self._capture is not None:
            self._capture.append(escape(data, quote=False))
            return
        if data.strip():
            self.stack[-1].items.append(" ".join(data.split()))

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _warn_inline_style(self, tag: str) -> None:
        self.warnings.append(
            f"Removed inline style from <{tag}>; "
            "use style(action:'set') on a selector instead"
        )

    def _strip(self, tag: str) -> None:
        if tag in STRIPPED_TAGS:
            self.warnings.append(
                f"Removed <{tag}> element; scripts and styles are not allowed in markup"
            )

    def _finish_capture(self) -> None:
        frame = self.stack.pop()
        content = "".join(self._capture or []).strip()
        frame.spec.content = content or None
        self._capture = None
        self._capture_tag = None
        self._capture_depth = 0

    def get_result(self) -> ParseResult:
        """Close any open elements and return the top-level specs."""
        if self._capture is not None:
            self._finish_capture()
        for frame in reversed(self.stack[1:]):
            _finalize(frame)
        del self.stack[1:]
        _finalize(self.root, wrap_text=True)
        return ParseResult(specs=list(self.root.spec.children), warnings=self.warnings)


def _spec_from_attrs(tag: str, attrs: list[tuple[str, str | None]]) -> ComponentSpec:
    spec = ComponentSpec(tag=tag)
    for name, value in attrs:
        value = value if value is not None else ""
        if name == "style":
            spec.had_style = True
        elif name == "class":
            for cls in value.split():
                if cls not in spec.classes:
                    spec.classes.append(cls)
        elif name == "id":
            spec.html_id = value or None
        else:
            spec.attributes[name] = value
    return spec


def _render_starttag(
    tag: str, attrs: list[tuple[str, str | None]], close: bool = False
) -> str:
    """Rebuild a start tag for captured text content, minus inline styles."""
    parts = [tag]
    for name, value in attrs:
        if name == "style":
            continue
        if value is None:
            parts.append(name)
        else:
            parts.append(f'{name}="{escape(value)}"')
    return f"<{' '.join(parts)}{' /' if close else ''}>"


def _finalize(frame: _Frame, wrap_text: bool = False) -> None:
    """Turn collected items into children and content.

    Text alone becomes the element's content. Text mixed with elements (or
    any text at the top level) becomes ``span`` text specs in place.
    """
    spec = frame.spec
    if spec.text:
        return
    texts = [item for item in frame.items if isinstance(item, str)]
    if texts and not wrap_text and len(texts) == len(frame.items):
        spec.content = " ".join(texts)
        return
    children = []
    for item in frame.items:
        if isinstance(item, str):
            children.append(ComponentSpec(tag="span", content=item, text=True))
        else:
            children.append(item)
    spec.children = children


def parse_markup(markup: str) -> ParseResult:
    """Parse an HTML fragment into component specs.

    Args:
        markup: HTML string, one or more top-level elements.

    Returns:
        ParseResult with the top-level specs and stripping warnings.

    Example:
        >>> result = parse_markup('<h1 style="color:red">Hello</h1>')
        >>> result.specs[0].tag, result.specs[0].content
        ('h1', 'Hello')
        >>> len(result.warnings)
        1
    """
    builder = MarkupBuilder()
    builder.feed(markup)
    builder.close()
    return builder.get_result()


__all__ = [
    "ComponentSpec",
    "ParseResult",
    "MarkupBuilder",
    "parse_markup",
    "STRIPPED_TAGS",
    "VOID_TAGS",
]
