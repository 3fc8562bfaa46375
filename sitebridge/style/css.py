"""CSS declaration parsing and validation.

StyleContext plays the role of a detached element style: a property/value
pair is valid when the context accepts it. It is created per call and
discarded, so validation never touches the document.
"""

import re

# Longhand and shorthand properties accepted by the style context
KNOWN_PROPERTIES = frozenset(
    {
        # Box model
        "width", "height", "min-width", "min-height", "max-width", "max-height",
        "margin", "margin-top", "margin-right", "margin-bottom", "margin-left",
        "margin-inline", "margin-block",
        "padding", "padding-top", "padding-right", "padding-bottom", "padding-left",
        "padding-inline", "padding-block",
        "box-sizing", "aspect-ratio", "overflow", "overflow-x", "overflow-y",
        # Layout
        "display", "position", "top", "right", "bottom", "left", "inset",
        "z-index", "float", "clear", "visibility",
        "flex", "flex-direction", "flex-wrap", "flex-flow", "flex-grow",
        "flex-shrink", "flex-basis", "order",
        "justify-content", "justify-items", "justify-self",
        "align-content", "align-items", "align-self",
        "place-content", "place-items", "place-self",
        "gap", "row-gap", "column-gap",
        "grid", "grid-template", "grid-template-columns", "grid-template-rows",
        "grid-template-areas", "grid-area", "grid-column", "grid-row",
        "grid-column-start", "grid-column-end", "grid-row-start", "grid-row-end",
        "grid-auto-flow", "grid-auto-columns", "grid-auto-rows",
        # Typography
        "color", "font", "font-family", "font-size", "font-weight", "font-style",
        "font-variant", "line-height", "letter-spacing", "word-spacing",
        "text-align", "text-decoration", "text-decoration-color",
        "text-decoration-line", "text-decoration-style", "text-transform",
        "text-indent", "text-shadow", "text-overflow", "white-space",
        "word-break", "overflow-wrap", "vertical-align", "list-style",
        "list-style-type", "list-style-position", "list-style-image",
        # Backgrounds and borders
        "background", "background-color", "background-image",
        "background-position", "background-size", "background-repeat",
        "background-attachment", "background-clip", "background-origin",
        "border", "border-top", "border-right", "border-bottom", "border-left",
        "border-width", "border-style", "border-color", "border-radius",
        "border-top-left-radius", "border-top-right-radius",
        "border-bottom-left-radius", "border-bottom-right-radius",
        "border-collapse", "border-spacing",
        "outline", "outline-width", "outline-style", "outline-color",
        "outline-offset", "box-shadow",
        # Effects
        "opacity", "filter", "backdrop-filter", "mix-blend-mode", "transform",
        "transform-origin", "transition", "transition-property",
        "transition-duration", "transition-timing-function", "transition-delay",
        "animation", "animation-name", "animation-duration", "animation-delay",
        "animation-iteration-count", "animation-timing-function",
        "cursor", "pointer-events", "user-select", "object-fit",
        "object-position", "content", "clip-path", "scroll-behavior",
    }
)

_VENDOR_PREFIX = re.compile(r"^-(webkit|moz|ms|o)-")
_PROPERTY_NAME = re.compile(r"^-{0,2}[a-z][a-z0-9-]*$")
_FORBIDDEN_VALUE = re.compile(r"[{};<>]|expression\s*\(|javascript:", re.IGNORECASE)


class StyleContext:
    """Detached declaration block that accepts only valid pairs.

    Example:
        >>> ctx = StyleContext()
        >>> ctx.set_property("color", "red")
        True
        >>> ctx.set_property("colour", "red")
        False
    """

    def __init__(self):
        self.declarations: dict[str, str] = {}

    def set_property(self, name: str, value: str) -> bool:
        name = name.strip().lower()
        value = value.strip() if isinstance(value, str) else ""
        if not is_known_property(name) or not is_valid_value(value):
            return False
        self.declarations[name] = value
        return True


def is_known_property(name: str) -> bool:
    """Known properties, custom properties (--x) and vendor-prefixed ones."""
    if not _PROPERTY_NAME.match(name):
        return False
    if name.startswith("--"):
        return len(name) > 2
    return _VENDOR_PREFIX.sub("", name) in KNOWN_PROPERTIES


def is_valid_value(value: str) -> bool:
    """Non-empty, no block or markup characters, balanced parens and quotes."""
    if not value or _FORBIDDEN_VALUE.search(value):
        return False
    depth = 0
    quote = None
    for char in value:
        if quote:
            if char == quote:
                quote = None
            continue
        if char in ("'", '"'):
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0 and quote is None


def parse_declarations(css: str) -> list[tuple[str, str]]:
    """Split a declaration string on ``;`` then on the first ``:``.

    Entries without a colon are returned with an empty value so validation
    reports them.

    Example:
        >>> parse_declarations("color: red; margin:0 auto;")
        [('color', 'red'), ('margin', '0 auto')]
    """
    pairs = []
    for chunk in css.split(";"):
        if not chunk.strip():
            continue
        name, _, value = chunk.partition(":")
        pairs.append((name.strip().lower(), value.strip()))
    return pairs


def partition_declarations(
    pairs: list[tuple[str, str]],
) -> tuple[dict[str, str], dict[str, str]]:
    """Validate pairs against a throwaway StyleContext.

    Returns:
        Tuple of (valid, invalid) maps.
    """
    context = StyleContext()
    valid: dict[str, str] = {}
    invalid: dict[str, str] = {}
    for name, value in pairs:
        if context.set_property(name, value):
            valid[name.strip().lower()] = context.declarations[name.strip().lower()]
        else:
            invalid[name] = value if isinstance(value, str) else repr(value)
    return valid, invalid


__all__ = [
    "KNOWN_PROPERTIES",
    "StyleContext",
    "is_known_property",
    "is_valid_value",
    "parse_declarations",
    "partition_declarations",
]
