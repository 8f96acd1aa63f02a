"""Serializes a visual tree into markdown the host can display.

Each top-level node becomes one SVG document, URI-encoded into an
``<img>`` tag. The host only renders static markup, so this is the whole
visual side of a content generation.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional
from urllib.parse import quote
from xml.sax.saxutils import escape, quoteattr

from ..config import CanvasConfig
from .nodes import HTML, IMAGE, LINK, SVG, TOGGLE, WEB_VIEW, VisualNode

SVG_NAMESPACE = "http://www.w3.org/2000/svg"
XLINK_NAMESPACE = "http://www.w3.org/1999/xlink"

# Characters encodeURI leaves alone, minus "#", which would start a fragment.
_URI_SAFE = ";,/?:@&=+$-_.!~*'()"

_TAGS = {
    TOGGLE: "g",
    LINK: "a",
    WEB_VIEW: "image",
    HTML: "image",
}

_ATTRIBUTE_NAMES = {
    "radius": "r",
    "image_data_uri": "xlink:href",
    "href": "xlink:href",
    "color": "fill",
}

# Attributes that only matter to hit testing or to wrappers.
_SKIPPED = frozenset({"id"})


def _attribute_name(name: str) -> str:
    if name in _ATTRIBUTE_NAMES:
        return _ATTRIBUTE_NAMES[name]
    return name.replace("_", "-")


def _attribute_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return " ".join(
            ",".join(_attribute_value(v) for v in item) if isinstance(item, (list, tuple))
            else _attribute_value(item)
            for item in value
        )
    return str(value)


def _attributes(node: VisualNode, canvas: CanvasConfig) -> dict[str, str]:
    attrs: dict[str, str] = {}
    if node.kind == SVG:
        attrs["xmlns"] = SVG_NAMESPACE
        attrs["xmlns:xlink"] = XLINK_NAMESPACE
        attrs["width"] = _attribute_value(node.get("width", canvas.width))
        attrs["height"] = _attribute_value(node.get("height", canvas.height))
    for name, value in node.attrs.items():
        if value is None or name in _SKIPPED or callable(value):
            continue
        if name == "visible":
            attrs["visibility"] = "visible" if value else "hidden"
            continue
        if node.kind == SVG and name in ("width", "height"):
            continue
        attrs[_attribute_name(name)] = _attribute_value(value)
    return attrs


def to_svg(node: VisualNode, canvas: Optional[CanvasConfig] = None) -> str:
    """Render one node and its subtree as an SVG fragment."""
    canvas = canvas or CanvasConfig()
    tag = _TAGS.get(node.kind, node.kind)
    attrs = "".join(f" {name}={quoteattr(value)}" for name, value in _attributes(node, canvas).items())
    inner = escape(node.text) if node.text else ""
    inner += "".join(to_svg(child, canvas) for child in node.children)
    if node.kind == IMAGE or not inner:
        return f"<{tag}{attrs}/>"
    return f"<{tag}{attrs}>{inner}</{tag}>"


def to_data_uri(svg: str) -> str:
    return quote(f"data:image/svg+xml;utf8,{svg}", safe=_URI_SAFE)


def embed(node: VisualNode, canvas: Optional[CanvasConfig] = None) -> str:
    """Wrap one top-level node as an embedded image tag."""
    canvas = canvas or CanvasConfig()
    src = to_data_uri(to_svg(node, canvas))
    return f'<img src="{src}" alt="{canvas.alt_text}" />'


def render_markup(roots: Iterable[VisualNode], canvas: Optional[CanvasConfig] = None) -> str:
    """Markup for a whole tree; empty when there is nothing to show."""
    canvas = canvas or CanvasConfig()
    return "".join(embed(root, canvas) for root in roots)
