"""Visual tree data model.

A VisualNode is the descriptor produced by element wrappers: a kind tag,
named attributes, an optional click callback, optional text content and
ordered children. Trees are immutable and replaced wholesale on every
content update.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Iterator, Mapping, NamedTuple, Optional, Sequence

logger = logging.getLogger(__name__)


class Point(NamedTuple):
    """A click location in absolute screen coordinates."""
    x: int
    y: int


ClickCallback = Callable[[Point], None]


# Kinds whose geometry is described by their own shape parameters.
CIRCLE = "circle"
ELLIPSE = "ellipse"
POLYGON = "polygon"
LINE = "line"
TOGGLE = "toggle"

# Kinds whose size can be estimated from their text content.
TEXT = "text"
LINK = "link"

SVG = "svg"
RECT = "rect"
IMAGE = "image"
PATH = "path"
HTML = "html"
WEB_VIEW = "web_view"

SELF_DESCRIBING_KINDS = frozenset({CIRCLE, ELLIPSE, POLYGON, LINE, TOGGLE})
TEXT_KINDS = frozenset({TEXT, LINK})


@dataclass(frozen=True)
class VisualNode:
    """One element of the visual tree."""

    kind: str
    attrs: Mapping[str, Any] = field(default_factory=dict)
    on_click: Optional[ClickCallback] = None
    children: tuple["VisualNode", ...] = ()
    text: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "attrs", MappingProxyType(dict(self.attrs)))
        object.__setattr__(self, "children", tuple(self.children))

    @property
    def interactive(self) -> bool:
        return self.on_click is not None

    def get(self, name: str, default: Any = None) -> Any:
        """Attribute lookup that treats an explicit ``None`` as missing."""
        value = self.attrs.get(name)
        return default if value is None else value

    def walk(self) -> Iterator["VisualNode"]:
        """Yield this node and all descendants, depth-first, in sibling order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


def node(
    kind: str,
    *children: VisualNode,
    on_click: Optional[ClickCallback] = None,
    text: Optional[str] = None,
    **attrs: Any,
) -> VisualNode:
    """Convenience constructor: ``node("rect", x=0, y=0, width=10, height=10)``."""
    return VisualNode(kind=kind, attrs=attrs, on_click=on_click, children=children, text=text)


def text_dimensions(
    text: str,
    width: Optional[float] = None,
    height: Optional[float] = None,
    font_size: Optional[float] = None,
    default_font_size: float = 16.0,
) -> tuple[float, float]:
    """Estimate the box a block of text occupies.

    Explicit width/height win; whichever is missing is derived from the
    longest line and the line count.
    """
    size = font_size or default_font_size
    lines = (text or "").split("\n")
    if not width:
        width = max(len(line) for line in lines) * size - size
    if not height:
        height = 1.1 * size * (len(lines) + 1)
    return float(width), float(height)


class ToggleDelegate:
    """On/off state behind a toggle control.

    ``wrap`` builds the click callback a toggle node should carry: the state
    flips first, then the user's own callback runs.
    """

    def __init__(self, enabled: bool = False, on_change: Optional[Callable[[bool], None]] = None):
        self._enabled = enabled
        self._on_change = on_change

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        if enabled == self._enabled:
            return
        self._enabled = enabled
        if self._on_change:
            try:
                self._on_change(enabled)
            except Exception:
                logger.exception("Toggle change listener failed")

    def toggle(self) -> None:
        self.set_enabled(not self._enabled)

    def wrap(self, on_click: Optional[ClickCallback] = None) -> ClickCallback:
        def handler(point: Point) -> None:
            self.toggle()
            if on_click is not None:
                on_click(point)

        return handler


def toggle_delegates(initial_states: Sequence[bool]) -> list[ToggleDelegate]:
    """Create one delegate per initial state."""
    return [ToggleDelegate(state) for state in initial_states]
