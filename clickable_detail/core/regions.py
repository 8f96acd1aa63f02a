"""Region registry: the flat, ordered list of clickable areas for one content generation.

``build_registry`` walks the visual tree once, turning every node that
carries a click callback into a Region with absolute hit-test geometry.
Top-level nodes are stacked vertically: each one is pushed down by the sum
of the declared heights of the top-level nodes before it.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from ..config import HitTestConfig
from .errors import MissingGeometryError
from .geometry import (
    BoxGeometry,
    CircleGeometry,
    EllipseGeometry,
    Geometry,
    PolygonGeometry,
    SegmentGeometry,
    ShapeKind,
    ToggleGeometry,
    contains,
    parse_points,
)
from .nodes import (
    CIRCLE,
    ELLIPSE,
    LINE,
    POLYGON,
    TEXT_KINDS,
    TOGGLE,
    ClickCallback,
    VisualNode,
    text_dimensions,
)

logger = logging.getLogger(__name__)

_generations = itertools.count(1)


@dataclass(frozen=True)
class Region:
    """A hit-testable area and the callback it routes to."""

    shape_kind: ShapeKind
    geometry: Geometry
    callback: ClickCallback
    label: str = ""

    def contains(self, x: float, y: float) -> bool:
        return contains(self.shape_kind, self.geometry, x, y)


@dataclass(frozen=True)
class RegionRegistry:
    """Immutable, ordered regions. Earlier regions win on overlap."""

    regions: tuple[Region, ...] = ()
    generation: int = 0

    def __iter__(self) -> Iterator[Region]:
        return iter(self.regions)

    def __len__(self) -> int:
        return len(self.regions)

    def __getitem__(self, index: int) -> Region:
        return self.regions[index]

    def find(self, x: float, y: float) -> Optional[Region]:
        """First region containing the point, in declaration order."""
        for region in self.regions:
            if region.contains(x, y):
                return region
        return None


EMPTY_REGISTRY = RegionRegistry()


# =============================================================================
# Geometry extraction
# =============================================================================

def _number(node: VisualNode, *names: str) -> Optional[float]:
    """First attribute among ``names`` that is set, as a float."""
    for name in names:
        value = node.get(name)
        if value is not None:
            try:
                return float(value)
            except (TypeError, ValueError):
                raise MissingGeometryError(node.kind, [name], f"{value!r} is not a number")
    return None


def _require(node: VisualNode, wanted: dict[str, tuple[str, ...]]) -> dict[str, float]:
    """Resolve every key in ``wanted`` or raise naming all missing attributes."""
    values = {key: _number(node, *names) for key, names in wanted.items()}
    missing = [wanted[key][0] for key, value in values.items() if value is None]
    if missing:
        raise MissingGeometryError(node.kind, missing)
    return values


def _circle(node: VisualNode, offset: float, config: HitTestConfig) -> CircleGeometry:
    v = _require(node, {"cx": ("cx",), "cy": ("cy",), "r": ("radius", "r")})
    m = config.content_margin
    return CircleGeometry(cx=v["cx"] + m, cy=v["cy"] + m + offset, radius=v["r"])


def _ellipse(node: VisualNode, offset: float, config: HitTestConfig) -> EllipseGeometry:
    v = _require(node, {"cx": ("cx",), "cy": ("cy",), "rx": ("rx",), "ry": ("ry",)})
    m = config.content_margin
    return EllipseGeometry(cx=v["cx"] + m, cy=v["cy"] + m + offset, rx=v["rx"], ry=v["ry"])


def _polygon(node: VisualNode, offset: float, config: HitTestConfig) -> PolygonGeometry:
    points = node.get("points")
    if points is None:
        raise MissingGeometryError(node.kind, ["points"])
    try:
        vertices = parse_points(points)
    except (TypeError, ValueError) as e:
        raise MissingGeometryError(node.kind, ["points"], str(e)) from e
    if len(vertices) < 3:
        raise MissingGeometryError(node.kind, ["points"], "at least three vertices required")
    m = config.content_margin
    shifted = [(px + m, py + m + offset) for px, py in vertices]
    return PolygonGeometry(vertices=shifted, ray_origin_y=config.ray_origin_y)


def _segment(node: VisualNode, offset: float, config: HitTestConfig) -> SegmentGeometry:
    v = _require(node, {"x1": ("x1",), "y1": ("y1",), "x2": ("x2",), "y2": ("y2",)})
    stroke = _number(node, "stroke_width")
    m = config.content_margin
    return SegmentGeometry(
        x1=v["x1"] + m,
        y1=v["y1"] + m + offset,
        x2=v["x2"] + m,
        y2=v["y2"] + m + offset,
        stroke_width=config.default_stroke_width if stroke is None else stroke,
    )


def _toggle(node: VisualNode, offset: float, config: HitTestConfig) -> ToggleGeometry:
    v = _require(node, {"x": ("x",), "y": ("y",)})
    m = config.content_margin
    return ToggleGeometry(
        left=v["x"] + m,
        top=v["y"] + m + offset,
        width=config.toggle_hit_width,
        height=config.toggle_hit_height,
    )


def _box(node: VisualNode, offset: float, config: HitTestConfig) -> BoxGeometry:
    if node.kind in TEXT_KINDS:
        position = _require(node, {"x": ("x",), "y": ("y",)})
        width, height = text_dimensions(
            node.text or "",
            width=_number(node, "width"),
            height=_number(node, "height"),
            font_size=_number(node, "font_size"),
            default_font_size=config.default_font_size,
        )
        v = {**position, "width": width, "height": height}
    else:
        v = _require(node, {"x": ("x",), "y": ("y",), "width": ("width",), "height": ("height",)})
    return BoxGeometry(
        x=v["x"],
        y=v["y"] + offset,
        width=v["width"],
        height=v["height"],
        margin=config.content_margin,
    )


_BUILDERS = {
    ShapeKind.CIRCLE: _circle,
    ShapeKind.ELLIPSE: _ellipse,
    ShapeKind.POLYGON: _polygon,
    ShapeKind.SEGMENT: _segment,
    ShapeKind.TOGGLE: _toggle,
    ShapeKind.BOUNDING_BOX: _box,
}

_SHAPE_KINDS = {
    CIRCLE: ShapeKind.CIRCLE,
    ELLIPSE: ShapeKind.ELLIPSE,
    POLYGON: ShapeKind.POLYGON,
    LINE: ShapeKind.SEGMENT,
    TOGGLE: ShapeKind.TOGGLE,
}


def shape_kind_for(node: VisualNode) -> ShapeKind:
    """Map a node kind to its hit-test variant. Anything unknown is a box."""
    return _SHAPE_KINDS.get(node.kind, ShapeKind.BOUNDING_BOX)


def region_for(node: VisualNode, offset: float = 0.0, config: Optional[HitTestConfig] = None) -> Region:
    """Build the region for one interactive node at the given stacking offset."""
    if node.on_click is None:
        raise ValueError(f"{node.kind!r} node has no click callback")
    config = config or HitTestConfig()
    kind = shape_kind_for(node)
    geometry = _BUILDERS[kind](node, offset, config)
    label = str(node.get("id", node.kind))
    return Region(shape_kind=kind, geometry=geometry, callback=node.on_click, label=label)


def stacking_offsets(roots: Iterable[VisualNode]) -> Iterator[tuple[VisualNode, float]]:
    """Pair each top-level node with the summed heights of the ones before it."""
    offset = 0.0
    for root in roots:
        yield root, offset
        try:
            offset += float(root.get("height", 0))
        except (TypeError, ValueError):
            logger.debug("Ignoring non-numeric height on top-level %r", root.kind)


def build_registry(
    roots: Iterable[VisualNode],
    config: Optional[HitTestConfig] = None,
) -> RegionRegistry:
    """Flatten a visual tree into a new registry.

    Raises MissingGeometryError as soon as an interactive node without
    usable geometry is reached; nothing is published in that case.
    """
    config = config or HitTestConfig()
    regions: list[Region] = []
    for root, offset in stacking_offsets(roots):
        for current in root.walk():
            if current.on_click is not None:
                regions.append(region_for(current, offset, config))
    registry = RegionRegistry(regions=tuple(regions), generation=next(_generations))
    logger.debug("Built registry generation %d with %d regions", registry.generation, len(registry))
    return registry
