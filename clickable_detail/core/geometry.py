"""
Point-in-shape tests for every clickable primitive.

Each shape kind has its own frozen geometry record and one hit-test
function. Geometry is stored in absolute screen coordinates: the host
content margin and the stacking offset are applied once, when the record
is built, so tests only compare numbers.

All tests are total: degenerate input (zero radii, vertical slopes,
repeated vertices) yields "no hit" instead of an exception.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence, Union

import numpy as np

from ..config import CONTENT_MARGIN, RAY_ORIGIN_Y

logger = logging.getLogger(__name__)

# Slack on bound comparisons in the ray caster. Axis-parallel edges have a
# zero-width bounding segment that float rounding would otherwise miss.
BOUNDS_TOLERANCE = 1e-9


class ShapeKind(Enum):
    """Variant tag selecting the hit test for a region."""
    BOUNDING_BOX = "bounding_box"
    CIRCLE = "circle"
    ELLIPSE = "ellipse"
    POLYGON = "polygon"
    SEGMENT = "segment"
    TOGGLE = "toggle"


# =============================================================================
# Geometry records
# =============================================================================

@dataclass(frozen=True)
class BoxGeometry:
    """Declared rectangle; the margin trims its left, right and top edges."""
    x: float
    y: float
    width: float
    height: float
    margin: float = CONTENT_MARGIN


@dataclass(frozen=True)
class CircleGeometry:
    cx: float
    cy: float
    radius: float


@dataclass(frozen=True)
class EllipseGeometry:
    cx: float
    cy: float
    rx: float
    ry: float


@dataclass(frozen=True)
class PolygonGeometry:
    """Closed polygon. Vertices are an (n, 2) float array, n >= 3."""
    vertices: np.ndarray
    ray_origin_y: float = RAY_ORIGIN_Y

    def __post_init__(self):
        vertices = np.asarray(self.vertices, dtype=np.float64).reshape(-1, 2)
        vertices.setflags(write=False)
        object.__setattr__(self, "vertices", vertices)

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """(min_x, min_y, max_x, max_y)"""
        mins = self.vertices.min(axis=0)
        maxs = self.vertices.max(axis=0)
        return float(mins[0]), float(mins[1]), float(maxs[0]), float(maxs[1])

    def __eq__(self, other):
        if not isinstance(other, PolygonGeometry):
            return NotImplemented
        return self.ray_origin_y == other.ray_origin_y and np.array_equal(self.vertices, other.vertices)

    def __hash__(self):
        return hash((self.vertices.tobytes(), self.ray_origin_y))


@dataclass(frozen=True)
class SegmentGeometry:
    x1: float
    y1: float
    x2: float
    y2: float
    stroke_width: float = 1.0


@dataclass(frozen=True)
class ToggleGeometry:
    """Fixed hit zone anchored at the control's top-left corner (inclusive)."""
    left: float
    top: float
    width: float
    height: float


Geometry = Union[
    BoxGeometry, CircleGeometry, EllipseGeometry, PolygonGeometry, SegmentGeometry, ToggleGeometry
]


# =============================================================================
# Hit tests
# =============================================================================

def box_contains(box: BoxGeometry, x: float, y: float) -> bool:
    """Strict test against the margin-adjusted rectangle.

    The bottom edge is not trimmed: the host pads left, right and top only.
    """
    left = box.x + box.margin
    right = box.x + box.width - box.margin
    top = box.y + box.margin
    bottom = box.y + box.height
    return left < x < right and top < y < bottom


def circle_contains(circle: CircleGeometry, x: float, y: float) -> bool:
    return math.hypot(x - circle.cx, y - circle.cy) < circle.radius


def ellipse_contains(ellipse: EllipseGeometry, x: float, y: float) -> bool:
    if ellipse.rx == 0 or ellipse.ry == 0:
        return False
    dx = (x - ellipse.cx) / ellipse.rx
    dy = (y - ellipse.cy) / ellipse.ry
    return dx * dx + dy * dy < 1


def _slope(x1: float, y1: float, x2: float, y2: float) -> float:
    """Slope of the line through two points; inf/nan when undefined."""
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.float64(y2 - y1) / np.float64(x2 - x1))


def segment_contains(segment: SegmentGeometry, x: float, y: float) -> bool:
    """Vertical distance from the infinite line through both endpoints.

    Not clipped to the segment's extent: a click on the line's extension
    past either endpoint still hits.
    """
    m = _slope(segment.x1, segment.y1, segment.x2, segment.y2)
    if not math.isfinite(m):
        return False
    b = segment.y1 - m * segment.x1
    return abs(y - (m * x + b)) < segment.stroke_width


def _count_vertical_crossings(polygon: PolygonGeometry, x: float, y: float) -> int:
    """Crossings of the vertical ray x = const from the reference y down to (x, y).

    An edge is crossed when its endpoints lie on opposite sides of the ray,
    one side closed and one open, so a vertex on the ray counts once.
    """
    tol = BOUNDS_TOLERANCE
    ray_y1 = polygon.ray_origin_y
    p = polygon.vertices
    q = np.roll(p, -1, axis=0)

    crosses = (p[:, 0] > x) != (q[:, 0] > x)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        y0 = p[:, 1] + (x - p[:, 0]) * (q[:, 1] - p[:, 1]) / (q[:, 0] - p[:, 0])
        on_ray = (y0 >= min(ray_y1, y) - tol) & (y0 <= max(ray_y1, y) + tol)

    return int(np.count_nonzero(crosses & np.isfinite(y0) & on_ray))


def _count_crossings(polygon: PolygonGeometry, x: float, y: float) -> int:
    """Count polygon edges crossed by the ray from above the first vertex to (x, y)."""
    vertices = polygon.vertices
    min_x, min_y, max_x, max_y = polygon.bounds
    tol = BOUNDS_TOLERANCE

    ray_x1, ray_y1 = vertices[0, 0], polygon.ray_origin_y
    if x == ray_x1:
        return _count_vertical_crossings(polygon, x, y)

    p = vertices
    q = np.roll(vertices, -1, axis=0)

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        ray_m = np.float64(y - ray_y1) / np.float64(x - ray_x1)
        ray_b = ray_y1 - ray_m * ray_x1

        edge_m = (q[:, 1] - p[:, 1]) / (q[:, 0] - p[:, 0])
        edge_b = p[:, 1] - edge_m * p[:, 0]

        # Vertical edges are the line x = p.x.
        vertical = p[:, 0] == q[:, 0]
        x0 = np.where(vertical, p[:, 0], (edge_b - ray_b) / (ray_m - edge_m))
        y0 = ray_m * x0 + ray_b

        degenerate = np.all(p == q, axis=1)
        finite = np.isfinite(x0) & np.isfinite(y0) & ~degenerate

        on_ray = (
            (x0 >= min(ray_x1, x) - tol) & (x0 <= max(ray_x1, x) + tol)
            & (y0 >= min(ray_y1, y) - tol) & (y0 <= max(ray_y1, y) + tol)
        )
        on_edge = (
            (x0 >= np.minimum(p[:, 0], q[:, 0]) - tol) & (x0 <= np.maximum(p[:, 0], q[:, 0]) + tol)
            & (y0 >= np.minimum(p[:, 1], q[:, 1]) - tol) & (y0 <= np.maximum(p[:, 1], q[:, 1]) + tol)
        )
        in_bounds = (
            (x0 >= min_x - tol) & (x0 <= max_x + tol)
            & (y0 >= min_y - tol) & (y0 <= max_y + tol)
        )

    return int(np.count_nonzero(finite & on_ray & on_edge & in_bounds))


def polygon_contains(polygon: PolygonGeometry, x: float, y: float) -> bool:
    """Ray-casting test; an odd number of crossings means inside.

    Points outside the axis-aligned bounding box are rejected before any
    ray is cast.
    """
    if len(polygon.vertices) < 3:
        return False
    min_x, min_y, max_x, max_y = polygon.bounds
    if x < min_x or x > max_x or y < min_y or y > max_y:
        return False
    return _count_crossings(polygon, x, y) % 2 == 1


def toggle_contains(toggle: ToggleGeometry, x: float, y: float) -> bool:
    return (
        toggle.left <= x <= toggle.left + toggle.width
        and toggle.top <= y <= toggle.top + toggle.height
    )


HIT_TESTS: dict[ShapeKind, Callable[..., bool]] = {
    ShapeKind.BOUNDING_BOX: box_contains,
    ShapeKind.CIRCLE: circle_contains,
    ShapeKind.ELLIPSE: ellipse_contains,
    ShapeKind.POLYGON: polygon_contains,
    ShapeKind.SEGMENT: segment_contains,
    ShapeKind.TOGGLE: toggle_contains,
}


def contains(kind: ShapeKind, geometry: Geometry, x: float, y: float) -> bool:
    """Run the hit test for ``kind``. Arithmetic failures count as a miss."""
    try:
        return bool(HIT_TESTS[kind](geometry, x, y))
    except ArithmeticError:
        logger.debug("Degenerate %s geometry treated as no hit: %r", kind.value, geometry)
        return False


def parse_points(points: Union[str, Sequence[Sequence[float]]]) -> list[tuple[float, float]]:
    """Parse ``"x1,y1 x2,y2 ..."`` or a sequence of pairs into vertex tuples.

    Raises ValueError on malformed input.
    """
    if isinstance(points, str):
        pairs = [chunk.split(",") for chunk in points.split()]
    else:
        pairs = [list(pair) for pair in points]
    vertices = []
    for pair in pairs:
        if len(pair) != 2:
            raise ValueError(f"Bad polygon vertex: {pair!r}")
        vertices.append((float(pair[0]), float(pair[1])))
    return vertices
