"""Property-based tests using Hypothesis."""

from hypothesis import given, settings, strategies as st

from clickable_detail.core.dispatcher import parse_click
from clickable_detail.core.geometry import (
    BoxGeometry,
    CircleGeometry,
    EllipseGeometry,
    PolygonGeometry,
    SegmentGeometry,
    ShapeKind,
    ToggleGeometry,
    contains,
)
from clickable_detail.core.nodes import node
from clickable_detail.core.regions import build_registry

coords = st.floats(allow_nan=True, allow_infinity=True)
finite = st.floats(min_value=-1e4, max_value=1e4, allow_nan=False, allow_infinity=False)
sizes = st.floats(min_value=0, max_value=1e3, allow_nan=False, allow_infinity=False)

geometries = st.one_of(
    st.builds(lambda *a: (ShapeKind.BOUNDING_BOX, BoxGeometry(*a)), finite, finite, sizes, sizes),
    st.builds(lambda *a: (ShapeKind.CIRCLE, CircleGeometry(*a)), finite, finite, sizes),
    st.builds(lambda *a: (ShapeKind.ELLIPSE, EllipseGeometry(*a)), finite, finite, sizes, sizes),
    st.builds(lambda *a: (ShapeKind.SEGMENT, SegmentGeometry(*a)), finite, finite, finite, finite, sizes),
    st.builds(lambda *a: (ShapeKind.TOGGLE, ToggleGeometry(*a)), finite, finite, sizes, sizes),
    st.builds(
        lambda vs: (ShapeKind.POLYGON, PolygonGeometry(vs)),
        st.lists(st.tuples(finite, finite), min_size=3, max_size=8),
    ),
)


class TestHitTestProperties:
    """Hit tests answer yes or no for any input."""

    @given(shape=geometries, x=coords, y=coords)
    @settings(max_examples=300)
    def test_contains_is_total(self, shape, x, y):
        kind, geometry = shape
        assert contains(kind, geometry, x, y) in (True, False)

    @given(
        cx=finite, cy=finite,
        r=st.floats(min_value=1, max_value=1e3),
    )
    def test_circle_center_always_hits(self, cx, cy, r):
        assert contains(ShapeKind.CIRCLE, CircleGeometry(cx, cy, r), cx, cy)

    @given(
        x=finite, y=finite,
        w=st.floats(min_value=1, max_value=500),
        h=st.floats(min_value=1, max_value=500),
        dx=st.floats(min_value=1, max_value=100),
    )
    def test_polygon_rejects_points_outside_bounds(self, x, y, w, h, dx):
        square = PolygonGeometry([(x, y), (x + w, y), (x + w, y + h), (x, y + h)])
        assert not contains(ShapeKind.POLYGON, square, x + w + dx, y + h / 2)
        assert not contains(ShapeKind.POLYGON, square, x - dx, y + h / 2)


class TestRegistryProperties:
    @given(count=st.integers(min_value=0, max_value=30))
    def test_one_region_per_interactive_node_in_order(self, count):
        leaves = [
            node("circle", cx=i, cy=i, r=1, id=f"c{i}", on_click=lambda p: None)
            for i in range(count)
        ]
        registry = build_registry([node("svg", *leaves)])
        assert [r.label for r in registry] == [f"c{i}" for i in range(count)]

    @given(heights=st.lists(st.integers(min_value=0, max_value=500), min_size=1, max_size=6))
    def test_last_root_offset_is_sum_of_previous_heights(self, heights):
        roots = [node("svg", height=h) for h in heights[:-1]]
        roots.append(node("svg", node("rect", x=0, y=0, width=50, height=50, on_click=lambda p: None)))
        region = build_registry(roots)[0]
        assert region.geometry.y == sum(heights[:-1])


class TestParseClickProperties:
    @given(x=st.integers(min_value=-10**6, max_value=10**6), y=st.integers(min_value=-10**6, max_value=10**6))
    def test_well_formed_pairs_parse(self, x, y):
        point = parse_click(f"{x},{y}")
        assert (point.x, point.y) == (x, y)

    @given(raw=st.text())
    def test_never_raises(self, raw):
        point = parse_click(raw)
        assert point is None or isinstance(point.x, int)
