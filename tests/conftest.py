"""Shared test fixtures."""

import sys
import textwrap

import pytest

from clickable_detail.config import reset_config
from clickable_detail.core.nodes import node


@pytest.fixture(autouse=True)
def _isolated_config():
    """Drop the cached global config between tests."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def clicks():
    """Recorder whose ``handler(name)`` appends (name, point) on each call."""

    class Recorder(list):
        def handler(self, name):
            def record(point):
                self.append((name, point))
            return record

    return Recorder()


@pytest.fixture
def sample_tree(clicks):
    """Two stacked SVG roots with one interactive shape of each kind."""
    first = node(
        "svg",
        node("rect", x=0, y=0, width=200, height=100, on_click=clicks.handler("rect")),
        node("circle", cx=300, cy=50, radius=40, on_click=clicks.handler("circle")),
        node("text", x=10, y=120, text="Plain label"),
        height=200,
    )
    second = node(
        "svg",
        node("ellipse", cx=100, cy=50, rx=60, ry=30, on_click=clicks.handler("ellipse")),
        node("polygon", points="300,0 400,0 400,100 300,100", on_click=clicks.handler("polygon")),
        node("line", x1=0, y1=150, x2=100, y2=150, stroke_width=5, on_click=clicks.handler("line")),
        node("toggle", x=500, y=0, on_click=clicks.handler("toggle")),
        height=200,
    )
    return [first, second]


@pytest.fixture
def python_observer():
    """Build argv that runs Python source as an unbuffered observer process."""

    def build(source: str) -> list[str]:
        return [sys.executable, "-u", "-c", textwrap.dedent(source)]

    return build
