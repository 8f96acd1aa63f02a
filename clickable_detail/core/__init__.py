"""Core - visual tree model, hit testing, region registry, dispatch, and regeneration."""

from .errors import (
    ClickableDetailError,
    MissingGeometryError,
    RenderError,
    SceneError,
    SpawnError,
)
from .nodes import Point, ToggleDelegate, VisualNode, node, text_dimensions
from .geometry import ShapeKind, contains
from .regions import EMPTY_REGISTRY, Region, RegionRegistry, build_registry, region_for
from .dispatcher import ClickDispatcher, dispatch_click, parse_click
from .markup import render_markup, to_svg
from .controller import ClickableDetail, ContentSnapshot, HostSurface

__all__ = [
    # Errors
    "ClickableDetailError",
    "MissingGeometryError",
    "RenderError",
    "SceneError",
    "SpawnError",
    # Model
    "Point",
    "ToggleDelegate",
    "VisualNode",
    "node",
    "text_dimensions",
    # Hit testing
    "ShapeKind",
    "contains",
    "EMPTY_REGISTRY",
    "Region",
    "RegionRegistry",
    "build_registry",
    "region_for",
    # Dispatch
    "ClickDispatcher",
    "dispatch_click",
    "parse_click",
    # Markup
    "render_markup",
    "to_svg",
    # Controller
    "ClickableDetail",
    "ContentSnapshot",
    "HostSurface",
]
