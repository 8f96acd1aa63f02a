"""Routes raw click events from the input bridge to region callbacks."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .nodes import Point
from .regions import Region, RegionRegistry

logger = logging.getLogger(__name__)


def parse_click(raw: str) -> Optional[Point]:
    """Parse ``"<x>,<y>"`` into a Point. Anything else returns None."""
    parts = raw.strip().split(",")
    if len(parts) != 2:
        return None
    try:
        return Point(int(parts[0].strip()), int(parts[1].strip()))
    except ValueError:
        return None


def dispatch_click(point: Point, registry: RegionRegistry) -> Optional[Region]:
    """Invoke the callback of the first region containing ``point``.

    Returns the matched region, or None when nothing was hit. A callback
    that raises still counts as handled: the error is logged and no later
    region is tried.
    """
    region = registry.find(point.x, point.y)
    if region is None:
        logger.debug("Click at %s,%s matched no region", point.x, point.y)
        return None

    logger.info("Click on region %r at %s,%s", region.label, point.x, point.y)
    try:
        region.callback(point)
    except Exception:
        logger.exception("Click handler for region %r failed", region.label)
    return region


class ClickDispatcher:
    """Parses bridge output and dispatches it against a registry snapshot.

    Callers that captured the registry when the event arrived pass it to
    ``handle``; otherwise ``registry_source`` is read once per event. Either
    way a rebuild that lands mid-scan only affects later events.
    """

    def __init__(self, registry_source: Callable[[], RegionRegistry]):
        self._registry_source = registry_source
        self.dispatched = 0
        self.dropped = 0

    def handle(self, raw: str, registry: Optional[RegionRegistry] = None) -> Optional[Region]:
        """Handle one line of bridge output."""
        if registry is None:
            registry = self._registry_source()
        point = parse_click(raw)
        if point is None:
            logger.debug("Discarding malformed click payload %r", raw)
            self.dropped += 1
            return None

        region = dispatch_click(point, registry)
        if region is None:
            self.dropped += 1
        else:
            self.dispatched += 1
        return region
