"""Error types surfaced by registry building, the input bridge, and scene loading."""

from __future__ import annotations

from typing import Iterable


class ClickableDetailError(Exception):
    """Base class for all errors raised by this package."""


class SpawnError(ClickableDetailError):
    """The click observer process could not be started."""


class MissingGeometryError(ClickableDetailError):
    """An interactive node has no resolvable hit-test geometry."""

    def __init__(self, kind: str, missing: Iterable[str], detail: str = ""):
        self.kind = kind
        self.missing = tuple(missing)
        message = f"Clickable {kind!r} node must declare {', '.join(self.missing)}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class SceneError(ClickableDetailError):
    """A scene file could not be turned into a visual tree."""


class RenderError(ClickableDetailError):
    """The HTML rendering script failed."""
