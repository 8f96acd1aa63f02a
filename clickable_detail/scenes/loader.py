"""
Scene files - YAML descriptions of a visual tree, with hot reload.

A scene names its click callbacks instead of embedding code; names are
resolved against an action mapping supplied by the caller.

Example YAML:
    wait_until_all_loaded: false
    nodes:
      - kind: svg
        height: 200
        children:
          - kind: circle
            cx: 100
            cy: 100
            radius: 50
            fill: red
            on_click: greet
          - kind: text
            x: 10
            y: 150
            text: "Hello"
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

import yaml
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from ..core.errors import SceneError
from ..core.nodes import ClickCallback, VisualNode

logger = logging.getLogger(__name__)

_RESERVED = {"kind", "children", "on_click", "text"}


@dataclass(frozen=True)
class Scene:
    """A loaded scene: top-level nodes plus scene-level options."""
    nodes: tuple[VisualNode, ...]
    wait_until_all_loaded: Optional[bool] = None


def _build_node(data: Any, actions: Mapping[str, ClickCallback], where: str) -> VisualNode:
    if not isinstance(data, dict):
        raise SceneError(f"{where}: expected a mapping, got {type(data).__name__}")
    kind = data.get("kind")
    if not isinstance(kind, str) or not kind:
        raise SceneError(f"{where}: node has no 'kind'")

    on_click = None
    action = data.get("on_click")
    if action is not None:
        if action not in actions:
            raise SceneError(f"{where}: unknown action {action!r}")
        on_click = actions[action]

    children_data = data.get("children") or []
    if not isinstance(children_data, list):
        raise SceneError(f"{where}: 'children' must be a list")
    children = tuple(
        _build_node(child, actions, f"{where}.children[{i}]")
        for i, child in enumerate(children_data)
    )

    text = data.get("text")
    attrs = {k: v for k, v in data.items() if k not in _RESERVED}
    return VisualNode(
        kind=kind,
        attrs=attrs,
        on_click=on_click,
        children=children,
        text=None if text is None else str(text),
    )


def parse_scene(data: Any, actions: Mapping[str, ClickCallback]) -> Scene:
    """Build a Scene from already-parsed YAML data."""
    if data is None:
        return Scene(nodes=())
    if isinstance(data, list):
        data = {"nodes": data}
    if not isinstance(data, dict):
        raise SceneError("Scene must be a mapping or a list of nodes")
    nodes_data = data.get("nodes") or []
    if not isinstance(nodes_data, list):
        raise SceneError("'nodes' must be a list")
    nodes = tuple(_build_node(n, actions, f"nodes[{i}]") for i, n in enumerate(nodes_data))
    wait = data.get("wait_until_all_loaded")
    return Scene(nodes=nodes, wait_until_all_loaded=None if wait is None else bool(wait))


def load_scene(path: Path | str, actions: Optional[Mapping[str, ClickCallback]] = None) -> Scene:
    """Read and parse a scene file."""
    path = Path(path)
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except (yaml.YAMLError, IOError) as e:
        raise SceneError(f"Failed to load {path}: {e}") from e
    return parse_scene(data, actions or {})


class SceneChangeHandler(FileSystemEventHandler):
    """Watchdog handler that reloads the scene when its file changes."""

    def __init__(self, watcher: "SceneWatcher"):
        self.watcher = watcher

    def on_modified(self, event):
        if not event.is_directory and self.watcher.matches(event.src_path):
            self.watcher.reload()

    def on_created(self, event):
        if not event.is_directory and self.watcher.matches(event.src_path):
            self.watcher.reload()

    def on_moved(self, event):
        # Editors that save atomically rename a temp file over the scene.
        if not event.is_directory and self.watcher.matches(event.dest_path):
            self.watcher.reload()


class SceneWatcher:
    """
    Keeps a scene file loaded and notifies a listener on every change.

    Usage:
        watcher = SceneWatcher("scene.yaml", actions, detail_update)
        watcher.reload()
        watcher.start()
    """

    def __init__(
        self,
        path: Path | str,
        actions: Mapping[str, ClickCallback],
        on_change: Callable[[Scene], None],
    ):
        self.path = Path(path).resolve()
        self.actions = actions
        self._on_change = on_change
        self._lock = threading.Lock()
        self._observer: Optional[Observer] = None
        self.scene: Optional[Scene] = None

    def matches(self, src_path: str) -> bool:
        return Path(src_path).resolve() == self.path

    def reload(self) -> Optional[Scene]:
        """Reload the file and notify the listener. Bad files are logged and skipped."""
        with self._lock:
            try:
                scene = load_scene(self.path, self.actions)
            except SceneError as e:
                logger.warning("Keeping previous scene: %s", e)
                return None
            self.scene = scene

        try:
            self._on_change(scene)
        except Exception:
            logger.exception("Scene change listener failed for %s", self.path)
        return scene

    def start(self) -> None:
        """Start watching the scene's directory."""
        if self._observer is not None:
            return
        observer = Observer()
        observer.schedule(SceneChangeHandler(self), str(self.path.parent), recursive=False)
        observer.start()
        self._observer = observer

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join()
        self._observer = None
