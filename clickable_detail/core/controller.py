"""Content regeneration and click routing for one host surface session.

ClickableDetail keeps three things in step: the markup the host displays,
the region registry clicks are tested against, and the observer process
that reports clicks. Markup and registry are rebuilt together on every
accepted content change and published as one immutable snapshot; the
observer is started once and lives for the whole session.
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable, Optional, Protocol

from ..config import AppConfig, get_config
from .dispatcher import ClickDispatcher
from .markup import render_markup
from .nodes import VisualNode
from .regions import EMPTY_REGISTRY, RegionRegistry, build_registry

if TYPE_CHECKING:
    from ..bridge.input_bridge import InputBridge

logger = logging.getLogger(__name__)


class HostSurface(Protocol):
    """The container that displays markup and a loading indicator."""

    def publish(self, markup: str, is_loading: bool) -> None:
        ...


@dataclass(frozen=True)
class ContentSnapshot:
    """Markup and registry from the same content generation."""

    markup: str = ""
    registry: RegionRegistry = EMPTY_REGISTRY
    is_loading: bool = True

    @property
    def generation(self) -> int:
        return self.registry.generation


class ClickableDetail:
    """Session controller tying a visual tree to a host surface and a click observer.

    Usage:
        with ClickableDetail(host) as detail:
            detail.update([node("svg", circle, height=200)])
            detail.run(stop_event)
    """

    def __init__(
        self,
        host: Optional[HostSurface] = None,
        config: Optional[AppConfig] = None,
        wait_until_all_loaded: Optional[bool] = None,
        bridge_factory: Optional[Callable[[Callable[[str], None]], InputBridge]] = None,
    ):
        self.host = host
        self.config = config or get_config()
        if wait_until_all_loaded is None:
            wait_until_all_loaded = self.config.wait_until_all_loaded
        self.wait_until_all_loaded = wait_until_all_loaded

        self._bridge_factory = bridge_factory or self._default_bridge
        self._bridge: InputBridge | None = None
        self._snapshot = ContentSnapshot()
        self._roots: tuple[VisualNode, ...] = ()
        self._is_loading = False
        self._lock = threading.RLock()
        # Clicks paired with the registry that was live when they arrived.
        self.events: queue.Queue[tuple[str, RegionRegistry]] = queue.Queue()
        self.dispatcher = ClickDispatcher(lambda: self._snapshot.registry)

    # -- content ----------------------------------------------------------

    @property
    def snapshot(self) -> ContentSnapshot:
        return self._snapshot

    @property
    def registry(self) -> RegionRegistry:
        return self._snapshot.registry

    @property
    def markup(self) -> str:
        return self._snapshot.markup

    def update(self, roots: Iterable[VisualNode], is_loading: bool = False) -> Optional[ContentSnapshot]:
        """Regenerate markup and regions for a new tree.

        Returns the published snapshot, or None when regeneration is held
        back until loading finishes. MissingGeometryError propagates and
        leaves the previous snapshot in place.
        """
        roots = tuple(roots)
        with self._lock:
            self._roots = roots
            self._is_loading = is_loading

            if is_loading and self.wait_until_all_loaded:
                logger.debug("Deferring regeneration until loading completes")
                self._publish(self._snapshot.markup, True)
                return None

            registry = build_registry(roots, self.config.hit_test)
            markup = render_markup(roots, self.config.canvas)
            snapshot = ContentSnapshot(
                markup=markup,
                registry=registry,
                is_loading=is_loading or markup == "",
            )
            self._snapshot = snapshot
            logger.debug(
                "Published generation %d (%d regions, %d chars of markup)",
                snapshot.generation, len(registry), len(markup),
            )
            self._publish(snapshot.markup, snapshot.is_loading)
            return snapshot

    def set_loading(self, is_loading: bool) -> Optional[ContentSnapshot]:
        """Report a loading-state change for the current tree."""
        with self._lock:
            roots = self._roots
        return self.update(roots, is_loading)

    def _publish(self, markup: str, is_loading: bool) -> None:
        if self.host is not None:
            self.host.publish(markup, is_loading)

    # -- observer lifecycle -------------------------------------------------

    def _default_bridge(self, on_line: Callable[[str], None]) -> InputBridge:
        from ..bridge.input_bridge import InputBridge
        from ..bridge.osascript import observer_command

        command = observer_command(self.config.bridge)
        return InputBridge(
            command[0], command[1:], on_stderr=self._on_observer_stderr, on_line=on_line
        )

    def _on_observer_stderr(self, text: str) -> None:
        logger.warning("Click observer: %s", text.rstrip())

    @property
    def bridge(self) -> Optional[InputBridge]:
        return self._bridge

    def start(self) -> None:
        """Start the click observer. Safe to call more than once."""
        with self._lock:
            if self._bridge is not None:
                return
            bridge = self._bridge_factory(self.receive)
            bridge.start()
            self._bridge = bridge

    def stop(self) -> None:
        """Stop the click observer."""
        with self._lock:
            bridge, self._bridge = self._bridge, None
        if bridge is not None:
            bridge.stop()

    def send(self, message: str) -> None:
        """Forward a message to the observer's stdin."""
        if self._bridge is not None:
            self._bridge.send(message)

    def __enter__(self) -> "ClickableDetail":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    # -- event pumping ----------------------------------------------------

    def receive(self, line: str) -> None:
        """Queue one line of observer output with the registry live right now.

        Called on the bridge's reader thread. A later rebuild does not change
        which regions this click is tested against.
        """
        self.events.put((line, self._snapshot.registry))

    def process_events(self, timeout: Optional[float] = None) -> int:
        """Dispatch queued clicks in arrival order on the calling thread.

        Returns the number of lines handled.
        """
        handled = 0
        while True:
            try:
                line, registry = self.events.get(timeout=timeout) if timeout else self.events.get_nowait()
            except queue.Empty:
                return handled
            self.dispatcher.handle(line, registry)
            handled += 1

    def run(self, stop_event: Optional[threading.Event] = None, poll_interval: float = 0.1) -> None:
        """Pump events until ``stop_event`` is set or the observer exits."""
        stop_event = stop_event or threading.Event()
        self.start()
        while not stop_event.is_set():
            self.process_events(timeout=poll_interval)
            bridge = self._bridge
            if bridge is None:
                break
            if not bridge.is_running and self.events.empty():
                logger.warning("Click observer exited (code %s); clicks are no longer routed", bridge.returncode)
                break
