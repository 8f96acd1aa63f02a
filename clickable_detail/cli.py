"""Command-line entry point: show a scene and route clicks to its actions."""

from __future__ import annotations

import argparse
import logging
import sys
import threading
from pathlib import Path
from typing import Optional

from .config import CONFIG_PATH, AppConfig, BridgeConfig
from .core.controller import ClickableDetail
from .core.errors import ClickableDetailError
from .core.nodes import Point
from .scenes.loader import Scene, SceneWatcher, load_scene

logger = logging.getLogger(__name__)


def _log_action(point: Point) -> None:
    logger.info("Clicked at %s,%s", point.x, point.y)


def _print_action(point: Point) -> None:
    print(f"click {point.x},{point.y}", flush=True)


ACTIONS = {
    "log": _log_action,
    "print": _print_action,
}


class StdoutHost:
    """Host surface that writes each published markup to a stream."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout
        self.last_markup: Optional[str] = None

    def publish(self, markup: str, is_loading: bool) -> None:
        if markup == self.last_markup:
            return
        self.last_markup = markup
        self.stream.write(markup + "\n")
        self.stream.flush()


def apply_scene(detail: ClickableDetail, scene: Scene) -> None:
    """Show a reloaded scene, honoring its own loading option when it sets one."""
    if scene.wait_until_all_loaded is not None:
        detail.wait_until_all_loaded = scene.wait_until_all_loaded
    detail.update(scene.nodes)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="clickable-detail",
        description="Render a scene as embedded SVG markup and route clicks to its actions.",
    )
    parser.add_argument("scene", type=Path, help="YAML scene file")
    parser.add_argument("--config", type=Path, default=CONFIG_PATH, help="JSON config file")
    parser.add_argument("--watch", action="store_true", help="Reload the scene when the file changes")
    parser.add_argument(
        "--program",
        nargs=argparse.REMAINDER,
        help="Observer command to run instead of the configured osascript",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for ``python -m clickable_detail``."""
    logging.basicConfig(level=logging.INFO, stream=sys.stderr, format="%(name)s %(levelname)s: %(message)s")
    args = build_parser().parse_args(argv)

    config = AppConfig.load(args.config)
    if args.program:
        config.bridge = BridgeConfig(program=args.program[0], args=list(args.program[1:]))

    try:
        scene = load_scene(args.scene, ACTIONS)
    except ClickableDetailError as e:
        logger.error("%s", e)
        return 1

    detail = ClickableDetail(
        StdoutHost(),
        config=config,
        wait_until_all_loaded=scene.wait_until_all_loaded,
    )

    def on_scene_change(new_scene: Scene) -> None:
        apply_scene(detail, new_scene)

    watcher = SceneWatcher(args.scene, ACTIONS, on_scene_change) if args.watch else None
    stop_event = threading.Event()
    try:
        detail.update(scene.nodes)
        with detail:
            if watcher:
                watcher.start()
            detail.run(stop_event)
    except ClickableDetailError as e:
        logger.error("%s", e)
        return 1
    except KeyboardInterrupt:
        stop_event.set()
    finally:
        if watcher:
            watcher.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
