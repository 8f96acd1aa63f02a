"""Configuration for hit testing, the input bridge, and the SVG canvas."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional

# Project root
PROJECT_ROOT = Path(__file__).parent.parent
CONFIG_PATH = PROJECT_ROOT / "config.json"

# Padding the host adds around every embedded image. Every hit test is
# shifted by this amount.
CONTENT_MARGIN = 15.0

# Fixed hit zone for toggle controls, independent of their rendered size.
TOGGLE_HIT_WIDTH = 100.0
TOGGLE_HIT_HEIGHT = 20.0

# Reference y the polygon ray is cast from.
RAY_ORIGIN_Y = -100.0

DEFAULT_SCRIPT_PATH = str(PROJECT_ROOT / "assets" / "DetectMouseInput.scpt")
DEFAULT_RENDER_SCRIPT_PATH = str(PROJECT_ROOT / "assets" / "HTML2b64.scpt")


@dataclass
class HitTestConfig:
    """Constants shared by all hit tests."""
    content_margin: float = CONTENT_MARGIN
    toggle_hit_width: float = TOGGLE_HIT_WIDTH
    toggle_hit_height: float = TOGGLE_HIT_HEIGHT
    ray_origin_y: float = RAY_ORIGIN_Y
    default_stroke_width: float = 1.0
    default_font_size: float = 16.0


@dataclass
class BridgeConfig:
    """How to launch the click observer process."""
    program: str = "osascript"
    script_path: str = DEFAULT_SCRIPT_PATH
    language: str = "JavaScript"
    args: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)

    @staticmethod
    def from_dict(d: dict) -> "BridgeConfig":
        if not isinstance(d, dict):
            return BridgeConfig()
        known = {f for f in BridgeConfig.__dataclass_fields__}
        config = BridgeConfig(**{k: v for k, v in d.items() if k in known})
        config.args = [str(a) for a in config.args]
        return config


@dataclass
class CanvasConfig:
    """Defaults for serialized SVG content."""
    width: int = 750
    height: int = 375
    alt_text: str = "Dynamic SVG content"
    render_script_path: str = DEFAULT_RENDER_SCRIPT_PATH


@dataclass
class AppConfig:
    """Main configuration combining all sections."""
    hit_test: HitTestConfig = field(default_factory=HitTestConfig)
    bridge: BridgeConfig = field(default_factory=BridgeConfig)
    canvas: CanvasConfig = field(default_factory=CanvasConfig)
    wait_until_all_loaded: bool = False

    def to_dict(self) -> dict:
        return {
            "hit_test": asdict(self.hit_test),
            "bridge": self.bridge.to_dict(),
            "canvas": asdict(self.canvas),
            "wait_until_all_loaded": self.wait_until_all_loaded,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "AppConfig":
        hit_dict = d.get("hit_test", {}) or {}
        hit_known = {f for f in HitTestConfig.__dataclass_fields__}
        hit_test = HitTestConfig(**{k: float(v) for k, v in hit_dict.items() if k in hit_known})

        canvas_dict = d.get("canvas", {}) or {}
        canvas_known = {f for f in CanvasConfig.__dataclass_fields__}
        canvas = CanvasConfig(**{k: v for k, v in canvas_dict.items() if k in canvas_known})

        return cls(
            hit_test=hit_test,
            bridge=BridgeConfig.from_dict(d.get("bridge", {})),
            canvas=canvas,
            wait_until_all_loaded=bool(d.get("wait_until_all_loaded", False)),
        )

    def save(self, path: Path = CONFIG_PATH):
        temp = path.with_suffix(".tmp")
        temp.write_text(json.dumps(self.to_dict(), indent=2))
        temp.rename(path)

    @classmethod
    def load(cls, path: Path = CONFIG_PATH) -> "AppConfig":
        try:
            if path.exists():
                return cls.from_dict(json.loads(path.read_text()))
        except (json.JSONDecodeError, IOError, TypeError, ValueError):
            pass
        return cls()


# Global instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get current config."""
    global _config
    if _config is None:
        _config = AppConfig.load()
    return _config


def set_config(config: AppConfig, path: Path = CONFIG_PATH):
    """Set and save config."""
    global _config
    _config = config
    config.save(path)


def reset_config() -> None:
    """Drop the cached config. Used for testing."""
    global _config
    _config = None
