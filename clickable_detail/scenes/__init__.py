"""
Scene files - YAML visual trees loaded from disk and hot-reloaded on change.
"""

from .loader import Scene, SceneWatcher, load_scene, parse_scene

__all__ = ["Scene", "SceneWatcher", "load_scene", "parse_scene"]
