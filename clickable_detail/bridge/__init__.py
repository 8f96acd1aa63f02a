"""Input bridge - external click observer process and its command lines."""

from .input_bridge import InputBridge, start_bridge
from .osascript import observer_command, osascript_command

__all__ = [
    "InputBridge",
    "start_bridge",
    "observer_command",
    "osascript_command",
]
