"""Command lines for running OSA scripts through ``osascript``."""

from __future__ import annotations

from typing import Sequence, Union

from ..config import BridgeConfig

OSASCRIPT = "osascript"


def osascript_command(
    script: str,
    args: Sequence[Union[str, int, float, bool]] = (),
    language: str = "AppleScript",
    program: str = OSASCRIPT,
) -> list[str]:
    """Build the argv for a script file (absolute path) or inline source."""
    command = [program]
    if not script.startswith("/"):
        command.append("-e")
    command += [script, "-l", language]
    command += [str(a) for a in args]
    return command


def observer_command(config: BridgeConfig) -> list[str]:
    """argv for the click observer described by ``config``.

    A non-osascript program is run directly with the configured args.
    """
    if config.program != OSASCRIPT:
        return [config.program, *config.args]
    return osascript_command(config.script_path, config.args, config.language)
