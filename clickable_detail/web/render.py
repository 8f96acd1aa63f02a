"""HTML/URL rasterization and fetching helpers.

Rendering is delegated to an OSA script that loads the page in a web view
and prints the snapshot as base64. Calls are synchronous.
"""

from __future__ import annotations

import base64
import subprocess
from typing import Optional

import requests

from ..bridge.osascript import osascript_command
from ..config import get_config
from ..core.errors import RenderError

FETCH_TIMEOUT = 10
RENDER_TIMEOUT = 60


def _run_render_script(html: str, url: str, width: int, height: int, script_path: Optional[str]) -> str:
    script = script_path or get_config().canvas.render_script_path
    command = osascript_command(script, [html, url, width, height], language="JavaScript")
    try:
        result = subprocess.run(command, capture_output=True, text=True, timeout=RENDER_TIMEOUT)
    except (OSError, subprocess.TimeoutExpired) as e:
        raise RenderError(f"Render script failed to run: {e}") from e
    if result.returncode != 0:
        raise RenderError(f"Render script exited with {result.returncode}: {result.stderr.strip()}")
    return result.stdout.strip()


def render_html(html: str, width: int, height: int, script_path: Optional[str] = None) -> str:
    """Render an HTML string to a base64-encoded image."""
    return _run_render_script(html, "", width, height, script_path)


def render_url(url: str, width: int, height: int, script_path: Optional[str] = None) -> str:
    """Render the page at ``url`` to a base64-encoded image."""
    return _run_render_script("", url, width, height, script_path)


def fetch_html(url: str) -> str:
    """Fetch a page's HTML."""
    response = requests.get(url, timeout=FETCH_TIMEOUT)
    response.raise_for_status()
    return response.text


def preload_image(url: str) -> str:
    """Download an image and return it as a data URI."""
    response = requests.get(url, timeout=FETCH_TIMEOUT)
    response.raise_for_status()
    content_type = response.headers.get("content-type", "application/octet-stream")
    encoded = base64.b64encode(response.content).decode("ascii")
    return f"data:{content_type};base64,{encoded}"
