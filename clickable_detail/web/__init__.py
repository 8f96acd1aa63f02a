"""Web content helpers - rasterizing HTML/URLs and fetching remote resources."""

from .render import fetch_html, preload_image, render_html, render_url

__all__ = ["fetch_html", "preload_image", "render_html", "render_url"]
