"""Clickable SVG/HTML content for hosts that only display static markup.

A visual tree is serialized to embedded images for display, and flattened
into an ordered region registry. Clicks reported by an external observer
process are hit-tested against the registry and routed to the first
matching element's callback.
"""

__version__ = "1.0.0"
