"""
This facade exposes the public API for the export module.
"""
from .formatter import export_symbols, render_markdown, render_xml

__all__ = ["export_symbols", "render_markdown", "render_xml"]
