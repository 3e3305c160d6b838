# subconv/render/__init__.py
"""One-way presentation outputs (HTML overlay, JSON projections)."""

from .html import HtmlRenderOptions, render_cue, render_html
from .json import JsonRenderOptions, build_render_data, project_style, render_json

__all__ = [
    "HtmlRenderOptions",
    "JsonRenderOptions",
    "build_render_data",
    "project_style",
    "render_cue",
    "render_html",
    "render_json",
]
