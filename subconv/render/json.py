# subconv/render/json.py
"""
JSON projections for players and UIs.

Compact output is ``{v, f, s, c}``; verbose output spells every key out.
Styles are projected for one of three consumers:
- raw: canonical style dicts
- browser: CSS property names, px units and #RRGGBB colours
- embedded: flat snake_case fields for native UI toolkits
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..models.enums import RenderTarget
from ..overrides import ass_color_to_css

if TYPE_CHECKING:
    from ..data import Cue, Style, SubtitleDocument


@dataclass
class JsonRenderOptions:
    compact: bool = True
    target: RenderTarget = RenderTarget.RAW
    include_metadata: bool = False
    pretty: bool = False


def _px(value: float) -> str:
    return f"{int(value) if value == int(value) else value}px"


def _text_align(alignment: int) -> str:
    return {1: "left", 2: "center", 3: "right"}[(alignment - 1) % 3 + 1]


def _vertical_align(alignment: int) -> str:
    if alignment >= 7:
        return "top"
    if alignment >= 4:
        return "middle"
    return "bottom"


def browser_style(style: Style) -> dict[str, Any]:
    decorations = [name for flag, name in ((style.underline, "underline"), (style.strike_out, "line-through")) if flag]
    return {
        "fontFamily": style.font_name,
        "fontSize": _px(style.font_size),
        "color": ass_color_to_css(style.primary_color),
        "outlineColor": ass_color_to_css(style.outline_color),
        "backgroundColor": ass_color_to_css(style.back_color),
        "fontWeight": "bold" if style.bold else "normal",
        "fontStyle": "italic" if style.italic else "normal",
        "textDecoration": " ".join(decorations) or "none",
        "textAlign": _text_align(style.alignment),
        "verticalAlign": _vertical_align(style.alignment),
        "alignment": style.alignment,
        "marginLeft": _px(style.margin_l),
        "marginRight": _px(style.margin_r),
        "marginTop": _px(style.margin_v),
        "marginBottom": _px(style.margin_v),
    }


def embedded_style(style: Style) -> dict[str, Any]:
    return {
        "font_name": style.font_name,
        "font_size": style.font_size,
        "color": ass_color_to_css(style.primary_color),
        "outline_color": ass_color_to_css(style.outline_color),
        "back_color": ass_color_to_css(style.back_color),
        "bold": style.bold,
        "italic": style.italic,
        "underline": style.underline,
        "strike_out": style.strike_out,
        "alignment": style.alignment,
        "margin_l": style.margin_l,
        "margin_r": style.margin_r,
        "margin_v": style.margin_v,
    }


def project_style(style: Style, target: RenderTarget | str = RenderTarget.RAW) -> dict[str, Any]:
    target = RenderTarget(target)
    if target is RenderTarget.BROWSER:
        return browser_style(style)
    if target is RenderTarget.EMBEDDED:
        return embedded_style(style)
    return style.to_dict()


def _compact_cue(cue: Cue) -> dict[str, Any]:
    entry: dict[str, Any] = {"i": cue.index, "s": cue.start_ms, "e": cue.end_ms, "t": cue.text}
    if cue.style:
        entry["st"] = cue.style
    return entry


def _verbose_cue(cue: Cue) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "index": cue.index,
        "start": cue.start_ms,
        "end": cue.end_ms,
        "duration": cue.duration_ms,
        "text": cue.text,
        "content": cue.content,
    }
    if cue.style:
        entry["style"] = cue.style
    if cue.layout:
        entry["layout"] = cue.layout
    return entry


def build_render_data(doc: SubtitleDocument, options: JsonRenderOptions | None = None) -> dict[str, Any]:
    options = options or JsonRenderOptions()
    styles = {name: project_style(style, options.target) for name, style in doc.styles.items()}

    if options.compact:
        data: dict[str, Any] = {
            "v": doc.format_version,
            "f": doc.source_format,
            "s": styles,
            "c": [_compact_cue(c) for c in doc.cues],
        }
        if options.include_metadata:
            data["m"] = doc.metadata.to_dict()
        return data

    data = {
        "version": doc.format_version,
        "format": doc.source_format,
        "styles": styles,
        "cues": [_verbose_cue(c) for c in doc.cues],
    }
    if options.include_metadata:
        data["metadata"] = doc.metadata.to_dict()
    return data


def render_json(doc: SubtitleDocument, options: JsonRenderOptions | None = None) -> str:
    options = options or JsonRenderOptions()
    return json.dumps(
        build_render_data(doc, options),
        indent=2 if options.pretty else None,
        ensure_ascii=False,
    )
