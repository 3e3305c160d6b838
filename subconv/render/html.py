# subconv/render/html.py
"""
HTML cue-overlay rendering.

One-way projection of a document into ``<div>`` fragments a page can
position and time itself. With ``process_ass_overrides`` the ASS override
blocks are read into data attributes and removed from the visible text.
"""

from __future__ import annotations

import html
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..overrides import ass_color_to_css, parse_overrides, strip_overrides

if TYPE_CHECKING:
    from ..data import Cue, SubtitleDocument


@dataclass
class HtmlRenderOptions:
    container_class: str = "subtitles"
    cue_class: str = "subtitle-cue"
    include_metadata: bool = True
    use_plain_text: bool = True
    process_ass_overrides: bool = False


def _attr(name: str, value: object) -> str:
    return f'{name}="{html.escape(str(value), quote=True)}"'


def _number(value: float) -> str:
    return str(int(value)) if value == int(value) else str(value)


def _cue_body(cue: Cue, options: HtmlRenderOptions) -> str:
    if options.process_ass_overrides:
        text = strip_overrides(cue.content)
    elif options.use_plain_text:
        text = cue.text
    else:
        text = cue.content
    return "<br>".join(html.escape(line) for line in text.split("\n"))


def render_cue(cue: Cue, options: HtmlRenderOptions) -> str:
    attrs = [
        _attr("class", options.cue_class),
        _attr("data-index", cue.index),
        _attr("data-start", cue.start_ms),
        _attr("data-end", cue.end_ms),
    ]
    if cue.style:
        attrs.append(_attr("data-style", cue.style))

    if options.process_ass_overrides:
        info = parse_overrides(cue.content)
        if info.position is not None:
            attrs.append(_attr("data-pos-x", _number(info.position[0])))
            attrs.append(_attr("data-pos-y", _number(info.position[1])))
        if info.alignment is not None:
            attrs.append(_attr("data-alignment", info.alignment))
        if info.color is not None:
            attrs.append(_attr("data-override-color", info.color))
            css = ass_color_to_css(info.color)
            if css:
                attrs.append(_attr("data-override-css-color", css))
        if info.bold:
            attrs.append(_attr("data-bold", "true"))
        if info.italic:
            attrs.append(_attr("data-italic", "true"))

    return f"<div {' '.join(attrs)}>{_cue_body(cue, options)}</div>"


def render_html(doc: SubtitleDocument, options: HtmlRenderOptions | None = None) -> str:
    """Render the document as a container div holding one div per cue."""
    options = options or HtmlRenderOptions()

    attrs = [_attr("class", options.container_class), _attr("data-format", doc.source_format)]
    if options.include_metadata:
        if doc.metadata.title:
            attrs.append(_attr("data-title", doc.metadata.title))
        if doc.metadata.language:
            attrs.append(_attr("data-language", doc.metadata.language))

    lines = [f"<div {' '.join(attrs)}>"]
    lines.extend(f"  {render_cue(cue, options)}" for cue in doc.cues)
    lines.append("</div>")
    return "\n".join(lines)
