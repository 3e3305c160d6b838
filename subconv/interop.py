# subconv/interop.py
"""
Bridge between SubtitleDocument and pysubs2.

Lets documents flow into tooling built on pysubs2 (timing fixes, style
filtering, loading from files) and back. Comment events and unknown
sections kept as raw lines in document metadata are not carried over.
"""

from __future__ import annotations

import logging

import pysubs2
from pysubs2 import Alignment, SSAEvent, SSAFile, SSAStyle

from .data import AssCueData, Cue, CueFormatData, Metadata, Style, SubtitleDocument
from .overrides import html_to_ass_markup, layout_from_overrides
from .parsers.ass_parser import INTEGER_INFO_KEYS, SCRIPT_INFO_KEYS

logger = logging.getLogger(__name__)

_INFO_KEYS_BY_FIELD = {field: key for key, field in SCRIPT_INFO_KEYS.items()}


# =============================================================================
# Colours
# =============================================================================


def ass_color_to_pysubs2(value: str) -> pysubs2.Color:
    """'&HAABBGGRR' (alpha optional) -> pysubs2.Color."""
    hex_str = value.strip().upper()
    if hex_str.startswith('&H'):
        hex_str = hex_str[2:]
    hex_str = hex_str.rstrip('&').zfill(8)
    a = int(hex_str[0:2], 16)
    b = int(hex_str[2:4], 16)
    g = int(hex_str[4:6], 16)
    r = int(hex_str[6:8], 16)
    return pysubs2.Color(r, g, b, a)


def pysubs2_color_to_ass(color: pysubs2.Color) -> str:
    return f"&H{color.a:02X}{color.b:02X}{color.g:02X}{color.r:02X}"


# =============================================================================
# Document -> SSAFile
# =============================================================================


def _to_ssastyle(style: Style) -> SSAStyle:
    return SSAStyle(
        fontname=style.font_name,
        fontsize=style.font_size,
        primarycolor=ass_color_to_pysubs2(style.primary_color),
        secondarycolor=ass_color_to_pysubs2(style.secondary_color),
        outlinecolor=ass_color_to_pysubs2(style.outline_color),
        backcolor=ass_color_to_pysubs2(style.back_color),
        bold=style.bold,
        italic=style.italic,
        underline=style.underline,
        strikeout=style.strike_out,
        scalex=style.scale_x,
        scaley=style.scale_y,
        spacing=style.spacing,
        angle=style.angle,
        borderstyle=style.border_style,
        outline=style.outline,
        shadow=style.shadow,
        alignment=Alignment(style.alignment),
        marginl=style.margin_l,
        marginr=style.margin_r,
        marginv=style.margin_v,
        encoding=style.encoding,
    )


def _to_ssaevent(cue: Cue) -> SSAEvent:
    ass = cue.format_specific.ass or AssCueData()
    if cue.is_ass:
        text = cue.content.replace('\n', '\\N')
    else:
        text = html_to_ass_markup(cue.content, cue.is_vtt)

    return SSAEvent(
        start=cue.start_ms,
        end=cue.end_ms,
        text=text,
        style=cue.style or 'Default',
        layer=ass.layer,
        name=ass.actor,
        marginl=ass.margin_l,
        marginr=ass.margin_r,
        marginv=ass.margin_v,
        effect=ass.effect,
    )


def to_ssafile(doc: SubtitleDocument) -> SSAFile:
    """Build a pysubs2 SSAFile holding the document's info, styles and cues."""
    subs = SSAFile()
    ass_meta = doc.metadata.format_specific.get('ass', {})

    if doc.metadata.title:
        subs.info['Title'] = doc.metadata.title
    if doc.metadata.language:
        subs.info['Language'] = doc.metadata.language
    for field, value in ass_meta.items():
        key = _INFO_KEYS_BY_FIELD.get(field)
        if key is not None:
            subs.info[key] = str(value)
    for key, value in ass_meta.get('extraInfo', {}).items():
        subs.info[key] = str(value)

    if doc.styles:
        subs.styles.clear()
        for name, style in doc.styles.items():
            subs.styles[name] = _to_ssastyle(style)

    subs.events.extend(_to_ssaevent(cue) for cue in doc.cues)
    logger.debug('Built SSAFile with %d styles and %d events', len(subs.styles), len(subs.events))
    return subs


# =============================================================================
# SSAFile -> Document
# =============================================================================


def _from_ssastyle(name: str, style: SSAStyle) -> Style:
    return Style(
        name=name,
        font_name=style.fontname,
        font_size=float(style.fontsize),
        primary_color=pysubs2_color_to_ass(style.primarycolor),
        secondary_color=pysubs2_color_to_ass(style.secondarycolor),
        outline_color=pysubs2_color_to_ass(style.outlinecolor),
        back_color=pysubs2_color_to_ass(style.backcolor),
        bold=bool(style.bold),
        italic=bool(style.italic),
        underline=bool(style.underline),
        strike_out=bool(style.strikeout),
        scale_x=float(style.scalex),
        scale_y=float(style.scaley),
        spacing=float(style.spacing),
        angle=float(style.angle),
        border_style=int(style.borderstyle),
        outline=float(style.outline),
        shadow=float(style.shadow),
        alignment=int(style.alignment),
        margin_l=int(style.marginl),
        margin_r=int(style.marginr),
        margin_v=int(style.marginv),
        encoding=int(style.encoding),
    )


def _metadata_from_info(info: dict[str, str]) -> Metadata:
    metadata = Metadata()
    ass: dict = {}
    for key, value in info.items():
        if key == 'Title':
            metadata.title = value
        elif key == 'Language':
            metadata.language = value
        elif key in SCRIPT_INFO_KEYS:
            if key in INTEGER_INFO_KEYS and str(value).lstrip('-').isdigit():
                ass[SCRIPT_INFO_KEYS[key]] = int(value)
            else:
                ass[SCRIPT_INFO_KEYS[key]] = value
        else:
            ass.setdefault('extraInfo', {})[key] = value
    if ass:
        metadata.format_specific['ass'] = ass
    return metadata


def from_ssafile(subs: SSAFile) -> SubtitleDocument:
    """Convert a pysubs2 SSAFile into a document. Comment events are skipped."""
    cues = []
    for event in subs.events:
        if event.is_comment:
            continue
        cues.append(Cue(
            start_ms=event.start,
            end_ms=event.end,
            content=event.text,
            style=event.style or None,
            layout=layout_from_overrides(event.text),
            format_specific=CueFormatData(ass=AssCueData(
                layer=event.layer,
                actor=event.name,
                margin_l=event.marginl,
                margin_r=event.marginr,
                margin_v=event.marginv,
                effect=event.effect,
            )),
        ))

    return SubtitleDocument(
        source_format='ass',
        metadata=_metadata_from_info(dict(subs.info)),
        styles=[_from_ssastyle(name, style) for name, style in subs.styles.items()],
        cues=cues,
    )
