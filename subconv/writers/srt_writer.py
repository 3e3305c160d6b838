# subconv/writers/srt_writer.py
"""
SRT and WebVTT subtitle writers.

Cues from ASS have their override blocks translated to HTML-ish tags.
WebVTT content escapes &, < and > as character references; those are
resolved on the way to SRT and added on the way to VTT. Sequence numbers
are always regenerated.
"""
from __future__ import annotations

import html
from typing import TYPE_CHECKING, Iterable, Union

from ..overrides import ass_to_html_markup, escape_vtt, unescape_vtt
from ..utils.timestamps import from_ms

if TYPE_CHECKING:
    from ..data import Cue, SubtitleDocument

CueSource = Union['SubtitleDocument', Iterable['Cue']]


def _cues(source: CueSource) -> list[Cue]:
    cues = getattr(source, 'cues', source)
    return list(cues)


def cue_markup(cue: Cue, plain_text_only: bool = False, vtt: bool = False) -> str:
    """
    Cue text for SRT output, or WebVTT output with ``vtt``.

    Blank lines would end the block, so they are collapsed.
    """
    if plain_text_only:
        text = html.escape(cue.text, quote=False) if vtt else cue.text
    else:
        text = ass_to_html_markup(cue.content) if cue.is_ass else cue.content
        if vtt and not cue.is_vtt:
            text = escape_vtt(text)
        elif cue.is_vtt and not vtt:
            text = unescape_vtt(text)
    lines = [line for line in text.replace('\r\n', '\n').split('\n') if line.strip()]
    return '\n'.join(lines)


def to_srt(source: CueSource, plain_text_only: bool = False) -> str:
    """
    Serialize cues as SRT.

    Args:
        source: SubtitleDocument or iterable of cues
        plain_text_only: write plain text instead of rich content

    Returns:
        SRT text
    """
    lines = []

    for idx, cue in enumerate(_cues(source), start=1):
        lines.append(str(idx))
        lines.append(f'{from_ms(cue.start_ms, "srt")} --> {from_ms(cue.end_ms, "srt")}')
        lines.append(cue_markup(cue, plain_text_only))
        # Blank line separator
        lines.append('')

    return '\n'.join(lines)


def to_vtt(source: CueSource, plain_text_only: bool = False) -> str:
    """
    Serialize cues as WebVTT.

    Header text, STYLE, REGION and NOTE blocks kept in
    ``metadata.format_specific['vtt']`` are written back after the
    WEBVTT line.
    """
    vtt_meta = {}
    metadata = getattr(source, 'metadata', None)
    if metadata is not None:
        vtt_meta = metadata.format_specific.get('vtt', {})

    header = 'WEBVTT'
    if vtt_meta.get('header'):
        header += f' {vtt_meta["header"]}'
    lines = [header]
    lines.extend(vtt_meta.get('headerLines', []))
    lines.append('')

    for key in ('regions', 'styles', 'notes'):
        for block in vtt_meta.get(key, []):
            lines.append(block)
            lines.append('')

    for cue in _cues(source):
        if cue.identifier:
            lines.append(cue.identifier)
        timing = f'{from_ms(cue.start_ms, "vtt")} --> {from_ms(cue.end_ms, "vtt")}'
        vtt_data = cue.format_specific.vtt
        if vtt_data is not None and vtt_data.to_settings():
            timing += f' {vtt_data.to_settings()}'
        lines.append(timing)
        lines.append(cue_markup(cue, plain_text_only, vtt=True))
        lines.append('')

    return '\n'.join(lines)
