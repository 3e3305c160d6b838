# subconv/writers/ass_writer.py
"""
ASS subtitle writer with metadata preservation.

Timing is floored to centiseconds here. The writer restores:
- Original section order
- Script Info keys, ';' comments and unknown keys
- Comment: events and unknown sections (raw)

Documents from other formats get a default header and a Default style,
and their HTML-ish tags are translated to override blocks.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from ..data import Style
from ..overrides import html_to_ass_markup
from ..parsers.ass_parser import DEFAULT_EVENT_FORMAT, DEFAULT_STYLE_FORMAT, SCRIPT_INFO_KEYS
from ..utils.timestamps import from_ms

if TYPE_CHECKING:
    from ..data import Cue, SubtitleDocument

DEFAULT_SCRIPT_INFO = {
    'scriptType': 'v4.00+',
    'collisions': 'Normal',
    'playDepth': 0,
}

STYLES_SECTION = '[V4+ Styles]'


def _format_number(value: float) -> str:
    """Format number, removing unnecessary decimals."""
    if value == int(value):
        return str(int(value))
    return str(value)


def _flag(value: bool) -> str:
    return '-1' if value else '0'


def style_to_values(style: Style) -> list[str]:
    """Style as V4+ values in DEFAULT_STYLE_FORMAT order."""
    return [
        style.name,
        style.font_name,
        _format_number(style.font_size),
        style.primary_color,
        style.secondary_color,
        style.outline_color,
        style.back_color,
        _flag(style.bold),
        _flag(style.italic),
        _flag(style.underline),
        _flag(style.strike_out),
        _format_number(style.scale_x),
        _format_number(style.scale_y),
        _format_number(style.spacing),
        _format_number(style.angle),
        str(style.border_style),
        _format_number(style.outline),
        _format_number(style.shadow),
        str(style.alignment),
        str(style.margin_l),
        str(style.margin_r),
        str(style.margin_v),
        str(style.encoding),
    ]


def cue_to_ass_text(cue: Cue, plain_text_only: bool = False) -> str:
    if plain_text_only:
        return cue.text.replace('\n', '\\N')
    if cue.is_ass:
        return cue.content.replace('\r\n', '\n').replace('\n', '\\N')
    return html_to_ass_markup(cue.content, cue.is_vtt)


def dialogue_line(cue: Cue, plain_text_only: bool = False) -> str:
    ass = cue.format_specific.ass
    fields = [
        str(ass.layer if ass else 0),
        from_ms(cue.start_ms, 'ass'),
        from_ms(cue.end_ms, 'ass'),
        cue.style or 'Default',
        ass.actor if ass else '',
        str(ass.margin_l if ass else 0),
        str(ass.margin_r if ass else 0),
        str(ass.margin_v if ass else 0),
        ass.effect if ass else '',
        cue_to_ass_text(cue, plain_text_only),
    ]
    return 'Dialogue: ' + ','.join(fields)


def _write_script_info(doc: SubtitleDocument, ass: dict, lines: list) -> None:
    """Write [Script Info] section."""
    lines.append('[Script Info]')
    for comment in ass.get('comments', []):
        lines.append(comment)

    if doc.metadata.title is not None:
        lines.append(f'Title: {doc.metadata.title}')
    if doc.metadata.language is not None:
        lines.append(f'Language: {doc.metadata.language}')

    info = dict(ass) if 'scriptType' in ass else {**DEFAULT_SCRIPT_INFO, **ass}
    for key, name in SCRIPT_INFO_KEYS.items():
        if name in info:
            lines.append(f'{key}: {info[name]}')
    for key, value in ass.get('extraInfo', {}).items():
        lines.append(f'{key}: {value}')
    lines.append('')


def _write_styles(doc: SubtitleDocument, lines: list) -> None:
    """Write [V4+ Styles] section."""
    lines.append(STYLES_SECTION)
    lines.append('Format: ' + ', '.join(DEFAULT_STYLE_FORMAT))
    styles = list(doc.styles.values()) or [Style.default()]
    for style in styles:
        lines.append('Style: ' + ','.join(style_to_values(style)))
    lines.append('')


def _write_events(doc: SubtitleDocument, ass: dict, lines: list, plain_text_only: bool) -> None:
    """Write [Events] section."""
    lines.append('[Events]')
    lines.append('Format: ' + ', '.join(DEFAULT_EVENT_FORMAT))
    for comment in ass.get('commentEvents', []):
        lines.append(comment)
    for cue in doc.cues:
        lines.append(dialogue_line(cue, plain_text_only))
    lines.append('')


def _section_order(ass: dict) -> list[str]:
    order = list(ass.get('sectionOrder', []))

    def has(*names: str) -> bool:
        return any(name.lower() in names for name in order)

    if not has('[script info]'):
        order.insert(0, '[Script Info]')
    if not has('[v4+ styles]', '[v4 styles]'):
        lowered = [name.lower() for name in order]
        position = lowered.index('[events]') if '[events]' in lowered else len(order)
        order.insert(position, STYLES_SECTION)
    if not has('[events]'):
        order.append('[Events]')
    for name in ass.get('sections', {}):
        if name not in order:
            order.append(name)
    return order


def to_ass(doc: SubtitleDocument, plain_text_only: bool = False) -> str:
    """
    Serialize a document as ASS.

    Args:
        doc: document to write
        plain_text_only: drop override blocks and write plain text

    Returns:
        ASS text
    """
    ass = doc.metadata.format_specific.get('ass', {})
    extra_sections = ass.get('sections', {})
    lines: list[str] = []

    for section_name in _section_order(ass):
        section_lower = section_name.lower()
        if section_lower == '[script info]':
            _write_script_info(doc, ass, lines)
        elif section_lower in ('[v4+ styles]', '[v4 styles]'):
            _write_styles(doc, lines)
        elif section_lower == '[events]':
            _write_events(doc, ass, lines, plain_text_only)
        elif section_name in extra_sections:
            lines.append(section_name)
            lines.extend(extra_sections[section_name])
            lines.append('')

    return '\n'.join(lines)
