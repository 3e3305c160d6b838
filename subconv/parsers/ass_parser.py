# subconv/parsers/ass_parser.py
"""
ASS/SSA subtitle parser with metadata preservation.

Parses straight to a SubtitleDocument because ASS carries a style table
and script metadata that a bare cue list cannot hold.

Preserved for a lossless round trip:
- [Script Info] keys (known keys as camelCase, the rest under extraInfo)
- Style records, with column order taken from each Format: line
- Per-dialogue Layer/Name/Margins/Effect
- Override blocks, verbatim, in rich content
- Comment: events, ';' comments and unknown sections, as raw lines
- Original section order
"""
from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Any

from ..data import AssCueData, Cue, CueFormatData, Metadata, Style, SubtitleDocument
from ..errors import InvalidFormatError, InvalidTimecodeError, IssueType, ValidationResult
from ..overrides import layout_from_overrides, strip_overrides
from ..utils.timestamps import to_ms

logger = logging.getLogger(__name__)

DEFAULT_STYLE_FORMAT = [
    'Name', 'Fontname', 'Fontsize', 'PrimaryColour', 'SecondaryColour',
    'OutlineColour', 'BackColour', 'Bold', 'Italic', 'Underline', 'StrikeOut',
    'ScaleX', 'ScaleY', 'Spacing', 'Angle', 'BorderStyle', 'Outline',
    'Shadow', 'Alignment', 'MarginL', 'MarginR', 'MarginV', 'Encoding',
]

DEFAULT_EVENT_FORMAT = [
    'Layer', 'Start', 'End', 'Style', 'Name',
    'MarginL', 'MarginR', 'MarginV', 'Effect', 'Text',
]

# [Script Info] key -> metadata.format_specific['ass'] key
SCRIPT_INFO_KEYS = OrderedDict([
    ('ScriptType', 'scriptType'),
    ('WrapStyle', 'wrapStyle'),
    ('ScaledBorderAndShadow', 'scaledBorderAndShadow'),
    ('YCbCr Matrix', 'yCbCrMatrix'),
    ('PlayResX', 'playResX'),
    ('PlayResY', 'playResY'),
    ('LayoutResX', 'layoutResX'),
    ('LayoutResY', 'layoutResY'),
    ('Collisions', 'collisions'),
    ('PlayDepth', 'playDepth'),
    ('Timer', 'timer'),
    ('Synch Point', 'synchPoint'),
    ('Original Script', 'originalScript'),
    ('Original Translation', 'originalTranslation'),
    ('Original Editing', 'originalEditing'),
    ('Original Timing', 'originalTiming'),
    ('Script Updated By', 'scriptUpdatedBy'),
    ('Update Details', 'updateDetails'),
])
INTEGER_INFO_KEYS = {'PlayResX', 'PlayResY', 'LayoutResX', 'LayoutResY', 'WrapStyle', 'PlayDepth'}

# Style column (lowercase) -> Style attribute
STYLE_COLUMNS = {
    'name': 'name',
    'fontname': 'font_name',
    'fontsize': 'font_size',
    'primarycolour': 'primary_color',
    'primarycolor': 'primary_color',
    'secondarycolour': 'secondary_color',
    'secondarycolor': 'secondary_color',
    'outlinecolour': 'outline_color',
    'outlinecolor': 'outline_color',
    'backcolour': 'back_color',
    'backcolor': 'back_color',
    'bold': 'bold',
    'italic': 'italic',
    'underline': 'underline',
    'strikeout': 'strike_out',
    'scalex': 'scale_x',
    'scaley': 'scale_y',
    'spacing': 'spacing',
    'angle': 'angle',
    'borderstyle': 'border_style',
    'outline': 'outline',
    'shadow': 'shadow',
    'alignment': 'alignment',
    'marginl': 'margin_l',
    'marginr': 'margin_r',
    'marginv': 'margin_v',
    'encoding': 'encoding',
}

STYLE_SECTIONS = ('[v4+ styles]', '[v4 styles]')


def _split_fields(line: str, count: int) -> list[str]:
    """Split a record body on the first ``count - 1`` commas."""
    return line.split(',', count - 1)


def _parse_format(line: str) -> list[str]:
    return [f.strip() for f in line.split(':', 1)[1].split(',')]


def style_from_fields(format_fields: list[str], values: list[str]) -> Style:
    """
    Build a Style from Format fields and Style values.

    Raises:
        ValueError: a numeric column does not parse
    """
    style = Style(name='Default')
    unknown: dict[str, str] = {}

    for field_name, raw in zip(format_fields, values):
        value = raw.strip()
        attr = STYLE_COLUMNS.get(field_name.lower())
        if attr is None:
            unknown[field_name] = value
            continue

        default = getattr(style, attr)
        if isinstance(default, bool):
            setattr(style, attr, int(float(value)) != 0)
        elif isinstance(default, int):
            setattr(style, attr, int(float(value)))
        elif isinstance(default, float):
            setattr(style, attr, float(value))
        else:
            setattr(style, attr, value)

    if unknown:
        style.format_specific['ass'] = unknown
    return style


def _int_field(value: str) -> int:
    value = value.strip()
    return int(value) if value else 0


def cue_from_dialogue(format_fields: list[str], body: str) -> Cue:
    """
    Build a Cue from a Dialogue line body (text after 'Dialogue:').

    Only the last column may contain commas.

    Raises:
        ValueError: wrong field count, bad layer/margin or bad timecode
    """
    values = _split_fields(body, len(format_fields))
    if len(values) < len(format_fields):
        raise ValueError(f'expected {len(format_fields)} fields, got {len(values)}')

    fields = {name.lower(): value for name, value in zip(format_fields, values)}
    content = fields.get('text', '')
    start_ms = to_ms(fields.get('start', '').strip(), 'ass')
    end_ms = to_ms(fields.get('end', '').strip(), 'ass')

    ass_data = AssCueData(
        layer=_int_field(fields.get('layer', '0')),
        actor=fields.get('name', fields.get('actor', '')).strip(),
        margin_l=_int_field(fields.get('marginl', '0')),
        margin_r=_int_field(fields.get('marginr', '0')),
        margin_v=_int_field(fields.get('marginv', '0')),
        effect=fields.get('effect', '').strip(),
    )

    return Cue(
        start_ms=start_ms,
        end_ms=end_ms,
        text=strip_overrides(content),
        content=content,
        style=fields.get('style', 'Default').strip() or None,
        layout=layout_from_overrides(content),
        format_specific=CueFormatData(ass=ass_data),
    )


# =============================================================================
# Section handlers
# =============================================================================


def _parse_script_info(state: dict[str, Any], lines: list[str]) -> None:
    """Parse [Script Info] section."""
    metadata: Metadata = state['metadata']
    ass = state['ass']

    for line in lines:
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.startswith(';'):
            ass.setdefault('comments', []).append(stripped)
            continue
        if ':' not in stripped:
            logger.debug('Ignoring Script Info line without a key: %r', stripped)
            continue

        key, value = (part.strip() for part in stripped.split(':', 1))
        if key == 'Title':
            metadata.title = value
        elif key == 'Language':
            metadata.language = value
        elif key in SCRIPT_INFO_KEYS:
            if key in INTEGER_INFO_KEYS and value.lstrip('-').isdigit():
                ass[SCRIPT_INFO_KEYS[key]] = int(value)
            else:
                ass[SCRIPT_INFO_KEYS[key]] = value
        else:
            ass.setdefault('extraInfo', {})[key] = value


def _parse_styles(state: dict[str, Any], lines: list[tuple[int, str]]) -> None:
    """Parse [V4+ Styles] or [V4 Styles] section."""
    format_fields = None
    styles: OrderedDict[str, Style] = state['styles']

    for line_number, line in lines:
        stripped = line.strip()
        if not stripped or stripped.startswith(';'):
            continue

        if stripped.lower().startswith('format:'):
            format_fields = _parse_format(stripped)
            continue

        if stripped.lower().startswith('style:'):
            if format_fields is None:
                format_fields = DEFAULT_STYLE_FORMAT
            body = stripped.split(':', 1)[1].strip()
            values = _split_fields(body, len(format_fields))
            try:
                style = style_from_fields(format_fields, values)
            except ValueError as e:
                logger.warning('Skipping style at line %d: %s', line_number, e)
                continue
            styles[style.name] = style


def _parse_events(state: dict[str, Any], lines: list[tuple[int, str]]) -> None:
    """Parse [Events] section."""
    format_fields = None
    cues: list[Cue] = state['cues']

    for line_number, line in lines:
        stripped = line.strip()
        if not stripped or stripped.startswith(';'):
            continue

        line_lower = stripped.lower()
        if line_lower.startswith('format:'):
            format_fields = _parse_format(stripped)
            continue

        if line_lower.startswith('comment:'):
            state['ass'].setdefault('commentEvents', []).append(stripped)
            continue

        if line_lower.startswith('dialogue:'):
            if format_fields is None:
                format_fields = DEFAULT_EVENT_FORMAT
            body = stripped.split(':', 1)[1].lstrip()
            try:
                cues.append(cue_from_dialogue(format_fields, body))
            except (ValueError, InvalidTimecodeError) as e:
                logger.debug('Dropping dialogue at line %d: %s', line_number, e)


# =============================================================================
# Entry points
# =============================================================================


def _sections(content: str) -> list[tuple[str | None, list[tuple[int, str]]]]:
    """Split text into (section header, [(line number, line)]) in file order."""
    sections: list[tuple[str | None, list[tuple[int, str]]]] = [(None, [])]
    normalized = content.lstrip('\ufeff').replace('\r\n', '\n').replace('\r', '\n')
    for line_number, line in enumerate(normalized.split('\n'), start=1):
        stripped = line.strip()
        if stripped.startswith('[') and stripped.endswith(']'):
            sections.append((stripped, []))
            continue
        sections[-1][1].append((line_number, line))
    return sections


def parse_ass(content: str) -> SubtitleDocument:
    """
    Parse ASS/SSA text with metadata preservation.

    Malformed style records are skipped; dialogue lines failing their
    field grammar are dropped.

    Raises:
        InvalidFormatError: no [Events] section
    """
    state: dict[str, Any] = {
        'metadata': Metadata(),
        'ass': {},
        'styles': OrderedDict(),
        'cues': [],
    }
    section_order = []
    extra_sections: dict[str, list[str]] = {}
    has_events = False

    for name, lines in _sections(content):
        if name is None:
            continue
        section_order.append(name)
        lower = name.lower()

        if lower == '[script info]':
            _parse_script_info(state, [line for _, line in lines])
        elif lower in STYLE_SECTIONS:
            _parse_styles(state, lines)
        elif lower == '[events]':
            has_events = True
            _parse_events(state, lines)
        else:
            # Unknown section - preserve as raw lines
            raw = [line for _, line in lines]
            while raw and not raw[-1].strip():
                raw.pop()
            extra_sections[name] = raw

    if not has_events:
        raise InvalidFormatError('Invalid ASS: missing [Events] section')

    ass = state['ass']
    if extra_sections:
        ass['sections'] = extra_sections
    ass['sectionOrder'] = section_order

    metadata: Metadata = state['metadata']
    metadata.format_specific['ass'] = ass

    logger.debug('Parsed %d ASS dialogue lines, %d styles', len(state['cues']), len(state['styles']))
    return SubtitleDocument(
        source_format='ass',
        metadata=metadata,
        styles=state['styles'],
        cues=state['cues'],
    )


def validate_ass_structure(content: str) -> ValidationResult:
    """Check ASS sections and dialogue grammar without raising."""
    result = ValidationResult()
    sections = {name.lower(): lines for name, lines in _sections(content) if name}

    if '[script info]' not in sections:
        result.error(IssueType.INVALID_FORMAT, 'Missing [Script Info] section')
    if not any(s in sections for s in STYLE_SECTIONS):
        result.warn(IssueType.INVALID_FORMAT, 'Missing [V4+ Styles] section')
    if '[events]' not in sections:
        result.error(IssueType.INVALID_FORMAT, 'Missing [Events] section')
        return result

    format_fields = DEFAULT_EVENT_FORMAT
    dialogue_count = 0
    for line_number, line in sections['[events]']:
        stripped = line.strip()
        if stripped.lower().startswith('format:'):
            format_fields = _parse_format(stripped)
        elif stripped.lower().startswith('dialogue:'):
            dialogue_count += 1
            try:
                cue = cue_from_dialogue(format_fields, stripped.split(':', 1)[1].lstrip())
            except InvalidTimecodeError as e:
                result.error(IssueType.INVALID_TIMECODE, str(e), line_number=line_number)
                continue
            except ValueError as e:
                result.error(IssueType.INVALID_FORMAT, f'Malformed dialogue: {e}', line_number=line_number)
                continue
            if cue.start_ms > cue.end_ms:
                result.error(IssueType.INVALID_TIMECODE, 'Dialogue ends before it starts', line_number=line_number)

    if dialogue_count == 0:
        result.warn(IssueType.EMPTY_CUE, 'No Dialogue lines in [Events]')
    return result
