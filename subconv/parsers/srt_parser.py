# subconv/parsers/srt_parser.py
"""
SRT and VTT subtitle parsers.

Parses SRT/VTT text into Cue lists (and, for VTT, a SubtitleDocument that
also carries the header, STYLE, REGION and NOTE blocks).
Preserves:
- Multi-line text with interior whitespace (trimmed only at block edges)
- Inline tags (<i>, <c.yellow>, <v Bob>) in rich content
- VTT cue identifiers and cue settings

Malformed blocks are skipped, never defaulted.
"""
from __future__ import annotations

import html
import logging
import re

from ..data import Cue, CueFormatData, Metadata, SubtitleDocument, VttCueData
from ..errors import InvalidFormatError, InvalidTimecodeError, IssueType, ValidationResult
from ..overrides import strip_html_tags
from ..utils.timestamps import parse_flexible_time, to_ms

logger = logging.getLogger(__name__)

_TIMING = re.compile(r'^\s*(\S+)\s*-->\s*(\S+)(.*)$')
_VTT_META_BLOCKS = ('NOTE', 'STYLE', 'REGION')


def _normalize(content: str) -> str:
    return content.lstrip('\ufeff').replace('\r\n', '\n').replace('\r', '\n')


def _split_blocks(content: str) -> list[tuple[int, list[str]]]:
    """Blank-line separated blocks as (first line number, lines)."""
    blocks = []
    current: list[str] = []
    start = 0
    for line_number, line in enumerate(content.split('\n'), start=1):
        if line.strip():
            if not current:
                start = line_number
            current.append(line)
        elif current:
            blocks.append((start, current))
            current = []
    if current:
        blocks.append((start, current))
    return blocks


def _parse_srt_time(time_str: str) -> int | None:
    """
    Parse SRT timestamp to milliseconds.

    Strict grammar first; files with a period separator or short hours
    still parse through the flexible reader.
    """
    try:
        return to_ms(time_str, 'srt')
    except InvalidTimecodeError:
        return parse_flexible_time(time_str)


def _parse_timing(line: str, parse_time) -> tuple[int, int, str] | None:
    match = _TIMING.match(line)
    if not match:
        return None
    start = parse_time(match.group(1))
    end = parse_time(match.group(2))
    if start is None or end is None:
        return None
    return start, end, match.group(3).strip()


# =============================================================================
# SRT
# =============================================================================


def parse_srt(content: str) -> list[Cue]:
    """
    Parse SRT text into cues.

    SRT format:
    ```
    1
    00:00:01,000 --> 00:00:04,000
    First subtitle line
    Maybe second line

    2
    00:00:05,000 --> 00:00:08,000
    Second subtitle
    ```

    Sequence numbers are optional; cue indices are always recomputed.
    """
    cues: list[Cue] = []

    for line_number, lines in _split_blocks(_normalize(content).strip('\n')):
        if '-->' in lines[0]:
            timing_at = 0
        elif len(lines) > 1 and '-->' in lines[1]:
            timing_at = 1
        else:
            logger.debug('SRT block at line %d has no timing line, skipped', line_number)
            continue

        timing = _parse_timing(lines[timing_at], _parse_srt_time)
        if timing is None:
            logger.debug('SRT block at line %d has an invalid timing line, skipped', line_number)
            continue

        start_ms, end_ms, _ = timing
        content_text = '\n'.join(lines[timing_at + 1:]).strip()
        cues.append(Cue(
            start_ms=start_ms,
            end_ms=end_ms,
            text=strip_html_tags(content_text),
            content=content_text,
            index=len(cues) + 1,
        ))

    logger.debug('Parsed %d SRT cues', len(cues))
    return cues


def validate_srt_structure(content: str) -> ValidationResult:
    """Check SRT block structure without raising."""
    result = ValidationResult()
    content = _normalize(content)
    if not content.strip():
        result.error(IssueType.INVALID_FORMAT, 'Empty SRT content')
        return result

    for number, (line_number, lines) in enumerate(_split_blocks(content.strip('\n')), start=1):
        if not lines[0].strip().isdigit():
            result.error(
                IssueType.MISSING_CUE_NUMBER,
                f'Block {number} does not start with a sequence number',
                line_number=line_number, cue_index=number,
            )
            timing_line = lines[0] if '-->' in lines[0] else None
            text_lines = lines[1:]
        else:
            timing_line = lines[1] if len(lines) > 1 else None
            text_lines = lines[2:]

        timing = _parse_timing(timing_line, _parse_srt_time) if timing_line else None
        if timing is None:
            result.error(
                IssueType.INVALID_TIMECODE,
                f'Block {number} has a missing or invalid timing line',
                line_number=line_number, cue_index=number,
            )
        elif timing[0] > timing[1]:
            result.error(
                IssueType.INVALID_TIMECODE,
                f'Block {number} ends before it starts',
                line_number=line_number, cue_index=number,
            )

        if not any(line.strip() for line in text_lines):
            result.error(
                IssueType.EMPTY_CUE,
                f'Block {number} has no text',
                line_number=line_number, cue_index=number,
            )

    return result


# =============================================================================
# WebVTT
# =============================================================================


def _parse_vtt_time(time_str: str) -> int | None:
    """
    Parse VTT timestamp to milliseconds.

    Format: HH:MM:SS.mmm or MM:SS.mmm; a comma separator is accepted.
    """
    if not re.match(r'^(?:\d{2,}:)?\d{2}:\d{2}[.,]\d{3}$', time_str):
        return None
    return parse_flexible_time(time_str)


def _parse_cue_settings(settings: str) -> VttCueData:
    """Every VTT cue gets a payload, settings or not; it marks the content as VTT."""
    data = VttCueData()
    for token in settings.split():
        key, sep, value = token.partition(':')
        if sep and key in VttCueData.SETTINGS:
            setattr(data, key, value)
        else:
            logger.debug('Ignoring unknown VTT cue setting %r', token)
    return data


def _check_header(content: str) -> None:
    if not content.startswith('WEBVTT'):
        raise InvalidFormatError('Invalid WebVTT: missing WEBVTT header')


def vtt_to_universal(content: str) -> SubtitleDocument:
    """
    Parse WebVTT into a document.

    VTT format:
    ```
    WEBVTT

    00:00:01.000 --> 00:00:04.000
    First subtitle line

    intro
    00:00:05.000 --> 00:00:08.000 line:0 align:start
    Second subtitle
    ```

    NOTE, STYLE and REGION blocks are kept under
    ``metadata.format_specific['vtt']`` so they survive a round trip.

    Raises:
        InvalidFormatError: missing WEBVTT header
    """
    content = _normalize(content)
    _check_header(content)

    blocks = _split_blocks(content)
    header_lines = blocks[0][1]
    extras: dict[str, list[str]] = {'styles': [], 'regions': [], 'notes': []}
    cues: list[Cue] = []

    for line_number, lines in blocks[1:]:
        keyword = lines[0].split(' ', 1)[0]
        if keyword in _VTT_META_BLOCKS and '-->' not in lines[0]:
            bucket = {'NOTE': 'notes', 'STYLE': 'styles', 'REGION': 'regions'}[keyword]
            extras[bucket].append('\n'.join(lines))
            continue

        if '-->' in lines[0]:
            identifier, timing_at = None, 0
        elif len(lines) > 1 and '-->' in lines[1]:
            identifier, timing_at = lines[0].strip(), 1
        else:
            logger.debug('VTT block at line %d has no timing line, skipped', line_number)
            continue

        timing = _parse_timing(lines[timing_at], _parse_vtt_time)
        if timing is None:
            logger.debug('VTT block at line %d has an invalid timing line, skipped', line_number)
            continue

        start_ms, end_ms, settings = timing
        settings_data = _parse_cue_settings(settings)
        content_text = '\n'.join(lines[timing_at + 1:]).strip()
        cues.append(Cue(
            start_ms=start_ms,
            end_ms=end_ms,
            text=html.unescape(strip_html_tags(content_text)),
            content=content_text,
            identifier=identifier,
            format_specific=CueFormatData(vtt=settings_data),
        ))

    vtt_meta: dict = {k: v for k, v in extras.items() if v}
    header = header_lines[0][len('WEBVTT'):].strip()
    if header:
        vtt_meta['header'] = header
    if len(header_lines) > 1:
        vtt_meta['headerLines'] = header_lines[1:]

    metadata = Metadata(format_specific={'vtt': vtt_meta} if vtt_meta else {})
    logger.debug('Parsed %d VTT cues', len(cues))
    return SubtitleDocument(source_format='vtt', metadata=metadata, cues=cues)


def parse_vtt(content: str) -> list[Cue]:
    """Parse WebVTT text into cues. See vtt_to_universal for the full document."""
    return vtt_to_universal(content).cues


def validate_vtt_structure(content: str) -> ValidationResult:
    """Check WebVTT structure without raising."""
    result = ValidationResult()
    content = _normalize(content)
    if not content.startswith('WEBVTT'):
        result.error(IssueType.INVALID_FORMAT, 'Missing WEBVTT header', line_number=1)
        return result

    for number, (line_number, lines) in enumerate(_split_blocks(content)[1:], start=1):
        if lines[0].split(' ', 1)[0] in _VTT_META_BLOCKS and '-->' not in lines[0]:
            continue

        timing_at = 0 if '-->' in lines[0] else 1
        if timing_at >= len(lines) or '-->' not in lines[timing_at]:
            result.error(
                IssueType.INVALID_TIMECODE,
                f'Block {number} has no timing line',
                line_number=line_number,
            )
            continue

        timing = _parse_timing(lines[timing_at], _parse_vtt_time)
        if timing is None:
            result.error(
                IssueType.INVALID_TIMECODE,
                f'Block {number} has an invalid timing line',
                line_number=line_number + timing_at,
            )
        elif timing[0] > timing[1]:
            result.error(
                IssueType.INVALID_TIMECODE,
                f'Block {number} ends before it starts',
                line_number=line_number + timing_at,
            )

        if not any(line.strip() for line in lines[timing_at + 1:]):
            result.warn(
                IssueType.EMPTY_CUE,
                f'Block {number} has no text',
                line_number=line_number,
            )

    return result
