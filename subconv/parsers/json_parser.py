# subconv/parsers/json_parser.py
"""
JSON subtitle parser.

Two dialects are accepted:
- the canonical document ({version, sourceFormat, metadata, styles, cues})
- the legacy flat array of {type, index, start, end, duration, text, content}

The canonical schema is tried first; anything else is an error.
"""
from __future__ import annotations

import json
import logging
from typing import Any

from ..data import Cue, Metadata, SubtitleDocument, validate_universal
from ..errors import InvalidFormatError, IssueType, ValidationResult
from ..overrides import plain_text

logger = logging.getLogger(__name__)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def legacy_json_to_universal(entries: list[Any]) -> SubtitleDocument:
    """
    Convert a legacy caption array.

    ``meta`` entries are kept under ``metadata.format_specific['json']``.

    Raises:
        InvalidFormatError: the array holds no caption-like objects
    """
    cues: list[Cue] = []
    meta_entries: list[dict[str, Any]] = []

    for position, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise InvalidFormatError(f'Legacy JSON entry {position} is not an object')

        entry_type = entry.get('type', 'caption')
        if entry_type == 'meta':
            meta_entries.append(entry)
            continue
        if entry_type != 'caption':
            logger.debug('Skipping legacy entry %d of type %r', position, entry_type)
            continue

        start, end = entry.get('start'), entry.get('end')
        if not (_is_number(start) and _is_number(end)):
            logger.debug('Skipping legacy caption %d without numeric start/end', position)
            continue

        content = entry.get('content')
        text = entry.get('text')
        if not isinstance(content, str):
            content = text if isinstance(text, str) else ''
        if not isinstance(text, str):
            text = plain_text(content)

        cues.append(Cue(start_ms=int(start), end_ms=int(end), text=text, content=content))

    if entries and not cues and not meta_entries:
        raise InvalidFormatError('JSON array contains no captions')

    metadata = Metadata(format_specific={'json': {'meta': meta_entries}} if meta_entries else {})
    return SubtitleDocument(source_format='json', metadata=metadata, cues=cues)


def parse_json(content: str) -> SubtitleDocument:
    """
    Parse canonical or legacy JSON.

    Raises:
        InvalidFormatError: not JSON, or neither dialect matches
    """
    try:
        data = json.loads(content)
    except ValueError as e:
        raise InvalidFormatError(f'Invalid JSON: {e}') from e

    if validate_universal(data):
        try:
            return SubtitleDocument.from_dict(data)
        except (TypeError, ValueError, AttributeError, OverflowError) as e:
            raise InvalidFormatError(f'Malformed subtitle document: {e}') from e
    if isinstance(data, list):
        return legacy_json_to_universal(data)
    raise InvalidFormatError('JSON is neither a canonical subtitle document nor a caption array')


def validate_json_structure(content: str) -> ValidationResult:
    result = ValidationResult()
    try:
        data = json.loads(content)
    except ValueError as e:
        result.error(IssueType.INVALID_FORMAT, f'Invalid JSON: {e}')
        return result

    if validate_universal(data):
        return result
    if not isinstance(data, list):
        result.error(IssueType.INVALID_FORMAT, 'Expected a subtitle document or a caption array')
        return result

    for position, entry in enumerate(data):
        if not isinstance(entry, dict):
            result.error(IssueType.INVALID_FORMAT, f'Entry {position} is not an object', cue_index=position)
            continue
        if entry.get('type', 'caption') != 'caption':
            continue
        if not (_is_number(entry.get('start')) and _is_number(entry.get('end'))):
            result.error(IssueType.INVALID_TIMECODE, f'Entry {position} lacks numeric start/end', cue_index=position)
        elif entry['start'] > entry['end']:
            result.error(IssueType.INVALID_TIMECODE, f'Entry {position} ends before it starts', cue_index=position)
        if not (entry.get('text') or entry.get('content')):
            result.warn(IssueType.EMPTY_CUE, f'Entry {position} has no text', cue_index=position)
    return result
