# subconv/parsers/csv_parser.py
"""
CSV transcription export parser.

Row layout:
    [relStart],[relEnd],character,text,,confidence,[absStart],[absEnd]

Exports interleave data rows with headers, annotations and blank rows.
A row is a cue only when both leading time columns are bracketed and
parse; every other row is skipped.
"""
from __future__ import annotations

import csv
import io
import logging

from ..data import CsvCueData, Cue, CueFormatData, SubtitleDocument
from ..errors import InvalidFormatError, IssueType, ValidationResult
from ..utils.timestamps import parse_flexible_time

logger = logging.getLogger(__name__)

MIN_COLUMNS = 4


def _bracketed_time(value: str) -> int | None:
    value = value.strip()
    if len(value) < 3 or not (value.startswith('[') and value.endswith(']')):
        return None
    return parse_flexible_time(value[1:-1])


def _unbracket(value: str) -> str | None:
    value = value.strip().strip('[]').strip()
    return value or None


def _confidence(value: str) -> float | None:
    try:
        return float(value)
    except ValueError:
        return None


def _rows(content: str):
    reader = csv.reader(io.StringIO(content.lstrip('\ufeff')))
    for row in reader:
        yield reader.line_num, row


def _cue_from_row(row: list[str]) -> Cue | None:
    if len(row) < MIN_COLUMNS:
        return None
    start_ms = _bracketed_time(row[0])
    end_ms = _bracketed_time(row[1])
    if start_ms is None or end_ms is None:
        return None

    character = row[2].strip()
    text = row[3].strip()
    csv_data = CsvCueData(
        character=character,
        confidence=_confidence(row[5]) if len(row) > 5 else None,
        abs_start=_unbracket(row[6]) if len(row) > 6 else None,
        abs_end=_unbracket(row[7]) if len(row) > 7 else None,
    )
    return Cue(
        start_ms=start_ms,
        end_ms=end_ms,
        text=text,
        content=text,
        style=character or None,
        format_specific=CueFormatData(csv=csv_data),
    )


def parse_csv(content: str) -> SubtitleDocument:
    """Parse a CSV transcription export into a document."""
    cues: list[Cue] = []
    try:
        for line_number, row in _rows(content):
            cue = _cue_from_row(row)
            if cue is None:
                if any(cell.strip() for cell in row):
                    logger.debug('Skipping non-data CSV row at line %d', line_number)
                continue
            cues.append(cue)
    except csv.Error as e:
        raise InvalidFormatError(f'Unreadable CSV: {e}') from e

    logger.debug('Parsed %d CSV cues', len(cues))
    return SubtitleDocument(source_format='csv', cues=cues)


def validate_csv_structure(content: str) -> ValidationResult:
    result = ValidationResult()
    data_rows = 0
    try:
        for line_number, row in _rows(content):
            cue = _cue_from_row(row)
            if cue is None:
                continue
            data_rows += 1
            if cue.start_ms > cue.end_ms:
                result.error(IssueType.INVALID_TIMECODE, 'Row ends before it starts', line_number=line_number)
            if not cue.text:
                result.warn(IssueType.EMPTY_CUE, 'Row has no text', line_number=line_number)
    except csv.Error as e:
        result.error(IssueType.INVALID_FORMAT, f'Unreadable CSV: {e}')
        return result

    if data_rows == 0:
        result.error(IssueType.INVALID_FORMAT, 'No rows with bracketed time columns')
    return result
