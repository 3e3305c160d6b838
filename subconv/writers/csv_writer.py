# subconv/writers/csv_writer.py
"""
CSV transcription export writer.

Writes ``[relStart],[relEnd],character,text,,confidence,[absStart],[absEnd]``
rows. Times keep centisecond notation when exact, milliseconds otherwise.
"""
from __future__ import annotations

import csv
import io
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..data import Cue, SubtitleDocument


def format_csv_time(ms: int) -> str:
    """Milliseconds -> H:MM:SS.cc (or H:MM:SS.mmm when not a whole centisecond)."""
    ms = max(int(ms), 0)
    hours, rest = divmod(ms, 3600000)
    minutes, rest = divmod(rest, 60000)
    seconds, millis = divmod(rest, 1000)
    fraction = f'{millis // 10:02d}' if millis % 10 == 0 else f'{millis:03d}'
    return f'{hours}:{minutes:02d}:{seconds:02d}.{fraction}'


def _number(value: float) -> str:
    if value == int(value):
        return str(int(value))
    return str(value)


def _row(cue: Cue) -> list[str]:
    csv_data = cue.format_specific.csv
    character = (csv_data.character if csv_data else '') or cue.speaker or cue.style or ''
    confidence = csv_data.confidence if csv_data else None
    abs_start = csv_data.abs_start if csv_data else None
    abs_end = csv_data.abs_end if csv_data else None
    return [
        f'[{format_csv_time(cue.start_ms)}]',
        f'[{format_csv_time(cue.end_ms)}]',
        character,
        cue.text,
        '',
        _number(confidence) if confidence is not None else '',
        f'[{abs_start}]' if abs_start else '',
        f'[{abs_end}]' if abs_end else '',
    ]


def to_csv(doc: SubtitleDocument) -> str:
    output = io.StringIO()
    writer = csv.writer(output, lineterminator='\n')
    for cue in doc.cues:
        writer.writerow(_row(cue))
    return output.getvalue()
