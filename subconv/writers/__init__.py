# subconv/writers/__init__.py
"""Format writers."""

from .ass_writer import to_ass
from .csv_writer import to_csv
from .json_writer import to_json, to_legacy_json
from .srt_writer import to_srt, to_vtt

__all__ = [
    'to_ass',
    'to_csv',
    'to_json',
    'to_legacy_json',
    'to_srt',
    'to_vtt',
]
