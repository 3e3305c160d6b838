# subconv/parsers/__init__.py
"""
Format parsers.

SRT and VTT parse to cue lists; ASS, CSV and JSON parse to full documents.
Each module also provides a structure validator that never raises.
"""

from .ass_parser import parse_ass, validate_ass_structure
from .csv_parser import parse_csv, validate_csv_structure
from .json_parser import legacy_json_to_universal, parse_json, validate_json_structure
from .srt_parser import (
    parse_srt,
    parse_vtt,
    validate_srt_structure,
    validate_vtt_structure,
    vtt_to_universal,
)

__all__ = [
    'legacy_json_to_universal',
    'parse_ass',
    'parse_csv',
    'parse_json',
    'parse_srt',
    'parse_vtt',
    'validate_ass_structure',
    'validate_csv_structure',
    'validate_json_structure',
    'validate_srt_structure',
    'validate_vtt_structure',
    'vtt_to_universal',
]
