# subconv/utils/__init__.py
"""
Shared utilities for subtitle conversion.

Modules:
- timestamps: time codec for SRT, VTT and ASS timestamps
"""

from .timestamps import (
    TIME_FORMATS,
    format_display_timestamp,
    from_ms,
    is_valid_timecode,
    parse_flexible_time,
    round_to_centiseconds,
    round_to_milliseconds,
    time_ranges_overlap,
    to_ms,
)

__all__ = [
    "TIME_FORMATS",
    "format_display_timestamp",
    "from_ms",
    "is_valid_timecode",
    "parse_flexible_time",
    "round_to_centiseconds",
    "round_to_milliseconds",
    "time_ranges_overlap",
    "to_ms",
]
