# subconv/utils/timestamps.py
"""
Time codec: textual subtitle timestamps <-> integer milliseconds.

Formats:
- SRT: HH:MM:SS,mmm (two+ digit hour, comma, milliseconds)
- VTT: HH:MM:SS.mmm (two+ digit hour, period, milliseconds)
- ASS: H:MM:SS.cc (one+ digit hour, period, centiseconds)

ASS centisecond conversion truncates in both directions so repeated
parse/format cycles never drift.
"""

from __future__ import annotations

import math
import re

from ..errors import InvalidTimecodeError

_GRAMMARS = {
    "srt": re.compile(r"^(\d{2,}):([0-5]\d):([0-5]\d),(\d{3})$"),
    "vtt": re.compile(r"^(\d{2,}):([0-5]\d):([0-5]\d)\.(\d{3})$"),
    "ass": re.compile(r"^(\d+):([0-5]\d):([0-5]\d)\.(\d{2})$"),
}

# M:SS[.f] or H:MM:SS[.f], either fraction separator, any fraction length
_FLEXIBLE_TIME = re.compile(r"^(?:(\d+):)?(\d{1,2}):(\d{2})(?:[.,](\d+))?$")

TIME_FORMATS = tuple(_GRAMMARS)


def _grammar(fmt: str) -> re.Pattern:
    try:
        return _GRAMMARS[fmt.lower()]
    except (KeyError, AttributeError):
        raise ValueError(f"Unsupported time format: {fmt!r}") from None


def to_ms(text: str, fmt: str) -> int:
    """
    Parse a timestamp in the exact grammar of ``fmt``.

    Args:
        text: Timestamp string, e.g. "00:01:23,456" (srt) or "0:01:23.45" (ass)
        fmt: "srt", "vtt" or "ass"

    Returns:
        Time in integer milliseconds

    Raises:
        InvalidTimecodeError: text does not match the format's grammar
    """
    match = _grammar(fmt).match(text) if isinstance(text, str) else None
    if not match:
        raise InvalidTimecodeError(str(text), fmt.lower())

    hours, minutes, seconds, fraction = match.groups()
    if fmt.lower() == "ass":
        fraction_ms = int(fraction) * 10
    else:
        fraction_ms = int(fraction)

    return int(hours) * 3600000 + int(minutes) * 60000 + int(seconds) * 1000 + fraction_ms


def _clock(total: int, units_per_second: int) -> tuple[int, int, int, int]:
    """Split a count of sub-second units into (hours, minutes, seconds, units)."""
    seconds, units = divmod(total, units_per_second)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    return hours, minutes, seconds, units


def from_ms(ms: int | float, fmt: str) -> str:
    """
    Format milliseconds in the grammar of ``fmt``.

    Negative input is clamped to zero. ASS output floors to centiseconds.
    """
    fmt = fmt.lower()
    _grammar(fmt)

    if fmt == "ass":
        h, m, s, cs = _clock(max(round_to_centiseconds(ms, "floor"), 0), 100)
        return f"{h}:{m:02d}:{s:02d}.{cs:02d}"

    h, m, s, millis = _clock(max(round_to_milliseconds(ms, "floor"), 0), 1000)
    separator = "," if fmt == "srt" else "."
    return f"{h:02d}:{m:02d}:{s:02d}{separator}{millis:03d}"


def is_valid_timecode(text: str, fmt: str) -> bool:
    try:
        to_ms(text, fmt)
    except InvalidTimecodeError:
        return False
    return True


def parse_flexible_time(text: str) -> int | None:
    """
    Parse a loosely written time such as "1:21.05", "0:01:21.05" or "01:22".

    Used where real-world files stray from a strict grammar (CSV exports,
    VTT short-form cues). Fractions are right-padded or truncated to
    milliseconds.

    Returns:
        Milliseconds, or None if the text is not a time
    """
    match = _FLEXIBLE_TIME.match(text.strip())
    if not match:
        return None

    hours, minutes, seconds, fraction = match.groups()
    if int(seconds) > 59 or (hours is not None and int(minutes) > 59):
        return None

    fraction_ms = int((fraction or "0").ljust(3, "0")[:3])
    return (
        int(hours or 0) * 3600000
        + int(minutes) * 60000
        + int(seconds) * 1000
        + fraction_ms
    )


def format_display_timestamp(ms: float) -> str:
    """Two-digit-hour clock with centiseconds, e.g. "01:02:03.45". Truncates."""
    h, m, s, cs = _clock(max(int(ms / 10), 0), 100)
    return f"{h:02d}:{m:02d}:{s:02d}.{cs:02d}"


def time_ranges_overlap(start1: int, end1: int, start2: int, end2: int) -> bool:
    return start1 < end2 and start2 < end1


_ROUNDING = {
    "floor": math.floor,
    "ceil": math.ceil,
    "round": round,
}


def _rounder(mode: str | None, default: str):
    try:
        return _ROUNDING[(mode or default).lower()]
    except KeyError:
        raise ValueError(f"Unknown rounding mode: {mode!r}") from None


def round_to_centiseconds(ms: float, rounding: str = "floor") -> int:
    """Whole centiseconds for ``ms`` using "floor", "round" or "ceil"."""
    return int(_rounder(rounding, "floor")(ms / 10))


def round_to_milliseconds(ms: float, rounding: str = "round") -> int:
    return int(_rounder(rounding, "round")(ms))
