# tests/test_timestamps.py
import pytest

from subconv.errors import InvalidTimecodeError
from subconv.utils.timestamps import (
    format_display_timestamp,
    from_ms,
    is_valid_timecode,
    parse_flexible_time,
    time_ranges_overlap,
    to_ms,
)


def test_to_ms_parses_each_grammar():
    assert to_ms("00:01:23,456", "srt") == 83456
    assert to_ms("01:00:00.001", "vtt") == 3600001
    assert to_ms("1:02:03.45", "ass") == 3723450
    assert to_ms("100:00:00,000", "srt") == 360000000


@pytest.mark.parametrize("text,fmt", [
    ("00:01:23.456", "srt"),   # wrong separator
    ("0:01:23,456", "srt"),    # one digit hour
    ("00:60:00,000", "srt"),   # minutes out of range
    ("00:00:01,50", "srt"),
    ("00:00:01,000", "vtt"),
    ("0:00:01.5", "ass"),
    ("0:00:01.500", "ass"),
    (" 0:00:01.50", "ass"),
    ("", "srt"),
])
def test_to_ms_rejects_off_grammar_text(text, fmt):
    with pytest.raises(InvalidTimecodeError) as excinfo:
        to_ms(text, fmt)
    assert excinfo.value.text == text
    assert excinfo.value.format == fmt


def test_unknown_format_is_a_value_error():
    with pytest.raises(ValueError):
        to_ms("00:00:01,000", "sbv")
    with pytest.raises(ValueError):
        from_ms(1000, "sbv")


def test_from_ms_pads_per_format():
    assert from_ms(83456, "srt") == "00:01:23,456"
    assert from_ms(83456, "vtt") == "00:01:23.456"
    assert from_ms(83456, "ass") == "0:01:23.45"
    assert from_ms(36000000, "ass") == "10:00:00.00"


def test_from_ms_clamps_negative_to_zero():
    assert from_ms(-500, "srt") == "00:00:00,000"
    assert from_ms(-1, "ass") == "0:00:00.00"


@pytest.mark.parametrize("ms,fmt", [
    (0, "srt"), (83456, "srt"), (3599999, "vtt"), (83450, "ass"), (3723990, "ass"),
])
def test_round_trip_at_format_grain(ms, fmt):
    assert to_ms(from_ms(ms, fmt), fmt) == ms


def test_ass_truncates_to_centiseconds():
    # 1999ms floors to 1.99s, never rounds up to 2.00s
    assert from_ms(1999, "ass") == "0:00:01.99"
    assert to_ms(from_ms(1999, "ass"), "ass") == 1990


def test_is_valid_timecode():
    assert is_valid_timecode("00:00:01,000", "srt")
    assert not is_valid_timecode("00:00:01.000", "srt")


def test_parse_flexible_time():
    assert parse_flexible_time("1:21.05") == 81050
    assert parse_flexible_time("0:01:21.05") == 81050
    assert parse_flexible_time("01:22") == 82000
    assert parse_flexible_time("00:00:01,2345") == 1234
    assert parse_flexible_time("1:75") is None
    assert parse_flexible_time("abc") is None


def test_display_and_overlap_helpers():
    assert format_display_timestamp(3723456) == "01:02:03.45"
    assert time_ranges_overlap(1000, 5000, 3000, 7000)
    assert not time_ranges_overlap(1000, 3000, 3000, 5000)
