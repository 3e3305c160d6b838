# tests/test_detect.py
import json

import pytest

from subconv.detect import (
    FormatDetector,
    detect_format,
    detect_format_simple,
    detect_with_threshold,
    score_csv,
    score_vtt,
)


def test_minimal_vtt_is_detected_with_high_confidence():
    result = detect_format("WEBVTT\n\n00:00:01.000 --> 00:00:02.000\nHi")
    assert result.format == "vtt"
    assert result.confidence >= 0.8


def test_bare_caption_array_is_json():
    text = json.dumps([{"start": 0, "end": 1000, "text": "Hi"}])
    assert detect_format_simple(text) == "json"


def test_sectioned_ass_is_detected(ass_text):
    result = detect_format(ass_text)
    assert result.format == "ass"
    assert result.confidence >= 0.8


def test_srt_csv_and_legacy_json(srt_text, csv_text, legacy_json_text):
    assert detect_format_simple(srt_text) == "srt"
    assert detect_format_simple(csv_text) == "csv"
    assert detect_format_simple(legacy_json_text) == "json"


def test_canonical_document_is_json(srt_doc):
    from subconv.writers import to_json
    assert detect_format_simple(to_json(srt_doc)) == "json"


def test_unrecognised_and_empty_text():
    assert detect_format_simple("just some prose") is None
    result = detect_format("   \n")
    assert result.format is None
    assert result.confidence == 0


def test_vtt_scorer_requires_header():
    result = score_vtt("00:00:01.000 --> 00:00:02.000\nHi")
    assert result.confidence == 0
    assert result.format is None


def test_threshold(csv_text):
    # Two data rows out of four non-blank lines
    assert score_csv(csv_text).confidence == pytest.approx(0.75)
    assert detect_with_threshold(csv_text) is None
    assert detect_with_threshold(csv_text, 0.7) == "csv"


def test_custom_battery_only_runs_its_scorers(srt_text):
    detector = FormatDetector([score_csv])
    assert detector.detect_simple(srt_text) is None


def test_detector_needs_scorers():
    with pytest.raises(ValueError):
        FormatDetector([])
