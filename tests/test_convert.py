# tests/test_convert.py
import json

import pytest

from subconv.convert import SUPPORTED_FORMATS, convert, parse_to_universal, validate
from subconv.data import Cue, Metadata, SubtitleDocument
from subconv.errors import InvalidFormatError, IssueType
from subconv.models.settings import ConversionOptions
from subconv.parsers import parse_srt
from subconv.universal import (
    clone_universal,
    create_default_style,
    from_universal,
    get_stats,
    merge_metadata,
    normalize,
    to_universal,
)


def test_supported_formats():
    assert set(SUPPORTED_FORMATS) == {"srt", "vtt", "ass", "json", "csv"}


def test_parse_to_universal_detects(srt_text, vtt_text, ass_text, csv_text):
    assert parse_to_universal(srt_text).source_format == "srt"
    assert parse_to_universal(vtt_text).source_format == "vtt"
    assert parse_to_universal(ass_text).source_format == "ass"
    assert parse_to_universal(csv_text).source_format == "csv"


def test_srt_to_vtt(srt_text):
    output = convert(srt_text, "srt", "vtt")
    assert output.startswith("WEBVTT")
    assert "00:00:01.000 --> 00:00:04.000" in output
    assert "Hello <i>world</i>" in output


def test_srt_through_ass_and_back(srt_text):
    ass = convert(srt_text, "auto", "ass")
    back = parse_srt(convert(ass, "auto", "srt"))
    original = parse_srt(srt_text)

    assert [(c.start_ms, c.end_ms, c.text, c.content) for c in back] == [
        (c.start_ms, c.end_ms, c.text, c.content) for c in original
    ]


def test_ass_to_json_keeps_styles(ass_text):
    data = json.loads(convert(ass_text, to_format="json"))
    assert data["sourceFormat"] == "ass"
    assert [s["name"] for s in data["styles"]] == ["Default", "Sign"]
    assert len(data["cues"]) == 2


def test_ssa_is_an_alias_for_ass(ass_text):
    output = convert(ass_text, "ssa", "srt", ConversionOptions(plain_text_only=True))
    assert "Hello, world" in output


def test_unsupported_and_undetectable_formats(srt_text):
    with pytest.raises(InvalidFormatError):
        convert(srt_text, "srt", "txt")
    with pytest.raises(InvalidFormatError):
        convert("hello there", "auto", "srt")


def test_validate_never_raises(srt_text):
    assert validate(srt_text).is_valid

    result = validate("hello there")
    assert result.errors[0].type == IssueType.INVALID_FORMAT

    result = validate(srt_text, "sbv")
    assert not result.is_valid


def test_normalize_keeps_document(ass_doc):
    assert normalize(ass_doc).to_dict() == ass_doc.to_dict()


def test_to_universal_reindexes():
    doc = to_universal([Cue(0, 1000, "a", index=7), Cue(1000, 2000, "b", index=3)], "srt")
    assert [c.index for c in doc.cues] == [1, 2]


def test_copies_are_detached(srt_doc):
    cues = from_universal(srt_doc)
    cues[0].text = "changed"
    clone = clone_universal(srt_doc)
    clone.cues[1].text = "changed too"

    assert srt_doc.cues[0].text == "Hello world"
    assert srt_doc.cues[1].text == "Second line\nwith two rows"


def test_create_default_style():
    style = create_default_style()
    assert style.name == "Default"
    assert style.alignment == 2


# =============================================================================
# Stats
# =============================================================================


def test_get_stats(srt_doc):
    stats = get_stats(srt_doc)

    assert stats.total_cues == 2
    assert stats.total_duration == 6500
    assert stats.average_duration == 3250.0
    assert stats.min_duration == 3000
    assert stats.max_duration == 3500
    assert stats.first_cue_start == 1000
    assert stats.last_cue_end == 8500
    assert stats.total_characters == len("Hello world") + len("Second line\nwith two rows")
    assert stats.to_dict()["totalCues"] == 2
    assert stats.to_dict()["averageCharactersPerCue"] == stats.average_characters_per_cue


def test_get_stats_bounds_ignore_cue_order():
    doc = SubtitleDocument(cues=[Cue(5000, 6000, "late"), Cue(1000, 9000, "long")])
    stats = get_stats(doc)
    assert stats.first_cue_start == 1000
    assert stats.last_cue_end == 9000


def test_get_stats_empty_document():
    stats = get_stats(SubtitleDocument())
    assert stats.total_cues == 0
    assert stats.average_duration == 0.0


# =============================================================================
# Metadata merging
# =============================================================================


def test_merge_metadata_later_scalars_win():
    merged = merge_metadata(Metadata(title="A", language="en"), {"title": "B"}, None)
    assert merged.title == "B"
    assert merged.language == "en"


def test_merge_metadata_deep_merges_format_bags():
    merged = merge_metadata(
        {"formatSpecific": {"ass": {"playResX": 1920, "scriptType": "v4.00+"}}},
        Metadata(format_specific={"ass": {"playResY": 1080, "scriptType": "v4.00"}, "vtt": {"header": "x"}}),
    )
    assert merged.format_specific["ass"] == {"playResX": 1920, "playResY": 1080, "scriptType": "v4.00"}
    assert merged.format_specific["vtt"] == {"header": "x"}


def test_merge_metadata_does_not_alias_inputs():
    source = Metadata(format_specific={"ass": {"comments": ["; one"]}})
    merged = merge_metadata(source)
    merged.format_specific["ass"]["comments"].append("; two")
    assert source.format_specific["ass"]["comments"] == ["; one"]
