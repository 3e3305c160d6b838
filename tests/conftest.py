# tests/conftest.py
import json

import pytest

from subconv.data import Cue, SubtitleDocument
from subconv.parsers import parse_ass, parse_srt
from subconv.universal import to_universal

SRT_SAMPLE = """1
00:00:01,000 --> 00:00:04,000
Hello <i>world</i>

2
00:00:05,000 --> 00:00:08,500
Second line
with two rows
"""

VTT_SAMPLE = """WEBVTT - Sample

NOTE a comment

STYLE
::cue { color: yellow }

intro
00:00:01.000 --> 00:00:04.000 line:0 align:start
Hello &amp; welcome

00:05.000 --> 00:08.000
<v Bob>Short form</v>
"""

ASS_SAMPLE = r"""[Script Info]
; Script generated by test
Title: Sample
ScriptType: v4.00+
PlayResX: 1920
PlayResY: 1080
Custom Key: kept

[V4+ Styles]
Format: Name, Fontname, Fontsize, PrimaryColour, SecondaryColour, OutlineColour, BackColour, Bold, Italic, Underline, StrikeOut, ScaleX, ScaleY, Spacing, Angle, BorderStyle, Outline, Shadow, Alignment, MarginL, MarginR, MarginV, Encoding
Style: Default,Arial,48,&H00FFFFFF,&H000000FF,&H00000000,&H80000000,0,0,0,0,100,100,0,0,1,2,2,2,10,10,10,1
Style: Sign,Verdana,36,&H0000FFFF,&H000000FF,&H00000000,&H00000000,-1,0,0,0,100,100,0,0,1,2,0,8,20,20,30,1

[Events]
Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text
Comment: 0,0:00:00.00,0:00:01.00,Default,,0,0,0,,Timing note
Dialogue: 0,0:00:01.00,0:00:04.00,Default,Alice,0,0,0,,{\i1}Hello{\i0}, world
Dialogue: 1,0:00:05.00,0:00:08.50,Sign,,0,0,0,,{\an8\pos(960,100)\c&H00FFFF&}Sign text\NSecond line
Dialogue: 0,0:00:09.00,bad,Default,,0,0,0,,Dropped line
"""

CSV_SAMPLE = """Start,End,Character,Text,,Confidence,Absolute Start,Absolute End
[0:01:21.05],[0:01:21.81],Speaker,"text, with comma",,1.14,[1:34:00.32],[1:34:01.21]
not a data row
[0:01:22.00],[0:01:23.50],Narrator,Next line,,0.9,[1:34:01.50],[1:34:03.00]
"""

LEGACY_JSON_SAMPLE = json.dumps([
    {"type": "meta", "title": "Legacy export"},
    {"type": "caption", "index": 1, "start": 1000, "end": 2000, "text": "Hi", "content": "<b>Hi</b>"},
])


@pytest.fixture
def srt_text():
    return SRT_SAMPLE


@pytest.fixture
def vtt_text():
    return VTT_SAMPLE


@pytest.fixture
def ass_text():
    return ASS_SAMPLE


@pytest.fixture
def csv_text():
    return CSV_SAMPLE


@pytest.fixture
def legacy_json_text():
    return LEGACY_JSON_SAMPLE


@pytest.fixture
def srt_doc():
    return to_universal(parse_srt(SRT_SAMPLE), "srt")


@pytest.fixture
def ass_doc():
    return parse_ass(ASS_SAMPLE)


@pytest.fixture
def overlap_doc():
    """Two cues where the first runs 2s into the second."""
    return SubtitleDocument(
        source_format="srt",
        cues=[
            Cue(start_ms=1000, end_ms=5000, text="First"),
            Cue(start_ms=3000, end_ms=7000, text="Second"),
        ],
    )
