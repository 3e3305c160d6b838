# tests/test_render.py
import json

from subconv.data import Cue, SubtitleDocument
from subconv.models.enums import RenderTarget
from subconv.overrides import ass_color_to_css, css_color_to_ass, parse_overrides
from subconv.render import HtmlRenderOptions, JsonRenderOptions, render_html, render_json


# =============================================================================
# HTML
# =============================================================================


def test_render_html_container_and_cues(srt_doc):
    output = render_html(srt_doc)
    lines = output.splitlines()

    assert lines[0] == '<div class="subtitles" data-format="srt">'
    assert lines[-1] == "</div>"
    assert 'data-index="1" data-start="1000" data-end="4000">Hello world</div>' in lines[1]
    assert "Second line<br>with two rows" in lines[2]


def test_render_html_escapes_text():
    doc = SubtitleDocument(cues=[Cue(0, 1000, "a < b & \"c\"")])
    output = render_html(doc)
    assert "a &lt; b &amp; &quot;c&quot;" in output


def test_render_html_rich_content_when_asked(srt_doc):
    output = render_html(srt_doc, HtmlRenderOptions(use_plain_text=False))
    assert "Hello &lt;i&gt;world&lt;/i&gt;" in output


def test_render_html_ass_overrides_become_attributes(ass_doc):
    output = render_html(ass_doc, HtmlRenderOptions(process_ass_overrides=True, cue_class="cue"))
    sign = output.splitlines()[2]

    assert 'data-title="Sample"' in output.splitlines()[0]
    assert 'class="cue"' in sign
    assert 'data-style="Sign"' in sign
    assert 'data-pos-x="960"' in sign
    assert 'data-pos-y="100"' in sign
    assert 'data-alignment="8"' in sign
    assert 'data-override-color="&amp;H00FFFF"' in sign
    assert 'data-override-css-color="#FFFF00"' in sign
    assert sign.endswith(">Sign text<br>Second line</div>")

    first = output.splitlines()[1]
    assert 'data-italic="true"' in first
    assert ">Hello, world</div>" in first


def test_render_html_without_metadata(ass_doc):
    first_line = render_html(ass_doc, HtmlRenderOptions(include_metadata=False)).splitlines()[0]
    assert "data-title" not in first_line


# =============================================================================
# JSON
# =============================================================================


def test_render_json_compact(ass_doc):
    data = json.loads(render_json(ass_doc))

    assert set(data) == {"v", "f", "s", "c"}
    assert data["f"] == "ass"
    assert data["c"][0] == {"i": 1, "s": 1000, "e": 4000, "t": "Hello, world", "st": "Default"}
    assert data["s"]["Default"] == ass_doc.styles["Default"].to_dict()


def test_render_json_browser_styles(ass_doc):
    data = json.loads(render_json(ass_doc, JsonRenderOptions(target=RenderTarget.BROWSER)))
    sign = data["s"]["Sign"]

    assert sign["fontFamily"] == "Verdana"
    assert sign["fontSize"] == "36px"
    assert sign["color"] == "#FFFF00"
    assert sign["fontWeight"] == "bold"
    assert sign["fontStyle"] == "normal"
    assert sign["textDecoration"] == "none"
    assert sign["textAlign"] == "center"
    assert sign["verticalAlign"] == "top"
    assert sign["marginTop"] == "30px"


def test_render_json_embedded_styles(ass_doc):
    data = json.loads(render_json(ass_doc, JsonRenderOptions(target="embedded")))
    default = data["s"]["Default"]

    assert default["font_name"] == "Arial"
    assert default["color"] == "#FFFFFF"
    assert default["back_color"] == "#000000"
    assert default["margin_v"] == 10


def test_render_json_verbose_with_metadata(ass_doc):
    options = JsonRenderOptions(compact=False, include_metadata=True)
    data = json.loads(render_json(ass_doc, options))

    assert data["format"] == "ass"
    assert data["metadata"]["title"] == "Sample"
    assert data["cues"][1]["layout"]["alignment"] == 8
    assert data["cues"][1]["content"].startswith("{\\an8")


# =============================================================================
# Colours and overrides
# =============================================================================


def test_colour_conversion():
    assert css_color_to_ass("#FF8000") == "&H000080FF"
    assert css_color_to_ass("#f80", alpha=0x40) == "&H400088FF"
    assert ass_color_to_css("&H000080FF") == "#FF8000"
    assert ass_color_to_css("&H0000FF&") == "#FF0000"
    assert ass_color_to_css("nonsense") is None


def test_parse_overrides_first_occurrence_wins():
    info = parse_overrides("{\\pos(10,20)\\fad(200,300)\\b1}One{\\pos(30,40)\\b0\\t(0,500,\\fs40)}Two")
    assert info.position == (10.0, 20.0)
    assert info.bold is True
    assert info.fade == (200, 300)
    assert info.transforms == ["0,500,\\fs40"]
    assert parse_overrides("plain").is_empty
