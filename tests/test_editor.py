# tests/test_editor.py
import json

import pytest

from subconv.data import Cue, Style
from subconv.editor import SubtitleEditor, validate_document
from subconv.errors import IssueType
from subconv.models.enums import ChangeType
from subconv.models.settings import EditorSettings, SearchOptions, ValidationOptions


@pytest.fixture
def editor(srt_doc):
    return SubtitleEditor(srt_doc)


@pytest.fixture
def ass_editor(ass_doc):
    return SubtitleEditor(ass_doc)


# =============================================================================
# Validation
# =============================================================================


def test_adjacent_overlap_is_flagged_once(overlap_doc):
    result = validate_document(overlap_doc)
    overlaps = [e for e in result.errors if e.type == IssueType.OVERLAPPING_CUES]
    assert len(overlaps) == 1
    assert overlaps[0].cue_index == 0


def test_non_overlapping_cues_are_clean(srt_doc):
    result = validate_document(srt_doc)
    assert not [e for e in result.errors if e.type == IssueType.OVERLAPPING_CUES]


def test_validation_categories_toggle(overlap_doc):
    options = ValidationOptions(check_overlaps=False, check_gaps=True, max_gap_ms=100)
    overlap_doc.cues[1].start_ms = 6000
    overlap_doc.cues[1].end_ms = 7000
    result = validate_document(overlap_doc, options)
    assert result.is_valid
    assert [w.type for w in result.warnings] == [IssueType.GAP_BETWEEN_CUES]


def test_editor_validate_uses_settings(overlap_doc):
    editor = SubtitleEditor(overlap_doc)
    assert not editor.validate().is_valid
    assert editor.validate({"check_overlaps": False}).is_valid


# =============================================================================
# Validated updates
# =============================================================================


def test_failed_update_rolls_back_without_side_effects(editor):
    events = []
    editor.on_change(events.append)

    assert not editor.update_fragment(0, {"end_ms": 500})
    assert not editor.update_fragment(0, {"text": "   "})
    assert not editor.update_fragment(0, {"colour": "red"})
    assert not editor.update_fragment_timing(0, 5000, 1000)
    assert not editor.update_fragment(9, {"text": "nowhere"})

    cue = editor.get_cue(0)
    assert (cue.start_ms, cue.end_ms, cue.text) == (1000, 4000, "Hello world")
    assert events == []
    assert not editor.can_undo


def test_update_fragment_without_validation(editor):
    assert editor.update_fragment(0, {"text": ""}, validate=False)
    assert editor.get_cue(0).text == ""


def test_update_fragment_timing(editor):
    assert editor.update_fragment_timing(0, 1500, 3000)
    cue = editor.get_cue(0)
    assert (cue.start_ms, cue.end_ms, cue.duration_ms) == (1500, 3000, 1500)


def test_update_content_rederives_text(editor):
    assert editor.update_fragment(0, {"content": "<b>Bold</b> move"})
    assert editor.get_cue(0).text == "Bold move"


def test_srt_content_backslashes_are_literal(editor):
    assert editor.update_fragment(0, {"content": "C:\\new"})
    assert editor.get_cue(0).text == "C:\\new"

    assert editor.update_fragment_text(1, "Press \\h")
    assert editor.get_cue(1).content == "Press \\h"


def test_update_text_keeps_ass_overrides(ass_editor):
    assert ass_editor.update_fragment_text(0, "Goodbye\nfor now")
    cue = ass_editor.get_cue(0)
    assert cue.content == "{\\i1}Goodbye\\Nfor now"
    assert cue.text == "Goodbye\nfor now"

    assert ass_editor.update_fragment_text(1, "Plain", preserve_overrides=False)
    assert ass_editor.get_cue(1).content == "Plain"


# =============================================================================
# Structure
# =============================================================================


def test_add_insert_delete(editor):
    position = editor.add_cue(Cue(9000, 10000, "Third"))
    assert position == 2
    assert editor.insert_cue(0, Cue(0, 500, "Zero"))
    assert [c.index for c in editor.get_cues()] == [1, 2, 3, 4]
    assert editor.get_cue(0).text == "Zero"

    assert editor.delete_cue(0)
    assert not editor.delete_cue(10)
    assert not editor.insert_cue(10, Cue(0, 1, "x"))
    assert [c.text for c in editor.get_cues()] == ["Hello world", "Second line\nwith two rows", "Third"]


def test_split_then_merge_restores_cue(editor):
    original = editor.get_cue(1)

    assert editor.split_cue(1, 6000)
    cues = editor.get_cues()
    assert len(cues) == 3
    assert (cues[1].start_ms, cues[1].end_ms, cues[1].text) == (5000, 6000, "Second line")
    assert (cues[2].start_ms, cues[2].end_ms, cues[2].text) == (6000, 8500, "with two rows")
    assert [c.index for c in cues] == [1, 2, 3]

    assert editor.merge_cues(1, 2)
    merged = editor.get_cue(1)
    assert (merged.start_ms, merged.end_ms) == (original.start_ms, original.end_ms)
    assert merged.text == original.text
    assert merged.content == original.content


def test_split_rejects_boundaries(editor):
    assert not editor.split_cue(0, 1000)
    assert not editor.split_cue(0, 4000)
    assert not editor.split_cue(5, 2000)
    assert len(editor.get_cues()) == 2


def test_split_single_word_copies_text(editor):
    editor.add_cue(Cue(10000, 12000, "Word"))
    assert editor.split_cue(2, 11000)
    assert [c.text for c in editor.get_cues()[2:]] == ["Word", "Word"]


def test_split_ass_cue_inherits_format_data(ass_editor):
    assert ass_editor.split_cue(1, 6000)
    second = ass_editor.get_cue(2)

    assert second.style == "Sign"
    assert second.layer == 1
    assert second.layout == {"position": {"x": 960, "y": 100}, "alignment": 8}
    assert second.content == "{\\an8\\pos(960,100)\\c&H00FFFF&}Second line"
    assert ass_editor.get_cue(1).content == "{\\an8\\pos(960,100)\\c&H00FFFF&}Sign text"

    assert ass_editor.merge_cues(1, 2)
    assert ass_editor.get_cue(1).text == "Sign text\nSecond line"


def test_merge_rejects_bad_ranges(editor):
    assert not editor.merge_cues(1, 1)
    assert not editor.merge_cues(0, 5)
    assert not editor.merge_cues(-1, 1)


# =============================================================================
# Time operations
# =============================================================================


def test_shift_time_clamps_at_zero(editor):
    assert editor.shift_time(-2000) == 2
    cues = editor.get_cues()
    assert (cues[0].start_ms, cues[0].end_ms) == (0, 2000)
    assert (cues[1].start_ms, cues[1].end_ms) == (3000, 6500)


def test_shift_time_range(editor):
    editor.shift_time(1000, start_index=1)
    assert editor.get_cue(0).start_ms == 1000
    assert editor.get_cue(1).start_ms == 6000


def test_scale_time(editor):
    editor.scale_time(2)
    assert (editor.get_cue(1).start_ms, editor.get_cue(1).end_ms) == (10000, 17000)
    with pytest.raises(ValueError):
        editor.scale_time(0)


def test_fix_overlaps(overlap_doc):
    editor = SubtitleEditor(overlap_doc)
    assert editor.fix_overlaps(gap_ms=100) == 1
    assert editor.get_cue(0).end_ms == 2900
    assert editor.fix_overlaps() == 0


# =============================================================================
# Search
# =============================================================================


def test_search(editor):
    assert editor.search("HELLO") == [0]
    assert editor.search("HELLO", SearchOptions(case_sensitive=True)) == []
    assert editor.search(r"^Second", SearchOptions(regex=True)) == [1]
    assert editor.search("e", SearchOptions(time_range=(0, 4500))) == [0]
    assert editor.search("<i>") == []
    assert editor.search("<i>", SearchOptions(include_content=True)) == [0]


def test_search_style_and_layer_filters(ass_editor):
    assert ass_editor.search("", SearchOptions(styles=["Sign"])) == [1]
    assert ass_editor.search("", SearchOptions(layers=[0])) == [0]


def test_find_and_replace_keeps_markup(editor, ass_editor):
    assert editor.find_and_replace("world", "there") == 1
    cue = editor.get_cue(0)
    assert cue.text == "Hello there"
    assert cue.content == "Hello <i>there</i>"

    assert ass_editor.find_and_replace("hello", "Bye") == 1
    assert ass_editor.get_cue(0).content == "{\\i1}Bye{\\i0}, world"

    # Markup is not searchable text
    assert ass_editor.find_and_replace("i1", "x") == 0


def test_literal_replacement_is_not_expanded(editor):
    editor.find_and_replace("world", r"\1 path")
    assert editor.get_cue(0).text == r"Hello \1 path"


# =============================================================================
# Undo and redo
# =============================================================================


def test_undo_restores_each_edit(editor):
    for n in range(3):
        assert editor.update_fragment_text(0, f"edit {n}")

    assert editor.undo()
    assert editor.get_cue(0).text == "edit 1"
    assert editor.can_redo
    assert editor.redo()
    assert editor.get_cue(0).text == "edit 2"
    assert not editor.can_redo

    for _ in range(3):
        assert editor.undo()
    assert editor.get_cue(0).text == "Hello world"
    assert not editor.can_undo
    assert not editor.undo()


def test_new_edit_discards_redo_tail(editor):
    editor.update_fragment_text(0, "one")
    editor.undo()
    editor.update_fragment_text(0, "two")
    assert not editor.can_redo
    assert not editor.redo()


def test_history_is_bounded(srt_doc):
    editor = SubtitleEditor(srt_doc, settings=EditorSettings(max_history=3))
    for n in range(5):
        editor.update_fragment_text(0, f"edit {n}")

    undone = 0
    while editor.undo():
        undone += 1
    assert undone == 2
    assert editor.get_cue(0).text == "edit 2"


def test_clear_history(editor):
    editor.update_fragment_text(0, "changed")
    editor.clear_history()
    assert not editor.can_undo
    assert editor.get_cue(0).text == "changed"


def test_clear_history_is_refused_inside_a_batch(editor):
    def operations():
        editor.update_fragment_text(0, "first")
        assert not editor.clear_history()
        raise RuntimeError("abort")

    with pytest.raises(RuntimeError):
        editor.batch(operations)

    assert editor.update_fragment_text(1, "later")
    assert editor.undo()
    assert editor.get_cue(0).text == "Hello world"
    assert editor.get_cue(1).text == "Second line\nwith two rows"
    assert not editor.can_undo


# =============================================================================
# Batches
# =============================================================================


def test_failed_batch_restores_document(editor):
    before = editor.get_universal().to_dict()

    def operations():
        editor.update_fragment_text(0, "first")
        editor.delete_cue(1)
        raise RuntimeError("abort")

    with pytest.raises(RuntimeError):
        editor.batch(operations)

    assert editor.get_universal().to_dict() == before
    assert not editor.can_undo


class _Abort(BaseException):
    pass


def test_interrupted_batch_leaves_editor_usable(editor):
    before = editor.get_universal().to_dict()

    with pytest.raises(_Abort):
        with editor.transaction():
            editor.update_fragment_text(0, "first")
            raise _Abort()

    assert editor.get_universal().to_dict() == before
    # Not stuck in batch mode: the next edit records history
    assert editor.update_fragment_text(0, "after")
    assert editor.can_undo
    assert editor.undo()
    assert editor.get_cue(0).text == "Hello world"


def test_batch_is_one_history_entry(editor):
    events = []
    editor.on_change(events.append)

    def operations():
        editor.update_fragment_text(0, "first")
        editor.update_fragment_text(1, "second")
        return "done"

    assert editor.batch(operations) == "done"
    # Inner events fire as they happen, then the batch itself
    assert [e.type for e in events] == [ChangeType.CUE_UPDATED, ChangeType.CUE_UPDATED, ChangeType.BATCH_UPDATE]

    assert editor.undo()
    assert [c.text for c in editor.get_cues()] == ["Hello world", "Second line\nwith two rows"]
    assert not editor.can_undo


def test_nested_transactions(editor):
    with editor.transaction():
        editor.update_fragment_text(0, "outer")
        with pytest.raises(ValueError):
            with editor.transaction():
                editor.update_fragment_text(1, "inner")
                raise ValueError("inner abort")
        assert editor.get_cue(1).text == "Second line\nwith two rows"

    assert editor.get_cue(0).text == "outer"
    assert editor.undo()
    assert not editor.can_undo


# =============================================================================
# Listeners
# =============================================================================


def test_listeners_run_in_order_and_errors_are_contained(editor):
    calls = []

    def broken(event):
        calls.append("broken")
        raise RuntimeError("listener failure")

    editor.on_change(broken)
    editor.on_change(lambda event: calls.append(event.type))

    assert editor.update_fragment_text(0, "still applied")
    assert calls == ["broken", ChangeType.CUE_UPDATED]
    assert editor.get_cue(0).text == "still applied"


def test_unsubscribe(editor):
    events = []
    unsubscribe = editor.on_change(events.append)
    editor.update_fragment_text(0, "one")
    unsubscribe()
    editor.update_fragment_text(0, "two")
    assert len(events) == 1
    assert events[0].data["index"] == 0
    assert not editor.off_change(events.append)


def test_undo_emits_event(editor):
    editor.update_fragment_text(0, "one")
    events = []
    editor.on_change(events.append)
    editor.undo()
    assert events[0].type == ChangeType.BATCH_UPDATE
    assert events[0].data == {"action": "undo"}


# =============================================================================
# Accessors, metadata, styles and export
# =============================================================================


def test_accessors_return_copies(ass_editor):
    cue = ass_editor.get_cue(0)
    cue.text = "mutated"
    ass_editor.get_style("Default").font_size = 99
    ass_editor.get_metadata().title = "mutated"

    assert ass_editor.get_cue(0).text == "Hello, world"
    assert ass_editor.get_style("Default").font_size == 48.0
    assert ass_editor.get_metadata().title == "Sample"


def test_constructing_from_document_copies_it(srt_doc):
    editor = SubtitleEditor(srt_doc)
    editor.update_fragment_text(0, "changed")
    assert srt_doc.cues[0].text == "Hello world"


def test_constructing_from_text(srt_text):
    editor = SubtitleEditor(srt_text)
    assert editor.source_format == "srt"
    assert editor.get_total_duration() == 8500


def test_fragment_context(editor):
    context = editor.get_fragment_context(0)
    assert context.previous is None
    assert context.next.text == "Second line\nwith two rows"
    assert context.time_from_start == 1000
    assert context.time_to_end == 4500

    last = editor.get_fragment_context(1)
    assert last.previous.text == "Hello world"
    assert last.next is None
    assert last.time_to_end == 0
    assert editor.get_fragment_context(2) is None


def test_fragment_queries(ass_editor):
    assert [i for i, _ in ass_editor.get_fragments_in_range(0, 4500)] == [0]
    assert [i for i, _ in ass_editor.get_fragments_by_speaker("Alice")] == [0]
    context = ass_editor.get_fragment_context(1)
    assert context.style.name == "Sign"
    assert context.to_dict()["style"]["fontName"] == "Verdana"


def test_update_metadata(ass_editor):
    events = []
    ass_editor.on_change(events.append)
    ass_editor.update_metadata(title="Renamed", format_specific={"ass": {"playResY": 720}})

    metadata = ass_editor.get_metadata()
    assert metadata.title == "Renamed"
    assert metadata.format_specific["ass"]["playResY"] == 720
    assert metadata.format_specific["ass"]["playResX"] == 1920
    assert events[0].type == ChangeType.METADATA_UPDATED

    with pytest.raises(ValueError):
        ass_editor.update_metadata(subtitle="nope")


def test_style_editing(ass_editor):
    assert ass_editor.add_style(Style(name="Note", italic=True))
    assert not ass_editor.add_style(Style(name="Note"))

    assert ass_editor.update_style("Default", {"fontSize": 30.0, "bold": True})
    default = ass_editor.get_style("Default")
    assert (default.font_size, default.bold) == (30.0, True)
    assert not ass_editor.update_style("Default", {"fontColour": "red"})
    assert not ass_editor.update_style("Missing", {"bold": True})

    assert ass_editor.delete_style("Sign")
    assert not ass_editor.delete_style("Sign")
    # Cues keep their reference to the deleted style
    assert ass_editor.get_cue(1).style == "Sign"
    assert [s.name for s in ass_editor.get_styles()] == ["Default", "Note"]

    assert ass_editor.undo()
    assert ass_editor.get_style("Sign") is not None


def test_update_style_coerces_values(ass_editor):
    assert ass_editor.update_style("Default", {"fontSize": "32", "marginV": 12.0})
    default = ass_editor.get_style("Default")
    assert default.font_size == 32.0
    assert default.margin_v == 12
    assert isinstance(default.margin_v, int)

    assert not ass_editor.update_style("Default", {"fontSize": "big"})
    assert ass_editor.get_style("Default").font_size == 32.0
    assert "Style: Default,Arial,32," in ass_editor.export("ass")


def test_export_and_to_json(ass_editor):
    assert "-->" in ass_editor.export("srt")
    assert ass_editor.export("ass").startswith("[Script Info]")
    data = json.loads(ass_editor.to_json(pretty=False))
    assert data["sourceFormat"] == "ass"

    stats = ass_editor.get_stats()
    assert stats.style_count == 2
