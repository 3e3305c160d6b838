# subconv/editor/validation.py
"""
Semantic validation of cues and whole documents.

Per cue: ordering, duration bounds, text length, empty text, line count.
Per document: every cue, plus adjacent-pair overlaps and gaps.
Each category is switched on or off through ValidationOptions.

Cue positions in issues are 0-based list positions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..errors import IssueType, ValidationResult
from ..models.settings import ValidationOptions

if TYPE_CHECKING:
    from ..data import Cue, SubtitleDocument


def validate_cue(
    cue: Cue,
    options: ValidationOptions | None = None,
    position: int | None = None,
) -> ValidationResult:
    options = options or ValidationOptions()
    result = ValidationResult()
    duration = cue.duration_ms

    if options.check_ordering and cue.start_ms >= cue.end_ms:
        result.error(
            IssueType.INVALID_TIMECODE,
            "Start time must be before end time",
            cue_index=position,
        )

    if options.check_durations:
        if duration < options.min_duration_ms:
            result.warn(
                IssueType.SHORT_DURATION,
                f"Duration ({duration}ms) is less than minimum ({options.min_duration_ms}ms)",
                cue_index=position,
            )
        if duration > options.max_duration_ms:
            result.warn(
                IssueType.LONG_DURATION,
                f"Duration ({duration}ms) exceeds maximum ({options.max_duration_ms}ms)",
                cue_index=position,
            )

    if options.check_text_length and len(cue.text) > options.max_text_length:
        result.warn(
            IssueType.EXCESSIVE_LINES,
            f"Text length ({len(cue.text)}) exceeds maximum ({options.max_text_length})",
            cue_index=position,
        )

    if options.check_line_count:
        lines = len(cue.text.split("\n"))
        if lines > options.max_lines:
            result.warn(
                IssueType.EXCESSIVE_LINES,
                f"Cue has {lines} lines (maximum {options.max_lines})",
                cue_index=position,
            )

    if options.check_empty_text and not cue.text.strip():
        result.error(IssueType.EMPTY_CUE, "Cue has empty text", cue_index=position)

    return result


def validate_document(
    doc: SubtitleDocument, options: ValidationOptions | None = None
) -> ValidationResult:
    options = options or ValidationOptions()
    result = ValidationResult()

    for i, cue in enumerate(doc.cues):
        result.extend(validate_cue(cue, options, position=i))

    for i, (current, following) in enumerate(zip(doc.cues, doc.cues[1:])):
        if options.check_overlaps and current.end_ms > following.start_ms:
            result.error(
                IssueType.OVERLAPPING_CUES,
                f"Cue {i + 1} overlaps with cue {i + 2}",
                cue_index=i,
            )
        if options.check_gaps:
            gap = following.start_ms - current.end_ms
            if gap > options.max_gap_ms:
                result.warn(
                    IssueType.GAP_BETWEEN_CUES,
                    f"Gap of {gap}ms between cue {i + 1} and cue {i + 2}",
                    cue_index=i,
                )

    return result
