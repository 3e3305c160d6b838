# subconv/editor/search.py
"""Cue search with time, style and layer filters."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from ..models.settings import SearchOptions

if TYPE_CHECKING:
    from ..data import Cue, SubtitleDocument


def compile_query(query: str, options: SearchOptions) -> re.Pattern:
    """
    Literal or regex pattern for ``query``.

    Raises:
        re.error: invalid regular expression in regex mode
    """
    flags = 0 if options.case_sensitive else re.IGNORECASE
    return re.compile(query if options.regex else re.escape(query), flags)


def _passes_filters(cue: Cue, options: SearchOptions) -> bool:
    if options.time_range is not None:
        start, end = options.time_range
        if cue.start_ms < start or cue.end_ms > end:
            return False

    if options.styles:
        if cue.style is None or cue.style not in options.styles:
            return False

    if options.layers:
        ass = cue.format_specific.ass
        if ass is None or ass.layer not in options.layers:
            return False

    return True


def search(
    doc: SubtitleDocument, query: str, options: SearchOptions | None = None
) -> list[int]:
    """Positions (0-based, document order) of cues matching ``query``."""
    options = options or SearchOptions()
    pattern = compile_query(query, options)

    matches = []
    for i, cue in enumerate(doc.cues):
        if not _passes_filters(cue, options):
            continue
        haystack = f"{cue.text} {cue.content}" if options.include_content else cue.text
        if pattern.search(haystack):
            matches.append(i)
    return matches
