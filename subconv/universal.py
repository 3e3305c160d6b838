# subconv/universal.py
"""
Helpers around the universal document: wrapping cue lists, canonical JSON
round trips, cloning, statistics and metadata merging.
"""

from __future__ import annotations

import copy
from collections import OrderedDict
from dataclasses import asdict, dataclass
from typing import Any, Iterable

import numpy as np

from .data import Cue, Metadata, Style, SubtitleDocument
from .parsers.json_parser import parse_json
from .writers.json_writer import to_json, to_legacy_entries


def to_universal(
    cues: Iterable[Cue],
    source_format: str,
    metadata: Metadata | None = None,
    styles: Iterable[Style] | None = None,
) -> SubtitleDocument:
    """Wrap a parsed cue list into a document. Indices are recomputed."""
    return SubtitleDocument(
        source_format=source_format,
        metadata=metadata or Metadata(),
        styles=OrderedDict((s.name, s) for s in styles or []),
        cues=list(cues),
    )


def from_universal(doc: SubtitleDocument) -> list[Cue]:
    """Detached copies of the document's cues."""
    return [cue.clone() for cue in doc.cues]


def create_default_style(name: str = "Default") -> Style:
    return Style(name=name)


def clone_universal(doc: SubtitleDocument) -> SubtitleDocument:
    return doc.clone()


# =============================================================================
# Canonical JSON
# =============================================================================


def universal_to_json(doc: SubtitleDocument, pretty: bool = True) -> str:
    return to_json(doc, pretty)


def json_to_universal(content: str) -> SubtitleDocument:
    """
    Parse canonical (or legacy) JSON into a document.

    Raises:
        InvalidFormatError: malformed JSON or unknown shape
    """
    return parse_json(content)


def universal_to_legacy_json(doc: SubtitleDocument) -> list[dict[str, Any]]:
    return to_legacy_entries(doc)


def normalize(doc: SubtitleDocument) -> SubtitleDocument:
    """
    Serialize and re-parse through canonical JSON.

    Guarantees every optional field is materialized and typed the way the
    schema says, whichever adapter produced ``doc``.

    Raises:
        InvalidFormatError: the document does not satisfy the canonical schema
    """
    return json_to_universal(universal_to_json(doc, pretty=False))


# =============================================================================
# Statistics
# =============================================================================


@dataclass
class SubtitleStats:
    total_cues: int = 0
    total_duration: int = 0
    average_duration: float = 0.0
    min_duration: int = 0
    max_duration: int = 0
    first_cue_start: int = 0
    last_cue_end: int = 0
    total_characters: int = 0
    average_characters_per_cue: float = 0.0
    style_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        result = {}
        for key, value in asdict(self).items():
            head, *rest = key.split("_")
            result[head + "".join(part.title() for part in rest)] = value
        return result


def get_stats(doc: SubtitleDocument) -> SubtitleStats:
    """
    O(n) aggregates over the cue list.

    Bounds are the earliest start and latest end, since cues are not
    necessarily in time order.
    """
    count = len(doc.cues)
    if count == 0:
        return SubtitleStats(style_count=len(doc.styles))

    starts = np.fromiter((c.start_ms for c in doc.cues), dtype=np.int64, count=count)
    ends = np.fromiter((c.end_ms for c in doc.cues), dtype=np.int64, count=count)
    chars = np.fromiter((len(c.text) for c in doc.cues), dtype=np.int64, count=count)
    durations = ends - starts

    return SubtitleStats(
        total_cues=count,
        total_duration=int(durations.sum()),
        average_duration=float(durations.mean()),
        min_duration=int(durations.min()),
        max_duration=int(durations.max()),
        first_cue_start=int(starts.min()),
        last_cue_end=int(ends.max()),
        total_characters=int(chars.sum()),
        average_characters_per_cue=float(chars.mean()),
        style_count=len(doc.styles),
    )


# =============================================================================
# Metadata merging
# =============================================================================


def merge_metadata(*partials: Metadata | dict[str, Any] | None) -> Metadata:
    """
    Merge metadata partials left to right.

    Later non-empty scalars win. ``format_specific`` bags are merged per
    format key, and within one format key field by field, so sibling
    fields set by an earlier partial survive.
    """
    merged = Metadata()

    for partial in partials:
        if partial is None:
            continue
        if isinstance(partial, dict):
            partial = Metadata.from_dict(partial)

        for name in Metadata.SCALARS:
            value = getattr(partial, name)
            if value:
                setattr(merged, name, value)

        for fmt, bag in partial.format_specific.items():
            target = merged.format_specific.setdefault(fmt, {})
            if isinstance(bag, dict):
                target.update(copy.deepcopy(bag))
            else:
                merged.format_specific[fmt] = copy.deepcopy(bag)

    return merged
