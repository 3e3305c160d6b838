# subconv/writers/json_writer.py
"""JSON writers: canonical document and the legacy flat caption array."""
from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..data import SubtitleDocument


def _dumps(data: Any, pretty: bool) -> str:
    return json.dumps(data, indent=2 if pretty else None, ensure_ascii=False)


def to_json(doc: SubtitleDocument, pretty: bool = True) -> str:
    """Serialize the canonical document."""
    return _dumps(doc.to_dict(), pretty)


def to_legacy_entries(doc: SubtitleDocument, plain_text_only: bool = False) -> list[dict[str, Any]]:
    entries: list[dict[str, Any]] = list(doc.metadata.format_specific.get('json', {}).get('meta', []))
    for cue in doc.cues:
        entries.append({
            'type': 'caption',
            'index': cue.index,
            'start': cue.start_ms,
            'end': cue.end_ms,
            'duration': cue.duration_ms,
            'content': cue.text if plain_text_only else cue.content,
            'text': cue.text,
        })
    return entries


def to_legacy_json(doc: SubtitleDocument, pretty: bool = True, plain_text_only: bool = False) -> str:
    """Serialize as the legacy flat array of caption objects."""
    return _dumps(to_legacy_entries(doc, plain_text_only), pretty)
