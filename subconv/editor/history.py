# subconv/editor/history.py
"""
Undo/redo history for the subtitle editor.

Snapshot based: every entry holds a full deep copy of the document, and
undo/redo move a cursor over the list and hand back a copy of the
snapshot there. No inverse operations to get wrong.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..data import SubtitleDocument


@dataclass
class HistoryEntry:
    """One recorded document state."""

    description: str
    snapshot: SubtitleDocument


class UndoManager:
    """
    Linear history with a live cursor.

    The entry under the cursor always equals the live document. Pushing
    while the cursor is behind the tip discards the redo tail; pushing past
    ``max_size`` entries evicts the oldest.
    """

    def __init__(self, initial: SubtitleDocument, max_size: int = 50):
        self._max_size = max(1, max_size)
        self._entries: list[HistoryEntry] = []
        self._cursor = -1
        self.clear(initial)

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._entries) - 1

    @property
    def undo_text(self) -> str:
        """Description of the change that would be undone."""
        if self.can_undo:
            return f"Undo: {self._entries[self._cursor].description}"
        return "Undo"

    @property
    def redo_text(self) -> str:
        """Description of the change that would be redone."""
        if self.can_redo:
            return f"Redo: {self._entries[self._cursor + 1].description}"
        return "Redo"

    def __len__(self) -> int:
        return len(self._entries)

    def push(self, doc: SubtitleDocument, description: str) -> None:
        del self._entries[self._cursor + 1:]
        self._entries.append(HistoryEntry(description, doc.clone()))

        # Limit history size
        while len(self._entries) > self._max_size:
            self._entries.pop(0)

        self._cursor = len(self._entries) - 1

    def undo(self) -> SubtitleDocument | None:
        """
        Step the cursor back.

        Returns:
            A copy of the earlier snapshot, or None at the oldest entry
        """
        if not self.can_undo:
            return None
        self._cursor -= 1
        return self._entries[self._cursor].snapshot.clone()

    def redo(self) -> SubtitleDocument | None:
        if not self.can_redo:
            return None
        self._cursor += 1
        return self._entries[self._cursor].snapshot.clone()

    def clear(self, current: SubtitleDocument) -> None:
        """Drop all entries and restart from ``current``."""
        self._entries = [HistoryEntry("initial", current.clone())]
        self._cursor = 0
