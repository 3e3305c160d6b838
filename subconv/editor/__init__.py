# subconv/editor/__init__.py
"""
Transactional subtitle editing.

Modules:
- subtitle_editor: SubtitleEditor, the editing surface
- history: snapshot undo/redo
- events: change notification
- search: cue search
- validation: per-cue and whole-document checks
"""

from .events import ChangeEvent, ChangeNotifier
from .history import HistoryEntry, UndoManager
from .search import search
from .subtitle_editor import FragmentContext, SubtitleEditor
from .validation import validate_cue, validate_document

__all__ = [
    "ChangeEvent",
    "ChangeNotifier",
    "FragmentContext",
    "HistoryEntry",
    "SubtitleEditor",
    "UndoManager",
    "search",
    "validate_cue",
    "validate_document",
]
