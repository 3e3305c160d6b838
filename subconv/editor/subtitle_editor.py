# subconv/editor/subtitle_editor.py
"""
Transactional editor over one universal document.

Every mutator applies its change, notifies listeners, and records a full
snapshot in the undo history. Inside ``transaction()``/``batch()`` the
snapshot is deferred to one consolidated entry; an exception restores the
pre-batch document and propagates.

Cues are addressed by 0-based list position throughout.
"""

from __future__ import annotations

import copy
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterator, TypeVar

from ..convert import format_from_universal, parse_to_universal
from ..data import Cue, Metadata, Style, SubtitleDocument
from ..errors import ValidationResult
from ..models.enums import ChangeType, SubtitleFormat
from ..models.settings import ConversionOptions, EditorSettings, SearchOptions
from ..overrides import leading_override_prefix, replace_outside_markup, split_rich_text
from ..universal import SubtitleStats, get_stats, universal_to_json
from .events import ChangeNotifier, Listener
from .history import UndoManager
from .search import compile_query, search
from .validation import validate_cue, validate_document

logger = logging.getLogger(__name__)

T = TypeVar("T")

# update key -> Cue attribute; canonical camelCase keys are accepted too
_CUE_FIELDS = {
    "start_ms": "start_ms",
    "startTime": "start_ms",
    "end_ms": "end_ms",
    "endTime": "end_ms",
    "text": "text",
    "content": "content",
    "style": "style",
    "identifier": "identifier",
    "layout": "layout",
    "formatting": "formatting",
}

_STYLE_FIELDS = {name: attr for attr, key in Style.FIELDS for name in (attr, key)}


@dataclass
class FragmentContext:
    """One cue with its neighbours, for tooling that edits cue by cue."""

    index: int
    cue: Cue
    previous: Cue | None
    next: Cue | None
    time_from_start: int
    time_to_end: int
    style: Style | None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "index": self.index,
            "cue": self.cue.to_dict(),
            "timeFromStart": self.time_from_start,
            "timeToEnd": self.time_to_end,
        }
        if self.previous is not None:
            result["previous"] = self.previous.to_dict()
        if self.next is not None:
            result["next"] = self.next.to_dict()
        if self.style is not None:
            result["style"] = self.style.to_dict()
        return result


class SubtitleEditor:
    """
    Editable wrapper around a SubtitleDocument.

    Accessors hand out deep copies; the live document is only changed
    through the mutators below.
    """

    def __init__(
        self,
        source: str | SubtitleDocument,
        fmt: str | SubtitleFormat = "auto",
        settings: EditorSettings | None = None,
    ):
        self.settings = settings or EditorSettings()
        if isinstance(source, SubtitleDocument):
            self._doc = source.clone()
        else:
            self._doc = parse_to_universal(source, fmt)

        self._history = UndoManager(self._doc, self.settings.max_history)
        self._notifier = ChangeNotifier()
        self._batch_depth = 0

    # =========================================================================
    # Internals
    # =========================================================================

    def _commit(self, change_type: ChangeType, description: str, **data: Any) -> None:
        self._notifier.emit(change_type, **data)
        if self._batch_depth == 0:
            self._history.push(self._doc, description)

    def _valid_position(self, index: int) -> bool:
        return 0 <= index < len(self._doc.cues)

    # =========================================================================
    # Read accessors
    # =========================================================================

    @property
    def source_format(self) -> str:
        return self._doc.source_format

    def get_universal(self) -> SubtitleDocument:
        return self._doc.clone()

    def get_cues(self) -> list[Cue]:
        return [cue.clone() for cue in self._doc.cues]

    def get_cue(self, index: int) -> Cue | None:
        if not self._valid_position(index):
            return None
        return self._doc.cues[index].clone()

    def get_styles(self) -> list[Style]:
        return [copy.deepcopy(style) for style in self._doc.styles.values()]

    def get_style(self, name: str) -> Style | None:
        style = self._doc.get_style(name)
        return copy.deepcopy(style) if style is not None else None

    def get_metadata(self) -> Metadata:
        return copy.deepcopy(self._doc.metadata)

    def get_stats(self) -> SubtitleStats:
        return get_stats(self._doc)

    def get_total_duration(self) -> int:
        """End time of the last cue, or 0 for an empty document."""
        if not self._doc.cues:
            return 0
        return self._doc.cues[-1].end_ms

    def get_fragment_context(self, index: int) -> FragmentContext | None:
        if not self._valid_position(index):
            return None
        cues = self._doc.cues
        cue = cues[index]
        return FragmentContext(
            index=index,
            cue=cue.clone(),
            previous=cues[index - 1].clone() if index > 0 else None,
            next=cues[index + 1].clone() if index + 1 < len(cues) else None,
            time_from_start=cue.start_ms,
            time_to_end=cues[-1].end_ms - cue.end_ms,
            style=self.get_style(cue.style) if cue.style else None,
        )

    def get_fragments_in_range(self, start_ms: int, end_ms: int) -> list[tuple[int, Cue]]:
        """Cues lying fully inside [start_ms, end_ms], with their positions."""
        return [
            (i, cue.clone())
            for i, cue in enumerate(self._doc.cues)
            if cue.start_ms >= start_ms and cue.end_ms <= end_ms
        ]

    def get_fragments_by_speaker(self, speaker: str) -> list[tuple[int, Cue]]:
        """Cues whose ASS actor or CSV character equals ``speaker``."""
        return [(i, cue.clone()) for i, cue in enumerate(self._doc.cues) if cue.speaker == speaker]

    # =========================================================================
    # Fragment updates
    # =========================================================================

    def update_fragment(self, index: int, updates: dict[str, Any], validate: bool = True) -> bool:
        """
        Apply a partial change to one cue.

        Setting only ``content`` re-derives ``text``; setting only ``text``
        rewrites ``content`` from it in the cue's own markup. When
        ``validate`` is set and the cue fails validation, the cue is restored
        and nothing is emitted or recorded.

        Returns:
            True if the change was applied
        """
        if not self._valid_position(index):
            return False

        unknown = [key for key in updates if key not in _CUE_FIELDS]
        if unknown:
            logger.info("Rejected cue update with unknown fields: %s", ", ".join(unknown))
            return False

        cue = self._doc.cues[index]
        original = cue.clone()

        try:
            for key, value in updates.items():
                setattr(cue, _CUE_FIELDS[key], value)
            if "content" in updates and "text" not in updates:
                cue.text = cue.text_from_content()
            elif "text" in updates and "content" not in updates:
                cue.content = cue.content_from_text()
            cue.start_ms = int(cue.start_ms)
            cue.end_ms = int(cue.end_ms)
        except (TypeError, ValueError) as e:
            logger.info("Rejected cue update at %d: %s", index, e)
            self._doc.cues[index] = original
            return False

        if validate:
            result = validate_cue(cue, self.settings.validation, position=index)
            if not result.is_valid:
                logger.debug(
                    "Cue %d failed validation: %s",
                    index,
                    "; ".join(e.message for e in result.errors),
                )
                self._doc.cues[index] = original
                return False

        self._commit(
            ChangeType.CUE_UPDATED,
            f"Update cue {index + 1}",
            index=index,
            updates=copy.deepcopy(updates),
            original=original.to_dict(),
        )
        return True

    def update_fragment_text(self, index: int, text: str, preserve_overrides: bool = True) -> bool:
        """
        Replace a cue's text.

        With ``preserve_overrides``, an ASS cue keeps its leading override
        block(s) and line breaks are written back as ``\\N``.
        """
        if not self._valid_position(index):
            return False

        cue = self._doc.cues[index]
        if preserve_overrides and cue.is_ass:
            content = leading_override_prefix(cue.content) + text.replace("\n", "\\N")
            return self.update_fragment(index, {"text": text, "content": content})
        return self.update_fragment(index, {"text": text})

    def update_fragment_timing(self, index: int, start_ms: int, end_ms: int) -> bool:
        if start_ms >= end_ms:
            return False
        return self.update_fragment(index, {"start_ms": start_ms, "end_ms": end_ms})

    # =========================================================================
    # Cue structure
    # =========================================================================

    def add_cue(self, cue: Cue) -> int:
        """Append a copy of ``cue``. Returns its position."""
        self._doc.cues.append(cue.clone())
        self._doc.reindex()
        position = len(self._doc.cues) - 1
        self._commit(
            ChangeType.CUE_ADDED,
            f"Add cue {position + 1}",
            index=position,
            cue=self._doc.cues[position].to_dict(),
        )
        return position

    def insert_cue(self, index: int, cue: Cue) -> bool:
        if index < 0 or index > len(self._doc.cues):
            return False
        self._doc.cues.insert(index, cue.clone())
        self._doc.reindex()
        self._commit(
            ChangeType.CUE_ADDED,
            f"Insert cue {index + 1}",
            index=index,
            cue=self._doc.cues[index].to_dict(),
        )
        return True

    def delete_cue(self, index: int) -> bool:
        if not self._valid_position(index):
            return False
        deleted = self._doc.cues.pop(index)
        self._doc.reindex()
        self._commit(
            ChangeType.CUE_DELETED,
            f"Delete cue {index + 1}",
            index=index,
            cue=deleted.to_dict(),
        )
        return True

    def split_cue(self, index: int, split_ms: int) -> bool:
        """
        Split a cue in two at ``split_ms``.

        The text is divided at the line break (else the space) closest to
        the split's share of the duration. Single-word text is copied to
        both halves. The second half inherits style, layout and format data.
        """
        if not self._valid_position(index):
            return False
        cue = self._doc.cues[index]
        if split_ms <= cue.start_ms or split_ms >= cue.end_ms:
            return False

        ratio = (split_ms - cue.start_ms) / cue.duration_ms
        parts = split_rich_text(cue.content, ratio, cue.is_ass)

        second = cue.clone()
        second.start_ms = split_ms
        cue.end_ms = split_ms
        if parts is not None:
            cue.content, second.content = parts
            cue.text = cue.text_from_content()
            second.text = second.text_from_content()

        self._doc.cues.insert(index + 1, second)
        self._doc.reindex()
        self._commit(
            ChangeType.CUE_ADDED,
            f"Split cue {index + 1}",
            action="split",
            index=index + 1,
            split_ms=split_ms,
            cue=second.to_dict(),
        )
        return True

    def merge_cues(self, start_index: int, end_index: int) -> bool:
        """
        Merge cues ``start_index..end_index`` (inclusive) into the first.

        Plain text is joined with newlines; rich text with ``\\N`` for ASS
        cues and newlines otherwise.
        """
        if start_index < 0 or end_index >= len(self._doc.cues) or start_index >= end_index:
            return False

        merged = self._doc.cues[start_index:end_index + 1]
        first = merged[0]
        separator = "\\N" if first.is_ass else "\n"

        first.text = "\n".join(c.text for c in merged)
        first.content = separator.join(c.content for c in merged)
        first.end_ms = merged[-1].end_ms

        del self._doc.cues[start_index + 1:end_index + 1]
        self._doc.reindex()
        self._commit(
            ChangeType.BATCH_UPDATE,
            f"Merge cues {start_index + 1}-{end_index + 1}",
            action="merge",
            start_index=start_index,
            end_index=end_index,
        )
        return True

    # =========================================================================
    # Time operations
    # =========================================================================

    def _range(self, start_index: int, end_index: int | None) -> list[Cue]:
        end = len(self._doc.cues) - 1 if end_index is None else end_index
        return self._doc.cues[max(0, start_index):end + 1]

    def shift_time(self, offset_ms: int, start_index: int = 0, end_index: int | None = None) -> int:
        """
        Move cues by ``offset_ms``. Times are clamped at 0.

        Returns:
            Number of cues shifted
        """
        cues = self._range(start_index, end_index)
        for cue in cues:
            cue.start_ms = max(0, cue.start_ms + offset_ms)
            cue.end_ms = max(0, cue.end_ms + offset_ms)

        self._commit(
            ChangeType.BATCH_UPDATE,
            f"Shift by {offset_ms}ms",
            action="time-shift",
            offset_ms=offset_ms,
            start_index=start_index,
            end_index=end_index,
        )
        return len(cues)

    def scale_time(self, factor: float, start_index: int = 0, end_index: int | None = None) -> int:
        """
        Multiply cue times by ``factor`` (rounded to whole ms).

        Raises:
            ValueError: factor is not positive
        """
        if factor <= 0:
            raise ValueError(f"Scale factor must be positive, got {factor}")

        cues = self._range(start_index, end_index)
        for cue in cues:
            cue.start_ms = round(cue.start_ms * factor)
            cue.end_ms = round(cue.end_ms * factor)

        self._commit(
            ChangeType.BATCH_UPDATE,
            f"Scale by {factor}",
            action="time-scale",
            factor=factor,
            start_index=start_index,
            end_index=end_index,
        )
        return len(cues)

    def fix_overlaps(self, gap_ms: int = 0) -> int:
        """
        Trim each cue that runs into its successor so it ends ``gap_ms``
        before the successor starts (never before its own start).

        Returns:
            Number of cues trimmed
        """
        fixed = 0
        cues = self._doc.cues
        for current, following in zip(cues, cues[1:]):
            if current.end_ms > following.start_ms:
                current.end_ms = max(current.start_ms, following.start_ms - gap_ms)
                fixed += 1

        if fixed:
            self._commit(
                ChangeType.BATCH_UPDATE,
                "Fix overlaps",
                action="fix-overlaps",
                fixed=fixed,
                gap_ms=gap_ms,
            )
        return fixed

    # =========================================================================
    # Search and replace
    # =========================================================================

    def search(self, query: str, options: SearchOptions | None = None) -> list[int]:
        return search(self._doc, query, options)

    def find_and_replace(self, find: str, replace: str, options: SearchOptions | None = None) -> int:
        """
        Replace matches in every matching cue.

        Plain text and rich content are edited together; markup inside the
        rich content is never touched.

        Returns:
            Number of cues changed
        """
        options = options or SearchOptions()
        pattern = compile_query(find, options)
        # Literal mode must not expand backslash escapes in the replacement
        replacement = replace if options.regex else (lambda match: replace)

        count = 0
        for index in search(self._doc, find, options):
            cue = self._doc.cues[index]
            new_text, hits = pattern.subn(replacement, cue.text)
            if not hits or new_text == cue.text:
                continue
            cue.content, _ = replace_outside_markup(
                cue.content, pattern, replacement, cue.is_ass
            )
            cue.text = new_text
            count += 1

        if count:
            self._commit(
                ChangeType.BATCH_UPDATE,
                f"Replace '{find}'",
                action="find-replace",
                find=find,
                replace=replace,
                count=count,
            )
        return count

    # =========================================================================
    # Validation
    # =========================================================================

    def validate_cue(self, index: int, overrides: dict | None = None) -> ValidationResult:
        if not self._valid_position(index):
            raise IndexError(f"No cue at position {index}")
        options = self.settings.validation.merged(overrides)
        return validate_cue(self._doc.cues[index], options, position=index)

    def validate(self, overrides: dict | None = None) -> ValidationResult:
        return validate_document(self._doc, self.settings.validation.merged(overrides))

    # =========================================================================
    # Metadata and styles
    # =========================================================================

    def update_metadata(self, **fields: Any) -> None:
        """
        Update metadata scalars and/or ``format_specific``.

        ``format_specific`` is merged per format, field by field.

        Raises:
            ValueError: unknown metadata field
        """
        unknown = [k for k in fields if k not in Metadata.SCALARS and k != "format_specific"]
        if unknown:
            raise ValueError(f"Unknown metadata field(s): {', '.join(unknown)}")

        metadata = self._doc.metadata
        for name in Metadata.SCALARS:
            if name in fields:
                setattr(metadata, name, fields[name])
        for fmt, bag in (fields.get("format_specific") or {}).items():
            metadata.format_specific.setdefault(fmt, {}).update(copy.deepcopy(bag))

        self._commit(ChangeType.METADATA_UPDATED, "Update metadata", metadata=copy.deepcopy(fields))

    def add_style(self, style: Style) -> bool:
        """Add a style. Returns False if the name is already taken."""
        if style.name in self._doc.styles:
            return False
        self._doc.styles[style.name] = copy.deepcopy(style)
        self._commit(ChangeType.STYLE_ADDED, f"Add style {style.name}", style=style.to_dict())
        return True

    def update_style(self, name: str, updates: dict[str, Any]) -> bool:
        """
        Change style fields, by attribute or canonical key.

        Values are converted to the field's type.

        Returns:
            False if the style does not exist, a field is unknown, or a value
            does not convert
        """
        style = self._doc.styles.get(name)
        if style is None:
            return False
        unknown = [key for key in updates if key not in _STYLE_FIELDS]
        if unknown:
            logger.info("Rejected style update with unknown fields: %s", ", ".join(unknown))
            return False

        try:
            values = {
                _STYLE_FIELDS[key]: Style.coerce(_STYLE_FIELDS[key], value)
                for key, value in updates.items()
            }
        except ValueError as e:
            logger.info("Rejected update of style %s: %s", name, e)
            return False

        for attr, value in values.items():
            setattr(style, attr, value)

        self._commit(
            ChangeType.STYLE_UPDATED,
            f"Update style {name}",
            name=name,
            updates=copy.deepcopy(updates),
        )
        return True

    def delete_style(self, name: str) -> bool:
        """Remove a style. Cues referring to it keep the name."""
        style = self._doc.styles.pop(name, None)
        if style is None:
            return False
        self._commit(ChangeType.STYLE_DELETED, f"Delete style {name}", style=style.to_dict())
        return True

    # =========================================================================
    # History
    # =========================================================================

    @property
    def can_undo(self) -> bool:
        return self._batch_depth == 0 and self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._batch_depth == 0 and self._history.can_redo

    def undo(self) -> bool:
        if not self.can_undo:
            return False
        self._doc = self._history.undo()
        self._notifier.emit(ChangeType.BATCH_UPDATE, action="undo")
        return True

    def redo(self) -> bool:
        if not self.can_redo:
            return False
        self._doc = self._history.redo()
        self._notifier.emit(ChangeType.BATCH_UPDATE, action="redo")
        return True

    def clear_history(self) -> bool:
        """Restart history from the current document. Unavailable inside a batch."""
        if self._batch_depth:
            return False
        self._history.clear(self._doc)
        return True

    # =========================================================================
    # Batching
    # =========================================================================

    @contextmanager
    def transaction(self, description: str = "Batch edit") -> Iterator[SubtitleEditor]:
        """
        Group mutations into one history entry.

        Listener events for the inner mutations fire as they happen. On an
        exception the document is restored to its state at entry and the
        exception propagates. Transactions nest; only the outermost one
        records history.
        """
        before = self._doc.clone()
        self._batch_depth += 1
        try:
            yield self
        except BaseException:
            self._doc = before
            logger.debug("Transaction '%s' rolled back", description)
            raise
        finally:
            self._batch_depth -= 1

        if self._batch_depth == 0:
            self._notifier.emit(ChangeType.BATCH_UPDATE, action="batch", description=description)
            self._history.push(self._doc, description)

    def batch(self, operations: Callable[[], T], description: str = "Batch edit") -> T:
        """Run ``operations`` inside a transaction and return its result."""
        with self.transaction(description):
            return operations()

    # =========================================================================
    # Listeners
    # =========================================================================

    def on_change(self, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns a callable that unregisters it."""
        return self._notifier.subscribe(listener)

    def off_change(self, listener: Listener) -> bool:
        return self._notifier.unsubscribe(listener)

    # =========================================================================
    # Export
    # =========================================================================

    def export(self, fmt: str | SubtitleFormat, options: ConversionOptions | None = None) -> str:
        return format_from_universal(self._doc, fmt, options)

    def to_json(self, pretty: bool = True) -> str:
        return universal_to_json(self._doc, pretty)
