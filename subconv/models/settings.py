# subconv/models/settings.py
"""Typed settings for validation, editing, conversion and search.

All settings have defaults and can be built from a plain config dict via
``from_config``, so callers never index raw dicts for options.

Settings are organized by concern:
- ValidationOptions: per-cue and whole-document checks
- EditorSettings: history cap plus the validation options used by the editor
- ConversionOptions: target-format output switches
- SearchOptions: editor search filters
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace


@dataclass
class ValidationOptions:
    """Independently toggleable validation categories and their limits."""

    # =========================================================================
    # Toggles
    # =========================================================================
    check_overlaps: bool = True
    check_durations: bool = True
    check_text_length: bool = True
    check_empty_text: bool = True
    check_ordering: bool = True
    check_gaps: bool = False
    check_line_count: bool = False

    # =========================================================================
    # Limits
    # =========================================================================
    min_duration_ms: int = 500
    max_duration_ms: int = 10000
    max_text_length: int = 200
    max_gap_ms: int = 5000
    max_lines: int = 3

    @classmethod
    def from_config(cls, cfg: dict) -> ValidationOptions:
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in cfg.items() if k in known})

    def merged(self, overrides: dict | None) -> ValidationOptions:
        """Return a copy with the given fields replaced."""
        if not overrides:
            return self
        known = {f.name for f in fields(self)}
        return replace(self, **{k: v for k, v in overrides.items() if k in known})


@dataclass
class EditorSettings:
    max_history: int = 50
    validation: ValidationOptions = field(default_factory=ValidationOptions)

    @classmethod
    def from_config(cls, cfg: dict) -> EditorSettings:
        return cls(
            max_history=max(1, int(cfg.get("max_history", 50))),
            validation=ValidationOptions.from_config(cfg.get("validation", {})),
        )


@dataclass
class ConversionOptions:
    # Emit plain text only, dropping override tags and HTML-like markup
    plain_text_only: bool = False
    pretty_json: bool = True

    @classmethod
    def from_config(cls, cfg: dict) -> ConversionOptions:
        return cls(
            plain_text_only=bool(cfg.get("plain_text_only", False)),
            pretty_json=bool(cfg.get("pretty_json", True)),
        )


@dataclass
class SearchOptions:
    case_sensitive: bool = False
    regex: bool = False
    # Match against plain text joined with rich content
    include_content: bool = False
    # (start_ms, end_ms); a cue must lie fully inside
    time_range: tuple[int, int] | None = None
    styles: list[str] | None = None
    # ASS layers
    layers: list[int] | None = None
