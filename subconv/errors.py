# subconv/errors.py
"""
Error taxonomy and validation results.

Two failure contracts live side by side:
- parse entry points raise SubtitleError subclasses on structural failure
- validate entry points return a ValidationResult and never raise
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SubtitleError(Exception):
    """Base class for all subconv errors."""


class InvalidFormatError(SubtitleError, ValueError):
    """Unparseable structure: bad JSON, missing header/section, unknown format."""


class InvalidTimecodeError(SubtitleError, ValueError):
    """A time string does not match the grammar of its format."""

    def __init__(self, text: str, fmt: str, message: str | None = None):
        self.text = text
        self.format = fmt
        super().__init__(message or f"Invalid {fmt.upper()} timecode: {text!r}")


class IssueType(str, Enum):
    """Validation issue categories."""

    # Errors
    INVALID_FORMAT = "INVALID_FORMAT"
    INVALID_TIMECODE = "INVALID_TIMECODE"
    MISSING_CUE_NUMBER = "MISSING_CUE_NUMBER"
    EMPTY_CUE = "EMPTY_CUE"
    OVERLAPPING_CUES = "OVERLAPPING_CUES"

    # Warnings
    SHORT_DURATION = "SHORT_DURATION"
    LONG_DURATION = "LONG_DURATION"
    GAP_BETWEEN_CUES = "GAP_BETWEEN_CUES"
    EXCESSIVE_LINES = "EXCESSIVE_LINES"


@dataclass
class ValidationIssue:
    type: IssueType
    message: str
    line_number: int | None = None
    cue_index: int | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": self.type.value, "message": self.message}
        if self.line_number is not None:
            result["lineNumber"] = self.line_number
        if self.cue_index is not None:
            result["cueIndex"] = self.cue_index
        return result


@dataclass
class ValidationResult:
    """Outcome of a validate call. Warnings never affect is_valid."""

    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def error(self, issue_type: IssueType, message: str, **location: int | None):
        self.errors.append(ValidationIssue(issue_type, message, **location))

    def warn(self, issue_type: IssueType, message: str, **location: int | None):
        self.warnings.append(ValidationIssue(issue_type, message, **location))

    def extend(self, other: ValidationResult) -> None:
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
        }
