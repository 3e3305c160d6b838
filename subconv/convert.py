# subconv/convert.py
"""
Conversion orchestrator.

Every conversion runs format -> universal document -> format. Between the
two adapters the document is normalized through canonical JSON so the
target adapter always sees a schema-complete document.
"""

from __future__ import annotations

import logging

from .data import SubtitleDocument
from .detect import detect_format
from .errors import InvalidFormatError, IssueType, ValidationResult
from .models.enums import SubtitleFormat
from .models.settings import ConversionOptions
from .parsers import (
    parse_ass,
    parse_csv,
    parse_json,
    parse_srt,
    validate_ass_structure,
    validate_csv_structure,
    validate_json_structure,
    validate_srt_structure,
    validate_vtt_structure,
    vtt_to_universal,
)
from .universal import normalize, to_universal
from .writers import to_ass, to_csv, to_json, to_srt, to_vtt

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = tuple(f.value for f in SubtitleFormat)

_STRUCTURE_VALIDATORS = {
    "srt": validate_srt_structure,
    "vtt": validate_vtt_structure,
    "ass": validate_ass_structure,
    "json": validate_json_structure,
    "csv": validate_csv_structure,
}


def _check_format(fmt: str | SubtitleFormat) -> str:
    value = fmt.value if isinstance(fmt, SubtitleFormat) else str(fmt).lower()
    if value == "ssa":
        return "ass"
    if value not in SUPPORTED_FORMATS:
        raise InvalidFormatError(f"Unsupported format: {fmt}")
    return value


def resolve_format(content: str, fmt: str | SubtitleFormat = "auto") -> str:
    """Concrete format name, detecting it when ``fmt`` is 'auto'."""
    if fmt != "auto":
        return _check_format(fmt)
    result = detect_format(content)
    if result.format is None:
        raise InvalidFormatError(
            f"Unable to detect subtitle format (best confidence {result.confidence:.2f})"
        )
    logger.info("Detected format %s (confidence %.2f)", result.format, result.confidence)
    return result.format


def parse_to_universal(content: str, fmt: str | SubtitleFormat = "auto") -> SubtitleDocument:
    """
    Parse text in any supported format into a universal document.

    Raises:
        InvalidFormatError: undetectable or structurally invalid input
    """
    fmt = resolve_format(content, fmt)

    if fmt == "srt":
        return to_universal(parse_srt(content), "srt")
    if fmt == "vtt":
        return vtt_to_universal(content)
    if fmt == "ass":
        return parse_ass(content)
    if fmt == "csv":
        return parse_csv(content)
    return parse_json(content)


def format_from_universal(
    doc: SubtitleDocument,
    fmt: str | SubtitleFormat,
    options: ConversionOptions | None = None,
) -> str:
    """Serialize a universal document to the target format."""
    options = options or ConversionOptions()
    fmt = _check_format(fmt)

    if fmt == "srt":
        return to_srt(doc, options.plain_text_only)
    if fmt == "vtt":
        return to_vtt(doc, options.plain_text_only)
    if fmt == "ass":
        return to_ass(doc, options.plain_text_only)
    if fmt == "csv":
        return to_csv(doc)
    return to_json(doc, options.pretty_json)


def convert(
    content: str,
    from_format: str | SubtitleFormat = "auto",
    to_format: str | SubtitleFormat = "json",
    options: ConversionOptions | None = None,
) -> str:
    """
    Convert subtitle text between formats.

    detect (if auto) -> parse -> normalize through canonical JSON -> format

    Raises:
        InvalidFormatError: undetectable input, unsupported format, or a
            document that fails canonical validation
    """
    target = _check_format(to_format)
    doc = parse_to_universal(content, from_format)
    doc = normalize(doc)
    logger.debug("Converting %d cues from %s to %s", len(doc.cues), doc.source_format, target)
    return format_from_universal(doc, target, options)


def validate(content: str, fmt: str | SubtitleFormat = "auto") -> ValidationResult:
    """
    Structural validation of raw text. Never raises.
    """
    if fmt == "auto":
        detected = detect_format(content).format
        if detected is None:
            result = ValidationResult()
            result.error(IssueType.INVALID_FORMAT, "Unable to detect subtitle format")
            return result
        fmt = detected

    try:
        fmt = _check_format(fmt)
    except InvalidFormatError as e:
        result = ValidationResult()
        result.error(IssueType.INVALID_FORMAT, str(e))
        return result
    return _STRUCTURE_VALIDATORS[fmt](content)
