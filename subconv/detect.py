# subconv/detect.py
"""
Heuristic subtitle format detection.

A FormatDetector runs an ordered battery of pure scorer functions over the
raw text. The first scorer reaching the acceptance threshold wins;
otherwise the single best result is returned (ties go to battery order).

Each scorer returns confidence 0 straight away when the first-order signal
for its format is missing (JSON must parse, VTT must start with WEBVTT).
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Sequence

logger = logging.getLogger(__name__)

ACCEPT_THRESHOLD = 0.8
MIN_FORMAT_CONFIDENCE = 0.5


@dataclass
class DetectionResult:
    format: str | None
    confidence: float
    reasons: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"format": self.format, "confidence": self.confidence, "reasons": self.reasons}


Scorer = Callable[[str], DetectionResult]


def _result(fmt: str, confidence: float, reasons: list[str], minimum: float = MIN_FORMAT_CONFIDENCE) -> DetectionResult:
    confidence = min(confidence, 1.0)
    return DetectionResult(fmt if confidence >= minimum else None, confidence, reasons)


# =============================================================================
# Scorers
# =============================================================================


def score_json(content: str) -> DetectionResult:
    reasons = []
    confidence = 0.0

    if content.lstrip().startswith("["):
        reasons.append("Starts with array bracket")
        confidence += 0.3

    try:
        parsed = json.loads(content)
    except ValueError:
        reasons.append("Invalid JSON syntax")
        return DetectionResult(None, 0.0, reasons)

    reasons.append("Valid JSON syntax")
    confidence += 0.4

    if isinstance(parsed, list):
        reasons.append("Content is an array")
        confidence += 0.2
        first = parsed[0] if parsed else None
        if isinstance(first, dict) and any(k in first for k in ("start", "end", "text", "content")):
            reasons.append("Contains caption-like objects")
            confidence += 0.2
    elif isinstance(parsed, dict) and isinstance(parsed.get("cues"), list):
        reasons.append("Object with a cues array")
        confidence += 0.4
        if "version" in parsed and "sourceFormat" in parsed:
            reasons.append("Canonical document header")
            confidence += 0.2

    return _result("json", confidence, reasons)


_VTT_TIME = re.compile(r"(?:\d{2,}:)?\d{2}:\d{2}[.,]\d{3}\s*-->\s*(?:\d{2,}:)?\d{2}:\d{2}[.,]\d{3}")


def score_vtt(content: str) -> DetectionResult:
    reasons = []
    first_line = content.lstrip("\ufeff").split("\n", 1)[0].strip()

    if not first_line.startswith("WEBVTT"):
        reasons.append("Missing WEBVTT header")
        return DetectionResult(None, 0.0, reasons)

    reasons.append("Has WEBVTT header")
    confidence = 0.7

    if _VTT_TIME.search(content):
        reasons.append("Contains VTT cue timings")
        confidence += 0.3

    if "NOTE" in content or "STYLE" in content:
        reasons.append("Contains VTT-specific keywords")
        confidence += 0.05

    return _result("vtt", confidence, reasons, minimum=0.7)


_ASS_DIALOGUE_TIME = re.compile(r"Dialogue:\s*\d+,\d+:\d{2}:\d{2}\.\d{2},\d+:\d{2}:\d{2}\.\d{2}")


def score_ass(content: str) -> DetectionResult:
    reasons = []
    confidence = 0.0

    if "[Script Info]" in content:
        reasons.append("Has [Script Info] section")
        confidence += 0.3
    if "[V4+ Styles]" in content or "[V4 Styles]" in content:
        reasons.append("Has [V4+ Styles] or [V4 Styles] section")
        confidence += 0.3
    if "[Events]" in content:
        reasons.append("Has [Events] section")
        confidence += 0.2
    if "Dialogue:" in content:
        reasons.append("Contains Dialogue: lines")
        confidence += 0.2
    if _ASS_DIALOGUE_TIME.search(content):
        reasons.append("Contains ASS time format")
        confidence += 0.1

    if confidence < MIN_FORMAT_CONFIDENCE:
        reasons.append("Insufficient ASS format indicators")
    return _result("ass", confidence, reasons)


_SRT_TIME_LINE = re.compile(r"^\d{2}:\d{2}:\d{2},\d{3}\s*-->\s*\d{2}:\d{2}:\d{2},\d{3}")
_SRT_TIME = re.compile(r"\d{2}:\d{2}:\d{2},\d{3}")


def score_srt(content: str) -> DetectionResult:
    reasons = []
    blocks = [b for b in re.split(r"\n\s*\n", content.strip().replace("\r\n", "\n")) if b.strip()]
    if not blocks:
        reasons.append("No content blocks found")
        return DetectionResult(None, 0.0, reasons)

    samples = blocks[:3]
    indicators = 0
    for block in samples:
        lines = block.strip().split("\n")
        if len(lines) < 3:
            continue
        if lines[0].strip().isdigit():
            indicators += 1
        if _SRT_TIME_LINE.match(lines[1].strip()):
            indicators += 1
        if any(line.strip() for line in lines[2:]):
            indicators += 1

    confidence = indicators / (len(samples) * 3)
    if indicators:
        reasons.append(f"Found {indicators} valid SRT indicators in sample blocks")

    if "WEBVTT" not in content and "[Script Info]" not in content:
        reasons.append("No conflicting format headers")
        confidence += 0.1

    if _SRT_TIME.search(content):
        reasons.append("Contains SRT time format (commas)")
        confidence += 0.2

    if confidence < MIN_FORMAT_CONFIDENCE:
        reasons.append("Insufficient SRT format indicators")
    return _result("srt", confidence, reasons)


_CSV_ROW = re.compile(r"^\s*\[\d+(?::\d+){1,2}(?:[.,]\d+)?\]\s*,\s*\[\d+(?::\d+){1,2}(?:[.,]\d+)?\]\s*,")


def score_csv(content: str) -> DetectionResult:
    reasons = []
    lines = [line for line in content.replace("\r\n", "\n").split("\n") if line.strip()]
    rows = sum(1 for line in lines if _CSV_ROW.match(line))

    if not rows:
        reasons.append("No bracketed time rows")
        return DetectionResult(None, 0.0, reasons)

    reasons.append(f"Found {rows} bracketed time rows out of {len(lines)} lines")
    confidence = 0.5 + 0.5 * rows / len(lines)
    return _result("csv", confidence, reasons)


DEFAULT_SCORERS: tuple[Scorer, ...] = (score_json, score_vtt, score_ass, score_srt, score_csv)


# =============================================================================
# Detector
# =============================================================================


class FormatDetector:
    """Ordered scorer battery with early acceptance."""

    def __init__(self, scorers: Sequence[Scorer] = DEFAULT_SCORERS, accept_threshold: float = ACCEPT_THRESHOLD):
        if not scorers:
            raise ValueError("FormatDetector needs at least one scorer")
        self._scorers = tuple(scorers)
        self.accept_threshold = accept_threshold

    @property
    def scorers(self) -> tuple[Scorer, ...]:
        return self._scorers

    def detect(self, content: str) -> DetectionResult:
        if not content or not content.strip():
            return DetectionResult(None, 0.0, ["Empty content"])

        best: DetectionResult | None = None
        for scorer in self._scorers:
            result = scorer(content)
            if result.confidence >= self.accept_threshold:
                logger.debug("Detected %s (%.2f) via %s", result.format, result.confidence, scorer.__name__)
                return result
            if best is None or result.confidence > best.confidence:
                best = result

        logger.debug("Best guess %s (%.2f)", best.format, best.confidence)
        return best

    def detect_simple(self, content: str) -> str | None:
        return self.detect(content).format

    def detect_with_threshold(self, content: str, min_confidence: float = ACCEPT_THRESHOLD) -> str | None:
        """Detected format, or None when confidence is below ``min_confidence``."""
        result = self.detect(content)
        return result.format if result.confidence >= min_confidence else None


_default_detector = FormatDetector()


def detect_format(content: str) -> DetectionResult:
    return _default_detector.detect(content)


def detect_format_simple(content: str) -> str | None:
    return _default_detector.detect_simple(content)


def detect_with_threshold(content: str, min_confidence: float = ACCEPT_THRESHOLD) -> str | None:
    return _default_detector.detect_with_threshold(content, min_confidence)
