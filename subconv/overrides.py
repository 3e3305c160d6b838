# subconv/overrides.py
"""
Inline markup handling.

ASS override blocks (``{\\pos(320,40)\\c&H0000FF&}``) and the HTML-like tags
used by SRT/VTT (``<i>``, ``<c.yellow>``, ``<v Bob>``) both live inside cue
text. This module strips them to plain text, reads the presentation
directives out of ASS blocks, and translates between the two markups when a
cue crosses formats.
"""

from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass, field
from typing import Callable

logger = logging.getLogger(__name__)

OVERRIDE_BLOCK = re.compile(r"\{[^}]*\}")
LEADING_OVERRIDES = re.compile(r"^(?:\{[^}]*\})+")
HTML_TAG = re.compile(r"</?[A-Za-z][^<>]*>|<\d[\d:.]*>")

_ASS_TOKENS = re.compile(r"(\{[^}]*\}|\\[Nnh])")
_HTML_TOKENS = re.compile(r"(</?[A-Za-z][^<>]*>|<\d[\d:.]*>)")

_POS = re.compile(r"\\pos\(\s*(-?[\d.]+)\s*,\s*(-?[\d.]+)\s*\)")
_ALIGN = re.compile(r"\\an([1-9])")
_COLOR = re.compile(r"\\1?c&H([0-9A-Fa-f]{1,8})&?")
_BOLD = re.compile(r"\\b(\d+)")
_ITALIC = re.compile(r"\\i([01])")
_FADE = re.compile(r"\\fade?\(([^)]*)\)")
_TOGGLES = re.compile(r"\\([bisu])([01])(?![\d])")

_ESCAPES = {"\\N": "\n", "\\n": " ", "\\h": " "}


@dataclass
class OverrideInfo:
    """Presentation directives found in a cue's ASS override blocks.

    The first occurrence of each directive wins.
    """

    position: tuple[float, float] | None = None
    alignment: int | None = None
    color: str | None = None  # "&HBBGGRR" as written, without trailing '&'
    bold: bool | None = None
    italic: bool | None = None
    fade: tuple[int, ...] | None = None
    transforms: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return (
            self.position is None
            and self.alignment is None
            and self.color is None
            and self.bold is None
            and self.italic is None
            and self.fade is None
            and not self.transforms
        )


# =============================================================================
# Stripping
# =============================================================================


def strip_overrides(content: str) -> str:
    """ASS rich text -> plain text.

    Removes ``{...}`` blocks, turns ``\\N`` into a newline and ``\\n``/``\\h``
    into spaces.
    """
    text = OVERRIDE_BLOCK.sub("", content)
    text = text.replace("\\N", "\n").replace("\\n", " ").replace("\\h", " ")
    return text.strip()


def strip_html_tags(content: str) -> str:
    return HTML_TAG.sub("", content).strip()


def plain_text(content: str, ass: bool = False) -> str:
    """Plain text for rich content. ``ass`` selects override-block stripping."""
    return strip_overrides(content) if ass else strip_html_tags(content)


def map_text_runs(content: str, func: Callable[[str], str], ass: bool = False) -> str:
    """Apply ``func`` to the text between markup tokens."""
    splitter = _ASS_TOKENS if ass else _HTML_TOKENS
    return "".join(
        func(token) if i % 2 == 0 else token
        for i, token in enumerate(splitter.split(content))
    )


def unescape_vtt(content: str) -> str:
    """Resolve WebVTT character references outside tags."""
    return map_text_runs(content, html.unescape)


def escape_vtt(content: str) -> str:
    """Escape &, < and > outside tags for WebVTT output."""
    return map_text_runs(content, lambda run: html.escape(run, quote=False))


def leading_override_prefix(content: str) -> str:
    match = LEADING_OVERRIDES.match(content)
    return match.group(0) if match else ""


# =============================================================================
# Directive extraction
# =============================================================================


def _transform_args(block: str) -> list[str]:
    """Arguments of every \\t(...) in a block, honouring nested parentheses."""
    found = []
    start = block.find("\\t(")
    while start != -1:
        depth = 0
        i = start + 2
        for i in range(start + 2, len(block)):
            if block[i] == "(":
                depth += 1
            elif block[i] == ")":
                depth -= 1
                if depth == 0:
                    break
        found.append(block[start + 3:i])
        start = block.find("\\t(", i)
    return found


def parse_overrides(content: str) -> OverrideInfo:
    info = OverrideInfo()

    for block_match in OVERRIDE_BLOCK.finditer(content):
        block = block_match.group(0)

        pos = _POS.search(block)
        if info.position is None and pos:
            info.position = (float(pos.group(1)), float(pos.group(2)))

        align = _ALIGN.search(block)
        if info.alignment is None and align:
            info.alignment = int(align.group(1))

        color = _COLOR.search(block)
        if info.color is None and color:
            info.color = "&H" + color.group(1).upper()

        bold = _BOLD.search(block)
        if info.bold is None and bold:
            info.bold = int(bold.group(1)) != 0

        italic = _ITALIC.search(block)
        if info.italic is None and italic:
            info.italic = italic.group(1) == "1"

        fade = _FADE.search(block)
        if info.fade is None and fade:
            try:
                info.fade = tuple(int(v) for v in fade.group(1).split(","))
            except ValueError:
                logger.debug("Ignoring malformed fade in %r", block)

        info.transforms.extend(_transform_args(block))

    return info


def layout_from_overrides(content: str) -> dict | None:
    """Cue layout derived from \\pos and \\an, or None when neither is present."""
    info = parse_overrides(content)
    layout: dict = {}
    if info.position is not None:
        x, y = info.position
        layout["position"] = {"x": _plain_number(x), "y": _plain_number(y)}
    if info.alignment is not None:
        layout["alignment"] = info.alignment
    return layout or None


def _plain_number(value: float) -> int | float:
    return int(value) if value == int(value) else value


# =============================================================================
# Colours
# =============================================================================


def ass_color_to_css(color: str | None) -> str | None:
    """'&HAABBGGRR' / '&HBBGGRR&' -> '#RRGGBB'. Alpha is dropped."""
    if not color:
        return None
    digits = color.strip().lstrip("&").lstrip("Hh").rstrip("&")
    if not digits or any(c not in "0123456789abcdefABCDEF" for c in digits):
        return None
    bgr = digits[-6:].rjust(6, "0")
    return f"#{bgr[4:6]}{bgr[2:4]}{bgr[0:2]}".upper()


def css_color_to_ass(color: str, alpha: int = 0) -> str:
    """'#RRGGBB' -> '&HAABBGGRR'."""
    digits = color.lstrip("#")
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    if len(digits) != 6:
        raise ValueError(f"Not a #RRGGBB colour: {color!r}")
    rr, gg, bb = digits[0:2], digits[2:4], digits[4:6]
    return f"&H{alpha:02X}{bb}{gg}{rr}".upper()


# =============================================================================
# Cross-format translation
# =============================================================================


def ass_to_html_markup(content: str) -> str:
    """ASS rich text -> SRT/VTT rich text.

    Bold/italic/underline/strike toggles become tags; every other override
    is dropped. Tags still open at the end are closed.
    """
    tag_names = {"b": "b", "i": "i", "u": "u", "s": "s"}
    open_tags: list[str] = []
    parts: list[str] = []

    for token in _ASS_TOKENS.split(content):
        if not token:
            continue
        if token.startswith("{"):
            for name, state in _TOGGLES.findall(token):
                tag = tag_names[name]
                if state == "1" and tag not in open_tags:
                    open_tags.append(tag)
                    parts.append(f"<{tag}>")
                elif state == "0" and tag in open_tags:
                    open_tags.remove(tag)
                    parts.append(f"</{tag}>")
        elif token in _ESCAPES:
            parts.append(_ESCAPES[token])
        else:
            parts.append(token)

    for tag in reversed(open_tags):
        parts.append(f"</{tag}>")

    return "".join(parts).strip()


def html_to_ass_markup(content: str, vtt: bool = False) -> str:
    """SRT/VTT rich text -> ASS rich text. ``vtt`` resolves character references."""
    def convert(match: re.Match) -> str:
        tag = match.group(0)
        simple = re.fullmatch(r"<(/?)([bisu])>", tag, re.IGNORECASE)
        if simple:
            state = "0" if simple.group(1) else "1"
            return "{\\" + simple.group(2).lower() + state + "}"
        return ""

    converted = HTML_TAG.sub(convert, content)
    if vtt:
        converted = html.unescape(converted)
    return converted.replace("\r\n", "\n").replace("\n", "\\N")


# =============================================================================
# Markup-aware text edits
# =============================================================================


def replace_outside_markup(
    content: str, pattern: re.Pattern, replacement: str, ass: bool
) -> tuple[str, int]:
    """Apply ``pattern.subn`` to text runs only, leaving markup untouched."""
    splitter = _ASS_TOKENS if ass else _HTML_TOKENS
    total = 0
    parts = []
    for i, token in enumerate(splitter.split(content)):
        # split() with one group alternates text, markup, text, ...
        if i % 2 == 0 and token:
            token, count = pattern.subn(replacement, token)
            total += count
        parts.append(token)
    return "".join(parts), total


def _plain_offsets(content: str, ass: bool) -> list[tuple[str, int]]:
    """(plain character, position in content) for every visible character."""
    offsets = []
    i = 0
    while i < len(content):
        ch = content[i]
        if ass and ch == "{":
            end = content.find("}", i)
            if end != -1:
                i = end + 1
                continue
        if ass and ch == "\\" and content[i + 1:i + 2] in ("N", "n", "h"):
            offsets.append((_ESCAPES[content[i:i + 2]], i))
            i += 2
            continue
        if not ass and ch == "<":
            match = HTML_TAG.match(content, i)
            if match:
                i = match.end()
                continue
        offsets.append((ch, i))
        i += 1
    return offsets


def split_rich_text(content: str, ratio: float, ass: bool) -> tuple[str, str] | None:
    """
    Split rich text in two at the line break (or, failing that, the space)
    nearest to ``ratio`` of its visible length.

    Returns None when the text has no interior break point.
    """
    offsets = _plain_offsets(content, ass)
    visible = "".join(ch for ch, _ in offsets)

    def candidates(separator: str) -> list[int]:
        return [
            p for p, ch in enumerate(visible)
            if ch == separator and visible[:p].strip() and visible[p + 1:].strip()
        ]

    points = candidates("\n") or candidates(" ")
    if not points:
        return None

    target = ratio * len(visible)
    best = min(points, key=lambda p: abs(p - target))
    pos = offsets[best][1]
    width = 2 if content[pos] == "\\" else 1

    left = content[:pos].rstrip(" ")
    right = content[pos + width:].lstrip(" ")
    if ass:
        prefix = leading_override_prefix(content)
        if prefix and not right.startswith("{"):
            right = prefix + right
    return left, right
