# subconv/data.py
"""
Universal document model.

Every format adapter parses into and serializes out of SubtitleDocument.
The canonical JSON form (``to_dict``/``from_dict``) uses camelCase keys:

    {version, sourceFormat, metadata, styles[], cues[]}

Design principles:
- Cue order is insertion order; ``index`` is derived (1-based, contiguous)
- ``duration_ms`` is always ``end_ms - start_ms``
- ``text`` (plain) is ``content`` (rich) with markup stripped
- Clones are deep; nothing is shared between a document and its clone
"""

from __future__ import annotations

import copy
import html
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any

from .overrides import plain_text

FORMAT_VERSION = "1.0.0"
SOURCE_FORMATS = ("srt", "vtt", "ass", "json", "csv")


def _format_number(value: float) -> int | float:
    """Number for JSON output, dropping unnecessary decimals."""
    if isinstance(value, float) and value == int(value):
        return int(value)
    return value


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


# =============================================================================
# Per-cue format extensions
# =============================================================================


@dataclass
class AssCueData:
    """Dialogue columns that have no canonical counterpart."""

    layer: int = 0
    actor: str = ""
    margin_l: int = 0
    margin_r: int = 0
    margin_v: int = 0
    effect: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "layer": self.layer,
            "actor": self.actor,
            "marginL": self.margin_l,
            "marginR": self.margin_r,
            "marginV": self.margin_v,
            "effect": self.effect,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AssCueData:
        return cls(
            layer=int(data.get("layer", 0)),
            actor=data.get("actor", ""),
            margin_l=int(data.get("marginL", 0)),
            margin_r=int(data.get("marginR", 0)),
            margin_v=int(data.get("marginV", 0)),
            effect=data.get("effect", ""),
        )


@dataclass
class VttCueData:
    """WebVTT cue settings, kept verbatim."""

    region: str | None = None
    vertical: str | None = None
    line: str | None = None
    position: str | None = None
    size: str | None = None
    align: str | None = None

    SETTINGS = ("region", "vertical", "line", "position", "size", "align")

    def to_dict(self) -> dict[str, Any]:
        return _drop_none({name: getattr(self, name) for name in self.SETTINGS})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VttCueData:
        return cls(**{name: data.get(name) for name in cls.SETTINGS})

    def to_settings(self) -> str:
        """Serialize as a cue-timing settings string, e.g. 'line:0 align:start'."""
        return " ".join(f"{k}:{v}" for k, v in self.to_dict().items())


@dataclass
class CsvCueData:
    character: str = ""
    confidence: float | None = None
    abs_start: str | None = None  # absolute timestamp as written, no brackets
    abs_end: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none({
            "character": self.character,
            "confidence": self.confidence,
            "absStart": self.abs_start,
            "absEnd": self.abs_end,
        })

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CsvCueData:
        confidence = data.get("confidence")
        return cls(
            character=data.get("character", ""),
            confidence=float(confidence) if confidence is not None else None,
            abs_start=data.get("absStart"),
            abs_end=data.get("absEnd"),
        )


@dataclass
class CueFormatData:
    """
    Tagged union of per-format cue extensions.

    Known formats get a typed payload; anything else found under
    ``formatSpecific`` is carried in ``extra`` untouched.
    """

    ass: AssCueData | None = None
    vtt: VttCueData | None = None
    csv: CsvCueData | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return self.ass is None and self.vtt is None and self.csv is None and not self.extra

    def to_dict(self) -> dict[str, Any]:
        result = dict(self.extra)
        if self.ass is not None:
            result["ass"] = self.ass.to_dict()
        if self.vtt is not None:
            result["vtt"] = self.vtt.to_dict()
        if self.csv is not None:
            result["csv"] = self.csv.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> CueFormatData:
        data = dict(data or {})
        ass = data.pop("ass", None)
        vtt = data.pop("vtt", None)
        csv = data.pop("csv", None)
        return cls(
            ass=AssCueData.from_dict(ass) if ass is not None else None,
            vtt=VttCueData.from_dict(vtt) if vtt is not None else None,
            csv=CsvCueData.from_dict(csv) if csv is not None else None,
            extra=copy.deepcopy(data),
        )


# =============================================================================
# Cue
# =============================================================================


@dataclass
class Cue:
    """
    One timed caption unit.

    ``content`` keeps the source markup verbatim (ASS override blocks,
    SRT/VTT tags); ``text`` is the same with markup stripped. Passing only
    one of them fills in the other.

    Which markup ``content`` holds is decided by the cue's format data, never
    by sniffing the text: an ``ass`` extension means ASS, a ``vtt`` extension
    means WebVTT, anything else HTML-like SRT tags.
    """

    start_ms: int
    end_ms: int
    text: str = ""
    content: str = ""
    index: int = 0
    style: str | None = None
    identifier: str | None = None
    layout: dict[str, Any] | None = None
    formatting: list[dict[str, Any]] | None = None
    format_specific: CueFormatData = field(default_factory=CueFormatData)

    def __post_init__(self):
        if not self.content and self.text:
            self.content = self.content_from_text()
        elif self.content and not self.text:
            self.text = self.text_from_content()

    @property
    def is_ass(self) -> bool:
        """``content`` is ASS rich text (override blocks, \\N breaks)."""
        return self.format_specific.ass is not None

    @property
    def is_vtt(self) -> bool:
        """``content`` is WebVTT rich text, with character references."""
        return self.format_specific.vtt is not None

    def text_from_content(self) -> str:
        text = plain_text(self.content, self.is_ass)
        return html.unescape(text) if self.is_vtt else text

    def content_from_text(self) -> str:
        if self.is_ass:
            return self.text.replace("\n", "\\N")
        if self.is_vtt:
            return html.escape(self.text, quote=False)
        return self.text

    @property
    def duration_ms(self) -> int:
        return self.end_ms - self.start_ms

    @property
    def layer(self) -> int:
        return self.format_specific.ass.layer if self.format_specific.ass else 0

    @property
    def speaker(self) -> str:
        """Actor (ASS) or character (CSV) name, if any."""
        if self.format_specific.ass and self.format_specific.ass.actor:
            return self.format_specific.ass.actor
        if self.format_specific.csv and self.format_specific.csv.character:
            return self.format_specific.csv.character
        return ""

    def clone(self) -> Cue:
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "index": self.index,
            "startTime": self.start_ms,
            "endTime": self.end_ms,
            "duration": self.duration_ms,
            "text": self.text,
            "content": self.content,
        }
        if self.style is not None:
            result["style"] = self.style
        if self.identifier is not None:
            result["identifier"] = self.identifier
        if self.layout is not None:
            result["layout"] = copy.deepcopy(self.layout)
        if self.formatting is not None:
            result["formatting"] = copy.deepcopy(self.formatting)
        if not self.format_specific.is_empty:
            result["formatSpecific"] = self.format_specific.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Cue:
        return cls(
            start_ms=int(data["startTime"]),
            end_ms=int(data["endTime"]),
            text=data.get("text", ""),
            content=data.get("content", ""),
            index=int(data.get("index", 0)),
            style=data.get("style"),
            identifier=data.get("identifier"),
            layout=copy.deepcopy(data.get("layout")),
            formatting=copy.deepcopy(data.get("formatting")),
            format_specific=CueFormatData.from_dict(data.get("formatSpecific")),
        )


# =============================================================================
# Style
# =============================================================================


@dataclass
class Style:
    """
    Named presentation profile, modelled on the 23 ASS V4+ style columns.

    Colours are kept in ASS notation (&HAABBGGRR); renderers convert.
    Unknown columns from the source are kept in ``format_specific``.
    """

    name: str
    font_name: str = "Arial"
    font_size: float = 20.0
    primary_color: str = "&H00FFFFFF"
    secondary_color: str = "&H000000FF"
    outline_color: str = "&H00000000"
    back_color: str = "&H00000000"
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strike_out: bool = False
    scale_x: float = 100.0
    scale_y: float = 100.0
    spacing: float = 0.0
    angle: float = 0.0
    border_style: int = 1  # 1 = outline + shadow, 3 = opaque box
    outline: float = 2.0
    shadow: float = 2.0
    alignment: int = 2  # Numpad style: 1-9
    margin_l: int = 10
    margin_r: int = 10
    margin_v: int = 10
    encoding: int = 1
    format_specific: dict[str, Any] = field(default_factory=dict)

    # (attribute, canonical JSON key)
    FIELDS = (
        ("font_name", "fontName"),
        ("font_size", "fontSize"),
        ("primary_color", "primaryColor"),
        ("secondary_color", "secondaryColor"),
        ("outline_color", "outlineColor"),
        ("back_color", "backColor"),
        ("bold", "bold"),
        ("italic", "italic"),
        ("underline", "underline"),
        ("strike_out", "strikeOut"),
        ("scale_x", "scaleX"),
        ("scale_y", "scaleY"),
        ("spacing", "spacing"),
        ("angle", "angle"),
        ("border_style", "borderStyle"),
        ("outline", "outline"),
        ("shadow", "shadow"),
        ("alignment", "alignment"),
        ("margin_l", "marginL"),
        ("margin_r", "marginR"),
        ("margin_v", "marginV"),
        ("encoding", "encoding"),
    )

    @classmethod
    def default(cls) -> Style:
        """Create default style."""
        return cls(name="Default")

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"name": self.name}
        for attr, key in self.FIELDS:
            result[key] = _format_number(getattr(self, attr))
        if self.format_specific:
            result["formatSpecific"] = copy.deepcopy(self.format_specific)
        return result

    @classmethod
    def coerce(cls, attr: str, value: Any) -> Any:
        """
        Convert ``value`` to the type of field ``attr``.

        Raises:
            ValueError: value does not convert, e.g. a non-numeric font size
        """
        default = cls.__dataclass_fields__[attr].default
        try:
            if isinstance(default, bool):
                return bool(value)
            if isinstance(default, int):
                return int(value)
            if isinstance(default, float):
                return float(value)
        except (TypeError, OverflowError) as e:
            raise ValueError(f"Bad value for {attr}: {value!r}") from e
        return str(value)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Style:
        style = cls(name=data.get("name", "Default"))
        for attr, key in cls.FIELDS:
            if data.get(key) is not None:
                setattr(style, attr, cls.coerce(attr, data[key]))
        style.format_specific = copy.deepcopy(data.get("formatSpecific") or {})
        return style


# =============================================================================
# Metadata
# =============================================================================


@dataclass
class Metadata:
    title: str | None = None
    language: str | None = None
    author: str | None = None
    description: str | None = None
    # Format name -> fields the canonical schema does not model
    format_specific: dict[str, dict[str, Any]] = field(default_factory=dict)

    SCALARS = ("title", "language", "author", "description")

    def to_dict(self) -> dict[str, Any]:
        result = _drop_none({name: getattr(self, name) for name in self.SCALARS})
        if self.format_specific:
            result["formatSpecific"] = copy.deepcopy(self.format_specific)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Metadata:
        data = data or {}
        return cls(
            **{name: data.get(name) for name in cls.SCALARS},
            format_specific=copy.deepcopy(data.get("formatSpecific") or {}),
        )


# =============================================================================
# Document
# =============================================================================


@dataclass
class SubtitleDocument:
    """Canonical subtitle document shared by every adapter."""

    source_format: str = "json"
    metadata: Metadata = field(default_factory=Metadata)
    styles: OrderedDict[str, Style] = field(default_factory=OrderedDict)
    cues: list[Cue] = field(default_factory=list)
    format_version: str = FORMAT_VERSION

    def __post_init__(self):
        if not isinstance(self.styles, OrderedDict):
            self.styles = OrderedDict((s.name, s) for s in self.styles)
        self.reindex()

    def reindex(self) -> None:
        """Recompute the derived 1-based cue indices."""
        for i, cue in enumerate(self.cues, start=1):
            cue.index = i

    def get_style(self, name: str | None) -> Style | None:
        if name is None:
            return None
        return self.styles.get(name)

    def clone(self) -> SubtitleDocument:
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.format_version,
            "sourceFormat": self.source_format,
            "metadata": self.metadata.to_dict(),
            "styles": [s.to_dict() for s in self.styles.values()],
            "cues": [c.to_dict() for c in self.cues],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SubtitleDocument:
        return cls(
            source_format=data.get("sourceFormat", "json"),
            metadata=Metadata.from_dict(data.get("metadata")),
            styles=OrderedDict(
                (s.name, s) for s in (Style.from_dict(d) for d in data.get("styles", []))
            ),
            cues=[Cue.from_dict(c) for c in data.get("cues", [])],
            format_version=data.get("version", FORMAT_VERSION),
        )


# =============================================================================
# Structural validation of canonical dicts
# =============================================================================


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _typed(
    data: Any,
    numbers: tuple[str, ...] = (),
    strings: tuple[str, ...] = (),
    nullable: tuple[str, ...] = (),
) -> bool:
    """``data`` is a dict whose listed fields, where present, have JSON types."""
    if not isinstance(data, dict):
        return False
    for keys, check in ((numbers, _is_number), (strings, lambda v: isinstance(v, str))):
        for key in keys:
            if key not in data or (data[key] is None and key in nullable):
                continue
            if not check(data[key]):
                return False
    return True


# formatSpecific payload key -> check of its fields
_CUE_FORMAT_CHECKS = {
    "ass": lambda d: _typed(
        d, numbers=("layer", "marginL", "marginR", "marginV"), strings=("actor", "effect")
    ),
    "vtt": lambda d: _typed(d, strings=VttCueData.SETTINGS, nullable=VttCueData.SETTINGS),
    "csv": lambda d: _typed(
        d,
        numbers=("confidence",),
        strings=("character", "absStart", "absEnd"),
        nullable=("confidence", "absStart", "absEnd"),
    ),
}


def _valid_style(style: Any) -> bool:
    if not (isinstance(style, dict) and isinstance(style.get("name"), str)):
        return False
    defaults = Style(name="")
    for attr, key in Style.FIELDS:
        value = style.get(key)
        if value is None:
            continue
        default = getattr(defaults, attr)
        if isinstance(default, bool):
            if not isinstance(value, bool):
                return False
        elif isinstance(default, (int, float)):
            if not _is_number(value):
                return False
        elif not isinstance(value, str):
            return False
    return style.get("formatSpecific") is None or isinstance(style["formatSpecific"], dict)


def _valid_metadata(metadata: Any) -> bool:
    if not isinstance(metadata, dict):
        return False
    if any(metadata.get(name) is not None and not isinstance(metadata[name], str)
           for name in Metadata.SCALARS):
        return False
    bags = metadata.get("formatSpecific")
    if bags is None:
        return True
    return isinstance(bags, dict) and all(isinstance(bag, dict) for bag in bags.values())


def _valid_cue(cue: Any) -> bool:
    if not isinstance(cue, dict):
        return False
    if not _is_int(cue.get("index")):
        return False
    if not (_is_number(cue.get("startTime")) and _is_number(cue.get("endTime"))):
        return False
    if "duration" in cue and not _is_number(cue["duration"]):
        return False
    if not (isinstance(cue.get("text"), str) and isinstance(cue.get("content"), str)):
        return False
    for key in ("style", "identifier"):
        if cue.get(key) is not None and not isinstance(cue[key], str):
            return False
    if cue.get("layout") is not None and not isinstance(cue["layout"], dict):
        return False
    if cue.get("formatting") is not None and not isinstance(cue["formatting"], list):
        return False

    format_data = cue.get("formatSpecific")
    if format_data is None:
        return True
    if not isinstance(format_data, dict):
        return False
    for name, check in _CUE_FORMAT_CHECKS.items():
        payload = format_data.get(name)
        if payload is not None and not check(payload):
            return False
    return True


def validate_universal(obj: Any) -> bool:
    """
    Structural check of a canonical document dict.

    Checks top-level fields, metadata, style field types, and every cue's
    field types down to its per-format payloads. Does not judge timing or
    content; that is the validator's job.
    """
    if not isinstance(obj, dict):
        return False
    if not isinstance(obj.get("version"), str):
        return False
    if obj.get("sourceFormat") not in SOURCE_FORMATS:
        return False
    if not _valid_metadata(obj.get("metadata")):
        return False
    styles = obj.get("styles")
    if not (isinstance(styles, list) and all(_valid_style(s) for s in styles)):
        return False
    cues = obj.get("cues")
    return isinstance(cues, list) and all(_valid_cue(c) for c in cues)
