# subconv/models/enums.py
from enum import Enum


class SubtitleFormat(str, Enum):
    SRT = "srt"
    VTT = "vtt"
    ASS = "ass"
    JSON = "json"
    CSV = "csv"


class ChangeType(str, Enum):
    CUE_ADDED = "cue-added"
    CUE_UPDATED = "cue-updated"
    CUE_DELETED = "cue-deleted"
    METADATA_UPDATED = "metadata-updated"
    STYLE_ADDED = "style-added"
    STYLE_UPDATED = "style-updated"
    STYLE_DELETED = "style-deleted"
    BATCH_UPDATE = "batch-update"


class RenderTarget(str, Enum):
    RAW = "raw"
    BROWSER = "browser"
    EMBEDDED = "embedded"
