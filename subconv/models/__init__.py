# subconv/models/__init__.py
from .enums import ChangeType, RenderTarget, SubtitleFormat
from .settings import ConversionOptions, EditorSettings, SearchOptions, ValidationOptions

__all__ = [
    "ChangeType",
    "ConversionOptions",
    "EditorSettings",
    "RenderTarget",
    "SearchOptions",
    "SubtitleFormat",
    "ValidationOptions",
]
