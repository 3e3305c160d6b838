# subconv/__init__.py
"""
Subtitle conversion and editing.

This package provides:
- SubtitleDocument: universal document every format converts through
- Parsers and writers for SRT, WebVTT, ASS/SSA, JSON and CSV
- Format detection and a conversion orchestrator
- HTML and JSON rendering projections
- SubtitleEditor: transactional editing with undo/redo and change events
- A pysubs2 bridge
"""

from .convert import (
    SUPPORTED_FORMATS,
    convert,
    format_from_universal,
    parse_to_universal,
    resolve_format,
    validate,
)
from .data import (
    AssCueData,
    CsvCueData,
    Cue,
    CueFormatData,
    Metadata,
    Style,
    SubtitleDocument,
    VttCueData,
    validate_universal,
)
from .detect import (
    DetectionResult,
    FormatDetector,
    detect_format,
    detect_format_simple,
    detect_with_threshold,
)
from .editor import ChangeEvent, FragmentContext, SubtitleEditor
from .errors import (
    InvalidFormatError,
    InvalidTimecodeError,
    IssueType,
    SubtitleError,
    ValidationIssue,
    ValidationResult,
)
from .interop import from_ssafile, to_ssafile
from .models import (
    ChangeType,
    ConversionOptions,
    EditorSettings,
    RenderTarget,
    SearchOptions,
    SubtitleFormat,
    ValidationOptions,
)
from .render import HtmlRenderOptions, JsonRenderOptions, render_html, render_json
from .universal import (
    SubtitleStats,
    clone_universal,
    create_default_style,
    from_universal,
    get_stats,
    json_to_universal,
    merge_metadata,
    to_universal,
    universal_to_json,
    universal_to_legacy_json,
)
from .utils.timestamps import from_ms, to_ms

__version__ = "1.0.0"

__all__ = [
    # Document model
    'AssCueData',
    'CsvCueData',
    'Cue',
    'CueFormatData',
    'Metadata',
    'Style',
    'SubtitleDocument',
    'VttCueData',
    'validate_universal',
    # Conversion
    'SUPPORTED_FORMATS',
    'convert',
    'format_from_universal',
    'parse_to_universal',
    'resolve_format',
    'validate',
    # Detection
    'DetectionResult',
    'FormatDetector',
    'detect_format',
    'detect_format_simple',
    'detect_with_threshold',
    # Universal helpers
    'SubtitleStats',
    'clone_universal',
    'create_default_style',
    'from_universal',
    'get_stats',
    'json_to_universal',
    'merge_metadata',
    'to_universal',
    'universal_to_json',
    'universal_to_legacy_json',
    # Editing
    'ChangeEvent',
    'FragmentContext',
    'SubtitleEditor',
    # Rendering
    'HtmlRenderOptions',
    'JsonRenderOptions',
    'render_html',
    'render_json',
    # Settings and enums
    'ChangeType',
    'ConversionOptions',
    'EditorSettings',
    'RenderTarget',
    'SearchOptions',
    'SubtitleFormat',
    'ValidationOptions',
    # Errors
    'InvalidFormatError',
    'InvalidTimecodeError',
    'IssueType',
    'SubtitleError',
    'ValidationIssue',
    'ValidationResult',
    # Interop and time codec
    'from_ms',
    'from_ssafile',
    'to_ms',
    'to_ssafile',
]
