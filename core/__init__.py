"""
Core subtitle dispatch modules.

This package contains the fundamental components for subtitle parsing:
- Subtitle entries and format parsers (SubRip, SubViewer, SSA/ASS, WebVTT)
- The format registry and the dispatcher that tries parsers in order
- Encoding detection and timecode utilities
"""

from .errors import (
    SubtitleDispatchError,
    InvalidStreamError,
    InvalidEncodingError,
    UnsupportedFormatError,
    SubtitleFormatError,
    CandidateParseFailed,
    AllParsersFailed,
)
from .subtitle_formats import (
    SubtitleEntry,
    SubtitleParser,
    SubRipParser,
    SubViewerParser,
    SubStationAlphaParser,
    WebVTTParser,
)
from .format_registry import FormatRegistry, build_default_registry
from .dispatcher import SubtitleDispatcher, ParseAttempt, ordinal_compare
from .encoding_detection import EncodingDetector
from .timing_utils import TimeConverter

__all__ = [
    'SubtitleDispatchError',
    'InvalidStreamError',
    'InvalidEncodingError',
    'UnsupportedFormatError',
    'SubtitleFormatError',
    'CandidateParseFailed',
    'AllParsersFailed',
    'SubtitleEntry',
    'SubtitleParser',
    'SubRipParser',
    'SubViewerParser',
    'SubStationAlphaParser',
    'WebVTTParser',
    'FormatRegistry',
    'build_default_registry',
    'SubtitleDispatcher',
    'ParseAttempt',
    'ordinal_compare',
    'EncodingDetector',
    'TimeConverter',
]
