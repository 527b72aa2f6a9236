"""
Utility modules.

This package contains shared utility functions and configurations:
- Stream buffering and diagnostic previews
- Logging configuration
- Shared constants and the SubtitleFormat value type
"""

from .logging_config import setup_logging, get_logger
from .stream_utils import ensure_seekable, is_readable, read_preview
from .constants import (
    SubtitleFormat,
    SUBRIP_FORMAT,
    SUBVIEWER_FORMAT,
    SUBSTATIONALPHA_FORMAT,
    ADVANCED_SUBSTATIONALPHA_FORMAT,
    WEBVTT_FORMAT,
    SUPPORTED_SUBTITLE_FORMATS,
    DEFAULT_ENCODING,
    PREVIEW_CHAR_LIMIT,
    APP_NAME,
    APP_VERSION,
    APP_DESCRIPTION,
)

__all__ = [
    'setup_logging',
    'get_logger',
    'ensure_seekable',
    'is_readable',
    'read_preview',
    'SubtitleFormat',
    'SUBRIP_FORMAT',
    'SUBVIEWER_FORMAT',
    'SUBSTATIONALPHA_FORMAT',
    'ADVANCED_SUBSTATIONALPHA_FORMAT',
    'WEBVTT_FORMAT',
    'SUPPORTED_SUBTITLE_FORMATS',
    'DEFAULT_ENCODING',
    'PREVIEW_CHAR_LIMIT',
    'APP_NAME',
    'APP_VERSION',
    'APP_DESCRIPTION',
]
