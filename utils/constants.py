"""
Shared constants and configurations for the subtitle dispatcher.

This module contains all the constants used across different modules including:
- Supported subtitle formats and extensions
- Stream handling and diagnostic defaults
- Default logging configuration values
"""

from dataclasses import dataclass
from typing import Tuple

# ============================================================================
# FILE FORMAT CONSTANTS
# ============================================================================

@dataclass(frozen=True)
class SubtitleFormat:
    """A subtitle dialect identified by its canonical name and file extension."""
    name: str
    extension: str  # Includes the leading dot, e.g. ".srt"

    def __str__(self) -> str:
        return f"{self.name} ({self.extension})"


SUBRIP_FORMAT = SubtitleFormat("SubRip", ".srt")
SUBVIEWER_FORMAT = SubtitleFormat("SubViewer", ".sub")
SUBSTATIONALPHA_FORMAT = SubtitleFormat("SubStationAlpha", ".ssa")
ADVANCED_SUBSTATIONALPHA_FORMAT = SubtitleFormat("AdvancedSubStationAlpha", ".ass")
WEBVTT_FORMAT = SubtitleFormat("WebVTT", ".vtt")

# Registration order of the bundled formats; the first one is the default
SUPPORTED_SUBTITLE_FORMATS: Tuple[SubtitleFormat, ...] = (
    SUBRIP_FORMAT,
    SUBVIEWER_FORMAT,
    SUBSTATIONALPHA_FORMAT,
    ADVANCED_SUBSTATIONALPHA_FORMAT,
    WEBVTT_FORMAT,
)

# ============================================================================
# ENCODING AND STREAM CONSTANTS
# ============================================================================

# Encoding used when the caller does not pass one
DEFAULT_ENCODING: str = "utf-8"

# UTF-8 BOM marker
UTF8_BOM: bytes = b"\xef\xbb\xbf"

# Byte order marks checked before falling back to charset detection
BOM_ENCODINGS: Tuple[Tuple[bytes, str], ...] = (
    (UTF8_BOM, "utf-8-sig"),
    (b"\xff\xfe", "utf-16"),
    (b"\xfe\xff", "utf-16"),
)

# Bytes sampled from a stream when sniffing its encoding
ENCODING_SAMPLE_SIZE: int = 64 * 1024

# Chunk size used when draining a non-seekable stream into memory
STREAM_COPY_CHUNK_SIZE: int = 64 * 1024

# ============================================================================
# DIAGNOSTIC CONSTANTS
# ============================================================================

# Number of leading characters included in a failed-parse report
PREVIEW_CHAR_LIMIT: int = 500

PREVIEW_HEADER: str = "Beginning of subtitle stream:"

# ============================================================================
# DEFAULT CONFIGURATION VALUES
# ============================================================================

# Default log format
DEFAULT_LOG_FORMAT: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_LOG_DATE_FORMAT: str = '%Y-%m-%d %H:%M:%S'

# Root logger name shared by the CLI and the library modules
LOGGER_NAME: str = "subtitle_dispatcher"

# Application metadata
APP_NAME: str = "Subtitle Dispatcher"
APP_VERSION: str = "1.0.0"
APP_DESCRIPTION: str = """
Identify the format of subtitle files and extract their timed entries:
- SubRip, SubViewer, SubStation Alpha and WebVTT dialects
- Extension-based format hints with fallback to the other parsers
- Works on files, pipes and other non-seekable streams
"""
