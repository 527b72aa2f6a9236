"""
Timecode parsing and formatting utilities for subtitle dialects.

This module provides functions for:
- Parsing SubRip, SubViewer, SubStation Alpha and WebVTT timecodes
- Converting timecodes to and from integer milliseconds
"""

import re
from typing import Tuple
from utils.logging_config import get_logger

logger = get_logger(__name__)

_SRT_TIME = r'(\d+):(\d{1,2}):(\d{1,2})[,\.](\d{1,3})'
_SRT_TIMESTAMP_RE = re.compile(rf'^\s*{_SRT_TIME}\s*-->\s*{_SRT_TIME}')

_SUBVIEWER_TIME = r'(\d{1,2}):(\d{2}):(\d{2})\.(\d{2,3})'
_SUBVIEWER_TIMESTAMP_RE = re.compile(rf'^\s*{_SUBVIEWER_TIME}\s*,\s*{_SUBVIEWER_TIME}\s*$')

_VTT_TIME = r'(?:(\d+):)?(\d{2}):(\d{2})\.(\d{3})'
_VTT_TIMESTAMP_RE = re.compile(rf'^\s*{_VTT_TIME}\s+-->\s+{_VTT_TIME}(?:\s+.*)?$')

_ASS_TIME_RE = re.compile(r'^\s*(\d+):(\d{1,2}):(\d{1,2})(?:\.(\d{1,3}))?\s*$')


class TimeConverter:
    """Handles timecode conversions for the supported subtitle dialects."""

    @staticmethod
    def to_milliseconds(hours, minutes, seconds, fraction: str = '') -> int:
        """
        Combine timecode components into milliseconds.

        The fraction is read as decimal digits, so ``"5"`` is 500 ms,
        ``"50"`` is 500 ms and ``"050"`` is 50 ms.

        Args:
            hours: Hours component
            minutes: Minutes component
            seconds: Seconds component
            fraction: Digits after the decimal separator

        Returns:
            Time in milliseconds

        Raises:
            ValueError: If minutes or seconds are out of range
        """
        h, m, s = int(hours or 0), int(minutes), int(seconds)
        if m >= 60 or s >= 60:
            raise ValueError(f"Invalid timecode components: {hours}:{minutes}:{seconds}")
        ms = int((fraction or '0').ljust(3, '0')[:3])
        return ((h * 60 + m) * 60 + s) * 1000 + ms

    @staticmethod
    def parse_srt_timestamp(timestamp_line: str) -> Tuple[int, int]:
        """
        Parse a SubRip timing line into start and end milliseconds.

        Args:
            timestamp_line: Line such as "00:01:23,456 --> 00:01:26,789"

        Returns:
            Tuple of (start_ms, end_ms)

        Raises:
            ValueError: If the line is not a SubRip timing line

        Example:
            >>> TimeConverter.parse_srt_timestamp("00:01:23,456 --> 00:01:26,789")
            (83456, 86789)
        """
        match = _SRT_TIMESTAMP_RE.match(timestamp_line)
        if not match:
            raise ValueError(f"Invalid SRT timestamp format: {timestamp_line}")
        groups = match.groups()
        return TimeConverter.to_milliseconds(*groups[:4]), TimeConverter.to_milliseconds(*groups[4:])

    @staticmethod
    def parse_subviewer_timestamp(timestamp_line: str) -> Tuple[int, int]:
        """
        Parse a SubViewer timing line such as "00:00:01.50,00:00:03.00".

        Raises:
            ValueError: If the line is not a SubViewer timing line
        """
        match = _SUBVIEWER_TIMESTAMP_RE.match(timestamp_line)
        if not match:
            raise ValueError(f"Invalid SubViewer timestamp format: {timestamp_line}")
        groups = match.groups()
        return TimeConverter.to_milliseconds(*groups[:4]), TimeConverter.to_milliseconds(*groups[4:])

    @staticmethod
    def parse_vtt_timestamp(timestamp_line: str) -> Tuple[int, int]:
        """
        Parse a WebVTT cue timing line; trailing cue settings are ignored.

        Raises:
            ValueError: If the line is not a WebVTT timing line
        """
        match = _VTT_TIMESTAMP_RE.match(timestamp_line)
        if not match:
            raise ValueError(f"Invalid WebVTT timestamp format: {timestamp_line}")
        groups = match.groups()
        return TimeConverter.to_milliseconds(*groups[:4]), TimeConverter.to_milliseconds(*groups[4:])

    @staticmethod
    def is_subviewer_timestamp(line: str) -> bool:
        return bool(_SUBVIEWER_TIMESTAMP_RE.match(line))

    @staticmethod
    def ass_time_to_milliseconds(time_str: str) -> int:
        """
        Convert a SubStation Alpha time ("H:MM:SS.cc") to milliseconds.

        Raises:
            ValueError: If the time string is invalid
        """
        match = _ASS_TIME_RE.match(time_str)
        if not match:
            logger.debug(f"Failed to parse ASS time string '{time_str}'")
            raise ValueError(f"Invalid time format: {time_str}")
        return TimeConverter.to_milliseconds(*match.groups())

    @staticmethod
    def milliseconds_to_time(ms: int, format_type: str = 'srt') -> str:
        """
        Convert milliseconds to a timecode string.

        Args:
            ms: Time in milliseconds
            format_type: 'srt' for comma milliseconds, anything else gives 'vtt' style

        Returns:
            Formatted time string

        Example:
            >>> TimeConverter.milliseconds_to_time(3825678, "srt")
            '01:03:45,678'
        """
        if ms < 0:
            ms = 0
        hours = ms // 3600000
        minutes = (ms // 60000) % 60
        seconds = (ms // 1000) % 60
        millis = ms % 1000

        if format_type == 'srt':
            return f"{hours:02d}:{minutes:02d}:{seconds:02d},{millis:03d}"
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}.{millis:03d}"
