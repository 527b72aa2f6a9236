"""
Subtitle entries and format-specific parsers.

This module provides:
- The SubtitleEntry data structure returned by every parser
- The SubtitleParser contract used by the dispatcher
- Parsers for SubRip, SubViewer, SubStation Alpha/ASS and WebVTT streams

Parsers read a binary stream positioned at its start, decode it with the
encoding they are given and either return the entries in file order or
raise SubtitleFormatError. They never close the stream.
"""

import re
from dataclasses import dataclass, field
from typing import BinaryIO, Dict, List, Optional, Tuple
from utils.constants import SubtitleFormat
from utils.logging_config import get_logger
from core.errors import SubtitleFormatError
from core.timing_utils import TimeConverter

logger = get_logger(__name__)

_BLOCK_SEPARATOR = re.compile(r'\n\s*\n')


@dataclass(frozen=True)
class SubtitleEntry:
    """A single timed caption."""
    start_time: int  # Start time in milliseconds
    end_time: int    # End time in milliseconds
    lines: Tuple[str, ...] = field(default_factory=tuple)
    index: Optional[int] = None  # Ordinal from the file, if the dialect has one

    @property
    def start(self) -> float:
        """Start time in seconds."""
        return self.start_time / 1000.0

    @property
    def end(self) -> float:
        """End time in seconds."""
        return self.end_time / 1000.0

    @property
    def text(self) -> str:
        return '\n'.join(self.lines)

    def duration(self) -> float:
        """Get the duration of this entry in seconds."""
        return (self.end_time - self.start_time) / 1000.0

    def format_time_range(self, format_type: str = 'vtt') -> str:
        """
        Format the time range as a string.

        Args:
            format_type: Timecode style, 'srt' or 'vtt'

        Returns:
            Formatted time range string
        """
        start_str = TimeConverter.milliseconds_to_time(self.start_time, format_type)
        end_str = TimeConverter.milliseconds_to_time(self.end_time, format_type)
        return f"{start_str} --> {end_str}"

    def to_dict(self) -> Dict:
        return {
            'index': self.index,
            'start_time': self.start_time,
            'end_time': self.end_time,
            'lines': list(self.lines),
        }


class SubtitleParser:
    """Base class for subtitle format parsers."""

    format: SubtitleFormat = None

    def parse_stream(self, stream: BinaryIO, encoding: str) -> List[SubtitleEntry]:
        """
        Parse a subtitle stream.

        Args:
            stream: Binary stream positioned at its start
            encoding: Character encoding of the stream

        Returns:
            Entries in file order

        Raises:
            SubtitleFormatError: If the content does not match the dialect
        """
        raise NotImplementedError

    @staticmethod
    def read_text(stream: BinaryIO, encoding: str) -> str:
        """
        Decode the whole stream with the given encoding.

        A leading byte order mark is dropped and line endings are normalized
        to ``\\n``. The stream is left open.

        Raises:
            UnicodeDecodeError: If the bytes are not valid in ``encoding``
        """
        content = stream.read().decode(encoding)
        if content.startswith('\ufeff'):
            content = content[1:]
        return content.replace('\r\n', '\n').replace('\r', '\n')

    @staticmethod
    def clean_subtitle_text(text: str, remove_formatting: bool = False) -> str:
        """
        Clean subtitle text by removing or normalizing formatting codes.

        Args:
            text: Raw subtitle text
            remove_formatting: If True, strip all formatting codes

        Returns:
            Cleaned text
        """
        # Replace ASS newlines with actual newlines
        text = text.replace('\\N', '\n').replace('\\n', '\n')

        if remove_formatting:
            # Remove ASS override blocks
            text = re.sub(r'\{[^}]*\}', '', text)
            # Remove HTML tags
            text = re.sub(r'<[^>]+>', '', text)
            text = text.strip()

        return text

    @staticmethod
    def split_lines(text: str) -> Tuple[str, ...]:
        """Split text into stripped, non-empty lines."""
        return tuple(line.strip() for line in text.split('\n') if line.strip())

    def _require_entries(self, entries: List[SubtitleEntry]) -> List[SubtitleEntry]:
        if not entries:
            raise SubtitleFormatError(f"Parsing as {self.format.name} returned no subtitle entries")
        logger.debug(f"Parsed {len(entries)} entries as {self.format.name}")
        return entries


class SubRipParser(SubtitleParser):
    """Parser for SubRip (.srt) subtitles."""

    def __init__(self, subtitle_format: SubtitleFormat):
        self.format = subtitle_format

    def parse_stream(self, stream: BinaryIO, encoding: str) -> List[SubtitleEntry]:
        content = self.read_text(stream, encoding)

        # Split into subtitle blocks (separated by blank lines)
        blocks = _BLOCK_SEPARATOR.split(content.strip())
        entries = []

        for block_idx, block in enumerate(blocks):
            lines = [line for line in block.split('\n') if line.strip()]

            time_line_idx = next(
                (i for i, line in enumerate(lines) if '-->' in line), -1
            )
            if time_line_idx == -1:
                logger.debug(f"No timing line in SRT block {block_idx}")
                continue

            try:
                start_ms, end_ms = TimeConverter.parse_srt_timestamp(lines[time_line_idx])
            except ValueError as e:
                logger.debug(f"Invalid timestamp in SRT block {block_idx}: {e}")
                continue

            index = None
            if time_line_idx > 0 and lines[time_line_idx - 1].strip().isdigit():
                index = int(lines[time_line_idx - 1].strip())

            text_lines = tuple(line.strip() for line in lines[time_line_idx + 1:])
            if not text_lines:
                logger.debug(f"No text in SRT block {block_idx}")
                continue
            entries.append(SubtitleEntry(start_ms, end_ms, text_lines, index))

        return self._require_entries(entries)


class SubViewerParser(SubtitleParser):
    """
    Parser for SubViewer 2.0 (.sub) subtitles.

    Header tags such as ``[INFORMATION]`` precede the first timing line and
    are ignored. Each cue is a ``HH:MM:SS.cc,HH:MM:SS.cc`` line followed by
    text up to the next blank line, with ``[br]`` marking line breaks.
    """

    LINE_BREAK = re.compile(r'\[br\]', re.IGNORECASE)

    def __init__(self, subtitle_format: SubtitleFormat):
        self.format = subtitle_format

    def parse_stream(self, stream: BinaryIO, encoding: str) -> List[SubtitleEntry]:
        lines = self.read_text(stream, encoding).split('\n')

        first_cue = next(
            (i for i, line in enumerate(lines) if TimeConverter.is_subviewer_timestamp(line)), None
        )
        if first_cue is None:
            raise SubtitleFormatError("Stream is not in a valid SubViewer format: no timing line found")

        entries = []
        current = None
        text_lines: List[str] = []

        for line in lines[first_cue:] + ['']:
            if current is None:
                if TimeConverter.is_subviewer_timestamp(line):
                    current = TimeConverter.parse_subviewer_timestamp(line)
                    text_lines = []
                continue

            if line.strip():
                text_lines.extend(part.strip() for part in self.LINE_BREAK.split(line) if part.strip())
                continue

            start_ms, end_ms = current
            if text_lines:
                entries.append(SubtitleEntry(start_ms, end_ms, tuple(text_lines)))
            current = None

        return self._require_entries(entries)


class SubStationAlphaParser(SubtitleParser):
    """Parser for SubStation Alpha (.ssa) and Advanced SubStation Alpha (.ass)."""

    DEFAULT_FIELDS = ['layer', 'start', 'end', 'style', 'name',
                      'marginl', 'marginr', 'marginv', 'effect', 'text']

    def __init__(self, subtitle_format: SubtitleFormat):
        self.format = subtitle_format

    def parse_stream(self, stream: BinaryIO, encoding: str) -> List[SubtitleEntry]:
        content = self.read_text(stream, encoding)

        entries = []
        format_fields: List[str] = []
        current_section = None
        saw_events = False

        for line in content.split('\n'):
            stripped = line.strip()

            if re.match(r'^\[Events\]', stripped, re.IGNORECASE):
                current_section = 'events'
                saw_events = True
                continue
            elif re.match(r'^\[.*\]$', stripped):
                current_section = 'other'
                continue

            if current_section != 'events':
                continue

            lowered = stripped.lower()
            if lowered.startswith('format:'):
                format_fields = [f.strip().lower() for f in stripped.split(':', 1)[1].split(',')]
            elif lowered.startswith('dialogue:'):
                try:
                    entry = self._parse_dialogue_line(stripped, format_fields or self.DEFAULT_FIELDS)
                except ValueError as e:
                    logger.debug(f"Failed to parse dialogue line: {stripped} - {e}")
                    continue
                if entry.lines:
                    entries.append(entry)

        if not saw_events:
            raise SubtitleFormatError("Stream is not in a valid SubStation Alpha format: no [Events] section")
        return self._require_entries(entries)

    def _parse_dialogue_line(self, line: str, format_fields: List[str]) -> SubtitleEntry:
        """
        Parse a dialogue line using the field order from the Format line.

        Raises:
            ValueError: If the line lacks timing fields or they are invalid
        """
        content = line.split(':', 1)[1]

        # Split by comma, but preserve commas in the text field
        parts = content.split(',', len(format_fields) - 1)
        try:
            start_idx = format_fields.index('start')
            end_idx = format_fields.index('end')
            text_idx = format_fields.index('text')
        except ValueError:
            raise ValueError("Format line has no start/end/text fields")

        if max(start_idx, end_idx, text_idx) >= len(parts):
            raise ValueError("Dialogue line has fewer fields than its Format line")

        start_ms = TimeConverter.ass_time_to_milliseconds(parts[start_idx])
        end_ms = TimeConverter.ass_time_to_milliseconds(parts[end_idx])
        text = self.clean_subtitle_text(parts[text_idx], remove_formatting=True)

        return SubtitleEntry(start_ms, end_ms, self.split_lines(text))


class WebVTTParser(SubtitleParser):
    """Parser for WebVTT (.vtt) subtitles."""

    def __init__(self, subtitle_format: SubtitleFormat):
        self.format = subtitle_format

    def parse_stream(self, stream: BinaryIO, encoding: str) -> List[SubtitleEntry]:
        content = self.read_text(stream, encoding)

        if not content.startswith('WEBVTT'):
            raise SubtitleFormatError("Stream is not in a valid WebVTT format: missing WEBVTT header")

        # The first block is the header and its metadata
        blocks = _BLOCK_SEPARATOR.split(content.strip())[1:]
        entries = []

        for block in blocks:
            lines = [line for line in block.split('\n') if line.strip()]
            if not lines or lines[0].startswith(('NOTE', 'STYLE', 'REGION')):
                continue

            time_line_idx = next(
                (i for i, line in enumerate(lines) if '-->' in line), -1
            )
            if time_line_idx not in (0, 1):
                continue

            try:
                start_ms, end_ms = TimeConverter.parse_vtt_timestamp(lines[time_line_idx])
            except ValueError as e:
                logger.debug(f"Skipping WebVTT cue: {e}")
                continue

            index = None
            if time_line_idx == 1 and lines[0].strip().isdigit():
                index = int(lines[0].strip())

            text_lines = self.split_lines('\n'.join(lines[time_line_idx + 1:]))
            if text_lines:
                entries.append(SubtitleEntry(start_ms, end_ms, text_lines, index))

        return self._require_entries(entries)
