"""
Format resolution and parser dispatch.

The dispatcher takes a byte stream of unknown subtitle format, orders the
registered parsers around a format hint and tries them one by one against a
rewindable copy of the stream. The first parser that returns entries wins.
When every candidate fails, the error carries each candidate's failure and
a preview of the stream's first characters.
"""

import codecs
import io
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, List, Optional, Sequence, Tuple, Union
from utils.constants import DEFAULT_ENCODING, PREVIEW_CHAR_LIMIT, SubtitleFormat
from utils.logging_config import get_logger
from utils.stream_utils import ensure_seekable, is_readable, read_preview, rewind
from core.errors import (
    AllParsersFailed,
    CandidateParseFailed,
    InvalidEncodingError,
    InvalidStreamError,
    SubtitleFormatError,
)
from core.format_registry import FormatRegistry, RegistryEntry, build_default_registry
from core.subtitle_formats import SubtitleEntry, SubtitleParser

logger = get_logger(__name__)


def ordinal_compare(left: str, right: str) -> int:
    """
    Compare two strings by code point, returning a signed distance.

    The result is the difference between the first pair of differing
    characters, or the length difference when one string is a prefix of the
    other. Zero means the strings are equal.

    Example:
        >>> ordinal_compare("SubViewer", "SubRip")
        4
    """
    for left_char, right_char in zip(left, right):
        if left_char != right_char:
            return ord(left_char) - ord(right_char)
    return len(left) - len(right)


@dataclass(frozen=True)
class ParseAttempt:
    """Outcome of running one candidate parser."""
    format: SubtitleFormat
    entries: Optional[List[SubtitleEntry]] = None
    error: Optional[Exception] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class SubtitleDispatcher:
    """Finds the parser that understands a subtitle stream and runs it."""

    def __init__(self, registry: Optional[FormatRegistry] = None,
                 stop_on_first_failure: bool = False,
                 preview_chars: int = PREVIEW_CHAR_LIMIT):
        """
        Initialize the dispatcher.

        Args:
            registry: Formats and parsers to dispatch to (bundled ones if None)
            stop_on_first_failure: Abort on the first rejecting parser instead
                of falling back to the remaining candidates
            preview_chars: Number of characters included in failure previews
        """
        self.registry = registry if registry is not None else build_default_registry()
        self.stop_on_first_failure = stop_on_first_failure
        self.preview_chars = preview_chars

    def detect_format(self, file_name: Optional[str]) -> SubtitleFormat:
        """Get the most likely format of a file from its name."""
        return self.registry.most_likely_format(file_name)

    def order_candidates(self, hint: Optional[SubtitleFormat] = None) -> Tuple[RegistryEntry, ...]:
        """
        Order the registered parsers so the hinted format is tried first.

        Candidates are sorted by the absolute ordinal distance between their
        name and the hint's name; ties keep registration order.

        Args:
            hint: Preferred format, the registry default when None

        Returns:
            Fresh tuple of (format, parser) pairs
        """
        hint = hint or self.registry.default_format
        return tuple(sorted(
            self.registry.entries(),
            key=lambda entry: abs(ordinal_compare(entry[0].name, hint.name))
        ))

    def parse(self, stream: BinaryIO, encoding: str = DEFAULT_ENCODING,
              hint: Optional[SubtitleFormat] = None) -> List[SubtitleEntry]:
        """
        Parse a subtitle stream, trying the hinted format first.

        Args:
            stream: Readable binary stream; it does not need to be seekable
            encoding: Character encoding of the stream
            hint: Format to try first, the registry default when None

        Returns:
            Entries produced by the first parser that accepted the stream

        Raises:
            InvalidStreamError: If the stream is unreadable, text-mode or empty
            InvalidEncodingError: If the encoding is unknown
            CandidateParseFailed: If a parser fails and stop_on_first_failure is set
            AllParsersFailed: If no parser accepted the stream

        Example:
            >>> dispatcher = SubtitleDispatcher()
            >>> with open("movie.sub", "rb") as f:
            ...     entries = dispatcher.parse(f, hint=dispatcher.detect_format("movie.sub"))
        """
        return self.parse_with_candidates(stream, encoding, self.order_candidates(hint))

    def parse_with_candidates(self, stream: BinaryIO, encoding: str,
                              candidates: Sequence[RegistryEntry]) -> List[SubtitleEntry]:
        """
        Parse a subtitle stream trying the given candidates in order.

        Args:
            stream: Readable binary stream
            encoding: Character encoding of the stream
            candidates: Ordered (format, parser) pairs to try

        Returns:
            Entries produced by the first accepting parser
        """
        encoding = self._validate_encoding(encoding)
        if isinstance(stream, io.TextIOBase):
            raise InvalidStreamError("Cannot parse a text stream; open the subtitle file in binary mode")
        if not is_readable(stream):
            raise InvalidStreamError("Cannot parse a non-readable stream")

        seekable_stream = ensure_seekable(stream)
        try:
            return self._dispatch(seekable_stream, encoding, candidates)
        finally:
            if seekable_stream is not stream:
                seekable_stream.close()

    def parse_file(self, file_path: Union[str, Path], encoding: str = DEFAULT_ENCODING,
                   hint: Optional[SubtitleFormat] = None) -> List[SubtitleEntry]:
        """
        Parse a subtitle file, using its extension as the format hint.

        Args:
            file_path: Path to the subtitle file
            encoding: Character encoding of the file
            hint: Format to try first; detected from the file name when None

        Returns:
            Parsed subtitle entries
        """
        file_path = Path(file_path)
        hint = hint or self.detect_format(file_path.name)
        logger.debug(f"Parsing {file_path.name} with hint {hint.name}")
        with open(file_path, 'rb') as f:
            return self.parse(f, encoding, hint)

    def _dispatch(self, stream: BinaryIO, encoding: str,
                  candidates: Sequence[RegistryEntry]) -> List[SubtitleEntry]:
        rewind(stream)
        if not stream.read(1):
            raise InvalidStreamError("Cannot parse an empty stream")

        failures: List[CandidateParseFailed] = []
        preview = None

        for subtitle_format, parser in candidates:
            attempt = self._attempt(stream, encoding, subtitle_format, parser)
            if attempt.succeeded:
                logger.info(f"Parsed {len(attempt.entries)} entries as {subtitle_format.name}")
                return attempt.entries

            if preview is None:
                preview = read_preview(stream, encoding, self.preview_chars)
            failure = CandidateParseFailed(subtitle_format, attempt.error, preview)

            if self.stop_on_first_failure:
                logger.warning(f"{subtitle_format.name} parser failed, not trying other formats")
                raise failure from attempt.error

            logger.info(f"{subtitle_format.name} parser failed, trying next format: {attempt.error}")
            failures.append(failure)

        if preview is None:
            preview = read_preview(stream, encoding, self.preview_chars)
        logger.error(f"All {len(failures)} subtitle parsers failed")
        raise AllParsersFailed(failures, preview)

    def _attempt(self, stream: BinaryIO, encoding: str, subtitle_format: SubtitleFormat,
                 parser: SubtitleParser) -> ParseAttempt:
        """Run one parser from the start of the stream and record the outcome."""
        logger.debug(f"Trying {subtitle_format.name} parser")
        try:
            rewind(stream)
            entries = parser.parse_stream(stream, encoding)
        except Exception as e:
            return ParseAttempt(subtitle_format, error=e)

        if not entries:
            error = SubtitleFormatError(f"{subtitle_format.name} parser returned no subtitle entries")
            return ParseAttempt(subtitle_format, error=error)
        return ParseAttempt(subtitle_format, entries=list(entries))

    @staticmethod
    def _validate_encoding(encoding: Optional[str]) -> str:
        encoding = encoding or DEFAULT_ENCODING
        try:
            name = codecs.lookup(encoding).name
            # Rejects bytes-to-bytes codecs such as base64 and rot13
            b"".decode(encoding)
        except LookupError:
            raise InvalidEncodingError(f"Unknown or non-text encoding: {encoding}")
        return name
