"""Exceptions raised while resolving and parsing subtitle streams."""

from typing import Sequence, Tuple
from utils.constants import SubtitleFormat


class SubtitleDispatchError(ValueError):
    """Base class for all subtitle dispatch failures."""


class InvalidStreamError(SubtitleDispatchError):
    """Raised when the input stream is not readable, not binary, or empty."""


class InvalidEncodingError(SubtitleDispatchError):
    """Raised when the requested character encoding is unknown."""


class UnsupportedFormatError(SubtitleDispatchError):
    """Raised when a format is not present in the registry."""


class SubtitleFormatError(SubtitleDispatchError):
    """Raised by a parser when the content does not match its dialect."""


class CandidateParseFailed(SubtitleDispatchError):
    """A single format parser rejected the stream."""

    def __init__(self, subtitle_format: SubtitleFormat, cause: BaseException, preview: str):
        self.format = subtitle_format
        self.cause = cause
        self.preview = preview
        super().__init__(
            f"Error was thrown when parsing subtitles as {subtitle_format.name}: "
            f"{type(cause).__name__}: {cause}\n{preview}"
        )


class AllParsersFailed(SubtitleDispatchError):
    """Every candidate parser rejected the stream."""

    def __init__(self, failures: Sequence[CandidateParseFailed], preview: str):
        self.failures: Tuple[CandidateParseFailed, ...] = tuple(failures)
        self.preview = preview
        attempted = ', '.join(failure.format.name for failure in self.failures) or 'none'
        super().__init__(
            f"All the subtitle parsers failed to parse the stream (tried: {attempted})\n{preview}"
        )

    @property
    def formats(self) -> Tuple[SubtitleFormat, ...]:
        """Formats in the order they were attempted."""
        return tuple(failure.format for failure in self.failures)
