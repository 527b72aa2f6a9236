"""
Registry of subtitle formats and the parsers that read them.

The registry is an immutable, ordered catalog built once and handed to the
dispatcher. Its first entry is the default format used when a file name
gives no usable hint.
"""

import os
from typing import Iterable, Optional, Tuple
from utils.constants import (
    SubtitleFormat,
    SUBRIP_FORMAT,
    SUBVIEWER_FORMAT,
    SUBSTATIONALPHA_FORMAT,
    ADVANCED_SUBSTATIONALPHA_FORMAT,
    WEBVTT_FORMAT,
    SUPPORTED_SUBTITLE_FORMATS,
)
from utils.logging_config import get_logger
from core.errors import UnsupportedFormatError
from core.subtitle_formats import (
    SubtitleParser,
    SubRipParser,
    SubViewerParser,
    SubStationAlphaParser,
    WebVTTParser,
)

logger = get_logger(__name__)

RegistryEntry = Tuple[SubtitleFormat, SubtitleParser]


class FormatRegistry:
    """Ordered, read-only mapping of subtitle formats to parsers."""

    def __init__(self, entries: Iterable[RegistryEntry]):
        """
        Build a registry from (format, parser) pairs.

        Args:
            entries: Pairs in priority order; the first is the default format

        Raises:
            ValueError: If no entries are given or two formats share a name
        """
        self._entries: Tuple[RegistryEntry, ...] = tuple(entries)
        if not self._entries:
            raise ValueError("A format registry needs at least one format")

        names = [subtitle_format.name for subtitle_format, _ in self._entries]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate subtitle format names: {', '.join(duplicates)}")

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def entries(self) -> Tuple[RegistryEntry, ...]:
        """Get all (format, parser) pairs in registration order."""
        return self._entries

    def list_formats(self) -> Tuple[SubtitleFormat, ...]:
        """Get the registered formats in registration order."""
        return tuple(subtitle_format for subtitle_format, _ in self._entries)

    @property
    def default_format(self) -> SubtitleFormat:
        """The first registered format."""
        return self._entries[0][0]

    def get_parser(self, subtitle_format: SubtitleFormat) -> SubtitleParser:
        """
        Get the parser registered for a format.

        Raises:
            UnsupportedFormatError: If the format is not registered
        """
        for registered, parser in self._entries:
            if registered == subtitle_format:
                return parser
        raise UnsupportedFormatError(f"Unsupported subtitle format: {subtitle_format}")

    def find_format(self, name: str) -> SubtitleFormat:
        """
        Look up a format by its canonical name.

        Raises:
            UnsupportedFormatError: If no format has that name
        """
        for registered, _ in self._entries:
            if registered.name == name:
                return registered
        known = ', '.join(f.name for f in self.list_formats())
        raise UnsupportedFormatError(f"Unknown subtitle format '{name}' (known formats: {known})")

    def most_likely_format(self, file_name: Optional[str]) -> SubtitleFormat:
        """
        Guess the format of a file from its extension.

        Most likely because a ".sub" file is sometimes SubRip, for example.
        Extensions are compared exactly, including case. Unknown or missing
        extensions give the default format; this method never fails.

        Args:
            file_name: File name or path

        Returns:
            The first format registered for the extension, else the default

        Example:
            >>> registry.most_likely_format("movie.vtt").name
            'WebVTT'
        """
        extension = self._extension_of(file_name)
        if extension:
            for registered, _ in self._entries:
                if registered.extension == extension:
                    return registered

        logger.debug(f"No format registered for extension '{extension}', using {self.default_format.name}")
        return self.default_format

    @staticmethod
    def _extension_of(file_name: Optional[str]) -> str:
        """Trailing ".ext" of the base name; a bare ".sub" counts as an extension."""
        base_name = os.path.basename(file_name or '')
        dot = base_name.rfind('.')
        if dot == -1 or dot == len(base_name) - 1:
            return ''
        return base_name[dot:]


def build_default_registry() -> FormatRegistry:
    """
    Create the registry of bundled formats.

    Formats are registered in SUPPORTED_SUBTITLE_FORMATS order, so SubRip is
    the default format. Both SubStation Alpha variants share one parser.
    """
    substation_parser = SubStationAlphaParser(SUBSTATIONALPHA_FORMAT)
    parsers = {
        SUBRIP_FORMAT: SubRipParser(SUBRIP_FORMAT),
        SUBVIEWER_FORMAT: SubViewerParser(SUBVIEWER_FORMAT),
        SUBSTATIONALPHA_FORMAT: substation_parser,
        ADVANCED_SUBSTATIONALPHA_FORMAT: substation_parser,
        WEBVTT_FORMAT: WebVTTParser(WEBVTT_FORMAT),
    }
    return FormatRegistry([(subtitle_format, parsers[subtitle_format])
                           for subtitle_format in SUPPORTED_SUBTITLE_FORMATS])
