"""
Encoding detection utilities for subtitle streams.

The dispatcher always parses with an explicit encoding. This module lets
front ends pick one when the user does not know it: byte order marks are
checked first, then charset-normalizer inspects a sample of the content.
"""

from typing import BinaryIO, Optional
from charset_normalizer import from_bytes
from utils.constants import BOM_ENCODINGS, DEFAULT_ENCODING, ENCODING_SAMPLE_SIZE
from utils.logging_config import get_logger
from utils.stream_utils import rewind

logger = get_logger(__name__)


class EncodingDetector:
    """Guesses the character encoding of subtitle content."""

    @staticmethod
    def detect_bom(data: bytes) -> Optional[str]:
        """
        Get the encoding implied by a byte order mark.

        Args:
            data: Leading bytes of the content

        Returns:
            Encoding name, or None if the data has no known BOM
        """
        for bom, encoding in BOM_ENCODINGS:
            if data.startswith(bom):
                return encoding
        return None

    @staticmethod
    def detect_encoding(data: bytes, default: str = DEFAULT_ENCODING) -> str:
        """
        Detect the encoding of raw subtitle bytes.

        Args:
            data: Raw content (or a leading sample of it)
            default: Encoding returned when detection is inconclusive

        Returns:
            Encoding name in lower case
        """
        bom_encoding = EncodingDetector.detect_bom(data)
        if bom_encoding:
            logger.debug(f"Byte order mark found, using {bom_encoding}")
            return bom_encoding

        if not data:
            return default

        best = from_bytes(data).best()
        if best is None or not best.encoding:
            logger.warning(f"Could not detect encoding, falling back to {default}")
            return default

        logger.debug(f"Auto-detected encoding: {best.encoding}")
        return best.encoding.lower()

    @staticmethod
    def detect_stream_encoding(stream: BinaryIO, sample_size: int = ENCODING_SAMPLE_SIZE,
                               default: str = DEFAULT_ENCODING) -> str:
        """
        Detect the encoding of a seekable stream from its first bytes.

        The stream is rewound before and after sampling.

        Args:
            stream: Seekable binary stream
            sample_size: Number of bytes inspected
            default: Encoding returned when detection is inconclusive

        Returns:
            Encoding name
        """
        rewind(stream)
        sample = stream.read(sample_size)
        rewind(stream)
        return EncodingDetector.detect_encoding(sample, default)
