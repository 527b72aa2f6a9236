"""
Stream helpers for subtitle parsing.

This module provides:
- Readability checks for binary streams
- Buffering of non-seekable streams into rewindable memory copies
- Bounded previews of a stream's leading content for error reports
"""

import codecs
import io
import shutil
from typing import BinaryIO
from .constants import DEFAULT_ENCODING, PREVIEW_CHAR_LIMIT, PREVIEW_HEADER, STREAM_COPY_CHUNK_SIZE
from .logging_config import get_logger

logger = get_logger(__name__)


def is_readable(stream) -> bool:
    """
    Check whether a stream can currently be read from.

    Args:
        stream: Any file-like object

    Returns:
        False for closed streams, streams reporting ``readable() == False``
        and objects without a ``read`` method
    """
    if stream is None or not hasattr(stream, 'read'):
        return False
    if getattr(stream, 'closed', False):
        return False
    readable = getattr(stream, 'readable', None)
    if readable is None:
        return True
    try:
        return bool(readable())
    except ValueError:
        # io objects raise ValueError on operations after close()
        return False


def is_seekable(stream) -> bool:
    """Check whether a stream supports seek/tell."""
    seekable = getattr(stream, 'seekable', None)
    if seekable is None:
        return False
    try:
        return bool(seekable())
    except ValueError:
        return False


def ensure_seekable(stream: BinaryIO, chunk_size: int = STREAM_COPY_CHUNK_SIZE) -> BinaryIO:
    """
    Return a stream that supports seeking and rewinding.

    Seekable streams are returned unchanged. Anything else is drained into
    memory and a ``BytesIO`` positioned at the start is returned; the source
    stream's position is undefined afterwards and only the returned stream
    should be used.

    Args:
        stream: Readable binary stream
        chunk_size: Number of bytes copied per read

    Returns:
        Seekable binary stream

    Example:
        >>> seekable = ensure_seekable(sys.stdin.buffer)
        >>> seekable.seek(0)
    """
    if is_seekable(stream):
        return stream

    buffer = io.BytesIO()
    shutil.copyfileobj(stream, buffer, chunk_size)
    buffer.seek(0)
    logger.debug(f"Buffered non-seekable stream into memory ({buffer.getbuffer().nbytes} bytes)")
    return buffer


def rewind(stream: BinaryIO) -> None:
    """Move a seekable stream back to its first byte."""
    stream.seek(0)


def read_preview(stream: BinaryIO, encoding: str = DEFAULT_ENCODING,
                 limit: int = PREVIEW_CHAR_LIMIT) -> str:
    """
    Describe the first characters of a stream for diagnostics.

    The stream is rewound when possible and decoded incrementally until
    ``limit`` characters are available, so large files are never read in
    full. Undecodable bytes are replaced rather than raising.

    Args:
        stream: Binary stream to preview
        encoding: Encoding used to decode the preview
        limit: Maximum number of characters to include

    Returns:
        A message containing at most ``limit`` characters of content
    """
    if not is_readable(stream):
        return f"Tried to preview the first {limit} characters of a closed stream"

    if is_seekable(stream):
        rewind(stream)

    decoder = codecs.getincrementaldecoder(encoding)(errors='replace')
    chunk_size = max(limit, 1) * 4
    pieces = []
    collected = 0
    while collected < limit:
        data = stream.read(chunk_size)
        if not data:
            break
        text = decoder.decode(data)
        pieces.append(text)
        collected += len(text)
    if collected < limit:
        pieces.append(decoder.decode(b'', final=True))

    content = ''.join(pieces)[:limit]
    return f"{PREVIEW_HEADER}\n{content}"
