"""
Bulk copy and streaming base64 encoding.

Both helpers work in fixed-size chunks so memory use is bounded by the buffer
size rather than by the file size (the base64 text itself is still returned
as one string).
"""

import base64
import logging
import shutil
from pathlib import Path
from typing import BinaryIO, Union

from ..config import BUFFER_SIZE
from ..error_handling import StoreIOError

logger = logging.getLogger(__name__)


def copy_file(
    source: Union[str, Path], dest: Union[str, Path], buffer_size: int = BUFFER_SIZE
) -> int:
    """
    Copy the full contents of source into dest.

    Args:
        source: File to read
        dest: File to (over)write
        buffer_size: Chunk size for the transfer

    Returns:
        Number of bytes copied

    Raises:
        StoreIOError: On any I/O failure
    """
    try:
        with open(source, "rb") as src, open(dest, "wb") as dst:
            shutil.copyfileobj(src, dst, buffer_size)
            copied = dst.tell()
    except OSError as e:
        raise StoreIOError(
            f"Failed to copy {source} to {dest}: {e}",
            {"source": str(source), "dest": str(dest)},
        ) from e

    logger.debug(f"Copied {copied} bytes from {source} to {dest}")
    return copied


def encode_stream_to_base64(stream: BinaryIO, buffer_size: int = BUFFER_SIZE) -> str:
    """
    Base64-encode everything remaining in stream, without line breaks.

    Chunks are encoded as they are read; the up-to-two bytes that do not fill
    a 3-byte group are carried into the next chunk.
    """
    parts = []
    carry = b""
    while True:
        chunk = stream.read(buffer_size)
        if not chunk:
            break
        chunk = carry + chunk
        usable = len(chunk) - len(chunk) % 3
        parts.append(base64.b64encode(chunk[:usable]))
        carry = chunk[usable:]
    if carry:
        parts.append(base64.b64encode(carry))
    return b"".join(parts).decode("ascii")


def encode_file_to_base64(path: Union[str, Path], buffer_size: int = BUFFER_SIZE) -> str:
    """
    Base64-encode a file's contents.

    Raises:
        StoreIOError: If the file cannot be read
    """
    try:
        with open(path, "rb") as f:
            return encode_stream_to_base64(f, buffer_size)
    except OSError as e:
        raise StoreIOError(
            f"Failed to read {path}: {e}", {"path": str(path)}
        ) from e
