"""
MIME type sniffing and format mapping.

Classification looks at the first byte only. It is a coarse table, not a
format parser: several real formats share a leading byte and are reported
under one type. Extension and encoder choice are derived from the MIME type
through ImageFormat.
"""

import base64
import binascii
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .error_handling import InvalidInputError

logger = logging.getLogger(__name__)

MIME_JPEG = "image/jpeg"
MIME_PNG = "image/png"
MIME_GIF = "image/gif"
MIME_TIFF = "image/tiff"
MIME_WEBP = "image/webp"
MIME_PDF = "application/pdf"
MIME_VND = "application/vnd"
MIME_TEXT = "text/plain"
MIME_OCTET_STREAM = "application/octet-stream"

# https://en.wikipedia.org/wiki/List_of_file_signatures
_SIGNATURES = {
    255: MIME_JPEG,
    137: MIME_PNG,
    71: MIME_GIF,
    73: MIME_TIFF,
    77: MIME_TIFF,
    37: MIME_PDF,
    208: MIME_VND,
    70: MIME_TEXT,
}


class ImageFormat(Enum):
    """Output format family of a stored image."""

    PNG = "png"
    WEBP = "webp"
    JPEG = "jpeg"
    OTHER = "other"

    @classmethod
    def from_mime_type(cls, mime_type: Optional[str]) -> "ImageFormat":
        if mime_type == MIME_PNG:
            return cls.PNG
        if mime_type == MIME_WEBP:
            return cls.WEBP
        if mime_type == MIME_JPEG:
            return cls.JPEG
        return cls.OTHER

    @property
    def extension(self) -> str:
        return _EXTENSIONS[self]

    @property
    def encoder(self) -> str:
        """Pillow format name used when re-encoding."""
        return _ENCODERS[self]


_EXTENSIONS = {
    ImageFormat.PNG: ".png",
    ImageFormat.WEBP: ".webp",
    ImageFormat.JPEG: ".jpg",
    ImageFormat.OTHER: ".jpg",
}

_ENCODERS = {
    ImageFormat.PNG: "PNG",
    ImageFormat.WEBP: "WEBP",
    ImageFormat.JPEG: "JPEG",
    ImageFormat.OTHER: "JPEG",
}


@dataclass(frozen=True)
class ImageData:
    """Raw image bytes paired with their MIME type."""

    data: bytes
    mime_type: str


def get_mime_type_from_image_bytes(image: Union[bytes, bytearray, memoryview]) -> str:
    """
    Classify image bytes by their leading byte.

    Args:
        image: Raw bytes to inspect

    Returns:
        MIME type string, application/octet-stream when the byte is unknown

    Raises:
        InvalidInputError: If the buffer is empty or not bytes-like
    """
    if not isinstance(image, (bytes, bytearray, memoryview)):
        raise InvalidInputError(
            "Image data must be bytes-like", {"type": type(image).__name__}
        )
    if len(image) == 0:
        raise InvalidInputError("Cannot sniff MIME type of an empty buffer")

    return _SIGNATURES.get(image[0], MIME_OCTET_STREAM)


classify = get_mime_type_from_image_bytes


def get_file_extension_for_type(mime_type: Optional[str]) -> str:
    return ImageFormat.from_mime_type(mime_type).extension


def get_compress_format_for_type(mime_type: Optional[str]) -> str:
    return ImageFormat.from_mime_type(mime_type).encoder


def parse_image_base64(image_base64: str) -> ImageData:
    """
    Decode a base64 payload and sniff its MIME type.

    Whitespace is ignored and missing padding is restored.

    Raises:
        InvalidInputError: If the payload is empty or not valid base64
    """
    if isinstance(image_base64, str):
        raw = image_base64.encode("ascii", errors="replace")
    else:
        raw = bytes(image_base64)

    compact = b"".join(raw.split())
    if not compact:
        raise InvalidInputError("Base64 image payload is empty")

    compact += b"=" * (-len(compact) % 4)
    try:
        image_bytes = base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidInputError(
            f"Invalid base64 image payload: {e}", {"length": len(compact)}
        ) from e

    mime_type = get_mime_type_from_image_bytes(image_bytes)
    logger.debug(f"Parsed base64 image: {len(image_bytes)} bytes, {mime_type}")
    return ImageData(image_bytes, mime_type)
