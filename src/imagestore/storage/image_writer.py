"""
Image decoding and re-encoding into temp files.

Images are always re-encoded through Pillow, so the bytes on disk generally
differ from the bytes supplied. The output format follows the MIME type:
PNG stays PNG, WEBP stays WEBP, everything else becomes JPEG.
"""

import logging
from io import BytesIO
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from ..config import COMPRESS_QUALITY
from ..error_handling import DecodeError, StoreIOError
from ..mime import ImageData, ImageFormat

logger = logging.getLogger(__name__)

# Modes JPEG can store directly
_JPEG_MODES = {"RGB", "L", "CMYK"}


def decode_image(image_data: ImageData) -> Image.Image:
    """
    Decode image bytes into a fully loaded Pillow image.

    Raises:
        DecodeError: If the bytes are not a decodable image
    """
    try:
        with Image.open(BytesIO(image_data.data)) as img:
            img.load()
            return img.copy()
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        ValueError,
        SyntaxError,
    ) as e:
        raise DecodeError(
            f"Cannot decode image data: {e}",
            {"mime_type": image_data.mime_type, "size": len(image_data.data)},
        ) from e


def _prepare_for_format(image: Image.Image, fmt: ImageFormat) -> Image.Image:
    if fmt in (ImageFormat.JPEG, ImageFormat.OTHER) and image.mode not in _JPEG_MODES:
        if image.mode in ("RGBA", "LA") or "transparency" in image.info:
            # JPEG has no alpha channel: flatten onto white
            rgba = image.convert("RGBA")
            background = Image.new("RGB", rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.getchannel("A"))
            return background
        return image.convert("RGB")
    if fmt is ImageFormat.PNG and image.mode == "CMYK":
        return image.convert("RGB")
    return image


def write_compressed_image_to_file(
    image: Image.Image,
    mime_type: Optional[str],
    dest: Path,
    quality: int = COMPRESS_QUALITY,
) -> None:
    """
    Encode an already decoded image into dest.

    On failure dest is removed before the error propagates.

    Raises:
        StoreIOError: If encoding or writing fails
    """
    fmt = ImageFormat.from_mime_type(mime_type)
    try:
        prepared = _prepare_for_format(image, fmt)
        with open(dest, "wb") as out:
            prepared.save(out, format=fmt.encoder, quality=quality)
    except (OSError, ValueError, KeyError) as e:
        _discard(dest)
        raise StoreIOError(
            f"Failed to write image to {dest}: {e}",
            {"dest": str(dest), "format": fmt.encoder},
        ) from e

    logger.debug(f"Wrote {fmt.encoder} image to {dest} (quality={quality})")


def write_image_data_to_file(
    image_data: ImageData, dest: Path, quality: int = COMPRESS_QUALITY
) -> None:
    """
    Decode image_data and re-encode it into dest.

    Very large images are refused by Pillow's decompression bomb check and
    reported as DecodeError.

    Raises:
        DecodeError: If the bytes cannot be decoded (dest is removed)
        StoreIOError: If the encoded image cannot be written (dest is removed)
    """
    try:
        image = decode_image(image_data)
    except DecodeError:
        _discard(dest)
        raise
    write_compressed_image_to_file(image, image_data.mime_type, dest, quality)


def _discard(path: Path) -> None:
    try:
        Path(path).unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Failed to remove partial file {path}: {e}")
