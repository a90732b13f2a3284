"""
Temp file allocation and recognition.

Every file is created through tempfile.mkstemp, which opens with O_EXCL, so
concurrent callers can never be handed the same name.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union
from urllib.parse import unquote, urlparse

from ..config import TEMP_FILE_PREFIX
from ..error_handling import StoreIOError
from ..mime import get_file_extension_for_type
from .cache_dirs import CacheDirectory

logger = logging.getLogger(__name__)


def create_temp_file(
    mime_type: Optional[str],
    cache_dir: CacheDirectory,
    prefix: str = TEMP_FILE_PREFIX,
) -> Path:
    """
    Create a new, empty, uniquely named file in the given cache directory.

    Args:
        mime_type: MIME type of the content, used for the extension
        cache_dir: Directory selected by select_cache_dir()
        prefix: Name prefix marking the file as store-owned

    Returns:
        Absolute path of the created file

    Raises:
        StoreIOError: If the file cannot be created
    """
    suffix = get_file_extension_for_type(mime_type)
    try:
        fd, name = tempfile.mkstemp(suffix=suffix, prefix=prefix, dir=cache_dir.path)
    except OSError as e:
        raise StoreIOError(
            f"Cannot create temp file in {cache_dir.path}: {e}",
            {"cache_dir": str(cache_dir.path), "mime_type": mime_type},
        ) from e
    os.close(fd)

    path = Path(name).resolve()
    logger.debug(f"Created temp file {path}")
    return path


def is_tmp_image_filename(
    filename: Union[str, Path], prefix: str = TEMP_FILE_PREFIX
) -> bool:
    """Check whether a file name, path or file:// URI belongs to the store."""
    name = str(filename)
    if name.startswith("file:"):
        name = unquote(urlparse(name).path)
    return Path(name).name.startswith(prefix)
