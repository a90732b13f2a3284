"""
Utility functions for imagestore
================================
"""

import logging
from pathlib import Path
from typing import Optional, Union

import xxhash

from .config import BUFFER_SIZE

logger = logging.getLogger(__name__)


def calculate_file_hash(
    file_path: Union[str, Path], buffer_size: int = BUFFER_SIZE
) -> Optional[str]:
    """
    Calculate the XXH3_64 hash of a file.

    Args:
        file_path: File to hash
        buffer_size: Read chunk size

    Returns:
        Hex string of the file hash, or None if the file doesn't exist or can't be read
    """
    path = Path(file_path)
    try:
        hasher = xxhash.xxh3_64()
        with open(path, "rb") as f:
            while chunk := f.read(buffer_size):
                hasher.update(chunk)
        return hasher.hexdigest()
    except OSError as e:
        logger.warning(f"Failed to calculate hash for {path}: {e}")
        return None
