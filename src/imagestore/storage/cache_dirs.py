"""
Cache Directory Selection
=========================

A store writes into one of two candidate directories. The choice is made
fresh on every call so changes in available space are picked up live:

- neither directory exists: NoStorageAvailableError
- only one exists: use it, whatever its free space
- both exist: use the one with strictly more free space; ties go to the
  secondary directory
"""

import logging
import shutil
from pathlib import Path
from typing import Optional, Union

from ..error_handling import NoStorageAvailableError

logger = logging.getLogger(__name__)


class CacheDirectory:
    """A candidate location for temp files."""

    def __init__(self, path: Union[str, Path], name: str = ""):
        self.path = Path(path)
        self.name = name or self.path.name

    def is_available(self) -> bool:
        return self.path.is_dir()

    def free_space(self) -> int:
        """Free bytes on the filesystem holding this directory, -1 if unknown."""
        try:
            return shutil.disk_usage(self.path).free
        except OSError as e:
            logger.warning(f"Could not query free space for {self.path}: {e}")
            return -1

    def ensure(self) -> bool:
        """
        Create the directory if it does not exist yet.

        A directory that cannot be created simply stays unavailable, so
        failure is logged rather than raised.
        """
        try:
            self.path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Cannot create cache directory {self.path}: {e}")
            return False
        return True

    def __repr__(self) -> str:
        return f"CacheDirectory(name={self.name!r}, path={str(self.path)!r})"


def select_cache_dir(
    primary: Optional[CacheDirectory], secondary: Optional[CacheDirectory]
) -> CacheDirectory:
    """
    Choose the directory a new temp file should be created in.

    Args:
        primary: First candidate, may be None
        secondary: Second candidate, may be None

    Returns:
        The selected CacheDirectory

    Raises:
        NoStorageAvailableError: If neither candidate is available
    """
    primary_ok = primary is not None and primary.is_available()
    secondary_ok = secondary is not None and secondary.is_available()

    if not primary_ok and not secondary_ok:
        raise NoStorageAvailableError(
            "No cache directory available",
            {
                "primary": str(primary.path) if primary else None,
                "secondary": str(secondary.path) if secondary else None,
            },
        )
    if not primary_ok:
        return secondary
    if not secondary_ok:
        return primary

    primary_free = primary.free_space()
    secondary_free = secondary.free_space()
    selected = primary if primary_free > secondary_free else secondary
    logger.debug(
        f"Selected cache dir {selected.path} "
        f"(primary free={primary_free}, secondary free={secondary_free})"
    )
    return selected
