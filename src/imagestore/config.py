"""
Configuration Management for imagestore
=======================================

Configuration is split into focused sub-configurations: where temp files go,
how images are re-encoded, and how streams are chunked.
"""

import logging
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from .error_handling import ImageStoreConfigurationError

logger = logging.getLogger(__name__)

TEMP_FILE_PREFIX = "ImageStore_cache"
BUFFER_SIZE = 8192
COMPRESS_QUALITY = 90

_DEFAULT_ROOT = Path(tempfile.gettempdir()) / "imagestore"


@dataclass
class StorageConfig:
    """Configuration for the two candidate cache directories."""

    primary_dir: Optional[Union[str, Path]] = _DEFAULT_ROOT / "external"
    secondary_dir: Optional[Union[str, Path]] = _DEFAULT_ROOT / "internal"
    temp_prefix: str = TEMP_FILE_PREFIX
    create_dirs: bool = True

    def __post_init__(self):
        """Validate storage configuration."""
        if self.primary_dir is None and self.secondary_dir is None:
            raise ImageStoreConfigurationError(
                "At least one of primary_dir or secondary_dir must be set"
            )

        if not self.temp_prefix:
            raise ImageStoreConfigurationError("temp_prefix must not be empty")

        # mkstemp requires at least three characters of prefix on some platforms
        if len(self.temp_prefix) < 3:
            raise ImageStoreConfigurationError(
                "temp_prefix must be at least 3 characters long",
                {"temp_prefix": self.temp_prefix},
            )

        if self.primary_dir is not None:
            self.primary_dir = Path(self.primary_dir)
        if self.secondary_dir is not None:
            self.secondary_dir = Path(self.secondary_dir)

        logger.debug(
            f"Storage configured: primary={self.primary_dir}, "
            f"secondary={self.secondary_dir}, prefix={self.temp_prefix}"
        )


@dataclass
class EncodingConfig:
    """Configuration for image re-encoding."""

    quality: int = COMPRESS_QUALITY

    def __post_init__(self):
        if not (0 <= self.quality <= 100):
            raise ImageStoreConfigurationError(
                "quality must be between 0 and 100", {"quality": self.quality}
            )

        logger.debug(f"Encoding configured: quality={self.quality}")


@dataclass
class IOConfig:
    """Configuration for chunked reads and copies."""

    buffer_size: int = BUFFER_SIZE

    def __post_init__(self):
        if self.buffer_size <= 0:
            raise ImageStoreConfigurationError(
                "buffer_size must be positive", {"buffer_size": self.buffer_size}
            )


@dataclass
class ImageStoreConfig:
    """Main configuration class that combines all sub-configurations."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    encoding: EncodingConfig = field(default_factory=EncodingConfig)
    io: IOConfig = field(default_factory=IOConfig)

    @property
    def primary_dir(self) -> Optional[Path]:
        return self.storage.primary_dir

    @property
    def secondary_dir(self) -> Optional[Path]:
        return self.storage.secondary_dir

    @property
    def temp_prefix(self) -> str:
        return self.storage.temp_prefix

    @property
    def quality(self) -> int:
        return self.encoding.quality

    @property
    def buffer_size(self) -> int:
        return self.io.buffer_size


_FLAT_KEYS = {
    "primary_dir": "storage",
    "secondary_dir": "storage",
    "temp_prefix": "storage",
    "create_dirs": "storage",
    "quality": "encoding",
    "buffer_size": "io",
}


def create_store_config(
    cache_dir: Optional[Union[str, Path]] = None, **overrides
) -> ImageStoreConfig:
    """
    Factory function for creating configurations from flat keyword arguments.

    Args:
        cache_dir: Shortcut that places both candidate directories under one root
        **overrides: Any field of the sub-configurations, e.g. quality=80

    Returns:
        Configured ImageStoreConfig instance
    """
    sections = {"storage": {}, "encoding": {}, "io": {}}

    if cache_dir is not None:
        root = Path(cache_dir)
        sections["storage"]["primary_dir"] = root / "external"
        sections["storage"]["secondary_dir"] = root / "internal"

    for key, value in overrides.items():
        section = _FLAT_KEYS.get(key)
        if section is None:
            logger.warning(f"Unknown configuration parameter ignored: {key}={value}")
            continue
        sections[section][key] = value

    return ImageStoreConfig(
        storage=StorageConfig(**sections["storage"]),
        encoding=EncodingConfig(**sections["encoding"]),
        io=IOConfig(**sections["io"]),
    )
