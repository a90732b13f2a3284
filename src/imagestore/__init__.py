"""
imagestore - Temp-file image store with MIME sniffing and cache directory selection.

Callers hand over image bytes (raw or base64) and get back a reference to a
temp file in a cache directory. References can be probed, read back as
base64 and removed.

Key Features:
- Single-byte MIME sniffing with a fixed signature table
- Cache directory chosen per call by availability and free space
- Collision-free temp file names carrying a recognisable prefix
- Pillow re-encoding (PNG, WEBP, JPEG) at a configurable quality
- file:// and content:// source copying through pluggable resolvers
- Async facade for hosts that expect awaitable results

Quick Start:
    >>> from imagestore import ImageStore
    >>>
    >>> store = ImageStore(cache_dir="/path/to/cache")
    >>> tag = store.add_image_from_base64(png_base64)
    >>> store.has_image_for_tag(tag)
    True
    >>> store.remove_image_for_tag(tag)
"""

from .aio import AsyncImageStore
from .config import (
    EncodingConfig,
    IOConfig,
    ImageStoreConfig,
    StorageConfig,
    create_store_config,
)
from .error_handling import (
    DecodeError,
    ImageStoreConfigurationError,
    ImageStoreError,
    InvalidInputError,
    NoStorageAvailableError,
    StoreIOError,
    UnresolvableSourceError,
)
from .mime import ImageData, ImageFormat, classify, get_mime_type_from_image_bytes
from .store import ImageInfo, ImageStore

__version__ = "0.1.0"

__all__ = [
    # Core classes
    "ImageStore",
    "AsyncImageStore",
    "ImageInfo",
    "ImageData",
    "ImageFormat",
    # Configuration
    "ImageStoreConfig",
    "StorageConfig",
    "EncodingConfig",
    "IOConfig",
    "create_store_config",
    # Sniffing
    "classify",
    "get_mime_type_from_image_bytes",
    # Errors
    "ImageStoreError",
    "ImageStoreConfigurationError",
    "NoStorageAvailableError",
    "StoreIOError",
    "DecodeError",
    "UnresolvableSourceError",
    "InvalidInputError",
    # Version info
    "__version__",
]
