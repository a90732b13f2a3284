"""
ImageStore - Temp-file Image Store
==================================

Persists caller-supplied images as temp files in a cache directory and hands
back a reference (file:// URI or absolute path) for later retrieval or
removal. There is no index: a file belongs to the store when its name starts
with the configured prefix, and its reference is its location.

Usage:
    from imagestore import ImageStore

    store = ImageStore(cache_dir="./images")

    tag = store.add_image_from_base64(payload)
    if store.has_image_for_tag(tag):
        data = store.get_base64_for_tag(tag)
    store.remove_image_for_tag(tag)

    # Copy an existing file into the store without re-encoding
    path = store.copy_image_from_uri("file:///sdcard/photo.jpg", "image/jpeg")
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union
from urllib.parse import unquote, urlparse

from .config import ImageStoreConfig, create_store_config
from .error_handling import (
    StoreIOError,
    UnresolvableSourceError,
    close_quietly,
    safe_file_operation,
    store_operation_context,
    with_error_handling,
)
from .mime import (
    MIME_OCTET_STREAM,
    ImageData,
    get_mime_type_from_image_bytes,
    parse_image_base64,
)
from .storage.cache_dirs import CacheDirectory, select_cache_dir
from .storage.image_writer import write_image_data_to_file
from .storage.resolvers import (
    ContentResolver,
    get_content_resolver,
    get_file_from_uri,
)
from .storage.streams import copy_file, encode_file_to_base64
from .storage.temp_files import create_temp_file, is_tmp_image_filename
from .utils import calculate_file_hash

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageInfo:
    """Description of a stored file."""

    path: Path
    uri: str
    size: int
    mime_type: str
    file_hash: Optional[str]


class ImageStore:
    """
    Image store backed by temp files in one of two cache directories.

    Each creation call picks the directory with more free space, allocates a
    uniquely named file and fills it, either by re-encoding image bytes or by
    copying an existing file.

    Attributes:
        config: Store configuration
        primary: Primary candidate directory, or None
        secondary: Secondary candidate directory, or None
        resolver: Content resolver used for content:// sources
    """

    def __init__(
        self,
        config: Optional[ImageStoreConfig] = None,
        resolver: Optional[Union[ContentResolver, str]] = None,
        resolver_options: Optional[Dict[str, Any]] = None,
        **overrides,
    ):
        """
        Initialize an ImageStore.

        Args:
            config: Complete configuration. If not provided, one is built from
                overrides via create_store_config().
            resolver: Resolver for content:// URIs in copy_image_from_uri(),
                either an instance or a registered name such as "sqlite"
            resolver_options: Constructor options when resolver is a name
            **overrides: Flat configuration values, e.g. cache_dir=..., quality=80
        """
        self.config = config if config is not None else create_store_config(**overrides)

        # A resolver built from a name belongs to the store and is closed with it
        self._owns_resolver = isinstance(resolver, str)
        if self._owns_resolver:
            resolver = get_content_resolver(resolver, **(resolver_options or {}))
        self.resolver = resolver

        storage = self.config.storage
        self.primary = (
            CacheDirectory(storage.primary_dir, "primary")
            if storage.primary_dir is not None
            else None
        )
        self.secondary = (
            CacheDirectory(storage.secondary_dir, "secondary")
            if storage.secondary_dir is not None
            else None
        )

        if storage.create_dirs:
            for cache_dir in self._candidate_dirs():
                cache_dir.ensure()

        logger.debug(f"ImageStore initialized: {self.primary}, {self.secondary}")

    # ── Creation ──────────────────────────────────────────────────────

    def add_image_from_base64(self, image_base64: str) -> str:
        """
        Decode a base64 image, re-encode it into a new temp file.

        Returns:
            file:// URI of the stored image
        """
        with store_operation_context("add_image_from_base64"):
            image_data = parse_image_base64(image_base64)
            return self._create_temp_file_for_image_data(image_data)

    def add_image_from_bytes(self, image_bytes: Union[bytes, bytearray]) -> str:
        """
        Re-encode raw image bytes into a new temp file.

        Returns:
            file:// URI of the stored image
        """
        with store_operation_context("add_image_from_bytes"):
            mime_type = get_mime_type_from_image_bytes(image_bytes)
            image_data = ImageData(bytes(image_bytes), mime_type)
            return self._create_temp_file_for_image_data(image_data)

    def copy_image_from_uri(self, image_uri: str, mime_type: Optional[str]) -> str:
        """
        Copy a file:// or content:// source into a new temp file, byte for byte.

        Args:
            image_uri: Source locator
            mime_type: MIME type of the source, used for the extension

        Returns:
            Absolute path of the copy

        Raises:
            UnresolvableSourceError: If the URI cannot be mapped to a file
            StoreIOError: If the source is missing or the copy fails
        """
        with store_operation_context("copy_image_from_uri", uri=image_uri):
            source = get_file_from_uri(image_uri, self.resolver)
            if source is None:
                raise UnresolvableSourceError(
                    f"Cannot resolve image source: {image_uri}", {"uri": image_uri}
                )
            if not source.is_file():
                raise StoreIOError(
                    f"Image source does not exist: {source}",
                    {"uri": image_uri, "source": str(source)},
                )

            with self._new_temp_file(mime_type) as dest:
                copy_file(source, dest, self.config.buffer_size)
            return str(dest)

    # ── Access ────────────────────────────────────────────────────────

    def has_image_for_tag(self, tag: str) -> bool:
        path = self._path_for_tag(tag)
        return bool(path is not None and path.is_file())

    def get_base64_for_tag(self, tag: str) -> str:
        """
        Read a stored file back as base64.

        Raises:
            UnresolvableSourceError: If the tag is not a file reference
            StoreIOError: If the file cannot be read
        """
        with store_operation_context("get_base64_for_tag", tag=tag):
            path = self._require_path(tag)
            return encode_file_to_base64(path, self.config.buffer_size)

    def get_info_for_tag(self, tag: str) -> ImageInfo:
        """
        Describe a stored file: size, sniffed MIME type and XXH3_64 hash.

        Raises:
            UnresolvableSourceError: If the tag is not a file reference
            StoreIOError: If the file cannot be read
        """
        path = self._require_path(tag)

        def _read_head():
            with open(path, "rb") as f:
                return f.read(1), path.stat().st_size

        head, size = safe_file_operation("get_info_for_tag", path, _read_head)
        mime_type = get_mime_type_from_image_bytes(head) if head else MIME_OCTET_STREAM
        return ImageInfo(
            path=path,
            uri=path.absolute().as_uri(),
            size=size,
            mime_type=mime_type,
            file_hash=calculate_file_hash(path, self.config.buffer_size),
        )

    # ── Removal ───────────────────────────────────────────────────────

    def remove_image_for_tag(self, tag: str) -> None:
        """Delete a stored file. Removing a file that is already gone is a no-op."""
        path = self._path_for_tag(tag)
        if path is None:
            logger.warning(f"Ignoring removal of non-file reference: {tag}")
            return
        if not self.is_tmp_image_filename(path.name):
            logger.warning(f"Removing file not created by this store: {path}")
        safe_file_operation(
            "remove_image_for_tag", path, path.unlink, missing_ok=True
        )
        logger.debug(f"Removed image {path}")

    @with_error_handling(StoreIOError, context={"operation": "list_images"})
    def list_images(self) -> List[Path]:
        """Return every store-owned file in both cache directories."""
        found = set()
        for cache_dir in self._candidate_dirs():
            if not cache_dir.is_available():
                continue
            for child in cache_dir.path.iterdir():
                if child.is_file() and self.is_tmp_image_filename(child.name):
                    found.add(child.resolve())
        return sorted(found)

    def clear(self) -> int:
        """
        Delete every store-owned file in both cache directories.

        Returns:
            Number of files removed
        """
        removed = 0
        for path in self.list_images():
            try:
                path.unlink()
                removed += 1
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning(f"Failed to remove image file {path}: {e}")
        logger.debug(f"Cleared {removed} image files")
        return removed

    def close(self) -> None:
        """Close the content resolver if the store created it. Stored files are kept."""
        if self._owns_resolver:
            close_quietly(self.resolver)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    # ── Naming and directories ────────────────────────────────────────

    def is_tmp_image_filename(self, filename: Union[str, Path]) -> bool:
        return is_tmp_image_filename(filename, self.config.temp_prefix)

    def select_cache_dir(self) -> CacheDirectory:
        return select_cache_dir(self.primary, self.secondary)

    # ── Private helper methods ────────────────────────────────────────

    def _candidate_dirs(self) -> List[CacheDirectory]:
        return [d for d in (self.primary, self.secondary) if d is not None]

    def _create_temp_file(self, mime_type: Optional[str]) -> Path:
        return create_temp_file(
            mime_type, self.select_cache_dir(), self.config.temp_prefix
        )

    def _create_temp_file_for_image_data(self, image_data: ImageData) -> str:
        with self._new_temp_file(image_data.mime_type) as temp_file:
            write_image_data_to_file(image_data, temp_file, self.config.quality)
        return temp_file.as_uri()

    @contextmanager
    def _new_temp_file(self, mime_type: Optional[str]) -> Iterator[Path]:
        """Allocate a temp file that is deleted again if filling it fails."""
        temp_file = self._create_temp_file(mime_type)
        try:
            yield temp_file
        except Exception:
            temp_file.unlink(missing_ok=True)
            raise

    def _path_for_tag(self, tag: Union[str, Path]) -> Optional[Path]:
        """Map a file:// URI or plain path to a Path, None for other schemes."""
        if isinstance(tag, Path):
            return tag
        if not tag:
            return None
        parsed = urlparse(tag)
        scheme = parsed.scheme.lower()
        if scheme == "file":
            return Path(unquote(parsed.path))
        # Single-letter schemes are Windows drive letters
        if scheme == "" or len(scheme) == 1:
            return Path(tag)
        return None

    def _require_path(self, tag: str) -> Path:
        path = self._path_for_tag(tag)
        if path is None:
            raise UnresolvableSourceError(
                f"Not a file reference: {tag}", {"tag": tag}
            )
        return path
