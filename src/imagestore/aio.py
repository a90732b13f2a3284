"""
Async boundary for ImageStore.

The store itself is synchronous. Hosts that expect awaitable results wrap it
once here; each call runs the blocking operation in a worker thread and
returns its result or raises its error.
"""

import asyncio
import logging
from typing import List, Optional
from pathlib import Path

from .store import ImageInfo, ImageStore

logger = logging.getLogger(__name__)


class AsyncImageStore:
    """Awaitable facade over an ImageStore."""

    def __init__(self, store: Optional[ImageStore] = None, **store_options):
        self.store = store if store is not None else ImageStore(**store_options)

    async def has_image_for_tag(self, tag: str) -> bool:
        result = await asyncio.to_thread(self.store.has_image_for_tag, tag)
        return bool(result)

    async def get_base64_for_tag(self, tag: str) -> str:
        return await asyncio.to_thread(self.store.get_base64_for_tag, tag)

    async def add_image_from_base64(self, image_base64: str) -> str:
        return await asyncio.to_thread(self.store.add_image_from_base64, image_base64)

    async def add_image_from_bytes(self, image_bytes: bytes) -> str:
        return await asyncio.to_thread(self.store.add_image_from_bytes, image_bytes)

    async def copy_image_from_uri(self, image_uri: str, mime_type: Optional[str]) -> str:
        return await asyncio.to_thread(
            self.store.copy_image_from_uri, image_uri, mime_type
        )

    async def remove_image_for_tag(self, tag: str) -> None:
        await asyncio.to_thread(self.store.remove_image_for_tag, tag)

    async def get_info_for_tag(self, tag: str) -> ImageInfo:
        return await asyncio.to_thread(self.store.get_info_for_tag, tag)

    async def list_images(self) -> List[Path]:
        return await asyncio.to_thread(self.store.list_images)

    async def clear(self) -> int:
        return await asyncio.to_thread(self.store.clear)

    async def close(self) -> None:
        await asyncio.to_thread(self.store.close)
