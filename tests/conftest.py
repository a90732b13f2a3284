"""
Shared fixtures: generated test images and stores rooted in tmp_path.
"""

import base64
from io import BytesIO

import pytest
from PIL import Image

from imagestore import ImageStore
from imagestore.storage.cache_dirs import CacheDirectory


def encode_image(image: Image.Image, fmt: str) -> bytes:
    buf = BytesIO()
    image.save(buf, format=fmt)
    return buf.getvalue()


class FakeCacheDirectory(CacheDirectory):
    """CacheDirectory with scripted availability and free space."""

    def __init__(self, path, free: int = 0, available: bool = True, name: str = ""):
        super().__init__(path, name)
        self.free = free
        self.available = available

    def is_available(self) -> bool:
        return self.available

    def free_space(self) -> int:
        return self.free


# ==================== Image Fixtures ====================


@pytest.fixture
def png_bytes() -> bytes:
    """A small RGBA PNG."""
    return encode_image(Image.new("RGBA", (8, 6), (255, 0, 0, 128)), "PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    """A small RGB JPEG."""
    return encode_image(Image.new("RGB", (10, 10), (0, 128, 255)), "JPEG")


@pytest.fixture
def gif_bytes() -> bytes:
    """A small palette GIF."""
    return encode_image(Image.new("P", (4, 4), 1), "GIF")


@pytest.fixture
def png_base64(png_bytes) -> str:
    return base64.b64encode(png_bytes).decode("ascii")


# ==================== Store Fixtures ====================


@pytest.fixture
def cache_root(tmp_path):
    return tmp_path / "cache"


@pytest.fixture
def store(cache_root):
    """A store with both candidate directories under tmp_path."""
    return ImageStore(cache_dir=cache_root)


@pytest.fixture
def source_file(tmp_path, jpeg_bytes):
    """An existing image file outside the store."""
    path = tmp_path / "source" / "photo.jpg"
    path.parent.mkdir()
    path.write_bytes(jpeg_bytes)
    return path


@pytest.fixture
def make_cache_dir(tmp_path):
    """Factory for FakeCacheDirectory instances under tmp_path."""

    def _make(name: str, free: int = 0, available: bool = True) -> FakeCacheDirectory:
        path = tmp_path / name
        path.mkdir(exist_ok=True)
        return FakeCacheDirectory(path, free=free, available=available, name=name)

    return _make
