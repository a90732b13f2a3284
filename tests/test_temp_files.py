"""
Tests for temp file allocation and name recognition.
"""

from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

import pytest

from imagestore.config import TEMP_FILE_PREFIX
from imagestore.error_handling import StoreIOError
from imagestore.storage.cache_dirs import CacheDirectory
from imagestore.storage.temp_files import create_temp_file, is_tmp_image_filename


@pytest.fixture
def cache_dir(tmp_path):
    cache_dir = CacheDirectory(tmp_path / "cache")
    cache_dir.ensure()
    return cache_dir


class TestCreateTempFile:
    """Temp files are empty, prefixed and carry the right extension."""

    @pytest.mark.parametrize(
        "mime_type,suffix",
        [
            ("image/png", ".png"),
            ("image/webp", ".webp"),
            ("image/jpeg", ".jpg"),
            ("image/gif", ".jpg"),
            (None, ".jpg"),
        ],
    )
    def test_name_and_extension(self, cache_dir, mime_type, suffix):
        path = create_temp_file(mime_type, cache_dir)
        assert path.exists()
        assert path.stat().st_size == 0
        assert path.parent == cache_dir.path.resolve()
        assert path.name.startswith(TEMP_FILE_PREFIX)
        assert path.suffix == suffix
        assert path.is_absolute()

    def test_custom_prefix(self, cache_dir):
        path = create_temp_file("image/png", cache_dir, prefix="thumbs_")
        assert path.name.startswith("thumbs_")

    def test_names_do_not_collide(self, cache_dir):
        paths = {create_temp_file("image/png", cache_dir) for _ in range(50)}
        assert len(paths) == 50

    def test_concurrent_creation(self, cache_dir):
        with ThreadPoolExecutor(max_workers=8) as pool:
            paths = list(
                pool.map(lambda _: create_temp_file("image/jpeg", cache_dir), range(64))
            )
        assert len(set(paths)) == 64
        assert all(p.exists() for p in paths)

    def test_missing_directory(self, tmp_path):
        with pytest.raises(StoreIOError):
            create_temp_file("image/png", CacheDirectory(tmp_path / "missing"))

    def test_platform_failure(self, cache_dir):
        with patch("tempfile.mkstemp", side_effect=PermissionError("read-only")):
            with pytest.raises(StoreIOError) as exc_info:
                create_temp_file("image/png", cache_dir)
        assert exc_info.value.context["mime_type"] == "image/png"


class TestIsTmpImageFilename:
    """Recognition of store-owned names."""

    def test_factory_output_is_recognised(self, cache_dir):
        path = create_temp_file("image/png", cache_dir)
        assert is_tmp_image_filename(path.name)
        assert is_tmp_image_filename(path)
        assert is_tmp_image_filename(str(path))
        assert is_tmp_image_filename(path.as_uri())

    @pytest.mark.parametrize(
        "name",
        ["photo.jpg", "", "cache_ImageStore.png", "imagestore_cache.png", "/tmp/x.png"],
    )
    def test_unrelated_names(self, name):
        assert not is_tmp_image_filename(name)

    def test_prefix_in_directory_does_not_count(self):
        assert not is_tmp_image_filename(f"/tmp/{TEMP_FILE_PREFIX}dir/photo.png")

    def test_custom_prefix(self):
        assert is_tmp_image_filename("thumbs_abc.png", prefix="thumbs_")
        assert not is_tmp_image_filename("thumbs_abc.png")
