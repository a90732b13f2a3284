"""
Concurrent use of one store from many threads.
"""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from urllib.parse import unquote, urlparse


class TestConcurrentStore:
    def test_parallel_adds_produce_distinct_files(self, store, jpeg_bytes):
        with ThreadPoolExecutor(max_workers=8) as executor:
            tags = list(executor.map(lambda _: store.add_image_from_bytes(jpeg_bytes), range(40)))

        assert len(set(tags)) == 40
        for tag in tags:
            assert Path(unquote(urlparse(tag).path)).stat().st_size > 0
        assert len(store.list_images()) == 40

    def test_parallel_copies(self, store, source_file, jpeg_bytes):
        uri = source_file.as_uri()
        with ThreadPoolExecutor(max_workers=8) as executor:
            paths = list(
                executor.map(lambda _: store.copy_image_from_uri(uri, "image/jpeg"), range(20))
            )

        assert len(set(paths)) == 20
        assert all(Path(p).read_bytes() == jpeg_bytes for p in paths)

    def test_parallel_add_and_remove(self, store, png_bytes):
        tags = [store.add_image_from_bytes(png_bytes) for _ in range(10)]
        with ThreadPoolExecutor(max_workers=4) as executor:
            list(executor.map(store.remove_image_for_tag, tags + tags))

        assert store.list_images() == []
