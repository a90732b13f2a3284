"""
Tests for cache directory selection.
"""

import pytest

from imagestore.error_handling import NoStorageAvailableError
from imagestore.storage.cache_dirs import CacheDirectory, select_cache_dir


class TestSelectCacheDir:
    """Selection by availability, then by free space."""

    def test_more_free_space_wins(self, make_cache_dir):
        primary = make_cache_dir("primary", free=500)
        secondary = make_cache_dir("secondary", free=100)
        assert select_cache_dir(primary, secondary) is primary

        primary.free = 50
        assert select_cache_dir(primary, secondary) is secondary

    def test_tie_goes_to_secondary(self, make_cache_dir):
        primary = make_cache_dir("primary", free=300)
        secondary = make_cache_dir("secondary", free=300)
        assert select_cache_dir(primary, secondary) is secondary

    def test_single_available_dir_is_used_regardless_of_space(self, make_cache_dir):
        primary = make_cache_dir("primary", free=0)
        secondary = make_cache_dir("secondary", free=10**12, available=False)
        assert select_cache_dir(primary, secondary) is primary

        primary.available = False
        secondary.available = True
        secondary.free = 0
        assert select_cache_dir(primary, secondary) is secondary

    def test_missing_candidate(self, make_cache_dir):
        only = make_cache_dir("only", free=1)
        assert select_cache_dir(None, only) is only
        assert select_cache_dir(only, None) is only

    def test_no_storage(self, make_cache_dir):
        primary = make_cache_dir("primary", available=False)
        secondary = make_cache_dir("secondary", available=False)
        with pytest.raises(NoStorageAvailableError):
            select_cache_dir(primary, secondary)

        with pytest.raises(NoStorageAvailableError):
            select_cache_dir(None, None)

    def test_selection_is_recomputed_each_call(self, make_cache_dir):
        primary = make_cache_dir("primary", free=10)
        secondary = make_cache_dir("secondary", free=20)
        assert select_cache_dir(primary, secondary) is secondary
        primary.free = 30
        assert select_cache_dir(primary, secondary) is primary


class TestCacheDirectory:
    """Real filesystem behaviour of CacheDirectory."""

    def test_nonexistent_dir_is_unavailable(self, tmp_path):
        cache_dir = CacheDirectory(tmp_path / "missing")
        assert not cache_dir.is_available()

    def test_ensure_creates_directory(self, tmp_path):
        cache_dir = CacheDirectory(tmp_path / "a" / "b")
        assert cache_dir.ensure()
        assert cache_dir.is_available()

    def test_ensure_fails_softly(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        cache_dir = CacheDirectory(blocker / "sub")
        assert cache_dir.ensure() is False
        assert not cache_dir.is_available()

    def test_free_space_of_real_dir(self, tmp_path):
        assert CacheDirectory(tmp_path).free_space() > 0

    def test_free_space_unknown(self, tmp_path):
        assert CacheDirectory(tmp_path / "missing").free_space() == -1

    def test_real_dirs_select_one_of_them(self, tmp_path):
        primary = CacheDirectory(tmp_path / "p")
        secondary = CacheDirectory(tmp_path / "s")
        primary.ensure()
        secondary.ensure()
        # Same filesystem, same free space: the tie rule picks secondary
        # unless the free figure changed between the two queries.
        assert select_cache_dir(primary, secondary) in (primary, secondary)
