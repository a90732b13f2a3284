"""
Tests for chunked copy and streaming base64 encoding.
"""

import base64
import os
from io import BytesIO
from unittest.mock import patch

import pytest

from imagestore.error_handling import StoreIOError
from imagestore.storage.streams import (
    copy_file,
    encode_file_to_base64,
    encode_stream_to_base64,
)


class TestEncodeStreamToBase64:
    """Chunked output must equal one-shot encoding."""

    @pytest.mark.parametrize("size", [0, 1, 2, 3, 4, 8191, 8192, 8193, 20000])
    def test_matches_b64encode(self, size):
        data = os.urandom(size)
        assert encode_stream_to_base64(BytesIO(data)) == base64.b64encode(data).decode()

    @pytest.mark.parametrize("buffer_size", [1, 2, 4, 5, 7])
    def test_small_buffers(self, buffer_size):
        data = os.urandom(100)
        encoded = encode_stream_to_base64(BytesIO(data), buffer_size=buffer_size)
        assert encoded == base64.b64encode(data).decode()

    def test_no_line_breaks(self):
        encoded = encode_stream_to_base64(BytesIO(os.urandom(5000)))
        assert "\n" not in encoded

    def test_reads_in_buffer_sized_chunks(self):
        reads = []

        class TrackingStream(BytesIO):
            def read(self, size=-1):
                reads.append(size)
                return super().read(size)

        encode_stream_to_base64(TrackingStream(os.urandom(100)), buffer_size=16)
        assert set(reads) == {16}


class TestEncodeFileToBase64:
    def test_encode_file(self, tmp_path, png_bytes):
        path = tmp_path / "img.png"
        path.write_bytes(png_bytes)
        assert base64.b64decode(encode_file_to_base64(path)) == png_bytes

    def test_missing_file(self, tmp_path):
        with pytest.raises(StoreIOError):
            encode_file_to_base64(tmp_path / "missing.png")


class TestCopyFile:
    def test_copies_all_bytes(self, tmp_path):
        data = os.urandom(50_000)
        source = tmp_path / "src.bin"
        dest = tmp_path / "dst.bin"
        source.write_bytes(data)
        assert copy_file(source, dest, buffer_size=1024) == len(data)
        assert dest.read_bytes() == data

    def test_overwrites_destination(self, tmp_path):
        source = tmp_path / "src.bin"
        dest = tmp_path / "dst.bin"
        source.write_bytes(b"new")
        dest.write_bytes(b"much longer old content")
        copy_file(source, dest)
        assert dest.read_bytes() == b"new"

    def test_empty_source(self, tmp_path):
        source = tmp_path / "src.bin"
        dest = tmp_path / "dst.bin"
        source.touch()
        assert copy_file(source, dest) == 0
        assert dest.read_bytes() == b""

    def test_missing_source(self, tmp_path):
        with pytest.raises(StoreIOError) as exc_info:
            copy_file(tmp_path / "missing", tmp_path / "dst.bin")
        assert "missing" in exc_info.value.context["source"]

    def test_transfer_failure(self, tmp_path):
        source = tmp_path / "src.bin"
        source.write_bytes(b"data")
        with patch("shutil.copyfileobj", side_effect=OSError("device error")):
            with pytest.raises(StoreIOError):
                copy_file(source, tmp_path / "dst.bin")
