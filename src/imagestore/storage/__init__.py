"""
Storage Layer
=============

Low-level pieces the ImageStore is built from:
- Cache directory selection by availability and free space
- Unique temp file allocation and store-owned name recognition
- Pillow-based image re-encoding into temp files
- file:// and content:// URI resolution with pluggable content resolvers
- Chunked file copy and streaming base64 encoding
"""

from .cache_dirs import CacheDirectory, select_cache_dir
from .temp_files import create_temp_file, is_tmp_image_filename
from .image_writer import (
    decode_image,
    write_compressed_image_to_file,
    write_image_data_to_file,
)
from .resolvers import (
    ContentResolver,
    InMemoryContentResolver,
    SqliteContentResolver,
    get_content_resolver,
    get_file_from_uri,
    list_content_resolvers,
    register_content_resolver,
    unregister_content_resolver,
)
from .streams import copy_file, encode_file_to_base64, encode_stream_to_base64

__all__ = [
    # Directories
    "CacheDirectory",
    "select_cache_dir",
    # Temp files
    "create_temp_file",
    "is_tmp_image_filename",
    # Image writing
    "decode_image",
    "write_compressed_image_to_file",
    "write_image_data_to_file",
    # URI resolution
    "ContentResolver",
    "InMemoryContentResolver",
    "SqliteContentResolver",
    "get_content_resolver",
    "get_file_from_uri",
    "list_content_resolvers",
    "register_content_resolver",
    "unregister_content_resolver",
    # Streams
    "copy_file",
    "encode_file_to_base64",
    "encode_stream_to_base64",
]
