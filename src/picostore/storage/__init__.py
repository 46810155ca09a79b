"""
Storage Layer
=============

Low-level key-value storage infrastructure providing:
- Stackable backends (memory, filesystem, chain)
- Storage codecs (identity, blosc2 compression)

Usage:
    from picostore.storage import ChainBackend, FilesystemBackend, MemoryBackend
    from picostore.storage import get_codec

    fs = FilesystemBackend("./data", codec=get_codec(compression=True))
    backend = ChainBackend([MemoryBackend(), fs])
"""

from .backends import (
    ChainBackend,
    FilesystemBackend,
    KVBackend,
    MemoryBackend,
    build_backend,
    validate_key,
)
from .compression import Blosc2Codec, IdentityCodec, StorageCodec, get_codec

__all__ = [
    # Backends
    "KVBackend",
    "MemoryBackend",
    "FilesystemBackend",
    "ChainBackend",
    "build_backend",
    "validate_key",
    # Codecs
    "StorageCodec",
    "IdentityCodec",
    "Blosc2Codec",
    "get_codec",
]
