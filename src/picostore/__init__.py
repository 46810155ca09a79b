"""
picostore - Minimal file-backed key-value store.

Persists opaque byte values under string keys, one file per key, with
optional in-memory caching, optional at-rest compression and optional write
locking.

Key Features:
- Stackable backends (memory, filesystem, chain) sharing one interface
- Cache-first reads with fallback to disk on a cold cache
- blosc2 compression at rest (lz4, zstd, zlib, ...)
- Atomic temp-file-and-rename writes
- Immutable configuration with a fluent builder

Quick Start:
    >>> from picostore import PicoStore, default_config
    >>>
    >>> config = default_config().with_root_dir("./data").with_caching()
    >>> store = PicoStore(config)
    >>>
    >>> store.store("a", b"\\x01\\x02\\x03")
    >>> store.load("a")
    b'\\x01\\x02\\x03'
    >>>
    >>> store.delete("a")
    >>> store.load("a")
    Traceback (most recent call last):
    ...
    picostore.error_handling.KeyNotFoundError: Key not found: 'a'
"""

from .config import StoreConfig, create_store_config, default_config
from .core import PicoStore, open_store
from .error_handling import (
    CorruptDataError,
    ErrorKind,
    InvalidKeyError,
    KeyNotFoundError,
    StorageIOError,
    StoreConfigurationError,
    StoreError,
)
from .storage import (
    Blosc2Codec,
    ChainBackend,
    FilesystemBackend,
    IdentityCodec,
    KVBackend,
    MemoryBackend,
    StorageCodec,
    validate_key,
)

__version__ = "0.1.0"

__all__ = [
    # Core classes
    "PicoStore",
    "open_store",
    # Configuration
    "StoreConfig",
    "default_config",
    "create_store_config",
    # Backends
    "KVBackend",
    "MemoryBackend",
    "FilesystemBackend",
    "ChainBackend",
    "validate_key",
    # Codecs
    "StorageCodec",
    "IdentityCodec",
    "Blosc2Codec",
    # Errors
    "ErrorKind",
    "StoreError",
    "KeyNotFoundError",
    "InvalidKeyError",
    "StorageIOError",
    "CorruptDataError",
    "StoreConfigurationError",
    # Version info
    "__version__",
]
