"""
Storage Backends
================

Interchangeable, stackable key-value backends sharing the ``KVBackend``
interface (store / load / delete):

- MemoryBackend: in-memory dictionary, no persistence
- FilesystemBackend: one file per key under a root directory
- ChainBackend: ordered list of backends with fallback-on-miss reads and
  fan-out writes

Usage:
    from picostore.storage.backends import (
        ChainBackend,
        FilesystemBackend,
        MemoryBackend,
    )

    backend = ChainBackend([MemoryBackend(), FilesystemBackend("./data")])
    backend.store("k", b"v")
    backend.load("k")

    # Or assemble the standard graph from a configuration
    from picostore.config import default_config
    from picostore.storage.backends import build_backend

    backend = build_backend(default_config().with_caching())
"""

import logging

from ...config import StoreConfig
from ..compression import get_codec
from .base import KVBackend
from .chain import ChainBackend
from .filesystem import FilesystemBackend, validate_key
from .memory import MemoryBackend

logger = logging.getLogger(__name__)


def build_backend(config: StoreConfig) -> KVBackend:
    """
    Assemble the backend graph described by a configuration.

    Without caching the graph is the filesystem backend alone. With caching
    it is a chain of [memory, filesystem]: the cache answers reads first, the
    filesystem keeps every write durable and serves reads on a cold cache.

    Args:
        config: Store configuration

    Returns:
        The root backend of the assembled graph
    """
    codec = get_codec(
        config.compression,
        codec_name=config.compression_codec,
        level=config.compression_level,
    )
    filesystem = FilesystemBackend(
        config.root_dir,
        codec=codec,
        locking=config.locking,
        file_mode=config.file_mode,
        dir_mode=config.dir_mode,
        atomic_writes=config.atomic_writes,
    )

    if not config.caching:
        logger.debug("Assembled filesystem-only backend")
        return filesystem

    logger.debug("Assembled cached backend chain [memory, filesystem]")
    return ChainBackend([MemoryBackend(), filesystem])


__all__ = [
    "KVBackend",
    "MemoryBackend",
    "FilesystemBackend",
    "ChainBackend",
    "build_backend",
    "validate_key",
]
