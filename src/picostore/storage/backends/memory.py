"""
In-Memory Backend
=================

A cachetools-backed backend with no persistence, usable standalone or as the
fast path in front of a filesystem backend.
"""

import logging
import math
import threading

from cachetools import Cache

from ...error_handling import KeyNotFoundError
from .base import KVBackend

logger = logging.getLogger(__name__)


class MemoryBackend(KVBackend):
    """
    In-memory key-value backend.

    Stores values in an unbounded ``cachetools.Cache`` guarded by a
    re-entrant lock, so it is safe for concurrent callers without external
    locking. There is no eviction: entries live until deleted or until the
    backend is closed.
    """

    def __init__(self):
        """Initialize in-memory backend."""
        self._storage = Cache(maxsize=math.inf)
        self._lock = threading.RLock()
        logger.debug("MemoryBackend initialized")

    def store(self, key: str, value: bytes) -> None:
        """Store value in memory."""
        value = bytes(value)
        with self._lock:
            self._storage[key] = value

    def load(self, key: str) -> bytes:
        """Load value from memory."""
        with self._lock:
            try:
                return self._storage[key]
            except KeyError:
                raise KeyNotFoundError(key) from None

    def delete(self, key: str) -> None:
        """Delete value from memory."""
        with self._lock:
            try:
                del self._storage[key]
            except KeyError:
                raise KeyNotFoundError(key) from None

    def clear(self) -> int:
        """Clear all values from memory. Returns count of entries cleared."""
        with self._lock:
            count = len(self._storage)
            self._storage.clear()
        return count

    def close(self) -> None:
        self.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._storage)

    def __contains__(self, key) -> bool:
        with self._lock:
            return key in self._storage
