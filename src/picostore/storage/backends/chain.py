"""
Chain Backend
=============

A composite backend presenting one interface over an ordered list of
backends:

- store:  fan out to every member in order; the first failure propagates
          and later members are left unwritten (no rollback)
- load:   return the value from the first member that has the key; a miss
          moves on to the next member, any other failure propagates
- delete: remove from every member in order; a miss counts as success,
          any other failure stops iteration and propagates

A chain is itself a backend, so chains can be nested.
"""

import logging
from typing import Iterable, Tuple

from ...error_handling import KeyNotFoundError, StoreError, is_key_not_found
from .base import KVBackend

logger = logging.getLogger(__name__)


class ChainBackend(KVBackend):
    """
    Ordered chain of backends with fallback-on-miss reads.

    Order matters: it is the read priority (first member holding the key
    wins) and the write fan-out order. A chain with no members behaves as an
    always-empty store.
    """

    def __init__(self, backends: Iterable[KVBackend] = ()):
        self._backends: Tuple[KVBackend, ...] = tuple(backends)
        logger.debug(
            "ChainBackend initialized with "
            f"[{', '.join(type(b).__name__ for b in self._backends)}]"
        )

    @property
    def backends(self) -> Tuple[KVBackend, ...]:
        """Member backends in read-priority order."""
        return self._backends

    def store(self, key: str, value: bytes) -> None:
        for backend in self._backends:
            backend.store(key, value)

    def load(self, key: str) -> bytes:
        for backend in self._backends:
            try:
                return backend.load(key)
            except StoreError as e:
                if is_key_not_found(e):
                    continue
                raise
        raise KeyNotFoundError(key)

    def delete(self, key: str) -> None:
        for backend in self._backends:
            try:
                backend.delete(key)
            except StoreError as e:
                if not is_key_not_found(e):
                    raise

    def close(self) -> None:
        """Close member backends in order."""
        for backend in self._backends:
            backend.close()

    def __len__(self) -> int:
        return len(self._backends)

    def __repr__(self):
        return f"ChainBackend({list(self._backends)!r})"
