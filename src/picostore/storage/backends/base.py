"""
Abstract Base Class for Key-Value Backends
==========================================

Defines the interface that all storage backends must implement.
"""

from abc import ABC, abstractmethod


class KVBackend(ABC):
    """
    Abstract base class for key-value backends.

    This interface defines the contract for storing, loading and deleting
    opaque byte values under string keys. Implementations include:
    - In-memory dictionaries (fast, ephemeral)
    - Filesystem directories (one file per key)
    - Chains of other backends (fallback on miss, fan-out on write)

    All implementations must be thread-safe for concurrent callers and must
    signal absence with ``KeyNotFoundError`` so composite backends can tell a
    miss apart from a failure.
    """

    @abstractmethod
    def store(self, key: str, value: bytes) -> None:
        """
        Store a value, overwriting any existing value for the key.

        Args:
            key: The key to store under.
            value: Raw bytes to store.
        """
        pass

    @abstractmethod
    def load(self, key: str) -> bytes:
        """
        Load the value stored under a key.

        Args:
            key: The key to look up.

        Returns:
            The stored bytes.

        Raises:
            KeyNotFoundError: If the backend holds no value for the key.
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """
        Delete the value stored under a key.

        Args:
            key: The key to remove.

        Raises:
            KeyNotFoundError: If the backend treats deleting an absent key as
                a miss. Backends may also treat it as success.
        """
        pass

    def close(self) -> None:
        """
        Close and clean up any resources.

        Default implementation does nothing. Override in backends that hold
        resources.
        """
        pass

    def __enter__(self):
        """Support context manager protocol."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Ensure resources are cleaned up."""
        self.close()
        return False
