"""
Shared fixtures for picostore tests.
"""

from pathlib import Path

import pytest

from picostore.error_handling import KeyNotFoundError, StorageIOError
from picostore.storage.backends import FilesystemBackend, KVBackend, MemoryBackend
from picostore.storage.compression import get_codec


# ==================== Test Doubles ====================


class RecordingBackend(KVBackend):
    """In-memory backend that records every call it receives."""

    def __init__(self, name: str = "recording"):
        self.name = name
        self.calls = []
        self._storage = {}
        self.closed = False

    def store(self, key: str, value: bytes) -> None:
        self.calls.append(("store", key))
        self._storage[key] = bytes(value)

    def load(self, key: str) -> bytes:
        self.calls.append(("load", key))
        if key not in self._storage:
            raise KeyNotFoundError(key)
        return self._storage[key]

    def delete(self, key: str) -> None:
        self.calls.append(("delete", key))
        if key not in self._storage:
            raise KeyNotFoundError(key)
        del self._storage[key]

    def close(self) -> None:
        self.closed = True


class FailingBackend(RecordingBackend):
    """Backend whose every operation fails with a storage error."""

    def __init__(self, name: str = "failing"):
        super().__init__(name)
        self.error = StorageIOError(f"{name} is broken")

    def store(self, key: str, value: bytes) -> None:
        self.calls.append(("store", key))
        raise self.error

    def load(self, key: str) -> bytes:
        self.calls.append(("load", key))
        raise self.error

    def delete(self, key: str) -> None:
        self.calls.append(("delete", key))
        raise self.error


# ==================== Backend Fixtures ====================


@pytest.fixture
def root_dir(tmp_path) -> Path:
    """Return a not-yet-created root directory for a store."""
    return tmp_path / "picodb"


@pytest.fixture
def fs_backend(root_dir):
    """Filesystem backend without compression."""
    return FilesystemBackend(root_dir)


@pytest.fixture
def compressed_fs_backend(root_dir):
    """Filesystem backend with blosc2 compression."""
    return FilesystemBackend(root_dir, codec=get_codec(True, "zstd", 5))


@pytest.fixture
def memory_backend():
    return MemoryBackend()


@pytest.fixture
def recording_backend():
    return RecordingBackend()


@pytest.fixture
def failing_backend():
    return FailingBackend()
