"""
Filesystem Backend
==================

Durable key-value storage with one file per key under a root directory.

Layout:
    <root_dir>/<key>    codec-encoded value bytes

Keys are used verbatim as a single path segment, so they are validated before
every operation: a key that could name a path outside the root directory, or
a nested path, is rejected with ``InvalidKeyError`` before any I/O happens.

Usage:
    from picostore.storage.backends import FilesystemBackend
    from picostore.storage.compression import get_codec

    backend = FilesystemBackend("./data", codec=get_codec(True), locking=True)
    backend.store("greeting", b"hello")
    assert backend.load("greeting") == b"hello"
    backend.delete("greeting")
"""

import logging
import os
import stat
import threading
import uuid
from contextlib import nullcontext
from pathlib import Path
from typing import Optional, Union

from ...error_handling import (
    InvalidKeyError,
    KeyNotFoundError,
    storage_operation_context,
)
from ..compression import IdentityCodec, StorageCodec
from .base import KVBackend

logger = logging.getLogger(__name__)

_SEPARATORS = tuple(sep for sep in (os.sep, os.altsep) if sep)
_RESERVED_KEYS = {".", ".."}


def validate_key(key: str) -> None:
    """
    Check that a key maps to exactly one file directly under the root.

    Raises:
        InvalidKeyError: If the key is empty, reserved, contains a path
            separator or contains a NUL character
    """
    if not isinstance(key, str):
        raise InvalidKeyError(repr(key), "keys must be strings")
    if not key:
        raise InvalidKeyError(key, "key must not be empty")
    for sep in _SEPARATORS:
        if sep in key:
            raise InvalidKeyError(key, f"key must not contain {sep!r}")
    if key in _RESERVED_KEYS:
        raise InvalidKeyError(key, "reserved path name")
    if "\x00" in key:
        raise InvalidKeyError(key, "key must not contain NUL")


class FilesystemBackend(KVBackend):
    """
    Filesystem-based key-value backend.

    Each key is stored in its own file directly under ``root_dir``. Values
    pass through the configured codec on the way in and out.

    When ``locking`` is enabled, writes (directory creation plus file write)
    are serialized by a lock owned by this instance. Reads are never
    serialized, and two backend instances pointing at the same directory do
    not coordinate with each other.

    When ``atomic_writes`` is enabled, values are written to a temporary file
    in the same directory and moved into place, so readers never observe a
    partially written value.

    Attributes:
        root_dir: Directory holding one file per key
        codec: Codec applied to values before writing and after reading
        locking: Whether writes are serialized within this instance
        atomic_writes: Whether writes go through a temp file and rename
    """

    def __init__(
        self,
        root_dir: Union[str, Path],
        codec: Optional[StorageCodec] = None,
        locking: bool = False,
        file_mode: int = 0o644,
        dir_mode: int = 0o744,
        atomic_writes: bool = True,
    ):
        """
        Initialize filesystem backend.

        The root directory is created lazily on the first write.

        Args:
            root_dir: Directory where values will be stored
            codec: Storage codec (default: identity)
            locking: Serialize writes within this instance
            file_mode: Permission bits for created files
            dir_mode: Permission bits for created directories
            atomic_writes: Write via temp file + rename
        """
        self.root_dir = Path(root_dir)
        self.codec = codec or IdentityCodec()
        self.locking = locking
        self.file_mode = file_mode
        self.dir_mode = dir_mode
        self.atomic_writes = atomic_writes
        self._write_lock = threading.Lock() if locking else None
        logger.debug(
            f"FilesystemBackend initialized at {self.root_dir} "
            f"(codec={self.codec.name}, locking={locking}, atomic_writes={atomic_writes})"
        )

    def path_for(self, key: str) -> Path:
        """Return the on-disk path for a key after validating it."""
        validate_key(key)
        return self.root_dir / key

    def store(self, key: str, value: bytes) -> None:
        """Write value to the filesystem, overwriting any existing file."""
        path = self.path_for(key)
        guard = self._write_lock if self._write_lock is not None else nullcontext()

        with guard:
            with storage_operation_context("write", key, path=str(path)):
                os.makedirs(self.root_dir, mode=self.dir_mode, exist_ok=True)
                data = self.codec.encode(value)
                if self.atomic_writes:
                    self._write_atomic(path, data)
                else:
                    self._write_file(path, data)

        logger.debug(f"Stored {key!r} ({len(data)} bytes) at {path}")

    def load(self, key: str) -> bytes:
        """Read value from the filesystem."""
        path = self.path_for(key)

        with storage_operation_context("stat", key, path=str(path)):
            try:
                st = os.stat(path)
            except FileNotFoundError:
                raise KeyNotFoundError(key) from None
            # A directory can never hold a value
            if stat.S_ISDIR(st.st_mode):
                raise KeyNotFoundError(key)

        with storage_operation_context("read", key, path=str(path)):
            try:
                with open(path, "rb") as f:
                    data = f.read()
            except FileNotFoundError:
                # Deleted between stat and open
                raise KeyNotFoundError(key) from None

        return self.codec.decode(data)

    def delete(self, key: str) -> None:
        """Delete value from the filesystem. Deleting an absent key succeeds."""
        path = self.path_for(key)

        with storage_operation_context("delete", key, path=str(path)):
            try:
                st = os.stat(path)
            except FileNotFoundError:
                return
            if stat.S_ISDIR(st.st_mode):
                return
            try:
                os.remove(path)
            except FileNotFoundError:
                return

        logger.debug(f"Deleted {key!r} from {path}")

    def _write_file(self, path: Path, data: bytes) -> None:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, self.file_mode)
        with os.fdopen(fd, "wb") as f:
            f.write(data)

    def _write_atomic(self, path: Path, data: bytes) -> None:
        temp_path = path.with_name(f".{uuid.uuid4().hex}.tmp")
        try:
            fd = os.open(temp_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, self.file_mode)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(temp_path, path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink()
            raise

    def __repr__(self):
        return f"FilesystemBackend(root_dir={str(self.root_dir)!r}, codec={self.codec!r})"
