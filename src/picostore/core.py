"""
PicoStore Facade
================

Top-level entry point. A ``PicoStore`` assembles exactly one backend graph
from its configuration and exposes the uniform store / load / delete
operations, plus text conveniences encoded as UTF-8.
"""

import logging
from dataclasses import asdict
from pathlib import Path
from typing import Optional, Union

from .config import StoreConfig, create_store_config
from .storage.backends import KVBackend, build_backend, validate_key

logger = logging.getLogger(__name__)

TEXT_ENCODING = "utf-8"


class PicoStore:
    """
    File-backed key-value store.

    Keys are strings stored as one file each under the configured root
    directory; values are opaque bytes. Depending on configuration, reads are
    served by an in-memory cache first and values are compressed at rest.

    Keys are validated before any layer is touched, so an invalid key never
    reaches the in-memory cache either.

    Example:
        >>> store = PicoStore(StoreConfig(root_dir="/tmp/t1"))
        >>> store.store("a", b"\\x01\\x02\\x03")
        >>> store.load("a")
        b'\\x01\\x02\\x03'
    """

    def __init__(self, root_dir_or_config: Optional[Union[str, Path, StoreConfig]] = None):
        """
        Initialize the store.

        Args:
            root_dir_or_config: Root directory path or StoreConfig object
                (uses defaults if None)
        """
        if isinstance(root_dir_or_config, (str, Path)):
            self._config = StoreConfig(root_dir=str(root_dir_or_config))
        elif isinstance(root_dir_or_config, StoreConfig):
            self._config = root_dir_or_config
        elif root_dir_or_config is None:
            self._config = StoreConfig()
        else:
            raise TypeError(
                f"Expected str, Path, or StoreConfig, got {type(root_dir_or_config)}"
            )

        self._backend = build_backend(self._config)
        logger.info(
            f"PicoStore initialized: {self._config.root_dir} "
            f"(caching={self._config.caching}, compression={self._config.compression}, "
            f"locking={self._config.locking})"
        )

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def backend(self) -> KVBackend:
        """Root of the assembled backend graph."""
        return self._backend

    def store(self, key: str, value: bytes) -> None:
        """Store a value under a key, overwriting any existing value."""
        validate_key(key)
        self._backend.store(key, value)

    def load(self, key: str) -> bytes:
        """
        Load the value stored under a key.

        Raises:
            KeyNotFoundError: If no value is stored under the key
            InvalidKeyError: If the key cannot be used as a file name
            StorageIOError: If the underlying storage fails
        """
        validate_key(key)
        return self._backend.load(key)

    def delete(self, key: str) -> None:
        """Delete a key. Deleting an absent key is not an error."""
        validate_key(key)
        self._backend.delete(key)

    def store_text(self, key: str, text: str) -> None:
        self.store(key, text.encode(TEXT_ENCODING))

    def load_text(self, key: str) -> str:
        return self.load(key).decode(TEXT_ENCODING)

    def close(self) -> None:
        self._backend.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self):
        return f"PicoStore(root_dir={self._config.root_dir!r}, backend={self._backend!r})"


def open_store(
    root_dir: Optional[Union[str, Path]] = None,
    config: Optional[StoreConfig] = None,
    **overrides,
) -> PicoStore:
    """
    Create a store from a configuration, a root directory, or overrides.

    Args:
        root_dir: Root directory; overrides ``config.root_dir`` when both given
        config: Base configuration (defaults if None)
        **overrides: StoreConfig field values, e.g. ``caching=True``

    Returns:
        A new PicoStore instance
    """
    if config is None:
        config = create_store_config(root_dir, **overrides)
    elif root_dir is not None or overrides:
        config = create_store_config(
            root_dir if root_dir is not None else config.root_dir,
            **{**_config_values(config), **overrides},
        )
    return PicoStore(config)


def _config_values(config: StoreConfig) -> dict:
    values = asdict(config)
    values.pop("root_dir")
    return values
