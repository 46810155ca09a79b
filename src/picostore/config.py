"""
Configuration Management for picostore
======================================

``StoreConfig`` is an immutable value object consumed once when a store is
built. The ``with_*`` builder methods return a new configuration instead of
mutating the receiver, so one configuration can safely seed several stores.
"""

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional, Union

from .error_handling import StoreConfigurationError

logger = logging.getLogger(__name__)

# Codec names accepted by the blosc2 compression codec
SUPPORTED_COMPRESSION_CODECS = ("lz4", "lz4hc", "zstd", "zlib", "blosclz")


@dataclass(frozen=True)
class StoreConfig:
    """Configuration for a picostore instance."""

    root_dir: str = "./picodb"
    compression: bool = False  # enable compression at rest
    caching: bool = False  # enable in-memory cache in front of the filesystem
    locking: bool = False  # serialize writes within one store instance
    file_mode: int = 0o644  # permissions for created files
    dir_mode: int = 0o744  # permissions for created directories
    compression_codec: str = "lz4"
    compression_level: int = 5
    atomic_writes: bool = True  # write via temp file + rename

    def __post_init__(self):
        """Validate store configuration."""
        if isinstance(self.root_dir, Path):
            object.__setattr__(self, "root_dir", str(self.root_dir))

        if not self.root_dir:
            raise StoreConfigurationError("root_dir must not be empty")

        for name in ("file_mode", "dir_mode"):
            mode = getattr(self, name)
            if not isinstance(mode, int) or not (0 <= mode <= 0o7777):
                raise StoreConfigurationError(
                    f"{name} must be a permission mode between 0 and 0o7777, got {mode!r}",
                    context={name: mode},
                )

        if self.compression_codec not in SUPPORTED_COMPRESSION_CODECS:
            raise StoreConfigurationError(
                f"compression_codec must be one of {SUPPORTED_COMPRESSION_CODECS}, "
                f"got {self.compression_codec!r}"
            )

        if not (0 <= self.compression_level <= 9):
            raise StoreConfigurationError(
                "compression_level must be between 0 and 9"
            )

        logger.debug(
            f"Store configured: dir={self.root_dir}, caching={self.caching}, "
            f"compression={self.compression}"
            + (f" ({self.compression_codec}@{self.compression_level})" if self.compression else "")
            + f", locking={self.locking}"
        )

    def with_root_dir(self, root_dir: Union[str, Path]) -> "StoreConfig":
        return replace(self, root_dir=str(root_dir))

    def with_caching(self, enabled: bool = True) -> "StoreConfig":
        return replace(self, caching=enabled)

    def with_compression(
        self,
        enabled: bool = True,
        codec: Optional[str] = None,
        level: Optional[int] = None,
    ) -> "StoreConfig":
        """Return a copy with compression toggled and optionally re-tuned."""
        changes = {"compression": enabled}
        if codec is not None:
            changes["compression_codec"] = codec
        if level is not None:
            changes["compression_level"] = level
        return replace(self, **changes)

    def with_locking(self, enabled: bool = True) -> "StoreConfig":
        return replace(self, locking=enabled)

    def with_file_mode(self, mode: int) -> "StoreConfig":
        return replace(self, file_mode=mode)

    def with_dir_mode(self, mode: int) -> "StoreConfig":
        return replace(self, dir_mode=mode)

    def with_atomic_writes(self, enabled: bool = True) -> "StoreConfig":
        return replace(self, atomic_writes=enabled)


def default_config() -> StoreConfig:
    """Return a fresh configuration with sensible defaults."""
    return StoreConfig()


def create_store_config(
    root_dir: Optional[Union[str, Path]] = None, **overrides
) -> StoreConfig:
    """
    Factory function for creating configurations with convenience parameters.

    Args:
        root_dir: Directory holding one file per key
        **overrides: Values for any StoreConfig field

    Returns:
        Configured StoreConfig instance
    """
    known = {f.name for f in fields(StoreConfig)}
    values = {}

    for key, value in overrides.items():
        if key in known:
            values[key] = value
        else:
            logger.warning(f"Unknown configuration parameter ignored: {key}")

    if root_dir is not None:
        values["root_dir"] = str(root_dir)

    return StoreConfig(**values)
