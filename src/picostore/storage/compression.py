"""
Storage Codecs
==============

Reversible transforms applied to value bytes before they are written to disk
and after they are read back.

Available codecs:
- IdentityCodec: bytes pass through unchanged
- Blosc2Codec: blosc2 compression (lz4, lz4hc, zstd, zlib, blosclz)

Usage:
    from picostore.storage.compression import get_codec

    codec = get_codec(compression=True, codec_name="zstd", level=5)
    payload = codec.encode(b"some value")
    assert codec.decode(payload) == b"some value"

A codec is fixed per store instance. Reading files written with a different
codec is not supported.
"""

import logging
import struct
from abc import ABC, abstractmethod

import blosc2
import xxhash

from ..config import SUPPORTED_COMPRESSION_CODECS
from ..error_handling import CorruptDataError, StorageIOError, StoreConfigurationError

logger = logging.getLogger(__name__)


_CODEC_MAP = {
    "lz4": blosc2.Codec.LZ4,
    "lz4hc": blosc2.Codec.LZ4HC,
    "zstd": blosc2.Codec.ZSTD,
    "zlib": blosc2.Codec.ZLIB,
    "blosclz": blosc2.Codec.BLOSCLZ,
}

# Per-chunk frame: compressed length, xxh3_64 digest of the compressed bytes
_FRAME_HEADER = struct.Struct("<IQ")


class StorageCodec(ABC):
    """
    Abstract base class for storage codecs.

    Implementations must satisfy ``decode(encode(v)) == v`` for every byte
    string ``v``, including the empty one.
    """

    name: str = "abstract"

    @abstractmethod
    def encode(self, data: bytes) -> bytes:
        """Transform raw value bytes into the bytes persisted on disk."""
        pass

    @abstractmethod
    def decode(self, data: bytes) -> bytes:
        """
        Reverse ``encode``.

        Raises:
            CorruptDataError: If ``data`` was not produced by a matching encode
        """
        pass

    def __repr__(self):
        return f"{type(self).__name__}()"


class IdentityCodec(StorageCodec):
    """Codec that stores bytes exactly as given."""

    name = "identity"

    def encode(self, data: bytes) -> bytes:
        return bytes(data)

    def decode(self, data: bytes) -> bytes:
        return bytes(data)


class Blosc2Codec(StorageCodec):
    """
    Lossless compression using blosc2.

    Values larger than ``blosc2.MAX_BUFFERSIZE`` are split into consecutive
    compressed chunks. Each chunk is framed as::

        <u32 little-endian chunk length><u64 xxh3_64 of chunk><blosc2 chunk>

    and decode verifies the digest before the chunk reaches blosc2, so a
    damaged file is reported as ``CorruptDataError`` instead of being handed
    to the decompressor. Empty input encodes to empty output.

    Attributes:
        codec_name: blosc2 codec name ("lz4", "zstd", ...)
        level: Compression level (0-9)
    """

    name = "blosc2"

    def __init__(self, codec_name: str = "lz4", level: int = 5):
        if codec_name not in _CODEC_MAP:
            raise StoreConfigurationError(
                f"Unsupported codec: {codec_name}. Supported: {list(_CODEC_MAP)}"
            )
        if not (0 <= level <= 9):
            raise StoreConfigurationError("Compression level must be between 0 and 9")

        self.codec_name = codec_name
        self.level = level
        self._codec = _CODEC_MAP[codec_name]

    def encode(self, data: bytes) -> bytes:
        view = memoryview(data).cast("B")
        frames = []
        start = 0
        try:
            while start < len(view):
                end = min(start + blosc2.MAX_BUFFERSIZE, len(view))
                # typesize=1: values are opaque bytes, shuffle has nothing to reorder
                chunk = bytes(
                    blosc2.compress(
                        view[start:end],
                        typesize=1,
                        clevel=self.level,
                        filter=blosc2.Filter.SHUFFLE,
                        codec=self._codec,
                    )
                )
                frames.append(_FRAME_HEADER.pack(len(chunk), xxhash.xxh3_64_intdigest(chunk)))
                frames.append(chunk)
                start = end
        except Exception as e:
            raise StorageIOError(f"Failed to compress data: {e}") from e
        return b"".join(frames)

    def decode(self, data: bytes) -> bytes:
        view = memoryview(data).cast("B")
        chunks = []
        offset = 0
        while offset < len(view):
            chunk = self._verified_chunk(view, offset)
            try:
                decompressed = blosc2.decompress(chunk)
            except Exception as e:
                raise CorruptDataError(
                    f"Failed to decompress chunk at offset {offset}: {e}",
                    context={"offset": offset, "codec": self.codec_name},
                ) from e
            chunks.append(bytes(decompressed))
            offset += _FRAME_HEADER.size + len(chunk)
        return b"".join(chunks)

    def _verified_chunk(self, view: memoryview, offset: int) -> memoryview:
        """Return the chunk framed at ``offset`` once its length and digest check out."""
        context = {"offset": offset, "codec": self.codec_name}
        remaining = len(view) - offset
        if remaining < _FRAME_HEADER.size + blosc2.MIN_HEADER_LENGTH:
            raise CorruptDataError(
                f"Truncated compressed payload: {remaining} trailing bytes",
                context=context,
            )

        length, digest = _FRAME_HEADER.unpack_from(view, offset)
        start = offset + _FRAME_HEADER.size
        if length < blosc2.MIN_HEADER_LENGTH or length > len(view) - start:
            raise CorruptDataError(
                f"Compressed chunk at offset {offset} claims {length} bytes, "
                f"{len(view) - start} available",
                context=context,
            )

        chunk = view[start:start + length]
        if xxhash.xxh3_64_intdigest(chunk) != digest:
            raise CorruptDataError(
                f"Checksum mismatch for compressed chunk at offset {offset}",
                context=context,
            )

        _, cbytes, _ = blosc2.get_cbuffer_sizes(chunk)
        if cbytes != length:
            raise CorruptDataError(
                f"Compressed chunk at offset {offset} has header size {cbytes}, "
                f"frame size {length}",
                context=context,
            )
        return chunk

    def __repr__(self):
        return f"Blosc2Codec(codec_name={self.codec_name!r}, level={self.level})"


def get_codec(
    compression: bool, codec_name: str = "lz4", level: int = 5
) -> StorageCodec:
    """
    Build the codec for a store.

    Args:
        compression: If False, the identity codec is returned
        codec_name: blosc2 codec name, one of SUPPORTED_COMPRESSION_CODECS
        level: Compression level (0-9)

    Raises:
        StoreConfigurationError: If the codec name or level is invalid
    """
    if not compression:
        return IdentityCodec()
    if codec_name not in SUPPORTED_COMPRESSION_CODECS:
        raise StoreConfigurationError(
            f"Unsupported codec: {codec_name}. Supported: {list(SUPPORTED_COMPRESSION_CODECS)}"
        )
    codec = Blosc2Codec(codec_name=codec_name, level=level)
    logger.debug(f"Using storage codec {codec!r}")
    return codec


__all__ = [
    "StorageCodec",
    "IdentityCodec",
    "Blosc2Codec",
    "get_codec",
]
