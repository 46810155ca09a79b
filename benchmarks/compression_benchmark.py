#!/usr/bin/env python3
"""
Compression Benchmark
======================

Benchmark compression codec impact on store/load performance and file size.

Measures:
  - Raw encode/decode speed and ratio for each blosc2 codec
  - End-to-end store/load through PicoStore with each codec
  - Codec impact on different payload shapes (text, random, zeros)

Available codecs: lz4, lz4hc, zstd, zlib, blosclz
"""

import os
import statistics
import tempfile
import time
from typing import List, Tuple

from picostore import PicoStore, default_config
from picostore.config import SUPPORTED_COMPRESSION_CODECS
from picostore.storage.compression import Blosc2Codec, IdentityCodec


# ── Data Generators ──────────────────────────────────────────────────────────

def make_test_data() -> List[Tuple[str, bytes]]:
    """Generate labeled payloads of varying compressibility."""
    return [
        ("small text", b"hello picostore"),
        ("repetitive text (1 MB)", b"the quick brown fox " * 52_429),
        ("random bytes (1 MB, low compress)", os.urandom(1 << 20)),
        ("zeros (1 MB, high compress)", bytes(1 << 20)),
        ("counter (256 KB)", bytes(i % 256 for i in range(1 << 18))),
    ]


# ── Benchmarks ───────────────────────────────────────────────────────────────

def benchmark_codec_microbench(iterations: int = 5):
    """Raw codec comparison without touching the filesystem."""
    print("\n🗜️  Raw Codec Micro-Benchmark")
    print("-" * 70)

    for label, data in make_test_data():
        print(f"\n  {label}:")
        print(f"    {'Codec':10} {'Enc ms':>9} {'Dec ms':>9} {'Ratio':>8} {'Match':>6}")
        print("    " + "-" * 46)

        codecs = [IdentityCodec()] + [Blosc2Codec(name) for name in SUPPORTED_COMPRESSION_CODECS]
        for codec in codecs:
            enc_times, dec_times = [], []
            encoded = b""
            decoded = b""
            for _ in range(iterations):
                start = time.perf_counter()
                encoded = codec.encode(data)
                enc_times.append((time.perf_counter() - start) * 1000)

                start = time.perf_counter()
                decoded = codec.decode(encoded)
                dec_times.append((time.perf_counter() - start) * 1000)

            ratio = len(data) / len(encoded) if encoded else 0
            print(
                f"    {getattr(codec, 'codec_name', codec.name):10} "
                f"{statistics.median(enc_times):9.3f} "
                f"{statistics.median(dec_times):9.3f} "
                f"{ratio:7.2f}x "
                f"{'✓' if decoded == data else '✗':>6}"
            )


def benchmark_end_to_end_codecs(iterations: int = 3):
    """Benchmark the full store/load cycle with each compression codec."""
    print("\n📦 End-to-End Store/Load by Codec")
    print("-" * 70)

    codecs = [None, "lz4", "zstd"]

    for label, data in make_test_data():
        print(f"\n  {label}:")
        print(f"    {'Codec':8} {'Store ms':>9} {'Load ms':>9} {'File KB':>9}")
        print("    " + "-" * 40)

        for codec in codecs:
            with tempfile.TemporaryDirectory() as tmp:
                config = default_config().with_root_dir(os.path.join(tmp, "store"))
                if codec is not None:
                    config = config.with_compression(codec=codec)

                with PicoStore(config) as store:
                    store_times, load_times = [], []
                    for i in range(iterations):
                        start = time.perf_counter()
                        store.store(f"k{i}", data)
                        store_times.append((time.perf_counter() - start) * 1000)

                        start = time.perf_counter()
                        store.load(f"k{i}")
                        load_times.append((time.perf_counter() - start) * 1000)

                    file_kb = os.path.getsize(os.path.join(config.root_dir, "k0")) / 1024

                print(
                    f"    {codec or 'none':8} "
                    f"{statistics.median(store_times):9.2f} "
                    f"{statistics.median(load_times):9.2f} "
                    f"{file_kb:9.1f}"
                )


def benchmark_cached_reads(reads: int = 200):
    """Compare repeated loads with and without the memory cache."""
    print("\n\n🏆 Cached vs Uncached Reads (zstd, 1 MB text)")
    print("=" * 60)

    data = b"the quick brown fox " * 52_429
    for caching in (False, True):
        with tempfile.TemporaryDirectory() as tmp:
            config = (
                default_config()
                .with_root_dir(tmp)
                .with_compression(codec="zstd")
                .with_caching(caching)
            )
            with PicoStore(config) as store:
                store.store("hot", data)
                start = time.perf_counter()
                for _ in range(reads):
                    store.load("hot")
                elapsed = (time.perf_counter() - start) * 1000

        label = "cached" if caching else "uncached"
        print(f"  {label:10} {elapsed / reads:8.3f} ms/load")


if __name__ == "__main__":
    benchmark_codec_microbench()
    benchmark_end_to_end_codecs()
    benchmark_cached_reads()
