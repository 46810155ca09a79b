#!/usr/bin/env python3
"""
Platform smoke check for picostore.

Runs a handful of end-to-end checks against a scratch directory and exits
non-zero if any of them fail.
"""

import os
import platform
import sys
import tempfile
import traceback
from pathlib import Path

_MARKS = {"ok": ("✅", "[OK]"), "warn": ("⚠️ ", "[WARNING]"), "fail": ("❌", "[ERROR]")}


def report(status, text):
    symbol, fallback = _MARKS[status]
    try:
        print(f"{symbol} {text}")
    except UnicodeEncodeError:
        print(f"{fallback} {text}")


def section(title):
    print(f"\n--- {title} ---")


def show_environment():
    section("Environment")
    print(f"{platform.system()} {platform.release()} ({platform.machine()})")
    print(f"Python {platform.python_version()} [{platform.python_implementation()}]")
    print(f"Separators: sep={os.sep!r} altsep={os.altsep!r}")


def check_imports():
    import blosc2
    import cachetools
    import xxhash
    from picostore import __version__

    report("ok", f"picostore {__version__}")
    for module in (blosc2, cachetools, xxhash):
        report("ok", f"{module.__name__} {getattr(module, '__version__', '?')}")


def check_round_trip(root):
    from picostore import KeyNotFoundError, PicoStore

    with PicoStore(root / "plain") as store:
        store.store("k", b"\x00\x01binary\xff")
        assert store.load("k") == b"\x00\x01binary\xff", "loaded bytes differ"
        store.delete("k")
        try:
            store.load("k")
        except KeyNotFoundError:
            pass
        else:
            raise AssertionError("deleted key is still loadable")
    report("ok", "store / load / delete")


def check_cached_compressed(root):
    from picostore import PicoStore, default_config

    config = (
        default_config()
        .with_root_dir(root / "packed")
        .with_caching()
        .with_compression(codec="zstd")
        .with_locking()
    )
    payload = b"repetitive payload " * 1000
    with PicoStore(config) as store:
        store.store("blob", payload)
    size = (root / "packed" / "blob").stat().st_size
    with PicoStore(config) as reopened:
        assert reopened.load("blob") == payload, "value lost across reopen"
    report("ok", f"zstd {len(payload)} -> {size} bytes, survives a cold cache")


def check_key_rules(root):
    from picostore import InvalidKeyError, validate_key

    rejected = [f"a{os.sep}b", "..", ""] + ([f"a{os.altsep}b"] if os.altsep else [])
    for key in rejected:
        try:
            validate_key(key)
        except InvalidKeyError:
            continue
        raise AssertionError(f"key {key!r} was accepted")
    report("ok", f"{len(rejected)} invalid keys rejected")


CHECKS = [
    ("imports", check_imports),
    ("round trip", check_round_trip),
    ("cache + compression", check_cached_compressed),
    ("key rules", check_key_rules),
]


def main():
    show_environment()
    failed = []
    with tempfile.TemporaryDirectory() as scratch:
        for name, check in CHECKS:
            section(name)
            try:
                if check is check_imports:
                    check()
                else:
                    check(Path(scratch))
            except Exception as e:
                report("fail", f"{name}: {e}")
                traceback.print_exc()
                failed.append(name)

    section("Summary")
    if failed:
        report("warn", f"{len(failed)}/{len(CHECKS)} checks failed on {platform.system()}: {', '.join(failed)}")
        return 1
    report("ok", f"all {len(CHECKS)} checks passed on {platform.system()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
