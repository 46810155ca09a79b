#!/usr/bin/env python3
"""
Simple Store Example
====================

Shows the three store shapes (plain, cached, compressed) without
overwhelming details.

Usage:
    python simple_store_demo.py
"""

import json
import logging
import tempfile

from picostore import (
    InvalidKeyError,
    KeyNotFoundError,
    PicoStore,
    default_config,
    open_store,
)


def fetch_user_profile(user_id):
    """Simulate an expensive lookup."""
    print(f"👤 Fetching profile for user {user_id}")
    return {"user_id": user_id, "name": f"User {user_id}", "team": "Engineering"}


def main():
    """Demonstrate basic store usage."""
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    print("=== Simple Store Demo ===\n")

    with tempfile.TemporaryDirectory() as tmp:
        # Plain store: one file per key
        print("💾 PLAIN STORE")
        with PicoStore(f"{tmp}/plain") as store:
            store.store("greeting", b"hello")
            print(f"✅ Loaded: {store.load('greeting')!r}")

            store.delete("greeting")
            try:
                store.load("greeting")
            except KeyNotFoundError as e:
                print(f"✅ After delete: {e}")

        # Cached + compressed store for repeated reads of large values
        print("\n⚡ CACHED + COMPRESSED STORE")
        config = (
            default_config()
            .with_root_dir(f"{tmp}/cached")
            .with_caching()
            .with_compression(codec="zstd")
        )
        with PicoStore(config) as store:
            for user_id in (1, 2, 3):
                profile = fetch_user_profile(user_id)
                store.store_text(f"user-{user_id}", json.dumps(profile))

            # Served from memory, no disk read
            print(f"✅ Cached read: {json.loads(store.load_text('user-2'))['name']}")

        # Reopen: the memory layer starts cold, values come back from disk
        with open_store(config=config) as store:
            print(f"✅ After reopen: {json.loads(store.load_text('user-3'))['name']}")

            try:
                store.store("reports/2024", b"nope")
            except InvalidKeyError as e:
                print(f"🚫 Rejected key: {e}")

    print("\n💡 KEY TAKEAWAYS:")
    print("• Plain store: simplest, every read hits disk")
    print("• Caching: repeated reads come from memory, writes still reach disk")
    print("• Compression: smaller files for repetitive data")


if __name__ == "__main__":
    main()
