"""
Tests for ChainBackend composition semantics.

Covers:
- Fan-out writes with fail-fast on the first error
- First-hit reads with fallback on a miss
- Best-effort deletes that skip misses
- Empty and nested chains
- The standard [memory, filesystem] graph
"""

import pytest

from picostore.error_handling import (
    ErrorKind,
    InvalidKeyError,
    KeyNotFoundError,
    StorageIOError,
    StoreError,
)
from picostore.storage.backends import (
    ChainBackend,
    FilesystemBackend,
    KVBackend,
    MemoryBackend,
)

from conftest import FailingBackend, RecordingBackend


class TestChainStore:
    def test_writes_every_member_in_order(self):
        first, second = RecordingBackend("first"), RecordingBackend("second")
        chain = ChainBackend([first, second])

        chain.store("k", b"v")

        assert first.load("k") == b"v"
        assert second.load("k") == b"v"
        assert first.calls[0] == ("store", "k")
        assert second.calls[0] == ("store", "k")

    def test_stops_on_first_error_without_rollback(self):
        first = RecordingBackend("first")
        broken = FailingBackend("broken")
        last = RecordingBackend("last")
        chain = ChainBackend([first, broken, last])

        with pytest.raises(StorageIOError) as exc_info:
            chain.store("k", b"v")

        assert exc_info.value is broken.error
        assert first.load("k") == b"v"
        assert last.calls == []


class TestChainLoad:
    def test_first_hit_wins_and_later_members_not_queried(self):
        first, second = RecordingBackend("first"), RecordingBackend("second")
        first.store("k", b"v1")
        second.store("k", b"v2")
        second.calls.clear()

        assert ChainBackend([first, second]).load("k") == b"v1"
        assert second.calls == []

    def test_falls_back_on_miss(self):
        first, second = RecordingBackend("first"), RecordingBackend("second")
        second.store("k", b"v2")

        assert ChainBackend([first, second]).load("k") == b"v2"
        assert ("load", "k") in first.calls

    def test_all_miss_raises_key_not_found_for_key(self):
        chain = ChainBackend([RecordingBackend(), RecordingBackend()])
        with pytest.raises(KeyNotFoundError) as exc_info:
            chain.load("missing")
        assert exc_info.value == KeyNotFoundError("missing")

    def test_non_miss_error_propagates_immediately(self):
        broken = FailingBackend("broken")
        behind = RecordingBackend("behind")
        behind.store("k", b"v")
        behind.calls.clear()

        with pytest.raises(StorageIOError) as exc_info:
            ChainBackend([broken, behind]).load("k")

        assert exc_info.value is broken.error
        assert behind.calls == []

    def test_error_after_miss_propagates(self):
        chain = ChainBackend([RecordingBackend(), FailingBackend()])
        with pytest.raises(StorageIOError):
            chain.load("k")

    def test_foreign_exceptions_are_not_treated_as_misses(self):
        class LegacyBackend(RecordingBackend):
            def load(self, key):
                raise KeyError(key)

        chain = ChainBackend([LegacyBackend(), RecordingBackend()])
        with pytest.raises(KeyError) as exc_info:
            chain.load("k")
        assert not isinstance(exc_info.value, KeyNotFoundError)

    def test_miss_is_recognized_by_kind(self):
        class ExpiredError(StoreError):
            kind = ErrorKind.KEY_NOT_FOUND

        class ExpiringBackend(RecordingBackend):
            def load(self, key):
                raise ExpiredError(f"{key} expired", key=key)

        behind = RecordingBackend()
        behind.store("k", b"v")
        assert ChainBackend([ExpiringBackend(), behind]).load("k") == b"v"

    def test_invalid_key_from_member_propagates(self):
        class StrictBackend(RecordingBackend):
            def load(self, key):
                raise InvalidKeyError(key, "rejected")

        behind = RecordingBackend()
        behind.store("k", b"v")
        behind.calls.clear()
        with pytest.raises(InvalidKeyError):
            ChainBackend([StrictBackend(), behind]).load("k")
        assert behind.calls == []


class TestChainDelete:
    def test_deletes_from_every_member(self):
        first, second = RecordingBackend("first"), RecordingBackend("second")
        chain = ChainBackend([first, second])
        chain.store("k", b"v")

        chain.delete("k")

        with pytest.raises(KeyNotFoundError):
            first.load("k")
        with pytest.raises(KeyNotFoundError):
            second.load("k")

    def test_miss_in_some_members_is_success(self):
        first, second = RecordingBackend("first"), RecordingBackend("second")
        second.store("k", b"v")

        ChainBackend([first, second]).delete("k")

        assert ("delete", "k") in first.calls
        with pytest.raises(KeyNotFoundError):
            second.load("k")

    def test_miss_everywhere_is_success(self):
        ChainBackend([RecordingBackend(), RecordingBackend()]).delete("absent")

    def test_kind_miss_is_skipped(self):
        class ExpiredError(StoreError):
            kind = ErrorKind.KEY_NOT_FOUND

        class ExpiringBackend(RecordingBackend):
            def delete(self, key):
                raise ExpiredError(f"{key} expired", key=key)

        last = RecordingBackend()
        last.store("k", b"v")
        ChainBackend([ExpiringBackend(), last]).delete("k")
        assert ("delete", "k") in last.calls

    def test_error_stops_iteration(self):
        first = RecordingBackend("first")
        broken = FailingBackend("broken")
        last = RecordingBackend("last")
        last.store("k", b"v")
        last.calls.clear()

        with pytest.raises(StorageIOError):
            ChainBackend([first, broken, last]).delete("k")

        assert last.calls == []
        assert last.load("k") == b"v"


class TestEmptyChain:
    def test_load_is_miss(self):
        with pytest.raises(KeyNotFoundError):
            ChainBackend().load("k")

    def test_store_and_delete_are_noops(self):
        chain = ChainBackend([])
        chain.store("k", b"v")
        chain.delete("k")
        assert len(chain) == 0


class TestChainComposition:
    def test_chain_is_a_backend(self):
        assert isinstance(ChainBackend(), KVBackend)

    def test_backends_property_preserves_order(self):
        members = [RecordingBackend("a"), RecordingBackend("b")]
        chain = ChainBackend(members)
        assert chain.backends == tuple(members)

    def test_nested_chain_falls_through(self):
        inner_first, inner_second = RecordingBackend(), RecordingBackend()
        outer_last = RecordingBackend()
        outer_last.store("deep", b"v")
        chain = ChainBackend([ChainBackend([inner_first, inner_second]), outer_last])

        assert chain.load("deep") == b"v"
        chain.delete("deep")
        with pytest.raises(KeyNotFoundError):
            chain.load("deep")

    def test_close_closes_members(self):
        members = [RecordingBackend(), RecordingBackend()]
        with ChainBackend(members):
            pass
        assert all(m.closed for m in members)


class TestCacheFilesystemChain:
    """The [memory, filesystem] shape assembled by the store facade."""

    @pytest.fixture
    def layers(self, root_dir):
        memory = MemoryBackend()
        filesystem = FilesystemBackend(root_dir)
        return memory, filesystem, ChainBackend([memory, filesystem])

    def test_writes_reach_durable_layer(self, layers):
        memory, filesystem, chain = layers
        chain.store("k", b"v")
        assert filesystem.load("k") == b"v"
        assert memory.load("k") == b"v"

    def test_cache_has_read_priority(self, layers):
        memory, filesystem, chain = layers
        memory.store("k", b"v1")
        filesystem.store("k", b"v2")
        assert chain.load("k") == b"v1"

    def test_cold_cache_reads_from_disk(self, layers, root_dir):
        _, _, chain = layers
        chain.store("k", b"persisted")

        restarted = ChainBackend([MemoryBackend(), FilesystemBackend(root_dir)])
        assert restarted.load("k") == b"persisted"

    def test_delete_present_only_on_disk(self, layers):
        memory, filesystem, chain = layers
        filesystem.store("k", b"v")
        chain.delete("k")
        with pytest.raises(KeyNotFoundError):
            chain.load("k")

    def test_delete_present_only_in_cache(self, layers):
        memory, filesystem, chain = layers
        memory.store("k", b"v")
        chain.delete("k")
        assert "k" not in memory
