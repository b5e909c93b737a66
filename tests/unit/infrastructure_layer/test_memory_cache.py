"""
Unit Tests for ProcessMemoryCache

Tests TTL expiry (lazy and swept), bounded size with oldest-insertion
eviction, namespaces, and the sweeper lifecycle. Time is a FakeClock.
"""

import pytest

from biolink.core.exceptions import CacheKeyError
from biolink.infrastructure.cache.memory_cache import MISSING, ProcessMemoryCache


@pytest.mark.unit
class TestMemoryCacheBasics:
    def test_get_missing_key_returns_sentinel(self, memory_cache):
        assert memory_cache.get("profile", "nobody") is MISSING

    def test_sentinel_is_falsy_singleton(self):
        assert not MISSING
        assert repr(MISSING) == "MISSING"

    def test_set_then_get_returns_same_object(self, memory_cache, record_factory):
        profile = record_factory.profile("alice")

        memory_cache.set("profile", "alice", profile)

        assert memory_cache.get("profile", "alice") is profile

    def test_stored_none_is_distinguishable_from_missing(self, memory_cache):
        memory_cache.set("profile", "ghost", None)

        assert memory_cache.get("profile", "ghost") is None

    def test_namespaces_are_isolated(self, memory_cache):
        memory_cache.set("profile", "launch", "a profile")

        assert memory_cache.get("ai-page", "launch") is MISSING

    def test_unknown_namespace_raises(self, memory_cache):
        with pytest.raises(CacheKeyError):
            memory_cache.get("comments", "x")

    def test_delete(self, memory_cache):
        memory_cache.set("profile", "alice", 1)

        assert memory_cache.delete("profile", "alice") is True
        assert memory_cache.delete("profile", "alice") is False
        assert memory_cache.get("profile", "alice") is MISSING


@pytest.mark.unit
class TestMemoryCacheExpiry:
    def test_entry_live_before_ttl(self, memory_cache, memory_clock):
        memory_cache.set("profile", "alice", "v")
        memory_clock.advance(299.9)

        assert memory_cache.get("profile", "alice") == "v"

    def test_entry_expires_at_ttl(self, memory_cache, memory_clock):
        memory_cache.set("profile", "alice", "v")
        memory_clock.advance(300)

        assert memory_cache.get("profile", "alice") is MISSING
        assert "alice" not in memory_cache.keys("profile")

    def test_custom_ttl(self, memory_cache, memory_clock):
        memory_cache.set("profile", "alice", "v", ttl_seconds=10)
        memory_clock.advance(10)

        assert memory_cache.get("profile", "alice") is MISSING

    def test_overwrite_restarts_ttl(self, memory_cache, memory_clock):
        memory_cache.set("profile", "alice", "old")
        memory_clock.advance(200)
        memory_cache.set("profile", "alice", "new")
        memory_clock.advance(200)

        assert memory_cache.get("profile", "alice") == "new"

    def test_non_positive_ttl_rejected(self, memory_cache):
        with pytest.raises(ValueError):
            memory_cache.set("profile", "alice", "v", ttl_seconds=0)

    def test_sweep_removes_only_expired(self, memory_cache, memory_clock):
        memory_cache.set("profile", "old", 1)
        memory_clock.advance(250)
        memory_cache.set("profile", "fresh", 2)
        memory_clock.advance(100)

        removed = memory_cache.sweep()

        assert removed == 1
        assert memory_cache.keys("profile") == ["fresh"]

    def test_sweep_runs_hooks(self, memory_cache, memory_clock):
        reclaimed = []
        memory_cache.add_sweep_hook(lambda: reclaimed.append("store") or 3)
        memory_cache.set("profile", "old", 1)
        memory_clock.advance(300)

        removed = memory_cache.sweep()

        assert removed == 1
        assert reclaimed == ["store"]

    def test_stats_count_expirations(self, memory_cache, memory_clock):
        memory_cache.set("profile", "alice", 1)
        memory_clock.advance(301)
        memory_cache.get("profile", "alice")

        stats = memory_cache.stats()["namespaces"]["profile"]
        assert stats["expirations"] == 1
        assert stats["misses"] == 1


@pytest.mark.unit
class TestMemoryCacheCapacity:
    @pytest.fixture
    def small_cache(self, memory_clock, metrics):
        return ProcessMemoryCache({"profile": 3}, std_ttl=300, clock=memory_clock, metrics=metrics)

    def test_oldest_insertion_evicted(self, small_cache):
        for key in ("a", "b", "c", "d"):
            small_cache.set("profile", key, key)

        assert small_cache.keys("profile") == ["b", "c", "d"]
        assert small_cache.get("profile", "a") is MISSING

    def test_reads_do_not_refresh_position(self, small_cache):
        for key in ("a", "b", "c"):
            small_cache.set("profile", key, key)
        small_cache.get("profile", "a")
        small_cache.set("profile", "d", "d")

        assert small_cache.get("profile", "a") is MISSING

    def test_overwrite_counts_as_new_insertion(self, small_cache):
        for key in ("a", "b", "c"):
            small_cache.set("profile", key, key)
        small_cache.set("profile", "a", "a2")
        small_cache.set("profile", "d", "d")

        assert small_cache.keys("profile") == ["c", "a", "d"]
        assert small_cache.get("profile", "a") == "a2"

    def test_size_never_exceeds_max(self, small_cache):
        for i in range(50):
            small_cache.set("profile", f"k{i}", i)

        assert len(small_cache.keys("profile")) == 3
        assert small_cache.stats()["namespaces"]["profile"]["evictions"] == 47

    def test_zero_capacity_rejected(self, memory_clock, metrics):
        with pytest.raises(ValueError):
            ProcessMemoryCache({"profile": 0}, clock=memory_clock, metrics=metrics)


@pytest.mark.unit
class TestMemoryCacheFlushAndLifecycle:
    def test_flush_one_namespace(self, memory_cache):
        memory_cache.set("profile", "alice", 1)
        memory_cache.set("ai-page", "launch", 2)

        assert memory_cache.flush("profile") == 1
        assert memory_cache.get("ai-page", "launch") == 2

    def test_flush_all(self, memory_cache):
        memory_cache.set("profile", "alice", 1)
        memory_cache.set("ai-page", "launch", 2)

        assert memory_cache.flush() == 2
        assert memory_cache.keys("profile") == []

    def test_namespaces_listed(self, memory_cache):
        assert memory_cache.namespaces == ["profile", "ai-page"]

    @pytest.mark.asyncio
    async def test_sweeper_start_and_stop(self, memory_cache):
        memory_cache.start()
        assert memory_cache.stats()["sweeper_running"] is True

        await memory_cache.stop()
        assert memory_cache.stats()["sweeper_running"] is False

    @pytest.mark.asyncio
    async def test_stop_without_start_is_noop(self, memory_cache):
        await memory_cache.stop()
