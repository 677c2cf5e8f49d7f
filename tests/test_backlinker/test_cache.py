"""Unit tests for backlinker.cache.BacklinkCache."""

import pytest

from backlinker.cache import BacklinkCache


class StatFails:
    def stat_modified_time(self, path):
        raise OSError("stat failed")


@pytest.fixture()
def provider(make_provider):
    return make_provider(["n.md", "a.md", "b.md"], mtimes={"n.md": 500})


@pytest.fixture()
def cache(provider, clock):
    return BacklinkCache(provider, ttl=30_000, max_size=3, clock=clock)


# ---------------------------------------------------------------------------
# Round trip
# ---------------------------------------------------------------------------


class TestGetPut:
    def test_round_trip(self, cache):
        cache.put("n.md", ["a.md", "b.md"])
        assert set(cache.get("n.md")) == {"a.md", "b.md"}

    def test_returned_list_is_a_copy(self, cache):
        cache.put("n.md", ["a.md", "b.md"])
        cache.get("n.md").append("x.md")
        assert cache.get("n.md") == ["a.md", "b.md"]

    def test_stored_list_is_a_copy(self, cache):
        backlinks = ["a.md"]
        cache.put("n.md", backlinks)
        backlinks.append("x.md")
        assert cache.get("n.md") == ["a.md"]

    def test_miss(self, cache):
        assert cache.get("nope.md") is None

    def test_entry_records_mtime(self, cache, clock):
        cache.put("n.md", [])
        entry = cache.entry("n.md")
        assert entry.timestamp == clock.now
        assert entry.file_modified_time == 500

    def test_unknown_mtime_stored_as_zero(self, cache):
        cache.put("a.md", [])
        assert cache.entry("a.md").file_modified_time == 0


# ---------------------------------------------------------------------------
# Validity
# ---------------------------------------------------------------------------


class TestValidity:
    def test_valid_at_ttl_boundary(self, cache, clock):
        cache.put("n.md", ["a.md"])
        clock.advance(30_000)
        assert cache.get("n.md") == ["a.md"]

    def test_expires_after_ttl(self, cache, clock):
        cache.put("n.md", ["a.md"])
        clock.advance(30_001)
        assert cache.get("n.md") is None
        assert "n.md" not in cache

    def test_modification_invalidates_before_ttl(self, cache, provider, clock):
        cache.put("n.md", ["a.md"])
        clock.advance(10)
        provider.mtimes["n.md"] = 501
        assert cache.is_valid("n.md") is False
        assert cache.get("n.md") is None

    def test_unstatable_document_uses_age_only(self, clock):
        cache = BacklinkCache(StatFails(), ttl=100, clock=clock)
        cache.put("n.md", ["a.md"])
        assert cache.entry("n.md").file_modified_time == 0
        assert cache.get("n.md") == ["a.md"]
        clock.advance(101)
        assert cache.get("n.md") is None

    def test_set_ttl(self, cache, clock):
        cache.put("n.md", ["a.md"])
        clock.advance(1_000)
        cache.set_ttl(500)
        assert not cache.is_valid("n.md")


# ---------------------------------------------------------------------------
# Invalidation / cleanup
# ---------------------------------------------------------------------------


class TestInvalidation:
    def test_invalidate(self, cache):
        cache.put("n.md", ["a.md"])
        cache.invalidate("n.md")
        cache.invalidate("never-cached.md")
        assert cache.get("n.md") is None

    def test_clear_resets_counters(self, cache):
        cache.put("n.md", ["a.md"])
        cache.get("n.md")
        cache.get("nope.md")
        cache.clear()
        stats = cache.statistics()
        assert len(cache) == 0
        assert (stats.cache_hits, stats.cache_misses) == (0, 0)


class TestCleanup:
    def test_oldest_evicted_when_over_bound(self, cache, clock):
        for name in ("a.md", "b.md", "c.md", "d.md"):
            cache.put(name, [])
            clock.advance(1)
        assert len(cache) == 3
        assert "a.md" not in cache
        assert {e.file_path for e in cache.entries()} == {"b.md", "c.md", "d.md"}

    def test_stale_entries_go_first(self, cache, provider, clock):
        cache.put("n.md", [])
        clock.advance(1)
        cache.put("a.md", [])
        clock.advance(1)
        cache.put("b.md", [])
        provider.mtimes["b.md"] = 10_000_000
        clock.advance(1)
        cache.put("c.md", [])
        assert {e.file_path for e in cache.entries()} == {"n.md", "a.md", "c.md"}

    def test_cleanup_returns_removed_count(self, cache, clock):
        cache.put("n.md", [])
        cache.put("a.md", [])
        clock.advance(30_001)
        assert cache.cleanup() == 2
        assert cache.statistics().last_cleanup == clock.now

    def test_set_max_size_shrinks(self, cache, clock):
        for name in ("a.md", "b.md", "c.md"):
            cache.put(name, [])
            clock.advance(1)
        cache.set_max_size(1)
        assert [e.file_path for e in cache.entries()] == ["c.md"]


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


class TestStatistics:
    def test_hits_and_misses(self, cache, clock):
        cache.put("n.md", ["a.md"])
        cache.get("n.md")
        cache.get("n.md")
        cache.get("nope.md")
        stats = cache.statistics()
        assert stats.total_cached_files == 1
        assert stats.cache_hits == 2
        assert stats.cache_misses == 1
        assert stats.cache_hit_rate == pytest.approx(2 / 3)

    def test_empty_hit_rate(self, cache):
        assert cache.statistics().cache_hit_rate == 0.0

    def test_expired_lookup_counts_as_miss(self, cache, clock):
        cache.put("n.md", [])
        clock.advance(30_001)
        cache.get("n.md")
        assert cache.statistics().cache_misses == 1
