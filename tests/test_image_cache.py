# ============================================================================
# IMAGE OBJECT CACHE TESTS
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Tests - Bounded TTL cache behaviour
# PURPOSE: Verify capacity bound, oldest-insertion eviction and lazy expiry
# CREATED: 14 OCT 2026
# ============================================================================
"""
Image Object Cache Tests

Pure in-memory tests with an injected clock.

Run with:
    pytest tests/test_image_cache.py -v
"""

import pytest

from services.image_cache import CacheEntry, ImageObjectCache


# ============================================================================
# HELPERS
# ============================================================================

class FakeClock:
    """Manually advanced clock (seconds)."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _make_cache(max_entries=20, ttl_seconds=300, clock=None):
    return ImageObjectCache(
        max_entries=max_entries, ttl_seconds=ttl_seconds, clock=clock or FakeClock(),
    )


# ============================================================================
# CAPACITY
# ============================================================================

class TestCapacity:

    def test_never_exceeds_max_entries(self):
        clock = FakeClock()
        cache = _make_cache(clock=clock)
        for i in range(50):
            cache.put(f"logo_{i}", f"data_{i}")
            clock.advance(1)
            assert len(cache) <= 20
        assert len(cache) == 20

    def test_oldest_insertion_evicted(self):
        clock = FakeClock()
        cache = _make_cache(max_entries=3, clock=clock)
        for key in ("a", "b", "c"):
            cache.put(key, key.upper())
            clock.advance(1)

        cache.put("d", "D")

        assert cache.get("a") is None
        assert "a" not in dict(cache.items())
        assert cache.get("b") == "B"
        assert cache.get("d") == "D"

    def test_ties_evict_first_in_iteration_order(self):
        clock = FakeClock()
        cache = _make_cache(max_entries=2, clock=clock)
        cache.put("first", 1)
        cache.put("second", 2)  # same inserted_at

        cache.put("third", 3)

        keys = [key for key, _ in cache.items()]
        assert keys == ["second", "third"]

    def test_reput_existing_key_does_not_evict(self):
        clock = FakeClock()
        cache = _make_cache(max_entries=2, clock=clock)
        cache.put("a", 1)
        clock.advance(1)
        cache.put("b", 2)
        clock.advance(1)

        cache.put("a", 10)

        assert len(cache) == 2
        assert cache.get("a") == 10
        assert cache.get("b") == 2

    def test_reput_refreshes_insertion_time(self):
        clock = FakeClock()
        cache = _make_cache(max_entries=2, clock=clock)
        cache.put("a", 1)
        clock.advance(1)
        cache.put("b", 2)
        clock.advance(1)
        cache.put("a", 1)  # now newer than b
        clock.advance(1)

        cache.put("c", 3)

        assert cache.get("b") is None
        assert cache.get("a") == 1

    def test_rejects_zero_capacity(self):
        with pytest.raises(ValueError):
            _make_cache(max_entries=0)


# ============================================================================
# EXPIRY
# ============================================================================

class TestExpiry:

    def test_fresh_entry_is_returned(self):
        clock = FakeClock()
        cache = _make_cache(clock=clock)
        cache.put("a", "A")
        clock.advance(300)  # now == expires_at, not past it
        assert cache.get("a") == "A"

    def test_expired_entry_reads_absent_but_stays_in_map(self):
        clock = FakeClock()
        cache = _make_cache(clock=clock)
        cache.put("a", "A")
        clock.advance(301)

        assert cache.get("a") is None
        assert "a" not in cache
        assert len(cache) == 1

    def test_expired_entry_replaced_on_put(self):
        clock = FakeClock()
        cache = _make_cache(clock=clock)
        cache.put("a", "old")
        clock.advance(301)
        cache.put("a", "new")
        assert cache.get("a") == "new"

    def test_entry_timing(self):
        clock = FakeClock(now=50.0)
        cache = _make_cache(ttl_seconds=10, clock=clock)
        cache.put("a", "A")
        entry = dict(cache.items())["a"]
        assert isinstance(entry, CacheEntry)
        assert entry.inserted_at == 50.0
        assert entry.expires_at == 60.0
        assert not entry.is_expired(60.0)
        assert entry.is_expired(60.5)


# ============================================================================
# INVALIDATION
# ============================================================================

class TestInvalidation:

    def test_invalidate_present_key(self):
        cache = _make_cache()
        cache.put("a", "A")
        assert cache.invalidate("a") is True
        assert cache.get("a") is None
        assert len(cache) == 0

    def test_invalidate_missing_key(self):
        cache = _make_cache()
        assert cache.invalidate("nope") is False

    def test_clear(self):
        cache = _make_cache()
        cache.put("a", "A")
        cache.put("b", "B")
        cache.clear()
        assert len(cache) == 0
