"""Tests for the in-process TTL cache."""

import pytest

from app.core.cache import TTLCache


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


class TestTTLCache:
    def test_get_and_set(self, clock):
        cache = TTLCache(maxsize=4, ttl=10, clock=clock)
        cache.set("a", 1)
        assert cache.get("a") == 1
        assert "a" in cache
        assert cache.get("missing", "fallback") == "fallback"

    def test_entries_expire(self, clock):
        cache = TTLCache(maxsize=4, ttl=10, clock=clock)
        cache.set("a", 1)
        clock.now = 9.9
        assert cache.get("a") == 1
        clock.now = 10.0
        assert cache.get("a") is None
        assert "a" not in cache

    def test_set_refreshes_expiry(self, clock):
        cache = TTLCache(maxsize=4, ttl=10, clock=clock)
        cache.set("a", 1)
        clock.now = 8
        cache.set("a", 2)
        clock.now = 15
        assert cache.get("a") == 2

    def test_least_recently_used_evicted(self, clock):
        cache = TTLCache(maxsize=2, ttl=10, clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)
        assert "a" in cache
        assert "b" not in cache
        assert "c" in cache
        assert len(cache) == 2

    def test_evict_and_clear(self, clock):
        cache = TTLCache(maxsize=4, ttl=10, clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.evict("a")
        cache.evict("never-set")
        assert "a" not in cache
        cache.clear()
        assert len(cache) == 0

    def test_cached_none_is_a_hit(self, clock):
        cache = TTLCache(maxsize=4, ttl=10, clock=clock)
        cache.set("a", None)
        assert "a" in cache

    @pytest.mark.parametrize("maxsize,ttl", [(0, 10), (4, 0), (4, -1)])
    def test_invalid_arguments(self, maxsize, ttl):
        with pytest.raises(ValueError):
            TTLCache(maxsize=maxsize, ttl=ttl)
