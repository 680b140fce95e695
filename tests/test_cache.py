# tests/test_cache.py

"""
Tests for the TTL cache behind the permission resolver.
"""

from core.cache import TTLCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def test_cache_set_and_get():
    cache = TTLCache(ttl_seconds=60)
    cache.set("test_key", "test_value")
    assert cache.get("test_key") == "test_value"


def test_cache_expiration():
    clock = FakeClock()
    cache = TTLCache(ttl_seconds=300, clock=clock)
    cache.set("user:alice", "resolved")

    clock.advance(299)
    assert cache.get("user:alice") == "resolved"

    clock.advance(1)
    assert cache.get("user:alice") is None
    assert cache.size() == 0


def test_cache_per_entry_ttl():
    clock = FakeClock()
    cache = TTLCache(ttl_seconds=300, clock=clock)
    cache.set("short", 1, ttl_seconds=5)
    clock.advance(6)
    assert cache.get("short") is None


def test_zero_ttl_is_not_cached():
    cache = TTLCache(ttl_seconds=0)
    cache.set("key", "value")
    assert cache.get("key") is None
    assert cache.size() == 0


def test_cache_delete():
    cache = TTLCache()
    cache.set("delete_key", "delete_value")
    cache.delete("delete_key")
    assert cache.get("delete_key") is None

    # Deleting a missing key is a no-op
    cache.delete("delete_key")


def test_cache_clear():
    cache = TTLCache()
    cache.set("key1", "value1")
    cache.set("key2", "value2")

    cache.clear()

    assert cache.get("key1") is None
    assert cache.get("key2") is None


def test_cache_evicts_oldest_when_full():
    cache = TTLCache(max_entries=2)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)

    assert cache.get("a") is None
    assert cache.get("b") == 2
    assert cache.get("c") == 3


def test_rewriting_a_key_refreshes_its_position():
    cache = TTLCache(max_entries=2)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("a", 10)
    cache.set("c", 3)

    assert cache.get("a") == 10
    assert cache.get("b") is None


def test_cleanup_expired():
    clock = FakeClock()
    cache = TTLCache(ttl_seconds=10, clock=clock)
    cache.set("old", 1)
    clock.advance(5)
    cache.set("new", 2)
    clock.advance(6)

    assert cache.cleanup_expired() == 1
    assert cache.size() == 1
    assert cache.get("new") == 2
