"""
Tests for the bounded insertion-order memory cache.
"""

import threading

import pytest

from image_cache.entities import CacheEntryEntity
from image_cache.repositories import MemoryCache


def entry(n: int) -> CacheEntryEntity:
    return CacheEntryEntity(data=f"image-{n}".encode(), image_format="webp")


def test_get_returns_stored_entry():
    cache = MemoryCache(capacity=3)
    cache.put("a", entry(1))
    assert cache.get("a") == entry(1)
    assert cache.get("missing") is None


def test_inserting_past_capacity_evicts_oldest():
    cache = MemoryCache(capacity=3)
    for n in range(4):
        cache.put(f"k{n}", entry(n))

    assert len(cache) == 3
    assert cache.get("k0") is None
    assert cache.keys() == ["k1", "k2", "k3"]


def test_reads_do_not_refresh_recency():
    cache = MemoryCache(capacity=2)
    cache.put("a", entry(1))
    cache.put("b", entry(2))
    cache.get("a")
    cache.put("c", entry(3))

    assert "a" not in cache
    assert "b" in cache
    assert "c" in cache


def test_reinserting_present_key_keeps_order_and_content():
    cache = MemoryCache(capacity=2)
    cache.put("a", entry(1))
    cache.put("b", entry(2))
    cache.put("a", entry(99))

    assert cache.get("a") == entry(1)
    cache.put("c", entry(3))
    assert "a" not in cache
    assert cache.keys() == ["b", "c"]


def test_default_capacity_is_100():
    cache = MemoryCache()
    for n in range(101):
        cache.put(f"k{n}", entry(n))
    assert len(cache) == 100
    assert "k0" not in cache


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        MemoryCache(capacity=0)


def test_clear_and_stats():
    cache = MemoryCache(capacity=5)
    cache.put("a", entry(1))
    cache.put("b", entry(2))

    stats = cache.get_stats()
    assert stats["entries"] == 2
    assert stats["capacity"] == 5
    assert stats["size_bytes"] == len(b"image-1") + len(b"image-2")

    assert cache.clear() == 2
    assert len(cache) == 0


def test_concurrent_puts_respect_capacity():
    cache = MemoryCache(capacity=50)

    def worker(offset: int) -> None:
        for n in range(200):
            cache.put(f"t{offset}-{n}", entry(n))
            cache.get(f"t{offset}-{n // 2}")

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(cache) == 50
    assert len(set(cache.keys())) == 50
