"""Tests for the response cache."""

import threading

import pytest

from taxcalc.request.types import PayFrequency
from taxcalc.services.cache import CacheKey, LRUCache


class TestCacheKey:
    """Test request fingerprints."""

    def test_identical_inputs_same_key(self):
        assert CacheKey.of(60000, "CA", PayFrequency.MONTHLY) == CacheKey.of(
            60000.0, "CA", PayFrequency.MONTHLY
        )

    def test_salary_rounded_to_cents(self):
        key = CacheKey.of(60000.004, "", PayFrequency.WEEKLY)

        assert key == CacheKey.of(60000, "", PayFrequency.WEEKLY)
        assert key.salary == "60000.00"

    def test_pay_frequency_distinguishes_keys(self):
        keys = {CacheKey.of(60000, "CA", frequency) for frequency in PayFrequency}

        assert len(keys) == len(PayFrequency)

    def test_fingerprint(self):
        assert CacheKey.of(60000, "CA", PayFrequency.BI_WEEKLY).fingerprint == "60000.00CAbi-weekly"
        assert str(CacheKey.of(1.5, "", PayFrequency.MONTHLY)) == "1.50monthly"

    def test_fields_do_not_collide(self):
        """Keys that concatenate to the same string are still distinct."""
        left = CacheKey(salary="1.00", state="CA", pay_frequency=PayFrequency.MONTHLY)
        right = CacheKey(salary="1.00C", state="A", pay_frequency=PayFrequency.MONTHLY)

        assert left.fingerprint == right.fingerprint
        assert left != right


class TestLRUCache:
    """Test bounded LRU behavior."""

    def test_get_missing(self):
        cache: LRUCache[str, int] = LRUCache(2)

        assert cache.get("a") == (None, False)
        assert cache.misses == 1

    def test_put_then_get(self):
        cache: LRUCache[str, int] = LRUCache(2)
        cache.put("a", 1)

        assert cache.get("a") == (1, True)
        assert cache.hits == 1

    def test_evicts_least_recently_inserted(self):
        cache: LRUCache[str, int] = LRUCache(3)
        for i, key in enumerate(["a", "b", "c", "d"]):
            cache.put(key, i)

        assert "a" not in cache
        assert all(key in cache for key in ["b", "c", "d"])
        assert cache.evictions == 1

    def test_get_refreshes_recency(self):
        cache: LRUCache[str, int] = LRUCache(3)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.put("c", 3)

        cache.get("a")
        cache.put("d", 4)

        assert "a" in cache
        assert "b" not in cache

    def test_put_existing_key_replaces_without_eviction(self):
        cache: LRUCache[str, int] = LRUCache(2)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.put("a", 10)

        assert len(cache) == 2
        assert cache.evictions == 0
        assert cache.get("a") == (10, True)

    def test_put_existing_key_refreshes_recency(self):
        cache: LRUCache[str, int] = LRUCache(2)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.put("a", 10)

        cache.put("c", 3)

        assert "a" in cache
        assert "b" not in cache

    def test_contains_does_not_refresh_recency(self):
        cache: LRUCache[str, int] = LRUCache(2)
        cache.put("a", 1)
        cache.put("b", 2)

        assert "a" in cache
        cache.put("c", 3)

        assert "a" not in cache
        assert cache.hits == 0

    def test_eviction_count(self):
        cache: LRUCache[int, int] = LRUCache(2)
        for i in range(10):
            cache.put(i, i)

        assert len(cache) == 2
        assert cache.evictions == 8

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            LRUCache(0)

    def test_concurrent_access(self):
        cache: LRUCache[int, int] = LRUCache(50)

        def worker(offset: int) -> None:
            for i in range(500):
                cache.put(offset + i, i)
                cache.get(offset + i - 1)

        threads = [threading.Thread(target=worker, args=(n * 1000,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(cache) == 50
        assert cache.capacity == 50
