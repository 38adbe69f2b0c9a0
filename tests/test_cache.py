"""Unit tests for LookupCache TTL and sweep behavior."""

from mikud.cache import CacheEntry, LookupCache
from mikud.models import Address


class TestLookupCacheGet:
    """Tests for read-side expiry."""

    def test_fresh_entry_returned(self, cache, clock):
        cache.put("k", "6423207")
        clock.advance(299.9)
        entry = cache.get("k")
        assert entry == CacheEntry("6423207", 1000.0)

    def test_missing_key(self, cache):
        assert cache.get("nope") is None

    def test_expired_at_exact_ttl(self, cache, clock):
        cache.put("k", "6423207")
        clock.advance(300)
        assert cache.get("k") is None

    def test_get_does_not_remove_stale_entries(self, cache, clock):
        cache.put("k", "6423207")
        clock.advance(1000)
        assert cache.get("k") is None
        assert len(cache) == 1

    def test_overwrite_refreshes_timestamp(self, cache, clock):
        cache.put("k", "1111111")
        clock.advance(200)
        cache.put("k", "2222222")
        clock.advance(200)
        assert cache.get("k").zipcode == "2222222"


class TestLookupCacheSweep:
    """Tests for the size-triggered sweep."""

    def test_no_sweep_at_bound(self, cache, clock):
        for i in range(100):
            cache.put(f"k{i}", "6423207")
        clock.advance(600)
        # Exactly at the bound: nothing triggers a sweep
        cache.put("k0", "6423207")
        assert len(cache) == 100

    def test_put_above_bound_drops_expired(self, cache, clock):
        for i in range(100):
            cache.put(f"old{i}", "6423207")
        clock.advance(300)
        cache.put("new", "7654321")

        assert len(cache) == 1
        assert cache.get("new").zipcode == "7654321"

    def test_sweep_keeps_valid_entries_above_bound(self, cache, clock):
        for i in range(150):
            cache.put(f"k{i}", "6423207")
            clock.advance(1)
        assert len(cache) == 150

    def test_no_expired_entries_after_overflowing_put(self, cache, clock):
        for i in range(100):
            cache.put(f"old{i}", "6423207")
        clock.advance(200)
        for i in range(50):
            cache.put(f"fresh{i}", "6423207")
        assert len(cache) == 150

        clock.advance(100)
        cache.put("last", "6423207")

        now = clock()
        assert len(cache) == 51
        assert all(now - entry.inserted_at < cache.ttl for entry in cache._entries.values())

    def test_manual_sweep_counts_removed(self, cache, clock):
        cache.put("a", "1111111")
        clock.advance(200)
        cache.put("b", "2222222")
        clock.advance(150)
        assert cache.sweep() == 1
        assert cache.get("b").zipcode == "2222222"


class TestLookupCacheMisc:
    """Tests for stats, clear and key building."""

    def test_stats_and_clear(self, cache):
        cache.put("a", "1111111")
        cache.put("b", "2222222")
        assert cache.stats() == {
            "entries": 2,
            "ttl_seconds": 300,
            "max_entries": 100,
            "backend": "memory",
        }
        assert cache.clear() == 2
        assert len(cache) == 0

    def test_make_key_ignores_object_identity(self):
        first = Address(city="חיפה", street="הנביאים", house_number=25)
        second = Address.from_mapping({"city": "חיפה", "street": "הנביאים", "houseNumber": 25, "note": "x"})
        assert LookupCache.make_key(first) == LookupCache.make_key(second)

    def test_make_key_distinguishes_entrance(self):
        a = Address(city="תל אביב", street="פרישמן", house_number=7, entrance=1)
        b = Address(city="תל אביב", street="פרישמן", house_number=7, entrance=2)
        assert LookupCache.make_key(a) != LookupCache.make_key(b)
