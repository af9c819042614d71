"""
租户缓存测试
"""

import threading

from policy_digest.models import SummaryTier
from policy_digest.pipeline.cache import (
    IDENTITY_UNAVAILABLE,
    NOT_CACHED,
    CacheEntry,
    TenantPolicyCache,
    get_tenant_cache,
)


class TestCacheEntry:
    """测试缓存条目"""

    def test_validity_boundary(self):
        entry = CacheEntry(key="t", summary="s", created_at=100.0, expires_at=200.0)
        assert entry.is_valid(199.9)
        assert not entry.is_valid(200.0)

    def test_age(self):
        entry = CacheEntry(key="t", summary="s", created_at=100.0, expires_at=200.0)
        assert entry.age_seconds(160.0) == 60.0


class TestTenantPolicyCache:
    """测试 TenantPolicyCache"""

    def test_put_then_get(self, cache):
        cache.put("tenant-a", "summary A")
        entry = cache.get("tenant-a")
        assert entry is not None
        assert entry.summary == "summary A"

    def test_miss(self, cache):
        assert cache.get("unknown") is None

    def test_default_ttl(self, cache, fake_clock):
        entry = cache.put("tenant-a", "summary")
        assert entry.expires_at == fake_clock.now + 3600

    def test_expired_entry_not_returned_and_evicted(self, cache, fake_clock):
        cache.put("tenant-a", "summary")
        fake_clock.advance(3600)
        assert cache.get("tenant-a") is None
        assert cache.size == 0

    def test_expired_entry_gone_from_stats_after_get(self, cache, fake_clock):
        cache.put("tenant-a", "summary")
        fake_clock.advance(3601)
        assert cache.get("tenant-a") is None
        assert cache.stats("tenant-a")["reason"] == NOT_CACHED

    def test_entry_valid_just_before_expiry(self, cache, fake_clock):
        cache.put("tenant-a", "summary")
        fake_clock.advance(3599)
        assert cache.get("tenant-a") is not None

    def test_custom_ttl(self, cache, fake_clock):
        cache.put("tenant-a", "summary", ttl_seconds=10)
        fake_clock.advance(11)
        assert cache.get("tenant-a") is None

    def test_tier_stored_with_entry(self, cache):
        cache.put("tenant-a", "excerpts", tier=SummaryTier.HEURISTIC)
        assert cache.get("tenant-a").tier == SummaryTier.HEURISTIC
        assert cache.stats("tenant-a")["tier"] == "heuristic"

    def test_overwrite(self, cache):
        cache.put("tenant-a", "old")
        cache.put("tenant-a", "new")
        assert cache.get("tenant-a").summary == "new"
        assert cache.size == 1

    def test_tenant_isolation(self, cache):
        cache.put("tenant-a", "summary A")
        cache.put("tenant-b", "summary B")
        assert cache.get("tenant-a").summary == "summary A"
        assert cache.get("tenant-b").summary == "summary B"

    def test_hit_count(self, cache):
        cache.put("tenant-a", "summary")
        cache.get("tenant-a")
        cache.get("tenant-a")
        assert cache.get("tenant-a").hit_count == 3

    def test_delete_and_clear(self, cache):
        cache.put("tenant-a", "a")
        cache.put("tenant-b", "b")
        assert cache.delete("tenant-a") is True
        assert cache.delete("tenant-a") is False
        cache.clear()
        assert cache.size == 0

    def test_concurrent_puts(self, cache):
        def writer(i):
            for j in range(100):
                cache.put(f"tenant-{i}", f"summary {j}")
                cache.get(f"tenant-{i}")

        threads = [threading.Thread(target=writer, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert cache.size == 8
        assert cache.get("tenant-3").summary == "summary 99"


class TestCacheStats:
    """测试缓存统计"""

    def test_identity_unavailable(self, cache):
        assert cache.stats(None) == {"cached": False, "reason": IDENTITY_UNAVAILABLE}
        assert cache.stats("") == {"cached": False, "reason": IDENTITY_UNAVAILABLE}

    def test_not_cached(self, cache):
        cache.put("other", "x")
        stats = cache.stats("tenant-a")
        assert stats["cached"] is False
        assert stats["reason"] == NOT_CACHED
        assert stats["size"] == 1

    def test_cached_entry(self, cache, fake_clock):
        cache.put("tenant-a", "summary text")
        cache.get("tenant-a")
        fake_clock.advance(600)

        stats = cache.stats("tenant-a")
        assert stats == {
            "cached": True,
            "tenant_id": "tenant-a",
            "is_valid": True,
            "age_minutes": 10,
            "expires_in_minutes": 50,
            "summary_length": len("summary text"),
            "tier": "ai",
            "hit_count": 1,
        }

    def test_stats_does_not_evict(self, cache, fake_clock):
        cache.put("tenant-a", "summary")
        fake_clock.advance(4000)

        stats = cache.stats("tenant-a")
        assert stats["cached"] is True
        assert stats["is_valid"] is False
        assert cache.size == 1


class TestGlobalCache:
    """测试全局缓存"""

    def test_singleton(self):
        assert get_tenant_cache() is get_tenant_cache()
        assert isinstance(get_tenant_cache(), TenantPolicyCache)
