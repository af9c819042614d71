"""
Tenant Policy Summary Cache

Design:
- One entry per tenant key, never shared between tenants
- TTL with lazy expiration: expired entries are deleted on the next get()
- Thread-safe operations (re-entrant lock around the map)
- stats() is a read-only diagnostic and never evicts
- Injectable clock so tests can move time forward
"""

import threading
import time
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel

from config import get_config
from policy_digest.models import SummaryTier


DEFAULT_TTL_SECONDS = 3600

IDENTITY_UNAVAILABLE = "identity unavailable"
NOT_CACHED = "not cached"


class CacheEntry(BaseModel):
    """Cached policy summary for one tenant."""
    key: str
    summary: str
    created_at: float
    expires_at: float
    tier: SummaryTier = SummaryTier.AI
    hit_count: int = 0

    def is_valid(self, now: float) -> bool:
        """An entry is valid iff now < expires_at."""
        return now < self.expires_at

    def age_seconds(self, now: float) -> float:
        return now - self.created_at


class TenantPolicyCache:
    """
    In-memory map of tenant key -> CacheEntry.

    Process-wide in production (see get_tenant_cache()), but every instance
    is independent so tests can build isolated caches.
    """

    def __init__(
        self,
        default_ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the cache.

        Args:
            default_ttl_seconds: TTL applied by put() when none is given
            clock: Returns the current unix time in seconds
        """
        self._default_ttl = default_ttl_seconds
        self._clock = clock
        self._cache: Dict[str, CacheEntry] = {}
        self._lock = threading.RLock()

    @property
    def default_ttl_seconds(self) -> int:
        return self._default_ttl

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._cache)

    def get(self, key: str) -> Optional[CacheEntry]:
        """Get a valid entry, returns None if not found or expired."""
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None

            if not entry.is_valid(self._clock()):
                # Lazy eviction
                del self._cache[key]
                return None

            entry.hit_count += 1
            return entry

    def put(
        self,
        key: str,
        summary: str,
        ttl_seconds: Optional[int] = None,
        tier: SummaryTier = SummaryTier.AI,
    ) -> CacheEntry:
        """
        Store a summary, overwriting any previous entry for the key.

        Args:
            key: Tenant key
            summary: Summary text
            ttl_seconds: TTL in seconds (None = use default)
            tier: Tier that produced the summary

        Returns:
            The stored entry
        """
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        with self._lock:
            now = self._clock()
            entry = CacheEntry(
                key=key,
                summary=summary,
                created_at=now,
                expires_at=now + ttl,
                tier=tier,
            )
            self._cache[key] = entry
            return entry

    def delete(self, key: str) -> bool:
        """Delete entry from cache."""
        with self._lock:
            if key in self._cache:
                del self._cache[key]
                return True
            return False

    def clear(self) -> None:
        """Clear all entries from cache."""
        with self._lock:
            self._cache.clear()

    def stats(self, key: Optional[str]) -> Dict[str, Any]:
        """
        Diagnostic view of one tenant's entry.

        Args:
            key: Tenant key, or None when the caller's identity is unknown

        Returns:
            Stats dict; ``reason`` distinguishes a missing identity from a miss
        """
        if not key:
            return {"cached": False, "reason": IDENTITY_UNAVAILABLE}

        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return {"cached": False, "reason": NOT_CACHED, "size": len(self._cache)}

            now = self._clock()
            return {
                "cached": True,
                "tenant_id": key,
                "is_valid": entry.is_valid(now),
                "age_minutes": round(entry.age_seconds(now) / 60),
                "expires_in_minutes": round((entry.expires_at - now) / 60),
                "summary_length": len(entry.summary),
                "tier": entry.tier.value,
                "hit_count": entry.hit_count,
            }


# Global singleton instance
_global_tenant_cache: Optional[TenantPolicyCache] = None


def get_tenant_cache() -> TenantPolicyCache:
    """Get global tenant policy cache instance."""
    global _global_tenant_cache
    if _global_tenant_cache is None:
        _global_tenant_cache = TenantPolicyCache(
            default_ttl_seconds=get_config().policy_summary.cache_ttl_seconds,
        )
    return _global_tenant_cache


__all__ = [
    "CacheEntry",
    "TenantPolicyCache",
    "get_tenant_cache",
    "IDENTITY_UNAVAILABLE",
    "NOT_CACHED",
]
