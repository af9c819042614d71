"""
Pipeline Cache Module

Provides the tenant-scoped policy summary cache.
"""

from .tenant_cache import (
    CacheEntry,
    TenantPolicyCache,
    get_tenant_cache,
    IDENTITY_UNAVAILABLE,
    NOT_CACHED,
)

__all__ = [
    "CacheEntry",
    "TenantPolicyCache",
    "get_tenant_cache",
    "IDENTITY_UNAVAILABLE",
    "NOT_CACHED",
]
