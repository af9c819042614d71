"""
Policy Digest Pipeline

Resilience substrate shared by every external call.

Architecture:
    operation (model call / HTTP fetch)
        ↓
    with_timeout (hard wall-clock deadline per attempt)
        ↓
    with_retry (bounded attempts, exponential backoff)
        ↓
    TenantPolicyCache (tenant-scoped TTL storage of the result)

Components:
    - Text: deterministic truncation (truncate_text)
    - Timeout: async deadline (with_timeout, TimeoutException)
    - Retry: bounded retries (with_retry, RetryPolicy)
    - Cache: tenant policy summary cache
"""

from policy_digest.pipeline.text import truncate_text, TRUNCATION_MARKER
from policy_digest.pipeline.timeout import with_timeout, TimeoutException
from policy_digest.pipeline.retry import with_retry, RetryPolicy
from policy_digest.pipeline.cache import (
    CacheEntry,
    TenantPolicyCache,
    get_tenant_cache,
)

__all__ = [
    # Text
    "truncate_text",
    "TRUNCATION_MARKER",

    # Timeout
    "with_timeout",
    "TimeoutException",

    # Retry
    "with_retry",
    "RetryPolicy",

    # Cache
    "CacheEntry",
    "TenantPolicyCache",
    "get_tenant_cache",
]
