"""
Policy Summary Service

Tenant-scoped, cached summary of the company security policy with a
three-tier degradation strategy:

    cache hit ──────────────────────────────────────────────► summary
    miss → fetch raw policy
             ├─ empty/None ─────────────────────────────────► ""
             └─ Tier 1: model (with_timeout inside with_retry)
                  └─ failure → Tier 2: heuristic excerpts
                                 └─ blank → Tier 3: truncated raw text
    → cache write (only when the tenant identity is known)

get_policy_summary() never raises.
"""

import logging
import time
from typing import Callable, Dict, Any, Optional

from config import PolicySummaryConfig, get_config
from policy_digest.context import TenantContext, get_tenant_context, resolve_tenant_id
from policy_digest.errors import ConfigurationError
from policy_digest.models import SummaryResult, SummaryTier
from policy_digest.pipeline.cache import TenantPolicyCache, get_tenant_cache
from policy_digest.pipeline.retry import RetryPolicy, with_retry
from policy_digest.pipeline.text import truncate_text
from policy_digest.pipeline.timeout import with_timeout
from policy_digest.policy.fetcher import HttpPolicyStore, PolicyStore
from policy_digest.policy.heuristic import build_heuristic_summary
from policy_digest.policy.summarizer import (
    SUMMARY_SYSTEM_PROMPT,
    SummaryModel,
    build_summary_model,
    build_user_prompt,
)

logger = logging.getLogger(__name__)

RAW_FALLBACK_HEADER = "COMPANY POLICY (fallback, truncated raw text)"
RAW_FALLBACK_NOTE = "Automated summarization was unavailable."

GENERATION_LABEL = "policy-summary-generation"


def build_raw_fallback(raw_policy: str, max_chars: int) -> str:
    """Tier 3: header plus the raw policy cut to ``max_chars``. Cannot fail."""
    return "\n\n".join([
        RAW_FALLBACK_HEADER,
        RAW_FALLBACK_NOTE,
        truncate_text(raw_policy, max_chars, "policy"),
    ])


class PolicySummaryService:
    """
    Produces and caches per-tenant policy summaries.

    Construct one per process (see get_policy_service()) and pass it to
    whatever needs it; tests build isolated instances with fakes.
    """

    def __init__(
        self,
        policy_store: PolicyStore,
        summary_model: Optional[SummaryModel],
        cache: Optional[TenantPolicyCache] = None,
        settings: Optional[PolicySummaryConfig] = None,
        retry_policy: Optional[RetryPolicy] = None,
        heuristic: Optional[Callable[[str], str]] = None,
        context_provider: Callable[[], TenantContext] = get_tenant_context,
    ):
        """
        Args:
            policy_store: Source of raw policy text
            summary_model: Tier-1 model; None skips straight to Tier 2
            cache: Tenant cache (defaults to the process-wide one)
            settings: Summary settings (defaults to PolicySummaryConfig)
            retry_policy: Retry limits for model calls
            heuristic: Tier-2 summarizer (defaults to build_heuristic_summary)
            context_provider: Returns the current request's TenantContext
        """
        self.settings = settings or get_config().policy_summary
        self.policy_store = policy_store
        self.summary_model = summary_model
        self.cache = cache if cache is not None else get_tenant_cache()
        self._retry_policy = retry_policy
        self._heuristic = heuristic or self._default_heuristic
        self._context_provider = context_provider

    def _default_heuristic(self, raw_policy: str) -> str:
        return build_heuristic_summary(
            raw_policy,
            max_sections=self.settings.heuristic_max_sections,
            excerpt_max_chars=self.settings.heuristic_excerpt_max_chars,
        )

    def resolve_tenant_id(self) -> Optional[str]:
        return resolve_tenant_id(self._context_provider())

    async def get_policy_summary(self) -> str:
        """
        Summary for the current tenant, or "" when no policy exists.

        Never raises.
        """
        try:
            result = await self.summarize()
        except Exception as e:
            logger.error(f"Policy summary pipeline failed unexpectedly: {type(e).__name__}: {e}", exc_info=True)
            return ""
        return result.text

    async def summarize(self) -> SummaryResult:
        """Run the cache lookup and, on a miss, the tiered pipeline."""
        start_time = time.time()
        tenant_id = self.resolve_tenant_id()

        if tenant_id:
            entry = self.cache.get(tenant_id)
            if entry is not None:
                logger.debug(f"Returning cached policy summary: tenant={tenant_id}")
                return SummaryResult(
                    text=entry.summary,
                    tier=entry.tier,
                    tenant_id=tenant_id,
                    cached=True,
                    from_cache=True,
                )
        else:
            logger.debug("Tenant identity unavailable, summary will not be cached")

        try:
            raw_policy = await self.policy_store.fetch_raw_policy(tenant_id)
        except Exception as e:
            logger.error(f"Failed to fetch policy: tenant={tenant_id}, error={type(e).__name__}: {e}")
            return await self._recover_from_fetch_failure(tenant_id, start_time)

        if not raw_policy or not raw_policy.strip():
            logger.warning(f"No company policy available: tenant={tenant_id}")
            return SummaryResult(tenant_id=tenant_id, duration_ms=(time.time() - start_time) * 1000)

        text, tier = await self._summarize_policy(raw_policy)

        cached = False
        if tenant_id:
            self.cache.put(tenant_id, text, tier=tier)
            cached = True
            logger.info(
                f"Policy summary cached: tenant={tenant_id}, tier={tier.value}, "
                f"length={len(text)}, ttl={self.cache.default_ttl_seconds}s"
            )

        return SummaryResult(
            text=text,
            tier=tier,
            tenant_id=tenant_id,
            cached=cached,
            duration_ms=(time.time() - start_time) * 1000,
        )

    async def _summarize_policy(self, raw_policy: str) -> tuple[str, SummaryTier]:
        """Tiers 1-3 for a non-empty raw policy."""
        # Tier 1
        if self.summary_model is not None:
            try:
                summary = await self._generate_summary(raw_policy)
                return summary, SummaryTier.AI
            except Exception as e:
                logger.warning(f"AI policy summarization failed, using heuristic fallback: {type(e).__name__}: {e}")
        else:
            logger.warning("No summary model configured, using heuristic fallback")

        # Tier 2
        try:
            heuristic = self._heuristic(raw_policy)
        except Exception as e:
            logger.error(f"Heuristic policy summary failed: {type(e).__name__}: {e}")
            heuristic = ""

        if heuristic and heuristic.strip():
            return heuristic.strip(), SummaryTier.HEURISTIC

        # Tier 3
        logger.warning("Heuristic summary empty, using truncated raw policy")
        return build_raw_fallback(raw_policy, self.settings.raw_fallback_max_chars), SummaryTier.RAW_TRUNCATED

    async def _generate_summary(self, raw_policy: str) -> str:
        bounded = truncate_text(raw_policy, self.settings.max_input_chars, "policy")
        user_prompt = build_user_prompt(bounded)
        timeout_ms = self.settings.summary_timeout_ms
        temperature = self.settings.temperature
        model = self.summary_model

        async def attempt() -> str:
            text = await with_timeout(
                lambda: model.generate(SUMMARY_SYSTEM_PROMPT, user_prompt, temperature=temperature),
                timeout_ms,
            )
            text = (text or "").strip()
            if not text:
                raise ValueError("Model returned an empty summary")
            return text

        logger.debug(f"Summarizing policy with AI: input_length={len(bounded)}")
        return await with_retry(attempt, GENERATION_LABEL, policy=self._retry_policy)

    async def _recover_from_fetch_failure(self, tenant_id: Optional[str], start_time: float) -> SummaryResult:
        """One more fetch; a usable policy is returned as Tier-3 text, uncached."""
        try:
            raw_policy = await self.policy_store.fetch_raw_policy(tenant_id)
        except Exception as e:
            logger.error(f"Policy fetch retry failed: tenant={tenant_id}, error={type(e).__name__}: {e}")
            raw_policy = None

        duration_ms = (time.time() - start_time) * 1000
        if not raw_policy or not raw_policy.strip():
            return SummaryResult(tenant_id=tenant_id, duration_ms=duration_ms)

        return SummaryResult(
            text=build_raw_fallback(raw_policy, self.settings.raw_fallback_max_chars),
            tier=SummaryTier.RAW_TRUNCATED,
            tenant_id=tenant_id,
            duration_ms=duration_ms,
        )

    def clear_cache(self) -> None:
        """Drop every cached summary (all tenants)."""
        self.cache.clear()
        logger.info("Policy cache cleared")

    def get_cache_stats(self) -> Dict[str, Any]:
        """Read-only cache stats for the current tenant."""
        return self.cache.stats(self.resolve_tenant_id())


# Global singleton instance
_global_policy_service: Optional[PolicySummaryService] = None


def get_policy_service() -> PolicySummaryService:
    """
    Get the process-wide service, built from configuration on first use.

    A missing model API key is logged and leaves Tier 1 disabled.
    """
    global _global_policy_service
    if _global_policy_service is None:
        try:
            summary_model: Optional[SummaryModel] = build_summary_model()
        except ConfigurationError as e:
            logger.error(f"Summary model unavailable, AI summarization disabled: {e.message}")
            summary_model = None

        _global_policy_service = PolicySummaryService(
            policy_store=HttpPolicyStore(),
            summary_model=summary_model,
        )
    return _global_policy_service


def set_policy_service(service: Optional[PolicySummaryService]) -> None:
    """Replace (or reset with None) the process-wide service."""
    global _global_policy_service
    _global_policy_service = service


async def get_policy_summary() -> str:
    """Policy summary for the current request's tenant. Never raises."""
    try:
        service = get_policy_service()
    except Exception as e:
        logger.error(f"Policy summary service could not be created: {type(e).__name__}: {e}")
        return ""
    return await service.get_policy_summary()


def clear_policy_cache() -> None:
    """Clear the process-wide policy summary cache."""
    get_policy_service().clear_cache()


def get_policy_cache_stats() -> Dict[str, Any]:
    """Cache stats for the current request's tenant."""
    return get_policy_service().get_cache_stats()


__all__ = [
    "RAW_FALLBACK_HEADER",
    "RAW_FALLBACK_NOTE",
    "build_raw_fallback",
    "PolicySummaryService",
    "get_policy_service",
    "set_policy_service",
    "get_policy_summary",
    "clear_policy_cache",
    "get_policy_cache_stats",
]
