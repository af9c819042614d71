"""
Policy Summary

Tenant policy fetching, tiered summarization and the cached service
built on top of them.
"""

from .heuristic import build_heuristic_summary, HEURISTIC_HEADER, HEURISTIC_NOTE
from .fetcher import PolicyStore, HttpPolicyStore, StaticPolicyStore, POLICY_SEPARATOR
from .summarizer import (
    SummaryModel,
    LangChainSummaryModel,
    build_summary_model,
    SUMMARY_SYSTEM_PROMPT,
)
from .service import (
    RAW_FALLBACK_HEADER,
    build_raw_fallback,
    PolicySummaryService,
    get_policy_service,
    set_policy_service,
    get_policy_summary,
    clear_policy_cache,
    get_policy_cache_stats,
)

__all__ = [
    # Heuristic
    "build_heuristic_summary",
    "HEURISTIC_HEADER",
    "HEURISTIC_NOTE",

    # Store
    "PolicyStore",
    "HttpPolicyStore",
    "StaticPolicyStore",
    "POLICY_SEPARATOR",

    # Model
    "SummaryModel",
    "LangChainSummaryModel",
    "build_summary_model",
    "SUMMARY_SYSTEM_PROMPT",

    # Service
    "RAW_FALLBACK_HEADER",
    "build_raw_fallback",
    "PolicySummaryService",
    "get_policy_service",
    "set_policy_service",
    "get_policy_summary",
    "clear_policy_cache",
    "get_policy_cache_stats",
]
