"""
Policy Digest

Process-wide, tenant-scoped cache of AI-derived security policy summaries,
with retry/timeout combinators for external calls and a schema gate for
tool outputs.
"""

from policy_digest.errors import (
    ErrorCode,
    ErrorCategory,
    ErrorInfo,
    PolicyDigestError,
    TimeoutException,
    ConfigurationError,
    ToolResultValidationError,
    to_error_info,
)
from policy_digest.pipeline import (
    truncate_text,
    with_timeout,
    with_retry,
    RetryPolicy,
    TenantPolicyCache,
    get_tenant_cache,
)
from policy_digest.context import request_context, get_tenant_context
from policy_digest.policy import (
    build_heuristic_summary,
    PolicySummaryService,
    get_policy_summary,
    clear_policy_cache,
    get_policy_cache_stats,
)
from policy_digest.validation import validate_tool_result, validate_tool_result_or_throw
from policy_digest.logging_config import setup_logging

__all__ = [
    # Errors
    "ErrorCode",
    "ErrorCategory",
    "ErrorInfo",
    "PolicyDigestError",
    "TimeoutException",
    "ConfigurationError",
    "ToolResultValidationError",
    "to_error_info",

    # Pipeline
    "truncate_text",
    "with_timeout",
    "with_retry",
    "RetryPolicy",
    "TenantPolicyCache",
    "get_tenant_cache",

    # Context
    "request_context",
    "get_tenant_context",

    # Policy summary
    "build_heuristic_summary",
    "PolicySummaryService",
    "get_policy_summary",
    "clear_policy_cache",
    "get_policy_cache_stats",

    # Validation
    "validate_tool_result",
    "validate_tool_result_or_throw",

    # Logging
    "setup_logging",
]
