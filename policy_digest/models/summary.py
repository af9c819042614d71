"""
Policy Summary Result Model

Transient result of one summary pipeline run. Callers of
get_policy_summary() only see ``text``; ``tier`` is for diagnostics.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class SummaryTier(str, Enum):
    """
    Which degradation tier produced the text.

    Levels:
        AI: Model summary (Tier 1)
        HEURISTIC: Excerpt-based fallback (Tier 2)
        RAW_TRUNCATED: Header plus truncated raw policy (Tier 3)
        EMPTY: No policy exists for the tenant
    """

    AI = "ai"
    HEURISTIC = "heuristic"
    RAW_TRUNCATED = "raw_truncated"
    EMPTY = "empty"

    @property
    def is_degraded(self) -> bool:
        """Whether the text is a fallback rather than a model summary."""
        return self in (SummaryTier.HEURISTIC, SummaryTier.RAW_TRUNCATED)


class SummaryResult(BaseModel):
    """Outcome of a single summary request."""

    text: str = Field(default="", description="Summary text handed to the caller")
    tier: SummaryTier = Field(default=SummaryTier.EMPTY, description="Producing tier")
    tenant_id: Optional[str] = Field(default=None, description="Resolved tenant identity")
    cached: bool = Field(default=False, description="Whether the result was stored in the cache")
    from_cache: bool = Field(default=False, description="Whether the result was served from the cache")
    duration_ms: float = Field(default=0.0, description="Pipeline run time in milliseconds")


__all__ = [
    "SummaryTier",
    "SummaryResult",
]
