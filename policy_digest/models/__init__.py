"""
Policy Digest Models

Data models shared by the summary service and the validation gate.
"""

from .summary import SummaryTier, SummaryResult
from .validation import ValidationOutcome

__all__ = [
    "SummaryTier",
    "SummaryResult",
    "ValidationOutcome",
]
