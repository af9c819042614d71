"""
Validation Outcome Model

Result of passing a tool output through the validation gate. Either
``ok=True`` with the validated (possibly coerced) ``data``, or ``ok=False``
with a structured ``error``.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from policy_digest.errors import ErrorInfo


class ValidationOutcome(BaseModel):
    """Tool result validation outcome."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    ok: bool
    data: Any = None
    error: Optional[ErrorInfo] = None

    @classmethod
    def success(cls, data: Any) -> "ValidationOutcome":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: ErrorInfo) -> "ValidationOutcome":
        return cls(ok=False, error=error)


__all__ = [
    "ValidationOutcome",
]
