"""
Pipeline Retry Handler

Bounded retries with exponential backoff for external calls.

Design:
- with_retry(): invoke, retry on ANY exception up to max_attempts
- Backoff: base_delay_ms * 2**attempt, capped at max_delay_ms, optional jitter
- Retries are blind to the error type (timeouts and bad input alike)
- The last exception is re-raised unchanged, with a note naming the label
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional, TypeVar

from pydantic import BaseModel, Field

from config import get_config

logger = logging.getLogger(__name__)

T = TypeVar('T')


class RetryPolicy(BaseModel):
    """Retry limits for a single with_retry() call."""

    max_attempts: int = Field(default=3, ge=1)
    base_delay_ms: int = Field(default=1000, ge=0)
    max_delay_ms: int = Field(default=10000, ge=0)
    jitter_enabled: bool = True

    @classmethod
    def from_config(cls) -> "RetryPolicy":
        """Build the policy from the global RetryConfig."""
        retry = get_config().retry
        return cls(
            max_attempts=retry.max_attempts,
            base_delay_ms=retry.base_delay_ms,
            max_delay_ms=retry.max_delay_ms,
            jitter_enabled=retry.jitter_enabled,
        )

    def backoff_delay_ms(self, attempt: int) -> float:
        """
        Delay before the retry following the zero-based ``attempt``.

        Attempt 0: base, attempt 1: 2 * base, attempt 2: 4 * base ...
        """
        delay = min(self.base_delay_ms * (2 ** attempt), self.max_delay_ms)
        if self.jitter_enabled and delay > 0:
            # Up to 10% jitter, never beyond the cap
            delay = min(delay + random.uniform(0, delay * 0.1), self.max_delay_ms)
        return delay


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    label: str = "operation",
    max_attempts: Optional[int] = None,
    policy: Optional[RetryPolicy] = None,
) -> T:
    """
    Invoke ``operation`` and retry it on failure.

    Args:
        operation: Zero-argument callable returning an awaitable
        label: Name used in logs and in the note added to the final error
        max_attempts: Overrides the policy's attempt ceiling
        policy: Retry limits (defaults to the configured RetryConfig)

    Returns:
        Result of the first successful attempt

    Raises:
        Exception: The last attempt's exception, once attempts are exhausted
    """
    policy = policy or RetryPolicy.from_config()
    attempts = max_attempts if max_attempts is not None else policy.max_attempts
    attempts = max(attempts, 1)

    for attempt in range(attempts):
        try:
            return await operation()
        except Exception as e:
            if attempt + 1 >= attempts:
                logger.error(
                    f"[{label}] failed after {attempts} attempt(s): {type(e).__name__}: {e}"
                )
                e.add_note(f"{label}: failed after {attempts} attempt(s)")
                raise

            delay_ms = policy.backoff_delay_ms(attempt)
            logger.warning(
                f"[{label}] attempt {attempt + 1}/{attempts} failed: "
                f"{type(e).__name__}: {e}; retrying in {delay_ms:.0f}ms"
            )
            await asyncio.sleep(delay_ms / 1000)

    # range(attempts) is never empty, the loop always returns or raises
    raise RuntimeError(f"[{label}] retry loop exited without a result")


__all__ = [
    "RetryPolicy",
    "with_retry",
]
