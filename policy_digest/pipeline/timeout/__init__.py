"""
Pipeline Timeout Handler

Asynchronous deadline for external calls (model generation, HTTP fetches).

Design:
- with_timeout(): race an awaitable operation against a wall-clock deadline
- Raises TimeoutException carrying the configured timeout_ms
- The losing operation is abandoned: it gets a cancel request, nobody
  awaits it, and its eventual result is discarded
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from policy_digest.errors import TimeoutException

logger = logging.getLogger(__name__)

T = TypeVar('T')


async def with_timeout(
    operation: Callable[[], Awaitable[T]],
    timeout_ms: int,
) -> T:
    """
    Execute an async operation with a deadline.

    Args:
        operation: Zero-argument callable returning an awaitable
        timeout_ms: Deadline in milliseconds

    Returns:
        Result of the operation

    Raises:
        TimeoutException: If the deadline fires first
        Exception: Any exception from the operation itself, unchanged
    """
    task = asyncio.ensure_future(operation())

    try:
        done, _ = await asyncio.wait({task}, timeout=max(timeout_ms, 0) / 1000)
    except asyncio.CancelledError:
        task.cancel()
        raise

    if task not in done:
        task.cancel()
        # Retrieve the abandoned task's outcome so it is never reported as unhandled
        task.add_done_callback(_discard_result)
        logger.debug(f"Operation abandoned after {timeout_ms}ms")
        raise TimeoutException(f"Timeout after {timeout_ms}ms", timeout_ms)

    return task.result()


def _discard_result(task: asyncio.Future) -> None:
    if not task.cancelled():
        task.exception()


__all__ = [
    "TimeoutException",
    "with_timeout",
]
