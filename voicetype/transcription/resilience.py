"""Resilience wrapper — deadlines for network calls and the best-effort combinator."""
import asyncio
import logging
from typing import Awaitable, TypeVar

from voicetype.constants import LOG_BEST_EFFORT_FAILED, LOG_TIMEOUT
from voicetype.errors import OperationTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_timeout(operation: Awaitable[T], label: str, timeout_ms: int) -> T:
    """Await ``operation`` for at most ``timeout_ms``.

    On expiry the operation is cancelled, which aborts any in-flight httpx
    transfer, and OperationTimeoutError is raised. ``wait_for`` owns the
    deadline, so it is gone on every exit path. No retries: one attempt only.
    """
    try:
        return await asyncio.wait_for(operation, timeout=timeout_ms / 1000)
    except asyncio.TimeoutError:
        logger.warning(LOG_TIMEOUT, label, timeout_ms)
        raise OperationTimeoutError(label, timeout_ms) from None


async def best_effort(operation: Awaitable[T], fallback: T, label: str) -> T:
    """Return the operation's result, or ``fallback`` if it raises anything.

    Cancellation of the caller is not an operation failure and still propagates.
    """
    try:
        return await operation
    except Exception as exc:
        logger.warning(LOG_BEST_EFFORT_FAILED, label, exc)
        return fallback
