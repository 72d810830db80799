"""
Retry policy using Tenacity.

Applies only to idempotent HTTP reads (the history service). On-chain
writes are never retried automatically.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from omnibridge.core.exceptions import NetworkError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = (429, 500, 502, 503, 504)


def is_transient_error(exception: BaseException) -> bool:
    """Check if exception is a transient network/infrastructure error."""
    if isinstance(exception, httpx.TransportError):
        return True
    if isinstance(exception, NetworkError):
        return exception.status_code in RETRYABLE_STATUS_CODES
    return False


async def execute_with_retry(
    func: Callable[..., Awaitable[Any]],
    *args: Any,
    attempts: int = 3,
    max_wait: float = 8.0,
    **kwargs: Any,
) -> Any:
    """Execute an async function, retrying transient errors with exponential backoff."""
    async for attempt in AsyncRetrying(
        retry=retry_if_exception(is_transient_error),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=max_wait),
        stop=stop_after_attempt(attempts),
        reraise=True,
        before_sleep=lambda retry_state: logger.warning(
            f"Retrying {getattr(func, '__name__', 'request')}... "
            f"(Attempt {retry_state.attempt_number})"
        ),
    ):
        with attempt:
            return await func(*args, **kwargs)
