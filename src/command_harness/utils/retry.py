"""Backoff for transient failures of read-store queries."""

import asyncio
import random
from typing import Awaitable, Callable, Optional, TypeVar

import httpx

from ..constants import (
    RETRY_BASE_DELAY_SECONDS,
    RETRY_DEFAULT_MAX_ATTEMPTS,
    RETRY_EXPONENTIAL_BASE,
    RETRY_MAX_DELAY_SECONDS,
    RETRY_TRANSIENT_STATUS_CODES,
)

T = TypeVar("T")

RetryCallback = Callable[[int, Exception, float], None]


def compute_retry_delay(attempt: int, base_delay: float = RETRY_BASE_DELAY_SECONDS) -> float:
    """Seconds to sleep before retry number ``attempt`` (1 = first retry).

    Grows exponentially from ``base_delay`` with up to ``base_delay`` of jitter,
    capped at RETRY_MAX_DELAY_SECONDS.
    """
    backoff = base_delay * RETRY_EXPONENTIAL_BASE ** (attempt - 1)
    return min(RETRY_MAX_DELAY_SECONDS, backoff + random.uniform(0, base_delay))


def should_retry_error(exc: Exception) -> bool:
    """Whether a failed store query is worth repeating.

    Connection-level httpx errors and throttling/unavailable responses are
    transient. Everything else, including 4xx responses and decoding errors,
    is reported to the caller immediately.
    """
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRY_TRANSIENT_STATUS_CODES
    return isinstance(exc, httpx.TransportError)


async def retry_with_backoff(
    func: Callable[[], Awaitable[T]],
    max_retries: int = RETRY_DEFAULT_MAX_ATTEMPTS,
    on_retry: Optional[RetryCallback] = None,
) -> T:
    """Await ``func()`` until it succeeds or fails with a non-transient error.

    Args:
        func: Zero-argument coroutine function, called once per attempt
        max_retries: Total attempts, at least 1
        on_retry: Called with (attempt, exception, delay) before each sleep

    Raises:
        ValueError: If max_retries is less than 1
        Exception: The last error once it is not transient or attempts run out
    """
    if max_retries < 1:
        raise ValueError(f"max_retries must be at least 1, got {max_retries}.")

    attempt = 1
    while True:
        try:
            return await func()
        except Exception as exc:
            if attempt >= max_retries or not should_retry_error(exc):
                raise
            delay = compute_retry_delay(attempt)
            if on_retry is not None:
                on_retry(attempt, exc, delay)
            await asyncio.sleep(delay)
            attempt += 1
