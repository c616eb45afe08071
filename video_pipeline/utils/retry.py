"""Bounded retry, backoff strategies and timeout racing for async calls."""
import asyncio
import random
from typing import Any, Awaitable, Callable, Optional, TypeVar

from ..core.exceptions import TimeoutError

T = TypeVar("T")

Backoff = Callable[[int], float]


def exponential_backoff(base: float = 0.5, cap: float = 4.0, jitter: float = 0.25) -> Backoff:
    """Delay for attempt n (1-based): min(cap, base * 2**(n-1)) plus random jitter."""

    def delay(attempt: int) -> float:
        wait = min(cap, base * (2 ** (attempt - 1)))
        if jitter > 0:
            wait += random.uniform(0, jitter)
        return wait

    return delay


def linear_backoff(interval: float = 1.0) -> Backoff:
    """Delay for attempt n (1-based): interval * n."""

    def delay(attempt: int) -> float:
        return interval * max(1, attempt)

    return delay


async def retry_async(
    operation: Callable[[int], Awaitable[T]],
    max_attempts: int,
    backoff: Backoff,
    is_retryable: Callable[[BaseException], bool] = lambda exc: True,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    on_retry: Optional[Callable[[int, BaseException, float], None]] = None,
) -> T:
    """
    Run ``operation(attempt)`` until it succeeds or attempts run out.

    Non-retryable errors propagate immediately. When every attempt fails the
    last error is re-raised unchanged.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    last_error: Optional[BaseException] = None
    for attempt in range(1, max_attempts + 1):
        try:
            return await operation(attempt)
        except Exception as exc:
            if not is_retryable(exc):
                raise
            last_error = exc
            if attempt == max_attempts:
                break
            wait = backoff(attempt)
            if on_retry:
                on_retry(attempt, exc, wait)
            await sleep(wait)

    raise last_error


async def with_timeout(awaitable: Awaitable[T], timeout_seconds: float, operation: str) -> T:
    """
    Race an awaitable against a timer.

    On timeout the local wait is cancelled and ``TimeoutError`` raised. A call
    already running in a worker thread keeps running until the remote side
    answers; its result is discarded.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_seconds)
    except asyncio.TimeoutError:
        raise TimeoutError(operation, timeout_seconds)
