"""Bounded retry with pluggable backoff for async operations."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

logger = structlog.get_logger()

T = TypeVar("T")

Backoff = Callable[[int], float]
Sleep = Callable[[float], Awaitable[None]]
RetryHook = Callable[[int, BaseException, float], None]


def linear_backoff(base_seconds: float) -> Backoff:
    """Delay grows with the attempt number: base, 2*base, 3*base, ..."""

    def _delay(attempt: int) -> float:
        return base_seconds * attempt

    return _delay


def exponential_backoff(base_seconds: float, cap_seconds: float) -> Backoff:
    """Delay doubles each attempt, capped at ``cap_seconds``."""

    def _delay(attempt: int) -> float:
        return min(cap_seconds, base_seconds * (2 ** (attempt - 1)))

    return _delay


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = 3,
    backoff: Backoff = linear_backoff(1.0),
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Sleep = asyncio.sleep,
    on_retry: RetryHook | None = None,
) -> T:
    """
    Run ``operation`` until it succeeds or ``max_attempts`` is exhausted.

    Failures before the final attempt are swallowed, followed by a sleep of
    ``backoff(attempt)`` seconds. The failure of the final attempt propagates
    unchanged. Exceptions outside ``retry_on`` propagate immediately.

    Args:
        operation: Zero-argument coroutine factory; called once per attempt.
        max_attempts: Total number of attempts, including the first.
        backoff: Maps the 1-based number of the failed attempt to a delay.
        retry_on: Exception types that are eligible for another attempt.
        sleep: Awaitable sleep, replaceable in tests.
        on_retry: Called with (attempt, error, delay) before each sleep.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    attempt = 1
    while True:
        try:
            return await operation()
        except retry_on as exc:
            if attempt >= max_attempts:
                raise
            delay = backoff(attempt)
            logger.debug(
                "Attempt failed, retrying",
                attempt=attempt,
                max_attempts=max_attempts,
                delay_seconds=delay,
                error=str(exc),
            )
            if on_retry is not None:
                on_retry(attempt, exc, delay)
            await sleep(delay)
            attempt += 1
