"""Retry policy with linear backoff for rate-limited calls."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

import openai
import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")

_RATE_LIMIT_MARKERS = ("rate limit", "rate_limit", "quota", "too many requests")


def is_rate_limited(exc: BaseException) -> bool:
    """True for rate-limit and quota-exceeded failures from the completion API."""
    if isinstance(exc, openai.RateLimitError):
        return True
    status = getattr(exc, "status_code", None) or getattr(exc, "status", None)
    if status == 429:
        return True
    message = str(exc).lower()
    return any(marker in message for marker in _RATE_LIMIT_MARKERS)


@dataclass(slots=True)
class RetryPolicy:
    """Attempt count, backoff base and the predicate deciding what is retried.

    The wait after failed attempt `n` (1-based) is `base_delay * n`.
    """

    max_attempts: int = 3
    base_delay: float = 1.5
    retryable: Callable[[BaseException], bool] = field(default=is_rate_limited)

    def delay_for(self, attempt: int) -> float:
        return self.base_delay * attempt


async def retry_async(
    func: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Await `func()` until it succeeds or the policy says stop.

    Non-retryable errors, and retryable errors on the final attempt, propagate
    unchanged.
    """
    attempt = 1
    while True:
        try:
            return await func()
        except Exception as exc:
            if attempt >= policy.max_attempts or not policy.retryable(exc):
                raise
            delay = policy.delay_for(attempt)
            logger.warning(
                "Retrying after rate limit",
                attempt=attempt,
                max_attempts=policy.max_attempts,
                delay_seconds=delay,
                error=str(exc),
            )
            await sleep(delay)
            attempt += 1
