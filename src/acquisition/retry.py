"""Bounded retry loop for downloads.

Each attempt reports an ``AttemptResult`` instead of raising, so the loop
itself is a pure function of the attempt outcomes, the policy and the
injected sleep/random functions.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from constants import Constants
from common.logging_utils import extra_context

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_STATUSES = (408, 429)


def is_retryable_status(status: Optional[int]) -> bool:
    """5xx, 408 and 429 are retried; transport errors (no status) are retried too."""
    if status is None:
        return True
    return status >= 500 or status in RETRYABLE_STATUSES


@dataclass(frozen=True)
class RetryPolicy:
    """How many attempts to make and how long to wait in between."""

    max_attempts: int = Constants.HTTP_RETRY_MAX
    min_backoff: float = Constants.HTTP_RETRY_MIN_DELAY_SEC
    max_backoff: float = Constants.HTTP_RETRY_MAX_DELAY_SEC

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.min_backoff > self.max_backoff:
            raise ValueError("min_backoff must not exceed max_backoff")


@dataclass(frozen=True)
class AttemptResult(Generic[T]):
    """Outcome of one attempt: a value, or an error plus whether to try again."""

    value: Optional[T] = None
    error: Optional[Exception] = None
    retryable: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "AttemptResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: Exception, retryable: bool) -> "AttemptResult[T]":
        return cls(error=error, retryable=retryable)


async def run_with_retry(
    attempt: Callable[[int], Awaitable[AttemptResult[T]]],
    policy: RetryPolicy,
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    rand: Callable[[float, float], float] = random.uniform,
) -> T:
    """Run ``attempt`` until it succeeds, fails permanently or attempts run out.

    Args:
        attempt: Coroutine function receiving the 1-based attempt number.
        policy: Attempt limit and backoff bounds.
        sleep: Awaitable sleep, replaced in tests.
        rand: Source of the backoff delay within ``[min, max]``.

    Raises:
        The error of the last attempt.
    """
    attempt_no = 1
    while True:
        result = await attempt(attempt_no)
        error = result.error
        if error is None:
            return result.value  # type: ignore[return-value]
        if not result.retryable or attempt_no >= policy.max_attempts:
            raise error
        delay = rand(policy.min_backoff, policy.max_backoff)
        logger.info(
            "%s. Waiting %.0f seconds before trying again.",
            error,
            delay,
            extra=extra_context(event="retry", component="retry", attempt=attempt_no, delay_sec=delay),
        )
        await sleep(delay)
        attempt_no += 1
