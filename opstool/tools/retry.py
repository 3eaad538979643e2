"""Bounded retry with exponential backoff for idempotent HTTP reads."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from opstool.core.result import Err, Ok, Result
from opstool.tools.http import HttpError

__all__ = ["RetryPolicy", "Attempted", "with_retry"]


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """How many times to try and how long to wait in between.

    Attributes:
        attempts: Total attempts including the first one (>= 1)
        backoff: Delay before the second attempt, in seconds
        factor: Multiplier applied to the delay after each retry
        max_delay: Upper bound for a single delay
    """

    attempts: int = 4
    backoff: float = 0.5
    factor: float = 2.0
    max_delay: float = 8.0

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError("attempts must be >= 1")
        if self.backoff < 0 or self.factor < 1:
            raise ValueError("backoff must be >= 0 and factor >= 1")

    def delay(self, retry_index: int) -> float:
        """Delay before retry number ``retry_index`` (0-based)."""
        return min(self.backoff * (self.factor**retry_index), self.max_delay)


@dataclass(frozen=True, slots=True)
class Attempted[T]:
    """A value (or error) together with the number of attempts it took."""

    result: Result[T, HttpError]
    attempts: int


def with_retry[T](
    call: Callable[[], Result[T, HttpError]],
    policy: RetryPolicy,
    *,
    sleep: Callable[[float], None] = time.sleep,
    on_retry: Callable[[int, HttpError], None] | None = None,
) -> Attempted[T]:
    """Run ``call`` until it succeeds, fails permanently, or the budget is spent.

    Only ``HttpError.is_transient`` failures are retried; 4xx responses are
    returned after the first attempt.
    """
    attempt = 0
    while True:
        attempt += 1
        result = call()
        if isinstance(result, Ok):
            return Attempted(result, attempt)

        error = result.error
        if not error.is_transient or attempt >= policy.attempts:
            return Attempted(Err(error), attempt)

        if on_retry is not None:
            on_retry(attempt, error)
        sleep(policy.delay(attempt - 1))
