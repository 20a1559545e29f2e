from __future__ import annotations

import functools
import logging
import random
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, TypeVar

from .github_client import GitHubApiError, RateLimitInfo

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETRIES = 10
MAX_DELAY_SEC = 60.0


@dataclass(frozen=True, slots=True)
class FailedAttempt:
    attempt_number: int
    retries_left: int
    error: BaseException


def log_failed_attempt(attempt: FailedAttempt) -> None:
    logger.warning(
        "Attempt %d failed. There are %d retries left. %s",
        attempt.attempt_number,
        attempt.retries_left,
        attempt.error,
    )


def _seconds_until_reset(rate_limit: RateLimitInfo | None, now: datetime) -> float | None:
    if rate_limit is None or rate_limit.remaining != 0 or not rate_limit.reset_at:
        return None
    try:
        reset_at = datetime.fromisoformat(rate_limit.reset_at)
    except ValueError:
        return None
    wait = (reset_at - now).total_seconds()
    return wait + 1 if wait > 0 else None


def backoff_delay(
    attempt_number: int,
    error: BaseException,
    *,
    base_sec: float = 1.0,
    now: datetime | None = None,
) -> float:
    """
    Seconds to wait after the given failed attempt (1-based).

    A `Retry-After` hint wins, then an exhausted rate limit's reset time,
    then exponential backoff. All are capped at MAX_DELAY_SEC plus jitter.
    """
    retry_after = getattr(error, "retry_after", None)
    if isinstance(retry_after, (int, float)) and retry_after >= 0:
        return min(float(retry_after), MAX_DELAY_SEC) + random.random()
    until_reset = _seconds_until_reset(
        getattr(error, "rate_limit", None), now or datetime.now(timezone.utc)
    )
    if until_reset is not None:
        return min(until_reset, MAX_DELAY_SEC) + random.random()
    return min(base_sec * (2 ** (attempt_number - 1)), MAX_DELAY_SEC) + random.random()


def retry_call(
    fn: Callable[[], T],
    *,
    retries: int = DEFAULT_RETRIES,
    on_failed_attempt: Callable[[FailedAttempt], None] = log_failed_attempt,
    retry_on: tuple[type[BaseException], ...] = (GitHubApiError,),
    sleep: Callable[[float], None] = time.sleep,
    backoff: Callable[[int, BaseException], float] = backoff_delay,
) -> T:
    """
    Call `fn` until it succeeds or `retries` retries have been spent.

    Every failure of a `retry_on` type is reported to `on_failed_attempt`
    before the next try; the last error is re-raised as-is once the budget
    is exhausted. Other exceptions propagate on the first occurrence.
    """
    if retries < 0:
        raise ValueError("retries must be >= 0")

    attempt_number = 0
    while True:
        attempt_number += 1
        try:
            return fn()
        except retry_on as error:
            retries_left = retries - (attempt_number - 1)
            on_failed_attempt(
                FailedAttempt(
                    attempt_number=attempt_number,
                    retries_left=retries_left,
                    error=error,
                )
            )
            if retries_left <= 0:
                raise
            sleep(backoff(attempt_number, error))


def with_retries(**options) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator form of `retry_call`; accepts the same keyword options."""

    def decorate(fn: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(fn)
        def wrapper(*args, **kwargs) -> T:
            return retry_call(lambda: fn(*args, **kwargs), **options)

        return wrapper

    return decorate
