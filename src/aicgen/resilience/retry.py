"""Retry with backoff and jitter.

The caller's thread sleeps between attempts; attempts never overlap.
"""

import random
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

from aicgen.errors import OperationTimeoutError, RateLimitError

T = TypeVar("T")

JITTER_RATIO = 0.25


class Backoff(Enum):
    """Delay growth between attempts."""

    FIXED = "fixed"
    LINEAR = "linear"
    EXPONENTIAL = "exponential"


def default_is_retryable(error: Exception) -> bool:
    """Retry everything except rate limits and timeouts.

    Without an explicit wait contract another attempt at a rate-limited or
    timed-out call is assumed futile.
    """
    return not isinstance(error, (RateLimitError, OperationTimeoutError))


@dataclass
class RetryConfig:
    """Retry policy.

    Attributes:
        max_attempts: Total attempts including the first
        initial_delay_ms: Base delay in milliseconds
        max_delay_ms: Cap applied after jitter
        backoff: Delay growth rule
        is_retryable: Predicate deciding whether an error is worth another attempt
        on_retry: Called with (attempt, error, delay_ms) before each sleep
    """

    max_attempts: int = 3
    initial_delay_ms: int = 1000
    max_delay_ms: int = 30000
    backoff: Backoff = Backoff.EXPONENTIAL
    is_retryable: Callable[[Exception], bool] = default_is_retryable
    on_retry: Callable[[int, Exception, int], None] | None = None


def compute_delay(attempt: int, config: RetryConfig, rng: random.Random | None = None) -> int:
    """Compute the jittered delay after a failed attempt.

    Args:
        attempt: 1-based number of the attempt that just failed
        config: Retry policy
        rng: Random source (module-level random when None)

    Returns:
        Delay in whole milliseconds
    """
    if config.backoff == Backoff.FIXED:
        base = config.initial_delay_ms
    elif config.backoff == Backoff.LINEAR:
        base = config.initial_delay_ms * attempt
    else:
        base = config.initial_delay_ms * 2 ** (attempt - 1)

    draw = (rng or random).random()
    jitter = base * JITTER_RATIO * (draw * 2 - 1)
    return int(min(base + jitter, config.max_delay_ms))


def retry(
    operation: Callable[[], T],
    config: RetryConfig | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Run an operation, retrying retryable failures.

    Args:
        operation: Zero-argument callable to attempt
        config: Retry policy (defaults to RetryConfig())
        sleep: Sleep function taking seconds

    Returns:
        The operation's result

    Raises:
        Exception: The last error, unchanged, once attempts are exhausted or the
            error is not retryable
    """
    config = config or RetryConfig()
    attempt = 1
    while True:
        try:
            return operation()
        except Exception as error:
            if attempt >= config.max_attempts or not config.is_retryable(error):
                raise
            delay_ms = compute_delay(attempt, config)
            if config.on_retry is not None:
                config.on_retry(attempt, error, delay_ms)
            sleep(delay_ms / 1000)
            attempt += 1
