"""Retry and timeout helpers for provider calls."""

from aicgen.resilience.retry import Backoff, RetryConfig, retry
from aicgen.resilience.timeout import AbortSignal, with_abort_timeout

__all__ = ["AbortSignal", "Backoff", "RetryConfig", "retry", "with_abort_timeout"]
