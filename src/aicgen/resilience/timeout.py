"""Abortable timeout wrapper.

Cancellation is cooperative: the operation receives an AbortSignal and is
expected to check it. An operation that ignores the signal keeps running on its
worker thread, but the caller still gets OperationTimeoutError on time.
"""

import threading
from collections.abc import Callable
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import TypeVar

from aicgen.errors import AbortError, OperationTimeoutError

T = TypeVar("T")


class AbortSignal:
    """One-shot cancellation flag shared with an operation."""

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def aborted(self) -> bool:
        """True once abort() has been called."""
        return self._event.is_set()

    def abort(self) -> None:
        """Request cancellation."""
        self._event.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until aborted or ``timeout`` seconds pass; return aborted."""
        return self._event.wait(timeout)

    def raise_if_aborted(self) -> None:
        """Raise AbortError if cancellation was requested."""
        if self.aborted:
            raise AbortError("Operation aborted")


def with_abort_timeout(operation: Callable[[AbortSignal], T], timeout_ms: int) -> T:
    """Run ``operation(signal)`` with a deadline.

    Args:
        operation: Callable receiving the abort signal
        timeout_ms: Deadline in milliseconds

    Returns:
        The operation's result

    Raises:
        OperationTimeoutError: The deadline passed, or the operation failed
            because the signal was aborted
        Exception: Any other operation error, unchanged
    """
    signal = AbortSignal()
    future: Future[T] = Future()

    def run() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(operation(signal))
        except BaseException as error:
            future.set_exception(error)

    # Daemon thread so an operation ignoring the signal cannot block interpreter exit.
    worker = threading.Thread(target=run, name="aicgen-timeout", daemon=True)
    worker.start()

    try:
        return future.result(timeout=timeout_ms / 1000)
    except AbortError as error:
        if signal.aborted:
            raise OperationTimeoutError(timeout_ms) from error
        raise
    except FutureTimeoutError:
        # The operation finished anyway, possibly with its own TimeoutError.
        if future.done():
            return future.result()
        signal.abort()
        raise OperationTimeoutError(timeout_ms) from None
