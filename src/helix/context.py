"""Cancellation and deadline context for API calls."""

from __future__ import annotations

import threading
import time

from .errors import RequestCancelledError, RequestTimeoutError


class RequestContext:
    """Deadline and cancellation flag shared by the calls that use it.

    A context without a timeout never expires. ``cancel()`` may be called from
    any thread; calls that have not dispatched yet fail with
    :class:`RequestCancelledError`.
    """

    def __init__(self, timeout_seconds: float | None = None) -> None:
        if timeout_seconds is not None and timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0 when provided")
        self._cancelled = threading.Event()
        self._deadline = (
            time.monotonic() + timeout_seconds
            if timeout_seconds is not None
            else None
        )

    @classmethod
    def background(cls) -> RequestContext:
        return cls()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def check(self) -> None:
        """Raise if the context was cancelled or its deadline has passed."""
        if self._cancelled.is_set():
            raise RequestCancelledError("request context was cancelled")
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            raise RequestTimeoutError("request context deadline exceeded")
