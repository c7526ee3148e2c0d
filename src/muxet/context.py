"""Deadline and cancellation signal threaded through a logical request."""

from __future__ import annotations

import asyncio
import threading
import time

from .exceptions import RequestCancelledError


class RequestContext:
    """Cooperative cancellation plus an optional deadline.

    A context bounds one logical call, including every retry and the backoff
    sleeps between them. It is safe to cancel from another thread; both
    :meth:`wait` and :meth:`wait_async` wake up on cancellation.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._waiters: list[tuple[asyncio.AbstractEventLoop, asyncio.Future[None]]] = []
        self._deadline = None if timeout is None else time.monotonic() + timeout

    @classmethod
    def with_timeout(cls, seconds: float) -> "RequestContext":
        return cls(timeout=seconds)

    def cancel(self) -> None:
        self._cancelled.set()
        with self._lock:
            waiters, self._waiters = self._waiters, []
        for loop, waiter in waiters:
            loop.call_soon_threadsafe(_wake, waiter)

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def done(self) -> bool:
        return self.cancelled or self.expired

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or ``None`` without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def bounded(self, seconds: float) -> float:
        remaining = self.remaining()
        if remaining is None:
            return seconds
        return min(seconds, remaining)

    def wait(self, seconds: float) -> bool:
        """Block for up to ``seconds``; return True if cancelled meanwhile."""
        return self._cancelled.wait(self.bounded(seconds))

    async def wait_async(self, seconds: float) -> bool:
        """Asynchronous counterpart of :meth:`wait`."""
        loop = asyncio.get_running_loop()
        waiter: asyncio.Future[None] = loop.create_future()
        with self._lock:
            self._waiters.append((loop, waiter))
        try:
            if not self.cancelled:
                await asyncio.wait_for(waiter, self.bounded(seconds))
        except asyncio.TimeoutError:
            pass
        finally:
            with self._lock:
                if (loop, waiter) in self._waiters:
                    self._waiters.remove((loop, waiter))
        return self.cancelled

    def error(self) -> RequestCancelledError | None:
        if self.cancelled:
            return RequestCancelledError("request was cancelled")
        if self.expired:
            return RequestCancelledError("request deadline exceeded")
        return None

    def check(self) -> None:
        error = self.error()
        if error is not None:
            raise error


def _wake(waiter: asyncio.Future[None]) -> None:
    if not waiter.done():
        waiter.set_result(None)
