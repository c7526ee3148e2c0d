from __future__ import annotations

import threading
import time

import pytest

from muxet import RequestCancelledError, RequestContext


def test_context_without_deadline() -> None:
    context = RequestContext()

    assert context.remaining() is None
    assert not context.done
    context.check()


def test_deadline_expires() -> None:
    context = RequestContext.with_timeout(0.01)
    time.sleep(0.02)

    assert context.expired
    assert context.remaining() == 0.0
    with pytest.raises(RequestCancelledError, match="deadline exceeded"):
        context.check()


def test_wait_returns_early_on_cancel() -> None:
    context = RequestContext()
    threading.Timer(0.01, context.cancel).start()

    started = time.monotonic()
    assert context.wait(5.0) is True
    assert time.monotonic() - started < 5.0
    with pytest.raises(RequestCancelledError, match="cancelled"):
        context.check()


def test_wait_is_bounded_by_deadline() -> None:
    context = RequestContext.with_timeout(0.02)

    started = time.monotonic()
    assert context.wait(5.0) is False
    assert time.monotonic() - started < 1.0
    assert context.bounded(3.0) <= 0.02
