from __future__ import annotations

from muxet import HTTPStatusError, MuxetError, NetworkError, RetriesExhaustedError


def test_error_str_without_status() -> None:
    assert str(MuxetError("boom")) == "boom"


def test_error_str_with_status() -> None:
    assert str(MuxetError("boom", status_code=502)) == "502: boom"


def test_status_error_str_includes_body() -> None:
    error = HTTPStatusError("HTTP 500", status_code=500, body=b"oops")

    assert str(error) == "HTTP 500: oops"


def test_exhausted_wraps_last_error() -> None:
    last = NetworkError("connection refused")
    error = RetriesExhaustedError(3, last)

    assert error.attempts == 3
    assert error.last_error is last
    assert error.cause is last
    assert str(error) == "request failed after 3 attempts: connection refused"
