"""Exceptions raised by muxet clients."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Response


class MuxetError(Exception):
    """Base exception for all muxet failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: bytes | None = None,
        response: Response | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.response = response
        self.cause = cause

    def __str__(self) -> str:
        if self.status_code is None:
            return str(self.args[0])
        return f"{self.status_code}: {self.args[0]}"


class ConfigError(MuxetError):
    """Raised when client configuration values are invalid."""


class InvalidURLError(MuxetError):
    """Raised for malformed request or base URLs."""


class HookError(MuxetError):
    """Raised when a request or response hook fails."""

    def __init__(self, message: str, *, phase: str, **kwargs: object) -> None:
        super().__init__(message, **kwargs)  # type: ignore[arg-type]
        self.phase = phase


class SerializationError(MuxetError):
    """Raised when a request body cannot be encoded as JSON."""


class ResponseReadError(MuxetError):
    """Raised when a response body cannot be read."""


class HTTPStatusError(MuxetError):
    """Raised for non-2xx responses."""

    def __str__(self) -> str:
        text = (self.body or b"").decode("utf-8", errors="replace")
        return f"HTTP {self.status_code}: {text}"


class NetworkError(MuxetError):
    """Raised for transport-level failures like DNS, TCP and timeout errors."""


class DecodeError(MuxetError):
    """Raised when a successful response cannot be decoded into the output type."""


class RequestCancelledError(MuxetError):
    """Raised when the request context was cancelled or its deadline passed."""


class RetriesExhaustedError(MuxetError):
    """Raised when every attempt failed with a retryable error."""

    def __init__(self, attempts: int, last_error: MuxetError) -> None:
        super().__init__(
            f"request failed after {attempts} attempts: {last_error}",
            status_code=last_error.status_code,
            body=last_error.body,
            response=last_error.response,
            cause=last_error,
        )
        self.attempts = attempts
        self.last_error = last_error

