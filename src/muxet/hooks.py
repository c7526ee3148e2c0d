"""Capabilities the clients depend on: transports, loggers and hooks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Protocol, runtime_checkable

import httpx

if TYPE_CHECKING:
    from .models import Request, Response


@runtime_checkable
class Transport(Protocol):
    def send(self, request: httpx.Request) -> httpx.Response: ...


@runtime_checkable
class AsyncTransport(Protocol):
    async def send(self, request: httpx.Request) -> httpx.Response: ...


class Logger(Protocol):
    """Anything with a %-style ``debug`` method, e.g. ``logging.Logger``."""

    def debug(self, msg: str, *args: Any) -> None: ...


@runtime_checkable
class RequestHook(Protocol):
    """Called once per logical call before any network activity.

    Implementations may mutate ``request`` in place and raise to abort.
    """

    def prepare_request(self, request: Request) -> None: ...


@runtime_checkable
class ResponseHook(Protocol):
    """Called once per attempt that received a response, including non-2xx."""

    def inspect_response(self, response: Response) -> None: ...


@dataclass(frozen=True)
class RequestHookFunc:
    func: Callable[[Request], None]

    def prepare_request(self, request: Request) -> None:
        self.func(request)


@dataclass(frozen=True)
class ResponseHookFunc:
    func: Callable[[Response], None]

    def inspect_response(self, response: Response) -> None:
        self.func(response)


def request_hook(hook: RequestHook | Callable[[Request], None]) -> RequestHook:
    if isinstance(hook, RequestHook):
        return hook
    return RequestHookFunc(hook)


def response_hook(hook: ResponseHook | Callable[[Response], None]) -> ResponseHook:
    if isinstance(hook, ResponseHook):
        return hook
    return ResponseHookFunc(hook)
