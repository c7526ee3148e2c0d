from __future__ import annotations

from typing import Callable

import httpx
import pytest


Handler = Callable[[httpx.Request], httpx.Response]


class RecordingTransport:
    """Wraps a handler in an ``httpx.Client`` and records every request sent."""

    def __init__(self, handler: Handler) -> None:
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        self._client = httpx.Client(transport=httpx.MockTransport(record))

    @property
    def calls(self) -> int:
        return len(self.requests)

    def send(self, request: httpx.Request) -> httpx.Response:
        return self._client.send(request)


class AsyncRecordingTransport:
    def __init__(self, handler: Handler) -> None:
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        self._client = httpx.AsyncClient(transport=httpx.MockTransport(record))

    @property
    def calls(self) -> int:
        return len(self.requests)

    async def send(self, request: httpx.Request) -> httpx.Response:
        return await self._client.send(request)


@pytest.fixture
def recording_transport() -> type[RecordingTransport]:
    return RecordingTransport


@pytest.fixture
def async_recording_transport() -> type[AsyncRecordingTransport]:
    return AsyncRecordingTransport
