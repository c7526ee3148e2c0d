"""Synchronous and asynchronous request executors."""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from .config import ClientConfig
from .context import RequestContext
from .exceptions import (
    HookError,
    HTTPStatusError,
    MuxetError,
    NetworkError,
    RequestCancelledError,
    ResponseReadError,
    RetriesExhaustedError,
)
from .hooks import AsyncTransport, Logger, Transport
from .models import Request, Response, check_output, decode_content, encode_body
from .security import resolve_url, sanitize_headers

logger = logging.getLogger(__name__)


def _has_header(headers: Mapping[str, str], name: str) -> bool:
    name = name.lower()
    return any(key.lower() == name for key in headers)


def merge_headers(defaults: Mapping[str, str], overrides: Mapping[str, str] | None) -> dict[str, str]:
    """Overlay per-call headers on a copy of the defaults.

    Header names compare case-insensitively; an override replaces any default
    spelled differently.
    """
    merged = dict(defaults)
    if not overrides:
        return merged
    for key, value in overrides.items():
        key = str(key)
        for existing in [k for k in merged if k.lower() == key.lower()]:
            del merged[existing]
        merged[key] = str(value)
    return merged


class _BaseClient:
    def __init__(self, config: ClientConfig | None = None) -> None:
        self.config = config or ClientConfig()

    @property
    def _log(self) -> Logger:
        return self.config.logger or logger

    def _retry_delay(self, attempt: int) -> float:
        return self.config.backoff * (2**attempt)

    def _prepare(
        self,
        method: str,
        url: str,
        body: Any,
        headers: Mapping[str, str] | None,
        context: RequestContext | None,
    ) -> tuple[Request, bytes | None]:
        config = self.config
        if context is None:
            context = RequestContext()

        merged = merge_headers(config.headers, headers)

        request = Request(
            method=method.upper(),
            url=resolve_url(url, config.base_url, allow_relative=config.allow_relative_urls),
            headers=merged,
            body=body,
            context=context,
        )

        if config.request_hook is not None:
            try:
                config.request_hook.prepare_request(request)
            except Exception as exc:
                raise HookError(f"before request hook failed: {exc}", phase="request", cause=exc) from exc

        return request, encode_body(request.body)

    def _build_request(self, request: Request, content: bytes | None) -> httpx.Request:
        headers = dict(request.headers)
        if content is not None and not _has_header(headers, "Content-Type"):
            headers["Content-Type"] = "application/json"
        timeout = request.context.bounded(self.config.timeout)
        return httpx.Request(
            request.method,
            request.url,
            headers=headers,
            content=content,
            extensions={"timeout": httpx.Timeout(timeout).as_dict()},
        )

    def _log_attempt(self, request: Request, attempt: int) -> None:
        self._log.debug("Request: %s %s (attempt %d)", request.method, request.url, attempt + 1)
        logger.debug("Request headers: %s", sanitize_headers(request.headers))

    def _network_error(self, request: Request, exc: Exception) -> NetworkError:
        self._log.debug("Request failed: %s", exc)
        cancelled = request.context.error()
        if cancelled is not None:
            cancelled.cause = exc
            raise cancelled from exc
        return NetworkError(f"{request.method} {request.url} failed: {exc}", cause=exc)

    def _inspect(self, raw: httpx.Response) -> tuple[Response, HTTPStatusError | None]:
        response = Response.from_httpx(raw)
        if self.config.response_hook is not None:
            try:
                self.config.response_hook.inspect_response(response)
            except Exception as exc:
                raise HookError(
                    f"after response hook failed: {exc}",
                    phase="response",
                    status_code=response.status_code,
                    body=response.content,
                    response=response,
                    cause=exc,
                ) from exc

        if response.is_success:
            return response, None
        error = HTTPStatusError(
            f"HTTP {response.status_code}",
            status_code=response.status_code,
            body=response.content,
            response=response,
        )
        return response, error

    @staticmethod
    def _decode(response: Response, output: Any) -> Response:
        if output is not None:
            try:
                response.data = decode_content(response.content, output, response.encoding)
            except MuxetError as exc:
                exc.status_code = response.status_code
                exc.response = response
                raise
        return response

    @staticmethod
    def _read_error(raw: httpx.Response, exc: Exception) -> ResponseReadError:
        return ResponseReadError(
            f"failed to read response body: {exc}",
            status_code=raw.status_code,
            response=Response.from_httpx(raw, read=False),
            cause=exc,
        )

    def _exhausted(self, last_error: MuxetError | None) -> MuxetError:
        if last_error is None:
            return MuxetError("request made no attempts")
        return RetriesExhaustedError(self.config.max_retries + 1, last_error)


class Client(_BaseClient):
    """Synchronous client.

    The config is read, never written, during calls, so one client may be
    shared across threads.
    """

    def __init__(self, config: ClientConfig | None = None, *, transport: Transport | None = None) -> None:
        super().__init__(config)
        self._owns_transport = transport is None
        self._transport: Transport = transport or httpx.Client(trust_env=False)

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_transport and isinstance(self._transport, httpx.Client):
            self._transport.close()

    def request(
        self,
        method: str,
        url: str,
        *,
        body: Any = None,
        output: Any = None,
        headers: Mapping[str, str] | None = None,
        context: RequestContext | None = None,
    ) -> Response:
        check_output(output)
        request, content = self._prepare(method, url, body, headers, context)
        last_error: MuxetError | None = None

        for attempt in range(self.config.max_retries + 1):
            if attempt:
                self._backoff(request.context, attempt - 1, last_error)
            request.context.check()
            self._log_attempt(request, attempt)
            try:
                raw = self._transport.send(self._build_request(request, content))
            except (httpx.TransportError, OSError) as exc:
                last_error = self._network_error(request, exc)
                continue

            try:
                raw.read()
            except (httpx.HTTPError, httpx.StreamError, OSError) as exc:
                raise self._read_error(raw, exc) from exc

            response, status_error = self._inspect(raw)
            if status_error is not None:
                last_error = status_error
                continue
            return self._decode(response, output)

        raise self._exhausted(last_error) from last_error

    def _backoff(self, context: RequestContext, attempt: int, last_error: MuxetError | None) -> None:
        delay = self._retry_delay(attempt)
        if delay > 0 and context.wait(delay):
            raise RequestCancelledError("request was cancelled", cause=last_error) from last_error

    def get(self, url: str, *, output: Any = None, headers: Mapping[str, str] | None = None, context: RequestContext | None = None) -> Response:
        return self.request("GET", url, output=output, headers=headers, context=context)

    def post(self, url: str, body: Any = None, *, output: Any = None, headers: Mapping[str, str] | None = None, context: RequestContext | None = None) -> Response:
        return self.request("POST", url, body=body, output=output, headers=headers, context=context)

    def put(self, url: str, body: Any = None, *, output: Any = None, headers: Mapping[str, str] | None = None, context: RequestContext | None = None) -> Response:
        return self.request("PUT", url, body=body, output=output, headers=headers, context=context)

    def patch(self, url: str, body: Any = None, *, output: Any = None, headers: Mapping[str, str] | None = None, context: RequestContext | None = None) -> Response:
        return self.request("PATCH", url, body=body, output=output, headers=headers, context=context)

    def delete(self, url: str, *, output: Any = None, headers: Mapping[str, str] | None = None, context: RequestContext | None = None) -> Response:
        return self.request("DELETE", url, output=output, headers=headers, context=context)


class AsyncClient(_BaseClient):
    """Asynchronous client."""

    def __init__(self, config: ClientConfig | None = None, *, transport: AsyncTransport | None = None) -> None:
        super().__init__(config)
        self._owns_transport = transport is None
        self._transport: AsyncTransport = transport or httpx.AsyncClient(trust_env=False)

    async def __aenter__(self) -> "AsyncClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_transport and isinstance(self._transport, httpx.AsyncClient):
            await self._transport.aclose()

    async def request(
        self,
        method: str,
        url: str,
        *,
        body: Any = None,
        output: Any = None,
        headers: Mapping[str, str] | None = None,
        context: RequestContext | None = None,
    ) -> Response:
        check_output(output)
        request, content = self._prepare(method, url, body, headers, context)
        last_error: MuxetError | None = None

        for attempt in range(self.config.max_retries + 1):
            if attempt:
                await self._backoff(request.context, attempt - 1, last_error)
            request.context.check()
            self._log_attempt(request, attempt)
            try:
                raw = await self._transport.send(self._build_request(request, content))
            except (httpx.TransportError, OSError) as exc:
                last_error = self._network_error(request, exc)
                continue

            try:
                await raw.aread()
            except (httpx.HTTPError, httpx.StreamError, OSError) as exc:
                raise self._read_error(raw, exc) from exc

            response, status_error = self._inspect(raw)
            if status_error is not None:
                last_error = status_error
                continue
            return self._decode(response, output)

        raise self._exhausted(last_error) from last_error

    async def _backoff(self, context: RequestContext, attempt: int, last_error: MuxetError | None) -> None:
        delay = self._retry_delay(attempt)
        if delay > 0 and await context.wait_async(delay):
            raise RequestCancelledError("request was cancelled", cause=last_error) from last_error

    async def get(self, url: str, *, output: Any = None, headers: Mapping[str, str] | None = None, context: RequestContext | None = None) -> Response:
        return await self.request("GET", url, output=output, headers=headers, context=context)

    async def post(self, url: str, body: Any = None, *, output: Any = None, headers: Mapping[str, str] | None = None, context: RequestContext | None = None) -> Response:
        return await self.request("POST", url, body=body, output=output, headers=headers, context=context)

    async def put(self, url: str, body: Any = None, *, output: Any = None, headers: Mapping[str, str] | None = None, context: RequestContext | None = None) -> Response:
        return await self.request("PUT", url, body=body, output=output, headers=headers, context=context)

    async def patch(self, url: str, body: Any = None, *, output: Any = None, headers: Mapping[str, str] | None = None, context: RequestContext | None = None) -> Response:
        return await self.request("PATCH", url, body=body, output=output, headers=headers, context=context)

    async def delete(self, url: str, *, output: Any = None, headers: Mapping[str, str] | None = None, context: RequestContext | None = None) -> Response:
        return await self.request("DELETE", url, output=output, headers=headers, context=context)
