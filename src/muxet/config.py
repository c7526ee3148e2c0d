"""Immutable client configuration and its fluent builder."""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping

from .exceptions import ConfigError
from .hooks import Logger, RequestHook, ResponseHook, request_hook, response_hook
from .security import validate_base_url


def _normalize_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    if not headers:
        return {}
    clean: dict[str, str] = {}
    for key, value in headers.items():
        clean[str(key)] = str(value)
    return clean


@dataclass(frozen=True)
class ClientConfig:
    """Settings shared by every call a client makes.

    Instances are immutable, so one config may be read by many threads at
    once. Build them with :meth:`builder` or :meth:`from_env` before
    constructing a client; the builder itself is not thread-safe.
    """

    default_timeout = 5.0

    base_url: str | None = None
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    timeout: float = default_timeout
    max_retries: int = 0
    backoff: float = 0.0
    logger: Logger | None = None
    request_hook: RequestHook | None = None
    response_hook: ResponseHook | None = None
    allow_relative_urls: bool = False

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ConfigError("timeout must be greater than 0")
        if self.max_retries < 0:
            raise ConfigError("max_retries must be non-negative")
        if self.backoff < 0:
            raise ConfigError("backoff must be non-negative")
        if self.base_url:
            validate_base_url(self.base_url)
        object.__setattr__(self, "headers", MappingProxyType(_normalize_headers(self.headers)))

    @staticmethod
    def builder() -> "ClientConfigBuilder":
        return ClientConfigBuilder()

    @classmethod
    def from_env(cls, prefix: str = "MUXET_", environ: Mapping[str, str] | None = None) -> "ClientConfig":
        return ClientConfigBuilder.from_env(prefix, environ).build()

    def replace(self, **changes: Any) -> "ClientConfig":
        return dataclasses.replace(self, **changes)


class ClientConfigBuilder:
    """Fluent builder for :class:`ClientConfig`; every setter returns ``self``."""

    def __init__(self) -> None:
        self._base_url: str | None = None
        self._headers: dict[str, str] = {}
        self._timeout = ClientConfig.default_timeout
        self._max_retries = 0
        self._backoff = 0.0
        self._logger: Logger | None = None
        self._request_hook: RequestHook | None = None
        self._response_hook: ResponseHook | None = None
        self._allow_relative_urls = False

    @classmethod
    def from_env(cls, prefix: str = "MUXET_", environ: Mapping[str, str] | None = None) -> "ClientConfigBuilder":
        env = os.environ if environ is None else environ
        builder = cls()
        base_url = env.get(f"{prefix}BASE_URL")
        if base_url:
            builder.base_url(base_url)
        for name, setter, convert in (
            ("TIMEOUT", builder.timeout, float),
            ("MAX_RETRIES", builder.max_retries, int),
            ("BACKOFF", builder.backoff, float),
        ):
            raw = env.get(f"{prefix}{name}")
            if raw is None or not raw.strip():
                continue
            try:
                setter(convert(raw))
            except ValueError as exc:
                raise ConfigError(f"{prefix}{name} is not a valid number: {raw!r}", cause=exc) from exc
        return builder

    def timeout(self, seconds: float) -> "ClientConfigBuilder":
        self._timeout = seconds
        return self

    def header(self, key: str, value: str) -> "ClientConfigBuilder":
        self._headers[key] = value
        return self

    def headers(self, headers: Mapping[str, str]) -> "ClientConfigBuilder":
        self._headers.update(_normalize_headers(headers))
        return self

    def logger(self, logger: Logger | None) -> "ClientConfigBuilder":
        self._logger = logger
        return self

    def base_url(self, base_url: str | None) -> "ClientConfigBuilder":
        self._base_url = base_url
        return self

    def max_retries(self, count: int) -> "ClientConfigBuilder":
        self._max_retries = count
        return self

    def backoff(self, seconds: float) -> "ClientConfigBuilder":
        self._backoff = seconds
        return self

    def request_hook(self, hook: RequestHook | Callable[..., None] | None) -> "ClientConfigBuilder":
        self._request_hook = None if hook is None else request_hook(hook)
        return self

    def response_hook(self, hook: ResponseHook | Callable[..., None] | None) -> "ClientConfigBuilder":
        self._response_hook = None if hook is None else response_hook(hook)
        return self

    def allow_relative_urls(self, allow: bool = True) -> "ClientConfigBuilder":
        self._allow_relative_urls = allow
        return self

    def build(self) -> ClientConfig:
        return ClientConfig(
            base_url=self._base_url,
            headers=dict(self._headers),
            timeout=self._timeout,
            max_retries=self._max_retries,
            backoff=self._backoff,
            logger=self._logger,
            request_hook=self._request_hook,
            response_hook=self._response_hook,
            allow_relative_urls=self._allow_relative_urls,
        )
