"""URL validation and header redaction helpers."""

from __future__ import annotations

from typing import Mapping

import httpx

from .exceptions import InvalidURLError


SENSITIVE_HEADERS = {
    "authorization",
    "proxy-authorization",
    "cookie",
    "x-api-key",
}


def sanitize_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Return headers with sensitive values redacted for logging."""
    redacted: dict[str, str] = {}
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS:
            redacted[key] = "[REDACTED]"
        else:
            redacted[key] = value
    return redacted


def parse_url(url: str) -> httpx.URL:
    if "\x00" in url:
        raise InvalidURLError(f"Invalid URL: {url!r}")
    try:
        return httpx.URL(url)
    except (httpx.InvalidURL, TypeError, ValueError) as exc:
        raise InvalidURLError(f"Invalid URL: {url!r}", cause=exc) from exc


def validate_base_url(url: str) -> None:
    """Validate a base URL: it must be absolute http(s) with a host."""
    parsed = parse_url(url)
    if not parsed.scheme or not parsed.host:
        raise InvalidURLError("base_url must include scheme and host")
    if parsed.scheme not in {"http", "https"}:
        raise InvalidURLError(f"Unsupported base_url scheme: {parsed.scheme}")


def resolve_url(url: str, base_url: str | None, *, allow_relative: bool = False) -> str:
    """Resolve ``url`` against ``base_url`` using RFC 3986 reference resolution.

    Absolute URLs are returned unchanged. A relative URL with no base URL is an
    error unless ``allow_relative`` is set, in which case it passes through.
    """
    parsed = parse_url(url)
    if parsed.is_absolute_url:
        return url
    if not base_url:
        if allow_relative:
            return url
        raise InvalidURLError(f"Relative URL {url!r} requires a base_url")
    base = parse_url(base_url)
    try:
        return str(base.join(parsed))
    except (httpx.InvalidURL, ValueError) as exc:
        raise InvalidURLError(f"Cannot resolve {url!r} against {base_url!r}", cause=exc) from exc
