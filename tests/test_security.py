from __future__ import annotations

import pytest

from muxet import InvalidURLError, merge_headers
from muxet.security import resolve_url, sanitize_headers, validate_base_url


def test_sanitize_headers_redacts_credentials() -> None:
    headers = {"Authorization": "Bearer t", "cookie": "s=1", "X-Api-Key": "k", "Accept": "*/*"}

    assert sanitize_headers(headers) == {
        "Authorization": "[REDACTED]",
        "cookie": "[REDACTED]",
        "X-Api-Key": "[REDACTED]",
        "Accept": "*/*",
    }


def test_validate_base_url_accepts_http_and_https() -> None:
    validate_base_url("https://api.example.com/v1")
    validate_base_url("http://localhost:8080")


def test_validate_base_url_rejects_nul() -> None:
    with pytest.raises(InvalidURLError):
        validate_base_url("https://api.example.com/\x00")


def test_resolve_url_passes_relative_through_when_allowed() -> None:
    assert resolve_url("/items", None, allow_relative=True) == "/items"


def test_resolve_url_keeps_absolute_urls() -> None:
    url = "http://other.example.com/a/../b"
    assert resolve_url(url, "https://api.example.com") == url


def test_merge_headers_is_case_insensitive_and_copies() -> None:
    defaults = {"Accept": "application/json", "X-Trace": "a"}

    merged = merge_headers(defaults, {"accept": "text/plain"})

    assert merged == {"X-Trace": "a", "accept": "text/plain"}
    assert defaults == {"Accept": "application/json", "X-Trace": "a"}
    assert merge_headers(defaults, None) == defaults
    assert merge_headers(defaults, None) is not defaults
