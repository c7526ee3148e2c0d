"""Request and response descriptors passed between pipeline stages and hooks."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

import httpx
from pydantic import PydanticUserError, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_json

from .context import RequestContext
from .exceptions import DecodeError, SerializationError


@lru_cache(maxsize=128)
def _cached_adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def output_adapter(target: Any) -> TypeAdapter[Any]:
    """Return the adapter used to decode JSON into ``target``.

    Raises :class:`DecodeError` when pydantic cannot build a schema for it.
    """
    try:
        hash(target)
    except TypeError:
        hashable = False
    else:
        hashable = True
    try:
        return _cached_adapter(target) if hashable else TypeAdapter(target)
    except (PydanticUserError, TypeError) as exc:
        raise DecodeError(f"cannot decode responses into {target!r}: {exc}", cause=exc) from exc


def decode_text(content: bytes, encoding: str | None = None) -> str:
    """Decode a body as text without losing bytes.

    Undecodable bytes become lone surrogates, so
    ``text.encode(encoding, "surrogateescape")`` gives back the raw body.
    """
    try:
        return content.decode(encoding or "utf-8", errors="surrogateescape")
    except LookupError:
        return content.decode("utf-8", errors="surrogateescape")


def check_output(target: Any) -> None:
    """Fail early, before any network activity, on output types that cannot be decoded."""
    if target is None or target is str or target is bytes:
        return
    output_adapter(target)


def encode_body(body: Any) -> bytes | None:
    """Serialize a request body to JSON bytes; ``None`` means no body."""
    if body is None:
        return None
    try:
        return to_json(body)
    except (PydanticSerializationError, TypeError, ValueError) as exc:
        raise SerializationError(f"failed to marshal body: {exc}", cause=exc) from exc


def decode_content(content: bytes, target: Any, encoding: str | None = None) -> Any:
    """Decode raw response bytes into ``target``.

    ``str`` yields the body as text in ``encoding`` (UTF-8 by default) and
    ``bytes`` the raw body. Any other type is validated from JSON through a
    pydantic ``TypeAdapter``, so pydantic models, dataclasses, typed dicts and
    builtin containers all work.
    """
    if target is str:
        return decode_text(content, encoding)
    if target is bytes:
        return bytes(content)
    adapter = output_adapter(target)
    try:
        return adapter.validate_json(content)
    except ValidationError as exc:
        raise DecodeError(f"failed to decode response: {exc}", body=content, cause=exc) from exc


@dataclass
class Request:
    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    context: RequestContext = field(default_factory=RequestContext)


@dataclass
class Response:
    status_code: int
    headers: dict[str, list[str]]
    content: bytes
    raw: httpx.Response
    data: Any = None

    @classmethod
    def from_httpx(cls, response: httpx.Response, *, read: bool = True) -> "Response":
        """Wrap an httpx response; with ``read=False`` the body is left empty."""
        headers: dict[str, list[str]] = {}
        for key, value in response.headers.multi_items():
            headers.setdefault(key, []).append(value)
        return cls(
            status_code=response.status_code,
            headers=headers,
            content=response.content if read else b"",
            raw=response,
        )

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def encoding(self) -> str | None:
        return self.raw.charset_encoding

    @property
    def text(self) -> str:
        return decode_text(self.content, self.encoding)

    def header(self, name: str) -> str | None:
        values = self.headers.get(name.lower())
        return values[0] if values else None

    def json(self, target: Any = None) -> Any:
        """Decode the body as JSON, optionally into a typed ``target``."""
        if target is None:
            try:
                return json.loads(self.content)
            except ValueError as exc:
                raise DecodeError(
                    f"failed to decode response: {exc}",
                    status_code=self.status_code,
                    body=self.content,
                    response=self,
                    cause=exc,
                ) from exc
        try:
            return decode_content(self.content, target, self.encoding)
        except DecodeError as exc:
            exc.status_code = self.status_code
            exc.response = self
            raise
