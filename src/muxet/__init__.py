"""HTTP client convenience layer with base URLs, JSON bodies, retries and hooks."""

from .client import AsyncClient, Client, merge_headers
from .config import ClientConfig, ClientConfigBuilder
from .context import RequestContext
from .exceptions import (
    ConfigError,
    DecodeError,
    HookError,
    HTTPStatusError,
    InvalidURLError,
    MuxetError,
    NetworkError,
    RequestCancelledError,
    ResponseReadError,
    RetriesExhaustedError,
    SerializationError,
)
from .hooks import AsyncTransport, Logger, RequestHook, ResponseHook, Transport
from .models import Request, Response

__version__ = "0.1.0"

__all__ = [
    "AsyncClient",
    "AsyncTransport",
    "Client",
    "ClientConfig",
    "ClientConfigBuilder",
    "ConfigError",
    "DecodeError",
    "HookError",
    "HTTPStatusError",
    "InvalidURLError",
    "Logger",
    "MuxetError",
    "NetworkError",
    "Request",
    "RequestCancelledError",
    "RequestContext",
    "RequestHook",
    "Response",
    "ResponseHook",
    "ResponseReadError",
    "RetriesExhaustedError",
    "SerializationError",
    "Transport",
    "merge_headers",
]
