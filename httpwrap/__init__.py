"""Thin async HTTP client layer over httpx.

This package provides:
- Default Authorization headers from basic auth or a bearer token
- JSON or form request bodies with per-request header generation
- Redacted success/failure logging (text or structlog events)
- A stable exception taxonomy, including problem-details error bodies
- A read-through GET cache and a stub client for tests
"""

from httpwrap.cache import CachedHttpClient, create_cache
from httpwrap.classifier import classify_error
from httpwrap.client import HttpClient, HttpClientProtocol
from httpwrap.config import (
    CacheSettings,
    HttpClientConfig,
    HttpClientSettings,
    TransportOptions,
    build_default_headers,
)
from httpwrap.constants import REDACTED_VALUE
from httpwrap.errors import CancelError, ProblemDetailsError, RequestException
from httpwrap.loggers import (
    HttpLogger,
    Logger,
    NoOpHttpLogger,
    StructuredHttpLogger,
    TextHttpLogger,
)
from httpwrap.models import ErrorKind, ProblemDetails, RequestOptions, RequestTimings
from httpwrap.options import HeaderGenerator, compose_options, merge_headers
from httpwrap.redact import (
    redact_body,
    redact_headers,
    redact_options,
    redact_url_credentials,
)
from httpwrap.testing import NO_PAYLOAD, StubHttpClient


__all__ = [
    # Clients
    "HttpClient",
    "HttpClientProtocol",
    "CachedHttpClient",
    "StubHttpClient",
    "NO_PAYLOAD",
    "create_cache",
    # Config
    "HttpClientConfig",
    "HttpClientSettings",
    "TransportOptions",
    "CacheSettings",
    "build_default_headers",
    # Options
    "RequestOptions",
    "HeaderGenerator",
    "compose_options",
    "merge_headers",
    # Errors
    "RequestException",
    "ProblemDetailsError",
    "CancelError",
    "ErrorKind",
    "ProblemDetails",
    "RequestTimings",
    "classify_error",
    # Logging
    "HttpLogger",
    "Logger",
    "NoOpHttpLogger",
    "TextHttpLogger",
    "StructuredHttpLogger",
    # Redaction
    "REDACTED_VALUE",
    "redact_body",
    "redact_headers",
    "redact_options",
    "redact_url_credentials",
]
