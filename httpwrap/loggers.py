"""Request/response logging strategies.

``HttpClient`` logs through an ``HttpLogger``. Pick one explicitly:

- ``NoOpHttpLogger``: the default, logs nothing.
- ``TextHttpLogger``: wraps any object with ``debug``/``info``/``error``
  (a ``logging.Logger`` for example) and writes human-readable lines, with a
  multi-line banner for failures.
- ``StructuredHttpLogger``: emits structlog key/value events for log
  pipelines.

GET successes are logged at debug level, other verbs at info. Headers and
bodies are always redacted before being logged.
"""

import json
import traceback
from typing import Any, Protocol

import httpx
import structlog

from httpwrap.constants import LOG_BANNER, LOG_COMPONENT_CLIENT
from httpwrap.errors import RequestException
from httpwrap.models import RequestOptions
from httpwrap.redact import redact_headers, redact_options, redact_url_credentials


class Logger(Protocol):
    """Minimal logger interface accepted by ``TextHttpLogger``."""

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> Any: ...

    def info(self, msg: str, *args: Any, **kwargs: Any) -> Any: ...

    def error(self, msg: str, *args: Any, **kwargs: Any) -> Any: ...


class HttpLogger(Protocol):
    """Strategy interface for logging request outcomes."""

    def log_success(self, response: httpx.Response, options: RequestOptions) -> None:
        """Log a successful response.

        Args:
            response: The response received.
            options: Options the request was made with.
        """
        ...

    def log_failure(self, error: RequestException) -> None:
        """Log a classified failure.

        Args:
            error: The exception about to be raised to the caller.
        """
        ...


def response_time_ms(response: httpx.Response) -> float | None:
    """Get the response time in milliseconds, once the response is closed."""
    try:
        return round(response.elapsed.total_seconds() * 1000, 2)
    except RuntimeError:
        return None


def _dumps(value: Any) -> str:
    return json.dumps(value, default=str, sort_keys=True)


def _format_stack(error: BaseException) -> str:
    return "".join(traceback.format_exception(error)).rstrip()


class NoOpHttpLogger:
    """Logger used when none is configured."""

    def log_success(self, response: httpx.Response, options: RequestOptions) -> None:
        pass

    def log_failure(self, error: RequestException) -> None:
        pass


class TextHttpLogger:
    """Human-readable logging on top of a plain logger."""

    def __init__(self, logger: Logger) -> None:
        """Initialize the logger.

        Args:
            logger: Object receiving the formatted messages.
        """
        self._logger = logger

    def log_success(self, response: httpx.Response, options: RequestOptions) -> None:
        """Log one line for the response, then the redacted options at debug."""
        elapsed = response_time_ms(response)
        message = (
            f"{options.method} {redact_url_credentials(str(response.url))} "
            f"{response.status_code} {elapsed if elapsed is not None else ' - '} ms"
        )
        if options.method == "GET":
            self._logger.debug(message)
        else:
            self._logger.info(message)

        redacted = redact_options(options)
        self._logger.debug(f"request-options: {_dumps(redacted.to_log_dict())}")

    def log_failure(self, error: RequestException) -> None:
        """Log the failure as a single multi-line banner."""
        status = error.status_code if error.status_code is not None else "unknown statusCode"
        duration = error.duration_ms if error.duration_ms is not None else " - "
        options = redact_options(error.options) if error.options else None
        lines = [
            "",
            LOG_BANNER,
            f"{error.method} {redact_url_credentials(error.url)} {status} ({duration} ms)",
            f"headers: {_dumps(redact_headers(error.request_headers))}",
            f"request-options: {_dumps(options.to_log_dict() if options else {})}",
            f"kind: {error.kind.value}",
            f"error:{error.message}",
            f"stack:{_format_stack(error.inner_error)}",
            LOG_BANNER,
        ]
        self._logger.error("\n".join(lines))


class StructuredHttpLogger:
    """Key/value event logging through structlog."""

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None) -> None:
        """Initialize the logger.

        Args:
            logger: Bound structlog logger. Defaults to a module logger bound
                with ``component="http_client"``.
        """
        self._log = logger or structlog.get_logger().bind(component=LOG_COMPONENT_CLIENT)

    def log_success(self, response: httpx.Response, options: RequestOptions) -> None:
        """Emit an ``http_request_succeeded`` event."""
        log = self._log.debug if options.method == "GET" else self._log.info
        log(
            "http_request_succeeded",
            method=options.method,
            url=redact_url_credentials(str(response.url)),
            status_code=response.status_code,
            response_time_ms=response_time_ms(response),
            request_options=redact_options(options).to_log_dict(),
        )

    def log_failure(self, error: RequestException) -> None:
        """Emit an ``http_request_failed`` event with the traceback attached."""
        options = redact_options(error.options) if error.options else None
        self._log.error(
            "http_request_failed",
            method=error.method,
            url=redact_url_credentials(error.url),
            status_code=error.status_code if error.status_code is not None else "unknown",
            duration_ms=error.duration_ms,
            kind=error.kind.value,
            headers=redact_headers(error.request_headers),
            request_options=options.to_log_dict() if options else {},
            error=error.message,
            exc_info=error.inner_error,
        )
