"""Mapping of transport failures onto the client's exception types.

Classification order:

1. Cancellation of the request by the caller's abort signal.
2. Non-2xx response with a problem-details body (``type`` and ``title``).
3. Non-2xx response with any other JSON body.
4. Anything else: non-JSON error bodies, transport errors, bodies that fail
   to parse.

Parsing an error body is best effort. A parse failure falls through to the
next rule instead of propagating.
"""

from typing import Any

import httpx
from pydantic import ValidationError

from httpwrap.constants import (
    CONTENT_TYPE_JSON,
    CONTENT_TYPE_PROBLEM_JSON,
    JSON_CONTENT_TYPE_SUFFIX,
)
from httpwrap.errors import CancelError, ProblemDetailsError, RequestException
from httpwrap.models import ErrorKind, ProblemDetails, RequestOptions, RequestTimings


_NO_BODY = object()


def media_type(response: httpx.Response) -> str:
    """Get the lowercased media type of a response, without parameters."""
    content_type = response.headers.get("content-type", "")
    return content_type.split(";", 1)[0].strip().lower()


def is_json_media_type(value: str) -> bool:
    """Check if a media type belongs to the JSON family."""
    return value == CONTENT_TYPE_JSON or value.endswith(JSON_CONTENT_TYPE_SUFFIX)


def _parse_json_body(response: httpx.Response) -> Any:
    """Parse a JSON error body, returning ``_NO_BODY`` when that fails."""
    if not is_json_media_type(media_type(response)):
        return _NO_BODY
    try:
        return response.json()
    except ValueError:
        return _NO_BODY


def _parse_problem(response: httpx.Response, body: Any) -> ProblemDetails | None:
    """Validate a parsed body as problem details, if the response says it is one."""
    if media_type(response) != CONTENT_TYPE_PROBLEM_JSON:
        return None
    try:
        return ProblemDetails.model_validate(body)
    except ValidationError:
        return None


def _transport_kind(error: BaseException, response: httpx.Response | None) -> ErrorKind:
    if isinstance(error, httpx.TimeoutException):
        return ErrorKind.NETWORK_TIMEOUT
    if isinstance(error, httpx.NetworkError):
        return ErrorKind.CONNECTION_ERROR
    if response is not None and isinstance(error, ValueError):
        return ErrorKind.INVALID_BODY
    return ErrorKind.UNKNOWN


def classify_error(
    error: BaseException,
    *,
    method: str,
    url: str,
    options: RequestOptions,
    request_headers: dict[str, str] | None = None,
    timings: RequestTimings | None = None,
    response: httpx.Response | None = None,
) -> RequestException:
    """Wrap a caught error in the matching client exception.

    Args:
        error: The error raised while making or parsing the request.
        method: HTTP verb of the request.
        url: Effective request URL.
        options: Options the request was made with.
        request_headers: Headers sent with the request.
        timings: Timestamps recorded for the request.
        response: Response received before the error, if any.

    Returns:
        RequestException or ProblemDetailsError describing the failure.
    """
    if response is None and isinstance(error, httpx.HTTPStatusError):
        response = error.response

    message = f"{method} {url}: {str(error) or type(error).__name__}"
    context: dict[str, Any] = {
        "inner_error": error,
        "method": method,
        "url": url,
        "options": options,
        "request_headers": request_headers,
        "timings": timings,
    }

    if isinstance(error, CancelError):
        return RequestException(message, kind=ErrorKind.CANCELLED, **context)

    if isinstance(error, httpx.HTTPStatusError) and response is not None:
        body = _parse_json_body(response)
        if body is _NO_BODY:
            return RequestException(
                message,
                kind=ErrorKind.HTTP_STATUS,
                status_code=response.status_code,
                **context,
            )
        problem = _parse_problem(response, body)
        if problem is not None:
            return ProblemDetailsError(
                message,
                problem=problem,
                status_code=response.status_code,
                response_body=body,
                **context,
            )
        return RequestException(
            message,
            kind=ErrorKind.HTTP_STATUS,
            status_code=response.status_code,
            response_body=body,
            **context,
        )

    kind = _transport_kind(error, response)
    status_code: int | str | None = None
    if response is not None:
        status_code = response.status_code
    elif kind in (ErrorKind.NETWORK_TIMEOUT, ErrorKind.CONNECTION_ERROR):
        status_code = kind.value
    return RequestException(message, kind=kind, status_code=status_code, **context)
