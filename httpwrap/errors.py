"""Exception types raised by the HTTP client.

Every failed call surfaces as a ``RequestException`` or its
``ProblemDetailsError`` subtype. The transport error that caused it is kept
as ``inner_error`` and as the exception's ``__cause__``.
"""

from typing import Any

from httpwrap.models import ErrorKind, ProblemDetails, RequestOptions, RequestTimings


class CancelError(Exception):
    """Raised inside the executor when the caller's abort signal fires."""

    code = "ERR_CANCELED"

    def __init__(self, url: str) -> None:
        """Initialize the error.

        Args:
            url: URL of the request that was cancelled.
        """
        self.url = url
        super().__init__(f"Request cancelled: {url}")


class RequestException(Exception):
    """A failed HTTP call.

    Attributes:
        message: Error message prefixed with the request's verb and URL.
        status_code: HTTP status, a transport error code, or None.
        inner_error: The original exception.
        response_body: Parsed JSON error body, when there was one.
        kind: Failure classification.
        method: HTTP verb of the request.
        url: Effective request URL.
        options: Options the request was made with.
        request_headers: Headers sent with the request.
        timings: Timestamps recorded for the request.
    """

    def __init__(
        self,
        message: str,
        *,
        inner_error: BaseException,
        kind: ErrorKind = ErrorKind.UNKNOWN,
        status_code: int | str | None = None,
        response_body: Any = None,
        method: str | None = None,
        url: str = "",
        options: RequestOptions | None = None,
        request_headers: dict[str, str] | None = None,
        timings: RequestTimings | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.inner_error = inner_error
        self.kind = kind
        self.status_code = status_code
        self.response_body = response_body
        self.method = method
        self.url = url
        self.options = options
        self.request_headers = dict(request_headers or {})
        self.timings = timings

    @property
    def duration_ms(self) -> float | None:
        """Request duration in milliseconds, if timings were recorded."""
        return self.timings.duration_ms if self.timings else None


class ProblemDetailsError(RequestException):
    """A failed HTTP call whose body followed the problem-details format.

    Attributes:
        type: URI reference identifying the problem type.
        title: Short summary of the problem type.
        detail: Explanation specific to this occurrence.
        instance: URI reference identifying this occurrence.
        extensions: Any further members of the problem body.
    """

    def __init__(
        self,
        message: str,
        *,
        problem: ProblemDetails,
        inner_error: BaseException,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("kind", ErrorKind.PROBLEM_DETAILS)
        super().__init__(message, inner_error=inner_error, **kwargs)
        self.type = problem.type
        self.title = problem.title
        self.detail = problem.detail
        self.instance = problem.instance
        self.extensions = problem.extensions
