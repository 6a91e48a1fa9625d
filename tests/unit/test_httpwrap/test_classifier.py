"""Unit tests for error classification."""

import json
from typing import Any

import httpx
import pytest

from httpwrap.classifier import classify_error, is_json_media_type
from httpwrap.errors import CancelError, ProblemDetailsError, RequestException
from httpwrap.models import ErrorKind, RequestOptions, RequestTimings


URL = "https://api.example.com/items"


def status_error(
    status_code: int,
    content_type: str | None,
    content: bytes,
) -> httpx.HTTPStatusError:
    """Build the error httpx raises for a non-2xx response."""
    request = httpx.Request("GET", URL)
    headers = {"Content-Type": content_type} if content_type else {}
    response = httpx.Response(
        status_code, headers=headers, content=content, request=request
    )
    return httpx.HTTPStatusError("failed", request=request, response=response)


def classify(error: BaseException, **kwargs: Any) -> RequestException:
    """Classify with fixed request context."""
    return classify_error(
        error,
        method="GET",
        url=URL,
        options=RequestOptions(method="GET"),
        **kwargs,
    )


class TestCancellation:
    """Tests for cancelled requests."""

    def test_cancel_error(self) -> None:
        """Cancellation has its own kind and no status code."""
        error = CancelError(URL)

        result = classify(error)

        assert type(result) is RequestException
        assert result.kind == ErrorKind.CANCELLED
        assert result.status_code is None
        assert result.inner_error is error


class TestProblemDetails:
    """Tests for problem-details bodies."""

    def test_problem_details(self) -> None:
        """A problem+json body with type and title becomes ProblemDetailsError."""
        body = {
            "type": "about:blank",
            "title": "Bad Request",
            "detail": "x is required",
            "traceId": "abc",
        }
        error = status_error(
            400, "application/problem+json", json.dumps(body).encode()
        )

        result = classify(error)

        assert isinstance(result, ProblemDetailsError)
        assert result.title == "Bad Request"
        assert result.detail == "x is required"
        assert result.type == "about:blank"
        assert result.instance is None
        assert result.extensions == {"traceId": "abc"}
        assert result.status_code == 400
        assert result.response_body == body
        assert result.kind == ErrorKind.PROBLEM_DETAILS

    def test_content_type_parameters_ignored(self) -> None:
        """Charset parameters do not hide the problem marker."""
        body = {"type": "t", "title": "T"}
        error = status_error(
            422, "application/problem+json; charset=utf-8", json.dumps(body).encode()
        )

        assert isinstance(classify(error), ProblemDetailsError)

    def test_missing_title_falls_back_to_plain_json(self) -> None:
        """Without both type and title the body is plain JSON."""
        body = {"type": "about:blank", "detail": "x"}
        error = status_error(
            400, "application/problem+json", json.dumps(body).encode()
        )

        result = classify(error)

        assert type(result) is RequestException
        assert result.kind == ErrorKind.HTTP_STATUS
        assert result.response_body == body

    def test_problem_shape_with_plain_json_type(self) -> None:
        """The problem marker content type is required."""
        body = {"type": "about:blank", "title": "Bad Request"}
        error = status_error(400, "application/json", json.dumps(body).encode())

        result = classify(error)

        assert type(result) is RequestException
        assert result.response_body == body

    def test_non_object_problem_body(self) -> None:
        """A JSON array under the problem marker is plain JSON."""
        error = status_error(400, "application/problem+json", b"[1, 2]")

        result = classify(error)

        assert type(result) is RequestException
        assert result.response_body == [1, 2]


class TestPlainFailures:
    """Tests for other HTTP failures."""

    def test_plain_json_body(self) -> None:
        """A JSON error body is attached as response_body."""
        error = status_error(500, "application/json", b'{"message": "boom"}')

        result = classify(error)

        assert result.status_code == 500
        assert result.response_body == {"message": "boom"}

    def test_non_json_body(self) -> None:
        """Text bodies are not parsed."""
        error = status_error(400, "text/plain", b"400 Bad Request")

        result = classify(error)

        assert result.status_code == 400
        assert result.response_body is None
        assert result.kind == ErrorKind.HTTP_STATUS

    def test_malformed_json_body_swallowed(self) -> None:
        """An unparseable JSON error body falls through without raising."""
        error = status_error(502, "application/json", b"{not json")

        result = classify(error)

        assert result.status_code == 502
        assert result.response_body is None

    def test_message_prefixed_with_request(self) -> None:
        """The message names the verb and URL."""
        error = status_error(404, None, b"")

        result = classify(error)

        assert result.message.startswith(f"GET {URL}: ")
        assert str(result) == result.message


class TestTransportFailures:
    """Tests for failures without a response."""

    def test_timeout(self) -> None:
        """Timeouts use their kind as status code."""
        error = httpx.ReadTimeout("timed out")

        result = classify(error)

        assert result.kind == ErrorKind.NETWORK_TIMEOUT
        assert result.status_code == "NETWORK_TIMEOUT"

    def test_connection_error(self) -> None:
        """Connection failures are classified."""
        error = httpx.ConnectError("refused")

        result = classify(error)

        assert result.kind == ErrorKind.CONNECTION_ERROR
        assert result.status_code == "CONNECTION_ERROR"

    def test_invalid_body_on_success(self) -> None:
        """A body that fails to parse keeps the response status."""
        response = httpx.Response(200, content=b"not json")
        with pytest.raises(ValueError) as exc_info:
            response.json()

        result = classify(exc_info.value, response=response)

        assert result.kind == ErrorKind.INVALID_BODY
        assert result.status_code == 200

    def test_unknown_error(self) -> None:
        """Anything else is unknown with no status code."""
        error = RuntimeError("boom")

        result = classify(error)

        assert result.kind == ErrorKind.UNKNOWN
        assert result.status_code is None
        assert result.message == f"GET {URL}: boom"

    def test_empty_message_uses_type_name(self) -> None:
        """Errors without text are named by their type."""
        result = classify(RuntimeError())

        assert result.message == f"GET {URL}: RuntimeError"

    def test_duration_from_timings(self) -> None:
        """The error timestamp takes precedence over the end timestamp."""
        timings = RequestTimings(start=1.0, end=1.5, error=2.0)

        result = classify(RuntimeError("x"), timings=timings)

        assert result.duration_ms == 1000.0


class TestMediaType:
    """Tests for JSON media type detection."""

    @pytest.mark.parametrize(
        "value", ["application/json", "application/problem+json", "application/vnd.api+json"]
    )
    def test_json_family(self, value: str) -> None:
        """JSON and +json types are JSON."""
        assert is_json_media_type(value) is True

    @pytest.mark.parametrize("value", ["text/plain", "text/html", ""])
    def test_not_json(self, value: str) -> None:
        """Other types are not JSON."""
        assert is_json_media_type(value) is False
