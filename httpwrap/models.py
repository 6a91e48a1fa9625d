"""Data models for the HTTP client layer."""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]


class ErrorKind(str, Enum):
    """Classification of request failures.

    - CANCELLED: The caller fired the abort signal
    - PROBLEM_DETAILS: Non-2xx response with a problem-details body
    - HTTP_STATUS: Any other non-2xx response
    - NETWORK_TIMEOUT: Request timed out before a response arrived
    - CONNECTION_ERROR: Could not establish connection
    - INVALID_BODY: Success response whose body failed to parse
    - UNKNOWN: Unclassified error
    """

    CANCELLED = "CANCELLED"
    PROBLEM_DETAILS = "PROBLEM_DETAILS"
    HTTP_STATUS = "HTTP_STATUS"
    NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    INVALID_BODY = "INVALID_BODY"
    UNKNOWN = "UNKNOWN"


class RequestOptions(BaseModel):
    """Per-request options.

    At most one of ``json_data`` and ``form`` is populated. ``method`` is
    filled in by option composition before dispatch.
    """

    model_config = ConfigDict(
        frozen=True, extra="forbid", arbitrary_types_allowed=True
    )

    method: HttpMethod | None = None
    timeout: Annotated[float, Field(gt=0.0)] | None = None
    decompress: bool | None = None
    json_data: Any = None
    form: dict[str, Any] | None = None
    headers: dict[str, str] = Field(default_factory=dict)
    follow_redirects: bool | None = None
    retries: Annotated[int, Field(ge=0, le=10)] | None = None
    is_form: bool = False
    abort_signal: asyncio.Event | None = Field(default=None, exclude=True)

    @model_validator(mode="after")
    def check_single_body(self) -> "RequestOptions":
        """Reject options carrying both a JSON and a form body."""
        if self.json_data is not None and self.form is not None:
            msg = "json_data and form are mutually exclusive"
            raise ValueError(msg)
        return self

    def to_log_dict(self) -> dict[str, Any]:
        """Dump the options for logging, without unset fields."""
        return self.model_dump(exclude_none=True, exclude_defaults=True) | {
            "method": self.method
        }


@dataclass
class RequestTimings:
    """Monotonic timestamps (seconds) recorded around one request.

    Attributes:
        start: When the request was dispatched.
        end: When the response completed.
        error: When the request failed, if it did.
    """

    start: float
    end: float | None = None
    error: float | None = None

    @property
    def duration_ms(self) -> float | None:
        """Elapsed milliseconds, measured to the error time when one exists."""
        finish = self.error if self.error is not None else self.end
        if finish is None:
            return None
        return round((finish - self.start) * 1000, 2)


class ProblemDetails(BaseModel):
    """Structured error body with ``type`` and ``title`` plus extensions."""

    model_config = ConfigDict(frozen=True, extra="allow")

    type: str
    title: str
    detail: str | None = None
    instance: str | None = None

    @property
    def extensions(self) -> dict[str, Any]:
        """Fields outside the standard problem-details members."""
        return dict(self.model_extra or {})
