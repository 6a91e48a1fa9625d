"""Configuration models for the HTTP client."""

import base64
from collections.abc import Mapping
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from httpwrap.constants import (
    DEFAULT_CACHE_MAXSIZE,
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_RETRIES,
    DEFAULT_TIMEOUT_SECONDS,
)


class HttpClientConfig(BaseModel):
    """Authentication settings for an HTTP client.

    Basic auth takes precedence over a bearer token when both are supplied.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    basic_auth_user_name: str | None = None
    basic_auth_password: str | None = None
    bearer_token: str | None = None

    def authorization_header(self) -> str | None:
        """Build the Authorization header value, if any credentials are set.

        Returns:
            Header value, or None when no usable credentials are configured.
        """
        if self.basic_auth_user_name and self.basic_auth_password:
            raw = f"{self.basic_auth_user_name}:{self.basic_auth_password}"
            encoded = base64.b64encode(raw.encode("utf-8")).decode("ascii")
            return f"Basic {encoded}"
        if self.bearer_token:
            return f"Bearer {self.bearer_token}"
        return None


class TransportOptions(BaseModel):
    """Construction-time overrides handed to the httpx transport."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    timeout: Annotated[float, Field(gt=0.0, le=600.0)] = DEFAULT_TIMEOUT_SECONDS
    retries: Annotated[int, Field(ge=0, le=10)] = DEFAULT_RETRIES
    follow_redirects: bool = True
    decompress: bool = True
    headers: dict[str, str] = Field(default_factory=dict)


class CacheSettings(BaseModel):
    """Sizing of the default in-process response cache."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    maxsize: Annotated[int, Field(ge=1)] = DEFAULT_CACHE_MAXSIZE
    ttl_seconds: Annotated[float, Field(gt=0.0)] = DEFAULT_CACHE_TTL_SECONDS


class HttpClientSettings(BaseSettings):
    """Complete client configuration.

    Values come from keyword arguments or from ``HTTPWRAP_*`` environment
    variables, with ``__`` separating nested fields
    (``HTTPWRAP_CONFIG__BEARER_TOKEN``, ``HTTPWRAP_TRANSPORT__TIMEOUT``).

    Example:
        settings = HttpClientSettings.model_validate(
            {"prefix_url": "https://api.example.com", "config": {"bearer_token": "t"}}
        )
        client = HttpClient.from_settings(settings)
    """

    model_config = SettingsConfigDict(
        env_prefix="HTTPWRAP_",
        env_nested_delimiter="__",
        case_sensitive=False,
        frozen=True,
        extra="forbid",
    )

    prefix_url: str = ""
    config: HttpClientConfig = Field(default_factory=HttpClientConfig)
    transport: TransportOptions = Field(default_factory=TransportOptions)


def build_default_headers(
    config: HttpClientConfig | None,
    headers: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Build the construction-time default headers.

    The computed Authorization header sits under explicitly supplied headers,
    compared case-insensitively.

    Args:
        config: Authentication settings.
        headers: Headers supplied with the transport options.

    Returns:
        New dictionary of default headers.
    """
    result: dict[str, str] = {}
    authorization = config.authorization_header() if config else None
    explicit = dict(headers or {})
    if authorization and not any(k.lower() == "authorization" for k in explicit):
        result["Authorization"] = authorization
    result.update(explicit)
    return result
