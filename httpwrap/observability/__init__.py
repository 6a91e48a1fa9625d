"""Logging setup for the HTTP client."""

from httpwrap.observability.logging import (
    ComponentFilter,
    bind_request_context,
    clear_request_context,
    configure_logging,
)


__all__ = [
    "ComponentFilter",
    "bind_request_context",
    "clear_request_context",
    "configure_logging",
]
