"""structlog setup for applications using the HTTP client.

The library's loggers bind a ``component`` (``http_client``, ``cache``,
``stub_http_client``). ``configure_logging`` can keep only some of them, e.g.
request outcomes without the cache's debug events.
"""

import logging
import sys
from collections.abc import Collection, MutableMapping
from typing import Any, TextIO

import structlog

from httpwrap.constants import LOG_COMPONENTS


class ComponentFilter:
    """structlog processor dropping events of disabled library components.

    Events without a ``component``, or with one the library does not own,
    always pass.
    """

    def __init__(self, enabled: Collection[str]) -> None:
        """Initialize the filter.

        Args:
            enabled: Library components whose events are kept.

        Raises:
            ValueError: If a name is not a library component.
        """
        unknown = set(enabled) - LOG_COMPONENTS
        if unknown:
            raise ValueError(f"Unknown log components: {sorted(unknown)}")
        self.dropped = LOG_COMPONENTS - set(enabled)

    def __call__(
        self, logger: Any, method_name: str, event_dict: MutableMapping[str, Any]  # noqa: ARG002
    ) -> MutableMapping[str, Any]:
        if event_dict.get("component") in self.dropped:
            raise structlog.DropEvent
        return event_dict


def configure_logging(
    level: int = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
    components: Collection[str] | None = None,
) -> None:
    """Configure structlog for the client's loggers.

    ``StructuredHttpLogger`` and the cache and stub debug events render
    through this configuration. Plain loggers wrapped by ``TextHttpLogger``
    are pointed at the same stream.

    Args:
        level: Minimum level (default: INFO).
        output: Output stream (default: stderr).
        json_format: Render JSON lines instead of console output.
        components: Library components to keep; all of them when None.
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
    ]
    if components is not None:
        processors.append(ComponentFilter(components))
    processors.extend(
        [
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True)
            if json_format
            else structlog.dev.ConsoleRenderer(colors=False),
        ]
    )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=False,
    )
    logging.basicConfig(format="%(message)s", stream=output, level=level)


def bind_request_context(**values: str) -> None:
    """Bind values (e.g. a correlation id) to all subsequent log events."""
    structlog.contextvars.bind_contextvars(**values)


def clear_request_context(*keys: str) -> None:
    """Remove bound values; all of them when no keys are given."""
    if keys:
        structlog.contextvars.unbind_contextvars(*keys)
    else:
        structlog.contextvars.clear_contextvars()
