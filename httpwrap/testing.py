"""Programmable stand-in for ``HttpClient`` in consumers' test suites.

``StubHttpClient`` returns canned payloads per verb and route and records
every call for later assertions. It makes no network requests.

Example:
    client = StubHttpClient({"get": {"/users/1": {"id": 1}}})
    assert await client.get("/users/1") == {"id": 1}
    assert client.calls["get"]["/users/1"] is NO_PAYLOAD
"""

from typing import Any, Final, Literal

import structlog

from httpwrap.constants import LOG_COMPONENT_STUB
from httpwrap.models import RequestOptions


logger = structlog.get_logger()

Verb = Literal["get", "post", "put", "patch", "delete"]

VERBS: Final[tuple[Verb, ...]] = ("get", "post", "put", "patch", "delete")


class _NoPayload:
    """Marker recorded for calls that carry no body."""

    def __repr__(self) -> str:
        return "NO_PAYLOAD"


NO_PAYLOAD: Final = _NoPayload()


class StubHttpClient:
    """Test double implementing the public client contract.

    Routes without a canned payload resolve to None. A canned payload that is
    an exception instance is raised instead of returned.
    """

    def __init__(self, route_payloads: dict[str, dict[str, Any]] | None = None) -> None:
        """Initialize the stub.

        Args:
            route_payloads: Mapping of verb ("get", "post", ...) to a mapping
                of route to the payload returned for it.
        """
        self._route_payloads = {
            verb: dict((route_payloads or {}).get(verb, {})) for verb in VERBS
        }
        self.calls: dict[Verb, dict[str, Any]] = {verb: {} for verb in VERBS}
        self._log = logger.bind(component=LOG_COMPONENT_STUB)

    def _respond(self, verb: Verb, route: str, payload: Any) -> Any:
        self.calls[verb][route] = payload
        response = self._route_payloads[verb].get(route)
        self._log.debug(
            "stub_call",
            verb=verb,
            route=route,
            matched=route in self._route_payloads[verb],
        )
        if isinstance(response, BaseException):
            raise response
        return response

    async def get(self, route: str, options: RequestOptions | None = None) -> Any:  # noqa: ARG002
        """Record a GET call and return its canned payload."""
        return self._respond("get", route, NO_PAYLOAD)

    async def post(
        self,
        route: str,
        data: Any = None,
        options: RequestOptions | None = None,  # noqa: ARG002
    ) -> Any:
        """Record a POST call with its payload and return the canned payload."""
        return self._respond("post", route, data if data is not None else {})

    async def put(
        self,
        route: str,
        data: Any = None,
        options: RequestOptions | None = None,  # noqa: ARG002
    ) -> Any:
        """Record a PUT call with its payload and return the canned payload."""
        return self._respond("put", route, data if data is not None else {})

    async def patch(
        self,
        route: str,
        data: Any = None,
        options: RequestOptions | None = None,  # noqa: ARG002
    ) -> Any:
        """Record a PATCH call with its payload and return the canned payload."""
        return self._respond("patch", route, data if data is not None else {})

    async def delete(self, route: str, options: RequestOptions | None = None) -> Any:  # noqa: ARG002
        """Record a DELETE call and return its canned payload."""
        return self._respond("delete", route, NO_PAYLOAD)

    def reset_calls(self) -> None:
        """Clear recorded calls, keeping the canned payloads."""
        self.calls = {verb: {} for verb in VERBS}
