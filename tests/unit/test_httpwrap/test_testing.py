"""Unit tests for the StubHttpClient test double."""

import pytest

from httpwrap.client import HttpClientProtocol
from httpwrap.errors import RequestException
from httpwrap.testing import NO_PAYLOAD, VERBS, StubHttpClient


pytestmark = pytest.mark.anyio


@pytest.fixture
def stub() -> StubHttpClient:
    return StubHttpClient(
        {
            "get": {"/users/1": {"id": 1}},
            "post": {"/users": {"id": 2}},
            "put": {"/users/1": {"id": 1, "name": "b"}},
            "patch": {"/users/1": {"id": 1, "name": "c"}},
            "delete": {"/users/1": {"deleted": True}},
        }
    )


class TestCannedPayloads:
    """Tests for returned payloads."""

    async def test_get(self, stub: StubHttpClient) -> None:
        """GET returns the canned payload and records NO_PAYLOAD."""
        assert await stub.get("/users/1") == {"id": 1}
        assert stub.calls["get"]["/users/1"] is NO_PAYLOAD

    async def test_post_records_payload(self, stub: StubHttpClient) -> None:
        """POST records the payload it was called with."""
        result = await stub.post("/users", {"name": "a"})

        assert result == {"id": 2}
        assert stub.calls["post"] == {"/users": {"name": "a"}}

    @pytest.mark.parametrize("verb", ["post", "put", "patch"])
    async def test_missing_payload_recorded_empty(
        self, stub: StubHttpClient, verb: str
    ) -> None:
        """Body verbs without a payload record an empty mapping."""
        await getattr(stub, verb)("/users/1")

        assert stub.calls[verb]["/users/1"] == {}

    async def test_put_and_patch(self, stub: StubHttpClient) -> None:
        """PUT and PATCH return their own canned payloads."""
        assert await stub.put("/users/1", {"name": "b"}) == {"id": 1, "name": "b"}
        assert await stub.patch("/users/1", {"name": "c"}) == {"id": 1, "name": "c"}

    async def test_delete(self, stub: StubHttpClient) -> None:
        """DELETE records NO_PAYLOAD."""
        assert await stub.delete("/users/1") == {"deleted": True}
        assert stub.calls["delete"]["/users/1"] is NO_PAYLOAD

    async def test_unknown_route(self, stub: StubHttpClient) -> None:
        """Routes without a payload resolve to None and are still recorded."""
        assert await stub.get("/nope") is None
        assert "/nope" in stub.calls["get"]

    async def test_verbs_are_separate(self, stub: StubHttpClient) -> None:
        """A route configured for GET is unknown to POST."""
        assert await stub.post("/users/1", {"x": 1}) is None

    async def test_exception_payload_raised(self) -> None:
        """An exception payload is raised instead of returned."""
        error = RequestException(
            "GET /boom: failed", inner_error=RuntimeError("failed"), status_code=500
        )
        stub = StubHttpClient({"get": {"/boom": error}})

        with pytest.raises(RequestException) as exc_info:
            await stub.get("/boom")

        assert exc_info.value is error
        assert stub.calls["get"]["/boom"] is NO_PAYLOAD

    async def test_no_configuration(self) -> None:
        """A stub built without payloads answers None everywhere."""
        stub = StubHttpClient()

        assert await stub.delete("/x") is None
        assert set(stub.calls) == set(VERBS)


class TestCallRecording:
    """Tests for the call log."""

    async def test_last_payload_wins(self, stub: StubHttpClient) -> None:
        """Repeated calls to a route keep the latest payload."""
        await stub.post("/users", {"n": 1})
        await stub.post("/users", {"n": 2})

        assert stub.calls["post"]["/users"] == {"n": 2}

    async def test_reset_calls(self, stub: StubHttpClient) -> None:
        """reset_calls clears the log and keeps the payloads."""
        await stub.get("/users/1")
        await stub.post("/users", {"a": 1})

        stub.reset_calls()

        assert stub.calls == {verb: {} for verb in VERBS}
        assert await stub.get("/users/1") == {"id": 1}

    def test_fresh_stub_has_empty_log(self, stub: StubHttpClient) -> None:
        """No calls are recorded before any request."""
        assert all(stub.calls[verb] == {} for verb in VERBS)

    def test_satisfies_protocol(self, stub: StubHttpClient) -> None:
        """The stub implements the shared client contract."""
        assert isinstance(stub, HttpClientProtocol)

    def test_no_payload_repr(self) -> None:
        """The marker is readable in assertion output."""
        assert repr(NO_PAYLOAD) == "NO_PAYLOAD"
