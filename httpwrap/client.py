"""HTTP client with auth headers, option composition, logging and error mapping."""

import asyncio
import contextlib
import functools
import time
from collections.abc import Coroutine, Mapping
from typing import Any, Protocol, TypeVar, overload, runtime_checkable

import httpx
import structlog
from pydantic import TypeAdapter

from httpwrap.classifier import classify_error
from httpwrap.config import (
    HttpClientConfig,
    HttpClientSettings,
    TransportOptions,
    build_default_headers,
)
from httpwrap.constants import LOG_COMPONENT_CLIENT
from httpwrap.errors import CancelError
from httpwrap.loggers import HttpLogger, NoOpHttpLogger
from httpwrap.models import RequestOptions, RequestTimings
from httpwrap.options import HeaderGenerator, compose_options, merge_headers


T = TypeVar("T")


@runtime_checkable
class HttpClientProtocol(Protocol):
    """Public contract shared by ``HttpClient``, ``CachedHttpClient`` and
    ``StubHttpClient``."""

    async def get(self, path: str, options: RequestOptions | None = None) -> Any:
        """Send a GET request and return the parsed body."""
        ...

    async def post(
        self, path: str, data: Any = None, options: RequestOptions | None = None
    ) -> Any:
        """Send a POST request and return the parsed body."""
        ...

    async def put(
        self, path: str, data: Any = None, options: RequestOptions | None = None
    ) -> Any:
        """Send a PUT request and return the parsed body."""
        ...

    async def patch(
        self, path: str, data: Any = None, options: RequestOptions | None = None
    ) -> Any:
        """Send a PATCH request and return the parsed body."""
        ...

    async def delete(self, path: str, options: RequestOptions | None = None) -> Any:
        """Send a DELETE request."""
        ...


def strip_leading_slash(path: str) -> str:
    """Remove a single leading slash from a request path."""
    return path[1:] if path.startswith("/") else path


@functools.lru_cache(maxsize=128)
def _type_adapter(response_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(response_type)


def parse_body(response: httpx.Response, response_type: Any = None) -> Any:
    """Parse a JSON response body.

    Args:
        response: Successful response.
        response_type: Optional type the body is validated into.

    Returns:
        Parsed body, or None for an empty body.

    Raises:
        ValueError: If the body is not valid JSON or fails validation.
    """
    if not response.content:
        return None
    body = response.json()
    if response_type is None:
        return body
    return _type_adapter(response_type).validate_python(body)


async def send_cancellable(
    send: Coroutine[Any, Any, httpx.Response],
    abort_signal: asyncio.Event,
    url: str,
) -> httpx.Response:
    """Await a request unless the abort signal fires first.

    Args:
        send: Coroutine sending the request.
        abort_signal: Event set by the caller to cancel the request.
        url: Request URL, for the error message.

    Returns:
        The response, if it completed before the signal fired.

    Raises:
        CancelError: If the signal fired first. The in-flight request is
            cancelled before raising.
    """
    if abort_signal.is_set():
        send.close()
        raise CancelError(url)

    request_task = asyncio.ensure_future(send)
    abort_task = asyncio.ensure_future(abort_signal.wait())
    try:
        done, _ = await asyncio.wait(
            {request_task, abort_task}, return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        abort_task.cancel()
        if not request_task.done():
            request_task.cancel()

    if request_task in done:
        return request_task.result()

    with contextlib.suppress(asyncio.CancelledError):
        await request_task
    raise CancelError(url)


class HttpClient:
    """Async JSON HTTP client on top of httpx.

    Provides:
    - Authorization header from basic auth or a bearer token
    - Per-request headers from an optional header generator
    - JSON or form-encoded request bodies
    - Cancellation through an ``asyncio.Event``
    - Redacted success/failure logging through an ``HttpLogger``
    - ``RequestException`` / ``ProblemDetailsError`` for every failure

    Example:
        async with HttpClient(
            "https://api.example.com",
            config=HttpClientConfig(bearer_token="token"),
            logger=StructuredHttpLogger(),
        ) as client:
            user = await client.get("/users/1")
    """

    def __init__(
        self,
        prefix_url: str = "",
        *,
        logger: HttpLogger | None = None,
        config: HttpClientConfig | None = None,
        options: TransportOptions | None = None,
        header_generator: HeaderGenerator | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            prefix_url: Base URL prepended to every request path.
            logger: Logging strategy. Defaults to ``NoOpHttpLogger``.
            config: Authentication settings.
            options: Transport overrides (timeout, retries, redirects,
                decompression, default headers).
            header_generator: Callable invoked on every request whose headers
                override the per-request headers.
            transport: Pre-built httpx transport, e.g. ``httpx.MockTransport``.
                When given, the retry count is left to that transport.
        """
        self._prefix_url = prefix_url
        self._logger: HttpLogger = logger or NoOpHttpLogger()
        self._options = options or TransportOptions()
        self._header_generator = header_generator
        self._transport = transport
        self._default_headers = build_default_headers(config, self._options.headers)
        if not self._options.decompress:
            self._default_headers = merge_headers(
                {"Accept-Encoding": "identity"}, self._default_headers
            )
        self._clients: dict[int, httpx.AsyncClient] = {}
        self._log = structlog.get_logger().bind(component=LOG_COMPONENT_CLIENT)

    @classmethod
    def from_settings(
        cls,
        settings: HttpClientSettings,
        *,
        logger: HttpLogger | None = None,
        header_generator: HeaderGenerator | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "HttpClient":
        """Create a client from a settings model.

        Args:
            settings: Client settings.
            logger: Logging strategy.
            header_generator: Per-request header callable.
            transport: Pre-built httpx transport.

        Returns:
            HttpClient instance.
        """
        return cls(
            settings.prefix_url,
            logger=logger,
            config=settings.config,
            options=settings.transport,
            header_generator=header_generator,
            transport=transport,
        )

    @property
    def prefix_url(self) -> str:
        """Base URL prepended to request paths."""
        return self._prefix_url

    @property
    def default_headers(self) -> Mapping[str, str]:
        """Headers sent with every request, computed at construction."""
        return dict(self._default_headers)

    def _client_for(self, retries: int | None) -> httpx.AsyncClient:
        """Get the httpx client dispatching with the given retry count."""
        if retries is None or self._transport is not None:
            retries = self._options.retries
        client = self._clients.get(retries)
        if client is None:
            transport = self._transport or httpx.AsyncHTTPTransport(retries=retries)
            client = httpx.AsyncClient(
                base_url=self._prefix_url,
                headers=self._default_headers,
                timeout=self._options.timeout,
                follow_redirects=self._options.follow_redirects,
                transport=transport,
            )
            self._clients[retries] = client
            self._log.debug("transport_client_created", retries=retries)
        return client

    def _build_request(
        self, client: httpx.AsyncClient, path: str, options: RequestOptions
    ) -> httpx.Request:
        headers = dict(options.headers)
        if options.decompress is False:
            headers = merge_headers(headers, {"Accept-Encoding": "identity"})
        return client.build_request(
            options.method or "GET",
            path,
            json=options.json_data,
            data=options.form,
            headers=headers,
            timeout=(
                options.timeout
                if options.timeout is not None
                else httpx.USE_CLIENT_DEFAULT
            ),
        )

    async def _send(
        self, client: httpx.AsyncClient, request: httpx.Request, options: RequestOptions
    ) -> httpx.Response:
        send = client.send(
            request,
            follow_redirects=(
                options.follow_redirects
                if options.follow_redirects is not None
                else httpx.USE_CLIENT_DEFAULT
            ),
        )
        if options.abort_signal is None:
            return await send
        return await send_cancellable(send, options.abort_signal, str(request.url))

    def _effective_url(self, path: str) -> str:
        if not self._prefix_url:
            return path
        return f"{self._prefix_url.rstrip('/')}/{path}"

    async def _request_json(
        self,
        path: str,
        options: RequestOptions,
        response_type: Any = None,
    ) -> Any:
        """Run one request/response cycle.

        Args:
            path: Request path, relative to the prefix URL.
            options: Composed request options.
            response_type: Optional type the body is validated into.

        Returns:
            Parsed response body.

        Raises:
            RequestException: If the request fails for any reason.
        """
        sanitized_path = strip_leading_slash(path)
        client = self._client_for(options.retries)
        timings = RequestTimings(start=time.perf_counter())
        request: httpx.Request | None = None
        response: httpx.Response | None = None

        try:
            request = self._build_request(client, sanitized_path, options)
            response = await self._send(client, request, options)
            timings.end = time.perf_counter()
            response.raise_for_status()
            body = parse_body(response, response_type)
        except Exception as error:
            timings.error = time.perf_counter()
            exc = classify_error(
                error,
                method=options.method or "GET",
                url=(
                    str(request.url)
                    if request is not None
                    else self._effective_url(sanitized_path)
                ),
                options=options,
                request_headers=(
                    dict(request.headers) if request is not None else options.headers
                ),
                timings=timings,
                response=response,
            )
            self._logger.log_failure(exc)
            raise exc from error

        self._logger.log_success(response, options)
        return body

    @overload
    async def get(
        self,
        path: str,
        options: RequestOptions | None = None,
        *,
        response_type: None = None,
    ) -> Any: ...

    @overload
    async def get(
        self,
        path: str,
        options: RequestOptions | None = None,
        *,
        response_type: type[T],
    ) -> T: ...

    async def get(
        self,
        path: str,
        options: RequestOptions | None = None,
        *,
        response_type: type[T] | None = None,
    ) -> Any:
        """Send a GET request.

        Args:
            path: Request path.
            options: Per-request options.
            response_type: Optional type the body is validated into.

        Returns:
            Parsed response body, an instance of ``response_type`` when given.
        """
        opts = compose_options("GET", None, options, self._header_generator)
        return await self._request_json(path, opts, response_type)

    @overload
    async def post(
        self,
        path: str,
        data: Any = None,
        options: RequestOptions | None = None,
        *,
        response_type: None = None,
    ) -> Any: ...

    @overload
    async def post(
        self,
        path: str,
        data: Any = None,
        options: RequestOptions | None = None,
        *,
        response_type: type[T],
    ) -> T: ...

    async def post(
        self,
        path: str,
        data: Any = None,
        options: RequestOptions | None = None,
        *,
        response_type: type[T] | None = None,
    ) -> Any:
        """Send a POST request with an optional JSON or form body."""
        opts = compose_options("POST", data, options, self._header_generator)
        return await self._request_json(path, opts, response_type)

    @overload
    async def put(
        self,
        path: str,
        data: Any = None,
        options: RequestOptions | None = None,
        *,
        response_type: None = None,
    ) -> Any: ...

    @overload
    async def put(
        self,
        path: str,
        data: Any = None,
        options: RequestOptions | None = None,
        *,
        response_type: type[T],
    ) -> T: ...

    async def put(
        self,
        path: str,
        data: Any = None,
        options: RequestOptions | None = None,
        *,
        response_type: type[T] | None = None,
    ) -> Any:
        """Send a PUT request with an optional JSON or form body."""
        opts = compose_options("PUT", data, options, self._header_generator)
        return await self._request_json(path, opts, response_type)

    @overload
    async def patch(
        self,
        path: str,
        data: Any = None,
        options: RequestOptions | None = None,
        *,
        response_type: None = None,
    ) -> Any: ...

    @overload
    async def patch(
        self,
        path: str,
        data: Any = None,
        options: RequestOptions | None = None,
        *,
        response_type: type[T],
    ) -> T: ...

    async def patch(
        self,
        path: str,
        data: Any = None,
        options: RequestOptions | None = None,
        *,
        response_type: type[T] | None = None,
    ) -> Any:
        """Send a PATCH request with an optional JSON or form body."""
        opts = compose_options("PATCH", data, options, self._header_generator)
        return await self._request_json(path, opts, response_type)

    async def delete(self, path: str, options: RequestOptions | None = None) -> None:
        """Send a DELETE request, discarding the response body."""
        opts = compose_options("DELETE", None, options, self._header_generator)
        await self._request_json(path, opts)

    async def raw(self, path: str, options: RequestOptions) -> httpx.Response:
        """Send a request and return the httpx response as is.

        No JSON parsing, status checking, logging or error classification
        happens here: transport errors propagate unmodified and non-2xx
        responses are returned. The abort signal is still honored.

        Args:
            path: Request path.
            options: Request options; ``method`` defaults to GET.

        Returns:
            The httpx response.

        Raises:
            CancelError: If the abort signal fires before the response.
            httpx.HTTPError: On transport failures.
        """
        client = self._client_for(options.retries)
        request = self._build_request(client, strip_leading_slash(path), options)
        return await self._send(client, request, options)

    async def aclose(self) -> None:
        """Close every httpx client owned by this instance."""
        for client in self._clients.values():
            await client.aclose()
        self._clients.clear()
        self._log.debug("http_client_closed")

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"<HttpClient prefix_url={self._prefix_url!r}>"
