"""Read-through response cache over the GET path.

Entries are keyed by route only: the HTTP method and query string are not
normalized or distinguished. Mutating verbs pass straight through without
invalidating anything.
"""

from collections.abc import MutableMapping
from typing import Any

import structlog
from cachetools import TTLCache

from httpwrap.client import HttpClientProtocol
from httpwrap.config import CacheSettings
from httpwrap.constants import LOG_COMPONENT_CACHE
from httpwrap.models import RequestOptions


logger = structlog.get_logger()

_MISSING = object()


def create_cache(settings: CacheSettings | None = None) -> TTLCache:
    """Create the default time-based cache store.

    Args:
        settings: Cache sizing. Defaults to ``CacheSettings()``.

    Returns:
        Empty TTL cache.
    """
    settings = settings or CacheSettings()
    return TTLCache(maxsize=settings.maxsize, ttl=settings.ttl_seconds)


class CachedHttpClient:
    """HTTP client decorator caching GET results by route.

    Any stored value, including None, counts as a hit. A failed call stores
    nothing and its exception propagates unchanged.
    """

    def __init__(
        self,
        http_client: HttpClientProtocol,
        cache: MutableMapping[str, Any] | None = None,
        run_id: str | None = None,
    ) -> None:
        """Initialize the cached client.

        Args:
            http_client: Client the calls are delegated to.
            cache: Store for cached bodies. Defaults to a TTL cache.
            run_id: Optional identifier bound to log events.
        """
        self._http_client = http_client
        self._cache: MutableMapping[str, Any] = (
            cache if cache is not None else create_cache()
        )
        self._log = logger.bind(component=LOG_COMPONENT_CACHE, run_id=run_id)

    @property
    def cache(self) -> MutableMapping[str, Any]:
        """The underlying cache store."""
        return self._cache

    async def _get(self, route: str, no_cache: bool) -> Any:
        if not no_cache:
            cached = self._cache.get(route, _MISSING)
            if cached is not _MISSING:
                self._log.debug("cache_hit", route=route)
                return cached

        result = await self._http_client.get(route)
        self._cache[route] = result
        self._log.debug("cache_update", route=route, bypassed=no_cache)
        return result

    async def get(self, route: str, options: RequestOptions | None = None) -> Any:
        """Return the cached body for a route, fetching it on a miss.

        ``options`` is accepted for interface compatibility and ignored;
        cached reads are always plain GETs of the route.
        """
        return await self._get(route, no_cache=False)

    async def get_no_cache(self, route: str) -> Any:
        """Fetch a route, bypassing the lookup but refreshing the entry."""
        return await self._get(route, no_cache=True)

    async def post(
        self, route: str, data: Any = None, options: RequestOptions | None = None
    ) -> Any:
        """Delegate a POST request."""
        return await self._http_client.post(route, data, options)

    async def put(
        self, route: str, data: Any = None, options: RequestOptions | None = None
    ) -> Any:
        """Delegate a PUT request."""
        return await self._http_client.put(route, data, options)

    async def patch(
        self, route: str, data: Any = None, options: RequestOptions | None = None
    ) -> Any:
        """Delegate a PATCH request."""
        return await self._http_client.patch(route, data, options)

    async def delete(self, route: str, options: RequestOptions | None = None) -> None:
        """Delegate a DELETE request."""
        await self._http_client.delete(route, options)
