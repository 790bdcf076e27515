"""
Google Fonts catalog proxy.

Forwards listing requests to the Google Fonts Developer API using the
server-side API key and keeps each listing in a process-wide TTL cache.

License: MIT
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional

import httpx

from fontembed.config import settings
from fontembed.models import FontSearchOptions

logger = logging.getLogger(__name__)


class CatalogUnavailableError(Exception):
    """The Google Fonts API answered with a non-success status."""

    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Google Fonts API returned status {status_code}")


@dataclass
class CacheEntry:
    value: Any
    fetched_at: float


class CatalogCache:
    """
    TTL cache with single-flight refresh.

    Concurrent callers that miss on the same key await one shared upstream
    call. Failed loads are not cached.
    """

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[Hashable, CacheEntry] = {}
        self._in_flight: Dict[Hashable, asyncio.Future] = {}

    def get_fresh(self, key: Hashable) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None or self._clock() - entry.fetched_at > self.ttl:
            return None
        return entry.value

    async def get_or_load(self, key: Hashable, loader: Callable[[], Awaitable[Any]]) -> Any:
        cached = self.get_fresh(key)
        if cached is not None:
            return cached

        pending = self._in_flight.get(key)
        if pending is not None:
            return await asyncio.shield(pending)

        future = asyncio.get_running_loop().create_future()
        self._in_flight[key] = future
        try:
            value = await loader()
        except Exception as e:
            future.set_exception(e)
            # Mark retrieved so a future nobody waited on does not log
            future.exception()
            raise
        else:
            self._entries[key] = CacheEntry(value=value, fetched_at=self._clock())
            future.set_result(value)
            return value
        finally:
            self._in_flight.pop(key, None)
            # Only reached undone when the loader was cancelled
            if not future.done():
                future.cancel()

    def clear(self) -> None:
        self._entries.clear()


async def fetch_catalog(client: httpx.AsyncClient, options: FontSearchOptions, api_key: str) -> Dict[str, Any]:
    """
    Fetch the font listing from the Google Fonts Developer API.

    Raises:
        CatalogUnavailableError: If the API answers with a non-success status
        httpx.HTTPError: On transport failures
    """
    params = {"key": api_key}
    for name in ("sort", "category", "subset"):
        value = getattr(options, name)
        if value:
            params[name] = value

    response = await client.get(
        settings.webfonts_api_url,
        params=params,
        headers={"Accept": "application/json"},
    )
    if not response.is_success:
        logger.error(f"Google Fonts API error: {response.status_code} {response.text[:200]}")
        raise CatalogUnavailableError(response.status_code, response.text)

    data = response.json()
    logger.info(f"Fetched {len(data.get('items', []))} fonts from Google Fonts API")
    return data


# Process-wide listing cache
catalog_cache = CatalogCache(ttl=settings.catalog_ttl)


async def get_catalog(
    client: httpx.AsyncClient,
    options: FontSearchOptions,
    api_key: str,
    cache: Optional[CatalogCache] = None
) -> Dict[str, Any]:
    """Return the font listing for the given filters, cached per filter set."""
    cache = cache or catalog_cache
    return await cache.get_or_load(
        options.cache_key(),
        lambda: fetch_catalog(client, options, api_key),
    )
