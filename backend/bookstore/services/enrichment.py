"""Cached access to external book metadata and currency conversion rates.

Both lookups share one CacheService. Keys:
    book details:     "<isbn>"
    conversion rate:  "<FROM>_<TO>"  (directional, EUR_USD != USD_EUR)

Failures are never cached. Concurrent requests for the same key are
collapsed into one upstream call by CacheService.get_or_fetch.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Protocol

from bookstore.services.cache import CacheService
from bookstore.services.errors import InvalidCurrency, UpstreamUnavailable

logger = logging.getLogger(__name__)


class BookMetadataSource(Protocol):
    async def lookup(self, isbn: str) -> dict[str, Any]: ...


class ConversionRateSource(Protocol):
    async def lookup(self, from_currency: str, to_currency: str) -> float | None: ...


def rate_cache_key(from_currency: str, to_currency: str) -> str:
    return f"{from_currency.upper()}_{to_currency.upper()}"


class EnrichmentGateway:
    """Fronts the book metadata and currency rate providers with a TTL cache."""

    def __init__(
        self,
        cache: CacheService,
        book_provider: BookMetadataSource,
        rate_provider: ConversionRateSource,
        timeout: float = 5.0,
        ttl: int | None = None,
    ):
        self._cache = cache
        self._book_provider = book_provider
        self._rate_provider = rate_provider
        self._timeout = timeout
        self._ttl = ttl

    async def fetch_book_details(self, isbn: str) -> dict[str, Any]:
        async def fetch() -> dict[str, Any]:
            return await self._call_upstream(
                f"book details for {isbn}",
                lambda: self._book_provider.lookup(isbn),
            )

        return await self._cache.get_or_fetch(isbn, fetch, self._ttl)

    async def fetch_conversion_rate(self, from_currency: str, to_currency: str) -> float:
        from_currency = from_currency.upper()
        to_currency = to_currency.upper()

        async def fetch() -> float:
            rate = await self._call_upstream(
                f"conversion rate {from_currency}->{to_currency}",
                lambda: self._rate_provider.lookup(from_currency, to_currency),
            )
            if rate is None or rate <= 0:
                raise InvalidCurrency(from_currency, to_currency)
            return rate

        key = rate_cache_key(from_currency, to_currency)
        return await self._cache.get_or_fetch(key, fetch, self._ttl)

    async def _call_upstream(self, what: str, call: Callable[[], Awaitable[Any]]) -> Any:
        try:
            return await asyncio.wait_for(call(), timeout=self._timeout)
        except (UpstreamUnavailable, InvalidCurrency):
            raise
        except asyncio.TimeoutError as e:
            logger.error(f"Upstream lookup of {what} timed out after {self._timeout}s")
            raise UpstreamUnavailable(f"Lookup of {what} timed out") from e
        except Exception as e:
            logger.error(f"Upstream lookup of {what} failed: {e}")
            raise UpstreamUnavailable(f"Lookup of {what} failed") from e
