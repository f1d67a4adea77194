"""HTTP clients for the book metadata and currency rate services."""

import logging
from typing import Any

import httpx

from bookstore.services.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)


class BookMetadataProvider:
    """Looks up book metadata by ISBN."""

    def __init__(self, client: httpx.AsyncClient, base_url: str):
        self._client = client
        self._base_url = base_url.rstrip("/")

    async def lookup(self, isbn: str) -> dict[str, Any]:
        """Return the provider's metadata document for ``isbn``.

        Raises UpstreamUnavailable on transport errors, non-2xx responses or
        a body that is not a JSON object.
        """
        url = f"{self._base_url}/books/{isbn}"
        try:
            resp = await self._client.get(url)
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to fetch book details for {isbn}: {e}")
            raise UpstreamUnavailable(f"Book metadata lookup failed for {isbn}") from e

        if not isinstance(data, dict):
            logger.error(f"Unexpected book details payload for {isbn}: {data!r}")
            raise UpstreamUnavailable(f"Book metadata lookup failed for {isbn}")
        return data


class CurrencyRateProvider:
    """Fetches directional conversion rates between two currencies."""

    def __init__(self, client: httpx.AsyncClient, base_url: str):
        self._client = client
        self._base_url = base_url.rstrip("/")

    async def lookup(self, from_currency: str, to_currency: str) -> float | None:
        """Return the rate to multiply a ``from_currency`` amount by.

        Returns None when the provider has no rate for the pair (404, or a
        response without a usable ``rate``). Raises UpstreamUnavailable for
        transport failures and other error responses.
        """
        url = f"{self._base_url}/convert"
        params = {"from": from_currency, "to": to_currency}
        try:
            resp = await self._client.get(url, params=params)
            if resp.status_code == 404:
                return None
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(
                f"Failed to fetch conversion rate {from_currency}->{to_currency}: {e}"
            )
            raise UpstreamUnavailable(
                f"Conversion rate lookup failed for {from_currency}->{to_currency}"
            ) from e

        rate = data.get("rate") if isinstance(data, dict) else None
        if rate is None:
            return None
        try:
            return float(rate)
        except (TypeError, ValueError):
            logger.warning(f"Non-numeric rate for {from_currency}->{to_currency}: {rate!r}")
            return None
