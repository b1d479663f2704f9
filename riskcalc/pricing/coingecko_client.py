"""CoinGecko REST API async client.

Fetches spot USD prices for the supported coins so the calculator can
prefill the entry price.  Responses are cached per coin.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import httpx

from riskcalc.config import Config
from riskcalc.models.crypto_coins import get_coin

logger = logging.getLogger("riskcalc")

# Retry settings
_MAX_RETRIES = 3
_RETRY_BASE_DELAY = 1.0  # seconds; doubles each attempt
_RETRYABLE_STATUS_CODES = {502, 503, 504, 429}


class PriceUnavailableError(RuntimeError):
    """Raised when a price cannot be obtained after all retries."""


@dataclass(frozen=True)
class CoinPrice:
    """Latest USD quote for a coin."""

    slug: str
    price: float
    change_24h: Optional[float]
    last_updated: Optional[int]  # unix seconds, as reported by CoinGecko


class CoinGeckoClient:
    """Async client for the CoinGecko ``/simple/price`` endpoint."""

    def __init__(
        self,
        config: Config,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._base_url = config.coingecko_base_url
        self._headers = {"Accept": "application/json"}
        if config.coingecko_api_key:
            self._headers[config.coingecko_key_header] = config.coingecko_api_key
        self._cache_seconds = config.price_cache_seconds
        self._clock = clock
        self._cache: dict[str, tuple[float, CoinPrice]] = {}

    # ── Retry helper ─────────────────────────────────────────────────────

    async def _request_with_retry(self, url: str, **kwargs) -> httpx.Response:
        """GET *url* with exponential-backoff retry.

        Retries on transient server errors (502, 503, 504), rate-limits
        (429) and transport errors.  Other HTTP errors are raised at once.
        """
        last_exc: Optional[Exception] = None

        for attempt in range(_MAX_RETRIES):
            try:
                async with httpx.AsyncClient() as client:
                    resp = await client.get(
                        url,
                        headers=self._headers,
                        timeout=15.0,
                        **kwargs,
                    )

                if resp.status_code in _RETRYABLE_STATUS_CODES:
                    delay = _RETRY_BASE_DELAY * (2 ** attempt)
                    logger.warning(
                        "CoinGecko GET %s returned %d — retry %d/%d in %.1fs",
                        url, resp.status_code, attempt + 1, _MAX_RETRIES, delay,
                    )
                    last_exc = httpx.HTTPStatusError(
                        f"Server error '{resp.status_code}'",
                        request=resp.request,
                        response=resp,
                    )
                    await asyncio.sleep(delay)
                    continue

                resp.raise_for_status()
                return resp

            except httpx.TransportError as exc:
                delay = _RETRY_BASE_DELAY * (2 ** attempt)
                logger.warning(
                    "CoinGecko GET %s transport error (%s) — retry %d/%d in %.1fs",
                    url, exc, attempt + 1, _MAX_RETRIES, delay,
                )
                last_exc = exc
                await asyncio.sleep(delay)

        raise PriceUnavailableError(f"CoinGecko request failed: {last_exc}") from last_exc

    # ── Prices ───────────────────────────────────────────────────────────

    async def fetch_price(self, slug: str) -> CoinPrice:
        """Return the USD price of the coin identified by *slug*.

        Raises:
            KeyError: If *slug* is not a supported coin.
            PriceUnavailableError: If CoinGecko cannot be reached or has
                no quote for the coin.
        """
        coin = get_coin(slug)
        if coin is None:
            raise KeyError(f"Unknown coin '{slug}'")

        cached = self._cache.get(coin.coingecko_id)
        now = self._clock()
        if cached and now - cached[0] < self._cache_seconds:
            return cached[1]

        params = {
            "ids": coin.coingecko_id,
            "vs_currencies": "usd",
            "include_24hr_change": "true",
            "include_last_updated_at": "true",
        }
        resp = await self._request_with_retry(f"{self._base_url}/simple/price", params=params)

        data = resp.json().get(coin.coingecko_id)
        if not data or "usd" not in data:
            raise PriceUnavailableError(f"No USD price returned for '{coin.slug}'")

        change = data.get("usd_24h_change")
        updated = data.get("last_updated_at")
        price = CoinPrice(
            slug=coin.slug,
            price=float(data["usd"]),
            change_24h=float(change) if change is not None else None,
            last_updated=int(updated) if updated is not None else None,
        )
        self._cache[coin.coingecko_id] = (now, price)
        logger.debug("Fetched %s price: %s", coin.symbol, price.price)
        return price

    def clear_cache(self) -> None:
        self._cache.clear()
