"""Tests for the CoinGecko price client — response parsing, caching and retry."""

import asyncio

import httpx
import pytest

from riskcalc.config import Config
from riskcalc.pricing.coingecko_client import CoinGeckoClient, PriceUnavailableError


MOCK_PRICE_RESPONSE = {
    "ripple": {
        "usd": 0.5234,
        "usd_24h_change": -1.25,
        "last_updated_at": 1760000000,
    }
}


def _config(**overrides) -> Config:
    values = dict(
        log_level="INFO",
        host="127.0.0.1",
        port=8080,
        default_locale="en-US",
        coingecko_plan="demo",
        coingecko_api_key="demo-key",
        price_cache_seconds=60.0,
        feedback_webhook_url="",
        feedback_max_per_hour=3,
    )
    values.update(overrides)
    return Config(**values)


class _Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def no_sleep(monkeypatch):
    async def _no_sleep(delay):
        return None

    monkeypatch.setattr(asyncio, "sleep", _no_sleep)


# ── Parsing ──────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_fetch_price(monkeypatch):
    seen = {}

    async def _mock_get(self, url, *, headers=None, params=None, timeout=None):
        seen.update(url=url, headers=headers, params=params)
        return httpx.Response(200, json=MOCK_PRICE_RESPONSE, request=httpx.Request("GET", url))

    monkeypatch.setattr(httpx.AsyncClient, "get", _mock_get)

    client = CoinGeckoClient(_config())
    price = await client.fetch_price("xrp")

    assert price.slug == "xrp"
    assert price.price == pytest.approx(0.5234)
    assert price.change_24h == pytest.approx(-1.25)
    assert price.last_updated == 1760000000
    assert seen["url"] == "https://api.coingecko.com/api/v3/simple/price"
    assert seen["params"]["ids"] == "ripple"
    assert seen["params"]["vs_currencies"] == "usd"
    assert seen["headers"]["x-cg-demo-api-key"] == "demo-key"


@pytest.mark.asyncio
async def test_pro_plan_header(monkeypatch):
    seen = {}

    async def _mock_get(self, url, *, headers=None, params=None, timeout=None):
        seen.update(url=url, headers=headers)
        return httpx.Response(200, json=MOCK_PRICE_RESPONSE, request=httpx.Request("GET", url))

    monkeypatch.setattr(httpx.AsyncClient, "get", _mock_get)

    client = CoinGeckoClient(_config(coingecko_plan="pro", coingecko_api_key="pro-key"))
    await client.fetch_price("xrp")

    assert seen["url"].startswith("https://pro-api.coingecko.com/")
    assert seen["headers"]["x-cg-pro-api-key"] == "pro-key"


@pytest.mark.asyncio
async def test_no_key_header_without_api_key(monkeypatch):
    seen = {}

    async def _mock_get(self, url, *, headers=None, params=None, timeout=None):
        seen.update(headers=headers)
        return httpx.Response(200, json=MOCK_PRICE_RESPONSE, request=httpx.Request("GET", url))

    monkeypatch.setattr(httpx.AsyncClient, "get", _mock_get)

    await CoinGeckoClient(_config(coingecko_api_key="")).fetch_price("xrp")
    assert "x-cg-demo-api-key" not in seen["headers"]


@pytest.mark.asyncio
async def test_unknown_coin_raises_key_error():
    client = CoinGeckoClient(_config())
    with pytest.raises(KeyError):
        await client.fetch_price("notacoin")


@pytest.mark.asyncio
async def test_missing_quote(monkeypatch):
    async def _mock_get(self, url, *, headers=None, params=None, timeout=None):
        return httpx.Response(200, json={}, request=httpx.Request("GET", url))

    monkeypatch.setattr(httpx.AsyncClient, "get", _mock_get)

    with pytest.raises(PriceUnavailableError, match="xrp"):
        await CoinGeckoClient(_config()).fetch_price("xrp")


# ── Caching ──────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_cache_within_window(monkeypatch):
    calls = []

    async def _mock_get(self, url, *, headers=None, params=None, timeout=None):
        calls.append(url)
        return httpx.Response(200, json=MOCK_PRICE_RESPONSE, request=httpx.Request("GET", url))

    monkeypatch.setattr(httpx.AsyncClient, "get", _mock_get)

    clock = _Clock()
    client = CoinGeckoClient(_config(price_cache_seconds=60.0), clock=clock)

    first = await client.fetch_price("xrp")
    clock.now += 30
    second = await client.fetch_price("XRP")
    assert second is first
    assert len(calls) == 1

    clock.now += 31
    await client.fetch_price("xrp")
    assert len(calls) == 2

    client.clear_cache()
    await client.fetch_price("xrp")
    assert len(calls) == 3


# ── Retry ────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_retries_transient_status(monkeypatch, no_sleep):
    statuses = [503, 429, 200]

    async def _mock_get(self, url, *, headers=None, params=None, timeout=None):
        status = statuses.pop(0)
        body = MOCK_PRICE_RESPONSE if status == 200 else {}
        return httpx.Response(status, json=body, request=httpx.Request("GET", url))

    monkeypatch.setattr(httpx.AsyncClient, "get", _mock_get)

    price = await CoinGeckoClient(_config()).fetch_price("xrp")
    assert price.price == pytest.approx(0.5234)
    assert statuses == []


@pytest.mark.asyncio
async def test_gives_up_after_transport_errors(monkeypatch, no_sleep):
    attempts = []

    async def _mock_get(self, url, *, headers=None, params=None, timeout=None):
        attempts.append(url)
        raise httpx.ConnectError("connection refused", request=httpx.Request("GET", url))

    monkeypatch.setattr(httpx.AsyncClient, "get", _mock_get)

    with pytest.raises(PriceUnavailableError):
        await CoinGeckoClient(_config()).fetch_price("xrp")
    assert len(attempts) == 3


@pytest.mark.asyncio
async def test_client_error_not_retried(monkeypatch, no_sleep):
    attempts = []

    async def _mock_get(self, url, *, headers=None, params=None, timeout=None):
        attempts.append(url)
        return httpx.Response(401, json={}, request=httpx.Request("GET", url))

    monkeypatch.setattr(httpx.AsyncClient, "get", _mock_get)

    with pytest.raises(httpx.HTTPStatusError):
        await CoinGeckoClient(_config()).fetch_price("xrp")
    assert len(attempts) == 1
