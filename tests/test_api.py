"""Tests for the calculator API endpoints."""

from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi.testclient import TestClient

from riskcalc.api.routers import configure_routers
from riskcalc.feedback.notifier import FeedbackDeliveryError, FeedbackNotifier
from riskcalc.feedback.rate_limiter import SubmissionRateLimiter
from riskcalc.main import app
from riskcalc.models.forex_pairs import ForexPairSpec
from riskcalc.pricing.coingecko_client import CoinPrice, PriceUnavailableError
from riskcalc.risk.position_sizer import PositionSizeEngine

client = TestClient(app)


@pytest.fixture(autouse=True)
def _fresh_routers():
    """Reset injected services so tests don't share rate-limit state."""
    configure_routers(
        engine=PositionSizeEngine(),
        notifier=FeedbackNotifier(),
        rate_limiter=SubmissionRateLimiter(),
    )


# ── Helpers ──────────────────────────────────────────────────────────────


CRYPTO_LONG = {
    "assetClass": "crypto",
    "balance": "10000",
    "riskPercent": "1",
    "entryPrice": "100",
    "stopLossPrice": "95",
    "targetPrice": "110",
}


def _make_price_client(price=None, error=None):
    price_client = AsyncMock()
    if error is not None:
        price_client.fetch_price.side_effect = error
    else:
        price_client.fetch_price.return_value = price
    return price_client


# ── Calculator ───────────────────────────────────────────────────────────


class TestCalculateEndpoint:
    def test_crypto_long(self):
        resp = client.post("/calculate", json={"inputs": CRYPTO_LONG, "locale": "en-US"})
        assert resp.status_code == 200
        data = resp.json()
        out = data["outputs"]
        assert out["position_size_units"] == pytest.approx(20.0)
        assert out["margin_required"] == pytest.approx(200.0)
        assert out["rrr"] == pytest.approx(2.0)
        assert out["trade_direction"] == "LONG"
        assert out["is_complete"] is True
        assert data["inputs"]["risk_fiat"] == "100.00"
        assert data["display"]["position_value"] == "$2,000.00"
        assert data["display"]["rrr"] == "1:2"
        assert data["locale"] == "en-US"

    def test_locale_from_accept_language(self):
        resp = client.post(
            "/calculate",
            json={"inputs": CRYPTO_LONG},
            headers={"Accept-Language": "de-DE,de;q=0.9"},
        )
        data = resp.json()
        assert data["locale"] == "de-DE"
        assert data["display"]["risk_amount"] == "100,00 €"

    def test_default_locale(self):
        configure_routers(default_locale="ja-JP")
        resp = client.post("/calculate", json={"inputs": CRYPTO_LONG})
        assert resp.json()["locale"] == "ja-JP"

    def test_touched_fields_report_errors(self):
        resp = client.post(
            "/calculate",
            json={"inputs": {"balance": ""}, "touched": ["balance", "entryPrice"]},
        )
        errors = resp.json()["outputs"]["field_errors"]
        assert errors == {
            "balance": "Account balance is required",
            "entry_price": "Entry price is required",
        }

    @pytest.mark.parametrize("touched", [5, "balance", {"balance": True}, None])
    def test_touched_must_be_a_list(self, touched):
        resp = client.post("/calculate", json={"inputs": {"balance": ""}, "touched": touched})
        assert resp.status_code == 200
        assert resp.json()["outputs"]["field_errors"] == {}

    @pytest.mark.parametrize("asset_class", ["stocks", "futures", "forex", "crypto"])
    def test_huge_inputs_do_not_fail(self, asset_class):
        inputs = {
            "assetClass": asset_class, "balance": "1e308", "riskPercent": "200",
            "entryPrice": "100", "stopLossPrice": "99",
        }
        resp = client.post("/calculate", json={"inputs": inputs})
        assert resp.status_code == 200
        assert resp.json()["outputs"]["risk_amount"] == 0

    def test_fee_estimate(self):
        resp = client.post("/calculate", json={"inputs": CRYPTO_LONG, "exchange": "Binance"})
        data = resp.json()
        # $2,000 position, 0.045% taker on entry and exit
        assert data["fees"]["round_trip_fee"] == pytest.approx(1.8)
        assert data["fees"]["fee_percent"] == "0.045"
        assert data["display"]["round_trip_fee"] == "$1.80"

    def test_fee_estimate_custom_maker(self):
        resp = client.post("/calculate", json={
            "inputs": CRYPTO_LONG, "exchange": "Custom",
            "order_type": "maker", "fee_percent": "0.1",
        })
        assert resp.json()["fees"]["round_trip_fee"] == pytest.approx(4.0)

    def test_no_exchange_no_fees(self):
        data = client.post("/calculate", json={"inputs": CRYPTO_LONG}).json()
        assert "fees" not in data
        assert "round_trip_fee" not in data["display"]

    @pytest.mark.parametrize(
        "extra", [{"exchange": "Kraken"}, {"exchange": "Bybit", "order_type": "stop"}],
    )
    def test_fee_estimate_rejects_bad_values(self, extra):
        resp = client.post("/calculate", json={"inputs": CRYPTO_LONG, **extra})
        assert resp.status_code == 400

    def test_empty_body(self):
        resp = client.post("/calculate", json={})
        assert resp.status_code == 200
        out = resp.json()["outputs"]
        assert out["position_size_units"] == 0
        assert out["is_complete"] is False

    def test_fiat_mode(self):
        inputs = dict(CRYPTO_LONG, riskMode="fiat", riskFiat="250")
        resp = client.post("/calculate", json={"inputs": inputs})
        data = resp.json()
        assert data["inputs"]["risk_percent"] == "2.5"
        assert data["outputs"]["risk_amount"] == pytest.approx(250.0)

    def test_injected_pair_table(self):
        pairs = {"EURUSD": ForexPairSpec("EURUSD", "EUR/USD", 0.0001, 10_000, "major", 4)}
        configure_routers(engine=PositionSizeEngine(pairs=pairs))
        inputs = {
            "assetClass": "forex", "balance": "10000", "entryPrice": "1.1",
            "stopLossPrice": "1.098", "forexPair": "EURUSD",
        }
        resp = client.post("/calculate", json={"inputs": inputs})
        # 100 / (0.002 × 10,000) = 5 lots
        assert resp.json()["outputs"]["position_size_units"] == pytest.approx(5.0)


class TestInputsEndpoints:
    def test_sync(self):
        resp = client.post("/inputs/sync", json={"inputs": {"balance": "2000", "riskPercent": "2"}})
        assert resp.json()["inputs"]["risk_fiat"] == "40.00"

    def test_reset_keeps_class_and_balance(self):
        inputs = {"assetClass": "forex", "balance": "5000", "entryPrice": "1.1"}
        resp = client.post("/inputs/reset", json={"inputs": inputs})
        data = resp.json()["inputs"]
        assert data["asset_class"] == "forex"
        assert data["balance"] == "5000"
        assert data["entry_price"] == ""
        assert data["leverage"] == "50"
        assert data["risk_fiat"] == "50.00"

    def test_reset_unknown_class(self):
        resp = client.post("/inputs/reset", json={"inputs": {"assetClass": "bonds"}})
        assert resp.status_code == 400

    def test_asset_class(self):
        resp = client.post("/inputs/asset-class", json={"inputs": {}, "asset_class": "forex"})
        assert resp.status_code == 200
        assert resp.json()["inputs"]["leverage"] == "50"

    def test_asset_class_camel_case(self):
        resp = client.post("/inputs/asset-class", json={"assetClass": "forex"})
        assert resp.status_code == 200
        assert resp.json()["inputs"]["asset_class"] == "forex"

    def test_asset_class_invalid(self):
        resp = client.post("/inputs/asset-class", json={"asset_class": "bonds"})
        assert resp.status_code == 400
        assert "asset_class" in resp.json()["error"]


# ── Reference data ───────────────────────────────────────────────────────


class TestReferenceEndpoints:
    def test_health(self):
        resp = client.get("/health")
        assert resp.json() == {"status": "ok"}

    def test_forex_pairs(self):
        data = client.get("/forex/pairs").json()
        assert len(data["pairs"]) == 15
        assert len(data["by_category"]["major"]) == 7

    def test_forex_pair(self):
        data = client.get("/forex/pairs/usdjpy").json()
        assert data["symbol"] == "USDJPY"
        assert data["pip_size"] == 0.01

    def test_forex_pair_unknown(self):
        resp = client.get("/forex/pairs/ABCDEF")
        assert resp.status_code == 404

    def test_crypto_coins(self):
        coins = client.get("/crypto/coins").json()["coins"]
        assert len(coins) == 10
        assert {"slug": "xrp", "coingecko_id": "ripple"}.items() <= next(
            c for c in coins if c["slug"] == "xrp"
        ).items()

    def test_exchanges(self):
        data = client.get("/exchanges").json()
        assert data["default"] == "Binance"
        binance = data["exchanges"][0]
        assert binance["maker_pct"] == "0.020"
        assert binance["taker_pct"] == "0.045"

    def test_locales(self):
        locales = client.get("/locales").json()["locales"]
        assert len(locales) == 9
        assert {"code": "en-IN", "name": "English (India)", "currency": "INR"} in locales


class TestCryptoPriceEndpoint:
    def test_not_configured(self):
        resp = client.get("/crypto/bitcoin/price")
        assert resp.status_code == 503

    def test_price(self):
        price = CoinPrice(slug="bitcoin", price=65000.0, change_24h=1.5, last_updated=1760000000)
        configure_routers(price_client=_make_price_client(price=price))
        resp = client.get("/crypto/bitcoin/price")
        assert resp.status_code == 200
        assert resp.json()["price"] == 65000.0

    def test_unknown_coin(self):
        configure_routers(price_client=_make_price_client(error=KeyError("nope")))
        assert client.get("/crypto/nope/price").status_code == 404

    def test_unavailable(self):
        configure_routers(price_client=_make_price_client(error=PriceUnavailableError("down")))
        assert client.get("/crypto/bitcoin/price").status_code == 502

    def test_upstream_client_error(self):
        request = httpx.Request("GET", "https://api.coingecko.com/api/v3/simple/price")
        error = httpx.HTTPStatusError(
            "401", request=request, response=httpx.Response(401, request=request),
        )
        configure_routers(price_client=_make_price_client(error=error))
        assert client.get("/crypto/bitcoin/price").status_code == 502


class TestIndiaChargesEndpoint:
    def test_charges(self):
        resp = client.post("/india/charges", json={
            "entry_price": 100, "exit_price": 110, "quantity": 100,
            "trade_mode": "intraday", "balance": 10000,
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["charges"]["total_charges"] == pytest.approx(51.13)
        assert data["leverage"] == 5
        assert data["max_quantity"] == 500

    def test_no_balance_no_max_quantity(self):
        resp = client.post("/india/charges", json={
            "entry_price": 100, "exit_price": 90, "quantity": 10, "trade_mode": "delivery",
        })
        assert "max_quantity" not in resp.json()

    def test_huge_balance_does_not_fail(self):
        resp = client.post("/india/charges", json={
            "entry_price": "1e-300", "exit_price": "1", "quantity": "1",
            "trade_mode": "intraday", "balance": "1e308",
        })
        assert resp.status_code == 200
        assert resp.json()["max_quantity"] == 0

    def test_bad_mode(self):
        resp = client.post("/india/charges", json={"trade_mode": "swing"})
        assert resp.status_code == 400


# ── Feedback ─────────────────────────────────────────────────────────────


class TestFeedbackEndpoint:
    def test_accepted(self):
        resp = client.post("/feedback", json={"message": "Nice tool"})
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "message": "Feedback received!"}

    def test_invalid(self):
        resp = client.post("/feedback", json={"message": ""})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Message is required"

    def test_honeypot_looks_successful(self):
        notifier = AsyncMock()
        configure_routers(notifier=notifier)
        resp = client.post("/feedback", json={"message": "buy now", "website": "x"})
        assert resp.status_code == 200
        notifier.send.assert_not_called()

    def test_rate_limited(self):
        configure_routers(rate_limiter=SubmissionRateLimiter(max_submissions=2))
        headers = {"X-Forwarded-For": "9.9.9.9, 10.0.0.1"}
        for _ in range(2):
            assert client.post("/feedback", json={"message": "hi"}, headers=headers).status_code == 200
        resp = client.post("/feedback", json={"message": "hi"}, headers=headers)
        assert resp.status_code == 429
        other = client.post("/feedback", json={"message": "hi"}, headers={"X-Real-IP": "8.8.8.8"})
        assert other.status_code == 200

    def test_delivery_failure(self):
        notifier = AsyncMock()
        notifier.send.side_effect = FeedbackDeliveryError("webhook down")
        configure_routers(notifier=notifier)
        resp = client.post("/feedback", json={"message": "hi"})
        assert resp.status_code == 502
