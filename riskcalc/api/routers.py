"""Calculator API routers — /calculate, /inputs, /forex, /crypto, /exchanges,
/india, /locales and /feedback endpoints.

No business logic. Delegates to the engine, reference tables, price
client and feedback services injected at startup.
"""

import logging
from dataclasses import asdict
from typing import Optional

import httpx
from fastapi import APIRouter, Header, Request
from fastapi.responses import JSONResponse

from riskcalc.feedback.notifier import FeedbackDeliveryError, FeedbackNotifier
from riskcalc.feedback.rate_limiter import SubmissionRateLimiter
from riskcalc.feedback.submission import FeedbackError, validate_feedback
from riskcalc.formatters import (
    DEFAULT_LOCALE,
    SUPPORTED_LOCALES,
    SUPPORTED_LOCALE_CODES,
    format_currency,
    format_outputs,
    resolve_locale,
)
from riskcalc.models.calculator import CalculatorInputs, parse_number, snake_case
from riskcalc.models.crypto_coins import CRYPTO_COINS
from riskcalc.models.forex_pairs import get_pair, pair_options, pairs_by_category
from riskcalc.pricing.coingecko_client import PriceUnavailableError
from riskcalc.risk.india_charges import (
    calculate_india_charges,
    calculate_max_margin_qty,
    get_india_leverage,
)
from riskcalc.risk.input_state import reset_inputs, select_asset_class, sync_risk_fields
from riskcalc.risk.position_sizer import PositionSizeEngine
from riskcalc.risk.trading_costs import (
    DEFAULT_EXCHANGE,
    EXCHANGE_PRESETS,
    estimate_fees,
    fee_to_percent,
)

logger = logging.getLogger("riskcalc")
router = APIRouter()

# ── Shared state (set during app startup) ────────────────────────────────

_engine = PositionSizeEngine()
_price_client = None  # Set via configure_routers()
_notifier = FeedbackNotifier()
_rate_limiter = SubmissionRateLimiter()
_default_locale: Optional[str] = None


def configure_routers(
    engine: Optional[PositionSizeEngine] = None,
    price_client=None,
    notifier: Optional[FeedbackNotifier] = None,
    rate_limiter: Optional[SubmissionRateLimiter] = None,
    default_locale: Optional[str] = None,
) -> None:
    """Inject dependencies from the application startup.

    Args:
        engine: A ``PositionSizeEngine`` (e.g. with a custom pair table).
        price_client: A ``CoinGeckoClient`` instance (or duck-type for tests).
        notifier: Where feedback is delivered.
        rate_limiter: Feedback rate limiter.
        default_locale: Locale used when neither the body nor the
            ``Accept-Language`` header names one.
    """
    global _engine, _price_client, _notifier, _rate_limiter, _default_locale  # noqa: PLW0603
    if engine is not None:
        _engine = engine
    _price_client = price_client
    if notifier is not None:
        _notifier = notifier
    if rate_limiter is not None:
        _rate_limiter = rate_limiter
    _default_locale = default_locale


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _inputs_from(body: dict) -> CalculatorInputs:
    raw = body.get("inputs")
    return CalculatorInputs.from_dict(raw if isinstance(raw, dict) else {})


def _touched_from(body: dict) -> set[str]:
    raw = body.get("touched")
    if not isinstance(raw, (list, tuple)):
        return set()
    return {snake_case(name) for name in raw if isinstance(name, str)}


def _pick_locale(requested: Optional[str], accept_language: Optional[str]) -> str:
    if requested in SUPPORTED_LOCALE_CODES:
        return requested
    if accept_language:
        return resolve_locale(accept_language)
    return _default_locale or DEFAULT_LOCALE


# ── Calculator ───────────────────────────────────────────────────────────


@router.post("/calculate")
async def calculate(
    body: dict,
    accept_language: Optional[str] = Header(default=None),
):
    """Synchronise the risk fields, run the engine and format the result.

    Body: ``{"inputs": {...}, "touched": [...], "locale": "en-US"}``.
    An optional ``exchange`` (plus ``order_type`` and, for ``"Custom"``,
    ``fee_percent``) adds a round-trip fee estimate.
    """
    inputs = sync_risk_fields(_inputs_from(body))
    outputs = _engine.compute(inputs, _touched_from(body))
    locale = _pick_locale(body.get("locale"), accept_language)
    result = {
        "inputs": inputs.to_dict(),
        "outputs": outputs.to_dict(),
        "display": format_outputs(outputs, inputs.asset_class, locale),
        "locale": locale,
    }

    exchange = body.get("exchange")
    if exchange:
        try:
            fees = estimate_fees(
                outputs.position_size_value,
                str(exchange),
                order_type=str(body.get("order_type") or "taker"),
                custom_percent=str(body.get("fee_percent") or ""),
            )
        except ValueError as exc:
            return _error(400, str(exc))
        result["fees"] = asdict(fees)
        result["display"]["round_trip_fee"] = format_currency(fees.round_trip_fee, locale)
    return result


@router.post("/inputs/sync")
async def sync_inputs(body: dict):
    """Return the inputs with risk percent and fiat amount in agreement."""
    return {"inputs": sync_risk_fields(_inputs_from(body)).to_dict()}


@router.post("/inputs/reset")
async def reset(body: dict):
    """Return default inputs, keeping asset class and balance."""
    try:
        inputs = reset_inputs(_inputs_from(body))
    except ValueError as exc:
        return _error(400, str(exc))
    return {"inputs": sync_risk_fields(inputs).to_dict()}


@router.post("/inputs/asset-class")
async def change_asset_class(body: dict):
    """Switch asset class, applying that class's default leverage."""
    try:
        asset_class = body.get("asset_class") or body.get("assetClass") or ""
        inputs = select_asset_class(_inputs_from(body), str(asset_class))
    except ValueError as exc:
        return _error(400, str(exc))
    return {"inputs": inputs.to_dict()}


# ── Reference data ───────────────────────────────────────────────────────


@router.get("/forex/pairs")
async def get_forex_pairs():
    """Return pair dropdown options and the full table by category."""
    grouped = pairs_by_category(_engine.pairs)
    return {
        "pairs": pair_options(_engine.pairs),
        "by_category": {
            cat: [asdict(p) for p in pairs] for cat, pairs in grouped.items()
        },
    }


@router.get("/forex/pairs/{symbol}")
async def get_forex_pair(symbol: str):
    """Return one pair's pip and contract size."""
    pair = get_pair(symbol, _engine.pairs)
    if pair is None:
        return _error(404, f"Unknown forex pair: {symbol}")
    return asdict(pair)


@router.get("/crypto/coins")
async def get_crypto_coins():
    """Return the supported coins."""
    return {"coins": [asdict(c) for c in CRYPTO_COINS.values()]}


@router.get("/crypto/{slug}/price")
async def get_crypto_price(slug: str):
    """Return the live USD price of a coin."""
    if _price_client is None:
        return _error(503, "Price feed not configured")
    try:
        price = await _price_client.fetch_price(slug)
    except KeyError:
        return _error(404, f"Unknown coin: {slug}")
    except (PriceUnavailableError, httpx.HTTPError) as exc:
        logger.warning("Price lookup for '%s' failed: %s", slug, exc)
        return _error(502, "Price temporarily unavailable")
    return asdict(price)


@router.get("/exchanges")
async def get_exchanges():
    """Return exchange fee presets, fees as percentages."""
    return {
        "default": DEFAULT_EXCHANGE,
        "exchanges": [
            {
                "name": p.name,
                "maker_fee": p.maker_fee,
                "taker_fee": p.taker_fee,
                "maker_pct": fee_to_percent(p.maker_fee),
                "taker_pct": fee_to_percent(p.taker_fee),
            }
            for p in EXCHANGE_PRESETS
        ],
    }


@router.post("/india/charges")
async def india_charges(body: dict):
    """Return the NSE/BSE charge breakdown for a trade.

    Body: ``entry_price``, ``exit_price``, ``quantity``, ``trade_mode``
    and optionally ``balance`` for the margin-limited quantity.
    """
    trade_mode = str(body.get("trade_mode", "intraday"))
    entry = parse_number(body.get("entry_price"))
    try:
        charges = calculate_india_charges(
            entry_price=entry,
            exit_price=parse_number(body.get("exit_price")),
            quantity=parse_number(body.get("quantity")),
            trade_mode=trade_mode,
        )
    except ValueError as exc:
        return _error(400, str(exc))

    result = {
        "charges": asdict(charges),
        "leverage": get_india_leverage(trade_mode),
    }
    if body.get("balance") is not None:
        result["max_quantity"] = calculate_max_margin_qty(
            parse_number(body.get("balance")), entry, trade_mode,
        )
    return result


@router.get("/locales")
async def get_locales():
    """Return the supported display locales."""
    return {
        "locales": [
            {"code": loc.code, "name": loc.name, "currency": loc.currency}
            for loc in SUPPORTED_LOCALES
        ],
    }


# ── Feedback ─────────────────────────────────────────────────────────────


def _client_id(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


@router.post("/feedback")
async def post_feedback(body: dict, request: Request):
    """Accept a feedback message, rate-limited per client."""
    try:
        submission = validate_feedback(body)
    except FeedbackError as exc:
        return _error(400, str(exc))

    if submission.is_bot:
        logger.info("Bot detected via honeypot")
        return {"success": True, "message": "Feedback received!"}

    if not _rate_limiter.allow(_client_id(request)):
        return _error(429, "Too many submissions. Please try again later.")

    try:
        await _notifier.send(submission)
    except FeedbackDeliveryError:
        return _error(502, "Failed to send feedback")

    return {"success": True, "message": "Feedback received!"}
