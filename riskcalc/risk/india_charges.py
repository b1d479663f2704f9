"""Indian equity trading charges — pure math, no I/O.

Statutory charges, taxes and brokerage for NSE/BSE trades under the
2024 SEBI rules and typical discount-broker pricing.

    intraday (MIS): STT on the sell leg only, ₹20 brokerage per order,
                    15 % STCG provision, 5× leverage.
    delivery (CNC): STT on both legs, free brokerage,
                    20 % STCG provision, no leverage.
"""

import math
from dataclasses import dataclass

TRADE_MODES = ("intraday", "delivery")

GST_RATE = 0.18


@dataclass(frozen=True)
class ChargeRates:
    stt: float
    stt_on_buy: bool
    exchange_nse: float  # both legs
    sebi: float  # both legs
    stamp_duty: float  # buy leg only
    brokerage_per_order: float
    stcg_rate: float


RATES: dict[str, ChargeRates] = {
    "intraday": ChargeRates(
        stt=0.00025,
        stt_on_buy=False,
        exchange_nse=0.0000345,
        sebi=0.000001,
        stamp_duty=0.00003,
        brokerage_per_order=20,
        stcg_rate=0.15,
    ),
    "delivery": ChargeRates(
        stt=0.001,
        stt_on_buy=True,
        exchange_nse=0.0000345,
        sebi=0.000001,
        stamp_duty=0.00015,
        brokerage_per_order=0,
        stcg_rate=0.20,
    ),
}


@dataclass(frozen=True)
class IndiaCharges:
    """Charge breakdown for one round-trip trade, in rupees."""

    stt: float
    exchange_charges: float
    sebi_turnover: float
    stamp_duty: float
    brokerage: float
    gst: float
    total_charges: float
    breakeven: float  # per-share move needed to cover charges
    stcg_provision: float
    net_profit_after_tax: float


def _rates_for(trade_mode: str) -> ChargeRates:
    if trade_mode not in RATES:
        raise ValueError(
            f"trade_mode must be 'intraday' or 'delivery', got '{trade_mode}'"
        )
    return RATES[trade_mode]


def _paise(value: float) -> float:
    return round(value, 2) if math.isfinite(value) else 0.0


def calculate_india_charges(
    entry_price: float,
    exit_price: float,
    quantity: float,
    trade_mode: str,
) -> IndiaCharges:
    """Calculate all charges for buying at *entry_price* and selling at *exit_price*.

    Raises:
        ValueError: If *trade_mode* is not ``"intraday"`` or ``"delivery"``.
    """
    rates = _rates_for(trade_mode)

    buy_value = entry_price * quantity
    sell_value = exit_price * quantity
    turnover = buy_value + sell_value

    stt = (turnover if rates.stt_on_buy else sell_value) * rates.stt
    exchange_charges = turnover * rates.exchange_nse
    sebi_turnover = turnover * rates.sebi
    stamp_duty = buy_value * rates.stamp_duty

    # Intraday pays for both the buy and the sell order
    orders = 2 if trade_mode == "intraday" else 1
    brokerage = rates.brokerage_per_order * orders

    gst = (brokerage + exchange_charges + sebi_turnover) * GST_RATE

    total = stt + exchange_charges + sebi_turnover + stamp_duty + brokerage + gst
    breakeven = total / quantity if quantity > 0 else 0.0

    gross_profit = (exit_price - entry_price) * quantity
    after_charges = gross_profit - total
    stcg = after_charges * rates.stcg_rate if after_charges > 0 else 0.0

    return IndiaCharges(
        stt=_paise(stt),
        exchange_charges=_paise(exchange_charges),
        sebi_turnover=_paise(sebi_turnover),
        stamp_duty=_paise(stamp_duty),
        brokerage=_paise(brokerage),
        gst=_paise(gst),
        total_charges=_paise(total),
        breakeven=_paise(breakeven),
        stcg_provision=_paise(stcg),
        net_profit_after_tax=_paise(after_charges - stcg),
    )


def get_india_leverage(trade_mode: str) -> int:
    """Fixed leverage under SEBI peak-margin rules."""
    _rates_for(trade_mode)
    return 5 if trade_mode == "intraday" else 1


def calculate_max_margin_qty(balance: float, entry_price: float, trade_mode: str) -> int:
    """Largest whole quantity the available margin can buy."""
    leverage = get_india_leverage(trade_mode)
    if entry_price <= 0:
        return 0
    quantity = balance * leverage / entry_price
    if not math.isfinite(quantity):
        return 0
    return math.floor(quantity)
