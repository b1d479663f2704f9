"""Forex pair metadata — pip sizes and contract sizes per symbol.

The table is read-only and is injected into the position-size engine
rather than looked up globally, so tests can supply their own pairs.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional

PAIR_CATEGORIES = ("major", "minor", "commodity", "exotic")


@dataclass(frozen=True)
class ForexPairSpec:
    """Static description of a tradeable forex (or spot metal) pair."""

    symbol: str
    display_name: str
    pip_size: float  # e.g. 0.0001 for EUR/USD, 0.01 for USD/JPY
    contract_size: float  # units per standard lot
    category: str  # "major", "minor", "exotic" or "commodity"
    pip_digits: int  # decimal places used to display pips


def _pair(symbol, display_name, pip_size, contract_size, category, pip_digits):
    return symbol, ForexPairSpec(
        symbol, display_name, pip_size, contract_size, category, pip_digits,
    )


FOREX_PAIRS: Mapping[str, ForexPairSpec] = MappingProxyType(dict([
    # Majors
    _pair("EURUSD", "EUR/USD", 0.0001, 100_000, "major", 4),
    _pair("GBPUSD", "GBP/USD", 0.0001, 100_000, "major", 4),
    _pair("USDJPY", "USD/JPY", 0.01, 100_000, "major", 2),
    _pair("USDCHF", "USD/CHF", 0.0001, 100_000, "major", 4),
    _pair("AUDUSD", "AUD/USD", 0.0001, 100_000, "major", 4),
    _pair("USDCAD", "USD/CAD", 0.0001, 100_000, "major", 4),
    _pair("NZDUSD", "NZD/USD", 0.0001, 100_000, "major", 4),
    # Crosses
    _pair("EURGBP", "EUR/GBP", 0.0001, 100_000, "minor", 4),
    _pair("EURJPY", "EUR/JPY", 0.01, 100_000, "minor", 2),
    _pair("GBPJPY", "GBP/JPY", 0.01, 100_000, "minor", 2),
    _pair("EURCHF", "EUR/CHF", 0.0001, 100_000, "minor", 4),
    _pair("AUDJPY", "AUD/JPY", 0.01, 100_000, "minor", 2),
    _pair("CADJPY", "CAD/JPY", 0.01, 100_000, "minor", 2),
    # Metals quoted on forex platforms
    _pair("XAUUSD", "XAU/USD (Gold)", 0.01, 100, "commodity", 2),
    _pair("XAGUSD", "XAG/USD (Silver)", 0.001, 5_000, "commodity", 3),
]))


def normalize_symbol(symbol: str) -> str:
    """``"eur/usd"``, ``"EUR_USD"`` and ``"EURUSD"`` all map to ``"EURUSD"``."""
    return symbol.replace("/", "").replace("_", "").strip().upper()


def get_pair(
    symbol: Optional[str],
    pairs: Mapping[str, ForexPairSpec] = FOREX_PAIRS,
) -> Optional[ForexPairSpec]:
    """Return the pair spec for *symbol*, or ``None`` if it is not listed."""
    if not symbol:
        return None
    return pairs.get(normalize_symbol(symbol))


def pairs_by_category(
    pairs: Mapping[str, ForexPairSpec] = FOREX_PAIRS,
) -> dict[str, list[ForexPairSpec]]:
    """Group pairs by category; every category key is present, even if empty."""
    grouped: dict[str, list[ForexPairSpec]] = {c: [] for c in PAIR_CATEGORIES}
    for pair in pairs.values():
        grouped.setdefault(pair.category, []).append(pair)
    return grouped


def pair_options(
    pairs: Mapping[str, ForexPairSpec] = FOREX_PAIRS,
) -> list[dict]:
    """Dropdown entries: ``{"value", "label", "category"}`` per pair."""
    return [
        {"value": p.symbol, "label": p.display_name, "category": p.category}
        for p in pairs.values()
    ]


def calculate_pip_value(pair: ForexPairSpec, lots: float) -> float:
    """Monetary value of one pip for *lots* standard lots.

    Exact for pairs quoted in the account currency (e.g. EUR/USD with a
    USD account).  Crosses would need a conversion rate, which is not
    applied here.
    """
    return pair.pip_size * pair.contract_size * lots
