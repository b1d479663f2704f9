"""Exchange fee presets for crypto and futures trading.

Base (VIP-0) maker/taker rates.  Fees are stored as decimals:
``0.00045`` means 0.045 %.
"""

from dataclasses import dataclass
from typing import Optional

from riskcalc.models.calculator import parse_number

ORDER_TYPES = ("maker", "taker")


@dataclass(frozen=True)
class ExchangePreset:
    """Maker and taker fee of one exchange."""

    name: str
    maker_fee: float
    taker_fee: float

    def fee_for(self, order_type: str) -> float:
        """Return the fee for ``"maker"`` or ``"taker"`` orders."""
        if order_type == "maker":
            return self.maker_fee
        if order_type == "taker":
            return self.taker_fee
        raise ValueError(
            f"order_type must be one of {', '.join(ORDER_TYPES)}, got '{order_type}'"
        )


EXCHANGE_PRESETS: tuple[ExchangePreset, ...] = (
    ExchangePreset("Binance", 0.00020, 0.00045),
    ExchangePreset("Bybit", 0.00020, 0.00055),
    ExchangePreset("OKX", 0.00020, 0.00050),
    ExchangePreset("Hyperliquid", 0.00015, 0.00045),
    ExchangePreset("Gate.io", 0.00015, 0.00050),
    ExchangePreset("MEXC", 0.00000, 0.00050),
)

DEFAULT_EXCHANGE = "Binance"


def get_preset(name: str) -> Optional[ExchangePreset]:
    """Look up a preset by name; ``None`` for unknown names and ``"Custom"``."""
    for preset in EXCHANGE_PRESETS:
        if preset.name == name:
            return preset
    return None


def fee_to_percent(fee: float) -> str:
    """``0.00045`` → ``"0.045"``."""
    return f"{fee * 100:.3f}"


def percent_to_fee(percent: str) -> float:
    """``"0.045"`` → ``0.00045``; unparsable input counts as 0."""
    return parse_number(percent) / 100


def round_trip_fee(position_value: float, fee: float) -> float:
    """Fee paid to open and close a position of *position_value*."""
    if position_value <= 0 or fee <= 0:
        return 0.0
    return position_value * fee * 2


CUSTOM_EXCHANGE = "Custom"


@dataclass(frozen=True)
class FeeEstimate:
    """Round-trip trading fee for one position."""

    exchange: str
    order_type: str
    fee_rate: float
    fee_percent: str
    round_trip_fee: float


def estimate_fees(
    position_value: float,
    exchange: str,
    order_type: str = "taker",
    custom_percent: str = "",
) -> FeeEstimate:
    """Estimate the fee to open and close *position_value* on *exchange*.

    ``"Custom"`` takes its rate from *custom_percent* (e.g. ``"0.04"``).

    Raises:
        ValueError: For an unknown exchange or order type.
    """
    preset = get_preset(exchange)
    if preset is not None:
        fee = preset.fee_for(order_type)
    elif exchange == CUSTOM_EXCHANGE:
        if order_type not in ORDER_TYPES:
            raise ValueError(
                f"order_type must be one of {', '.join(ORDER_TYPES)}, got '{order_type}'"
            )
        fee = max(percent_to_fee(custom_percent), 0.0)
    else:
        raise ValueError(f"Unknown exchange '{exchange}'")

    return FeeEstimate(
        exchange=exchange,
        order_type=order_type,
        fee_rate=fee,
        fee_percent=fee_to_percent(fee),
        round_trip_fee=round_trip_fee(position_value, fee),
    )
