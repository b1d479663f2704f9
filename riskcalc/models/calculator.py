"""Calculator data models — raw inputs and computed outputs.

Inputs mirror free-text form fields, so every numeric field is a string
and is parsed permissively by the engine.
"""

import math
import re
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Optional

ASSET_CLASSES = ("crypto", "stocks", "forex", "futures")

LONG = "LONG"
SHORT = "SHORT"

# Leading decimal literal, as accepted by a browser's parseFloat()
_NUMBER_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_number(value: Any) -> float:
    """Parse *value* permissively into a finite float.

    The longest leading decimal literal wins (``"12abc"`` → 12.0).
    Empty, unparsable, NaN and infinite values all yield ``0.0``.
    """
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _NUMBER_PREFIX.match(str(value))
        if match is None:
            return 0.0
        try:
            number = float(match.group(1))
        except ValueError:
            return 0.0
    return number if math.isfinite(number) else 0.0


def snake_case(key: str) -> str:
    """``"entryPrice"`` → ``"entry_price"``; snake_case keys pass through."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


@dataclass(frozen=True)
class CalculatorInputs:
    """One snapshot of the calculator form."""

    asset_class: str = "crypto"  # "crypto", "stocks", "forex" or "futures"
    balance: str = ""
    risk_mode: str = "percent"  # "percent" or "fiat"
    risk_percent: str = "1"
    risk_fiat: str = ""
    entry_price: str = ""
    stop_loss_price: str = ""
    stop_loss_pips: str = ""
    stop_loss_mode: str = "price"  # "price" or "pips" (forex only)
    target_price: str = ""
    leverage: str = "10"
    lot_size: str = "50"  # futures contract size per lot
    forex_pair: str = "EURUSD"

    @property
    def pips_mode(self) -> bool:
        """True when the stop-loss is expressed in pips (forex only)."""
        return self.asset_class == "forex" and self.stop_loss_mode == "pips"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CalculatorInputs":
        """Build inputs from a JSON payload.

        Accepts camelCase or snake_case keys and numbers or strings as
        values.  Unknown keys are ignored; ``None`` keeps the default.
        """
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, str] = {}
        for key, value in data.items():
            name = snake_case(key)
            if name not in known or value is None:
                continue
            kwargs[name] = value if isinstance(value, str) else str(value)
        return cls(**kwargs)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class CalculatorOutputs:
    """Everything derived from one ``CalculatorInputs`` snapshot."""

    position_size_units: float = 0.0  # shares, lots or units
    position_size_value: float = 0.0
    margin_required: float = 0.0
    risk_amount: float = 0.0
    potential_profit: float = 0.0
    rrr: float = 0.0
    trade_direction: Optional[str] = None  # "LONG", "SHORT" or None
    validation_error: Optional[str] = None
    insufficient_margin: bool = False
    futures_min_risk: Optional[float] = None
    forex_min_risk: Optional[float] = None
    pip_value: Optional[float] = None
    field_errors: dict[str, str] = field(default_factory=dict)
    is_complete: bool = False

    def to_dict(self) -> dict:
        return asdict(self)
