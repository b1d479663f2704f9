"""Position sizing — pure math, no I/O.

Calculates how much to trade so that a stop-loss hit costs exactly the
configured risk amount, then derives value, margin, profit and R:R.

Formula::

    risk_amount  = balance × (risk_pct / 100)
    price_diff   = |entry − stop_loss|        (or pips × pip_size)
    units        = risk_amount / price_diff

The engine is total: it never raises.  Bad or partial input produces a
zeroed result plus a ``validation_error`` / ``field_errors`` entry, so a
form that recomputes on every keystroke can always render.
"""

import math
from collections.abc import Iterable, Mapping
from typing import Optional

from riskcalc.models.calculator import (
    LONG,
    SHORT,
    CalculatorInputs,
    CalculatorOutputs,
    parse_number,
)
from riskcalc.models.forex_pairs import (
    FOREX_PAIRS,
    ForexPairSpec,
    calculate_pip_value,
    get_pair,
)
from riskcalc.risk.validation import STOP_EQUALS_ENTRY, field_errors, is_complete

STANDARD_LOT = 100_000
DEFAULT_PIP_SIZE = 0.0001
MIN_FOREX_LOT = 0.01

_PRICE_DIFF_DECIMALS = 9
_LOT_EPSILON = 1e-9


def infer_direction(
    entry: float,
    stop_loss: float,
    target: float,
    pips_mode: bool = False,
) -> tuple[Optional[str], Optional[str]]:
    """Infer the trade direction.

    Price mode: a stop below entry is a long, above entry a short.  A stop
    equal to entry is an error and yields no direction.

    Pips mode: the stop distance carries no side, so the direction comes
    from the target (above entry → long, otherwise short).  Without a
    target the direction is unknown.

    Returns:
        ``(direction, validation_error)``.
    """
    if pips_mode:
        if target > 0 and entry > 0:
            return (LONG if target > entry else SHORT), None
        return None, None

    if entry > 0 and stop_loss > 0:
        if stop_loss < entry:
            return LONG, None
        if stop_loss > entry:
            return SHORT, None
        return None, STOP_EQUALS_ENTRY
    return None, None


def price_distance(entry: float, stop_loss: float) -> float:
    """``|entry − stop_loss|`` with float noise removed.

    ``1.2520 − 1.2500`` gives ``0.0020`` rather than ``0.00199999…``.
    """
    return round(abs(entry - stop_loss), _PRICE_DIFF_DECIMALS)


def floor_lots(raw_lots: float) -> float:
    """Round *raw_lots* down to the 0.01-lot step.

    The epsilon keeps exact multiples (0.5 computed as 0.49999…) from
    dropping a whole step.  Non-finite input gives 0.
    """
    return _floor(raw_lots * 100 + _LOT_EPSILON) / 100


def _floor(value: float) -> float:
    """``math.floor`` that maps inf and NaN to 0 instead of raising."""
    if not math.isfinite(value):
        return 0.0
    return float(math.floor(value))


def _finite(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def _finite_or_none(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    return _finite(value)


class PositionSizeEngine:
    """Stateless calculator over an injected forex pair table.

    Args:
        pairs: Symbol → ``ForexPairSpec`` lookup used for pip and contract
               sizes.  Defaults to the built-in table.
    """

    def __init__(self, pairs: Mapping[str, ForexPairSpec] = FOREX_PAIRS) -> None:
        self._pairs = pairs

    @property
    def pairs(self) -> Mapping[str, ForexPairSpec]:
        return self._pairs

    def compute(
        self,
        inputs: CalculatorInputs,
        touched: Iterable[str] = (),
    ) -> CalculatorOutputs:
        """Compute position size and derived figures for *inputs*.

        *touched* names the fields the user has interacted with; it only
        controls which ``field_errors`` are reported.
        """
        asset_class = inputs.asset_class
        pips_mode = inputs.pips_mode

        balance = parse_number(inputs.balance)
        risk_pct = parse_number(inputs.risk_percent)
        entry = parse_number(inputs.entry_price)
        sl = parse_number(inputs.stop_loss_price)
        sl_pips = parse_number(inputs.stop_loss_pips)
        target = parse_number(inputs.target_price)
        leverage = parse_number(inputs.leverage)
        if leverage <= 0:
            leverage = 1.0
        lot_size = parse_number(inputs.lot_size)
        if lot_size <= 0:
            lot_size = 1.0

        pair = get_pair(inputs.forex_pair, self._pairs) if asset_class == "forex" else None
        contract_size = pair.contract_size if pair else STANDARD_LOT
        pip_size = pair.pip_size if pair else DEFAULT_PIP_SIZE

        direction, validation_error = infer_direction(entry, sl, target, pips_mode)

        risk_amount = balance * risk_pct / 100

        # Entry and a stop are required; a missing stop is not a zero price
        if entry <= 0:
            price_diff = 0.0
        elif pips_mode:
            price_diff = max(sl_pips, 0.0) * pip_size
        elif sl > 0:
            price_diff = price_distance(entry, sl)
        else:
            price_diff = 0.0

        raw_units = risk_amount / price_diff if price_diff > 0 else 0.0
        if not math.isfinite(raw_units):
            raw_units = 0.0

        # Asset-class rounding
        if asset_class == "stocks":
            units = _floor(raw_units)
        elif asset_class == "forex" and pair is not None:
            denom = price_diff * contract_size
            lots = risk_amount / denom if denom > 0 else 0.0
            units = floor_lots(lots)
        elif asset_class == "forex":
            units = raw_units / STANDARD_LOT
        elif asset_class == "futures":
            units = _floor(raw_units / lot_size) * lot_size
        else:
            units = raw_units

        real_units = units * contract_size if asset_class == "forex" else units

        position_value = real_units * entry
        margin = position_value / leverage if leverage > 0 else position_value

        futures_min_risk = None
        forex_min_risk = None
        if asset_class == "futures" and units == 0 and price_diff > 0:
            futures_min_risk = lot_size * price_diff
        elif asset_class == "forex" and units < MIN_FOREX_LOT and price_diff > 0:
            forex_min_risk = MIN_FOREX_LOT * price_diff * contract_size

        potential_profit = 0.0
        rrr = 0.0
        if target > 0 and entry > 0 and direction is not None:
            if direction == LONG:
                potential_profit = (target - entry) * real_units
            else:
                potential_profit = (entry - target) * real_units
            rrr = potential_profit / risk_amount if risk_amount > 0 else 0.0

        pip_value = None
        if pair is not None and units != 0:
            pip_value = calculate_pip_value(pair, units)

        insufficient_margin = margin > balance and balance > 0 and margin > 0

        return CalculatorOutputs(
            position_size_units=_finite(units),
            position_size_value=_finite(position_value),
            margin_required=_finite(margin),
            risk_amount=_finite(risk_amount),
            potential_profit=_finite(potential_profit),
            rrr=_finite(rrr),
            trade_direction=direction,
            validation_error=validation_error,
            insufficient_margin=insufficient_margin,
            futures_min_risk=_finite_or_none(futures_min_risk),
            forex_min_risk=_finite_or_none(forex_min_risk),
            pip_value=_finite_or_none(pip_value),
            field_errors=field_errors(inputs, touched),
            is_complete=is_complete(inputs),
        )
