"""Form-state transitions — explicit functions over ``CalculatorInputs``.

Callers apply these after each user action and then run the engine on
the returned snapshot.  Inputs are immutable, so every function returns
a new ``CalculatorInputs``.
"""

from dataclasses import replace

from riskcalc.models.calculator import ASSET_CLASSES, CalculatorInputs, parse_number

DEFAULT_LEVERAGE = "10"
FOREX_LEVERAGE = "50"


def _plain(value: float) -> str:
    """Render *value* without float noise or trailing zeros."""
    text = f"{round(value, 10):.10f}".rstrip("0").rstrip(".")
    return text if text not in ("", "-0") else "0"


def sync_risk_fields(inputs: CalculatorInputs) -> CalculatorInputs:
    """Derive the non-authoritative risk field from the authoritative one.

    Percent mode: ``risk_fiat = balance × percent / 100`` (2 decimals).
    Fiat mode: ``risk_percent = fiat / balance × 100`` (0 without a balance).
    """
    balance = parse_number(inputs.balance)
    if inputs.risk_mode == "fiat":
        fiat = parse_number(inputs.risk_fiat)
        percent = fiat / balance * 100 if balance > 0 else 0.0
        return replace(inputs, risk_percent=_plain(percent))

    percent = parse_number(inputs.risk_percent)
    return replace(inputs, risk_fiat=f"{balance * percent / 100:.2f}")


def toggle_risk_mode(inputs: CalculatorInputs) -> CalculatorInputs:
    """Switch between percent and fiat risk entry."""
    mode = "fiat" if inputs.risk_mode == "percent" else "percent"
    return replace(inputs, risk_mode=mode)


def select_asset_class(inputs: CalculatorInputs, asset_class: str) -> CalculatorInputs:
    """Switch asset class and reset leverage to that class's default.

    Raises:
        ValueError: If *asset_class* is not a supported class.
    """
    if asset_class not in ASSET_CLASSES:
        raise ValueError(
            f"asset_class must be one of {', '.join(ASSET_CLASSES)}, got '{asset_class}'"
        )
    leverage = FOREX_LEVERAGE if asset_class == "forex" else DEFAULT_LEVERAGE
    return replace(inputs, asset_class=asset_class, leverage=leverage)


def reset_inputs(inputs: CalculatorInputs) -> CalculatorInputs:
    """Clear the trade setup, keeping the selected asset class and balance."""
    cleared = CalculatorInputs(balance=inputs.balance, forex_pair=inputs.forex_pair)
    return select_asset_class(cleared, inputs.asset_class)
