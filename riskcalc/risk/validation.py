"""Form validation — completeness and per-field messages, pure, no I/O.

Field messages are advisory: they are shown only for fields the user
has touched and never change the computed numbers.
"""

from collections.abc import Iterable

from riskcalc.models.calculator import CalculatorInputs, parse_number

STOP_EQUALS_ENTRY = "Stop Loss cannot equal Entry Price"


def is_complete(inputs: CalculatorInputs) -> bool:
    """True when balance, risk, entry and a stop-loss are all positive."""
    if parse_number(inputs.balance) <= 0:
        return False
    if parse_number(inputs.risk_percent) <= 0:
        return False
    if parse_number(inputs.entry_price) <= 0:
        return False
    if inputs.pips_mode:
        return parse_number(inputs.stop_loss_pips) > 0
    return parse_number(inputs.stop_loss_price) > 0


def _positive(raw: str, label: str) -> str | None:
    if not raw.strip():
        return f"{label} is required"
    if parse_number(raw) <= 0:
        return f"{label} must be greater than 0"
    return None


def _all_field_errors(inputs: CalculatorInputs) -> dict[str, str]:
    errors: dict[str, str] = {}

    msg = _positive(inputs.balance, "Account balance")
    if msg:
        errors["balance"] = msg

    if inputs.risk_mode == "fiat":
        msg = _positive(inputs.risk_fiat, "Risk amount")
        if msg:
            errors["risk_fiat"] = msg
    else:
        msg = _positive(inputs.risk_percent, "Risk")
        if msg is None and parse_number(inputs.risk_percent) > 100:
            msg = "Risk cannot exceed 100%"
        if msg:
            errors["risk_percent"] = msg

    msg = _positive(inputs.entry_price, "Entry price")
    if msg:
        errors["entry_price"] = msg

    if inputs.pips_mode:
        msg = _positive(inputs.stop_loss_pips, "Stop loss (pips)")
        if msg:
            errors["stop_loss_pips"] = msg
    else:
        msg = _positive(inputs.stop_loss_price, "Stop loss")
        entry = parse_number(inputs.entry_price)
        if msg is None and entry > 0 and parse_number(inputs.stop_loss_price) == entry:
            msg = STOP_EQUALS_ENTRY
        if msg:
            errors["stop_loss_price"] = msg

    if inputs.target_price.strip() and parse_number(inputs.target_price) <= 0:
        errors["target_price"] = "Target price must be greater than 0"

    if inputs.asset_class == "futures":
        msg = _positive(inputs.lot_size, "Lot size")
        if msg:
            errors["lot_size"] = msg

    return errors


def field_errors(
    inputs: CalculatorInputs,
    touched: Iterable[str] = (),
) -> dict[str, str]:
    """Return ``{field: message}`` for every touched field that is invalid."""
    touched = set(touched)
    return {
        name: msg
        for name, msg in _all_field_errors(inputs).items()
        if name in touched
    }
