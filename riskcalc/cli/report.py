"""CLI report — prints a calculator result to the console."""

from riskcalc.formatters import format_outputs
from riskcalc.models.calculator import CalculatorInputs, CalculatorOutputs


def print_result(
    inputs: CalculatorInputs,
    outputs: CalculatorOutputs,
    locale: str = "en-US",
) -> str:
    """Format and print a calculation result.

    Args:
        inputs: The (risk-synchronised) inputs that were computed.
        outputs: The engine result for *inputs*.
        locale: Display locale for numbers and currency.

    Returns:
        The formatted string (also printed to stdout).
    """
    display = format_outputs(outputs, inputs.asset_class, locale)
    direction = outputs.trade_direction or "N/A"
    pair = f" ({inputs.forex_pair})" if inputs.asset_class == "forex" else ""

    def row(label: str, value: str) -> None:
        lines.append(f"  {label + ':':<18}{value}")

    lines = ["──────────────── Position Size ────────────────"]
    row("Asset class", f"{inputs.asset_class}{pair}")
    row("Direction", direction)

    min_risk = display.get("min_risk")
    if min_risk:
        row("Position size", f"0 {display['unit_label']}")
        row("Minimum risk", f"{min_risk} to trade one lot")
    else:
        row("Position size", f"{display['position_size']} {display['unit_label']}")
    row("Position value", display["position_value"])
    row("Margin required", display["margin_required"])
    row("Risk amount", display["risk_amount"])
    row("Potential profit", display["potential_profit"])
    row("Risk:Reward", display["rrr"])
    if "pip_value" in display:
        row("Pip value", display["pip_value"])
    if outputs.insufficient_margin:
        lines.append("  WARNING: margin required exceeds account balance")
    if outputs.validation_error:
        lines.append(f"  ERROR: {outputs.validation_error}")
    for name, msg in outputs.field_errors.items():
        lines.append(f"  {name}: {msg}")
    if not outputs.is_complete:
        lines.append("  (incomplete: balance, risk, entry and stop loss are required)")
    lines.append("──────────────────────────────────────────────")

    output = "\n".join(lines)
    print(output)
    return output
