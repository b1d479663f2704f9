"""Locale-aware display formatting for calculator results.

A fixed table of separators and currency placement, one entry per
supported locale.  It approximates CLDR output rather than reproducing
it: ar-AE uses Latin digits with an "AED " prefix instead of the Arabic
currency sign, and only the en-IN entry uses lakh grouping.

NaN and infinite values are rendered as zero so a half-filled form
never shows "nan".
"""

import math
from dataclasses import dataclass
from typing import Optional

from riskcalc.models.calculator import CalculatorOutputs


@dataclass(frozen=True)
class LocaleFormat:
    """Number and currency conventions for one locale."""

    code: str
    name: str
    currency: str
    symbol: str
    group: str
    decimal: str
    symbol_suffix: bool = False  # "1.234,56 €" rather than "€1,234.56"
    indian_grouping: bool = False  # 12,34,567
    percent_sep: str = ""  # "1,50 %" in continental locales


SUPPORTED_LOCALES: tuple[LocaleFormat, ...] = (
    LocaleFormat("en-US", "English (US)", "USD", "$", ",", "."),
    LocaleFormat("en-GB", "English (UK)", "GBP", "£", ",", "."),
    LocaleFormat("de-DE", "Deutsch", "EUR", "€", ".", ",",
                 symbol_suffix=True, percent_sep=" "),
    LocaleFormat("es-ES", "Español", "EUR", "€", ".", ",",
                 symbol_suffix=True, percent_sep=" "),
    LocaleFormat("fr-FR", "Français", "EUR", "€", " ", ",",
                 symbol_suffix=True, percent_sep=" "),
    LocaleFormat("ja-JP", "日本語", "JPY", "￥", ",", "."),
    LocaleFormat("zh-CN", "中文", "CNY", "¥", ",", "."),
    LocaleFormat("en-IN", "English (India)", "INR", "₹", ",", ".",
                 indian_grouping=True),
    LocaleFormat("ar-AE", "العربية (UAE)", "AED", "AED ", ",", "."),
)

SUPPORTED_LOCALE_CODES = tuple(loc.code for loc in SUPPORTED_LOCALES)
DEFAULT_LOCALE = "en-US"

_BY_CODE = {loc.code: loc for loc in SUPPORTED_LOCALES}

UNIT_LABELS = {"stocks": "Shares", "forex": "Lots", "futures": "Units", "crypto": "Units"}
UNIT_DECIMALS = {"crypto": 4, "stocks": 0}


def get_locale(code: Optional[str]) -> LocaleFormat:
    """Return the locale for *code*, falling back to en-US."""
    return _BY_CODE.get(code or "", _BY_CODE[DEFAULT_LOCALE])


def _group(digits: str, loc: LocaleFormat) -> str:
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    if loc.indian_grouping:
        parts = []
        while len(head) > 2:
            parts.insert(0, head[-2:])
            head = head[:-2]
        if head:
            parts.insert(0, head)
        return loc.group.join(parts + [tail])
    parts = []
    while len(head) > 3:
        parts.insert(0, head[-3:])
        head = head[:-3]
    parts.insert(0, head)
    return loc.group.join(parts + [tail])


def _format(value: float, loc: LocaleFormat, min_decimals: int, max_decimals: int) -> str:
    if not math.isfinite(value):
        value = 0.0
    text = f"{abs(value):.{max_decimals}f}"
    int_part, _, frac = text.partition(".")
    while len(frac) > min_decimals and frac.endswith("0"):
        frac = frac[:-1]
    out = _group(int_part, loc)
    if frac:
        out += loc.decimal + frac
    negative = value < 0 and any(c not in "0" for c in int_part + frac)
    return ("-" if negative else "") + out


def format_number(value: float, locale: str = DEFAULT_LOCALE, decimals: int = 4) -> str:
    """Format with up to *decimals* fraction digits, trailing zeros dropped."""
    return _format(value, get_locale(locale), 0, decimals)


def format_currency(value: float, locale: str = DEFAULT_LOCALE) -> str:
    """Format as money in the locale's currency, always two decimals."""
    loc = get_locale(locale)
    body = _format(value, loc, 2, 2)
    sign = ""
    if body.startswith("-"):
        sign, body = "-", body[1:]
    if loc.symbol_suffix:
        return f"{sign}{body} {loc.symbol}"
    return f"{sign}{loc.symbol}{body}"


def format_percentage(value: float, locale: str = DEFAULT_LOCALE) -> str:
    """``1.5`` → ``"1.50%"`` (value is already a percentage)."""
    loc = get_locale(locale)
    return f"{_format(value, loc, 2, 2)}{loc.percent_sep}%"


def resolve_locale(accept_language: Optional[str]) -> str:
    """Pick a supported locale from an ``Accept-Language`` header.

    Exact tag match first, then the first supported locale sharing the
    language part, then en-US.
    """
    if not accept_language:
        return DEFAULT_LOCALE
    tags = [
        part.split(";")[0].strip()
        for part in accept_language.split(",")
        if part.strip()
    ]
    for tag in tags:
        for code in SUPPORTED_LOCALE_CODES:
            if code.lower() == tag.lower():
                return code
    for tag in tags:
        lang = tag.split("-")[0].lower()
        for code in SUPPORTED_LOCALE_CODES:
            if code.split("-")[0] == lang:
                return code
    return DEFAULT_LOCALE


def format_outputs(
    outputs: CalculatorOutputs,
    asset_class: str,
    locale: str = DEFAULT_LOCALE,
) -> dict[str, str]:
    """Display strings for every headline figure of a result."""
    decimals = UNIT_DECIMALS.get(asset_class, 2)
    display = {
        "position_size": format_number(outputs.position_size_units, locale, decimals),
        "unit_label": UNIT_LABELS.get(asset_class, "Units"),
        "position_value": format_currency(outputs.position_size_value, locale),
        "margin_required": format_currency(outputs.margin_required, locale),
        "risk_amount": format_currency(outputs.risk_amount, locale),
        "potential_profit": format_currency(outputs.potential_profit, locale),
        "rrr": f"1:{format_number(outputs.rrr, locale, 1)}" if outputs.rrr > 0 else "—",
    }
    if outputs.pip_value is not None:
        display["pip_value"] = format_currency(outputs.pip_value, locale)
    min_risk = outputs.futures_min_risk or outputs.forex_min_risk
    if min_risk:
        display["min_risk"] = format_currency(min_risk, locale)
    return display
