"""RiskCalc — application configuration.

Loads .env variables into a typed config object.
Validates values on startup.
"""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from riskcalc.formatters import SUPPORTED_LOCALE_CODES

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_COINGECKO_PLANS = ("demo", "pro")


@dataclass(frozen=True)
class Config:
    """Typed configuration loaded from environment variables."""

    log_level: str
    host: str
    port: int
    default_locale: str
    coingecko_plan: str  # "demo" or "pro"
    coingecko_api_key: str
    price_cache_seconds: float
    feedback_webhook_url: str
    feedback_max_per_hour: int

    @property
    def coingecko_base_url(self) -> str:
        """Return the CoinGecko API base URL for the configured plan."""
        if self.coingecko_plan == "pro":
            return "https://pro-api.coingecko.com/api/v3"
        return "https://api.coingecko.com/api/v3"

    @property
    def coingecko_key_header(self) -> str:
        """Header name CoinGecko expects the API key in."""
        if self.coingecko_plan == "pro":
            return "x-cg-pro-api-key"
        return "x-cg-demo-api-key"


def _int_var(name: str, default: str) -> int:
    raw = os.environ.get(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{raw}'") from None


def _float_var(name: str, default: str) -> float:
    raw = os.environ.get(name, default)
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got '{raw}'") from None


def load_config(env_path: str | None = None) -> Config:
    """Load configuration from environment variables.

    Every variable has a default.  Raises ``ValueError`` with a message
    naming the offending variable when a value is invalid.
    """
    load_dotenv(dotenv_path=env_path)

    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    if log_level not in _LOG_LEVELS:
        raise ValueError(f"LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}, got '{log_level}'")

    default_locale = os.environ.get("DEFAULT_LOCALE", "en-US")
    if default_locale not in SUPPORTED_LOCALE_CODES:
        raise ValueError(f"DEFAULT_LOCALE '{default_locale}' is not a supported locale")

    plan = os.environ.get("COINGECKO_PLAN", "demo").lower()
    if plan not in _COINGECKO_PLANS:
        raise ValueError(f"COINGECKO_PLAN must be 'demo' or 'pro', got '{plan}'")

    port = _int_var("PORT", "8080")
    if not 1 <= port <= 65535:
        raise ValueError(f"PORT must be 1–65535, got {port}")

    return Config(
        log_level=log_level,
        host=os.environ.get("HOST", "0.0.0.0"),
        port=port,
        default_locale=default_locale,
        coingecko_plan=plan,
        coingecko_api_key=os.environ.get("COINGECKO_API_KEY", ""),
        price_cache_seconds=_float_var("PRICE_CACHE_SECONDS", "60"),
        feedback_webhook_url=os.environ.get("FEEDBACK_WEBHOOK_URL", ""),
        feedback_max_per_hour=_int_var("FEEDBACK_MAX_PER_HOUR", "3"),
    )


def configure_logging(level: str = "INFO") -> None:
    """Install the root handler used by the CLI and the server."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
