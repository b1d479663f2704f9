"""One-shot script to print live coin prices, e.g. to prefill an entry price.

Usage (from the project root):
    python -m scripts.fetch_price bitcoin ethereum
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from riskcalc.config import configure_logging, load_config
from riskcalc.formatters import format_currency, format_percentage
from riskcalc.pricing.coingecko_client import CoinGeckoClient, PriceUnavailableError

logger = logging.getLogger("riskcalc")


async def _main(slugs: list[str]) -> int:
    config = load_config()
    configure_logging(config.log_level)
    client = CoinGeckoClient(config)
    failures = 0
    for slug in slugs:
        try:
            quote = await client.fetch_price(slug)
        except (KeyError, PriceUnavailableError) as exc:
            logger.error("%s: %s", slug, exc)
            failures += 1
            continue
        change = (
            format_percentage(quote.change_24h, config.default_locale)
            if quote.change_24h is not None else "N/A"
        )
        print(f"{quote.slug:<12} {format_currency(quote.price, 'en-US'):>16}  24h {change}")
    return 1 if failures else 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Fetch live USD prices from CoinGecko")
    parser.add_argument("slugs", nargs="+", help="Coin slugs, e.g. bitcoin solana")
    args = parser.parse_args()
    sys.exit(asyncio.run(_main(args.slugs)))
