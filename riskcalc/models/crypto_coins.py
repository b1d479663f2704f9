"""Crypto coin metadata — the coins with dedicated calculator pages."""

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional


@dataclass(frozen=True)
class CryptoCoin:
    """A supported coin and its CoinGecko identifier."""

    name: str  # "Bitcoin"
    symbol: str  # "BTC"
    slug: str  # URL slug, "bitcoin"
    description: str
    coingecko_id: str


CRYPTO_COINS: Mapping[str, CryptoCoin] = MappingProxyType({
    c.slug: c
    for c in (
        CryptoCoin("Bitcoin", "BTC", "bitcoin",
                   "the world's largest cryptocurrency by market cap", "bitcoin"),
        CryptoCoin("Ethereum", "ETH", "ethereum",
                   "the leading smart contract platform", "ethereum"),
        CryptoCoin("Solana", "SOL", "solana",
                   "a high-performance blockchain for DeFi and NFTs", "solana"),
        CryptoCoin("XRP", "XRP", "xrp",
                   "Ripple's digital payment network and protocol", "ripple"),
        CryptoCoin("BNB", "BNB", "bnb",
                   "Binance's native exchange and blockchain token", "binancecoin"),
        CryptoCoin("Cardano", "ADA", "cardano",
                   "a proof-of-stake blockchain platform", "cardano"),
        CryptoCoin("Dogecoin", "DOGE", "dogecoin",
                   "the original meme cryptocurrency", "dogecoin"),
        CryptoCoin("Avalanche", "AVAX", "avalanche",
                   "a fast, low-cost smart contracts platform", "avalanche-2"),
        CryptoCoin("Polkadot", "DOT", "polkadot",
                   "a multi-chain network for cross-blockchain transfers", "polkadot"),
        CryptoCoin("Chainlink", "LINK", "chainlink",
                   "the leading decentralized oracle network", "chainlink"),
    )
})


def get_coin(slug: str) -> Optional[CryptoCoin]:
    """Look up a coin by slug (case-insensitive)."""
    return CRYPTO_COINS.get(slug.strip().lower())
