"""Placeholder quotes used when no real provider can answer."""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional

from stockai.schemas.quote import QuoteData
from stockai.utils.symbol_normalizer import normalize_symbol
from stockai.utils.validators import derive_change_percent, round_price


@dataclass(frozen=True)
class SeedQuote:
    name: str
    base_price: float
    base_change: float


SEED_QUOTES: dict[str, SeedQuote] = {
    "AAPL": SeedQuote("Apple Inc.", 210.16, 1.05),
    "GOOGL": SeedQuote("Alphabet Inc.", 2800.50, -15.30),
    "TSLA": SeedQuote("Tesla Inc.", 321.67, 10.89),
    "MSFT": SeedQuote("Microsoft Corp.", 420.85, 2.40),
    "AMZN": SeedQuote("Amazon.com Inc.", 3401.80, -8.20),
    "NVDA": SeedQuote("NVIDIA Corp.", 890.30, 25.60),
    "META": SeedQuote("Meta Platforms Inc.", 485.20, 7.15),
    "NFLX": SeedQuote("Netflix Inc.", 670.45, -3.80),
}

UNKNOWN_PRICE_RANGE = (100.0, 300.0)
UNKNOWN_CHANGE_SPAN = 10.0
PRICE_JITTER = 2.0
CHANGE_JITTER = 0.5
VOLUME_RANGE = (10_000_000, 110_000_000)


class SyntheticQuoteGenerator:
    source_id = "synthetic"

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def _seed(self, symbol: str) -> SeedQuote:
        seed = SEED_QUOTES.get(symbol)
        if seed is not None:
            return seed
        low, high = UNKNOWN_PRICE_RANGE
        return SeedQuote(
            name=f"{symbol} Corp.",
            base_price=low + self.rng.random() * (high - low),
            base_change=(self.rng.random() - 0.5) * UNKNOWN_CHANGE_SPAN,
        )

    def generate(self, symbol: str) -> QuoteData:
        clean_symbol = normalize_symbol(symbol)
        seed = self._seed(clean_symbol)
        price = seed.base_price + (self.rng.random() - 0.5) * PRICE_JITTER
        change = seed.base_change + (self.rng.random() - 0.5) * CHANGE_JITTER
        return QuoteData(
            symbol=clean_symbol,
            company_name=seed.name,
            price=round_price(price),
            change=round_price(change),
            change_percent=derive_change_percent(price, change),
            volume=self.rng.randrange(*VOLUME_RANGE),
            market_cap=0.0,
            is_mock_data=True,
        )
