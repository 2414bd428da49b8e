from __future__ import annotations

import math
import random
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt, StrictStr

from stockai.errors import MalformedQuoteError, ProviderApplicationError, ProviderRateLimitSignal
from stockai.providers.base import QuoteProvider
from stockai.schemas.quote import QuoteData
from stockai.utils.credentials import key_validator
from stockai.utils.validators import derive_change_percent, round_price, to_native_float

Numeric = Optional[Union[StrictInt, StrictFloat, StrictStr]]

BASE_VOLUME = 10_000_000
VOLUME_SPREAD = 90_000_000
VOLUME_VARIATION = 0.3


class FinnhubQuotePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    c: Numeric = None  # current price
    pc: Numeric = None  # previous close
    h: Numeric = None
    l: Numeric = None
    o: Numeric = None
    t: Numeric = None
    error: Optional[str] = None


class FinnhubProfilePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    ticker: Optional[str] = None
    marketCapitalization: Numeric = None


def estimate_volume(symbol: str, rng: random.Random) -> int:
    """Plausible daily volume for tiers that do not expose it.

    Stable per symbol, with a +/-15% perturbation per call.
    """
    symbol_hash = sum(ord(ch) for ch in symbol)
    base_volume = BASE_VOLUME + (symbol_hash % VOLUME_SPREAD)
    variation = (rng.random() - 0.5) * VOLUME_VARIATION
    return math.floor(base_volume * (1 + variation))


class FinnhubAdapter(QuoteProvider):
    source_id = "finnhub"
    display_name = "Finnhub"
    credential_name = "FINNHUB_API_KEY"
    credential_validator = key_validator(8, r"^[A-Za-z0-9_]+$")

    def __init__(self, api_key: Optional[str] = None, *, rng: Optional[random.Random] = None, **kwargs: Any):
        kwargs.setdefault("base_url", "https://finnhub.io/api/v1")
        super().__init__(api_key, **kwargs)
        self.rng = rng or random.Random()

    def _fetch(self, symbol: str, api_key: str) -> QuoteData:
        params = {"symbol": symbol, "token": api_key}
        # quote and profile live on separate endpoints; both must answer
        with ThreadPoolExecutor(max_workers=2) as pool:
            quote_future = pool.submit(self._get_json, f"{self.base_url}/quote", params)
            profile_future = pool.submit(self._get_json, f"{self.base_url}/stock/profile2", params)
            quote_raw = quote_future.result()
            profile_raw = profile_future.result()

        quote = FinnhubQuotePayload.model_validate(quote_raw)
        profile = FinnhubProfilePayload.model_validate(profile_raw)
        return self._to_quote_data(symbol, quote, profile)

    def _to_quote_data(self, symbol: str, quote: FinnhubQuotePayload, profile: FinnhubProfilePayload) -> QuoteData:
        if quote.error:
            if "limit" in quote.error.lower():
                raise ProviderRateLimitSignal(f"Finnhub API rate limit: {quote.error}", provider=self.source_id)
            raise ProviderApplicationError(f"Finnhub API error: {quote.error}", provider=self.source_id)

        current_price = to_native_float(quote.c, default=None)
        if current_price is None:
            raise MalformedQuoteError(f"No quote data found for symbol: {symbol}", provider=self.source_id)
        previous_close = to_native_float(quote.pc)
        if current_price == 0 and previous_close == 0:
            raise MalformedQuoteError(f"No quote data found for symbol: {symbol}", provider=self.source_id)

        change = current_price - previous_close
        return QuoteData(
            symbol=symbol,
            company_name=profile.name or f"{symbol} Corp.",
            price=round_price(current_price),
            change=round_price(change),
            change_percent=derive_change_percent(current_price, change),
            volume=estimate_volume(symbol, self.rng),
            market_cap=to_native_float(profile.marketCapitalization),
        )
