from __future__ import annotations

import logging
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr

from stockai.errors import MalformedQuoteError, ProviderApplicationError, ProviderRateLimitSignal
from stockai.providers.base import QuoteProvider
from stockai.schemas.quote import QuoteData
from stockai.services.synthetic_generator import SyntheticQuoteGenerator
from stockai.utils.credentials import key_validator
from stockai.utils.validators import round_price, to_native_float, to_native_int

logger = logging.getLogger(__name__)

Numeric = Optional[Union[StrictInt, StrictFloat, StrictStr]]


class AlphaVantageGlobalQuote(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    symbol: Optional[str] = Field(default=None, alias="01. symbol")
    price: Numeric = Field(default=None, alias="05. price")
    volume: Numeric = Field(default=None, alias="06. volume")
    change: Numeric = Field(default=None, alias="09. change")
    change_percent: Numeric = Field(default=None, alias="10. change percent")


class AlphaVantageResponse(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    global_quote: Optional[dict[str, Any]] = Field(default=None, alias="Global Quote")
    error_message: Optional[str] = Field(default=None, alias="Error Message")
    note: Optional[str] = Field(default=None, alias="Note")
    information: Optional[str] = Field(default=None, alias="Information")

    @property
    def throttled(self) -> bool:
        return bool(self.note or self.information)


class AlphaVantageAdapter(QuoteProvider):
    """GLOBAL_QUOTE client.

    When the API answers with its quota notice and a ``fallback`` generator is
    configured, the adapter serves synthetic data flagged ``is_mock_data``
    instead of failing.
    """

    source_id = "alpha_vantage"
    display_name = "Alpha Vantage"
    credential_name = "ALPHA_VANTAGE_API_KEY"
    credential_validator = key_validator(8, r"^[A-Za-z0-9]+$")

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        fallback: Optional[SyntheticQuoteGenerator] = None,
        **kwargs: Any,
    ):
        kwargs.setdefault("base_url", "https://www.alphavantage.co/query")
        super().__init__(api_key, **kwargs)
        self.fallback = fallback

    def _fetch(self, symbol: str, api_key: str) -> QuoteData:
        raw = self._get_json(self.base_url, {"function": "GLOBAL_QUOTE", "symbol": symbol, "apikey": api_key})
        response = AlphaVantageResponse.model_validate(raw)

        if response.error_message:
            raise ProviderApplicationError(
                f"Alpha Vantage API error: {response.error_message}", provider=self.source_id
            )

        if response.throttled:
            if self.fallback is None:
                raise ProviderRateLimitSignal(
                    f"Alpha Vantage rate limit: {response.note or response.information}", provider=self.source_id
                )
            logger.info("Alpha Vantage rate limit reached, using mock data", extra={"symbol": symbol})
            return self.fallback.generate(symbol)

        if not response.global_quote:
            raise MalformedQuoteError(f"No data found for symbol: {symbol}", provider=self.source_id)

        quote = AlphaVantageGlobalQuote.model_validate(response.global_quote)
        return self._to_quote_data(symbol, quote)

    def _to_quote_data(self, symbol: str, quote: AlphaVantageGlobalQuote) -> QuoteData:
        if not quote.symbol:
            raise MalformedQuoteError("Invalid quote data: missing symbol", provider=self.source_id)

        price = to_native_float(quote.price, default=None)
        if price is None:
            raise MalformedQuoteError("Invalid quote data: missing or invalid price", provider=self.source_id)

        return QuoteData(
            symbol=symbol,
            # GLOBAL_QUOTE carries no company name
            company_name=symbol,
            price=round_price(price),
            change=round_price(to_native_float(quote.change)),
            change_percent=to_native_float(quote.change_percent),
            volume=to_native_int(quote.volume),
            market_cap=0.0,
        )
