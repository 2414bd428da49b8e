from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

SYMBOL_PATTERN = r"^[A-Z]{1,5}$"


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


class QuoteSource(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    SYNTHETIC = "synthetic"


class QuoteData(BaseModel):
    """Provider-agnostic quote fields as produced by one adapter."""

    model_config = ConfigDict(frozen=True)

    symbol: str = Field(pattern=SYMBOL_PATTERN)
    company_name: str
    price: float
    change: float
    change_percent: float
    volume: int
    market_cap: float = 0.0
    pe_ratio: Optional[float] = None
    dividend_yield: Optional[float] = None
    high_52_week: Optional[float] = None
    low_52_week: Optional[float] = None
    last_updated: datetime = Field(default_factory=now_utc)
    is_mock_data: bool = False


class CanonicalQuote(QuoteData):
    """Resolved quote with provenance attached by the resolver."""

    source: QuoteSource

    @model_validator(mode="after")
    def _mock_flag_matches_source(self) -> "CanonicalQuote":
        if self.is_mock_data != (self.source == QuoteSource.SYNTHETIC):
            raise ValueError("is_mock_data must be set exactly when source is synthetic")
        return self

    @classmethod
    def from_data(cls, data: QuoteData, source: QuoteSource) -> "CanonicalQuote":
        fields = data.model_dump()
        fields["is_mock_data"] = source == QuoteSource.SYNTHETIC
        fields["last_updated"] = now_utc()
        return cls(**fields, source=source)
