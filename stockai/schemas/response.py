from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from stockai.schemas.quote import CanonicalQuote


class SourceAttribution(BaseModel):
    source: str
    timestamp: datetime
    api_version: str = "v1"


class StockQuoteResponse(BaseModel):
    schema_version: str
    success: bool
    data: Optional[CanonicalQuote] = None
    error: Optional[str] = None
    message: Optional[str] = None
    sources: list[SourceAttribution] = []


class ApiStatusSchema(BaseModel):
    schema_version: str
    primary: bool
    secondary: bool
    recommended_source: str
