"""
Hybrid quote resolution.
Tries the primary provider, then the secondary provider, then synthetic data,
and tags the answer with the source that produced it.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from stockai.errors import HybridResolutionError, ProviderError
from stockai.internal_metrics import SourceMetrics
from stockai.schemas.quote import CanonicalQuote, QuoteData, QuoteSource
from stockai.services.synthetic_generator import SyntheticQuoteGenerator
from stockai.utils.symbol_normalizer import normalize_symbol

logger = logging.getLogger(__name__)

SOURCE_LABELS = {
    QuoteSource.PRIMARY: "Primary Provider",
    QuoteSource.SECONDARY: "Secondary Provider",
    QuoteSource.SYNTHETIC: "Mock Data (Demo)",
}


class QuoteFetcher(Protocol):
    source_id: str

    def fetch_quote(self, symbol: str) -> QuoteData:
        ...

    def has_credential(self) -> bool:
        ...


@dataclass(frozen=True)
class Strategy:
    source: QuoteSource
    fetch: Callable[[str], QuoteData]


@dataclass(frozen=True)
class Attempt:
    """Outcome of one strategy: either ``data`` or ``error`` is set."""

    source: QuoteSource
    data: Optional[QuoteData] = None
    error: Optional[ProviderError] = None

    @property
    def ok(self) -> bool:
        return self.data is not None

    @property
    def provenance(self) -> QuoteSource:
        # secondary may answer with its own synthetic fallback
        if self.data is not None and self.data.is_mock_data:
            return QuoteSource.SYNTHETIC
        return self.source


@dataclass(frozen=True)
class ApiStatus:
    primary: bool
    secondary: bool
    recommended_source: str


def describe_source(quote: CanonicalQuote) -> str:
    return SOURCE_LABELS.get(quote.source, "Unknown Source")


class HybridResolver:
    def __init__(
        self,
        primary: QuoteFetcher,
        secondary: QuoteFetcher,
        synthetic: Optional[SyntheticQuoteGenerator] = None,
        metrics: Optional[SourceMetrics] = None,
        probe_symbol: str = "AAPL",
    ):
        self.primary = primary
        self.secondary = secondary
        self.synthetic = synthetic
        self.metrics = metrics or SourceMetrics()
        self.probe_symbol = probe_symbol

    @classmethod
    def build_default(cls, settings) -> "HybridResolver":
        from stockai.providers.alpha_vantage_adapter import AlphaVantageAdapter
        from stockai.providers.finnhub_adapter import FinnhubAdapter

        synthetic = SyntheticQuoteGenerator() if settings.synthetic_fallback_enabled else None
        common = {"user_agent": settings.user_agent, "timeout_seconds": settings.request_timeout_seconds}
        primary = FinnhubAdapter(settings.finnhub_api_key, base_url=settings.finnhub_base_url, **common)
        secondary = AlphaVantageAdapter(
            settings.alpha_vantage_api_key,
            base_url=settings.alpha_vantage_base_url,
            fallback=synthetic,
            **common,
        )
        return cls(primary, secondary, synthetic, probe_symbol=settings.status_probe_symbol)

    def strategies(self) -> list[Strategy]:
        chain = [
            Strategy(QuoteSource.PRIMARY, self.primary.fetch_quote),
            Strategy(QuoteSource.SECONDARY, self.secondary.fetch_quote),
        ]
        if self.synthetic is not None:
            chain.append(Strategy(QuoteSource.SYNTHETIC, self.synthetic.generate))
        return chain

    def _attempt(self, strategy: Strategy, symbol: str) -> Attempt:
        started = time.perf_counter()
        try:
            data = strategy.fetch(symbol)
        except Exception as exc:
            if not isinstance(exc, ProviderError):
                logger.error(f"Unexpected {type(exc).__name__} from {strategy.source.value} source", exc_info=True)
                exc = ProviderError(f"Unexpected error: {type(exc).__name__}", provider=strategy.source.value)
            elapsed_ms = (time.perf_counter() - started) * 1000
            self.metrics.record_attempt(strategy.source.value, success=False, latency_ms=elapsed_ms, error=str(exc))
            logger.warning(
                f"{strategy.source.value} source failed for {symbol}: {exc}",
                extra={"symbol": symbol, "source": strategy.source.value, "error_type": type(exc).__name__},
            )
            return Attempt(strategy.source, error=exc)
        elapsed_ms = (time.perf_counter() - started) * 1000
        self.metrics.record_attempt(strategy.source.value, success=True, latency_ms=elapsed_ms)
        return Attempt(strategy.source, data=data)

    def resolve(self, raw_symbol: str) -> CanonicalQuote:
        symbol = normalize_symbol(raw_symbol)

        attempts: list[Attempt] = []
        for strategy in self.strategies():
            attempt = self._attempt(strategy, symbol)
            attempts.append(attempt)
            if not attempt.ok:
                continue

            source = attempt.provenance
            if source != attempt.source:
                logger.warning(f"{attempt.source.value} source rate limited for {symbol}, serving mock data")
            self.metrics.record_resolution(source.value)
            logger.info(
                f"Stock data resolved for {symbol}",
                extra={"symbol": symbol, "source": source.value, "attempts": len(attempts)},
            )
            return CanonicalQuote.from_data(attempt.data, source)

        error = HybridResolutionError(symbol, attempts)
        logger.error(str(error), extra={"symbol": symbol})
        raise error

    def check_primary_availability(self) -> bool:
        try:
            self.primary.fetch_quote(self.probe_symbol)
        except ProviderError:
            return False
        return True

    def api_status(self) -> ApiStatus:
        primary_available = self.primary.has_credential()

        try:
            probe = self.secondary.fetch_quote(self.probe_symbol)
            secondary_available = not probe.is_mock_data
        except ProviderError:
            secondary_available = False

        if primary_available:
            recommended = SOURCE_LABELS[QuoteSource.PRIMARY]
        elif secondary_available:
            recommended = SOURCE_LABELS[QuoteSource.SECONDARY]
        else:
            recommended = SOURCE_LABELS[QuoteSource.SYNTHETIC]
        return ApiStatus(primary=primary_available, secondary=secondary_available, recommended_source=recommended)
