from __future__ import annotations

from typing import Any

from stockai.utils.credentials import scrub_secret


class InvalidSymbolError(ValueError):
    """Raised for ticker input that is not 1-5 Latin letters."""

    def __init__(self, symbol: Any):
        self.symbol = symbol
        super().__init__("Stock symbol must be 1-5 uppercase letters")


class ProviderError(Exception):
    """Base class for failures raised by a quote provider adapter."""

    def __init__(self, message: str, *, provider: str = "unknown", status_code: int | None = None):
        self.message = message
        self.provider = provider
        self.status_code = status_code
        super().__init__(message)

    def redacted(self, secret: str | None) -> "ProviderError":
        return type(self)(scrub_secret(self.message, secret), provider=self.provider, status_code=self.status_code)

    def __str__(self) -> str:
        return self.message


class CredentialMissingError(ProviderError):
    pass


class NetworkError(ProviderError):
    pass


class ProviderHttpError(ProviderError):
    pass


class ProviderApplicationError(ProviderError):
    pass


class ProviderRateLimitSignal(ProviderError):
    """Provider reported that the usage quota was exceeded."""


class MalformedQuoteError(ProviderError):
    pass


class HybridResolutionError(Exception):
    """Every quote source was exhausted for a symbol."""

    def __init__(self, symbol: str, attempts: list | None = None, status_code: int = 500):
        self.symbol = symbol
        self.attempts = list(attempts or [])
        self.status_code = status_code
        reasons = "; ".join(f"{a.source.value}: {a.error}" for a in self.attempts if a.error is not None)
        message = f"Unable to fetch stock data for {symbol} from any source"
        if reasons:
            message = f"{message} ({reasons})"
        super().__init__(message)
