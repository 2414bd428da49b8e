from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from http.client import HTTPException
from typing import Any, Callable, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from pydantic import ValidationError

from stockai.errors import (
    MalformedQuoteError,
    NetworkError,
    ProviderError,
    ProviderHttpError,
    ProviderRateLimitSignal,
)
from stockai.schemas.quote import QuoteData
from stockai.utils.credentials import check_credential, scrub_secret
from stockai.utils.symbol_normalizer import normalize_symbol

logger = logging.getLogger(__name__)

HTTP_TOO_MANY_REQUESTS = 429


class QuoteProvider(ABC):
    """One external quote API turned into ``QuoteData``.

    Subclasses implement ``_fetch``; ``fetch_quote`` checks the credential
    before any request and masks it out of every error that leaves the adapter.
    """

    source_id: str = "provider"
    display_name: str = "Provider"
    credential_name: str = ""
    credential_validator: Optional[Callable[[str], bool]] = None

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        base_url: str,
        user_agent: str = "StockAI/1.0",
        timeout_seconds: Optional[float] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout_seconds = timeout_seconds

    def credential(self) -> str:
        validator = type(self).credential_validator
        return check_credential(self.credential_name, self.api_key, validator, provider=self.source_id)

    def has_credential(self) -> bool:
        try:
            self.credential()
        except ProviderError:
            return False
        return True

    def fetch_quote(self, symbol: str) -> QuoteData:
        clean_symbol = normalize_symbol(symbol)
        api_key = self.credential()
        try:
            return self._fetch(clean_symbol, api_key)
        except ProviderError as exc:
            raise exc.redacted(api_key) from None
        except (KeyError, TypeError, ValueError, ValidationError) as exc:
            message = scrub_secret(f"Invalid {self.display_name} payload: {exc}", api_key)
            raise MalformedQuoteError(message, provider=self.source_id) from None
        except Exception as exc:
            logger.error(f"Unexpected {self.display_name} failure: {type(exc).__name__}")
            message = scrub_secret(f"Unexpected error: {exc}", api_key)
            raise ProviderError(message, provider=self.source_id) from None

    @abstractmethod
    def _fetch(self, symbol: str, api_key: str) -> QuoteData:
        raise NotImplementedError

    def _get_json(self, url: str, params: dict[str, Any]) -> dict[str, Any]:
        request = Request(f"{url}?{urlencode(params)}", headers={"User-Agent": self.user_agent})
        kwargs: dict[str, Any] = {}
        if self.timeout_seconds is not None:
            kwargs["timeout"] = self.timeout_seconds
        try:
            with urlopen(request, **kwargs) as response:
                body = response.read().decode("utf-8")
        except HTTPError as exc:
            if exc.code == HTTP_TOO_MANY_REQUESTS:
                raise ProviderRateLimitSignal(
                    f"{self.display_name} API rate limit reached", provider=self.source_id, status_code=exc.code
                ) from None
            raise ProviderHttpError(
                f"{self.display_name} API error: {exc.code}", provider=self.source_id, status_code=exc.code
            ) from None
        except (URLError, TimeoutError, OSError, HTTPException) as exc:
            reason = getattr(exc, "reason", exc)
            raise NetworkError(
                f"Network error: Unable to reach {self.display_name} API ({reason})", provider=self.source_id
            ) from None

        try:
            payload = json.loads(body)
        except ValueError:
            raise MalformedQuoteError(f"{self.display_name} returned a non-JSON body", provider=self.source_id) from None
        if not isinstance(payload, dict):
            raise MalformedQuoteError(f"{self.display_name} returned an unexpected payload", provider=self.source_id)
        return payload
