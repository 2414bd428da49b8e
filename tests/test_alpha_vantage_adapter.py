import random

import pytest

from stockai.errors import (
    CredentialMissingError,
    MalformedQuoteError,
    ProviderApplicationError,
    ProviderRateLimitSignal,
)
from stockai.providers.alpha_vantage_adapter import AlphaVantageAdapter
from stockai.services.synthetic_generator import SyntheticQuoteGenerator

API_KEY = "ABCD123456789"

GLOBAL_QUOTE = {
    "Global Quote": {
        "01. symbol": "IBM",
        "02. open": "167.5000",
        "03. high": "169.1000",
        "04. low": "166.9000",
        "05. price": "168.4200",
        "06. volume": "3456789",
        "07. latest trading day": "2024-01-05",
        "08. previous close": "167.0000",
        "09. change": "1.4200",
        "10. change percent": "0.8503%",
    }
}


def make_adapter(monkeypatch, payload, fallback=None, api_key=API_KEY):
    adapter = AlphaVantageAdapter(api_key, fallback=fallback)
    calls = []

    def fake_get_json(url, params):
        calls.append(dict(params))
        return payload

    monkeypatch.setattr(adapter, "_get_json", fake_get_json)
    return adapter, calls


def test_global_quote_normalized(monkeypatch):
    adapter, calls = make_adapter(monkeypatch, GLOBAL_QUOTE)
    data = adapter.fetch_quote("ibm")

    assert calls == [{"function": "GLOBAL_QUOTE", "symbol": "IBM", "apikey": API_KEY}]
    assert data.symbol == "IBM"
    assert data.company_name == "IBM"
    assert data.price == 168.42
    assert data.change == 1.42
    assert data.change_percent == 0.8503
    assert data.volume == 3456789
    assert data.market_cap == 0.0
    assert data.dividend_yield is None
    assert data.is_mock_data is False


def test_unparseable_numbers_become_zero(monkeypatch):
    payload = {"Global Quote": {**GLOBAL_QUOTE["Global Quote"], "09. change": "-", "10. change percent": "n/a%", "06. volume": ""}}
    adapter, _ = make_adapter(monkeypatch, payload)
    data = adapter.fetch_quote("IBM")
    assert data.change == 0.0
    assert data.change_percent == 0.0
    assert data.volume == 0


def test_unparseable_price_is_fatal(monkeypatch):
    payload = {"Global Quote": {**GLOBAL_QUOTE["Global Quote"], "05. price": "n/a"}}
    adapter, _ = make_adapter(monkeypatch, payload)
    with pytest.raises(MalformedQuoteError, match="price"):
        adapter.fetch_quote("IBM")


def test_missing_symbol_is_fatal(monkeypatch):
    quote = dict(GLOBAL_QUOTE["Global Quote"])
    quote.pop("01. symbol")
    adapter, _ = make_adapter(monkeypatch, {"Global Quote": quote})
    with pytest.raises(MalformedQuoteError, match="missing symbol"):
        adapter.fetch_quote("IBM")


def test_empty_global_quote(monkeypatch):
    adapter, _ = make_adapter(monkeypatch, {"Global Quote": {}})
    with pytest.raises(MalformedQuoteError, match="No data found"):
        adapter.fetch_quote("QQQQ")


def test_error_message(monkeypatch):
    adapter, _ = make_adapter(monkeypatch, {"Error Message": "Invalid API call."})
    with pytest.raises(ProviderApplicationError, match="Invalid API call"):
        adapter.fetch_quote("IBM")


@pytest.mark.parametrize("marker", ["Note", "Information"])
def test_throttle_without_fallback_signals_rate_limit(monkeypatch, marker):
    adapter, _ = make_adapter(monkeypatch, {marker: "Thank you for using Alpha Vantage! Our standard API rate limit is 25 requests per day."})
    with pytest.raises(ProviderRateLimitSignal):
        adapter.fetch_quote("IBM")


def test_throttle_with_fallback_serves_mock_data(monkeypatch):
    generator = SyntheticQuoteGenerator(rng=random.Random(3))
    adapter, _ = make_adapter(monkeypatch, {"Note": "API call frequency exceeded"}, fallback=generator)
    data = adapter.fetch_quote("AAPL")
    assert data.is_mock_data is True
    assert data.symbol == "AAPL"
    assert data.company_name == "Apple Inc."


def test_error_message_checked_before_throttle(monkeypatch):
    adapter, _ = make_adapter(
        monkeypatch,
        {"Error Message": "Invalid API call.", "Note": "limit"},
        fallback=SyntheticQuoteGenerator(),
    )
    with pytest.raises(ProviderApplicationError):
        adapter.fetch_quote("IBM")


def test_placeholder_key_rejected_before_network(monkeypatch):
    adapter, calls = make_adapter(monkeypatch, GLOBAL_QUOTE, api_key="your_key_here")
    with pytest.raises(CredentialMissingError):
        adapter.fetch_quote("IBM")
    assert calls == []


def test_key_leaked_in_payload_error_is_masked(monkeypatch):
    adapter, _ = make_adapter(monkeypatch, {"Error Message": f"the parameter apikey={API_KEY} is invalid"})
    with pytest.raises(ProviderApplicationError) as excinfo:
        adapter.fetch_quote("IBM")
    assert API_KEY not in str(excinfo.value)
    assert "ABCD*********" in str(excinfo.value)


def test_boolean_price_is_rejected(monkeypatch):
    payload = {"Global Quote": {**GLOBAL_QUOTE["Global Quote"], "05. price": True}}
    adapter, _ = make_adapter(monkeypatch, payload)
    with pytest.raises(MalformedQuoteError, match="Invalid Alpha Vantage payload"):
        adapter.fetch_quote("IBM")
