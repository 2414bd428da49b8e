import re
from typing import Any

from stockai.errors import InvalidSymbolError

_SYMBOL_PATTERN = re.compile(r"^[A-Z]{1,5}$")


def is_valid_symbol(symbol: Any) -> bool:
    # Stock symbols are 1-5 uppercase letters
    if not isinstance(symbol, str):
        return False
    return _SYMBOL_PATTERN.fullmatch(symbol) is not None


def normalize_symbol(symbol: Any) -> str:
    if not isinstance(symbol, str):
        raise InvalidSymbolError(symbol)
    cleaned = symbol.strip().upper()
    if not is_valid_symbol(cleaned):
        raise InvalidSymbolError(symbol)
    return cleaned
