from __future__ import annotations

import math
from typing import Any

PRICE_PRECISION = 2
PERCENT_PRECISION = 4


def to_native_float(value: Any, default: float | None = 0.0) -> float | None:
    if value is None:
        return default
    if isinstance(value, str):
        value = value.strip().rstrip("%").strip()
        if not value:
            return default
    try:
        casted = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(casted):
        return default
    return casted


def to_native_int(value: Any, default: int = 0) -> int:
    if value is None:
        return default
    if isinstance(value, str):
        value = value.strip()
    try:
        return int(value)
    except (TypeError, ValueError):
        casted = to_native_float(value, default=None)
        if casted is None:
            return default
        return int(casted)


def is_valid_price(price: float) -> bool:
    return price >= 0


def round_price(value: float) -> float:
    return round(value, PRICE_PRECISION)


def derive_change_percent(price: float, change: float) -> float:
    """Percent move relative to the previous close (``price - change``)."""
    previous_close = price - change
    if previous_close == 0:
        return 0.0
    return round(change / previous_close * 100, PERCENT_PRECISION)
