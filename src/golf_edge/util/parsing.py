"""Tolerant numeric coercion for feed values."""

from __future__ import annotations

import math
import re
from typing import Any

_DIGITS_RE = re.compile(r"\d+")


def safe_float(value: Any) -> float | None:
    """Parse number-like input into a finite float, returning None when invalid."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        if raw.startswith("+"):
            raw = raw[1:]
        try:
            number = float(raw)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def safe_int(value: Any) -> int | None:
    """Parse integer-like input, accepting a leading ``+`` on strings."""
    number = safe_float(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def to_price(value: Any) -> int | None:
    """Parse an American-odds price; zero and non-numeric values are invalid.

    Fractional prices (``450.5``) round half up to a whole price.
    """
    number = safe_float(value)
    if number is None:
        return None
    price = math.floor(number + 0.5)
    if price == 0:
        return None
    return price


def first_int(text: str) -> int | None:
    """Return the first run of digits in ``text`` (``"T12"`` -> 12)."""
    match = _DIGITS_RE.search(text)
    if match is None:
        return None
    return int(match.group(0))
