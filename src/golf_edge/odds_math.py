"""American-odds conversion helpers."""

from __future__ import annotations


def american_to_decimal(price: int | None) -> float | None:
    """Convert American odds to decimal odds."""
    if price is None:
        return None
    if price > 0:
        return 1.0 + (price / 100.0)
    if price < 0:
        return 1.0 + (100.0 / abs(price))
    return None


def format_american(price: int | None) -> str:
    """Render a price with an explicit sign, or ``N/A`` when absent."""
    if not price:
        return "N/A"
    return f"+{price}" if price > 0 else str(price)


def is_american_price(value: float) -> bool:
    """American prices never fall strictly between -100 and +100."""
    return abs(value) >= 100
