"""Reduce per-sportsbook outright prices to one summary per player.

On the American scale any positive price pays more than any negative one and a
more negative price pays less, so plain numeric max/min over raw values gives
the best/worst price for the holder. That only holds when every value uses the
American convention; records declaring another format are rejected and values
that cannot be American prices are dropped.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any

from golf_edge.errors import PriceFormatError
from golf_edge.models import PRICE_FORMAT_AMERICAN, JoinedPlayer, MarketRecord, OddsSummary
from golf_edge.odds_math import american_to_decimal, is_american_price
from golf_edge.util.parsing import to_price

logger = logging.getLogger(__name__)


def collect_prices(book_prices: Mapping[str, Any]) -> list[tuple[str, int]]:
    """Return ``(book, price)`` pairs for every valid American price, in column order."""
    valid: list[tuple[str, int]] = []
    for book, raw in book_prices.items():
        price = to_price(raw)
        if price is None:
            continue
        if not is_american_price(price):
            logger.warning("dropping non-American price %r from %s", raw, book)
            continue
        valid.append((book, price))
    return valid


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def summarize_prices(prices: Iterable[tuple[str, int]]) -> OddsSummary | None:
    """Summarize valid ``(book, price)`` pairs; None when there are none."""
    pairs = list(prices)
    if not pairs:
        return None
    values = [price for _, price in pairs]
    best = max(values)
    worst = min(values)
    best_decimal = american_to_decimal(best)
    worst_decimal = american_to_decimal(worst)
    if best_decimal is None or worst_decimal is None:
        return None
    return OddsSummary(
        average_raw=_round_half_up(sum(values) / len(values)),
        best_raw=best,
        worst_raw=worst,
        best_decimal=best_decimal,
        worst_decimal=worst_decimal,
        source_count=len(values),
        best_book=next(book for book, price in pairs if price == best),
        worst_book=next(book for book, price in pairs if price == worst),
    )


def summarize_odds(record: MarketRecord) -> OddsSummary | None:
    """Summarize one market record; raises ``PriceFormatError`` for non-American input."""
    if record.price_format.strip().lower() != PRICE_FORMAT_AMERICAN:
        raise PriceFormatError(
            f"expected american prices for {record.name!r}, got {record.price_format!r}"
        )
    return summarize_prices(collect_prices(record.book_prices))


def rank_by_average_odds(players: Iterable[JoinedPlayer]) -> list[JoinedPlayer]:
    """Shortest average price first; players without odds are excluded."""
    priced = [player for player in players if player.odds is not None]
    return sorted(priced, key=lambda player: (player.odds.average_raw, player.key))


def rank_by_decimal_payout(players: Iterable[JoinedPlayer]) -> list[JoinedPlayer]:
    """Largest best-price payout first; not interchangeable with the average ranking."""
    priced = [player for player in players if player.odds is not None]
    return sorted(priced, key=lambda player: (-player.odds.best_decimal, player.key))
