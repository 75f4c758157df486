"""Outright-market feed adapter."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from golf_edge.errors import SourceUnavailable
from golf_edge.models import PRICE_FORMAT_AMERICAN, MarketRecord
from golf_edge.sources._shape import expect_dict, feed_rows, text_field

FEED = "market"

KNOWN_BOOKS: tuple[str, ...] = (
    "draftkings",
    "fanduel",
    "betmgm",
    "pointsbet",
    "williamhill_us",
    "bet365",
    "pinnacle",
    "bovada",
    "betrivers",
    "caesars",
    "unibet",
)


def parse_market_payload(
    payload: Any, *, books: Sequence[str] = KNOWN_BOOKS
) -> list[MarketRecord]:
    """Convert ``{"odds_format": ..., "odds": [...]}`` into market records.

    Only the listed sportsbook columns are read; price values stay raw so the
    aggregator decides which are valid. The feed-level ``odds_format`` is
    carried onto every record.
    """
    body = expect_dict(payload, feed=FEED, context="market_payload")
    odds_format = body.get("odds_format", PRICE_FORMAT_AMERICAN)
    if not isinstance(odds_format, str) or not odds_format.strip():
        raise SourceUnavailable(FEED, "market_payload.odds_format must be text", kind="bad_shape")
    records: list[MarketRecord] = []
    for row in feed_rows(body, feed=FEED, field="odds"):
        name = text_field(row, "player_name")
        if not name:
            continue
        prices = {book: row[book] for book in books if book in row}
        records.append(
            MarketRecord(name=name, book_prices=prices, price_format=odds_format.strip().lower())
        )
    return records
