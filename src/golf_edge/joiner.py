"""Join statistics, market, and field feeds on identity keys."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal, TypeVar

from golf_edge.identity import clean_display_name, identity_key
from golf_edge.models import JoinedPlayer, MarketRecord, OddsSummary, RosterRecord, StatsRecord
from golf_edge.odds_aggregate import summarize_odds

logger = logging.getLogger(__name__)

MissingMarketPolicy = Literal["drop", "retain"]

MISSING_MARKET_DROP: MissingMarketPolicy = "drop"
MISSING_MARKET_RETAIN: MissingMarketPolicy = "retain"

RecordT = TypeVar("RecordT", StatsRecord, MarketRecord, RosterRecord)


@dataclass
class JoinReport:
    """Counts describing how well the feeds lined up."""

    stats_players: int = 0
    joined_players: int = 0
    with_odds: int = 0
    without_odds: int = 0
    dropped_missing_market: int = 0
    dropped_not_in_field: int = 0
    blank_names: int = 0
    duplicate_keys: Counter[str] = field(default_factory=Counter)
    unmatched_market: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "stats_players": self.stats_players,
            "joined_players": self.joined_players,
            "with_odds": self.with_odds,
            "without_odds": self.without_odds,
            "dropped_missing_market": self.dropped_missing_market,
            "dropped_not_in_field": self.dropped_not_in_field,
            "blank_names": self.blank_names,
            "duplicate_keys": dict(sorted(self.duplicate_keys.items())),
            "unmatched_market": sorted(self.unmatched_market),
        }


@dataclass(frozen=True)
class JoinResult:
    players: list[JoinedPlayer]
    report: JoinReport


def index_by_key(
    records: Sequence[RecordT],
    *,
    source: str,
    report: JoinReport,
    key_fn: Callable[[str], str],
) -> dict[str, RecordT]:
    """Index records by identity key; the first record for a key wins."""
    indexed: dict[str, RecordT] = {}
    for record in records:
        key = key_fn(record.name)
        if not key:
            report.blank_names += 1
            logger.warning("dropping %s record with unusable name %r", source, record.name)
            continue
        if key in indexed:
            report.duplicate_keys[source] += 1
            continue
        indexed[key] = record
    return indexed


def join_sources(
    stats: Sequence[StatsRecord],
    market: Sequence[MarketRecord],
    roster: Sequence[RosterRecord] | None = None,
    *,
    missing_market: MissingMarketPolicy,
    field_only: bool = False,
    fold_accents: bool = True,
) -> JoinResult:
    """Join feeds with statistics as the primary source.

    ``missing_market`` decides what happens to a player with no usable market
    prices: ``"drop"`` removes them, ``"retain"`` keeps them with ``odds=None``.
    With ``field_only`` and a roster, players absent from the roster are removed.
    Output keeps the statistics feed order.
    """
    if missing_market not in (MISSING_MARKET_DROP, MISSING_MARKET_RETAIN):
        raise ValueError(f"invalid missing_market policy: {missing_market!r}")

    def key_fn(name: str) -> str:
        return identity_key(name, fold_accents=fold_accents)

    report = JoinReport()
    stats_by_key = index_by_key(stats, source="stats", report=report, key_fn=key_fn)
    market_by_key = index_by_key(market, source="market", report=report, key_fn=key_fn)
    roster_by_key = (
        index_by_key(roster, source="roster", report=report, key_fn=key_fn)
        if roster is not None
        else None
    )
    report.stats_players = len(stats_by_key)

    players: list[JoinedPlayer] = []
    for key, stats_record in stats_by_key.items():
        slot: str | None = None
        if roster_by_key is not None:
            roster_record = roster_by_key.get(key)
            if roster_record is None and field_only:
                report.dropped_not_in_field += 1
                continue
            if roster_record is not None:
                slot = roster_record.slot

        odds: OddsSummary | None = None
        market_record = market_by_key.get(key)
        if market_record is not None:
            odds = summarize_odds(market_record)
        if odds is None and missing_market == MISSING_MARKET_DROP:
            report.dropped_missing_market += 1
            continue

        if odds is None:
            report.without_odds += 1
        else:
            report.with_odds += 1
        players.append(
            JoinedPlayer(
                key=key,
                name=clean_display_name(stats_record.name) or stats_record.name,
                stats=stats_record,
                odds=odds,
                slot=slot,
            )
        )

    report.unmatched_market = [key for key in market_by_key if key not in stats_by_key]
    report.joined_players = len(players)
    logger.info(
        "joined %d of %d players (%d with odds, %d unmatched market rows)",
        report.joined_players,
        report.stats_players,
        report.with_odds,
        len(report.unmatched_market),
    )
    return JoinResult(players=players, report=report)
