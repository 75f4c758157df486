from __future__ import annotations

import pytest

from golf_edge.errors import PriceFormatError
from golf_edge.joiner import join_sources
from golf_edge.models import MarketRecord, RosterRecord, StatsRecord


def _stats() -> list[StatsRecord]:
    return [
        StatsRecord(name="Scheffler, Scottie", rank=1, skill_deltas={"sg_total": 3.1}),
        StatsRecord(name="McIlroy, Rory", rank=2, skill_deltas={"sg_total": 2.4}),
        StatsRecord(name="Åberg, Ludvig", rank=3, skill_deltas={"sg_total": 2.0}),
    ]


def _market() -> list[MarketRecord]:
    return [
        MarketRecord(name="Scottie Scheffler", book_prices={"draftkings": 450, "fanduel": 500}),
        MarketRecord(name="Ludvig Aberg", book_prices={"draftkings": 1800}),
        MarketRecord(name="Jon Rahm", book_prices={"draftkings": 1200}),
    ]


def test_join_retains_players_without_market() -> None:
    result = join_sources(_stats(), _market(), missing_market="retain")

    by_key = {player.key: player for player in result.players}
    assert [player.name for player in result.players] == [
        "Scottie Scheffler",
        "Rory McIlroy",
        "Ludvig Åberg",
    ]
    assert by_key["rory mcilroy"].odds is None
    assert by_key["scheffler scottie"].odds is not None
    assert by_key["scheffler scottie"].odds.average_raw == 475
    assert by_key["aberg ludvig"].odds is not None
    assert result.report.with_odds == 2
    assert result.report.without_odds == 1
    assert result.report.unmatched_market == ["jon rahm"]


def test_join_drops_players_without_market() -> None:
    result = join_sources(_stats(), _market(), missing_market="drop")

    assert [player.key for player in result.players] == ["scheffler scottie", "aberg ludvig"]
    assert result.report.dropped_missing_market == 1


def test_player_with_only_invalid_prices_has_no_summary() -> None:
    market = [MarketRecord(name="Rory McIlroy", book_prices={"draftkings": None, "fanduel": 0})]

    result = join_sources(_stats()[1:2], market, missing_market="retain")

    assert result.players[0].odds is None


def test_invalid_policy_is_rejected() -> None:
    with pytest.raises(ValueError, match="missing_market"):
        join_sources(_stats(), _market(), missing_market="keep")  # type: ignore[arg-type]


def test_duplicates_keep_first_record() -> None:
    stats = _stats() + [StatsRecord(name="Scottie Scheffler", rank=99)]
    market = _market() + [MarketRecord(name="Scheffler, Scottie", book_prices={"bovada": 100})]

    result = join_sources(stats, market, missing_market="retain")

    scheffler = next(player for player in result.players if player.key == "scheffler scottie")
    assert scheffler.stats is not None
    assert scheffler.stats.rank == 1
    assert scheffler.odds is not None
    assert scheffler.odds.source_count == 2
    assert result.report.duplicate_keys == {"stats": 1, "market": 1}


def test_roster_slot_and_field_filter() -> None:
    roster = [
        RosterRecord(name="Scottie Scheffler", slot="08:35"),
        RosterRecord(name="Rory McIlroy"),
    ]

    everyone = join_sources(_stats(), _market(), roster, missing_market="retain")
    field_only = join_sources(
        _stats(), _market(), roster, missing_market="retain", field_only=True
    )

    assert len(everyone.players) == 3
    assert everyone.players[0].slot == "08:35"
    assert [player.key for player in field_only.players] == ["scheffler scottie", "mcilroy rory"]
    assert field_only.report.dropped_not_in_field == 1


def test_blank_names_are_counted() -> None:
    stats = [StatsRecord(name="", rank=None), StatsRecord(name="!!!", rank=None)]

    result = join_sources(stats, [], missing_market="retain")

    assert result.players == []
    assert result.report.blank_names == 2


def test_non_american_market_raises() -> None:
    market = [
        MarketRecord(name="Rory McIlroy", book_prices={"pinnacle": 8.0}, price_format="decimal")
    ]

    with pytest.raises(PriceFormatError):
        join_sources(_stats(), market, missing_market="retain")


def test_legacy_keys_miss_accented_names() -> None:
    result = join_sources(_stats(), _market(), missing_market="drop", fold_accents=False)

    assert [player.key for player in result.players] == ["scheffler scottie"]
