"""Typed records shared by the source adapters, joiner, and cache."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Literal

Momentum = Literal["hot", "cold", "steady", "unknown"]

MOMENTUM_HOT: Momentum = "hot"
MOMENTUM_COLD: Momentum = "cold"
MOMENTUM_STEADY: Momentum = "steady"
MOMENTUM_UNKNOWN: Momentum = "unknown"

PRICE_FORMAT_AMERICAN = "american"


@dataclass(frozen=True)
class ScheduleEntry:
    """One row of a tournament calendar, with its raw date strings."""

    name: str
    start_raw: str | None
    end_raw: str | None = None
    course: str = ""
    location: str = ""
    country: str = ""
    event_id: str = ""
    tour: str = ""


@dataclass(frozen=True)
class ResolvedEvent:
    """Schedule entry chosen as current, with parsed bounds and the rule that won."""

    entry: ScheduleEntry
    start: datetime
    end: datetime
    rule: str

    @property
    def name(self) -> str:
        return self.entry.name


@dataclass(frozen=True)
class EventIdentity:
    """Name + date signature a reconciliation run is keyed against."""

    name: str
    start: date
    end: date

    def signature(self) -> str:
        normalized = " ".join(self.name.lower().split())
        return f"{normalized}|{self.start.isoformat()}|{self.end.isoformat()}"

    def to_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
        }


@dataclass(frozen=True)
class StatsRecord:
    name: str
    rank: int | None
    skill_deltas: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class MarketRecord:
    name: str
    book_prices: dict[str, Any]
    price_format: str = PRICE_FORMAT_AMERICAN


@dataclass(frozen=True)
class RosterRecord:
    name: str
    slot: str | None = None


@dataclass(frozen=True)
class ResultRecord:
    """One finish from a completed event."""

    name: str
    finish: str
    event_date: date | None
    event_name: str = ""
    made_cut: bool | None = None


@dataclass(frozen=True)
class PastEvent:
    """A completed event listed by the historical results feed."""

    event_id: str
    year: int
    name: str
    completed: date | None = None


PlayerRecord = StatsRecord | MarketRecord | RosterRecord


@dataclass(frozen=True)
class OddsSummary:
    """Reduced view of one player's prices across sportsbooks."""

    average_raw: int
    best_raw: int
    worst_raw: int
    best_decimal: float
    worst_decimal: float
    source_count: int
    best_book: str = ""
    worst_book: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "average_raw": self.average_raw,
            "best_raw": self.best_raw,
            "worst_raw": self.worst_raw,
            "best_decimal": self.best_decimal,
            "worst_decimal": self.worst_decimal,
            "source_count": self.source_count,
            "best_book": self.best_book,
            "worst_book": self.worst_book,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> OddsSummary:
        return cls(
            average_raw=int(payload["average_raw"]),
            best_raw=int(payload["best_raw"]),
            worst_raw=int(payload["worst_raw"]),
            best_decimal=float(payload["best_decimal"]),
            worst_decimal=float(payload["worst_decimal"]),
            source_count=int(payload["source_count"]),
            best_book=str(payload.get("best_book", "")),
            worst_book=str(payload.get("worst_book", "")),
        )


@dataclass(frozen=True)
class JoinedPlayer:
    """A player reconciled across feeds; the whole contract with downstream consumers."""

    key: str
    name: str
    stats: StatsRecord | None = None
    odds: OddsSummary | None = None
    slot: str | None = None
    momentum: Momentum | None = None

    def to_dict(self) -> dict[str, Any]:
        stats = None
        if self.stats is not None:
            stats = {
                "name": self.stats.name,
                "rank": self.stats.rank,
                "skill_deltas": dict(self.stats.skill_deltas),
            }
        return {
            "key": self.key,
            "name": self.name,
            "stats": stats,
            "odds": self.odds.to_dict() if self.odds is not None else None,
            "slot": self.slot,
            "momentum": self.momentum,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> JoinedPlayer:
        raw_stats = payload.get("stats")
        stats = None
        if isinstance(raw_stats, dict):
            rank = raw_stats.get("rank")
            stats = StatsRecord(
                name=str(raw_stats.get("name", "")),
                rank=int(rank) if rank is not None else None,
                skill_deltas={
                    str(key): float(value)
                    for key, value in dict(raw_stats.get("skill_deltas", {})).items()
                },
            )
        raw_odds = payload.get("odds")
        slot = payload.get("slot")
        return cls(
            key=str(payload["key"]),
            name=str(payload.get("name", "")),
            stats=stats,
            odds=OddsSummary.from_dict(raw_odds) if isinstance(raw_odds, dict) else None,
            slot=str(slot) if slot is not None else None,
            momentum=payload.get("momentum"),
        )
