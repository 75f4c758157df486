"""Recent-form labels from a player's finishing positions."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from datetime import date

from golf_edge.identity import identity_key
from golf_edge.models import (
    MOMENTUM_COLD,
    MOMENTUM_HOT,
    MOMENTUM_STEADY,
    MOMENTUM_UNKNOWN,
    JoinedPlayer,
    Momentum,
    ResultRecord,
)
from golf_edge.util.parsing import first_int

_NON_FINISH_TOKENS = {"MC", "CUT", "WD", "DQ", "DNS", "MDF", "N/A", "NA", "-"}


@dataclass(frozen=True)
class FormThresholds:
    """Window size, margin in positions, and the value used for a missed cut."""

    window: int = 3
    margin: float = 10.0
    missed_cut_position: int = 999


def parse_finish(raw: str | None, *, missed_cut_position: int = 999) -> int:
    """Finishing position from feed text: ``"T5"`` -> 5, ``"MC"`` -> missed cut value."""
    if raw is None:
        return missed_cut_position
    text = str(raw).strip().upper()
    if not text or text in _NON_FINISH_TOKENS:
        return missed_cut_position
    position = first_int(text)
    if position is None or position <= 0:
        return missed_cut_position
    return position


def _position(result: ResultRecord, thresholds: FormThresholds) -> int:
    if result.made_cut is False:
        return thresholds.missed_cut_position
    return parse_finish(result.finish, missed_cut_position=thresholds.missed_cut_position)


def _mean(values: Sequence[int]) -> float:
    return sum(values) / len(values)


def classify_momentum(
    results: Iterable[ResultRecord],
    thresholds: FormThresholds | None = None,
    *,
    before: date | None = None,
) -> Momentum:
    """Compare the newest ``window`` finishes against the ``window`` before them.

    A lower mean position is better. Fewer than two full windows of results
    yields ``"unknown"``. Results without a date sort after dated ones. With
    ``before`` set, results dated on or after it are ignored.
    """
    thresholds = thresholds or FormThresholds()
    if before is not None:
        results = [
            result
            for result in results
            if result.event_date is None or result.event_date < before
        ]
    ordered = sorted(
        results,
        key=lambda result: result.event_date or date.min,
        reverse=True,
    )
    window = thresholds.window
    if window <= 0 or len(ordered) < window * 2:
        return MOMENTUM_UNKNOWN

    recent = [_position(result, thresholds) for result in ordered[:window]]
    older = [_position(result, thresholds) for result in ordered[window : window * 2]]
    recent_mean = _mean(recent)
    older_mean = _mean(older)
    if recent_mean < older_mean - thresholds.margin:
        return MOMENTUM_HOT
    if recent_mean > older_mean + thresholds.margin:
        return MOMENTUM_COLD
    return MOMENTUM_STEADY


def group_results_by_key(
    results: Iterable[ResultRecord], *, fold_accents: bool = True
) -> dict[str, list[ResultRecord]]:
    grouped: dict[str, list[ResultRecord]] = {}
    for result in results:
        key = identity_key(result.name, fold_accents=fold_accents)
        if not key:
            continue
        grouped.setdefault(key, []).append(result)
    return grouped


def momentum_by_key(
    history: Mapping[str, Sequence[ResultRecord]],
    thresholds: FormThresholds | None = None,
    *,
    before: date | None = None,
) -> dict[str, Momentum]:
    return {
        key: classify_momentum(rows, thresholds, before=before) for key, rows in history.items()
    }


def attach_momentum(
    players: Iterable[JoinedPlayer], labels: Mapping[str, Momentum]
) -> list[JoinedPlayer]:
    """Return copies of ``players`` labelled from ``labels``; missing keys get ``"unknown"``."""
    return [
        replace(player, momentum=labels.get(player.key, MOMENTUM_UNKNOWN)) for player in players
    ]
