"""Skill-ratings feed adapter (the primary source)."""

from __future__ import annotations

from typing import Any

from golf_edge.models import StatsRecord
from golf_edge.sources._shape import feed_rows, text_field
from golf_edge.util.parsing import safe_float, safe_int

FEED = "stats"
SKILL_FIELDS = ("sg_total", "sg_ott", "sg_app", "sg_arg", "sg_putt")


def parse_stats_payload(payload: Any) -> list[StatsRecord]:
    records: list[StatsRecord] = []
    for row in feed_rows(payload, feed=FEED, field="players"):
        name = text_field(row, "player_name")
        if not name:
            continue
        rank_raw = row.get("datagolf_rank")
        if rank_raw is None:
            rank_raw = row.get("rank")
        deltas: dict[str, float] = {}
        for skill in SKILL_FIELDS:
            value = safe_float(row.get(skill))
            if value is not None:
                deltas[skill] = value
        records.append(StatsRecord(name=name, rank=safe_int(rank_raw), skill_deltas=deltas))
    return records
