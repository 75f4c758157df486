"""Tournament field (roster) adapter."""

from __future__ import annotations

from typing import Any

from golf_edge.models import RosterRecord
from golf_edge.sources._shape import feed_rows, text_field

FEED = "roster"


def parse_field_payload(payload: Any) -> list[RosterRecord]:
    records: list[RosterRecord] = []
    for row in feed_rows(payload, feed=FEED, field="field"):
        name = text_field(row, "player_name")
        if not name:
            continue
        slot = text_field(row, "slot") or text_field(row, "tee_time")
        records.append(RosterRecord(name=name, slot=slot or None))
    return records
