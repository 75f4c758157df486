"""Schedule feed adapter."""

from __future__ import annotations

from typing import Any

from golf_edge.event_calendar import parse_date_range
from golf_edge.models import ScheduleEntry
from golf_edge.sources._shape import feed_rows, text_field

FEED = "schedule"


def parse_schedule_payload(payload: Any, *, tour: str = "") -> list[ScheduleEntry]:
    """Convert ``{"schedule": [...]}`` into entries, keeping date strings raw.

    Rows that only carry a display range in ``dates`` (``"Jan 22-26, 2026"``)
    are split into ISO start/end strings. Rows without a name are skipped.
    """
    entries: list[ScheduleEntry] = []
    for row in feed_rows(payload, feed=FEED, field="schedule"):
        name = text_field(row, "event_name")
        if not name:
            continue
        start_raw = text_field(row, "start_date") or None
        end_raw = text_field(row, "end_date") or None
        if start_raw is None:
            span = parse_date_range(text_field(row, "dates"))
            if span is not None:
                start_raw, end_raw = span[0].isoformat(), span[1].isoformat()
        entries.append(
            ScheduleEntry(
                name=name,
                start_raw=start_raw,
                end_raw=end_raw,
                course=text_field(row, "course"),
                location=text_field(row, "location"),
                country=text_field(row, "country"),
                event_id=text_field(row, "event_id"),
                tour=tour,
            )
        )
    return entries
