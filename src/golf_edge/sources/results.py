"""Historical results adapters feeding the form estimator.

The provider exposes finishes one event at a time: an event list
(``[{"event_id", "event_name", "calendar_year", "date"}]``) and, per event,
``{"event_name", "event_completed", "event_stats": [{"player_name", "fin_text"}]}``.
A player's recent form is assembled from the finishes of several past events.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date
from typing import Any

from golf_edge.errors import SourceUnavailable
from golf_edge.event_calendar import parse_event_date
from golf_edge.models import PastEvent, ResultRecord
from golf_edge.sources._shape import expect_list, feed_rows, text_field
from golf_edge.util.parsing import safe_int

logger = logging.getLogger(__name__)

FEED = "history"


def _as_date(raw: str) -> date | None:
    parsed = parse_event_date(raw)
    return parsed.date() if parsed is not None else None


def parse_event_list_payload(payload: Any) -> list[PastEvent]:
    """Completed events from the event list; rows without an id or season are skipped."""
    events: list[PastEvent] = []
    for index, row in enumerate(expect_list(payload, feed=FEED, context="event_list")):
        if not isinstance(row, dict):
            logger.warning("skipping event list row %d: not an object", index)
            continue
        event_id = text_field(row, "event_id")
        year = safe_int(row.get("calendar_year"))
        if not event_id or year is None:
            continue
        events.append(
            PastEvent(
                event_id=event_id,
                year=year,
                name=text_field(row, "event_name"),
                completed=_as_date(text_field(row, "date")),
            )
        )
    return events


def _is_current(event: PastEvent, event_id: str, year: int) -> bool:
    return bool(event_id) and event.event_id == event_id and event.year == year


def select_past_events(
    events: Sequence[PastEvent],
    *,
    before: date,
    limit: int,
    exclude_event_id: str = "",
) -> list[PastEvent]:
    """Newest ``limit`` events completed before ``before``, excluding the current event."""
    eligible = [
        event
        for event in events
        if event.completed is not None
        and event.completed < before
        and not _is_current(event, exclude_event_id, before.year)
    ]
    eligible.sort(key=lambda event: event.completed or date.min, reverse=True)
    return eligible[: max(0, limit)]


def parse_results_payload(payload: Any, *, event: PastEvent | None = None) -> list[ResultRecord]:
    """Finishes for one event; ``event`` fills the name and date the payload omits."""
    body_rows = feed_rows(payload, feed=FEED, field="event_stats")
    completed = _as_date(text_field(payload, "event_completed"))
    if completed is None and event is not None:
        completed = event.completed
    event_name = text_field(payload, "event_name") or (event.name if event is not None else "")

    records: list[ResultRecord] = []
    for row in body_rows:
        name = text_field(row, "player_name")
        if not name:
            continue
        records.append(
            ResultRecord(
                name=name,
                finish=text_field(row, "fin_text"),
                event_date=completed,
                event_name=event_name,
            )
        )
    return records


def parse_history_payloads(payloads: Any) -> list[ResultRecord]:
    """Finishes across several event payloads.

    An unusable event payload is logged and skipped. When none of a non-empty
    set is usable the feed is treated as malformed.
    """
    rows = expect_list(payloads, feed=FEED, context="history_payloads")
    records: list[ResultRecord] = []
    usable = 0
    for index, payload in enumerate(rows):
        try:
            records.extend(parse_results_payload(payload))
        except SourceUnavailable as exc:
            logger.warning("skipping history payload %d: %s", index, exc)
            continue
        usable += 1
    if rows and not usable:
        raise SourceUnavailable(FEED, "no usable event payloads", kind="bad_shape")
    return records
