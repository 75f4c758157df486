"""Pick the tournament to treat as current from noisy schedule data.

Schedule feeds disagree on date shapes and frequently omit end dates. Dates are
handled at day granularity in UTC: an entry runs from midnight of its start day
until the end of its last day. Rules are tried in order and the first match
wins:

1. in progress: ``start <= now`` and the last day has not finished;
2. upcoming soon: starts within the next ``upcoming_days``;
3. recently ended: finished within the last ``recent_days`` (latest first);
4. next future: first entry starting after ``now``;
5. fallback: chronologically last entry.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta

from golf_edge.errors import EventNotFound, ParseFailure
from golf_edge.models import EventIdentity, ResolvedEvent, ScheduleEntry
from golf_edge.time_utils import as_utc, parse_iso_z

logger = logging.getLogger(__name__)

RULE_IN_PROGRESS = "in_progress"
RULE_UPCOMING_SOON = "upcoming_soon"
RULE_RECENTLY_ENDED = "recently_ended"
RULE_NEXT_FUTURE = "next_future"
RULE_FALLBACK_LAST = "fallback_last"

_DATE_FORMATS = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%b %d %Y",
    "%B %d %Y",
    "%d %b %Y",
    "%d %B %Y",
    "%Y%m%d",
)
_ORDINAL_RE = re.compile(r"(?<=\d)(st|nd|rd|th)\b", re.IGNORECASE)
_SAME_MONTH_RANGE_RE = re.compile(
    r"^(?P<month>[a-z]+)\.?\s+(?P<day1>\d{1,2})\s*[-–]\s*(?P<day2>\d{1,2}),?\s+(?P<year>\d{4})$",
    re.IGNORECASE,
)
_CROSS_MONTH_RANGE_RE = re.compile(
    r"^(?P<month1>[a-z]+)\.?\s+(?P<day1>\d{1,2})\s*[-–]\s*"
    r"(?P<month2>[a-z]+)\.?\s+(?P<day2>\d{1,2}),?\s+(?P<year>\d{4})$",
    re.IGNORECASE,
)
_MONTHS = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}


@dataclass(frozen=True)
class ResolverWindows:
    """Day counts used by the resolver rules."""

    duration_days: int = 3
    upcoming_days: int = 14
    recent_days: int = 7


def _start_of_day(value: date) -> datetime:
    return datetime.combine(value, time(), tzinfo=UTC)


def parse_event_date(raw: str | None) -> datetime | None:
    """Parse one schedule date string to midnight UTC of that day.

    Accepts ISO dates and datetimes, ``MM/DD/YYYY``, ``Jan 15, 2026``,
    ``January 15 2026``, ``15 Jan 2026`` and ``20260115``. Returns None when no
    shape matches.
    """
    if raw is None:
        return None
    text = " ".join(str(raw).split())
    if not text:
        return None
    parsed = parse_iso_z(text)
    if parsed is not None:
        return _start_of_day(parsed.date())
    text = _ORDINAL_RE.sub("", text)
    for fmt in _DATE_FORMATS:
        try:
            return _start_of_day(datetime.strptime(text, fmt).date())
        except ValueError:
            continue
    return None


def _month_number(token: str) -> int | None:
    return _MONTHS.get(token.strip().lower()[:3])


def parse_date_range(text: str | None) -> tuple[date, date] | None:
    """Split a display range such as ``Jan 22-26, 2026`` into start and end dates."""
    if not text:
        return None
    raw = " ".join(str(text).split())
    try:
        same = _SAME_MONTH_RANGE_RE.match(raw)
        if same:
            month = _month_number(same.group("month"))
            if month is None:
                return None
            year = int(same.group("year"))
            start = date(year, month, int(same.group("day1")))
            end = date(year, month, int(same.group("day2")))
            return (start, end) if end >= start else None

        cross = _CROSS_MONTH_RANGE_RE.match(raw)
        if cross:
            month1 = _month_number(cross.group("month1"))
            month2 = _month_number(cross.group("month2"))
            if month1 is None or month2 is None:
                return None
            year = int(cross.group("year"))
            start_year = year - 1 if month1 > month2 else year
            start = date(start_year, month1, int(cross.group("day1")))
            end = date(year, month2, int(cross.group("day2")))
            return (start, end) if end >= start else None
    except ValueError:
        return None

    for separator in (" - ", " – ", " to "):
        if separator not in raw:
            continue
        left, right = raw.split(separator, 1)
        start_dt = parse_event_date(left)
        end_dt = parse_event_date(right)
        if start_dt is not None and end_dt is not None and end_dt >= start_dt:
            return start_dt.date(), end_dt.date()
    return None


def _parse_entry(entry: ScheduleEntry, windows: ResolverWindows) -> tuple[datetime, datetime]:
    start = parse_event_date(entry.start_raw)
    if start is None:
        raise ParseFailure(
            f"unparseable start date {entry.start_raw!r} for {entry.name!r}",
            reason="unparseable_start",
        )
    end = parse_event_date(entry.end_raw)
    if end is None or end < start:
        if entry.end_raw:
            logger.warning(
                "ignoring end date %r for %r; using start + %d days",
                entry.end_raw,
                entry.name,
                windows.duration_days,
            )
        end = start + timedelta(days=windows.duration_days)
    return start, end


def parse_schedule(
    entries: Sequence[ScheduleEntry], windows: ResolverWindows | None = None
) -> list[tuple[ScheduleEntry, datetime, datetime]]:
    """Parse entries, dropping unparseable ones, sorted by start ascending (stable)."""
    windows = windows or ResolverWindows()
    parsed: list[tuple[ScheduleEntry, datetime, datetime]] = []
    for entry in entries:
        try:
            start, end = _parse_entry(entry, windows)
        except ParseFailure as exc:
            logger.warning("dropping schedule entry: %s", exc)
            continue
        parsed.append((entry, start, end))
    parsed.sort(key=lambda item: item[1])
    return parsed


def _finished_at(end: datetime) -> datetime:
    return end + timedelta(days=1)


def resolve_current_event(
    entries: Sequence[ScheduleEntry],
    now: datetime,
    *,
    windows: ResolverWindows | None = None,
) -> ResolvedEvent:
    """Return the one schedule entry to treat as current.

    Raises ``EventNotFound`` when no entry has a parseable start date; callers
    fall back to a static dataset rather than inventing a date.
    """
    windows = windows or ResolverWindows()
    reference = as_utc(now)
    parsed = parse_schedule(entries, windows)
    if not parsed:
        raise EventNotFound(f"no parseable schedule entries out of {len(entries)}")

    def resolved(item: tuple[ScheduleEntry, datetime, datetime], rule: str) -> ResolvedEvent:
        entry, start, end = item
        logger.info("resolved current event %r via %s", entry.name, rule)
        return ResolvedEvent(entry=entry, start=start, end=end, rule=rule)

    for item in parsed:
        _, start, end = item
        if start <= reference < _finished_at(end):
            return resolved(item, RULE_IN_PROGRESS)

    upcoming_limit = reference + timedelta(days=windows.upcoming_days)
    for item in parsed:
        if reference < item[1] <= upcoming_limit:
            return resolved(item, RULE_UPCOMING_SOON)

    recent_limit = reference - timedelta(days=windows.recent_days)
    for item in reversed(parsed):
        if recent_limit <= _finished_at(item[2]) <= reference:
            return resolved(item, RULE_RECENTLY_ENDED)

    for item in parsed:
        if item[1] > reference:
            return resolved(item, RULE_NEXT_FUTURE)

    return resolved(parsed[-1], RULE_FALLBACK_LAST)


def event_identity(event: ResolvedEvent) -> EventIdentity:
    """Identity signature used as the cache validity boundary."""
    return EventIdentity(name=event.name, start=event.start.date(), end=event.end.date())
