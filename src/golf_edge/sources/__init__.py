"""Adapters turning raw feed payloads into typed records."""

from golf_edge.sources.field import parse_field_payload
from golf_edge.sources.market import KNOWN_BOOKS, parse_market_payload
from golf_edge.sources.results import (
    parse_event_list_payload,
    parse_history_payloads,
    parse_results_payload,
    select_past_events,
)
from golf_edge.sources.schedule import parse_schedule_payload
from golf_edge.sources.stats import SKILL_FIELDS, parse_stats_payload

__all__ = [
    "KNOWN_BOOKS",
    "SKILL_FIELDS",
    "parse_field_payload",
    "parse_market_payload",
    "parse_event_list_payload",
    "parse_history_payloads",
    "parse_results_payload",
    "parse_schedule_payload",
    "parse_stats_payload",
    "select_past_events",
]
