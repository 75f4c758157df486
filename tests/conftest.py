from __future__ import annotations

from typing import Any

import httpx
import pytest

PAST_EVENTS = [
    ("9", "Valero Texas Open", "2026-04-05", "1"),
    ("8", "Houston Open", "2026-03-29", "T2"),
    ("7", "Valspar Championship", "2026-03-22", "4"),
    ("6", "The Players Championship", "2026-03-15", "T20"),
    ("5", "Arnold Palmer Invitational", "2026-03-08", "30"),
    ("4", "Cognizant Classic", "2026-03-01", "MC"),
]


def _schedule() -> dict[str, Any]:
    return {
        "schedule": [
            {"event_name": "Valero Texas Open", "start_date": "2026-04-02", "event_id": "9"},
            {
                "event_name": "The Masters",
                "start_date": "2026-04-09",
                "end_date": "2026-04-12",
                "course": "Augusta National Golf Club",
                "event_id": "14",
            },
        ]
    }


def _event_list() -> list[dict[str, Any]]:
    rows = [
        {"event_id": event_id, "event_name": name, "calendar_year": 2026, "date": completed}
        for event_id, name, completed, _ in PAST_EVENTS
    ]
    rows.append(
        {"event_id": "14", "event_name": "The Masters", "calendar_year": 2025, "date": "2025-04-13"}
    )
    return rows


def _event_results(event_id: str) -> dict[str, Any]:
    for past_id, name, completed, finish in PAST_EVENTS:
        if past_id != event_id:
            continue
        payload: dict[str, Any] = {
            "event_name": name,
            "event_stats": [
                {"player_name": "Scheffler, Scottie", "fin_text": finish},
                {"player_name": "McIlroy, Rory", "fin_text": "T10"},
            ],
        }
        # The event list supplies the completion date for this one.
        if event_id != "7":
            payload["event_completed"] = completed
        return payload
    return {
        "event_name": "The Masters",
        "event_completed": "2025-04-13",
        "event_stats": [{"player_name": "Scheffler, Scottie", "fin_text": "MC"}],
    }


class DataGolfStub:
    """In-process stand-in for the feed provider, recording every request."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.strip("/")
        if path == "get-schedule":
            return httpx.Response(200, json=_schedule())
        if path == "preds/skill-ratings":
            return httpx.Response(
                200,
                json={
                    "players": [
                        {"player_name": "Scheffler, Scottie", "datagolf_rank": 1, "sg_total": 3.1},
                        {"player_name": "McIlroy, Rory", "datagolf_rank": 2, "sg_total": 2.4},
                        {"player_name": "Åberg, Ludvig", "datagolf_rank": 3, "sg_total": 2.0},
                    ]
                },
            )
        if path == "betting-tools/outrights":
            return httpx.Response(
                200,
                json={
                    "odds_format": "american",
                    "odds": [
                        {
                            "player_name": "Scottie Scheffler",
                            "draftkings": 450,
                            "fanduel": 500,
                            "betmgm": 480,
                        },
                        {"player_name": "Ludvig Aberg", "draftkings": "+1800"},
                    ],
                },
            )
        if path == "field-updates":
            return httpx.Response(
                200,
                json={
                    "field": [
                        {"player_name": "Scheffler, Scottie", "tee_time": "10:30"},
                        {"player_name": "McIlroy, Rory", "tee_time": "10:41"},
                        {"player_name": "Aberg, Ludvig", "tee_time": "10:52"},
                    ]
                },
            )
        if path == "historical-event-data/event-list":
            return httpx.Response(200, json=_event_list())
        if path == "historical-event-data/events":
            return httpx.Response(200, json=_event_results(request.url.params["event_id"]))
        return httpx.Response(404, json={"error": path})

    def result_requests(self) -> list[tuple[str, str]]:
        return [
            (request.url.params["event_id"], request.url.params["year"])
            for request in self.requests
            if request.url.path.strip("/") == "historical-event-data/events"
        ]


@pytest.fixture
def datagolf() -> DataGolfStub:
    return DataGolfStub()
