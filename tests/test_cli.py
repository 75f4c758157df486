from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any

import httpx
import pytest

from golf_edge import cli
from golf_edge.blob_store import FileBlobStore
from golf_edge.cache import TournamentCache, player_data_cache_key
from golf_edge.cli import main
from golf_edge.feed_client import FeedClient
from golf_edge.models import EventIdentity


def _write_schedule(path: Path) -> Path:
    path.write_text(
        json.dumps(
            {
                "schedule": [
                    {
                        "event_name": "Event A",
                        "start_date": "2026-01-15",
                        "end_date": "2026-01-18",
                        "course": "Waialae Country Club",
                        "event_id": "6",
                    },
                    {"event_name": "Event B", "dates": "Jan 22-25, 2026"},
                ]
            }
        ),
        encoding="utf-8",
    )
    return path


def test_cli_resolve_prints_current_event(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    schedule = _write_schedule(tmp_path / "schedule.json")

    code = main(
        ["resolve", "--schedule-file", str(schedule), "--now", "2026-01-16T12:00:00Z"]
    )

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["event"] == {"name": "Event A", "start": "2026-01-15", "end": "2026-01-18"}
    assert payload["rule"] == "in_progress"
    assert payload["course"] == "Waialae Country Club"
    assert payload["cache_key"] == "player-data-pga-event-a"


def test_cli_resolve_uses_display_date_ranges(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    schedule = _write_schedule(tmp_path / "schedule.json")

    code = main(
        ["resolve", "--schedule-file", str(schedule), "--now", "2026-01-20T12:00:00Z"]
    )

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["event"]["name"] == "Event B"
    assert payload["rule"] == "upcoming_soon"


def test_cli_resolve_surfaces_reason_only(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    schedule = tmp_path / "schedule.json"
    schedule.write_text(json.dumps({"schedule": [{"event_name": "TBD"}]}), encoding="utf-8")

    code = main(["resolve", "--schedule-file", str(schedule)])

    assert code == 2
    assert json.loads(capsys.readouterr().err) == {"error": "no_parseable_events"}


def test_cli_rejects_bad_now(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    schedule = _write_schedule(tmp_path / "schedule.json")

    code = main(["resolve", "--schedule-file", str(schedule), "--now", "yesterday"])

    assert code == 2
    assert "invalid --now" in capsys.readouterr().err


def test_cli_cache_show(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    identity = EventIdentity(name="Event A", start=date(2026, 1, 15), end=date(2026, 1, 18))
    cache = TournamentCache(FileBlobStore(tmp_path))
    cache.put(
        player_data_cache_key("pga", "Event A"),
        identity,
        {"players": [{"key": "a"}, {"key": "b"}], "warnings": []},
    )

    code = main(["--cache-dir", str(tmp_path), "cache-show", "--event-name", "Event A"])

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["key"] == "player-data-pga-event-a"
    assert payload["event_identity"] == "event a|2026-01-15|2026-01-18"
    assert payload["players"] == 2


def test_cli_cache_show_missing_entry(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--cache-dir", str(tmp_path), "cache-show", "--key", "player-data-pga-none"])

    assert code == 2
    assert "no cache entry" in capsys.readouterr().err


def test_cli_without_command_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    assert main([]) == 0
    assert "golf-edge" in capsys.readouterr().out


def _stub_feed_client(monkeypatch: pytest.MonkeyPatch, datagolf: Any) -> None:
    monkeypatch.setenv("DATAGOLF_API_KEY", "test-key")
    monkeypatch.setattr(
        cli,
        "FeedClient",
        lambda settings: FeedClient(
            settings, transport=httpx.MockTransport(datagolf), wait=lambda _: 0.0
        ),
    )


def test_cli_reconcile_ranks_and_caches(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    datagolf: Any,
) -> None:
    _stub_feed_client(monkeypatch, datagolf)
    argv = [
        "--cache-dir",
        str(tmp_path),
        "reconcile",
        "--now",
        "2026-04-10T15:00:00Z",
        "--rank",
        "average",
        "--top",
        "1",
    ]

    assert main(argv) == 0
    first = json.loads(capsys.readouterr().out)
    assert first["from_cache"] is False
    assert first["event"]["name"] == "The Masters"
    assert [player["key"] for player in first["players"]] == ["scheffler scottie"]
    assert first["players"][0]["price"] == "+477"
    assert first["players"][0]["momentum"] == "hot"
    assert first["report"]["stats_players"] == 3

    assert main(argv) == 0
    second = json.loads(capsys.readouterr().out)
    assert second["from_cache"] is True
    assert second["players"] == first["players"]


def test_cli_reconcile_drop_policy(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    datagolf: Any,
) -> None:
    _stub_feed_client(monkeypatch, datagolf)

    code = main(
        [
            "--cache-dir",
            str(tmp_path),
            "reconcile",
            "--now",
            "2026-04-10T15:00:00Z",
            "--missing-market",
            "drop",
            "--rank",
            "payout",
        ]
    )

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert [player["key"] for player in payload["players"]] == [
        "aberg ludvig",
        "scheffler scottie",
    ]
    assert [player["price"] for player in payload["players"]] == ["+1800", "+477"]


def test_cli_reconcile_without_key_fails_cleanly(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr("golf_edge.runtime_config._CURRENT_RUNTIME_CONFIG", None)
    monkeypatch.delenv("DATAGOLF_API_KEY", raising=False)
    monkeypatch.delenv("GOLF_EDGE_DATAGOLF_API_KEY", raising=False)
    config = tmp_path / "runtime.toml"
    config.write_text('[feeds]\nkey_files = ["MISSING"]\n', encoding="utf-8")

    code = main(["--config", str(config), "--cache-dir", str(tmp_path), "reconcile"])

    assert code == 2
    assert json.loads(capsys.readouterr().err) == {"error": "unavailable:schedule"}


def test_cli_cache_show_defaults_to_newest_entry_for_tour(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    cache = TournamentCache(FileBlobStore(tmp_path))
    cache.put(
        player_data_cache_key("pga", "Event A"),
        EventIdentity(name="Event A", start=date(2026, 1, 15), end=date(2026, 1, 18)),
        {"players": [], "warnings": []},
    )
    cache.put(
        player_data_cache_key("pga", "Event B"),
        EventIdentity(name="Event B", start=date(2026, 1, 22), end=date(2026, 1, 25)),
        {"players": [{"key": "a"}], "warnings": []},
    )

    code = main(["--cache-dir", str(tmp_path), "cache-show"])

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["key"] == "player-data-pga-event-b"
