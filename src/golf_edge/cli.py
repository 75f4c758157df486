"""CLI entrypoint for golf-edge."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

from golf_edge.blob_store import FileBlobStore
from golf_edge.cache import PLAYER_DATA_PREFIX, TournamentCache, player_data_cache_key, slugify
from golf_edge.errors import ReconcileError
from golf_edge.event_calendar import event_identity, resolve_current_event
from golf_edge.feed_client import FeedAPIError, FeedClient
from golf_edge.models import JoinedPlayer
from golf_edge.odds_aggregate import rank_by_average_odds, rank_by_decimal_payout
from golf_edge.odds_math import format_american
from golf_edge.pipeline import ClientFeedSource, FeedTimeouts, ReconciliationPipeline
from golf_edge.runtime_config import (
    RuntimeConfig,
    current_runtime_config,
    load_runtime_config,
    set_current_runtime_config,
)
from golf_edge.settings import Settings
from golf_edge.sources import parse_schedule_payload
from golf_edge.time_utils import iso_z, parse_iso_z, utc_now


class CLIError(RuntimeError):
    """User-facing CLI error."""


def _print_json(value: Any) -> None:
    print(json.dumps(value, sort_keys=True, indent=2))


def _runtime(args: argparse.Namespace) -> RuntimeConfig:
    config = current_runtime_config()
    cache_dir = getattr(args, "cache_dir", "")
    if cache_dir:
        config = config.with_path_overrides(cache_dir=Path(cache_dir))
    return config


def _now(args: argparse.Namespace) -> datetime:
    raw = str(getattr(args, "now", "") or "").strip()
    if not raw:
        return utc_now()
    parsed = parse_iso_z(raw)
    if parsed is None:
        raise CLIError(f"invalid --now timestamp: {raw}")
    return parsed


def _tour(args: argparse.Namespace, config: RuntimeConfig) -> str:
    return str(getattr(args, "tour", "") or config.default_tour).strip().lower()


def _timeouts(config: RuntimeConfig) -> FeedTimeouts:
    return FeedTimeouts(
        stats_s=config.stats_timeout_s,
        market_s=config.market_timeout_s,
        roster_s=config.roster_timeout_s,
        history_s=config.history_timeout_s,
    )


def _load_schedule_payload(args: argparse.Namespace, tour: str) -> Any:
    schedule_file = str(getattr(args, "schedule_file", "") or "").strip()
    if schedule_file:
        return json.loads(Path(schedule_file).read_text(encoding="utf-8"))
    with FeedClient(Settings.from_runtime()) as client:
        return client.get_schedule(tour=tour).data


def _cmd_resolve(args: argparse.Namespace) -> int:
    config = _runtime(args)
    tour = _tour(args, config)
    entries = parse_schedule_payload(_load_schedule_payload(args, tour), tour=tour)
    event = resolve_current_event(entries, _now(args), windows=config.resolver)
    identity = event_identity(event)
    _print_json(
        {
            "tour": tour,
            "rule": event.rule,
            "event": identity.to_dict(),
            "signature": identity.signature(),
            "course": event.entry.course,
            "location": event.entry.location,
            "event_id": event.entry.event_id,
            "cache_key": player_data_cache_key(tour, event.name),
        }
    )
    return 0


def _player_row(player: JoinedPlayer) -> dict[str, Any]:
    row = player.to_dict()
    row["price"] = format_american(player.odds.average_raw if player.odds is not None else None)
    return row


def _cmd_reconcile(args: argparse.Namespace) -> int:
    config = _runtime(args)
    tour = _tour(args, config)
    missing_market = str(args.missing_market or config.missing_market)
    cache = TournamentCache(FileBlobStore(config.cache_dir))
    now = _now(args)
    with FeedClient(Settings.from_runtime()) as client:
        pipeline = ReconciliationPipeline(
            ClientFeedSource(
                client, timeouts=_timeouts(config), history_events=config.history_events
            ),
            cache,
            missing_market=missing_market,
            field_only=bool(args.field_only or config.field_only),
            fold_accents=config.fold_accents,
            books=config.books,
            timeouts=_timeouts(config),
            windows=config.resolver,
            thresholds=config.form,
            clock=lambda: now,
        )
        bundle = pipeline.run(tour, refresh=bool(args.refresh))

    players = bundle.players
    if args.rank == "average":
        players = rank_by_average_odds(players)
    elif args.rank == "payout":
        players = rank_by_decimal_payout(players)
    if args.top > 0:
        players = players[: args.top]

    payload = bundle.to_dict()
    payload["players"] = [_player_row(player) for player in players]
    payload["from_cache"] = bundle.from_cache
    _print_json(payload)
    return 0


def _cmd_cache_show(args: argparse.Namespace) -> int:
    config = _runtime(args)
    cache = TournamentCache(FileBlobStore(config.cache_dir))
    key = str(args.key or "").strip()
    event_name = str(args.event_name or "").strip()
    if key:
        entry = cache.get_entry(key)
    elif event_name:
        key = player_data_cache_key(_tour(args, config), event_name)
        entry = cache.get_entry(key)
    else:
        key = f"{PLAYER_DATA_PREFIX}-{slugify(_tour(args, config)) or 'pga'}-"
        entry = cache.latest_for_event(key)
    if entry is None:
        raise CLIError(f"no cache entry for {key}")
    summary = {
        "key": entry.key,
        "created_at": iso_z(entry.created_at),
        "event_identity": entry.event_identity,
    }
    if isinstance(entry.payload, dict):
        summary["players"] = len(entry.payload.get("players", []))
        summary["warnings"] = entry.payload.get("warnings", [])
    _print_json(summary)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="golf-edge")
    parser.add_argument("--config", default="", help="Path to runtime.toml")
    parser.add_argument("--cache-dir", default="")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    subparsers = parser.add_subparsers(dest="command")

    resolve = subparsers.add_parser("resolve", help="Show the event treated as current")
    resolve.set_defaults(func=_cmd_resolve)
    resolve.add_argument("--tour", default="")
    resolve.add_argument("--now", default="", help="Reference instant (ISO-8601)")
    resolve.add_argument("--schedule-file", default="", help="Read the schedule from JSON")

    reconcile = subparsers.add_parser("reconcile", help="Join feeds for the current event")
    reconcile.set_defaults(func=_cmd_reconcile)
    reconcile.add_argument("--tour", default="")
    reconcile.add_argument("--now", default="")
    reconcile.add_argument("--missing-market", choices=["drop", "retain"], default="")
    reconcile.add_argument("--field-only", action="store_true")
    reconcile.add_argument("--refresh", action="store_true")
    reconcile.add_argument("--rank", choices=["none", "average", "payout"], default="none")
    reconcile.add_argument("--top", type=int, default=0)

    cache_show = subparsers.add_parser(
        "cache-show", help="Inspect a cached bundle (newest for the tour by default)"
    )
    cache_show.set_defaults(func=_cmd_cache_show)
    cache_show.add_argument("--key", default="")
    cache_show.add_argument("--tour", default="")
    cache_show.add_argument("--event-name", default="")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 0
    try:
        if args.config:
            set_current_runtime_config(load_runtime_config(Path(args.config)))
        return int(func(args))
    except ReconcileError as exc:
        print(json.dumps(exc.public_dict()), file=sys.stderr)
        return 2
    except (CLIError, FeedAPIError, RuntimeError, FileNotFoundError, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
