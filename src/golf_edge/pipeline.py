"""Resolve the current event, fetch feeds concurrently, join, and cache the bundle."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Protocol

from golf_edge.cache import CACHE_MISS, TournamentCache, player_data_cache_key
from golf_edge.errors import (
    PriceFormatError,
    PrimarySourceUnavailable,
    ReconcileError,
    SourceUnavailable,
)
from golf_edge.event_calendar import ResolverWindows, event_identity, resolve_current_event
from golf_edge.feed_client import FeedAPIError, FeedClient
from golf_edge.form import FormThresholds, attach_momentum, group_results_by_key, momentum_by_key
from golf_edge.joiner import (
    MISSING_MARKET_RETAIN,
    JoinResult,
    MissingMarketPolicy,
    join_sources,
)
from golf_edge.models import (
    EventIdentity,
    JoinedPlayer,
    MarketRecord,
    PastEvent,
    ResolvedEvent,
    ResultRecord,
    RosterRecord,
    StatsRecord,
)
from golf_edge.sources import (
    KNOWN_BOOKS,
    parse_field_payload,
    parse_market_payload,
    parse_event_list_payload,
    parse_history_payloads,
    parse_schedule_payload,
    parse_stats_payload,
    select_past_events,
)
from golf_edge.time_utils import iso_z, utc_now

logger = logging.getLogger(__name__)

FEED_STATS = "stats"
FEED_MARKET = "market"
FEED_ROSTER = "roster"
FEED_HISTORY = "history"

OPTIONAL_FEEDS = frozenset({FEED_HISTORY})


class FeedSource(Protocol):
    """Raw payload provider for each feed."""

    def schedule(self, tour: str) -> Any: ...

    def stats(self, tour: str, event: ResolvedEvent) -> Any: ...

    def market(self, tour: str, event: ResolvedEvent) -> Any: ...

    def roster(self, tour: str, event: ResolvedEvent) -> Any: ...

    def history(self, tour: str, event: ResolvedEvent) -> Any: ...


@dataclass(frozen=True)
class FeedTimeouts:
    stats_s: float = 30.0
    market_s: float = 20.0
    roster_s: float = 15.0
    history_s: float = 10.0


class ClientFeedSource:
    """``FeedSource`` backed by ``FeedClient``.

    ``history`` returns one results payload per past event: the newest
    ``history_events`` events completed before the current one starts.
    """

    def __init__(
        self,
        client: FeedClient,
        *,
        timeouts: FeedTimeouts | None = None,
        history_events: int = 12,
        history_workers: int = 4,
    ) -> None:
        self.client = client
        self.timeouts = timeouts or FeedTimeouts()
        self.history_events = history_events
        self.history_workers = max(1, history_workers)

    def schedule(self, tour: str) -> Any:
        return self.client.get_schedule(tour=tour).data

    def stats(self, tour: str, event: ResolvedEvent) -> Any:
        return self.client.get_skill_ratings(timeout_s=self.timeouts.stats_s).data

    def market(self, tour: str, event: ResolvedEvent) -> Any:
        return self.client.get_outrights(tour=tour, timeout_s=self.timeouts.market_s).data

    def roster(self, tour: str, event: ResolvedEvent) -> Any:
        return self.client.get_field(tour=tour, timeout_s=self.timeouts.roster_s).data

    def history(self, tour: str, event: ResolvedEvent) -> list[Any]:
        listing = self.client.get_event_list(tour=tour, timeout_s=self.timeouts.history_s)
        past = select_past_events(
            parse_event_list_payload(listing.data),
            before=event.start.date(),
            limit=self.history_events,
            exclude_event_id=event.entry.event_id,
        )
        if not past:
            return []

        payloads: list[Any] = []
        with ThreadPoolExecutor(
            max_workers=min(self.history_workers, len(past)), thread_name_prefix="history"
        ) as executor:
            futures = [
                (
                    past_event,
                    executor.submit(
                        self.client.get_event_results,
                        tour=tour,
                        event_id=past_event.event_id,
                        year=past_event.year,
                        timeout_s=self.timeouts.history_s,
                    ),
                )
                for past_event in past
            ]
            for past_event, future in futures:
                try:
                    data = future.result().data
                except FeedAPIError as exc:
                    logger.warning(
                        "skipping results for %s %s: %s", past_event.name, past_event.year, exc
                    )
                    continue
                payloads.append(_with_event_defaults(data, past_event))
        if not payloads:
            raise FeedAPIError(f"no results fetched for {len(past)} past events")
        return payloads


def _with_event_defaults(data: Any, past_event: PastEvent) -> Any:
    if not isinstance(data, dict):
        return data
    payload = dict(data)
    if not payload.get("event_name"):
        payload["event_name"] = past_event.name
    if not payload.get("event_completed") and past_event.completed is not None:
        payload["event_completed"] = past_event.completed.isoformat()
    return payload


@dataclass
class ReconciliationBundle:
    """Joined players for one event, as served to downstream consumers."""

    tour: str
    event: EventIdentity
    rule: str
    players: list[JoinedPlayer]
    report: dict[str, Any] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    generated_at: str = ""
    from_cache: bool = False

    @property
    def degraded(self) -> bool:
        """True when a feed that shapes the joined list was missing or unusable.

        History warnings do not count.
        """
        return any(warning.rpartition(":")[2] not in OPTIONAL_FEEDS for warning in self.warnings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tour": self.tour,
            "event": self.event.to_dict(),
            "rule": self.rule,
            "generated_at": self.generated_at,
            "warnings": list(self.warnings),
            "report": dict(self.report),
            "players": [player.to_dict() for player in self.players],
        }

    @classmethod
    def from_dict(
        cls, payload: dict[str, Any], *, from_cache: bool = False
    ) -> ReconciliationBundle:
        event = payload["event"]
        return cls(
            tour=str(payload.get("tour", "")),
            event=EventIdentity(
                name=str(event["name"]),
                start=date.fromisoformat(str(event["start"])),
                end=date.fromisoformat(str(event["end"])),
            ),
            rule=str(payload.get("rule", "")),
            players=[JoinedPlayer.from_dict(row) for row in payload.get("players", [])],
            report=dict(payload.get("report", {})),
            warnings=[str(item) for item in payload.get("warnings", [])],
            generated_at=str(payload.get("generated_at", "")),
            from_cache=from_cache,
        )


@dataclass
class _FeedOutcome:
    records: list[Any] | None
    error: SourceUnavailable | None = None


class ReconciliationPipeline:
    """One request's worth of reconciliation; holds no state between runs."""

    def __init__(
        self,
        source: FeedSource,
        cache: TournamentCache,
        *,
        missing_market: MissingMarketPolicy = MISSING_MARKET_RETAIN,
        field_only: bool = False,
        fold_accents: bool = True,
        books: Sequence[str] = KNOWN_BOOKS,
        timeouts: FeedTimeouts | None = None,
        windows: ResolverWindows | None = None,
        thresholds: FormThresholds | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.source = source
        self.cache = cache
        self.missing_market = missing_market
        self.field_only = field_only
        self.fold_accents = fold_accents
        self.books = tuple(books)
        self.timeouts = timeouts or FeedTimeouts()
        self.windows = windows or ResolverWindows()
        self.thresholds = thresholds or FormThresholds()
        self.clock = clock

    def resolve(self, tour: str) -> ResolvedEvent:
        """Resolve the current event; raises ``EventNotFound`` or ``SourceUnavailable``."""
        try:
            payload = self.source.schedule(tour)
        except FeedAPIError as exc:
            raise SourceUnavailable("schedule", str(exc)) from exc
        entries = parse_schedule_payload(payload, tour=tour)
        return resolve_current_event(entries, self.clock(), windows=self.windows)

    def run(self, tour: str, *, refresh: bool = False) -> ReconciliationBundle:
        event = self.resolve(tour)
        identity = event_identity(event)
        key = player_data_cache_key(tour, event.name)

        if not refresh:
            cached = self.cache.get(key, identity)
            if cached is not CACHE_MISS:
                try:
                    bundle = ReconciliationBundle.from_dict(cached, from_cache=True)
                except (KeyError, TypeError, ValueError) as exc:
                    logger.warning("ignoring unreadable cached bundle %s: %s", key, exc)
                else:
                    logger.info("serving %s from cache", key)
                    return bundle

        outcomes = self._fetch_all(tour, event)
        stats = outcomes[FEED_STATS]
        if stats.records is None:
            error = stats.error or SourceUnavailable(FEED_STATS)
            raise PrimarySourceUnavailable(FEED_STATS, str(error), kind=error.kind) from error

        warnings: list[str] = []
        for feed in (FEED_MARKET, FEED_ROSTER, FEED_HISTORY):
            error = outcomes[feed].error
            if error is not None:
                warnings.append(error.reason)

        market_records: list[MarketRecord] = outcomes[FEED_MARKET].records or []
        policy = self.missing_market
        if outcomes[FEED_MARKET].error is not None:
            policy = MISSING_MARKET_RETAIN
        result = self._join(
            stats.records, market_records, outcomes[FEED_ROSTER].records, policy, warnings
        )

        players = result.players
        history: list[ResultRecord] | None = outcomes[FEED_HISTORY].records
        if history is not None:
            grouped = group_results_by_key(history, fold_accents=self.fold_accents)
            labels = momentum_by_key(grouped, self.thresholds, before=identity.start)
            players = attach_momentum(players, labels)

        bundle = ReconciliationBundle(
            tour=tour,
            event=identity,
            rule=event.rule,
            players=players,
            report=result.report.to_dict(),
            warnings=warnings,
            generated_at=iso_z(self.clock()),
        )
        if bundle.degraded:
            logger.warning("not caching degraded bundle for %s: %s", key, ", ".join(warnings))
        else:
            self.cache.put(key, identity, bundle.to_dict())
        return bundle

    def _join(
        self,
        stats: list[StatsRecord],
        market: list[MarketRecord],
        roster: list[RosterRecord] | None,
        policy: MissingMarketPolicy,
        warnings: list[str],
    ) -> JoinResult:
        try:
            return join_sources(
                stats,
                market,
                roster,
                missing_market=policy,
                field_only=self.field_only,
                fold_accents=self.fold_accents,
            )
        except PriceFormatError as exc:
            logger.warning("ignoring market feed: %s", exc)
            warnings.append(exc.reason)
        return join_sources(
            stats,
            [],
            roster,
            missing_market=MISSING_MARKET_RETAIN,
            field_only=self.field_only,
            fold_accents=self.fold_accents,
        )

    def _fetch_all(self, tour: str, event: ResolvedEvent) -> dict[str, _FeedOutcome]:
        jobs: dict[str, tuple[Callable[[], list[Any]], float]] = {
            FEED_STATS: (
                lambda: parse_stats_payload(self.source.stats(tour, event)),
                self.timeouts.stats_s,
            ),
            FEED_MARKET: (
                lambda: parse_market_payload(self.source.market(tour, event), books=self.books),
                self.timeouts.market_s,
            ),
            FEED_ROSTER: (
                lambda: parse_field_payload(self.source.roster(tour, event)),
                self.timeouts.roster_s,
            ),
            FEED_HISTORY: (
                lambda: parse_history_payloads(self.source.history(tour, event)),
                self.timeouts.history_s,
            ),
        }
        executor = ThreadPoolExecutor(max_workers=len(jobs), thread_name_prefix="feed")
        started = time.monotonic()
        try:
            futures = {name: executor.submit(job) for name, (job, _) in jobs.items()}
            return {
                name: self._settle(name, futures[name], started + timeout)
                for name, (_, timeout) in jobs.items()
            }
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    @staticmethod
    def _settle(name: str, future: Future[list[Any]], deadline: float) -> _FeedOutcome:
        try:
            records = future.result(timeout=max(0.0, deadline - time.monotonic()))
        except TimeoutError:
            logger.warning("%s feed timed out", name)
            return _FeedOutcome(records=None, error=SourceUnavailable(name, kind="timeout"))
        except SourceUnavailable as exc:
            logger.warning("%s feed unusable: %s", name, exc)
            return _FeedOutcome(records=None, error=exc)
        except (FeedAPIError, ReconcileError) as exc:
            logger.warning("%s feed failed: %s", name, exc)
            return _FeedOutcome(records=None, error=SourceUnavailable(name, str(exc)))
        logger.info("%s feed returned %d records", name, len(records))
        return _FeedOutcome(records=records)
