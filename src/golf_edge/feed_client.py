"""HTTP client for the golf data feed provider."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from time import perf_counter
from typing import Any

import httpx
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt

from golf_edge.settings import Settings

logger = logging.getLogger(__name__)

SCHEDULE_PATH = "get-schedule"
SKILL_RATINGS_PATH = "preds/skill-ratings"
OUTRIGHTS_PATH = "betting-tools/outrights"
FIELD_PATH = "field-updates"
EVENT_LIST_PATH = "historical-event-data/event-list"
EVENT_RESULTS_PATH = "historical-event-data/events"


class FeedAPIError(RuntimeError):
    """Raised on feed provider failures."""


class RetryableStatusError(RuntimeError):
    """Raised for retryable status codes."""

    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        super().__init__(f"retryable status {response.status_code}")

    def retry_after_seconds(self) -> float | None:
        raw_value = self.response.headers.get("Retry-After")
        if not raw_value:
            return None
        try:
            return max(0.0, float(raw_value))
        except ValueError:
            try:
                date_value = parsedate_to_datetime(raw_value)
            except (TypeError, ValueError):
                return None
            return max(0.0, (date_value - datetime.now(UTC)).total_seconds())


@dataclass(frozen=True)
class FeedResponse:
    """Response data and metadata from an API call."""

    data: Any
    status_code: int
    duration_ms: int
    retry_count: int


def _wait_for_retry(retry_state) -> float:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    if isinstance(exc, RetryableStatusError):
        retry_after = exc.retry_after_seconds()
        if retry_after is not None:
            return min(retry_after, 60.0)
    return min(2 ** (retry_state.attempt_number - 1), 30.0)


class FeedClient:
    """Thin HTTP client around the feed provider's JSON endpoints."""

    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.BaseTransport | None = None,
        max_attempts: int = 4,
        wait=_wait_for_retry,
    ) -> None:
        self.settings = settings
        self._base_url = settings.feed_base_url.rstrip("/")
        self._max_attempts = max_attempts
        self._wait = wait
        limits = httpx.Limits(max_connections=8, max_keepalive_connections=4)
        self._http = httpx.Client(
            timeout=settings.feed_timeout_s, limits=limits, transport=transport
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> FeedClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _request(
        self, *, path: str, params: dict[str, Any], timeout_s: float | None = None
    ) -> FeedResponse:
        api_key = str(self.settings.datagolf_api_key).strip()
        if not api_key:
            raise FeedAPIError(
                "missing feed API key; set DATAGOLF_API_KEY or configure "
                "feeds.key_files in runtime.toml"
            )
        params_with_key = dict(params)
        params_with_key["file_format"] = "json"
        params_with_key["key"] = api_key
        url = f"{self._base_url}/{path.lstrip('/')}"
        timeout = timeout_s if timeout_s is not None else self.settings.feed_timeout_s
        retries = 0
        started = perf_counter()
        response: httpx.Response | None = None
        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self._max_attempts),
                retry=retry_if_exception_type(RetryableStatusError),
                wait=self._wait,
                reraise=True,
            ):
                with attempt:
                    retries = attempt.retry_state.attempt_number - 1
                    response = self._http.get(url, params=params_with_key, timeout=timeout)
                    if response.status_code == 429 or 500 <= response.status_code <= 599:
                        logger.warning("%s returned %d", path, response.status_code)
                        raise RetryableStatusError(response)
                    response.raise_for_status()
        except RetryableStatusError as exc:
            raise FeedAPIError(
                f"{path} failed with status {exc.response.status_code} after retries"
            ) from exc
        except httpx.HTTPError as exc:
            raise FeedAPIError(f"{path} failed with transport error: {exc}") from exc
        if response is None:
            raise FeedAPIError(f"{path} failed without a response")

        try:
            data = response.json()
        except ValueError as exc:
            raise FeedAPIError(f"{path} returned a non-JSON body") from exc
        duration_ms = int((perf_counter() - started) * 1000)
        logger.debug("%s ok in %dms (%d retries)", path, duration_ms, retries)
        return FeedResponse(
            data=data,
            status_code=response.status_code,
            duration_ms=duration_ms,
            retry_count=retries,
        )

    def get_schedule(self, *, tour: str) -> FeedResponse:
        return self._request(path=SCHEDULE_PATH, params={"tour": tour})

    def get_skill_ratings(self, *, timeout_s: float | None = None) -> FeedResponse:
        return self._request(
            path=SKILL_RATINGS_PATH, params={"display": "value"}, timeout_s=timeout_s
        )

    def get_outrights(
        self, *, tour: str, market: str = "win", timeout_s: float | None = None
    ) -> FeedResponse:
        """Outright prices per sportsbook, always requested in American format."""
        params = {"tour": tour, "market": market, "odds_format": "american"}
        return self._request(path=OUTRIGHTS_PATH, params=params, timeout_s=timeout_s)

    def get_field(self, *, tour: str, timeout_s: float | None = None) -> FeedResponse:
        return self._request(path=FIELD_PATH, params={"tour": tour}, timeout_s=timeout_s)

    def get_event_list(self, *, tour: str, timeout_s: float | None = None) -> FeedResponse:
        """Completed events that have historical results available."""
        return self._request(path=EVENT_LIST_PATH, params={"tour": tour}, timeout_s=timeout_s)

    def get_event_results(
        self, *, tour: str, event_id: str, year: int, timeout_s: float | None = None
    ) -> FeedResponse:
        """Finishes for one completed event, keyed by ``event_id`` and season ``year``."""
        params: dict[str, Any] = {"tour": tour, "event_id": event_id, "year": year}
        return self._request(path=EVENT_RESULTS_PATH, params=params, timeout_s=timeout_s)
