"""Tournament-scoped cache.

Entries have no TTL. An entry is served only while the event it was built for
is still the resolved current event; once the calendar moves on the stored
identity no longer matches and every read is a miss.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Final

from golf_edge.blob_store import BlobStore
from golf_edge.models import EventIdentity
from golf_edge.time_utils import iso_z, parse_iso_z, utc_now

logger = logging.getLogger(__name__)

PLAYER_DATA_PREFIX = "player-data"

_SLUG_RE = re.compile(r"[^a-z0-9]+")


class CacheMiss:
    """Sentinel type returned by ``TournamentCache.get`` on any miss."""

    _instance: CacheMiss | None = None

    def __new__(cls) -> CacheMiss:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "CACHE_MISS"


CACHE_MISS: Final = CacheMiss()


@dataclass(frozen=True)
class CacheEntry:
    key: str
    created_at: datetime
    event_identity: str
    payload: Any

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "created_at": iso_z(self.created_at),
            "event_identity": self.event_identity,
            "payload": self.payload,
        }


def slugify(text: str) -> str:
    return _SLUG_RE.sub("-", text.lower()).strip("-")


def player_data_cache_key(tour: str, event_name: str) -> str:
    """``player-data-<tour>-<event slug>``."""
    return f"{PLAYER_DATA_PREFIX}-{slugify(tour) or 'pga'}-{slugify(event_name) or 'event'}"


class TournamentCache:
    """Cache whose validity boundary is event identity, not age."""

    def __init__(self, store: BlobStore) -> None:
        self.store = store

    def put(self, key: str, identity: EventIdentity, payload: Any) -> CacheEntry:
        entry = CacheEntry(
            key=key,
            created_at=utc_now(),
            event_identity=identity.signature(),
            payload=payload,
        )
        blob = {
            "created_at": iso_z(entry.created_at),
            "event_identity": entry.event_identity,
            "event": identity.to_dict(),
            "payload": payload,
        }
        self.store.set_text(key, json.dumps(blob, sort_keys=True, ensure_ascii=True, indent=2))
        logger.info("cached %s for %s", key, entry.event_identity)
        return entry

    def _load(self, key: str) -> CacheEntry | None:
        raw = self.store.get_text(key)
        if raw is None:
            return None
        try:
            blob = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("ignoring corrupt cache blob %s", key)
            return None
        if not isinstance(blob, dict) or "payload" not in blob:
            logger.warning("ignoring malformed cache blob %s", key)
            return None
        created_at = parse_iso_z(str(blob.get("created_at", "")))
        signature = blob.get("event_identity")
        if created_at is None or not isinstance(signature, str):
            logger.warning("ignoring cache blob %s without identity metadata", key)
            return None
        return CacheEntry(
            key=key,
            created_at=created_at,
            event_identity=signature,
            payload=blob["payload"],
        )

    def get_entry(self, key: str, identity: EventIdentity | None = None) -> CacheEntry | None:
        """Full entry for ``key``; with ``identity``, only when it still matches."""
        entry = self._load(key)
        if entry is None:
            return None
        if identity is not None and entry.event_identity != identity.signature():
            logger.info(
                "cache entry %s belongs to %s, not %s",
                key,
                entry.event_identity,
                identity.signature(),
            )
            return None
        return entry

    def get(self, key: str, identity: EventIdentity) -> Any:
        """Cached payload, or ``CACHE_MISS``; never raises for absent or stale data."""
        entry = self.get_entry(key, identity)
        if entry is None:
            return CACHE_MISS
        return entry.payload

    def latest_for_event(
        self, prefix: str, identity: EventIdentity | None = None
    ) -> CacheEntry | None:
        """Newest entry under ``prefix``, restricted to ``identity`` when given."""
        matches = [
            entry
            for entry in (self.get_entry(key, identity) for key in self.store.list_keys(prefix))
            if entry is not None
        ]
        if not matches:
            return None
        return max(matches, key=lambda entry: (entry.created_at, entry.key))
