"""Runtime configuration loader (config-first, flag-overrides)."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from golf_edge.event_calendar import ResolverWindows
from golf_edge.form import FormThresholds
from golf_edge.sources.market import KNOWN_BOOKS

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "runtime.toml"
DEFAULT_LOCAL_OVERRIDE_PATH = Path(__file__).resolve().parents[2] / "config" / "runtime.local.toml"


@dataclass(frozen=True)
class RuntimeConfig:
    """Materialized runtime configuration."""

    config_path: Path
    cache_dir: Path
    feed_base_url: str
    feed_timeout_s: float
    feed_key_files: tuple[str, ...]
    default_tour: str
    books: tuple[str, ...]
    missing_market: str
    field_only: bool
    fold_accents: bool
    resolver: ResolverWindows
    form: FormThresholds
    history_events: int
    stats_timeout_s: float
    market_timeout_s: float
    roster_timeout_s: float
    history_timeout_s: float

    def with_path_overrides(self, *, cache_dir: Path | None = None) -> RuntimeConfig:
        """Return copy with explicit CLI path overrides applied."""
        if cache_dir is None:
            return self
        return replace(self, cache_dir=cache_dir.expanduser().resolve())


_CURRENT_RUNTIME_CONFIG: RuntimeConfig | None = None


def set_current_runtime_config(config: RuntimeConfig | None) -> None:
    global _CURRENT_RUNTIME_CONFIG
    _CURRENT_RUNTIME_CONFIG = config


def current_runtime_config() -> RuntimeConfig:
    config = _CURRENT_RUNTIME_CONFIG
    if config is not None:
        return config
    loaded = load_runtime_config()
    set_current_runtime_config(loaded)
    return loaded


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for key, value in overlay.items():
        existing = out.get(key)
        if isinstance(existing, dict) and isinstance(value, dict):
            out[key] = _deep_merge(existing, value)
        else:
            out[key] = value
    return out


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        payload = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise RuntimeError(f"failed reading runtime config: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise RuntimeError(f"invalid runtime config TOML: {path}") from exc
    if not isinstance(payload, dict):
        raise RuntimeError(f"runtime config root must be a table: {path}")
    return payload


def _as_table(payload: dict[str, Any], key: str) -> dict[str, Any]:
    value = payload.get(key, {})
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise RuntimeError(f"runtime config section [{key}] must be a table")
    return value


def _as_str(value: Any, *, default: str) -> str:
    if isinstance(value, str):
        stripped = value.strip()
        if stripped:
            return stripped
    return default


def _as_bool(value: Any, *, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    return default


def _as_int(value: Any, *, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return default
    return default


def _as_float(value: Any, *, default: float) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return default
    return default


def _as_csv_list(values: Any, *, default: tuple[str, ...]) -> tuple[str, ...]:
    if isinstance(values, list):
        cleaned = [str(value).strip() for value in values if str(value).strip()]
        return tuple(cleaned) if cleaned else default
    if isinstance(values, str):
        cleaned = [part.strip() for part in values.split(",") if part.strip()]
        return tuple(cleaned) if cleaned else default
    return default


def _as_choice(value: Any, *, choices: tuple[str, ...], default: str, name: str) -> str:
    resolved = _as_str(value, default=default).lower()
    if resolved not in choices:
        raise RuntimeError(f"runtime config {name} must be one of {', '.join(choices)}")
    return resolved


def _resolve_path(raw: Any, *, default: str, base_dir: Path) -> Path:
    value = _as_str(raw, default=default)
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return path


def load_runtime_config(config_path: Path | None = None) -> RuntimeConfig:
    """Load runtime config from `config/runtime.toml` plus optional local override."""
    source = (config_path or DEFAULT_CONFIG_PATH).expanduser().resolve()
    if not source.exists():
        raise RuntimeError(f"runtime config file not found: {source}")

    payload = _read_toml(source)
    if source == DEFAULT_CONFIG_PATH and DEFAULT_LOCAL_OVERRIDE_PATH.exists():
        payload = _deep_merge(payload, _read_toml(DEFAULT_LOCAL_OVERRIDE_PATH))

    paths = _as_table(payload, "paths")
    feeds = _as_table(payload, "feeds")
    timeouts = _as_table(feeds, "timeouts")
    join = _as_table(payload, "join")
    resolver = _as_table(payload, "resolver")
    form = _as_table(payload, "form")
    base_dir = source.parent

    return RuntimeConfig(
        config_path=source,
        cache_dir=_resolve_path(paths.get("cache_dir"), default="../data/cache", base_dir=base_dir),
        feed_base_url=_as_str(feeds.get("base_url"), default="https://feeds.datagolf.com"),
        feed_timeout_s=_as_float(feeds.get("timeout_s"), default=30.0),
        feed_key_files=_as_csv_list(
            feeds.get("key_files"),
            default=("DATAGOLF_API_KEY.ignore", "DATAGOLF_API_KEY"),
        ),
        default_tour=_as_str(feeds.get("default_tour"), default="pga"),
        books=_as_csv_list(feeds.get("books"), default=KNOWN_BOOKS),
        missing_market=_as_choice(
            join.get("missing_market"),
            choices=("drop", "retain"),
            default="retain",
            name="join.missing_market",
        ),
        field_only=_as_bool(join.get("field_only"), default=False),
        fold_accents=_as_bool(join.get("fold_accents"), default=True),
        resolver=ResolverWindows(
            duration_days=_as_int(resolver.get("duration_days"), default=3),
            upcoming_days=_as_int(resolver.get("upcoming_days"), default=14),
            recent_days=_as_int(resolver.get("recent_days"), default=7),
        ),
        form=FormThresholds(
            window=_as_int(form.get("window"), default=3),
            margin=_as_float(form.get("margin"), default=10.0),
            missed_cut_position=_as_int(form.get("missed_cut_position"), default=999),
        ),
        history_events=_as_int(form.get("history_events"), default=12),
        stats_timeout_s=_as_float(timeouts.get("stats_s"), default=30.0),
        market_timeout_s=_as_float(timeouts.get("market_s"), default=20.0),
        roster_timeout_s=_as_float(timeouts.get("roster_s"), default=15.0),
        history_timeout_s=_as_float(timeouts.get("history_s"), default=10.0),
    )
