from pathlib import Path

import pytest

from golf_edge.runtime_config import load_runtime_config, set_current_runtime_config
from golf_edge.settings import Settings


def _clear_key_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DATAGOLF_API_KEY", raising=False)
    monkeypatch.delenv("GOLF_EDGE_DATAGOLF_API_KEY", raising=False)


def test_settings_load_with_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATAGOLF_API_KEY", "test-key")

    settings = Settings(_env_file=None)

    assert settings.datagolf_api_key == "test-key"
    assert settings.feed_base_url == "https://feeds.datagolf.com"
    assert settings.feed_timeout_s == 30.0


def test_settings_prefixed_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_key_env(monkeypatch)
    monkeypatch.setenv("GOLF_EDGE_DATAGOLF_API_KEY", "prefixed")
    monkeypatch.setenv("GOLF_EDGE_FEED_TIMEOUT_S", "12.5")

    settings = Settings(_env_file=None)

    assert settings.datagolf_api_key == "prefixed"
    assert settings.feed_timeout_s == 12.5


def test_settings_allows_missing_key(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_key_env(monkeypatch)

    assert Settings(_env_file=None).datagolf_api_key == ""


def _runtime_with_key_file(tmp_path: Path, key_line: str) -> None:
    (tmp_path / "DATAGOLF_API_KEY").write_text(key_line + "\n", encoding="utf-8")
    config_path = tmp_path / "runtime.toml"
    config_path.write_text(
        "\n".join(
            [
                "[paths]",
                'cache_dir = "cache"',
                "",
                "[feeds]",
                'key_files = ["MISSING.ignore", "DATAGOLF_API_KEY"]',
                "timeout_s = 45",
            ]
        )
        + "\n",
        encoding="utf-8",
    )
    set_current_runtime_config(load_runtime_config(config_path))


def test_settings_from_runtime_uses_key_file_fallback(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    _clear_key_env(monkeypatch)
    _runtime_with_key_file(tmp_path, "DATAGOLF_API_KEY=file-key")
    try:
        settings = Settings.from_runtime()
    finally:
        set_current_runtime_config(None)

    assert settings.datagolf_api_key == "file-key"
    assert settings.feed_timeout_s == 45.0


def test_settings_from_runtime_prefers_env_key(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    _clear_key_env(monkeypatch)
    monkeypatch.setenv("DATAGOLF_API_KEY", "env-key")
    _runtime_with_key_file(tmp_path, "file-key")
    try:
        settings = Settings.from_runtime()
    finally:
        set_current_runtime_config(None)

    assert settings.datagolf_api_key == "env-key"


def test_key_file_with_foreign_name_is_ignored(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    _clear_key_env(monkeypatch)
    _runtime_with_key_file(tmp_path, "OTHER_KEY=nope")
    try:
        settings = Settings.from_runtime()
    finally:
        set_current_runtime_config(None)

    assert settings.datagolf_api_key == ""
