"""Application settings for golf-edge."""

import os
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from golf_edge.runtime_config import current_runtime_config

_KEY_ENV_NAMES = ("DATAGOLF_API_KEY", "GOLF_EDGE_DATAGOLF_API_KEY")


class Settings(BaseSettings):
    """Runtime settings for the feed provider."""

    model_config = SettingsConfigDict(
        env_prefix="GOLF_EDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    datagolf_api_key: str = Field(
        default="",
        validation_alias=AliasChoices(*_KEY_ENV_NAMES),
    )
    feed_base_url: str = "https://feeds.datagolf.com"
    feed_timeout_s: float = 30.0

    @staticmethod
    def _parse_key_file(path: Path, *, allowed_names: set[str]) -> str:
        try:
            raw = path.read_text(encoding="utf-8").strip()
        except OSError:
            return ""
        if not raw:
            return ""
        first_line = raw.splitlines()[0].strip()
        if "=" in first_line:
            key_name, value = first_line.split("=", 1)
            if key_name.strip().upper() not in allowed_names:
                return ""
            return value.strip().strip('"').strip("'")
        return first_line.strip('"').strip("'")

    @classmethod
    def from_runtime(cls) -> "Settings":
        """Construct settings from runtime config + direct secret env/key-file fallback."""
        runtime = current_runtime_config()
        config_root = runtime.config_path.parent.resolve()

        resolved_key = ""
        for name in _KEY_ENV_NAMES:
            resolved_key = os.environ.get(name, "").strip()
            if resolved_key:
                break
        if not resolved_key:
            for candidate in runtime.feed_key_files:
                candidate_path = Path(candidate).expanduser()
                path = (
                    candidate_path
                    if candidate_path.is_absolute()
                    else (config_root / candidate_path).resolve()
                )
                if not path.is_file():
                    continue
                parsed = cls._parse_key_file(path, allowed_names=set(_KEY_ENV_NAMES))
                if parsed:
                    resolved_key = parsed
                    break

        return cls(
            datagolf_api_key=resolved_key,
            feed_base_url=runtime.feed_base_url,
            feed_timeout_s=runtime.feed_timeout_s,
        )
