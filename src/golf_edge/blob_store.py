"""Whole-object text storage used by the tournament cache."""

from __future__ import annotations

import os
import re
import uuid
from contextlib import suppress
from pathlib import Path
from typing import Protocol

_KEY_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class BlobStore(Protocol):
    """Key/value text store; every write replaces the whole object."""

    def get_text(self, key: str) -> str | None: ...

    def set_text(self, key: str, value: str) -> None: ...

    def list_keys(self, prefix: str = "") -> list[str]: ...


def _atomic_write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".tmp-{path.name}-{uuid.uuid4().hex}")
    try:
        tmp_path.write_text(content, encoding="utf-8")
        os.replace(tmp_path, path)
    except OSError:
        with suppress(FileNotFoundError):
            tmp_path.unlink()
        raise


class FileBlobStore:
    """One file per key under ``root``."""

    suffix = ".json"

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"invalid blob key: {key!r}")
        return self.root / f"{key}{self.suffix}"

    def get_text(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set_text(self, key: str, value: str) -> None:
        _atomic_write_text(self._path(key), value)

    def list_keys(self, prefix: str = "") -> list[str]:
        keys = [
            path.name[: -len(self.suffix)]
            for path in self.root.glob(f"*{self.suffix}")
            if not path.name.startswith(".tmp-")
        ]
        return sorted(key for key in keys if key.startswith(prefix))
