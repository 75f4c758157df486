"""Shape checks shared by the feed adapters."""

from __future__ import annotations

import logging
from typing import Any

from golf_edge.errors import SourceUnavailable

logger = logging.getLogger(__name__)


def expect_dict(value: Any, *, feed: str, context: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise SourceUnavailable(feed, f"{context} must be an object", kind="bad_shape")
    return value


def expect_list(value: Any, *, feed: str, context: str) -> list[Any]:
    if not isinstance(value, list):
        raise SourceUnavailable(feed, f"{context} must be a list", kind="bad_shape")
    return value


def feed_rows(payload: Any, *, feed: str, field: str) -> list[dict[str, Any]]:
    """Rows under ``payload[field]``; non-object rows are logged and skipped."""
    body = expect_dict(payload, feed=feed, context=f"{feed}_payload")
    if field not in body:
        raise SourceUnavailable(feed, f"{feed}_payload missing {field!r}", kind="bad_shape")
    rows = expect_list(body[field], feed=feed, context=f"{feed}_payload.{field}")
    out: list[dict[str, Any]] = []
    for index, row in enumerate(rows):
        if not isinstance(row, dict):
            logger.warning("skipping %s row %d: not an object", feed, index)
            continue
        out.append(row)
    return out


def text_field(row: dict[str, Any], key: str) -> str:
    value = row.get(key)
    if value is None:
        return ""
    return str(value).strip()
