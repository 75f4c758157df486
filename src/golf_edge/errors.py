"""Errors raised by reconciliation flows."""

from __future__ import annotations


class ReconcileError(Exception):
    """Base error for reconciliation operations.

    ``reason`` is a short machine-checkable code. It is the only part of the
    error that is surfaced to callers outside this package.
    """

    default_reason = "reconcile_error"

    def __init__(self, message: str = "", *, reason: str | None = None) -> None:
        self.reason = reason or self.default_reason
        super().__init__(message or self.reason)

    def public_dict(self) -> dict[str, str]:
        return {"error": self.reason}


class ParseFailure(ReconcileError):
    """Raised for one unparseable input row; callers log and drop it."""

    default_reason = "parse_failure"


class EventNotFound(ReconcileError):
    """Raised when no schedule entry could be resolved as current."""

    default_reason = "no_parseable_events"


class SourceUnavailable(ReconcileError):
    """Raised when a feed failed, timed out, or returned an unexpected shape."""

    default_reason = "source_unavailable"

    def __init__(self, feed: str, message: str = "", *, kind: str = "unavailable") -> None:
        self.feed = feed
        self.kind = kind
        super().__init__(message, reason=f"{kind}:{feed}")


class PrimarySourceUnavailable(SourceUnavailable):
    """Raised when the statistics feed is missing; fatal for the request."""


class PriceFormatError(ReconcileError):
    """Raised when market prices are not all in the American format."""

    default_reason = "mixed_price_format"
