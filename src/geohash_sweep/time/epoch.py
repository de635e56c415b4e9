"""Deterministic UTC datetime <-> epoch millisecond conversions."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_ONE_MS = timedelta(milliseconds=1)
MIN_MILLIS = (datetime.min.replace(tzinfo=UTC) - EPOCH) // _ONE_MS
MAX_MILLIS = (datetime.max.replace(tzinfo=UTC) - EPOCH) // _ONE_MS


def to_utc(dt: datetime) -> datetime:
    """Convert datetime to timezone-aware UTC, assuming UTC for naive values."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_epoch_millis(dt: datetime) -> int:
    """Return whole milliseconds since 1970-01-01T00:00Z, flooring sub-millisecond parts."""
    return (to_utc(dt) - EPOCH) // _ONE_MS


def from_epoch_millis(millis: int) -> datetime:
    """Return the UTC datetime for epoch milliseconds, clamped to the representable range."""
    clamped = min(max(millis, MIN_MILLIS), MAX_MILLIS)
    return EPOCH + timedelta(milliseconds=clamped)
