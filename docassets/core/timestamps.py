"""ISO-8601 formatting shared by the manifest and processor."""

from __future__ import annotations

from datetime import UTC, datetime


def to_iso8601(dt: datetime) -> str:
    """Millisecond precision UTC timestamp with a trailing Z."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def from_epoch(seconds: float) -> str:
    return to_iso8601(datetime.fromtimestamp(seconds, UTC))
