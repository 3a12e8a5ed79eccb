"""Timestamp helpers shared by the health probe and the rate guard."""

from __future__ import annotations

import time
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def iso_timestamp(moment: datetime | None = None) -> str:
    """Format a moment as ISO-8601 with millisecond precision and a ``Z`` suffix.

    Args:
        moment: Datetime to format. Defaults to now. Naive values are
            treated as UTC.

    Returns:
        String such as ``2024-05-01T12:30:00.125Z``.
    """
    if moment is None:
        moment = utc_now()
    elif moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_millis() -> int:
    """Wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)
