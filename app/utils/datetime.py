"""Shared datetime helpers for UTC and feed-zone awareness."""

from __future__ import annotations

from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

FEED_TIMEZONE = "Europe/Berlin"


def ensure_utc(value: datetime) -> datetime:
    """Return a timezone-aware datetime in UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def utc_now() -> datetime:
    """Return the current UTC datetime."""

    return datetime.now(UTC)


def today_in(timezone: str = FEED_TIMEZONE, now: datetime | None = None) -> date:
    """Return the calendar date in ``timezone`` at ``now`` (defaults to the current time)."""

    moment = ensure_utc(now) if now is not None else utc_now()
    return moment.astimezone(ZoneInfo(timezone)).date()
