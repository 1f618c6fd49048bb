"""Time utility helpers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def now_utc() -> datetime:
    """Return current timezone-aware UTC datetime."""
    return datetime.now(tz=UTC)


def resolve_timezone(name: str | None) -> tzinfo:
    """Return tzinfo for an IANA zone name.

    Raises:
        ValueError: when the zone is unknown.
    """
    if not name or name.upper() == "UTC":
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {name}") from exc


def combine_local(day: date, at: time, zone_name: str | None) -> datetime:
    """Combine a wall-clock date and time in ``zone_name`` into an aware datetime.

    Unknown zones fall back to UTC; the timezone rule reports them separately.
    """
    try:
        zone = resolve_timezone(zone_name)
    except ValueError:
        zone = UTC
    return datetime.combine(day, at, tzinfo=zone)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@dataclass(frozen=True)
class ScheduleWindow:
    """Voting window between two aware instants."""

    start: datetime
    end: datetime

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def is_ordered(self) -> bool:
        return self.end > self.start

    def starts_after(self, instant: datetime) -> bool:
        return self.start > instant

    def whole_days(self) -> int:
        """Duration in days, rounded up."""
        return -(-self.duration // timedelta(days=1))


def humanize_relative_time(last_activity: str | datetime | None, now: datetime | None = None) -> str:
    """Format a timestamp into compact relative form used by the frontend."""
    if not last_activity:
        return "never"

    if isinstance(last_activity, str):
        normalized = last_activity.replace("Z", "+00:00")
        value = datetime.fromisoformat(normalized)
    else:
        value = last_activity

    delta = (now or now_utc()) - ensure_aware(value)
    total_minutes = int(delta.total_seconds() // 60)
    if total_minutes < 1:
        return "now"
    if total_minutes < 60:
        return f"{total_minutes}m"

    total_hours = total_minutes // 60
    if total_hours < 24:
        return f"{total_hours}h"

    total_days = total_hours // 24
    return f"{total_days}d"
