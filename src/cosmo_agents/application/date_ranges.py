"""
application.date_ranges - Half-open [start, end) time windows for analytics.

Two resolvers:
    resolve_range()      timezone-aware, used by the count_contacts_created tool
                         (presets, explicit ISO bounds, or period + base date)
    resolve_utc_range()  UTC-only, used by the `cosmo stats` command

Weeks start on Monday. Day and month boundaries are computed on calendar
dates in the target zone, so a window is always local midnight to local
midnight.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_TIMEZONE = "Asia/Ho_Chi_Minh"

PRESETS = ("today", "yesterday", "this_week", "last_week", "this_month", "last_month")
PERIODS = ("day", "week", "month")


@dataclass(frozen=True)
class DateRange:
    start: datetime
    end: datetime

    @property
    def start_iso(self) -> str:
        return to_utc_iso(self.start)

    @property
    def end_iso(self) -> str:
        return to_utc_iso(self.end)


def to_utc_iso(value: datetime) -> str:
    """Format as UTC ISO 8601 with milliseconds and a Z suffix."""
    return (
        value.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def get_zone(name: Optional[str]) -> ZoneInfo:
    try:
        return ZoneInfo(name or DEFAULT_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone: {name}")


def resolve_range(
    *,
    preset: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    period: Optional[str] = None,
    base_date: Optional[str] = None,
    tz: Optional[str] = None,
    now: Optional[datetime] = None,
) -> DateRange:
    """Resolve a counting window in the given IANA timezone.

    Precedence: preset, then explicit start_date + end_date, then
    period (default "day") around base_date (default today).

    Raises:
        ValueError: On an unknown timezone or a malformed base_date.
    """
    zone = get_zone(tz)
    now = now or datetime.now(timezone.utc)
    today = now.astimezone(zone).date()

    if preset:
        return _preset_range(preset, today, zone)

    if start_date and end_date:
        return DateRange(_parse_iso(start_date), _parse_iso(end_date))

    if base_date:
        try:
            day = datetime.strptime(base_date, "%Y-%m-%d").date()
        except ValueError:
            raise ValueError("Invalid date format. Use YYYY-MM-DD.")
    else:
        day = today

    if period == "month":
        first = day.replace(day=1)
        return DateRange(_midnight(first, zone), _midnight(_add_months(first, 1), zone))

    if period == "week":
        monday = _monday(day)
        return DateRange(_midnight(monday, zone), _midnight(monday + timedelta(days=7), zone))

    return DateRange(_midnight(day, zone), _midnight(day + timedelta(days=1), zone))


def resolve_utc_range(
    *,
    day: Optional[str] = None,
    month: Optional[str] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    now: Optional[datetime] = None,
) -> DateRange:
    """Resolve a UTC window for the stats command.

    Precedence: start + end, then month (YYYY-MM), then day (YYYY-MM-DD),
    then today.
    """
    if start and end:
        return DateRange(_parse_iso(start), _parse_iso(end))

    if month:
        try:
            first = datetime.strptime(month, "%Y-%m").date()
        except ValueError:
            raise ValueError("Invalid --month format. Use YYYY-MM.")
        return DateRange(
            _midnight(first, timezone.utc),
            _midnight(_add_months(first, 1), timezone.utc),
        )

    if day:
        try:
            target = datetime.strptime(day, "%Y-%m-%d").date()
        except ValueError:
            raise ValueError("Invalid --day format. Use YYYY-MM-DD.")
    else:
        target = (now or datetime.now(timezone.utc)).astimezone(timezone.utc).date()

    return DateRange(
        _midnight(target, timezone.utc),
        _midnight(target + timedelta(days=1), timezone.utc),
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _preset_range(preset: str, today: date, zone) -> DateRange:
    if preset == "yesterday":
        return DateRange(_midnight(today - timedelta(days=1), zone), _midnight(today, zone))

    if preset in ("this_week", "last_week"):
        monday = _monday(today)
        if preset == "last_week":
            monday -= timedelta(days=7)
        return DateRange(_midnight(monday, zone), _midnight(monday + timedelta(days=7), zone))

    if preset in ("this_month", "last_month"):
        first = today.replace(day=1)
        if preset == "last_month":
            first = _add_months(first, -1)
        return DateRange(_midnight(first, zone), _midnight(_add_months(first, 1), zone))

    # "today" and anything unrecognised
    return DateRange(_midnight(today, zone), _midnight(today + timedelta(days=1), zone))


def _midnight(day: date, zone) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=zone)


def _monday(day: date) -> date:
    return day - timedelta(days=day.weekday())


def _add_months(first_of_month: date, months: int) -> date:
    index = first_of_month.year * 12 + (first_of_month.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def _parse_iso(value: str) -> datetime:
    """Parse ISO 8601; a bare date or naive datetime is taken as UTC."""
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        raise ValueError(f"Invalid ISO 8601 datetime: {value}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
