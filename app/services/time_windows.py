"""
Service: Time-window resolution — pure computation, no side effects.

Turns period descriptors (a week number, a zero-based month, "this week")
into concrete ``[start, end]`` datetimes in the local timezone. End bounds
are inclusive and sit on the last millisecond of their day.
"""
import calendar
from datetime import date, datetime, time, timedelta, tzinfo
from typing import NamedTuple, Optional

from app.core.config import settings
from app.core.exceptions import ValidationError

PERIOD_WEEKLY = "weekly"
PERIOD_MONTHLY = "monthly"

_LAST_MS = time(23, 59, 59, 999000)


class Window(NamedTuple):
    start: datetime
    end: datetime

    def contains(self, ts: datetime) -> bool:
        return self.start <= ts <= self.end


def _tz(tz: Optional[tzinfo]) -> tzinfo:
    return tz if tz is not None else settings.tz


def _now(now: Optional[datetime], tz: tzinfo) -> datetime:
    return now.astimezone(tz) if now is not None else datetime.now(tz)


def start_of_day(day: date, tz: Optional[tzinfo] = None) -> datetime:
    return datetime.combine(day, time.min, tzinfo=_tz(tz))


def end_of_day(day: date, tz: Optional[tzinfo] = None) -> datetime:
    return datetime.combine(day, _LAST_MS, tzinfo=_tz(tz))


def first_day_of_month(now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> datetime:
    zone = _tz(tz)
    current = _now(now, zone)
    return start_of_day(current.date().replace(day=1), zone)


def monday_of(day: date) -> date:
    """Monday of ``day``'s week. Sunday belongs to the week that ends on it."""
    return day - timedelta(days=day.isoweekday() - 1)


def week_window(year: int, week: int, tz: Optional[tzinfo] = None) -> Window:
    zone = _tz(tz)
    anchor = date(year, 1, 1) + timedelta(days=(week - 1) * 7)
    monday = monday_of(anchor)
    return Window(start_of_day(monday, zone), end_of_day(monday + timedelta(days=6), zone))


def current_week_window(now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> Window:
    zone = _tz(tz)
    monday = monday_of(_now(now, zone).date())
    return Window(start_of_day(monday, zone), end_of_day(monday + timedelta(days=6), zone))


def month_window(year: int, month: int, tz: Optional[tzinfo] = None) -> Window:
    """``month`` is zero-based; values outside 0..11 roll into other years."""
    zone = _tz(tz)
    year += month // 12
    month = month % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return Window(
        start_of_day(date(year, month, 1), zone),
        end_of_day(date(year, month, last_day), zone),
    )


def resolve_window(
    kind: Optional[str],
    year: Optional[int] = None,
    month: Optional[int] = None,
    week: Optional[int] = None,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> Window:
    """
    Resolve a ranking period. Anything but ``monthly`` is weekly.

    Raises ValidationError when the requested year, month or week falls
    outside the representable calendar.
    """
    zone = _tz(tz)
    current = _now(now, zone)
    y = year or current.year
    try:
        if kind == PERIOD_MONTHLY:
            m = month if month is not None else current.month - 1
            return month_window(y, m, zone)
        if week is not None:
            return week_window(y, week, zone)
    except (ValueError, OverflowError):
        raise ValidationError(f"Período fora do intervalo: year={year} month={month} week={week}")
    return current_week_window(current, zone)


def localize(ts: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Attach the local timezone to naive datetimes; leave aware ones alone."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=_tz(tz))
    return ts


def parse_timestamp(value: str, tz: Optional[tzinfo] = None) -> datetime:
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        raise ValidationError(f"Invalid date: {value!r}")
    return localize(parsed, tz)


def parse_date_bound(value: Optional[str], end: bool = False,
                     tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """
    Parse a report filter bound.

    A bare date starts at local midnight. End bounds are pushed to
    23:59:59.999 of their day so the whole day is included.
    """
    if not value:
        return None
    zone = _tz(tz)
    parsed = parse_timestamp(value, zone)
    if end:
        return parsed.replace(hour=23, minute=59, second=59, microsecond=999000)
    return parsed
