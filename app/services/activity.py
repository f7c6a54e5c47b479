"""
Service: Activity profiling for a single member.

Works on closed intervals only. Heatmap rows are indexed 0=Sunday through
6=Saturday, unlike the Monday-first week windows in time_windows.
"""
from datetime import datetime, timedelta, tzinfo
from typing import Any, Iterable

from app.core.config import settings
from app.models.domain import IntervalRecord
from app.services.aggregation import MS_PER_HOUR
from app.services.time_windows import first_day_of_month

DAYS_PER_WEEK = 7
HOURS_PER_DAY = 24


def empty_heatmap() -> list[list[int]]:
    """7x24 zero matrix. Every row is its own list."""
    return [[0] * HOURS_PER_DAY for _ in range(DAYS_PER_WEEK)]


def heatmap_slot(ts: datetime, tz: tzinfo) -> tuple[int, int]:
    local = ts.astimezone(tz)
    return local.isoweekday() % 7, local.hour


def team_average_hours(records: Iterable[IntervalRecord], since: datetime) -> float:
    """Closed hours since ``since`` divided by the number of contributing users."""
    total_ms = 0
    users: set[str] = set()
    for record in records:
        for ponto in record.pontos:
            if ponto.is_open or ponto.entrada < since:
                continue
            total_ms += ponto.duration_ms
            users.add(record.user_id)
    if not users:
        return 0
    return total_ms / len(users) / MS_PER_HOUR


def compute_member_stats(user_id: str, records: Iterable[IntervalRecord],
                         now: datetime | None = None,
                         tz: tzinfo | None = None) -> dict[str, Any]:
    zone = tz or settings.tz
    current = now.astimezone(zone) if now else datetime.now(zone)
    month_start = first_day_of_month(current, zone)
    lookback_start = current - timedelta(days=settings.STATS_LOOKBACK_DAYS)
    records = list(records)

    user_pontos = [
        p
        for record in records if record.user_id == user_id
        for p in record.pontos
        if not p.is_open and p.entrada >= lookback_start
    ]
    if not user_pontos:
        return {
            "averageDuration": 0,
            "totalHoursThisMonth": 0,
            "teamAverageHoursThisMonth": 0,
            "activityHeatmap": empty_heatmap(),
        }

    total_ms = 0
    month_ms = 0
    heatmap = empty_heatmap()
    for ponto in user_pontos:
        duration = ponto.duration_ms
        total_ms += duration
        if ponto.entrada >= month_start:
            month_ms += duration
        day, hour = heatmap_slot(ponto.entrada, zone)
        heatmap[day][hour] += 1

    return {
        "averageDuration": total_ms / len(user_pontos),
        "totalHoursThisMonth": month_ms / MS_PER_HOUR,
        "teamAverageHoursThisMonth": team_average_hours(records, month_start),
        "activityHeatmap": heatmap,
    }
