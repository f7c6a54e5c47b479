"""
Service: Duration aggregation — pure computation, no I/O.

Filters interval records by status and entrada window, sums closed
durations, flattens records into report rows, and builds the small rollups
behind the dashboard summary.
"""
from collections import Counter
from datetime import datetime, timedelta, tzinfo
from typing import Iterable, NamedTuple, Optional

from app.core.exceptions import ValidationError
from app.models.domain import Interval, IntervalRecord

STATUS_PENDING = "pending"
STATUS_COMPLETED = "completed"
VALID_STATUSES = (STATUS_PENDING, STATUS_COMPLETED)

MS_PER_HOUR = 3_600_000


class FlatInterval(NamedTuple):
    username: str
    entrada: datetime
    saida: Optional[datetime]

    @property
    def duration_ms(self) -> Optional[int]:
        if self.saida is None:
            return None
        return (self.saida - self.entrada) // timedelta(milliseconds=1)


def normalise_status(status: Optional[str]) -> Optional[str]:
    """Empty means "all"; unknown values are rejected."""
    if not status:
        return None
    status = status.strip().lower()
    if status not in VALID_STATUSES:
        raise ValidationError(f"status must be one of {VALID_STATUSES}")
    return status


def interval_matches(ponto: Interval, status: Optional[str] = None,
                     start: Optional[datetime] = None,
                     end: Optional[datetime] = None) -> bool:
    if status == STATUS_PENDING and not ponto.is_open:
        return False
    if status == STATUS_COMPLETED and ponto.is_open:
        return False
    if start is not None and ponto.entrada < start:
        return False
    if end is not None and ponto.entrada > end:
        return False
    return True


def sum_duration_ms(pontos: Iterable[Interval]) -> int:
    """Sum of closed durations; open intervals add nothing."""
    return sum(p.duration_ms for p in pontos if not p.is_open)


def hours(ms: int | float) -> float:
    return ms / MS_PER_HOUR


def filter_records(records: Iterable[IntervalRecord], status: Optional[str] = None,
                   start: Optional[datetime] = None,
                   end: Optional[datetime] = None) -> tuple[list[IntervalRecord], int]:
    """
    Keep only the intervals passing every filter.

    Records left with no intervals are dropped. Returns the surviving
    records and the grand total (ms) of their closed intervals.
    """
    kept: list[IntervalRecord] = []
    total = 0
    for record in records:
        pontos = [p for p in record.pontos if interval_matches(p, status, start, end)]
        if not pontos:
            continue
        total += sum_duration_ms(pontos)
        kept.append(record.model_copy(update={"pontos": pontos}))
    return kept, total


def flatten_intervals(records: Iterable[IntervalRecord], status: Optional[str] = None,
                      start: Optional[datetime] = None,
                      end: Optional[datetime] = None) -> list[FlatInterval]:
    """Flat (username, entrada, saida) rows, newest entrada first."""
    rows = [
        FlatInterval(record.username, p.entrada, p.saida)
        for record in records
        for p in record.pontos
        if interval_matches(p, status, start, end)
    ]
    rows.sort(key=lambda row: row.entrada, reverse=True)
    return rows


# ── Dashboard rollups ──

def count_by_day(entradas: Iterable[datetime], tz: tzinfo) -> dict[str, int]:
    """Interval count per local calendar day, keys sorted ascending."""
    counts = Counter(ts.astimezone(tz).strftime("%Y-%m-%d") for ts in entradas)
    return dict(sorted(counts.items()))


def count_by_hour(entradas: Iterable[datetime], tz: tzinfo) -> list[int]:
    slots = [0] * 24
    for ts in entradas:
        slots[ts.astimezone(tz).hour] += 1
    return slots


def long_running_alerts(records: Iterable[IntervalRecord], now: datetime,
                        threshold: timedelta) -> list[dict]:
    """First interval per record still open after ``threshold``."""
    cutoff = now - threshold
    alerts = []
    for record in records:
        ponto = next((p for p in record.pontos if p.is_open and p.entrada < cutoff), None)
        if ponto is not None:
            alerts.append({"username": record.username, "entrada": ponto.entrada})
    return alerts
