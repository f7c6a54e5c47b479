"""
Service: Ranking — pure computation.

Totals closed-interval time per user inside a window and returns the
longest-serving users first.
"""
from collections import defaultdict
from typing import Iterable

from app.core.config import settings
from app.models.domain import IntervalRecord
from app.services.time_windows import Window


def rank_by_duration(records: Iterable[IntervalRecord], window: Window,
                     limit: int | None = None) -> list[dict]:
    """
    Group closed intervals whose entrada falls in ``window`` by
    (user_id, username) and sort by total duration, descending.

    Ties go to username then user_id ascending, so the output is stable for
    unchanged input.
    """
    cap = settings.RANKING_LIMIT if limit is None else limit
    totals: dict[tuple[str, str], int] = defaultdict(int)
    for record in records:
        for ponto in record.pontos:
            if ponto.is_open or not window.contains(ponto.entrada):
                continue
            totals[(record.user_id, record.username)] += ponto.duration_ms

    ordered = sorted(totals.items(), key=lambda item: (-item[1], item[0][1], item[0][0]))
    return [
        {"userId": user_id, "username": username, "totalDuration": total}
        for (user_id, username), total in ordered[:cap]
    ]
