"""
Service: Reports — period rankings and file exports.
"""
from datetime import datetime
from typing import Optional

from app.core.logging import get_logger
from app.metrics import EXPORTS_GENERATED, RANKINGS_COMPUTED
from app.repositories.interval_repository import IntervalRepository
from app.services.aggregation import flatten_intervals, normalise_status
from app.services.ranking import rank_by_duration
from app.services.report_renderer import ExportFile, render_report, validate_format
from app.services.time_windows import PERIOD_MONTHLY, PERIOD_WEEKLY, parse_date_bound, resolve_window

logger = get_logger(__name__)


class ReportService:
    def __init__(self, repo: IntervalRepository):
        self._repo = repo

    def ranking(self, period: Optional[str] = None, year: Optional[int] = None,
                month: Optional[int] = None, week: Optional[int] = None,
                now: Optional[datetime] = None) -> list[dict]:
        window = resolve_window(period, year=year, month=month, week=week, now=now)
        records = self._repo.list_records(entrada_from=window.start, entrada_to=window.end)
        ranking = rank_by_duration(records, window)
        label = PERIOD_MONTHLY if period == PERIOD_MONTHLY else PERIOD_WEEKLY
        RANKINGS_COMPUTED.labels(period=label).inc()
        logger.info("Ranking computed period=%s start=%s end=%s users=%d",
                    label, window.start.isoformat(), window.end.isoformat(), len(ranking))
        return ranking

    def export(self, fmt: Optional[str], user_id: Optional[str] = None,
               status: Optional[str] = None, start_date: Optional[str] = None,
               end_date: Optional[str] = None) -> ExportFile:
        fmt = validate_format(fmt)
        status = normalise_status(status)
        start = parse_date_bound(start_date)
        end = parse_date_bound(end_date, end=True)
        rows = flatten_intervals(self._repo.list_records(user_id=user_id), status, start, end)
        export = render_report(fmt, rows)
        EXPORTS_GENERATED.labels(format=fmt).inc()
        logger.info("Report exported format=%s rows=%d bytes=%d", fmt, len(rows), len(export.content))
        return export
