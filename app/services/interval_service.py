"""
Service: Interval records — filtered listing, alerts and mutations.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from app.core.config import settings
from app.core.exceptions import NotFoundError, ValidationError
from app.core.logging import get_logger
from app.metrics import INTERVALS_MODIFIED
from app.models.domain import Interval, IntervalRecord, UserRef
from app.repositories.interval_repository import IntervalRepository
from app.services.aggregation import filter_records, long_running_alerts, normalise_status
from app.services.time_windows import localize, parse_date_bound

logger = get_logger(__name__)


class IntervalService:
    def __init__(self, repo: IntervalRepository):
        self._repo = repo

    # ── Queries ──

    def list_intervals(self, user_id: Optional[str] = None, status: Optional[str] = None,
                       start_date: Optional[str] = None,
                       end_date: Optional[str] = None) -> tuple[list[IntervalRecord], int]:
        """Records with only their matching pontos, plus total closed ms."""
        status = normalise_status(status)
        start = parse_date_bound(start_date)
        end = parse_date_bound(end_date, end=True)
        records = self._repo.list_records(user_id=user_id)
        return filter_records(records, status, start, end)

    def unique_users(self) -> list[UserRef]:
        return self._repo.distinct_users()

    def alerts(self, now: Optional[datetime] = None) -> list[dict]:
        current = now or datetime.now(timezone.utc)
        threshold = timedelta(hours=settings.ALERT_THRESHOLD_HOURS)
        records = self._repo.list_open_started_before(current - threshold)
        return long_running_alerts(records, current, threshold)

    # ── Commands ──

    def append_interval(self, user_id: str, username: str, batalhao_id: str,
                        entrada: datetime, saida: Optional[datetime] = None) -> Interval:
        entrada = localize(entrada)
        saida = localize(saida) if saida else None
        self._flag_negative(entrada, saida)
        ponto = self._repo.append_interval(user_id, username, batalhao_id, entrada, saida)
        INTERVALS_MODIFIED.labels(action="append").inc()
        logger.info("Interval appended user=%s batalhao=%s open=%s",
                    user_id, batalhao_id, saida is None)
        return ponto

    def update_interval(self, ponto_id: str, entrada: Optional[datetime],
                        saida: Optional[datetime]) -> None:
        if not entrada or not saida:
            raise ValidationError("Datas de entrada e saída são obrigatórias.")
        entrada, saida = localize(entrada), localize(saida)
        self._flag_negative(entrada, saida)
        if not self._repo.update_interval(ponto_id, entrada, saida):
            raise NotFoundError("Registro não encontrado ou dados iguais.")
        INTERVALS_MODIFIED.labels(action="update").inc()
        logger.info("Interval updated id=%s", ponto_id)

    def delete_interval(self, ponto_id: str) -> None:
        if not self._repo.delete_interval(ponto_id):
            raise NotFoundError("Registro não encontrado.")
        INTERVALS_MODIFIED.labels(action="delete").inc()
        logger.info("Interval deleted id=%s", ponto_id)

    @staticmethod
    def _flag_negative(entrada: datetime, saida: Optional[datetime]) -> None:
        # Accepted as-is; negative durations are reported, not rejected.
        if saida is not None and saida < entrada:
            logger.warning("Interval saida %s precedes entrada %s",
                           saida.isoformat(), entrada.isoformat())
