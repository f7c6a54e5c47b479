"""Data-access layer for interval records ("registros") and their pontos."""
import uuid
from datetime import datetime
from typing import Any, Iterable, Optional

from sqlalchemy import delete, func, insert, or_, select, update
from sqlalchemy.engine import Engine

from app.core.database import as_aware, store_errors, to_utc
from app.core.logging import get_logger
from app.models.domain import Interval, IntervalRecord, UserRef
from app.repositories.tables import metadata, pontos, registros

logger = get_logger(__name__)

_RECORD_COLS = (
    registros.c.id,
    registros.c.user_id,
    registros.c.username,
    registros.c.batalhao_id,
    registros.c.ultimo_aviso_enviado,
    pontos.c.id.label("ponto_id"),
    pontos.c.entrada,
    pontos.c.saida,
)


def _row_to_interval(row) -> Interval:
    return Interval(id=str(row["ponto_id"]), entrada=as_aware(row["entrada"]),
                    saida=as_aware(row["saida"]))


def _group_rows(rows: Iterable[Any]) -> list[IntervalRecord]:
    grouped: dict[str, IntervalRecord] = {}
    for row in rows:
        record = grouped.get(row["id"])
        if record is None:
            record = grouped[row["id"]] = IntervalRecord(
                id=str(row["id"]),
                user_id=row["user_id"],
                username=row["username"],
                batalhao_id=row["batalhao_id"],
                ultimo_aviso_enviado=as_aware(row["ultimo_aviso_enviado"]),
            )
        record.pontos.append(_row_to_interval(row))
    return list(grouped.values())


class IntervalRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    # ── Read ───────────────────────────────────────────────────────────

    def list_records(self, user_id: Optional[str] = None,
                     entrada_from: Optional[datetime] = None,
                     entrada_to: Optional[datetime] = None) -> list[IntervalRecord]:
        """Records owning at least one ponto in range, pontos ordered by entrada."""
        query = select(*_RECORD_COLS).select_from(registros.join(pontos))
        if user_id:
            query = query.where(registros.c.user_id == user_id)
        if entrada_from is not None:
            query = query.where(pontos.c.entrada >= to_utc(entrada_from))
        if entrada_to is not None:
            query = query.where(pontos.c.entrada <= to_utc(entrada_to))
        query = query.order_by(registros.c.created_at, registros.c.id, pontos.c.entrada)
        with store_errors("list_records"), self._engine.connect() as conn:
            rows = conn.execute(query).mappings().all()
        return _group_rows(rows)

    def list_open_started_before(self, cutoff: datetime) -> list[IntervalRecord]:
        query = (
            select(*_RECORD_COLS)
            .select_from(registros.join(pontos))
            .where(pontos.c.saida.is_(None), pontos.c.entrada < to_utc(cutoff))
            .order_by(registros.c.created_at, registros.c.id, pontos.c.entrada)
        )
        with store_errors("list_open_started_before"), self._engine.connect() as conn:
            rows = conn.execute(query).mappings().all()
        return _group_rows(rows)

    def distinct_users(self) -> list[UserRef]:
        query = (
            select(registros.c.user_id, registros.c.username)
            .distinct()
            .order_by(registros.c.username, registros.c.user_id)
        )
        with store_errors("distinct_users"), self._engine.connect() as conn:
            rows = conn.execute(query).all()
        return [UserRef(user_id=r[0], username=r[1]) for r in rows]

    def count_users(self) -> int:
        query = select(func.count(func.distinct(registros.c.user_id)))
        with store_errors("count_users"), self._engine.connect() as conn:
            return conn.execute(query).scalar() or 0

    def count_records_with_open_interval(self) -> int:
        query = (
            select(func.count(func.distinct(registros.c.id)))
            .select_from(registros.join(pontos))
            .where(pontos.c.saida.is_(None))
        )
        with store_errors("count_open"), self._engine.connect() as conn:
            return conn.execute(query).scalar() or 0

    def count_records_closed_since(self, since: datetime) -> int:
        query = (
            select(func.count(func.distinct(registros.c.id)))
            .select_from(registros.join(pontos))
            .where(pontos.c.saida >= to_utc(since))
        )
        with store_errors("count_closed_since"), self._engine.connect() as conn:
            return conn.execute(query).scalar() or 0

    def intervals_closed_since(self, since: datetime) -> list[Interval]:
        query = (
            select(pontos.c.id.label("ponto_id"), pontos.c.entrada, pontos.c.saida)
            .where(pontos.c.saida >= to_utc(since))
        )
        with store_errors("intervals_closed_since"), self._engine.connect() as conn:
            rows = conn.execute(query).mappings().all()
        return [_row_to_interval(r) for r in rows]

    def intervals_started_since(self, since: datetime) -> list[Interval]:
        query = (
            select(pontos.c.id.label("ponto_id"), pontos.c.entrada, pontos.c.saida)
            .where(pontos.c.entrada >= to_utc(since))
            .order_by(pontos.c.entrada)
        )
        with store_errors("intervals_started_since"), self._engine.connect() as conn:
            rows = conn.execute(query).mappings().all()
        return [_row_to_interval(r) for r in rows]

    def latest_intervals(self, limit: int) -> list[tuple[str, Interval]]:
        query = (
            select(registros.c.username, pontos.c.id.label("ponto_id"),
                   pontos.c.entrada, pontos.c.saida)
            .select_from(registros.join(pontos))
            .order_by(pontos.c.entrada.desc())
            .limit(limit)
        )
        with store_errors("latest_intervals"), self._engine.connect() as conn:
            rows = conn.execute(query).mappings().all()
        return [(r["username"], _row_to_interval(r)) for r in rows]

    # ── Write ──────────────────────────────────────────────────────────

    def append_interval(self, user_id: str, username: str, batalhao_id: str,
                        entrada: datetime, saida: Optional[datetime] = None) -> Interval:
        """Append a ponto to the (user_id, batalhao_id) record, creating it if needed."""
        ponto_id = str(uuid.uuid4())
        with store_errors("append_interval"), self._engine.begin() as conn:
            registro_id = conn.execute(
                select(registros.c.id).where(
                    registros.c.user_id == user_id,
                    registros.c.batalhao_id == batalhao_id,
                )
            ).scalar()
            if registro_id is None:
                registro_id = str(uuid.uuid4())
                conn.execute(insert(registros).values(
                    id=registro_id, user_id=user_id, username=username,
                    batalhao_id=batalhao_id,
                ))
                logger.debug("Created registro %s user=%s batalhao=%s", registro_id, user_id, batalhao_id)
            else:
                conn.execute(
                    update(registros)
                    .where(registros.c.id == registro_id)
                    .values(username=username)
                )
            conn.execute(insert(pontos).values(
                id=ponto_id, registro_id=registro_id,
                entrada=to_utc(entrada), saida=to_utc(saida),
            ))
        return Interval(id=ponto_id, entrada=entrada, saida=saida)

    def update_interval(self, ponto_id: str, entrada: datetime, saida: datetime) -> bool:
        """False when the ponto is absent or already holds these values."""
        new_entrada, new_saida = to_utc(entrada), to_utc(saida)
        stmt = (
            update(pontos)
            .where(
                pontos.c.id == ponto_id,
                or_(
                    pontos.c.entrada.is_distinct_from(new_entrada),
                    pontos.c.saida.is_distinct_from(new_saida),
                ),
            )
            .values(entrada=new_entrada, saida=new_saida)
        )
        with store_errors("update_interval"), self._engine.begin() as conn:
            return conn.execute(stmt).rowcount > 0

    def delete_interval(self, ponto_id: str) -> bool:
        with store_errors("delete_interval"), self._engine.begin() as conn:
            return conn.execute(delete(pontos).where(pontos.c.id == ponto_id)).rowcount > 0

    # ── Lifecycle ──────────────────────────────────────────────────────

    def create_schema(self) -> None:
        with store_errors("create_schema"):
            metadata.create_all(self._engine)

    def verify_connection(self) -> None:
        with store_errors("verify_connection"), self._engine.connect() as conn:
            conn.execute(select(1))

    def dispose(self) -> None:
        self._engine.dispose()
