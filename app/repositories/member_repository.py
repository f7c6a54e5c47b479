"""Data-access layer for Discord members and their observations."""
from collections import defaultdict
from typing import Iterable, Optional

from sqlalchemy import insert, select, update
from sqlalchemy.engine import Connection, Engine

from app.core.database import as_aware, store_errors, to_utc
from app.core.logging import get_logger
from app.models.domain import Member, Observation, Role
from app.repositories.tables import member_observations, members

logger = get_logger(__name__)


class MemberRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    # ── Read ───────────────────────────────────────────────────────────

    def list_members(self, excluded_ids: Iterable[str] = ()) -> list[Member]:
        query = select(members)
        excluded = list(excluded_ids)
        if excluded:
            query = query.where(members.c.discord_user_id.not_in(excluded))
        with store_errors("list_members"), self._engine.connect() as conn:
            rows = conn.execute(query).mappings().all()
            observations = self._observations_for(conn, [r["discord_user_id"] for r in rows])
        return [self._to_member(r, observations.get(r["discord_user_id"], [])) for r in rows]

    def get_member(self, discord_user_id: str) -> Optional[Member]:
        with store_errors("get_member"), self._engine.connect() as conn:
            row = conn.execute(
                select(members).where(members.c.discord_user_id == discord_user_id)
            ).mappings().first()
            if row is None:
                return None
            observations = self._observations_for(conn, [discord_user_id])
        return self._to_member(row, observations.get(discord_user_id, []))

    # ── Write ──────────────────────────────────────────────────────────

    def add_observation(self, discord_user_id: str, observation: Observation) -> bool:
        """Append an observation. False when the member does not exist."""
        with store_errors("add_observation"), self._engine.begin() as conn:
            exists = conn.execute(
                select(members.c.discord_user_id)
                .where(members.c.discord_user_id == discord_user_id)
            ).first()
            if not exists:
                return False
            conn.execute(insert(member_observations).values(
                discord_user_id=discord_user_id,
                text=observation.text,
                author=observation.author,
                date=to_utc(observation.date),
            ))
        return True

    def upsert_member(self, member: Member) -> None:
        """Insert or refresh a member's profile; observations are untouched."""
        values = {
            "username": member.username,
            "avatar_url": member.avatar_url,
            "roles": [role.model_dump() for role in member.roles],
        }
        with store_errors("upsert_member"), self._engine.begin() as conn:
            exists = conn.execute(
                select(members.c.discord_user_id)
                .where(members.c.discord_user_id == member.discord_user_id)
            ).first()
            if exists:
                conn.execute(
                    update(members)
                    .where(members.c.discord_user_id == member.discord_user_id)
                    .values(**values)
                )
            else:
                conn.execute(insert(members).values(
                    discord_user_id=member.discord_user_id, **values
                ))
                logger.debug("Created member %s", member.discord_user_id)

    # ── Private ────────────────────────────────────────────────────────

    @staticmethod
    def _observations_for(conn: Connection, ids: list[str]) -> dict[str, list[Observation]]:
        grouped: dict[str, list[Observation]] = defaultdict(list)
        if not ids:
            return grouped
        rows = conn.execute(
            select(member_observations)
            .where(member_observations.c.discord_user_id.in_(ids))
            .order_by(member_observations.c.id)
        ).mappings().all()
        for r in rows:
            grouped[r["discord_user_id"]].append(
                Observation(text=r["text"], author=r["author"], date=as_aware(r["date"]))
            )
        return grouped

    @staticmethod
    def _to_member(row, observations: list[Observation]) -> Member:
        return Member(
            discord_user_id=row["discord_user_id"],
            username=row["username"],
            avatar_url=row["avatar_url"],
            roles=[Role(**role) for role in (row["roles"] or [])],
            observations=observations,
        )
