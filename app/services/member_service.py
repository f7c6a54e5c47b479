"""
Service: Member roster — hierarchy-sorted listing, observations, stats.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from app.core.config import IGNORED_MEMBER_IDS, settings
from app.core.exceptions import NotFoundError, ValidationError
from app.core.logging import get_logger
from app.metrics import OBSERVATIONS_ADDED
from app.models.domain import Member, Observation
from app.repositories.interval_repository import IntervalRepository
from app.repositories.member_repository import MemberRepository
from app.services.activity import compute_member_stats
from app.services.hierarchy import sort_members
from app.services.time_windows import first_day_of_month

logger = get_logger(__name__)


class MemberService:
    def __init__(self, member_repo: MemberRepository, interval_repo: IntervalRepository):
        self._members = member_repo
        self._intervals = interval_repo

    def list_members(self) -> list[Member]:
        return sort_members(self._members.list_members(IGNORED_MEMBER_IDS))

    def get_member(self, discord_user_id: str) -> Member:
        """Member with observations newest first. Raises NotFoundError."""
        member = self._members.get_member(discord_user_id)
        if member is None:
            raise NotFoundError("Membro não encontrado.")
        observations = sorted(member.observations, key=lambda o: o.date, reverse=True)
        return member.model_copy(update={"observations": observations})

    def add_observation(self, discord_user_id: str, text: Optional[str],
                        author: Optional[str]) -> Observation:
        text = (text or "").strip()
        author = (author or "").strip()
        if not text or not author:
            raise ValidationError("O texto da observação e o autor são obrigatórios.")

        observation = Observation(text=text, author=author, date=datetime.now(timezone.utc))
        if not self._members.add_observation(discord_user_id, observation):
            raise NotFoundError("Membro não encontrado ou falha ao salvar.")

        OBSERVATIONS_ADDED.inc()
        logger.info("Observation added member=%s author=%s", discord_user_id, author)
        return observation

    def get_stats(self, discord_user_id: str, now: Optional[datetime] = None) -> dict[str, Any]:
        zone = settings.tz
        current = now.astimezone(zone) if now else datetime.now(zone)
        # One fetch covers both the user's lookback and the team's month.
        since = min(
            current - timedelta(days=settings.STATS_LOOKBACK_DAYS),
            first_day_of_month(current, zone),
        )
        records = self._intervals.list_records(entrada_from=since)
        return compute_member_stats(discord_user_id, records, now=current, tz=zone)
