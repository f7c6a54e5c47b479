"""
Service: Dashboard summary.

Every counter comes from an independent store query. They run side by side
in one task group and the summary is only built once all of them finish;
if any query fails the whole summary fails with it.
"""
import asyncio
from datetime import datetime, timedelta
from typing import Any, Optional

from app.core.config import settings
from app.core.logging import get_logger
from app.metrics import DASHBOARD_LATENCY
from app.repositories.interval_repository import IntervalRepository
from app.services.aggregation import count_by_day, count_by_hour, hours, sum_duration_ms
from app.services.time_windows import start_of_day

logger = get_logger(__name__)


class DashboardService:
    def __init__(self, repo: IntervalRepository):
        self._repo = repo

    async def summary(self, now: Optional[datetime] = None) -> dict[str, Any]:
        zone = settings.tz
        current = now.astimezone(zone) if now else datetime.now(zone)
        today_start = start_of_day(current.date(), zone)
        week_ago = current - timedelta(days=settings.WEEKLY_ACTIVITY_DAYS)
        repo = self._repo

        with DASHBOARD_LATENCY.time():
            try:
                async with asyncio.TaskGroup() as tg:
                    total_agents = tg.create_task(asyncio.to_thread(repo.count_users))
                    pending = tg.create_task(
                        asyncio.to_thread(repo.count_records_with_open_interval))
                    closed_today = tg.create_task(
                        asyncio.to_thread(repo.count_records_closed_since, today_start))
                    closed_pontos = tg.create_task(
                        asyncio.to_thread(repo.intervals_closed_since, today_start))
                    week_pontos = tg.create_task(
                        asyncio.to_thread(repo.intervals_started_since, week_ago))
                    feed = tg.create_task(
                        asyncio.to_thread(repo.latest_intervals, settings.ACTIVITY_FEED_LIMIT))
                    today_pontos = tg.create_task(
                        asyncio.to_thread(repo.intervals_started_since, today_start))
            except ExceptionGroup as group:
                logger.error("Dashboard summary aborted: %d sub-queries failed",
                             len(group.exceptions))
                raise group.exceptions[0]

        return {
            "totalAgents": total_agents.result(),
            "pendingRegisters": pending.result(),
            "closedToday": closed_today.result(),
            "hoursToday": round(hours(sum_duration_ms(closed_pontos.result())), 1),
            "weeklyActivity": count_by_day((p.entrada for p in week_pontos.result()), zone),
            "activityFeed": [
                {"username": username, "ponto": ponto}
                for username, ponto in feed.result()
            ],
            "hourlyActivity": count_by_hour((p.entrada for p in today_pontos.result()), zone),
        }
