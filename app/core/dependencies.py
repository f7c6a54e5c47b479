"""
FastAPI dependency injection — wire repositories and services.

Built lazily so importing the app never needs a database; the lifespan hook
in main.py forces the engine (and its configuration check) at startup.
"""
from functools import lru_cache

from app.core.database import get_engine
from app.repositories.interval_repository import IntervalRepository
from app.repositories.member_repository import MemberRepository
from app.services.dashboard_service import DashboardService
from app.services.interval_service import IntervalService
from app.services.member_service import MemberService
from app.services.report_service import ReportService


@lru_cache(maxsize=1)
def get_interval_repo() -> IntervalRepository:
    return IntervalRepository(get_engine())


@lru_cache(maxsize=1)
def get_member_repo() -> MemberRepository:
    return MemberRepository(get_engine())


def get_member_service() -> MemberService:
    return MemberService(get_member_repo(), get_interval_repo())


def get_interval_service() -> IntervalService:
    return IntervalService(get_interval_repo())


def get_report_service() -> ReportService:
    return ReportService(get_interval_repo())


def get_dashboard_service() -> DashboardService:
    return DashboardService(get_interval_repo())
