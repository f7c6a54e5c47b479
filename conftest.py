"""Shared fixtures: an in-memory SQLite store and a wired TestClient."""
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from app.core import dependencies
from app.core.config import settings
from app.middleware import rate_limiter
from app.repositories.interval_repository import IntervalRepository
from app.repositories.member_repository import MemberRepository
from app.repositories.tables import metadata
from app.services.dashboard_service import DashboardService
from app.services.interval_service import IntervalService
from app.services.member_service import MemberService
from app.services.report_service import ReportService

UTC = timezone.utc


def utc(year, month, day, hour=0, minute=0, second=0):
    return datetime(year, month, day, hour, minute, second, tzinfo=UTC)


@pytest.fixture(autouse=True)
def utc_settings(monkeypatch):
    """Run everything in UTC unless a test opts into another zone."""
    monkeypatch.setattr(settings, "TIMEZONE", "UTC")
    rate_limiter.reset()
    yield


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def interval_repo(engine):
    return IntervalRepository(engine)


@pytest.fixture
def member_repo(engine):
    return MemberRepository(engine)


@pytest.fixture
def client(interval_repo, member_repo):
    from main import app

    app.dependency_overrides[dependencies.get_member_service] = (
        lambda: MemberService(member_repo, interval_repo))
    app.dependency_overrides[dependencies.get_interval_service] = (
        lambda: IntervalService(interval_repo))
    app.dependency_overrides[dependencies.get_report_service] = (
        lambda: ReportService(interval_repo))
    app.dependency_overrides[dependencies.get_dashboard_service] = (
        lambda: DashboardService(interval_repo))
    yield TestClient(app)
    app.dependency_overrides.clear()
