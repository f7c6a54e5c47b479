"""Repository package — re-exports the store repositories."""
from app.repositories.interval_repository import IntervalRepository
from app.repositories.member_repository import MemberRepository

__all__ = ["IntervalRepository", "MemberRepository"]
