"""SQLAlchemy engine singleton and store error translation."""
from contextlib import contextmanager
from datetime import datetime, timezone
from functools import lru_cache
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.exceptions import ConfigurationError, StoreError
from app.core.logging import get_logger
from app.metrics import STORE_ERRORS

logger = get_logger(__name__)


def build_engine(url: str) -> Engine:
    if not url:
        raise ConfigurationError("DATABASE_URL is not set")
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=settings.POOL_SIZE,
        max_overflow=settings.MAX_OVERFLOW,
        pool_recycle=settings.POOL_RECYCLE,
    )


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return build_engine(settings.DATABASE_URL)


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """Re-raise driver failures as StoreError, keeping the cause chained."""
    try:
        yield
    except SQLAlchemyError as exc:
        STORE_ERRORS.labels(operation=operation).inc()
        logger.error("Store operation %s failed: %s", operation, exc)
        raise StoreError(operation, detail=str(exc)) from exc


def to_utc(ts: Optional[datetime]) -> Optional[datetime]:
    return ts.astimezone(timezone.utc) if ts is not None else None


def as_aware(ts: Optional[datetime]) -> Optional[datetime]:
    """Stores without timezone support hand back naive UTC."""
    if ts is not None and ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts
