from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from droneverse.core.utils.logger import get_logger
from droneverse.data.db.base import Base

_logger = get_logger("database")


def _normalize_database_url(raw_url: str) -> str:
    if raw_url.startswith("postgres://"):
        return raw_url.replace("postgres://", "postgresql://", 1)
    return raw_url


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # In-memory databases live in one connection, so every session must share it.
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return kwargs
    if url.startswith("postgresql"):
        return {"connect_args": {"connect_timeout": 5}, "pool_pre_ping": True}
    return {"pool_pre_ping": True}


def as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo; they are always stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Database:
    """Engine plus session factory for one DATABASE_URL."""

    def __init__(self, url: str) -> None:
        self.url = _normalize_database_url(url)
        self.engine = create_engine(self.url, **_engine_kwargs(self.url))
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        _logger.info("Database configured: dialect=%s", self.engine.url.get_backend_name())

    def create_all(self) -> None:
        """Create every table registered on Base.metadata."""
        from droneverse.data.db import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()
