"""Database session configuration."""

from __future__ import annotations

import logging
from collections.abc import Generator

from sqlalchemy import create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from ticket_desk.core.settings import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


# Ensure model modules are imported so that metadata is populated when create_all runs.
import ticket_desk.models  # noqa: E402,F401


def build_engine(url: str) -> Engine:
    """Create an engine for ``url``; SQLite handles are shared across worker threads."""
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(
        url,
        connect_args=connect_args,
        pool_pre_ping=True,
        echo=settings.sql_debug,
    )


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session for dependency injection."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind: Engine | None = None) -> None:
    """Create all database tables."""
    Base.metadata.create_all(bind=bind or engine)


def init_db(bind: Engine | None = None) -> None:
    """Create the schema and seed the counter singleton.

    Safe to run on every startup: tables are only created when missing and
    the counter row is only inserted when it does not exist yet.
    """
    from ticket_desk.models import COUNTER_ROW_ID, CounterState

    target = bind or engine
    create_tables(target)
    with Session(target) as db, db.begin():
        existing = db.scalar(select(CounterState).where(CounterState.id == COUNTER_ROW_ID))
        if existing is None:
            db.add(CounterState(id=COUNTER_ROW_ID, counter=0, last_desk="None"))
            logger.info("Seeded counter state")
