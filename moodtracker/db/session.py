"""Database session management."""

from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from moodtracker.db.base import Base


def build_engine(database_url: str, echo: bool = False, **kwargs: Any) -> Engine:
    """Create an engine; SQLite connections are shared across threadpool workers."""
    if database_url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(
        database_url,
        pool_pre_ping=True,
        echo=echo,
        **kwargs,
    )


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    # expire_on_commit=False keeps returned rows readable after the session closes
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def create_tables(engine: Engine) -> None:
    """Create all tables (local SQLite convenience; use alembic elsewhere)."""
    import moodtracker.models  # noqa: F401 - register models on Base.metadata

    Base.metadata.create_all(bind=engine)
