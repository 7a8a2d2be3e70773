"""
SQLAlchemy engine and sessions.

Postgres (psycopg) in production, SQLite for local runs and tests. Services
own their transactions: they write through repositories and finish with
safe_commit(), which rolls back before re-raising so a failed payment update
never leaves the session half-applied.
"""

import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from shared.config.settings import DATABASE_URL


def build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        # Sessions are handed to threadpool workers by FastAPI
        return create_engine(url, connect_args={"check_same_thread": False})

    options: dict[str, Any] = {
        "pool_pre_ping": True,
        "pool_size": min((os.cpu_count() or 4) * 2 + 1, 20),
        "max_overflow": 15,
        "pool_timeout": 30,
        "pool_recycle": 1800,
        "connect_args": {"connect_timeout": 10},
    }
    return create_engine(url, **options)


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db() -> Iterator[Session]:
    """Request-scoped session (FastAPI dependency)."""
    with SessionLocal() as db:
        yield db


@contextmanager
def get_db_context() -> Iterator[Session]:
    """Session for work outside a request (CLI, scheduled reconciliation)."""
    with SessionLocal() as db:
        yield db


def safe_commit(db: Session) -> None:
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
