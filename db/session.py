"""
db/session.py

Engine and session factories for user_data.

One engine is shared by the whole process. Every CSV chunk writer checks out
its own connection, so the default pool is sized from the ingestion
concurrency (see db.config.get_database_settings).
"""

from __future__ import annotations

from collections.abc import Iterator
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db.config import DatabaseSettings, get_database_settings


def create_db_engine(settings: DatabaseSettings | None = None) -> Engine:
    settings = settings or get_database_settings()
    if not settings.url.startswith("postgresql"):
        raise RuntimeError("Only PostgreSQL URLs are supported.")

    return create_engine(
        settings.url,
        echo=settings.echo,
        pool_pre_ping=True,
        pool_recycle=settings.pool_recycle,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_timeout=settings.pool_timeout,
    )


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(
        bind=engine,
        class_=Session,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Shared engine, created on first use so imports never open connections."""
    return create_db_engine()


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker[Session]:
    return build_session_factory(get_engine())


def SessionLocal() -> Session:
    return get_session_factory()()


def get_db() -> Iterator[Session]:
    """Request-scoped session for read endpoints."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
