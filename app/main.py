from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fastapi import FastAPI


def _validate_env() -> None:
    """
    Validate required environment variables at startup.

    Runs before any database connection is opened. Raises RuntimeError
    listing every problem so the operator can fix them in one restart.
    """

    from db.config import resolve_database_url

    errors: list[str] = []

    try:
        database_url = resolve_database_url()
    except RuntimeError as exc:
        errors.append(str(exc))
    else:
        if not database_url.startswith("postgresql"):
            errors.append(
                "Database URL must point at PostgreSQL "
                "(postgres://, postgresql:// or postgresql+psycopg://)."
            )

    if errors:
        raise RuntimeError(
            "Startup validation failed, missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.

    Records go to stderr and to the rotating file read by GET /api/logs.
    """

    from app.config import get_logging_settings

    settings = get_logging_settings()
    log_path = Path(settings.file_path)
    if log_path.parent and not log_path.parent.exists():
        log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=settings.file_max_bytes,
        backupCount=settings.file_backup_count,
        encoding="utf-8",
    )
    logging.basicConfig(
        level=getattr(logging, settings.level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        handlers=[logging.StreamHandler(), file_handler],
    )


def _check_db() -> None:
    """Open a session and run SELECT 1. Raises RuntimeError if the DB is unreachable."""
    from sqlalchemy import text

    from db.session import SessionLocal

    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc


def _check_schema() -> None:
    """
    Every table registered on Base.metadata must exist in the database.

    Does NOT auto-migrate; run 'alembic upgrade head' first.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401  registers all ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    inspector = sa_inspect(get_engine())
    actual: set[str] = set(inspector.get_table_names())
    expected: set[str] = set(Base.metadata.tables.keys())
    missing = expected - actual

    if missing:
        log = logging.getLogger(__name__)
        log.critical(
            "Schema mismatch: %d table(s) defined in ORM metadata are absent from "
            "the database: %s. Run 'alembic upgrade head' and restart.",
            len(missing),
            ", ".join(sorted(missing)),
        )
        raise RuntimeError(
            f"Schema mismatch: {len(missing)} table(s) missing from the database "
            f"({', '.join(sorted(missing))}). Run migrations and restart."
        )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate DB connectivity and schema on boot."""
    _check_db()
    logging.getLogger(__name__).info("Database connectivity confirmed")
    _check_schema()
    logging.getLogger(__name__).info("Database schema validated")
    yield


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="User Data API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.middleware import request_response_logger
    from app.api.routers import csv_ingestion_router, logs_router, records_router

    application.middleware("http")(request_response_logger)
    application.include_router(records_router)
    application.include_router(logs_router)
    application.include_router(csv_ingestion_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
