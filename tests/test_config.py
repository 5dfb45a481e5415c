from __future__ import annotations

from collections.abc import Iterator

import pytest

from app import config
from db.config import get_database_settings, normalize_postgres_url, resolve_database_url


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Iterator[None]:
    config.get_csv_ingestion_settings.cache_clear()
    config.get_records_api_settings.cache_clear()
    config.get_logging_settings.cache_clear()
    yield
    config.get_csv_ingestion_settings.cache_clear()
    config.get_records_api_settings.cache_clear()
    config.get_logging_settings.cache_clear()


def test_csv_ingestion_settings_from_env(monkeypatch) -> None:
    monkeypatch.setenv("CSV_INGEST_CHUNK_SIZE", "250")
    monkeypatch.setenv("CSV_INGEST_MAX_SUB_BATCH_SIZE", "50")
    monkeypatch.setenv("CSV_INGEST_MAX_CONCURRENCY", "3")
    monkeypatch.setenv("CSV_INGEST_QUEUE_CAPACITY", "5")
    monkeypatch.delenv("CSV_INGEST_MAX_PENDING_CHUNKS", raising=False)
    monkeypatch.setenv("CSV_INGEST_LOG_VALIDATION_ERRORS", "off")

    settings = config.get_csv_ingestion_settings()

    assert settings.chunk_size == 250
    assert settings.max_sub_batch_size == 50
    assert settings.max_concurrency == 3
    assert settings.queue_capacity == 5
    assert settings.max_pending_chunks == 8
    assert settings.log_validation_errors is False


def test_invalid_values_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("CSV_INGEST_CHUNK_SIZE", "lots")
    monkeypatch.setenv("CSV_INGEST_MAX_CONCURRENCY", "0")
    monkeypatch.setenv("CSV_INGEST_MAX_PENDING_CHUNKS", "0")

    settings = config.get_csv_ingestion_settings()

    assert settings.chunk_size == 5000
    assert settings.max_concurrency == 1
    assert settings.max_pending_chunks >= settings.max_concurrency


def test_default_concurrency_scales_with_cpu_count(monkeypatch) -> None:
    monkeypatch.delenv("CSV_INGEST_MAX_CONCURRENCY", raising=False)
    monkeypatch.setattr(config.os, "cpu_count", lambda: 2)

    assert config.get_csv_ingestion_settings().max_concurrency == 8


def test_records_page_size_is_clamped(monkeypatch) -> None:
    monkeypatch.setenv("RECORDS_MAX_PAGE_SIZE", "20")
    monkeypatch.setenv("RECORDS_DEFAULT_PAGE_SIZE", "50")

    settings = config.get_records_api_settings()

    assert settings.max_page_size == 20
    assert settings.default_page_size == 20


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("postgres://u:p@h/db", "postgresql+psycopg://u:p@h/db"),
        ("postgresql://u:p@h/db", "postgresql+psycopg://u:p@h/db"),
        ("postgresql+psycopg://u:p@h/db", "postgresql+psycopg://u:p@h/db"),
    ],
)
def test_normalize_postgres_url(raw: str, expected: str) -> None:
    assert normalize_postgres_url(raw) == expected


def test_database_url_takes_precedence(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgres://primary/db")
    monkeypatch.setenv("LOCAL_DATABASE_URL", "postgres://local/db")

    assert resolve_database_url() == "postgresql+psycopg://primary/db"


def test_database_pool_follows_ingestion_concurrency(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgres://primary/db")
    monkeypatch.setenv("CSV_INGEST_MAX_CONCURRENCY", "12")
    monkeypatch.delenv("DB_POOL_SIZE", raising=False)

    settings = get_database_settings()

    assert settings.url == "postgresql+psycopg://primary/db"
    assert settings.pool_size == 12


def test_database_pool_size_override(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgres://primary/db")
    monkeypatch.setenv("CSV_INGEST_MAX_CONCURRENCY", "2")
    monkeypatch.setenv("DB_POOL_SIZE", "3")

    assert get_database_settings().pool_size == 3


def test_settings_defaults_scale_with_cpu_count(monkeypatch) -> None:
    monkeypatch.setattr(config.os, "cpu_count", lambda: 3)

    settings = config.CSVIngestionSettings()

    assert settings.max_concurrency == 12
    assert settings.max_pending_chunks == 12 + settings.queue_capacity


def test_explicit_pending_chunks_are_kept() -> None:
    settings = config.CSVIngestionSettings(max_concurrency=2, queue_capacity=3, max_pending_chunks=7)

    assert settings.max_pending_chunks == 7
