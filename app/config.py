"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache

from db.config import load_env_files

# Admission tokens per logical core for concurrent CSV chunk writers.
CONCURRENCY_PER_CPU = 4


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def default_max_concurrency() -> int:
    return CONCURRENCY_PER_CPU * (os.cpu_count() or 1)


@dataclass(frozen=True)
class CSVIngestionSettings:
    """
    Runtime settings for CSV bulk ingestion.

    Buffered raw rows never exceed
    (queue_capacity + max_pending_chunks + 2) * chunk_size: the queue, the
    spawned workers, one chunk held by the reader while its put blocks and
    one held by the coordinator while submit blocks.
    ``max_pending_chunks`` defaults to max_concurrency + queue_capacity.
    """

    chunk_size: int = 5000
    max_sub_batch_size: int = 10000
    max_concurrency: int = field(default_factory=default_max_concurrency)
    queue_capacity: int = 10
    max_pending_chunks: int | None = None
    max_validation_errors: int = 500
    log_validation_errors: bool = True

    def __post_init__(self) -> None:
        if self.max_pending_chunks is None:
            object.__setattr__(
                self,
                "max_pending_chunks",
                self.max_concurrency + self.queue_capacity,
            )


@dataclass(frozen=True)
class RecordsAPISettings:
    """
    Pagination limits for the records endpoint.
    """

    default_page_size: int = 10
    max_page_size: int = 1000


@dataclass(frozen=True)
class LoggingSettings:
    """
    Log level and the rotating file the log analysis endpoint reads.
    """

    level: str = "INFO"
    file_path: str = "File.log"
    file_max_bytes: int = 10 * 1024 * 1024
    file_backup_count: int = 3


@lru_cache(maxsize=1)
def get_csv_ingestion_settings() -> CSVIngestionSettings:
    """
    Return cached CSV ingestion settings from environment variables.
    """

    max_concurrency = max(1, _get_int_env("CSV_INGEST_MAX_CONCURRENCY", default_max_concurrency()))
    queue_capacity = max(1, _get_int_env("CSV_INGEST_QUEUE_CAPACITY", 10))
    return CSVIngestionSettings(
        chunk_size=max(1, _get_int_env("CSV_INGEST_CHUNK_SIZE", 5000)),
        max_sub_batch_size=max(1, _get_int_env("CSV_INGEST_MAX_SUB_BATCH_SIZE", 10000)),
        max_concurrency=max_concurrency,
        queue_capacity=queue_capacity,
        max_pending_chunks=max(
            max_concurrency,
            _get_int_env("CSV_INGEST_MAX_PENDING_CHUNKS", max_concurrency + queue_capacity),
        ),
        max_validation_errors=max(1, _get_int_env("CSV_INGEST_MAX_VALIDATION_ERRORS", 500)),
        log_validation_errors=_get_bool_env("CSV_INGEST_LOG_VALIDATION_ERRORS", True),
    )


@lru_cache(maxsize=1)
def get_records_api_settings() -> RecordsAPISettings:
    """
    Return cached pagination settings for the records endpoint.
    """

    max_page_size = max(1, _get_int_env("RECORDS_MAX_PAGE_SIZE", 1000))
    return RecordsAPISettings(
        default_page_size=min(max_page_size, max(1, _get_int_env("RECORDS_DEFAULT_PAGE_SIZE", 10))),
        max_page_size=max_page_size,
    )


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """
    Return cached logging settings from environment variables.
    """

    return LoggingSettings(
        level=_get_str_env("LOG_LEVEL", "INFO").upper(),
        file_path=_get_str_env("LOG_FILE_PATH", "File.log"),
        file_max_bytes=max(1024, _get_int_env("LOG_FILE_MAX_BYTES", 10 * 1024 * 1024)),
        file_backup_count=max(0, _get_int_env("LOG_FILE_BACKUP_COUNT", 3)),
    )
