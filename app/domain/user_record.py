"""
app/domain/user_record.py

Domain models used by the CSV bulk-ingestion pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class RawRow:
    """
    One delimited input line split into fields, tagged with its CSV record number.
    """

    row_number: int
    fields: tuple[str, ...]


@dataclass(frozen=True)
class Chunk:
    """
    Bounded, ordered batch of raw rows handed to exactly one worker.
    """

    sequence: int
    rows: tuple[RawRow, ...]

    def __len__(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class UserRecord:
    """
    Validated user record ready for persistence.
    """

    first_name: str
    last_name: str
    email: str
    age: int
    gender: str
    department: str
    company: str
    salary: float
    date_joined: date
    is_active: bool


@dataclass(frozen=True)
class RowRejection:
    """
    One rejected CSV row and the first reason it failed.
    """

    row_number: int
    message: str
    column: str | None = None
    value: str | None = None
    raw: tuple[str, ...] = ()


@dataclass(frozen=True)
class ChunkOutcome:
    """
    Counters reported by one worker once its chunk is finished.
    """

    sequence: int
    rows_read: int
    rows_rejected: int
    rows_inserted: int
    rows_failed: int
    rejections: tuple[RowRejection, ...] = ()

    @property
    def failed(self) -> bool:
        return self.rows_failed > 0


class IngestionState:
    IDLE = "idle"
    READING = "reading"
    DRAINING = "draining"
    COMPLETED = "completed"
    ABORTED = "aborted"


@dataclass(frozen=True)
class IngestionResult:
    """
    Aggregate outcome of one CSV upload.

    rows_read == rows_rejected + rows_inserted + rows_failed always holds;
    rows_failed counts valid rows lost to a failed chunk insert.
    """

    status: str
    rows_read: int = 0
    rows_rejected: int = 0
    rows_inserted: int = 0
    rows_failed: int = 0
    chunks_processed: int = 0
    chunks_failed: int = 0
    validation_errors: tuple[RowRejection, ...] = ()
    error: str | None = None

    @property
    def rows_attempted(self) -> int:
        return self.rows_inserted + self.rows_failed
