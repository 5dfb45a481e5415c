"""
app/services/csv_ingestion_service.py

Bulk CSV ingestion into user_data with bounded concurrency.

One upload flows through:

    reader thread -> bounded chunk queue -> coordinator -> worker pool
        -> parser -> batch writer -> storage

The coordinator dispatches one worker per chunk and joins them all before
reporting. Rejected rows and failed chunk inserts are counted, never fatal;
only an unreadable stream aborts the run, and even then every chunk already
dispatched is allowed to finish.
"""

from __future__ import annotations

import logging
import queue
import threading
from functools import lru_cache
from typing import BinaryIO

from fastapi import UploadFile

from app.config import CSVIngestionSettings, get_csv_ingestion_settings
from app.domain.user_record import (
    Chunk,
    ChunkOutcome,
    IngestionResult,
    IngestionState,
    RowRejection,
    UserRecord,
)
from app.logging_utils import log_event
from app.repositories.user_data_store import UserDataStore
from app.services.batch_writer import BatchWriter
from app.services.chunk_reader import CSVChunkReader, EndOfStream
from app.services.worker_pool import BoundedWorkerPool
from app.validators.user_record_parser import UserRecordParser

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class IngestionAbortedError(RuntimeError):
    """
    Raised when the upload stream failed mid-read.

    ``result`` carries the counts accumulated before the failure; rows from
    chunks dispatched before the failure stay persisted.
    """

    def __init__(self, message: str, *, result: IngestionResult) -> None:
        super().__init__(message)
        self.result = result


# ---------------------------------------------------------------------------
# Coordinator
# ---------------------------------------------------------------------------


class IngestionCoordinator:
    """
    Runs one ingestion: idle -> reading -> draining -> completed,
    or idle -> reading -> aborted when the reader fails fast.

    Instances are single-use.
    """

    def __init__(
        self,
        *,
        store: UserDataStore,
        settings: CSVIngestionSettings,
        parser: UserRecordParser | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self._settings = settings
        self._parser = parser or UserRecordParser()
        self._logger = log or logger
        self._reader = CSVChunkReader(chunk_size=settings.chunk_size, log=self._logger)
        self._writer = BatchWriter(
            store=store,
            max_sub_batch_size=settings.max_sub_batch_size,
            log=self._logger,
        )
        self._pool = BoundedWorkerPool(
            max_concurrency=settings.max_concurrency,
            max_pending=settings.max_pending_chunks,
            log=self._logger,
        )
        self._state = IngestionState.IDLE
        self._outcomes: list[ChunkOutcome] = []
        self._outcomes_lock = threading.Lock()

    @property
    def state(self) -> str:
        return self._state

    @property
    def pool(self) -> BoundedWorkerPool:
        return self._pool

    def ingest(self, stream: BinaryIO) -> IngestionResult:
        """
        Ingest a binary CSV stream and return aggregate counts.

        Raises IngestionAbortedError if the stream could not be read to the end.
        Any other failure while dispatching stops the reader, waits for the
        workers already spawned, then propagates.
        """

        if self._state != IngestionState.IDLE:
            raise RuntimeError("IngestionCoordinator instances are single-use.")

        chunk_queue: queue.Queue[Chunk | EndOfStream] = queue.Queue(
            maxsize=max(1, self._settings.queue_capacity)
        )
        stop_reading = threading.Event()
        reader_thread = threading.Thread(
            target=self._reader.run,
            args=(stream, chunk_queue, stop_reading),
            name="csv-chunk-reader",
        )

        self._state = IngestionState.READING
        reader_thread.start()

        try:
            end = self._dispatch(chunk_queue)
        except BaseException as exc:
            self._state = IngestionState.ABORTED
            log_event(
                self._logger,
                logging.ERROR,
                "ingestion_dispatch_failed",
                error=repr(exc),
                chunks_dispatched=self._pool.spawned,
            )
            stop_reading.set()
            self._drain(chunk_queue)
            reader_thread.join()
            self._pool.wait()
            raise

        reader_thread.join()
        if end.error is None:
            self._state = IngestionState.DRAINING
        self._pool.wait()

        if end.error is not None:
            self._state = IngestionState.ABORTED
            result = self._aggregate(status=IngestionState.ABORTED, error=str(end.error))
            log_event(self._logger, logging.ERROR, "ingestion_aborted", **self._summary_fields(result))
            raise IngestionAbortedError(str(end.error), result=result) from end.error

        self._state = IngestionState.COMPLETED
        result = self._aggregate(status=IngestionState.COMPLETED)
        log_event(self._logger, logging.INFO, "ingestion_completed", **self._summary_fields(result))
        return result

    def _dispatch(self, chunk_queue: queue.Queue) -> EndOfStream:
        while True:
            item = chunk_queue.get()
            if isinstance(item, EndOfStream):
                return item
            self._pool.submit(self._process_chunk, item)

    @staticmethod
    def _drain(chunk_queue: queue.Queue) -> None:
        # Undispatched chunks are dropped; the reader stops before its next put.
        while not isinstance(chunk_queue.get(), EndOfStream):
            pass

    # ------------------------------------------------------------------
    # Worker body
    # ------------------------------------------------------------------

    def _process_chunk(self, chunk: Chunk) -> None:
        rejections: list[RowRejection] = []
        records: list[UserRecord] = []
        try:
            for raw_row in chunk.rows:
                parsed = self._parser.parse(raw_row)
                if isinstance(parsed, RowRejection):
                    rejections.append(parsed)
                    self._log_rejection(parsed)
                    continue
                records.append(parsed)

            written = self._writer.write(records, chunk_sequence=chunk.sequence)
            outcome = ChunkOutcome(
                sequence=chunk.sequence,
                rows_read=len(chunk),
                rows_rejected=len(rejections),
                rows_inserted=len(records) if written else 0,
                rows_failed=0 if written else len(records),
                rejections=tuple(rejections),
            )
        except Exception as exc:  # noqa: BLE001
            log_event(
                self._logger,
                logging.ERROR,
                "chunk_processing_failed",
                chunk=chunk.sequence,
                rows=len(chunk),
                error=repr(exc),
            )
            outcome = ChunkOutcome(
                sequence=chunk.sequence,
                rows_read=len(chunk),
                rows_rejected=len(rejections),
                rows_inserted=0,
                rows_failed=len(chunk) - len(rejections),
                rejections=tuple(rejections),
            )

        with self._outcomes_lock:
            self._outcomes.append(outcome)

    def _log_rejection(self, rejection: RowRejection) -> None:
        if not self._settings.log_validation_errors:
            return
        log_event(
            self._logger,
            logging.WARNING,
            "row_rejected",
            row=rejection.row_number,
            column=rejection.column,
            message=rejection.message,
            raw=list(rejection.raw),
        )

    # ------------------------------------------------------------------
    # Aggregation
    # ------------------------------------------------------------------

    def _aggregate(self, *, status: str, error: str | None = None) -> IngestionResult:
        with self._outcomes_lock:
            outcomes = sorted(self._outcomes, key=lambda outcome: outcome.sequence)

        validation_errors: list[RowRejection] = []
        limit = max(1, self._settings.max_validation_errors)
        for outcome in outcomes:
            if len(validation_errors) >= limit:
                break
            validation_errors.extend(outcome.rejections[: limit - len(validation_errors)])

        return IngestionResult(
            status=status,
            rows_read=sum(outcome.rows_read for outcome in outcomes),
            rows_rejected=sum(outcome.rows_rejected for outcome in outcomes),
            rows_inserted=sum(outcome.rows_inserted for outcome in outcomes),
            rows_failed=sum(outcome.rows_failed for outcome in outcomes),
            chunks_processed=len(outcomes),
            chunks_failed=sum(1 for outcome in outcomes if outcome.failed),
            validation_errors=tuple(validation_errors),
            error=error,
        )

    def _summary_fields(self, result: IngestionResult) -> dict[str, object]:
        return {
            "rows_read": result.rows_read,
            "rows_rejected": result.rows_rejected,
            "rows_inserted": result.rows_inserted,
            "rows_failed": result.rows_failed,
            "chunks_processed": result.chunks_processed,
            "chunks_failed": result.chunks_failed,
            "peak_workers": self._pool.peak_active,
            "error": result.error,
        }


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class CSVIngestionService:
    """
    Upload-facing entrypoint: one coordinator per uploaded file.
    """

    def __init__(self, *, settings: CSVIngestionSettings) -> None:
        self._settings = settings

    @property
    def settings(self) -> CSVIngestionSettings:
        return self._settings

    def ingest_csv(
        self,
        *,
        upload_file: UploadFile,
        store: UserDataStore,
    ) -> IngestionResult:
        """
        Stream an uploaded CSV into storage. The caller owns closing the file.
        """

        raw_file = upload_file.file
        raw_file.seek(0)
        coordinator = IngestionCoordinator(store=store, settings=self._settings)
        return coordinator.ingest(raw_file)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_csv_ingestion_service() -> CSVIngestionService:
    """
    Build and cache the ingestion service with env-driven settings.
    """

    return CSVIngestionService(settings=get_csv_ingestion_settings())
