"""
app/services/chunk_reader.py

Streaming CSV reader that groups rows into fixed-size chunks.

The reader is the single producer of the ingestion pipeline. It never holds
more than one chunk of rows itself; read-ahead is throttled by the bounded
queue it publishes to.
"""

from __future__ import annotations

import csv
import io
import logging
import queue
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from typing import BinaryIO

from app.domain.user_record import Chunk, RawRow
from app.logging_utils import log_event

logger = logging.getLogger(__name__)


class StreamReadError(RuntimeError):
    """
    Raised when the upload stream becomes unreadable or is not valid CSV.
    """


@dataclass(frozen=True)
class EndOfStream:
    """
    Terminal queue item. ``error`` is set when the reader stopped early.
    """

    error: StreamReadError | None = None
    chunks_emitted: int = 0


class CSVChunkReader:
    """
    Reads a binary CSV stream incrementally and emits Chunks of at most
    ``chunk_size`` rows. Exactly one header line is skipped.
    """

    def __init__(
        self,
        *,
        chunk_size: int,
        encoding: str = "utf-8-sig",
        log: logging.Logger | None = None,
    ) -> None:
        self._chunk_size = max(1, chunk_size)
        self._encoding = encoding
        self._logger = log or logger

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    def iter_chunks(self, stream: BinaryIO) -> Iterator[Chunk]:
        """
        Yield chunks in file order.

        Raises StreamReadError on the first decode/format/IO failure; rows
        buffered for the current partial chunk are dropped in that case.
        """

        text_stream = io.TextIOWrapper(stream, encoding=self._encoding, newline="")
        try:
            reader = csv.reader(text_stream, strict=True)
            try:
                next(reader)
            except StopIteration:
                return

            sequence = 0
            rows: list[RawRow] = []
            for row_number, fields in enumerate(reader, start=2):
                if not fields:
                    continue
                rows.append(RawRow(row_number=row_number, fields=tuple(fields)))
                if len(rows) >= self._chunk_size:
                    yield Chunk(sequence=sequence, rows=tuple(rows))
                    sequence += 1
                    rows = []

            if rows:
                yield Chunk(sequence=sequence, rows=tuple(rows))
        except UnicodeDecodeError as exc:
            raise StreamReadError("CSV must be UTF-8 encoded.") from exc
        except csv.Error as exc:
            raise StreamReadError(f"Invalid CSV format: {exc}") from exc
        except OSError as exc:
            raise StreamReadError(f"Failed to read upload stream: {exc}") from exc
        finally:
            try:
                text_stream.detach()
            except ValueError:
                pass

    def run(
        self,
        stream: BinaryIO,
        out_queue: queue.Queue,
        stop: threading.Event | None = None,
    ) -> None:
        """
        Producer task body: publish every chunk, then an EndOfStream marker.

        ``out_queue.put`` blocks while the queue is full. Setting ``stop``
        ends reading before the next chunk is published. The marker is always
        published, so the consumer never waits forever.
        """

        emitted = 0
        error: StreamReadError | None = None
        try:
            for chunk in self.iter_chunks(stream):
                if stop is not None and stop.is_set():
                    break
                out_queue.put(chunk)
                emitted += 1
        except StreamReadError as exc:
            error = exc
            log_event(
                self._logger,
                logging.ERROR,
                "stream_error",
                error=str(exc),
                chunks_emitted=emitted,
            )
        except Exception as exc:  # noqa: BLE001
            self._logger.exception("CSV chunk reader crashed after %d chunks", emitted)
            error = StreamReadError(f"Unexpected reader failure: {exc}")
        finally:
            out_queue.put(EndOfStream(error=error, chunks_emitted=emitted))
