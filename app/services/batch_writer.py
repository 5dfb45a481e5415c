"""
app/services/batch_writer.py

Writes one chunk's validated records through the storage collaborator.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from app.domain.user_record import UserRecord
from app.logging_utils import log_event
from app.repositories.errors import StorageError, StorageUnavailableError
from app.repositories.user_data_store import UserDataStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_SUB_BATCH_SIZE = 10_000


class BatchWriter:
    """
    One bulk insert per chunk; success or failure is reported for the chunk
    as a whole. Failed chunks are not retried.
    """

    def __init__(
        self,
        *,
        store: UserDataStore,
        max_sub_batch_size: int = DEFAULT_MAX_SUB_BATCH_SIZE,
        log: logging.Logger | None = None,
    ) -> None:
        self._store = store
        self._max_sub_batch_size = max(1, max_sub_batch_size)
        self._logger = log or logger

    def write(self, records: Sequence[UserRecord], *, chunk_sequence: int | None = None) -> bool:
        """
        Insert ``records``. An empty sequence is a no-op that counts as success.
        """

        if not records:
            return True

        try:
            self._store.bulk_insert(records, max_sub_batch=self._max_sub_batch_size)
        except StorageError as exc:
            log_event(
                self._logger,
                logging.ERROR,
                "chunk_write_failed",
                chunk=chunk_sequence,
                rows=len(records),
                storage_unavailable=isinstance(exc, StorageUnavailableError),
                error=str(exc),
            )
            return False
        return True
