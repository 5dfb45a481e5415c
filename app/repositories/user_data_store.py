"""
Storage collaborator used by the CSV ingestion pipeline.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.domain.user_record import UserRecord
from app.repositories.errors import StorageError, StorageUnavailableError
from app.repositories.user_data_repository import DEFAULT_SUB_BATCH_SIZE, UserDataRepository


class UserDataStore(ABC):
    """
    Write-side storage abstraction for validated user records.

    Implementations must be safe to call from several worker threads at once.
    """

    @abstractmethod
    def bulk_insert(
        self,
        records: Sequence[UserRecord],
        *,
        max_sub_batch: int = DEFAULT_SUB_BATCH_SIZE,
    ) -> int:
        """
        Persist records in sub-batches of at most ``max_sub_batch`` rows.

        Returns the inserted row count; raises StorageError on failure.
        """


class SQLAlchemyUserDataStore(UserDataStore):
    """
    Persist user records through the repository, one session per call.

    A fresh session per call keeps concurrent workers off each other's
    connections; each call is committed as a single transaction.
    """

    def __init__(self, *, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def bulk_insert(
        self,
        records: Sequence[UserRecord],
        *,
        max_sub_batch: int = DEFAULT_SUB_BATCH_SIZE,
    ) -> int:
        if not records:
            return 0

        session = self._session_factory()
        try:
            inserted = UserDataRepository(session).bulk_insert(
                records,
                batch_size=max_sub_batch,
            )
            session.commit()
            return inserted
        except SQLAlchemyError as exc:
            session.rollback()
            if _is_connection_failure(exc):
                raise StorageUnavailableError(f"Database unavailable: {exc}") from exc
            raise StorageError(f"Bulk insert of {len(records)} rows failed: {exc}") from exc
        finally:
            session.close()


def _is_connection_failure(exc: SQLAlchemyError) -> bool:
    if isinstance(exc, OperationalError):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated
