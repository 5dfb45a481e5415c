"""
app/repositories/user_data_repository.py

Persistence layer for user_data rows.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import insert, select
from sqlalchemy.orm import Session

from app.domain.user_record import UserRecord
from db.models.user_data import UserData

DEFAULT_SUB_BATCH_SIZE = 10_000


class UserDataRepository:
    """
    Repository for paginated reads and sub-batched bulk inserts of user_data.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_page(self, *, offset: int, limit: int) -> list[UserData]:
        """
        Return one page of rows ordered by ascending id.
        """

        stmt = (
            select(UserData)
            .order_by(UserData.id.asc())
            .offset(max(0, offset))
            .limit(max(1, limit))
        )
        return list(self._session.scalars(stmt).all())

    def bulk_insert(
        self,
        rows: Sequence[UserRecord],
        *,
        batch_size: int = DEFAULT_SUB_BATCH_SIZE,
    ) -> int:
        """
        Insert records with one multi-row INSERT per sub-batch.

        Does not commit; the caller owns the transaction.
        """

        if not rows:
            return 0

        size = max(1, batch_size)
        inserted = 0
        for start in range(0, len(rows), size):
            payloads = [self._to_payload(row) for row in rows[start : start + size]]
            self._session.execute(insert(UserData), payloads)
            inserted += len(payloads)
        return inserted

    @staticmethod
    def _to_payload(row: UserRecord) -> dict[str, Any]:
        return {
            "first_name": row.first_name,
            "last_name": row.last_name,
            "email": row.email,
            "age": row.age,
            "gender": row.gender,
            "department": row.department,
            "company": row.company,
            "salary": row.salary,
            "date_joined": row.date_joined,
            "is_active": row.is_active,
        }
