"""
tests/test_user_data_repository.py

UserDataRepository and SQLAlchemyUserDataStore against in-memory SQLite,
plus session doubles for database error mapping.
"""

from __future__ import annotations

from datetime import date
from unittest.mock import MagicMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError

from app.repositories.errors import StorageError, StorageUnavailableError
from app.repositories.user_data_repository import UserDataRepository
from app.repositories.user_data_store import SQLAlchemyUserDataStore
from conftest import make_record as _record
from db.models.user_data import UserData


def _count(session) -> int:
    return session.scalar(select(func.count()).select_from(UserData))


class TestUserDataRepository:
    def test_bulk_insert_splits_into_sub_batches(self, sqlite_session) -> None:
        execute = MagicMock(wraps=sqlite_session.execute)
        sqlite_session.execute = execute

        inserted = UserDataRepository(sqlite_session).bulk_insert(
            [_record(i) for i in range(1, 8)],
            batch_size=3,
        )
        sqlite_session.commit()

        assert inserted == 7
        assert [len(call.args[1]) for call in execute.call_args_list] == [3, 3, 1]
        assert _count(sqlite_session) == 7

    def test_bulk_insert_empty_is_noop(self, sqlite_session) -> None:
        assert UserDataRepository(sqlite_session).bulk_insert([]) == 0
        assert _count(sqlite_session) == 0

    def test_list_page_orders_by_id_and_offsets(self, sqlite_session) -> None:
        repository = UserDataRepository(sqlite_session)
        repository.bulk_insert([_record(i) for i in range(1, 6)])
        sqlite_session.commit()

        first = repository.list_page(offset=0, limit=2)
        third = repository.list_page(offset=4, limit=2)

        assert [row.email for row in first] == ["user1@example.com", "user2@example.com"]
        assert [row.email for row in third] == ["user5@example.com"]
        assert repository.list_page(offset=10, limit=2) == []

    def test_stored_fields_round_trip(self, sqlite_session) -> None:
        repository = UserDataRepository(sqlite_session)
        repository.bulk_insert([_record(2)])
        sqlite_session.commit()

        row = repository.list_page(offset=0, limit=1)[0]
        assert row.gender == "Other"
        assert row.date_joined == date(2020, 1, 2)
        assert row.is_active is True
        assert row.salary == pytest.approx(2000.0)


class TestSQLAlchemyUserDataStore:
    def test_commits_each_call(self, sqlite_session_factory) -> None:
        store = SQLAlchemyUserDataStore(session_factory=sqlite_session_factory)

        assert store.bulk_insert([_record(1), _record(2)], max_sub_batch=1) == 2

        session = sqlite_session_factory()
        try:
            assert _count(session) == 2
        finally:
            session.close()

    def test_connection_failure_maps_to_unavailable(self) -> None:
        session = MagicMock()
        session.execute.side_effect = OperationalError("INSERT", {}, Exception("connection refused"))
        store = SQLAlchemyUserDataStore(session_factory=lambda: session)

        with pytest.raises(StorageUnavailableError):
            store.bulk_insert([_record(1)])

        session.rollback.assert_called_once()
        session.commit.assert_not_called()
        session.close.assert_called_once()

    def test_other_database_errors_map_to_storage_error(self) -> None:
        session = MagicMock()
        session.execute.side_effect = IntegrityError("INSERT", {}, Exception("constraint"))
        store = SQLAlchemyUserDataStore(session_factory=lambda: session)

        with pytest.raises(StorageError) as ctx:
            store.bulk_insert([_record(1)])

        assert not isinstance(ctx.value, StorageUnavailableError)
        session.rollback.assert_called_once()

    def test_empty_batch_does_not_open_session(self) -> None:
        factory = MagicMock()
        store = SQLAlchemyUserDataStore(session_factory=factory)

        assert store.bulk_insert([]) == 0
        factory.assert_not_called()
