import sqlite3

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from src.platform.database.db_error import is_lock_timeout, is_unique_violation


class _PgError(Exception):
    """Stands in for an asyncpg error carrying a SQLSTATE."""

    def __init__(self, sqlstate: str) -> None:
        super().__init__(f'sqlstate {sqlstate}')
        self.sqlstate = sqlstate


@pytest.mark.unit
class TestDbErrorClassification:
    def test_sqlite_unique_failure(self) -> None:
        exc = IntegrityError(
            'INSERT', {}, sqlite3.IntegrityError('UNIQUE constraint failed: ticket.showtime_id')
        )

        assert is_unique_violation(exc)
        assert not is_lock_timeout(exc)

    def test_sqlite_busy_database(self) -> None:
        exc = OperationalError('INSERT', {}, sqlite3.OperationalError('database is locked'))

        assert is_lock_timeout(exc)
        assert not is_unique_violation(exc)

    @pytest.mark.parametrize('sqlstate', ['55P03', '57014'])
    def test_postgres_lock_timeout(self, sqlstate: str) -> None:
        exc = OperationalError('INSERT', {}, _PgError(sqlstate))

        assert is_lock_timeout(exc)

    def test_postgres_unique_violation(self) -> None:
        exc = IntegrityError('INSERT', {}, _PgError('23505'))

        assert is_unique_violation(exc)
        assert not is_lock_timeout(exc)

    def test_other_errors_are_neither(self) -> None:
        exc = OperationalError('SELECT', {}, sqlite3.OperationalError('disk I/O error'))

        assert not is_unique_violation(exc)
        assert not is_lock_timeout(exc)
