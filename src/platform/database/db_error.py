"""
Classify driver errors raised through SQLAlchemy.

Only two storage outcomes carry domain meaning for the booking engine:
- unique violation: another booking already holds the row the index protects
- lock timeout: a competing transaction held the lock past DB_LOCK_TIMEOUT_MS
Everything else is a storage failure.
"""

from sqlalchemy.exc import DBAPIError


# PostgreSQL SQLSTATE codes
UNIQUE_VIOLATION = '23505'
LOCK_NOT_AVAILABLE = '55P03'
QUERY_CANCELED = '57014'

# SQLite reports these as plain messages
_SQLITE_UNIQUE_MESSAGES = ('unique constraint failed',)
_SQLITE_LOCK_MESSAGES = ('database is locked', 'database table is locked')


def _sqlstate(exc: DBAPIError) -> str | None:
    orig = exc.orig
    return getattr(orig, 'sqlstate', None) or getattr(orig, 'pgcode', None)


def _message(exc: DBAPIError) -> str:
    return str(exc.orig).lower()


def is_unique_violation(exc: DBAPIError) -> bool:
    state = _sqlstate(exc)
    if state is not None:
        return state == UNIQUE_VIOLATION
    return any(msg in _message(exc) for msg in _SQLITE_UNIQUE_MESSAGES)


def is_lock_timeout(exc: DBAPIError) -> bool:
    state = _sqlstate(exc)
    if state is not None:
        return state in (LOCK_NOT_AVAILABLE, QUERY_CANCELED)
    return any(msg in _message(exc) for msg in _SQLITE_LOCK_MESSAGES)
