"""
SQLAlchemy async engine and session management

Database owns one AsyncEngine and hands out sessions for the unit of work.

Backends:
- PostgreSQL (asyncpg): pooled connections, `lock_timeout` set per connection so a
  blocked row lock fails fast instead of waiting forever
- SQLite (aiosqlite): local runs and tests. Every transaction is opened with
  BEGIN IMMEDIATE so writers serialize on the database lock, and the busy timeout
  bounds how long a writer waits for it
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from src.platform.config.core_setting import Settings
from src.platform.logging.loguru_io import Logger


class Base(DeclarativeBase):
    pass


class Database:
    def __init__(
        self,
        *,
        url: str,
        lock_timeout_ms: int = 5000,
        pool_size: int = 10,
        max_overflow: int = 5,
        pool_timeout: int = 30,
        pool_recycle: int = 3600,
        pool_pre_ping: bool = True,
        enforce_foreign_keys: bool = True,
    ) -> None:
        self.url = url
        self.lock_timeout_ms = lock_timeout_ms
        self.enforce_foreign_keys = enforce_foreign_keys
        self._pool_options: dict[str, Any] = {
            'pool_size': pool_size,
            'max_overflow': max_overflow,
            'pool_timeout': pool_timeout,
            'pool_recycle': pool_recycle,
            'pool_pre_ping': pool_pre_ping,
        }
        self._engine = self._create_engine()
        self._session_maker = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> 'Database':
        return cls(
            url=settings.DATABASE_URL_ASYNC,
            lock_timeout_ms=settings.DB_LOCK_TIMEOUT_MS,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_POOL_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_pre_ping=settings.DB_POOL_PRE_PING,
        )

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith('sqlite')

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    def _create_engine(self) -> AsyncEngine:
        if self.is_sqlite:
            engine = create_async_engine(
                self.url,
                echo=False,
                connect_args={'timeout': self.lock_timeout_ms / 1000},
            )
            self._install_sqlite_hooks(engine)
            return engine

        return create_async_engine(
            self.url,
            echo=False,
            connect_args={'server_settings': {'lock_timeout': str(self.lock_timeout_ms)}},
            **self._pool_options,
        )

    def _install_sqlite_hooks(self, engine: AsyncEngine) -> None:
        foreign_keys = 'ON' if self.enforce_foreign_keys else 'OFF'

        @event.listens_for(engine.sync_engine, 'connect')
        def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
            # pysqlite's implicit BEGIN is disabled so the 'begin' hook controls it
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute(f'PRAGMA foreign_keys={foreign_keys}')
            cursor.close()

        @event.listens_for(engine.sync_engine, 'begin')
        def _on_begin(conn: Any) -> None:
            conn.exec_driver_sql('BEGIN IMMEDIATE')

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Rolls back on exception and closes the session on exit."""
        async with self._session_maker() as session:
            yield session

    async def create_all(self) -> None:
        """Create tables if they don't exist"""
        # Registers every model on Base.metadata
        import src.service.cinema.driven_adapter.model  # noqa: F401

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)
        Logger.base.info('🗄️  [DB] Tables ready')

    async def dispose(self) -> None:
        await self._engine.dispose()
