"""
Unit of Work Pattern - one database transaction shared by the cinema repositories

Architecture:
- UoW owns the session lifecycle: a fresh session per `async with`
- UoW owns commit/rollback; leaving the block without commit rolls back
- Repositories receive the UoW session, so everything inside one block is one transaction
- Use cases take a UoW factory and open one UoW per transaction they need
"""

from __future__ import annotations

import abc
from contextlib import AbstractAsyncContextManager
from typing import TYPE_CHECKING, Callable

from sqlalchemy.ext.asyncio import AsyncSession


if TYPE_CHECKING:
    from src.service.cinema.app.interface.i_booking_ledger import IBookingLedger
    from src.service.cinema.app.interface.i_catalog_command_repo import ICatalogCommandRepo
    from src.service.cinema.app.interface.i_catalog_query_repo import ICatalogQueryRepo
    from src.service.cinema.app.interface.i_consistency_audit_repo import (
        IConsistencyAuditRepo,
    )


class AbstractUnitOfWork(abc.ABC):
    """
    Abstract Unit of Work for the cinema service

    Usage:
        async with uow_factory() as uow:
            booking = await uow.booking_ledger.create_pending_booking(...)
            await uow.commit()
    """

    catalog_query_repo: ICatalogQueryRepo
    catalog_command_repo: ICatalogCommandRepo
    booking_ledger: IBookingLedger
    consistency_audit_repo: IConsistencyAuditRepo

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        """Commit the transaction"""
        await self._commit()

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    def __init__(
        self, session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]]
    ) -> None:
        self.session_factory = session_factory
        self._session_cm: AbstractAsyncContextManager[AsyncSession] | None = None
        self.session: AsyncSession | None = None

    async def __aenter__(self):
        from src.service.cinema.driven_adapter.repo.booking_ledger_impl import BookingLedgerImpl
        from src.service.cinema.driven_adapter.repo.catalog_command_repo_impl import (
            CatalogCommandRepoImpl,
        )
        from src.service.cinema.driven_adapter.repo.catalog_query_repo_impl import (
            CatalogQueryRepoImpl,
        )
        from src.service.cinema.driven_adapter.repo.consistency_audit_repo_impl import (
            ConsistencyAuditRepoImpl,
        )

        self._session_cm = self.session_factory()
        self.session = await self._session_cm.__aenter__()

        # Repositories share the session, hence the transaction
        self.catalog_query_repo = CatalogQueryRepoImpl(session=self.session)
        self.catalog_command_repo = CatalogCommandRepoImpl(session=self.session)
        self.booking_ledger = BookingLedgerImpl(session=self.session)
        self.consistency_audit_repo = ConsistencyAuditRepoImpl(session=self.session)

        return await super().__aenter__()

    async def __aexit__(self, exc_type, exc, tb):
        try:
            await super().__aexit__(exc_type, exc, tb)
        finally:
            assert self._session_cm is not None
            await self._session_cm.__aexit__(exc_type, exc, tb)
            self._session_cm = None
            self.session = None

    async def _commit(self):
        assert self.session is not None, 'UnitOfWork used outside of `async with`'
        await self.session.commit()

    async def rollback(self) -> None:
        if self.session is not None:
            await self.session.rollback()


UnitOfWorkFactory = Callable[[], AbstractUnitOfWork]
