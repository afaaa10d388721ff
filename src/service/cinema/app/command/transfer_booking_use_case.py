from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from sqlalchemy.exc import DBAPIError

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import (
    ForbiddenError,
    NotFoundError,
    StorageFailureError,
)
from src.platform.logging.loguru_io import Logger
from src.service.cinema.domain.entity.booking_entity import Booking


class TransferBookingUseCase:
    """Hand a confirmed booking, tickets included, over to another user."""

    def __init__(self, *, uow_factory: UnitOfWorkFactory) -> None:
        self.uow_factory = uow_factory

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
    ) -> Self:
        return cls(uow_factory=uow_factory)

    @Logger.io
    async def transfer(self, *, booking_id: int, requester_id: int, new_user_id: int) -> Booking:
        try:
            async with self.uow_factory() as uow:
                booking = await uow.booking_ledger.get_by_id(
                    booking_id=booking_id, for_update=True
                )
                if not booking:
                    raise NotFoundError('Booking not found')
                if booking.user_id != requester_id:
                    raise ForbiddenError('Only the booking owner can transfer this booking')

                transferred = await uow.booking_ledger.transfer(
                    booking_id=booking_id, new_user_id=new_user_id
                )
                await uow.commit()
        except DBAPIError as e:
            raise StorageFailureError() from e

        Logger.base.info(
            f'🔀 [TRANSFER] Booking {booking_id} moved from user {requester_id} to {new_user_id}'
        )
        return transferred
