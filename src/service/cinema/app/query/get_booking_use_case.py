from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from sqlalchemy.exc import DBAPIError

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import ForbiddenError, NotFoundError, StorageFailureError
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.dto.booking_detail import BookingDetail


class GetBookingUseCase:
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
    async def get(self, *, booking_id: int, requester_id: int) -> BookingDetail:
        try:
            async with self.uow_factory() as uow:
                booking = await uow.booking_ledger.get_by_id(booking_id=booking_id)
                if not booking:
                    raise NotFoundError('Booking not found')
                if booking.user_id != requester_id:
                    raise ForbiddenError('Only the booking owner can view this booking')
                tickets = await uow.booking_ledger.list_tickets(booking_id=booking_id)
        except DBAPIError as e:
            raise StorageFailureError() from e

        return BookingDetail(booking=booking, tickets=tickets)
