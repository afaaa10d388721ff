from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from sqlalchemy.exc import DBAPIError

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import StorageFailureError
from src.platform.logging.loguru_io import Logger
from src.service.cinema.domain.value_object.seat_availability import SeatAvailability


class GetAvailabilityUseCase:
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
    async def get_availability(self, *, showtime_id: int) -> List[SeatAvailability]:
        """Every seat of the showtime's hall, in seat map order, with its availability."""
        try:
            async with self.uow_factory() as uow:
                showtime = await uow.catalog_query_repo.get_showtime(showtime_id=showtime_id)
                seats = await uow.catalog_query_repo.list_hall_seats(hall_id=showtime.hall_id)
                taken = await uow.booking_ledger.list_taken_seat_ids(showtime_id=showtime_id)
        except DBAPIError as e:
            raise StorageFailureError() from e

        return [
            SeatAvailability(
                seat_id=seat.id or 0,
                row_label=seat.row_label,
                seat_number=seat.number,
                category=seat.category,
                available=seat.id not in taken,
            )
            for seat in seats
        ]
