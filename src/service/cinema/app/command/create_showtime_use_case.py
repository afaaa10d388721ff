from datetime import date, time
from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from sqlalchemy.exc import DBAPIError

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import ConflictError, StorageFailureError
from src.platform.logging.loguru_io import Logger
from src.service.cinema.domain.entity.catalog_entity import Showtime


class CreateShowtimeUseCase:
    """
    Schedule a movie in a hall.

    A hall shows one thing at a time: the new [start, end) window must not overlap
    any existing showtime in that hall on that date. The same (hall, date, start)
    is additionally rejected by a unique constraint for concurrent creators.
    """

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
    async def create(
        self,
        *,
        movie_id: int,
        hall_id: int,
        show_date: date,
        start_time: time,
        end_time: time,
        price: int,
    ) -> Showtime:
        showtime = Showtime.create(
            movie_id=movie_id,
            hall_id=hall_id,
            show_date=show_date,
            start_time=start_time,
            end_time=end_time,
            price=price,
        )

        try:
            async with self.uow_factory() as uow:
                await uow.catalog_query_repo.get_movie(movie_id=movie_id)
                await uow.catalog_query_repo.get_hall(hall_id=hall_id)

                existing = await uow.catalog_query_repo.list_showtimes_for_hall(
                    hall_id=hall_id, show_date=show_date
                )
                clash = next((other for other in existing if showtime.overlaps(other)), None)
                if clash is not None:
                    raise ConflictError(
                        f'Hall {hall_id} is busy from {clash.start_time} to {clash.end_time} '
                        f'on {show_date} (showtime {clash.id})'
                    )

                created = await uow.catalog_command_repo.create_showtime(showtime=showtime)
                await uow.commit()
        except DBAPIError as e:
            raise StorageFailureError() from e

        Logger.base.info(f'🎬 [SHOWTIME] Showtime {created.id} scheduled in hall {hall_id}')
        return created
