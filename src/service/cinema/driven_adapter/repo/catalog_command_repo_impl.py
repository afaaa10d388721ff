from datetime import datetime, timezone
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.database.db_error import is_unique_violation
from src.platform.exception.exceptions import ConflictError
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_catalog_command_repo import ICatalogCommandRepo
from src.service.cinema.domain.entity.catalog_entity import Hall, Movie, Seat, Showtime
from src.service.cinema.driven_adapter.model.catalog_model import (
    HallModel,
    MovieModel,
    SeatModel,
    ShowtimeModel,
)
from src.service.cinema.driven_adapter.repo.catalog_query_repo_impl import CatalogQueryRepoImpl


class CatalogCommandRepoImpl(ICatalogCommandRepo):
    def __init__(self, *, session: AsyncSession):
        self.session = session

    @Logger.io
    async def create_movie(self, *, movie: Movie) -> Movie:
        db_movie = MovieModel(
            title=movie.title,
            genre=movie.genre,
            duration_minutes=movie.duration_minutes,
            rating=movie.rating,
            created_at=movie.created_at or datetime.now(timezone.utc),
        )
        self.session.add(db_movie)
        await self.session.flush()
        return CatalogQueryRepoImpl._to_movie(db_movie)

    @Logger.io
    async def create_hall(self, *, hall: Hall, seats: List[Seat]) -> tuple[Hall, List[Seat]]:
        db_hall = HallModel(
            name=hall.name,
            capacity=hall.capacity,
            screen_type=hall.screen_type,
            created_at=hall.created_at or datetime.now(timezone.utc),
        )
        self.session.add(db_hall)
        try:
            await self.session.flush()
        except IntegrityError as e:
            if is_unique_violation(e):
                raise ConflictError(f'Hall {hall.name!r} already exists') from e
            raise

        db_seats = [
            SeatModel(
                hall_id=db_hall.id,
                row_label=seat.row_label,
                seat_number=seat.number,
                category=seat.category.value,
            )
            for seat in seats
        ]
        self.session.add_all(db_seats)
        try:
            await self.session.flush()
        except IntegrityError as e:
            if is_unique_violation(e):
                raise ConflictError('Seat layout contains duplicate positions') from e
            raise

        return (
            CatalogQueryRepoImpl._to_hall(db_hall),
            [CatalogQueryRepoImpl._to_seat(db_seat) for db_seat in db_seats],
        )

    @Logger.io
    async def create_showtime(self, *, showtime: Showtime) -> Showtime:
        db_showtime = ShowtimeModel(
            movie_id=showtime.movie_id,
            hall_id=showtime.hall_id,
            show_date=showtime.show_date,
            start_time=showtime.start_time,
            end_time=showtime.end_time,
            price=showtime.price,
        )
        self.session.add(db_showtime)
        try:
            await self.session.flush()
        except IntegrityError as e:
            if is_unique_violation(e):
                raise ConflictError(
                    f'Hall {showtime.hall_id} already has a showtime at '
                    f'{showtime.show_date} {showtime.start_time}'
                ) from e
            raise
        return CatalogQueryRepoImpl._to_showtime(db_showtime)
