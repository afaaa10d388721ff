from datetime import date
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_catalog_query_repo import ICatalogQueryRepo
from src.service.cinema.domain.entity.catalog_entity import Hall, Movie, Seat, Showtime
from src.service.cinema.domain.enum.seat_category import SeatCategory
from src.service.cinema.driven_adapter.model.catalog_model import (
    HallModel,
    MovieModel,
    SeatModel,
    ShowtimeModel,
)


class CatalogQueryRepoImpl(ICatalogQueryRepo):
    def __init__(self, *, session: AsyncSession):
        self.session = session

    @staticmethod
    def _to_showtime(db_showtime: ShowtimeModel) -> Showtime:
        return Showtime(
            id=db_showtime.id,
            movie_id=db_showtime.movie_id,
            hall_id=db_showtime.hall_id,
            show_date=db_showtime.show_date,
            start_time=db_showtime.start_time,
            end_time=db_showtime.end_time,
            price=db_showtime.price,
        )

    @staticmethod
    def _to_hall(db_hall: HallModel) -> Hall:
        return Hall(
            id=db_hall.id,
            name=db_hall.name,
            capacity=db_hall.capacity,
            screen_type=db_hall.screen_type,
            created_at=db_hall.created_at,
        )

    @staticmethod
    def _to_movie(db_movie: MovieModel) -> Movie:
        return Movie(
            id=db_movie.id,
            title=db_movie.title,
            genre=db_movie.genre,
            duration_minutes=db_movie.duration_minutes,
            rating=db_movie.rating,
            created_at=db_movie.created_at,
        )

    @staticmethod
    def _to_seat(db_seat: SeatModel) -> Seat:
        return Seat(
            id=db_seat.id,
            hall_id=db_seat.hall_id,
            row_label=db_seat.row_label,
            number=db_seat.seat_number,
            category=SeatCategory(db_seat.category),
        )

    @Logger.io
    async def get_showtime(self, *, showtime_id: int) -> Showtime:
        db_showtime = await self.session.get(ShowtimeModel, showtime_id)
        if db_showtime is None:
            raise NotFoundError(f'Showtime {showtime_id} not found')
        return self._to_showtime(db_showtime)

    @Logger.io
    async def get_hall(self, *, hall_id: int) -> Hall:
        db_hall = await self.session.get(HallModel, hall_id)
        if db_hall is None:
            raise NotFoundError(f'Hall {hall_id} not found')
        return self._to_hall(db_hall)

    @Logger.io
    async def get_movie(self, *, movie_id: int) -> Movie:
        db_movie = await self.session.get(MovieModel, movie_id)
        if db_movie is None:
            raise NotFoundError(f'Movie {movie_id} not found')
        return self._to_movie(db_movie)

    @Logger.io
    async def list_hall_seats(self, *, hall_id: int) -> List[Seat]:
        result = await self.session.execute(
            select(SeatModel)
            .where(SeatModel.hall_id == hall_id)
            .order_by(SeatModel.row_label, SeatModel.seat_number)
        )
        return [self._to_seat(db_seat) for db_seat in result.scalars()]

    @Logger.io
    async def list_showtimes_for_hall(self, *, hall_id: int, show_date: date) -> List[Showtime]:
        result = await self.session.execute(
            select(ShowtimeModel)
            .where(ShowtimeModel.hall_id == hall_id, ShowtimeModel.show_date == show_date)
            .order_by(ShowtimeModel.start_time)
        )
        return [self._to_showtime(db_showtime) for db_showtime in result.scalars()]
