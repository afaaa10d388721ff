from abc import ABC, abstractmethod
from datetime import date
from typing import List

from src.service.cinema.domain.entity.catalog_entity import Hall, Movie, Seat, Showtime


class ICatalogQueryRepo(ABC):
    """Seat map and showtime lookups. Missing rows raise NotFoundError."""

    @abstractmethod
    async def get_showtime(self, *, showtime_id: int) -> Showtime:
        pass

    @abstractmethod
    async def get_hall(self, *, hall_id: int) -> Hall:
        pass

    @abstractmethod
    async def get_movie(self, *, movie_id: int) -> Movie:
        pass

    @abstractmethod
    async def list_hall_seats(self, *, hall_id: int) -> List[Seat]:
        """Seats ordered by (row_label, number)"""
        pass

    @abstractmethod
    async def list_showtimes_for_hall(self, *, hall_id: int, show_date: date) -> List[Showtime]:
        pass
