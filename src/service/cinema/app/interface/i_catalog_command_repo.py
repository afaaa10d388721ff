from abc import ABC, abstractmethod
from typing import List

from src.service.cinema.domain.entity.catalog_entity import Hall, Movie, Seat, Showtime


class ICatalogCommandRepo(ABC):
    @abstractmethod
    async def create_movie(self, *, movie: Movie) -> Movie:
        pass

    @abstractmethod
    async def create_hall(self, *, hall: Hall, seats: List[Seat]) -> tuple[Hall, List[Seat]]:
        """Create the hall together with its seat layout; seat hall_id is ignored"""
        pass

    @abstractmethod
    async def create_showtime(self, *, showtime: Showtime) -> Showtime:
        """Raises ConflictError if the hall already has a showtime at that date and start time"""
        pass
