"""
Catalog reference data: movies, halls with their seat layout, showtimes.

Read-only from the booking engine's point of view. Seats are addressed by
(hall, row_label, number) and a showtime sells exactly its hall's seats.
"""

from datetime import date, datetime, time
from typing import Optional

import attrs

from src.platform.exception.exceptions import InvalidRequestError
from src.service.cinema.domain.enum.seat_category import SeatCategory


def _positive(instance: object, attribute: attrs.Attribute, value: int) -> None:
    if value <= 0:
        raise InvalidRequestError(f'{attribute.name} must be positive')


@attrs.define
class Movie:
    title: str
    duration_minutes: int = attrs.field(validator=_positive)
    genre: Optional[str] = None
    rating: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None


@attrs.define(frozen=True)
class Seat:
    hall_id: int
    row_label: str
    number: int
    category: SeatCategory = SeatCategory.STANDARD
    id: Optional[int] = None

    @property
    def label(self) -> str:
        return f'{self.row_label}{self.number}'


@attrs.define
class Hall:
    name: str
    capacity: int = attrs.field(validator=_positive)
    screen_type: str = 'standard'
    id: Optional[int] = None
    created_at: Optional[datetime] = None


@attrs.define
class Showtime:
    movie_id: int
    hall_id: int
    show_date: date
    start_time: time
    end_time: time
    price: int
    id: Optional[int] = None

    @classmethod
    def create(
        cls,
        *,
        movie_id: int,
        hall_id: int,
        show_date: date,
        start_time: time,
        end_time: time,
        price: int,
    ) -> 'Showtime':
        if end_time <= start_time:
            raise InvalidRequestError('end_time must be later than start_time')
        if price < 0:
            raise InvalidRequestError('price must not be negative')
        return cls(
            movie_id=movie_id,
            hall_id=hall_id,
            show_date=show_date,
            start_time=start_time,
            end_time=end_time,
            price=price,
        )

    def overlaps(self, other: 'Showtime') -> bool:
        """Half-open [start, end) windows in the same hall on the same date."""
        if self.hall_id != other.hall_id or self.show_date != other.show_date:
            return False
        return self.start_time < other.end_time and other.start_time < self.end_time


def build_seat_layout(
    *,
    hall_id: int,
    rows: dict[str, int],
    categories: dict[str, SeatCategory] | None = None,
) -> list[Seat]:
    """
    Expand a row -> seat count mapping into Seat entities.

    Example:
        build_seat_layout(hall_id=1, rows={'A': 10, 'B': 10}, categories={'B': SeatCategory.VIP})
    """
    categories = categories or {}
    return [
        Seat(
            hall_id=hall_id,
            row_label=row_label,
            number=number,
            category=categories.get(row_label, SeatCategory.STANDARD),
        )
        for row_label, seat_count in rows.items()
        for number in range(1, seat_count + 1)
    ]
