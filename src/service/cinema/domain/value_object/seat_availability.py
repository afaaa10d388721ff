import attrs

from src.service.cinema.domain.enum.seat_category import SeatCategory


@attrs.define(frozen=True)
class SeatAvailability:
    seat_id: int
    row_label: str
    seat_number: int
    category: SeatCategory
    available: bool
