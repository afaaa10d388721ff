import attrs

from src.service.cinema.domain.entity.booking_entity import Booking
from src.service.cinema.domain.entity.ticket_entity import Ticket


@attrs.define(frozen=True)
class BookingDetail:
    """Booking with every ticket it ever issued, cancelled ones included."""

    booking: Booking
    tickets: list[Ticket] = attrs.field(factory=list)

    @property
    def active_tickets(self) -> list[Ticket]:
        return [t for t in self.tickets if t.is_active]
