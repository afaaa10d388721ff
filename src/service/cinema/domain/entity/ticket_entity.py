from datetime import datetime, timezone
from typing import Optional

import attrs

from src.service.cinema.domain.enum.ticket_status import TicketStatus


@attrs.define
class Ticket:
    """One seat of one booking. Price is copied from the showtime at issuance."""

    booking_id: int
    showtime_id: int
    seat_id: int
    price: int
    status: TicketStatus = TicketStatus.ACTIVE
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == TicketStatus.ACTIVE

    def cancel(self) -> 'Ticket':
        if self.status == TicketStatus.CANCELLED:
            return self
        return attrs.evolve(
            self, status=TicketStatus.CANCELLED, cancelled_at=datetime.now(timezone.utc)
        )
