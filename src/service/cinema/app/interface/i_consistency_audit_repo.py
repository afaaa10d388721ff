from abc import ABC, abstractmethod
from typing import List

from src.service.cinema.domain.entity.booking_entity import Booking
from src.service.cinema.domain.entity.ticket_entity import Ticket


class IConsistencyAuditRepo(ABC):
    """Read-only structural checks over the ledger tables"""

    @abstractmethod
    async def find_orphaned_tickets(self) -> List[Ticket]:
        """Tickets whose booking row does not exist"""
        pass

    @abstractmethod
    async def find_confirmed_bookings_without_active_tickets(self) -> List[Booking]:
        """Bookings that were confirmed at some point and now hold no active ticket"""
        pass

    @abstractmethod
    async def find_total_mismatches(self) -> List[tuple[Booking, int]]:
        """Confirmed bookings paired with the actual sum of their active ticket prices"""
        pass

    @abstractmethod
    async def find_double_booked_seats(self) -> List[tuple[int, int, int]]:
        """(showtime_id, seat_id, active_ticket_count) for counts above one"""
        pass
