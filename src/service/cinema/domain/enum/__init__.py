"""Cinema Domain Enums"""

from src.service.cinema.domain.enum.seat_category import SeatCategory
from src.service.cinema.domain.enum.ticket_status import TicketStatus

__all__ = ['SeatCategory', 'TicketStatus']
