from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from src.service.cinema.domain.entity.booking_entity import Booking
from src.service.cinema.domain.entity.ticket_entity import Ticket


class IBookingLedger(ABC):
    """
    Durable record of bookings and their tickets.

    All booking/ticket mutation goes through this interface. Methods run inside the
    caller's unit of work and never commit on their own.
    """

    @abstractmethod
    async def create_pending_booking(
        self, *, user_id: int, showtime_id: int, idempotency_key: Optional[str] = None
    ) -> Booking:
        """Raises ConflictError when idempotency_key is already taken"""
        pass

    @abstractmethod
    async def attach_ticket(self, *, booking_id: int, seat_id: int, price: int) -> Ticket:
        """
        Insert an active ticket for the booking's showtime.

        The availability check and the insert are one indivisible step.

        Raises:
            SeatConflictError: the seat already holds an active ticket for this showtime,
                or its lock could not be acquired within the lock timeout
        """
        pass

    @abstractmethod
    async def confirm(self, *, booking_id: int, total_amount: int) -> Booking:
        """Raises IncompleteBookingError if total_amount != sum of active ticket prices"""
        pass

    @abstractmethod
    async def cancel(self, *, booking_id: int, conflict_seat_id: Optional[int] = None) -> Booking:
        """
        Cancel booking and its active tickets. Idempotent. Raises NotFoundError.

        conflict_seat_id records the seat a reservation lost, so a replay can report it.
        """
        pass

    @abstractmethod
    async def transfer(self, *, booking_id: int, new_user_id: int) -> Booking:
        pass

    @abstractmethod
    async def hold_for_inspection(self, *, booking_id: int, reason: str) -> Booking:
        pass

    @abstractmethod
    async def get_by_id(self, *, booking_id: int, for_update: bool = False) -> Optional[Booking]:
        pass

    @abstractmethod
    async def find_by_idempotency_key(self, *, idempotency_key: str) -> Optional[Booking]:
        pass

    @abstractmethod
    async def list_tickets(self, *, booking_id: int) -> List[Ticket]:
        pass

    @abstractmethod
    async def list_taken_seat_ids(self, *, showtime_id: int) -> set[int]:
        """Seats holding an active ticket on a non-cancelled booking"""
        pass

    @abstractmethod
    async def list_abandoned_pending(self, *, created_before: datetime) -> List[Booking]:
        """Pending bookings not held for inspection, created before the cutoff"""
        pass
