from datetime import datetime, timezone
from enum import StrEnum
from typing import Optional

import attrs

from src.platform.exception.exceptions import (
    DomainError,
    IncompleteBookingError,
    InvalidRequestError,
)
from src.platform.logging.loguru_io import Logger


class BookingStatus(StrEnum):
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'


@attrs.define
class Booking:
    """
    A user's claim on a set of seats for one showtime.

    Lifecycle:
        pending -> confirmed    (all tickets written, totals match)
        pending -> cancelled    (seat conflict, abandoned, or requested)
        confirmed -> cancelled  (requested; tickets cascade to cancelled)
        cancelled -> cancelled  (no-op)
    """

    user_id: int
    showtime_id: int
    status: BookingStatus = BookingStatus.PENDING
    total_amount: int = 0
    idempotency_key: Optional[str] = None
    hold_reason: Optional[str] = None
    conflict_seat_id: Optional[int] = None  # seat lost to a concurrent booking
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls, *, user_id: int, showtime_id: int, idempotency_key: Optional[str] = None
    ) -> 'Booking':
        if idempotency_key is not None and not idempotency_key.strip():
            raise InvalidRequestError('idempotency_key must not be blank')

        now = datetime.now(timezone.utc)
        return cls(
            user_id=user_id,
            showtime_id=showtime_id,
            status=BookingStatus.PENDING,
            total_amount=0,
            idempotency_key=idempotency_key,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_cancelled(self) -> bool:
        return self.status == BookingStatus.CANCELLED

    @Logger.io
    def confirm(self, *, total_amount: int, active_ticket_total: int) -> 'Booking':
        """
        Confirm once every ticket is durably written.

        Raises:
            DomainError: booking is not pending
            IncompleteBookingError: total_amount differs from the active tickets' sum
        """
        if self.status == BookingStatus.CONFIRMED:
            raise DomainError('Booking already confirmed')
        elif self.status == BookingStatus.CANCELLED:
            raise DomainError('Cannot confirm cancelled booking')

        if total_amount != active_ticket_total:
            raise IncompleteBookingError(
                booking_id=self.id or 0, expected=total_amount, actual=active_ticket_total
            )
        if active_ticket_total == 0:
            raise DomainError('Cannot confirm booking without tickets')

        now = datetime.now(timezone.utc)
        return attrs.evolve(
            self,
            status=BookingStatus.CONFIRMED,
            total_amount=total_amount,
            confirmed_at=now,
            updated_at=now,
        )

    @Logger.io
    def cancel(self, *, conflict_seat_id: Optional[int] = None) -> 'Booking':
        # Cancelling twice returns the same terminal state
        if self.status == BookingStatus.CANCELLED:
            return self
        if conflict_seat_id is not None and self.status != BookingStatus.PENDING:
            raise DomainError('Only a pending booking can lose a seat')

        now = datetime.now(timezone.utc)
        return attrs.evolve(
            self,
            status=BookingStatus.CANCELLED,
            conflict_seat_id=conflict_seat_id,
            cancelled_at=now,
            updated_at=now,
        )

    @Logger.io
    def hold(self, *, reason: str) -> 'Booking':
        if self.status != BookingStatus.PENDING:
            raise DomainError('Only pending bookings can be held for inspection')
        return attrs.evolve(self, hold_reason=reason, updated_at=datetime.now(timezone.utc))

    @Logger.io
    def transfer_to(self, *, new_user_id: int) -> 'Booking':
        if self.status != BookingStatus.CONFIRMED:
            raise DomainError('Only confirmed bookings can be transferred')
        if new_user_id == self.user_id:
            raise InvalidRequestError('Booking already belongs to this user')
        return attrs.evolve(self, user_id=new_user_id, updated_at=datetime.now(timezone.utc))

    def is_abandoned(self, *, now: datetime, timeout_seconds: int) -> bool:
        if self.status != BookingStatus.PENDING or self.hold_reason or self.created_at is None:
            return False
        return (now - self.created_at).total_seconds() > timeout_seconds
