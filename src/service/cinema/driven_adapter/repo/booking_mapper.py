from datetime import datetime, timezone

from src.service.cinema.domain.entity.booking_entity import Booking, BookingStatus
from src.service.cinema.domain.entity.ticket_entity import Ticket
from src.service.cinema.domain.enum.ticket_status import TicketStatus
from src.service.cinema.driven_adapter.model.booking_model import BookingModel, TicketModel


def to_booking(db_booking: BookingModel) -> Booking:
    return Booking(
        id=db_booking.id,
        user_id=db_booking.user_id,
        showtime_id=db_booking.showtime_id,
        status=BookingStatus(db_booking.status),
        total_amount=db_booking.total_amount,
        idempotency_key=db_booking.idempotency_key,
        hold_reason=db_booking.hold_reason,
        conflict_seat_id=db_booking.conflict_seat_id,
        created_at=db_booking.created_at,
        updated_at=db_booking.updated_at,
        confirmed_at=db_booking.confirmed_at,
        cancelled_at=db_booking.cancelled_at,
    )


def to_ticket(db_ticket: TicketModel) -> Ticket:
    return Ticket(
        id=db_ticket.id,
        booking_id=db_ticket.booking_id,
        showtime_id=db_ticket.showtime_id,
        seat_id=db_ticket.seat_id,
        price=db_ticket.price,
        status=TicketStatus(db_ticket.status),
        created_at=db_ticket.created_at,
        cancelled_at=db_ticket.cancelled_at,
    )


def apply_booking(db_booking: BookingModel, booking: Booking) -> None:
    """Copy the mutable booking fields onto a loaded row"""
    db_booking.user_id = booking.user_id
    db_booking.status = booking.status.value
    db_booking.total_amount = booking.total_amount
    db_booking.hold_reason = booking.hold_reason
    db_booking.conflict_seat_id = booking.conflict_seat_id
    db_booking.updated_at = booking.updated_at or datetime.now(timezone.utc)
    db_booking.confirmed_at = booking.confirmed_at
    db_booking.cancelled_at = booking.cancelled_at
