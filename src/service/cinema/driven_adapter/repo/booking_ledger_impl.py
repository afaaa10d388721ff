from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.database.db_error import is_lock_timeout, is_unique_violation
from src.platform.exception.exceptions import ConflictError, NotFoundError, SeatConflictError
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_booking_ledger import IBookingLedger
from src.service.cinema.domain.entity.booking_entity import Booking, BookingStatus
from src.service.cinema.domain.entity.ticket_entity import Ticket
from src.service.cinema.domain.enum.ticket_status import TicketStatus
from src.service.cinema.driven_adapter.model.booking_model import BookingModel, TicketModel
from src.service.cinema.driven_adapter.repo.booking_mapper import (
    apply_booking,
    to_booking,
    to_ticket,
)


class BookingLedgerImpl(IBookingLedger):
    """
    SQLAlchemy booking ledger.

    Runs inside the unit of work's session; flushes but never commits.
    """

    def __init__(self, *, session: AsyncSession):
        self.session = session

    async def _get_model(self, booking_id: int, *, for_update: bool = False) -> BookingModel:
        stmt = select(BookingModel).where(BookingModel.id == booking_id)
        if for_update:
            stmt = stmt.with_for_update()
        db_booking = (await self.session.execute(stmt)).scalar_one_or_none()
        if db_booking is None:
            raise NotFoundError(f'Booking {booking_id} not found')
        return db_booking

    async def _active_ticket_total(self, booking_id: int) -> int:
        total = await self.session.scalar(
            select(func.coalesce(func.sum(TicketModel.price), 0)).where(
                TicketModel.booking_id == booking_id,
                TicketModel.status == TicketStatus.ACTIVE.value,
            )
        )
        return int(total or 0)

    @Logger.io
    async def create_pending_booking(
        self, *, user_id: int, showtime_id: int, idempotency_key: Optional[str] = None
    ) -> Booking:
        booking = Booking.create(
            user_id=user_id, showtime_id=showtime_id, idempotency_key=idempotency_key
        )
        db_booking = BookingModel(
            user_id=booking.user_id,
            showtime_id=booking.showtime_id,
            status=booking.status.value,
            total_amount=booking.total_amount,
            idempotency_key=booking.idempotency_key,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )
        self.session.add(db_booking)
        try:
            await self.session.flush()
        except IntegrityError as e:
            # idempotency_key is the only unique column on booking
            if idempotency_key is not None and is_unique_violation(e):
                raise ConflictError(f'Idempotency key {idempotency_key!r} already used') from e
            raise
        return to_booking(db_booking)

    @Logger.io
    async def attach_ticket(self, *, booking_id: int, seat_id: int, price: int) -> Ticket:
        db_booking = await self._get_model(booking_id)
        db_ticket = TicketModel(
            booking_id=booking_id,
            showtime_id=db_booking.showtime_id,
            seat_id=seat_id,
            price=price,
            status=TicketStatus.ACTIVE.value,
            created_at=datetime.now(timezone.utc),
        )
        self.session.add(db_ticket)
        try:
            # The partial unique index makes check-and-insert a single atomic step
            await self.session.flush()
        except DBAPIError as e:
            if is_unique_violation(e) or is_lock_timeout(e):
                raise SeatConflictError(seat_id=seat_id, booking_id=booking_id) from e
            raise
        return to_ticket(db_ticket)

    @Logger.io
    async def confirm(self, *, booking_id: int, total_amount: int) -> Booking:
        db_booking = await self._get_model(booking_id)
        active_total = await self._active_ticket_total(booking_id)
        booking = to_booking(db_booking).confirm(
            total_amount=total_amount, active_ticket_total=active_total
        )
        apply_booking(db_booking, booking)
        await self.session.flush()
        return booking

    @Logger.io
    async def cancel(self, *, booking_id: int, conflict_seat_id: Optional[int] = None) -> Booking:
        db_booking = await self._get_model(booking_id, for_update=True)
        current = to_booking(db_booking)
        if current.is_cancelled:
            return current

        booking = current.cancel(conflict_seat_id=conflict_seat_id)
        apply_booking(db_booking, booking)
        await self.session.execute(
            update(TicketModel)
            .where(
                TicketModel.booking_id == booking_id,
                TicketModel.status == TicketStatus.ACTIVE.value,
            )
            .values(status=TicketStatus.CANCELLED.value, cancelled_at=booking.cancelled_at)
            .execution_options(synchronize_session=False)
        )
        await self.session.flush()
        return booking

    @Logger.io
    async def transfer(self, *, booking_id: int, new_user_id: int) -> Booking:
        db_booking = await self._get_model(booking_id, for_update=True)
        booking = to_booking(db_booking).transfer_to(new_user_id=new_user_id)
        apply_booking(db_booking, booking)
        await self.session.flush()
        return booking

    @Logger.io
    async def hold_for_inspection(self, *, booking_id: int, reason: str) -> Booking:
        db_booking = await self._get_model(booking_id, for_update=True)
        booking = to_booking(db_booking).hold(reason=reason)
        apply_booking(db_booking, booking)
        await self.session.flush()
        return booking

    @Logger.io
    async def get_by_id(self, *, booking_id: int, for_update: bool = False) -> Optional[Booking]:
        stmt = select(BookingModel).where(BookingModel.id == booking_id)
        if for_update:
            stmt = stmt.with_for_update()
        db_booking = (await self.session.execute(stmt)).scalar_one_or_none()
        return to_booking(db_booking) if db_booking else None

    @Logger.io
    async def find_by_idempotency_key(self, *, idempotency_key: str) -> Optional[Booking]:
        db_booking = (
            await self.session.execute(
                select(BookingModel).where(BookingModel.idempotency_key == idempotency_key)
            )
        ).scalar_one_or_none()
        return to_booking(db_booking) if db_booking else None

    @Logger.io
    async def list_tickets(self, *, booking_id: int) -> List[Ticket]:
        result = await self.session.execute(
            select(TicketModel)
            .where(TicketModel.booking_id == booking_id)
            .order_by(TicketModel.seat_id, TicketModel.id)
        )
        return [to_ticket(db_ticket) for db_ticket in result.scalars()]

    @Logger.io
    async def list_taken_seat_ids(self, *, showtime_id: int) -> set[int]:
        result = await self.session.execute(
            select(TicketModel.seat_id)
            .join(BookingModel, BookingModel.id == TicketModel.booking_id)
            .where(
                TicketModel.showtime_id == showtime_id,
                TicketModel.status == TicketStatus.ACTIVE.value,
                BookingModel.status != BookingStatus.CANCELLED.value,
            )
        )
        return set(result.scalars())

    @Logger.io
    async def list_abandoned_pending(self, *, created_before: datetime) -> List[Booking]:
        result = await self.session.execute(
            select(BookingModel)
            .where(
                BookingModel.status == BookingStatus.PENDING.value,
                BookingModel.hold_reason.is_(None),
                BookingModel.created_at < created_before,
            )
            .order_by(BookingModel.id)
        )
        return [to_booking(db_booking) for db_booking in result.scalars()]
