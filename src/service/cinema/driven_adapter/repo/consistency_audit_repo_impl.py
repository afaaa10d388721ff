from typing import List

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_consistency_audit_repo import IConsistencyAuditRepo
from src.service.cinema.domain.entity.booking_entity import Booking, BookingStatus
from src.service.cinema.domain.entity.ticket_entity import Ticket
from src.service.cinema.domain.enum.ticket_status import TicketStatus
from src.service.cinema.driven_adapter.model.booking_model import BookingModel, TicketModel
from src.service.cinema.driven_adapter.repo.booking_mapper import to_booking, to_ticket


class ConsistencyAuditRepoImpl(IConsistencyAuditRepo):
    def __init__(self, *, session: AsyncSession):
        self.session = session

    @staticmethod
    def _active_tickets_of_booking():
        return and_(
            TicketModel.booking_id == BookingModel.id,
            TicketModel.status == TicketStatus.ACTIVE.value,
        )

    @Logger.io
    async def find_orphaned_tickets(self) -> List[Ticket]:
        result = await self.session.execute(
            select(TicketModel)
            .outerjoin(BookingModel, BookingModel.id == TicketModel.booking_id)
            .where(BookingModel.id.is_(None))
            .order_by(TicketModel.id)
        )
        return [to_ticket(db_ticket) for db_ticket in result.scalars()]

    @Logger.io
    async def find_confirmed_bookings_without_active_tickets(self) -> List[Booking]:
        active_count = func.count(TicketModel.id)
        result = await self.session.execute(
            select(BookingModel)
            .outerjoin(TicketModel, self._active_tickets_of_booking())
            .where(BookingModel.confirmed_at.is_not(None))
            .group_by(BookingModel.id)
            .having(active_count == 0)
            .order_by(BookingModel.id)
        )
        return [to_booking(db_booking) for db_booking in result.scalars()]

    @Logger.io
    async def find_total_mismatches(self) -> List[tuple[Booking, int]]:
        active_total = func.coalesce(func.sum(TicketModel.price), 0)
        result = await self.session.execute(
            select(BookingModel, active_total)
            .outerjoin(TicketModel, self._active_tickets_of_booking())
            .where(BookingModel.status == BookingStatus.CONFIRMED.value)
            .group_by(BookingModel.id)
            .having(BookingModel.total_amount != active_total)
            .order_by(BookingModel.id)
        )
        return [
            (to_booking(db_booking), int(total))
            for db_booking, total in result.all()
        ]

    @Logger.io
    async def find_double_booked_seats(self) -> List[tuple[int, int, int]]:
        ticket_count = func.count(TicketModel.id)
        result = await self.session.execute(
            select(TicketModel.showtime_id, TicketModel.seat_id, ticket_count)
            .join(BookingModel, BookingModel.id == TicketModel.booking_id)
            .where(
                TicketModel.status == TicketStatus.ACTIVE.value,
                BookingModel.status != BookingStatus.CANCELLED.value,
            )
            .group_by(TicketModel.showtime_id, TicketModel.seat_id)
            .having(ticket_count > 1)
            .order_by(TicketModel.showtime_id, TicketModel.seat_id)
        )
        return [(showtime_id, seat_id, count) for showtime_id, seat_id, count in result.all()]
