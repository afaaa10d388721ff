"""Cancellation, transfer, lookup and the reconciliation sweep on a real ledger"""

import pytest

from src.platform.exception.exceptions import DomainError, ForbiddenError, NotFoundError
from src.service.cinema.app.command.cancel_booking_use_case import CancelBookingUseCase
from src.service.cinema.app.command.reconcile_pending_bookings_use_case import (
    ReconcilePendingBookingsUseCase,
)
from src.service.cinema.app.command.reserve_seats_use_case import ReserveSeatsUseCase
from src.service.cinema.app.command.transfer_booking_use_case import TransferBookingUseCase
from src.service.cinema.app.query.get_booking_use_case import GetBookingUseCase
from src.service.cinema.domain.entity.booking_entity import BookingStatus


@pytest.fixture
def reserve(uow_factory) -> ReserveSeatsUseCase:
    return ReserveSeatsUseCase(uow_factory=uow_factory)


@pytest.mark.integration
class TestCancelBooking:
    @pytest.mark.asyncio
    async def test_cancelling_one_booking_leaves_others_confirmed(
        self, reserve, uow_factory, seeded
    ) -> None:
        mine = await reserve.reserve(
            user_id=1, showtime_id=seeded.showtime_id, seat_ids=[seeded.seats['A1']]
        )
        theirs = await reserve.reserve(
            user_id=2, showtime_id=seeded.showtime_id, seat_ids=[seeded.seats['A2']]
        )

        await CancelBookingUseCase(uow_factory=uow_factory).cancel(
            booking_id=mine.id, requester_id=1
        )

        detail = await GetBookingUseCase(uow_factory=uow_factory).get(
            booking_id=theirs.id, requester_id=2
        )
        assert detail.booking.status == BookingStatus.CONFIRMED
        assert len(detail.active_tickets) == 1

    @pytest.mark.asyncio
    async def test_cancel_is_idempotent(self, reserve, uow_factory, seeded) -> None:
        booking = await reserve.reserve(
            user_id=1, showtime_id=seeded.showtime_id, seat_ids=[seeded.seats['A1']]
        )
        use_case = CancelBookingUseCase(uow_factory=uow_factory)

        first = await use_case.cancel(booking_id=booking.id, requester_id=1)
        second = await use_case.cancel(booking_id=booking.id, requester_id=1)

        assert second.status == BookingStatus.CANCELLED
        assert second.cancelled_at == first.cancelled_at

    @pytest.mark.asyncio
    async def test_only_owner_may_cancel(self, reserve, uow_factory, seeded) -> None:
        booking = await reserve.reserve(
            user_id=1, showtime_id=seeded.showtime_id, seat_ids=[seeded.seats['A1']]
        )

        with pytest.raises(ForbiddenError):
            await CancelBookingUseCase(uow_factory=uow_factory).cancel(
                booking_id=booking.id, requester_id=2
            )


@pytest.mark.integration
class TestTransferBooking:
    @pytest.mark.asyncio
    async def test_new_owner_sees_booking_and_old_owner_does_not(
        self, reserve, uow_factory, seeded
    ) -> None:
        booking = await reserve.reserve(
            user_id=1, showtime_id=seeded.showtime_id, seat_ids=[seeded.seats['A1']]
        )

        transferred = await TransferBookingUseCase(uow_factory=uow_factory).transfer(
            booking_id=booking.id, requester_id=1, new_user_id=2
        )

        assert transferred.user_id == 2
        get_booking = GetBookingUseCase(uow_factory=uow_factory)
        detail = await get_booking.get(booking_id=booking.id, requester_id=2)
        assert detail.booking.total_amount == 450
        with pytest.raises(ForbiddenError):
            await get_booking.get(booking_id=booking.id, requester_id=1)

    @pytest.mark.asyncio
    async def test_cancelled_booking_cannot_be_transferred(
        self, reserve, uow_factory, seeded
    ) -> None:
        booking = await reserve.reserve(
            user_id=1, showtime_id=seeded.showtime_id, seat_ids=[seeded.seats['A1']]
        )
        await CancelBookingUseCase(uow_factory=uow_factory).cancel(
            booking_id=booking.id, requester_id=1
        )

        with pytest.raises(DomainError):
            await TransferBookingUseCase(uow_factory=uow_factory).transfer(
                booking_id=booking.id, requester_id=1, new_user_id=2
            )

    @pytest.mark.asyncio
    async def test_unknown_booking_is_not_found(self, uow_factory, seeded) -> None:
        with pytest.raises(NotFoundError):
            await TransferBookingUseCase(uow_factory=uow_factory).transfer(
                booking_id=999, requester_id=1, new_user_id=2
            )


@pytest.mark.integration
class TestReconcilePendingBookings:
    @pytest.mark.asyncio
    async def test_sweep_cancels_abandoned_pending_and_releases_its_tickets(
        self, reserve, uow_factory, seeded
    ) -> None:
        # Arrange - a crashed attempt: pending booking with an attached ticket
        async with uow_factory() as uow:
            abandoned = await uow.booking_ledger.create_pending_booking(
                user_id=1, showtime_id=seeded.showtime_id
            )
            await uow.booking_ledger.attach_ticket(
                booking_id=abandoned.id, seat_id=seeded.seats['A1'], price=450
            )
            await uow.commit()
        confirmed = await reserve.reserve(
            user_id=2, showtime_id=seeded.showtime_id, seat_ids=[seeded.seats['A2']]
        )

        # Act
        cancelled = await ReconcilePendingBookingsUseCase(
            uow_factory=uow_factory, pending_timeout_seconds=300
        ).reconcile(older_than_seconds=0)

        # Assert
        assert cancelled == [abandoned.id]
        async with uow_factory() as uow:
            swept = await uow.booking_ledger.get_by_id(booking_id=abandoned.id)
            kept = await uow.booking_ledger.get_by_id(booking_id=confirmed.id)
            taken = await uow.booking_ledger.list_taken_seat_ids(showtime_id=seeded.showtime_id)
        assert swept.status == BookingStatus.CANCELLED
        assert kept.status == BookingStatus.CONFIRMED
        assert taken == {seeded.seats['A2']}

    @pytest.mark.asyncio
    async def test_recent_pending_booking_is_left_alone(self, uow_factory, seeded) -> None:
        async with uow_factory() as uow:
            await uow.booking_ledger.create_pending_booking(
                user_id=1, showtime_id=seeded.showtime_id
            )
            await uow.commit()

        cancelled = await ReconcilePendingBookingsUseCase(
            uow_factory=uow_factory, pending_timeout_seconds=300
        ).reconcile()

        assert cancelled == []

    @pytest.mark.asyncio
    async def test_held_booking_is_not_swept(self, uow_factory, seeded) -> None:
        async with uow_factory() as uow:
            held = await uow.booking_ledger.create_pending_booking(
                user_id=1, showtime_id=seeded.showtime_id
            )
            await uow.booking_ledger.hold_for_inspection(booking_id=held.id, reason='mismatch')
            await uow.commit()

        cancelled = await ReconcilePendingBookingsUseCase(
            uow_factory=uow_factory, pending_timeout_seconds=300
        ).reconcile(older_than_seconds=0)

        assert cancelled == []
