"""
RunConsistencyAuditUseCase against planted corruption

Corruption the engine can never produce is planted with raw SQL, the way a bad
migration or a manual fix would.
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import text

from src.service.cinema.app.command.cancel_booking_use_case import CancelBookingUseCase
from src.service.cinema.app.command.reserve_seats_use_case import ReserveSeatsUseCase
from src.service.cinema.app.query.run_consistency_audit_use_case import (
    RunConsistencyAuditUseCase,
)
from src.service.cinema.domain.value_object.audit_finding import FindingKind, FindingSeverity


async def _execute(uow_factory, sql: str, **params) -> None:
    async with uow_factory() as uow:
        await uow.session.execute(text(sql), params)
        await uow.commit()


@pytest.mark.integration
class TestConsistencyAudit:
    @pytest.mark.asyncio
    async def test_healthy_ledger_has_no_findings(self, uow_factory, seeded) -> None:
        reserve = ReserveSeatsUseCase(uow_factory=uow_factory)
        await reserve.reserve(
            user_id=1, showtime_id=seeded.showtime_id, seat_ids=[seeded.seats['A1']]
        )

        report = await RunConsistencyAuditUseCase(uow_factory=uow_factory).run_all()

        assert report.findings == []
        assert not report.has_fatal

    @pytest.mark.asyncio
    async def test_ticket_of_missing_booking_is_fatal(
        self, uow_factory_without_fk, seeded_without_fk
    ) -> None:
        await _execute(
            uow_factory_without_fk,
            'INSERT INTO ticket (booking_id, showtime_id, seat_id, price, status, created_at) '
            "VALUES (9999, :showtime_id, :seat_id, 450, 'active', :now)",
            showtime_id=seeded_without_fk.showtime_id,
            seat_id=seeded_without_fk.seats['A1'],
            now=datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S.%f'),
        )

        findings = await RunConsistencyAuditUseCase(
            uow_factory=uow_factory_without_fk
        ).audit_orphaned_tickets()

        assert len(findings) == 1
        assert findings[0].kind == FindingKind.ORPHANED_TICKET
        assert findings[0].severity == FindingSeverity.FATAL
        assert findings[0].booking_id == 9999

    @pytest.mark.asyncio
    async def test_fully_cancelled_confirmed_booking_is_a_warning(
        self, uow_factory, seeded
    ) -> None:
        booking = await ReserveSeatsUseCase(uow_factory=uow_factory).reserve(
            user_id=1, showtime_id=seeded.showtime_id, seat_ids=[seeded.seats['A1']]
        )
        await CancelBookingUseCase(uow_factory=uow_factory).cancel(
            booking_id=booking.id, requester_id=1
        )

        report = await RunConsistencyAuditUseCase(uow_factory=uow_factory).run_all()

        (finding,) = report.of_kind(FindingKind.EMPTY_BOOKING)
        assert finding.severity == FindingSeverity.WARNING
        assert finding.booking_id == booking.id
        assert not report.has_fatal

    @pytest.mark.asyncio
    async def test_confirmed_booking_without_tickets_is_a_warning(
        self, uow_factory, seeded
    ) -> None:
        booking = await ReserveSeatsUseCase(uow_factory=uow_factory).reserve(
            user_id=1, showtime_id=seeded.showtime_id, seat_ids=[seeded.seats['A1']]
        )
        await _execute(
            uow_factory,
            "UPDATE ticket SET status = 'cancelled' WHERE booking_id = :id",
            id=booking.id,
        )

        findings = await RunConsistencyAuditUseCase(uow_factory=uow_factory).audit_empty_bookings()

        assert [f.booking_id for f in findings] == [booking.id]
        assert 'holds no active ticket' in findings[0].detail

    @pytest.mark.asyncio
    async def test_total_mismatch_is_fatal(self, uow_factory, seeded) -> None:
        booking = await ReserveSeatsUseCase(uow_factory=uow_factory).reserve(
            user_id=1,
            showtime_id=seeded.showtime_id,
            seat_ids=[seeded.seats['A1'], seeded.seats['A2']],
        )
        await _execute(
            uow_factory, 'UPDATE booking SET total_amount = 1 WHERE id = :id', id=booking.id
        )

        report = await RunConsistencyAuditUseCase(uow_factory=uow_factory).run_all()

        (finding,) = report.of_kind(FindingKind.TOTAL_MISMATCH)
        assert finding.severity == FindingSeverity.FATAL
        assert finding.booking_id == booking.id
        assert '900' in finding.detail
        assert report.has_fatal

    @pytest.mark.asyncio
    async def test_double_booked_seat_is_fatal(self, uow_factory, seeded) -> None:
        reserve = ReserveSeatsUseCase(uow_factory=uow_factory)
        first = await reserve.reserve(
            user_id=1, showtime_id=seeded.showtime_id, seat_ids=[seeded.seats['A1']]
        )
        second = await reserve.reserve(
            user_id=2, showtime_id=seeded.showtime_id, seat_ids=[seeded.seats['A2']]
        )
        # Without the guard index two active tickets can share a seat
        await _execute(uow_factory, 'DROP INDEX uq_ticket_active_seat')
        await _execute(
            uow_factory,
            'UPDATE ticket SET seat_id = :seat_id WHERE booking_id = :id',
            seat_id=seeded.seats['A1'],
            id=second.id,
        )

        findings = await RunConsistencyAuditUseCase(uow_factory=uow_factory).audit_double_bookings()

        assert len(findings) == 1
        assert findings[0].kind == FindingKind.DOUBLE_BOOKED_SEAT
        assert f'Seat {seeded.seats["A1"]}' in findings[0].detail
        assert first.id != second.id
