"""Unit tests for ReconcilePendingBookingsUseCase"""

from datetime import datetime, timedelta, timezone
import sqlite3
from unittest.mock import AsyncMock, MagicMock

import attrs
import pytest
from sqlalchemy.exc import OperationalError

from src.service.cinema.app.command.reconcile_pending_bookings_use_case import (
    ReconcilePendingBookingsUseCase,
)
from src.service.cinema.domain.entity.booking_entity import Booking


@pytest.fixture
def use_case(repository_mocks, booking_metrics: MagicMock) -> ReconcilePendingBookingsUseCase:
    return ReconcilePendingBookingsUseCase(
        uow_factory=repository_mocks.uow_factory,
        pending_timeout_seconds=300,
        booking_metrics=booking_metrics,
    )


@pytest.mark.unit
class TestReconcilePendingBookings:
    @pytest.mark.asyncio
    async def test_cancels_each_abandoned_booking_in_its_own_transaction(
        self, use_case, repository_mocks, pending_booking: Booking, booking_metrics
    ) -> None:
        # Arrange
        first = attrs.evolve(pending_booking, id=1)
        second = attrs.evolve(pending_booking, id=2)
        ledger = repository_mocks.booking_ledger
        ledger.list_abandoned_pending = AsyncMock(return_value=[first, second])
        ledger.get_by_id = AsyncMock(side_effect=[first, second])

        # Act
        cancelled = await use_case.reconcile()

        # Assert
        assert cancelled == [1, 2]
        assert [c.kwargs['booking_id'] for c in ledger.cancel.await_args_list] == [1, 2]
        assert repository_mocks.commits == 2
        booking_metrics.record_cancellation.assert_called_once_with(reason='abandoned', count=2)

    @pytest.mark.asyncio
    async def test_cutoff_uses_configured_timeout(self, use_case, repository_mocks) -> None:
        ledger = repository_mocks.booking_ledger
        ledger.list_abandoned_pending = AsyncMock(return_value=[])

        before = datetime.now(timezone.utc)
        await use_case.reconcile()

        cutoff = ledger.list_abandoned_pending.await_args.kwargs['created_before']
        assert before - timedelta(seconds=301) < cutoff <= before - timedelta(seconds=299)

    @pytest.mark.asyncio
    async def test_explicit_age_overrides_timeout(self, use_case, repository_mocks) -> None:
        ledger = repository_mocks.booking_ledger
        ledger.list_abandoned_pending = AsyncMock(return_value=[])

        await use_case.reconcile(older_than_seconds=0)

        cutoff = ledger.list_abandoned_pending.await_args.kwargs['created_before']
        assert cutoff >= datetime.now(timezone.utc) - timedelta(seconds=5)

    @pytest.mark.asyncio
    async def test_skips_booking_confirmed_since_it_was_listed(
        self, use_case, repository_mocks, pending_booking: Booking, booking_metrics
    ) -> None:
        ledger = repository_mocks.booking_ledger
        ledger.list_abandoned_pending = AsyncMock(return_value=[pending_booking])
        ledger.get_by_id = AsyncMock(
            return_value=pending_booking.confirm(total_amount=450, active_ticket_total=450)
        )

        cancelled = await use_case.reconcile()

        assert cancelled == []
        ledger.cancel.assert_not_awaited()
        booking_metrics.record_cancellation.assert_not_called()

    @pytest.mark.asyncio
    async def test_skips_booking_held_for_inspection(
        self, use_case, repository_mocks, pending_booking: Booking
    ) -> None:
        ledger = repository_mocks.booking_ledger
        ledger.list_abandoned_pending = AsyncMock(return_value=[pending_booking])
        ledger.get_by_id = AsyncMock(return_value=pending_booking.hold(reason='total mismatch'))

        assert await use_case.reconcile() == []
        ledger.cancel.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_locked_booking_does_not_stop_the_sweep(
        self, use_case, repository_mocks, pending_booking: Booking, booking_metrics
    ) -> None:
        # Arrange - an in-flight reservation holds the first booking's row lock
        first = attrs.evolve(pending_booking, id=1)
        second = attrs.evolve(pending_booking, id=2)
        ledger = repository_mocks.booking_ledger
        ledger.list_abandoned_pending = AsyncMock(return_value=[first, second])
        ledger.get_by_id = AsyncMock(
            side_effect=[
                OperationalError('SELECT', {}, sqlite3.OperationalError('database is locked')),
                second,
            ]
        )

        # Act
        cancelled = await use_case.reconcile()

        # Assert
        assert cancelled == [2]
        assert [c.kwargs['booking_id'] for c in ledger.cancel.await_args_list] == [2]
        booking_metrics.record_cancellation.assert_called_once_with(reason='abandoned', count=1)
