"""
Test doubles for use case unit tests

Use cases only see a unit of work factory. RepositoryMocks hands out fake units of
work that all share the same AsyncMock repositories, so a test can stub and assert
across the several transactions one use case opens.
"""

from datetime import date, datetime, time, timezone
from typing import List
from unittest.mock import AsyncMock, MagicMock

import attrs
import pytest

from src.service.cinema.domain.entity.booking_entity import Booking, BookingStatus
from src.service.cinema.domain.entity.catalog_entity import Seat, Showtime
from src.service.cinema.domain.entity.ticket_entity import Ticket


SHOWTIME_ID = 7
HALL_ID = 3
USER_ID = 42
BOOKING_ID = 100
PRICE = 450


class FakeUnitOfWork:
    def __init__(self, mocks: 'RepositoryMocks') -> None:
        self.mocks = mocks
        self.catalog_query_repo = mocks.catalog_query_repo
        self.catalog_command_repo = mocks.catalog_command_repo
        self.booking_ledger = mocks.booking_ledger
        self.consistency_audit_repo = mocks.consistency_audit_repo

    async def __aenter__(self) -> 'FakeUnitOfWork':
        self.mocks.opened += 1
        return self

    async def __aexit__(self, *args) -> None:
        await self.rollback()

    async def commit(self) -> None:
        self.mocks.commits += 1

    async def rollback(self) -> None:
        self.mocks.rollbacks += 1


class RepositoryMocks:
    """
    Mock repositories container for testing use cases

    Example:
        ```python
        mocks = RepositoryMocks(seats=make_seats())
        use_case = ReserveSeatsUseCase(uow_factory=mocks.uow_factory)
        booking = await use_case.reserve(...)
        mocks.booking_ledger.confirm.assert_awaited_once()
        ```
    """

    def __init__(
        self,
        *,
        showtime: Showtime,
        seats: List[Seat],
        pending: Booking,
    ) -> None:
        self.opened = 0
        self.commits = 0
        self.rollbacks = 0

        self.catalog_query_repo = AsyncMock()
        self.catalog_query_repo.get_showtime = AsyncMock(return_value=showtime)
        self.catalog_query_repo.list_hall_seats = AsyncMock(return_value=seats)

        self.catalog_command_repo = AsyncMock()

        self.booking_ledger = AsyncMock()
        self.booking_ledger.find_by_idempotency_key = AsyncMock(return_value=None)
        self.booking_ledger.create_pending_booking = AsyncMock(return_value=pending)
        self.booking_ledger.get_by_id = AsyncMock(return_value=pending)
        self.booking_ledger.attach_ticket = AsyncMock(side_effect=self._attach_ticket)
        self.booking_ledger.confirm = AsyncMock(side_effect=self._confirm)
        self.booking_ledger.cancel = AsyncMock(
            side_effect=lambda *, booking_id, conflict_seat_id=None: pending.cancel(
                conflict_seat_id=conflict_seat_id
            )
        )
        self.booking_ledger.hold_for_inspection = AsyncMock(
            side_effect=lambda *, booking_id, reason: pending.hold(reason=reason)
        )

        self.consistency_audit_repo = AsyncMock()

        self._pending = pending
        self._showtime = showtime

    def uow_factory(self) -> FakeUnitOfWork:
        return FakeUnitOfWork(self)

    async def _attach_ticket(self, *, booking_id: int, seat_id: int, price: int) -> Ticket:
        return Ticket(
            booking_id=booking_id,
            showtime_id=self._showtime.id or 0,
            seat_id=seat_id,
            price=price,
        )

    async def _confirm(self, *, booking_id: int, total_amount: int) -> Booking:
        return self._pending.confirm(total_amount=total_amount, active_ticket_total=total_amount)


def make_showtime(**overrides) -> Showtime:
    fields = dict(
        movie_id=1,
        hall_id=HALL_ID,
        show_date=date(2025, 1, 10),
        start_time=time(19, 0),
        end_time=time(21, 30),
        price=PRICE,
        id=SHOWTIME_ID,
    )
    fields.update(overrides)
    return Showtime(**fields)


def make_seats(count: int = 5) -> List[Seat]:
    # Seat ids 11..(10 + count), row A
    return [Seat(hall_id=HALL_ID, row_label='A', number=n, id=10 + n) for n in range(1, count + 1)]


def make_pending_booking(**overrides) -> Booking:
    booking = Booking(
        user_id=USER_ID,
        showtime_id=SHOWTIME_ID,
        status=BookingStatus.PENDING,
        id=BOOKING_ID,
        created_at=datetime.now(timezone.utc),
    )
    return attrs.evolve(booking, **overrides)


@pytest.fixture
def pending_booking() -> Booking:
    return make_pending_booking()


@pytest.fixture
def repository_mocks(pending_booking: Booking) -> RepositoryMocks:
    return RepositoryMocks(showtime=make_showtime(), seats=make_seats(), pending=pending_booking)


@pytest.fixture
def booking_metrics() -> MagicMock:
    return MagicMock()
