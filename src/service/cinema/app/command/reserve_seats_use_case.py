from collections import Counter
from collections.abc import Sequence
import time
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
from sqlalchemy.exc import DBAPIError

from src.platform.config.di import Container
from src.platform.database.db_error import is_lock_timeout
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import (
    ConflictError,
    CustomBaseError,
    IncompleteBookingError,
    InvalidRequestError,
    NotFoundError,
    SeatConflictError,
    StorageFailureError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import BookingMetrics, metrics
from src.service.cinema.domain.entity.booking_entity import Booking, BookingStatus
from src.service.cinema.domain.entity.catalog_entity import Showtime


class ReserveSeatsUseCase:
    """
    Reserve a set of seats for one showtime, all or nothing.

    Saga (one UoW per step):
    1. Validate the request against the showtime's hall (no writes)
    2. Txn 1: create a pending booking and commit it
    3. Txn 2: lock the booking, attach tickets in ascending seat_id order, confirm, commit
    4. On SeatConflict: Txn 2 rolls back as a whole, Txn 3 cancels the booking
       On IncompleteBooking: Txn 2 rolls back, Txn 3 holds the booking for inspection
       On storage failure: Txn 2 rolls back, Txn 3 cancels the booking if it can;
       otherwise the reconciliation sweep cancels it after the pending timeout

    Seat races are first-committer-wins: the partial unique index on active tickets
    rejects the loser's insert, and the loser is told which seat it lost.

    A repeated idempotency key replays the first attempt's outcome: the confirmed
    booking, the seat it lost, or a retryable error while it is still in flight.
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        booking_metrics: BookingMetrics = metrics,
    ) -> None:
        self.uow_factory = uow_factory
        self.metrics = booking_metrics
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
        booking_metrics: BookingMetrics = Depends(Provide[Container.booking_metrics]),
    ) -> Self:
        return cls(uow_factory=uow_factory, booking_metrics=booking_metrics)

    @Logger.io
    async def reserve(
        self,
        *,
        user_id: int,
        showtime_id: int,
        seat_ids: Sequence[int],
        idempotency_key: Optional[str] = None,
    ) -> Booking:
        started = time.perf_counter()
        with self.tracer.start_as_current_span(
            'use_case.reserve_seats',
            attributes={'user_id': user_id, 'showtime_id': showtime_id, 'seats': len(seat_ids)},
        ) as span:
            try:
                booking, replayed = await self._reserve(
                    user_id=user_id,
                    showtime_id=showtime_id,
                    seat_ids=seat_ids,
                    idempotency_key=idempotency_key,
                )
            except CustomBaseError as e:
                span.set_attribute('result', e.error_code)
                self.metrics.record_reservation(
                    result=e.error_code, duration=time.perf_counter() - started
                )
                raise

            result = 'replayed' if replayed else 'confirmed'
            span.set_attribute('result', result)
            span.set_attribute('booking.id', booking.id or 0)
            self.metrics.record_reservation(
                result=result, duration=time.perf_counter() - started, seat_count=len(seat_ids)
            )
            return booking

    async def _reserve(
        self,
        *,
        user_id: int,
        showtime_id: int,
        seat_ids: Sequence[int],
        idempotency_key: Optional[str],
    ) -> tuple[Booking, bool]:
        ordered_seat_ids = self._normalize_seat_ids(seat_ids)
        showtime = await self._load_showtime_and_validate_seats(
            showtime_id=showtime_id, seat_ids=ordered_seat_ids
        )

        if idempotency_key is not None:
            replay = await self._find_replay(
                idempotency_key=idempotency_key, user_id=user_id, showtime_id=showtime_id
            )
            if replay is not None:
                return replay, True

        booking, created = await self._create_pending_booking(
            user_id=user_id, showtime_id=showtime_id, idempotency_key=idempotency_key
        )
        if not created:
            return booking, True

        assert booking.id is not None
        try:
            confirmed = await self._attach_and_confirm(
                booking_id=booking.id, seat_ids=ordered_seat_ids, price=showtime.price
            )
        except SeatConflictError as e:
            await self._compensate(
                booking_id=booking.id, reason='seat_conflict', conflict_seat_id=e.seat_id
            )
            Logger.base.info(
                f'🪑 [RESERVE] Booking {booking.id} lost seat {e.seat_id}, booking cancelled'
            )
            raise SeatConflictError(seat_id=e.seat_id, booking_id=booking.id) from e
        except IncompleteBookingError as e:
            await self._hold_for_inspection(booking_id=booking.id, reason=e.message)
            raise
        except StorageFailureError:
            await self._compensate(booking_id=booking.id, reason='storage_failure')
            raise

        Logger.base.info(
            f'🎟️  [RESERVE] Booking {confirmed.id} confirmed: '
            f'{len(ordered_seat_ids)} seats, total {confirmed.total_amount}'
        )
        return confirmed, False

    @staticmethod
    def _normalize_seat_ids(seat_ids: Sequence[int]) -> list[int]:
        if not seat_ids:
            raise InvalidRequestError('seat_ids must not be empty')
        if len(set(seat_ids)) != len(seat_ids):
            duplicates = sorted(s for s, n in Counter(seat_ids).items() if n > 1)
            raise InvalidRequestError(f'seat_ids contains duplicates: {duplicates}')
        # Every request attaches seats in the same global order
        return sorted(seat_ids)

    async def _load_showtime_and_validate_seats(
        self, *, showtime_id: int, seat_ids: list[int]
    ) -> Showtime:
        try:
            async with self.uow_factory() as uow:
                showtime = await uow.catalog_query_repo.get_showtime(showtime_id=showtime_id)
                hall_seats = await uow.catalog_query_repo.list_hall_seats(hall_id=showtime.hall_id)
        except DBAPIError as e:
            raise StorageFailureError() from e

        hall_seat_ids = {seat.id for seat in hall_seats}
        foreign = [seat_id for seat_id in seat_ids if seat_id not in hall_seat_ids]
        if foreign:
            raise InvalidRequestError(
                f'Seats {foreign} do not belong to hall {showtime.hall_id} '
                f'of showtime {showtime_id}'
            )
        return showtime

    async def _find_replay(
        self, *, idempotency_key: str, user_id: int, showtime_id: int
    ) -> Optional[Booking]:
        try:
            async with self.uow_factory() as uow:
                existing = await uow.booking_ledger.find_by_idempotency_key(
                    idempotency_key=idempotency_key
                )
        except DBAPIError as e:
            raise StorageFailureError() from e

        if existing is None:
            return None
        if existing.user_id != user_id or existing.showtime_id != showtime_id:
            raise InvalidRequestError('idempotency_key was already used for a different request')
        Logger.base.info(
            f'🔁 [RESERVE] Replaying booking {existing.id} ({existing.status}) for idempotency key'
        )
        return self._replay_outcome(existing)

    @staticmethod
    def _replay_outcome(existing: Booking) -> Booking:
        """
        Repeat the first attempt's outcome for a known idempotency key.

        Only a confirmed booking is returned; every other state maps to the error
        the caller would have seen, so a replay never exposes a half-made booking.
        """
        if existing.status == BookingStatus.CONFIRMED:
            return existing

        if existing.status == BookingStatus.PENDING:
            if existing.hold_reason:
                raise ConflictError(
                    f'Booking {existing.id} is held for inspection: {existing.hold_reason}',
                    booking_id=existing.id,
                )
            raise StorageFailureError(
                f'Booking {existing.id} is still being reserved, please retry'
            )

        if existing.conflict_seat_id is not None:
            raise SeatConflictError(seat_id=existing.conflict_seat_id, booking_id=existing.id)
        if existing.confirmed_at is not None:
            raise ConflictError(
                f'Booking {existing.id} was cancelled, use a new idempotency_key',
                booking_id=existing.id,
            )
        raise StorageFailureError(
            f'Booking {existing.id} failed before confirmation, retry with a new idempotency_key'
        )

    async def _create_pending_booking(
        self, *, user_id: int, showtime_id: int, idempotency_key: Optional[str]
    ) -> tuple[Booking, bool]:
        """Returns (booking, created). created is False when another request owns the key."""
        try:
            async with self.uow_factory() as uow:
                booking = await uow.booking_ledger.create_pending_booking(
                    user_id=user_id, showtime_id=showtime_id, idempotency_key=idempotency_key
                )
                await uow.commit()
                return booking, True
        except ConflictError:
            # A concurrent request with the same key committed first
            assert idempotency_key is not None
            replay = await self._find_replay(
                idempotency_key=idempotency_key, user_id=user_id, showtime_id=showtime_id
            )
            if replay is None:
                raise StorageFailureError('Idempotency key conflict could not be resolved')
            return replay, False
        except DBAPIError as e:
            raise StorageFailureError() from e

    async def _attach_and_confirm(
        self, *, booking_id: int, seat_ids: list[int], price: int
    ) -> Booking:
        current_seat_id = seat_ids[0]
        try:
            async with self.uow_factory() as uow:
                booking = await uow.booking_ledger.get_by_id(booking_id=booking_id, for_update=True)
                if booking is None or booking.status != BookingStatus.PENDING:
                    # The reconciliation sweep cancelled it while we were stalled
                    raise StorageFailureError(
                        f'Booking {booking_id} expired before seats were attached'
                    )

                tickets = []
                for seat_id in seat_ids:
                    current_seat_id = seat_id
                    tickets.append(
                        await uow.booking_ledger.attach_ticket(
                            booking_id=booking_id, seat_id=seat_id, price=price
                        )
                    )

                total_amount = sum(ticket.price for ticket in tickets)
                confirmed = await uow.booking_ledger.confirm(
                    booking_id=booking_id, total_amount=total_amount
                )
                await uow.commit()
                return confirmed
        except DBAPIError as e:
            if is_lock_timeout(e):
                raise SeatConflictError(seat_id=current_seat_id, booking_id=booking_id) from e
            raise StorageFailureError() from e

    async def _compensate(
        self, *, booking_id: int, reason: str, conflict_seat_id: Optional[int] = None
    ) -> None:
        try:
            async with self.uow_factory() as uow:
                booking = await uow.booking_ledger.get_by_id(booking_id=booking_id, for_update=True)
                if booking is None or booking.is_cancelled:
                    # Already cancelled by the reconciliation sweep
                    Logger.base.info(f'🧹 [RESERVE] Booking {booking_id} already cancelled')
                    return
                await uow.booking_ledger.cancel(
                    booking_id=booking_id, conflict_seat_id=conflict_seat_id
                )
                await uow.commit()
        except (DBAPIError, NotFoundError) as e:
            Logger.base.error(
                f'❌ [RESERVE] Could not cancel booking {booking_id} ({reason}): {e}; '
                'left pending for the reconciliation sweep'
            )
            return
        self.metrics.record_cancellation(reason=reason)

    async def _hold_for_inspection(self, *, booking_id: int, reason: str) -> None:
        try:
            async with self.uow_factory() as uow:
                await uow.booking_ledger.hold_for_inspection(booking_id=booking_id, reason=reason)
                await uow.commit()
        except DBAPIError as e:
            Logger.base.error(f'❌ [RESERVE] Could not hold booking {booking_id}: {e}')
            return
        Logger.base.error(f'🔍 [RESERVE] Booking {booking_id} held for inspection: {reason}')
