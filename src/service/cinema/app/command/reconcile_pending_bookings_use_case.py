from datetime import datetime, timedelta, timezone
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from sqlalchemy.exc import DBAPIError

from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import StorageFailureError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import BookingMetrics, metrics
from src.service.cinema.domain.entity.booking_entity import BookingStatus


class ReconcilePendingBookingsUseCase:
    """
    Cancel pending bookings abandoned by a crashed or stalled reservation.

    Each candidate is re-read under a row lock and cancelled in its own transaction,
    so a reservation that confirms in the meantime is left alone. Bookings held for
    inspection are never swept.
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        pending_timeout_seconds: int,
        booking_metrics: BookingMetrics = metrics,
    ) -> None:
        self.uow_factory = uow_factory
        self.pending_timeout_seconds = pending_timeout_seconds
        self.metrics = booking_metrics

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
        settings: Settings = Depends(Provide[Container.config_service]),
        booking_metrics: BookingMetrics = Depends(Provide[Container.booking_metrics]),
    ) -> Self:
        return cls(
            uow_factory=uow_factory,
            pending_timeout_seconds=settings.PENDING_BOOKING_TIMEOUT_SECONDS,
            booking_metrics=booking_metrics,
        )

    @Logger.io
    async def reconcile(self, *, older_than_seconds: Optional[int] = None) -> list[int]:
        timeout = (
            self.pending_timeout_seconds if older_than_seconds is None else older_than_seconds
        )
        cutoff = datetime.now(timezone.utc) - timedelta(seconds=timeout)

        try:
            async with self.uow_factory() as uow:
                candidates = await uow.booking_ledger.list_abandoned_pending(created_before=cutoff)
        except DBAPIError as e:
            raise StorageFailureError() from e

        cancelled_ids: list[int] = []
        for candidate in candidates:
            assert candidate.id is not None
            try:
                if await self._cancel_if_abandoned(booking_id=candidate.id):
                    cancelled_ids.append(candidate.id)
            except DBAPIError as e:
                # Usually a lock held by an in-flight reservation; the next sweep retries
                Logger.base.warning(
                    f'⚠️ [RECONCILE] Skipped booking {candidate.id}, will retry next sweep: {e}'
                )

        if cancelled_ids:
            self.metrics.record_cancellation(reason='abandoned', count=len(cancelled_ids))
            Logger.base.warning(
                f'🧹 [RECONCILE] Cancelled {len(cancelled_ids)} abandoned pending bookings: '
                f'{cancelled_ids}'
            )
        return cancelled_ids

    async def _cancel_if_abandoned(self, *, booking_id: int) -> bool:
        async with self.uow_factory() as uow:
            booking = await uow.booking_ledger.get_by_id(booking_id=booking_id, for_update=True)
            if booking is None or booking.status != BookingStatus.PENDING or booking.hold_reason:
                return False
            await uow.booking_ledger.cancel(booking_id=booking_id)
            await uow.commit()
        return True
