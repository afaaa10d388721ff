from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
from sqlalchemy.exc import DBAPIError

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import (
    ForbiddenError,
    NotFoundError,
    StorageFailureError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import BookingMetrics, metrics
from src.service.cinema.domain.entity.booking_entity import Booking


class CancelBookingUseCase:
    """
    Cancel a booking on behalf of its owner.

    Cancelling cascades every active ticket to cancelled, which frees the seats for
    later reservations on the same showtime. It never touches any other booking.
    Cancelling an already-cancelled booking returns it unchanged.
    """

    def __init__(
        self, *, uow_factory: UnitOfWorkFactory, booking_metrics: BookingMetrics = metrics
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
    async def cancel(self, *, booking_id: int, requester_id: int) -> Booking:
        with self.tracer.start_as_current_span(
            'use_case.cancel_booking',
            attributes={'booking.id': booking_id, 'requester_id': requester_id},
        ):
            try:
                async with self.uow_factory() as uow:
                    booking = await uow.booking_ledger.get_by_id(
                        booking_id=booking_id, for_update=True
                    )
                    if not booking:
                        raise NotFoundError('Booking not found')
                    if booking.user_id != requester_id:
                        raise ForbiddenError('Only the booking owner can cancel this booking')
                    if booking.is_cancelled:
                        return booking

                    cancelled = await uow.booking_ledger.cancel(booking_id=booking_id)
                    await uow.commit()
            except DBAPIError as e:
                raise StorageFailureError() from e

        self.metrics.record_cancellation(reason='requested')
        Logger.base.info(f'🚫 [CANCEL] Booking {booking_id} cancelled by user {requester_id}')
        return cancelled
