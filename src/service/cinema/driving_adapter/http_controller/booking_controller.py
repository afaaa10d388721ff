from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.command.cancel_booking_use_case import CancelBookingUseCase
from src.service.cinema.app.command.reserve_seats_use_case import ReserveSeatsUseCase
from src.service.cinema.app.command.transfer_booking_use_case import TransferBookingUseCase
from src.service.cinema.app.query.get_booking_use_case import GetBookingUseCase
from src.service.cinema.driving_adapter.http_controller.auth.requester import get_requester_id
from src.service.cinema.driving_adapter.http_controller.schema.booking_schema import (
    BookingDetailResponse,
    CancelBookingResponse,
    ReservationResponse,
    ReserveSeatsRequest,
    TicketResponse,
    TransferBookingRequest,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def reserve_seats(
    request: ReserveSeatsRequest,
    requester_id: int = Depends(get_requester_id),
    use_case: ReserveSeatsUseCase = Depends(ReserveSeatsUseCase.depends),
) -> ReservationResponse:
    with tracer.start_as_current_span('controller.reserve_seats') as span:
        span.set_attribute('showtime_id', request.showtime_id)
        span.set_attribute('user_id', requester_id)

        booking = await use_case.reserve(
            user_id=requester_id,
            showtime_id=request.showtime_id,
            seat_ids=request.seat_ids,
            idempotency_key=request.idempotency_key,
        )

        if booking.id is None:
            raise ValueError('Booking ID should not be None after reservation.')

        return ReservationResponse(
            booking_id=booking.id,
            total_amount=booking.total_amount,
            status=booking.status.value,
        )


@router.get('/{booking_id}')
@Logger.io
async def get_booking(
    booking_id: int,
    requester_id: int = Depends(get_requester_id),
    use_case: GetBookingUseCase = Depends(GetBookingUseCase.depends),
) -> BookingDetailResponse:
    detail = await use_case.get(booking_id=booking_id, requester_id=requester_id)
    booking = detail.booking
    return BookingDetailResponse(
        id=booking.id or booking_id,
        user_id=booking.user_id,
        showtime_id=booking.showtime_id,
        status=booking.status.value,
        total_amount=booking.total_amount,
        created_at=booking.created_at,
        confirmed_at=booking.confirmed_at,
        cancelled_at=booking.cancelled_at,
        tickets=[
            TicketResponse(
                id=ticket.id or 0,
                seat_id=ticket.seat_id,
                price=ticket.price,
                status=ticket.status.value,
            )
            for ticket in detail.tickets
        ],
    )


@router.patch('/{booking_id}/cancel')
@Logger.io
async def cancel_booking(
    booking_id: int,
    requester_id: int = Depends(get_requester_id),
    use_case: CancelBookingUseCase = Depends(CancelBookingUseCase.depends),
) -> CancelBookingResponse:
    booking = await use_case.cancel(booking_id=booking_id, requester_id=requester_id)
    return CancelBookingResponse(booking_id=booking_id, status=booking.status.value)


@router.patch('/{booking_id}/transfer')
@Logger.io
async def transfer_booking(
    booking_id: int,
    request: TransferBookingRequest,
    requester_id: int = Depends(get_requester_id),
    use_case: TransferBookingUseCase = Depends(TransferBookingUseCase.depends),
) -> ReservationResponse:
    booking = await use_case.transfer(
        booking_id=booking_id, requester_id=requester_id, new_user_id=request.new_user_id
    )
    return ReservationResponse(
        booking_id=booking_id, total_amount=booking.total_amount, status=booking.status.value
    )
