from typing import List

from fastapi import APIRouter, Depends, status

from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.command.create_showtime_use_case import CreateShowtimeUseCase
from src.service.cinema.app.query.get_availability_use_case import GetAvailabilityUseCase
from src.service.cinema.driving_adapter.http_controller.schema.showtime_schema import (
    SeatAvailabilityResponse,
    ShowtimeCreateRequest,
    ShowtimeResponse,
)


router = APIRouter()


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_showtime(
    request: ShowtimeCreateRequest,
    use_case: CreateShowtimeUseCase = Depends(CreateShowtimeUseCase.depends),
) -> ShowtimeResponse:
    showtime = await use_case.create(
        movie_id=request.movie_id,
        hall_id=request.hall_id,
        show_date=request.show_date,
        start_time=request.start_time,
        end_time=request.end_time,
        price=request.price,
    )
    return ShowtimeResponse(
        id=showtime.id or 0,
        movie_id=showtime.movie_id,
        hall_id=showtime.hall_id,
        show_date=showtime.show_date,
        start_time=showtime.start_time,
        end_time=showtime.end_time,
        price=showtime.price,
    )


@router.get('/{showtime_id}/availability')
@Logger.io
async def get_availability(
    showtime_id: int,
    use_case: GetAvailabilityUseCase = Depends(GetAvailabilityUseCase.depends),
) -> List[SeatAvailabilityResponse]:
    seats = await use_case.get_availability(showtime_id=showtime_id)
    return [
        SeatAvailabilityResponse(
            seat_id=seat.seat_id,
            row_label=seat.row_label,
            seat_number=seat.seat_number,
            category=seat.category.value,
            available=seat.available,
        )
        for seat in seats
    ]
