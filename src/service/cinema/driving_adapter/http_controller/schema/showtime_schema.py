from datetime import date, time

from pydantic import BaseModel, ConfigDict, Field


class ShowtimeCreateRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'movie_id': 1,
                'hall_id': 1,
                'show_date': '2025-01-10',
                'start_time': '19:00:00',
                'end_time': '21:30:00',
                'price': 450,
            }
        }
    )

    movie_id: int
    hall_id: int
    show_date: date
    start_time: time
    end_time: time
    price: int = Field(ge=0)


class ShowtimeResponse(BaseModel):
    id: int
    movie_id: int
    hall_id: int
    show_date: date
    start_time: time
    end_time: time
    price: int


class SeatAvailabilityResponse(BaseModel):
    seat_id: int
    row_label: str
    seat_number: int
    category: str
    available: bool
