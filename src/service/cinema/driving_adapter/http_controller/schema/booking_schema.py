from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ReserveSeatsRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'showtime_id': 1,
                'seat_ids': [11, 12],
                'idempotency_key': '2f1c7a7e-5d0b-4d59-9a3f-7f4a0b0a9a11',
            }
        }
    )

    showtime_id: int
    seat_ids: List[int]
    idempotency_key: Optional[str] = Field(default=None, max_length=128)


class ReservationResponse(BaseModel):
    booking_id: int
    total_amount: int
    status: str


class CancelBookingResponse(BaseModel):
    booking_id: int
    status: str


class TransferBookingRequest(BaseModel):
    new_user_id: int = Field(gt=0)


class TicketResponse(BaseModel):
    id: int
    seat_id: int
    price: int
    status: str


class BookingDetailResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'id': 1,
                'user_id': 7,
                'showtime_id': 1,
                'status': 'confirmed',
                'total_amount': 900,
                'created_at': '2025-01-10T10:30:00Z',
                'confirmed_at': '2025-01-10T10:30:01Z',
                'cancelled_at': None,
                'tickets': [
                    {'id': 1, 'seat_id': 11, 'price': 450, 'status': 'active'},
                    {'id': 2, 'seat_id': 12, 'price': 450, 'status': 'active'},
                ],
            }
        }
    )

    id: int
    user_id: int
    showtime_id: int
    status: str
    total_amount: int
    created_at: datetime
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    tickets: List[TicketResponse] = []
