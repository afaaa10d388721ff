"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.service.cinema.driven_adapter.model.booking_model import BookingModel, TicketModel
from src.service.cinema.driven_adapter.model.catalog_model import (
    HallModel,
    MovieModel,
    SeatModel,
    ShowtimeModel,
)

__all__ = [
    'BookingModel',
    'HallModel',
    'MovieModel',
    'SeatModel',
    'ShowtimeModel',
    'TicketModel',
]
