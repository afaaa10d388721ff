"""Application layer DTOs"""

from src.service.cinema.app.dto.booking_detail import BookingDetail

__all__ = ['BookingDetail']
