from typing import Any


class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    error_code: str = 'Error'

    def __init__(self, message: str, status_code: int = 500, **extra: Any) -> None:
        self.message = message
        self.status_code = status_code
        self.extra: dict[str, Any] = extra
        super().__init__(message)


class DomainError(CustomBaseError):
    error_code = 'DomainError'

    def __init__(self, message: str, status_code: int = 400, **extra: Any) -> None:
        super().__init__(message, status_code, **extra)


class InvalidRequestError(DomainError):
    """Malformed reservation input. Never retried by the engine."""

    error_code = 'InvalidRequest'

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason, 400, reason=reason)


class ForbiddenError(CustomBaseError):
    error_code = 'Forbidden'

    def __init__(self, message: str) -> None:
        super().__init__(message, 403)


class NotFoundError(CustomBaseError):
    error_code = 'NotFound'

    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class ConflictError(CustomBaseError):
    error_code = 'Conflict'

    def __init__(self, message: str, **extra: Any) -> None:
        super().__init__(message, 409, **extra)


class SeatConflictError(ConflictError):
    """A seat lost the first-committer-wins race; the caller may retry with other seats."""

    error_code = 'SeatConflict'

    def __init__(self, *, seat_id: int, booking_id: int | None = None) -> None:
        self.seat_id = seat_id
        self.booking_id = booking_id
        super().__init__(
            f'Seat {seat_id} is already booked for this showtime',
            seat_id=seat_id,
            booking_id=booking_id,
        )


class IncompleteBookingError(CustomBaseError):
    """Recorded total disagrees with the active tickets at confirm time."""

    error_code = 'IncompleteBooking'

    def __init__(self, *, booking_id: int, expected: int, actual: int) -> None:
        self.booking_id = booking_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f'Booking {booking_id} total {expected} does not match active tickets total {actual}',
            500,
            booking_id=booking_id,
            expected=expected,
            actual=actual,
        )


class StorageFailureError(CustomBaseError):
    error_code = 'StorageFailure'

    def __init__(self, message: str = 'Storage is unavailable, please retry') -> None:
        super().__init__(message, 503, retryable=True)
