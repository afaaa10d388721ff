"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.cinema.app.command import (
    cancel_booking_use_case,
    create_showtime_use_case,
    reconcile_pending_bookings_use_case,
    reserve_seats_use_case,
    transfer_booking_use_case,
)
from src.service.cinema.app.query import (
    get_availability_use_case,
    get_booking_use_case,
    run_consistency_audit_use_case,
)


WIRE_MODULES: list[ModuleType] = [
    reserve_seats_use_case,
    cancel_booking_use_case,
    transfer_booking_use_case,
    create_showtime_use_case,
    reconcile_pending_bookings_use_case,
    get_availability_use_case,
    get_booking_use_case,
    run_consistency_audit_use_case,
]
