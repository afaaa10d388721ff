from enum import StrEnum


class TicketStatus(StrEnum):
    ACTIVE = 'active'  # Seat is held by this ticket
    CANCELLED = 'cancelled'  # Seat released, row kept for audit
