"""Cinema Domain Value Objects"""

from src.service.cinema.domain.value_object.audit_finding import (
    AuditFinding,
    AuditReport,
    FindingKind,
    FindingSeverity,
)
from src.service.cinema.domain.value_object.seat_availability import SeatAvailability

__all__ = ['AuditFinding', 'AuditReport', 'FindingKind', 'FindingSeverity', 'SeatAvailability']
