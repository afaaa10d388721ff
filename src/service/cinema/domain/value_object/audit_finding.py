from enum import StrEnum
from typing import Optional

import attrs


class FindingSeverity(StrEnum):
    FATAL = 'fatal'  # corruption, needs manual remediation
    WARNING = 'warning'  # may be legitimate, worth a look


class FindingKind(StrEnum):
    ORPHANED_TICKET = 'orphaned_ticket'
    EMPTY_BOOKING = 'empty_booking'
    TOTAL_MISMATCH = 'total_mismatch'
    DOUBLE_BOOKED_SEAT = 'double_booked_seat'


@attrs.define(frozen=True)
class AuditFinding:
    kind: FindingKind
    severity: FindingSeverity
    detail: str
    booking_id: Optional[int] = None
    ticket_id: Optional[int] = None


@attrs.define(frozen=True)
class AuditReport:
    findings: list[AuditFinding] = attrs.field(factory=list)

    @property
    def has_fatal(self) -> bool:
        return any(f.severity == FindingSeverity.FATAL for f in self.findings)

    def of_kind(self, kind: FindingKind) -> list[AuditFinding]:
        return [f for f in self.findings if f.kind == kind]
