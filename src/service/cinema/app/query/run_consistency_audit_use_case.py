from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from sqlalchemy.exc import DBAPIError

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import StorageFailureError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import BookingMetrics, metrics
from src.service.cinema.domain.entity.booking_entity import BookingStatus
from src.service.cinema.domain.value_object.audit_finding import (
    AuditFinding,
    AuditReport,
    FindingKind,
    FindingSeverity,
)


class RunConsistencyAuditUseCase:
    """
    Structural checks over the booking ledger.

    Findings are reported and counted, never repaired: fatal findings mean corrupted
    state that needs manual remediation.
    """

    def __init__(
        self, *, uow_factory: UnitOfWorkFactory, booking_metrics: BookingMetrics = metrics
    ) -> None:
        self.uow_factory = uow_factory
        self.metrics = booking_metrics

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
        booking_metrics: BookingMetrics = Depends(Provide[Container.booking_metrics]),
    ) -> Self:
        return cls(uow_factory=uow_factory, booking_metrics=booking_metrics)

    @Logger.io
    async def audit_orphaned_tickets(self) -> List[AuditFinding]:
        try:
            async with self.uow_factory() as uow:
                orphans = await uow.consistency_audit_repo.find_orphaned_tickets()
        except DBAPIError as e:
            raise StorageFailureError() from e

        return self._report(
            [
                AuditFinding(
                    kind=FindingKind.ORPHANED_TICKET,
                    severity=FindingSeverity.FATAL,
                    booking_id=ticket.booking_id,
                    ticket_id=ticket.id,
                    detail=(
                        f'Ticket {ticket.id} for seat {ticket.seat_id} references '
                        f'missing booking {ticket.booking_id}'
                    ),
                )
                for ticket in orphans
            ]
        )

    @Logger.io
    async def audit_empty_bookings(self) -> List[AuditFinding]:
        try:
            async with self.uow_factory() as uow:
                audit_repo = uow.consistency_audit_repo
                bookings = await audit_repo.find_confirmed_bookings_without_active_tickets()
        except DBAPIError as e:
            raise StorageFailureError() from e

        findings = []
        for booking in bookings:
            if booking.status == BookingStatus.CANCELLED:
                detail = f'Booking {booking.id} was confirmed and later fully cancelled'
            else:
                detail = f'Booking {booking.id} is {booking.status} but holds no active ticket'
            findings.append(
                AuditFinding(
                    kind=FindingKind.EMPTY_BOOKING,
                    severity=FindingSeverity.WARNING,
                    booking_id=booking.id,
                    detail=detail,
                )
            )
        return self._report(findings)

    @Logger.io
    async def audit_total_mismatches(self) -> List[AuditFinding]:
        try:
            async with self.uow_factory() as uow:
                mismatches = await uow.consistency_audit_repo.find_total_mismatches()
        except DBAPIError as e:
            raise StorageFailureError() from e

        return self._report(
            [
                AuditFinding(
                    kind=FindingKind.TOTAL_MISMATCH,
                    severity=FindingSeverity.FATAL,
                    booking_id=booking.id,
                    detail=(
                        f'Booking {booking.id} records total {booking.total_amount} '
                        f'but its active tickets sum to {active_total}'
                    ),
                )
                for booking, active_total in mismatches
            ]
        )

    @Logger.io
    async def audit_double_bookings(self) -> List[AuditFinding]:
        try:
            async with self.uow_factory() as uow:
                duplicates = await uow.consistency_audit_repo.find_double_booked_seats()
        except DBAPIError as e:
            raise StorageFailureError() from e

        return self._report(
            [
                AuditFinding(
                    kind=FindingKind.DOUBLE_BOOKED_SEAT,
                    severity=FindingSeverity.FATAL,
                    detail=(
                        f'Seat {seat_id} of showtime {showtime_id} has {count} active tickets'
                    ),
                )
                for showtime_id, seat_id, count in duplicates
            ]
        )

    @Logger.io
    async def run_all(self) -> AuditReport:
        findings = [
            *await self.audit_orphaned_tickets(),
            *await self.audit_empty_bookings(),
            *await self.audit_total_mismatches(),
            *await self.audit_double_bookings(),
        ]
        report = AuditReport(findings=findings)
        Logger.base.info(f'🔎 [AUDIT] {len(findings)} findings, fatal={report.has_fatal}')
        return report

    def _report(self, findings: List[AuditFinding]) -> List[AuditFinding]:
        for finding in findings:
            self.metrics.record_audit_finding(kind=finding.kind, severity=finding.severity)
            if finding.severity == FindingSeverity.FATAL:
                Logger.base.error(f'🚨 [AUDIT] {finding.kind}: {finding.detail}')
            else:
                Logger.base.warning(f'⚠️  [AUDIT] {finding.kind}: {finding.detail}')
        return findings
