from fastapi import APIRouter, Depends

from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.command.reconcile_pending_bookings_use_case import (
    ReconcilePendingBookingsUseCase,
)
from src.service.cinema.app.query.run_consistency_audit_use_case import (
    RunConsistencyAuditUseCase,
)
from src.service.cinema.driving_adapter.http_controller.schema.audit_schema import (
    AuditFindingResponse,
    AuditReportResponse,
    ReconcileRequest,
    ReconcileResponse,
)


router = APIRouter()


@router.get('')
@Logger.io
async def run_audit(
    use_case: RunConsistencyAuditUseCase = Depends(RunConsistencyAuditUseCase.depends),
) -> AuditReportResponse:
    report = await use_case.run_all()
    return AuditReportResponse(
        has_fatal=report.has_fatal,
        findings=[
            AuditFindingResponse(
                kind=finding.kind.value,
                severity=finding.severity.value,
                detail=finding.detail,
                booking_id=finding.booking_id,
                ticket_id=finding.ticket_id,
            )
            for finding in report.findings
        ],
    )


@router.post('/reconcile')
@Logger.io
async def reconcile_pending_bookings(
    request: ReconcileRequest,
    use_case: ReconcilePendingBookingsUseCase = Depends(ReconcilePendingBookingsUseCase.depends),
) -> ReconcileResponse:
    cancelled = await use_case.reconcile(older_than_seconds=request.older_than_seconds)
    return ReconcileResponse(cancelled_booking_ids=cancelled)
