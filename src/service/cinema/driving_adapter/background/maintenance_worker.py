import anyio
from sqlalchemy.exc import SQLAlchemyError

from src.platform.exception.exceptions import CustomBaseError
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.command.reconcile_pending_bookings_use_case import (
    ReconcilePendingBookingsUseCase,
)
from src.service.cinema.app.query.run_consistency_audit_use_case import (
    RunConsistencyAuditUseCase,
)
from src.service.cinema.domain.value_object.audit_finding import AuditReport


class MaintenanceWorker:
    """
    Periodic ledger upkeep, started from the app lifespan.

    Each round sweeps abandoned pending bookings first, then audits, so a booking
    cancelled by the sweep is already consistent when the audit looks at it.
    """

    def __init__(
        self,
        *,
        reconcile_use_case: ReconcilePendingBookingsUseCase,
        audit_use_case: RunConsistencyAuditUseCase,
        interval_seconds: float,
    ) -> None:
        self.reconcile_use_case = reconcile_use_case
        self.audit_use_case = audit_use_case
        self.interval_seconds = interval_seconds

    async def run_once(self) -> tuple[list[int], AuditReport]:
        cancelled = await self.reconcile_use_case.reconcile()
        report = await self.audit_use_case.run_all()
        return cancelled, report

    async def run_forever(self) -> None:
        Logger.base.info(f'🛠️  [MAINTENANCE] Started, every {self.interval_seconds}s')
        while True:
            try:
                await self.run_once()
            except (CustomBaseError, SQLAlchemyError) as e:
                # Next round retries; the ledger is untouched by a failed round
                Logger.base.error(f'❌ [MAINTENANCE] Round failed: {type(e).__name__}: {e}')
            await anyio.sleep(self.interval_seconds)
