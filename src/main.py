"""
Production FastAPI Application

Booking API plus the background maintenance loop (reconciliation sweep + audit).

Run:
    granian --interface asgi src.main:app
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio
from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig
from src.service.cinema.app.command.reconcile_pending_bookings_use_case import (
    ReconcilePendingBookingsUseCase,
)
from src.service.cinema.app.query.run_consistency_audit_use_case import (
    RunConsistencyAuditUseCase,
)
from src.service.cinema.driving_adapter.background.maintenance_worker import MaintenanceWorker


def build_maintenance_worker() -> MaintenanceWorker:
    settings = container.config_service()
    uow_factory = container.unit_of_work.provider
    booking_metrics = container.booking_metrics()
    return MaintenanceWorker(
        reconcile_use_case=ReconcilePendingBookingsUseCase(
            uow_factory=uow_factory,
            pending_timeout_seconds=settings.PENDING_BOOKING_TIMEOUT_SECONDS,
            booking_metrics=booking_metrics,
        ),
        audit_use_case=RunConsistencyAuditUseCase(
            uow_factory=uow_factory, booking_metrics=booking_metrics
        ),
        interval_seconds=settings.MAINTENANCE_INTERVAL_SECONDS,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Cinema Service] Starting up...')
    settings = container.config_service()

    tracing = TracingConfig(
        service_name=settings.SERVICE_NAME, enable_console=settings.OTEL_CONSOLE_EXPORT
    )
    tracing.setup()
    Logger.base.info('📊 [Cinema Service] OpenTelemetry tracing configured')

    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Cinema Service] Dependency injection wired')

    database = container.database()
    tracing.instrument_sqlalchemy(engine=database.engine)
    if settings.DB_AUTO_CREATE_TABLES:
        await database.create_all()
    Logger.base.info('🗄️  [Cinema Service] Database engine ready + instrumented')

    async with anyio.create_task_group() as tg:
        if settings.MAINTENANCE_ENABLED:
            tg.start_soon(build_maintenance_worker().run_forever)

        Logger.base.info('✅ [Cinema Service] Ready to serve requests')
        yield

        Logger.base.info('🛑 [Cinema Service] Shutting down...')
        tg.cancel_scope.cancel()

    await database.dispose()
    Logger.base.info('🗄️  [Cinema Service] Database engine disposed')

    tracing.shutdown()
    container.unwire()
    Logger.base.info('👋 [Cinema Service] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
