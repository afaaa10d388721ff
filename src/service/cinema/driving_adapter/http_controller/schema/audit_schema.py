from typing import List, Optional

from pydantic import BaseModel


class AuditFindingResponse(BaseModel):
    kind: str
    severity: str
    detail: str
    booking_id: Optional[int] = None
    ticket_id: Optional[int] = None


class AuditReportResponse(BaseModel):
    has_fatal: bool
    findings: List[AuditFindingResponse]


class ReconcileRequest(BaseModel):
    older_than_seconds: Optional[int] = None


class ReconcileResponse(BaseModel):
    cancelled_booking_ids: List[int]
