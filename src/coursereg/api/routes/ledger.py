"""Seat and credit ledger endpoints."""

from fastapi import APIRouter

from coursereg.api.dependencies import AdminDep, LedgerDep
from coursereg.api.models import APIResponse, LedgerReportResponse, RecomputeResponse

router = APIRouter(prefix="/ledger", tags=["ledger"])


@router.get("/audit", response_model=APIResponse[LedgerReportResponse])
def audit_ledger(ledger: LedgerDep, _admin: AdminDep) -> APIResponse[LedgerReportResponse]:
    """Compare stored seat and credit counters with the registration rows."""
    return APIResponse(data=LedgerReportResponse.model_validate(ledger.audit()))


@router.post("/repair", response_model=APIResponse[LedgerReportResponse])
def repair_ledger(ledger: LedgerDep, _admin: AdminDep) -> APIResponse[LedgerReportResponse]:
    """Overwrite drifted counters with the values derived from registrations."""
    return APIResponse(data=LedgerReportResponse.model_validate(ledger.repair()))


@router.post("/courses/{course_id}/recompute", response_model=APIResponse[RecomputeResponse])
def recompute_course(
    course_id: str, ledger: LedgerDep, _admin: AdminDep
) -> APIResponse[RecomputeResponse]:
    """Recount one course's approved registrations."""
    count = ledger.recompute_course(course_id)
    return APIResponse(data=RecomputeResponse(course_id=course_id, current_students=count))
