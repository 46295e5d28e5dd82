"""School change request endpoints."""

from fastapi import APIRouter, Query, status

from coursereg.api.dependencies import ActorDep, ChangeRequestsDep
from coursereg.api.models import (
    APIResponse,
    ChangeRequestCreate,
    ChangeRequestResolve,
    ChangeRequestResponse,
    change_request_to_response,
)
from coursereg.entity_store import ChangeRequestStatus

router = APIRouter(prefix="/change-requests", tags=["change-requests"])


@router.post(
    "",
    response_model=APIResponse[ChangeRequestResponse],
    status_code=status.HTTP_201_CREATED,
)
def submit_change_request(
    request: ChangeRequestCreate, service: ChangeRequestsDep, actor: ActorDep
) -> APIResponse[ChangeRequestResponse]:
    """Ask to move the calling student to another school."""
    created = service.submit(actor, request.requested_school_id)
    return APIResponse(data=change_request_to_response(created))


@router.get("", response_model=APIResponse[list[ChangeRequestResponse]])
def list_change_requests(
    service: ChangeRequestsDep,
    actor: ActorDep,
    status_filter: ChangeRequestStatus | None = Query(
        default=None, alias="status", description="Filter by status"
    ),
) -> APIResponse[list[ChangeRequestResponse]]:
    """List change requests; non-admins see only their own."""
    requests = service.list_requests(actor, status=status_filter)
    return APIResponse(data=[change_request_to_response(r) for r in requests])


@router.post("/{request_id}/approve", response_model=APIResponse[ChangeRequestResponse])
def approve_change_request(
    request_id: str,
    service: ChangeRequestsDep,
    actor: ActorDep,
    body: ChangeRequestResolve | None = None,
) -> APIResponse[ChangeRequestResponse]:
    """Approve a change request and move the student."""
    resolved = service.approve(actor, request_id, notes=body.reason if body else None)
    return APIResponse(data=change_request_to_response(resolved))


@router.post("/{request_id}/reject", response_model=APIResponse[ChangeRequestResponse])
def reject_change_request(
    request_id: str,
    service: ChangeRequestsDep,
    actor: ActorDep,
    body: ChangeRequestResolve | None = None,
) -> APIResponse[ChangeRequestResponse]:
    """Reject a change request."""
    resolved = service.reject(actor, request_id, reason=body.reason if body else None)
    return APIResponse(data=change_request_to_response(resolved))
