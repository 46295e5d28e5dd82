"""Activity log endpoints."""

from fastapi import APIRouter, Query

from coursereg.api.dependencies import AdminDep, EntityStoreDep
from coursereg.api.models import ActivityLogResponse, APIResponse

router = APIRouter(prefix="/activity-logs", tags=["activity-logs"])


@router.get("", response_model=APIResponse[list[ActivityLogResponse]])
def list_activity_logs(
    store: EntityStoreDep,
    _admin: AdminDep,
    user_id: str | None = Query(default=None, description="Filter by acting user"),
    action: str | None = Query(default=None, description="Filter by action, e.g. registration.approve"),
    target_type: str | None = Query(default=None, description="Filter by target type"),
    target_id: str | None = Query(default=None, description="Filter by target ID"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
) -> APIResponse[list[ActivityLogResponse]]:
    """List activity log entries, newest first."""
    entries = store.list_activity(
        user_id=user_id,
        action=action,
        target_type=target_type,
        target_id=target_id,
        limit=limit,
        offset=offset,
    )
    return APIResponse(data=[ActivityLogResponse.model_validate(e) for e in entries])
