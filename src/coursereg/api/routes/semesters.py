"""Semester endpoints."""

from fastapi import APIRouter, Query, status

from coursereg.api.dependencies import ActorDep, AdminDep, CalendarDep, EntityStoreDep
from coursereg.api.models import (
    APIResponse,
    SemesterCreate,
    SemesterResponse,
    SemesterUpdate,
    semester_to_response,
)
from coursereg.entity_store import SemesterNotFoundError

router = APIRouter(prefix="/semesters", tags=["semesters"])


@router.get("", response_model=APIResponse[list[SemesterResponse]])
def list_semesters(
    store: EntityStoreDep,
    _actor: ActorDep,
    is_active: bool | None = Query(default=None, description="Filter by active flag"),
    is_current: bool | None = Query(default=None, description="Filter by current flag"),
    academic_year: str | None = Query(default=None, description="Filter by academic year"),
) -> APIResponse[list[SemesterResponse]]:
    """List semesters, most recent first."""
    semesters = store.list_semesters(
        is_active=is_active, is_current=is_current, academic_year=academic_year
    )
    return APIResponse(data=[semester_to_response(s) for s in semesters])


@router.get("/current", response_model=APIResponse[SemesterResponse])
def get_current_semester(calendar: CalendarDep, _actor: ActorDep) -> APIResponse[SemesterResponse]:
    """Get the semester students should see right now."""
    semester = calendar.get_current()
    if semester is None:
        raise SemesterNotFoundError("No active semester")
    return APIResponse(
        data=semester_to_response(semester, registration_open=calendar.registration_open(semester))
    )


@router.get("/open", response_model=APIResponse[list[SemesterResponse]])
def list_open_semesters(
    calendar: CalendarDep, _actor: ActorDep
) -> APIResponse[list[SemesterResponse]]:
    """List semesters currently open for registration."""
    semesters = calendar.list_open_for_registration()
    return APIResponse(data=[semester_to_response(s, registration_open=True) for s in semesters])


@router.post(
    "",
    response_model=APIResponse[SemesterResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_semester(
    semester: SemesterCreate, calendar: CalendarDep, admin: AdminDep
) -> APIResponse[SemesterResponse]:
    """Create a semester."""
    created = calendar.create_semester(**semester.model_dump(), created_by=admin.user_id)
    return APIResponse(data=semester_to_response(created))


@router.get("/{semester_id}", response_model=APIResponse[SemesterResponse])
def get_semester(
    semester_id: str, store: EntityStoreDep, _actor: ActorDep
) -> APIResponse[SemesterResponse]:
    """Get a semester by ID."""
    return APIResponse(data=semester_to_response(store.get_semester(semester_id)))


@router.patch("/{semester_id}", response_model=APIResponse[SemesterResponse])
def update_semester(
    semester_id: str, semester: SemesterUpdate, calendar: CalendarDep, admin: AdminDep
) -> APIResponse[SemesterResponse]:
    """Update a semester (partial update)."""
    updated = calendar.update_semester(
        semester_id, actor_id=admin.user_id, **semester.model_dump(exclude_unset=True)
    )
    return APIResponse(data=semester_to_response(updated))


@router.post("/{semester_id}/activate", response_model=APIResponse[SemesterResponse])
def activate_semester(
    semester_id: str, calendar: CalendarDep, admin: AdminDep
) -> APIResponse[SemesterResponse]:
    """Make this the only active and current semester."""
    semester = calendar.activate(semester_id, actor_id=admin.user_id)
    return APIResponse(data=semester_to_response(semester))


@router.post("/{semester_id}/set-current", response_model=APIResponse[SemesterResponse])
def set_current_semester(
    semester_id: str, calendar: CalendarDep, admin: AdminDep
) -> APIResponse[SemesterResponse]:
    """Make this the current semester without touching active flags."""
    semester = calendar.set_current(semester_id, actor_id=admin.user_id)
    return APIResponse(data=semester_to_response(semester))
