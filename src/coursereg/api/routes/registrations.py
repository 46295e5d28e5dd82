"""Registration endpoints: the enrollment lifecycle."""

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from coursereg.api.dependencies import ActorDep, MachineDep
from coursereg.api.models import (
    APIResponse,
    AttendanceRequest,
    GradeRequest,
    PriorityRequest,
    RegistrationCreate,
    RegistrationListResponse,
    RegistrationResponse,
    RejectRequest,
    SwitchCandidateResponse,
    SwitchRequest,
    WaitlistRequest,
    registration_to_response,
)
from coursereg.registration import RegistrationStatus, SwitchCandidate

router = APIRouter(prefix="/registrations", tags=["registrations"])


@router.post(
    "",
    response_model=APIResponse[RegistrationResponse],
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": APIResponse[SwitchCandidateResponse]}},
)
def create_registration(
    request: RegistrationCreate, machine: MachineDep, actor: ActorDep
) -> APIResponse[RegistrationResponse] | JSONResponse:
    """Register the calling student for a course section.

    When the student already holds a pending registration for another
    section of the same subject, nothing is created and the response is a
    409 carrying the switch candidate.
    """
    result = machine.register(actor, request.course_id, request.semester_id)
    if isinstance(result, SwitchCandidate):
        body = APIResponse[SwitchCandidateResponse](
            data=SwitchCandidateResponse.model_validate(result),
            error="Already registered for another section of this subject; switch instead",
        )
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=body.model_dump())
    return APIResponse(data=registration_to_response(result))


@router.get("", response_model=APIResponse[RegistrationListResponse])
def list_registrations(
    machine: MachineDep,
    actor: ActorDep,
    student_id: str | None = Query(default=None, description="Filter by student"),
    course_id: str | None = Query(default=None, description="Filter by course"),
    semester_id: str | None = Query(default=None, description="Filter by semester"),
    status_filter: RegistrationStatus | None = Query(
        default=None, alias="status", description="Filter by status"
    ),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
) -> APIResponse[RegistrationListResponse]:
    """List registrations visible to the caller, newest first."""
    items, total = machine.list_registrations(
        actor,
        student_id=student_id,
        course_id=course_id,
        semester_id=semester_id,
        status=status_filter,
        limit=limit,
        offset=offset,
    )
    page = RegistrationListResponse(
        items=[registration_to_response(r) for r in items],
        total=total,
        limit=limit,
        offset=offset,
    )
    return APIResponse(data=page)


@router.get("/{registration_id}", response_model=APIResponse[RegistrationResponse])
def get_registration(
    registration_id: str, machine: MachineDep, actor: ActorDep
) -> APIResponse[RegistrationResponse]:
    """Get a registration by ID."""
    return APIResponse(data=registration_to_response(machine.get_registration(actor, registration_id)))


@router.post("/{registration_id}/switch", response_model=APIResponse[RegistrationResponse])
def switch_registration(
    registration_id: str, request: SwitchRequest, machine: MachineDep, actor: ActorDep
) -> APIResponse[RegistrationResponse]:
    """Move a registration to another section of the same subject."""
    registration = machine.switch(actor, registration_id, request.new_course_id)
    return APIResponse(data=registration_to_response(registration))


@router.post("/{registration_id}/approve", response_model=APIResponse[RegistrationResponse])
def approve_registration(
    registration_id: str, machine: MachineDep, actor: ActorDep
) -> APIResponse[RegistrationResponse]:
    """Approve a pending registration, taking a seat and charging credits."""
    return APIResponse(data=registration_to_response(machine.approve(actor, registration_id)))


@router.post("/{registration_id}/reject", response_model=APIResponse[RegistrationResponse])
def reject_registration(
    registration_id: str, request: RejectRequest, machine: MachineDep, actor: ActorDep
) -> APIResponse[RegistrationResponse]:
    """Reject a pending registration (teachers stage a request for admin review)."""
    registration = machine.reject(actor, registration_id, request.reason)
    return APIResponse(data=registration_to_response(registration))


@router.post("/{registration_id}/withdraw", response_model=APIResponse[RegistrationResponse])
def withdraw_registration(
    registration_id: str, machine: MachineDep, actor: ActorDep
) -> APIResponse[RegistrationResponse]:
    """Withdraw from a course, releasing any seat and credits held."""
    return APIResponse(data=registration_to_response(machine.withdraw(actor, registration_id)))


@router.post("/{registration_id}/grade", response_model=APIResponse[RegistrationResponse])
def grade_registration(
    registration_id: str, request: GradeRequest, machine: MachineDep, actor: ActorDep
) -> APIResponse[RegistrationResponse]:
    """Record grade components; a graded approved registration completes."""
    registration = machine.grade(
        actor,
        registration_id,
        attendance=request.attendance,
        midterm=request.midterm,
        final=request.final,
        final_grade=request.final_grade,
    )
    return APIResponse(data=registration_to_response(registration))


@router.post("/{registration_id}/attendance", response_model=APIResponse[RegistrationResponse])
def record_attendance(
    registration_id: str, request: AttendanceRequest, machine: MachineDep, actor: ActorDep
) -> APIResponse[RegistrationResponse]:
    """Set attendance counters."""
    registration = machine.record_attendance(
        actor, registration_id, request.total_classes, request.attended_classes
    )
    return APIResponse(data=registration_to_response(registration))


@router.post("/{registration_id}/waitlist", response_model=APIResponse[RegistrationResponse])
def waitlist_registration(
    registration_id: str, request: WaitlistRequest, machine: MachineDep, actor: ActorDep
) -> APIResponse[RegistrationResponse]:
    """Put a pending registration on the course waitlist."""
    registration = machine.waitlist(actor, registration_id, request.position)
    return APIResponse(data=registration_to_response(registration))


@router.post("/{registration_id}/priority", response_model=APIResponse[RegistrationResponse])
def set_priority(
    registration_id: str, request: PriorityRequest, machine: MachineDep, actor: ActorDep
) -> APIResponse[RegistrationResponse]:
    """Set a registration's review priority."""
    registration = machine.set_priority(actor, registration_id, request.priority)
    return APIResponse(data=registration_to_response(registration))
