"""Course endpoints."""

from fastapi import APIRouter, Query, status

from coursereg.api.dependencies import ActorDep, AdminDep, EntityStoreDep, MachineDep
from coursereg.api.models import (
    APIResponse,
    CascadeResultResponse,
    CourseCreate,
    CourseResponse,
    CourseUpdate,
    RegistrationResponse,
    SlotModel,
    SyncTeacherStatusResponse,
    course_to_response,
    registration_to_response,
)
from coursereg.entity_store import SlotInput
from coursereg.registration import ForbiddenError

router = APIRouter(prefix="/courses", tags=["courses"])


def _slots(schedule: list[SlotModel]) -> list[SlotInput]:
    return [SlotInput(s.day_of_week, s.period, s.classroom_id) for s in schedule]


@router.get("", response_model=APIResponse[list[CourseResponse]])
def list_courses(
    store: EntityStoreDep,
    _actor: ActorDep,
    semester_id: str | None = Query(default=None, description="Filter by semester"),
    subject_id: str | None = Query(default=None, description="Filter by subject"),
    teacher_id: str | None = Query(default=None, description="Filter by teacher"),
    is_active: bool | None = Query(default=None, description="Filter by active flag"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
) -> APIResponse[list[CourseResponse]]:
    """List course sections."""
    courses = store.list_courses(
        semester_id=semester_id,
        is_active=is_active,
        teacher_id=teacher_id,
        subject_id=subject_id,
        limit=limit,
        offset=offset,
    )
    return APIResponse(data=[course_to_response(c) for c in courses])


@router.post(
    "",
    response_model=APIResponse[CourseResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_course(
    course: CourseCreate, store: EntityStoreDep, _admin: AdminDep
) -> APIResponse[CourseResponse]:
    """Create a course section. Sections without a teacher start inactive."""
    policy = course.grading_policy
    created = store.create_course(
        subject_id=course.subject_id,
        semester_id=course.semester_id,
        class_code=course.class_code,
        max_students=course.max_students,
        schedule=_slots(course.schedule),
        teacher_id=course.teacher_id,
        notes=course.notes,
        grading_policy=(policy.attendance, policy.midterm, policy.final) if policy else None,
    )
    return APIResponse(data=course_to_response(created))


@router.post("/sync-teacher-status", response_model=APIResponse[SyncTeacherStatusResponse])
def sync_teacher_status(
    store: EntityStoreDep, _admin: AdminDep
) -> APIResponse[SyncTeacherStatusResponse]:
    """Deactivate every active course that has no teacher."""
    count = store.sync_teacher_status()
    return APIResponse(data=SyncTeacherStatusResponse(deactivated=count))


@router.get("/{course_id}", response_model=APIResponse[CourseResponse])
def get_course(course_id: str, store: EntityStoreDep, _actor: ActorDep) -> APIResponse[CourseResponse]:
    """Get a course by ID."""
    return APIResponse(data=course_to_response(store.get_course(course_id)))


@router.patch("/{course_id}", response_model=APIResponse[CourseResponse])
def update_course(
    course_id: str, course: CourseUpdate, store: EntityStoreDep, _admin: AdminDep
) -> APIResponse[CourseResponse]:
    """Update a course (partial update)."""
    clear_teacher = "teacher_id" in course.model_fields_set and course.teacher_id is None
    updated = store.update_course(
        course_id,
        max_students=course.max_students,
        teacher_id=course.teacher_id,
        clear_teacher=clear_teacher,
        schedule=_slots(course.schedule) if course.schedule is not None else None,
        is_active=course.is_active,
        notes=course.notes,
    )
    return APIResponse(data=course_to_response(updated))


@router.delete("/{course_id}", response_model=APIResponse[CascadeResultResponse])
def delete_course(
    course_id: str, machine: MachineDep, admin: AdminDep
) -> APIResponse[CascadeResultResponse]:
    """Delete a course with its registrations, refunding charged credits."""
    result = machine.delete_course(admin, course_id)
    return APIResponse(data=CascadeResultResponse.model_validate(result))


@router.get("/{course_id}/waitlist", response_model=APIResponse[list[RegistrationResponse]])
def get_waitlist(
    course_id: str, store: EntityStoreDep, machine: MachineDep, actor: ActorDep
) -> APIResponse[list[RegistrationResponse]]:
    """List a course's waitlist in order."""
    if actor.is_student:
        raise ForbiddenError("Students cannot view waitlists")
    if actor.is_teacher and store.get_course(course_id).teacher_id != actor.user_id:
        raise ForbiddenError("Not the teacher of this course")
    waitlist = machine.list_waitlist(course_id)
    return APIResponse(data=[registration_to_response(r) for r in waitlist])
