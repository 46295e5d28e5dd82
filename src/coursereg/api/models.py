"""Pydantic models for REST API."""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from coursereg.semesters import semester_type

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None


# School models


class SchoolCreate(BaseModel):
    """Request model for creating a school."""

    school_code: str = Field(..., min_length=1, max_length=20)
    school_name: str = Field(..., min_length=1, max_length=255)


class SchoolUpdate(BaseModel):
    """Request model for updating a school (partial update)."""

    school_name: str | None = Field(default=None, min_length=1, max_length=255)


class SchoolResponse(BaseModel):
    """Response model for a school."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    school_code: str
    school_name: str
    created_at: datetime
    updated_at: datetime


def school_to_response(school: Any) -> SchoolResponse:
    """Convert a School model to SchoolResponse."""
    return SchoolResponse.model_validate(school)


# Subject models


class SubjectCreate(BaseModel):
    """Request model for creating a subject."""

    subject_code: str = Field(..., min_length=1, max_length=20)
    subject_name: str = Field(..., min_length=1, max_length=255)
    credits: int = Field(..., ge=1, le=10)
    category: str = Field(default="required", pattern=r"^(required|elective|general)$")
    school_ids: list[str] = Field(default_factory=list)


class SubjectUpdate(BaseModel):
    """Request model for updating a subject (partial update)."""

    subject_name: str | None = Field(default=None, min_length=1, max_length=255)
    credits: int | None = Field(default=None, ge=1, le=10)
    category: str | None = Field(default=None, pattern=r"^(required|elective|general)$")
    school_ids: list[str] | None = None


class SubjectResponse(BaseModel):
    """Response model for a subject."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    subject_code: str
    subject_name: str
    credits: int
    category: str
    school_ids: list[str]
    created_at: datetime
    updated_at: datetime


def subject_to_response(subject: Any) -> SubjectResponse:
    """Convert a Subject model to SubjectResponse."""
    return SubjectResponse.model_validate(subject)


# Classroom models


class ClassroomCreate(BaseModel):
    """Request model for creating a classroom."""

    building: int = Field(..., ge=1, le=8)
    floor: int = Field(..., ge=1, le=7)
    room_number: int = Field(..., ge=1, le=6)
    room_type: str = Field(..., pattern=r"^(computer_lab|regular|lecture_hall)$")
    capacity: int = Field(..., ge=1)
    is_active: bool = True


class ClassroomUpdate(BaseModel):
    """Request model for updating a classroom (partial update)."""

    room_type: str | None = Field(default=None, pattern=r"^(computer_lab|regular|lecture_hall)$")
    capacity: int | None = Field(default=None, ge=1)
    is_active: bool | None = None


class ClassroomResponse(BaseModel):
    """Response model for a classroom."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    building: int
    floor: int
    room_number: int
    room_code: str
    room_type: str
    capacity: int
    is_active: bool


def classroom_to_response(classroom: Any) -> ClassroomResponse:
    """Convert a Classroom model to ClassroomResponse."""
    return ClassroomResponse.model_validate(classroom)


# Semester models


class SemesterCreate(BaseModel):
    """Request model for creating a semester."""

    name: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=1, max_length=50)
    academic_year: str = Field(..., pattern=r"^\d{4}-\d{4}$")
    semester_number: int = Field(..., ge=1, le=3)
    start_date: datetime
    end_date: datetime
    registration_start_date: datetime
    registration_end_date: datetime
    withdrawal_deadline: datetime
    max_credits_per_student: int = Field(default=16, ge=1)
    min_credits_per_student: int = Field(default=8, ge=1)
    description: str | None = None
    is_current: bool = False


class SemesterUpdate(BaseModel):
    """Request model for updating a semester (partial update)."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    code: str | None = Field(default=None, min_length=1, max_length=50)
    academic_year: str | None = Field(default=None, pattern=r"^\d{4}-\d{4}$")
    semester_number: int | None = Field(default=None, ge=1, le=3)
    start_date: datetime | None = None
    end_date: datetime | None = None
    registration_start_date: datetime | None = None
    registration_end_date: datetime | None = None
    withdrawal_deadline: datetime | None = None
    max_credits_per_student: int | None = Field(default=None, ge=1)
    min_credits_per_student: int | None = Field(default=None, ge=1)
    description: str | None = None


class SemesterResponse(BaseModel):
    """Response model for a semester."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    code: str
    academic_year: str
    semester_number: int
    semester_type: str
    start_date: datetime
    end_date: datetime
    registration_start_date: datetime
    registration_end_date: datetime
    withdrawal_deadline: datetime
    is_active: bool
    is_current: bool
    max_credits_per_student: int
    min_credits_per_student: int
    description: str | None
    created_by: str | None
    registration_open: bool | None = None


def semester_to_response(semester: Any, registration_open: bool | None = None) -> SemesterResponse:
    """Convert a Semester model to SemesterResponse."""
    return SemesterResponse(
        id=semester.id,
        name=semester.name,
        code=semester.code,
        academic_year=semester.academic_year,
        semester_number=semester.semester_number,
        semester_type=semester_type(semester.semester_number),
        start_date=semester.start_date,
        end_date=semester.end_date,
        registration_start_date=semester.registration_start_date,
        registration_end_date=semester.registration_end_date,
        withdrawal_deadline=semester.withdrawal_deadline,
        is_active=semester.is_active,
        is_current=semester.is_current,
        max_credits_per_student=semester.max_credits_per_student,
        min_credits_per_student=semester.min_credits_per_student,
        description=semester.description,
        created_by=semester.created_by,
        registration_open=registration_open,
    )


# Course models


class SlotModel(BaseModel):
    """One weekly meeting: day 2 (Monday) to 8 (Sunday), period 1 to 4."""

    model_config = ConfigDict(from_attributes=True)

    day_of_week: int = Field(..., ge=2, le=8)
    period: int = Field(..., ge=1, le=4)
    classroom_id: str


class GradingPolicyModel(BaseModel):
    """Grade component weights in percent."""

    attendance: int = Field(..., ge=0, le=100)
    midterm: int = Field(..., ge=0, le=100)
    final: int = Field(..., ge=0, le=100)


class CourseCreate(BaseModel):
    """Request model for creating a course section."""

    subject_id: str
    semester_id: str
    class_code: str = Field(..., min_length=1, max_length=20)
    max_students: int = Field(..., ge=1)
    schedule: list[SlotModel] = Field(..., min_length=1)
    teacher_id: str | None = None
    notes: str | None = None
    grading_policy: GradingPolicyModel | None = None


class CourseUpdate(BaseModel):
    """Request model for updating a course (partial update).

    Sending teacher_id as null removes the teacher and deactivates the course.
    """

    max_students: int | None = Field(default=None, ge=1)
    teacher_id: str | None = None
    schedule: list[SlotModel] | None = Field(default=None, min_length=1)
    is_active: bool | None = None
    notes: str | None = None


class CourseResponse(BaseModel):
    """Response model for a course section."""

    id: str
    subject_id: str
    subject_code: str
    subject_name: str
    credits: int
    semester_id: str
    class_code: str
    teacher_id: str | None
    max_students: int
    current_students: int
    available_spots: int
    is_active: bool
    notes: str | None
    grading_policy: GradingPolicyModel
    schedule: list[SlotModel]
    created_at: datetime
    updated_at: datetime


def course_to_response(course: Any) -> CourseResponse:
    """Convert a Course model to CourseResponse."""
    return CourseResponse(
        id=course.id,
        subject_id=course.subject_id,
        subject_code=course.subject.subject_code,
        subject_name=course.subject.subject_name,
        credits=course.subject.credits,
        semester_id=course.semester_id,
        class_code=course.class_code,
        teacher_id=course.teacher_id,
        max_students=course.max_students,
        current_students=course.current_students,
        available_spots=course.available_spots,
        is_active=course.is_active,
        notes=course.notes,
        grading_policy=GradingPolicyModel(
            attendance=course.grading_attendance,
            midterm=course.grading_midterm,
            final=course.grading_final,
        ),
        schedule=[SlotModel.model_validate(slot) for slot in course.schedule],
        created_at=course.created_at,
        updated_at=course.updated_at,
    )


class SyncTeacherStatusResponse(BaseModel):
    """Response model for the teacher status sync."""

    deactivated: int


class CascadeResultResponse(BaseModel):
    """Response model for a course deletion."""

    model_config = ConfigDict(from_attributes=True)

    course_id: str
    deleted_registrations: list[str]
    refunded_credits: dict[str, int]


# User models


class UserCreate(BaseModel):
    """Request model for creating a user."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    role: str = Field(default="student", pattern=r"^(student|teacher|admin)$")
    school_id: str | None = None
    max_credits: int | None = Field(default=None, ge=0)


class UserUpdate(BaseModel):
    """Request model for updating a user (partial update)."""

    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    max_credits: int | None = Field(default=None, ge=0)
    is_active: bool | None = None


class UserResponse(BaseModel):
    """Response model for a user."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    full_name: str
    email: str
    role: str
    student_number: str | None
    school_id: str | None
    gpa: float
    current_credits: int
    max_credits: int
    is_active: bool
    created_at: datetime


def user_to_response(user: Any) -> UserResponse:
    """Convert a User model to UserResponse."""
    return UserResponse.model_validate(user)


class StudentCreditsResponse(BaseModel):
    """Response model for a student's credit load in one semester."""

    model_config = ConfigDict(from_attributes=True)

    student_id: str
    semester_id: str
    approved: int
    completed: int
    pending: int
    semester_total: int
    current_credits: int
    max_credits: int


# Registration models


class RegistrationCreate(BaseModel):
    """Request model for registering for a course."""

    course_id: str
    semester_id: str


class SwitchRequest(BaseModel):
    """Request model for switching to another section."""

    new_course_id: str


class RejectRequest(BaseModel):
    """Request model for rejecting a registration."""

    reason: str = Field(..., min_length=1)


class GradeRequest(BaseModel):
    """Request model for grading (partial update)."""

    attendance: int | None = Field(default=None, ge=0, le=100)
    midterm: int | None = Field(default=None, ge=0, le=100)
    final: int | None = Field(default=None, ge=0, le=100)
    final_grade: str | None = None


class AttendanceRequest(BaseModel):
    """Request model for attendance counters."""

    total_classes: int = Field(..., ge=0)
    attended_classes: int = Field(..., ge=0)


class WaitlistRequest(BaseModel):
    """Request model for waitlisting a registration."""

    position: int = Field(..., ge=1)


class PriorityRequest(BaseModel):
    """Request model for a registration's review priority."""

    priority: int = Field(..., ge=0, le=10)


class RegistrationResponse(BaseModel):
    """Response model for a registration."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    course_id: str
    semester_id: str
    status: str
    registration_date: datetime
    approval_date: datetime | None
    approved_by: str | None
    rejection_reason: str | None
    rejection_requested: bool
    rejection_request_reason: str | None
    rejection_requested_by: str | None
    grade_attendance: int | None
    grade_midterm: int | None
    grade_final: int | None
    grade_letter: str | None
    grade_points: float | None
    is_passing: bool | None
    total_classes: int
    attended_classes: int
    attendance_percentage: int
    priority: int
    is_waitlisted: bool
    waitlist_position: int | None


def registration_to_response(registration: Any) -> RegistrationResponse:
    """Convert a Registration model to RegistrationResponse."""
    return RegistrationResponse.model_validate(registration)


class RegistrationListResponse(BaseModel):
    """A page of registrations."""

    items: list[RegistrationResponse]
    total: int
    limit: int
    offset: int


class SwitchCandidateResponse(BaseModel):
    """Returned (with 409) when the student may switch sections instead of registering."""

    model_config = ConfigDict(from_attributes=True)

    existing_registration_id: str
    existing_course_id: str
    candidate_course_id: str


# Change request models


class ChangeRequestCreate(BaseModel):
    """Request model for a school change request."""

    requested_school_id: str


class ChangeRequestResolve(BaseModel):
    """Request model for resolving a change request."""

    reason: str | None = None


class ChangeRequestResponse(BaseModel):
    """Response model for a change request."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    request_type: str
    current_value: str
    requested_value: str
    status: str
    admin_notes: str | None
    resolved_by: str | None
    resolved_at: datetime | None
    created_at: datetime


def change_request_to_response(request: Any) -> ChangeRequestResponse:
    """Convert a ChangeRequest model to ChangeRequestResponse."""
    return ChangeRequestResponse.model_validate(request)


# Activity log models


class ActivityLogResponse(BaseModel):
    """Response model for an activity log entry."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str | None
    action: str
    target_type: str | None
    target_id: str | None
    details: dict[str, Any] | None
    ip_address: str | None
    created_at: datetime


# Ledger models


class CourseDriftResponse(BaseModel):
    """A drifted course seat count."""

    model_config = ConfigDict(from_attributes=True)

    course_id: str
    stored: int
    derived: int


class StudentDriftResponse(BaseModel):
    """A drifted student credit total."""

    model_config = ConfigDict(from_attributes=True)

    student_id: str
    stored: int
    derived: int


class LedgerReportResponse(BaseModel):
    """Response model for a ledger audit or repair."""

    model_config = ConfigDict(from_attributes=True)

    courses: list[CourseDriftResponse]
    students: list[StudentDriftResponse]
    repaired: bool
    is_consistent: bool


class RecomputeResponse(BaseModel):
    """Response model for a seat count recomputation."""

    course_id: str
    current_students: int
