"""SQLAlchemy models for the Entity Store."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)


class Role(StrEnum):
    """User role."""

    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class RegistrationStatus(StrEnum):
    """Registration lifecycle status."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"
    COMPLETED = "completed"


class ChangeRequestStatus(StrEnum):
    """School change request status."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RoomType(StrEnum):
    """Classroom type."""

    COMPUTER_LAB = "computer_lab"
    REGULAR = "regular"
    LECTURE_HALL = "lecture_hall"


class SubjectCategory(StrEnum):
    """Subject category."""

    REQUIRED = "required"
    ELECTIVE = "elective"
    GENERAL = "general"


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Current time as a naive UTC datetime, the form stored in the database."""
    return datetime.now(UTC).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    """Normalize an aware datetime to naive UTC; naive values are assumed UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


subject_schools = Table(
    "subject_schools",
    Base.metadata,
    Column("subject_id", String(36), ForeignKey("subjects.id", ondelete="CASCADE"), primary_key=True),
    Column("school_id", String(36), ForeignKey("schools.id", ondelete="CASCADE"), primary_key=True),
)


class School(Base):
    """School model - a faculty students belong to."""

    __tablename__ = "schools"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    school_code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    school_name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    def __init__(self, school_code: str, school_name: str, id: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.school_code = school_code
        self.school_name = school_name

    def __repr__(self) -> str:
        return f"<School(id={self.id!r}, school_code={self.school_code!r})>"


class Subject(Base):
    """Subject model - a catalog entry with a credit value."""

    __tablename__ = "subjects"
    __table_args__ = (CheckConstraint("credits >= 1 AND credits <= 10", name="ck_subjects_credits"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    subject_code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    subject_name: Mapped[str] = mapped_column(String(255), nullable=False)
    credits: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    schools: Mapped[list[School]] = relationship(
        "School", secondary=subject_schools, lazy="selectin", order_by="School.school_code"
    )

    def __init__(
        self,
        subject_code: str,
        subject_name: str,
        credits: int,
        category: str = SubjectCategory.REQUIRED.value,
        id: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.subject_code = subject_code
        self.subject_name = subject_name
        self.credits = credits
        self.category = category

    @property
    def school_ids(self) -> list[str]:
        return [school.id for school in self.schools]

    def __repr__(self) -> str:
        return f"<Subject(id={self.id!r}, subject_code={self.subject_code!r}, credits={self.credits})>"


class Classroom(Base):
    """Classroom model - a physical room referenced by schedule slots."""

    __tablename__ = "classrooms"
    __table_args__ = (
        UniqueConstraint("building", "floor", "room_number", name="uq_classrooms_location"),
        CheckConstraint("building >= 1 AND building <= 8", name="ck_classrooms_building"),
        CheckConstraint("floor >= 1 AND floor <= 7", name="ck_classrooms_floor"),
        CheckConstraint("room_number >= 1 AND room_number <= 6", name="ck_classrooms_room"),
        CheckConstraint("capacity >= 1", name="ck_classrooms_capacity"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    building: Mapped[int] = mapped_column(Integer, nullable=False)
    floor: Mapped[int] = mapped_column(Integer, nullable=False)
    room_number: Mapped[int] = mapped_column(Integer, nullable=False)
    room_code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    room_type: Mapped[str] = mapped_column(String(20), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    def __init__(
        self,
        building: int,
        floor: int,
        room_number: int,
        room_type: str,
        capacity: int,
        is_active: bool = True,
        id: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.building = building
        self.floor = floor
        self.room_number = room_number
        self.room_code = make_room_code(building, floor, room_number)
        self.room_type = room_type
        self.capacity = capacity
        self.is_active = is_active

    def __repr__(self) -> str:
        return f"<Classroom(id={self.id!r}, room_code={self.room_code!r})>"


def make_room_code(building: int, floor: int, room_number: int) -> str:
    """Room code as printed on the door, e.g. building 3 floor 2 room 5 -> A3-205."""
    return f"A{building}-{floor}0{room_number}"


class Semester(Base):
    """Semester model - a registration and teaching period."""

    __tablename__ = "semesters"
    __table_args__ = (
        Index(
            "uq_semesters_single_current",
            "is_current",
            unique=True,
            sqlite_where=text("is_current = 1"),
            postgresql_where=text("is_current"),
        ),
        Index("ix_semesters_year_number", "academic_year", "semester_number"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    academic_year: Mapped[str] = mapped_column(String(9), nullable=False)
    semester_number: Mapped[int] = mapped_column(Integer, nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    registration_start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    registration_end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    withdrawal_deadline: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False)
    is_current: Mapped[bool] = mapped_column(Boolean, nullable=False)
    max_credits_per_student: Mapped[int] = mapped_column(Integer, nullable=False)
    min_credits_per_student: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    def __init__(
        self,
        name: str,
        code: str,
        academic_year: str,
        semester_number: int,
        start_date: datetime,
        end_date: datetime,
        registration_start_date: datetime,
        registration_end_date: datetime,
        withdrawal_deadline: datetime,
        id: str | None = None,
        is_active: bool = False,
        is_current: bool = False,
        max_credits_per_student: int = 16,
        min_credits_per_student: int = 8,
        description: str | None = None,
        created_by: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.name = name
        self.code = code
        self.academic_year = academic_year
        self.semester_number = semester_number
        self.start_date = start_date
        self.end_date = end_date
        self.registration_start_date = registration_start_date
        self.registration_end_date = registration_end_date
        self.withdrawal_deadline = withdrawal_deadline
        self.is_active = is_active
        self.is_current = is_current
        self.max_credits_per_student = max_credits_per_student
        self.min_credits_per_student = min_credits_per_student
        self.description = description
        self.created_by = created_by

    def __repr__(self) -> str:
        return f"<Semester(id={self.id!r}, code={self.code!r}, is_current={self.is_current!r})>"


class ScheduleSlot(Base):
    """One weekly meeting of a course: weekday (2=Monday .. 8=Sunday) and period (1..4)."""

    __tablename__ = "course_schedule_slots"
    __table_args__ = (
        CheckConstraint("day_of_week >= 2 AND day_of_week <= 8", name="ck_slots_day"),
        CheckConstraint("period >= 1 AND period <= 4", name="ck_slots_period"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    period: Mapped[int] = mapped_column(Integer, nullable=False)
    classroom_id: Mapped[str] = mapped_column(String(36), ForeignKey("classrooms.id"), nullable=False)

    def __init__(
        self, day_of_week: int, period: int, classroom_id: str, position: int = 0, **kwargs: Any
    ) -> None:
        super().__init__(**kwargs)
        self.day_of_week = day_of_week
        self.period = period
        self.classroom_id = classroom_id
        self.position = position

    def __repr__(self) -> str:
        return f"<ScheduleSlot(day_of_week={self.day_of_week}, period={self.period})>"


class Course(Base):
    """Course model - one section of a subject in a semester."""

    __tablename__ = "courses"
    __table_args__ = (
        UniqueConstraint("subject_id", "class_code", "semester_id", name="uq_courses_section"),
        CheckConstraint("max_students >= 1", name="ck_courses_max_students"),
        CheckConstraint(
            "current_students >= 0 AND current_students <= max_students",
            name="ck_courses_current_students",
        ),
        CheckConstraint(
            "grading_attendance + grading_midterm + grading_final = 100",
            name="ck_courses_grading_policy",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    subject_id: Mapped[str] = mapped_column(String(36), ForeignKey("subjects.id"), nullable=False)
    semester_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("semesters.id"), nullable=False, index=True
    )
    class_code: Mapped[str] = mapped_column(String(20), nullable=False)
    teacher_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=True, index=True
    )
    max_students: Mapped[int] = mapped_column(Integer, nullable=False)
    current_students: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    grading_attendance: Mapped[int] = mapped_column(Integer, nullable=False)
    grading_midterm: Mapped[int] = mapped_column(Integer, nullable=False)
    grading_final: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    # Relationships
    subject: Mapped[Subject] = relationship("Subject", lazy="joined")
    schedule: Mapped[list[ScheduleSlot]] = relationship(
        "ScheduleSlot",
        lazy="selectin",
        order_by="ScheduleSlot.position",
        cascade="all, delete-orphan",
    )

    def __init__(
        self,
        subject_id: str,
        semester_id: str,
        class_code: str,
        max_students: int,
        id: str | None = None,
        teacher_id: str | None = None,
        is_active: bool = True,
        notes: str | None = None,
        grading_attendance: int = 10,
        grading_midterm: int = 30,
        grading_final: int = 60,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.subject_id = subject_id
        self.semester_id = semester_id
        self.class_code = class_code
        self.max_students = max_students
        self.current_students = 0
        self.teacher_id = teacher_id
        self.is_active = is_active
        self.notes = notes
        self.grading_attendance = grading_attendance
        self.grading_midterm = grading_midterm
        self.grading_final = grading_final

    @property
    def available_spots(self) -> int:
        return self.max_students - self.current_students

    def is_full(self) -> bool:
        return self.current_students >= self.max_students

    def __repr__(self) -> str:
        return (
            f"<Course(id={self.id!r}, class_code={self.class_code!r}, "
            f"current_students={self.current_students}/{self.max_students})>"
        )


class User(Base):
    """User model - students, teachers and admins."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("current_credits >= 0", name="ck_users_current_credits"),
        CheckConstraint("max_credits >= 0", name="ck_users_max_credits"),
        Index("ix_users_role", "role"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    student_number: Mapped[str | None] = mapped_column(String(20), nullable=True, unique=True)
    school_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("schools.id"), nullable=True
    )
    gpa: Mapped[float] = mapped_column(Float, nullable=False)
    current_credits: Mapped[int] = mapped_column(Integer, nullable=False)
    max_credits: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    def __init__(
        self,
        first_name: str,
        last_name: str,
        email: str,
        role: str = Role.STUDENT.value,
        id: str | None = None,
        student_number: str | None = None,
        school_id: str | None = None,
        max_credits: int = 24,
        is_active: bool = True,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.first_name = first_name
        self.last_name = last_name
        self.email = email
        self.role = role
        self.student_number = student_number
        self.school_id = school_id
        self.gpa = 0.0
        self.current_credits = 0
        self.max_credits = max_credits
        self.is_active = is_active

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def user_role(self) -> Role:
        """Get role as Role enum."""
        return Role(self.role)

    def __repr__(self) -> str:
        return f"<User(id={self.id!r}, email={self.email!r}, role={self.role!r})>"


class Registration(Base):
    """Registration model - one student in one course section for one semester."""

    __tablename__ = "registrations"
    __table_args__ = (
        UniqueConstraint(
            "student_id", "course_id", "semester_id", name="uq_registrations_student_course"
        ),
        CheckConstraint("attended_classes <= total_classes", name="ck_registrations_attendance"),
        CheckConstraint("priority >= 0 AND priority <= 10", name="ck_registrations_priority"),
        Index("ix_registrations_student_semester", "student_id", "semester_id"),
        Index("ix_registrations_course_status", "course_id", "status"),
        Index("ix_registrations_waitlist", "is_waitlisted", "waitlist_position"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    student_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False)
    course_id: Mapped[str] = mapped_column(String(36), ForeignKey("courses.id"), nullable=False)
    semester_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("semesters.id"), nullable=False
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    registration_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    approval_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    approved_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Staged teacher rejection awaiting admin review
    rejection_requested: Mapped[bool] = mapped_column(Boolean, nullable=False)
    rejection_request_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    rejection_requested_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
    rejection_requested_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    grade_attendance: Mapped[int | None] = mapped_column(Integer, nullable=True)
    grade_midterm: Mapped[int | None] = mapped_column(Integer, nullable=True)
    grade_final: Mapped[int | None] = mapped_column(Integer, nullable=True)
    grade_letter: Mapped[str | None] = mapped_column(String(2), nullable=True)
    grade_points: Mapped[float | None] = mapped_column(Float, nullable=True)
    total_classes: Mapped[int] = mapped_column(Integer, nullable=False)
    attended_classes: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    priority: Mapped[int] = mapped_column(Integer, nullable=False)
    is_waitlisted: Mapped[bool] = mapped_column(Boolean, nullable=False)
    waitlist_position: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    # Relationships
    course: Mapped[Course] = relationship("Course", lazy="joined")

    def __init__(
        self,
        student_id: str,
        course_id: str,
        semester_id: str,
        registration_date: datetime,
        id: str | None = None,
        status: str | None = None,
        priority: int = 0,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.student_id = student_id
        self.course_id = course_id
        self.semester_id = semester_id
        self.registration_date = registration_date
        self.status = status if status is not None else RegistrationStatus.PENDING.value
        self.rejection_requested = False
        self.total_classes = 0
        self.attended_classes = 0
        self.priority = priority
        self.is_waitlisted = False

    @property
    def registration_status(self) -> RegistrationStatus:
        """Get status as RegistrationStatus enum."""
        return RegistrationStatus(self.status)

    @property
    def attendance_percentage(self) -> int:
        if self.total_classes == 0:
            return 0
        return round(self.attended_classes / self.total_classes * 100)

    @property
    def is_passing(self) -> bool | None:
        """True when grade points are at least 2.0; None while ungraded."""
        if self.grade_points is None:
            return None
        return self.grade_points >= 2.0

    def __repr__(self) -> str:
        return (
            f"<Registration(id={self.id!r}, student_id={self.student_id!r}, "
            f"course_id={self.course_id!r}, status={self.status!r})>"
        )


class ChangeRequest(Base):
    """Change request model - a student's request to move to another school."""

    __tablename__ = "change_requests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False)
    request_type: Mapped[str] = mapped_column(String(30), nullable=False)
    current_value: Mapped[str] = mapped_column(String(36), nullable=False)
    requested_value: Mapped[str] = mapped_column(String(36), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    resolved_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    def __init__(
        self,
        user_id: str,
        current_value: str,
        requested_value: str,
        request_type: str = "change_school",
        id: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.user_id = user_id
        self.request_type = request_type
        self.current_value = current_value
        self.requested_value = requested_value
        self.status = ChangeRequestStatus.PENDING.value

    def __repr__(self) -> str:
        return f"<ChangeRequest(id={self.id!r}, user_id={self.user_id!r}, status={self.status!r})>"


class ActivityLog(Base):
    """Activity log model - immutable audit record of a user action."""

    __tablename__ = "activity_logs"
    __table_args__ = (Index("ix_activity_logs_target", "target_type", "target_id"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    target_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    target_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    details: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def __init__(
        self,
        action: str,
        created_at: datetime,
        user_id: str | None = None,
        target_type: str | None = None,
        target_id: str | None = None,
        details: dict[str, Any] | None = None,
        ip_address: str | None = None,
        id: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.user_id = user_id
        self.action = action
        self.target_type = target_type
        self.target_id = target_id
        self.details = details
        self.ip_address = ip_address
        self.created_at = created_at

    def __repr__(self) -> str:
        return f"<ActivityLog(id={self.id!r}, action={self.action!r}, target_id={self.target_id!r})>"
