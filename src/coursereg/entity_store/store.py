"""EntityStore - Main API for Entity Store operations."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from coursereg.entity_store.database import DEFAULT_BUSY_TIMEOUT, Database
from coursereg.entity_store.exceptions import (
    AlreadyExistsError,
    ChangeRequestNotFoundError,
    ClassroomNotFoundError,
    ConcurrencyConflictError,
    CourseNotFoundError,
    EntityStoreError,
    NotFoundError,
    RegistrationNotFoundError,
    SchoolNotFoundError,
    SemesterNotFoundError,
    StorageError,
    SubjectNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from coursereg.entity_store.models import (
    ActivityLog,
    Base,
    ChangeRequest,
    ChangeRequestStatus,
    Classroom,
    Course,
    Registration,
    RegistrationStatus,
    Role,
    RoomType,
    ScheduleSlot,
    School,
    Semester,
    Subject,
    SubjectCategory,
    User,
    make_room_code,
    utcnow,
)
from coursereg.logging import sanitize_for_log

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)

NO_TEACHER_NOTE = "Course locked: no teacher assigned."

_NOT_FOUND_ERRORS: dict[type[Base], type[NotFoundError]] = {
    School: SchoolNotFoundError,
    Subject: SubjectNotFoundError,
    Classroom: ClassroomNotFoundError,
    Semester: SemesterNotFoundError,
    Course: CourseNotFoundError,
    User: UserNotFoundError,
    Registration: RegistrationNotFoundError,
    ChangeRequest: ChangeRequestNotFoundError,
}


@dataclass(frozen=True)
class SlotInput:
    """Requested schedule slot for a course."""

    day_of_week: int
    period: int
    classroom_id: str


def get_or_raise(session: Session, model: type[ModelT], entity_id: str) -> ModelT:
    """Load an entity by primary key inside an open session.

    Raises:
        NotFoundError: The matching subclass for the model when the id does not resolve.
    """
    entity = session.get(model, entity_id)
    if entity is None:
        error = _NOT_FOUND_ERRORS.get(model, NotFoundError)
        raise error(f"{model.__name__} with id '{entity_id}' not found")
    return entity


def translate_db_error(error: SQLAlchemyError) -> EntityStoreError:
    """Map a SQLAlchemy error to the Entity Store error hierarchy."""
    message = str(getattr(error, "orig", None) or error)
    if isinstance(error, IntegrityError):
        if "UNIQUE constraint failed" in message:
            return AlreadyExistsError(message)
        if (
            "CHECK constraint failed" in message
            or "FOREIGN KEY constraint failed" in message
            or "NOT NULL constraint failed" in message
        ):
            return ValidationError(message)
    if isinstance(error, OperationalError) and "locked" in message:
        return ConcurrencyConflictError("Database is busy; retry the operation")
    return StorageError(message)


def record_activity(
    session: Session,
    action: str,
    user_id: str | None = None,
    target_type: str | None = None,
    target_id: str | None = None,
    details: dict[str, Any] | None = None,
    ip_address: str | None = None,
) -> ActivityLog:
    """Add an activity log row to the caller's transaction.

    The row commits or rolls back together with the change it describes.
    """
    clean: dict[str, Any] | None = None
    if details is not None:
        clean = {
            key: sanitize_for_log(value) if isinstance(value, str) else value
            for key, value in details.items()
        }
    entry = ActivityLog(
        action=action,
        created_at=utcnow(),
        user_id=user_id,
        target_type=target_type,
        target_id=target_id,
        details=clean,
        ip_address=ip_address,
    )
    session.add(entry)
    return entry


def _clean_code(value: str, field_name: str) -> str:
    cleaned = value.strip().upper()
    if not cleaned:
        raise ValidationError(f"{field_name} is required")
    return cleaned


def _validate_grading_policy(attendance: int, midterm: int, final: int) -> None:
    weights = (attendance, midterm, final)
    if any(w < 0 or w > 100 for w in weights):
        raise ValidationError("Grading weights must be between 0 and 100")
    if sum(weights) != 100:
        raise ValidationError(f"Grading weights must sum to 100, got {sum(weights)}")


class EntityStore:
    """Main API for Entity Store operations.

    Provides CRUD operations for the catalog (schools, subjects, classrooms,
    courses), users and read access to semesters, registrations, change
    requests and activity logs. Counter columns (course seats and student
    credits) are not writable here; they belong to the capacity ledger.
    """

    def __init__(
        self,
        db_path: str = "coursereg.db",
        default_max_credits: int = 24,
        default_grading_policy: tuple[int, int, int] = (10, 30, 60),
        busy_timeout: float = DEFAULT_BUSY_TIMEOUT,
    ) -> None:
        """Initialize the Entity Store with a SQLite database.

        Creates database and tables if they don't exist.

        Args:
            db_path: Path to SQLite database file
            default_max_credits: Credit ceiling given to new students
            default_grading_policy: Attendance/midterm/final weights for new courses
            busy_timeout: Seconds a writer waits for the database lock
        """
        _validate_grading_policy(*default_grading_policy)
        self._db = Database(db_path, busy_timeout=busy_timeout)
        self._db.create_tables()
        self.default_max_credits = default_max_credits
        self.default_grading_policy = default_grading_policy

    @property
    def database(self) -> Database:
        return self._db

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Run a unit of work: commit on success, roll back on any error.

        Raises:
            AlreadyExistsError: A unique constraint was violated.
            ValidationError: A check or foreign key constraint was violated.
            ConcurrencyConflictError: The database lock could not be acquired.
            StorageError: Any other database failure.
        """
        session = self._db.get_session()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            translated = translate_db_error(e)
            if isinstance(translated, StorageError):
                logger.exception("Storage failure; transaction rolled back")
            raise translated from e
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()

    @contextmanager
    def read_session(self) -> Iterator[Session]:
        """Session for read-only work; storage failures surface as StorageError."""
        session = self._db.get_session()
        try:
            yield session
        except SQLAlchemyError as e:
            logger.exception("Storage failure during read")
            raise translate_db_error(e) from e
        finally:
            session.close()

    # --- School Operations ---

    def create_school(self, school_code: str, school_name: str) -> School:
        """Create a new school.

        Raises:
            AlreadyExistsError: If the school code is taken
        """
        code = _clean_code(school_code, "School code")
        with self.transaction() as session:
            existing = session.execute(
                select(School).where(School.school_code == code)
            ).scalar_one_or_none()
            if existing is not None:
                raise AlreadyExistsError(f"School with code '{code}' already exists")
            school = School(school_code=code, school_name=school_name.strip())
            session.add(school)
        return school

    def get_school(self, school_id: str) -> School:
        """Get school by ID.

        Raises:
            SchoolNotFoundError: If school doesn't exist
        """
        with self.read_session() as session:
            return get_or_raise(session, School, school_id)

    def list_schools(self) -> list[School]:
        """List all schools, ordered by code."""
        with self.read_session() as session:
            stmt = select(School).order_by(School.school_code)
            return list(session.execute(stmt).scalars().all())

    def update_school(self, school_id: str, school_name: str | None = None) -> School:
        """Update school fields. Only provided fields are updated."""
        with self.transaction() as session:
            school = get_or_raise(session, School, school_id)
            if school_name is not None:
                school.school_name = school_name.strip()
        return school

    # --- Subject Operations ---

    def create_subject(
        self,
        subject_code: str,
        subject_name: str,
        credits: int,
        category: str = SubjectCategory.REQUIRED.value,
        school_ids: Sequence[str] = (),
    ) -> Subject:
        """Create a new subject.

        Args:
            subject_code: Catalog code, stored upper-cased
            subject_name: Display name
            credits: Credit value, 1 to 10
            category: required, elective or general
            school_ids: Schools whose students may take the subject

        Returns:
            Created Subject

        Raises:
            ValidationError: If credits or category are invalid
            SchoolNotFoundError: If a school id does not resolve
            AlreadyExistsError: If the subject code is taken
        """
        code = _clean_code(subject_code, "Subject code")
        if not 1 <= credits <= 10:
            raise ValidationError("Credits must be between 1 and 10")
        if category not in {c.value for c in SubjectCategory}:
            raise ValidationError(f"Unknown subject category '{category}'")

        with self.transaction() as session:
            existing = session.execute(
                select(Subject).where(Subject.subject_code == code)
            ).scalar_one_or_none()
            if existing is not None:
                raise AlreadyExistsError(f"Subject with code '{code}' already exists")
            subject = Subject(
                subject_code=code,
                subject_name=subject_name.strip(),
                credits=credits,
                category=category,
            )
            subject.schools = [get_or_raise(session, School, sid) for sid in school_ids]
            session.add(subject)
        return subject

    def get_subject(self, subject_id: str) -> Subject:
        """Get subject by ID.

        Raises:
            SubjectNotFoundError: If subject doesn't exist
        """
        with self.read_session() as session:
            return get_or_raise(session, Subject, subject_id)

    def list_subjects(self, school_id: str | None = None) -> list[Subject]:
        """List subjects, optionally only those open to one school."""
        with self.read_session() as session:
            stmt = select(Subject)
            if school_id is not None:
                stmt = stmt.where(Subject.schools.any(School.id == school_id))
            stmt = stmt.order_by(Subject.subject_code)
            return list(session.execute(stmt).scalars().all())

    def update_subject(
        self,
        subject_id: str,
        subject_name: str | None = None,
        credits: int | None = None,
        category: str | None = None,
        school_ids: Sequence[str] | None = None,
    ) -> Subject:
        """Update subject fields. Only provided fields are updated.

        Credits cannot change once a student holds an approved or completed
        registration for the subject, since those credits are already charged.

        Raises:
            SubjectNotFoundError: If subject doesn't exist
            ValidationError: If a value is invalid or credits are locked
        """
        with self.transaction() as session:
            subject = get_or_raise(session, Subject, subject_id)

            if subject_name is not None:
                subject.subject_name = subject_name.strip()
            if category is not None:
                if category not in {c.value for c in SubjectCategory}:
                    raise ValidationError(f"Unknown subject category '{category}'")
                subject.category = category
            if credits is not None and credits != subject.credits:
                if not 1 <= credits <= 10:
                    raise ValidationError("Credits must be between 1 and 10")
                charged = session.execute(
                    select(func.count(Registration.id))
                    .join(Course, Registration.course_id == Course.id)
                    .where(
                        Course.subject_id == subject_id,
                        Registration.status.in_(
                            [RegistrationStatus.APPROVED.value, RegistrationStatus.COMPLETED.value]
                        ),
                    )
                ).scalar_one()
                if charged:
                    raise ValidationError(
                        "Credits cannot change while students hold approved registrations"
                    )
                subject.credits = credits
            if school_ids is not None:
                subject.schools = [get_or_raise(session, School, sid) for sid in school_ids]
        return subject

    # --- Classroom Operations ---

    def create_classroom(
        self,
        building: int,
        floor: int,
        room_number: int,
        room_type: str,
        capacity: int,
        is_active: bool = True,
    ) -> Classroom:
        """Create a classroom; its room code is derived from its location.

        Raises:
            ValidationError: If the location, type or capacity is out of range
            AlreadyExistsError: If a room already exists at that location
        """
        if not 1 <= building <= 8:
            raise ValidationError("Building must be between 1 and 8")
        if not 1 <= floor <= 7:
            raise ValidationError("Floor must be between 1 and 7")
        if not 1 <= room_number <= 6:
            raise ValidationError("Room number must be between 1 and 6")
        if room_type not in {t.value for t in RoomType}:
            raise ValidationError(f"Unknown room type '{room_type}'")
        if capacity < 1:
            raise ValidationError("Capacity must be at least 1")

        room_code = make_room_code(building, floor, room_number)
        with self.transaction() as session:
            existing = session.execute(
                select(Classroom).where(Classroom.room_code == room_code)
            ).scalar_one_or_none()
            if existing is not None:
                raise AlreadyExistsError(f"Classroom '{room_code}' already exists")
            classroom = Classroom(
                building=building,
                floor=floor,
                room_number=room_number,
                room_type=room_type,
                capacity=capacity,
                is_active=is_active,
            )
            session.add(classroom)
        return classroom

    def get_classroom(self, classroom_id: str) -> Classroom:
        """Get classroom by ID.

        Raises:
            ClassroomNotFoundError: If classroom doesn't exist
        """
        with self.read_session() as session:
            return get_or_raise(session, Classroom, classroom_id)

    def list_classrooms(self, is_active: bool | None = None) -> list[Classroom]:
        """List classrooms ordered by room code."""
        with self.read_session() as session:
            stmt = select(Classroom)
            if is_active is not None:
                stmt = stmt.where(Classroom.is_active == is_active)
            stmt = stmt.order_by(Classroom.room_code)
            return list(session.execute(stmt).scalars().all())

    def update_classroom(
        self,
        classroom_id: str,
        room_type: str | None = None,
        capacity: int | None = None,
        is_active: bool | None = None,
    ) -> Classroom:
        """Update classroom fields. Only provided fields are updated."""
        with self.transaction() as session:
            classroom = get_or_raise(session, Classroom, classroom_id)
            if room_type is not None:
                if room_type not in {t.value for t in RoomType}:
                    raise ValidationError(f"Unknown room type '{room_type}'")
                classroom.room_type = room_type
            if capacity is not None:
                if capacity < 1:
                    raise ValidationError("Capacity must be at least 1")
                classroom.capacity = capacity
            if is_active is not None:
                classroom.is_active = is_active
        return classroom

    # --- Semester Operations (reads; writes live in SemesterCalendar) ---

    def get_semester(self, semester_id: str) -> Semester:
        """Get semester by ID.

        Raises:
            SemesterNotFoundError: If semester doesn't exist
        """
        with self.read_session() as session:
            return get_or_raise(session, Semester, semester_id)

    def list_semesters(
        self,
        is_active: bool | None = None,
        is_current: bool | None = None,
        academic_year: str | None = None,
    ) -> list[Semester]:
        """List semesters, most recent academic year first."""
        with self.read_session() as session:
            stmt = select(Semester)
            if is_active is not None:
                stmt = stmt.where(Semester.is_active == is_active)
            if is_current is not None:
                stmt = stmt.where(Semester.is_current == is_current)
            if academic_year is not None:
                stmt = stmt.where(Semester.academic_year == academic_year)
            stmt = stmt.order_by(Semester.academic_year.desc(), Semester.semester_number.desc())
            return list(session.execute(stmt).scalars().all())

    # --- Course Operations ---

    def _build_schedule(self, session: Session, schedule: Sequence[SlotInput]) -> list[ScheduleSlot]:
        if not schedule:
            raise ValidationError("A course needs at least one schedule slot")
        seen: set[tuple[int, int]] = set()
        slots = []
        for position, slot in enumerate(schedule):
            if not 2 <= slot.day_of_week <= 8:
                raise ValidationError("Day of week must be between 2 (Monday) and 8 (Sunday)")
            if not 1 <= slot.period <= 4:
                raise ValidationError("Period must be between 1 and 4")
            key = (slot.day_of_week, slot.period)
            if key in seen:
                raise ValidationError(
                    f"Duplicate schedule slot: day {slot.day_of_week}, period {slot.period}"
                )
            seen.add(key)
            get_or_raise(session, Classroom, slot.classroom_id)
            slots.append(
                ScheduleSlot(
                    day_of_week=slot.day_of_week,
                    period=slot.period,
                    classroom_id=slot.classroom_id,
                    position=position,
                )
            )
        return slots

    @staticmethod
    def _require_teacher(session: Session, teacher_id: str) -> User:
        teacher = get_or_raise(session, User, teacher_id)
        if teacher.role != Role.TEACHER.value:
            raise ValidationError(f"User '{teacher_id}' is not a teacher")
        return teacher

    def create_course(
        self,
        subject_id: str,
        semester_id: str,
        class_code: str,
        max_students: int,
        schedule: Sequence[SlotInput],
        teacher_id: str | None = None,
        notes: str | None = None,
        grading_policy: tuple[int, int, int] | None = None,
    ) -> Course:
        """Create a course section.

        A section without a teacher is created inactive.

        Args:
            subject_id: Subject the section teaches
            semester_id: Semester the section runs in
            class_code: Section code, unique within (subject, semester)
            max_students: Seat capacity, at least 1
            schedule: Weekly slots, at least one
            teacher_id: Teaching user (optional)
            notes: Admin remarks
            grading_policy: Attendance/midterm/final weights; store default if omitted

        Returns:
            Created Course

        Raises:
            ValidationError: If inputs are invalid
            NotFoundError: If a referenced entity does not exist
            AlreadyExistsError: If the class code is taken for this subject and semester
        """
        code = _clean_code(class_code, "Class code")
        if max_students < 1:
            raise ValidationError("Max students must be at least 1")
        policy = grading_policy or self.default_grading_policy
        _validate_grading_policy(*policy)

        with self.transaction() as session:
            subject = get_or_raise(session, Subject, subject_id)
            get_or_raise(session, Semester, semester_id)
            if teacher_id is not None:
                self._require_teacher(session, teacher_id)

            existing = session.execute(
                select(Course).where(
                    Course.subject_id == subject_id,
                    Course.semester_id == semester_id,
                    Course.class_code == code,
                )
            ).scalar_one_or_none()
            if existing is not None:
                raise AlreadyExistsError(
                    f"Class code '{code}' already exists for this subject in this semester"
                )

            course = Course(
                subject_id=subject_id,
                semester_id=semester_id,
                class_code=code,
                max_students=max_students,
                teacher_id=teacher_id,
                is_active=teacher_id is not None,
                notes=notes if teacher_id is not None else NO_TEACHER_NOTE,
                grading_attendance=policy[0],
                grading_midterm=policy[1],
                grading_final=policy[2],
            )
            course.subject = subject
            course.schedule = self._build_schedule(session, schedule)
            session.add(course)

        logger.info("Created course %s (%s %s)", course.id, subject.subject_code, code)
        return course

    def get_course(self, course_id: str) -> Course:
        """Get course by ID, with subject and schedule loaded.

        Raises:
            CourseNotFoundError: If course doesn't exist
        """
        with self.read_session() as session:
            return get_or_raise(session, Course, course_id)

    def list_courses(
        self,
        semester_id: str | None = None,
        is_active: bool | None = None,
        teacher_id: str | None = None,
        subject_id: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Course]:
        """List courses with optional filters, newest first."""
        with self.read_session() as session:
            stmt = select(Course)
            if semester_id is not None:
                stmt = stmt.where(Course.semester_id == semester_id)
            if is_active is not None:
                stmt = stmt.where(Course.is_active == is_active)
            if teacher_id is not None:
                stmt = stmt.where(Course.teacher_id == teacher_id)
            if subject_id is not None:
                stmt = stmt.where(Course.subject_id == subject_id)
            stmt = stmt.order_by(Course.created_at.desc(), Course.class_code)
            stmt = stmt.limit(limit).offset(offset)
            return list(session.execute(stmt).scalars().unique().all())

    def update_course(
        self,
        course_id: str,
        max_students: int | None = None,
        teacher_id: str | None = None,
        clear_teacher: bool = False,
        schedule: Sequence[SlotInput] | None = None,
        is_active: bool | None = None,
        notes: str | None = None,
    ) -> Course:
        """Update course fields. Only provided fields are updated.

        A course is active only while it has a teacher: clearing the teacher
        deactivates it.

        Args:
            course_id: The course's unique ID
            max_students: New capacity; cannot drop below current enrolment
            teacher_id: New teacher
            clear_teacher: Remove the current teacher
            schedule: Replacement weekly slots
            is_active: Requested active flag (ignored as True without a teacher)
            notes: Admin remarks

        Raises:
            CourseNotFoundError: If course doesn't exist
            ValidationError: If a value is invalid
        """
        with self.transaction() as session:
            course = get_or_raise(session, Course, course_id)

            if max_students is not None:
                if max_students < 1:
                    raise ValidationError("Max students must be at least 1")
                if max_students < course.current_students:
                    raise ValidationError(
                        f"Max students ({max_students}) cannot be below the current "
                        f"enrolment ({course.current_students})"
                    )
                course.max_students = max_students
            if clear_teacher:
                course.teacher_id = None
            elif teacher_id is not None:
                self._require_teacher(session, teacher_id)
                course.teacher_id = teacher_id
            if schedule is not None:
                course.schedule = self._build_schedule(session, schedule)
            if notes is not None:
                course.notes = notes
            if is_active is not None:
                course.is_active = is_active

            if course.teacher_id is None:
                course.is_active = False
                course.notes = NO_TEACHER_NOTE

            session.flush()
            session.refresh(course)
        return course

    def sync_teacher_status(self) -> int:
        """Deactivate every active course that has no teacher.

        Returns:
            Number of courses deactivated
        """
        with self.transaction() as session:
            result = session.execute(
                update(Course)
                .where(Course.teacher_id.is_(None), Course.is_active.is_(True))
                .values(is_active=False, notes=NO_TEACHER_NOTE)
            )
            count = result.rowcount or 0
        logger.info("Deactivated %d courses without a teacher", count)
        return count

    # --- User Operations ---

    @staticmethod
    def _next_student_number(session: Session) -> str:
        prefix = str(utcnow().year)
        last = session.execute(
            select(func.max(User.student_number)).where(User.student_number.like(f"{prefix}%"))
        ).scalar()
        next_number = int(last[-4:]) + 1 if last else 1
        return f"{prefix}{next_number:04d}"

    def create_user(
        self,
        first_name: str,
        last_name: str,
        email: str,
        role: str = Role.STUDENT.value,
        school_id: str | None = None,
        max_credits: int | None = None,
    ) -> User:
        """Create a user. Students get a generated student number.

        Args:
            first_name: Given name
            last_name: Family name
            email: Unique email, stored lower-cased
            role: student, teacher or admin
            school_id: Required for students
            max_credits: Credit ceiling; store default if omitted

        Returns:
            Created User

        Raises:
            ValidationError: If role, school or credit ceiling is invalid
            SchoolNotFoundError: If the school does not exist
            AlreadyExistsError: If the email is taken
        """
        if role not in {r.value for r in Role}:
            raise ValidationError(f"Unknown role '{role}'")
        if role == Role.STUDENT.value and school_id is None:
            raise ValidationError("Students must belong to a school")
        ceiling = self.default_max_credits if max_credits is None else max_credits
        if ceiling < 0:
            raise ValidationError("Max credits must not be negative")
        normalized_email = email.strip().lower()

        with self.transaction() as session:
            if school_id is not None:
                get_or_raise(session, School, school_id)
            existing = session.execute(
                select(User).where(User.email == normalized_email)
            ).scalar_one_or_none()
            if existing is not None:
                raise AlreadyExistsError(f"User with email '{normalized_email}' already exists")

            user = User(
                first_name=first_name.strip(),
                last_name=last_name.strip(),
                email=normalized_email,
                role=role,
                school_id=school_id,
                max_credits=ceiling,
            )
            if role == Role.STUDENT.value:
                user.student_number = self._next_student_number(session)
            session.add(user)
        return user

    def get_user(self, user_id: str) -> User:
        """Get user by ID.

        Raises:
            UserNotFoundError: If user doesn't exist
        """
        with self.read_session() as session:
            return get_or_raise(session, User, user_id)

    def list_users(self, role: str | None = None, school_id: str | None = None) -> list[User]:
        """List users ordered by last name."""
        with self.read_session() as session:
            stmt = select(User)
            if role is not None:
                stmt = stmt.where(User.role == role)
            if school_id is not None:
                stmt = stmt.where(User.school_id == school_id)
            stmt = stmt.order_by(User.last_name, User.first_name)
            return list(session.execute(stmt).scalars().all())

    def update_user(
        self,
        user_id: str,
        first_name: str | None = None,
        last_name: str | None = None,
        max_credits: int | None = None,
        is_active: bool | None = None,
    ) -> User:
        """Update profile fields. Only provided fields are updated.

        Credit totals and school membership are not editable here.

        Raises:
            UserNotFoundError: If user doesn't exist
            ValidationError: If the credit ceiling would fall below the current load
        """
        with self.transaction() as session:
            user = get_or_raise(session, User, user_id)
            if first_name is not None:
                user.first_name = first_name.strip()
            if last_name is not None:
                user.last_name = last_name.strip()
            if max_credits is not None:
                if max_credits < user.current_credits:
                    raise ValidationError(
                        f"Max credits ({max_credits}) cannot be below current credits "
                        f"({user.current_credits})"
                    )
                user.max_credits = max_credits
            if is_active is not None:
                user.is_active = is_active
        return user

    # --- Registration Operations (reads; writes live in RegistrationMachine) ---

    def get_registration(self, registration_id: str) -> Registration:
        """Get registration by ID, with its course loaded.

        Raises:
            RegistrationNotFoundError: If registration doesn't exist
        """
        with self.read_session() as session:
            return get_or_raise(session, Registration, registration_id)

    @staticmethod
    def _registration_filters(
        student_id: str | None,
        course_id: str | None,
        semester_id: str | None,
        status: RegistrationStatus | None,
        teacher_id: str | None = None,
    ) -> list[Any]:
        conditions = []
        if teacher_id is not None:
            conditions.append(Registration.course.has(Course.teacher_id == teacher_id))
        if student_id is not None:
            conditions.append(Registration.student_id == student_id)
        if course_id is not None:
            conditions.append(Registration.course_id == course_id)
        if semester_id is not None:
            conditions.append(Registration.semester_id == semester_id)
        if status is not None:
            conditions.append(Registration.status == status.value)
        return conditions

    def list_registrations(
        self,
        student_id: str | None = None,
        course_id: str | None = None,
        semester_id: str | None = None,
        status: RegistrationStatus | None = None,
        teacher_id: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Registration]:
        """List registrations with optional filters, most recent first.

        teacher_id restricts the result to courses taught by that teacher.
        """
        conditions = self._registration_filters(
            student_id, course_id, semester_id, status, teacher_id
        )
        with self.read_session() as session:
            stmt = (
                select(Registration)
                .where(*conditions)
                .order_by(Registration.registration_date.desc(), Registration.id)
                .limit(limit)
                .offset(offset)
            )
            return list(session.execute(stmt).scalars().unique().all())

    def count_registrations(
        self,
        student_id: str | None = None,
        course_id: str | None = None,
        semester_id: str | None = None,
        status: RegistrationStatus | None = None,
        teacher_id: str | None = None,
    ) -> int:
        """Count registrations matching the same filters as list_registrations."""
        conditions = self._registration_filters(
            student_id, course_id, semester_id, status, teacher_id
        )
        with self.read_session() as session:
            stmt = select(func.count(Registration.id)).where(*conditions)
            return session.execute(stmt).scalar_one()

    # --- Change Request Operations (reads) ---

    def get_change_request(self, request_id: str) -> ChangeRequest:
        """Get change request by ID.

        Raises:
            ChangeRequestNotFoundError: If the request doesn't exist
        """
        with self.read_session() as session:
            return get_or_raise(session, ChangeRequest, request_id)

    def list_change_requests(
        self,
        status: ChangeRequestStatus | None = None,
        user_id: str | None = None,
    ) -> list[ChangeRequest]:
        """List change requests, newest first."""
        with self.read_session() as session:
            stmt = select(ChangeRequest)
            if status is not None:
                stmt = stmt.where(ChangeRequest.status == status.value)
            if user_id is not None:
                stmt = stmt.where(ChangeRequest.user_id == user_id)
            stmt = stmt.order_by(ChangeRequest.created_at.desc())
            return list(session.execute(stmt).scalars().all())

    # --- Activity Log Operations ---

    def log_activity(
        self,
        action: str,
        user_id: str | None = None,
        target_type: str | None = None,
        target_id: str | None = None,
        details: dict[str, Any] | None = None,
        ip_address: str | None = None,
    ) -> ActivityLog:
        """Record a standalone activity (one not tied to another write)."""
        with self.transaction() as session:
            entry = record_activity(
                session,
                action,
                user_id=user_id,
                target_type=target_type,
                target_id=target_id,
                details=details,
                ip_address=ip_address,
            )
        return entry

    def list_activity(
        self,
        user_id: str | None = None,
        action: str | None = None,
        target_type: str | None = None,
        target_id: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[ActivityLog]:
        """Query the activity log, newest first."""
        with self.read_session() as session:
            stmt = select(ActivityLog)
            if user_id is not None:
                stmt = stmt.where(ActivityLog.user_id == user_id)
            if action is not None:
                stmt = stmt.where(ActivityLog.action == action)
            if target_type is not None:
                stmt = stmt.where(ActivityLog.target_type == target_type)
            if target_id is not None:
                stmt = stmt.where(ActivityLog.target_id == target_id)
            stmt = stmt.order_by(ActivityLog.created_at.desc()).limit(limit).offset(offset)
            return list(session.execute(stmt).scalars().all())
