"""Shared pytest fixtures and configuration."""

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import datetime
from unittest.mock import Mock

import pytest

from coursereg.capacity import CapacityLedger
from coursereg.entity_store import (
    Classroom,
    Course,
    EntityStore,
    School,
    Semester,
    SlotInput,
    Subject,
    User,
)
from coursereg.registration import Actor, ChangeRequestService, RegistrationMachine
from coursereg.semesters import SemesterCalendar

# Registration for the seeded semester runs through August; teaching starts in September.
NOW = datetime(2025, 8, 20, 10, 0)
SEMESTER_DATES = {
    "registration_start_date": datetime(2025, 8, 1),
    "registration_end_date": datetime(2025, 8, 31, 23, 59),
    "start_date": datetime(2025, 9, 1),
    "end_date": datetime(2025, 12, 20),
    "withdrawal_deadline": datetime(2025, 10, 15),
}


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


@dataclass
class Catalog:
    """A small seeded university: two schools, three subjects, four sections.

    math_a (Mon p1) and physics_a (Mon p1) collide; math_b meets Tue p1;
    chemistry_a has a single seat.
    """

    school: School
    other_school: School
    room: Classroom
    semester: Semester
    admin: User
    teacher: User
    other_teacher: User
    student: User
    other_student: User
    math: Subject
    physics: Subject
    chemistry: Subject
    math_a: Course
    math_b: Course
    physics_a: Course
    chemistry_a: Course

    @staticmethod
    def actor(user: User) -> Actor:
        return Actor.from_user(user)


def seed_catalog(store: EntityStore, calendar: SemesterCalendar) -> Catalog:
    """Populate a store with the standard test catalog."""
    school = store.create_school("eng", "Engineering")
    other_school = store.create_school("sci", "Science")
    room = store.create_classroom(1, 2, 3, "regular", 40)
    semester = calendar.create_semester(
        name="Fall 2025",
        code="fall-2025",
        academic_year="2025-2026",
        semester_number=1,
        **SEMESTER_DATES,
    )
    admin = store.create_user("Ada", "Admin", "admin@uni.test", role="admin")
    teacher = store.create_user("Tom", "Teacher", "tom@uni.test", role="teacher")
    other_teacher = store.create_user("Tina", "Teacher", "tina@uni.test", role="teacher")
    student = store.create_user("Sam", "Student", "sam@uni.test", school_id=school.id)
    other_student = store.create_user("Sue", "Student", "sue@uni.test", school_id=school.id)

    math = store.create_subject("math101", "Calculus", 3, school_ids=[school.id])
    physics = store.create_subject("phys101", "Mechanics", 4, school_ids=[school.id])
    chemistry = store.create_subject("chem101", "Chemistry", 5, category="elective")

    def section(subject: Subject, code: str, day: int, period: int, teacher_id: str, seats: int = 30) -> Course:
        return store.create_course(
            subject_id=subject.id,
            semester_id=semester.id,
            class_code=code,
            max_students=seats,
            schedule=[SlotInput(day, period, room.id)],
            teacher_id=teacher_id,
        )

    return Catalog(
        school=school,
        other_school=other_school,
        room=room,
        semester=semester,
        admin=admin,
        teacher=teacher,
        other_teacher=other_teacher,
        student=student,
        other_student=other_student,
        math=math,
        physics=physics,
        chemistry=chemistry,
        math_a=section(math, "a", 2, 1, teacher.id),
        math_b=section(math, "b", 3, 1, teacher.id),
        physics_a=section(physics, "a", 2, 1, other_teacher.id),
        chemistry_a=section(chemistry, "a", 4, 2, teacher.id, seats=1),
    )


# Shared fixtures


@pytest.fixture
def clock() -> Mock:
    """A clock frozen at NOW; set return_value to move time."""
    return Mock(return_value=NOW)


@pytest.fixture
def store() -> Iterator[EntityStore]:
    """Create an in-memory EntityStore."""
    s = EntityStore(":memory:")
    yield s
    s.close()


@pytest.fixture
def calendar(store: EntityStore, clock: Mock) -> SemesterCalendar:
    return SemesterCalendar(store, clock)


@pytest.fixture
def ledger(store: EntityStore) -> CapacityLedger:
    return CapacityLedger(store)


@pytest.fixture
def machine(store: EntityStore, ledger: CapacityLedger, clock: Mock) -> RegistrationMachine:
    return RegistrationMachine(store, ledger, clock)


@pytest.fixture
def change_requests(store: EntityStore, clock: Mock) -> ChangeRequestService:
    return ChangeRequestService(store, clock)


@pytest.fixture
def catalog(store: EntityStore, calendar: SemesterCalendar) -> Catalog:
    """The standard seeded catalog in the in-memory store."""
    return seed_catalog(store, calendar)


@pytest.fixture
def seed() -> Callable[[EntityStore, SemesterCalendar], Catalog]:
    """The catalog seeding function, for stores created inside a test."""
    return seed_catalog
