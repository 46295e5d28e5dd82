"""Unit tests for Entity Store models."""

from datetime import datetime, timedelta, timezone

import pytest

from coursereg.entity_store import (
    Classroom,
    Course,
    Registration,
    RegistrationStatus,
    Role,
    User,
)
from coursereg.entity_store.models import as_naive_utc, make_room_code


@pytest.mark.unit
class TestClassroomModel:
    """Tests for the Classroom model."""

    def test_room_code_derived_from_location(self) -> None:
        """Room code reads A{building}-{floor}0{room}."""
        classroom = Classroom(building=3, floor=2, room_number=5, room_type="regular", capacity=30)
        assert classroom.room_code == "A3-205"

    def test_make_room_code(self) -> None:
        assert make_room_code(8, 7, 6) == "A8-706"


@pytest.mark.unit
class TestCourseModel:
    """Tests for the Course model."""

    def test_new_course_has_no_students(self) -> None:
        course = Course(subject_id="s", semester_id="t", class_code="A", max_students=20)
        assert course.current_students == 0
        assert course.available_spots == 20
        assert not course.is_full()

    def test_full_when_seats_taken(self) -> None:
        course = Course(subject_id="s", semester_id="t", class_code="A", max_students=2)
        course.current_students = 2
        assert course.is_full()
        assert course.available_spots == 0

    def test_default_grading_policy(self) -> None:
        course = Course(subject_id="s", semester_id="t", class_code="A", max_students=2)
        assert (course.grading_attendance, course.grading_midterm, course.grading_final) == (10, 30, 60)


@pytest.mark.unit
class TestUserModel:
    """Tests for the User model."""

    def test_defaults(self) -> None:
        user = User(first_name="Sam", last_name="Student", email="sam@uni.test")
        assert user.user_role == Role.STUDENT
        assert user.current_credits == 0
        assert user.max_credits == 24
        assert user.gpa == 0.0
        assert user.is_active

    def test_full_name(self) -> None:
        user = User(first_name="Sam", last_name="Student", email="sam@uni.test")
        assert user.full_name == "Sam Student"


@pytest.mark.unit
class TestRegistrationModel:
    """Tests for the Registration model."""

    @pytest.fixture
    def registration(self) -> Registration:
        return Registration(
            student_id="u", course_id="c", semester_id="s", registration_date=datetime(2025, 8, 1)
        )

    def test_new_registration_is_pending(self, registration: Registration) -> None:
        assert registration.registration_status == RegistrationStatus.PENDING
        assert registration.rejection_requested is False
        assert registration.is_waitlisted is False
        assert registration.priority == 0

    def test_attendance_percentage(self, registration: Registration) -> None:
        assert registration.attendance_percentage == 0
        registration.total_classes = 30
        registration.attended_classes = 20
        assert registration.attendance_percentage == 67

    def test_is_passing(self, registration: Registration) -> None:
        registration.grade_points = None
        assert registration.is_passing is None
        registration.grade_points = 2.0
        assert registration.is_passing is True
        registration.grade_points = 1.7
        assert registration.is_passing is False


@pytest.mark.unit
class TestTimeHelpers:
    """Tests for datetime normalization."""

    def test_naive_values_pass_through(self) -> None:
        value = datetime(2025, 1, 1, 12, 0)
        assert as_naive_utc(value) is value

    def test_aware_values_converted_to_utc(self) -> None:
        value = datetime(2025, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        assert as_naive_utc(value) == datetime(2025, 1, 1, 12, 0)
