"""Unit tests for registration status transitions and actors."""

import pytest

from coursereg.entity_store import RegistrationStatus, Role
from coursereg.registration import (
    ALLOWED_TRANSITIONS,
    Actor,
    InvalidTransitionError,
    StudentCredits,
    check_transition,
)

S = RegistrationStatus


@pytest.mark.unit
class TestCheckTransition:
    """Tests for check_transition."""

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (S.PENDING, S.APPROVED),
            (S.PENDING, S.REJECTED),
            (S.PENDING, S.WITHDRAWN),
            (S.APPROVED, S.COMPLETED),
            (S.APPROVED, S.WITHDRAWN),
        ],
    )
    def test_allowed(self, current: RegistrationStatus, target: RegistrationStatus) -> None:
        check_transition(current, target)

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (S.APPROVED, S.APPROVED),
            (S.APPROVED, S.REJECTED),
            (S.PENDING, S.COMPLETED),
            (S.REJECTED, S.APPROVED),
            (S.COMPLETED, S.WITHDRAWN),
        ],
    )
    def test_rejected(self, current: RegistrationStatus, target: RegistrationStatus) -> None:
        with pytest.raises(InvalidTransitionError) as exc_info:
            check_transition(current, target)
        assert exc_info.value.current == current.value
        assert exc_info.value.target == target.value

    def test_terminal_statuses_have_no_exits(self) -> None:
        for status in (S.REJECTED, S.WITHDRAWN, S.COMPLETED):
            assert ALLOWED_TRANSITIONS[status] == frozenset()


@pytest.mark.unit
class TestActor:
    """Tests for Actor role helpers."""

    def test_role_flags(self) -> None:
        student = Actor(user_id="u1", role=Role.STUDENT)
        admin = Actor(user_id="u2", role=Role.ADMIN)
        assert student.is_student and not student.is_admin and not student.is_teacher
        assert admin.is_admin and not admin.is_student

    def test_from_user(self, catalog) -> None:
        actor = Actor.from_user(catalog.teacher)
        assert actor == Actor(user_id=catalog.teacher.id, role=Role.TEACHER)


@pytest.mark.unit
class TestStudentCredits:
    """Tests for the StudentCredits summary."""

    def test_semester_total(self) -> None:
        credits = StudentCredits(
            student_id="s",
            semester_id="t",
            approved=6,
            completed=4,
            pending=3,
            current_credits=10,
            max_credits=24,
        )
        assert credits.semester_total == 10
