"""Data models for the Registration State Machine."""

from __future__ import annotations

from dataclasses import dataclass

from coursereg.entity_store.models import RegistrationStatus, Role, User
from coursereg.registration.exceptions import InvalidTransitionError

ALLOWED_TRANSITIONS: dict[RegistrationStatus, frozenset[RegistrationStatus]] = {
    RegistrationStatus.PENDING: frozenset(
        {RegistrationStatus.APPROVED, RegistrationStatus.REJECTED, RegistrationStatus.WITHDRAWN}
    ),
    RegistrationStatus.APPROVED: frozenset(
        {RegistrationStatus.COMPLETED, RegistrationStatus.WITHDRAWN}
    ),
    RegistrationStatus.REJECTED: frozenset(),
    RegistrationStatus.WITHDRAWN: frozenset(),
    RegistrationStatus.COMPLETED: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)


def check_transition(current: RegistrationStatus, target: RegistrationStatus) -> None:
    """Raise InvalidTransitionError unless current -> target is allowed."""
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransitionError(current.value, target.value)


@dataclass(frozen=True)
class Actor:
    """An authenticated caller."""

    user_id: str
    role: Role

    @classmethod
    def from_user(cls, user: User) -> Actor:
        return cls(user_id=user.id, role=user.user_role)

    @property
    def is_student(self) -> bool:
        return self.role == Role.STUDENT

    @property
    def is_teacher(self) -> bool:
        return self.role == Role.TEACHER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass
class StudentCredits:
    """A student's credit load in one semester.

    Attributes:
        student_id: The student.
        semester_id: The semester the sums cover.
        approved: Credits of approved registrations in the semester.
        completed: Credits of completed registrations in the semester.
        pending: Credits requested by pending registrations in the semester.
        current_credits: The student's global credit total.
        max_credits: The student's credit ceiling.
    """

    student_id: str
    semester_id: str
    approved: int
    completed: int
    pending: int
    current_credits: int
    max_credits: int

    @property
    def semester_total(self) -> int:
        return self.approved + self.completed
