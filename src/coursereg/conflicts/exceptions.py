"""Exceptions for the Conflict Detector."""


class ConflictError(Exception):
    """Base exception for registration conflicts."""


class ScheduleConflictError(ConflictError):
    """The candidate course meets in a slot already taken by another registration."""

    def __init__(self, subject_code: str, day_of_week: int, period: int, registration_id: str) -> None:
        self.subject_code = subject_code
        self.day_of_week = day_of_week
        self.period = period
        self.registration_id = registration_id
        super().__init__(
            f"Schedule conflict with {subject_code} on day {day_of_week}, period {period}"
        )


class SubjectAlreadyApprovedError(ConflictError):
    """The student already holds an approved or completed registration for the subject."""

    def __init__(self, subject_code: str, registration_id: str) -> None:
        self.subject_code = subject_code
        self.registration_id = registration_id
        super().__init__(f"Subject {subject_code} is already approved for this student")


class DuplicateRegistrationError(ConflictError):
    """The student is already registered for this course section."""
