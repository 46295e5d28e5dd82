"""Exceptions for the Course Capacity Ledger."""


class CapacityError(Exception):
    """Base exception for seat and credit bookkeeping errors."""


class CourseFullError(CapacityError):
    """Every seat of the course is taken."""

    def __init__(self, course_id: str, max_students: int | None = None) -> None:
        self.course_id = course_id
        self.max_students = max_students
        detail = f" ({max_students} seats)" if max_students is not None else ""
        super().__init__(f"Course {course_id} is full{detail}")


class CreditLimitExceededError(CapacityError):
    """Charging the credits would take the student over their ceiling."""

    def __init__(self, student_id: str, credits: int, current_credits: int, max_credits: int) -> None:
        self.student_id = student_id
        self.credits = credits
        self.current_credits = current_credits
        self.max_credits = max_credits
        super().__init__(
            f"Cannot add {credits} credits: student has {current_credits} of {max_credits}"
        )
