"""Semesters - registration windows and the current semester."""

from coursereg.semesters.calendar import SemesterCalendar
from coursereg.semesters.window import (
    Clock,
    derive_is_active,
    is_in_session,
    is_registration_open,
    is_withdrawal_allowed,
    semester_type,
    validate_academic_year,
    validate_semester_dates,
)

__all__ = [
    "Clock",
    "SemesterCalendar",
    "derive_is_active",
    "is_in_session",
    "is_registration_open",
    "is_withdrawal_allowed",
    "semester_type",
    "validate_academic_year",
    "validate_semester_dates",
]
