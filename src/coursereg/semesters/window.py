"""Semester window evaluation - pure checks over a semester's dates."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import datetime
from typing import Protocol

from coursereg.entity_store.exceptions import ValidationError
from coursereg.entity_store.models import as_naive_utc

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

ACADEMIC_YEAR_PATTERN = re.compile(r"^\d{4}-\d{4}$")

SEMESTER_TYPES = {1: "Fall", 2: "Spring", 3: "Summer"}


class SemesterDates(Protocol):
    """Date fields the window checks read."""

    start_date: datetime
    end_date: datetime
    registration_start_date: datetime
    registration_end_date: datetime
    withdrawal_deadline: datetime
    is_active: bool


def is_registration_open(semester: SemesterDates, now: datetime) -> bool:
    """True while registration_start_date <= now <= registration_end_date."""
    now = as_naive_utc(now)
    return semester.registration_start_date <= now <= semester.registration_end_date


def is_in_session(semester: SemesterDates, now: datetime) -> bool:
    """True while the semester is active and start_date <= now <= end_date."""
    now = as_naive_utc(now)
    return semester.is_active and semester.start_date <= now <= semester.end_date


def is_withdrawal_allowed(semester: SemesterDates, now: datetime) -> bool:
    """True while the semester is active and the withdrawal deadline has not passed."""
    now = as_naive_utc(now)
    return semester.is_active and now <= semester.withdrawal_deadline


def derive_is_active(registration_start_date: datetime, end_date: datetime, now: datetime) -> bool:
    """A semester is active from the opening of registration until it ends."""
    return as_naive_utc(registration_start_date) <= as_naive_utc(now) <= as_naive_utc(end_date)


def semester_type(semester_number: int) -> str:
    """Name of the term for a semester number: 1 Fall, 2 Spring, 3 Summer."""
    return SEMESTER_TYPES.get(semester_number, "Unknown")


def validate_semester_dates(
    start_date: datetime,
    end_date: datetime,
    registration_start_date: datetime,
    registration_end_date: datetime,
    withdrawal_deadline: datetime,
    min_credits_per_student: int = 8,
    max_credits_per_student: int = 16,
) -> None:
    """Check the date ordering and credit bounds of a semester.

    Args:
        start_date: First teaching day
        end_date: Last teaching day
        registration_start_date: Opening of registration
        registration_end_date: Close of registration
        withdrawal_deadline: Last moment a student may drop
        min_credits_per_student: Lower credit bound
        max_credits_per_student: Upper credit bound

    Raises:
        ValidationError: If any check fails.
    """
    start = as_naive_utc(start_date)
    end = as_naive_utc(end_date)
    reg_start = as_naive_utc(registration_start_date)
    reg_end = as_naive_utc(registration_end_date)
    deadline = as_naive_utc(withdrawal_deadline)

    if end <= start:
        raise ValidationError("End date must be after start date")
    if reg_end <= reg_start:
        raise ValidationError("Registration end date must be after registration start date")
    if deadline > end:
        raise ValidationError("Withdrawal deadline must not be after the semester end date")
    if min_credits_per_student < 1 or max_credits_per_student < 1:
        raise ValidationError("Credits per student must be positive")
    if min_credits_per_student > max_credits_per_student:
        raise ValidationError("Minimum credits cannot exceed maximum credits")
    if reg_end > start:
        logger.warning("Registration ends after the semester starts (%s > %s)", reg_end, start)


def validate_academic_year(academic_year: str) -> str:
    """Normalize and check an academic year of the form 2024-2025."""
    value = academic_year.strip()
    if not ACADEMIC_YEAR_PATTERN.match(value):
        raise ValidationError("Academic year must be in format YYYY-YYYY (e.g. 2024-2025)")
    return value
