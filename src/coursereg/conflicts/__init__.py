"""Conflict Detector - schedule collisions and duplicate-subject registrations."""

from coursereg.conflicts.detector import detect_conflicts, find_schedule_collisions
from coursereg.conflicts.exceptions import (
    ConflictError,
    DuplicateRegistrationError,
    ScheduleConflictError,
    SubjectAlreadyApprovedError,
)
from coursereg.conflicts.models import (
    CandidateCourse,
    EnrolledCourse,
    ScheduleCollision,
    ScheduleSlot,
    SwitchCandidate,
)

__all__ = [
    "CandidateCourse",
    "ConflictError",
    "DuplicateRegistrationError",
    "EnrolledCourse",
    "ScheduleCollision",
    "ScheduleConflictError",
    "ScheduleSlot",
    "SubjectAlreadyApprovedError",
    "SwitchCandidate",
    "detect_conflicts",
    "find_schedule_collisions",
]
