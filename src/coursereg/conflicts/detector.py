"""Conflict Detector - schedule and duplicate-subject checks for a candidate course."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from coursereg.conflicts.exceptions import (
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
from coursereg.entity_store.models import RegistrationStatus

logger = logging.getLogger(__name__)

# Statuses that hold a place in the student's weekly timetable
SCHEDULE_HOLDING = frozenset({RegistrationStatus.PENDING, RegistrationStatus.APPROVED})

# Statuses that lock the subject against further registration
SUBJECT_LOCKING = frozenset({RegistrationStatus.APPROVED, RegistrationStatus.COMPLETED})


def find_schedule_collisions(
    existing: Iterable[EnrolledCourse],
    slots: Sequence[ScheduleSlot],
    exclude_subject_id: str | None = None,
    exclude_registration_id: str | None = None,
) -> list[ScheduleCollision]:
    """Every (registration, slot) pair where the given slots overlap a held timetable slot.

    Args:
        existing: The student's registrations in the semester
        slots: Slots to test
        exclude_subject_id: Skip registrations of this subject
        exclude_registration_id: Skip this registration (the one being replaced)

    Returns:
        Collisions in registration then slot order; empty when none.
    """
    wanted = {slot.key for slot in slots}
    collisions = []
    for enrolled in existing:
        if enrolled.status not in SCHEDULE_HOLDING:
            continue
        if enrolled.registration_id == exclude_registration_id:
            continue
        if exclude_subject_id is not None and enrolled.subject_id == exclude_subject_id:
            continue
        for slot in enrolled.slots:
            if slot.key in wanted:
                collisions.append(
                    ScheduleCollision(
                        registration_id=enrolled.registration_id,
                        subject_code=enrolled.subject_code,
                        day_of_week=slot.day_of_week,
                        period=slot.period,
                    )
                )
    return collisions


def detect_conflicts(
    existing: Sequence[EnrolledCourse],
    candidate: CandidateCourse,
    replacing_registration_id: str | None = None,
) -> SwitchCandidate | None:
    """Decide whether a student may take the candidate course.

    Subject checks run first, since a same-subject pending registration
    short-circuits with a switch offer. Schedule checks ignore the
    registration being replaced and registrations of the candidate's own
    subject.

    Args:
        existing: The student's registrations in the candidate's semester
        candidate: The course the student asks for
        replacing_registration_id: Registration being switched away from, if any

    Returns:
        None when the candidate is admissible, or a SwitchCandidate when the
        student holds a pending registration in another section of the subject.

    Raises:
        SubjectAlreadyApprovedError: The subject is approved or completed already.
        DuplicateRegistrationError: The student already has this exact section.
        ScheduleConflictError: A slot overlaps another registration's slot.
    """
    others = [e for e in existing if e.registration_id != replacing_registration_id]
    same_subject = [e for e in others if e.subject_id == candidate.subject_id]

    for enrolled in same_subject:
        if enrolled.status in SUBJECT_LOCKING:
            logger.info(
                "Subject %s already approved in registration %s",
                candidate.subject_code,
                enrolled.registration_id,
            )
            raise SubjectAlreadyApprovedError(candidate.subject_code, enrolled.registration_id)

    for enrolled in same_subject:
        if enrolled.course_id == candidate.course_id:
            raise DuplicateRegistrationError(
                f"Already registered for this course (registration {enrolled.registration_id})"
            )

    for enrolled in same_subject:
        if enrolled.status == RegistrationStatus.PENDING:
            return SwitchCandidate(
                existing_registration_id=enrolled.registration_id,
                existing_course_id=enrolled.course_id,
                candidate_course_id=candidate.course_id,
            )

    collisions = find_schedule_collisions(
        others,
        candidate.slots,
        exclude_subject_id=candidate.subject_id,
    )
    if collisions:
        first = collisions[0]
        logger.info(
            "Schedule conflict for course %s with %s (day %d, period %d)",
            candidate.course_id,
            first.subject_code,
            first.day_of_week,
            first.period,
        )
        raise ScheduleConflictError(
            first.subject_code, first.day_of_week, first.period, first.registration_id
        )
    return None
