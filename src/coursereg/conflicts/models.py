"""Snapshots the Conflict Detector works on."""

from __future__ import annotations

from dataclasses import dataclass

from coursereg.entity_store.models import Course, Registration, RegistrationStatus


@dataclass(frozen=True)
class ScheduleSlot:
    """A weekly meeting: day_of_week 2 (Monday) to 8 (Sunday), period 1 to 4."""

    day_of_week: int
    period: int
    classroom_id: str | None = None

    @property
    def key(self) -> tuple[int, int]:
        return (self.day_of_week, self.period)


@dataclass(frozen=True)
class EnrolledCourse:
    """One of the student's registrations in the semester, with its course's schedule.

    Attributes:
        registration_id: The registration's unique ID.
        course_id: Section the registration is for.
        subject_id: Subject the section teaches.
        subject_code: Subject code, used in conflict messages.
        status: Registration status.
        slots: The section's weekly slots.
    """

    registration_id: str
    course_id: str
    subject_id: str
    subject_code: str
    status: RegistrationStatus
    slots: tuple[ScheduleSlot, ...]

    @classmethod
    def from_registration(cls, registration: Registration) -> EnrolledCourse:
        course = registration.course
        return cls(
            registration_id=registration.id,
            course_id=course.id,
            subject_id=course.subject_id,
            subject_code=course.subject.subject_code,
            status=registration.registration_status,
            slots=tuple(
                ScheduleSlot(slot.day_of_week, slot.period, slot.classroom_id)
                for slot in course.schedule
            ),
        )


@dataclass(frozen=True)
class CandidateCourse:
    """The course section a student wants to register for."""

    course_id: str
    subject_id: str
    subject_code: str
    slots: tuple[ScheduleSlot, ...]

    @classmethod
    def from_course(cls, course: Course) -> CandidateCourse:
        return cls(
            course_id=course.id,
            subject_id=course.subject_id,
            subject_code=course.subject.subject_code,
            slots=tuple(
                ScheduleSlot(slot.day_of_week, slot.period, slot.classroom_id)
                for slot in course.schedule
            ),
        )


@dataclass(frozen=True)
class SwitchCandidate:
    """Not an error: the student holds a pending registration in another section
    of the same subject and may switch to the candidate instead.

    Attributes:
        existing_registration_id: The pending registration that would be replaced.
        existing_course_id: Section of the existing registration.
        candidate_course_id: Section the student asked for.
    """

    existing_registration_id: str
    existing_course_id: str
    candidate_course_id: str


@dataclass(frozen=True)
class ScheduleCollision:
    """A slot of the candidate that overlaps a slot of an existing registration."""

    registration_id: str
    subject_code: str
    day_of_week: int
    period: int
