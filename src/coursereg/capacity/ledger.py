"""CapacityLedger - the only write path for course seat counts and student credits."""

from __future__ import annotations

import logging

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from coursereg.capacity.exceptions import CourseFullError, CreditLimitExceededError
from coursereg.capacity.models import CascadeResult, CourseDrift, LedgerReport, StudentDrift
from coursereg.entity_store import (
    Course,
    EntityStore,
    Registration,
    RegistrationStatus,
    Role,
    Subject,
    User,
    get_or_raise,
)

logger = logging.getLogger(__name__)

CREDIT_HOLDING = (RegistrationStatus.APPROVED.value, RegistrationStatus.COMPLETED.value)


class CapacityLedger:
    """Seat and credit bookkeeping.

    Course.current_students and User.current_credits are written only here.
    Every check-and-adjust is a single conditional UPDATE, so two concurrent
    writers can never both pass the check. Methods taking a session run
    inside the caller's transaction and commit or roll back with it.
    """

    def __init__(self, store: EntityStore) -> None:
        self._store = store

    # --- Seats ---

    def reserve_seat(self, session: Session, course_id: str) -> None:
        """Take one seat, only if one is free.

        Raises:
            CourseNotFoundError: If the course doesn't exist
            CourseFullError: If every seat is taken
        """
        result = session.execute(
            update(Course)
            .where(Course.id == course_id, Course.current_students < Course.max_students)
            .values(current_students=Course.current_students + 1)
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount == 0:
            course = get_or_raise(session, Course, course_id)
            logger.info("Course %s is full (%d seats)", course_id, course.max_students)
            raise CourseFullError(course_id, course.max_students)

    def release_seat(self, session: Session, course_id: str) -> None:
        """Give one seat back; the count never drops below zero."""
        result = session.execute(
            update(Course)
            .where(Course.id == course_id, Course.current_students > 0)
            .values(current_students=Course.current_students - 1)
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount == 0:
            logger.warning("Seat count of course %s already zero on release", course_id)

    def recompute(self, session: Session, course_id: str) -> int:
        """Set the course's seat count to its number of approved registrations.

        Returns:
            The derived seat count
        """
        session.flush()
        derived = session.execute(
            select(func.count(Registration.id)).where(
                Registration.course_id == course_id,
                Registration.status == RegistrationStatus.APPROVED.value,
            )
        ).scalar_one()
        course = get_or_raise(session, Course, course_id)
        if course.current_students != derived:
            logger.warning(
                "Seat count drift on course %s: stored %d, derived %d",
                course_id,
                course.current_students,
                derived,
            )
            course.current_students = derived
        return derived

    def recompute_course(self, course_id: str) -> int:
        """Recompute one course's seat count in its own transaction."""
        with self._store.transaction() as session:
            return self.recompute(session, course_id)

    # --- Credits ---

    def charge_credits(self, session: Session, student_id: str, credits: int) -> None:
        """Add credits to a student's load, only if they stay within the ceiling.

        Raises:
            UserNotFoundError: If the student doesn't exist
            CreditLimitExceededError: If the ceiling would be exceeded
        """
        result = session.execute(
            update(User)
            .where(User.id == student_id, User.current_credits + credits <= User.max_credits)
            .values(current_credits=User.current_credits + credits)
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount == 0:
            student = get_or_raise(session, User, student_id)
            logger.info(
                "Credit limit for student %s: %d + %d > %d",
                student_id,
                student.current_credits,
                credits,
                student.max_credits,
            )
            raise CreditLimitExceededError(
                student_id, credits, student.current_credits, student.max_credits
            )

    def refund_credits(self, session: Session, student_id: str, credits: int) -> None:
        """Take credits off a student's load; the total never drops below zero."""
        result = session.execute(
            update(User)
            .where(User.id == student_id, User.current_credits >= credits)
            .values(current_credits=User.current_credits - credits)
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount == 0:
            logger.warning("Credit total of student %s below %d on refund; clamping", student_id, credits)
            session.execute(
                update(User)
                .where(User.id == student_id)
                .values(current_credits=0)
                .execution_options(synchronize_session="fetch")
            )

    # --- Course deletion ---

    def cascade_delete_course(self, session: Session, course_id: str) -> CascadeResult:
        """Delete a course after undoing the credit effect of its registrations.

        Credits held by approved or completed registrations are refunded, all
        of the course's registrations are deleted, then the course itself.

        Raises:
            CourseNotFoundError: If the course doesn't exist
        """
        course = get_or_raise(session, Course, course_id)
        credits = course.subject.credits
        result = CascadeResult(course_id=course_id)

        registrations = session.execute(
            select(Registration.id, Registration.student_id, Registration.status).where(
                Registration.course_id == course_id
            )
        ).all()
        for registration_id, student_id, status in registrations:
            if status in CREDIT_HOLDING:
                self.refund_credits(session, student_id, credits)
                result.refunded_credits[student_id] = (
                    result.refunded_credits.get(student_id, 0) + credits
                )
            result.deleted_registrations.append(registration_id)

        session.execute(
            delete(Registration)
            .where(Registration.course_id == course_id)
            .execution_options(synchronize_session=False)
        )
        session.delete(course)
        session.flush()

        logger.info(
            "Deleted course %s with %d registrations (%d students refunded)",
            course_id,
            len(result.deleted_registrations),
            len(result.refunded_credits),
        )
        return result

    # --- Audit ---

    @staticmethod
    def _collect_drift(session: Session) -> LedgerReport:
        report = LedgerReport()

        approved_counts = dict(
            session.execute(
                select(Registration.course_id, func.count(Registration.id))
                .where(Registration.status == RegistrationStatus.APPROVED.value)
                .group_by(Registration.course_id)
            ).all()
        )
        for course_id, stored in session.execute(select(Course.id, Course.current_students)).all():
            derived = approved_counts.get(course_id, 0)
            if stored != derived:
                report.courses.append(CourseDrift(course_id=course_id, stored=stored, derived=derived))

        credit_sums = dict(
            session.execute(
                select(Registration.student_id, func.sum(Subject.credits))
                .join(Course, Registration.course_id == Course.id)
                .join(Subject, Course.subject_id == Subject.id)
                .where(Registration.status.in_(CREDIT_HOLDING))
                .group_by(Registration.student_id)
            ).all()
        )
        students = session.execute(
            select(User.id, User.current_credits).where(
                (User.role == Role.STUDENT.value) | (User.current_credits != 0)
            )
        ).all()
        for student_id, stored in students:
            derived = int(credit_sums.get(student_id) or 0)
            if stored != derived:
                report.students.append(
                    StudentDrift(student_id=student_id, stored=stored, derived=derived)
                )
        return report

    def audit(self) -> LedgerReport:
        """Compare stored counters with the counts derived from registrations.

        Returns:
            Every course and student whose stored value has drifted
        """
        with self._store.read_session() as session:
            report = self._collect_drift(session)
        if not report.is_consistent:
            logger.warning(
                "Ledger audit found %d course and %d student drifts",
                len(report.courses),
                len(report.students),
            )
        return report

    def repair(self) -> LedgerReport:
        """Rewrite drifted counters from the derived counts.

        Returns:
            The drift that was corrected
        """
        with self._store.transaction() as session:
            report = self._collect_drift(session)
            for drift in report.courses:
                course = get_or_raise(session, Course, drift.course_id)
                if drift.derived > course.max_students:
                    logger.warning(
                        "Course %s has %d approved students over %d seats; raising capacity",
                        drift.course_id,
                        drift.derived,
                        course.max_students,
                    )
                    course.max_students = drift.derived
                course.current_students = drift.derived
            for student_drift in report.students:
                student = get_or_raise(session, User, student_drift.student_id)
                if student_drift.derived > student.max_credits:
                    logger.warning(
                        "Student %s holds %d credits over a ceiling of %d",
                        student_drift.student_id,
                        student_drift.derived,
                        student.max_credits,
                    )
                student.current_credits = student_drift.derived
            report.repaired = True

        logger.info(
            "Ledger repair rewrote %d courses and %d students",
            len(report.courses),
            len(report.students),
        )
        return report
