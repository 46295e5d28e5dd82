"""RegistrationMachine - registration lifecycle with seat and credit bookkeeping."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from coursereg.capacity import (
    CapacityLedger,
    CascadeResult,
    CourseFullError,
    CreditLimitExceededError,
)
from coursereg.conflicts import (
    CandidateCourse,
    DuplicateRegistrationError,
    EnrolledCourse,
    SwitchCandidate,
    detect_conflicts,
)
from coursereg.entity_store import (
    AlreadyExistsError,
    ConcurrencyConflictError,
    Course,
    EntityStore,
    Registration,
    RegistrationStatus,
    Semester,
    Subject,
    User,
    ValidationError,
    get_or_raise,
    record_activity,
)
from coursereg.entity_store.models import as_naive_utc, utcnow
from coursereg.registration.exceptions import (
    CourseInactiveError,
    ForbiddenError,
    InvalidTransitionError,
    RegistrationClosedError,
    RejectionPendingError,
    WithdrawalClosedError,
)
from coursereg.registration.grading import (
    LETTER_GRADE_POINTS,
    GradingPolicy,
    letter_to_points,
    score_to_grade,
    weighted_score,
)
from coursereg.registration.models import Actor, StudentCredits, check_transition
from coursereg.semesters import Clock, is_registration_open, is_withdrawal_allowed

logger = logging.getLogger(__name__)


class RegistrationMachine:
    """Drives registrations through their lifecycle.

    pending -> approved | rejected | withdrawn; approved -> completed | withdrawn.

    Every operation is one transaction: the status change, the seat and
    credit deltas, row inserts/deletes and the activity log entry commit
    together or not at all. Seats and credits change only on approval and
    are given back on withdrawal, switch or course deletion.
    """

    def __init__(
        self,
        store: EntityStore,
        ledger: CapacityLedger,
        clock: Clock = utcnow,
    ) -> None:
        """Initialize the RegistrationMachine.

        Args:
            store: EntityStore used for all reads and transactions.
            ledger: CapacityLedger, the only writer of seat and credit counters.
            clock: Returns the current time; injectable for tests.
        """
        self._store = store
        self._ledger = ledger
        self._clock = clock

    def _now(self) -> datetime:
        return as_naive_utc(self._clock())

    # --- Helpers ---

    @staticmethod
    def _require_course_staff(actor: Actor, course: Course) -> None:
        if actor.is_admin:
            return
        if actor.is_teacher and course.teacher_id == actor.user_id:
            return
        raise ForbiddenError("Only the course's teacher or an admin may do this")

    @staticmethod
    def _require_owner_or_admin(actor: Actor, registration: Registration) -> None:
        if actor.is_admin:
            return
        if actor.is_student and registration.student_id == actor.user_id:
            return
        raise ForbiddenError("Not authorized for this registration")

    @staticmethod
    def _enrolled(session: Session, student_id: str, semester_id: str) -> list[EnrolledCourse]:
        registrations = session.execute(
            select(Registration).where(
                Registration.student_id == student_id,
                Registration.semester_id == semester_id,
            )
        ).scalars().unique()
        return [EnrolledCourse.from_registration(r) for r in registrations]

    @staticmethod
    def _swap_status(
        session: Session,
        registration: Registration,
        expected: RegistrationStatus,
        target: RegistrationStatus,
    ) -> None:
        """Compare-and-swap the status column; a concurrent writer makes it fail."""
        result = session.execute(
            update(Registration)
            .where(Registration.id == registration.id, Registration.status == expected.value)
            .values(status=target.value)
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount == 0:
            raise ConcurrencyConflictError(
                f"Registration {registration.id} changed concurrently; retry the operation"
            )

    @staticmethod
    def _clear_rejection_request(registration: Registration) -> None:
        registration.rejection_requested = False
        registration.rejection_request_reason = None
        registration.rejection_requested_by = None
        registration.rejection_requested_at = None

    # --- Create / switch ---

    def register(self, actor: Actor, course_id: str, semester_id: str) -> Registration | SwitchCandidate:
        """Create a pending registration for the calling student.

        Checks run in order and the first failure wins: course exists and is
        active, subject exists, registration window open, no conflicts,
        course not full, credit ceiling. No seats or credits change until
        approval.

        Args:
            actor: The calling student.
            course_id: Section to register for.
            semester_id: Semester the section belongs to.

        Returns:
            The new pending Registration, or a SwitchCandidate when the
            student already holds a pending registration in another section
            of the same subject (nothing is written in that case).

        Raises:
            ForbiddenError: Caller is not a student.
            CourseNotFoundError / SubjectNotFoundError / SemesterNotFoundError
            CourseInactiveError: Course is not open.
            ValidationError: Course belongs to another semester.
            RegistrationClosedError: Registration window is closed.
            SubjectAlreadyApprovedError / DuplicateRegistrationError / ScheduleConflictError
            CourseFullError: No free seat.
            CreditLimitExceededError: Student would exceed their ceiling.
        """
        if not actor.is_student:
            raise ForbiddenError("Only students can register for courses")
        now = self._now()

        try:
            with self._store.transaction() as session:
                student = get_or_raise(session, User, actor.user_id)
                course = get_or_raise(session, Course, course_id)
                if not course.is_active:
                    raise CourseInactiveError(f"Course {course_id} is not open for registration")
                subject = get_or_raise(session, Subject, course.subject_id)
                semester = get_or_raise(session, Semester, semester_id)
                if course.semester_id != semester_id:
                    raise ValidationError(f"Course {course_id} does not belong to semester {semester_id}")
                if not is_registration_open(semester, now):
                    raise RegistrationClosedError(f"Registration for {semester.code} is closed")

                existing = self._enrolled(session, student.id, semester_id)
                switch = detect_conflicts(existing, CandidateCourse.from_course(course))
                if switch is not None:
                    logger.info(
                        "Student %s offered switch from registration %s to course %s",
                        student.id,
                        switch.existing_registration_id,
                        course_id,
                    )
                    return switch

                if course.is_full():
                    raise CourseFullError(course_id, course.max_students)
                if student.current_credits + subject.credits > student.max_credits:
                    raise CreditLimitExceededError(
                        student.id, subject.credits, student.current_credits, student.max_credits
                    )

                registration = Registration(
                    student_id=student.id,
                    course_id=course_id,
                    semester_id=semester_id,
                    registration_date=now,
                )
                registration.course = course
                session.add(registration)
                session.flush()
                record_activity(
                    session,
                    "registration.create",
                    user_id=actor.user_id,
                    target_type="registration",
                    target_id=registration.id,
                    details={"course_id": course_id, "semester_id": semester_id},
                )
        except AlreadyExistsError as e:
            raise DuplicateRegistrationError("Already registered for this course") from e

        logger.info(
            "Registration %s created: student %s -> course %s",
            registration.id,
            student.id,
            course_id,
        )
        return registration

    def switch(self, actor: Actor, registration_id: str, new_course_id: str) -> Registration:
        """Replace a registration with a pending one in another section of the same subject.

        An approved registration releases its seat and credits first. The old
        row is deleted and a new pending row inserted; the new one touches no
        counters until its own approval.

        Raises:
            ForbiddenError: Caller neither owns the registration nor is admin.
            InvalidTransitionError: Old registration is not pending or approved.
            ValidationError: New course is in another semester or subject.
            CourseInactiveError / RegistrationClosedError / CourseFullError
            DuplicateRegistrationError / ScheduleConflictError
        """
        now = self._now()
        try:
            with self._store.transaction() as session:
                old = get_or_raise(session, Registration, registration_id)
                self._require_owner_or_admin(actor, old)
                old_status = old.registration_status
                if old_status not in (RegistrationStatus.PENDING, RegistrationStatus.APPROVED):
                    raise InvalidTransitionError(
                        old_status.value,
                        RegistrationStatus.WITHDRAWN.value,
                        f"Cannot switch a {old_status.value} registration",
                    )
                old_course = old.course
                new_course = get_or_raise(session, Course, new_course_id)
                if new_course.id == old_course.id:
                    raise DuplicateRegistrationError("Already registered for this course")
                if not new_course.is_active:
                    raise CourseInactiveError(f"Course {new_course_id} is not open for registration")
                if new_course.semester_id != old.semester_id:
                    raise ValidationError("Can only switch to a course in the same semester")
                if new_course.subject_id != old_course.subject_id:
                    raise ValidationError("Can only switch to another section of the same subject")
                semester = get_or_raise(session, Semester, old.semester_id)
                if not is_registration_open(semester, now):
                    raise RegistrationClosedError(f"Registration for {semester.code} is closed")

                existing = self._enrolled(session, old.student_id, old.semester_id)
                other = detect_conflicts(
                    existing,
                    CandidateCourse.from_course(new_course),
                    replacing_registration_id=old.id,
                )
                if other is not None:
                    raise DuplicateRegistrationError(
                        f"Another pending registration ({other.existing_registration_id}) "
                        "exists for this subject"
                    )
                if new_course.is_full():
                    raise CourseFullError(new_course_id, new_course.max_students)

                if old_status == RegistrationStatus.APPROVED:
                    self._ledger.release_seat(session, old_course.id)
                    self._ledger.refund_credits(session, old.student_id, old_course.subject.credits)

                student_id = old.student_id
                semester_id = old.semester_id
                priority = old.priority
                session.delete(old)
                session.flush()

                replacement = Registration(
                    student_id=student_id,
                    course_id=new_course_id,
                    semester_id=semester_id,
                    registration_date=now,
                    priority=priority,
                )
                replacement.course = new_course
                session.add(replacement)
                session.flush()
                if old_status == RegistrationStatus.APPROVED:
                    self._ledger.recompute(session, old_course.id)

                record_activity(
                    session,
                    "registration.switch",
                    user_id=actor.user_id,
                    target_type="registration",
                    target_id=replacement.id,
                    details={
                        "replaced_registration_id": registration_id,
                        "from_course_id": old_course.id,
                        "to_course_id": new_course_id,
                        "previous_status": old_status.value,
                    },
                )
        except AlreadyExistsError as e:
            raise DuplicateRegistrationError("Already registered for this course") from e

        logger.info(
            "Registration %s switched to %s (course %s -> %s)",
            registration_id,
            replacement.id,
            old_course.id,
            new_course_id,
        )
        return replacement

    # --- Review ---

    def approve(self, actor: Actor, registration_id: str) -> Registration:
        """Approve a pending registration, taking a seat and charging credits.

        A staged teacher rejection blocks approval by teachers; an admin may
        still approve, which clears the staged request.

        Raises:
            ForbiddenError: Caller is not the course's teacher or an admin.
            InvalidTransitionError: Registration is not pending.
            RejectionPendingError: A teacher approves over a staged rejection.
            CourseFullError: No free seat.
            CreditLimitExceededError: Student would exceed their ceiling.
            ConcurrencyConflictError: Another writer changed the registration.
        """
        now = self._now()
        with self._store.transaction() as session:
            registration = get_or_raise(session, Registration, registration_id)
            course = registration.course
            self._require_course_staff(actor, course)
            check_transition(registration.registration_status, RegistrationStatus.APPROVED)
            if registration.rejection_requested and not actor.is_admin:
                raise RejectionPendingError("A rejection request awaits admin review")

            self._swap_status(
                session, registration, RegistrationStatus.PENDING, RegistrationStatus.APPROVED
            )
            self._ledger.reserve_seat(session, course.id)
            self._ledger.charge_credits(session, registration.student_id, course.subject.credits)

            registration.approval_date = now
            registration.approved_by = actor.user_id
            registration.is_waitlisted = False
            registration.waitlist_position = None
            self._clear_rejection_request(registration)
            self._ledger.recompute(session, course.id)

            record_activity(
                session,
                "registration.approve",
                user_id=actor.user_id,
                target_type="registration",
                target_id=registration_id,
                details={"course_id": course.id, "credits": course.subject.credits},
            )
            session.flush()
            session.refresh(registration)

        logger.info("Registration %s approved by %s", registration_id, actor.user_id)
        return registration

    def reject(self, actor: Actor, registration_id: str, reason: str) -> Registration:
        """Reject a pending registration.

        A teacher's rejection is staged for admin review and leaves the status
        pending. An admin's rejection is final. No seat or credit changes,
        since a pending registration holds none.

        Raises:
            ValidationError: Reason is empty.
            ForbiddenError: Caller is not the course's teacher or an admin.
            InvalidTransitionError: Registration is not pending.
            RejectionPendingError: A teacher stages a second rejection.
        """
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("Rejection reason is required")
        now = self._now()

        with self._store.transaction() as session:
            registration = get_or_raise(session, Registration, registration_id)
            self._require_course_staff(actor, registration.course)
            check_transition(registration.registration_status, RegistrationStatus.REJECTED)

            if not actor.is_admin:
                if registration.rejection_requested:
                    raise RejectionPendingError("A rejection request already awaits admin review")
                registration.rejection_requested = True
                registration.rejection_request_reason = reason
                registration.rejection_requested_by = actor.user_id
                registration.rejection_requested_at = now
                action = "registration.rejection_requested"
            else:
                self._swap_status(
                    session, registration, RegistrationStatus.PENDING, RegistrationStatus.REJECTED
                )
                registration.rejection_reason = reason
                registration.approved_by = actor.user_id
                registration.approval_date = now
                registration.rejection_requested = False
                registration.is_waitlisted = False
                registration.waitlist_position = None
                action = "registration.reject"

            record_activity(
                session,
                action,
                user_id=actor.user_id,
                target_type="registration",
                target_id=registration_id,
                details={"reason": reason},
            )

        logger.info("Registration %s: %s by %s", registration_id, action, actor.user_id)
        return registration

    def withdraw(self, actor: Actor, registration_id: str) -> Registration:
        """Drop a pending or approved registration.

        The row is deleted. An approved registration gives back its seat and
        credits first. The activity log keeps the record of the drop.

        Returns:
            The deleted registration, detached, with status withdrawn.

        Raises:
            ForbiddenError: Students may only drop their own registrations.
            WithdrawalClosedError: Student drops after the withdrawal deadline.
            InvalidTransitionError: Registration is not pending or approved.
        """
        now = self._now()
        with self._store.transaction() as session:
            registration = get_or_raise(session, Registration, registration_id)
            self._require_owner_or_admin(actor, registration)
            if actor.is_student:
                semester = get_or_raise(session, Semester, registration.semester_id)
                if not is_withdrawal_allowed(semester, now):
                    raise WithdrawalClosedError(f"Withdrawal deadline for {semester.code} has passed")

            previous = registration.registration_status
            check_transition(previous, RegistrationStatus.WITHDRAWN)
            course = registration.course
            credits = course.subject.credits

            if previous == RegistrationStatus.APPROVED:
                self._ledger.release_seat(session, course.id)
                self._ledger.refund_credits(session, registration.student_id, credits)

            record_activity(
                session,
                "registration.withdraw",
                user_id=actor.user_id,
                target_type="registration",
                target_id=registration_id,
                details={
                    "student_id": registration.student_id,
                    "course_id": course.id,
                    "semester_id": registration.semester_id,
                    "previous_status": previous.value,
                    "credits": credits if previous == RegistrationStatus.APPROVED else 0,
                },
            )
            session.delete(registration)
            session.flush()
            if previous == RegistrationStatus.APPROVED:
                self._ledger.recompute(session, course.id)

        registration.status = RegistrationStatus.WITHDRAWN.value
        logger.info(
            "Registration %s withdrawn (was %s) by %s", registration_id, previous.value, actor.user_id
        )
        return registration

    # --- Grading and bookkeeping ---

    def grade(
        self,
        actor: Actor,
        registration_id: str,
        attendance: int | None = None,
        midterm: int | None = None,
        final: int | None = None,
        final_grade: str | None = None,
    ) -> Registration:
        """Record grade components; only provided values change.

        Once all three numeric components are present, the course's grading
        weights give a weighted score mapped to points and a letter; a letter
        sent alongside is ignored. Otherwise a letter grade sets the points
        from the letter table. An approved registration becomes completed as
        soon as it has grade points.

        Raises:
            ValidationError: A component is outside 0-100, the letter is
                unknown, or I/W is sent for a completed registration.
            ForbiddenError: Caller is not the course's teacher or an admin.
            InvalidTransitionError: Registration is not approved or completed.
        """
        for name, value in (("attendance", attendance), ("midterm", midterm), ("final", final)):
            if value is not None and not 0 <= value <= 100:
                raise ValidationError(f"{name} must be between 0 and 100")
        if final_grade is not None and final_grade not in LETTER_GRADE_POINTS:
            raise ValidationError(f"Unknown letter grade '{final_grade}'")

        with self._store.transaction() as session:
            registration = get_or_raise(session, Registration, registration_id)
            course = registration.course
            self._require_course_staff(actor, course)
            status = registration.registration_status
            if status not in (RegistrationStatus.APPROVED, RegistrationStatus.COMPLETED):
                raise InvalidTransitionError(
                    status.value,
                    RegistrationStatus.COMPLETED.value,
                    f"Cannot grade a {status.value} registration",
                )

            if attendance is not None:
                registration.grade_attendance = attendance
            if midterm is not None:
                registration.grade_midterm = midterm
            if final is not None:
                registration.grade_final = final

            components = (
                registration.grade_attendance,
                registration.grade_midterm,
                registration.grade_final,
            )
            if all(c is not None for c in components):
                # Letter follows the weighted score, whatever letter was sent
                score = weighted_score(GradingPolicy.from_course(course), *components)
                registration.grade_points, registration.grade_letter = score_to_grade(score)
            elif final_grade is not None:
                points = letter_to_points(final_grade)
                if points is None and status == RegistrationStatus.COMPLETED:
                    raise ValidationError(
                        f"Cannot record '{final_grade}' on a completed registration"
                    )
                registration.grade_letter = final_grade
                registration.grade_points = points

            if status == RegistrationStatus.APPROVED and registration.grade_points is not None:
                check_transition(status, RegistrationStatus.COMPLETED)
                self._swap_status(
                    session, registration, RegistrationStatus.APPROVED, RegistrationStatus.COMPLETED
                )
                # Seats count approved registrations only; credits stay charged
                self._ledger.release_seat(session, course.id)
                self._ledger.recompute(session, course.id)

            record_activity(
                session,
                "registration.grade",
                user_id=actor.user_id,
                target_type="registration",
                target_id=registration_id,
                details={
                    "attendance": attendance,
                    "midterm": midterm,
                    "final": final,
                    "final_grade": final_grade,
                    "grade_points": registration.grade_points,
                },
            )
            session.flush()
            session.refresh(registration)

        logger.info(
            "Registration %s graded by %s (points=%s, status=%s)",
            registration_id,
            actor.user_id,
            registration.grade_points,
            registration.status,
        )
        return registration

    def record_attendance(self, actor: Actor, registration_id: str, total: int, attended: int) -> Registration:
        """Set attendance counters of an approved or completed registration.

        Raises:
            ValidationError: Counts are negative, attended exceeds total, or
                the registration is not approved or completed.
            ForbiddenError: Caller is not the course's teacher or an admin.
        """
        if total < 0 or attended < 0:
            raise ValidationError("Attendance counts must not be negative")
        if attended > total:
            raise ValidationError("Attended classes cannot exceed total classes")

        with self._store.transaction() as session:
            registration = get_or_raise(session, Registration, registration_id)
            self._require_course_staff(actor, registration.course)
            if registration.registration_status not in (
                RegistrationStatus.APPROVED,
                RegistrationStatus.COMPLETED,
            ):
                raise ValidationError("Attendance applies to approved registrations only")
            registration.total_classes = total
            registration.attended_classes = attended
            record_activity(
                session,
                "registration.attendance",
                user_id=actor.user_id,
                target_type="registration",
                target_id=registration_id,
                details={"total": total, "attended": attended},
            )
        return registration

    def set_priority(self, actor: Actor, registration_id: str, priority: int) -> Registration:
        """Set the review priority (0-10) of a registration."""
        if not 0 <= priority <= 10:
            raise ValidationError("Priority must be between 0 and 10")
        with self._store.transaction() as session:
            registration = get_or_raise(session, Registration, registration_id)
            self._require_course_staff(actor, registration.course)
            registration.priority = priority
            record_activity(
                session,
                "registration.priority",
                user_id=actor.user_id,
                target_type="registration",
                target_id=registration_id,
                details={"priority": priority},
            )
        return registration

    def waitlist(self, actor: Actor, registration_id: str, position: int) -> Registration:
        """Place a pending registration on the course's waitlist.

        The waitlist is an ordering for reviewers only; nothing advances
        automatically. Approval clears it.

        Raises:
            ValidationError: Position below 1.
            ForbiddenError: Caller is not the course's teacher or an admin.
            InvalidTransitionError: Registration is not pending.
        """
        if position < 1:
            raise ValidationError("Waitlist position must be at least 1")
        with self._store.transaction() as session:
            registration = get_or_raise(session, Registration, registration_id)
            self._require_course_staff(actor, registration.course)
            status = registration.registration_status
            if status != RegistrationStatus.PENDING:
                raise InvalidTransitionError(
                    status.value,
                    RegistrationStatus.PENDING.value,
                    "Only pending registrations can be waitlisted",
                )
            registration.is_waitlisted = True
            registration.waitlist_position = position
            record_activity(
                session,
                "registration.waitlist",
                user_id=actor.user_id,
                target_type="registration",
                target_id=registration_id,
                details={"position": position},
            )
        return registration

    def delete_course(self, actor: Actor, course_id: str) -> CascadeResult:
        """Delete a course with its registrations, refunding held credits.

        Raises:
            ForbiddenError: Caller is not an admin.
            CourseNotFoundError: If the course doesn't exist.
        """
        if not actor.is_admin:
            raise ForbiddenError("Only admins can delete courses")
        with self._store.transaction() as session:
            result = self._ledger.cascade_delete_course(session, course_id)
            record_activity(
                session,
                "course.delete",
                user_id=actor.user_id,
                target_type="course",
                target_id=course_id,
                details={
                    "deleted_registrations": len(result.deleted_registrations),
                    "refunded_students": len(result.refunded_credits),
                },
            )
        return result

    # --- Queries ---

    def get_registration(self, actor: Actor, registration_id: str) -> Registration:
        """Get one registration the caller may see.

        Raises:
            RegistrationNotFoundError: If the registration doesn't exist.
            ForbiddenError: Students see their own; teachers see their courses'.
        """
        registration = self._store.get_registration(registration_id)
        if actor.is_student and registration.student_id != actor.user_id:
            raise ForbiddenError("Not authorized for this registration")
        if actor.is_teacher and registration.course.teacher_id != actor.user_id:
            raise ForbiddenError("Not authorized for this registration")
        return registration

    def list_registrations(
        self,
        actor: Actor,
        student_id: str | None = None,
        course_id: str | None = None,
        semester_id: str | None = None,
        status: RegistrationStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[Registration], int]:
        """List registrations visible to the caller.

        Students only ever see their own; teachers only their courses'.

        Returns:
            (page of registrations, total matching count)
        """
        filters: dict[str, Any] = {
            "student_id": student_id,
            "course_id": course_id,
            "semester_id": semester_id,
            "status": status,
        }
        if actor.is_student:
            filters["student_id"] = actor.user_id
        elif actor.is_teacher:
            filters["teacher_id"] = actor.user_id
        items = self._store.list_registrations(**filters, limit=limit, offset=offset)
        total = self._store.count_registrations(**filters)
        return items, total

    def list_waitlist(self, course_id: str) -> list[Registration]:
        """Waitlisted registrations of a course by position, then priority (highest first)."""
        with self._store.read_session() as session:
            get_or_raise(session, Course, course_id)
            stmt = (
                select(Registration)
                .where(Registration.course_id == course_id, Registration.is_waitlisted.is_(True))
                .order_by(
                    Registration.waitlist_position,
                    Registration.priority.desc(),
                    Registration.registration_date,
                )
            )
            return list(session.execute(stmt).scalars().unique().all())

    def student_credits(self, student_id: str, semester_id: str) -> StudentCredits:
        """A student's credit load in one semester next to their global total."""
        with self._store.read_session() as session:
            student = get_or_raise(session, User, student_id)
            get_or_raise(session, Semester, semester_id)
            rows = session.execute(
                select(Registration.status, func.coalesce(func.sum(Subject.credits), 0))
                .join(Course, Registration.course_id == Course.id)
                .join(Subject, Course.subject_id == Subject.id)
                .where(
                    Registration.student_id == student_id,
                    Registration.semester_id == semester_id,
                )
                .group_by(Registration.status)
            ).all()
        sums = {status: int(total) for status, total in rows}
        return StudentCredits(
            student_id=student_id,
            semester_id=semester_id,
            approved=sums.get(RegistrationStatus.APPROVED.value, 0),
            completed=sums.get(RegistrationStatus.COMPLETED.value, 0),
            pending=sums.get(RegistrationStatus.PENDING.value, 0),
            current_credits=student.current_credits,
            max_credits=student.max_credits,
        )
