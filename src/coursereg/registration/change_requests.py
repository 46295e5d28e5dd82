"""ChangeRequestService - students asking to move between schools."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from coursereg.entity_store import (
    ChangeRequest,
    ChangeRequestStatus,
    EntityStore,
    School,
    User,
    ValidationError,
    get_or_raise,
    record_activity,
)
from coursereg.entity_store.models import as_naive_utc, utcnow
from coursereg.registration.exceptions import (
    ForbiddenError,
    InvalidTransitionError,
    PendingChangeRequestError,
)
from coursereg.registration.models import Actor
from coursereg.semesters import Clock

logger = logging.getLogger(__name__)

DEFAULT_REJECTION_NOTE = "No specific reason given."


class ChangeRequestService:
    """Submit and resolve school change requests.

    Approval moves the student to the requested school in the same
    transaction that resolves the request.
    """

    def __init__(self, store: EntityStore, clock: Clock = utcnow) -> None:
        self._store = store
        self._clock = clock

    def _now(self) -> datetime:
        return as_naive_utc(self._clock())

    def submit(self, actor: Actor, requested_school_id: str) -> ChangeRequest:
        """File a request to move the calling student to another school.

        Raises:
            ForbiddenError: Caller is not a student.
            SchoolNotFoundError: The requested school doesn't exist.
            ValidationError: The student already belongs to that school.
            PendingChangeRequestError: A request is already awaiting review.
        """
        if not actor.is_student:
            raise ForbiddenError("Only students can request a school change")

        with self._store.transaction() as session:
            student = get_or_raise(session, User, actor.user_id)
            get_or_raise(session, School, requested_school_id)
            pending = session.execute(
                select(ChangeRequest).where(
                    ChangeRequest.user_id == student.id,
                    ChangeRequest.status == ChangeRequestStatus.PENDING.value,
                )
            ).scalars().first()
            if pending is not None:
                raise PendingChangeRequestError("A school change request is already pending")
            if student.school_id is None:
                raise ValidationError("Student has no current school")
            if student.school_id == requested_school_id:
                raise ValidationError("Student already belongs to this school")

            request = ChangeRequest(
                user_id=student.id,
                current_value=student.school_id,
                requested_value=requested_school_id,
            )
            session.add(request)
            record_activity(
                session,
                "change_request.submit",
                user_id=actor.user_id,
                target_type="change_request",
                target_id=request.id,
                details={"from": student.school_id, "to": requested_school_id},
            )

        logger.info("Change request %s submitted by %s", request.id, actor.user_id)
        return request

    @staticmethod
    def _load_pending(
        session: Session, actor: Actor, request_id: str, target: ChangeRequestStatus
    ) -> ChangeRequest:
        if not actor.is_admin:
            raise ForbiddenError("Only admins can resolve change requests")
        request = get_or_raise(session, ChangeRequest, request_id)
        if request.status != ChangeRequestStatus.PENDING.value:
            raise InvalidTransitionError(
                request.status, target.value, "Change request has already been resolved"
            )
        return request

    def approve(self, actor: Actor, request_id: str, notes: str | None = None) -> ChangeRequest:
        """Approve a pending request and move the student.

        Raises:
            ForbiddenError: Caller is not an admin.
            ChangeRequestNotFoundError: The request doesn't exist.
            InvalidTransitionError: The request is already resolved.
        """
        with self._store.transaction() as session:
            request = self._load_pending(session, actor, request_id, ChangeRequestStatus.APPROVED)
            get_or_raise(session, School, request.requested_value)
            student = get_or_raise(session, User, request.user_id)
            student.school_id = request.requested_value

            request.status = ChangeRequestStatus.APPROVED.value
            request.admin_notes = notes
            request.resolved_by = actor.user_id
            request.resolved_at = self._now()
            record_activity(
                session,
                "change_request.approve",
                user_id=actor.user_id,
                target_type="change_request",
                target_id=request_id,
                details={"student_id": student.id, "school_id": request.requested_value},
            )

        logger.info("Change request %s approved by %s", request_id, actor.user_id)
        return request

    def reject(self, actor: Actor, request_id: str, reason: str | None = None) -> ChangeRequest:
        """Reject a pending request; the student's school is unchanged.

        Raises:
            ForbiddenError: Caller is not an admin.
            ChangeRequestNotFoundError: The request doesn't exist.
            InvalidTransitionError: The request is already resolved.
        """
        with self._store.transaction() as session:
            request = self._load_pending(session, actor, request_id, ChangeRequestStatus.REJECTED)
            request.status = ChangeRequestStatus.REJECTED.value
            request.admin_notes = (reason or "").strip() or DEFAULT_REJECTION_NOTE
            request.resolved_by = actor.user_id
            request.resolved_at = self._now()
            record_activity(
                session,
                "change_request.reject",
                user_id=actor.user_id,
                target_type="change_request",
                target_id=request_id,
                details={"reason": request.admin_notes},
            )

        logger.info("Change request %s rejected by %s", request_id, actor.user_id)
        return request

    def list_requests(self, actor: Actor, status: ChangeRequestStatus | None = None) -> list[ChangeRequest]:
        """Admins see every request; anyone else only their own."""
        user_id = None if actor.is_admin else actor.user_id
        return self._store.list_change_requests(status=status, user_id=user_id)
