"""SemesterCalendar - semester writes and the single current semester."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from coursereg.entity_store import (
    AlreadyExistsError,
    EntityStore,
    Semester,
    ValidationError,
    get_or_raise,
    record_activity,
)
from coursereg.entity_store.models import as_naive_utc, utcnow
from coursereg.semesters.window import (
    Clock,
    derive_is_active,
    is_in_session,
    is_registration_open,
    validate_academic_year,
    validate_semester_dates,
)

logger = logging.getLogger(__name__)

_DATE_FIELDS = (
    "start_date",
    "end_date",
    "registration_start_date",
    "registration_end_date",
    "withdrawal_deadline",
)


class SemesterCalendar:
    """Creates and updates semesters and decides which one is current.

    At most one semester has is_current set. Every operation that sets it
    clears all others in the same transaction; a partial unique index on
    is_current rejects anything that slips past.
    """

    def __init__(self, store: EntityStore, clock: Clock = utcnow) -> None:
        self._store = store
        self._clock = clock

    def _now(self) -> datetime:
        return as_naive_utc(self._clock())

    @staticmethod
    def _clear_current(session: Session, keep_id: str, clear_active: bool = False) -> None:
        values: dict[str, Any] = {"is_current": False}
        if clear_active:
            values["is_active"] = False
        session.execute(
            update(Semester).where(Semester.id != keep_id).values(**values),
            execution_options={"synchronize_session": False},
        )

    @staticmethod
    def _check_unique(session: Session, name: str, code: str, exclude_id: str | None = None) -> None:
        stmt = select(Semester).where((Semester.name == name) | (Semester.code == code))
        if exclude_id is not None:
            stmt = stmt.where(Semester.id != exclude_id)
        if session.execute(stmt).scalars().first() is not None:
            raise AlreadyExistsError(f"A semester named '{name}' or coded '{code}' already exists")

    def create_semester(
        self,
        name: str,
        code: str,
        academic_year: str,
        semester_number: int,
        start_date: datetime,
        end_date: datetime,
        registration_start_date: datetime,
        registration_end_date: datetime,
        withdrawal_deadline: datetime,
        max_credits_per_student: int = 16,
        min_credits_per_student: int = 8,
        description: str | None = None,
        created_by: str | None = None,
        is_current: bool = False,
    ) -> Semester:
        """Create a semester.

        is_active is derived: true while registration has opened and the
        semester has not ended.

        Args:
            name: Unique display name
            code: Unique code, stored upper-cased
            academic_year: Year span like 2024-2025
            semester_number: 1 (Fall), 2 (Spring) or 3 (Summer)
            start_date: First teaching day
            end_date: Last teaching day
            registration_start_date: Opening of registration
            registration_end_date: Close of registration
            withdrawal_deadline: Last moment students may drop
            max_credits_per_student: Upper credit bound
            min_credits_per_student: Lower credit bound
            description: Free text
            created_by: Id of the creating admin
            is_current: Make this the current semester (clears all others)

        Returns:
            Created Semester

        Raises:
            ValidationError: If dates or fields are invalid
            AlreadyExistsError: If the name or code is taken
        """
        name = name.strip()
        if not name:
            raise ValidationError("Semester name is required")
        code = code.strip().upper()
        if not code:
            raise ValidationError("Semester code is required")
        academic_year = validate_academic_year(academic_year)
        if semester_number not in (1, 2, 3):
            raise ValidationError("Semester number must be 1, 2, or 3")
        validate_semester_dates(
            start_date,
            end_date,
            registration_start_date,
            registration_end_date,
            withdrawal_deadline,
            min_credits_per_student,
            max_credits_per_student,
        )

        with self._store.transaction() as session:
            self._check_unique(session, name, code)
            semester = Semester(
                name=name,
                code=code,
                academic_year=academic_year,
                semester_number=semester_number,
                start_date=as_naive_utc(start_date),
                end_date=as_naive_utc(end_date),
                registration_start_date=as_naive_utc(registration_start_date),
                registration_end_date=as_naive_utc(registration_end_date),
                withdrawal_deadline=as_naive_utc(withdrawal_deadline),
                is_active=derive_is_active(registration_start_date, end_date, self._now()),
                max_credits_per_student=max_credits_per_student,
                min_credits_per_student=min_credits_per_student,
                description=description,
                created_by=created_by,
            )
            if is_current:
                self._clear_current(session, semester.id)
                semester.is_current = True
            session.add(semester)
            record_activity(
                session,
                "semester.create",
                user_id=created_by,
                target_type="semester",
                target_id=semester.id,
                details={"code": code, "is_current": is_current},
            )

        logger.info("Created semester %s (%s, active=%s)", semester.id, code, semester.is_active)
        return semester

    def update_semester(self, semester_id: str, actor_id: str | None = None, **fields: Any) -> Semester:
        """Update semester fields. Only provided fields are updated.

        The merged record is validated as a whole and is_active re-derived
        from the new dates.

        Args:
            semester_id: The semester's unique ID
            actor_id: Id of the updating admin, for the activity log
            **fields: Any of name, code, academic_year, semester_number, the
                five date fields, max/min_credits_per_student, description

        Raises:
            SemesterNotFoundError: If the semester doesn't exist
            ValidationError: If a field is unknown or the result is invalid
            AlreadyExistsError: If the new name or code is taken
        """
        allowed = {
            "name",
            "code",
            "academic_year",
            "semester_number",
            "max_credits_per_student",
            "min_credits_per_student",
            "description",
            *_DATE_FIELDS,
        }
        unknown = sorted(set(fields) - allowed)
        if unknown:
            raise ValidationError(f"Unknown semester fields: {', '.join(unknown)}")
        changes = {key: value for key, value in fields.items() if value is not None}

        with self._store.transaction() as session:
            semester = get_or_raise(session, Semester, semester_id)

            if "name" in changes:
                changes["name"] = changes["name"].strip()
            if "code" in changes:
                changes["code"] = changes["code"].strip().upper()
            if "academic_year" in changes:
                changes["academic_year"] = validate_academic_year(changes["academic_year"])
            if "semester_number" in changes and changes["semester_number"] not in (1, 2, 3):
                raise ValidationError("Semester number must be 1, 2, or 3")
            for key in _DATE_FIELDS:
                if key in changes:
                    changes[key] = as_naive_utc(changes[key])

            merged = {key: changes.get(key, getattr(semester, key)) for key in allowed}
            validate_semester_dates(
                merged["start_date"],
                merged["end_date"],
                merged["registration_start_date"],
                merged["registration_end_date"],
                merged["withdrawal_deadline"],
                merged["min_credits_per_student"],
                merged["max_credits_per_student"],
            )
            if "name" in changes or "code" in changes:
                self._check_unique(session, merged["name"], merged["code"], exclude_id=semester_id)

            for key, value in changes.items():
                setattr(semester, key, value)
            semester.is_active = derive_is_active(
                merged["registration_start_date"], merged["end_date"], self._now()
            )
            record_activity(
                session,
                "semester.update",
                user_id=actor_id,
                target_type="semester",
                target_id=semester_id,
                details={"fields": sorted(changes)},
            )

        logger.info("Updated semester %s (%s)", semester_id, ", ".join(sorted(changes)) or "no changes")
        return semester

    def set_current(self, semester_id: str, actor_id: str | None = None) -> Semester:
        """Make one semester current, clearing the flag everywhere else.

        Raises:
            SemesterNotFoundError: If the semester doesn't exist
            ValidationError: If the semester's dates are inconsistent
        """
        with self._store.transaction() as session:
            semester = get_or_raise(session, Semester, semester_id)
            self._validate_stored(semester)
            self._clear_current(session, semester_id)
            semester.is_current = True
            record_activity(
                session,
                "semester.set_current",
                user_id=actor_id,
                target_type="semester",
                target_id=semester_id,
            )

        logger.info("Semester %s is now current", semester_id)
        return semester

    def activate(self, semester_id: str, actor_id: str | None = None) -> Semester:
        """Make a semester the only active and current one.

        Clears is_active and is_current on every other semester in the same
        transaction.

        Raises:
            SemesterNotFoundError: If the semester doesn't exist
            ValidationError: If the semester's dates are inconsistent
        """
        with self._store.transaction() as session:
            semester = get_or_raise(session, Semester, semester_id)
            self._validate_stored(semester)
            self._clear_current(session, semester_id, clear_active=True)
            semester.is_active = True
            semester.is_current = True
            record_activity(
                session,
                "semester.activate",
                user_id=actor_id,
                target_type="semester",
                target_id=semester_id,
            )

        logger.info("Activated semester %s", semester_id)
        return semester

    @staticmethod
    def _validate_stored(semester: Semester) -> None:
        validate_semester_dates(
            semester.start_date,
            semester.end_date,
            semester.registration_start_date,
            semester.registration_end_date,
            semester.withdrawal_deadline,
            semester.min_credits_per_student,
            semester.max_credits_per_student,
        )

    def get_current(self) -> Semester | None:
        """The semester students should see right now.

        The flagged current semester wins; otherwise the earliest active
        semester open for registration; otherwise an active one in session.
        """
        now = self._now()
        with self._store.read_session() as session:
            flagged = session.execute(
                select(Semester).where(Semester.is_current.is_(True))
            ).scalar_one_or_none()
            if flagged is not None:
                return flagged

            active = list(
                session.execute(
                    select(Semester)
                    .where(Semester.is_active.is_(True))
                    .order_by(Semester.start_date)
                ).scalars()
            )
        for semester in active:
            if is_registration_open(semester, now):
                return semester
        for semester in active:
            if is_in_session(semester, now):
                return semester
        return None

    def list_open_for_registration(self) -> list[Semester]:
        """Active semesters whose registration window contains now, earliest first."""
        now = self._now()
        with self._store.read_session() as session:
            stmt = (
                select(Semester)
                .where(
                    Semester.is_active.is_(True),
                    Semester.registration_start_date <= now,
                    Semester.registration_end_date >= now,
                )
                .order_by(Semester.start_date)
            )
            return list(session.execute(stmt).scalars().all())

    def registration_open(self, semester: Semester) -> bool:
        """Whether an active semester's registration window contains now."""
        return semester.is_active and is_registration_open(semester, self._now())
