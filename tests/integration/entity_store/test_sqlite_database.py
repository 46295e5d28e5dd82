"""Integration tests for the Entity Store SQLite database."""

from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.exc import IntegrityError

from coursereg.entity_store import (
    AlreadyExistsError,
    Database,
    EntityStore,
    Registration,
    Semester,
    User,
    ValidationError,
)
from coursereg.semesters import SemesterCalendar


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    return str(tmp_path / "data" / "coursereg.db")


@pytest.fixture
def database(db_path: str) -> Iterator[Database]:
    """A file database with all tables created."""
    db = Database(db_path)
    db.create_tables()
    yield db
    db.close()


def semester_row(name: str, is_current: bool) -> Semester:
    return Semester(
        name=name,
        code=name.upper(),
        academic_year="2025-2026",
        semester_number=1,
        start_date=datetime(2025, 9, 1),
        end_date=datetime(2025, 12, 20),
        registration_start_date=datetime(2025, 8, 1),
        registration_end_date=datetime(2025, 8, 31),
        withdrawal_deadline=datetime(2025, 10, 15),
        is_current=is_current,
    )


@pytest.mark.integration
class TestDatabaseSetup:
    """Tests for schema creation and connection settings."""

    def test_creates_parent_directory_and_file(self, database: Database, db_path: str) -> None:
        assert Path(db_path).exists()

    def test_tables(self, database: Database) -> None:
        tables = set(inspect(database.engine).get_table_names())
        assert tables == {
            "schools",
            "subjects",
            "subject_schools",
            "classrooms",
            "semesters",
            "courses",
            "course_schedule_slots",
            "users",
            "registrations",
            "change_requests",
            "activity_logs",
        }

    def test_wal_and_foreign_keys(self, database: Database) -> None:
        assert database.is_wal_mode()
        with database.engine.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1

    def test_create_tables_is_idempotent(self, db_path: str, database: Database) -> None:
        again = Database(db_path)
        again.create_tables()
        assert "registrations" in inspect(again.engine).get_table_names()
        again.close()


@pytest.mark.integration
class TestConstraints:
    """Tests for constraints enforced by the schema itself."""

    def test_single_current_semester_index(self, database: Database) -> None:
        """The partial unique index allows many non-current rows but one current row."""
        session = database.get_session()
        session.add_all([semester_row("a", False), semester_row("b", False), semester_row("c", True)])
        session.commit()

        session.add(semester_row("d", True))
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()
        session.close()

    def test_negative_credits_rejected(self, db_path: str) -> None:
        store = EntityStore(db_path)
        try:
            admin = store.create_user("Ada", "Admin", "ada@uni.test", role="admin")
            with pytest.raises(ValidationError):
                with store.transaction() as session:
                    session.get(User, admin.id).current_credits = -1
        finally:
            store.close()

    def test_unique_registration_triple(self, db_path: str, seed, clock) -> None:
        store = EntityStore(db_path)
        try:
            catalog = seed(store, SemesterCalendar(store, clock))

            def add() -> None:
                with store.transaction() as session:
                    session.add(
                        Registration(
                            student_id=catalog.student.id,
                            course_id=catalog.math_a.id,
                            semester_id=catalog.semester.id,
                            registration_date=datetime(2025, 8, 20),
                        )
                    )

            add()
            with pytest.raises(AlreadyExistsError):
                add()
        finally:
            store.close()


@pytest.mark.integration
class TestPersistence:
    """Tests for data surviving a reopen."""

    def test_reopen_sees_committed_data(self, db_path: str) -> None:
        store = EntityStore(db_path)
        school = store.create_school("ENG", "Engineering")
        store.close()

        reopened = EntityStore(db_path)
        try:
            assert reopened.get_school(school.id).school_code == "ENG"
        finally:
            reopened.close()
