"""Unit tests for the coursereg command line."""

from collections.abc import Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner

from coursereg.cli import main
from coursereg.entity_store import Course, EntityStore
from coursereg.semesters import SemesterCalendar


@pytest.fixture
def runner(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[CliRunner]:
    """CliRunner run from an empty directory with logs kept in tmp_path."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("COURSEREG_LOG_DIR", str(tmp_path / "logs"))
    yield CliRunner()


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    return str(tmp_path / "registry.db")


@pytest.mark.unit
class TestCli:
    """Tests for the CLI commands."""

    def test_init_db(self, runner: CliRunner, db_path: str) -> None:
        result = runner.invoke(main, ["init-db", "--db", db_path])

        assert result.exit_code == 0
        assert f"Database ready: {db_path}" in result.output
        assert Path(db_path).exists()

    def test_create_admin(self, runner: CliRunner, db_path: str) -> None:
        result = runner.invoke(
            main,
            ["create-user", "--db", db_path, "--first-name", "Ada", "--last-name", "Admin", "--email", "ada@uni.test"],
        )

        assert result.exit_code == 0, result.output
        assert result.output.startswith("Created admin ")
        store = EntityStore(db_path)
        try:
            [admin] = store.list_users(role="admin")
            assert admin.email == "ada@uni.test"
        finally:
            store.close()

    def test_create_student_without_school_fails(self, runner: CliRunner, db_path: str) -> None:
        result = runner.invoke(
            main,
            [
                "create-user",
                "--db",
                db_path,
                "--first-name",
                "Sam",
                "--last-name",
                "Student",
                "--email",
                "sam@uni.test",
                "--role",
                "student",
            ],
        )

        assert result.exit_code == 1
        assert "Students must belong to a school" in result.output

    def test_audit_and_repair(self, runner: CliRunner, db_path: str, seed, clock) -> None:
        store = EntityStore(db_path)
        try:
            catalog = seed(store, SemesterCalendar(store, clock))
            with store.transaction() as session:
                session.get(Course, catalog.math_a.id).current_students = 2
        finally:
            store.close()

        audit = runner.invoke(main, ["audit", "--db", db_path])
        assert audit.exit_code == 1
        assert "Drift found: 1 course(s), 0 student(s)" in audit.output
        assert f"course {catalog.math_a.id}: stored 2 seats, 0 approved registrations" in audit.output

        repair = runner.invoke(main, ["repair", "--db", db_path])
        assert repair.exit_code == 0
        assert "Repaired 1 course(s), 0 student(s)" in repair.output

        assert runner.invoke(main, ["audit", "--db", db_path]).output.strip() == "Ledger consistent."
        assert runner.invoke(main, ["repair", "--db", db_path]).output.strip() == "Nothing to repair."

    def test_bad_config_file(self, runner: CliRunner, tmp_path: Path) -> None:
        config = tmp_path / "coursereg.yaml"
        config.write_text("grading_policy:\n  final: 99\n", encoding="utf-8")

        result = runner.invoke(main, ["init-db", "--config", str(config)])

        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["--help"])
        for command in ("serve", "init-db", "create-user", "audit", "repair"):
            assert command in result.output
