"""Command line entry point for coursereg."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from coursereg.capacity import CapacityLedger, LedgerReport
from coursereg.config import ConfigError, Settings, load_settings
from coursereg.entity_store import EntityStore, EntityStoreError, Role
from coursereg.logging import get_logger, setup_logging

logger = get_logger("cli")


def _load(config_path: Path | None, db_path: str | None) -> Settings:
    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    if db_path is not None:
        settings.db_path = db_path
    setup_logging(settings.log_dir, level=settings.log_level, console=False)
    return settings


def _open_store(settings: Settings) -> EntityStore:
    policy = settings.grading_policy
    return EntityStore(
        settings.db_path,
        default_max_credits=settings.default_max_credits,
        default_grading_policy=(policy.attendance, policy.midterm, policy.final),
    )


def _print_report(report: LedgerReport) -> None:
    for course in report.courses:
        click.echo(
            f"  course {course.course_id}: stored {course.stored} seats, "
            f"{course.derived} approved registrations"
        )
    for student in report.students:
        click.echo(
            f"  student {student.student_id}: stored {student.stored} credits, "
            f"{student.derived} charged"
        )


config_option = click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="Path to coursereg.yaml (uses ./coursereg.yaml if present)",
)
db_option = click.option(
    "--db",
    "db_path",
    type=str,
    default=None,
    help="SQLite database path (overrides config)",
)


@click.group()
@click.version_option(package_name="coursereg")
def main() -> None:
    """coursereg - course registration back end."""
    pass


@main.command()
@config_option
@click.option("--host", default="127.0.0.1", show_default=True, help="Bind address")
@click.option("--port", default=8000, show_default=True, type=int, help="Bind port")
def serve(config_path: Path | None, host: str, port: int) -> None:
    """Run the REST API with uvicorn."""
    import uvicorn

    from coursereg.api import create_app

    settings = _load(config_path, None)
    uvicorn.run(create_app(settings), host=host, port=port)


@main.command("init-db")
@config_option
@db_option
def init_db(config_path: Path | None, db_path: str | None) -> None:
    """Create the database schema if it doesn't exist."""
    settings = _load(config_path, db_path)
    store = _open_store(settings)
    store.close()
    click.echo(f"Database ready: {settings.db_path}")


@main.command("create-user")
@config_option
@db_option
@click.option("--first-name", required=True)
@click.option("--last-name", required=True)
@click.option("--email", required=True)
@click.option(
    "--role",
    type=click.Choice([r.value for r in Role]),
    default=Role.ADMIN.value,
    show_default=True,
)
@click.option("--school-id", default=None, help="Required for students")
def create_user(
    config_path: Path | None,
    db_path: str | None,
    first_name: str,
    last_name: str,
    email: str,
    role: str,
    school_id: str | None,
) -> None:
    """Create a user, typically the first admin."""
    settings = _load(config_path, db_path)
    store = _open_store(settings)
    try:
        user = store.create_user(first_name, last_name, email, role=role, school_id=school_id)
    except EntityStoreError as e:
        logger.warning("create-user failed: %s", e)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        store.close()
    click.echo(f"Created {user.role} {user.id}")


@main.command()
@config_option
@db_option
def audit(config_path: Path | None, db_path: str | None) -> None:
    """Report seat and credit counters that disagree with registrations.

    Exits with status 1 when drift is found.
    """
    settings = _load(config_path, db_path)
    store = _open_store(settings)
    try:
        report = CapacityLedger(store).audit()
    finally:
        store.close()

    if report.is_consistent:
        click.echo("Ledger consistent.")
        return
    click.echo(
        f"Drift found: {len(report.courses)} course(s), {len(report.students)} student(s)"
    )
    _print_report(report)
    sys.exit(1)


@main.command()
@config_option
@db_option
def repair(config_path: Path | None, db_path: str | None) -> None:
    """Rewrite drifted seat and credit counters from the registrations."""
    settings = _load(config_path, db_path)
    store = _open_store(settings)
    try:
        report = CapacityLedger(store).repair()
    finally:
        store.close()

    if report.is_consistent:
        click.echo("Nothing to repair.")
        return
    logger.info(
        "Ledger repair rewrote %d course and %d student counters",
        len(report.courses),
        len(report.students),
    )
    click.echo(
        f"Repaired {len(report.courses)} course(s), {len(report.students)} student(s)"
    )
    _print_report(report)


if __name__ == "__main__":
    main()
