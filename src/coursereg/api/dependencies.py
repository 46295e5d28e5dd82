"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from typing import Annotated

from fastapi import Depends, Header

from coursereg.capacity import CapacityLedger
from coursereg.config import Settings
from coursereg.entity_store import EntityStore, UserNotFoundError
from coursereg.entity_store.models import utcnow
from coursereg.registration import (
    Actor,
    ChangeRequestService,
    ForbiddenError,
    RegistrationMachine,
    UnauthorizedError,
)
from coursereg.semesters import Clock, SemesterCalendar

# Global EntityStore instance (initialized on app startup)
_store: EntityStore | None = None


def init_entity_store(settings: Settings) -> EntityStore:
    """Initialize the global EntityStore instance."""
    global _store  # noqa: PLW0603
    policy = settings.grading_policy
    _store = EntityStore(
        settings.db_path,
        default_max_credits=settings.default_max_credits,
        default_grading_policy=(policy.attendance, policy.midterm, policy.final),
    )
    return _store


def close_entity_store() -> None:
    """Close the global EntityStore instance."""
    global _store  # noqa: PLW0603
    if _store is not None:
        _store.close()
        _store = None


def get_entity_store() -> Generator[EntityStore, None, None]:
    """Dependency that provides the EntityStore instance."""
    if _store is None:
        raise RuntimeError("EntityStore not initialized. Call init_entity_store() first.")
    yield _store


# Type alias for dependency injection
EntityStoreDep = Annotated[EntityStore, Depends(get_entity_store)]

# Registration engine services (initialized on app startup)
_ledger: CapacityLedger | None = None
_calendar: SemesterCalendar | None = None
_machine: RegistrationMachine | None = None
_change_requests: ChangeRequestService | None = None


def init_services(store: EntityStore, clock: Clock = utcnow) -> None:
    """Initialize the ledger, calendar, state machine and change request service."""
    global _ledger, _calendar, _machine, _change_requests  # noqa: PLW0603
    _ledger = CapacityLedger(store)
    _calendar = SemesterCalendar(store, clock)
    _machine = RegistrationMachine(store, _ledger, clock)
    _change_requests = ChangeRequestService(store, clock)


def close_services() -> None:
    """Drop the global service instances."""
    global _ledger, _calendar, _machine, _change_requests  # noqa: PLW0603
    _ledger = None
    _calendar = None
    _machine = None
    _change_requests = None


def get_ledger() -> Generator[CapacityLedger, None, None]:
    """Dependency that provides the CapacityLedger instance."""
    if _ledger is None:
        raise RuntimeError("CapacityLedger not initialized. Call init_services() first.")
    yield _ledger


def get_calendar() -> Generator[SemesterCalendar, None, None]:
    """Dependency that provides the SemesterCalendar instance."""
    if _calendar is None:
        raise RuntimeError("SemesterCalendar not initialized. Call init_services() first.")
    yield _calendar


def get_machine() -> Generator[RegistrationMachine, None, None]:
    """Dependency that provides the RegistrationMachine instance."""
    if _machine is None:
        raise RuntimeError("RegistrationMachine not initialized. Call init_services() first.")
    yield _machine


def get_change_requests() -> Generator[ChangeRequestService, None, None]:
    """Dependency that provides the ChangeRequestService instance."""
    if _change_requests is None:
        raise RuntimeError("ChangeRequestService not initialized. Call init_services() first.")
    yield _change_requests


# Type aliases for dependency injection
LedgerDep = Annotated[CapacityLedger, Depends(get_ledger)]
CalendarDep = Annotated[SemesterCalendar, Depends(get_calendar)]
MachineDep = Annotated[RegistrationMachine, Depends(get_machine)]
ChangeRequestsDep = Annotated[ChangeRequestService, Depends(get_change_requests)]


def get_current_actor(
    store: EntityStoreDep,
    x_user_id: Annotated[str | None, Header()] = None,
) -> Actor:
    """Resolve the already-authenticated caller from the X-User-Id header.

    Raises:
        UnauthorizedError: Header missing, or user unknown or inactive.
    """
    if not x_user_id:
        raise UnauthorizedError("Missing X-User-Id header")
    try:
        user = store.get_user(x_user_id)
    except UserNotFoundError as e:
        raise UnauthorizedError("Unknown user") from e
    if not user.is_active:
        raise UnauthorizedError("User is inactive")
    return Actor.from_user(user)


ActorDep = Annotated[Actor, Depends(get_current_actor)]


def require_admin(actor: ActorDep) -> Actor:
    """Dependency that only lets admins through."""
    if not actor.is_admin:
        raise ForbiddenError("Admin access required")
    return actor


AdminDep = Annotated[Actor, Depends(require_admin)]
