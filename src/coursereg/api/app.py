"""FastAPI application setup."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from coursereg.api.dependencies import (
    close_entity_store,
    close_services,
    init_entity_store,
    init_services,
)
from coursereg.api.models import APIResponse
from coursereg.api.routes import (
    activity_logs,
    change_requests,
    classrooms,
    courses,
    ledger,
    registrations,
    schools,
    semesters,
    subjects,
    users,
)
from coursereg.capacity import CapacityError
from coursereg.config import Settings, load_settings
from coursereg.conflicts import ConflictError
from coursereg.entity_store import (
    AlreadyExistsError,
    ConcurrencyConflictError,
    EntityStoreError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from coursereg.entity_store.models import utcnow
from coursereg.registration import (
    CourseInactiveError,
    ForbiddenError,
    RegistrationClosedError,
    RegistrationError,
    UnauthorizedError,
    WithdrawalClosedError,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from coursereg.semesters import Clock

logger = logging.getLogger(__name__)

# Most specific first; handlers are looked up along the exception's MRO
ERROR_STATUS: list[tuple[type[Exception], int]] = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (AlreadyExistsError, status.HTTP_409_CONFLICT),
    (ConcurrencyConflictError, status.HTTP_409_CONFLICT),
    (StorageError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (EntityStoreError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (UnauthorizedError, status.HTTP_401_UNAUTHORIZED),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (RegistrationClosedError, status.HTTP_400_BAD_REQUEST),
    (WithdrawalClosedError, status.HTTP_400_BAD_REQUEST),
    (CourseInactiveError, status.HTTP_400_BAD_REQUEST),
    (RegistrationError, status.HTTP_409_CONFLICT),
    (ConflictError, status.HTTP_409_CONFLICT),
    (CapacityError, status.HTTP_409_CONFLICT),
]


def _error_message(exc: Exception, status_code: int) -> str:
    if status_code >= 500:
        return "Internal server error"
    if isinstance(exc, ConcurrencyConflictError):
        return f"{exc} (retry once)"
    return str(exc)


def _add_error_handler(app: FastAPI, exc_type: type[Exception], status_code: int) -> None:
    async def handler(_request: Request, exc: Exception) -> JSONResponse:
        if status_code >= 500:
            logger.error("Request failed: %s", exc)
        return JSONResponse(
            status_code=status_code,
            content=APIResponse[None](data=None, error=_error_message(exc, status_code)).model_dump(),
        )

    app.add_exception_handler(exc_type, handler)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    settings: Settings = app.state.settings
    clock: Clock = app.state.clock
    store = init_entity_store(settings)
    init_services(store, clock)
    logger.info("coursereg API started (db=%s)", settings.db_path)

    yield
    # Shutdown
    close_services()
    close_entity_store()


def create_app(settings: Settings | None = None, clock: Clock | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Runtime settings; loaded from coursereg.yaml and the
            environment when omitted.
        clock: Current-time source for the registration engine.
    """
    if settings is None:
        settings = load_settings()
    app = FastAPI(
        title=settings.api_title,
        description="REST API for coursereg - course registration back end",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.settings = settings
    app.state.clock = clock or utcnow

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    for exc_type, status_code in ERROR_STATUS:
        _add_error_handler(app, exc_type, status_code)

    # Include routers
    app.include_router(schools.router, prefix="/api/v1")
    app.include_router(subjects.router, prefix="/api/v1")
    app.include_router(classrooms.router, prefix="/api/v1")
    app.include_router(semesters.router, prefix="/api/v1")
    app.include_router(courses.router, prefix="/api/v1")
    app.include_router(users.router, prefix="/api/v1")
    app.include_router(registrations.router, prefix="/api/v1")
    app.include_router(change_requests.router, prefix="/api/v1")
    app.include_router(activity_logs.router, prefix="/api/v1")
    app.include_router(ledger.router, prefix="/api/v1")

    return app
