"""Exceptions for the Registration State Machine."""


class RegistrationError(Exception):
    """Base exception for registration errors."""


class UnauthorizedError(RegistrationError):
    """The caller could not be identified."""


class ForbiddenError(RegistrationError):
    """The caller's role or ownership does not allow the operation."""


class RegistrationClosedError(RegistrationError):
    """The semester's registration window is closed."""


class WithdrawalClosedError(RegistrationError):
    """The semester's withdrawal deadline has passed or the semester is inactive."""


class CourseInactiveError(RegistrationError):
    """The course is not open for registration."""


class RejectionPendingError(RegistrationError):
    """A staged rejection awaits admin review."""


class PendingChangeRequestError(RegistrationError):
    """The student already has a change request awaiting review."""


class InvalidTransitionError(RegistrationError):
    """The requested status change is not allowed from the current status."""

    def __init__(self, current: str, target: str, message: str | None = None) -> None:
        self.current = current
        self.target = target
        super().__init__(message or f"Cannot move from '{current}' to '{target}'")
