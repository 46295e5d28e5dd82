"""Registration State Machine - lifecycle, seat and credit bookkeeping, school changes."""

from coursereg.capacity import CourseFullError, CreditLimitExceededError
from coursereg.conflicts import (
    DuplicateRegistrationError,
    ScheduleConflictError,
    SubjectAlreadyApprovedError,
    SwitchCandidate,
)
from coursereg.entity_store import RegistrationStatus, Role
from coursereg.registration.change_requests import ChangeRequestService
from coursereg.registration.exceptions import (
    CourseInactiveError,
    ForbiddenError,
    InvalidTransitionError,
    PendingChangeRequestError,
    RegistrationClosedError,
    RegistrationError,
    RejectionPendingError,
    UnauthorizedError,
    WithdrawalClosedError,
)
from coursereg.registration.grading import (
    LETTER_GRADE_POINTS,
    GradingPolicy,
    is_passing,
    letter_to_points,
    score_to_gpa,
    score_to_grade,
    weighted_score,
)
from coursereg.registration.machine import RegistrationMachine
from coursereg.registration.models import (
    ALLOWED_TRANSITIONS,
    Actor,
    StudentCredits,
    check_transition,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "LETTER_GRADE_POINTS",
    "Actor",
    "ChangeRequestService",
    "CourseFullError",
    "CourseInactiveError",
    "CreditLimitExceededError",
    "DuplicateRegistrationError",
    "ForbiddenError",
    "GradingPolicy",
    "InvalidTransitionError",
    "PendingChangeRequestError",
    "RegistrationClosedError",
    "RegistrationError",
    "RegistrationMachine",
    "RegistrationStatus",
    "RejectionPendingError",
    "Role",
    "ScheduleConflictError",
    "StudentCredits",
    "SubjectAlreadyApprovedError",
    "SwitchCandidate",
    "UnauthorizedError",
    "WithdrawalClosedError",
    "check_transition",
    "is_passing",
    "letter_to_points",
    "score_to_gpa",
    "score_to_grade",
    "weighted_score",
]
