"""Course Capacity Ledger - seat counts and student credit totals."""

from coursereg.capacity.exceptions import (
    CapacityError,
    CourseFullError,
    CreditLimitExceededError,
)
from coursereg.capacity.ledger import CapacityLedger
from coursereg.capacity.models import (
    CascadeResult,
    CourseDrift,
    LedgerReport,
    StudentDrift,
)

__all__ = [
    "CapacityError",
    "CapacityLedger",
    "CascadeResult",
    "CourseDrift",
    "CourseFullError",
    "CreditLimitExceededError",
    "LedgerReport",
    "StudentDrift",
]
