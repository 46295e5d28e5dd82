"""REST API for coursereg."""

from coursereg.api.app import create_app
from coursereg.api.models import (
    APIResponse,
    CourseResponse,
    RegistrationResponse,
    SemesterResponse,
)

__all__ = [
    "APIResponse",
    "CourseResponse",
    "RegistrationResponse",
    "SemesterResponse",
    "create_app",
]
