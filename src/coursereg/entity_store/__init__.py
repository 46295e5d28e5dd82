"""Entity Store - Persistent storage for the course registration catalog and enrolments."""

from coursereg.entity_store.database import Database
from coursereg.entity_store.exceptions import (
    AlreadyExistsError,
    ChangeRequestNotFoundError,
    ClassroomNotFoundError,
    ConcurrencyConflictError,
    CourseNotFoundError,
    EntityStoreError,
    NotFoundError,
    RegistrationNotFoundError,
    SchoolNotFoundError,
    SemesterNotFoundError,
    StorageError,
    SubjectNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from coursereg.entity_store.models import (
    ActivityLog,
    ChangeRequest,
    ChangeRequestStatus,
    Classroom,
    Course,
    Registration,
    RegistrationStatus,
    Role,
    RoomType,
    ScheduleSlot,
    School,
    Semester,
    Subject,
    SubjectCategory,
    User,
)
from coursereg.entity_store.store import (
    EntityStore,
    SlotInput,
    get_or_raise,
    record_activity,
)

__all__ = [
    "ActivityLog",
    "AlreadyExistsError",
    "ChangeRequest",
    "ChangeRequestNotFoundError",
    "ChangeRequestStatus",
    "Classroom",
    "ClassroomNotFoundError",
    "ConcurrencyConflictError",
    "Course",
    "CourseNotFoundError",
    "Database",
    "EntityStore",
    "EntityStoreError",
    "NotFoundError",
    "Registration",
    "RegistrationNotFoundError",
    "RegistrationStatus",
    "Role",
    "RoomType",
    "ScheduleSlot",
    "School",
    "SchoolNotFoundError",
    "Semester",
    "SemesterNotFoundError",
    "SlotInput",
    "StorageError",
    "Subject",
    "SubjectCategory",
    "SubjectNotFoundError",
    "User",
    "UserNotFoundError",
    "ValidationError",
    "get_or_raise",
    "record_activity",
]
