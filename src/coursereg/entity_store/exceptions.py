"""Custom exceptions for the Entity Store."""


class EntityStoreError(Exception):
    """Base exception for Entity Store errors."""


class StorageError(EntityStoreError):
    """The underlying database failed; the current request is aborted."""


class ValidationError(EntityStoreError):
    """Malformed or out-of-range input."""


class AlreadyExistsError(EntityStoreError):
    """A uniqueness constraint would be violated."""


class NotFoundError(EntityStoreError):
    """Entity with given ID does not exist."""


class SchoolNotFoundError(NotFoundError):
    """School with given ID does not exist."""


class SubjectNotFoundError(NotFoundError):
    """Subject with given ID does not exist."""


class ClassroomNotFoundError(NotFoundError):
    """Classroom with given ID does not exist."""


class SemesterNotFoundError(NotFoundError):
    """Semester with given ID does not exist."""


class CourseNotFoundError(NotFoundError):
    """Course with given ID does not exist."""


class UserNotFoundError(NotFoundError):
    """User with given ID does not exist."""


class RegistrationNotFoundError(NotFoundError):
    """Registration with given ID does not exist."""


class ChangeRequestNotFoundError(NotFoundError):
    """Change request with given ID does not exist."""


class ConcurrencyConflictError(EntityStoreError):
    """A concurrent writer won the race; retry the whole operation once."""
