"""Data models for the Course Capacity Ledger."""

from dataclasses import dataclass, field


@dataclass
class CourseDrift:
    """A course whose stored seat count disagrees with its approved registrations."""

    course_id: str
    stored: int
    derived: int


@dataclass
class StudentDrift:
    """A student whose stored credits disagree with their approved and completed registrations."""

    student_id: str
    stored: int
    derived: int


@dataclass
class LedgerReport:
    """Result of an audit or repair run.

    Attributes:
        courses: Courses with drifted seat counts.
        students: Students with drifted credit totals.
        repaired: Whether the drift was written back.
    """

    courses: list[CourseDrift] = field(default_factory=list)
    students: list[StudentDrift] = field(default_factory=list)
    repaired: bool = False

    @property
    def is_consistent(self) -> bool:
        return not self.courses and not self.students


@dataclass
class CascadeResult:
    """What deleting a course undid.

    Attributes:
        course_id: The deleted course.
        deleted_registrations: Ids of registrations removed with it.
        refunded_credits: Credits returned per student.
    """

    course_id: str
    deleted_registrations: list[str] = field(default_factory=list)
    refunded_credits: dict[str, int] = field(default_factory=dict)
