"""Grade arithmetic: letter points, weighted scores and GPA breakpoints."""

from __future__ import annotations

from dataclasses import dataclass

from coursereg.entity_store.exceptions import ValidationError
from coursereg.entity_store.models import Course

# I (incomplete) and W (withdrawn) carry no points
LETTER_GRADE_POINTS: dict[str, float | None] = {
    "A+": 4.0,
    "A": 4.0,
    "A-": 3.7,
    "B+": 3.3,
    "B": 3.0,
    "B-": 2.7,
    "C+": 2.3,
    "C": 2.0,
    "C-": 1.7,
    "D+": 1.3,
    "D": 1.0,
    "D-": 0.7,
    "F": 0.0,
    "I": None,
    "W": None,
}

# Minimum weighted score -> (grade points, letter), highest first
GPA_BREAKPOINTS: tuple[tuple[float, float, str], ...] = (
    (90, 4.0, "A"),
    (85, 3.7, "A-"),
    (80, 3.3, "B+"),
    (75, 3.0, "B"),
    (70, 2.7, "B-"),
    (65, 2.3, "C+"),
    (60, 2.0, "C"),
)

PASSING_POINTS = 2.0


@dataclass(frozen=True)
class GradingPolicy:
    """Percent weights of the three grade components; they sum to 100."""

    attendance: int = 10
    midterm: int = 30
    final: int = 60

    @classmethod
    def from_course(cls, course: Course) -> GradingPolicy:
        return cls(course.grading_attendance, course.grading_midterm, course.grading_final)


def letter_to_points(letter: str) -> float | None:
    """Grade points for a letter grade.

    Raises:
        ValidationError: If the letter is not a known grade.
    """
    if letter not in LETTER_GRADE_POINTS:
        raise ValidationError(f"Unknown letter grade '{letter}'")
    return LETTER_GRADE_POINTS[letter]


def weighted_score(policy: GradingPolicy, attendance: float, midterm: float, final: float) -> float:
    """Weighted total (0-100) of the three components under the policy."""
    return (
        attendance * policy.attendance / 100
        + midterm * policy.midterm / 100
        + final * policy.final / 100
    )


def score_to_grade(score: float) -> tuple[float, str]:
    """Map a weighted score to (grade points, letter); below 60 is (0.0, 'F')."""
    for minimum, points, letter in GPA_BREAKPOINTS:
        if score >= minimum:
            return points, letter
    return 0.0, "F"


def score_to_gpa(score: float) -> float:
    """Map a weighted score to grade points; below 60 is 0.0."""
    return score_to_grade(score)[0]


def is_passing(points: float | None) -> bool:
    """True when points are at least 2.0 (C or better); ungraded never passes."""
    return points is not None and points >= PASSING_POINTS
