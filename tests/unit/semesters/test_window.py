"""Unit tests for semester window checks."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import pytest

from coursereg.entity_store import ValidationError
from coursereg.semesters import (
    derive_is_active,
    is_in_session,
    is_registration_open,
    is_withdrawal_allowed,
    semester_type,
    validate_academic_year,
    validate_semester_dates,
)


@dataclass
class Dates:
    registration_start_date: datetime = datetime(2025, 8, 1)
    registration_end_date: datetime = datetime(2025, 8, 31, 23, 59)
    start_date: datetime = datetime(2025, 9, 1)
    end_date: datetime = datetime(2025, 12, 20)
    withdrawal_deadline: datetime = datetime(2025, 10, 15)
    is_active: bool = True


@pytest.mark.unit
class TestRegistrationWindow:
    """Tests for is_registration_open."""

    def test_bounds_are_inclusive(self) -> None:
        dates = Dates()
        assert is_registration_open(dates, datetime(2025, 8, 1))
        assert is_registration_open(dates, datetime(2025, 8, 31, 23, 59))
        assert not is_registration_open(dates, datetime(2025, 7, 31, 23, 59))
        assert not is_registration_open(dates, datetime(2025, 9, 1))

    def test_aware_time_is_compared_in_utc(self) -> None:
        # 01:00 on Aug 1 at UTC+3 is still July 31 in UTC
        plus_three = timezone(timedelta(hours=3))
        assert not is_registration_open(Dates(), datetime(2025, 8, 1, 1, 0, tzinfo=plus_three))
        assert is_registration_open(Dates(), datetime(2025, 8, 1, 4, 0, tzinfo=plus_three))


@pytest.mark.unit
class TestSessionAndWithdrawal:
    """Tests for in-session and withdrawal checks."""

    def test_in_session(self) -> None:
        assert is_in_session(Dates(), datetime(2025, 10, 1))
        assert not is_in_session(Dates(), datetime(2025, 12, 21))
        assert not is_in_session(Dates(is_active=False), datetime(2025, 10, 1))

    def test_withdrawal_until_deadline(self) -> None:
        assert is_withdrawal_allowed(Dates(), datetime(2025, 10, 15))
        assert not is_withdrawal_allowed(Dates(), datetime(2025, 10, 15, 0, 1))

    def test_withdrawal_needs_active_semester(self) -> None:
        assert not is_withdrawal_allowed(Dates(is_active=False), datetime(2025, 9, 1))

    def test_derive_is_active(self) -> None:
        dates = Dates()
        assert derive_is_active(dates.registration_start_date, dates.end_date, datetime(2025, 8, 20))
        assert not derive_is_active(dates.registration_start_date, dates.end_date, datetime(2025, 7, 1))
        assert not derive_is_active(dates.registration_start_date, dates.end_date, datetime(2026, 1, 1))


@pytest.mark.unit
class TestValidation:
    """Tests for semester field validation."""

    def _validate(self, **overrides) -> None:
        dates = Dates(**overrides)
        validate_semester_dates(
            dates.start_date,
            dates.end_date,
            dates.registration_start_date,
            dates.registration_end_date,
            dates.withdrawal_deadline,
        )

    def test_valid_dates(self) -> None:
        self._validate()

    def test_end_before_start(self) -> None:
        with pytest.raises(ValidationError, match="End date"):
            self._validate(end_date=datetime(2025, 8, 1))

    def test_registration_end_before_start(self) -> None:
        with pytest.raises(ValidationError, match="Registration end"):
            self._validate(registration_end_date=datetime(2025, 7, 1))

    def test_withdrawal_after_end(self) -> None:
        with pytest.raises(ValidationError, match="Withdrawal deadline"):
            self._validate(withdrawal_deadline=datetime(2026, 1, 1))

    def test_late_registration_end_is_allowed(self) -> None:
        self._validate(registration_end_date=datetime(2025, 9, 10))

    def test_credit_bounds(self) -> None:
        dates = Dates()
        with pytest.raises(ValidationError):
            validate_semester_dates(
                dates.start_date,
                dates.end_date,
                dates.registration_start_date,
                dates.registration_end_date,
                dates.withdrawal_deadline,
                min_credits_per_student=20,
                max_credits_per_student=16,
            )

    def test_academic_year(self) -> None:
        assert validate_academic_year(" 2025-2026 ") == "2025-2026"
        with pytest.raises(ValidationError):
            validate_academic_year("2025/26")

    def test_semester_type(self) -> None:
        assert semester_type(1) == "Fall"
        assert semester_type(3) == "Summer"
        assert semester_type(9) == "Unknown"
