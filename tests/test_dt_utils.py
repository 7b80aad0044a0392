"""Tests for dt_utils date helpers."""

from datetime import date, datetime

import pytest

from custom_components.bloom.utils.dt_utils import (
    dt_add_days,
    dt_date_key,
    dt_days_between,
    dt_parse_date,
    dt_trailing_dates,
)


class TestParsing:
    """Tests for parsing date keys."""

    def test_parse_date_key(self) -> None:
        """Plain keys parse to dates."""
        assert dt_parse_date("2026-01-18") == date(2026, 1, 18)

    def test_parse_datetime_string_truncates(self) -> None:
        """ISO datetimes drop the time of day."""
        assert dt_parse_date("2026-01-18T23:10:00+02:00") == date(2026, 1, 18)

    def test_parse_objects(self) -> None:
        """Date and datetime objects are accepted."""
        assert dt_parse_date(datetime(2026, 1, 18, 5, 0)) == date(2026, 1, 18)
        assert dt_parse_date(date(2026, 1, 18)) == date(2026, 1, 18)

    @pytest.mark.parametrize("value", [None, "", "   ", "not a date", 42])
    def test_parse_garbage(self, value) -> None:
        """Unusable values return None."""
        assert dt_parse_date(value) is None

    def test_date_key(self) -> None:
        """Date keys are canonical."""
        assert dt_date_key("2026-01-18T08:00:00") == "2026-01-18"
        assert dt_date_key("junk") is None


class TestArithmetic:
    """Tests for calendar arithmetic."""

    def test_days_between_is_calendar_days(self) -> None:
        """Late night to early morning is one day."""
        assert dt_days_between("2026-01-17T23:59:00", "2026-01-18T00:01:00") == 1

    def test_days_between_crosses_month(self) -> None:
        """Month boundaries count correctly."""
        assert dt_days_between("2026-01-30", "2026-02-02") == 3

    def test_days_between_invalid(self) -> None:
        """Unparseable input returns None."""
        assert dt_days_between(None, "2026-01-18") is None

    def test_add_days(self) -> None:
        """Adding negative days moves backwards."""
        assert dt_add_days("2026-03-01", -1) == "2026-02-28"

    def test_add_days_invalid(self) -> None:
        """Invalid dates raise ValueError."""
        with pytest.raises(ValueError):
            dt_add_days("junk", 1)

    def test_trailing_dates(self) -> None:
        """Trailing windows end on the given date."""
        assert dt_trailing_dates("2026-01-02", 3) == [
            "2025-12-31",
            "2026-01-01",
            "2026-01-02",
        ]
