"""
Period Resolution Tests
=======================

Every report and listing turns a period request into an inclusive date pair.
"""

from datetime import date

import pytest

from errors import InvalidPeriodError, ValidationError
from utils.periods import resolve_period, parse_month, month_range, quarter_range


class TestResolvePeriod:

    def test_monthly_covers_whole_month(self):
        assert resolve_period("monthly", year=2025, month=1) == (date(2025, 1, 1), date(2025, 1, 31))

    def test_monthly_leap_february(self):
        assert month_range(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
        assert month_range(2025, 2) == (date(2025, 2, 1), date(2025, 2, 28))

    @pytest.mark.parametrize("quarter, expected", [
        (1, (date(2025, 1, 1), date(2025, 3, 31))),
        (2, (date(2025, 4, 1), date(2025, 6, 30))),
        (3, (date(2025, 7, 1), date(2025, 9, 30))),
        (4, (date(2025, 10, 1), date(2025, 12, 31))),
    ])
    def test_quarters(self, quarter, expected):
        assert quarter_range(2025, quarter) == expected
        assert resolve_period("quarterly", year=2025, quarter=quarter) == expected

    def test_yearly(self):
        assert resolve_period("yearly", year=2024) == (date(2024, 1, 1), date(2024, 12, 31))

    def test_custom_passes_dates_through(self):
        start, end = date(2025, 3, 5), date(2025, 4, 2)
        assert resolve_period("custom", start_date=start, end_date=end) == (start, end)

    def test_period_name_is_case_insensitive(self):
        assert resolve_period(" Monthly ", year=2025, month=6)[0] == date(2025, 6, 1)

    @pytest.mark.parametrize("kwargs", [
        {"period": "monthly", "year": 2025, "month": 13},
        {"period": "monthly", "year": 2025, "month": 0},
        {"period": "monthly", "year": 2025},
        {"period": "quarterly", "year": 2025, "quarter": 5},
        {"period": "quarterly", "year": 2025, "quarter": 0},
        {"period": "yearly", "year": 0},
        {"period": "yearly"},
        {"period": "weekly", "year": 2025},
        {"period": "custom", "start_date": date(2025, 1, 1)},
        {"period": "custom", "start_date": date(2025, 2, 1), "end_date": date(2025, 1, 1)},
    ])
    def test_invalid_requests_raise(self, kwargs):
        with pytest.raises(InvalidPeriodError):
            resolve_period(**kwargs)

    def test_invalid_period_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            resolve_period("monthly", year=2025, month=42)


class TestParseMonth:

    def test_valid_month(self):
        assert parse_month("2025-02") == (date(2025, 2, 1), date(2025, 2, 28))

    @pytest.mark.parametrize("value", ["2025-2", "202502", "Feb 2025", "", "2025-02-01"])
    def test_bad_format(self, value):
        with pytest.raises(ValidationError):
            parse_month(value)

    def test_out_of_range_month(self):
        with pytest.raises(InvalidPeriodError):
            parse_month("2025-13")
