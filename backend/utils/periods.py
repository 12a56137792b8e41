"""Date and reporting-period helpers shared by the reports and the cash views."""

import calendar
import os
import re
from datetime import date, datetime, timedelta
from typing import Optional, Tuple

import pytz
from dotenv import load_dotenv

from errors import InvalidPeriodError, ValidationError

load_dotenv()

APP_TIMEZONE = os.getenv("APP_TIMEZONE", "Asia/Dhaka")

PERIOD_MONTHLY = "monthly"
PERIOD_QUARTERLY = "quarterly"
PERIOD_YEARLY = "yearly"
PERIOD_CUSTOM = "custom"
VALID_PERIODS = [PERIOD_MONTHLY, PERIOD_QUARTERLY, PERIOD_YEARLY, PERIOD_CUSTOM]

MONTH_PATTERN = re.compile(r"^\d{4}-\d{2}$")


def now_local() -> datetime:
    return datetime.now(pytz.timezone(APP_TIMEZONE))


def today_local() -> date:
    return now_local().date()


def _check_year(year: Optional[int]) -> int:
    if year is None:
        raise InvalidPeriodError("year is required")
    if year < 1 or year > 9999:
        raise InvalidPeriodError(f"Invalid year: {year}")
    return year


def month_range(year: int, month: int) -> Tuple[date, date]:
    _check_year(year)
    if month is None or month < 1 or month > 12:
        raise InvalidPeriodError(f"Invalid month: {month}")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def quarter_range(year: int, quarter: int) -> Tuple[date, date]:
    """Quarter q spans months 3(q-1)+1 .. 3(q-1)+3."""
    _check_year(year)
    if quarter is None or quarter < 1 or quarter > 4:
        raise InvalidPeriodError(f"Invalid quarter: {quarter}")
    first_month = 3 * (quarter - 1) + 1
    start, _ = month_range(year, first_month)
    _, end = month_range(year, first_month + 2)
    return start, end


def year_range(year: int) -> Tuple[date, date]:
    _check_year(year)
    return date(year, 1, 1), date(year, 12, 31)


def resolve_period(
    period: str,
    year: Optional[int] = None,
    month: Optional[int] = None,
    quarter: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Tuple[date, date]:
    """
    Turn a period request into a canonical inclusive (start, end) date pair.

    Args:
        period: one of monthly, quarterly, yearly, custom
        year: required for the calendar based periods
        month: 1-12, monthly only
        quarter: 1-4, quarterly only
        start_date, end_date: custom only, both required

    Raises:
        InvalidPeriodError: unknown period or out-of-range values
    """
    period = (period or "").strip().lower()
    if period == PERIOD_MONTHLY:
        return month_range(year, month)
    if period == PERIOD_QUARTERLY:
        return quarter_range(year, quarter)
    if period == PERIOD_YEARLY:
        return year_range(year)
    if period == PERIOD_CUSTOM:
        if start_date is None or end_date is None:
            raise InvalidPeriodError("start_date and end_date are required for a custom period")
        if start_date > end_date:
            raise InvalidPeriodError("start_date must not be after end_date")
        return start_date, end_date
    raise InvalidPeriodError(f"period must be one of {VALID_PERIODS}")


def parse_month(value: str) -> Tuple[date, date]:
    """Bounds of a 'YYYY-MM' month string."""
    value = (value or "").strip()
    if not MONTH_PATTERN.match(value):
        raise ValidationError("Invalid month format (use YYYY-MM)")
    year, month = value.split("-")
    return month_range(int(year), int(month))


def days_back(anchor: date, days: int) -> date:
    return anchor - timedelta(days=days)
