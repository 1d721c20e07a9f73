"""Date difference and date shifting.

``diff_days`` reports an approximate years/months/days breakdown built from
fixed 365-day years and 30-day months. It is a display approximation and is
not calendar-exact across leap years or months of other lengths.
``add_period`` on the other hand is calendar-aware.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Union

from dateutil.relativedelta import relativedelta

from calc.errors import FormatError, ValidationError


DAYS_PER_YEAR = 365
DAYS_PER_MONTH = 30
SECONDS_PER_DAY = 86400

PERIOD_UNITS = ('days', 'months', 'years')

DateLike = Union[str, date, datetime]


@dataclass
class DateDifference:
    """Whole-day distance between two dates with an approximate breakdown."""
    total_days: int
    years: int
    months: int
    days: int

    def describe(self) -> str:
        return f"{self.years} years, {self.months} months, {self.days} days"


def parse_date(value: DateLike) -> datetime:
    """Parse an ISO date (``YYYY-MM-DD``) or pass through a date/datetime.

    Raises:
        FormatError: If the text is not a valid ISO date
    """
    if isinstance(value, datetime):
        return _naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        raise FormatError(f"Invalid date: {value!r}")
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        raise FormatError(f"Invalid date format: '{value}'")
    return _naive_utc(parsed)


def _naive_utc(value: datetime) -> datetime:
    # Offset-aware values are compared in UTC so they mix with naive ones
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def diff_days(first: DateLike, second: DateLike) -> DateDifference:
    """Absolute difference between two dates.

    The whole-day count is the ceiling of the elapsed time in days. The
    breakdown uses ``years = d // 365``, ``months = (d % 365) // 30`` and
    ``days = d % 30``.
    """
    d1 = parse_date(first)
    d2 = parse_date(second)
    seconds = abs((d2 - d1).total_seconds())
    total = math.ceil(seconds / SECONDS_PER_DAY)
    return DateDifference(
        total_days=total,
        years=total // DAYS_PER_YEAR,
        months=(total % DAYS_PER_YEAR) // DAYS_PER_MONTH,
        days=total % DAYS_PER_MONTH,
    )


def add_period(start: DateLike, amount: Any, unit: str) -> date:
    """Shift a date by a number of days, months or years.

    Month and year shifts keep the day of month, clamped to the last day of
    the target month (``2024-01-31 + 1 month`` is ``2024-02-29``).

    Args:
        start: Starting date
        amount: Whole number of units; negative shifts backwards
        unit: One of ``days``, ``months``, ``years``

    Returns:
        The shifted date

    Raises:
        ValidationError: Non-integer amount, unknown unit, or a result
            outside the supported date range
    """
    value = parse_date(start)
    if isinstance(amount, bool) or not isinstance(amount, int):
        if isinstance(amount, float) and amount.is_integer():
            amount = int(amount)
        else:
            raise ValidationError(f"Amount must be a whole number: {amount!r}")
    unit = (unit or '').lower()
    if unit not in PERIOD_UNITS:
        raise ValidationError(f"Unit must be one of {', '.join(PERIOD_UNITS)}")

    try:
        shifted = value + relativedelta(**{unit: amount})
    except (ValueError, OverflowError):
        raise ValidationError("Resulting date is out of range")
    return shifted.date()


def subtract_period(start: DateLike, amount: Any, unit: str) -> date:
    """Shift a date backwards; see ``add_period``."""
    if isinstance(amount, (int, float)) and not isinstance(amount, bool):
        return add_period(start, -amount, unit)
    return add_period(start, amount, unit)
