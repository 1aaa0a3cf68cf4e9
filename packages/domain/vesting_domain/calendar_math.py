"""Proleptic Gregorian calendar arithmetic on integer timestamps.

Timestamps are seconds from 1970-01-01T00:00:00 with no timezone. Dates are
converted through a day number (days since 1970-01-01) using 400-year era
arithmetic, so the functions are exact for any integer input, including
times before the epoch and years outside datetime's 1..9999 range.

Used to generate the unlock dates of Monthly pools.
"""

from typing import Tuple

from .schemas.base import SECONDS_PER_DAY

DAYS_PER_ERA = 146_097  # days in 400 Gregorian years
EPOCH_SHIFT = 719_468  # days from 0000-03-01 to 1970-01-01

_MONTH_LENGTHS = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


def is_leap_year(year: int) -> bool:
    """Gregorian leap-year rule: every 4th year, except centuries not divisible by 400."""
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_month(year: int, month: int) -> int:
    """Number of days in a month (month is 1-based)."""
    if month == 2 and is_leap_year(year):
        return 29
    return _MONTH_LENGTHS[month - 1]


def days_from_civil(year: int, month: int, day: int) -> int:
    """Convert a civil date to days since 1970-01-01.

    Args:
        year: Proleptic Gregorian year (may be zero or negative)
        month: 1..12
        day: 1..days_in_month(year, month)

    Returns:
        Day number (negative before the epoch)

    Example:
        days_from_civil(1970, 1, 1) -> 0
        days_from_civil(2000, 3, 1) -> 11017
    """
    # Shift the year so it starts in March; the leap day is then the last day
    if month <= 2:
        year -= 1
    era = year // 400
    year_of_era = year - era * 400
    month_from_march = month - 3 if month > 2 else month + 9
    day_of_year = (153 * month_from_march + 2) // 5 + day - 1
    day_of_era = year_of_era * 365 + year_of_era // 4 - year_of_era // 100 + day_of_year
    return era * DAYS_PER_ERA + day_of_era - EPOCH_SHIFT


def civil_from_days(days: int) -> Tuple[int, int, int]:
    """Convert days since 1970-01-01 to a civil (year, month, day).

    Inverse of days_from_civil.
    """
    shifted = days + EPOCH_SHIFT
    era = shifted // DAYS_PER_ERA
    day_of_era = shifted - era * DAYS_PER_ERA
    year_of_era = (
        day_of_era
        - day_of_era // 1460
        + day_of_era // 36524
        - day_of_era // 146096
    ) // 365
    day_of_year = day_of_era - (365 * year_of_era + year_of_era // 4 - year_of_era // 100)
    month_from_march = (5 * day_of_year + 2) // 153
    day = day_of_year - (153 * month_from_march + 2) // 5 + 1
    month = month_from_march + 3 if month_from_march < 10 else month_from_march - 9
    year = year_of_era + era * 400
    if month <= 2:
        year += 1
    return year, month, day


def to_civil(timestamp: int) -> Tuple[int, int, int]:
    """Calendar date of a timestamp."""
    return civil_from_days(timestamp // SECONDS_PER_DAY)


def from_civil(year: int, month: int, day: int, seconds_of_day: int = 0) -> int:
    """Timestamp of a calendar date, optionally offset into the day."""
    return days_from_civil(year, month, day) * SECONDS_PER_DAY + seconds_of_day


def add_months(timestamp: int, months: int) -> int:
    """Add calendar months to a timestamp.

    The month is advanced with carry into the year, the day-of-month is
    clamped to the target month's length, and the time of day is preserved.

    Args:
        timestamp: Seconds since the epoch
        months: Months to add (may be negative)

    Returns:
        Shifted timestamp

    Example:
        2024-01-31 12:00 + 1 month -> 2024-02-29 12:00
        2023-01-31 12:00 + 1 month -> 2023-02-28 12:00
        2024-11-15 + 3 months      -> 2025-02-15
    """
    days, seconds_of_day = divmod(timestamp, SECONDS_PER_DAY)
    year, month, day = civil_from_days(days)

    month_index = year * 12 + (month - 1) + months
    new_year, new_month_zero = divmod(month_index, 12)
    new_month = new_month_zero + 1
    new_day = min(day, days_in_month(new_year, new_month))

    return days_from_civil(new_year, new_month, new_day) * SECONDS_PER_DAY + seconds_of_day
