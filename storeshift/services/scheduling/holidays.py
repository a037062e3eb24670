"""
Holiday calendar.
Pure functions of the year; nothing is cached.
"""

from datetime import date, timedelta
from typing import Optional

from .types import Holiday


def easter_sunday(year: int) -> date:
    """Easter Sunday via the anonymous Gregorian algorithm."""
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


def thanksgiving(year: int) -> date:
    """Fourth Thursday of November."""
    november_first = date(year, 11, 1)
    days_until_thursday = (3 - november_first.weekday()) % 7
    return november_first + timedelta(days=days_until_thursday + 21)


def holidays_for_year(year: int) -> list[Holiday]:
    return [
        Holiday(day=easter_sunday(year), name="Easter"),
        Holiday(day=thanksgiving(year), name="Thanksgiving"),
        Holiday(day=date(year, 12, 25), name="Christmas"),
    ]


def holiday_name(day: date) -> Optional[str]:
    """Name of the holiday falling on day, or None."""
    for holiday in holidays_for_year(day.year):
        if holiday.day == day:
            return holiday.name
    return None


def holidays_in_range(start: date, end: date) -> list[Holiday]:
    """All holidays between start and end inclusive."""
    found = []
    for year in range(start.year, end.year + 1):
        for holiday in holidays_for_year(year):
            if start <= holiday.day <= end:
                found.append(holiday)
    return found
