"""
Holiday- and weekend-aware business-day arithmetic.

Weeks start on Monday. Holiday sets are fetched once by the caller for the
whole range and passed in; nothing here touches a store.
"""

import calendar
from datetime import date, datetime, time, timedelta
from typing import AbstractSet, Iterator, List, Tuple, Union

DateLike = Union[date, datetime, str]

STANDARD_WORKING_DAYS = 5


def to_calendar_date(value: DateLike) -> date:
    """Normalize a date, datetime or ISO string to a calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Not a date: {value!r}")
    return datetime.fromisoformat(value.strip()).date()


def monday_of(value: DateLike) -> date:
    """Monday of the week containing ``value``, time of day truncated."""
    day = to_calendar_date(value)
    # isoweekday: Monday=1 .. Sunday=7
    weekday = day.isoweekday()
    offset = 6 if weekday == 7 else weekday - 1
    return day - timedelta(days=offset)


def sunday_of(value: DateLike) -> date:
    return monday_of(value) + timedelta(days=6)


def week_boundaries(value: DateLike) -> Tuple[datetime, datetime]:
    """Monday 00:00 to Sunday end-of-day of the week containing ``value``."""
    return (
        datetime.combine(monday_of(value), time.min),
        datetime.combine(sunday_of(value), time.max),
    )


def iso_week_number(value: DateLike) -> int:
    return to_calendar_date(value).isocalendar()[1]


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last calendar day of a month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Every date of the inclusive range [start, end]."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def is_weekend(value: DateLike) -> bool:
    return to_calendar_date(value).weekday() >= 5


def is_working_day(value: DateLike, holidays: AbstractSet[date]) -> bool:
    day = to_calendar_date(value)
    return not is_weekend(day) and day not in holidays


def working_days_in_week(
    week_start: DateLike, holidays: AbstractSet[date]
) -> List[date]:
    """
    Monday to Friday of the week, minus listed holidays. Weekend days are
    never included, whatever their holiday status.
    """
    monday = monday_of(week_start)
    weekdays = (
        monday + timedelta(days=i) for i in range(STANDARD_WORKING_DAYS)
    )
    return [day for day in weekdays if day not in holidays]


def count_working_days(
    start: DateLike, end: DateLike, holidays: AbstractSet[date]
) -> int:
    """Working days in the inclusive range; 0 when start is after end."""
    first, last = to_calendar_date(start), to_calendar_date(end)
    if first > last:
        return 0
    return sum(
        1 for day in iter_dates(first, last) if is_working_day(day, holidays)
    )
