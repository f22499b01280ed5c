"""
Reconciliation of booked hours against a prorated weekly quota.

A standard week has five working days. Public holidays remove days from
that expectation instead of penalizing staff, so the expected hours of a
week are ``weekly_quota / 5 * working_days``.
"""

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import AbstractSet, Dict, Iterable, List

from .domain import (
    HoursStatus,
    MonthHoursSummary,
    MonthWeekBreakdown,
    ScheduleDay,
    WeekHoursSummary,
)
from .time_blocks import total_minutes
from .working_days import (
    STANDARD_WORKING_DAYS,
    DateLike,
    is_working_day,
    monday_of,
    month_bounds,
    working_days_in_week,
)

logger = logging.getLogger(__name__)

# Figures are reported in hours rounded to this many decimals; the status
# comparison uses the rounded difference.
HOURS_PRECISION = 2


def round_hours(value: float) -> float:
    return round(value, HOURS_PRECISION) + 0.0


def daily_quota(weekly_quota: float) -> float:
    return weekly_quota / STANDARD_WORKING_DAYS


def expected_hours_for_week(
    weekly_quota: float, week_start: DateLike, holidays: AbstractSet[date]
) -> float:
    """Weekly quota prorated by the working days left in that week."""
    working_days = working_days_in_week(week_start, holidays)
    if not working_days:
        return 0.0
    return daily_quota(weekly_quota) * len(working_days)


def derive_status(difference: float) -> HoursStatus:
    if difference == 0:
        return HoursStatus.EXACT
    return HoursStatus.UNDER if difference < 0 else HoursStatus.OVER


def booked_minutes(day: ScheduleDay) -> int:
    if not day.is_working:
        return 0
    return total_minutes(day.time_blocks)


def summarize_week(
    weekly_quota: float,
    week_start: DateLike,
    days: Iterable[ScheduleDay],
    holidays: AbstractSet[date],
) -> WeekHoursSummary:
    """
    Expected versus booked hours for one user's week.

    Booked hours are split into hours on working days and hours on
    weekends or holidays, which feeds overtime reporting.
    """
    monday = monday_of(week_start)
    working_minutes = 0
    non_working_minutes = 0
    for day in days:
        if day.week_start != monday:
            continue
        minutes = booked_minutes(day)
        if not minutes:
            continue
        if is_working_day(day.calendar_date, holidays):
            working_minutes += minutes
        else:
            non_working_minutes += minutes

    expected = expected_hours_for_week(weekly_quota, monday, holidays)
    total_booked = (working_minutes + non_working_minutes) / 60
    difference = round_hours(total_booked - expected)

    summary = WeekHoursSummary(
        week_start=monday,
        weekly_quota=weekly_quota,
        expected_hours=round_hours(expected),
        total_booked=round_hours(total_booked),
        difference=difference,
        status=derive_status(difference),
        working_days_count=len(working_days_in_week(monday, holidays)),
        working_day_hours=round_hours(working_minutes / 60),
        weekend_or_holiday_hours=round_hours(non_working_minutes / 60),
    )
    logger.debug(
        "Computed week hours summary",
        extra={
            "week_start": monday.isoformat(),
            "expected_hours": summary.expected_hours,
            "total_booked": summary.total_booked,
            "status": summary.status.value,
        },
    )
    return summary


def summarize_month(
    weekly_quota: float,
    year: int,
    month: int,
    days: Iterable[ScheduleDay],
    holidays: AbstractSet[date],
) -> MonthHoursSummary:
    """
    Expected versus booked hours for a calendar month.

    Every week from the Monday of the month's first day to the Monday of
    its last day gets a breakdown entry. A week crossing the month boundary
    contributes only the days that fall inside the month, both to the
    expectation and to the booked hours, so a day is attributed to the
    month of its own date and never counted twice.
    """
    month_start, month_end = month_bounds(year, month)
    per_day_quota = daily_quota(weekly_quota)

    days_by_week: Dict[date, List[ScheduleDay]] = defaultdict(list)
    for day in days:
        days_by_week[day.week_start].append(day)

    weeks: List[MonthWeekBreakdown] = []
    expected_total = 0.0
    working_minutes_total = 0
    non_working_minutes_total = 0
    working_days_total = 0

    week_start = monday_of(month_start)
    last_week_start = monday_of(month_end)
    while week_start <= last_week_start:
        week_dates = [week_start + timedelta(days=i) for i in range(7)]
        in_month = [d for d in week_dates if month_start <= d <= month_end]
        working_in_month = [d for d in in_month if is_working_day(d, holidays)]

        working_minutes = 0
        non_working_minutes = 0
        for day in days_by_week.get(week_start, []):
            if not month_start <= day.calendar_date <= month_end:
                continue
            minutes = booked_minutes(day)
            if day.calendar_date in working_in_month:
                working_minutes += minutes
            else:
                non_working_minutes += minutes

        expected = per_day_quota * len(working_in_month)
        weeks.append(
            MonthWeekBreakdown(
                week_start=week_start,
                total_booked=round_hours(
                    (working_minutes + non_working_minutes) / 60
                ),
                working_booked=round_hours(working_minutes / 60),
                non_working_booked=round_hours(non_working_minutes / 60),
                working_days_count=len(working_in_month),
                days_in_month=len(in_month),
                expected_hours=round_hours(expected),
            )
        )

        expected_total += expected
        working_minutes_total += working_minutes
        non_working_minutes_total += non_working_minutes
        working_days_total += len(working_in_month)
        week_start += timedelta(days=7)

    total_booked = (working_minutes_total + non_working_minutes_total) / 60
    difference = round_hours(total_booked - expected_total)

    summary = MonthHoursSummary(
        year=year,
        month=month,
        weekly_quota=weekly_quota,
        working_days_count=working_days_total,
        expected_hours=round_hours(expected_total),
        total_booked=round_hours(total_booked),
        working_booked=round_hours(working_minutes_total / 60),
        weekend_or_holiday_hours=round_hours(non_working_minutes_total / 60),
        difference=difference,
        status=derive_status(difference),
        weeks=weeks,
    )
    logger.debug(
        "Computed month hours summary",
        extra={
            "year": year,
            "month": month,
            "week_count": len(weeks),
            "expected_hours": summary.expected_hours,
            "total_booked": summary.total_booked,
        },
    )
    return summary
