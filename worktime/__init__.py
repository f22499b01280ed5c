"""
Working-time scheduling package.

Sanitizes daily time blocks, does holiday-aware business-day arithmetic and
reconciles booked hours against a prorated weekly quota, following Clean
Architecture principles.
"""

from .domain import (
    CalendarEvent,
    DayUpdate,
    EmploymentType,
    EventRequest,
    HoursStatus,
    MonthHoursSummary,
    PublicHoliday,
    Recurrence,
    RecurrencePattern,
    ScheduleDay,
    StaffMember,
    StaffRole,
    TimeBlock,
    WeekHoursSummary,
    Weekday,
)
from .events import (
    duplicate_event,
    event_color,
    expand_recurring_events,
    resolve_event_times,
)
from .exceptions import (
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    ScheduleValidationError,
    WorktimeError,
)
from .hours import (
    derive_status,
    expected_hours_for_week,
    summarize_month,
    summarize_week,
)
from .time_blocks import merge_time_blocks, sanitize_time_blocks, total_hours
from .working_days import (
    count_working_days,
    is_weekend,
    is_working_day,
    monday_of,
    sunday_of,
    working_days_in_week,
)

__all__ = [
    # Core models
    "CalendarEvent",
    "DayUpdate",
    "EmploymentType",
    "EventRequest",
    "HoursStatus",
    "MonthHoursSummary",
    "PublicHoliday",
    "Recurrence",
    "RecurrencePattern",
    "ScheduleDay",
    "StaffMember",
    "StaffRole",
    "TimeBlock",
    "WeekHoursSummary",
    "Weekday",
    # Time blocks
    "merge_time_blocks",
    "sanitize_time_blocks",
    "total_hours",
    # Working-day calendar
    "count_working_days",
    "is_weekend",
    "is_working_day",
    "monday_of",
    "sunday_of",
    "working_days_in_week",
    # Hours reconciliation
    "derive_status",
    "expected_hours_for_week",
    "summarize_month",
    "summarize_week",
    # Calendar events
    "duplicate_event",
    "event_color",
    "expand_recurring_events",
    "resolve_event_times",
    # Errors
    "NotFoundError",
    "PermissionDeniedError",
    "PersistenceError",
    "ScheduleValidationError",
    "WorktimeError",
]
