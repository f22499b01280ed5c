"""
Domain models for the working-time scheduling engine.

These models describe schedule days, time blocks, hours summaries and
calendar events, following the Pydantic v2 patterns used throughout the
codebase.
"""

from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional
import logging
import zoneinfo

from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
    computed_field,
    field_serializer,
    field_validator,
    model_validator,
)

logger = logging.getLogger(__name__)


# --- Enums ---


class Weekday(str, Enum):
    """Day of a Monday-based week."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def day_index(self) -> int:
        """Position in the week, Monday=0 .. Sunday=6."""
        return list(Weekday).index(self)

    @classmethod
    def from_index(cls, day_index: int) -> "Weekday":
        if not 0 <= day_index <= 6:
            raise ValueError(
                f"Invalid weekday index: {day_index}. Must be 0-6 "
                f"(Monday=0, Sunday=6)"
            )
        return list(cls)[day_index]

    @classmethod
    def for_date(cls, day: date) -> "Weekday":
        return cls.from_index(day.weekday())


class EmploymentType(str, Enum):
    """Employment type of a staff member; drives default week seeding."""

    FULL_TIME = "full_time"
    PART_TIME = "part_time"
    WORKING_STUDENT = "working_student"


class StaffRole(str, Enum):
    EMPLOYEE = "employee"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class HoursStatus(str, Enum):
    """Outcome of comparing booked hours against expected hours."""

    EXACT = "exact"
    UNDER = "under"
    OVER = "over"


class RecurrencePattern(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


# --- Staff and holidays ---


class StaffMember(BaseModel):
    """
    A user as seen by the scheduling engine. Owned by an external store;
    the engine only reads it.
    """

    user_id: str
    name: str
    email: Optional[str] = None
    role: StaffRole = Field(StaffRole.EMPLOYEE)
    employment_type: EmploymentType = Field(EmploymentType.FULL_TIME)
    weekly_quota: float = Field(
        40.0, ge=0, description="Target hours per 7-day week"
    )

    @property
    def is_admin(self) -> bool:
        return self.role in (StaffRole.ADMIN, StaffRole.SUPERADMIN)


class PublicHoliday(BaseModel):
    """A company-wide non-working day, matched by exact calendar date."""

    holiday_id: str
    date: date
    name: str
    region: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Holiday name cannot be empty")
        return stripped


class PublicHolidayRequest(BaseModel):
    date: date
    name: str
    region: Optional[str] = None


# --- Time blocks and schedule days ---


class TimeBlock(BaseModel):
    """
    A contiguous interval [start, end) of scheduled work on one calendar
    day, at minute resolution.
    """

    start: time
    end: time

    @field_validator("start", "end")
    @classmethod
    def truncate_to_minute(cls, v: time) -> time:
        return v.replace(second=0, microsecond=0, tzinfo=None)

    @model_validator(mode="after")
    def end_after_start(self) -> "TimeBlock":
        if self.end <= self.start:
            raise ValueError("Time block end must be after its start")
        return self

    @field_serializer("start", "end")
    def serialize_time(self, v: time) -> str:
        return v.strftime("%H:%M")

    @property
    def start_minutes(self) -> int:
        return self.start.hour * 60 + self.start.minute

    @property
    def end_minutes(self) -> int:
        return self.end.hour * 60 + self.end.minute

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes


class DayUpdate(BaseModel):
    """
    Requested state for one schedule day. Time values are raw strings and
    block entries are unvalidated; the sanitizer decides what survives.
    """

    is_working: bool = Field(
        False, validation_alias=AliasChoices("is_working", "isWorking")
    )
    start_time: Optional[str] = Field(
        None, validation_alias=AliasChoices("start_time", "startTime")
    )
    end_time: Optional[str] = Field(
        None, validation_alias=AliasChoices("end_time", "endTime")
    )
    time_blocks: Optional[List[Any]] = Field(
        None, validation_alias=AliasChoices("time_blocks", "timeBlocks")
    )


class ScheduleDay(BaseModel):
    """
    One (user, week, weekday) record. Created lazily on first view, then
    overwritten in place by day or week updates; never hard-deleted.
    """

    schedule_day_id: str
    user_id: str
    week_start: date = Field(..., description="Monday of the ISO week")
    weekday: Weekday
    is_working: bool = False
    time_blocks: List[TimeBlock] = Field(default_factory=list)
    last_updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="after")
    def blocks_only_when_working(self) -> "ScheduleDay":
        if not self.is_working and self.time_blocks:
            self.time_blocks = []
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def start_time(self) -> Optional[str]:
        """Start of the first block, kept for list views."""
        if not self.time_blocks:
            return None
        return self.time_blocks[0].start.strftime("%H:%M")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def end_time(self) -> Optional[str]:
        """End of the first block, kept for list views."""
        if not self.time_blocks:
            return None
        return self.time_blocks[0].end.strftime("%H:%M")

    @property
    def calendar_date(self) -> date:
        return self.week_start + timedelta(days=self.weekday.day_index)


# --- Hours summaries ---


class WeekHoursSummary(BaseModel):
    """Booked versus expected hours for one week. Never persisted."""

    week_start: date
    weekly_quota: float
    expected_hours: float
    total_booked: float
    difference: float
    status: HoursStatus
    working_days_count: int
    working_day_hours: float
    weekend_or_holiday_hours: float


class MonthWeekBreakdown(BaseModel):
    """The in-month share of one week that intersects a month."""

    week_start: date
    total_booked: float
    working_booked: float
    non_working_booked: float
    working_days_count: int
    days_in_month: int
    expected_hours: float


class MonthHoursSummary(BaseModel):
    year: int
    month: int = Field(..., ge=1, le=12)
    weekly_quota: float
    working_days_count: int
    expected_hours: float
    total_booked: float
    working_booked: float
    weekend_or_holiday_hours: float
    difference: float
    status: HoursStatus
    weeks: List[MonthWeekBreakdown] = Field(default_factory=list)


class StaffHoursOverview(BaseModel):
    """One row of the admin overview of the current week."""

    user_id: str
    name: str
    role: StaffRole
    employment_type: EmploymentType
    weekly_quota: float
    current_week_hours: float
    status: HoursStatus


class AuditEntry(BaseModel):
    """A single audit-trail record handed to the audit sink."""

    action: str
    actor_id: str
    entity_type: str
    entity_id: str
    details: Dict[str, Any] = Field(default_factory=dict)
    target_user_id: Optional[str] = None
    week_start: Optional[date] = None
    recorded_at: Optional[datetime] = None


# --- Calendar events ---


class Attachment(BaseModel):
    url: str
    filename: Optional[str] = None
    content_type: Optional[str] = None


class Recurrence(BaseModel):
    """Recurrence rule of a calendar event."""

    pattern: RecurrencePattern = Field(RecurrencePattern.WEEKLY)
    interval: int = Field(1, ge=1)
    end_date: Optional[datetime] = None

    @model_validator(mode="after")
    def normalize_biweekly(self) -> "Recurrence":
        # biweekly is stored as weekly with an interval of at least two
        if self.pattern == RecurrencePattern.BIWEEKLY:
            self.pattern = RecurrencePattern.WEEKLY
            self.interval = max(2, self.interval)
        return self


class CalendarEvent(BaseModel):
    """
    A meeting, absence or other dated entry. Start and end instants are
    resolved from the request fields by the event resolver.
    """

    event_id: str
    owner_id: str
    title: str
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    all_day: bool = False
    event_type: str = "Termin"
    color: Optional[str] = None
    location: Optional[str] = None
    attendees: List[str] = Field(default_factory=list)
    attachments: List[Attachment] = Field(default_factory=list)
    priority: str = "medium"
    status: str = "confirmed"
    category: str = "work"
    reminder: int = Field(15, ge=0, description="Minutes before start")
    notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    recurrence: Optional[Recurrence] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def ensure_timezone_aware(cls, v: datetime) -> datetime:
        """Ensure datetime fields are timezone-aware."""
        if v.tzinfo is None:
            logger.warning(f"Converting naive datetime {v} to UTC")
            return v.replace(tzinfo=zoneinfo.ZoneInfo("UTC"))
        return v

    @field_validator("end_time")
    @classmethod
    def end_time_not_before_start(cls, v: datetime, info: Any) -> datetime:
        """Fall back to the start instant when end precedes it."""
        if "start_time" in info.data and v < info.data["start_time"]:
            logger.warning(
                f"End time {v} precedes start, falling back to start time"
            )
            start_time: datetime = info.data["start_time"]
            return start_time
        return v

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Event title cannot be empty")
        return stripped

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time


class EventRequest(BaseModel):
    """
    Create or update request for a calendar event as received at the
    boundary. Accepts both snake_case and camelCase field names.
    """

    title: str
    description: Optional[str] = None
    start_date: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("start_date", "startDate", "start"),
    )
    end_date: Optional[str] = Field(
        None, validation_alias=AliasChoices("end_date", "endDate", "end")
    )
    start_time: Optional[str] = Field(
        None, validation_alias=AliasChoices("start_time", "startTime")
    )
    end_time: Optional[str] = Field(
        None, validation_alias=AliasChoices("end_time", "endTime")
    )
    all_day: bool = Field(
        False, validation_alias=AliasChoices("all_day", "allDay", "isAllDay")
    )
    event_type: str = Field(
        "Termin",
        validation_alias=AliasChoices("event_type", "eventType", "type"),
    )
    color: Optional[str] = None
    location: Optional[str] = None
    attendees: List[str] = Field(default_factory=list)
    attachments: List[Attachment] = Field(default_factory=list)
    priority: str = "medium"
    status: str = "confirmed"
    category: str = "work"
    reminder: int = Field(15, ge=0)
    notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    is_recurring: bool = Field(
        False, validation_alias=AliasChoices("is_recurring", "isRecurring")
    )
    recurrence_pattern: Optional[RecurrencePattern] = Field(
        None,
        validation_alias=AliasChoices(
            "recurrence_pattern", "recurrencePattern"
        ),
    )
    recurrence_interval: int = Field(
        1,
        ge=1,
        validation_alias=AliasChoices(
            "recurrence_interval", "recurrenceInterval"
        ),
    )
    recurrence_end_date: Optional[datetime] = Field(
        None,
        validation_alias=AliasChoices(
            "recurrence_end_date", "recurrenceEndDate"
        ),
    )

    def build_recurrence(self) -> Optional[Recurrence]:
        if not self.is_recurring:
            return None
        return Recurrence(
            pattern=self.recurrence_pattern or RecurrencePattern.WEEKLY,
            interval=self.recurrence_interval,
            end_date=self.recurrence_end_date,
        )


class EventOccurrence(BaseModel):
    """A concrete instance of an event inside a requested window."""

    occurrence_id: str
    event: CalendarEvent
    start_time: datetime
    end_time: datetime
    is_occurrence: bool = False
    recurrence_parent_id: Optional[str] = None
