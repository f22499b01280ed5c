"""
Pydantic models for API responses.
These define the contract between the API and external clients; field
names are serialized in camelCase.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from worktime.domain import (
    AuditEntry,
    CalendarEvent,
    EventOccurrence,
    PublicHoliday,
    ScheduleDay,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthCheckResponse(BaseModel):
    status: str
    version: str


class ErrorResponse(BaseModel):
    error: str
    field: Optional[str] = None


class TimeBlockResponse(BaseModel):
    start: str
    end: str


class ScheduleDayResponse(CamelModel):
    """One day of a week view."""

    id: str
    user_id: str
    week_start: date
    day_of_week: int = Field(..., description="Monday=0 .. Sunday=6")
    weekday: str
    date: date
    is_working: bool
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    time_blocks: List[TimeBlockResponse] = Field(default_factory=list)
    last_updated_by: Optional[str] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, day: ScheduleDay) -> "ScheduleDayResponse":
        return cls(
            id=day.schedule_day_id,
            user_id=day.user_id,
            week_start=day.week_start,
            day_of_week=day.weekday.day_index,
            weekday=day.weekday.value,
            date=day.calendar_date,
            is_working=day.is_working,
            start_time=day.start_time,
            end_time=day.end_time,
            time_blocks=[
                TimeBlockResponse(**block.model_dump())
                for block in day.time_blocks
            ],
            last_updated_by=day.last_updated_by,
            updated_at=day.updated_at,
        )


class WeekScheduleResponse(CamelModel):
    user_id: str
    week_start: date
    days: List[ScheduleDayResponse]


class WeekHoursSummaryResponse(CamelModel):
    week_start: date
    weekly_quota: float
    expected_hours: float
    total_booked: float
    difference: float
    status: str
    working_days_count: int
    working_day_hours: float
    weekend_or_holiday_hours: float


class MonthWeekBreakdownResponse(CamelModel):
    week_start: date
    total_booked: float
    working_booked: float
    non_working_booked: float
    working_days_count: int
    days_in_month: int
    expected_hours: float


class MonthHoursSummaryResponse(CamelModel):
    year: int
    month: int
    weekly_quota: float
    working_days_count: int
    expected_hours: float
    total_booked: float
    working_booked: float
    weekend_or_holiday_hours: float
    difference: float
    status: str
    weeks: List[MonthWeekBreakdownResponse]


class StaffHoursOverviewResponse(CamelModel):
    user_id: str
    name: str
    role: str
    employment_type: str
    weekly_quota: float
    current_week_hours: float
    status: str


class AuditEntryResponse(CamelModel):
    action: str
    actor_id: str
    entity_type: str
    entity_id: str
    details: Dict[str, Any] = Field(default_factory=dict)
    recorded_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, entry: AuditEntry) -> "AuditEntryResponse":
        return cls.model_validate(entry.model_dump())


class PublicHolidayResponse(CamelModel):
    id: str
    date: date
    name: str
    region: Optional[str] = None

    @classmethod
    def from_domain(cls, holiday: PublicHoliday) -> "PublicHolidayResponse":
        return cls(
            id=holiday.holiday_id,
            date=holiday.date,
            name=holiday.name,
            region=holiday.region,
        )


class CalendarEventResponse(CamelModel):
    """An event or one expanded occurrence of a recurring event."""

    id: str
    title: str
    description: Optional[str] = None
    start: datetime
    end: datetime
    all_day: bool
    event_type: str
    color: Optional[str] = None
    location: Optional[str] = None
    attendees: List[str] = Field(default_factory=list)
    attachments: List[Dict[str, Any]] = Field(default_factory=list)
    priority: str
    status: str
    category: str
    reminder: int
    notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    is_recurring: bool = False
    recurrence_pattern: Optional[str] = None
    recurrence_interval: Optional[int] = None
    recurrence_end_date: Optional[datetime] = None
    is_occurrence: bool = False
    recurrence_parent_id: Optional[str] = None

    @classmethod
    def from_occurrence(
        cls, occurrence: EventOccurrence
    ) -> "CalendarEventResponse":
        event = occurrence.event
        recurrence = event.recurrence
        return cls(
            id=occurrence.occurrence_id,
            title=event.title,
            description=event.description,
            start=occurrence.start_time,
            end=occurrence.end_time,
            all_day=event.all_day,
            event_type=event.event_type,
            color=event.color,
            location=event.location,
            attendees=event.attendees,
            attachments=[a.model_dump() for a in event.attachments],
            priority=event.priority,
            status=event.status,
            category=event.category,
            reminder=event.reminder,
            notes=event.notes,
            tags=event.tags,
            is_recurring=recurrence is not None,
            recurrence_pattern=recurrence.pattern.value if recurrence else None,
            recurrence_interval=recurrence.interval if recurrence else None,
            recurrence_end_date=recurrence.end_date if recurrence else None,
            is_occurrence=occurrence.is_occurrence,
            recurrence_parent_id=occurrence.recurrence_parent_id,
        )

    @classmethod
    def from_event(cls, event: CalendarEvent) -> "CalendarEventResponse":
        return cls.from_occurrence(
            EventOccurrence(
                occurrence_id=event.event_id,
                event=event,
                start_time=event.start_time,
                end_time=event.end_time,
            )
        )
