"""
Defines the repository protocols for the scheduling engine's collaborators.

The engine owns none of this storage: staff records, holidays, schedule
days, events, the broadcast channel and the audit trail all sit behind
these interfaces.
"""

from datetime import date, datetime
from typing import (
    AbstractSet,
    Any,
    Dict,
    List,
    Optional,
    Protocol,
    runtime_checkable,
)

from .domain import (
    AuditEntry,
    CalendarEvent,
    PublicHoliday,
    ScheduleDay,
    StaffMember,
    Weekday,
)


@runtime_checkable
class StaffRepository(Protocol):
    """Protocol for read access to staff records, quota and role."""

    async def get_staff_member(self, user_id: str) -> Optional[StaffMember]:
        """Retrieves a staff member by user id."""
        ...

    async def list_staff(self) -> List[StaffMember]:
        """Lists all active staff members."""
        ...


@runtime_checkable
class HolidayRepository(Protocol):
    """
    Protocol for the public holiday store.

    Lookups are by exact calendar date; callers fetch the set for a whole
    range once and pass it down.
    """

    async def get_public_holidays(
        self, start_date: date, end_date: date
    ) -> AbstractSet[date]:
        """Returns the holiday dates within the inclusive range."""
        ...

    async def list_holidays(self, year: int) -> List[PublicHoliday]:
        """Lists holiday records of a year ordered by date."""
        ...

    async def get_holiday(self, holiday_id: str) -> Optional[PublicHoliday]:
        ...

    async def save_holidays(self, holidays: List[PublicHoliday]) -> None:
        """Stores holidays as one unit; nothing is stored on failure."""
        ...

    async def delete_holiday(self, holiday_id: str) -> bool:
        """Deletes a holiday, returning False when it did not exist."""
        ...

    async def generate_holiday_id(self) -> str:
        ...


@runtime_checkable
class ScheduleDayRepository(Protocol):
    """
    Protocol for schedule day records keyed by (user, week, weekday).
    """

    async def get_week(
        self, user_id: str, week_start: date
    ) -> List[ScheduleDay]:
        """Retrieves the stored days of a week ordered Monday..Sunday."""
        ...

    async def get_day(
        self, user_id: str, week_start: date, weekday: Weekday
    ) -> Optional[ScheduleDay]:
        ...

    async def save_day(self, day: ScheduleDay) -> None:
        """Upserts a single day record by its key."""
        ...

    async def save_week(self, days: List[ScheduleDay]) -> None:
        """
        Upserts all given days of one week atomically: either every record
        is written or none is.
        """
        ...

    async def insert_missing_days(self, days: List[ScheduleDay]) -> None:
        """
        Inserts the given days atomically, leaving any record that already
        exists under the same key untouched.
        """
        ...

    async def get_days_in_range(
        self, user_id: str, start_date: date, end_date: date
    ) -> List[ScheduleDay]:
        """Retrieves all stored days whose week starts within the range."""
        ...


@runtime_checkable
class CalendarEventRepository(Protocol):
    """Protocol for calendar event persistence."""

    async def get_event(self, event_id: str) -> Optional[CalendarEvent]:
        ...

    async def save_event(self, event: CalendarEvent) -> None:
        """Creates or replaces an event."""
        ...

    async def delete_event(self, event_id: str) -> bool:
        """Deletes an event, returning False when it did not exist."""
        ...

    async def list_events(
        self, owner_id: str, start: datetime, end: datetime
    ) -> List[CalendarEvent]:
        """
        Lists events of an owner that overlap the window, plus recurring
        events that started before the window end.
        """
        ...

    async def generate_event_id(self) -> str:
        ...


@runtime_checkable
class BroadcastRepository(Protocol):
    """Protocol for the fire-and-forget real-time notification channel."""

    async def publish(self, event_name: str, payload: Dict[str, Any]) -> None:
        ...


@runtime_checkable
class AuditRepository(Protocol):
    """Protocol for the audit trail sink."""

    async def record(self, entry: AuditEntry) -> None:
        ...

    async def list_week_entries(
        self, user_id: str, week_start: date
    ) -> List[AuditEntry]:
        """Lists schedule audit entries of one user's week, newest first."""
        ...
