"""
Defines the use cases of the working-time scheduling engine.

Use cases depend only on the repository protocols. They load the acting
user, enforce who may touch which schedule, fetch holidays once per request
and hand the data to the pure calendar, sanitizer and reconciliation
functions. Writes are wrapped so that store failures surface as
PersistenceError; broadcast and audit happen after a successful write and
never undo it.
"""

import logging
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Any, Awaitable, Dict, List, Optional, TypeVar

from .domain import (
    AuditEntry,
    CalendarEvent,
    DayUpdate,
    EventOccurrence,
    EventRequest,
    MonthHoursSummary,
    PublicHoliday,
    PublicHolidayRequest,
    ScheduleDay,
    StaffHoursOverview,
    StaffMember,
    StaffRole,
    WeekHoursSummary,
    Weekday,
)
from .events import build_event, duplicate_event, expand_recurring_events
from .exceptions import (
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    ScheduleValidationError,
    WorktimeError,
)
from .hours import summarize_month, summarize_week
from .repositories import (
    AuditRepository,
    BroadcastRepository,
    CalendarEventRepository,
    HolidayRepository,
    ScheduleDayRepository,
    StaffRepository,
)
from .schedule_days import (
    apply_day_update,
    normalize_week_days,
    schedule_day_key,
    seed_week,
)
from .validation import ensure_repository_protocol
from .working_days import month_bounds, monday_of, sunday_of

logger = logging.getLogger(__name__)

T = TypeVar("T")

DAY_UPDATED_EVENT = "schedule:day_updated"
WEEK_UPDATED_EVENT = "schedule:week_updated"


# --- Shared helpers ---


async def _load_staff(staff_repo: StaffRepository, user_id: str) -> StaffMember:
    member = await staff_repo.get_staff_member(user_id)
    if member is None:
        raise NotFoundError("StaffMember", user_id)
    return member


def _authorize_schedule_access(actor: StaffMember, target_user_id: str) -> None:
    """Staff may act on their own schedule; admins on anyone's."""
    if actor.user_id != target_user_id and not actor.is_admin:
        logger.warning(
            "Denied access to another user's schedule",
            extra={"actor_id": actor.user_id, "target_user_id": target_user_id},
        )
        raise PermissionDeniedError(
            "Only administrators may access another user's schedule"
        )


def _require_admin(actor: StaffMember) -> None:
    if not actor.is_admin:
        raise PermissionDeniedError("Administrator role required")


def _require_superadmin(actor: StaffMember) -> None:
    if actor.role != StaffRole.SUPERADMIN:
        raise PermissionDeniedError("Superadmin role required")


async def _persist(operation: Awaitable[T], action: str, **context: Any) -> T:
    """Await a store write, translating store failures to PersistenceError."""
    try:
        return await operation
    except WorktimeError:
        raise
    except Exception as e:
        logger.error(
            f"Failed to {action}",
            extra={**context, "error": str(e), "error_type": type(e).__name__},
            exc_info=True,
        )
        raise PersistenceError(f"Failed to {action}") from e


async def _after_write(
    broadcast_repo: BroadcastRepository,
    audit_repo: AuditRepository,
    event_name: str,
    payload: Dict[str, Any],
    entry: AuditEntry,
) -> None:
    """Record and announce a committed change without affecting it."""
    try:
        await audit_repo.record(entry)
    except Exception as e:
        logger.warning(
            "Failed to record audit entry",
            extra={"action": entry.action, "error": str(e)},
        )
    try:
        await broadcast_repo.publish(event_name, payload)
    except Exception as e:
        logger.warning(
            "Failed to broadcast schedule change",
            extra={"event_name": event_name, "error": str(e)},
        )


def _by_weekday(days: List[ScheduleDay]) -> List[ScheduleDay]:
    return sorted(days, key=lambda d: d.weekday.day_index)


# --- Schedule days ---


class ScheduleWeekUseCase:
    """
    Returns the seven schedule days of a user's week, seeding defaults from
    the employment type for days that were never stored.
    """

    def __init__(
        self,
        schedule_repo: ScheduleDayRepository,
        holiday_repo: HolidayRepository,
        staff_repo: StaffRepository,
    ):
        self.schedule_repo = ensure_repository_protocol(
            schedule_repo, ScheduleDayRepository
        )
        self.holiday_repo = ensure_repository_protocol(
            holiday_repo, HolidayRepository
        )
        self.staff_repo = ensure_repository_protocol(
            staff_repo, StaffRepository
        )

    async def execute(
        self, actor_id: str, user_id: str, week_start: date
    ) -> List[ScheduleDay]:
        actor = await _load_staff(self.staff_repo, actor_id)
        _authorize_schedule_access(actor, user_id)
        member = (
            actor
            if actor.user_id == user_id
            else await _load_staff(self.staff_repo, user_id)
        )
        monday = monday_of(week_start)

        stored = await self.schedule_repo.get_week(user_id, monday)
        if len(stored) == len(Weekday):
            return _by_weekday(stored)

        holidays = await self.holiday_repo.get_public_holidays(
            monday, sunday_of(monday)
        )
        present = {day.weekday for day in stored}
        missing = [
            day
            for day in seed_week(
                user_id, monday, member.employment_type, holidays, actor_id
            )
            if day.weekday not in present
        ]
        # Insert-only: a concurrent edit that lands first must win
        await _persist(
            self.schedule_repo.insert_missing_days(missing),
            "seed schedule week",
            user_id=user_id,
            week_start=monday.isoformat(),
        )
        logger.info(
            "Seeded schedule week",
            extra={
                "user_id": user_id,
                "week_start": monday.isoformat(),
                "seeded_days": len(missing),
            },
        )
        return await self.schedule_repo.get_week(user_id, monday)


class UpdateScheduleDayUseCase:
    """Overwrites one existing schedule day with a validated state."""

    def __init__(
        self,
        schedule_repo: ScheduleDayRepository,
        staff_repo: StaffRepository,
        broadcast_repo: BroadcastRepository,
        audit_repo: AuditRepository,
    ):
        self.schedule_repo = ensure_repository_protocol(
            schedule_repo, ScheduleDayRepository
        )
        self.staff_repo = ensure_repository_protocol(
            staff_repo, StaffRepository
        )
        self.broadcast_repo = ensure_repository_protocol(
            broadcast_repo, BroadcastRepository
        )
        self.audit_repo = ensure_repository_protocol(
            audit_repo, AuditRepository
        )

    async def execute(
        self,
        actor_id: str,
        user_id: str,
        week_start: date,
        weekday: Weekday,
        update: DayUpdate,
    ) -> ScheduleDay:
        actor = await _load_staff(self.staff_repo, actor_id)
        _authorize_schedule_access(actor, user_id)
        monday = monday_of(week_start)

        existing = await self.schedule_repo.get_day(user_id, monday, weekday)
        if existing is None:
            raise NotFoundError(
                "ScheduleDay", schedule_day_key(user_id, monday, weekday)
            )

        day = apply_day_update(
            user_id, monday, weekday, update, actor_id, existing=existing
        )
        await _persist(
            self.schedule_repo.save_day(day),
            "save schedule day",
            user_id=user_id,
            week_start=monday.isoformat(),
            weekday=weekday.value,
        )
        logger.info(
            "Schedule day updated",
            extra={
                "user_id": user_id,
                "actor_id": actor_id,
                "week_start": monday.isoformat(),
                "weekday": weekday.value,
                "block_count": len(day.time_blocks),
            },
        )

        await _after_write(
            self.broadcast_repo,
            self.audit_repo,
            DAY_UPDATED_EVENT,
            {
                "userId": user_id,
                "weekStart": monday.isoformat(),
                "dayOfWeek": weekday.day_index,
                "updatedBy": actor_id,
            },
            AuditEntry(
                action="schedule.day_updated",
                actor_id=actor_id,
                entity_type="schedule_day",
                entity_id=day.schedule_day_id,
                details={
                    "weekday": weekday.value,
                    "is_working": day.is_working,
                    "time_blocks": [
                        block.model_dump() for block in day.time_blocks
                    ],
                },
                target_user_id=user_id,
                week_start=monday,
                recorded_at=day.updated_at,
            ),
        )
        return day


class ReplaceScheduleWeekUseCase:
    """
    Replaces all seven days of a week as one unit. Every day is validated
    before anything is written, and the write itself is atomic.
    """

    def __init__(
        self,
        schedule_repo: ScheduleDayRepository,
        staff_repo: StaffRepository,
        broadcast_repo: BroadcastRepository,
        audit_repo: AuditRepository,
    ):
        self.schedule_repo = ensure_repository_protocol(
            schedule_repo, ScheduleDayRepository
        )
        self.staff_repo = ensure_repository_protocol(
            staff_repo, StaffRepository
        )
        self.broadcast_repo = ensure_repository_protocol(
            broadcast_repo, BroadcastRepository
        )
        self.audit_repo = ensure_repository_protocol(
            audit_repo, AuditRepository
        )

    async def execute(
        self, actor_id: str, user_id: str, week_start: date, days: Any
    ) -> List[ScheduleDay]:
        """
        Args:
            days: Mapping keyed by weekday, or a sequence ordered
                Monday..Sunday; exactly seven entries

        Raises:
            ScheduleValidationError: If the week is malformed or any working
                day has no valid block; nothing is written
            PersistenceError: If the atomic write fails; nothing is applied
        """
        actor = await _load_staff(self.staff_repo, actor_id)
        _authorize_schedule_access(actor, user_id)
        monday = monday_of(week_start)
        updates = normalize_week_days(days)

        existing = {
            day.weekday: day
            for day in await self.schedule_repo.get_week(user_id, monday)
        }
        now = datetime.now(timezone.utc)
        new_days = []
        for weekday in Weekday:
            try:
                new_days.append(
                    apply_day_update(
                        user_id,
                        monday,
                        weekday,
                        updates[weekday],
                        actor_id,
                        existing=existing.get(weekday),
                        now=now,
                    )
                )
            except ScheduleValidationError as e:
                raise ScheduleValidationError(
                    f"{weekday.value.capitalize()}: {e.message}",
                    field=f"days.{weekday.value}.{e.field or 'timeBlocks'}",
                ) from e

        await _persist(
            self.schedule_repo.save_week(new_days),
            "replace schedule week",
            user_id=user_id,
            week_start=monday.isoformat(),
        )
        logger.info(
            "Schedule week replaced",
            extra={
                "user_id": user_id,
                "actor_id": actor_id,
                "week_start": monday.isoformat(),
                "working_days": sum(1 for d in new_days if d.is_working),
            },
        )

        await _after_write(
            self.broadcast_repo,
            self.audit_repo,
            WEEK_UPDATED_EVENT,
            {
                "userId": user_id,
                "weekStart": monday.isoformat(),
                "updatedBy": actor_id,
            },
            AuditEntry(
                action="schedule.week_replaced",
                actor_id=actor_id,
                entity_type="schedule_week",
                entity_id=f"{user_id}:{monday.isoformat()}",
                details={
                    "working_days": [
                        d.weekday.value for d in new_days if d.is_working
                    ],
                },
                target_user_id=user_id,
                week_start=monday,
                recorded_at=now,
            ),
        )
        return new_days


# --- Hours ---


class HoursSummaryUseCase:
    """Week and month reconciliation of booked against expected hours."""

    def __init__(
        self,
        schedule_repo: ScheduleDayRepository,
        holiday_repo: HolidayRepository,
        staff_repo: StaffRepository,
    ):
        self.schedule_repo = ensure_repository_protocol(
            schedule_repo, ScheduleDayRepository
        )
        self.holiday_repo = ensure_repository_protocol(
            holiday_repo, HolidayRepository
        )
        self.staff_repo = ensure_repository_protocol(
            staff_repo, StaffRepository
        )

    async def _target(self, actor_id: str, user_id: str) -> StaffMember:
        actor = await _load_staff(self.staff_repo, actor_id)
        _authorize_schedule_access(actor, user_id)
        if actor.user_id == user_id:
            return actor
        return await _load_staff(self.staff_repo, user_id)

    async def week_summary(
        self, actor_id: str, user_id: str, week_start: date
    ) -> WeekHoursSummary:
        member = await self._target(actor_id, user_id)
        monday = monday_of(week_start)
        holidays = await self.holiday_repo.get_public_holidays(
            monday, sunday_of(monday)
        )
        days = await self.schedule_repo.get_week(user_id, monday)
        return summarize_week(member.weekly_quota, monday, days, holidays)

    async def month_summary(
        self, actor_id: str, user_id: str, year: int, month: int
    ) -> MonthHoursSummary:
        if not 1 <= month <= 12:
            raise ScheduleValidationError(
                f"Invalid month: {month}. Must be 1-12", field="month"
            )
        member = await self._target(actor_id, user_id)
        month_start, month_end = month_bounds(year, month)
        first_week, last_week = monday_of(month_start), monday_of(month_end)
        holidays = await self.holiday_repo.get_public_holidays(
            first_week, sunday_of(last_week)
        )
        days = await self.schedule_repo.get_days_in_range(
            user_id, first_week, last_week
        )
        return summarize_month(member.weekly_quota, year, month, days, holidays)


class StaffOverviewUseCase:
    """Current-week hours and status of every staff member, for admins."""

    def __init__(
        self,
        staff_repo: StaffRepository,
        schedule_repo: ScheduleDayRepository,
        holiday_repo: HolidayRepository,
    ):
        self.staff_repo = ensure_repository_protocol(
            staff_repo, StaffRepository
        )
        self.schedule_repo = ensure_repository_protocol(
            schedule_repo, ScheduleDayRepository
        )
        self.holiday_repo = ensure_repository_protocol(
            holiday_repo, HolidayRepository
        )

    async def execute(
        self, actor_id: str, today: Optional[date] = None
    ) -> List[StaffHoursOverview]:
        actor = await _load_staff(self.staff_repo, actor_id)
        _require_admin(actor)
        monday = monday_of(today or datetime.now(timezone.utc).date())
        holidays = await self.holiday_repo.get_public_holidays(
            monday, sunday_of(monday)
        )

        overview = []
        for member in await self.staff_repo.list_staff():
            days = await self.schedule_repo.get_week(member.user_id, monday)
            summary = summarize_week(
                member.weekly_quota, monday, days, holidays
            )
            overview.append(
                StaffHoursOverview(
                    user_id=member.user_id,
                    name=member.name,
                    role=member.role,
                    employment_type=member.employment_type,
                    weekly_quota=member.weekly_quota,
                    current_week_hours=summary.total_booked,
                    status=summary.status,
                )
            )
        logger.debug(
            "Built staff hours overview",
            extra={"week_start": monday.isoformat(), "staff": len(overview)},
        )
        return overview


class ScheduleAuditUseCase:
    """Lists the audit trail of one user's week, newest first."""

    def __init__(
        self, audit_repo: AuditRepository, staff_repo: StaffRepository
    ):
        self.audit_repo = ensure_repository_protocol(
            audit_repo, AuditRepository
        )
        self.staff_repo = ensure_repository_protocol(
            staff_repo, StaffRepository
        )

    async def execute(
        self, actor_id: str, user_id: str, week_start: date
    ) -> List[AuditEntry]:
        actor = await _load_staff(self.staff_repo, actor_id)
        _authorize_schedule_access(actor, user_id)
        return await self.audit_repo.list_week_entries(
            user_id, monday_of(week_start)
        )


# --- Holidays ---


class HolidayManagementUseCase:
    """
    Public holiday administration. Anyone may list holidays; only
    superadmins may create or delete them.
    """

    def __init__(
        self, holiday_repo: HolidayRepository, staff_repo: StaffRepository
    ):
        self.holiday_repo = ensure_repository_protocol(
            holiday_repo, HolidayRepository
        )
        self.staff_repo = ensure_repository_protocol(
            staff_repo, StaffRepository
        )

    async def list_holidays(self, year: int) -> List[PublicHoliday]:
        return await self.holiday_repo.list_holidays(year)

    async def get_holiday(self, holiday_id: str) -> PublicHoliday:
        holiday = await self.holiday_repo.get_holiday(holiday_id)
        if holiday is None:
            raise NotFoundError("PublicHoliday", holiday_id)
        return holiday

    async def create_holidays(
        self, actor_id: str, requests: List[PublicHolidayRequest]
    ) -> List[PublicHoliday]:
        """
        Create one or more holidays as a unit.

        Raises:
            ScheduleValidationError: If the batch is empty, repeats a date,
                or a date already has a holiday
        """
        actor = await _load_staff(self.staff_repo, actor_id)
        _require_superadmin(actor)
        if not requests:
            raise ScheduleValidationError(
                "At least one holiday is required", field="holidays"
            )

        dates = [request.date for request in requests]
        if len(set(dates)) != len(dates):
            raise ScheduleValidationError(
                "Holiday dates must be unique", field="date"
            )
        existing = await self.holiday_repo.get_public_holidays(
            min(dates), max(dates)
        )
        clashes = sorted(d for d in dates if d in existing)
        if clashes:
            raise ScheduleValidationError(
                "A holiday already exists on "
                + ", ".join(d.isoformat() for d in clashes),
                field="date",
            )

        holidays = [
            PublicHoliday(
                holiday_id=await self.holiday_repo.generate_holiday_id(),
                date=request.date,
                name=request.name,
                region=request.region,
            )
            for request in requests
        ]
        await _persist(
            self.holiday_repo.save_holidays(holidays),
            "save public holidays",
            count=len(holidays),
        )
        logger.info(
            "Public holidays created",
            extra={"actor_id": actor_id, "count": len(holidays)},
        )
        return holidays

    async def delete_holiday(self, actor_id: str, holiday_id: str) -> None:
        actor = await _load_staff(self.staff_repo, actor_id)
        _require_superadmin(actor)
        deleted = await _persist(
            self.holiday_repo.delete_holiday(holiday_id),
            "delete public holiday",
            holiday_id=holiday_id,
        )
        if not deleted:
            raise NotFoundError("PublicHoliday", holiday_id)
        logger.info(
            "Public holiday deleted",
            extra={"actor_id": actor_id, "holiday_id": holiday_id},
        )


# --- Calendar events ---


class CalendarEventUseCase:
    """
    Create, update, duplicate, delete and list calendar events. Owners
    manage their own events; admins may manage anyone's.
    """

    def __init__(
        self,
        event_repo: CalendarEventRepository,
        staff_repo: StaffRepository,
        tz: tzinfo = timezone.utc,
    ):
        self.event_repo = ensure_repository_protocol(
            event_repo, CalendarEventRepository
        )
        self.staff_repo = ensure_repository_protocol(
            staff_repo, StaffRepository
        )
        self.tz = tz

    async def _owned_event(
        self, actor: StaffMember, event_id: str
    ) -> CalendarEvent:
        event = await self.event_repo.get_event(event_id)
        if event is None:
            raise NotFoundError("CalendarEvent", event_id)
        if event.owner_id != actor.user_id and not actor.is_admin:
            raise PermissionDeniedError(
                "Only the owner or an administrator may change this event"
            )
        return event

    async def create_event(
        self, actor_id: str, request: EventRequest
    ) -> CalendarEvent:
        await _load_staff(self.staff_repo, actor_id)
        event = build_event(
            request,
            await self.event_repo.generate_event_id(),
            actor_id,
            self.tz,
        )
        await _persist(
            self.event_repo.save_event(event),
            "create calendar event",
            event_id=event.event_id,
        )
        logger.info(
            "Calendar event created",
            extra={"event_id": event.event_id, "owner_id": actor_id},
        )
        return event

    async def update_event(
        self, actor_id: str, event_id: str, request: EventRequest
    ) -> CalendarEvent:
        actor = await _load_staff(self.staff_repo, actor_id)
        existing = await self._owned_event(actor, event_id)
        event = build_event(
            request,
            existing.event_id,
            existing.owner_id,
            self.tz,
            created_at=existing.created_at,
        )
        await _persist(
            self.event_repo.save_event(event),
            "update calendar event",
            event_id=event_id,
        )
        logger.info(
            "Calendar event updated",
            extra={"event_id": event_id, "actor_id": actor_id},
        )
        return event

    async def duplicate_event(
        self, actor_id: str, event_id: str, new_date: date
    ) -> CalendarEvent:
        actor = await _load_staff(self.staff_repo, actor_id)
        original = await self._owned_event(actor, event_id)
        copy = duplicate_event(
            original,
            new_date,
            await self.event_repo.generate_event_id(),
            self.tz,
        )
        await _persist(
            self.event_repo.save_event(copy),
            "duplicate calendar event",
            event_id=event_id,
        )
        logger.info(
            "Calendar event duplicated",
            extra={
                "event_id": event_id,
                "copy_id": copy.event_id,
                "new_date": new_date.isoformat(),
            },
        )
        return copy

    async def delete_event(self, actor_id: str, event_id: str) -> None:
        actor = await _load_staff(self.staff_repo, actor_id)
        await self._owned_event(actor, event_id)
        await _persist(
            self.event_repo.delete_event(event_id),
            "delete calendar event",
            event_id=event_id,
        )
        logger.info(
            "Calendar event deleted",
            extra={"event_id": event_id, "actor_id": actor_id},
        )

    async def list_events(
        self,
        actor_id: str,
        range_start: date,
        range_end: date,
        owner_id: Optional[str] = None,
    ) -> List[EventOccurrence]:
        """Events of a window with recurring series expanded."""
        if range_end < range_start:
            raise ScheduleValidationError(
                "Range end must not precede range start", field="end"
            )
        actor = await _load_staff(self.staff_repo, actor_id)
        target = owner_id or actor_id
        _authorize_schedule_access(actor, target)
        window_start = datetime.combine(
            range_start, datetime.min.time(), tzinfo=self.tz
        )
        window_end = datetime.combine(
            range_end + timedelta(days=1), datetime.min.time(), tzinfo=self.tz
        )
        events = await self.event_repo.list_events(
            target, window_start, window_end
        )
        return expand_recurring_events(
            events, range_start, range_end, self.tz
        )
