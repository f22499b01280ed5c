"""
Dependency injection for FastAPI endpoints.

Backends are chosen from the environment: with ``DATABASE_URL`` set the
asyncpg repositories are used, otherwise in-memory ones (optionally seeded
from the YAML files named by ``WORKTIME_STAFF_FILE`` and
``WORKTIME_HOLIDAYS_FILE``).
"""

import logging
import os
import zoneinfo
from datetime import tzinfo
from typing import Any, Dict

import asyncpg
from fastapi import Depends, Header

from worktime.repos.local import LocalHolidayRepository, LocalStaffRepository
from worktime.repos.memory import (
    MemoryAuditRepository,
    MemoryBroadcastRepository,
    MemoryCalendarEventRepository,
    MemoryHolidayRepository,
    MemoryScheduleDayRepository,
    MemoryStaffRepository,
)
from worktime.repos.postgresql import (
    PostgreSQLAuditRepository,
    PostgreSQLBroadcastRepository,
    PostgreSQLCalendarEventRepository,
    PostgreSQLHolidayRepository,
    PostgreSQLScheduleDayRepository,
    PostgreSQLStaffRepository,
    create_schema,
)
from worktime.repositories import (
    AuditRepository,
    BroadcastRepository,
    CalendarEventRepository,
    HolidayRepository,
    ScheduleDayRepository,
    StaffRepository,
)
from worktime.usecase import (
    CalendarEventUseCase,
    HolidayManagementUseCase,
    HoursSummaryUseCase,
    ReplaceScheduleWeekUseCase,
    ScheduleAuditUseCase,
    ScheduleWeekUseCase,
    StaffOverviewUseCase,
    UpdateScheduleDayUseCase,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Europe/Berlin"
DEFAULT_TRANSACTION_TIMEOUT = 10.0


class DependencyContainer:
    """
    Dependency injection container with singleton lifecycle management.
    Always creates real backends; tests replace them through
    ``app.dependency_overrides``.
    """

    def __init__(self) -> None:
        self._instances: Dict[str, Any] = {}

    async def get_or_create(self, key: str, factory: Any) -> Any:
        """Get or create a singleton instance."""
        if key not in self._instances:
            self._instances[key] = await factory()
        return self._instances[key]

    @property
    def database_url(self) -> str:
        return os.environ.get("DATABASE_URL", "")

    async def get_pool(self) -> asyncpg.Pool:
        pool = await self.get_or_create("pool", self._create_pool)
        return pool  # type: ignore[no-any-return]

    async def _create_pool(self) -> asyncpg.Pool:
        logger.debug("Creating asyncpg pool")
        pool = await asyncpg.create_pool(self.database_url)
        await create_schema(pool)
        return pool

    async def _pooled(self, key: str, repo_class: Any, **kwargs: Any) -> Any:
        async def factory() -> Any:
            return repo_class(await self.get_pool(), **kwargs)

        return await self.get_or_create(key, factory)

    async def _memory(self, key: str, build: Any) -> Any:
        async def factory() -> Any:
            return build()

        return await self.get_or_create(key, factory)

    async def staff_repository(self) -> StaffRepository:
        if self.database_url:
            return await self._pooled("staff", PostgreSQLStaffRepository)
        staff_file = os.environ.get("WORKTIME_STAFF_FILE")
        if staff_file:
            return await self._memory(
                "staff", lambda: LocalStaffRepository(staff_file)
            )
        return await self._memory("staff", MemoryStaffRepository)

    async def holiday_repository(self) -> HolidayRepository:
        if self.database_url:
            return await self._pooled("holidays", PostgreSQLHolidayRepository)
        holidays_file = os.environ.get("WORKTIME_HOLIDAYS_FILE")
        if holidays_file:
            return await self._memory(
                "holidays", lambda: LocalHolidayRepository(holidays_file)
            )
        return await self._memory("holidays", MemoryHolidayRepository)

    async def schedule_repository(self) -> ScheduleDayRepository:
        if self.database_url:
            timeout = float(
                os.environ.get(
                    "WORKTIME_TRANSACTION_TIMEOUT",
                    DEFAULT_TRANSACTION_TIMEOUT,
                )
            )
            return await self._pooled(
                "schedule",
                PostgreSQLScheduleDayRepository,
                transaction_timeout=timeout,
            )
        return await self._memory("schedule", MemoryScheduleDayRepository)

    async def event_repository(self) -> CalendarEventRepository:
        if self.database_url:
            return await self._pooled(
                "events", PostgreSQLCalendarEventRepository
            )
        return await self._memory("events", MemoryCalendarEventRepository)

    async def broadcast_repository(self) -> BroadcastRepository:
        if self.database_url:
            return await self._pooled(
                "broadcast", PostgreSQLBroadcastRepository
            )
        return await self._memory("broadcast", MemoryBroadcastRepository)

    async def audit_repository(self) -> AuditRepository:
        if self.database_url:
            return await self._pooled("audit", PostgreSQLAuditRepository)
        return await self._memory("audit", MemoryAuditRepository)


# Global container instance
_container = DependencyContainer()


def get_timezone() -> tzinfo:
    """Zone used to resolve local midnight for calendar events."""
    name = os.environ.get("WORKTIME_TIMEZONE", DEFAULT_TIMEZONE)
    try:
        return zoneinfo.ZoneInfo(name)
    except zoneinfo.ZoneInfoNotFoundError:
        logger.warning(
            f"Unknown timezone {name}, defaulting to {DEFAULT_TIMEZONE}"
        )
        return zoneinfo.ZoneInfo(DEFAULT_TIMEZONE)


async def get_current_user_id(
    x_user_id: str = Header(..., alias="X-User-Id")
) -> str:
    """Acting user as established by the authentication layer."""
    return x_user_id


async def get_staff_repository() -> StaffRepository:
    return await _container.staff_repository()


async def get_holiday_repository() -> HolidayRepository:
    return await _container.holiday_repository()


async def get_schedule_repository() -> ScheduleDayRepository:
    return await _container.schedule_repository()


async def get_event_repository() -> CalendarEventRepository:
    return await _container.event_repository()


async def get_broadcast_repository() -> BroadcastRepository:
    return await _container.broadcast_repository()


async def get_audit_repository() -> AuditRepository:
    return await _container.audit_repository()


async def get_schedule_week_use_case(
    schedule_repo: ScheduleDayRepository = Depends(get_schedule_repository),
    holiday_repo: HolidayRepository = Depends(get_holiday_repository),
    staff_repo: StaffRepository = Depends(get_staff_repository),
) -> ScheduleWeekUseCase:
    return ScheduleWeekUseCase(schedule_repo, holiday_repo, staff_repo)


async def get_update_schedule_day_use_case(
    schedule_repo: ScheduleDayRepository = Depends(get_schedule_repository),
    staff_repo: StaffRepository = Depends(get_staff_repository),
    broadcast_repo: BroadcastRepository = Depends(get_broadcast_repository),
    audit_repo: AuditRepository = Depends(get_audit_repository),
) -> UpdateScheduleDayUseCase:
    return UpdateScheduleDayUseCase(
        schedule_repo, staff_repo, broadcast_repo, audit_repo
    )


async def get_replace_schedule_week_use_case(
    schedule_repo: ScheduleDayRepository = Depends(get_schedule_repository),
    staff_repo: StaffRepository = Depends(get_staff_repository),
    broadcast_repo: BroadcastRepository = Depends(get_broadcast_repository),
    audit_repo: AuditRepository = Depends(get_audit_repository),
) -> ReplaceScheduleWeekUseCase:
    return ReplaceScheduleWeekUseCase(
        schedule_repo, staff_repo, broadcast_repo, audit_repo
    )


async def get_hours_summary_use_case(
    schedule_repo: ScheduleDayRepository = Depends(get_schedule_repository),
    holiday_repo: HolidayRepository = Depends(get_holiday_repository),
    staff_repo: StaffRepository = Depends(get_staff_repository),
) -> HoursSummaryUseCase:
    return HoursSummaryUseCase(schedule_repo, holiday_repo, staff_repo)


async def get_staff_overview_use_case(
    staff_repo: StaffRepository = Depends(get_staff_repository),
    schedule_repo: ScheduleDayRepository = Depends(get_schedule_repository),
    holiday_repo: HolidayRepository = Depends(get_holiday_repository),
) -> StaffOverviewUseCase:
    return StaffOverviewUseCase(staff_repo, schedule_repo, holiday_repo)


async def get_schedule_audit_use_case(
    audit_repo: AuditRepository = Depends(get_audit_repository),
    staff_repo: StaffRepository = Depends(get_staff_repository),
) -> ScheduleAuditUseCase:
    return ScheduleAuditUseCase(audit_repo, staff_repo)


async def get_holiday_management_use_case(
    holiday_repo: HolidayRepository = Depends(get_holiday_repository),
    staff_repo: StaffRepository = Depends(get_staff_repository),
) -> HolidayManagementUseCase:
    return HolidayManagementUseCase(holiday_repo, staff_repo)


async def get_calendar_event_use_case(
    event_repo: CalendarEventRepository = Depends(get_event_repository),
    staff_repo: StaffRepository = Depends(get_staff_repository),
    tz: tzinfo = Depends(get_timezone),
) -> CalendarEventUseCase:
    return CalendarEventUseCase(event_repo, staff_repo, tz)
