"""
Repository contract tests to verify that all implementations comply with
their protocol contracts.

These tests ensure that the repository implementations (memory, local
YAML) behave consistently and follow the same interface contracts. The
PostgreSQL repositories follow the same contracts but need a database.
"""

import pytest
from abc import ABC, abstractmethod
from datetime import date, datetime, timezone

import yaml

from worktime.domain import (
    AuditEntry,
    PublicHoliday,
    Recurrence,
    StaffMember,
    Weekday,
)
from worktime.repos.local import LocalHolidayRepository, LocalStaffRepository
from worktime.repos.memory import (
    MemoryAuditRepository,
    MemoryBroadcastRepository,
    MemoryCalendarEventRepository,
    MemoryHolidayRepository,
    MemoryScheduleDayRepository,
    MemoryStaffRepository,
)
from worktime.repositories import (
    AuditRepository,
    BroadcastRepository,
    CalendarEventRepository,
    HolidayRepository,
    ScheduleDayRepository,
    StaffRepository,
)
from worktime.tests.factories import (
    MAY_DAY_WEEK,
    minimal_calendar_event,
    minimal_schedule_day,
    minimal_week,
)

MAY_DAY = date(2024, 5, 1)


class HolidayRepositoryContractTestMixin(ABC):
    """
    Contract test mixin for HolidayRepository implementations.

    Subclasses must implement create_repository() to return a repository
    holding exactly one holiday, "may-day" on 2024-05-01.
    """

    @abstractmethod
    async def create_repository(self) -> HolidayRepository:
        """Create a repository instance for testing."""
        pass

    @pytest.mark.asyncio
    async def test_satisfies_protocol(self) -> None:
        repo = await self.create_repository()

        assert isinstance(repo, HolidayRepository)

    @pytest.mark.asyncio
    async def test_range_lookup_is_inclusive(self) -> None:
        """Contract: get_public_holidays returns dates inside [start, end]."""
        repo = await self.create_repository()

        assert await repo.get_public_holidays(MAY_DAY, MAY_DAY) == {MAY_DAY}
        assert await repo.get_public_holidays(
            date(2024, 5, 2), date(2024, 5, 31)
        ) == set()

    @pytest.mark.asyncio
    async def test_save_list_and_delete(self) -> None:
        repo = await self.create_repository()
        holiday = PublicHoliday(
            holiday_id=await repo.generate_holiday_id(),
            date=date(2024, 10, 3),
            name="Tag der Deutschen Einheit",
        )

        await repo.save_holidays([holiday])

        listed = await repo.list_holidays(2024)
        assert [h.date for h in listed] == [MAY_DAY, date(2024, 10, 3)]
        assert await repo.get_holiday(holiday.holiday_id) == holiday
        assert await repo.delete_holiday(holiday.holiday_id) is True
        assert await repo.delete_holiday(holiday.holiday_id) is False
        assert await repo.get_holiday(holiday.holiday_id) is None

    @pytest.mark.asyncio
    async def test_list_other_year_is_empty(self) -> None:
        repo = await self.create_repository()

        assert await repo.list_holidays(2023) == []


class ScheduleDayRepositoryContractTestMixin(ABC):
    @abstractmethod
    async def create_repository(self) -> ScheduleDayRepository:
        pass

    @pytest.mark.asyncio
    async def test_unseen_week_is_empty(self) -> None:
        repo = await self.create_repository()

        assert await repo.get_week("emp-1", MAY_DAY_WEEK) == []
        assert await repo.get_day("emp-1", MAY_DAY_WEEK, Weekday.MONDAY) is None

    @pytest.mark.asyncio
    async def test_save_week_then_read_ordered(self) -> None:
        repo = await self.create_repository()
        week = minimal_week()

        await repo.save_week(list(reversed(week)))

        stored = await repo.get_week("emp-1", MAY_DAY_WEEK)
        assert [d.weekday for d in stored] == list(Weekday)
        assert stored == week

    @pytest.mark.asyncio
    async def test_save_day_overwrites_in_place(self) -> None:
        repo = await self.create_repository()
        await repo.save_week(minimal_week())

        await repo.save_day(
            minimal_schedule_day(weekday=Weekday.MONDAY, time_blocks=None)
        )

        stored = await repo.get_week("emp-1", MAY_DAY_WEEK)
        assert len(stored) == 7
        assert not stored[0].is_working

    @pytest.mark.asyncio
    async def test_insert_missing_days_keeps_existing_records(self) -> None:
        repo = await self.create_repository()
        await repo.save_day(
            minimal_schedule_day(weekday=Weekday.MONDAY, time_blocks=None)
        )

        await repo.insert_missing_days(minimal_week())

        stored = await repo.get_week("emp-1", MAY_DAY_WEEK)
        assert len(stored) == 7
        assert not stored[0].is_working
        assert stored[1].is_working

    @pytest.mark.asyncio
    async def test_returned_records_are_copies(self) -> None:
        repo = await self.create_repository()
        await repo.save_day(minimal_schedule_day())

        day = await repo.get_day("emp-1", MAY_DAY_WEEK, Weekday.MONDAY)
        day.time_blocks.clear()

        again = await repo.get_day("emp-1", MAY_DAY_WEEK, Weekday.MONDAY)
        assert len(again.time_blocks) == 1

    @pytest.mark.asyncio
    async def test_range_is_by_week_start(self) -> None:
        repo = await self.create_repository()
        await repo.save_week(minimal_week(week_start=date(2024, 4, 22)))
        await repo.save_week(minimal_week(week_start=MAY_DAY_WEEK))
        await repo.save_week(minimal_week(user_id="other"))

        days = await repo.get_days_in_range(
            "emp-1", MAY_DAY_WEEK, date(2024, 5, 27)
        )

        assert len(days) == 7
        assert {d.week_start for d in days} == {MAY_DAY_WEEK}


class CalendarEventRepositoryContractTestMixin(ABC):
    @abstractmethod
    async def create_repository(self) -> CalendarEventRepository:
        pass

    @pytest.mark.asyncio
    async def test_window_query(self) -> None:
        repo = await self.create_repository()
        inside = minimal_calendar_event(event_id="inside")
        outside = minimal_calendar_event(
            event_id="outside",
            start_time=datetime(2024, 6, 3, 9, tzinfo=timezone.utc),
        )
        series = minimal_calendar_event(
            event_id="series",
            start_time=datetime(2024, 1, 1, 9, tzinfo=timezone.utc),
            recurrence=Recurrence(),
        )
        foreign = minimal_calendar_event(event_id="foreign", owner_id="other")
        for event in (inside, outside, series, foreign):
            await repo.save_event(event)

        events = await repo.list_events(
            "emp-1",
            datetime(2024, 5, 6, tzinfo=timezone.utc),
            datetime(2024, 5, 13, tzinfo=timezone.utc),
        )

        assert [e.event_id for e in events] == ["series", "inside"]

    @pytest.mark.asyncio
    async def test_delete(self) -> None:
        repo = await self.create_repository()
        await repo.save_event(minimal_calendar_event())

        assert await repo.delete_event("test-event-1") is True
        assert await repo.delete_event("test-event-1") is False
        assert await repo.get_event("test-event-1") is None

    @pytest.mark.asyncio
    async def test_generated_ids_are_unique(self) -> None:
        repo = await self.create_repository()

        assert await repo.generate_event_id() != await repo.generate_event_id()


class TestMemoryHolidayRepository(HolidayRepositoryContractTestMixin):
    async def create_repository(self) -> HolidayRepository:
        return MemoryHolidayRepository(
            [PublicHoliday(holiday_id="may-day", date=MAY_DAY, name="Maifeiertag")]
        )


class TestLocalHolidayRepository(HolidayRepositoryContractTestMixin):
    @pytest.fixture(autouse=True)
    def holidays_file(self, tmp_path) -> None:
        self.path = tmp_path / "holidays.yaml"
        self.path.write_text(
            yaml.safe_dump(
                {
                    "holidays": [
                        {
                            "holiday_id": "may-day",
                            "date": "2024-05-01",
                            "name": "Maifeiertag",
                        }
                    ]
                }
            )
        )

    async def create_repository(self) -> HolidayRepository:
        return LocalHolidayRepository(str(self.path))

    @pytest.mark.asyncio
    async def test_changes_are_written_to_file(self) -> None:
        repo = await self.create_repository()
        await repo.save_holidays(
            [
                PublicHoliday(
                    holiday_id="unity", date=date(2024, 10, 3), name="Einheit"
                )
            ]
        )

        reloaded = LocalHolidayRepository(str(self.path))
        assert await reloaded.get_public_holidays(
            date(2024, 1, 1), date(2024, 12, 31)
        ) == {MAY_DAY, date(2024, 10, 3)}

    @pytest.mark.asyncio
    async def test_missing_file_means_no_holidays(self, tmp_path) -> None:
        repo = LocalHolidayRepository(str(tmp_path / "absent.yaml"))

        assert await repo.list_holidays(2024) == []

    @pytest.mark.asyncio
    async def test_invalid_entries_are_skipped(self, tmp_path) -> None:
        path = tmp_path / "partial.yaml"
        path.write_text(
            "holidays:\n"
            "  - date: 2024-12-25\n"
            "    name: Weihnachten\n"
            "  - date: not-a-date\n"
            "    name: Broken\n"
            "  - just a string\n"
        )
        repo = LocalHolidayRepository(str(path))

        holidays = await repo.list_holidays(2024)

        assert [h.holiday_id for h in holidays] == ["partial-0"]


class TestMemoryScheduleDayRepository(ScheduleDayRepositoryContractTestMixin):
    async def create_repository(self) -> ScheduleDayRepository:
        return MemoryScheduleDayRepository()


class TestMemoryCalendarEventRepository(
    CalendarEventRepositoryContractTestMixin
):
    async def create_repository(self) -> CalendarEventRepository:
        return MemoryCalendarEventRepository()


class TestStaffRepositories:
    @pytest.mark.asyncio
    async def test_memory_staff_lookup(self) -> None:
        repo = MemoryStaffRepository(
            [StaffMember(user_id="b", name="Bea"), StaffMember(user_id="a", name="Al")]
        )

        assert isinstance(repo, StaffRepository)
        assert (await repo.get_staff_member("b")).name == "Bea"
        assert await repo.get_staff_member("zz") is None
        assert [m.user_id for m in await repo.list_staff()] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_local_staff_file(self, tmp_path) -> None:
        path = tmp_path / "staff.yaml"
        path.write_text(
            "staff:\n"
            "  - user_id: anna\n"
            "    name: Anna Schmidt\n"
            "    role: admin\n"
            "    weekly_quota: 32\n"
            "  - user_id: broken\n"
            "    weekly_quota: -5\n"
        )
        repo = LocalStaffRepository(str(path))

        anna = await repo.get_staff_member("anna")

        assert anna.is_admin
        assert anna.weekly_quota == 32.0
        assert await repo.get_staff_member("broken") is None


class TestMemoryAuditRepository:
    @pytest.mark.asyncio
    async def test_entries_filtered_by_week_newest_first(self) -> None:
        repo = MemoryAuditRepository()
        assert isinstance(repo, AuditRepository)
        for action in ("first", "second"):
            await repo.record(
                AuditEntry(
                    action=action,
                    actor_id="emp-1",
                    entity_type="schedule_day",
                    entity_id="x",
                    target_user_id="emp-1",
                    week_start=MAY_DAY_WEEK,
                )
            )

        entries = await repo.list_week_entries("emp-1", MAY_DAY_WEEK)

        assert [e.action for e in entries] == ["second", "first"]
        assert all(e.recorded_at is not None for e in entries)
        assert await repo.list_week_entries("emp-1", date(2024, 5, 6)) == []


class TestMemoryBroadcastRepository:
    @pytest.mark.asyncio
    async def test_keeps_only_most_recent_notifications(self) -> None:
        repo = MemoryBroadcastRepository(max_published=2)
        assert isinstance(repo, BroadcastRepository)

        for day in (1, 2, 3):
            await repo.publish("schedule:day-updated", {"dayOfWeek": day})

        assert [payload["dayOfWeek"] for _, payload in repo.published] == [
            2,
            3,
        ]
