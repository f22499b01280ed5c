from datetime import date, datetime, timezone

import pytest

from worktime.domain import DayUpdate, EmploymentType, Weekday
from worktime.exceptions import ScheduleValidationError
from worktime.schedule_days import (
    apply_day_update,
    build_day_blocks,
    normalize_week_days,
    schedule_day_key,
    seed_week,
)
from worktime.tests.factories import (
    MAY_DAY_WEEK,
    minimal_day_update,
    minimal_schedule_day,
)

MAY_DAY = date(2024, 5, 1)


class TestSeedWeek:
    def test_full_time_week_skips_holiday_and_weekend(self) -> None:
        days = seed_week(
            "emp-1", MAY_DAY_WEEK, EmploymentType.FULL_TIME, {MAY_DAY}
        )

        assert [d.weekday for d in days] == list(Weekday)
        working = [d.weekday for d in days if d.is_working]
        assert working == [
            Weekday.MONDAY,
            Weekday.TUESDAY,
            Weekday.THURSDAY,
            Weekday.FRIDAY,
        ]

    def test_full_time_default_blocks(self) -> None:
        monday = seed_week(
            "emp-1", MAY_DAY_WEEK, EmploymentType.FULL_TIME, set()
        )[0]

        assert [b.model_dump() for b in monday.time_blocks] == [
            {"start": "08:00", "end": "12:00"},
            {"start": "12:30", "end": "16:30"},
        ]
        assert monday.start_time == "08:00"
        assert monday.end_time == "12:00"

    @pytest.mark.parametrize(
        "employment_type",
        [EmploymentType.PART_TIME, EmploymentType.WORKING_STUDENT],
    )
    def test_other_employment_types_start_empty(self, employment_type) -> None:
        days = seed_week("emp-1", MAY_DAY_WEEK, employment_type, set())

        assert not any(d.is_working for d in days)
        assert all(d.time_blocks == [] for d in days)

    def test_seed_normalizes_to_monday_and_keys_days(self) -> None:
        days = seed_week(
            "emp-1", date(2024, 5, 3), EmploymentType.FULL_TIME, set()
        )

        assert all(d.week_start == MAY_DAY_WEEK for d in days)
        assert days[2].schedule_day_id == "emp-1:2024-04-29:wednesday"
        assert days[2].calendar_date == MAY_DAY


class TestBuildDayBlocks:
    def test_not_working_clears_blocks(self) -> None:
        update = minimal_day_update(
            is_working=False, time_blocks=[{"start": "08:00", "end": "12:00"}]
        )

        assert build_day_blocks(update) == []

    def test_working_day_without_valid_block_is_rejected(self) -> None:
        update = minimal_day_update(
            time_blocks=[{"start": "09:00", "end": "08:00"}]
        )

        with pytest.raises(ScheduleValidationError) as exc_info:
            build_day_blocks(update)

        assert exc_info.value.field == "timeBlocks"

    def test_legacy_single_interval(self) -> None:
        update = minimal_day_update(
            time_blocks=[], start_time="07:30", end_time="15:30"
        )

        result = build_day_blocks(update)

        assert [b.model_dump() for b in result] == [
            {"start": "07:30", "end": "15:30"}
        ]

    def test_camel_case_payload(self) -> None:
        update = DayUpdate.model_validate(
            {
                "isWorking": True,
                "timeBlocks": [{"start": "10:00", "end": "14:00"}],
            }
        )

        assert len(build_day_blocks(update)) == 1


class TestApplyDayUpdate:
    def test_keeps_identity_and_creation_time_of_existing(self) -> None:
        created = datetime(2024, 4, 1, tzinfo=timezone.utc)
        existing = minimal_schedule_day(created_at=created)
        now = datetime(2024, 4, 29, 12, tzinfo=timezone.utc)

        day = apply_day_update(
            "emp-1",
            MAY_DAY_WEEK,
            Weekday.MONDAY,
            minimal_day_update(),
            "admin-1",
            existing=existing,
            now=now,
        )

        assert day.schedule_day_id == existing.schedule_day_id
        assert day.created_at == created
        assert day.updated_at == now
        assert day.last_updated_by == "admin-1"

    def test_marking_day_off(self) -> None:
        day = apply_day_update(
            "emp-1",
            MAY_DAY_WEEK,
            Weekday.FRIDAY,
            minimal_day_update(is_working=False),
            "emp-1",
        )

        assert not day.is_working
        assert day.time_blocks == []
        assert day.start_time is None


class TestNormalizeWeekDays:
    def _working_week(self):
        return [minimal_day_update() for _ in range(5)] + [
            minimal_day_update(is_working=False) for _ in range(2)
        ]

    def test_positional_list(self) -> None:
        result = normalize_week_days(self._working_week())

        assert list(result) == list(Weekday)
        assert not result[Weekday.SUNDAY].is_working

    def test_mapping_by_name_and_raw_dicts(self) -> None:
        days = {
            weekday.value: {"isWorking": False} for weekday in Weekday
        }

        result = normalize_week_days(days)

        assert set(result) == set(Weekday)

    def test_mapping_by_index_strings(self) -> None:
        days = {str(index): {"isWorking": index < 5} for index in range(7)}

        result = normalize_week_days(days)

        assert list(result) == list(Weekday)
        assert result[Weekday.FRIDAY].is_working
        assert not result[Weekday.SATURDAY].is_working

    def test_index_out_of_range_is_rejected(self) -> None:
        days = {str(index): {} for index in range(1, 8)}

        with pytest.raises(ScheduleValidationError, match="Unknown weekday"):
            normalize_week_days(days)

    def test_six_days_are_rejected(self) -> None:
        with pytest.raises(ScheduleValidationError) as exc_info:
            normalize_week_days(self._working_week()[:6])

        assert exc_info.value.field == "days"
        assert "exactly 7" in exc_info.value.message

    def test_duplicate_weekday_is_rejected(self) -> None:
        days = {weekday.value: {} for weekday in Weekday}
        del days["sunday"]
        days[0] = {}

        with pytest.raises(ScheduleValidationError, match="Duplicate"):
            normalize_week_days(days)

    def test_unknown_weekday_is_rejected(self) -> None:
        days = {weekday.value: {} for weekday in Weekday}
        del days["sunday"]
        days["funday"] = {}

        with pytest.raises(ScheduleValidationError, match="Unknown weekday"):
            normalize_week_days(days)

    def test_non_collection_is_rejected(self) -> None:
        with pytest.raises(ScheduleValidationError):
            normalize_week_days("monday")


def test_schedule_day_key_is_deterministic() -> None:
    assert schedule_day_key("u", MAY_DAY_WEEK, Weekday.SUNDAY) == (
        "u:2024-04-29:sunday"
    )
