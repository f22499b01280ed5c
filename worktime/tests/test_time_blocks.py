from datetime import time

import pytest

from worktime.domain import TimeBlock
from worktime.time_blocks import (
    merge_time_blocks,
    parse_time_of_day,
    sanitize_time_blocks,
    total_hours,
    total_minutes,
)
from worktime.tests.factories import blocks


def as_pairs(result):
    return [(b.start.strftime("%H:%M"), b.end.strftime("%H:%M")) for b in result]


class TestParseTimeOfDay:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("08:00", time(8, 0)),
            ("8:05", time(8, 5)),
            ("23:59", time(23, 59)),
            (" 12:30 ", time(12, 30)),
            (time(9, 15, 42), time(9, 15)),
        ],
    )
    def test_valid_values(self, value, expected) -> None:
        assert parse_time_of_day(value) == expected

    @pytest.mark.parametrize(
        "value", ["24:00", "12:60", "noon", "", "12", "12:3", None, 800]
    )
    def test_invalid_values_yield_none(self, value) -> None:
        assert parse_time_of_day(value) is None


class TestSanitizeTimeBlocks:
    def test_overlapping_blocks_are_merged(self) -> None:
        result = sanitize_time_blocks(
            [
                {"start": "08:00", "end": "12:00"},
                {"start": "11:00", "end": "13:00"},
            ]
        )

        assert as_pairs(result) == [("08:00", "13:00")]

    def test_output_is_sorted(self) -> None:
        result = sanitize_time_blocks(
            [
                {"start": "13:00", "end": "17:00"},
                {"start": "08:00", "end": "12:00"},
            ]
        )

        assert as_pairs(result) == [("08:00", "12:00"), ("13:00", "17:00")]

    def test_touching_blocks_stay_separate(self) -> None:
        result = sanitize_time_blocks(
            [
                {"start": "08:00", "end": "12:00"},
                {"start": "12:00", "end": "16:00"},
            ]
        )

        assert as_pairs(result) == [("08:00", "12:00"), ("12:00", "16:00")]

    def test_contained_block_is_absorbed(self) -> None:
        result = sanitize_time_blocks(
            [
                {"start": "08:00", "end": "17:00"},
                {"start": "10:00", "end": "11:00"},
            ]
        )

        assert as_pairs(result) == [("08:00", "17:00")]

    def test_malformed_and_inverted_entries_are_dropped(self) -> None:
        result = sanitize_time_blocks(
            [
                {"start": "25:00", "end": "26:00"},
                {"start": "09:00", "end": "08:00"},
                {"start": "10:00", "end": "10:00"},
                {"start": "10:00"},
                "08:00-12:00",
                42,
                {"start": "13:00", "end": "15:00"},
            ]
        )

        assert as_pairs(result) == [("13:00", "15:00")]

    def test_tuples_and_time_blocks_are_accepted(self) -> None:
        result = sanitize_time_blocks(
            [("13:00", "14:00"), *blocks(("08:00", "09:00"))]
        )

        assert as_pairs(result) == [("08:00", "09:00"), ("13:00", "14:00")]

    def test_fallback_interval_used_when_no_block_survives(self) -> None:
        result = sanitize_time_blocks(
            [{"start": "bad", "end": "worse"}], "09:00", "17:00"
        )

        assert as_pairs(result) == [("09:00", "17:00")]

    def test_fallback_ignored_when_blocks_survive(self) -> None:
        result = sanitize_time_blocks(
            [{"start": "08:00", "end": "12:00"}], "13:00", "17:00"
        )

        assert as_pairs(result) == [("08:00", "12:00")]

    def test_invalid_fallback_yields_empty(self) -> None:
        assert sanitize_time_blocks(None, "17:00", "09:00") == []

    def test_nothing_valid_means_not_working(self) -> None:
        assert sanitize_time_blocks([]) == []
        assert sanitize_time_blocks(None) == []

    def test_sanitizing_is_idempotent(self) -> None:
        raw = [
            {"start": "14:00", "end": "18:00"},
            {"start": "08:00", "end": "12:00"},
            {"start": "11:30", "end": "12:30"},
        ]
        once = sanitize_time_blocks(raw)
        twice = sanitize_time_blocks([b.model_dump() for b in once])

        assert twice == once

    def test_dropped_entries_are_logged(self, caplog) -> None:
        with caplog.at_level("WARNING", logger="worktime.time_blocks"):
            sanitize_time_blocks([{"start": "x", "end": "y"}])

        assert "Dropped invalid time blocks" in caplog.text


class TestMergeTimeBlocks:
    def test_chain_of_overlaps_collapses(self) -> None:
        result = merge_time_blocks(
            blocks(("08:00", "10:00"), ("09:00", "11:00"), ("10:30", "12:00"))
        )

        assert as_pairs(result) == [("08:00", "12:00")]

    def test_empty_input(self) -> None:
        assert merge_time_blocks([]) == []


class TestTotals:
    def test_lunch_gap_is_not_counted(self) -> None:
        day = blocks(("08:00", "12:00"), ("12:30", "16:30"))

        assert total_minutes(day) == 480
        assert total_hours(day) == 8.0

    def test_partial_hours(self) -> None:
        assert total_hours(blocks(("09:00", "10:30"))) == 1.5


class TestTimeBlockModel:
    def test_end_must_follow_start(self) -> None:
        with pytest.raises(ValueError):
            TimeBlock(start=time(12, 0), end=time(8, 0))

    def test_serializes_as_hh_mm(self) -> None:
        block = TimeBlock(start=time(8, 0), end=time(12, 30))

        assert block.model_dump() == {"start": "08:00", "end": "12:30"}
