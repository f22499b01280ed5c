"""
Seeding and validation of schedule day records.

A record is keyed by (user, week, weekday). Records are seeded from the
user's employment type the first time a week is viewed and overwritten in
place afterwards.
"""

import logging
from collections.abc import Mapping, Sequence
from datetime import date, datetime, timedelta, timezone
from typing import AbstractSet, Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from .domain import DayUpdate, EmploymentType, ScheduleDay, TimeBlock, Weekday
from .exceptions import ScheduleValidationError
from .time_blocks import sanitize_time_blocks
from .working_days import is_working_day, monday_of

logger = logging.getLogger(__name__)

# Two blocks with a 30 minute lunch gap, 8 hours in total
FULL_TIME_DEFAULT_BLOCKS: Tuple[Tuple[str, str], ...] = (
    ("08:00", "12:00"),
    ("12:30", "16:30"),
)


def schedule_day_key(user_id: str, week_start: date, weekday: Weekday) -> str:
    return f"{user_id}:{week_start.isoformat()}:{weekday.value}"


def default_blocks_for(
    employment_type: EmploymentType, day: date, holidays: AbstractSet[date]
) -> List[TimeBlock]:
    """Seed blocks for one date; only full-time staff work by default."""
    if employment_type != EmploymentType.FULL_TIME:
        return []
    if not is_working_day(day, holidays):
        return []
    return sanitize_time_blocks(FULL_TIME_DEFAULT_BLOCKS)


def seed_week(
    user_id: str,
    week_start: date,
    employment_type: EmploymentType,
    holidays: AbstractSet[date],
    actor_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[ScheduleDay]:
    """Build the seven default records for a week that was never viewed."""
    monday = monday_of(week_start)
    stamp = now or datetime.now(timezone.utc)
    days = []
    for weekday in Weekday:
        blocks = default_blocks_for(
            employment_type,
            monday + timedelta(days=weekday.day_index),
            holidays,
        )
        days.append(
            ScheduleDay(
                schedule_day_id=schedule_day_key(user_id, monday, weekday),
                user_id=user_id,
                week_start=monday,
                weekday=weekday,
                is_working=bool(blocks),
                time_blocks=blocks,
                last_updated_by=actor_id,
                created_at=stamp,
                updated_at=stamp,
            )
        )
    logger.debug(
        "Seeded default schedule week",
        extra={
            "user_id": user_id,
            "week_start": monday.isoformat(),
            "employment_type": employment_type.value,
        },
    )
    return days


def build_day_blocks(update: DayUpdate) -> List[TimeBlock]:
    """
    Canonical blocks for a requested day state.

    Raises:
        ScheduleValidationError: If the day is marked as working but no
            valid interval survives sanitizing
    """
    if not update.is_working:
        return []
    blocks = sanitize_time_blocks(
        update.time_blocks, update.start_time, update.end_time
    )
    if not blocks:
        raise ScheduleValidationError(
            "A working day needs at least one valid time block "
            "(HH:MM, end after start)",
            field="timeBlocks",
        )
    return blocks


def apply_day_update(
    user_id: str,
    week_start: date,
    weekday: Weekday,
    update: DayUpdate,
    actor_id: str,
    existing: Optional[ScheduleDay] = None,
    now: Optional[datetime] = None,
) -> ScheduleDay:
    """Overwrite (or create) the record for one day with a validated state."""
    blocks = build_day_blocks(update)
    monday = monday_of(week_start)
    stamp = now or datetime.now(timezone.utc)
    return ScheduleDay(
        schedule_day_id=(
            existing.schedule_day_id
            if existing
            else schedule_day_key(user_id, monday, weekday)
        ),
        user_id=user_id,
        week_start=monday,
        weekday=weekday,
        is_working=update.is_working,
        time_blocks=blocks,
        last_updated_by=actor_id,
        created_at=existing.created_at if existing else stamp,
        updated_at=stamp,
    )


def _coerce_weekday(key: Any) -> Weekday:
    if isinstance(key, Weekday):
        return key
    try:
        if isinstance(key, int):
            return Weekday.from_index(key)
        text = str(key).strip()
        # JSON object keys arrive as strings
        if text.isdigit():
            return Weekday.from_index(int(text))
        return Weekday(text.lower())
    except ValueError as e:
        raise ScheduleValidationError(
            f"Unknown weekday: {key!r}", field="days"
        ) from e


def _coerce_day_update(value: Any, weekday: Weekday) -> DayUpdate:
    if isinstance(value, DayUpdate):
        return value
    try:
        return DayUpdate.model_validate(value)
    except ValidationError as e:
        raise ScheduleValidationError(
            f"Invalid day entry for {weekday.value}", field=weekday.value
        ) from e


def normalize_week_days(days: Any) -> Dict[Weekday, DayUpdate]:
    """
    Turn a week request into one DayUpdate per weekday.

    Accepts a mapping keyed by weekday (enum, name, or 0..6 index as an
    int or digit string) or a
    positional sequence ordered Monday..Sunday. Anything other than exactly
    seven distinct weekdays is rejected.
    """
    if isinstance(days, Mapping):
        items = list(days.items())
    elif isinstance(days, Sequence) and not isinstance(days, (str, bytes)):
        items = list(enumerate(days))
    else:
        raise ScheduleValidationError(
            "A week must be a list or mapping of day entries", field="days"
        )

    if len(items) != len(Weekday):
        raise ScheduleValidationError(
            f"A week must contain exactly 7 days, got {len(items)}",
            field="days",
        )

    normalized: Dict[Weekday, DayUpdate] = {}
    for key, value in items:
        weekday = _coerce_weekday(key)
        if weekday in normalized:
            raise ScheduleValidationError(
                f"Duplicate entry for {weekday.value}", field="days"
            )
        normalized[weekday] = _coerce_day_update(value, weekday)
    return normalized
