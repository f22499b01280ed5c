"""
PostgreSQL implementation of ScheduleDayRepository.
"""

import json
import logging
from datetime import date
from typing import Any, List, Mapping, Optional

from asyncpg import Pool

from worktime.domain import ScheduleDay, Weekday
from worktime.repositories import ScheduleDayRepository

logger = logging.getLogger(__name__)

DEFAULT_TRANSACTION_TIMEOUT = 10.0

_COLUMNS = """
    schedule_day_id, user_id, week_start, weekday, is_working,
    time_blocks, last_updated_by, created_at, updated_at
"""

_UPSERT = """
    INSERT INTO schedule_days (
        user_id, week_start, weekday, schedule_day_id, is_working,
        time_blocks, start_time, end_time, last_updated_by,
        created_at, updated_at
    ) VALUES ($1, $2, $3, $4, $5, $6::jsonb, $7, $8, $9, $10, $11)
    ON CONFLICT (user_id, week_start, weekday)
    DO UPDATE SET
        is_working = EXCLUDED.is_working,
        time_blocks = EXCLUDED.time_blocks,
        start_time = EXCLUDED.start_time,
        end_time = EXCLUDED.end_time,
        last_updated_by = EXCLUDED.last_updated_by,
        updated_at = EXCLUDED.updated_at
"""

_INSERT_MISSING = """
    INSERT INTO schedule_days (
        user_id, week_start, weekday, schedule_day_id, is_working,
        time_blocks, start_time, end_time, last_updated_by,
        created_at, updated_at
    ) VALUES ($1, $2, $3, $4, $5, $6::jsonb, $7, $8, $9, $10, $11)
    ON CONFLICT (user_id, week_start, weekday) DO NOTHING
"""


def _row_to_day(row: Mapping[str, Any]) -> ScheduleDay:
    blocks = row["time_blocks"]
    if isinstance(blocks, str):
        blocks = json.loads(blocks)
    return ScheduleDay(
        schedule_day_id=row["schedule_day_id"],
        user_id=row["user_id"],
        week_start=row["week_start"],
        weekday=Weekday(row["weekday"]),
        is_working=row["is_working"],
        time_blocks=blocks,
        last_updated_by=row["last_updated_by"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _day_to_args(day: ScheduleDay) -> tuple:
    # start_time/end_time are denormalized from the block list on every write
    return (
        day.user_id,
        day.week_start,
        day.weekday.value,
        day.schedule_day_id,
        day.is_working,
        json.dumps([block.model_dump() for block in day.time_blocks]),
        day.start_time,
        day.end_time,
        day.last_updated_by,
        day.created_at,
        day.updated_at,
    )


class PostgreSQLScheduleDayRepository(ScheduleDayRepository):
    """
    PostgreSQL implementation of ScheduleDayRepository.
    Time blocks are stored as a structured JSONB column.
    """

    def __init__(
        self,
        pool: Pool,
        transaction_timeout: float = DEFAULT_TRANSACTION_TIMEOUT,
    ):
        """
        Initialize with an asyncpg connection pool.

        Args:
            pool: asyncpg connection pool for database operations
            transaction_timeout: Seconds allowed for a week write
        """
        self.pool = pool
        self.transaction_timeout = transaction_timeout
        logger.debug("Initialized PostgreSQLScheduleDayRepository")

    async def get_week(
        self, user_id: str, week_start: date
    ) -> List[ScheduleDay]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                f"SELECT {_COLUMNS} FROM schedule_days "
                "WHERE user_id = $1 AND week_start = $2",
                user_id,
                week_start,
            )
        days = [_row_to_day(row) for row in rows]
        return sorted(days, key=lambda d: d.weekday.day_index)

    async def get_day(
        self, user_id: str, week_start: date, weekday: Weekday
    ) -> Optional[ScheduleDay]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {_COLUMNS} FROM schedule_days "
                "WHERE user_id = $1 AND week_start = $2 AND weekday = $3",
                user_id,
                week_start,
                weekday.value,
            )
        return _row_to_day(row) if row else None

    async def save_day(self, day: ScheduleDay) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute(_UPSERT, *_day_to_args(day))
        logger.debug(
            "Saved schedule day to PostgreSQL",
            extra={"schedule_day_id": day.schedule_day_id},
        )

    async def save_week(self, days: List[ScheduleDay]) -> None:
        """Writes all days in one transaction; any failure rolls back."""
        if not days:
            return
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                await conn.executemany(
                    _UPSERT,
                    [_day_to_args(day) for day in days],
                    timeout=self.transaction_timeout,
                )
        logger.info(
            "Saved schedule week to PostgreSQL",
            extra={
                "user_id": days[0].user_id,
                "week_start": days[0].week_start.isoformat(),
                "count": len(days),
            },
        )

    async def insert_missing_days(self, days: List[ScheduleDay]) -> None:
        """Inserts in one transaction; rows already present are kept."""
        if not days:
            return
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                await conn.executemany(
                    _INSERT_MISSING,
                    [_day_to_args(day) for day in days],
                    timeout=self.transaction_timeout,
                )
        logger.debug(
            "Inserted missing schedule days into PostgreSQL",
            extra={"user_id": days[0].user_id, "count": len(days)},
        )

    async def get_days_in_range(
        self, user_id: str, start_date: date, end_date: date
    ) -> List[ScheduleDay]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                f"SELECT {_COLUMNS} FROM schedule_days "
                "WHERE user_id = $1 AND week_start BETWEEN $2 AND $3",
                user_id,
                start_date,
                end_date,
            )
        days = [_row_to_day(row) for row in rows]
        return sorted(days, key=lambda d: (d.week_start, d.weekday.day_index))
