"""
PostgreSQL implementation of HolidayRepository.
"""

import logging
import uuid
from datetime import date
from typing import Any, List, Mapping, Optional, Set

from asyncpg import Pool

from worktime.domain import PublicHoliday
from worktime.repositories import HolidayRepository

logger = logging.getLogger(__name__)


def _row_to_holiday(row: Mapping[str, Any]) -> PublicHoliday:
    return PublicHoliday(
        holiday_id=row["holiday_id"],
        date=row["holiday_date"],
        name=row["name"],
        region=row["region"],
    )


class PostgreSQLHolidayRepository(HolidayRepository):
    def __init__(self, pool: Pool):
        self.pool = pool
        logger.debug("Initialized PostgreSQLHolidayRepository")

    async def get_public_holidays(
        self, start_date: date, end_date: date
    ) -> Set[date]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT holiday_date FROM public_holidays "
                "WHERE holiday_date BETWEEN $1 AND $2",
                start_date,
                end_date,
            )
        return {row["holiday_date"] for row in rows}

    async def list_holidays(self, year: int) -> List[PublicHoliday]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT holiday_id, holiday_date, name, region "
                "FROM public_holidays "
                "WHERE holiday_date BETWEEN $1 AND $2 ORDER BY holiday_date",
                date(year, 1, 1),
                date(year, 12, 31),
            )
        return [_row_to_holiday(row) for row in rows]

    async def get_holiday(self, holiday_id: str) -> Optional[PublicHoliday]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT holiday_id, holiday_date, name, region "
                "FROM public_holidays WHERE holiday_id = $1",
                holiday_id,
            )
        return _row_to_holiday(row) if row else None

    async def save_holidays(self, holidays: List[PublicHoliday]) -> None:
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                await conn.executemany(
                    """
                    INSERT INTO public_holidays (
                        holiday_id, holiday_date, name, region
                    ) VALUES ($1, $2, $3, $4)
                    ON CONFLICT (holiday_id)
                    DO UPDATE SET
                        holiday_date = EXCLUDED.holiday_date,
                        name = EXCLUDED.name,
                        region = EXCLUDED.region
                    """,
                    [
                        (h.holiday_id, h.date, h.name, h.region)
                        for h in holidays
                    ],
                )
        logger.info(
            "Saved public holidays to PostgreSQL",
            extra={"count": len(holidays)},
        )

    async def delete_holiday(self, holiday_id: str) -> bool:
        async with self.pool.acquire() as conn:
            status = await conn.execute(
                "DELETE FROM public_holidays WHERE holiday_id = $1",
                holiday_id,
            )
        # asyncpg returns the command tag, e.g. "DELETE 1"
        return status.split()[-1] != "0"

    async def generate_holiday_id(self) -> str:
        return str(uuid.uuid4())
