"""
PostgreSQL implementation of StaffRepository.
"""

import logging
from typing import Any, List, Mapping, Optional

from asyncpg import Pool

from worktime.domain import StaffMember
from worktime.repositories import StaffRepository

logger = logging.getLogger(__name__)

_COLUMNS = "user_id, name, email, role, employment_type, weekly_quota"


def _row_to_member(row: Mapping[str, Any]) -> StaffMember:
    return StaffMember(**{key: row[key] for key in StaffMember.model_fields})


class PostgreSQLStaffRepository(StaffRepository):
    def __init__(self, pool: Pool):
        self.pool = pool
        logger.debug("Initialized PostgreSQLStaffRepository")

    async def get_staff_member(self, user_id: str) -> Optional[StaffMember]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {_COLUMNS} FROM staff_members WHERE user_id = $1",
                user_id,
            )
        return _row_to_member(row) if row else None

    async def list_staff(self) -> List[StaffMember]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                f"SELECT {_COLUMNS} FROM staff_members "
                "WHERE is_active ORDER BY name"
            )
        return [_row_to_member(row) for row in rows]
