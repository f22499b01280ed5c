"""
PostgreSQL implementation of CalendarEventRepository.
"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional

from asyncpg import Pool

from worktime.domain import CalendarEvent
from worktime.repositories import CalendarEventRepository

logger = logging.getLogger(__name__)


class PostgreSQLCalendarEventRepository(CalendarEventRepository):
    """
    Events are stored as JSON documents next to the columns needed for
    range queries.
    """

    def __init__(self, pool: Pool):
        self.pool = pool
        logger.debug("Initialized PostgreSQLCalendarEventRepository")

    async def get_event(self, event_id: str) -> Optional[CalendarEvent]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT event_data FROM calendar_events WHERE event_id = $1",
                event_id,
            )
        if row is None:
            return None
        return CalendarEvent.model_validate_json(row["event_data"])

    async def save_event(self, event: CalendarEvent) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute(
                """
                INSERT INTO calendar_events (
                    event_id, owner_id, start_time, end_time,
                    is_recurring, event_data
                ) VALUES ($1, $2, $3, $4, $5, $6::jsonb)
                ON CONFLICT (event_id)
                DO UPDATE SET
                    owner_id = EXCLUDED.owner_id,
                    start_time = EXCLUDED.start_time,
                    end_time = EXCLUDED.end_time,
                    is_recurring = EXCLUDED.is_recurring,
                    event_data = EXCLUDED.event_data
                """,
                event.event_id,
                event.owner_id,
                event.start_time,
                event.end_time,
                event.recurrence is not None,
                event.model_dump_json(),
            )
        logger.debug(
            "Saved calendar event to PostgreSQL",
            extra={"event_id": event.event_id},
        )

    async def delete_event(self, event_id: str) -> bool:
        async with self.pool.acquire() as conn:
            status = await conn.execute(
                "DELETE FROM calendar_events WHERE event_id = $1", event_id
            )
        return status.split()[-1] != "0"

    async def list_events(
        self, owner_id: str, start: datetime, end: datetime
    ) -> List[CalendarEvent]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT event_data
                FROM calendar_events
                WHERE owner_id = $1
                  AND start_time < $3
                  AND (end_time >= $2 OR is_recurring)
                ORDER BY start_time
                """,
                owner_id,
                start,
                end,
            )

        events = []
        for row in rows:
            try:
                events.append(
                    CalendarEvent.model_validate_json(row["event_data"])
                )
            except Exception as e:
                logger.warning(
                    f"Failed to parse event data: {e}",
                    extra={"owner_id": owner_id},
                )
        return events

    async def generate_event_id(self) -> str:
        return str(uuid.uuid4())
